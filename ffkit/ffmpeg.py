"""Low-level FFmpeg and FFprobe subprocess runners."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Optional

from ffkit.config import EngineConfig, default_config
from ffkit.errors import (
    EngineExecutionFailed,
    FfkitError,
    ENGINE_TIMEOUT,
    FFMPEG_NOT_FOUND,
    FFPROBE_NOT_FOUND,
    ProbeFailed,
    engine_recovery_hints,
    recovery_hints,
)

logger = logging.getLogger(__name__)


def _is_file_output(output: str | Path | None) -> bool:
    return output is not None and str(output) != "-"


def _remove_partial_output(output: str | Path | None, existed_before: bool) -> None:
    """Delete an output file left behind by a failed run.

    Only files created by the run are removed; one that existed before it
    started is left in place.
    """
    if existed_before or not _is_file_output(output):
        return
    path = Path(output)
    if path.is_file():
        logger.debug("Removing partial output %s", path)
        path.unlink(missing_ok=True)


def _run(
    cmd: list[str],
    timeout: Optional[float],
    not_found_code: str,
) -> subprocess.CompletedProcess:
    logger.debug("Running: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except OSError as exc:
        raise FfkitError(
            code=not_found_code,
            message=f"Could not execute {cmd[0]}: {exc.strerror or exc}",
            recovery=recovery_hints(not_found_code),
            context={"command": cmd},
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise FfkitError(
            code=ENGINE_TIMEOUT,
            message=f"{Path(cmd[0]).name} timed out after {timeout}s",
            recovery=[f"Increase timeout (current: {timeout}s)", "Check if input file is corrupt"],
            context={"command": cmd, "timeout": timeout},
        ) from exc
    logger.debug("%s exited with code %d", Path(cmd[0]).name, result.returncode)
    return result


def run_ffmpeg(
    args: list[str],
    config: Optional[EngineConfig] = None,
    check: bool = True,
    output: str | Path | None = None,
) -> subprocess.CompletedProcess:
    """Run ffmpeg with the given arguments.

    Args:
        args: Arguments to pass after 'ffmpeg' (do NOT include 'ffmpeg' itself).
        config: Engine configuration; the discovered default when omitted.
        check: If True, raise EngineExecutionFailed on non-zero exit.
        output: Output file written by this run. If the run fails or times
            out and the file did not exist beforehand, it is deleted.

    Returns:
        The CompletedProcess result.
    """
    config = config or default_config()
    cmd = [config.ffmpeg, "-hide_banner", "-y"] + args
    existed_before = _is_file_output(output) and Path(output).exists()

    try:
        result = _run(cmd, config.timeout, FFMPEG_NOT_FOUND)
    except FfkitError:
        _remove_partial_output(output, existed_before)
        raise

    if check and result.returncode != 0:
        _remove_partial_output(output, existed_before)
        stderr = result.stderr or ""
        raise EngineExecutionFailed(
            message=f"ffmpeg exited with code {result.returncode}",
            recovery=engine_recovery_hints(stderr),
            context={
                "command": cmd,
                "returncode": result.returncode,
                "stderr": stderr,
            },
        )

    return result


def run_ffprobe(
    args: list[str],
    config: Optional[EngineConfig] = None,
) -> subprocess.CompletedProcess:
    """Run ffprobe with the given arguments.

    Args:
        args: Arguments to pass after 'ffprobe' (do NOT include 'ffprobe' itself).
        config: Engine configuration; the discovered default when omitted.

    Returns:
        The CompletedProcess result.
    """
    config = config or default_config()
    cmd = [config.ffprobe, "-hide_banner"] + args
    result = _run(cmd, config.timeout, FFPROBE_NOT_FOUND)

    if result.returncode != 0:
        raise ProbeFailed(
            message=f"ffprobe exited with code {result.returncode}",
            context={
                "command": cmd,
                "returncode": result.returncode,
                "stderr": result.stderr or "",
            },
        )

    return result


def run_ffprobe_json(args: list[str], config: Optional[EngineConfig] = None) -> dict:
    """Run ffprobe with JSON output and return the parsed document."""
    result = run_ffprobe(["-of", "json"] + args, config=config)
    try:
        data = json.loads(result.stdout or "{}")
    except json.JSONDecodeError as exc:
        raise ProbeFailed(
            message=f"ffprobe returned unparseable output: {exc}",
            context={"stdout": result.stdout, "stderr": result.stderr or ""},
        ) from exc
    if not isinstance(data, dict):
        raise ProbeFailed(
            message="ffprobe returned a non-object JSON document",
            context={"stdout": result.stdout},
        )
    return data
