"""Media probing: stream metadata and total duration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ffkit.config import EngineConfig, default_config
from ffkit.errors import (
    FFPROBE_NOT_FOUND,
    FfkitError,
    INPUT_NOT_FOUND,
    INVALID_ARGUMENT,
    ProbeFailed,
    recovery_hints,
)
from ffkit.ffmpeg import run_ffprobe_json
from ffkit.models import ProbeResult, StreamInfo


def check_input(path: str | Path) -> Path:
    """Validate that the input file exists."""
    p = Path(path)
    if not p.exists():
        raise FfkitError(
            code=INPUT_NOT_FOUND,
            message=f"Input file not found: {p}",
            recovery=recovery_hints(INPUT_NOT_FOUND, {"path": str(p)}),
            context={"path": str(p)},
        )
    return p


def check_output(output: str | Path, *sources: str | Path) -> None:
    """Reject an output path that names one of the inputs."""
    target = Path(output).resolve()
    for source in sources:
        if Path(source).resolve() == target:
            raise FfkitError(
                code=INVALID_ARGUMENT,
                message=f"Output path is the same as input: {output}",
                recovery=["Write to a different output path"],
                context={"output": str(output), "source": str(source)},
            )


def _as_duration(value) -> float:
    """ffprobe reports duration as a string; 'N/A' or absent reads as 0."""
    try:
        duration = float(value)
    except (TypeError, ValueError):
        return 0.0
    return duration if duration > 0 else 0.0


def _parse_stream(raw: dict) -> StreamInfo:
    codec_type = raw.get("codec_type", "unknown")
    info = StreamInfo(
        index=raw.get("index", 0),
        codec_name=raw.get("codec_name", "unknown"),
        codec_type=codec_type,
    )
    if codec_type == "video":
        info.width = int(raw["width"]) if "width" in raw else None
        info.height = int(raw["height"]) if "height" in raw else None
    return info


def probe(path: str | Path, config: Optional[EngineConfig] = None) -> ProbeResult:
    """Probe a media file and return structured metadata.

    Args:
        path: Path to the media file.
        config: Engine configuration; the discovered default when omitted.

    Returns:
        ProbeResult with duration, container format and streams.
    """
    p = check_input(path)
    data = run_ffprobe_json(
        ["-v", "error", "-show_format", "-show_streams", str(p)],
        config=config,
    )
    fmt = data.get("format", {})
    return ProbeResult(
        path=str(p),
        duration=_as_duration(fmt.get("duration")),
        format_name=fmt.get("format_name", "unknown"),
        streams=[_parse_stream(s) for s in data.get("streams", [])],
    )


class DurationProbe:
    """Reads the total playable duration of a media file via ffprobe."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or default_config()

    def duration(self, path: str | Path) -> float:
        """Return ``format.duration`` in seconds.

        An absent duration is reported as 0.0 rather than an error so the
        segment computation downstream stays total. ffprobe failures,
        unreadable output and an ffprobe that cannot be launched all raise
        ProbeFailed; the last keeps FFPROBE_NOT_FOUND as ``context["cause"]``.
        """
        p = check_input(path)
        try:
            data = run_ffprobe_json(
                ["-v", "error", "-show_entries", "format=duration", str(p)],
                config=self.config,
            )
        except FfkitError as exc:
            if exc.code != FFPROBE_NOT_FOUND:
                raise
            raise ProbeFailed(
                message=f"duration query could not run: {exc.message}",
                recovery=exc.recovery,
                context=dict(exc.context, cause=exc.code, path=str(p)),
            ) from exc
        return _as_duration(data.get("format", {}).get("duration"))
