"""Silence detection through ffmpeg's silencedetect filter."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from ffkit.config import (
    DEFAULT_MIN_SILENCE_DURATION,
    DEFAULT_NOISE_THRESHOLD,
    EngineConfig,
    default_config,
)
from ffkit.errors import DetectionFailed, FfkitError, INVALID_ARGUMENT
from ffkit.ffmpeg import run_ffmpeg
from ffkit.models import SilenceInterval
from ffkit.probe import check_input

logger = logging.getLogger(__name__)

_NUMBER = r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?"
_SILENCE_END_RE = re.compile(
    rf"silence_end:\s*(?P<end>{_NUMBER})\s*\|\s*silence_duration:\s*(?P<duration>{_NUMBER})"
)
# Characters that would break out of the silencedetect option list
_FILTER_SEPARATORS = set(":,;[]=")


def parse_silence_log(lines: str | Iterable[str]) -> list[SilenceInterval]:
    """Parse silencedetect diagnostics into silence intervals.

    Only ``silence_end`` lines are read: each carries both the end time and
    the span's duration, so ``start = end - duration``. Lines that do not
    match, or whose numbers do not form a valid interval, are skipped.

    A ``silence_start`` with no matching end (the input finishes while still
    silent) therefore produces no interval.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    intervals: list[SilenceInterval] = []
    for line in lines:
        match = _SILENCE_END_RE.search(line)
        if not match:
            continue
        try:
            end = float(match.group("end"))
            duration = float(match.group("duration"))
            # silencedetect prints microsecond precision
            start = round(max(0.0, end - duration), 6)
            intervals.append(SilenceInterval(start=start, end=end))
        except ValueError:
            logger.debug("Skipping malformed silence line: %r", line)
            continue
    return intervals


def validate_silence_params(noise_threshold: str, min_duration: float) -> None:
    """Reject parameters that cannot form a silencedetect expression."""
    if not isinstance(noise_threshold, str) or not noise_threshold.strip():
        raise FfkitError(
            code=INVALID_ARGUMENT,
            message="noise threshold must be a non-empty string such as '-30dB'",
            recovery=["Use a decibel value like '-30dB' or an amplitude ratio like '0.001'"],
            context={"noise_threshold": noise_threshold},
        )
    if _FILTER_SEPARATORS.intersection(noise_threshold):
        raise FfkitError(
            code=INVALID_ARGUMENT,
            message=f"noise threshold {noise_threshold!r} contains filter graph separators",
            recovery=["Use a decibel value like '-30dB' or an amplitude ratio like '0.001'"],
            context={"noise_threshold": noise_threshold},
        )
    if not isinstance(min_duration, (int, float)) or min_duration <= 0:
        raise FfkitError(
            code=INVALID_ARGUMENT,
            message=f"minimum silence duration must be > 0 (got {min_duration!r})",
            recovery=["Use a positive number of seconds, e.g. 2"],
            context={"min_duration": min_duration},
        )


class SilenceDetector:
    """Runs silencedetect against a file and returns the silent spans."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or default_config()

    def build_args(
        self,
        path: str | Path,
        noise_threshold: str = DEFAULT_NOISE_THRESHOLD,
        min_duration: float = DEFAULT_MIN_SILENCE_DURATION,
    ) -> list[str]:
        return [
            "-i", str(path),
            "-af", f"silencedetect=n={noise_threshold}:d={min_duration}",
            "-f", "null",
            "-",
        ]

    def detect(
        self,
        path: str | Path,
        noise_threshold: str = DEFAULT_NOISE_THRESHOLD,
        min_duration: float = DEFAULT_MIN_SILENCE_DURATION,
    ) -> list[SilenceInterval]:
        """Detect silence intervals, in chronological order.

        The exit code of a null-sink run is not reliable on every build, so
        the run counts as successful when it exits 0 or reports at least one
        silence end. Otherwise DetectionFailed carries the captured stderr.
        """
        validate_silence_params(noise_threshold, min_duration)
        p = check_input(path)

        result = run_ffmpeg(
            self.build_args(p, noise_threshold, min_duration),
            config=self.config,
            check=False,
        )
        stderr = result.stderr or ""
        intervals = parse_silence_log(stderr)

        if result.returncode != 0 and not intervals:
            raise DetectionFailed(
                message=(
                    f"Silence detection failed: ffmpeg exited with code "
                    f"{result.returncode} and reported no silence"
                ),
                context={
                    "path": str(p),
                    "returncode": result.returncode,
                    "stderr": stderr,
                },
            )
        if result.returncode != 0:
            logger.warning(
                "silencedetect exited with code %d but reported %d interval(s); using them",
                result.returncode, len(intervals),
            )

        logger.info("Detected %d silence interval(s) in %s", len(intervals), p)
        return intervals


def detect_silence(
    path: str | Path,
    noise_threshold: str = DEFAULT_NOISE_THRESHOLD,
    min_duration: float = DEFAULT_MIN_SILENCE_DURATION,
    config: Optional[EngineConfig] = None,
) -> list[SilenceInterval]:
    """Convenience wrapper around SilenceDetector.detect."""
    return SilenceDetector(config).detect(path, noise_threshold, min_duration)
