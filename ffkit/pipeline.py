"""Silence removal: detect, probe, reconstruct, build, execute."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from ffkit.config import (
    DEFAULT_MIN_SILENCE_DURATION,
    DEFAULT_NOISE_THRESHOLD,
    EngineConfig,
    default_config,
)
from ffkit.errors import FfkitError, NoContentRemaining
from ffkit.ffmpeg import run_ffmpeg
from ffkit.models import FilterProgram, SilenceRemovalResult
from ffkit.probe import DurationProbe, check_input, check_output
from ffkit.segments import build_filter_program, keep_segments
from ffkit.silence import SilenceDetector, validate_silence_params

logger = logging.getLogger(__name__)


class Executor:
    """Submits the final ffmpeg run for a silence removal."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or default_config()

    def stream_copy(self, source: str | Path, output: str | Path) -> str:
        """Re-mux ``source`` into ``output`` without re-encoding."""
        run_ffmpeg(
            ["-i", str(source), "-c", "copy", str(output)],
            config=self.config,
            output=output,
        )
        return str(output)

    def run_program(
        self,
        source: str | Path,
        program: FilterProgram,
        output: str | Path,
    ) -> str:
        """Apply ``program`` to ``source`` and write ``output``."""
        run_ffmpeg(
            ["-i", str(source)] + program.to_args() + [str(output)],
            config=self.config,
            output=output,
        )
        return str(output)


def _tag_stage(exc: FfkitError, stage: str) -> FfkitError:
    exc.context.setdefault("stage", stage)
    if not exc.message.lower().startswith(stage):
        exc.message = f"{stage} stage failed: {exc.message}"
    return exc


def remove_silence(
    source: str | Path,
    output: str | Path,
    noise_threshold: str = DEFAULT_NOISE_THRESHOLD,
    min_silence_duration: float = DEFAULT_MIN_SILENCE_DURATION,
    config: Optional[EngineConfig] = None,
) -> SilenceRemovalResult:
    """Cut every silent span out of a video.

    Detection and duration probing run concurrently; both must finish
    before the kept segments are computed. With no silence the input is
    stream-copied. Otherwise the kept segments are trimmed and concatenated
    in one re-encoding pass.

    Args:
        source: Input video with an audio stream.
        output: Output path.
        noise_threshold: silencedetect noise level, e.g. '-30dB'.
        min_silence_duration: Shortest span (seconds) that counts as silence.
        config: Engine configuration; the discovered default when omitted.

    Returns:
        SilenceRemovalResult with the output path and detected intervals.

    Raises:
        ProbeFailed, DetectionFailed, NoContentRemaining,
        EngineExecutionFailed: tagged with the failing stage.
    """
    validate_silence_params(noise_threshold, min_silence_duration)
    src = check_input(source)
    check_output(output, src)
    config = config or default_config()

    detector = SilenceDetector(config)
    prober = DurationProbe(config)
    executor = Executor(config)

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="ffkit-silence") as pool:
        detect_future = pool.submit(
            detector.detect, src, noise_threshold, min_silence_duration
        )
        probe_future = pool.submit(prober.duration, src)

        try:
            intervals = detect_future.result()
        except FfkitError as exc:
            raise _tag_stage(exc, "detect")
        try:
            total_duration = probe_future.result()
        except FfkitError as exc:
            raise _tag_stage(exc, "probe")

    if not intervals:
        logger.info("No silence found in %s; stream-copying to %s", src, output)
        try:
            executor.stream_copy(src, output)
        except FfkitError as exc:
            raise _tag_stage(exc, "execute")
        return SilenceRemovalResult(output_path=str(output), mode="copy")

    segments = keep_segments(intervals, total_duration)
    if not segments:
        raise NoContentRemaining(
            message=(
                f"reconstruct stage failed: all {total_duration:.3f}s of {src} is silent "
                f"at {noise_threshold}"
            ),
            context={
                "stage": "reconstruct",
                "path": str(src),
                "duration": total_duration,
                "silence_intervals": [s.to_dict() for s in intervals],
            },
        )

    logger.info(
        "Keeping %d segment(s) of %s after removing %d silence interval(s)",
        len(segments), src, len(intervals),
    )
    program = build_filter_program(segments)
    try:
        executor.run_program(src, program, output)
    except FfkitError as exc:
        raise _tag_stage(exc, "execute")

    return SilenceRemovalResult(
        output_path=str(output),
        silence_intervals=list(intervals),
        segments=segments,
        mode="filter",
    )
