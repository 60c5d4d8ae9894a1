"""ffkit — ffmpeg-backed media editing with silence removal.

Public API:
    probe, detect_silence                                   — introspection
    cut_video, image_to_video, concat_videos, convert       — editing operations
    ffmpeg_raw                                              — raw passthrough
    remove_silence                                          — silence removal pipeline
    keep_segments, build_filter_program, parse_silence_log  — pipeline building blocks
    EngineConfig                                            — engine binaries and timeout
    FfkitError                                              — structured errors
"""

from ffkit.config import EngineConfig
from ffkit.errors import (
    FfkitError,
    ProbeFailed,
    DetectionFailed,
    NoContentRemaining,
    EngineExecutionFailed,
)
from ffkit.models import (
    ProbeResult,
    SilenceInterval,
    Segment,
    FilterProgram,
    SilenceRemovalResult,
    OperationResult,
    RawCommandResult,
)
from ffkit.probe import probe, DurationProbe
from ffkit.silence import detect_silence, parse_silence_log, SilenceDetector
from ffkit.segments import keep_segments, build_filter_program
from ffkit.operations import cut_video, image_to_video, concat_videos, convert, ffmpeg_raw
from ffkit.pipeline import remove_silence, Executor

__version__ = "0.1.0"

__all__ = [
    # Introspection
    "probe",
    "detect_silence",
    # Editing operations
    "cut_video",
    "image_to_video",
    "concat_videos",
    "convert",
    "ffmpeg_raw",
    # Silence removal
    "remove_silence",
    "parse_silence_log",
    "keep_segments",
    "build_filter_program",
    "SilenceDetector",
    "DurationProbe",
    "Executor",
    # Configuration
    "EngineConfig",
    # Types
    "ProbeResult",
    "SilenceInterval",
    "Segment",
    "FilterProgram",
    "SilenceRemovalResult",
    "OperationResult",
    "RawCommandResult",
    # Errors
    "FfkitError",
    "ProbeFailed",
    "DetectionFailed",
    "NoContentRemaining",
    "EngineExecutionFailed",
]
