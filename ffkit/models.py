"""Data models for ffkit — all JSON-serializable via to_dict."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, asdict
from typing import Optional


# ---------------------------------------------------------------------------
# Time parsing helper
# ---------------------------------------------------------------------------

_TIME_RE = re.compile(
    r"^(?:(\d+):)?(\d{1,2}):(\d{2})(?:\.(\d+))?$"
)


def parse_time(value: str) -> float:
    """Parse HH:MM:SS.ms, MM:SS or plain seconds into a float of seconds."""
    try:
        return float(value)
    except ValueError:
        pass
    m = _TIME_RE.match(value.strip())
    if not m:
        raise ValueError(f"Invalid time format: {value!r} — use HH:MM:SS, MM:SS, or seconds")
    hours = int(m.group(1) or 0)
    minutes = int(m.group(2))
    seconds = int(m.group(3))
    frac = float(f"0.{m.group(4)}") if m.group(4) else 0.0
    return hours * 3600 + minutes * 60 + seconds + frac


def format_time(seconds: float) -> str:
    """Format seconds as HH:MM:SS.mmm."""
    h = int(seconds // 3600)
    m = int((seconds % 3600) // 60)
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:06.3f}"


# ---------------------------------------------------------------------------
# Probe result
# ---------------------------------------------------------------------------

@dataclass
class StreamInfo:
    """Metadata for a single stream (audio or video)."""
    index: int
    codec_name: str
    codec_type: str  # "video" or "audio"
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        return {k: v for k, v in d.items() if v is not None}


@dataclass
class ProbeResult:
    """Probe output for a media file."""
    path: str
    duration: float
    format_name: str
    streams: list[StreamInfo] = field(default_factory=list)

    @property
    def has_video(self) -> bool:
        return any(s.codec_type == "video" for s in self.streams)

    @property
    def has_audio(self) -> bool:
        return any(s.codec_type == "audio" for s in self.streams)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "duration": self.duration,
            "duration_formatted": format_time(self.duration),
            "format_name": self.format_name,
            "has_video": self.has_video,
            "has_audio": self.has_audio,
            "streams": [s.to_dict() for s in self.streams],
        }


# ---------------------------------------------------------------------------
# Silence removal models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SilenceInterval:
    """A span the engine judged silent, in seconds."""
    start: float
    end: float

    def __post_init__(self) -> None:
        if self.start < 0 or self.end <= self.start:
            raise ValueError(
                f"Invalid silence interval: start={self.start}, end={self.end}"
            )

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end, "duration": self.duration}


@dataclass(frozen=True)
class Segment:
    """A non-silent span of the timeline to keep."""
    start: float
    end: float

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError(f"Empty segment: start={self.start}, end={self.end}")

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end, "duration": self.duration}


@dataclass(frozen=True)
class FilterProgram:
    """A filter graph plus the labels of the streams to map into the output."""
    statements: tuple[str, ...]
    output_labels: tuple[str, ...]

    @property
    def filter_complex(self) -> str:
        return ";".join(self.statements)

    def to_args(self) -> list[str]:
        """Render as ffmpeg arguments: -filter_complex plus one -map per label."""
        args = ["-filter_complex", self.filter_complex]
        for label in self.output_labels:
            args += ["-map", label]
        return args


@dataclass
class SilenceRemovalResult:
    """Outcome of a silence removal run."""
    output_path: str
    silence_intervals: list[SilenceInterval] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)
    mode: str = "copy"  # "copy" or "filter"

    def summary(self) -> str:
        """Human-readable list of the silent spans, e.g. '2.00s - 4.00s'."""
        if not self.silence_intervals:
            return "none"
        return ", ".join(
            f"{s.start:.2f}s - {s.end:.2f}s" for s in self.silence_intervals
        )

    def to_dict(self) -> dict:
        return {
            "success": True,
            "output_path": self.output_path,
            "mode": self.mode,
            "silence_count": len(self.silence_intervals),
            "silence_intervals": [s.to_dict() for s in self.silence_intervals],
            "segments": [s.to_dict() for s in self.segments],
            "report": (
                f"Silent segments found ({len(self.silence_intervals)}): {self.summary()}"
            ),
        }


# ---------------------------------------------------------------------------
# Operation results
# ---------------------------------------------------------------------------

@dataclass
class OperationResult:
    """Result of a single editing operation."""
    success: bool
    output_path: str
    duration_seconds: Optional[float] = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d: dict = {
            "success": self.success,
            "output_path": self.output_path,
        }
        if self.duration_seconds is not None:
            d["duration_seconds"] = self.duration_seconds
            d["duration_formatted"] = format_time(self.duration_seconds)
        if self.warnings:
            d["warnings"] = self.warnings
        return d


@dataclass
class RawCommandResult:
    """Result of a raw ffmpeg passthrough."""
    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    def to_dict(self) -> dict:
        return {
            "success": self.returncode == 0,
            "command": self.command,
            "returncode": self.returncode,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }
