"""Structured error handling with error codes and recovery suggestions."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

# System
FFMPEG_NOT_FOUND = "FFMPEG_NOT_FOUND"
FFPROBE_NOT_FOUND = "FFPROBE_NOT_FOUND"
ENGINE_TIMEOUT = "ENGINE_TIMEOUT"
ENGINE_EXECUTION_FAILED = "ENGINE_EXECUTION_FAILED"

# Input
INPUT_NOT_FOUND = "INPUT_NOT_FOUND"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
INVALID_TIME_FORMAT = "INVALID_TIME_FORMAT"

# Silence removal
PROBE_FAILED = "PROBE_FAILED"
DETECTION_FAILED = "DETECTION_FAILED"
NO_CONTENT_REMAINING = "NO_CONTENT_REMAINING"

# Exit codes for CLI
EXIT_SUCCESS = 0
EXIT_VALIDATION = 1
EXIT_EXECUTION = 2
EXIT_SYSTEM = 3


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

@dataclass
class FfkitError(Exception):
    """Structured error with code, message, recovery hints, and context."""
    code: str
    message: str
    recovery: list[str] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    @property
    def diagnostics(self) -> str:
        """Engine stderr captured when the error was raised, if any."""
        return self.context.get("stderr", "")

    def to_dict(self) -> dict:
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "recovery": self.recovery,
            "context": self.context,
        }


class _CodedError(FfkitError):
    """FfkitError subclass whose code is fixed by the class."""
    fixed_code = ""

    def __init__(
        self,
        message: str,
        recovery: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code=self.fixed_code,
            message=message,
            recovery=recovery if recovery is not None else recovery_hints(self.fixed_code),
            context=context or {},
        )


class ProbeFailed(_CodedError):
    """ffprobe could not read the input's metadata."""
    fixed_code = PROBE_FAILED


class DetectionFailed(_CodedError):
    """Silence detection exited non-zero without reporting any silence."""
    fixed_code = DETECTION_FAILED


class NoContentRemaining(_CodedError):
    """Every part of the input was judged silent."""
    fixed_code = NO_CONTENT_REMAINING


class EngineExecutionFailed(_CodedError):
    """An ffmpeg run terminated with a failure status."""
    fixed_code = ENGINE_EXECUTION_FAILED


# ---------------------------------------------------------------------------
# Recovery hint factory
# ---------------------------------------------------------------------------

def _ffmpeg_install_hints() -> list[str]:
    """Return platform-specific FFmpeg install instructions."""
    hints = ["pip install 'ffkit[ffmpeg]'  # bundles ffmpeg+ffprobe automatically"]
    if sys.platform == "darwin":
        hints.append("brew install ffmpeg")
    elif sys.platform == "win32":
        hints.append("winget install ffmpeg  OR  choco install ffmpeg")
    else:
        hints.append("sudo apt install ffmpeg  (Debian/Ubuntu)")
    hints.extend([
        "Or download from https://ffmpeg.org/download.html",
        "Set FFKIT_FFMPEG=/path/to/ffmpeg to override discovery",
    ])
    return hints


_RECOVERY_MAP: dict[str, list[str]] = {
    INPUT_NOT_FOUND: [
        "Check the file path for typos",
        "Use an absolute path to avoid working-directory issues",
    ],
    INVALID_TIME_FORMAT: [
        "Use HH:MM:SS, HH:MM:SS.mmm, MM:SS, or plain seconds",
    ],
    PROBE_FAILED: [
        "Verify the input file exists and is a valid media file",
        "Run 'ffkit probe <file>' to inspect it",
    ],
    DETECTION_FAILED: [
        "Check that the input has an audio stream",
        "Check the noise threshold syntax (e.g. '-30dB' or '0.001')",
    ],
    NO_CONTENT_REMAINING: [
        "The whole input is below the noise threshold",
        "Lower the noise threshold (e.g. '-50dB') or raise the minimum silence duration",
    ],
}


def recovery_hints(code: str, context: dict[str, Any] | None = None) -> list[str]:
    """Return recovery suggestions for a given error code."""
    if code in (FFMPEG_NOT_FOUND, FFPROBE_NOT_FOUND):
        return _ffmpeg_install_hints()

    hints = list(_RECOVERY_MAP.get(code, []))
    context = context or {}

    if code == INPUT_NOT_FOUND and "path" in context:
        hints.insert(0, f"File not found: {context['path']}")

    return hints


def engine_recovery_hints(stderr: str) -> list[str]:
    """Generate context-aware recovery hints from ffmpeg stderr."""
    if "No such filter" in stderr:
        return [
            "A required ffmpeg filter is missing from your build",
            "Set FFKIT_FFMPEG to a ffmpeg binary with the needed filters",
        ]
    stderr_lower = stderr.lower()
    if "matches no streams" in stderr_lower or "cannot find a matching stream" in stderr_lower:
        return [
            "The input is missing a stream the command expects (silence removal needs video and audio)",
            "Run 'ffkit probe <file>' to inspect available streams",
        ]
    if "codec not found" in stderr_lower or "unknown encoder" in stderr_lower:
        return [
            "The required codec is not available in your ffmpeg build",
            "Set FFKIT_FFMPEG to a ffmpeg binary with the needed codec",
        ]
    if "no such file" in stderr_lower or "does not exist" in stderr_lower:
        return [
            "A referenced file could not be found",
            "Verify all input file paths are correct and accessible",
        ]
    if "permission denied" in stderr_lower:
        return [
            "Permission denied when accessing a file",
            "Check file permissions for input and output paths",
        ]
    return ["Check stderr for details", "Verify input file is a valid media file"]
