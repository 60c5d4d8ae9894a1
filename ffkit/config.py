"""Engine configuration and ffmpeg/ffprobe binary discovery."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from ffkit.errors import (
    FfkitError,
    FFMPEG_NOT_FOUND,
    FFPROBE_NOT_FOUND,
    recovery_hints,
)

logger = logging.getLogger(__name__)

DEFAULT_NOISE_THRESHOLD = "-30dB"
DEFAULT_MIN_SILENCE_DURATION = 2.0

ENV_FFMPEG = "FFKIT_FFMPEG"
ENV_FFPROBE = "FFKIT_FFPROBE"
ENV_FFMPEG_DIR = "FFKIT_FFMPEG_DIR"


# ---------------------------------------------------------------------------
# Binary detection helpers
# ---------------------------------------------------------------------------

def _try_env_exact(env_var: str) -> str | None:
    """Check an env var pointing to an exact binary path."""
    value = os.environ.get(env_var)
    if value and Path(value).is_file():
        return value
    return None


def _try_env_dir(binary_name: str) -> str | None:
    """Check FFKIT_FFMPEG_DIR for a binary by name."""
    dir_path = os.environ.get(ENV_FFMPEG_DIR)
    if not dir_path:
        return None
    for name in (binary_name, f"{binary_name}.exe"):
        candidate = Path(dir_path) / name
        if candidate.is_file():
            return str(candidate)
    return None


def _try_static_ffmpeg() -> tuple[str | None, str | None]:
    """Try to get paths from the static-ffmpeg package (bundles both)."""
    try:
        from static_ffmpeg.run import get_or_fetch_platform_executables_else_raise
        ffmpeg_path, ffprobe_path = get_or_fetch_platform_executables_else_raise()
        return (ffmpeg_path, ffprobe_path)
    except Exception:
        return (None, None)


def _try_imageio_ffmpeg() -> str | None:
    """Try to get ffmpeg path from imageio-ffmpeg (ffmpeg only, no ffprobe)."""
    try:
        import imageio_ffmpeg
        return imageio_ffmpeg.get_ffmpeg_exe()
    except Exception:
        return None


def discover_ffmpeg() -> str:
    """Walk the fallback chain to find ffmpeg, or return ''."""
    path = _try_env_exact(ENV_FFMPEG) or _try_env_dir("ffmpeg") or shutil.which("ffmpeg")
    if path:
        return path

    ffmpeg_path, _ = _try_static_ffmpeg()
    if ffmpeg_path:
        return ffmpeg_path

    return _try_imageio_ffmpeg() or ""


def discover_ffprobe() -> str:
    """Walk the fallback chain to find ffprobe, or return ''."""
    path = _try_env_exact(ENV_FFPROBE) or _try_env_dir("ffprobe") or shutil.which("ffprobe")
    if path:
        return path

    _, ffprobe_path = _try_static_ffmpeg()
    return ffprobe_path or ""


# ---------------------------------------------------------------------------
# Engine configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineConfig:
    """Where the engine binaries live and how long a single run may take.

    ``timeout`` is ``None`` by default: engine runs are allowed to take as
    long as they need. Callers wanting bounded latency pass a number of
    seconds; the child process is killed when it elapses.
    """
    ffmpeg: str
    ffprobe: str
    timeout: Optional[float] = None

    @classmethod
    def discover(cls, timeout: Optional[float] = None) -> EngineConfig:
        """Resolve both binaries through the discovery chain."""
        ffmpeg = discover_ffmpeg()
        if not ffmpeg:
            raise FfkitError(
                code=FFMPEG_NOT_FOUND,
                message="ffmpeg binary not found",
                recovery=recovery_hints(FFMPEG_NOT_FOUND),
            )
        ffprobe = discover_ffprobe()
        if not ffprobe:
            raise FfkitError(
                code=FFPROBE_NOT_FOUND,
                message="ffprobe binary not found",
                recovery=recovery_hints(FFPROBE_NOT_FOUND),
            )
        logger.debug("Discovered engine: ffmpeg=%s ffprobe=%s", ffmpeg, ffprobe)
        return cls(ffmpeg=ffmpeg, ffprobe=ffprobe, timeout=timeout)

    def with_overrides(
        self,
        ffmpeg: Optional[str] = None,
        ffprobe: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> EngineConfig:
        """Return a copy with any non-None field replaced."""
        changes = {
            k: v for k, v in (("ffmpeg", ffmpeg), ("ffprobe", ffprobe), ("timeout", timeout))
            if v is not None
        }
        return replace(self, **changes)


# Discovery runs once per process
_cached_config: EngineConfig | None = None


def default_config() -> EngineConfig:
    """Return the discovered engine configuration, cached per process."""
    global _cached_config
    if _cached_config is None:
        _cached_config = EngineConfig.discover()
    return _cached_config


def reset_cache() -> None:
    """Clear the cached configuration. Useful for testing."""
    global _cached_config
    _cached_config = None
