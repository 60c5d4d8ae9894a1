"""Editing operations — cut, image-to-video, concat, convert, raw passthrough."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ffkit.config import EngineConfig
from ffkit.errors import (
    FfkitError,
    INVALID_ARGUMENT,
    INVALID_TIME_FORMAT,
    recovery_hints,
)
from ffkit.ffmpeg import run_ffmpeg
from ffkit.models import OperationResult, RawCommandResult, parse_time
from ffkit.probe import check_input, check_output


def _parse_time_arg(name: str, value: str) -> float:
    try:
        return parse_time(str(value))
    except ValueError as exc:
        raise FfkitError(
            code=INVALID_TIME_FORMAT,
            message=f"Invalid {name}: {value!r}",
            recovery=recovery_hints(INVALID_TIME_FORMAT),
            context={name: value},
        ) from exc


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise FfkitError(
            code=INVALID_ARGUMENT,
            message=f"{name} must be > 0 (got {value})",
            recovery=[f"Use a positive {name}"],
            context={name: value},
        )


# ---------------------------------------------------------------------------
# Cut
# ---------------------------------------------------------------------------

def cut_video(
    source: str,
    output: str,
    start: str,
    duration: str,
    codec: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> OperationResult:
    """Extract a segment of ``duration`` beginning at ``start``.

    Args:
        source: Path to the source video.
        output: Path for the output file.
        start: Start time (HH:MM:SS, MM:SS, or seconds).
        duration: Segment length (HH:MM:SS, MM:SS, or seconds).
        codec: None re-encodes with ffmpeg's defaults for the output
            container, 'copy' cuts losslessly, anything else sets -c:v.
        config: Engine configuration.

    Returns:
        OperationResult with the output path and segment duration.
    """
    start_sec = _parse_time_arg("start", start)
    duration_sec = _parse_time_arg("duration", duration)
    if start_sec < 0:
        raise FfkitError(
            code=INVALID_ARGUMENT,
            message=f"start must be >= 0 (got {start})",
            recovery=["Use a non-negative start time"],
            context={"start": start},
        )
    _require_positive("duration", duration_sec)
    check_input(source)
    check_output(output, source)

    args = ["-ss", str(start_sec), "-i", str(source), "-t", str(duration_sec)]
    if codec == "copy":
        args += ["-c", "copy"]
    elif codec:
        args += ["-c:v", codec]
    args.append(str(output))

    run_ffmpeg(args, config=config, output=output)
    return OperationResult(success=True, output_path=str(output), duration_seconds=duration_sec)


# ---------------------------------------------------------------------------
# Image to video
# ---------------------------------------------------------------------------

def image_to_video(
    image: str,
    output: str,
    duration: float,
    fps: float = 30,
    config: Optional[EngineConfig] = None,
) -> OperationResult:
    """Render a still image as an H.264 video of fixed length."""
    _require_positive("duration", duration)
    _require_positive("fps", fps)
    check_input(image)
    check_output(output, image)

    args = [
        "-loop", "1",
        "-framerate", str(fps),
        "-i", str(image),
        "-c:v", "libx264",
        "-t", str(duration),
        "-pix_fmt", "yuv420p",
        # yuv420p needs even dimensions
        "-vf", "scale=trunc(iw/2)*2:trunc(ih/2)*2",
        str(output),
    ]
    run_ffmpeg(args, config=config, output=output)
    return OperationResult(success=True, output_path=str(output), duration_seconds=float(duration))


# ---------------------------------------------------------------------------
# Concat
# ---------------------------------------------------------------------------

def concat_videos(
    sources: list[str],
    output: str,
    config: Optional[EngineConfig] = None,
) -> OperationResult:
    """Concatenate videos in order with the concat filter (re-encodes).

    Every input must carry one video and one audio stream.
    """
    if len(sources) < 2:
        raise FfkitError(
            code=INVALID_ARGUMENT,
            message=f"concat needs at least two inputs (got {len(sources)})",
            recovery=["Pass two or more video files"],
            context={"sources": list(sources)},
        )

    args: list[str] = []
    for src in sources:
        check_input(src)
        args += ["-i", str(src)]
    check_output(output, *sources)

    n = len(sources)
    filter_inputs = "".join(f"[{i}:v][{i}:a]" for i in range(n))
    args += [
        "-filter_complex", f"{filter_inputs}concat=n={n}:v=1:a=1[outv][outa]",
        "-map", "[outv]", "-map", "[outa]",
        str(output),
    ]
    run_ffmpeg(args, config=config, output=output)
    return OperationResult(success=True, output_path=str(output))


# ---------------------------------------------------------------------------
# Convert
# ---------------------------------------------------------------------------

def convert(
    source: str,
    output: str,
    audio_bitrate: Optional[str] = None,
    video_bitrate: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> OperationResult:
    """Convert between formats; the output extension picks the container.

    Works for audio-to-audio, video-to-video and video-to-audio.
    """
    check_input(source)
    check_output(output, source)
    if not Path(output).suffix:
        raise FfkitError(
            code=INVALID_ARGUMENT,
            message=f"Output path {output!r} has no extension to infer the format from",
            recovery=["Add an extension such as .mp4, .mkv, .mp3 or .wav"],
            context={"output": output},
        )

    args = ["-i", str(source)]
    if audio_bitrate:
        args += ["-b:a", audio_bitrate]
    if video_bitrate:
        args += ["-b:v", video_bitrate]
    args.append(str(output))

    run_ffmpeg(args, config=config, output=output)
    return OperationResult(success=True, output_path=str(output))


# ---------------------------------------------------------------------------
# Raw passthrough
# ---------------------------------------------------------------------------

def ffmpeg_raw(args: list[str], config: Optional[EngineConfig] = None) -> RawCommandResult:
    """Run ffmpeg with caller-supplied arguments.

    The arguments are passed through unchanged after the usual
    '-hide_banner -y' prefix. A non-zero exit raises EngineExecutionFailed
    with the full stderr.
    """
    if not args:
        raise FfkitError(
            code=INVALID_ARGUMENT,
            message="raw ffmpeg command needs at least one argument",
            recovery=["Pass arguments such as ['-i', 'in.mp4', '-vf', 'scale=1280:720', 'out.mp4']"],
        )
    result = run_ffmpeg([str(a) for a in args], config=config)
    return RawCommandResult(
        command=list(result.args),
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )
