"""Command-line interface — every command outputs JSON to stdout."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from ffkit.config import (
    DEFAULT_MIN_SILENCE_DURATION,
    DEFAULT_NOISE_THRESHOLD,
    EngineConfig,
    default_config,
)
from ffkit.errors import (
    FfkitError,
    EXIT_SUCCESS,
    EXIT_VALIDATION,
    EXIT_EXECUTION,
    EXIT_SYSTEM,
    FFMPEG_NOT_FOUND,
    FFPROBE_NOT_FOUND,
    INPUT_NOT_FOUND,
    INVALID_ARGUMENT,
    INVALID_TIME_FORMAT,
)
from ffkit.log import setup_logging

_VALIDATION_CODES = {INPUT_NOT_FOUND, INVALID_ARGUMENT, INVALID_TIME_FORMAT}
_SYSTEM_CODES = {FFMPEG_NOT_FOUND, FFPROBE_NOT_FOUND}


def _json_out(data: dict, exit_code: int = EXIT_SUCCESS) -> int:
    """Print JSON to stdout and return exit code."""
    print(json.dumps(data, indent=2))
    return exit_code


def _json_error(exc: FfkitError) -> int:
    """Print an FfkitError as JSON and return the matching exit code."""
    if exc.code in _VALIDATION_CODES:
        exit_code = EXIT_VALIDATION
    elif exc.code in _SYSTEM_CODES or exc.context.get("cause") in _SYSTEM_CODES:
        exit_code = EXIT_SYSTEM
    else:
        exit_code = EXIT_EXECUTION
    return _json_out(exc.to_dict(), exit_code)


def _engine_config(args) -> EngineConfig:
    """Build the engine config from --ffmpeg/--ffprobe/--timeout."""
    if args.ffmpeg and args.ffprobe:
        return EngineConfig(ffmpeg=args.ffmpeg, ffprobe=args.ffprobe, timeout=args.timeout)
    return default_config().with_overrides(
        ffmpeg=args.ffmpeg, ffprobe=args.ffprobe, timeout=args.timeout,
    )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------

def cmd_capabilities(_args) -> int:
    """Output machine-readable schema of all operations."""
    caps = {
        "version": "1.0",
        "operations": {
            "cut": {
                "description": "Extract a segment from a video file",
                "fields": {"file": "str", "output": "str", "start": "time", "duration": "time"},
            },
            "image-to-video": {
                "description": "Convert a static image to a video with fixed duration",
                "fields": {"image": "str", "output": "str", "duration": "float (>0)",
                           "fps": "float (>0, default 30)"},
            },
            "concat": {
                "description": "Concatenate multiple videos into one",
                "fields": {"files": "list[str] (>=2)", "output": "str"},
            },
            "convert": {
                "description": "Convert media between formats; the output extension picks the format",
                "fields": {"file": "str", "output": "str", "audio_bitrate": "str | None (e.g. '192k')",
                           "video_bitrate": "str | None (e.g. '2M')"},
            },
            "remove-silence": {
                "description": "Detect and remove silent segments, keeping only non-silent parts",
                "fields": {
                    "file": "str",
                    "output": "str",
                    "noise": f"str (default {DEFAULT_NOISE_THRESHOLD!r})",
                    "min_duration": f"float (>0, default {DEFAULT_MIN_SILENCE_DURATION})",
                },
            },
            "raw": {
                "description": "Run ffmpeg with custom arguments (filters, effects, watermarks...)",
                "fields": {"args": "list[str] — everything after '--'"},
            },
        },
        "probe_commands": ["probe", "silence"],
        "time_formats": ["HH:MM:SS", "HH:MM:SS.mmm", "MM:SS", "seconds"],
        "exit_codes": {"0": "success", "1": "validation_error", "2": "execution_error", "3": "system_error"},
    }
    return _json_out(caps)


def cmd_probe(args) -> int:
    """Probe a media file for metadata."""
    from ffkit.probe import probe
    try:
        result = probe(args.file, config=_engine_config(args))
        return _json_out(result.to_dict())
    except FfkitError as exc:
        return _json_error(exc)


def cmd_silence(args) -> int:
    """Detect silence intervals."""
    from ffkit.silence import detect_silence
    try:
        intervals = detect_silence(
            args.file,
            noise_threshold=args.noise,
            min_duration=args.min_duration,
            config=_engine_config(args),
        )
        return _json_out({
            "path": args.file,
            "silences": [interval.to_dict() for interval in intervals],
            "count": len(intervals),
            "noise": args.noise,
            "min_duration": args.min_duration,
        })
    except FfkitError as exc:
        return _json_error(exc)


def cmd_cut(args) -> int:
    """Cut a segment out of a video."""
    from ffkit.operations import cut_video
    try:
        result = cut_video(
            args.file, args.output, args.start, args.duration,
            codec=args.codec,
            config=_engine_config(args),
        )
        return _json_out(result.to_dict())
    except FfkitError as exc:
        return _json_error(exc)


def cmd_image_to_video(args) -> int:
    """Turn a still image into a video."""
    from ffkit.operations import image_to_video
    try:
        result = image_to_video(
            args.image, args.output, args.duration,
            fps=args.fps,
            config=_engine_config(args),
        )
        return _json_out(result.to_dict())
    except FfkitError as exc:
        return _json_error(exc)


def cmd_concat(args) -> int:
    """Concatenate video files."""
    from ffkit.operations import concat_videos
    try:
        result = concat_videos(args.files, args.output, config=_engine_config(args))
        return _json_out(result.to_dict())
    except FfkitError as exc:
        return _json_error(exc)


def cmd_convert(args) -> int:
    """Convert between media formats."""
    from ffkit.operations import convert
    try:
        result = convert(
            args.file, args.output,
            audio_bitrate=args.audio_bitrate,
            video_bitrate=args.video_bitrate,
            config=_engine_config(args),
        )
        return _json_out(result.to_dict())
    except FfkitError as exc:
        return _json_error(exc)


def cmd_raw(args) -> int:
    """Run ffmpeg with passthrough arguments."""
    from ffkit.operations import ffmpeg_raw
    ffmpeg_args = list(args.ffmpeg_args)
    if ffmpeg_args and ffmpeg_args[0] == "--":
        ffmpeg_args = ffmpeg_args[1:]
    try:
        result = ffmpeg_raw(ffmpeg_args, config=_engine_config(args))
        return _json_out(result.to_dict())
    except FfkitError as exc:
        return _json_error(exc)


def cmd_remove_silence(args) -> int:
    """Remove silent spans from a video."""
    from ffkit.pipeline import remove_silence
    try:
        result = remove_silence(
            args.file, args.output,
            noise_threshold=args.noise,
            min_silence_duration=args.min_duration,
            config=_engine_config(args),
        )
        return _json_out(result.to_dict())
    except FfkitError as exc:
        return _json_error(exc)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="ffkit",
        description="ffmpeg-backed media editing — all output is JSON",
    )
    parser.add_argument("--ffmpeg", help="Path to the ffmpeg binary (skips discovery)")
    parser.add_argument("--ffprobe", help="Path to the ffprobe binary (skips discovery)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Kill any single engine run after this many seconds (default: no limit)")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log to stderr (-v info, -vv debug)")
    parser.add_argument("--log-json", action="store_true", default=False,
                        help="Emit stderr log records as JSON lines")
    sub = parser.add_subparsers(dest="command")

    # capabilities
    sub.add_parser("capabilities", help="List all operations and their schemas")

    # probe
    p = sub.add_parser("probe", help="Probe a media file for metadata")
    p.add_argument("file", help="Path to the media file")

    # silence
    p = sub.add_parser("silence", help="Detect silence intervals")
    p.add_argument("file", help="Path to the source media")
    p.add_argument("--noise", default=DEFAULT_NOISE_THRESHOLD,
                   help=f"Noise threshold (default: {DEFAULT_NOISE_THRESHOLD})")
    p.add_argument("--min-duration", type=float, default=DEFAULT_MIN_SILENCE_DURATION,
                   help=f"Minimum silence duration in seconds (default: {DEFAULT_MIN_SILENCE_DURATION})")

    # cut
    p = sub.add_parser("cut", help="Extract a segment from a video")
    p.add_argument("file", help="Path to the source video")
    p.add_argument("--start", required=True, help="Start time (e.g. '00:01:30' or '90')")
    p.add_argument("--duration", required=True, help="Duration (e.g. '00:00:30' or '30')")
    p.add_argument("-o", "--output", required=True, help="Output file path")
    p.add_argument("--codec", default=None, help="'copy' for lossless, or a video codec name")

    # image-to-video
    p = sub.add_parser("image-to-video", help="Convert a still image to a video")
    p.add_argument("image", help="Path to the input image")
    p.add_argument("-o", "--output", required=True, help="Output file path")
    p.add_argument("--duration", type=float, required=True, help="Duration in seconds")
    p.add_argument("--fps", type=float, default=30, help="Frames per second (default: 30)")

    # concat
    p = sub.add_parser("concat", help="Concatenate video files")
    p.add_argument("files", nargs="+", help="Video files to concatenate (at least two)")
    p.add_argument("-o", "--output", required=True, help="Output file path")

    # convert
    p = sub.add_parser("convert", help="Convert media between formats")
    p.add_argument("file", help="Path to the source media")
    p.add_argument("-o", "--output", required=True, help="Output path (extension picks the format)")
    p.add_argument("--audio-bitrate", help="Audio bitrate (e.g. '192k')")
    p.add_argument("--video-bitrate", help="Video bitrate (e.g. '2M')")

    # remove-silence
    p = sub.add_parser("remove-silence", help="Remove silent segments from a video")
    p.add_argument("file", help="Path to the source video")
    p.add_argument("-o", "--output", required=True, help="Output file path")
    p.add_argument("--noise", default=DEFAULT_NOISE_THRESHOLD,
                   help=f"Noise threshold (default: {DEFAULT_NOISE_THRESHOLD})")
    p.add_argument("--min-duration", type=float, default=DEFAULT_MIN_SILENCE_DURATION,
                   help=f"Minimum silence duration in seconds (default: {DEFAULT_MIN_SILENCE_DURATION})")

    # raw
    p = sub.add_parser("raw", help="Run ffmpeg with custom arguments (pass them after '--')")
    p.add_argument("ffmpeg_args", nargs=argparse.REMAINDER, help="Arguments for ffmpeg")

    return parser


_HANDLERS = {
    "capabilities": cmd_capabilities,
    "probe": cmd_probe,
    "silence": cmd_silence,
    "cut": cmd_cut,
    "image-to-video": cmd_image_to_video,
    "concat": cmd_concat,
    "convert": cmd_convert,
    "remove-silence": cmd_remove_silence,
    "raw": cmd_raw,
}


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_VALIDATION)

    level = None
    if args.verbose == 1:
        level = "INFO"
    elif args.verbose > 1:
        level = "DEBUG"
    setup_logging(level, json_lines=args.log_json)

    try:
        exit_code = _HANDLERS[args.command](args)
    except FfkitError as exc:
        exit_code = _json_out(exc.to_dict(), EXIT_SYSTEM)
    except Exception as exc:
        exit_code = _json_out({
            "error": True,
            "code": "UNEXPECTED_ERROR",
            "message": str(exc),
            "recovery": ["This is an unexpected error — please report it"],
        }, EXIT_SYSTEM)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
