"""Keep-segment computation and filter graph construction."""

from __future__ import annotations

from typing import Sequence

from ffkit.models import FilterProgram, Segment, SilenceInterval


def keep_segments(
    intervals: Sequence[SilenceInterval],
    total_duration: float,
) -> list[Segment]:
    """Return the non-silent spans of ``[0, total_duration]``.

    ``intervals`` must be chronological. Each interval's start closes the
    current kept span (when it lies past the cursor) and its end moves the
    cursor; overlapping intervals never move the cursor backwards. At most
    ``len(intervals) + 1`` segments are returned, none of them empty.
    """
    segments: list[Segment] = []
    cursor = 0.0

    for interval in intervals:
        gap_end = min(interval.start, total_duration)
        if gap_end > cursor:
            segments.append(Segment(start=cursor, end=gap_end))
        cursor = max(cursor, interval.end)

    if cursor < total_duration:
        segments.append(Segment(start=cursor, end=total_duration))

    return segments


def build_filter_program(segments: Sequence[Segment]) -> FilterProgram:
    """Translate segments into a trim + concat filter graph.

    Segment ``i`` becomes a video branch ``[v<i>]`` and an audio branch
    ``[a<i>]``, each trimmed to the segment and rebased to start at zero.
    The branches are concatenated pairwise in segment order into
    ``[outv]`` / ``[outa]``.
    Times are written in fixed-point with microsecond precision, the
    resolution silencedetect reports at.
    """
    if not segments:
        raise ValueError("cannot build a filter program from zero segments")

    statements: list[str] = []
    for i, seg in enumerate(segments):
        statements.append(
            f"[0:v]trim=start={seg.start:.6f}:end={seg.end:.6f},setpts=PTS-STARTPTS[v{i}]"
        )
        statements.append(
            f"[0:a]atrim=start={seg.start:.6f}:end={seg.end:.6f},asetpts=PTS-STARTPTS[a{i}]"
        )

    n = len(segments)
    pairs = "".join(f"[v{i}][a{i}]" for i in range(n))
    statements.append(f"{pairs}concat=n={n}:v=1:a=1[outv][outa]")

    return FilterProgram(statements=tuple(statements), output_labels=("[outv]", "[outa]"))
