"""Line diff algorithms for comparing blob versions."""

from coeus.diff.line_diff import (
    DiffEngine,
    Segment,
    SegmentKind,
    diff_lines,
    split_lines,
)

__all__ = [
    "DiffEngine",
    "Segment",
    "SegmentKind",
    "diff_lines",
    "split_lines",
]
