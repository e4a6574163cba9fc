"""Line-level diff engine.

Computes a minimal edit script between two texts with Myers' O(ND)
algorithm in its linear-space form: the middle snake of each changed region
splits it in two, and each half is diffed recursively. The script is
reported as coalesced segments of added, removed and unchanged lines.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple


class SegmentKind(str, Enum):
    """Classification of a run of lines."""

    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class Segment:
    """A contiguous run of lines with the same classification.

    Attributes:
        kind: Added, removed or unchanged
        text: The lines, joined, with their line terminators
    """

    kind: SegmentKind
    text: str

    @property
    def line_count(self) -> int:
        return len(split_lines(self.text))


def split_lines(text: str) -> List[str]:
    """Split text into lines, keeping each line's trailing newline.

    A final line without a newline is kept as is; empty text has no lines.
    """
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _middle_snake(old: Sequence[str], new: Sequence[str]) -> Optional[Tuple[int, int]]:
    """Find a point (x, y) on a shortest edit path through old -> new.

    Runs the forward and reverse searches in lockstep until they overlap.
    Only two diagonal vectors are kept, so memory is linear in the input.
    Returns None when the paths never meet, which means old and new share
    no line.
    """
    n, m = len(old), len(new)
    max_d = (n + m + 1) // 2
    offset = max_d
    size = 2 * max_d + 2
    # Furthest x reached on each diagonal k = x - y; the reverse vector
    # counts from the end of both sequences.
    forward = [-1] * size
    reverse = [-1] * size
    forward[offset + 1] = 0
    reverse[offset + 1] = 0
    delta = n - m
    odd = delta % 2 != 0
    # Diagonals that ran off the grid are skipped on later rounds
    k1_start = k1_end = k2_start = k2_end = 0

    for d in range(max_d):
        for k1 in range(-d + k1_start, d + 1 - k1_end, 2):
            i1 = offset + k1
            if k1 == -d or (k1 != d and forward[i1 - 1] < forward[i1 + 1]):
                x1 = forward[i1 + 1]
            else:
                x1 = forward[i1 - 1] + 1
            y1 = x1 - k1
            while x1 < n and y1 < m and old[x1] == new[y1]:
                x1 += 1
                y1 += 1
            forward[i1] = x1
            if x1 > n:
                k1_end += 2
            elif y1 > m:
                k1_start += 2
            elif odd:
                i2 = offset + delta - k1
                if 0 <= i2 < size and reverse[i2] != -1 and x1 >= n - reverse[i2]:
                    return x1, y1

        for k2 in range(-d + k2_start, d + 1 - k2_end, 2):
            i2 = offset + k2
            if k2 == -d or (k2 != d and reverse[i2 - 1] < reverse[i2 + 1]):
                x2 = reverse[i2 + 1]
            else:
                x2 = reverse[i2 - 1] + 1
            y2 = x2 - k2
            while x2 < n and y2 < m and old[n - x2 - 1] == new[m - y2 - 1]:
                x2 += 1
                y2 += 1
            reverse[i2] = x2
            if x2 > n:
                k2_end += 2
            elif y2 > m:
                k2_start += 2
            elif not odd:
                i1 = offset + delta - k2
                if 0 <= i1 < size and forward[i1] != -1:
                    x1 = forward[i1]
                    y1 = x1 - (i1 - offset)
                    if x1 >= n - x2:
                        return x1, y1
    return None


def _edit_script(old: Sequence[str], new: Sequence[str]) -> List[SegmentKind]:
    """Per-line edit script for old -> new."""
    prefix = 0
    limit = min(len(old), len(new))
    while prefix < limit and old[prefix] == new[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and old[len(old) - 1 - suffix] == new[len(new) - 1 - suffix]
    ):
        suffix += 1

    old_mid = old[prefix:len(old) - suffix]
    new_mid = new[prefix:len(new) - suffix]

    script = [SegmentKind.UNCHANGED] * prefix
    if not old_mid or not new_mid or set(old_mid).isdisjoint(new_mid):
        script.extend([SegmentKind.REMOVED] * len(old_mid))
        script.extend([SegmentKind.ADDED] * len(new_mid))
    else:
        split = _middle_snake(old_mid, new_mid)
        if split is None:
            script.extend([SegmentKind.REMOVED] * len(old_mid))
            script.extend([SegmentKind.ADDED] * len(new_mid))
        else:
            x, y = split
            script.extend(_edit_script(old_mid[:x], new_mid[:y]))
            script.extend(_edit_script(old_mid[x:], new_mid[y:]))
    script.extend([SegmentKind.UNCHANGED] * suffix)
    return script


def _push(segments: List[Segment], kind: SegmentKind, lines: List[str]) -> None:
    """Append lines as a segment, merging with a preceding one of the same kind."""
    if not lines:
        return
    text = "".join(lines)
    if segments and segments[-1].kind is kind:
        segments[-1] = Segment(kind, segments[-1].text + text)
    else:
        segments.append(Segment(kind, text))


def diff_lines(old_text: str, new_text: str) -> List[Segment]:
    """Compute a coalesced line diff between two texts.

    Args:
        old_text: Previous version
        new_text: Current version

    Returns:
        Segments in document order. Consecutive lines of the same kind are
        merged into one segment; within a change, removals come first.

    Example:
        >>> diff_lines("hello\\n", "hello\\nworld\\n")
        [Segment(kind=<SegmentKind.UNCHANGED: 'unchanged'>, text='hello\\n'),
         Segment(kind=<SegmentKind.ADDED: 'added'>, text='world\\n')]
    """
    old = split_lines(old_text)
    new = split_lines(new_text)

    segments: List[Segment] = []
    unchanged: List[str] = []
    removed: List[str] = []
    added: List[str] = []
    old_pos = new_pos = 0
    for kind in _edit_script(old, new):
        if kind is SegmentKind.ADDED:
            added.append(new[new_pos])
            new_pos += 1
        elif kind is SegmentKind.REMOVED:
            removed.append(old[old_pos])
            old_pos += 1
        else:
            if removed or added:
                _push(segments, SegmentKind.UNCHANGED, unchanged)
                _push(segments, SegmentKind.REMOVED, removed)
                _push(segments, SegmentKind.ADDED, added)
                unchanged, removed, added = [], [], []
            unchanged.append(new[new_pos])
            old_pos += 1
            new_pos += 1

    _push(segments, SegmentKind.UNCHANGED, unchanged)
    _push(segments, SegmentKind.REMOVED, removed)
    _push(segments, SegmentKind.ADDED, added)
    return segments


class DiffEngine:
    """Text diff front end used by history reconstruction and the CLI."""

    def diff(self, old_text: str, new_text: str) -> List[Segment]:
        """Compute the segment diff between two versions."""
        return diff_lines(old_text, new_text)

    def summarize(self, segments: Sequence[Segment]) -> Dict[str, int]:
        """Count added, removed and unchanged lines in a diff.

        Args:
            segments: Output of diff()

        Returns:
            Dictionary with "added", "removed" and "unchanged" line counts
        """
        summary = {kind.value: 0 for kind in SegmentKind}
        for segment in segments:
            summary[segment.kind.value] += segment.line_count
        return summary
