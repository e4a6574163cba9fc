"""Tests for the line diff engine."""

import pytest

from coeus.diff import DiffEngine, Segment, SegmentKind, diff_lines, split_lines

ADDED = SegmentKind.ADDED
REMOVED = SegmentKind.REMOVED
UNCHANGED = SegmentKind.UNCHANGED


def _apply(segments):
    """Rebuild (old, new) texts from a diff."""
    old = "".join(s.text for s in segments if s.kind is not ADDED)
    new = "".join(s.text for s in segments if s.kind is not REMOVED)
    return old, new


class TestSplitLines:
    """Test line splitting."""

    def test_keeps_terminators(self) -> None:
        assert split_lines("a\nb\n") == ["a\n", "b\n"]

    def test_last_line_without_newline(self) -> None:
        assert split_lines("a\nb") == ["a\n", "b"]

    def test_empty(self) -> None:
        assert split_lines("") == []

    def test_blank_lines(self) -> None:
        assert split_lines("\n\n") == ["\n", "\n"]


class TestDiffLines:
    """Test diff_lines."""

    def test_appended_line(self) -> None:
        """Test the basic append scenario."""
        assert diff_lines("hello\n", "hello\nworld\n") == [
            Segment(UNCHANGED, "hello\n"),
            Segment(ADDED, "world\n"),
        ]

    @pytest.mark.parametrize("text", ["x", "a\nb\nc\n", "\n", "no newline\nat end"])
    def test_identical_inputs(self, text: str) -> None:
        """Test that identical texts give one unchanged segment."""
        assert diff_lines(text, text) == [Segment(UNCHANGED, text)]

    def test_empty_old(self) -> None:
        """Test that everything is added against an empty old text."""
        assert diff_lines("", "a\nb\n") == [Segment(ADDED, "a\nb\n")]

    def test_empty_new(self) -> None:
        """Test that everything is removed against an empty new text."""
        assert diff_lines("a\nb\n", "") == [Segment(REMOVED, "a\nb\n")]

    def test_both_empty(self) -> None:
        assert diff_lines("", "") == []

    def test_replacement_removes_before_adding(self) -> None:
        """Test ordering within a changed block."""
        assert diff_lines("a\nold\nz\n", "a\nnew\nz\n") == [
            Segment(UNCHANGED, "a\n"),
            Segment(REMOVED, "old\n"),
            Segment(ADDED, "new\n"),
            Segment(UNCHANGED, "z\n"),
        ]

    def test_runs_are_coalesced(self) -> None:
        """Test that consecutive lines of one kind form one segment."""
        segments = diff_lines("keep\n", "keep\nx\ny\nz\n")
        assert segments == [Segment(UNCHANGED, "keep\n"), Segment(ADDED, "x\ny\nz\n")]

    def test_no_adjacent_segments_share_kind(self) -> None:
        """Test coalescing across an interleaved edit."""
        old = "a\nb\nc\nd\ne\nf\n"
        new = "a\nc\nx\nd\nf\ng\n"
        segments = diff_lines(old, new)

        kinds = [s.kind for s in segments]
        assert all(k1 is not k2 for k1, k2 in zip(kinds, kinds[1:]))

    def test_minimal_edit_script(self) -> None:
        """Test that the unchanged lines form a longest common subsequence."""
        old = "a\nb\nc\nd\ne\nf\n"
        new = "a\nc\nx\nd\nf\ng\n"
        segments = diff_lines(old, new)

        unchanged = "".join(s.text for s in segments if s.kind is UNCHANGED)
        assert unchanged == "a\nc\nd\nf\n"

    def test_segments_rebuild_both_texts(self) -> None:
        """Test that the edit script reproduces old and new."""
        old = "header\nalpha\nbeta\ngamma\nfooter"
        new = "header\nbeta\ndelta\ngamma\nfooter\n"
        assert _apply(diff_lines(old, new)) == (old, new)

    def test_missing_final_newline_counts_as_change(self) -> None:
        """Test that a newline at end of file is a line difference."""
        assert diff_lines("a", "a\n") == [Segment(REMOVED, "a"), Segment(ADDED, "a\n")]

    def test_deterministic(self) -> None:
        """Test that repeated runs agree."""
        old, new = "1\n2\n3\n4\n", "4\n3\n2\n1\n"
        assert diff_lines(old, new) == diff_lines(old, new)

    def test_repeated_lines_minimal(self) -> None:
        """Test a minimal script when lines repeat and alignments compete."""
        old = "a\nb\nc\na\nb\nb\na\n"
        new = "c\nb\na\nb\na\nc\n"
        segments = diff_lines(old, new)

        summary = DiffEngine().summarize(segments)
        assert summary["unchanged"] == 4
        assert summary["added"] + summary["removed"] == 5
        assert _apply(segments) == (old, new)
        kinds = [s.kind for s in segments]
        assert all(k1 is not k2 for k1, k2 in zip(kinds, kinds[1:]))
        assert not any(
            k1 is ADDED and k2 is REMOVED for k1, k2 in zip(kinds, kinds[1:])
        )


class TestLargeInputs:
    """Test diffs of large files."""

    def test_scattered_edits_in_large_file(self) -> None:
        """Test a long file with a few edits spread through it."""
        old_lines = [f"line {i}\n" for i in range(20000)]
        new_lines = list(old_lines)
        for i in range(500, 20000, 2000):
            new_lines[i] = f"changed {i}\n"
        new_lines.insert(12345, "inserted\n")
        old, new = "".join(old_lines), "".join(new_lines)

        segments = diff_lines(old, new)

        assert DiffEngine().summarize(segments) == {
            "added": 11,
            "removed": 10,
            "unchanged": 19990,
        }
        assert _apply(segments) == (old, new)

    def test_complete_rewrite_of_large_file(self) -> None:
        """Test that disjoint texts become one removal and one addition."""
        old = "".join(f"old {i}\n" for i in range(5000))
        new = "".join(f"new {i}\n" for i in range(5000))

        assert diff_lines(old, new) == [Segment(REMOVED, old), Segment(ADDED, new)]

    def test_rewrite_sharing_one_line(self) -> None:
        """Test a near-total rewrite that keeps a single common line."""
        old = "".join(f"old {i}\n" for i in range(300)) + "shared\n" + "tail a\n"
        new = "head b\n" + "shared\n" + "".join(f"new {i}\n" for i in range(300))

        segments = diff_lines(old, new)

        assert [s.kind for s in segments] == [REMOVED, ADDED, UNCHANGED, REMOVED, ADDED]
        assert segments[2].text == "shared\n"
        assert _apply(segments) == (old, new)


class TestDiffEngine:
    """Test the DiffEngine front end."""

    def test_diff_delegates(self) -> None:
        engine = DiffEngine()
        assert engine.diff("a\n", "a\nb\n") == diff_lines("a\n", "a\nb\n")

    def test_summarize(self) -> None:
        """Test line counts per kind."""
        engine = DiffEngine()
        segments = engine.diff("a\nb\nc\n", "a\nx\ny\nc\n")

        assert engine.summarize(segments) == {"added": 2, "removed": 1, "unchanged": 2}

    def test_summarize_empty(self) -> None:
        assert DiffEngine().summarize([]) == {"added": 0, "removed": 0, "unchanged": 0}

    def test_segment_line_count(self) -> None:
        assert Segment(ADDED, "x\ny\n").line_count == 2
        assert Segment(ADDED, "x\ny").line_count == 2
