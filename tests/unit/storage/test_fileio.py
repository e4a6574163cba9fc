"""Unit tests for atomic file replacement."""

from pathlib import Path

import pytest

from coeus.errors import StorageWriteError
from coeus.storage.fileio import atomic_write_text


def _temp_files(directory: Path) -> list:
    return [p.name for p in directory.iterdir() if p.name.startswith(".tmp_")]


class TestAtomicWriteText:
    """Test atomic_write_text."""

    def test_replaces_content(self, tmp_path: Path) -> None:
        target = tmp_path / "HEAD"
        target.write_text("old")

        atomic_write_text(target, "new")

        assert target.read_text() == "new"
        assert _temp_files(tmp_path) == []

    def test_writes_utf8(self, tmp_path: Path) -> None:
        target = tmp_path / "index"

        atomic_write_text(target, '["café"]')

        assert target.read_bytes() == '["café"]'.encode("utf-8")

    def test_unencodable_text_leaves_target_alone(self, tmp_path: Path) -> None:
        """Test that surrogate-escaped text fails before a temp file exists."""
        target = tmp_path / "index"
        target.write_text("[]")

        with pytest.raises(UnicodeEncodeError):
            atomic_write_text(target, '["caf\udce9"]')

        assert target.read_text() == "[]"
        assert _temp_files(tmp_path) == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Test that an unwritable location is a storage error."""
        with pytest.raises(StorageWriteError):
            atomic_write_text(tmp_path / "absent" / "HEAD", "x")

    def test_failed_rename_cleans_up(self, tmp_path: Path, monkeypatch) -> None:
        """Test that the temp file is removed when the rename fails."""
        target = tmp_path / "HEAD"
        target.write_text("old")

        def fail_replace(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr("coeus.storage.fileio.os.replace", fail_replace)

        with pytest.raises(StorageWriteError, match="rename failed"):
            atomic_write_text(target, "new")

        assert target.read_text() == "old"
        assert _temp_files(tmp_path) == []
