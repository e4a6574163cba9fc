"""Integration tests for coeus add command."""

import json
import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from coeus.cli.main import app
from coeus.constants import COEUS_DIR

runner = CliRunner()


@pytest.fixture
def initialized(in_workspace: Path) -> Path:
    """Workspace with an initialized repository as the current directory."""
    result = runner.invoke(app, ["init", "--quiet"])
    assert result.exit_code == 0
    return in_workspace


def _index(workspace: Path) -> list:
    return json.loads((workspace / COEUS_DIR / "index").read_text())


class TestAddCommand:
    """Test coeus add command."""

    def test_add_single_file(self, initialized: Path) -> None:
        """Test staging one file."""
        (initialized / "a.txt").write_text("hello\n")

        result = runner.invoke(app, ["add", "a.txt"])

        assert result.exit_code == 0
        assert "a.txt" in result.stdout
        assert _index(initialized) == [
            {"path": "a.txt", "hash": "f572d396fae9206628714fb2ce00f72e94f2258f"}
        ]

    def test_add_multiple_files(self, initialized: Path) -> None:
        """Test staging several files in one call keeps their order."""
        (initialized / "b.txt").write_text("b")
        (initialized / "a.txt").write_text("a")

        result = runner.invoke(app, ["add", "b.txt", "a.txt"])

        assert result.exit_code == 0
        assert [e["path"] for e in _index(initialized)] == ["b.txt", "a.txt"]

    def test_add_missing_file(self, initialized: Path) -> None:
        """Test that a missing file is reported and nothing is staged."""
        result = runner.invoke(app, ["add", "missing.txt"])

        assert result.exit_code == 1
        assert "missing.txt: file not found" in result.stdout
        assert _index(initialized) == []

    def test_add_mixed_existing_and_missing(self, initialized: Path) -> None:
        """Test that good files are still staged when another path fails."""
        (initialized / "good.txt").write_text("ok")

        result = runner.invoke(app, ["add", "good.txt", "nope.txt"])

        assert result.exit_code == 1
        assert [e["path"] for e in _index(initialized)] == ["good.txt"]

    def test_add_same_path_twice_replaces(self, initialized: Path) -> None:
        """Test that restaging keeps one entry with the latest content."""
        target = initialized / "a.txt"
        target.write_text("v1\n")
        runner.invoke(app, ["add", "a.txt"])
        target.write_text("v2\n")

        result = runner.invoke(app, ["add", "a.txt"])

        assert result.exit_code == 0
        index = _index(initialized)
        assert len(index) == 1
        blob = initialized / COEUS_DIR / "objects" / index[0]["hash"]
        assert blob.read_text() == "v2\n"

    def test_add_from_subdirectory(self, initialized: Path) -> None:
        """Test that paths are relative to the current directory."""
        import os

        sub = initialized / "sub"
        sub.mkdir()
        (sub / "inner.txt").write_text("inner")
        os.chdir(sub)

        result = runner.invoke(app, ["add", "inner.txt"])

        assert result.exit_code == 0
        assert [e["path"] for e in _index(initialized)] == ["sub/inner.txt"]

    def test_add_corrupt_index(self, initialized: Path) -> None:
        """Test that a corrupt index is a system error."""
        (initialized / COEUS_DIR / "index").write_text("{{")
        (initialized / "a.txt").write_text("a")

        result = runner.invoke(app, ["add", "a.txt"])

        assert result.exit_code == 2
        assert "Corrupted index" in result.stdout

    def test_add_undecodable_file_name(self, initialized: Path) -> None:
        """Test that a non-UTF-8 file name is reported, not crashed on."""
        name = os.fsdecode(b"caf\xe9.txt")
        if "\udce9" not in name:
            pytest.skip("file system encoding decodes the name")
        try:
            (initialized / name).write_bytes(b"data\n")
        except OSError:
            pytest.skip("file system rejects non-UTF-8 names")

        result = runner.invoke(app, ["add", name])

        assert result.exit_code == 1
        assert "UTF-8" in result.stdout
        assert _index(initialized) == []
        leftovers = [p for p in (initialized / COEUS_DIR).iterdir() if p.name.startswith(".tmp_")]
        assert leftovers == []
