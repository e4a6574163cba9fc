"""Staging area management for Coeus.

The staging area (index) tracks which file versions go into the next commit.
It is persisted as a JSON array of ``{"path": ..., "hash": ...}`` objects and
rewritten as a whole on every change.
"""

import json
import logging
from pathlib import Path
from typing import List

from coeus.constants import INDEX_FILE
from coeus.errors import IndexCorruptError, StorageReadError
from coeus.models import FileEntry
from coeus.storage.fileio import atomic_write_text

logger = logging.getLogger(__name__)


class StagingIndex:
    """Ordered, persisted list of staged file entries.

    Index format (JSON):
    [
        {"path": "relative/path/to/file", "hash": "sha1..."},
        ...
    ]

    A path appears at most once: staging a path again replaces its entry in
    place, so the latest content wins and the first-staged order is kept.
    Every update rewrites the whole file, so two processes updating the
    index at once can lose an entry.

    Attributes:
        coeus_dir: Path to .coeus directory
        index_path: Path to the index file (.coeus/index)
    """

    def __init__(self, coeus_dir: Path):
        self.coeus_dir = Path(coeus_dir)
        self.index_path = self.coeus_dir / INDEX_FILE

    def load(self) -> List[FileEntry]:
        """Load the staged entries from disk.

        Raises:
            IndexCorruptError: If the index is not a JSON array of entries
        """
        try:
            raw = self.index_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageReadError(f"Failed to read index: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise IndexCorruptError(f"Corrupted index file: {e}") from e

        if not isinstance(data, list):
            raise IndexCorruptError(
                f"Corrupted index file: expected a JSON array, got {type(data).__name__}"
            )

        try:
            return [FileEntry.from_dict(item) for item in data]
        except ValueError as e:
            raise IndexCorruptError(f"Corrupted index file: {e}") from e

    def append(self, entry: FileEntry) -> bool:
        """Stage an entry, replacing any entry already staged for its path.

        Returns:
            True if an existing entry for the path was replaced
        """
        entries = self.load()

        replaced = False
        for i, existing in enumerate(entries):
            if existing.path == entry.path:
                entries[i] = entry
                replaced = True
                break
        if not replaced:
            entries.append(entry)

        self._save(entries)
        logger.debug(
            "%s %s -> %s in index",
            "Updated" if replaced else "Staged",
            entry.path,
            entry.hash,
        )
        return replaced

    def clear(self) -> None:
        """Clear all staged entries."""
        self._save([])
        logger.debug("Cleared index")

    def _save(self, entries: List[FileEntry]) -> None:
        """Save index to disk."""
        payload = json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False)
        atomic_write_text(self.index_path, payload)
