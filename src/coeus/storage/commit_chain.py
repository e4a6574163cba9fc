"""Commit object creation, lookup and history traversal.

Commits are serialized as canonical JSON and stored in the object store like
any other blob, so a commit's hash is the content hash of its record. Each
record names its parent, which makes the history a singly-linked list kept
entirely in the store and anchored by the mutable HEAD file.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Sequence, Set

from coeus.constants import HEAD_FILE
from coeus.errors import (
    ChainCorruptError,
    ObjectNotFoundError,
    StorageReadError,
)
from coeus.models import Commit, FileEntry
from coeus.storage.fileio import atomic_write_text
from coeus.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


def serialize_record(commit: Commit) -> bytes:
    """Canonical JSON of a commit record: sorted keys, no whitespace."""
    canonical_json = json.dumps(
        commit.to_record(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return canonical_json.encode("utf-8")


class CommitChain:
    """Builder and reader for the linear commit history.

    Attributes:
        coeus_dir: Path to .coeus directory
        head_path: Path to the HEAD file
        object_store: ObjectStore holding commit records and file blobs
    """

    def __init__(self, coeus_dir: Path, object_store: ObjectStore):
        self.coeus_dir = Path(coeus_dir)
        self.head_path = self.coeus_dir / HEAD_FILE
        self.object_store = object_store

    def create_commit(
        self,
        message: str,
        files: Sequence[FileEntry],
        parent: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> Commit:
        """Create and persist a new commit object.

        The record is written to the object store before anything else
        changes; HEAD is left for the caller to move.

        Args:
            message: Commit message, stored verbatim
            files: Staged entries, kept in order
            parent: Hash of the parent commit, or None for the root commit
            timestamp: ISO-8601 time; defaults to now in UTC

        Returns:
            The created Commit

        Raises:
            StorageWriteError: If the record cannot be written
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc).isoformat()

        draft = Commit(
            hash="",
            timestamp=timestamp,
            message=message,
            files=tuple(files),
            parent=parent,
        )
        payload = serialize_record(draft)

        commit_hash = self.object_store.put(payload)

        logger.info("Created commit %s (%d file(s))", commit_hash, len(draft.files))
        return Commit(
            hash=commit_hash,
            timestamp=draft.timestamp,
            message=draft.message,
            files=draft.files,
            parent=draft.parent,
        )

    def read_commit(self, commit_hash: str) -> Commit:
        """Load a commit object from the store.

        Raises:
            ObjectNotFoundError: If no blob is stored under commit_hash
            ChainCorruptError: If the blob is not a commit record
        """
        payload = self.object_store.get(commit_hash)
        try:
            record = json.loads(payload.decode("utf-8"))
            return Commit.from_record(commit_hash, record)
        except (UnicodeDecodeError, ValueError) as e:
            raise ChainCorruptError(f"Object {commit_hash} is not a commit: {e}") from e

    def get_head(self) -> Optional[str]:
        """Return the hash HEAD points to, or None before the first commit."""
        try:
            content = self.head_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageReadError(f"Failed to read HEAD: {e}") from e
        return content or None

    def set_head(self, commit_hash: str) -> None:
        """Point HEAD at commit_hash, overwriting the previous value."""
        atomic_write_text(self.head_path, commit_hash)
        logger.debug("HEAD -> %s", commit_hash)

    def walk(self, start: Optional[str]) -> Iterator[Commit]:
        """Yield commits newest first, following parent links from start.

        Each call re-reads the chain from the store. Traversal is iterative,
        so history length is not bounded by recursion depth.

        Args:
            start: Hash to begin at (usually HEAD); None yields nothing

        Raises:
            ChainCorruptError: If a link does not resolve to a commit, or the
                chain loops back on itself
        """
        seen: Set[str] = set()
        current = start
        while current:
            if current in seen:
                raise ChainCorruptError(f"Commit chain loops back to {current}")
            seen.add(current)

            try:
                commit = self.read_commit(current)
            except ObjectNotFoundError as e:
                raise ChainCorruptError(
                    f"Commit chain is broken: {current} does not resolve"
                ) from e

            yield commit
            current = commit.parent
