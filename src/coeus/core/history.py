"""History reconstruction for a single commit.

For every file recorded in a commit, compares its content with the version of
the same path in the parent commit. Files with no parent version are
reported with a marker instead of a diff against an empty string, so a new
file is never confused with a committed empty file.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from coeus.diff import DiffEngine, Segment
from coeus.errors import ChainCorruptError, CommitNotFoundError, ObjectNotFoundError
from coeus.models import Commit, FileEntry
from coeus.storage import CommitChain, ObjectStore

logger = logging.getLogger(__name__)


class ChangeStatus(str, Enum):
    """How a file in a commit relates to its parent commit."""

    FIRST_COMMIT = "first_commit"
    NEW_FILE = "new_file"
    MODIFIED = "modified"


@dataclass(frozen=True)
class FileChange:
    """One file of a commit, with its diff against the parent version.

    Attributes:
        entry: The file entry recorded in the commit
        status: First commit, new file, or compared with the parent
        content: Current content, decoded as UTF-8
        segments: Diff against the parent version (MODIFIED only)
    """

    entry: FileEntry
    status: ChangeStatus
    content: str
    segments: Tuple[Segment, ...] = field(default_factory=tuple)

    @property
    def path(self) -> str:
        return self.entry.path


@dataclass(frozen=True)
class CommitReport:
    """Everything ``show`` reports for a commit."""

    commit: Commit
    changes: Tuple[FileChange, ...]


def decode_text(content: bytes) -> str:
    """Decode blob bytes for display and diffing."""
    return content.decode("utf-8", errors="replace")


class HistoryReader:
    """Rebuilds per-file changes of a commit from the object store.

    Attributes:
        object_store: Store holding file blobs and commit records
        commit_chain: Reader for commit records
        diff_engine: Line diff used for files present in the parent
    """

    def __init__(
        self,
        object_store: ObjectStore,
        commit_chain: CommitChain,
        diff_engine: Optional[DiffEngine] = None,
    ):
        self.object_store = object_store
        self.commit_chain = commit_chain
        self.diff_engine = diff_engine or DiffEngine()

    def resolve_commit(self, revision: str) -> Commit:
        """Load the commit named by a full or abbreviated hash.

        Raises:
            CommitNotFoundError: If revision names no commit object
        """
        try:
            commit_hash = self.object_store.resolve_prefix(revision)
            return self.commit_chain.read_commit(commit_hash)
        except (ObjectNotFoundError, ChainCorruptError) as e:
            raise CommitNotFoundError(f"Commit not found: {revision} ({e})") from e

    def show(self, revision: str) -> CommitReport:
        """Reconstruct the changes introduced by a commit.

        The commit is resolved before any file is examined, so an unknown
        revision produces no partial report.

        Args:
            revision: Full or abbreviated commit hash

        Returns:
            CommitReport with one FileChange per entry, in commit order

        Raises:
            CommitNotFoundError: If revision names no commit
            ChainCorruptError: If the commit's parent does not resolve
            ObjectNotFoundError: If a file blob is missing from the store
        """
        commit = self.resolve_commit(revision)

        parent: Optional[Commit] = None
        if commit.parent:
            try:
                parent = self.commit_chain.read_commit(commit.parent)
            except ObjectNotFoundError as e:
                raise ChainCorruptError(
                    f"Parent {commit.parent} of commit {commit.hash} does not resolve"
                ) from e

        changes: List[FileChange] = [
            self._file_change(entry, parent) for entry in commit.files
        ]
        logger.debug("Reconstructed %d file(s) of commit %s", len(changes), commit.hash)
        return CommitReport(commit=commit, changes=tuple(changes))

    def _file_change(self, entry: FileEntry, parent: Optional[Commit]) -> FileChange:
        content = decode_text(self.object_store.get(entry.hash))

        if parent is None:
            return FileChange(entry=entry, status=ChangeStatus.FIRST_COMMIT, content=content)

        parent_entry = parent.find_file(entry.path)
        if parent_entry is None:
            return FileChange(entry=entry, status=ChangeStatus.NEW_FILE, content=content)

        parent_content = decode_text(self.object_store.get(parent_entry.hash))
        segments = self.diff_engine.diff(parent_content, content)
        return FileChange(
            entry=entry,
            status=ChangeStatus.MODIFIED,
            content=content,
            segments=tuple(segments),
        )
