"""Repository handle tying the storage layout to the version-control operations.

A Repository owns the paths of one workspace and its ``.coeus`` directory.
Every operation goes through an explicit handle, so several independent
repositories can be used side by side in one process.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from coeus.constants import COEUS_DIR, HEAD_FILE, INDEX_FILE, OBJECTS_DIR
from coeus.core.history import CommitReport, HistoryReader
from coeus.core.staging import StagingIndex
from coeus.errors import (
    InvalidMessageError,
    InvalidPathError,
    NotARepositoryError,
    NothingToCommitError,
    StorageReadError,
    StorageWriteError,
)
from coeus.models import Commit, FileEntry
from coeus.storage import CommitChain, ObjectStore

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class RepositoryStatus:
    """Snapshot of HEAD and the staging index."""

    head: Optional[str]
    staged: Tuple[FileEntry, ...]


class Repository:
    """A Coeus repository rooted at a workspace directory.

    Layout:
        <root>/.coeus/objects/<hash>   # blobs and commit records
        <root>/.coeus/HEAD             # hash of the newest commit, or empty
        <root>/.coeus/index            # JSON array of staged entries

    Attributes:
        workspace_root: Directory whose files are tracked
        coeus_dir: Path to the .coeus directory
        object_store: Content-addressable blob store
        staging: Staging index
        commit_chain: Commit records and HEAD
        history: Commit reconstruction for ``show``
    """

    def __init__(self, workspace_root: PathLike):
        """Open an existing repository.

        Raises:
            NotARepositoryError: If the .coeus layout is missing
        """
        self.workspace_root = Path(workspace_root).resolve()
        self.coeus_dir = self.workspace_root / COEUS_DIR

        if not (self.coeus_dir / OBJECTS_DIR).is_dir():
            raise NotARepositoryError(
                f"Not a Coeus repository (no {COEUS_DIR}/ found in {self.workspace_root})"
            )

        self.object_store = ObjectStore(self.coeus_dir)
        self.staging = StagingIndex(self.coeus_dir)
        self.commit_chain = CommitChain(self.coeus_dir, self.object_store)
        self.history = HistoryReader(self.object_store, self.commit_chain)

    @classmethod
    def init(cls, workspace_root: PathLike) -> Tuple["Repository", bool]:
        """Create the on-disk layout if needed and open the repository.

        Safe to run repeatedly: existing HEAD and index files are never
        overwritten.

        Returns:
            (repository, created) where created is False if the layout
            already existed

        Raises:
            StorageWriteError: If the layout cannot be created
        """
        root = Path(workspace_root).resolve()
        coeus_dir = root / COEUS_DIR
        created = not coeus_dir.exists()

        try:
            (coeus_dir / OBJECTS_DIR).mkdir(parents=True, exist_ok=True)
            cls._create_if_absent(coeus_dir / HEAD_FILE, "")
            cls._create_if_absent(coeus_dir / INDEX_FILE, "[]")
        except OSError as e:
            raise StorageWriteError(f"Failed to initialize repository in {root}: {e}") from e

        if created:
            logger.info("Initialized empty repository in %s", coeus_dir)
        else:
            logger.info("Repository already initialized in %s", coeus_dir)
        return cls(root), created

    @classmethod
    def discover(cls, start: PathLike) -> "Repository":
        """Open the repository containing start, searching parent directories.

        Raises:
            NotARepositoryError: If no ancestor holds a .coeus directory
        """
        start_path = Path(start).resolve()
        for candidate in [start_path, *start_path.parents]:
            if (candidate / COEUS_DIR).is_dir():
                return cls(candidate)
        raise NotARepositoryError(
            f"Not a Coeus repository (or any parent up to /): {start_path}"
        )

    @staticmethod
    def _create_if_absent(path: Path, content: str) -> None:
        try:
            with open(path, "x", encoding="utf-8") as f:
                f.write(content)
        except FileExistsError:
            pass

    def add(self, path: PathLike) -> FileEntry:
        """Store a file's current content and stage it.

        Args:
            path: File path, absolute or relative to the workspace root

        Returns:
            The staged FileEntry

        Raises:
            FileNotFoundError: If the file does not exist
            InvalidPathError: If the path is a directory, lies outside the
                workspace, points into .coeus or is not valid UTF-8
        """
        abs_path = self._resolve_path(path)
        if abs_path.is_dir():
            raise InvalidPathError(f"{path} is a directory; add files individually")

        try:
            content = abs_path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as e:
            raise StorageReadError(f"Failed to read {path}: {e}") from e

        entry = FileEntry(
            path=abs_path.relative_to(self.workspace_root).as_posix(),
            hash=self.object_store.put(content),
        )
        self.staging.append(entry)
        logger.info("Added %s (%s)", entry.path, entry.hash)
        return entry

    def commit(self, message: str, allow_empty: bool = False) -> Commit:
        """Record the staged files as a new commit and move HEAD to it.

        HEAD is rewritten only after the commit record is stored, and the
        index is cleared only after HEAD moves.

        Raises:
            InvalidMessageError: If message is not encodable as UTF-8
            NothingToCommitError: If nothing is staged and allow_empty is False
        """
        try:
            message.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidMessageError(f"Commit message is not valid UTF-8: {e}") from e

        staged = self.staging.load()
        if not staged and not allow_empty:
            raise NothingToCommitError("Nothing to commit (staging area is empty)")

        parent = self.commit_chain.get_head()
        commit = self.commit_chain.create_commit(message, staged, parent)
        self.commit_chain.set_head(commit.hash)
        self.staging.clear()
        return commit

    def head(self) -> Optional[str]:
        """Hash of the newest commit, or None before the first commit."""
        return self.commit_chain.get_head()

    def log(self, limit: Optional[int] = None) -> Iterator[Commit]:
        """Iterate over the history newest first, optionally capped at limit."""
        for count, commit in enumerate(self.commit_chain.walk(self.head())):
            if limit is not None and count >= limit:
                return
            yield commit

    def show(self, revision: str) -> CommitReport:
        """Per-file changes of a commit against its parent."""
        return self.history.show(revision)

    def status(self) -> RepositoryStatus:
        """Current HEAD and staged entries."""
        return RepositoryStatus(head=self.head(), staged=tuple(self.staging.load()))

    def _resolve_path(self, path: PathLike) -> Path:
        """Resolve path to an absolute path within the workspace."""
        path = Path(path)
        if path.is_absolute():
            abs_path = path.resolve()
        else:
            abs_path = (self.workspace_root / path).resolve()

        try:
            relative = abs_path.relative_to(self.workspace_root)
        except ValueError:
            raise InvalidPathError(
                f"Path {path} is outside workspace root {self.workspace_root}"
            )

        try:
            abs_path.relative_to(self.coeus_dir)
        except ValueError:
            pass
        else:
            raise InvalidPathError(f"Path {path} is inside the {COEUS_DIR} directory")

        # Undecodable file names come back with surrogate escapes
        try:
            relative.as_posix().encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidPathError(
                f"Path name is not valid UTF-8: {os.fsencode(relative)!r}"
            )
        return abs_path
