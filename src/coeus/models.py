"""Record types shared by the storage and core layers."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class FileEntry:
    """Pointer from a workspace path to the blob holding its content.

    Attributes:
        path: POSIX path relative to the workspace root
        hash: Object store key of the content
    """

    path: str
    hash: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to the persisted dictionary form."""
        return {"path": self.path, "hash": self.hash}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileEntry":
        """Build from the persisted dictionary form.

        Raises:
            ValueError: If path or hash is missing or not a string
        """
        if not isinstance(data, dict):
            raise ValueError(f"File entry must be an object, got {type(data).__name__}")
        path = data.get("path")
        blob_hash = data.get("hash")
        if not isinstance(path, str) or not isinstance(blob_hash, str):
            raise ValueError(f"File entry needs string 'path' and 'hash': {data!r}")
        return cls(path=path, hash=blob_hash)


@dataclass(frozen=True)
class Commit:
    """A snapshot record in the commit chain.

    The hash is the content hash of the serialized record without the hash
    field; it is computed once at creation.

    Attributes:
        hash: Commit identity
        timestamp: ISO-8601 UTC creation time
        message: Commit message, stored verbatim
        files: Entries staged for this commit, in staging order
        parent: Hash of the previous commit, None for the root commit
    """

    hash: str
    timestamp: str
    message: str
    files: Tuple[FileEntry, ...] = field(default_factory=tuple)
    parent: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def find_file(self, path: str) -> Optional[FileEntry]:
        """Return the first entry for path, or None."""
        for entry in self.files:
            if entry.path == path:
                return entry
        return None

    def to_record(self) -> Dict[str, Any]:
        """Serializable form, excluding the hash field."""
        return {
            "timestamp": self.timestamp,
            "message": self.message,
            "files": [entry.to_dict() for entry in self.files],
            "parent": self.parent,
        }

    @classmethod
    def from_record(cls, commit_hash: str, record: Dict[str, Any]) -> "Commit":
        """Rebuild a commit from its stored record.

        Raises:
            ValueError: If the record does not have the commit shape
        """
        if not isinstance(record, dict):
            raise ValueError("Commit record must be a JSON object")
        timestamp = record.get("timestamp")
        message = record.get("message")
        files = record.get("files")
        parent = record.get("parent")
        if not isinstance(timestamp, str) or not isinstance(message, str):
            raise ValueError("Commit record needs string 'timestamp' and 'message'")
        if not isinstance(files, list):
            raise ValueError("Commit record needs a 'files' list")
        if parent is not None and not isinstance(parent, str):
            raise ValueError("Commit parent must be a string or null")

        entries: List[FileEntry] = [FileEntry.from_dict(item) for item in files]
        return cls(
            hash=commit_hash,
            timestamp=timestamp,
            message=message,
            files=tuple(entries),
            parent=parent or None,
        )
