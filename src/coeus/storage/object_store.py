"""Content-addressable blob storage for Coeus.

This module implements a Git-like object store using SHA-1 hashing for
content addressing. Blobs are stored flat in .coeus/objects/<hash> with
automatic deduplication. The store is append-only: nothing is ever updated
or deleted.
"""

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterator, List

from coeus.constants import (
    HASH_ALGORITHM,
    HASH_LENGTH,
    MIN_PREFIX_LENGTH,
    OBJECTS_DIR,
)
from coeus.errors import ObjectNotFoundError, StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset("0123456789abcdef")


def hash_content(content: bytes) -> str:
    """Compute the SHA-1 hex digest of content.

    Args:
        content: Binary data to hash

    Returns:
        Lowercase hex string (40 characters)
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(content)
    return hasher.hexdigest()


def is_valid_hash(value: str) -> bool:
    """Check whether a string is a well-formed full hash."""
    return (
        isinstance(value, str)
        and len(value) == HASH_LENGTH
        and set(value) <= _HEX_DIGITS
    )


class ObjectStore:
    """Content-addressable storage for blobs.

    Stores byte content under the SHA-1 hash of that content. Writing the
    same content twice is a no-op, so concurrent writers of one key are safe.

    Storage layout:
        .coeus/objects/<hash>      # Raw blob bytes

    Attributes:
        coeus_dir: Path to the .coeus directory
        objects_dir: Path to the objects directory

    Example:
        >>> store = ObjectStore(Path(".coeus"))
        >>> blob_hash = store.put(b"hello\\n")
        >>> assert store.get(blob_hash) == b"hello\\n"
    """

    def __init__(self, coeus_dir: Path) -> None:
        """Initialize the object store.

        Args:
            coeus_dir: Path to .coeus directory

        Raises:
            ValueError: If coeus_dir doesn't exist
        """
        self.coeus_dir = Path(coeus_dir)
        self.objects_dir = self.coeus_dir / OBJECTS_DIR

        if not self.coeus_dir.exists():
            raise ValueError(f"Coeus directory not found: {coeus_dir}")

    def hash_content(self, content: bytes) -> str:
        """Hash content the way the store keys it."""
        return hash_content(content)

    def put(self, content: bytes) -> str:
        """Write a blob to the object store.

        If a blob with the same hash already exists, returns the hash without
        writing (deduplication). Uses atomic write (tmp file + rename) so a
        reader never observes a partially written blob.

        Args:
            content: Binary content to store

        Returns:
            SHA-1 hash of the content (40 hex characters)

        Raises:
            StorageWriteError: If the write fails (permissions, disk full, etc.)
        """
        blob_hash = hash_content(content)
        blob_path = self._get_blob_path(blob_hash)

        if blob_path.exists():
            logger.debug("Blob %s already stored", blob_hash)
            return blob_hash

        try:
            self.objects_dir.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_path = tempfile.mkstemp(
                dir=self.objects_dir,
                prefix=".tmp_",
                suffix=".blob",
            )
        except OSError as e:
            raise StorageWriteError(f"Failed to write blob {blob_hash}: {e}") from e

        try:
            with os.fdopen(tmp_fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, blob_path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageWriteError(f"Failed to write blob {blob_hash}: {e}") from e

        logger.debug("Stored blob %s (%d bytes)", blob_hash, len(content))
        return blob_hash

    def get(self, blob_hash: str) -> bytes:
        """Read a blob from the object store.

        Args:
            blob_hash: SHA-1 hash of the blob (40 hex characters)

        Returns:
            Binary content of the blob

        Raises:
            ObjectNotFoundError: If no blob is stored under blob_hash
            StorageReadError: If the blob exists but cannot be read
        """
        if not is_valid_hash(blob_hash):
            raise ObjectNotFoundError(f"Object not found: {blob_hash!r} is not a valid hash")

        blob_path = self._get_blob_path(blob_hash)
        try:
            with open(blob_path, "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(f"Object not found: {blob_hash}") from e
        except OSError as e:
            raise StorageReadError(f"Failed to read blob {blob_hash}: {e}") from e

    def exists(self, blob_hash: str) -> bool:
        """Check if a blob exists in the store."""
        if not is_valid_hash(blob_hash):
            return False
        return self._get_blob_path(blob_hash).is_file()

    def iter_hashes(self) -> Iterator[str]:
        """Iterate over the hashes of all stored blobs, in sorted order."""
        if not self.objects_dir.exists():
            return
        for entry in sorted(self.objects_dir.iterdir()):
            if entry.is_file() and is_valid_hash(entry.name):
                yield entry.name

    def resolve_prefix(self, prefix: str) -> str:
        """Expand an abbreviated hash to the full hash of a stored blob.

        Args:
            prefix: Full hash, or at least MIN_PREFIX_LENGTH leading hex chars

        Returns:
            The unique full hash starting with prefix

        Raises:
            ObjectNotFoundError: If no blob matches, or the prefix is ambiguous
        """
        prefix = prefix.strip().lower()
        if is_valid_hash(prefix):
            if self.exists(prefix):
                return prefix
            raise ObjectNotFoundError(f"Object not found: {prefix}")

        if len(prefix) < MIN_PREFIX_LENGTH or not set(prefix) <= _HEX_DIGITS:
            raise ObjectNotFoundError(
                f"Object not found: {prefix!r} is not a hash or a prefix of "
                f"at least {MIN_PREFIX_LENGTH} hex characters"
            )

        matches: List[str] = [h for h in self.iter_hashes() if h.startswith(prefix)]
        if not matches:
            raise ObjectNotFoundError(f"Object not found: {prefix}")
        if len(matches) > 1:
            raise ObjectNotFoundError(
                f"Ambiguous hash prefix {prefix}: matches {len(matches)} objects"
            )
        return matches[0]

    def _get_blob_path(self, blob_hash: str) -> Path:
        """Get the filesystem path for a blob: objects/<hash>."""
        return self.objects_dir / blob_hash
