"""Exception hierarchy for Coeus.

All Coeus exceptions inherit from CoeusError, so callers can catch every
Coeus-specific failure with a single except clause. Missing files passed to
``add`` surface as the builtin FileNotFoundError.

Exception Categories:
    - StorageError: underlying I/O failure (write or read)
    - ObjectNotFoundError: hash has no blob in the object store
    - IndexCorruptError: staging index cannot be parsed
    - ChainCorruptError: commit chain references a missing or invalid commit
    - CommitNotFoundError: user supplied a hash that names no commit
"""


class CoeusError(Exception):
    """Base exception for all Coeus errors."""


class NotARepositoryError(CoeusError):
    """Raised when no .coeus layout exists at the given root."""


class StorageError(CoeusError):
    """Raised when reading or writing persistent storage fails."""


class StorageWriteError(StorageError):
    """Raised when a blob, the index or HEAD cannot be written."""


class StorageReadError(StorageError):
    """Raised when persisted state exists but cannot be read."""


class ObjectNotFoundError(CoeusError):
    """Raised when a blob cannot be found in the object store."""


class IndexCorruptError(CoeusError):
    """Raised when the staging index is not a valid JSON entry list."""


class ChainCorruptError(CoeusError):
    """Raised when HEAD or a parent link does not resolve to a commit."""


class CommitNotFoundError(CoeusError):
    """Raised when a requested commit hash does not resolve."""


class InvalidPathError(CoeusError):
    """Raised when a path cannot be staged (outside workspace, directory, not UTF-8)."""


class NothingToCommitError(CoeusError):
    """Raised when committing an empty staging index."""


class InvalidMessageError(CoeusError):
    """Raised when a commit message cannot be stored as UTF-8."""
