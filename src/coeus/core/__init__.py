"""Core engine layer for Coeus.

This module provides the version-control operations: staging, committing,
walking history and reconstructing per-file changes.
"""

from coeus.core.history import ChangeStatus, CommitReport, FileChange, HistoryReader
from coeus.core.repository import Repository, RepositoryStatus
from coeus.core.staging import StagingIndex

__all__ = [
    "ChangeStatus",
    "CommitReport",
    "FileChange",
    "HistoryReader",
    "Repository",
    "RepositoryStatus",
    "StagingIndex",
]
