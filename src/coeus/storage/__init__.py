"""Storage layer for Coeus.

This module provides the content-addressable object store and the commit
chain built on top of it.
"""

from coeus.storage.commit_chain import CommitChain
from coeus.storage.object_store import ObjectStore, hash_content

__all__ = [
    "ObjectStore",
    "CommitChain",
    "hash_content",
]
