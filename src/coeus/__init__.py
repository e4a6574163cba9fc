"""Coeus - a minimal local version-control engine.

Coeus stores immutable snapshots of file content in a content-addressable
object store, stages pending changes in a JSON index, links snapshots into a
linear commit history and reconstructs line diffs between versions.
"""

__version__ = "0.1.0"
__author__ = "Coeus Contributors"

from coeus.core.repository import Repository

__all__ = ["__version__", "__author__", "Repository"]
