"""Pytest configuration and shared fixtures."""

import os
from pathlib import Path

import pytest

from coeus.core import Repository


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create an empty workspace directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def repo(workspace: Path) -> Repository:
    """Create an initialized repository in the workspace."""
    repository, _ = Repository.init(workspace)
    return repository


@pytest.fixture
def in_workspace(workspace: Path):
    """Run a test with the workspace as the current directory."""
    original_cwd = Path.cwd()
    os.chdir(workspace)
    try:
        yield workspace
    finally:
        os.chdir(original_cwd)
