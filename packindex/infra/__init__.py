"""
Infrastructure layer for packindex.

Contains abstractions for external systems:
- GitClient: Git command execution
- ArchiveReader: package archive access

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitCommandError, GitCommit, Signature
from .archive import ArchiveReader

__all__ = [
    'GitClient',
    'GitCommandError',
    'GitCommit',
    'Signature',
    'ArchiveReader',
]
