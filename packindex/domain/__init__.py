"""
Domain layer for packindex.

Contains pure domain objects with no I/O or side effects:
- PackageMetadata: id and version read from a package archive
- SquashResult: the commit produced by a history squash
- EntryOperation: result of exporting or removing an entry
"""

from .package import (
    PackageMetadata,
    major_version,
    resolve_metadata,
    entry_name,
    split_entry_name,
)
from .operation import EntryAction, EntryOperation, SquashResult

__all__ = [
    'PackageMetadata',
    'major_version',
    'resolve_metadata',
    'entry_name',
    'split_entry_name',
    'EntryAction',
    'EntryOperation',
    'SquashResult',
]
