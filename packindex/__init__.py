"""
packindex - Maintain a local mirror of a package-index git repository.

packindex keeps a clone of your fork of a package index. Package
archives are exported into it as ``{id}@{major_version}`` entries, and
every change is published as a single commit on top of the index's root
commit, ready to be force-pushed.

Quick Start:
    from packindex import RepositoryStore, ArchiveReader, PackageMetadata
    from packindex.config import load_config

    store = RepositoryStore.from_config(load_config())
    store.init("https://github.com/me/indexer")

    document = ArchiveReader().read_metadata("my.mod.geode")
    metadata = PackageMetadata.from_document(document)
    result = store.export_entry(metadata.id, metadata.major_version, "my.mod.geode")
    print(result.push_command)

Layers:
    domain - PackageMetadata, SquashResult, EntryOperation (pure)
    infra - GitClient, ArchiveReader (external systems)
    services - HistorySquasher, RepositoryStore (business logic)
"""

__version__ = "0.1.0"

# Domain objects
from .domain import (
    PackageMetadata,
    major_version,
    resolve_metadata,
    EntryAction,
    EntryOperation,
    SquashResult,
)

# Infrastructure
from .infra import ArchiveReader, GitClient

# Services
from .services import BotIdentity, HistorySquasher, RepositoryStore

# Configuration
from .config import load_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "PackageMetadata",
    "major_version",
    "resolve_metadata",
    "EntryAction",
    "EntryOperation",
    "SquashResult",
    # Infrastructure
    "ArchiveReader",
    "GitClient",
    # Services
    "BotIdentity",
    "HistorySquasher",
    "RepositoryStore",
    # Configuration
    "load_config",
]
