"""
Repository store service for packindex.

Owns the local clone of the package index. The clone holds one directory
per entry, named ``{id}@{major_version}``, each containing the package
artifact under a fixed filename. Every mutation is published through the
HistorySquasher as a single commit on top of the root commit.

Only one packindex process should drive a store at a time; concurrent
invocations against the same clone are not coordinated.
"""

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, Generator, Optional, Union

from ..config import get_store_path
from ..domain.operation import EntryAction, EntryOperation
from ..domain.package import entry_name
from ..exit_codes import (
    AlreadyInitialized,
    CloneFailed,
    EntryNotFound,
    InvalidEntryName,
    NotInitialized,
    SourceNotFound,
    VcsOperationFailed,
)
from ..infra.git_client import GitClient, GitCommandError
from .squash_service import BotIdentity, HistorySquasher

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_FILENAME = "mod.geode"


class RepositoryStore:
    """
    Local clone of the package index.

    Example:
        store = RepositoryStore.from_config(load_config())
        store.init("https://github.com/me/indexer")
        for name in store.entries():
            print(name)
    """

    def __init__(
        self,
        path: Union[str, Path],
        squasher: HistorySquasher,
        git_client: Optional[GitClient] = None,
        artifact_filename: str = DEFAULT_ARTIFACT_FILENAME,
    ):
        """
        Initialize RepositoryStore.

        Args:
            path: Location of the local clone
            squasher: Publishes mutations as one commit
            git_client: GitClient instance (shares the squasher's if None)
            artifact_filename: Name of the artifact file inside each entry
        """
        self.path = Path(path).expanduser()
        self.squasher = squasher
        self.git = git_client or squasher.git
        self.artifact_filename = artifact_filename

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RepositoryStore":
        """Build a store, its git client and squasher from configuration."""
        git = GitClient(timeout=config["git"]["timeout_seconds"])
        squasher = HistorySquasher(BotIdentity.from_config(config), git)
        return cls(
            get_store_path(config),
            squasher,
            git_client=git,
            artifact_filename=config["package"]["artifact_filename"],
        )

    def is_initialized(self) -> bool:
        return self.path.exists()

    def require_initialized(self) -> None:
        """Raise NotInitialized unless the store has been cloned."""
        if not self.is_initialized():
            raise NotInitialized(str(self.path))

    def init(self, fork_url: str) -> Path:
        """
        Clone the fork into the store path.

        Raises:
            AlreadyInitialized: the store path already exists
            CloneFailed: git could not clone fork_url
        """
        if self.is_initialized():
            raise AlreadyInitialized(str(self.path))

        self.path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cloning {fork_url} into {self.path}")
        try:
            self.git.clone(fork_url, str(self.path))
        except GitCommandError as e:
            # git may leave a partial directory behind
            if self.path.exists():
                shutil.rmtree(self.path, ignore_errors=True)
            raise CloneFailed(fork_url, e.stderr or str(e)) from e

        return self.path

    def entries(self) -> Generator[str, None, None]:
        """
        Yield the name of every entry directory holding an artifact.

        The directory is scanned afresh on each call.
        """
        self.require_initialized()
        for child in self.path.iterdir():
            if child.is_dir() and (child / self.artifact_filename).is_file():
                yield child.name

    def entry_path(self, name: str) -> Path:
        return self.path / name

    @staticmethod
    def is_entry_name(name: str) -> bool:
        """True if name can only denote a directory directly under the store."""
        return bool(name) and name not in ('.', '..', '.git') \
            and '/' not in name and '\\' not in name

    def _find_entry(self, name: str) -> Optional[Path]:
        """Exact-name lookup of an entry directory directly under the store."""
        if not self.is_entry_name(name):
            return None
        path = self.entry_path(name)
        if not path.is_dir():
            return None
        return path

    def remove_entry(self, name: str) -> EntryOperation:
        """
        Delete an entry and publish the removal.

        name is matched literally against entry directory names, so callers
        pass the full ``id@major`` key.

        Raises:
            NotInitialized: the store does not exist
            EntryNotFound: no entry directory is called name
        """
        self.require_initialized()

        path = self._find_entry(name)
        if path is None:
            raise EntryNotFound(name)

        try:
            shutil.rmtree(path)
        except OSError as e:
            raise VcsOperationFailed(f"remove {name}", str(e), needs_inspection=True) from e
        logger.info(f"Removed {path}")

        squash = self.squasher.squash(self.path, f"Remove {name}")
        return EntryOperation(
            action=EntryAction.REMOVED,
            entry=name,
            store_path=str(self.path),
            squash=squash,
        )

    def export_entry(
        self,
        package_id: str,
        major_version: str,
        artifact_path: Union[str, Path],
    ) -> EntryOperation:
        """
        Copy an artifact into its entry directory and publish it.

        Re-exporting an existing id/major pair overwrites the artifact.

        Raises:
            NotInitialized: the store does not exist
            SourceNotFound: artifact_path does not exist
            InvalidEntryName: id or version would place the entry outside the store
        """
        self.require_initialized()

        source = Path(artifact_path)
        if not source.exists():
            raise SourceNotFound(str(source))

        name = entry_name(package_id, major_version)
        if not (self.is_entry_name(package_id) and self.is_entry_name(name)):
            raise InvalidEntryName(name)

        target_dir = self.entry_path(name)
        created = not target_dir.exists()
        try:
            target_dir.mkdir(exist_ok=True)
            shutil.copyfile(source, target_dir / self.artifact_filename)
        except OSError as e:
            if created:
                shutil.rmtree(target_dir, ignore_errors=True)
            raise VcsOperationFailed(f"copy {source} into {name}", str(e)) from e
        logger.info(f"{'Created' if created else 'Updated'} {target_dir}")

        squash = self.squasher.squash(self.path, f"Add/Update {package_id}")
        return EntryOperation(
            action=EntryAction.EXPORTED,
            entry=name,
            store_path=str(self.path),
            squash=squash,
            created=created,
            metadata={'id': package_id, 'major_version': major_version},
        )

    def history_depth(self) -> int:
        """Number of commits on the current branch."""
        self.require_initialized()
        try:
            return self.git.commit_count(str(self.path))
        except GitCommandError as e:
            raise VcsOperationFailed("count commits", str(e)) from e
