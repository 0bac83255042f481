"""
Shared fixtures: real git repositories and package archives in tmp_path.
"""

import json
import os
import subprocess
import zipfile
from pathlib import Path

import pytest

from packindex.infra.git_client import GitClient
from packindex.services.squash_service import BotIdentity, HistorySquasher
from packindex.services.store_service import RepositoryStore

TEST_ENV = {
    'GIT_AUTHOR_NAME': 'Upstream Maintainer',
    'GIT_AUTHOR_EMAIL': 'maintainer@example.org',
    'GIT_COMMITTER_NAME': 'Upstream Maintainer',
    'GIT_COMMITTER_EMAIL': 'maintainer@example.org',
    'GIT_CONFIG_NOSYSTEM': '1',
}

BOT = BotIdentity(name="GeodeBot", email="geodebot@example.org")


def git(cwd, *args) -> str:
    """Run git in cwd with a fixed identity and return stdout."""
    env = os.environ.copy()
    env.update(TEST_ENV)
    result = subprocess.run(
        ['git'] + list(args),
        cwd=str(cwd),
        capture_output=True,
        text=True,
        env=env,
        check=True,
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str) -> str:
    (repo / name).write_text(content)
    git(repo, 'add', name)
    git(repo, 'commit', '-q', '--no-gpg-sign', '-m', message)
    return git(repo, 'rev-parse', 'HEAD')


@pytest.fixture
def upstream_repo(tmp_path):
    """A non-bare repository with a root commit and one more on top."""
    repo = tmp_path / "upstream"
    repo.mkdir()
    git(repo, 'init', '-q')
    git(repo, 'symbolic-ref', 'HEAD', 'refs/heads/main')
    commit_file(repo, "README.md", "# Package index\n", "Initial commit")
    commit_file(repo, "CONTRIBUTING.md", "Fork and export.\n", "Add contributing guide")
    return repo


@pytest.fixture
def squasher():
    return HistorySquasher(BOT, GitClient(timeout=60))


@pytest.fixture
def store(tmp_path, squasher):
    """A store that has not been initialized yet."""
    return RepositoryStore(tmp_path / "indexer", squasher)


@pytest.fixture
def initialized_store(store, upstream_repo):
    store.init(str(upstream_repo))
    return store


@pytest.fixture
def make_package(tmp_path):
    """Factory writing a package archive with a mod.json and an artifact payload."""
    counter = {'n': 0}

    def _make(metadata=None, payload=b"\x00geode-binary\x01", name=None, raw_metadata=None):
        counter['n'] += 1
        path = tmp_path / (name or f"package{counter['n']}.geode")
        with zipfile.ZipFile(path, 'w') as archive:
            if raw_metadata is not None:
                archive.writestr("mod.json", raw_metadata)
            elif metadata is not None:
                archive.writestr("mod.json", json.dumps(metadata))
            archive.writestr("payload.bin", payload)
        return path

    return _make
