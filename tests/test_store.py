"""
Tests for the RepositoryStore service.
"""

import pytest

from packindex.domain.operation import EntryAction
from packindex.exit_codes import (
    AlreadyInitialized,
    CloneFailed,
    EntryNotFound,
    InvalidEntryName,
    NotInitialized,
    SourceNotFound,
    VcsOperationFailed,
    DATA_ERROR,
    NETWORK_ERROR,
    NOT_FOUND,
    STORE_STATE_ERROR,
)
from packindex.services.store_service import RepositoryStore

from .conftest import git


def head(store):
    return git(store.path, 'rev-parse', 'HEAD')


def depth(store):
    return int(git(store.path, 'rev-list', '--count', 'HEAD'))


def write_artifact(tmp_path, name="loader.geode", content=b"B-bytes"):
    path = tmp_path / name
    path.write_bytes(content)
    return path


class TestInit:

    def test_clones_fork(self, store, upstream_repo):
        assert not store.is_initialized()
        path = store.init(str(upstream_repo))
        assert path == store.path
        assert store.is_initialized()
        assert (store.path / "README.md").exists()
        # Clone keeps the fork's full history until the first mutation
        assert depth(store) == 2

    def test_already_initialized(self, initialized_store, upstream_repo):
        with pytest.raises(AlreadyInitialized) as exc_info:
            initialized_store.init(str(upstream_repo))
        assert exc_info.value.exit_code == STORE_STATE_ERROR

    def test_existing_plain_directory_counts_as_initialized(self, store, upstream_repo):
        store.path.mkdir()
        with pytest.raises(AlreadyInitialized):
            store.init(str(upstream_repo))

    def test_clone_failure_leaves_store_uninitialized(self, store, tmp_path):
        with pytest.raises(CloneFailed) as exc_info:
            store.init(str(tmp_path / "no-such-fork"))
        assert exc_info.value.exit_code == NETWORK_ERROR
        assert not store.is_initialized()

    def test_creates_parent_directories(self, squasher, upstream_repo, tmp_path):
        store = RepositoryStore(tmp_path / "deep" / "nested" / "indexer", squasher)
        store.init(str(upstream_repo))
        assert store.is_initialized()


class TestNotInitialized:

    def test_entries(self, store):
        with pytest.raises(NotInitialized) as exc_info:
            list(store.entries())
        assert exc_info.value.exit_code == STORE_STATE_ERROR

    def test_remove(self, store):
        with pytest.raises(NotInitialized):
            store.remove_entry("geode.loader@4")

    def test_export(self, store, tmp_path):
        with pytest.raises(NotInitialized):
            store.export_entry("geode.loader", "4", write_artifact(tmp_path))

    def test_history_depth(self, store):
        with pytest.raises(NotInitialized):
            store.history_depth()


class TestEntries:

    def test_lists_directories_with_artifact(self, initialized_store, tmp_path):
        initialized_store.export_entry("a.one", "1", write_artifact(tmp_path))
        initialized_store.export_entry("b.two", "3", write_artifact(tmp_path))
        (initialized_store.path / "stray").mkdir()
        (initialized_store.path / "wrong-file").mkdir()
        (initialized_store.path / "wrong-file" / "other.bin").write_bytes(b"x")

        assert set(initialized_store.entries()) == {"a.one@1", "b.two@3"}

    def test_artifact_must_be_a_file(self, initialized_store):
        (initialized_store.path / "odd@1" / "mod.geode").mkdir(parents=True)
        assert list(initialized_store.entries()) == []

    def test_is_recomputed_each_call(self, initialized_store, tmp_path):
        assert list(initialized_store.entries()) == []
        initialized_store.export_entry("a.one", "1", write_artifact(tmp_path))
        assert list(initialized_store.entries()) == ["a.one@1"]

    def test_custom_artifact_filename(self, squasher, upstream_repo, tmp_path):
        store = RepositoryStore(tmp_path / "custom", squasher, artifact_filename="package.zip")
        store.init(str(upstream_repo))
        operation = store.export_entry("c.three", "2", write_artifact(tmp_path))
        assert (store.path / operation.entry / "package.zip").is_file()
        assert list(store.entries()) == ["c.three@2"]


class TestExport:

    def test_scenario_export_twice(self, initialized_store, make_package):
        """Re-exporting the same archive leaves content and history shape unchanged."""
        package = make_package({"id": "geode.loader", "version": "v4.2.1"})
        artifact_bytes = package.read_bytes()

        first = initialized_store.export_entry("geode.loader", "4", package)

        artifact = initialized_store.path / "geode.loader@4" / "mod.geode"
        assert artifact.read_bytes() == artifact_bytes
        assert depth(initialized_store) == 2
        assert first.created
        assert first.action == EntryAction.EXPORTED
        first_tree = git(initialized_store.path, 'rev-parse', 'HEAD^{tree}')

        second = initialized_store.export_entry("geode.loader", "4", package)

        assert artifact.read_bytes() == artifact_bytes
        assert depth(initialized_store) == 2
        assert not second.created
        assert git(initialized_store.path, 'rev-parse', 'HEAD^{tree}') == first_tree
        assert head(initialized_store) == second.squash.commit
        # Both commits share tree and parent, so within one second their ids coincide.
        # The new commit still sits directly on the root either way.
        assert git(initialized_store.path, 'rev-parse', 'HEAD^') == second.squash.root
        assert second.squash.root == first.squash.root

    def test_overwrites_previous_artifact(self, initialized_store, tmp_path):
        initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path, content=b"old"))
        initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path, content=b"new"))

        entry = initialized_store.path / "geode.loader@4"
        assert [p.name for p in entry.iterdir()] == ["mod.geode"]
        assert (entry / "mod.geode").read_bytes() == b"new"
        assert git(initialized_store.path, 'show', 'HEAD:geode.loader@4/mod.geode') == "new"

    def test_commit_message_and_parent(self, initialized_store, tmp_path):
        root = git(initialized_store.path, 'rev-list', '--max-parents=0', 'HEAD')
        operation = initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path))

        assert git(initialized_store.path, 'log', '-1', '--format=%s') == "Add/Update geode.loader"
        assert git(initialized_store.path, 'rev-parse', 'HEAD^') == root
        assert operation.squash.root == root

    def test_history_depth_after_many_exports(self, initialized_store, tmp_path):
        for i in range(5):
            initialized_store.export_entry(f"pkg.n{i}", str(i + 1), write_artifact(tmp_path))
            assert initialized_store.history_depth() == 2
        assert len(list(initialized_store.entries())) == 5

    def test_major_versions_are_separate_entries(self, initialized_store, tmp_path):
        initialized_store.export_entry("geode.loader", "3", write_artifact(tmp_path))
        initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path))
        assert set(initialized_store.entries()) == {"geode.loader@3", "geode.loader@4"}

    def test_source_not_found(self, initialized_store, tmp_path):
        before = head(initialized_store)
        with pytest.raises(SourceNotFound) as exc_info:
            initialized_store.export_entry("geode.loader", "4", tmp_path / "missing.geode")
        assert exc_info.value.exit_code == NOT_FOUND
        assert head(initialized_store) == before

    @pytest.mark.parametrize("package_id", ["../x", "/abs/x", "a/b", ".git", "..", ""])
    def test_rejects_ids_outside_store(self, initialized_store, tmp_path, package_id):
        artifact = write_artifact(tmp_path)
        before = head(initialized_store)
        outside = set(tmp_path.iterdir())
        inside = set(initialized_store.path.iterdir())

        with pytest.raises(InvalidEntryName) as exc_info:
            initialized_store.export_entry(package_id, "1", artifact)

        assert exc_info.value.exit_code == DATA_ERROR
        assert head(initialized_store) == before
        assert set(tmp_path.iterdir()) == outside
        assert set(initialized_store.path.iterdir()) == inside
        assert not (tmp_path / "x@1").exists()

    def test_failed_copy_removes_new_entry(self, initialized_store, tmp_path, monkeypatch):
        artifact = write_artifact(tmp_path)
        before = head(initialized_store)

        def broken_copy(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("packindex.services.store_service.shutil.copyfile", broken_copy)
        with pytest.raises(VcsOperationFailed):
            initialized_store.export_entry("geode.loader", "4", artifact)

        assert not (initialized_store.path / "geode.loader@4").exists()
        assert head(initialized_store) == before

    def test_failed_copy_keeps_existing_entry(self, initialized_store, tmp_path, monkeypatch):
        initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path, content=b"old"))

        def broken_copy(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("packindex.services.store_service.shutil.copyfile", broken_copy)
        with pytest.raises(VcsOperationFailed):
            initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path, content=b"new"))

        assert (initialized_store.path / "geode.loader@4" / "mod.geode").read_bytes() == b"old"

    def test_to_dict(self, initialized_store, tmp_path):
        operation = initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path))
        data = operation.to_dict()
        assert data['action'] == "exported"
        assert data['entry'] == "geode.loader@4"
        assert data['id'] == "geode.loader"
        assert data['major_version'] == "4"
        assert data['created'] is True
        assert data['push_command'] == f"git -C {initialized_store.path} push -f"
        assert data['commit'] == head(initialized_store)


class TestRemove:

    def test_removes_entry(self, initialized_store, tmp_path):
        initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path))
        initialized_store.export_entry("other.mod", "1", write_artifact(tmp_path))

        operation = initialized_store.remove_entry("geode.loader@4")

        assert operation.action == EntryAction.REMOVED
        assert not (initialized_store.path / "geode.loader@4").exists()
        assert list(initialized_store.entries()) == ["other.mod@1"]
        assert depth(initialized_store) == 2
        assert git(initialized_store.path, 'log', '-1', '--format=%s') == "Remove geode.loader@4"
        tracked = git(initialized_store.path, 'ls-tree', '-r', '--name-only', 'HEAD')
        assert "geode.loader@4/mod.geode" not in tracked

    def test_bare_id_does_not_match(self, initialized_store, tmp_path):
        """Entries are matched by their literal directory name."""
        initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path))
        with pytest.raises(EntryNotFound) as exc_info:
            initialized_store.remove_entry("geode.loader")
        assert exc_info.value.name == "geode.loader"
        assert (initialized_store.path / "geode.loader@4").exists()

    def test_missing_entry_leaves_store_unchanged(self, initialized_store, tmp_path):
        initialized_store.export_entry("geode.loader", "4", write_artifact(tmp_path))
        before_head = head(initialized_store)
        before_entries = sorted(p.name for p in initialized_store.path.iterdir())

        with pytest.raises(EntryNotFound) as exc_info:
            initialized_store.remove_entry("nothing@1")

        assert exc_info.value.exit_code == NOT_FOUND
        assert head(initialized_store) == before_head
        assert sorted(p.name for p in initialized_store.path.iterdir()) == before_entries
        assert git(initialized_store.path, 'status', '--porcelain') == ""

    @pytest.mark.parametrize("name", [".git", "..", ".", "", "a/b", "../upstream"])
    def test_names_outside_entries_never_match(self, initialized_store, name):
        with pytest.raises(EntryNotFound):
            initialized_store.remove_entry(name)
        assert (initialized_store.path / ".git").is_dir()

    def test_removes_directory_without_artifact(self, initialized_store):
        """Any directory with the literal name is removed, artifact or not."""
        stray = initialized_store.path / "stray"
        stray.mkdir()
        (stray / "notes.txt").write_text("x")
        git(initialized_store.path, 'add', 'stray')

        initialized_store.remove_entry("stray")

        assert not stray.exists()
        assert depth(initialized_store) == 2
