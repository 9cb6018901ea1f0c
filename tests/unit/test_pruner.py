"""
Tests for dirmirror.sync.pruner module.
"""

import os
from pathlib import Path

import pytest

from dirmirror.core.logging import SyncLogger
from dirmirror.sync.pruner import TreePruner


@pytest.fixture
def pruner(sync_logger: SyncLogger) -> TreePruner:
    return TreePruner(sync_logger)


class TestTreePruner:
    """Tests for TreePruner."""

    def test_removes_only_extra_file(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner, write_tree, read_tree
    ) -> None:
        write_tree(source_dir, {"keep.txt": "k", "sub/inner.txt": "i"})
        write_tree(replica_dir, {"keep.txt": "k", "extra.txt": "e", "sub/inner.txt": "i"})

        summary = pruner.prune(source_dir, replica_dir)

        assert read_tree(replica_dir) == {
            "keep.txt": "k",
            "sub": None,
            "sub/inner.txt": "i",
        }
        assert summary.files_deleted == 1
        assert summary.dirs_deleted == 0

    def test_removes_orphaned_subtree_in_one_delete(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner, sync_logger: SyncLogger, write_tree, mocker
    ) -> None:
        write_tree(replica_dir, {"old/a.txt": "a", "old/nested/b.txt": "b"})
        rmtree = mocker.patch("dirmirror.sync.pruner.shutil.rmtree")

        summary = pruner.prune(source_dir, replica_dir)

        rmtree.assert_called_once_with(replica_dir / "old")
        assert summary.dirs_deleted == 1
        assert summary.files_deleted == 0
        assert "Deleted directory: old" in sync_logger.messages()

    def test_recurses_into_matching_directories(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner, write_tree
    ) -> None:
        write_tree(source_dir, {"a/b/keep.txt": "k"})
        write_tree(replica_dir, {"a/b/keep.txt": "k", "a/b/stale.txt": "s", "a/gone/x.txt": "x"})

        pruner.prune(source_dir, replica_dir)

        assert (replica_dir / "a" / "b" / "keep.txt").exists()
        assert not (replica_dir / "a" / "b" / "stale.txt").exists()
        assert not (replica_dir / "a" / "gone").exists()

    def test_missing_replica_is_noop(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner
    ) -> None:
        summary = pruner.prune(source_dir, replica_dir)

        assert summary.changes == 0
        assert not replica_dir.exists()

    def test_missing_source_removes_whole_replica(
        self, temp_dir: Path, replica_dir: Path, pruner: TreePruner, write_tree
    ) -> None:
        write_tree(replica_dir, {"a.txt": "a"})

        summary = pruner.prune(temp_dir / "no-such-source", replica_dir)

        assert not replica_dir.exists()
        assert summary.dirs_deleted == 1

    def test_file_replaced_by_directory_is_removed(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner, write_tree
    ) -> None:
        (source_dir / "item").mkdir()
        write_tree(replica_dir, {"item": "was a file"})

        pruner.prune(source_dir, replica_dir)

        assert not (replica_dir / "item").exists()

    def test_delete_failure_continues(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner, sync_logger: SyncLogger, write_tree, mocker
    ) -> None:
        write_tree(replica_dir, {"locked.txt": "l", "free.txt": "f"})
        real_remove = os.remove

        def flaky_remove(path: Path) -> None:
            if Path(path).name == "locked.txt":
                raise PermissionError("in use")
            real_remove(path)

        mocker.patch("dirmirror.sync.pruner.os.remove", side_effect=flaky_remove)

        summary = pruner.prune(source_dir, replica_dir)

        assert (replica_dir / "locked.txt").exists()
        assert not (replica_dir / "free.txt").exists()
        assert summary.errors == 1
        assert summary.files_deleted == 1
        assert any("Failed to delete file locked.txt" in m for m in sync_logger.messages("ERROR"))

    def test_dangling_symlink_removed(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner, temp_dir: Path
    ) -> None:
        replica_dir.mkdir()
        link = replica_dir / "stale.txt"
        try:
            os.symlink(temp_dir / "nowhere.txt", link)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not available")

        summary = pruner.prune(source_dir, replica_dir)

        assert not os.path.lexists(link)
        assert os.listdir(replica_dir) == []
        assert summary.files_deleted == 1

    def test_directory_symlink_removed_without_touching_target(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner, temp_dir: Path, write_tree
    ) -> None:
        write_tree(temp_dir / "elsewhere", {"keep.txt": "k"})
        replica_dir.mkdir()
        link = replica_dir / "linked"
        try:
            os.symlink(temp_dir / "elsewhere", link, target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not available")

        pruner.prune(source_dir, replica_dir)

        assert not os.path.lexists(link)
        assert (temp_dir / "elsewhere" / "keep.txt").read_text() == "k"

    def test_source_listing_failure_names_source(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner, sync_logger: SyncLogger, mocker
    ) -> None:
        replica_dir.mkdir()
        (replica_dir / "a.txt").write_text("a")
        mocker.patch(
            "dirmirror.sync.pruner.list_entries", side_effect=PermissionError("no access")
        )

        summary = pruner.prune(source_dir, replica_dir)

        assert (replica_dir / "a.txt").exists()
        assert summary.errors == 1
        assert sync_logger.messages("ERROR") == [
            f"ERROR: Failed to list directory {source_dir}: no access"
        ]

    def test_replica_listing_failure_names_replica(
        self, source_dir: Path, replica_dir: Path, pruner: TreePruner, sync_logger: SyncLogger, mocker
    ) -> None:
        replica_dir.mkdir()

        def failing_replica(directory: Path, any_file: bool = False) -> tuple[list[str], list[str]]:
            if directory == replica_dir:
                raise PermissionError("no access")
            return [], []

        mocker.patch("dirmirror.sync.pruner.list_entries", side_effect=failing_replica)

        summary = pruner.prune(source_dir, replica_dir)

        assert summary.errors == 1
        assert sync_logger.messages("ERROR") == [
            f"ERROR: Failed to list directory {replica_dir}: no access"
        ]
