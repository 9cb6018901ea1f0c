"""
Removal of replica entries that no longer exist in the source.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from dirmirror.core.logging import SyncLogger
from dirmirror.core.models import SyncSummary
from dirmirror.sync.mirror import list_entries


class TreePruner:
    """Deletes replica files and directories without a source counterpart."""

    def __init__(self, logger: SyncLogger) -> None:
        self.logger = logger

    def prune(
        self,
        source_dir: Path,
        replica_dir: Path,
        summary: SyncSummary | None = None,
    ) -> SyncSummary:
        """
        Prune replica_dir against source_dir.

        A replica directory whose source counterpart is gone is removed in
        a single recursive delete without being walked. Failures are logged
        and the walk continues with the next entry.
        """
        summary = summary or SyncSummary()
        stack: list[tuple[Path, Path]] = [(Path(source_dir), Path(replica_dir))]

        while stack:
            source, replica = stack.pop()
            if not replica.is_dir():
                continue
            if not source.is_dir():
                self._delete_directory(replica, summary)
                continue

            listed = self._list(source, summary)
            if listed is None:
                continue
            source_files, source_dirs = listed
            # Dangling and directory links in the replica are pruned as files
            listed = self._list(replica, summary, any_file=True)
            if listed is None:
                continue
            replica_files, replica_dirs = listed

            keep_files = set(source_files)
            for name in replica_files:
                if name not in keep_files:
                    self._delete_file(replica / name, summary)

            keep_dirs = set(source_dirs)
            for name in replica_dirs:
                if name in keep_dirs:
                    stack.append((source / name, replica / name))
                else:
                    self._delete_directory(replica / name, summary)

        return summary

    def _list(
        self, directory: Path, summary: SyncSummary, any_file: bool = False
    ) -> tuple[list[str], list[str]] | None:
        try:
            return list_entries(directory, any_file=any_file)
        except OSError as e:
            self.logger.error(
                f"ERROR: Failed to list directory {directory}: {e}", path=str(directory)
            )
            summary.errors += 1
            return None

    def _delete_file(self, path: Path, summary: SyncSummary) -> None:
        try:
            os.remove(path)
        except OSError as e:
            self.logger.error(f"ERROR: Failed to delete file {path.name}: {e}", path=str(path))
            summary.errors += 1
            return
        self.logger.info(f"Deleted file: {path.name}", path=str(path))
        summary.files_deleted += 1

    def _delete_directory(self, path: Path, summary: SyncSummary) -> None:
        try:
            shutil.rmtree(path)
        except OSError as e:
            self.logger.error(
                f"ERROR: Failed to delete directory {path.name}: {e}", path=str(path)
            )
            summary.errors += 1
            return
        self.logger.info(f"Deleted directory: {path.name}", path=str(path))
        summary.dirs_deleted += 1
