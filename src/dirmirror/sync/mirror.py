"""
Source-to-replica copy walk.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from dirmirror.core.logging import SyncLogger
from dirmirror.core.models import SyncSummary
from dirmirror.sync.detector import ChangeDetector


def list_entries(directory: Path, any_file: bool = False) -> tuple[list[str], list[str]]:
    """
    List the regular files and subdirectories of a directory by name.

    Symlinks to files count as files. Symlinks to directories are not
    returned as directories, so traversal never follows them. With
    any_file, every entry that is not a real directory (dangling links
    and links to directories included) is listed as a file.
    """
    files: list[str] = []
    dirs: list[str] = []
    with os.scandir(directory) as it:
        for entry in it:
            if entry.is_dir(follow_symlinks=False):
                dirs.append(entry.name)
            elif any_file or entry.is_file():
                files.append(entry.name)
    return files, dirs


class TreeMirror:
    """Copies new and changed files from a source tree into its replica."""

    def __init__(self, detector: ChangeDetector, logger: SyncLogger) -> None:
        self.detector = detector
        self.logger = logger

    def mirror(
        self,
        source_dir: Path,
        replica_dir: Path,
        summary: SyncSummary | None = None,
    ) -> SyncSummary:
        """
        Mirror source_dir onto replica_dir, depth-first and pre-order.

        Each directory's own files are handled before its subdirectories.
        Failures are logged and confined to the file or subtree involved.
        """
        summary = summary or SyncSummary()
        stack: list[tuple[Path, Path]] = [(Path(source_dir), Path(replica_dir))]

        while stack:
            source, replica = stack.pop()
            if not self._ensure_directory(replica, summary):
                continue

            try:
                files, dirs = list_entries(source)
            except OSError as e:
                self.logger.error(
                    f"ERROR: Failed to list directory {source}: {e}", path=str(source)
                )
                summary.errors += 1
                continue

            for name in files:
                self._sync_file(source / name, replica / name, summary)

            # Reversed so siblings pop in listing order
            for name in reversed(dirs):
                stack.append((source / name, replica / name))

        return summary

    def _ensure_directory(self, replica: Path, summary: SyncSummary) -> bool:
        if replica.is_dir():
            return True
        try:
            replica.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error(
                f"ERROR: Failed to create directory {replica}: {e}", path=str(replica)
            )
            summary.errors += 1
            return False
        self.logger.info(f"Created directory: {replica}", path=str(replica))
        summary.dirs_created += 1
        return True

    def _sync_file(self, source: Path, replica: Path, summary: SyncSummary) -> None:
        name = source.name
        if not replica.is_file():
            self.logger.info(f"New file detected: {name}", path=str(source))
            is_new = True
        elif self.detector.differs(source, replica):
            self.logger.info(f"File modified: {name}", path=str(source))
            is_new = False
        else:
            return

        try:
            copied = copy_file(source, replica)
        except OSError as e:
            self.logger.error(f"ERROR: Failed to copy file {name}: {e}", path=str(source))
            summary.errors += 1
            return

        self.logger.info(f"Copied: {name}", path=str(replica))
        if is_new:
            summary.files_new += 1
        else:
            summary.files_modified += 1
        summary.bytes_copied += copied


def copy_file(source: Path, destination: Path) -> int:
    """Copy file content only and return the number of bytes written."""
    # copyfile raises on a directory destination instead of copying into it
    shutil.copyfile(source, destination)
    return destination.stat().st_size
