"""
Change detection between a source file and its replica.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

from dirmirror.core.logging import SyncLogger

DEFAULT_CHUNK_SIZE = 1024 * 1024


class ChangeDetector:
    """Decides whether two files differ by size, then by content digest."""

    def __init__(
        self,
        logger: SyncLogger,
        algorithm: str = "md5",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.logger = logger
        self.algorithm = algorithm
        self.chunk_size = chunk_size

    def differs(self, file_a: Path, file_b: Path) -> bool:
        """
        Return True when the files are not content-equal.

        Files of different sizes differ without being read. Any I/O error
        while sizing or hashing also counts as a difference, so an
        unreadable pair is recopied rather than silently skipped.
        """
        try:
            if os.path.getsize(file_a) != os.path.getsize(file_b):
                return True
            return self.digest(file_a) != self.digest(file_b)
        except OSError as e:
            self.logger.error(
                f"Error comparing files {file_a} and {file_b}: {e}",
                source=str(file_a),
                replica=str(file_b),
            )
            return True

    def digest(self, path: Path) -> bytes:
        """Stream a file through the configured hash."""
        hasher = hashlib.new(self.algorithm, usedforsecurity=False)
        with open(path, "rb") as f:
            while chunk := f.read(self.chunk_size):
                hasher.update(chunk)
        return hasher.digest()
