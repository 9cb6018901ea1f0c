"""
dirmirror data models.

Transient structures describing a sync job and the outcome of a pass.
Nothing here outlives the process.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dirmirror.core.safety import PreflightReport


@dataclass(frozen=True)
class SyncJob:
    """The source/replica root pair a coordinator mirrors."""

    source: Path
    replica: Path

    @classmethod
    def from_paths(cls, source: str | Path, replica: str | Path) -> SyncJob:
        """Build a job from user-supplied paths, normalized to absolute form."""
        if not str(source).strip():
            raise ValueError("Source directory cannot be empty")
        if not str(replica).strip():
            raise ValueError("Replica directory cannot be empty")
        return cls(
            source=Path(os.path.abspath(os.path.expanduser(source))),
            replica=Path(os.path.abspath(os.path.expanduser(replica))),
        )


class PassOutcome(Enum):
    """How a pass ended."""

    COMPLETED = auto()
    ABORTED = auto()  # Preflight or replica root creation failed
    FAILED = auto()  # Unexpected error inside the pass


@dataclass
class SyncSummary:
    """Counters accumulated over one pass."""

    files_new: int = 0
    files_modified: int = 0
    bytes_copied: int = 0
    dirs_created: int = 0
    files_deleted: int = 0
    dirs_deleted: int = 0
    errors: int = 0

    @property
    def files_copied(self) -> int:
        return self.files_new + self.files_modified

    @property
    def changes(self) -> int:
        return self.files_copied + self.dirs_created + self.files_deleted + self.dirs_deleted

    def to_dict(self) -> dict[str, int]:
        return {
            "files_new": self.files_new,
            "files_modified": self.files_modified,
            "bytes_copied": self.bytes_copied,
            "dirs_created": self.dirs_created,
            "files_deleted": self.files_deleted,
            "dirs_deleted": self.dirs_deleted,
            "errors": self.errors,
        }


@dataclass
class PassReport:
    """Result of one coordinator pass."""

    source: str
    replica: str
    started_at: datetime
    ended_at: datetime | None = None
    outcome: PassOutcome = PassOutcome.COMPLETED
    summary: SyncSummary = field(default_factory=SyncSummary)
    errors: list[str] = field(default_factory=list)
    preflight: PreflightReport | None = None

    @property
    def duration_seconds(self) -> float | None:
        if self.ended_at:
            return (self.ended_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "replica": self.replica,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_seconds": self.duration_seconds,
            "outcome": self.outcome.name,
            "summary": self.summary.to_dict(),
            "errors": self.errors,
            "preflight": [
                {
                    "name": check.name,
                    "passed": check.passed,
                    "message": check.message,
                    "severity": check.severity,
                }
                for check in (self.preflight.checks if self.preflight else [])
            ],
        }
