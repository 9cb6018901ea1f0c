"""
dirmirror sync coordinator.

Runs one full pass (mirror, then prune) for a source/replica pair and
guarantees that passes never overlap.
"""

from __future__ import annotations

import threading
import traceback
from datetime import datetime

from dirmirror.core.config import SyncConfig
from dirmirror.core.logging import SyncLogger
from dirmirror.core.models import PassOutcome, PassReport, SyncJob
from dirmirror.core.safety import PreflightChecker, create_path_preflight_checker
from dirmirror.sync.detector import ChangeDetector
from dirmirror.sync.mirror import TreeMirror
from dirmirror.sync.pruner import TreePruner


class SyncAbortedException(Exception):
    """Raised inside a pass when it cannot safely continue."""


class SyncGuard:
    """Single-flight permit: acquiring never waits."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @property
    def busy(self) -> bool:
        return self._lock.locked()


class SyncCoordinator:
    """Validates a job and runs mirror-then-prune passes over it."""

    def __init__(
        self,
        job: SyncJob,
        logger: SyncLogger,
        config: SyncConfig | None = None,
        guard: SyncGuard | None = None,
        checker: PreflightChecker | None = None,
    ) -> None:
        self.job = job
        self.logger = logger
        self.config = config or SyncConfig()
        self.guard = guard or SyncGuard()
        self.checker = checker or create_path_preflight_checker()
        self.detector = ChangeDetector(
            logger,
            algorithm=self.config.hash_algorithm,
            chunk_size=self.config.chunk_size,
        )
        self.tree_mirror = TreeMirror(self.detector, logger)
        self.tree_pruner = TreePruner(logger)

    def run(self) -> PassReport | None:
        """
        Run one pass unless another is already in progress.

        Returns None when the pass was skipped. Never raises: failures are
        logged and reflected in the report's outcome.
        """
        if not self.guard.try_acquire():
            self.logger.warning(
                "Synchronization skipped: previous synchronization still in progress"
            )
            return None

        report = PassReport(
            source=str(self.job.source),
            replica=str(self.job.replica),
            started_at=datetime.now(),
        )
        try:
            self._run_pass(report)
            report.outcome = PassOutcome.COMPLETED
        except SyncAbortedException as e:
            report.outcome = PassOutcome.ABORTED
            report.errors.append(str(e))
        except Exception as e:
            report.outcome = PassOutcome.FAILED
            report.errors.append(str(e))
            self.logger.error(
                f"ERROR: Synchronization failed: {e}",
                traceback=traceback.format_exc(),
            )
        finally:
            report.ended_at = datetime.now()
            self.guard.release()

        return report

    def _run_pass(self, report: PassReport) -> None:
        source = self.job.source
        replica = self.job.replica

        report.preflight = self.checker.run_checks(
            {
                "source": source,
                "replica": replica,
                "case_insensitive": self.config.paths_case_insensitive,
            }
        )
        if report.preflight.has_errors:
            failed = report.preflight.failed
            for check in failed:
                self.logger.error(f"ERROR: {check.message}", check=check.name)
            raise SyncAbortedException(failed[0].message)

        if not replica.is_dir():
            self.logger.info(f"Creating replica directory: {replica}")
            try:
                replica.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                message = f"Failed to create replica directory {replica}: {e}"
                self.logger.error(f"ERROR: {message}")
                raise SyncAbortedException(message) from e

        self.logger.info(f"Starting synchronization from {source} to {replica}")

        self.tree_mirror.mirror(source, replica, report.summary)
        self.tree_pruner.prune(source, replica, report.summary)

        self.logger.info("Synchronization completed", **report.summary.to_dict())
