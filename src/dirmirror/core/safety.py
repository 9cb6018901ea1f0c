"""
dirmirror path safety.

Preflight checks run at the start of every pass, before anything on disk
is created, copied or deleted. A replica that overlaps its source would
copy a tree into itself or prune the source away, so any failed check
aborts the pass.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from dirmirror.core.logging import get_logger

PreflightFunc = Callable[[dict[str, Any]], "PreflightCheck"]


@dataclass
class PreflightCheck:
    """Result of a single preflight check."""

    name: str
    passed: bool
    message: str
    severity: str = "info"  # info, warning, error
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class PreflightReport:
    """Complete preflight check report."""

    checks: list[PreflightCheck] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def has_errors(self) -> bool:
        return any(c.severity == "error" and not c.passed for c in self.checks)

    @property
    def failed(self) -> list[PreflightCheck]:
        return [c for c in self.checks if not c.passed]


class PreflightChecker:
    """Performs preflight checks before a pass."""

    def __init__(self) -> None:
        self._checks: list[tuple[str, PreflightFunc]] = []

    def add_check(self, name: str, check_func: PreflightFunc) -> None:
        """Add a preflight check function."""
        self._checks.append((name, check_func))

    def run_checks(self, context: dict[str, Any]) -> PreflightReport:
        """Run all preflight checks and return report."""
        report = PreflightReport()

        for name, check_func in self._checks:
            try:
                report.checks.append(check_func(context))
            except Exception as e:
                get_logger(__name__).warning("Preflight check raised", check=name, error=str(e))
                report.checks.append(
                    PreflightCheck(
                        name=name,
                        passed=False,
                        message=f"Check failed with error: {e}",
                        severity="error",
                    )
                )

        return report


def _comparable(path: Path | str, case_insensitive: bool) -> str:
    text = str(path)
    return text.casefold() if case_insensitive else text


def is_nested(child: Path | str, parent: Path | str, case_insensitive: bool = False) -> bool:
    """Check whether child lies below parent, on a separator boundary."""
    child_text = _comparable(child, case_insensitive)
    parent_text = _comparable(parent, case_insensitive)
    separators = [os.sep] + ([os.altsep] if os.altsep else [])
    # A root such as "/" already ends in a separator
    base = parent_text.rstrip("".join(separators))
    return any(child_text.startswith(base + sep) for sep in separators)


def check_distinct_roots(context: dict[str, Any]) -> PreflightCheck:
    """Check that source and replica are different directories."""
    source = context["source"]
    replica = context["replica"]
    case_insensitive = context.get("case_insensitive", False)

    if _comparable(source, case_insensitive) == _comparable(replica, case_insensitive):
        return PreflightCheck(
            name="Distinct Roots",
            passed=False,
            message=f"Source and replica directories cannot be the same: {source}",
            severity="error",
        )
    return PreflightCheck(name="Distinct Roots", passed=True, message="Roots differ")


def check_replica_not_nested(context: dict[str, Any]) -> PreflightCheck:
    """Check that the replica is not inside the source tree."""
    if is_nested(context["replica"], context["source"], context.get("case_insensitive", False)):
        return PreflightCheck(
            name="Replica Placement",
            passed=False,
            message="Replica directory cannot be a subdirectory of source directory",
            severity="error",
            details={"source": str(context["source"]), "replica": str(context["replica"])},
        )
    return PreflightCheck(
        name="Replica Placement", passed=True, message="Replica is outside the source tree"
    )


def check_source_not_nested(context: dict[str, Any]) -> PreflightCheck:
    """Check that the source is not inside the replica tree."""
    if is_nested(context["source"], context["replica"], context.get("case_insensitive", False)):
        return PreflightCheck(
            name="Source Placement",
            passed=False,
            message="Source directory cannot be a subdirectory of replica directory",
            severity="error",
            details={"source": str(context["source"]), "replica": str(context["replica"])},
        )
    return PreflightCheck(
        name="Source Placement", passed=True, message="Source is outside the replica tree"
    )


def check_source_exists(context: dict[str, Any]) -> PreflightCheck:
    """Check that the source directory exists."""
    source = Path(context["source"])
    if not source.is_dir():
        return PreflightCheck(
            name="Source Directory",
            passed=False,
            message=f"Source directory does not exist: {source}",
            severity="error",
        )
    return PreflightCheck(name="Source Directory", passed=True, message="Source directory found")


def create_path_preflight_checker() -> PreflightChecker:
    """Create a preflight checker with the path relationship checks."""
    checker = PreflightChecker()
    checker.add_check("Distinct Roots", check_distinct_roots)
    checker.add_check("Replica Placement", check_replica_not_nested)
    checker.add_check("Source Placement", check_source_not_nested)
    checker.add_check("Source Directory", check_source_exists)
    return checker
