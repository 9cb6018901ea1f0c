"""
dirmirror sync module.

Provides the one-way mirror engine and its periodic trigger.
"""

from dirmirror.sync.coordinator import SyncCoordinator, SyncGuard
from dirmirror.sync.detector import ChangeDetector
from dirmirror.sync.mirror import TreeMirror
from dirmirror.sync.pruner import TreePruner
from dirmirror.sync.scheduler import PeriodicScheduler

__all__ = [
    "SyncCoordinator",
    "SyncGuard",
    "ChangeDetector",
    "TreeMirror",
    "TreePruner",
    "PeriodicScheduler",
]
