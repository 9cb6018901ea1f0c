"""
dirmirror - One-way directory mirroring on a fixed interval.

Keeps a replica directory tree identical to a source tree: new and
changed files are copied, entries missing from the source are removed,
and individual failures never abort a whole pass.
"""

__version__ = "1.0.0"
__author__ = "dirmirror developers"

from dirmirror.core.config import DirMirrorConfig
from dirmirror.sync.coordinator import SyncCoordinator

__all__ = ["DirMirrorConfig", "SyncCoordinator", "__version__"]
