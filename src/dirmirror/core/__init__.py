"""
dirmirror Core - Configuration, logging, models and path safety.
"""

from dirmirror.core.config import DirMirrorConfig, LoggingConfig, SyncConfig
from dirmirror.core.logging import SyncLogger, get_logger, setup_logging
from dirmirror.core.models import PassOutcome, PassReport, SyncJob, SyncSummary
from dirmirror.core.safety import PreflightReport, create_path_preflight_checker

__all__ = [
    "DirMirrorConfig",
    "LoggingConfig",
    "SyncConfig",
    "SyncLogger",
    "get_logger",
    "setup_logging",
    "PassOutcome",
    "PassReport",
    "SyncJob",
    "SyncSummary",
    "PreflightReport",
    "create_path_preflight_checker",
]
