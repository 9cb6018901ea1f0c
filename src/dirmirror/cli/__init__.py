"""
dirmirror CLI Module.

Provides the command-line interface for running mirror passes.
"""

from dirmirror.cli.main import main, cli

__all__ = ["main", "cli"]
