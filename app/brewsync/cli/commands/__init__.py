"""CLI commands for brewsync.

This package contains all subcommand implementations.
"""

from brewsync.cli.commands import config, diff, doctor, fmt, ignore, list, status

__all__ = ["config", "diff", "doctor", "fmt", "ignore", "list", "status"]
