"""Data models for brewsync.

This module exports the core data structures used throughout the application.
"""

from brewsync.models.config import AUTO_MACHINE, DEFAULT_CATEGORIES, BrewsyncConfig, MachineConfig
from brewsync.models.ignore import GLOBAL_SCOPE, DeadIgnoreEntry, IgnoreFile, IgnoreScope
from brewsync.models.package import (
    InvalidPackageIdError,
    PackageCategory,
    PackageRecord,
    PackageSet,
    make_key,
    split_key,
)

__all__ = [
    "AUTO_MACHINE",
    "DEFAULT_CATEGORIES",
    "GLOBAL_SCOPE",
    "BrewsyncConfig",
    "DeadIgnoreEntry",
    "IgnoreFile",
    "IgnoreScope",
    "InvalidPackageIdError",
    "MachineConfig",
    "PackageCategory",
    "PackageRecord",
    "PackageSet",
    "make_key",
    "split_key",
]
