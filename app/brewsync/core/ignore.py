"""Ignore file I/O and mutation.

This module loads and saves ignore.toml and provides the load-modify-save
operations used to add or remove ignore entries. Concurrent mutations are
not coordinated: the last writer wins.

File layout::

    [global]
    categories = ["mas"]

    [global.packages]
    cask = ["bluestacks"]

    [machines.mini]
    categories = ["go"]
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import ValidationError

from brewsync.core.paths import get_ignore_path
from brewsync.models.ignore import IgnoreFile, IgnoreScope
from brewsync.models.package import InvalidPackageIdError, split_key

logger = logging.getLogger(__name__)

__all__ = [
    "IgnoreFileError",
    "IgnoreFileParseError",
    "IgnoreFileValidationError",
    "IgnoreStore",
    "InvalidPackageIdError",
    "load_ignore_file",
    "save_ignore_file",
]


class IgnoreFileError(Exception):
    """Base exception for ignore-file errors."""


class IgnoreFileParseError(IgnoreFileError):
    """Raised when the ignore file is not valid TOML."""


class IgnoreFileValidationError(IgnoreFileError):
    """Raised when the ignore file content does not match the schema."""


def load_ignore_file(path: Path | None = None) -> IgnoreFile:
    """Load the ignore file.

    A missing file is not an error: it loads as an empty IgnoreFile.

    Args:
        path: Path to the ignore file. If None, uses the default path.

    Returns:
        Validated IgnoreFile.

    Raises:
        IgnoreFileParseError: If the TOML syntax is invalid.
        IgnoreFileValidationError: If the content doesn't match the schema.
        IgnoreFileError: If the file cannot be read.
    """
    ignore_path = path or get_ignore_path()

    try:
        with open(ignore_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.debug("No ignore file at %s, using empty rules", ignore_path)
        return IgnoreFile()
    except tomllib.TOMLDecodeError as e:
        raise IgnoreFileParseError(f"Failed to parse ignore file {ignore_path}: {e}") from e
    except OSError as e:
        raise IgnoreFileError(f"Failed to read ignore file {ignore_path}: {e}") from e

    try:
        return IgnoreFile.model_validate(data)
    except ValidationError as e:
        raise IgnoreFileValidationError(f"Invalid ignore file {ignore_path}: {e}") from e


def save_ignore_file(ignore_file: IgnoreFile, path: Path | None = None) -> Path:
    """Save the ignore file atomically.

    Args:
        ignore_file: The rules to save.
        path: Destination. If None, uses the default path.

    Returns:
        Path where the ignore file was saved.

    Raises:
        IgnoreFileError: If the file cannot be written.
    """
    ignore_path = path or get_ignore_path()
    data = _ignore_file_to_dict(ignore_file)

    tmp_path: Path | None = None
    try:
        ignore_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=ignore_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(ignore_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise IgnoreFileError(f"Failed to write ignore file {ignore_path}: {e}") from e

    return ignore_path


def _ignore_file_to_dict(ignore_file: IgnoreFile) -> dict[str, Any]:
    """Convert an IgnoreFile to a dictionary for TOML serialization.

    Empty package lists are dropped; package-level entries under an
    ignored category are kept.
    """
    return {
        "global": _scope_to_dict(ignore_file.global_),
        "machines": {
            machine: _scope_to_dict(scope)
            for machine, scope in sorted(ignore_file.machines.items())
        },
    }


def _scope_to_dict(scope: IgnoreScope) -> dict[str, Any]:
    return {
        "categories": list(scope.categories),
        "packages": {
            category: list(names) for category, names in sorted(scope.packages.items()) if names
        },
    }


class IgnoreStore:
    """Load-modify-save access to one ignore file.

    Every mutation reads the file, applies the change and writes it back,
    so separate calls never work on stale data within one process.

    Attributes:
        path: The ignore file this store reads and writes.
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize IgnoreStore.

        Args:
            path: Optional override for the ignore file path.
                  Default: ~/.config/brewsync/ignore.toml
        """
        self.path = path or get_ignore_path()

    def load(self) -> IgnoreFile:
        """Load the current rules."""
        return load_ignore_file(self.path)

    def save(self, ignore_file: IgnoreFile) -> Path:
        """Save rules to this store's path."""
        return save_ignore_file(ignore_file, self.path)

    def add_category_ignore(self, machine: str, category: str, global_: bool = False) -> bool:
        """Ignore a whole category globally or for one machine.

        Returns:
            True if the file changed, False if the entry already existed.
        """
        ignore_file = self.load()
        changed = ignore_file.add_category(category, machine=machine, global_=global_)
        self._finish(ignore_file, changed, "add category", category, machine, global_)
        return changed

    def remove_category_ignore(self, machine: str, category: str, global_: bool = False) -> bool:
        """Stop ignoring a category. A missing entry is a no-op.

        Returns:
            True if the file changed, False if there was nothing to remove.
        """
        ignore_file = self.load()
        changed = ignore_file.remove_category(category, machine=machine, global_=global_)
        self._finish(ignore_file, changed, "remove category", category, machine, global_)
        return changed

    def add_package_ignore(self, machine: str, package_id: str, global_: bool = False) -> bool:
        """Ignore one package given as 'category:name'.

        Returns:
            True if the file changed, False if the entry already existed.

        Raises:
            InvalidPackageIdError: If ``package_id`` is malformed.
        """
        split_key(package_id)
        ignore_file = self.load()
        changed = ignore_file.add_package(package_id, machine=machine, global_=global_)
        self._finish(ignore_file, changed, "add package", package_id, machine, global_)
        return changed

    def remove_package_ignore(self, machine: str, package_id: str, global_: bool = False) -> bool:
        """Stop ignoring one package. A missing entry is a no-op.

        Returns:
            True if the file changed, False if there was nothing to remove.

        Raises:
            InvalidPackageIdError: If ``package_id`` is malformed.
        """
        split_key(package_id)
        ignore_file = self.load()
        changed = ignore_file.remove_package(package_id, machine=machine, global_=global_)
        self._finish(ignore_file, changed, "remove package", package_id, machine, global_)
        return changed

    def clear(self, machine: str = "", global_: bool = False) -> bool:
        """Drop all rules of one scope, or every rule when no scope is given.

        Returns:
            True if the file changed, False if there was nothing to clear.
        """
        ignore_file = self.load()
        changed = ignore_file.clear_scope(machine=machine, global_=global_)
        target = "global" if global_ else machine or "all scopes"
        self._finish(ignore_file, changed, "clear", target, machine, global_)
        return changed

    def _finish(
        self,
        ignore_file: IgnoreFile,
        changed: bool,
        action: str,
        entry: str,
        machine: str,
        global_: bool,
    ) -> None:
        scope = "global" if global_ or not machine else machine
        if not changed:
            logger.debug("Ignore %s %s (%s): nothing to do", action, entry, scope)
            return
        self.save(ignore_file)
        logger.debug("Ignore %s %s (%s): saved %s", action, entry, scope, self.path)
