"""Shared types and utilities for CLI commands.

This module provides common helpers used across multiple CLI command
modules to avoid code duplication.
"""

from pathlib import Path

import typer

from brewsync.core.config import ConfigError, Context, load_context
from brewsync.core.ignore import IgnoreFileError
from brewsync.core.parser import ManifestError, parse_file
from brewsync.models.package import PackageCategory, PackageSet
from brewsync.utils.formatting import print_error, print_info


def require_context() -> Context:
    """Load the invocation context or exit with a helpful error message.

    Raises:
        typer.Exit: If the config or ignore file cannot be loaded.
    """
    try:
        return load_context()
    except (ConfigError, IgnoreFileError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def require_current_machine(context: Context) -> str:
    """Return the current machine id or exit if it is unknown."""
    if not context.machine:
        print_error("Current machine not detected.")
        print_info("Set current_machine in config.toml or the BREWSYNC_MACHINE variable.")
        raise typer.Exit(code=1)
    return context.machine


def require_manifest_path(context: Context, machine: str) -> Path:
    """Return a configured machine's manifest path or exit."""
    path = context.manifest_path(machine)
    if path is None:
        print_error(f"Machine '{machine}' not found in config.")
        raise typer.Exit(code=1)
    return path


def load_packages(path: Path) -> PackageSet:
    """Parse a manifest or exit with an error message."""
    try:
        return parse_file(path)
    except ManifestError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def parse_categories(value: str | None) -> list[PackageCategory]:
    """Parse a comma-separated category list such as "brew,cask".

    Returns:
        Selected categories; empty if ``value`` is None or blank.

    Raises:
        typer.BadParameter: If a token is not a known category.
    """
    if not value:
        return []
    try:
        return [PackageCategory.parse(token) for token in value.split(",") if token.strip()]
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
