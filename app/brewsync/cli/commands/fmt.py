"""Fmt command implementation.

Rewrites a manifest in canonical form: categories in fixed order, names
sorted within each category, options sorted by key.
"""

from pathlib import Path
from typing import Annotated

import typer

from brewsync.cli.types import (
    load_packages,
    require_context,
    require_current_machine,
    require_manifest_path,
)
from brewsync.core.writer import ManifestWriteError, format_packages, write_manifest
from brewsync.utils.formatting import print_error, print_info, print_success, print_warning


def _resolve_path(machine: str | None, file: Path | None) -> Path:
    if file is not None:
        return file.expanduser()
    context = require_context()
    return require_manifest_path(context, machine or require_current_machine(context))


def fmt_command(
    machine: Annotated[
        str | None,
        typer.Argument(help="Machine whose manifest to format (default: current machine)."),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option(
            "--file",
            "-f",
            help="Format this manifest file instead of a machine's.",
        ),
    ] = None,
    check: Annotated[
        bool,
        typer.Option(
            "--check",
            help="Only check; exit with code 1 if the file is not canonical.",
        ),
    ] = False,
) -> None:
    """Rewrite a manifest in canonical form.

    Lines that do not declare a known category are dropped.

    Examples:
        brewsync fmt                       # Current machine
        brewsync fmt --file ./Brewfile     # Any manifest file
        brewsync fmt mini --check          # Verify only
    """
    if machine is not None and file is not None:
        print_error("Give either a machine or --file, not both.")
        raise typer.Exit(code=1)

    path = _resolve_path(machine, file)
    packages = load_packages(path)
    canonical = format_packages(packages)
    current = path.read_text(encoding="utf-8")

    if current == canonical:
        print_info(f"Already formatted: {path}")
        return

    if check:
        print_warning(f"Not formatted: {path}")
        raise typer.Exit(code=1)

    try:
        write_manifest(path, packages)
    except ManifestWriteError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Formatted {len(packages)} packages: {path}")
