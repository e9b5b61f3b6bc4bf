"""Diff command implementation.

Compares another machine's manifest with the current machine's manifest
and shows what a sync would install or remove.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from brewsync.cli.types import (
    load_packages,
    parse_categories,
    require_context,
    require_current_machine,
    require_manifest_path,
)
from brewsync.core.categories import canonical_order
from brewsync.core.diff import DiffResult, diff_by_type
from brewsync.core.parser import ManifestNotFoundError, parse_file
from brewsync.models.package import PackageCategory, PackageRecord, PackageSet
from brewsync.utils.formatting import (
    console,
    create_package_table,
    format_package_row,
    print_error,
    print_success,
    print_warning,
)


def _add_records(
    table: Table,
    records: dict[PackageCategory, list[PackageRecord]],
    marker: str,
    style: str,
) -> None:
    """Add grouped records to the table in canonical category order."""
    for category in canonical_order():
        for record in sorted(records.get(category, []), key=lambda r: r.name):
            table.add_row(*format_package_row(record, marker=marker, style=style))


def _print_table(result: DiffResult, source: str, current: str) -> None:
    """Print additions and removals as a table plus a summary line."""
    table = create_package_table(title=f"{source} -> {current}")
    _add_records(table, result.additions_by_category(), "+", "added")
    _add_records(table, result.removals_by_category(), "-", "removed")
    console.print(table)
    console.print(f"\nSummary: {result.summary()}")


def _load_current(path: Path) -> PackageSet:
    """Parse the current manifest, treating a missing file as empty."""
    try:
        return parse_file(path)
    except ManifestNotFoundError:
        print_warning(f"Current manifest not found, assuming empty: {path}")
        return PackageSet()


def diff_command(
    source: Annotated[
        str | None,
        typer.Argument(help="Machine to compare against (default: default_source)."),
    ] = None,
    only: Annotated[
        str | None,
        typer.Option(
            "--only",
            "-o",
            help="Comma-separated categories to compare, e.g. brew,cask.",
        ),
    ] = None,
    no_ignore: Annotated[
        bool,
        typer.Option(
            "--no-ignore",
            help="Show ignored and machine-specific packages too.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Compare another machine's manifest with this machine's.

    Additions are packages the source machine has and this one lacks;
    removals are packages only this machine has. Ignored categories,
    ignored packages and machine-specific packages are left out unless
    --no-ignore is given.

    Examples:
        brewsync diff mini                 # Compare mini -> this machine
        brewsync diff --only brew,cask     # Only formulae and casks
        brewsync diff mini --json          # JSON output for scripting
    """
    context = require_context()
    categories = parse_categories(only)
    current = require_current_machine(context)

    source = source or context.config.default_source
    if not source:
        print_error("No source machine given and no default_source configured.")
        raise typer.Exit(code=1)
    if source == current:
        print_error("Cannot diff a machine with itself.")
        raise typer.Exit(code=1)

    source_packages = load_packages(require_manifest_path(context, source))
    current_packages = _load_current(require_manifest_path(context, current))

    selected = categories or context.config.default_categories
    result = diff_by_type(source_packages, current_packages, selected)
    if not no_ignore:
        result = context.apply_exclusions(result)

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
        return

    if result.is_empty:
        print_success(f"No differences between {source} and {current}.")
        return

    _print_table(result, source, current)

