"""Status command implementation.

Summarizes the current machine: where its manifest lives, how many
packages it declares per category, and what a sync from the default
source would change.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from brewsync.cli.types import require_context, require_current_machine, require_manifest_path
from brewsync.core.categories import canonical_order
from brewsync.core.config import Context
from brewsync.core.diff import DiffResult, diff_by_type
from brewsync.core.parser import ManifestError, ManifestNotFoundError, parse_file
from brewsync.models.package import PackageSet
from brewsync.utils.formatting import console, print_error, print_success, print_warning


def _load_optional(path: Path) -> PackageSet | None:
    """Parse a manifest; None if it does not exist yet."""
    try:
        return parse_file(path)
    except ManifestNotFoundError:
        return None
    except ManifestError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _category_counts(packages: PackageSet) -> dict[str, int]:
    grouped = packages.by_category()
    return {c.value: len(grouped[c]) for c in canonical_order() if c in grouped}


def _format_counts(packages: PackageSet) -> str:
    counts = _category_counts(packages)
    if not counts:
        return "none"
    parts = ", ".join(f"{count} {category}" for category, count in counts.items())
    return f"{len(packages)} total ({parts})"


def _pending(context: Context, machine: str, current: PackageSet | None) -> DiffResult | None:
    """Diff the default source against this machine, with exclusions applied.

    Returns None when there is nothing meaningful to compare.
    """
    source = context.config.default_source
    if not source or source == machine or current is None:
        return None

    source_path = context.manifest_path(source)
    if source_path is None:
        print_warning(f"Source machine '{source}' not found in config.")
        return None
    source_packages = _load_optional(source_path)
    if source_packages is None:
        print_warning(f"Source manifest not found: {source_path}")
        return None

    result = diff_by_type(source_packages, current, context.config.default_categories)
    return context.apply_exclusions(result)


def _print_pending(result: DiffResult, source: str) -> None:
    if result.is_empty:
        print_success(f"In sync with {source}.")
        return

    parts: list[str] = []
    if result.additions:
        parts.append(f"[added]+{len(result.additions)} to install[/]")
    if result.removals:
        parts.append(f"[removed]-{len(result.removals)} to remove[/]")
    console.print(f"\n[bold_header]Pending from {escape(source)}:[/] {', '.join(parts)}")

    additions = result.additions_by_category()
    removals = result.removals_by_category()
    for category in canonical_order():
        changes: list[str] = []
        if category in additions:
            changes.append(f"[added]+{len(additions[category])}[/]")
        if category in removals:
            changes.append(f"[removed]-{len(removals[category])}[/]")
        if changes:
            console.print(f"  [category]{category.value}[/]: {' '.join(changes)}")


def status_command(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Show the current machine, its package counts and pending changes.

    Pending changes are what `brewsync diff` reports against the
    default source, after ignore rules and machine-specific packages.

    Examples:
        brewsync status                   # Overview of this machine
        brewsync status --json            # JSON output for scripting
    """
    context = require_context()
    machine = require_current_machine(context)
    path = require_manifest_path(context, machine)
    machine_config = context.config.machines[machine]
    source = context.config.default_source

    current = _load_optional(path)
    pending = _pending(context, machine, current)

    if json_output:
        data = {
            "machine": machine,
            "description": machine_config.description,
            "hostname": machine_config.hostname,
            "manifest": str(path),
            "source": source,
            "packages": _category_counts(current) if current is not None else None,
            "pending": pending.to_dict() if pending is not None else None,
        }
        console.print_json(json.dumps(data))
        return

    title = f"Status: {escape(machine)}"
    if machine_config.description:
        title += f" - {escape(machine_config.description)}"
    console.print(f"[bold_header]{title}[/]")
    if machine_config.hostname:
        console.print(f"  Hostname: {escape(machine_config.hostname)}")
    console.print(f"  Manifest: {escape(str(path))}")
    console.print(f"  Source:   {escape(source) if source else '[muted]not set[/]'}")
    if current is None:
        console.print("  Packages: [warning]manifest not found[/]")
    else:
        console.print(f"  Packages: {_format_counts(current)}")

    if pending is not None and source:
        _print_pending(pending, source)
