"""List command implementation.

Shows the entries of a machine's manifest.
"""

import json
from typing import Annotated

import typer

from brewsync.cli.types import (
    load_packages,
    parse_categories,
    require_context,
    require_current_machine,
    require_manifest_path,
)
from brewsync.core.categories import canonical_order
from brewsync.utils.formatting import (
    console,
    create_package_table,
    format_package_row,
    print_info,
)


def list_command(
    machine: Annotated[
        str | None,
        typer.Argument(help="Machine whose manifest to list (default: current machine)."),
    ] = None,
    only: Annotated[
        str | None,
        typer.Option(
            "--only",
            "-o",
            help="Comma-separated categories to show, e.g. brew,cask.",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """List the packages in a machine's manifest.

    Examples:
        brewsync list                  # Current machine
        brewsync list mini --only cask # Casks on mini
    """
    context = require_context()
    categories = parse_categories(only)
    machine = machine or require_current_machine(context)

    packages = load_packages(require_manifest_path(context, machine)).filter(categories)

    if json_output:
        grouped = packages.by_category()
        data = {
            category.value: [
                {
                    "name": record.name,
                    "description": record.description,
                    "options": dict(record.options),
                }
                for record in sorted(grouped[category], key=lambda r: r.name)
            ]
            for category in canonical_order()
            if category in grouped
        }
        console.print_json(json.dumps(data))
        return

    if not packages:
        print_info(f"No packages in the manifest of {machine}.")
        return

    table = create_package_table(title=f"{machine} ({len(packages)} packages)")
    grouped = packages.by_category()
    for category in canonical_order():
        for record in sorted(grouped.get(category, []), key=lambda r: r.name):
            table.add_row(*format_package_row(record))
    console.print(table)
