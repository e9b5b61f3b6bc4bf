"""Ignore commands implementation.

Manages ignore.toml: whole categories or single packages excluded from
diffs, either globally or for one machine.
"""

from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from brewsync.cli.types import require_context
from brewsync.core.config import Context
from brewsync.core.ignore import IgnoreFileError, IgnoreStore, InvalidPackageIdError
from brewsync.models.ignore import GLOBAL_SCOPE, IgnoreScope
from brewsync.models.package import PackageCategory
from brewsync.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage ignored categories and packages.",
    no_args_is_help=True,
)

category_app = typer.Typer(
    help="Ignore or un-ignore whole categories.",
    no_args_is_help=True,
)
app.add_typer(category_app, name="category")

MachineOption = Annotated[
    str | None,
    typer.Option(
        "--machine",
        "-m",
        help="Machine scope (default: current machine, else global).",
    ),
]
GlobalOption = Annotated[
    bool,
    typer.Option(
        "--global",
        "-g",
        help="Apply to every machine.",
    ),
]


def _resolve_scope(context: Context, machine: str | None, global_: bool) -> str:
    """Return the target machine id, or "" for the global scope."""
    if machine and global_:
        print_error("Use either --machine or --global, not both.")
        raise typer.Exit(code=1)
    if global_:
        return ""
    return machine or context.machine or ""


def _scope_label(machine: str) -> str:
    return machine or GLOBAL_SCOPE


def _validate_category(category: str) -> str:
    try:
        return PackageCategory.parse(category).value
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _report(changed: bool, done: str, noop: str) -> None:
    if changed:
        print_success(done)
    else:
        print_info(noop)


@app.command("add")
def add_package(
    key: Annotated[str, typer.Argument(help="Package as 'category:name', e.g. cask:zoom.")],
    machine: MachineOption = None,
    global_: GlobalOption = False,
) -> None:
    """Ignore a single package."""
    context = require_context()
    target = _resolve_scope(context, machine, global_)
    store = IgnoreStore(context.ignore_path)
    try:
        changed = store.add_package_ignore(target, key)
    except (InvalidPackageIdError, IgnoreFileError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    scope = _scope_label(target)
    _report(changed, f"Ignoring {key} ({scope}).", f"{key} is already ignored ({scope}).")


@app.command("remove")
def remove_package(
    key: Annotated[str, typer.Argument(help="Package as 'category:name'.")],
    machine: MachineOption = None,
    global_: GlobalOption = False,
) -> None:
    """Stop ignoring a single package."""
    context = require_context()
    target = _resolve_scope(context, machine, global_)
    store = IgnoreStore(context.ignore_path)
    try:
        changed = store.remove_package_ignore(target, key)
    except (InvalidPackageIdError, IgnoreFileError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    scope = _scope_label(target)
    _report(changed, f"No longer ignoring {key} ({scope}).", f"{key} was not ignored ({scope}).")


@category_app.command("add")
def add_category(
    category: Annotated[str, typer.Argument(help="Category to ignore, e.g. mas.")],
    machine: MachineOption = None,
    global_: GlobalOption = False,
) -> None:
    """Ignore a whole category."""
    token = _validate_category(category)
    context = require_context()
    target = _resolve_scope(context, machine, global_)
    try:
        changed = IgnoreStore(context.ignore_path).add_category_ignore(target, token)
    except IgnoreFileError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    scope = _scope_label(target)
    _report(
        changed,
        f"Ignoring category {token} ({scope}).",
        f"Category {token} is already ignored ({scope}).",
    )


@category_app.command("remove")
def remove_category(
    category: Annotated[str, typer.Argument(help="Category to stop ignoring.")],
    machine: MachineOption = None,
    global_: GlobalOption = False,
) -> None:
    """Stop ignoring a whole category."""
    token = _validate_category(category)
    context = require_context()
    target = _resolve_scope(context, machine, global_)
    try:
        changed = IgnoreStore(context.ignore_path).remove_category_ignore(target, token)
    except IgnoreFileError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    scope = _scope_label(target)
    _report(
        changed,
        f"No longer ignoring category {token} ({scope}).",
        f"Category {token} was not ignored ({scope}).",
    )


def _add_scope_rows(table: Table, label: str, scope: IgnoreScope) -> None:
    for category in scope.categories:
        table.add_row(label, category, "[muted](whole category)[/]")
    for category, names in sorted(scope.packages.items()):
        for name in sorted(names):
            table.add_row(label, category, escape(name))


@app.command("list")
def list_ignores(
    machine: Annotated[
        str | None,
        typer.Option(
            "--machine",
            "-m",
            help="Only show the global scope and this machine.",
        ),
    ] = None,
) -> None:
    """Show ignored categories and packages."""
    context = require_context()
    ignore = context.ignore

    scopes: list[tuple[str, IgnoreScope]] = [(GLOBAL_SCOPE, ignore.global_)]
    for machine_id, scope in sorted(ignore.machines.items()):
        if machine is None or machine_id == machine:
            scopes.append((machine_id, scope))

    if all(scope.is_empty for _, scope in scopes):
        print_info("Nothing is ignored.")
        return

    table = Table(
        title="Ignored",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Scope", style="info")
    table.add_column("Category", style="category")
    table.add_column("Package")
    for label, scope in scopes:
        _add_scope_rows(table, label, scope)
    console.print(table)


@app.command("clear")
def clear_ignores(
    machine: Annotated[
        str | None,
        typer.Option(
            "--machine",
            "-m",
            help="Only clear this machine's rules.",
        ),
    ] = None,
    global_: Annotated[
        bool,
        typer.Option(
            "--global",
            "-g",
            help="Only clear the global rules.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip the confirmation prompt.",
        ),
    ] = False,
) -> None:
    """Remove ignore rules: every scope by default, or just one.

    Examples:
        brewsync ignore clear              # Clear global and all machines
        brewsync ignore clear -m mini      # Only mini's rules
        brewsync ignore clear --global -y  # Only global rules, no prompt
    """
    if machine and global_:
        print_error("Use either --machine or --global, not both.")
        raise typer.Exit(code=1)
    context = require_context()
    target = GLOBAL_SCOPE if global_ else machine or "all scopes"

    if not yes and not typer.confirm(f"Clear ignore rules ({target})?", default=False):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    try:
        changed = IgnoreStore(context.ignore_path).clear(machine=machine or "", global_=global_)
    except IgnoreFileError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    _report(changed, f"Cleared ignore rules ({target}).", f"No ignore rules to clear ({target}).")
