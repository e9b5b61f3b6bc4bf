"""Config commands implementation.

Shows where config.toml lives, prints its effective content, and adds
machines to it.
"""

import json
from typing import Annotated

import typer

from brewsync.cli.types import require_context
from brewsync.core.config import ConfigError, add_machine, format_config
from brewsync.models.config import MachineConfig
from brewsync.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and edit the brewsync configuration.",
    no_args_is_help=True,
)


@app.command("path")
def show_path() -> None:
    """Print the config file path."""
    context = require_context()
    console.print(str(context.config_path), markup=False, highlight=False, soft_wrap=True)


@app.command("show")
def show_config(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Print the effective configuration.

    Without a config file the built-in defaults are shown.

    Examples:
        brewsync config show              # TOML, as stored on disk
        brewsync config show --json       # JSON for scripting
    """
    context = require_context()
    if json_output:
        data = context.config.model_dump(mode="json")
        data["resolved_machine"] = context.machine
        console.print_json(json.dumps(data))
        return

    if not context.config_path.exists():
        print_info(f"No config file, showing defaults: {context.config_path}")
    console.print(format_config(context.config), markup=False, highlight=False, end="")
    console.print(f"\nCurrent machine: {context.machine or 'not detected'}", markup=False)


@app.command("add-machine")
def add_machine_command(
    name: Annotated[str, typer.Argument(help="Short machine id, e.g. mini.")],
    hostname: Annotated[
        str,
        typer.Option(
            "--hostname",
            help="Hostname used to detect this machine.",
        ),
    ] = "",
    brewfile: Annotated[
        str | None,
        typer.Option(
            "--brewfile",
            help="Manifest path (default: ~/dotfiles/_brew_<name>/Brewfile).",
        ),
    ] = None,
    description: Annotated[
        str | None,
        typer.Option(
            "--description",
            help="Free-text description of the machine.",
        ),
    ] = None,
) -> None:
    """Add a machine to config.toml.

    Examples:
        brewsync config add-machine mini --hostname Mac-Mini
        brewsync config add-machine air --brewfile ~/dotfiles/Brewfile.air
    """
    context = require_context()
    machine = MachineConfig(
        hostname=hostname,
        brewfile=brewfile or f"~/dotfiles/_brew_{name}/Brewfile",
        description=description,
    )
    try:
        path = add_machine(name, machine, context.config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Added machine '{name}': {path}")
