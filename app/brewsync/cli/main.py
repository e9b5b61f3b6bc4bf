"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from brewsync import __version__
from brewsync.cli.commands import config, diff, doctor, fmt, ignore, status
from brewsync.cli.commands import list as list_cmd
from brewsync.utils.formatting import configure_logging

# Create main Typer app
app = typer.Typer(
    name="brewsync",
    help="Keep Homebrew manifests in sync across machines.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"brewsync version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging on stderr.",
        ),
    ] = False,
) -> None:
    """brewsync - Keep Homebrew manifests in sync across machines.

    Compare the Brewfile-style manifests of your machines, and decide per
    machine which categories and packages never sync.
    """
    configure_logging(verbose)
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Register commands
app.command("diff")(diff.diff_command)
app.command("list")(list_cmd.list_command)
app.command("fmt")(fmt.fmt_command)
app.command("status")(status.status_command)
app.command("doctor")(doctor.doctor_command)
app.add_typer(ignore.app, name="ignore")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
