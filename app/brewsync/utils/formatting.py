"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from brewsync.core.theme import get_theme

if TYPE_CHECKING:
    from brewsync.models.package import PackageRecord


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def configure_logging(verbose: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log at DEBUG level instead of WARNING.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def create_package_table(title: str = "Packages") -> Table:
    """Create a pre-configured table for displaying manifest entries.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for package display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Category", style="category", width=12)
    table.add_column("Package", no_wrap=True)
    table.add_column("Description", style="text", overflow="ellipsis")
    return table


def format_package_row(
    record: PackageRecord,
    marker: str = "",
    style: str = "text",
) -> tuple[str, ...]:
    """Format a record as a package table row.

    Args:
        record: The record to format.
        marker: Short status marker such as "+" or "-".
        style: Theme style applied to the marker and name.

    Returns:
        Tuple of (marker, category, name, description) with Rich markup.
    """
    return (
        f"[{style}]{marker}[/]",
        record.category.value,
        f"[{style}]{escape(record.label)}[/]",
        escape(record.description) if record.description else "[muted]-[/]",
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
