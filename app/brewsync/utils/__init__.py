"""Utility modules for brewsync.

This module exports commonly used utility functions.
"""

from brewsync.utils.formatting import (
    configure_logging,
    console,
    create_package_table,
    err_console,
    format_package_row,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "configure_logging",
    "console",
    "create_package_table",
    "err_console",
    "format_package_row",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
