"""Utility modules for DevFlow."""

from devflow.utils.console import (
    console,
    err_console,
    print_banner,
    print_error,
    print_info,
    print_panel,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "err_console",
    "print_banner",
    "print_error",
    "print_info",
    "print_panel",
    "print_success",
    "print_warning",
]
