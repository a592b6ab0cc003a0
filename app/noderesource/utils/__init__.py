"""Utility modules for noderesource.

This module exports commonly used utility functions.
"""

from noderesource.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
)
from noderesource.utils.shell import CommandResult, host_command, run_command

__all__ = [
    "CommandResult",
    "console",
    "err_console",
    "host_command",
    "print_error",
    "print_info",
    "print_success",
    "run_command",
]
