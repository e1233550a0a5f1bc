"""Utility modules for wsclean.

This module exports commonly used utility functions.
"""

from wsclean.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_log_line,
    print_success,
    print_warning,
)
from wsclean.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "print_error",
    "print_info",
    "print_log_line",
    "print_success",
    "print_warning",
    "run_command",
]
