"""Utility modules for icloudy.

This module exports commonly used utility functions.
"""

from icloudy.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from icloudy.utils.shell import CommandResult, command_exists, probe_command, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "probe_command",
    "run_command",
]
