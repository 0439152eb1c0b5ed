"""Utility modules for clew.

This module exports commonly used utility functions.
"""

from clew.utils.formatting import (
    console,
    create_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from clew.utils.shell import (
    CommandResult,
    CommandRunner,
    SubprocessRunner,
    command_exists,
    run_command,
)

__all__ = [
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    "command_exists",
    "console",
    "create_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
