"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes across all CLI tools.
Exit codes follow the BSD sysexits convention.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Exit codes for CLI tools (sysexits.h values)."""
    SUCCESS = 0     # EX_OK
    USAGE = 64      # EX_USAGE: missing or invalid command-line flags
    DATA_ERROR = 65  # EX_DATAERR: any assembly error, unreadable input
    SOFTWARE = 70   # EX_SOFTWARE: unexpected internal error


class SysexitsCommand(click.Command):
    """
    click.Command that reports usage errors with EX_USAGE.

    click's own usage errors exit with status 2; tools in this package
    use 64 instead.
    """

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = ExitCode.USAGE
            raise


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for all CLI tools.

    Formats the error message, optionally prints a traceback in verbose
    mode, and exits with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Assembly")

    Raises:
        SystemExit: Always
    """
    from dwarf_sdk.errors import AssemblerError, DwarfError

    if isinstance(error, AssemblerError):
        # Already formatted as "file:line:col: error: ..."
        click.echo(str(error), err=True)
        sys.exit(ExitCode.DATA_ERROR)

    elif isinstance(error, DwarfError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.DATA_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.USAGE)

    elif isinstance(error, OSError):
        # Unwritable output file and the like
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.DATA_ERROR)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.SOFTWARE)
