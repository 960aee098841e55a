"""
Top-level CLI error handling.

Every exception escaping a CLI invocation ends up here exactly once and
is turned into a message on stderr plus an exit code.
"""

import logging
import sys
import traceback
from typing import IO, Optional

import click
import typer

from forgekit.domain.errors import ForgeError

logger = logging.getLogger(__name__)

USAGE_EXIT_CODE = 2


def handle_error(err: BaseException, debug: bool = False, stream: Optional[IO] = None) -> int:
    """
    Report ``err`` and return the exit code to use.

    - ForgeError: its message, its own exit code
    - click usage errors: terse message plus a --help hint, exit 2
    - anything else: its message, exit 1

    Full tracebacks are only printed with --debug.
    """
    stream = stream or sys.stderr

    if isinstance(err, (click.exceptions.Exit, typer.Exit)):
        return err.exit_code

    if isinstance(err, click.UsageError):
        message = err.format_message()
        stream.write(f"ERROR: {message}\n")
        stream.write("Try 'forge --help' for more information.\n")
        return USAGE_EXIT_CODE

    if isinstance(err, (click.Abort, typer.Abort, KeyboardInterrupt)):
        stream.write("Aborted!\n")
        return 130

    if isinstance(err, ForgeError):
        exit_code = err.exit_code
    elif isinstance(err, click.ClickException):
        exit_code = err.exit_code
    else:
        exit_code = 1

    message = err.format_message() if isinstance(err, click.ClickException) else (str(err) or type(err).__name__)
    logger.debug("Unhandled %s (exit %d)", type(err).__name__, exit_code)

    stream.write(f"ERROR: {message}\n")
    if debug:
        stream.write("\nStack trace:\n")
        stream.write("".join(traceback.format_exception(type(err), err, err.__traceback__)))

    return exit_code
