"""
Error handling utilities for lockfile-audit.

This module contains the standardized error reporting shared by all command
handlers: every fatal error is printed once, in red, on stderr, and then
re-raised so that main() can turn it into an exit status.
"""

import sys
import logging
import argparse
import functools
from typing import Callable

from .console import say, say_error
from ..exceptions import (
    LockfileAuditError,
    ValidationError,
    ConfigurationError,
    FormatNotFoundError,
    DatabaseError,
    UpdateFailedError,
    RequiredToolMissingError,
    ScanError,
    LockfileNotFoundError,
    LockfileParseError,
    OutputWriteError,
)

logger = logging.getLogger("lockfile-audit")


def format_and_print_error(error: Exception, handler_name: str, params: argparse.Namespace):
    """
    Prints a standardized error message for CLI users.

    Args:
        error: The exception that occurred
        handler_name: Name of the handler where the error occurred
        params: Command line parameters
    """
    command = getattr(params, 'command', 'unknown')
    error_message = getattr(error, 'message', str(error))
    error_details = getattr(error, 'details', {})

    if isinstance(error, FormatNotFoundError):
        say_error(error_message)
        if error.available:
            say(f"Available formats: {', '.join(error.available)}", stream=sys.stderr)

    elif isinstance(error, RequiredToolMissingError):
        say_error(error_message)

    elif isinstance(error, UpdateFailedError):
        say_error(error_message)

    elif isinstance(error, LockfileNotFoundError):
        say_error(error_message)
        say("Use --file to point at the lockfile explicitly.", stream=sys.stderr)

    elif isinstance(error, LockfileParseError):
        say_error(f"Invalid lockfile: {error_message}")

    elif isinstance(error, (ScanError, DatabaseError)):
        say_error(error_message)

    elif isinstance(error, OutputWriteError):
        say_error(error_message)

    elif isinstance(error, (ValidationError, ConfigurationError)):
        say_error(f"Invalid input or configuration: {error_message}")

    else:
        say_error(f"Error executing '{command}' command: {error_message}")

    # Show details in verbose mode
    if getattr(params, 'verbose', False) and error_details:
        for key, value in error_details.items():
            say(f"  {key}: {value}", stream=sys.stderr)


def handler_error_wrapper(handler_func: Callable) -> Callable:
    """
    A decorator that wraps handler functions with standardized error handling.

    The wrapper catches exceptions, prints a user-friendly error message and
    re-raises the exception for proper exit code handling in main().
    Unexpected exceptions are wrapped in a LockfileAuditError.

    Example:
        @handler_error_wrapper
        def handle_check(database, params):
            # Implementation without try/except blocks
            ...
    """
    @functools.wraps(handler_func)
    def wrapper(database, params):
        handler_name = handler_func.__name__
        try:
            command_name = getattr(params, 'command', 'unknown')
            logger.debug(f"Starting {handler_name} for command '{command_name}'")
            return handler_func(database, params)

        except LockfileAuditError as e:
            logger.debug(f"Expected error in {handler_name}: {type(e).__name__}: {e.message}")
            format_and_print_error(e, handler_name, params)
            raise

        except KeyboardInterrupt:
            raise

        except Exception as e:
            logger.error(f"Unexpected error in {handler_name}: {e}", exc_info=True)
            cli_error = LockfileAuditError(
                f"Failed to execute {getattr(params, 'command', 'command')}: {e}",
                details={"error": str(e), "handler": handler_name},
            )
            format_and_print_error(cli_error, handler_name, params)
            raise cli_error from e

    return wrapper
