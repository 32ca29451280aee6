"""
Utilities package for lockfile-audit.

This package contains console output helpers, the report output sink and
error handling.
"""

from .console import get_console, say, say_error
from .error_handling import format_and_print_error, handler_error_wrapper
from .output import OutputSink

__all__ = [
    # Console output
    'get_console',
    'say',
    'say_error',
    # Error handling
    'format_and_print_error',
    'handler_error_wrapper',
    # Report output
    'OutputSink',
]
