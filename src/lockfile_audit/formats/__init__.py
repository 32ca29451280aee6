"""
Report formats for lockfile-audit.

Importing this package registers the built-in formats: text, json, sarif and
cyclonedx.
"""

from .base import ReportFormat
from .registry import (
    ENTRY_POINT_GROUP,
    FORMATS,
    available_formats,
    load_format,
    load_plugins,
    register_format,
)

# Built-in formats register themselves on import
from . import text, json_format, sarif, cyclonedx  # noqa: E402,F401

__all__ = [
    'ReportFormat',
    'ENTRY_POINT_GROUP',
    'FORMATS',
    'available_formats',
    'load_format',
    'load_plugins',
    'register_format',
]
