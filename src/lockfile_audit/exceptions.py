# lockfile_audit/exceptions.py

from typing import Any, Dict, Optional


class LockfileAuditError(Exception):
    """Base class for all errors raised by lockfile-audit."""

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ValidationError(LockfileAuditError):
    """Invalid command-line arguments or input."""


class ConfigurationError(LockfileAuditError):
    """Invalid configuration (environment variables, paths)."""


class FormatNotFoundError(LockfileAuditError):
    """The requested report format is not registered."""

    def __init__(self, format_name: str, available: Optional[list] = None):
        self.format_name = format_name
        self.available = list(available or [])
        super().__init__(
            f"Unknown format: {format_name}",
            code="unknown_format",
            details={"format": format_name, "available": ", ".join(self.available)},
        )


# --- Advisory database ---

class DatabaseError(LockfileAuditError):
    """Problems reading or updating the advisory database."""


class UpdateFailedError(DatabaseError):
    """The advisory database update was attempted and did not succeed."""


class RequiredToolMissingError(DatabaseError):
    """The update mechanism cannot run because a required tool is absent."""

    def __init__(self, tool: str, message: Optional[str] = None):
        self.tool = tool
        super().__init__(message or f"{tool} is not installed!", code="tool_missing", details={"tool": tool})


class AdvisoryParseError(DatabaseError):
    """An advisory file could not be parsed."""


# --- Scanning ---

class ScanError(LockfileAuditError):
    """The lockfile could not be scanned."""


class LockfileNotFoundError(ScanError):
    """No lockfile was found at the given or default location."""


class LockfileParseError(ScanError):
    """The lockfile is malformed."""


# --- Output ---

class OutputWriteError(LockfileAuditError):
    """The report could not be written to the requested output file."""
