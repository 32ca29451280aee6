# lockfile_audit/utilities/output.py

import logging
import sys
from typing import IO, Optional

from ..exceptions import OutputWriteError

logger = logging.getLogger("lockfile-audit")


class OutputSink:
    """
    Where a report is written: standard output, or a file opened for the report.

    The console sink is never closed. A file sink is opened by ``open()`` and
    closed exactly once by ``close()``; used as a context manager it is closed
    on every exit path, including rendering errors.

    Args:
        path: File to write the report to. None writes to standard output.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self.stream: Optional[IO[str]] = None
        self._closed = False

    @property
    def is_file(self) -> bool:
        return bool(self.path)

    def open(self) -> IO[str]:
        if self._closed:
            raise OutputWriteError(f"Output {self.path} is already closed", details={"path": self.path})
        if self.stream is not None:
            return self.stream
        if not self.is_file:
            self.stream = sys.stdout
            return self.stream
        try:
            self.stream = open(self.path, "w", encoding="utf-8")
        except OSError as e:
            raise OutputWriteError(f"Cannot open output file {self.path}: {e}", details={"path": self.path})
        logger.debug(f"Writing report to {self.path}")
        return self.stream

    def write(self, text: str) -> None:
        stream = self.open()
        try:
            stream.write(text)
        except (OSError, ValueError) as e:
            raise OutputWriteError(f"Failed to write report to {self.path or 'stdout'}: {e}", details={"path": self.path})

    def close(self) -> None:
        if not self.is_file or self.stream is None or self._closed:
            return
        self._closed = True
        try:
            self.stream.close()
        except OSError as e:
            raise OutputWriteError(f"Failed to write report to {self.path}: {e}", details={"path": self.path})

    def __enter__(self) -> IO[str]:
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        try:
            self.close()
        except OutputWriteError:
            # an error raised while rendering takes precedence
            if exc_type is None:
                raise
        if exc_type is not None and issubclass(exc_type, OSError) and self.is_file:
            raise OutputWriteError(f"Failed to write report to {self.path}: {exc}", details={"path": self.path}) from exc
        return False
