# lockfile_audit/formats/base.py

from abc import ABC, abstractmethod
from typing import IO

from ..scanner import Report


class ReportFormat(ABC):
    """
    A way of rendering a scan report.

    Subclasses set ``name`` (the identifier passed to ``--format``) and
    implement ``print_report``. They are made available with
    ``register_format`` or through the ``lockfile_audit.formats`` entry-point
    group.

    Args:
        quiet: Suppress informational lines that are not part of the findings
        verbose: Include advisory descriptions
    """

    name: str = ""
    description: str = ""

    def __init__(self, quiet: bool = False, verbose: bool = False):
        self.quiet = quiet
        self.verbose = verbose

    @abstractmethod
    def print_report(self, report: Report, output: IO[str]) -> None:
        """Write ``report`` to the ``output`` stream."""
