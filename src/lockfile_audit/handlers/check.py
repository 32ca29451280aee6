# lockfile_audit/handlers/check.py

import os
import argparse

from ..database import Database
from ..formats import load_format
from ..scanner import Report, Scanner
from ..utilities.error_handling import handler_error_wrapper
from ..utilities.output import OutputSink
from .update import run_update

from . import logger


@handler_error_wrapper
def handle_check(database: Database, params: argparse.Namespace) -> Report:
    """
    Handler for the 'check' command.
    Scans the project's lockfile and prints the report in the selected format.

    Args:
        database: The advisory database
        params: Command line parameters

    Returns:
        Report: The scan report; main() derives the exit code from it

    Raises:
        FormatNotFoundError: If --format names an unknown format (before any other work)
        UpdateFailedError, RequiredToolMissingError: If --update was given and the update failed
        ScanError: If the lockfile is missing or malformed
        OutputWriteError: If --output cannot be written
    """
    quiet = getattr(params, "quiet", False)
    verbose = getattr(params, "verbose", False)

    format_cls = load_format(params.format)
    report_format = format_cls(quiet=quiet, verbose=verbose)
    logger.debug(f"Using report format '{params.format}' ({format_cls.__name__})")

    if getattr(params, "update", False):
        run_update(database, quiet=quiet)

    scanner = Scanner(root=os.getcwd(), lockfile=getattr(params, "file", None), database=database)
    ignore = getattr(params, "ignore", None) or []
    report = scanner.report(ignore=ignore)
    logger.info(f"Scanned {len(report.packages)} packages from {report.lockfile}: {len(report)} findings")

    with OutputSink(getattr(params, "output", None)) as output:
        report_format.print_report(report, output)

    return report
