# lockfile_audit/handlers/update.py

import argparse

from ..database import Database, UnavailableReason, UpdateStatus, git_present
from ..exceptions import RequiredToolMissingError, UpdateFailedError
from ..utilities.console import say
from ..utilities.error_handling import handler_error_wrapper

# Get logger from the handlers package
from . import logger


def run_update(database: Database, quiet: bool = False) -> bool:
    """
    Update the advisory database and report the outcome.

    Args:
        database: The advisory database to update
        quiet: Suppress progress and success messages

    Returns:
        True if new advisories were fetched, False if the update was skipped

    Raises:
        UpdateFailedError: If the update was attempted and failed
        RequiredToolMissingError: If git is not installed
    """
    if not quiet:
        say("Updating advisory database ...")

    outcome = database.update(quiet=quiet)
    logger.debug(f"Advisory database update outcome: {outcome}")

    updated = False
    if outcome.status is UpdateStatus.UPDATED:
        updated = True
        if not quiet:
            say("Updated advisory database", style="green")

    elif outcome.status is UpdateStatus.FAILED:
        details = {"path": database.path}
        if outcome.detail:
            details["error"] = outcome.detail
        raise UpdateFailedError("Failed updating advisory database!", details=details)

    elif outcome.reason is UnavailableReason.TOOL_MISSING or not git_present():
        raise RequiredToolMissingError("Git", "Git is not installed!")

    else:
        logger.debug(f"Update skipped: {outcome.reason}")
        say("Skipping update", style="yellow")

    if not quiet:
        say(f"advisory database: {database.size()} advisories")
    return updated


@handler_error_wrapper
def handle_update(database: Database, params: argparse.Namespace) -> bool:
    """
    Handler for the 'update' command.

    Args:
        database: The advisory database
        params: Command line parameters

    Returns:
        True if new advisories were fetched, False if the update was skipped
    """
    return run_update(database, quiet=getattr(params, "quiet", False))
