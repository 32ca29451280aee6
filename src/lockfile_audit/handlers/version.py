# lockfile_audit/handlers/version.py

import argparse

from ..database import Database
from ..utilities.console import say
from ..utilities.error_handling import handler_error_wrapper
from ..version import PROGRAM_NAME, __version__

from . import logger


@handler_error_wrapper
def handle_version(database: Database, params: argparse.Namespace) -> str:
    """Print the program name, version and the number of advisories in the database."""
    size = database.size()
    logger.debug(f"Advisory database {database.path} holds {size} advisories")
    line = f"{PROGRAM_NAME} {__version__} (advisories: {size})"
    say(line)
    return line
