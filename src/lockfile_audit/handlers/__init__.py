# lockfile_audit/handlers/__init__.py

import logging

# Common logger for all handlers
logger = logging.getLogger("lockfile-audit")

# Import handlers
from .update import handle_update, run_update
from .check import handle_check
from .version import handle_version

__all__ = [
    'handle_check',
    'handle_update',
    'handle_version',
    'run_update',
]
