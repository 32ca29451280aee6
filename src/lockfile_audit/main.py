# lockfile_audit/main.py

import sys
import logging
from typing import List, Optional

from .cli import parse_cmdline_args
from .database import Database
from .exceptions import (
    LockfileAuditError,
    ValidationError,
    ConfigurationError,
    FormatNotFoundError,
    DatabaseError,
    ScanError,
    OutputWriteError,
)
from .handlers import (
    handle_check,
    handle_update,
    handle_version,
)
from .utilities.console import say_error


def setup_logging(level_name: str, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the console (stderr) handler and the optional log file handler."""
    log_level = getattr(logging, level_name.upper(), logging.WARNING)

    handlers: List[logging.Handler] = []
    if log_file:
        # File handler (overwrite mode) with the detailed format
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(file_handler)

    # Console handler on stderr so report output on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)
    return logging.getLogger("lockfile-audit")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to parse arguments, set up logging, open the advisory
    database and dispatch to the appropriate command handler.
    Returns an exit code (0 for success, non-zero for failure or findings).
    """
    logger = None

    try:
        params = parse_cmdline_args(argv)
    except (ValidationError, ConfigurationError) as e:
        say_error(f"Invalid input or configuration: {e.message}")
        return 1

    try:
        logger = setup_logging(params.log, params.log_file)
        logger.debug("Parsed parameters: %s", params)

        database = Database(params.database, params.database_url)
        logger.debug("Using advisory database at %s", database.path)

        # --- Command Dispatch ---
        COMMAND_HANDLERS = {
            "check": handle_check,
            "update": handle_update,
            "version": handle_version,
        }

        handler = COMMAND_HANDLERS.get(params.command)
        if handler is None:
            # argparse rejects unknown commands; kept for direct callers
            say_error(f"Error: Unknown command '{params.command}'.")
            logger.error(f"Unknown command '{params.command}' encountered in main dispatch.")
            return 1

        result = handler(database, params)  # Handlers raise exceptions on failure

        if params.command == "check":
            # Findings (vulnerable packages or insecure sources) fail the check
            exit_code = 1 if result.vulnerable else 0
            logger.info(f"Check finished with {len(result)} findings")
            return exit_code
        return 0

    # --- Unified Exception Handling ---
    # Handler errors have already been printed by handler_error_wrapper
    except (FormatNotFoundError, ValidationError, ConfigurationError) as e:
        if logger: logger.error("%s: %s", type(e).__name__, e.message, exc_info=False)
        return 1
    except (DatabaseError, ScanError, OutputWriteError) as e:
        if logger: logger.error("%s: %s", type(e).__name__, e.message, exc_info=logger.isEnabledFor(logging.DEBUG))
        return 1
    except LockfileAuditError as e:
        if logger: logger.error("Unhandled %s: %s", type(e).__name__, e.message, exc_info=True)
        return 1
    except KeyboardInterrupt:
        say_error("Interrupted.")
        return 130
    except Exception as e:
        # Errors raised outside a handler, e.g. an unwritable --log-file
        say_error(f"Unexpected Error: {e}")
        if logger: logger.critical("Unexpected error occurred", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
