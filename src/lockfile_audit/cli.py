# lockfile_audit/cli.py

import argparse
import os
import sys
import logging
from argparse import RawTextHelpFormatter

from .database import DB_PATH_ENV, DB_URL_ENV, DEFAULT_PATH, DEFAULT_URL
from .exceptions import ValidationError
from .formats import available_formats
from .version import PROGRAM_NAME

logger = logging.getLogger("lockfile-audit")

COMMANDS = ("check", "update", "version")

# Options taking a value, accepted before or after the command and its options
GLOBAL_VALUE_OPTIONS = {"--database", "--database-url", "--log", "--log-file"}


def _split_global_options(argv):
    """Separate the global options (and their values) from the other arguments."""
    global_args, rest = [], []
    index = 0
    while index < len(argv):
        arg = argv[index]
        if arg in GLOBAL_VALUE_OPTIONS:
            global_args.extend(argv[index:index + 2])
            index += 2
            continue
        if arg.split("=", 1)[0] in GLOBAL_VALUE_OPTIONS:
            global_args.append(arg)
        else:
            rest.append(arg)
        index += 1
    return global_args, rest


def _insert_default_command(argv):
    """
    Return argv with 'check' inserted when no command is named.

    Global options may be given anywhere; they are moved in front of the
    command so the subcommand parser never sees them. The top-level
    --version flag is mapped to the 'version' command.
    """
    global_args, rest = _split_global_options(list(argv))
    if rest and rest[0] in COMMANDS + ("-h", "--help"):
        return global_args + rest
    if rest and rest[0] == "--version":
        return global_args + ["version"] + rest[1:]
    return global_args + ["check"] + rest


def add_common_output_options(subparser):
    output_args = subparser.add_argument_group("Output Options")
    output_args.add_argument("-q", "--quiet", help="Only print findings and errors.", action="store_true", default=False)


# --- Main Parsing Function ---
def parse_cmdline_args(argv=None):
    """
    Parse command line arguments.

    Args:
        argv: Arguments to parse. Defaults to sys.argv[1:].

    Returns:
        argparse.Namespace: Parsed command line arguments

    Raises:
        ValidationError: If arguments are invalid
    """
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="lockfile-audit - Audit a project's lockfile against a database of known vulnerabilities.",
        formatter_class=RawTextHelpFormatter,
        epilog=f"""
Environment Variables:
  {DB_PATH_ENV}      : Advisory database directory (Default: {DEFAULT_PATH})
  {DB_URL_ENV}  : Git URL the advisory database is cloned from (Default: {DEFAULT_URL})

Example Usage:
  # Scan poetry.lock or requirements.txt in the current directory
  {PROGRAM_NAME}

  # Update the advisory database, then scan
  {PROGRAM_NAME} check --update

  # Scan a specific lockfile, ignoring two advisories
  {PROGRAM_NAME} check --file requirements/prod.txt --ignore PYSEC-2023-62 CVE-2022-40897

  # Write a SARIF report for code scanning
  {PROGRAM_NAME} check --format sarif --output audit.sarif

  # Update the advisory database only
  {PROGRAM_NAME} update
"""
    )

    # --- Global Arguments (apply to all subcommands) ---
    global_args = parser.add_argument_group("Global Arguments")
    global_args.add_argument(
        "--database",
        help=f"Advisory database directory. Overrides {DB_PATH_ENV} env var.",
        default=os.getenv(DB_PATH_ENV),
        metavar="PATH"
    )
    global_args.add_argument(
        "--database-url",
        help=f"Git URL to clone the advisory database from. Overrides {DB_URL_ENV} env var.",
        default=os.getenv(DB_URL_ENV),
        metavar="URL"
    )
    global_args.add_argument(
        "--log",
        help="Logging level (Default: WARNING)",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    global_args.add_argument(
        "--log-file",
        help="Also write log messages to this file.",
        metavar="PATH"
    )

    # --- Subparsers ---
    subparsers = parser.add_subparsers(dest='command', help='Available commands', required=True, metavar='COMMAND')

    # --- 'check' Subcommand ---
    check_parser = subparsers.add_parser(
        'check',
        help='Check the lockfile for vulnerable packages (default command).',
        description='Check the lockfile for insecure sources and packages with known vulnerabilities.',
        formatter_class=RawTextHelpFormatter
    )
    add_common_output_options(check_parser)
    check_parser.add_argument("-v", "--verbose", help="Show advisory descriptions.", action="store_true", default=False)
    check_parser.add_argument(
        "-i", "--ignore",
        help="Advisory IDs or aliases (CVE, GHSA) to ignore.",
        nargs="+",
        action="extend",
        default=[],
        metavar="ID"
    )
    check_parser.add_argument("-u", "--update", help="Update the advisory database before checking.", action="store_true", default=False)
    check_parser.add_argument(
        "--format",
        help=f"Report format (Default: text). Built-in: {', '.join(available_formats())}",
        default="text",
        metavar="FORMAT"
    )
    check_parser.add_argument("-o", "--output", help="Write the report to this file instead of standard output.", metavar="PATH")
    check_parser.add_argument(
        "--file",
        help="Lockfile to check, relative to the current directory.\n"
             "Default: poetry.lock, then requirements.txt",
        metavar="PATH"
    )

    # --- 'update' Subcommand ---
    update_parser = subparsers.add_parser(
        'update',
        help='Update the advisory database.',
        description='Clone the advisory database, or pull the latest advisories into it.',
        formatter_class=RawTextHelpFormatter
    )
    add_common_output_options(update_parser)

    # --- 'version' Subcommand ---
    subparsers.add_parser(
        'version',
        help='Print the version and the number of advisories.',
        description='Print the program version and the number of advisories in the local database.',
        formatter_class=RawTextHelpFormatter
    )

    # --- Parse and Validate ---
    if argv is None:
        argv = sys.argv[1:]
    args = parser.parse_args(_insert_default_command(argv))
    validate_parsed_args(args)
    return args


def validate_parsed_args(args):
    """
    Validate parsed arguments beyond what argparse checks.

    Raises:
        ValidationError: If an option value is unusable
    """
    if args.command == "check":
        if not args.format or not args.format.strip():
            raise ValidationError("--format must not be empty")
        if args.output is not None and not args.output.strip():
            raise ValidationError("--output must not be empty")
        if args.output and os.path.isdir(args.output):
            raise ValidationError(f"--output points at a directory: {args.output}")
        if args.file is not None and not args.file.strip():
            raise ValidationError("--file must not be empty")

    if args.database is not None and not args.database.strip():
        raise ValidationError("--database must not be empty")

    logger.debug(f"Validated arguments for command '{args.command}'")
