"""
lockfile-audit: audit a project's lockfile against a database of known
vulnerabilities.

The command line front end lives in ``lockfile_audit.main``; the classes
below can also be used directly:

    from lockfile_audit import Database, Scanner

    report = Scanner(root=".", database=Database()).report(ignore=["PYSEC-2023-62"])
    if report.vulnerable:
        ...
"""

from .version import __version__
from .advisory import Advisory
from .database import Database, UpdateOutcome, UpdateStatus, UnavailableReason
from .lockfile import LockedPackage, Lockfile
from .scanner import InsecureSource, Report, Scanner, UnpatchedPackage

__all__ = [
    '__version__',
    'Advisory',
    'Database',
    'UpdateOutcome',
    'UpdateStatus',
    'UnavailableReason',
    'LockedPackage',
    'Lockfile',
    'InsecureSource',
    'Report',
    'Scanner',
    'UnpatchedPackage',
]
