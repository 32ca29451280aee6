# lockfile_audit/version.py

PROGRAM_NAME = "lockfile-audit"
__version__ = "1.0.0"
