# tests/unit/handlers/conftest.py

import pytest

from lockfile_audit.scanner import Report


@pytest.fixture
def mock_git_present(mocker):
    """git is installed unless a test says otherwise."""
    return mocker.patch("lockfile_audit.handlers.update.git_present", return_value=True)


@pytest.fixture
def mock_scanner(mocker):
    """Patch the Scanner used by the check handler; its report is empty."""
    scanner_cls = mocker.patch("lockfile_audit.handlers.check.Scanner")
    scanner_cls.return_value.report.return_value = Report(lockfile="requirements.txt")
    return scanner_cls
