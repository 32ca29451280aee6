# tests/unit/cli/conftest.py

import pytest
from unittest.mock import MagicMock, patch

from lockfile_audit.scanner import Report


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the caller's database settings out of argument defaults."""
    monkeypatch.delenv("LOCKFILE_AUDIT_DB", raising=False)
    monkeypatch.delenv("LOCKFILE_AUDIT_DB_URL", raising=False)


@pytest.fixture
def arg_parser():
    """Parse an argument list through sys.argv, as the console script does."""
    def _parse(args_list):
        from lockfile_audit.cli import parse_cmdline_args
        with patch('sys.argv', args_list):
            return parse_cmdline_args()
    return _parse


@pytest.fixture
def mock_main_dependencies():
    """Mock the database and all handlers used by main()."""
    mocks = {}

    with patch("lockfile_audit.main.Database") as mock_db, \
         patch("lockfile_audit.main.handle_check") as mock_check, \
         patch("lockfile_audit.main.handle_update") as mock_update, \
         patch("lockfile_audit.main.handle_version") as mock_version, \
         patch("lockfile_audit.main.setup_logging") as mock_logging:

        mocks['database'] = mock_db
        mocks['database_instance'] = MagicMock()
        mock_db.return_value = mocks['database_instance']

        mocks['handle_check'] = mock_check
        mocks['handle_update'] = mock_update
        mocks['handle_version'] = mock_version
        mocks['setup_logging'] = mock_logging

        mock_check.return_value = Report(lockfile="requirements.txt")
        mock_update.return_value = True
        mock_version.return_value = "lockfile-audit 1.0.0 (advisories: 0)"

        yield mocks


class ArgBuilder:
    """Builder pattern for constructing test arguments."""

    def __init__(self):
        self.args = ['lockfile-audit']

    def database(self, path='/tmp/advisory-db'):
        self.args.extend(['--database', path])
        return self

    def log(self, level='DEBUG'):
        self.args.extend(['--log', level])
        return self

    def check(self):
        self.args.append('check')
        return self

    def update(self):
        self.args.append('update')
        return self

    def version(self):
        self.args.append('version')
        return self

    def quiet(self):
        self.args.append('--quiet')
        return self

    def verbose(self):
        self.args.append('--verbose')
        return self

    def ignore(self, *ids):
        self.args.extend(['--ignore', *ids])
        return self

    def with_update(self):
        self.args.append('--update')
        return self

    def format(self, name='json'):
        self.args.extend(['--format', name])
        return self

    def output(self, path='report.txt'):
        self.args.extend(['--output', path])
        return self

    def file(self, path='requirements.txt'):
        self.args.extend(['--file', path])
        return self

    def build(self):
        return self.args


@pytest.fixture
def args():
    """Factory for ArgBuilder instances."""
    return ArgBuilder
