# tests/integration/conftest.py

import pytest


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv("LOCKFILE_AUDIT_DB", raising=False)
    monkeypatch.delenv("LOCKFILE_AUDIT_DB_URL", raising=False)


@pytest.fixture
def project(tmp_path, monkeypatch):
    """An empty project directory that is the current working directory."""
    root = tmp_path / "project"
    root.mkdir()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def run(advisory_db_path):
    """Run main() against the test advisory database."""
    from lockfile_audit.main import main

    def _run(*argv):
        return main(["--database", str(advisory_db_path), *argv])
    return _run
