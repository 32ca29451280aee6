# tests/conftest.py

import argparse
import logging
import textwrap

import pytest

from lockfile_audit.advisory import Advisory
from lockfile_audit.database import Database
from lockfile_audit.lockfile import LockedPackage
from lockfile_audit.scanner import InsecureSource, Report, UnpatchedPackage

REQUESTS_ADVISORY = textwrap.dedent("""\
    id: PYSEC-2023-74
    summary: Unintended leak of Proxy-Authorization header in requests
    details: |-
      Requests is a HTTP library. Since Requests 2.3.0, Requests has been
      leaking Proxy-Authorization headers to destination servers.
    aliases:
    - CVE-2023-32681
    - GHSA-j8r2-6x86-q33q
    modified: '2023-06-05T00:00:00Z'
    published: '2023-05-26T18:15:00Z'
    affected:
    - package:
        name: requests
        ecosystem: PyPI
      ranges:
      - type: ECOSYSTEM
        events:
        - introduced: 2.3.0
        - fixed: 2.31.0
    references:
    - type: ADVISORY
      url: https://github.com/psf/requests/security/advisories/GHSA-j8r2-6x86-q33q
    - type: FIX
      url: https://github.com/psf/requests/commit/74ea7cf7a6a27a4eeb2ae24e162bcc942a6706d5
    database_specific:
      severity: MODERATE
    severity:
    - type: CVSS_V3
      score: CVSS:3.1/AV:N/AC:H/PR:N/UI:R/S:U/C:H/I:N/A:N
""")

FLASK_ADVISORY = textwrap.dedent("""\
    id: GHSA-m2qf-hxjv-5gpq
    summary: Flask vulnerable to possible disclosure of permanent session cookie
    details: When all of the following conditions are met, a response containing data intended for one client may be cached.
    aliases:
    - CVE-2023-30861
    - PYSEC-2023-62
    affected:
    - package:
        name: Flask
        ecosystem: PyPI
      ranges:
      - type: ECOSYSTEM
        events:
        - introduced: '0'
        - fixed: 2.2.5
        - introduced: 2.3.0
        - fixed: 2.3.2
    references:
    - type: WEB
      url: https://github.com/pallets/flask/security/advisories/GHSA-m2qf-hxjv-5gpq
    database_specific:
      severity: HIGH
""")


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the root logger configuration done by main()."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def write_advisory(root, package, advisory_id, content):
    """Write an advisory file into a database directory laid out as vulns/<package>/<id>.yaml."""
    package_dir = root / "vulns" / package
    package_dir.mkdir(parents=True, exist_ok=True)
    path = package_dir / f"{advisory_id}.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def advisory_writer():
    return write_advisory


@pytest.fixture
def advisory_db_path(tmp_path):
    """A database directory holding the requests and flask advisories."""
    root = tmp_path / "advisory-db"
    write_advisory(root, "requests", "PYSEC-2023-74", REQUESTS_ADVISORY)
    write_advisory(root, "flask", "GHSA-m2qf-hxjv-5gpq", FLASK_ADVISORY)
    return root


@pytest.fixture
def database(advisory_db_path):
    return Database(str(advisory_db_path))


@pytest.fixture
def requests_advisory(advisory_db_path):
    return Advisory.load(str(advisory_db_path / "vulns" / "requests" / "PYSEC-2023-74.yaml"))


@pytest.fixture
def flask_advisory(advisory_db_path):
    return Advisory.load(str(advisory_db_path / "vulns" / "flask" / "GHSA-m2qf-hxjv-5gpq.yaml"))


@pytest.fixture
def vulnerable_report(requests_advisory, flask_advisory):
    """A report with one insecure source and two unpatched packages."""
    requests_pkg = LockedPackage("requests", "2.28.0", line=2)
    flask_pkg = LockedPackage("flask", "2.2.0", line=3)
    return Report(
        lockfile="requirements.txt",
        packages=[LockedPackage("certifi", "2023.7.22", line=1), requests_pkg, flask_pkg],
        results=[
            InsecureSource("http://pypi.example.com/simple"),
            UnpatchedPackage(requests_pkg, requests_advisory),
            UnpatchedPackage(flask_pkg, flask_advisory),
        ],
    )


@pytest.fixture
def clean_report():
    return Report(
        lockfile="requirements.txt",
        packages=[LockedPackage("certifi", "2023.7.22", line=1)],
    )


@pytest.fixture
def mock_database(mocker, tmp_path):
    """Provides a mocked Database for handler and main() tests."""
    mock = mocker.MagicMock(spec=Database)
    mock.path = str(tmp_path / "advisory-db")
    mock.size.return_value = 42
    return mock


@pytest.fixture
def mock_params(mocker):
    """Provides a mocked argparse.Namespace for handler tests."""
    params = mocker.MagicMock(spec=argparse.Namespace)
    params.command = "check"
    params.quiet = False
    params.verbose = False
    params.ignore = []
    params.update = False
    params.format = "text"
    params.output = None
    params.file = None
    params.log = "WARNING"
    return params
