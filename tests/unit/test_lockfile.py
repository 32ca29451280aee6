# tests/unit/test_lockfile.py

import textwrap

import pytest

from lockfile_audit.exceptions import LockfileNotFoundError, LockfileParseError
from lockfile_audit.lockfile import (
    LockedPackage,
    find_lockfile,
    parse_lockfile,
    parse_poetry_lock,
    parse_requirements,
)

POETRY_LOCK = textwrap.dedent("""\
    [[package]]
    name = "Flask"
    version = "2.2.0"
    description = "A simple framework for building complex web applications."
    optional = false
    python-versions = ">=3.7"

    [[package]]
    name = "internal-lib"
    version = "0.4.1"
    optional = false
    python-versions = "*"

    [package.source]
    type = "legacy"
    url = "http://pypi.internal.example.com/simple"
    reference = "internal"

    [metadata]
    lock-version = "2.0"
    python-versions = "^3.11"
""")


# --- Discovery ---

class TestFindLockfile:
    def test_prefers_poetry_lock(self, tmp_path):
        (tmp_path / "requirements.txt").write_text("")
        (tmp_path / "poetry.lock").write_text("")
        assert find_lockfile(str(tmp_path)) == str(tmp_path / "poetry.lock")

    def test_falls_back_to_requirements(self, tmp_path):
        (tmp_path / "requirements.txt").write_text("")
        assert find_lockfile(str(tmp_path)) == str(tmp_path / "requirements.txt")

    def test_nothing_found(self, tmp_path):
        with pytest.raises(LockfileNotFoundError, match="Could not find a lockfile"):
            find_lockfile(str(tmp_path))


class TestParseLockfile:
    def test_missing_file(self, tmp_path):
        with pytest.raises(LockfileNotFoundError):
            parse_lockfile(str(tmp_path / "requirements.txt"))

    def test_dispatches_on_file_name(self, tmp_path):
        (tmp_path / "poetry.lock").write_text(POETRY_LOCK)
        (tmp_path / "prod.txt").write_text("requests==2.28.0\n")
        assert [p.name for p in parse_lockfile(str(tmp_path / "poetry.lock")).packages] == ["flask", "internal-lib"]
        assert [p.name for p in parse_lockfile(str(tmp_path / "prod.txt")).packages] == ["requests"]


# --- poetry.lock ---

class TestPoetryLock:
    def test_packages_and_sources(self):
        lockfile = parse_poetry_lock(POETRY_LOCK)
        assert lockfile.packages[0] == LockedPackage("flask", "2.2.0")
        assert lockfile.packages[1].source == "http://pypi.internal.example.com/simple"
        assert lockfile.sources == ["http://pypi.internal.example.com/simple"]

    def test_invalid_toml(self):
        with pytest.raises(LockfileParseError, match="Invalid TOML"):
            parse_poetry_lock("[[package]\nname = ")

    def test_package_without_version(self):
        with pytest.raises(LockfileParseError):
            parse_poetry_lock('[[package]]\nname = "flask"\n')


# --- requirements.txt ---

class TestRequirements:
    def test_pins_with_line_numbers(self):
        lockfile = parse_requirements("# comment\n\nRequests==2.28.0\nflask==2.2.0  # web\n")
        assert lockfile.packages == [
            LockedPackage("requests", "2.28.0", line=3),
            LockedPackage("flask", "2.2.0", line=4),
        ]

    def test_hashes_and_continuations(self):
        content = (
            "certifi==2023.7.22 \\\n"
            "    --hash=sha256:539cc1d13202e33ca466e88b2807e29f4c13049d6d87031a3c110744495cb082 \\\n"
            "    --hash=sha256:92d6037539857d8206b8f6ae472e8b77db8058fec5937a1ef3f54304089edbb9\n"
            "idna==3.4\n"
        )
        lockfile = parse_requirements(content)
        assert lockfile.packages == [
            LockedPackage("certifi", "2023.7.22", line=1),
            LockedPackage("idna", "3.4", line=4),
        ]

    def test_environment_markers(self):
        lockfile = parse_requirements('colorama==0.4.6 ; sys_platform == "win32"\n')
        assert lockfile.packages == [LockedPackage("colorama", "0.4.6", line=1)]

    def test_unpinned_requirements_are_skipped(self):
        lockfile = parse_requirements("requests>=2.0\nflask\ndjango==4.*\nidna==3.4\n")
        assert [p.name for p in lockfile.packages] == ["idna"]

    def test_index_options_are_sources(self):
        content = (
            "-i http://pypi.example.com/simple\n"
            "--extra-index-url=https://pypi.org/simple\n"
            "--find-links http://files.example.com/wheels\n"
            "--trusted-host pypi.example.com\n"
            "requests==2.28.0\n"
        )
        lockfile = parse_requirements(content)
        assert lockfile.sources == [
            "http://pypi.example.com/simple",
            "https://pypi.org/simple",
            "http://files.example.com/wheels",
        ]
        assert len(lockfile.packages) == 1

    def test_index_url_keeps_query_string(self):
        lockfile = parse_requirements("--index-url=https://pypi.example.com/simple?token=a=b\n")
        assert lockfile.sources == ["https://pypi.example.com/simple?token=a=b"]

    def test_direct_url_requirements_are_sources(self):
        lockfile = parse_requirements("mylib @ git+http://git.example.com/mylib.git@v1.0\n")
        assert lockfile.sources == ["git+http://git.example.com/mylib.git@v1.0"]
        assert lockfile.packages == []

    def test_editable_vcs_requirement_is_a_source(self):
        lockfile = parse_requirements("-e git+git://github.com/example/project.git#egg=project\n")
        assert lockfile.sources == ["git+git://github.com/example/project.git#egg=project"]

    def test_option_without_value(self):
        with pytest.raises(LockfileParseError):
            parse_requirements("--index-url\n")

    def test_invalid_requirement(self):
        with pytest.raises(LockfileParseError, match="line 2"):
            parse_requirements("idna==3.4\n!!!not a requirement\n")


class TestRequirementIncludes:
    def test_included_file_is_followed(self, tmp_path):
        (tmp_path / "base.txt").write_text("-i http://pypi.example.com/simple\nrequests==2.28.0\n")
        main = tmp_path / "requirements.txt"
        main.write_text("-r base.txt\nflask==2.2.0\n")

        lockfile = parse_lockfile(str(main))

        assert lockfile.packages == [
            LockedPackage(name="requests", version="2.28.0"),
            LockedPackage(name="flask", version="2.2.0", line=2),
        ]
        assert lockfile.sources == ["http://pypi.example.com/simple"]

    def test_nested_includes_relative_to_including_file(self, tmp_path):
        (tmp_path / "requirements").mkdir()
        (tmp_path / "requirements" / "base.txt").write_text("idna==3.4\n")
        (tmp_path / "requirements" / "prod.txt").write_text("--requirement=base.txt\ncertifi==2023.7.22\n")
        main = tmp_path / "requirements.txt"
        main.write_text("-r requirements/prod.txt\n")

        lockfile = parse_lockfile(str(main))
        assert [p.name for p in lockfile.packages] == ["idna", "certifi"]

    def test_include_cycle(self, tmp_path):
        (tmp_path / "a.txt").write_text("-r requirements.txt\nidna==3.4\n")
        main = tmp_path / "requirements.txt"
        main.write_text("-r a.txt\n-r a.txt\n")

        lockfile = parse_lockfile(str(main))
        assert [p.name for p in lockfile.packages] == ["idna"]

    def test_missing_include(self, tmp_path):
        main = tmp_path / "requirements.txt"
        main.write_text("-r missing.txt\n")

        with pytest.raises(LockfileParseError, match="missing.txt included on line 1"):
            parse_lockfile(str(main))

    def test_remote_include_is_reported(self, caplog):
        with caplog.at_level("WARNING", logger="lockfile-audit"):
            lockfile = parse_requirements("-r https://example.com/requirements.txt\nidna==3.4\n")

        assert [p.name for p in lockfile.packages] == ["idna"]
        assert "not audited" in caplog.text

    def test_constraints_install_nothing(self, tmp_path):
        (tmp_path / "constraints.txt").write_text("requests==2.28.0\n")
        main = tmp_path / "requirements.txt"
        main.write_text("-c constraints.txt\nidna==3.4\n")

        lockfile = parse_lockfile(str(main))
        assert [p.name for p in lockfile.packages] == ["idna"]
