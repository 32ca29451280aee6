# tests/integration/test_update_integration.py

from git import GitCommandError

from lockfile_audit.main import main
from lockfile_audit.version import __version__

ADVISORY = "id: PYSEC-2024-1\naffected:\n- package: {name: idna, ecosystem: PyPI}\n  versions: ['3.4']\n"


def test_first_update_clones(tmp_path, mocker, capsys):
    mocker.patch("lockfile_audit.database.git_present", return_value=True)

    def clone_from(url, path, **kwargs):
        package_dir = tmp_path / "db" / "vulns" / "idna"
        package_dir.mkdir(parents=True)
        (package_dir / "PYSEC-2024-1.yaml").write_text(ADVISORY)

    clone = mocker.patch("lockfile_audit.database.Repo.clone_from", side_effect=clone_from)

    assert main(["--database", str(tmp_path / "db"), "--database-url", "https://example.com/db.git", "update"]) == 0

    clone.assert_called_once_with("https://example.com/db.git", str(tmp_path / "db"), depth=1, quiet=False)
    assert capsys.readouterr().out == (
        "Updating advisory database ...\n"
        "Updated advisory database\n"
        "advisory database: 1 advisories\n"
    )


def test_update_failure(tmp_path, mocker, capsys):
    mocker.patch("lockfile_audit.database.git_present", return_value=True)
    mocker.patch(
        "lockfile_audit.database.Repo.clone_from",
        side_effect=GitCommandError("clone", 128, stderr="could not resolve host"),
    )

    assert main(["--database", str(tmp_path / "db"), "update", "--quiet"]) == 1

    captured = capsys.readouterr()
    assert "Failed updating advisory database!" in captured.err
    assert captured.out == ""


def test_git_missing(tmp_path, mocker, capsys):
    mocker.patch("lockfile_audit.database.git_present", return_value=False)
    mocker.patch("lockfile_audit.handlers.update.git_present", return_value=False)

    assert main(["--database", str(tmp_path / "db"), "update"]) == 1

    assert "Git is not installed!" in capsys.readouterr().err


def test_skip_when_not_a_checkout(advisory_db_path, mocker, capsys):
    mocker.patch("lockfile_audit.database.git_present", return_value=True)
    mocker.patch("lockfile_audit.handlers.update.git_present", return_value=True)

    assert main(["--database", str(advisory_db_path), "update"]) == 0

    out = capsys.readouterr().out
    assert "Skipping update\n" in out
    assert out.endswith("advisory database: 2 advisories\n")


def test_check_with_update_skipped(advisory_db_path, tmp_path, monkeypatch, mocker, capsys):
    mocker.patch("lockfile_audit.database.git_present", return_value=True)
    mocker.patch("lockfile_audit.handlers.update.git_present", return_value=True)
    monkeypatch.chdir(tmp_path)
    (tmp_path / "requirements.txt").write_text("idna==3.4\n")

    assert main(["--database", str(advisory_db_path), "check", "--update", "--quiet"]) == 0

    assert capsys.readouterr().out == "Skipping update\n"


def test_version(advisory_db_path, capsys):
    assert main(["--database", str(advisory_db_path), "--version"]) == 0
    assert capsys.readouterr().out == f"lockfile-audit {__version__} (advisories: 2)\n"
