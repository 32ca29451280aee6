# lockfile_audit/database.py

"""
Local copy of the advisory database.

The database is a git checkout of an OSV advisory repository (by default
pypa/advisory-database) with one file per advisory under
``vulns/<package>/``. Updating it clones or pulls that repository with
GitPython and reports one of three outcomes: updated, failed, or
unavailable (git missing, or the directory is not a checkout).
"""

import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional

# git absence is reported by Database.update(), not at import time
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from git import Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from git.exc import GitCommandNotFound
from packaging.utils import canonicalize_name

from .advisory import Advisory
from .exceptions import AdvisoryParseError

logger = logging.getLogger("lockfile-audit")

DEFAULT_URL = "https://github.com/pypa/advisory-database.git"
DEFAULT_PATH = os.path.join(os.path.expanduser("~"), ".local", "share", "lockfile-audit", "advisory-database")

DB_PATH_ENV = "LOCKFILE_AUDIT_DB"
DB_URL_ENV = "LOCKFILE_AUDIT_DB_URL"

ADVISORIES_DIR = "vulns"
ADVISORY_EXTENSIONS = (".yaml", ".yml", ".json")


def git_present() -> bool:
    """Check whether the git executable GitPython would use is on the PATH."""
    executable = os.environ.get("GIT_PYTHON_GIT_EXECUTABLE", "git")
    return shutil.which(executable) is not None


class UpdateStatus(Enum):
    UPDATED = "updated"
    FAILED = "failed"
    UNAVAILABLE = "unavailable"


class UnavailableReason(Enum):
    TOOL_MISSING = "tool_missing"
    NOT_A_REPOSITORY = "not_a_repository"


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of a database update attempt."""

    status: UpdateStatus
    reason: Optional[UnavailableReason] = None
    detail: Optional[str] = None

    @classmethod
    def updated(cls) -> "UpdateOutcome":
        return cls(UpdateStatus.UPDATED)

    @classmethod
    def failed(cls, detail: Optional[str] = None) -> "UpdateOutcome":
        return cls(UpdateStatus.FAILED, detail=detail)

    @classmethod
    def unavailable(cls, reason: UnavailableReason, detail: Optional[str] = None) -> "UpdateOutcome":
        return cls(UpdateStatus.UNAVAILABLE, reason=reason, detail=detail)


class Database:
    """
    Advisory database stored in a local directory.

    Args:
        path: Directory of the database. Defaults to $LOCKFILE_AUDIT_DB or
            ~/.local/share/lockfile-audit/advisory-database.
        url: Git URL cloned on the first update. Defaults to
            $LOCKFILE_AUDIT_DB_URL or the PyPA advisory database.
    """

    def __init__(self, path: Optional[str] = None, url: Optional[str] = None):
        self.path = os.path.abspath(os.path.expanduser(path or self.default_path()))
        self.url = url or os.environ.get(DB_URL_ENV) or DEFAULT_URL
        self._package_dirs: Optional[Dict[str, str]] = None

    @staticmethod
    def default_path() -> str:
        return os.environ.get(DB_PATH_ENV) or DEFAULT_PATH

    def __repr__(self):
        return f"Database(path={self.path!r})"

    def exists(self) -> bool:
        return os.path.isdir(self.path)

    def is_git(self) -> bool:
        return os.path.isdir(os.path.join(self.path, ".git"))

    # --- Updating ---

    def update(self, quiet: bool = False) -> UpdateOutcome:
        """
        Clone the database, or pull the latest advisories into an existing checkout.

        Args:
            quiet: Pass --quiet to git

        Returns:
            UpdateOutcome: UPDATED on success, FAILED when git reported an error,
            UNAVAILABLE when git is missing or the directory is not a git checkout.
        """
        if not git_present():
            logger.warning("git executable not found; cannot update the advisory database")
            return UpdateOutcome.unavailable(UnavailableReason.TOOL_MISSING)

        self._package_dirs = None
        try:
            if self.exists():
                if not self.is_git():
                    logger.info(f"{self.path} is not a git checkout; leaving it untouched")
                    return UpdateOutcome.unavailable(UnavailableReason.NOT_A_REPOSITORY)
                return self._pull(quiet)
            return self._clone(quiet)
        except GitCommandNotFound as e:
            logger.warning(f"git could not be executed: {e}")
            return UpdateOutcome.unavailable(UnavailableReason.TOOL_MISSING, detail=str(e))
        except (GitCommandError, InvalidGitRepositoryError, NoSuchPathError) as e:
            logger.error(f"Advisory database update failed: {e}")
            return UpdateOutcome.failed(detail=str(e))

    def _pull(self, quiet: bool) -> UpdateOutcome:
        repo = Repo(self.path)
        if "origin" not in repo.remotes:
            return UpdateOutcome.failed(detail=f"No 'origin' remote configured in {self.path}")
        logger.debug(f"Pulling advisories into {self.path}")
        repo.remotes.origin.pull(quiet=quiet)
        return UpdateOutcome.updated()

    def _clone(self, quiet: bool) -> UpdateOutcome:
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        logger.debug(f"Cloning {self.url} into {self.path}")
        Repo.clone_from(self.url, self.path, depth=1, quiet=quiet)
        return UpdateOutcome.updated()

    def last_commit(self) -> Optional[str]:
        """Hash of the checked-out commit, or None when the database is not a git checkout."""
        if not self.is_git():
            return None
        try:
            return Repo(self.path).head.commit.hexsha
        except (GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, ValueError) as e:
            logger.debug(f"Could not read database commit: {e}")
            return None

    # --- Reading ---

    def _advisories_root(self) -> str:
        return os.path.join(self.path, ADVISORIES_DIR)

    def package_dirs(self) -> Dict[str, str]:
        """Map canonical package names to their advisory directories."""
        if self._package_dirs is None:
            root = self._advisories_root()
            dirs = {}
            if os.path.isdir(root):
                for entry in sorted(os.listdir(root)):
                    entry_path = os.path.join(root, entry)
                    if os.path.isdir(entry_path):
                        dirs[canonicalize_name(entry)] = entry_path
            self._package_dirs = dirs
        return self._package_dirs

    def advisory_paths(self, package: Optional[str] = None) -> Iterator[str]:
        """Yield advisory file paths, for one package or for the whole database."""
        package_dirs = self.package_dirs()
        if package is None:
            dirs = list(package_dirs.values())
        else:
            package_dir = package_dirs.get(canonicalize_name(package))
            dirs = [package_dir] if package_dir else []

        for package_dir in dirs:
            for filename in sorted(os.listdir(package_dir)):
                if filename.endswith(ADVISORY_EXTENSIONS):
                    yield os.path.join(package_dir, filename)

    def size(self) -> int:
        """Number of advisories in the database (0 when it has not been downloaded yet)."""
        return sum(1 for _ in self.advisory_paths())

    def advisories(self) -> Iterator[Advisory]:
        for path in self.advisory_paths():
            yield from self._load(path)

    def advisories_for(self, package: str) -> Iterator[Advisory]:
        """Yield the advisories filed under ``package``."""
        name = canonicalize_name(package)
        for path in self.advisory_paths(name):
            yield from self._load(path, name)

    def _load(self, path: str, package: Optional[str] = None) -> Iterator[Advisory]:
        try:
            yield Advisory.load(path, package)
        except AdvisoryParseError as e:
            logger.warning(e.message)
