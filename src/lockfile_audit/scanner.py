# lockfile_audit/scanner.py

import ipaddress
import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Union
from urllib.parse import urlsplit

from .advisory import Advisory
from .database import Database
from .lockfile import LockedPackage, Lockfile, find_lockfile, parse_lockfile

logger = logging.getLogger("lockfile-audit")

# Transports that can be tampered with in transit
INSECURE_SCHEMES = {"http", "git", "git+http", "git+git", "hg+http", "svn", "svn+http", "bzr+http"}
INTERNAL_HOSTS = {"localhost"}


@dataclass(frozen=True)
class InsecureSource:
    """A package index or VCS source fetched over an unencrypted transport."""

    source: str

    def to_dict(self):
        return {"type": "insecure_source", "source": self.source}


@dataclass(frozen=True)
class UnpatchedPackage:
    """A locked package affected by an advisory."""

    package: LockedPackage
    advisory: Advisory

    def to_dict(self):
        return {
            "type": "unpatched_package",
            "package": {"name": self.package.name, "version": self.package.version},
            "advisory": self.advisory.to_dict(),
        }


Result = Union[InsecureSource, UnpatchedPackage]


@dataclass
class Report:
    """Results of scanning one lockfile."""

    lockfile: str
    packages: List[LockedPackage] = field(default_factory=list)
    results: List[Result] = field(default_factory=list)

    def __iter__(self) -> Iterator[Result]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def vulnerable(self) -> bool:
        return bool(self.results)

    @property
    def insecure_sources(self) -> List[InsecureSource]:
        return [r for r in self.results if isinstance(r, InsecureSource)]

    @property
    def unpatched_packages(self) -> List[UnpatchedPackage]:
        return [r for r in self.results if isinstance(r, UnpatchedPackage)]


def is_internal_host(host: Optional[str]) -> bool:
    """Hosts on the local machine or a private network are not flagged as insecure."""
    if not host:
        return False
    if host.lower() in INTERNAL_HOSTS:
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_private or address.is_loopback


class Scanner:
    """
    Scans a project's lockfile for insecure sources and vulnerable packages.

    Args:
        root: Project directory. Defaults to the current working directory.
        lockfile: Lockfile path, relative to ``root`` unless absolute.
            Defaults to the first known lockfile found in ``root``.
        database: Advisory database to match against.
    """

    def __init__(self, root: Optional[str] = None, lockfile: Optional[str] = None, database: Optional[Database] = None):
        self.root = os.path.abspath(root or os.getcwd())
        if lockfile:
            lockfile_path = os.path.join(self.root, lockfile)
        else:
            lockfile_path = find_lockfile(self.root)
        self.database = database or Database()
        self.lockfile: Lockfile = parse_lockfile(lockfile_path)
        logger.debug(f"Parsed {len(self.lockfile.packages)} packages from {lockfile_path}")

    def report(self, ignore: Optional[Iterable[str]] = None) -> Report:
        report = Report(lockfile=self.lockfile.path, packages=list(self.lockfile.packages))
        report.results.extend(self.scan(ignore=ignore))
        return report

    def scan(self, ignore: Optional[Iterable[str]] = None) -> Iterator[Result]:
        yield from self.scan_sources()
        yield from self.scan_packages(ignore=ignore)

    def scan_sources(self) -> Iterator[InsecureSource]:
        for source in self.lockfile.sources:
            parts = urlsplit(source)
            if parts.scheme.lower() in INSECURE_SCHEMES and not is_internal_host(parts.hostname):
                yield InsecureSource(source)

    def scan_packages(self, ignore: Optional[Iterable[str]] = None) -> Iterator[UnpatchedPackage]:
        ignored = set(ignore or ())
        for package in self.lockfile.packages:
            for advisory in self.database.advisories_for(package.name):
                if ignored.intersection(advisory.identifiers):
                    logger.info(f"Ignoring {advisory.id} for {package}")
                    continue
                if advisory.vulnerable(package.version):
                    yield UnpatchedPackage(package, advisory)
