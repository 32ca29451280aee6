# lockfile_audit/advisory.py

"""
OSV advisory records.

Each advisory file in the database holds one OSV document. Only the parts
needed for matching and reporting are modelled here: identifiers, the text
fields, references, severity and the affected version ranges for the
package the file is filed under.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml
from packaging.utils import canonicalize_name
from packaging.version import InvalidVersion, Version

from .exceptions import AdvisoryParseError

logger = logging.getLogger("lockfile-audit")

# OSV range types whose events are package versions
VERSION_RANGE_TYPES = {"ECOSYSTEM", "SEMVER"}

CRITICALITY_LEVELS = {
    "low": "low",
    "moderate": "medium",
    "medium": "medium",
    "high": "high",
    "critical": "critical",
}

# Preferred reference types for the advisory URL, best first
URL_REFERENCE_TYPES = ("ADVISORY", "WEB", "REPORT", "ARTICLE")


def _parse_version(value: str) -> Optional[Version]:
    try:
        return Version(value)
    except (InvalidVersion, TypeError):
        return None


@dataclass(frozen=True)
class VersionRange:
    """An ordered list of OSV range events (introduced / fixed / last_affected)."""

    events: Tuple[Tuple[str, str], ...]

    def contains(self, version: Version) -> bool:
        parsed = []
        for kind, value in self.events:
            if kind == "introduced" and value == "0":
                parsed.append((Version("0"), 0, kind))
                continue
            event_version = _parse_version(value)
            if event_version is None:
                logger.debug(f"Skipping unparseable range event {kind}={value!r}")
                continue
            # introduced sorts before fixed/last_affected at the same version
            parsed.append((event_version, 0 if kind == "introduced" else 1, kind))

        affected = False
        for event_version, _, kind in sorted(parsed):
            if kind == "introduced":
                if version < event_version:
                    break
                affected = True
            elif kind == "fixed":
                if version < event_version:
                    break
                affected = False
            elif kind == "last_affected":
                if version <= event_version:
                    break
                affected = False
        return affected


@dataclass(frozen=True)
class Advisory:
    """A single vulnerability advisory for one package."""

    id: str
    package: str
    summary: str = ""
    details: str = ""
    aliases: Tuple[str, ...] = ()
    references: Tuple[Tuple[str, str], ...] = ()
    severity: Optional[str] = None
    cvss_vector: Optional[str] = None
    published: Optional[str] = None
    versions: Tuple[str, ...] = ()
    ranges: Tuple[VersionRange, ...] = ()
    path: Optional[str] = field(default=None, compare=False)

    # --- Loading ---

    @classmethod
    def load(cls, path: str, package: Optional[str] = None) -> "Advisory":
        """
        Load an advisory from a YAML or JSON file.

        Args:
            path: Path to the advisory file
            package: Package the advisory is filed under. Defaults to the name
                of the directory containing the file.

        Raises:
            AdvisoryParseError: If the file cannot be read or is not an OSV record
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.endswith(".json"):
                    data = json.load(f)
                else:
                    # BaseLoader keeps every scalar a string, so "1.10" stays a version
                    data = yaml.load(f, Loader=yaml.BaseLoader)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise AdvisoryParseError(f"Failed to read advisory {path}: {e}", details={"path": path})

        if not isinstance(data, dict) or not data.get("id"):
            raise AdvisoryParseError(f"Not an OSV advisory: {path}", details={"path": path})

        package = package or os.path.basename(os.path.dirname(path))
        return cls.from_dict(data, package, path=path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], package: str, path: Optional[str] = None) -> "Advisory":
        """Build an advisory from an OSV document, keeping the entries for ``package``."""
        wanted = canonicalize_name(package)
        versions: List[str] = []
        ranges: List[VersionRange] = []

        for affected in data.get("affected") or []:
            pkg = affected.get("package") or {}
            name = pkg.get("name")
            if name and canonicalize_name(name) != wanted:
                continue
            ecosystem = pkg.get("ecosystem")
            if ecosystem and ecosystem.lower() != "pypi":
                continue
            versions.extend(str(v) for v in affected.get("versions") or [])
            for osv_range in affected.get("ranges") or []:
                if osv_range.get("type") not in VERSION_RANGE_TYPES:
                    continue
                events = []
                for event in osv_range.get("events") or []:
                    for kind, value in event.items():
                        events.append((kind, str(value)))
                ranges.append(VersionRange(tuple(events)))

        severity = (data.get("database_specific") or {}).get("severity")
        cvss_vector = None
        for entry in data.get("severity") or []:
            if str(entry.get("type", "")).startswith("CVSS"):
                cvss_vector = entry.get("score")
                break

        return cls(
            id=str(data["id"]),
            package=wanted,
            summary=(data.get("summary") or "").strip(),
            details=(data.get("details") or "").strip(),
            aliases=tuple(str(a) for a in data.get("aliases") or []),
            references=tuple(
                (str(ref.get("type", "")), str(ref["url"]))
                for ref in data.get("references") or []
                if ref.get("url")
            ),
            severity=str(severity) if severity else None,
            cvss_vector=cvss_vector,
            published=data.get("published"),
            versions=tuple(versions),
            ranges=tuple(ranges),
            path=path,
        )

    # --- Identifiers ---

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return (self.id,) + self.aliases

    @property
    def cve_ids(self) -> List[str]:
        return [i for i in self.identifiers if i.startswith("CVE-")]

    @property
    def ghsa_ids(self) -> List[str]:
        return [i for i in self.identifiers if i.startswith("GHSA-")]

    @property
    def url(self) -> Optional[str]:
        for ref_type in URL_REFERENCE_TYPES:
            for kind, url in self.references:
                if kind == ref_type:
                    return url
        return self.references[0][1] if self.references else None

    @property
    def title(self) -> str:
        if self.summary:
            return self.summary
        return self.details.splitlines()[0] if self.details else ""

    @property
    def criticality(self) -> Optional[str]:
        """One of low/medium/high/critical, or None when the advisory carries no severity."""
        if not self.severity:
            return None
        return CRITICALITY_LEVELS.get(self.severity.lower())

    # --- Matching ---

    @property
    def patched_versions(self) -> List[str]:
        fixed = []
        for version_range in self.ranges:
            fixed.extend(value for kind, value in version_range.events if kind == "fixed")
        return sorted(set(fixed), key=lambda v: _parse_version(v) or Version("0"))

    def vulnerable(self, version: str) -> bool:
        """Check whether ``version`` of the package is affected by this advisory."""
        if version in self.versions:
            return True

        parsed = _parse_version(version)
        if parsed is None:
            logger.debug(f"Cannot compare non-PEP 440 version {version!r} against {self.id}")
            return False

        if any(_parse_version(v) == parsed for v in self.versions):
            return True
        return any(version_range.contains(parsed) for version_range in self.ranges)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "package": self.package,
            "aliases": list(self.aliases),
            "cve": self.cve_ids,
            "ghsa": self.ghsa_ids,
            "url": self.url,
            "title": self.title,
            "description": self.details,
            "criticality": self.criticality,
            "cvss_vector": self.cvss_vector,
            "patched_versions": self.patched_versions,
            "published": self.published,
        }
