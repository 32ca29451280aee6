# lockfile_audit/lockfile.py

"""
Lockfile discovery and parsing.

Two lockfile flavours are understood:

- ``poetry.lock``: TOML with one ``[[package]]`` table per locked package.
- pinned requirements files (``requirements.txt`` and friends): one
  ``name==version`` pin per line, as produced by ``pip freeze`` or
  ``pip-compile``. Index and find-links options are kept as sources so they
  can be checked for insecure transports. Files included with ``-r`` are followed.
"""

import logging
import os
import re
import tomllib
from dataclasses import dataclass, field, replace
from typing import List, Optional, Set, Tuple

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from .exceptions import LockfileNotFoundError, LockfileParseError

logger = logging.getLogger("lockfile-audit")

# Searched in this order when no lockfile is given explicitly
LOCKFILE_NAMES = ("poetry.lock", "requirements.txt")

# requirements options whose argument is a package source
SOURCE_OPTIONS = {
    "-i": "index-url",
    "--index-url": "index-url",
    "--extra-index-url": "extra-index-url",
    "-f": "find-links",
    "--find-links": "find-links",
}
EDITABLE_OPTIONS = {"-e", "--editable"}
INCLUDE_OPTIONS = {"-r", "--requirement"}
CONSTRAINT_OPTIONS = {"-c", "--constraint"}

_COMMENT_RE = re.compile(r"(^|\s+)#.*$")


@dataclass(frozen=True)
class LockedPackage:
    """A package pinned to an exact version."""

    name: str
    version: str
    line: Optional[int] = None
    source: Optional[str] = None

    def __str__(self):
        return f"{self.name}=={self.version}"


@dataclass
class Lockfile:
    path: str
    packages: List[LockedPackage] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)


def find_lockfile(root: str) -> str:
    """
    Find the lockfile in a project directory.

    Raises:
        LockfileNotFoundError: If none of the known lockfile names exists in ``root``
    """
    for name in LOCKFILE_NAMES:
        candidate = os.path.join(root, name)
        if os.path.isfile(candidate):
            logger.debug(f"Discovered lockfile {candidate}")
            return candidate
    raise LockfileNotFoundError(
        f"Could not find a lockfile ({', '.join(LOCKFILE_NAMES)}) in {root}",
        details={"root": root},
    )


def parse_lockfile(path: str) -> Lockfile:
    """
    Parse a lockfile, choosing the parser from its file name.

    Raises:
        LockfileNotFoundError: If the file does not exist
        LockfileParseError: If the file is malformed
    """
    content = _read(path)
    if os.path.basename(path).endswith(".lock"):
        return parse_poetry_lock(content, path)
    return parse_requirements(content, path)


def _read(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        raise LockfileNotFoundError(f"Lockfile not found: {path}", details={"path": path})
    except (OSError, UnicodeDecodeError) as e:
        raise LockfileParseError(f"Could not read lockfile {path}: {e}", details={"path": path})


def parse_poetry_lock(content: str, path: str = "poetry.lock") -> Lockfile:
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise LockfileParseError(f"Invalid TOML in {path}: {e}", details={"path": path})

    lockfile = Lockfile(path=path)
    for entry in data.get("package", []):
        name, version = entry.get("name"), entry.get("version")
        if not name or not version:
            raise LockfileParseError(f"Package entry without name or version in {path}", details={"entry": entry})
        source_url = (entry.get("source") or {}).get("url")
        if source_url and source_url not in lockfile.sources:
            lockfile.sources.append(source_url)
        lockfile.packages.append(
            LockedPackage(name=canonicalize_name(name), version=str(version), source=source_url)
        )
    return lockfile


def _logical_lines(content: str) -> List[Tuple[int, str]]:
    """Join backslash continuations and strip comments, keeping the starting line number."""
    lines = []
    buffer, start = "", None
    for number, raw in enumerate(content.splitlines(), start=1):
        if start is None:
            start = number
        stripped = raw.rstrip()
        if stripped.endswith("\\"):
            buffer += stripped[:-1] + " "
            continue
        buffer += stripped
        text = _COMMENT_RE.sub("", buffer).strip()
        if text:
            lines.append((start, text))
        buffer, start = "", None
    if buffer.strip():
        lines.append((start, _COMMENT_RE.sub("", buffer).strip()))
    return lines


def parse_requirements(content: str, path: str = "requirements.txt", _included: Optional[Set[str]] = None) -> Lockfile:
    """
    Parse a pinned requirements file.

    Files included with ``-r`` are read relative to ``path`` and their pins
    are added without line numbers, since those refer to another file.
    """
    lockfile = Lockfile(path=path)
    included = _included if _included is not None else {os.path.abspath(path)}

    for number, line in _logical_lines(content):
        if line.startswith("-"):
            _parse_option_line(line, number, path, lockfile, included)
            continue

        # per-requirement options such as --hash come after the requirement
        requirement_text = re.split(r"\s+--?[a-zA-Z]", line, maxsplit=1)[0].strip()
        try:
            requirement = Requirement(requirement_text)
        except InvalidRequirement as e:
            raise LockfileParseError(
                f"Invalid requirement on line {number} of {path}: {e}",
                details={"path": path, "line": number},
            )

        if requirement.url:
            lockfile.sources.append(requirement.url)

        pins = [spec for spec in requirement.specifier if spec.operator in ("==", "===")]
        if len(pins) != 1 or pins[0].version.endswith(".*"):
            logger.info(f"{path}:{number}: '{requirement_text}' is not pinned to a single version; skipping")
            continue

        lockfile.packages.append(
            LockedPackage(
                name=canonicalize_name(requirement.name),
                version=pins[0].version,
                line=number,
                source=requirement.url,
            )
        )
    return lockfile


def _include_requirements(value: str, number: int, path: str, lockfile: Lockfile, included: Set[str]) -> None:
    if "://" in value:
        logger.warning(f"{path}:{number}: remote requirements file {value} is not audited")
        return

    include_path = os.path.join(os.path.dirname(path), value)
    key = os.path.abspath(include_path)
    if key in included:
        logger.debug(f"{path}:{number}: {value} already included")
        return
    included.add(key)

    try:
        content = _read(include_path)
    except LockfileNotFoundError:
        raise LockfileParseError(
            f"Requirements file {value} included on line {number} of {path} not found",
            details={"path": path, "line": number, "include": include_path},
        )
    nested = parse_requirements(content, include_path, included)
    logger.debug(f"{path}:{number}: {len(nested.packages)} packages from {include_path}")
    lockfile.packages.extend(replace(package, line=None) for package in nested.packages)
    lockfile.sources.extend(nested.sources)


def _parse_option_line(line: str, number: int, path: str, lockfile: Lockfile, included: Set[str]) -> None:
    option, _, value = line.replace("\t", " ").partition(" ")
    if "=" in option:
        option, _, inline_value = option.partition("=")
        value = f"{inline_value} {value}"
    value = value.strip()

    if option in SOURCE_OPTIONS:
        if not value:
            raise LockfileParseError(f"Option {option} without a value on line {number} of {path}")
        lockfile.sources.append(value)
    elif option in EDITABLE_OPTIONS:
        if "://" in value:
            lockfile.sources.append(value)
    elif option in INCLUDE_OPTIONS:
        if not value:
            raise LockfileParseError(f"Option {option} without a value on line {number} of {path}")
        _include_requirements(value, number, path, lockfile, included)
    elif option in CONSTRAINT_OPTIONS:
        # constraints narrow versions of packages installed elsewhere; they install nothing
        logger.info(f"{path}:{number}: constraints file {value} is not audited")
    else:
        logger.debug(f"{path}:{number}: ignoring option line '{line}'")
