# lockfile_audit/formats/sarif.py

"""
SARIF 2.1.0 report generation.

Each advisory becomes a rule and each finding a result located at the
lockfile (and, for requirements files, the line of the pin), so that code
scanning dashboards can annotate the lockfile directly.
"""

import json
import logging
import os
from typing import Any, Dict, IO, List

from ..scanner import InsecureSource, Report, UnpatchedPackage
from ..version import PROGRAM_NAME, __version__
from .base import ReportFormat
from .registry import register_format

logger = logging.getLogger("lockfile-audit")

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"
INFORMATION_URI = "https://github.com/pypa/advisory-database"

INSECURE_SOURCE_RULE = "insecure-source"

# criticality -> (SARIF level, security-severity)
CRITICALITY_LEVELS = {
    "critical": ("error", "9.5"),
    "high": ("error", "8.0"),
    "medium": ("warning", "5.5"),
    "low": ("note", "2.0"),
}
UNKNOWN_LEVEL = ("warning", "5.0")


def convert_report_to_sarif(report: Report, root: str = None) -> Dict[str, Any]:
    """
    Convert a scan report to a SARIF 2.1.0 document.

    Args:
        report: The scan report
        root: Directory artifact locations are made relative to.
            Defaults to the current working directory.

    Returns:
        SARIF document as dictionary
    """
    uri = _artifact_uri(report.lockfile, root or os.getcwd())
    rules: Dict[str, Dict[str, Any]] = {}
    results: List[Dict[str, Any]] = []

    for result in report:
        if isinstance(result, UnpatchedPackage):
            rule_id = result.advisory.id
            if rule_id not in rules:
                rules[rule_id] = _advisory_rule(result)
            results.append(_advisory_result(result, uri))
        elif isinstance(result, InsecureSource):
            if INSECURE_SOURCE_RULE not in rules:
                rules[INSECURE_SOURCE_RULE] = _insecure_source_rule()
            results.append(_insecure_source_result(result, uri))

    logger.debug(f"Generated {len(results)} SARIF results across {len(rules)} rules")

    return {
        "version": "2.1.0",
        "$schema": SARIF_SCHEMA,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": PROGRAM_NAME,
                        "version": __version__,
                        "informationUri": INFORMATION_URI,
                        "rules": list(rules.values()),
                    }
                },
                "results": results,
            }
        ],
    }


def _artifact_uri(path: str, root: str) -> str:
    absolute = os.path.abspath(path)
    try:
        relative = os.path.relpath(absolute, root)
    except ValueError:
        return absolute.replace(os.sep, "/")
    if relative.startswith(".."):
        return absolute.replace(os.sep, "/")
    return relative.replace(os.sep, "/")


def _level(criticality):
    return CRITICALITY_LEVELS.get(criticality, UNKNOWN_LEVEL)


def _advisory_rule(result: UnpatchedPackage) -> Dict[str, Any]:
    advisory = result.advisory
    level, security_severity = _level(advisory.criticality)
    rule = {
        "id": advisory.id,
        "name": advisory.id.replace("-", ""),
        "shortDescription": {"text": advisory.title or advisory.id},
        "fullDescription": {"text": advisory.details or advisory.title or advisory.id},
        "defaultConfiguration": {"level": level},
        "properties": {
            "tags": ["security", "vulnerability"] + list(advisory.aliases),
            "security-severity": security_severity,
        },
    }
    if advisory.url:
        rule["helpUri"] = advisory.url
    patched = advisory.patched_versions
    if patched:
        rule["help"] = {"text": f"Upgrade {advisory.package} to {' or '.join('>= ' + v for v in patched)}."}
    else:
        rule["help"] = {"text": f"No patched version of {advisory.package} is available; remove or replace it."}
    return rule


def _insecure_source_rule() -> Dict[str, Any]:
    return {
        "id": INSECURE_SOURCE_RULE,
        "name": "InsecureSource",
        "shortDescription": {"text": "Package source fetched over an insecure transport"},
        "fullDescription": {
            "text": "Packages are downloaded over a transport without encryption and can be tampered with in transit."
        },
        "defaultConfiguration": {"level": "warning"},
        "help": {"text": "Use an https:// (or ssh) URL for the package source."},
        "properties": {"tags": ["security"], "security-severity": "5.0"},
    }


def _location(uri: str, line=None) -> Dict[str, Any]:
    physical = {"artifactLocation": {"uri": uri}}
    if line:
        physical["region"] = {"startLine": line}
    return {"physicalLocation": physical}


def _advisory_result(result: UnpatchedPackage, uri: str) -> Dict[str, Any]:
    package, advisory = result.package, result.advisory
    level, _ = _level(advisory.criticality)
    return {
        "ruleId": advisory.id,
        "level": level,
        "message": {"text": f"{package.name} {package.version} is vulnerable: {advisory.title or advisory.id}"},
        "locations": [_location(uri, package.line)],
        "partialFingerprints": {"packageVersion": f"{package.name}@{package.version}"},
    }


def _insecure_source_result(result: InsecureSource, uri: str) -> Dict[str, Any]:
    return {
        "ruleId": INSECURE_SOURCE_RULE,
        "level": "warning",
        "message": {"text": f"Insecure Source URI found: {result.source}"},
        "locations": [_location(uri)],
    }


@register_format("sarif")
class SarifFormat(ReportFormat):
    """SARIF 2.1.0 for code scanning integrations."""

    description = "SARIF 2.1.0, for GitHub code scanning and other SARIF consumers"

    def print_report(self, report: Report, output: IO[str]) -> None:
        json.dump(convert_report_to_sarif(report), output, indent=2, ensure_ascii=False)
        output.write("\n")
