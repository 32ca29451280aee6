# lockfile_audit/formats/cyclonedx.py

"""
CycloneDX 1.6 JSON report.

The locked packages become ``pkg:pypi`` components and every unpatched
package a vulnerability that affects its component. Insecure sources have no
CycloneDX equivalent and are recorded as BOM metadata properties.
"""

import logging
from typing import Dict, IO, Optional

from cyclonedx.model import Property, XsUri
from cyclonedx.model.bom import Bom
from cyclonedx.model.component import Component, ComponentType
from cyclonedx.model.vulnerability import (
    BomTarget,
    Vulnerability,
    VulnerabilityRating,
    VulnerabilityReference,
    VulnerabilityScoreSource,
    VulnerabilitySeverity,
    VulnerabilitySource,
)
from cyclonedx.output.json import JsonV1Dot6
from packageurl import PackageURL

from ..advisory import Advisory
from ..lockfile import LockedPackage
from ..scanner import Report
from .base import ReportFormat
from .registry import register_format

logger = logging.getLogger("lockfile-audit")

OSV_URL = "https://osv.dev/vulnerability/"
INSECURE_SOURCE_PROPERTY = "lockfile-audit:insecure-source"

SEVERITIES = {
    "critical": VulnerabilitySeverity.CRITICAL,
    "high": VulnerabilitySeverity.HIGH,
    "medium": VulnerabilitySeverity.MEDIUM,
    "low": VulnerabilitySeverity.LOW,
}

# Vector prefix -> scoring method; the prefix is stripped from the rendered vector
CVSS_SCORE_SOURCES = (
    ("CVSS:3.1/", VulnerabilityScoreSource.CVSS_V3_1),
    ("CVSS:3.0/", VulnerabilityScoreSource.CVSS_V3),
    ("CVSS:4.0/", VulnerabilityScoreSource.CVSS_V4),
)


def _component(package: LockedPackage) -> Component:
    purl = PackageURL(type="pypi", name=package.name, version=package.version)
    return Component(
        name=package.name,
        version=package.version,
        type=ComponentType.LIBRARY,
        purl=purl,
        bom_ref=purl.to_string(),
    )


def _source(identifier: str) -> Optional[VulnerabilitySource]:
    if identifier.startswith("CVE-"):
        return VulnerabilitySource(name="NVD", url=XsUri(f"https://nvd.nist.gov/vuln/detail/{identifier}"))
    if identifier.startswith("GHSA-"):
        return VulnerabilitySource(name="GitHub", url=XsUri(f"https://github.com/advisories/{identifier}"))
    return VulnerabilitySource(name="OSV", url=XsUri(f"{OSV_URL}{identifier}"))


def _score_source(vector: Optional[str]) -> VulnerabilityScoreSource:
    for prefix, source in CVSS_SCORE_SOURCES:
        if vector and vector.startswith(prefix):
            return source
    return VulnerabilityScoreSource.OTHER


def _rating(advisory: Advisory) -> Optional[VulnerabilityRating]:
    severity = SEVERITIES.get(advisory.criticality) if advisory.criticality else None
    if severity is None and not advisory.cvss_vector:
        return None

    return VulnerabilityRating(
        severity=severity or VulnerabilitySeverity.UNKNOWN,
        method=_score_source(advisory.cvss_vector),
        vector=advisory.cvss_vector,
    )


def _vulnerability(advisory: Advisory, component: Component) -> Vulnerability:
    patched = advisory.patched_versions
    if patched:
        recommendation = f"Upgrade {advisory.package} to {' or '.join('>= ' + v for v in patched)}"
    else:
        recommendation = f"Remove or disable {advisory.package} until a patch is available"

    rating = _rating(advisory)
    return Vulnerability(
        bom_ref=f"{advisory.id}/{component.bom_ref.value}",
        id=advisory.id,
        source=VulnerabilitySource(name="OSV", url=XsUri(f"{OSV_URL}{advisory.id}")),
        references=[VulnerabilityReference(id=alias, source=_source(alias)) for alias in advisory.aliases],
        ratings=[rating] if rating else [],
        description=advisory.title or None,
        detail=advisory.details or None,
        recommendation=recommendation,
        affects=[BomTarget(ref=component.bom_ref.value)],
    )


def build_bom(report: Report) -> Bom:
    """Build a CycloneDX BOM from a scan report."""
    bom = Bom()
    components: Dict[str, Component] = {}

    for package in report.packages:
        component = _component(package)
        if component.bom_ref.value not in components:
            components[component.bom_ref.value] = component
            bom.components.add(component)

    for result in report.unpatched_packages:
        component = components.get(_component(result.package).bom_ref.value)
        if component is None:
            component = _component(result.package)
            components[component.bom_ref.value] = component
            bom.components.add(component)
        bom.vulnerabilities.add(_vulnerability(result.advisory, component))

    for result in report.insecure_sources:
        bom.metadata.properties.add(Property(name=INSECURE_SOURCE_PROPERTY, value=result.source))

    logger.debug(f"Built CycloneDX BOM with {len(bom.components)} components and {len(bom.vulnerabilities)} vulnerabilities")
    return bom


@register_format("cyclonedx")
class CycloneDXFormat(ReportFormat):
    """CycloneDX JSON BOM with vulnerabilities."""

    description = "CycloneDX 1.6 JSON bill of materials with the vulnerabilities found"

    def print_report(self, report: Report, output: IO[str]) -> None:
        output.write(JsonV1Dot6(build_bom(report)).output_as_string(indent=2))
        output.write("\n")
