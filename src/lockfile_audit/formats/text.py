# lockfile_audit/formats/text.py

from typing import IO

from rich.console import Console

from ..scanner import InsecureSource, Report, UnpatchedPackage
from ..utilities.console import get_console, labelled
from .base import ReportFormat
from .registry import register_format

CRITICALITY_STYLES = {
    "low": None,
    "medium": "yellow",
    "high": "bold red",
    "critical": "bold red",
}


@register_format("text")
class TextFormat(ReportFormat):
    """Human readable report, coloured when written to a terminal."""

    description = "Plain text, one block per finding (default)"

    def print_report(self, report: Report, output: IO[str]) -> None:
        console = get_console(output)

        for result in report:
            if isinstance(result, InsecureSource):
                self.print_warning(console, f"Insecure Source URI found: {result.source}")
            elif isinstance(result, UnpatchedPackage):
                self.print_advisory(console, result)

        if report.vulnerable:
            console.print("Vulnerabilities found!", style="red")
        elif not self.quiet:
            console.print("No vulnerabilities found", style="green")

    def print_warning(self, console: Console, message: str) -> None:
        console.print(message, style="yellow")

    def print_advisory(self, console: Console, result: UnpatchedPackage) -> None:
        package, advisory = result.package, result.advisory

        console.print(labelled("Name", package.name))
        console.print(labelled("Version", package.version))
        console.print(labelled("Advisory", advisory.id))
        if advisory.cve_ids:
            console.print(labelled("CVE", ", ".join(advisory.cve_ids)))
        if advisory.ghsa_ids:
            console.print(labelled("GHSA", ", ".join(advisory.ghsa_ids)))

        criticality = advisory.criticality
        if criticality:
            console.print(labelled("Criticality", criticality.capitalize()), style=CRITICALITY_STYLES[criticality])
        else:
            console.print(labelled("Criticality", "Unknown"))

        if advisory.url:
            console.print(labelled("URL", advisory.url))
        if advisory.title:
            console.print(labelled("Title", advisory.title))

        if self.verbose and advisory.details:
            console.print("Description:", style="red")
            console.print()
            for line in advisory.details.splitlines():
                console.print(f"  {line}".rstrip())
            console.print()

        patched = advisory.patched_versions
        if patched:
            console.print(labelled("Solution", f"upgrade to {', '.join(f'>= {v}' for v in patched)}"))
        else:
            console.print(labelled("Solution", "remove or disable this package until a patch is available!"))
        console.print()
