# lockfile_audit/formats/json_format.py

import json
from datetime import datetime, timezone
from typing import IO

from ..scanner import Report
from ..version import __version__
from .base import ReportFormat
from .registry import register_format


@register_format("json")
class JsonFormat(ReportFormat):
    """Machine readable report: every result with its full advisory."""

    description = "JSON document with one entry per finding"

    def print_report(self, report: Report, output: IO[str]) -> None:
        document = {
            "version": __version__,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "lockfile": report.lockfile,
            "results": [result.to_dict() for result in report],
        }
        json.dump(document, output, indent=2, ensure_ascii=False)
        output.write("\n")
