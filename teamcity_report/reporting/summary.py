"""Summary report generation for converted go test runs.

Collects every package the converter flushes and writes a YAML summary
with per-package and overall counts.  Attach ``SummaryReporter.add_suite``
to ``Converter.on_flush`` to feed it.
"""

from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any

import yaml

from teamcity_report.analysis.line_classifier import FAIL, PASS, SKIP
from teamcity_report.execution.buffer import PENDING, TestRecord
from teamcity_report.execution.dispatcher import FlushedSuite

# Report status names for go test result tokens
STATUS_NAMES = {
    PASS: "passed",
    FAIL: "failed",
    SKIP: "skipped",
    PENDING: "no_result",
}


class SummaryReporter:
    """Collects flushed packages and generates YAML summaries."""

    def __init__(self) -> None:
        self.suites: list[FlushedSuite] = []

    def add_suite(self, suite: FlushedSuite) -> None:
        """Add a flushed package to the report.

        Args:
            suite: Package name and its records in report order.
        """
        self.suites.append(suite)

    def generate_report(self) -> dict[str, Any]:
        """Generate the report data structure.

        Returns:
            Dictionary representing the full report, suitable for
            YAML serialization.
        """
        now = datetime.datetime.now(tz=datetime.timezone.utc).isoformat()
        all_records = [r for s in self.suites for r in s.records]

        report: dict[str, Any] = {
            "generated_at": now,
            "summary": _compute_summary(all_records),
            "packages": [self._format_suite(s) for s in self.suites],
        }
        return {"report": report}

    def write_yaml(self, path: Path) -> None:
        """Write the report as a YAML file.

        Args:
            path: File path to write the YAML report to.
        """
        report = self.generate_report()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(
                report,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

    def _format_suite(self, suite: FlushedSuite) -> dict[str, Any]:
        summary = _compute_summary(suite.records)
        return {
            "name": suite.package,
            "status": "failed" if summary["failed"] else "passed",
            "summary": summary,
            "tests": [_format_record(r) for r in suite.records],
        }


def _format_record(record: TestRecord) -> dict[str, Any]:
    """Format a single test record for the report."""
    entry: dict[str, Any] = {
        "name": record.name,
        "status": STATUS_NAMES.get(record.status, record.status),
        "duration_seconds": round(record.duration_seconds, 3),
    }
    # Only failing tests carry captured output
    if record.output:
        entry["output"] = "\n".join(record.output)
    return entry


def _compute_summary(records: list[TestRecord]) -> dict[str, Any]:
    """Compute counts and total duration for *records*."""
    return {
        "total": len(records),
        "passed": sum(1 for r in records if r.status == PASS),
        "failed": sum(1 for r in records if r.status == FAIL),
        "skipped": sum(1 for r in records if r.status == SKIP),
        "total_duration_seconds": round(
            sum(r.duration_seconds for r in records), 3
        ),
    }
