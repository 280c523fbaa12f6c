"""TeamCity service message formatting for buffered test results.

See https://www.jetbrains.com/help/teamcity/service-messages.html for the
message grammar.  Every attribute value goes through ``escape``; captured
test output is emitted as-is so TeamCity shows it as the test's stdout.
"""

from __future__ import annotations

import re
from typing import Iterable

from teamcity_report.analysis.line_classifier import FAIL, SKIP
from teamcity_report.execution.buffer import TestRecord
from teamcity_report.reporting.escaper import LEGACY, escape

ERROR_LINE_PATTERN = re.compile(r"Error:\s+(.+)$", re.MULTILINE)


def service_message(message_name: str, attrs: dict[str, str], mode: str = LEGACY) -> str:
    """Build one ``##teamcity[...]`` line.

    Attributes are written in insertion order.
    """
    parts = [message_name]
    for key, value in attrs.items():
        parts.append(f"{key}='{escape(value, mode)}'")
    return "##teamcity[" + " ".join(parts) + "]"


def failure_message(output: list[str]) -> str:
    """Summarise captured failure output in one line.

    Uses the first ``Error: ...`` match (testify style assertions) if there
    is one, otherwise the first output line stripped of whitespace.
    """
    text = "\n".join(output)
    match = ERROR_LINE_PATTERN.search(text)
    if match:
        return match.group(0)
    return text.split("\n")[0].strip()


def duration_ms(duration_seconds: float) -> int:
    """Whole milliseconds in *duration_seconds*, truncated.

    The product is rounded to microseconds first so that float noise does
    not lose a millisecond (``4.35 * 1000`` is ``4349.999...``).
    """
    return int(round(duration_seconds * 1000, 3))


def format_test(record: TestRecord, mode: str = LEGACY) -> list[str]:
    """Lines for one test: start, captured output, status, finish.

    There is no success message in TeamCity, so PASS adds nothing between
    start and finish.  A record with no result (PENDING) is reported as
    started and finished only.
    """
    name = record.name
    lines = [
        service_message(
            "testStarted",
            {"name": name, "captureStandardOutput": "true"},
            mode,
        )
    ]
    lines.extend(record.output)

    if record.status == FAIL:
        lines.append(
            service_message(
                "testFailed",
                {"name": name, "message": failure_message(record.output)},
                mode,
            )
        )
    elif record.status == SKIP:
        lines.append(service_message("testIgnored", {"name": name}, mode))

    lines.append(
        service_message(
            "testFinished",
            {"name": name, "duration": str(duration_ms(record.duration_seconds))},
            mode,
        )
    )
    return lines


def format_suite(
    package: str, records: Iterable[TestRecord], mode: str = LEGACY
) -> list[str]:
    """Lines for a whole package, records in the order given."""
    lines = [service_message("testSuiteStarted", {"name": package}, mode)]
    for record in records:
        lines.extend(format_test(record, mode))
    lines.append(service_message("testSuiteFinished", {"name": package}, mode))
    return lines
