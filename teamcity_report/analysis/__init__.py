"""go test output analysis: line classification."""

from teamcity_report.analysis.line_classifier import (
    Cruft,
    Event,
    PackageFinished,
    TestFinished,
    TestStarted,
    Unclassified,
    classify_line,
)

__all__ = [
    "Cruft",
    "Event",
    "PackageFinished",
    "TestFinished",
    "TestStarted",
    "Unclassified",
    "classify_line",
]
