"""go test -v output line classifier.

Maps a single line of ``go test -v`` output to the event it represents.
go test output is of the following form::

    === RUN   TestName
    --- (PASS|FAIL|SKIP): TestName (1.23s)
    [failure output if applicable]
    (PASS|FAIL)                     <- package verdict, dropped
    (ok|FAIL|?)  path/to/package  4.56s

Grammars are tried in order and the first match wins, so a bare ``FAIL``
is cruft while ``FAIL some/pkg`` finishes a package.  Anything else is
returned unmodified as ``Unclassified``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Union

PASS = "PASS"
FAIL = "FAIL"
SKIP = "SKIP"

CRUFT_PATTERN = re.compile(r"^(PASS|FAIL)$")
TEST_RUN_PATTERN = re.compile(r"^=== RUN\s+(\S+)")
TEST_FINISH_PATTERN = re.compile(r"^--- (PASS|FAIL|SKIP):\s+(\S+) \(([\d.]+)s\)")
PACKAGE_FINISH_PATTERN = re.compile(r"^(ok|FAIL|\?)\s+(\S+)")


@dataclass(frozen=True)
class Cruft:
    """Bare package verdict line; carries nothing."""


@dataclass(frozen=True)
class TestStarted:
    """``=== RUN`` marker for a single test."""

    __test__ = False

    name: str


@dataclass(frozen=True)
class TestFinished:
    """``--- STATUS: name (Ns)`` result line."""

    __test__ = False

    status: str  # PASS, FAIL or SKIP
    name: str
    duration_seconds: float = 0.0


@dataclass(frozen=True)
class PackageFinished:
    """Package summary line; the verdict token is not kept."""

    package: str


@dataclass(frozen=True)
class Unclassified:
    """Any other line, kept verbatim."""

    line: str


Event = Union[Cruft, TestStarted, TestFinished, PackageFinished, Unclassified]


def parse_duration(text: str) -> float:
    """Parse a go duration literal in seconds, falling back to 0.0."""
    try:
        seconds = float(text)
    except ValueError:
        return 0.0
    if not math.isfinite(seconds) or seconds < 0:
        return 0.0
    return seconds


def classify_line(line: str) -> Event:
    """Classify one line of go test output.

    A trailing carriage return is dropped first so that CRLF input is
    classified the same as LF input.

    Args:
        line: A single line without its newline terminator.

    Returns:
        The event the line represents.
    """
    if line.endswith("\r"):
        line = line[:-1]

    if CRUFT_PATTERN.match(line):
        return Cruft()

    match = TEST_RUN_PATTERN.match(line)
    if match:
        return TestStarted(name=match.group(1))

    match = TEST_FINISH_PATTERN.match(line)
    if match:
        return TestFinished(
            status=match.group(1),
            name=match.group(2),
            duration_seconds=parse_duration(match.group(3)),
        )

    match = PACKAGE_FINISH_PATTERN.match(line)
    if match:
        return PackageFinished(package=match.group(2))

    return Unclassified(line=line)
