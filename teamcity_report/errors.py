"""Errors raised while converting go test output."""

from __future__ import annotations


class ReportError(Exception):
    """Base class for conditions that make the report unusable."""


class UnknownTestError(ReportError):
    """A ``--- PASS/FAIL/SKIP`` line named a test with no ``=== RUN`` line.

    This happens when ``go test`` is run without ``-v``: the start markers
    are then missing and results cannot be attributed to a package.
    """

    def __init__(self, test_name: str) -> None:
        super().__init__(
            f"test {test_name!r} finished without a matching '=== RUN' line "
            "(run `go test` with -v)"
        )
        self.test_name: str = test_name
