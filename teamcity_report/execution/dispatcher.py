"""Line event state machine.

Consumes classified events in input order and decides what is emitted.
All state lives in a ``DispatcherState`` that is passed to and returned
from ``advance``, so the machine can be driven without any I/O.

Transitions::

    event               capturing              buffer                emission
    -----------------   --------------------   -------------------   ----------------
    Cruft               unchanged              unchanged             none
    TestStarted         cleared                append pending        none
    TestFinished        set iff FAIL           record result         none
    PackageFinished     cleared                flushed, cleared      suite block
    Unclassified        unchanged              append to capturing   line if not capturing

Output is only captured after a failing result line: go prints a test's
failure details after its ``--- FAIL`` header, while output of passing
tests is passed straight through.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from teamcity_report.analysis.line_classifier import (
    FAIL,
    Cruft,
    Event,
    PackageFinished,
    TestFinished,
    TestStarted,
    Unclassified,
)
from teamcity_report.errors import UnknownTestError
from teamcity_report.execution.buffer import PackageBuffer, TestRecord
from teamcity_report.reporting.escaper import LEGACY
from teamcity_report.reporting.formatter import format_suite


@dataclass
class DispatcherState:
    """Buffered package results and the capturing context.

    ``capturing`` is an index into ``buffer``; it is cleared together with
    the buffer, so it never refers to a record of another package.
    """

    buffer: PackageBuffer = field(default_factory=PackageBuffer)
    capturing: int | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class FlushedSuite:
    """A package whose results have just been emitted."""

    package: str
    records: list[TestRecord]


@dataclass
class Step:
    """Result of feeding one event to the state machine."""

    state: DispatcherState
    lines: list[str] = field(default_factory=list)
    suite: FlushedSuite | None = None


def _flush(state: DispatcherState, package: str, mode: str) -> Step:
    records = list(state.buffer)
    for record in records:
        if not record.finished:
            state.warnings.append(
                f"Warning: test {record.name!r} in {package} has no result line"
            )
    lines = format_suite(package, records, mode)
    state.buffer.clear()
    state.capturing = None
    return Step(state=state, lines=lines, suite=FlushedSuite(package, records))


def advance(state: DispatcherState, event: Event, mode: str = LEGACY) -> Step:
    """Apply one event to *state*.

    Args:
        state: Current dispatcher state; updated in place and returned.
        event: Classified input line.
        mode: Escape mode for emitted service messages.

    Returns:
        The new state and the lines to emit, in order.

    Raises:
        UnknownTestError: If a result line names a test that was never
            started in the current package.
    """
    if isinstance(event, Cruft):
        return Step(state=state)

    if isinstance(event, TestStarted):
        state.capturing = None
        state.buffer.start(event.name)
        return Step(state=state)

    if isinstance(event, TestFinished):
        index = state.buffer.find(event.name)
        if index is None:
            raise UnknownTestError(event.name)
        record = state.buffer[index]
        if record.finished:
            state.warnings.append(
                f"Warning: test {event.name!r} finished more than once; "
                f"keeping {event.status}"
            )
        record.status = event.status
        record.duration_seconds = event.duration_seconds
        state.capturing = index if event.status == FAIL else None
        return Step(state=state)

    if isinstance(event, PackageFinished):
        return _flush(state, event.package, mode)

    if isinstance(event, Unclassified):
        if state.capturing is not None:
            state.buffer[state.capturing].output.append(event.line)
            return Step(state=state)
        return Step(state=state, lines=[event.line])

    raise TypeError(f"Unknown event: {event!r}")


def end_of_input(
    state: DispatcherState,
    flush_unterminated: bool = False,
    package: str = "(unterminated)",
    mode: str = LEGACY,
) -> Step:
    """Handle the end of the input stream.

    Results still buffered belong to a package whose summary line never
    arrived (the run was killed, or output was truncated).  They are
    dropped with a warning unless *flush_unterminated* is set, in which case
    they are reported as a suite named *package*.
    """
    if not len(state.buffer):
        return Step(state=state)

    if flush_unterminated:
        return _flush(state, package, mode)

    state.warnings.append(
        f"Warning: dropping {len(state.buffer)} test result(s) of a package "
        "with no summary line"
    )
    state.buffer.clear()
    state.capturing = None
    return Step(state=state)
