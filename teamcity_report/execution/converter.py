"""Streaming go test → TeamCity converter.

Ties the line classifier and the dispatcher to a line source and a line
sink.  One line is processed at a time and nothing is read ahead.
"""

from __future__ import annotations

import sys
from typing import Callable, Iterable

from teamcity_report.analysis.line_classifier import classify_line
from teamcity_report.config import ConverterConfig
from teamcity_report.execution.dispatcher import (
    DispatcherState,
    FlushedSuite,
    Step,
    advance,
    end_of_input,
)

FlushHook = Callable[[FlushedSuite], None]


class Converter:
    """Feeds lines through the state machine and writes what it emits.

    Args:
        sink: Called with every output line (without newline).
        config: Converter options; defaults when None.
        on_flush: Optional callbacks invoked after a package is emitted.
    """

    def __init__(
        self,
        sink: Callable[[str], None],
        config: ConverterConfig | None = None,
        on_flush: list[FlushHook] | None = None,
    ) -> None:
        self.sink = sink
        self.config = config if config is not None else ConverterConfig()
        self.on_flush: list[FlushHook] = list(on_flush or [])
        self.state = DispatcherState()
        self.closed = False

    def feed(self, line: str) -> None:
        """Process one input line, with or without its newline."""
        if self.closed:
            raise RuntimeError("Converter is closed")
        line = line.rstrip("\n")
        step = advance(self.state, classify_line(line), self.config.escape_mode)
        self._emit(step)

    def close(self) -> None:
        """Signal end of input; handles a package with no summary line."""
        if self.closed:
            return
        self.closed = True
        step = end_of_input(
            self.state,
            flush_unterminated=self.config.flush_unterminated,
            package=self.config.unterminated_package_name,
            mode=self.config.escape_mode,
        )
        self._emit(step)

    def run(self, lines: Iterable[str]) -> None:
        """Process every line of *lines*, then close."""
        for line in lines:
            self.feed(line)
        self.close()

    def _emit(self, step: Step) -> None:
        self.state = step.state
        for line in step.lines:
            self.sink(line)
        for warning in self.state.warnings:
            print(warning, file=sys.stderr)
        self.state.warnings.clear()
        if step.suite is not None:
            for hook in self.on_flush:
                hook(step.suite)


def convert(
    lines: Iterable[str], config: ConverterConfig | None = None
) -> list[str]:
    """Convert a complete go test transcript and return the output lines."""
    output: list[str] = []
    Converter(output.append, config).run(lines)
    return output
