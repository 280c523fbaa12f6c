"""Entry point for the go test to TeamCity converter.

Reads `go test -v` output from stdin (or --input), writes TeamCity service
messages to stdout (or --output), and optionally a YAML summary of every
reported package.

Usage::

    go test -v ./... 2>&1 | teamcity-report
"""

from __future__ import annotations

import argparse
import io
import sys
from pathlib import Path
from typing import TextIO

from teamcity_report.config import DEFAULT_CONFIG_PATH, ConverterConfig
from teamcity_report.errors import ReportError
from teamcity_report.execution.converter import Converter
from teamcity_report.reporting.escaper import ESCAPE_MODES
from teamcity_report.reporting.summary import SummaryReporter

# Undecodable bytes are carried through as-is
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"
# Lines end at \n only; a lone \r is part of the line
_NEWLINE = "\n"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Convert `go test -v` output to TeamCity service messages"
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Read go test output from this file instead of stdin",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write service messages to this file instead of stdout",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the JSON config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--escape-mode",
        choices=sorted(ESCAPE_MODES),
        default=None,
        help="How non-ASCII characters are escaped (default: from config, legacy)",
    )
    parser.add_argument(
        "--flush-unterminated",
        action="store_true",
        default=None,
        help="Report results of a package whose summary line never arrived",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Path to write a YAML summary of all reported packages",
    )
    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace) -> ConverterConfig:
    """Load the config file and apply command-line overrides."""
    config = ConverterConfig(args.config_file)
    config.set_config(
        escape_mode=args.escape_mode,
        flush_unterminated=args.flush_unterminated,
    )
    config.validate()
    return config


def _reconfigure(stream: TextIO, newline: str | None = None) -> None:
    if isinstance(stream, io.TextIOWrapper):
        if newline is None:
            stream.reconfigure(errors=_ERRORS)
        else:
            stream.reconfigure(errors=_ERRORS, newline=newline)


def _convert(
    source: TextIO, dest: TextIO, config: ConverterConfig, reporter: SummaryReporter
) -> None:
    def sink(line: str) -> None:
        dest.write(line + "\n")
        dest.flush()

    converter = Converter(sink, config, on_flush=[reporter.add_suite])
    converter.run(source)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = _load_config(args)
    except ValueError as e:
        print(f"Error: Invalid config: {e}", file=sys.stderr)
        return 1

    reporter = SummaryReporter()
    exit_code = 0
    try:
        if args.input is not None:
            source: TextIO = open(
                args.input, encoding=_ENCODING, errors=_ERRORS, newline=_NEWLINE
            )
        else:
            source = sys.stdin
            _reconfigure(source, newline=_NEWLINE)
    except OSError as e:
        print(f"Error: Cannot read input: {e}", file=sys.stderr)
        return 1

    try:
        if args.output is not None:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            with open(args.output, "w", encoding=_ENCODING, errors=_ERRORS) as dest:
                _convert(source, dest, config, reporter)
        else:
            _reconfigure(sys.stdout)
            _convert(source, sys.stdout, config, reporter)
    except ReportError as e:
        print(f"Error: {e}", file=sys.stderr)
        exit_code = 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        exit_code = 1
    finally:
        if source is not sys.stdin:
            source.close()

    if args.report is not None:
        try:
            reporter.write_yaml(args.report)
        except OSError as e:
            print(f"Error: Cannot write report: {e}", file=sys.stderr)
            return 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
