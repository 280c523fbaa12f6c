"""End-to-end integration tests exercising the full pipeline.

Feeds realistic `go test -v ./...` transcripts through the converter, both
in-process and through the `python -m teamcity_report` entry point, and
checks the emitted service message stream.
"""

from __future__ import annotations

import subprocess
import sys
import tempfile
from pathlib import Path

import yaml

from teamcity_report.execution.converter import convert

# ---------------------------------------------------------------------------
# Transcripts
# ---------------------------------------------------------------------------

# Two packages; the first runs parallel tests whose results interleave.
PARALLEL_RUN = """\
go: downloading github.com/stretchr/testify v1.8.4
=== RUN   TestCache
=== PAUSE TestCache
=== RUN   TestStore
=== PAUSE TestStore
=== RUN   TestIndex
--- SKIP: TestIndex (0.00s)
    index_test.go:9: needs a database
=== CONT  TestCache
=== CONT  TestStore
--- PASS: TestStore (0.12s)
--- FAIL: TestCache (0.34s)
    cache_test.go:41:
        \tError Trace:\tcache_test.go:41
        \tError:      \tNot equal:
        \t            \texpected: 1
        \t            \tactual  : 2
        \tTest:       \tTestCache
FAIL
FAIL\texample.com/app/storage\t0.48s
=== RUN   TestRoute
--- PASS: TestRoute (0.01s)
PASS
ok  \texample.com/app/http\t0.02s
?   \texample.com/app/cmd\t[no test files]
"""


def _service_messages(lines: list[str]) -> list[str]:
    return [l for l in lines if l.startswith("##teamcity[")]


class TestInProcess:
    """Full transcript through convert()."""

    def test_passthrough_before_first_package(self):
        output = convert(PARALLEL_RUN.splitlines())
        assert output[0] == "go: downloading github.com/stretchr/testify v1.8.4"

    def test_pause_and_cont_lines_pass_through(self):
        output = convert(PARALLEL_RUN.splitlines())
        assert "=== PAUSE TestCache" in output
        assert "=== CONT  TestStore" in output

    def test_skipped_test_output_passes_through(self):
        """Output after a SKIP result is not captured."""
        output = convert(PARALLEL_RUN.splitlines())
        skip_note = output.index("    index_test.go:9: needs a database")
        suite_start = output.index(
            "##teamcity[testSuiteStarted name='example.com/app/storage']"
        )
        assert skip_note < suite_start

    def test_suites_in_summary_order(self):
        output = convert(PARALLEL_RUN.splitlines())
        suites = [l for l in output if "testSuiteStarted" in l]
        assert suites == [
            "##teamcity[testSuiteStarted name='example.com/app/storage']",
            "##teamcity[testSuiteStarted name='example.com/app/http']",
            "##teamcity[testSuiteStarted name='example.com/app/cmd']",
        ]

    def test_storage_suite(self):
        output = convert(PARALLEL_RUN.splitlines())
        start = output.index(
            "##teamcity[testSuiteStarted name='example.com/app/storage']"
        )
        end = output.index(
            "##teamcity[testSuiteFinished name='example.com/app/storage']"
        )
        suite = output[start + 1:end]
        assert _service_messages(suite) == [
            "##teamcity[testStarted name='TestCache' captureStandardOutput='true']",
            "##teamcity[testFailed name='TestCache' "
            "message='Error:|0x0020|0x0020|0x0020|0x0020|0x0020|0x0020"
            "|0x0009Not|0x0020equal:']",
            "##teamcity[testFinished name='TestCache' duration='340']",
            "##teamcity[testStarted name='TestStore' captureStandardOutput='true']",
            "##teamcity[testFinished name='TestStore' duration='120']",
            "##teamcity[testStarted name='TestIndex' captureStandardOutput='true']",
            "##teamcity[testIgnored name='TestIndex']",
            "##teamcity[testFinished name='TestIndex' duration='0']",
        ]
        # Captured failure output sits between TestCache's start and failure
        assert suite[1] == "    cache_test.go:41:"
        assert suite[6] == "        \tTest:       \tTestCache"

    def test_cruft_never_emitted(self):
        output = convert(PARALLEL_RUN.splitlines())
        assert "PASS" not in output
        assert "FAIL" not in output


class TestCommandLine:
    """Full transcript through `python -m teamcity_report`."""

    def test_module_entry_point(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            report_path = Path(tmpdir) / "summary.yaml"
            result = subprocess.run(
                [
                    sys.executable, "-m", "teamcity_report",
                    "--config-file", str(Path(tmpdir) / "none.json"),
                    "--report", str(report_path),
                ],
                input=PARALLEL_RUN,
                capture_output=True,
                text=True,
                timeout=60,
            )
            assert result.returncode == 0, result.stderr
            loaded = yaml.safe_load(report_path.read_text())

        assert result.stdout.splitlines() == convert(PARALLEL_RUN.splitlines())
        summary = loaded["report"]["summary"]
        assert summary["total"] == 4
        assert summary["passed"] == 2
        assert summary["failed"] == 1
        assert summary["skipped"] == 1

    def test_missing_verbose_flag_fails(self):
        result = subprocess.run(
            [sys.executable, "-m", "teamcity_report"],
            input="--- PASS: TestA (0.00s)\nok example.com/a 0.01s\n",
            capture_output=True,
            text=True,
            timeout=60,
        )
        assert result.returncode == 1
        assert "TestA" in result.stderr
        assert "-v" in result.stderr
        assert result.stdout == ""
