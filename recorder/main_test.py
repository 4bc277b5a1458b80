"""Tests for the recorder main entry point."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from recorder.analysis.output_parser import TestEvent
from recorder.execution.run_options import DEFAULT_RUNNER, DEFAULT_TIMEOUT
from recorder.execution.suite import RUNNER_NOT_FOUND, SuiteResult
from recorder.main import main, parse_args
from recorder.recording.session import RecordingAttempt
from recorder.selection.config import CONFIG_ENV, CONFIG_FILE_ENV


SUITE_OUTPUT = (
    "Running: a.spec.js (1 of 2)\n"
    "  ✓ shows the form (12ms)\n"
    "  1) should login\n"
    "Running: b.spec.js (2 of 2)\n"
    "  1) adds an item\n"
    "  1 passing\n"
    "  2 failing\n"
)


@pytest.fixture(autouse=True)
def _no_recording_config(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    monkeypatch.delenv(CONFIG_FILE_ENV, raising=False)


def _attempts(selected, options, store):
    return [
        RecordingAttempt(
            spec=e.spec,
            title=e.title,
            passed=e.passed,
            status="uploaded",
            recording_id=f"r{i}",
            url=f"https://app.replay.io/recording/r{i}",
        )
        for i, e in enumerate(selected)
    ]


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Defaults run the standard runner with recordings enabled."""
        args = parse_args([])
        assert args.runner == DEFAULT_RUNNER
        assert args.timeout == DEFAULT_TIMEOUT
        assert args.exit is True
        assert args.record is None
        assert args.no_recordings is False
        assert args.report is None

    def test_runner_is_split(self):
        """--runner accepts a shell-style command line."""
        args = parse_args(["--runner", "yarn cypress run --config-file 'a b.json'"])
        assert args.runner == ["yarn", "cypress", "run", "--config-file", "a b.json"]

    def test_runner_flags(self):
        """Runner flags are collected for the command line."""
        args = parse_args([
            "--browser", "chrome",
            "--no-exit",
            "--record",
            "--port", "8080",
            "--testing-type", "component",
            "--report", "out/report.json",
        ])
        assert args.browser == "chrome"
        assert args.exit is False
        assert args.record is True
        assert args.port == 8080
        assert args.testing_type == "component"
        assert args.report == Path("out/report.json")


class TestMain:
    """Tests for the main flow."""

    def test_invalid_options_exit_early(self, capsys):
        """Conflicting flags are rejected before anything runs."""
        with patch("recorder.main.run_suite") as run_suite:
            assert main(["--headed", "--headless"]) == 1
            run_suite.assert_not_called()
        assert "Error:" in capsys.readouterr().err

    def test_records_failures_and_keeps_suite_exit_code(self):
        """Failing tests are recorded; the suite's exit code is returned."""
        with patch("recorder.main.run_suite",
                   return_value=SuiteResult(2, SUITE_OUTPUT)) as run_suite, \
             patch("recorder.main.record_tests", side_effect=_attempts) as record, \
             patch("recorder.main.ReplayCli"):
            assert main(["--project", "/proj", "--runner", "runner"]) == 2

        command = run_suite.call_args[0][0]
        assert command[:3] == ["runner", "--project", "/proj"]
        selected = record.call_args[0][0]
        assert selected == [
            TestEvent("a.spec.js", "should login", False),
            TestEvent("b.spec.js", "adds an item", False),
        ]
        assert record.call_args[0][1].project == "/proj"

    def test_recording_problems_do_not_change_exit_code(self):
        """A passing suite stays passing whatever the recordings do."""
        def failing_attempts(selected, options, store):
            return [
                RecordingAttempt(e.spec, e.title, e.passed, "failed", message="upload failed")
                for e in selected
            ]

        config = json.dumps({"record_all": True})
        with patch.dict("os.environ", {CONFIG_ENV: config}), \
             patch("recorder.main.run_suite",
                   return_value=SuiteResult(0, "Running: a.spec.js (1 of 1)\n"
                                               "  ✓ works (1ms)\n")), \
             patch("recorder.main.record_tests", side_effect=failing_attempts) as record, \
             patch("recorder.main.ReplayCli"):
            assert main([]) == 0
        assert record.call_args[0][0] == [TestEvent("a.spec.js", "works", True)]

    def test_nothing_to_record(self):
        """A passing suite with the default policy records nothing."""
        with patch("recorder.main.run_suite",
                   return_value=SuiteResult(0, "  ✓ works (1ms)\n")), \
             patch("recorder.main.record_tests") as record:
            assert main([]) == 0
            record.assert_not_called()

    def test_no_recordings_flag(self):
        """--no-recordings only runs the suite."""
        with patch("recorder.main.run_suite",
                   return_value=SuiteResult(2, SUITE_OUTPUT)), \
             patch("recorder.main.record_tests") as record:
            assert main(["--no-recordings"]) == 2
            record.assert_not_called()

    def test_runner_not_found(self, capsys):
        """A missing runner is reported with its exit code."""
        result = SuiteResult(RUNNER_NOT_FOUND, stderr="Runner not found: nope")
        with patch("recorder.main.run_suite", return_value=result), \
             patch("recorder.main.record_tests") as record:
            assert main(["--runner", "nope"]) == RUNNER_NOT_FOUND
            record.assert_not_called()
        assert "Runner not found: nope" in capsys.readouterr().err

    def test_verbose_lists_tests(self, capsys):
        """--verbose prints every parsed test."""
        with patch("recorder.main.run_suite",
                   return_value=SuiteResult(2, SUITE_OUTPUT)):
            main(["--verbose", "--no-recordings"])
        out = capsys.readouterr().out
        assert "Found tests: 1 passed, 2 failed" in out
        assert '[FAIL] b.spec.js "adds an item"' in out

    def test_report_written(self):
        """--report writes the suite and recording summary."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "report.json"
            with patch("recorder.main.run_suite",
                       return_value=SuiteResult(2, SUITE_OUTPUT)), \
                 patch("recorder.main.record_tests", side_effect=_attempts), \
                 patch("recorder.main.ReplayCli"):
                main(["--report", str(path)])

            data = json.loads(path.read_text())["report"]
            assert data["exit_code"] == 2
            assert data["summary"]["tests"] == 3
            assert data["summary"]["uploaded"] == 2
            assert len(data["recordings"]) == 2
