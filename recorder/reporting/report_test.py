"""Tests for recording report generation."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import yaml

from recorder.analysis.output_parser import TestEvent
from recorder.recording.session import RecordingAttempt
from recorder.reporting.report import RecordingReport
from recorder.selection.config import RecordingConfig
from recorder.selection.policy import select_tests


EVENTS = [
    TestEvent("a.spec.js", "should login", False),
    TestEvent("a.spec.js", "shows the form", True),
    TestEvent("b.spec.js", "adds an item", False),
]


def _report() -> RecordingReport:
    report = RecordingReport()
    report.set_suite_result(2, EVENTS)
    config = RecordingConfig(max_recordings=1)
    report.set_selection(config, select_tests(EVENTS, config))
    report.add_attempts([
        RecordingAttempt(
            spec="a.spec.js",
            title="should login",
            passed=False,
            status="uploaded",
            recording_id="r1",
            url="https://app.replay.io/recording/r1",
        ),
    ])
    return report


class TestToDict:
    """Tests for the report structure."""

    def test_summary(self):
        """Counts cover tests, selection and attempt statuses."""
        data = _report().to_dict()["report"]
        assert data["exit_code"] == 2
        assert data["summary"] == {
            "tests": 3,
            "passed": 1,
            "failed": 2,
            "eligible": 2,
            "selected": 1,
            "uploaded": 1,
        }

    def test_tests_and_recordings_listed(self):
        """Every parsed test and every attempt is listed."""
        data = _report().to_dict()["report"]
        assert data["tests"][0] == {
            "spec": "a.spec.js", "title": "should login", "passed": False,
        }
        assert data["recordings"][0]["url"] == "https://app.replay.io/recording/r1"
        assert data["config"]["max_recordings"] == 1

    def test_empty_report(self):
        """A report with nothing recorded is still valid."""
        data = RecordingReport().to_dict()["report"]
        assert data["exit_code"] is None
        assert data["summary"]["selected"] == 0
        assert "config" not in data


class TestWriteReport:
    """Tests for writing reports to disk."""

    def test_json(self):
        """Paths without a YAML suffix get JSON."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "out" / "recordings.json"
            _report().write_report(path)
            data = json.loads(path.read_text())
            assert data["report"]["summary"]["uploaded"] == 1

    def test_yaml(self):
        """YAML suffixes get YAML."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "recordings.yaml"
            _report().write_report(path)
            data = yaml.safe_load(path.read_text())
            assert data["report"]["recordings"][0]["recording_id"] == "r1"
