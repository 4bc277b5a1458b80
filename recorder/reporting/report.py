"""Recording report generation.

Summarizes a suite run and the recordings made for it: which tests were
found, how many were eligible and selected, and what happened to each
recording attempt. Reports are written as JSON, or YAML when the output
path ends in ``.yaml`` / ``.yml``.
"""

from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Any

import yaml

from recorder.analysis.output_parser import TestEvent
from recorder.recording.session import RecordingAttempt
from recorder.selection.config import RecordingConfig
from recorder.selection.policy import SelectionResult

YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class RecordingReport:
    """Collects suite and recording results and writes them out."""

    def __init__(self) -> None:
        self.exit_code: int | None = None
        self.events: list[TestEvent] = []
        self.config: RecordingConfig | None = None
        self.selection: SelectionResult | None = None
        self.attempts: list[RecordingAttempt] = []

    def set_suite_result(self, exit_code: int, events: list[TestEvent]) -> None:
        """Record the full-suite run's exit code and parsed events."""
        self.exit_code = exit_code
        self.events = list(events)

    def set_selection(
        self, config: RecordingConfig, selection: SelectionResult
    ) -> None:
        """Record the policy in effect and what it selected."""
        self.config = config
        self.selection = selection

    def add_attempts(self, attempts: list[RecordingAttempt]) -> None:
        self.attempts.extend(attempts)

    def _summary(self) -> dict[str, int]:
        summary = {
            "tests": len(self.events),
            "passed": sum(1 for e in self.events if e.passed),
            "failed": sum(1 for e in self.events if not e.passed),
            "eligible": self.selection.eligible_count if self.selection else 0,
            "selected": len(self.selection.selected) if self.selection else 0,
        }
        for attempt in self.attempts:
            summary[attempt.status] = summary.get(attempt.status, 0) + 1
        return summary

    def to_dict(self) -> dict[str, Any]:
        """Build the report structure."""
        report: dict[str, Any] = {
            "report": {
                "generated_at": datetime.datetime.now(
                    datetime.timezone.utc
                ).isoformat(),
                "exit_code": self.exit_code,
                "summary": self._summary(),
                "tests": [
                    {"spec": e.spec, "title": e.title, "passed": e.passed}
                    for e in self.events
                ],
                "recordings": [a.to_dict() for a in self.attempts],
            }
        }
        if self.config is not None:
            report["report"]["config"] = self.config.to_dict()
        return report

    def write_report(self, path: Path) -> None:
        """Write the report to *path*, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.to_dict()
        with open(path, "w") as f:
            if path.suffix in YAML_SUFFIXES:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(data, f, indent=2)
                f.write("\n")
