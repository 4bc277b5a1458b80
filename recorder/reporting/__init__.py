"""Report generation for suite runs and their recordings."""

from recorder.reporting.report import RecordingReport

__all__ = [
    "RecordingReport",
]
