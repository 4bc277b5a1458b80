"""Runner output analysis: turning console text into test events."""

from recorder.analysis.output_parser import (
    ParsedRun,
    TestEvent,
    count_events,
    parse_test_events,
    strip_ansi,
)

__all__ = [
    "ParsedRun",
    "TestEvent",
    "count_events",
    "parse_test_events",
    "strip_ansi",
]
