"""Test runner console output parser.

Turns the human-oriented output of a mocha-style runner into structured
test events. The runner announces each spec with a ``Running:`` header,
prints a check mark per passing test and a numbered heading per failing
test, and closes each spec with ``N passing`` / ``N failing`` summaries.

The grammar below is the only place that knows about the text format, so
a structured reporter could later replace it without touching selection,
isolation or supervision.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Color and cursor escape sequences emitted by the runner
ANSI_ESCAPE = re.compile(r"\x1B[\[(?);]{0,2}(;?\d)*.")

# Line grammar, checked in this order; a line matches at most one pattern
SPEC_ANNOUNCE = re.compile(r"Running: (.*?) \(\d+ of \d+\)")
PASS_MARK = re.compile("✓" + r" (.*?) \(\d+ms\)")
FAIL_HEADING = re.compile(r"^\s*\d+\) (.*)")
SUMMARY = re.compile(r"\d+ (?:passing|failing)")


@dataclass(frozen=True)
class TestEvent:
    """Outcome of a single test as reported by the runner."""

    __test__ = False

    spec: str
    title: str
    passed: bool


@dataclass
class ParsedRun:
    """Events parsed from one run's output.

    ``current_spec`` is the spec whose block is still open at the end of
    the parsed text, or ``None`` once its summary line has been seen.
    """

    events: list[TestEvent] = field(default_factory=list)
    current_spec: str | None = None

    @property
    def passed(self) -> list[TestEvent]:
        return [e for e in self.events if e.passed]

    @property
    def failed(self) -> list[TestEvent]:
        return [e for e in self.events if not e.passed]


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences from runner output."""
    return ANSI_ESCAPE.sub("", text)


def parse_test_events(
    text: str,
    partial: bool = False,
    current_spec: str | None = None,
) -> ParsedRun:
    """Parse runner output into test events.

    Pure with respect to *text*: parsing a longer buffer of the same output
    reproduces the events of a shorter one as a prefix. With
    ``partial=True`` the trailing line is held back until its newline
    arrives, so a half-written failure heading is never reported with a
    truncated title.

    Args:
        text: Accumulated stdout of the runner, possibly colored.
        partial: True while output is still arriving.
        current_spec: Spec block already open before *text*, for parsing
            output a piece at a time.

    Returns:
        ParsedRun with events in discovery order.
    """
    lines = strip_ansi(text).split("\n")
    if partial:
        # The last element is either "" (text ended with a newline) or an
        # incomplete line.
        lines = lines[:-1]

    result = ParsedRun(current_spec=current_spec)
    for line in lines:
        match = SPEC_ANNOUNCE.search(line)
        if match:
            result.current_spec = match.group(1).strip()
            continue

        match = PASS_MARK.search(line)
        if match:
            if result.current_spec:
                result.events.append(
                    TestEvent(result.current_spec, match.group(1).strip(), True)
                )
            continue

        match = FAIL_HEADING.match(line)
        if match:
            if result.current_spec:
                result.events.append(
                    TestEvent(result.current_spec, match.group(1).strip(), False)
                )
            continue

        if SUMMARY.search(line):
            result.current_spec = None

    return result


def count_events(parsed: ParsedRun) -> tuple[int, int]:
    """Return ``(passed, failed)`` event counts."""
    passed = len(parsed.passed)
    return passed, len(parsed.events) - passed
