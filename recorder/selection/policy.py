"""Recording selection policy.

Decides which of the tests observed in a suite run get an isolated
recording pass. By default only failures are recorded; a configuration can
record everything or only tests whose titles match a filter. Selected
tests are optionally shuffled and then capped, and the cap is applied
before any recording starts.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from recorder.analysis.output_parser import TestEvent
from recorder.selection.config import RecordingConfig


@dataclass
class SelectionResult:
    """Result of recording selection."""

    selected: list[TestEvent] = field(default_factory=list)
    eligible_count: int = 0

    @property
    def dropped_count(self) -> int:
        """Eligible tests left out by the recording cap."""
        return self.eligible_count - len(self.selected)


def should_record(event: TestEvent, config: RecordingConfig) -> bool:
    """Return True if the policy wants a recording of *event*."""
    if config.record_all:
        return True
    if config.title_filters:
        return any(f in event.title for f in config.title_filters)
    return not event.passed


def select_tests(
    events: list[TestEvent],
    config: RecordingConfig | None = None,
    rng: random.Random | None = None,
) -> SelectionResult:
    """Select, order and cap the tests to record.

    Args:
        events: Test events in discovery order.
        config: Recording configuration (uses defaults if None).
        rng: Random source for shuffling (a fresh one if None).

    Returns:
        SelectionResult with at most ``config.max_recordings`` tests.
    """
    if config is None:
        config = RecordingConfig()

    eligible = [e for e in events if should_record(e, config)]
    if config.shuffle_order:
        (rng or random.Random()).shuffle(eligible)

    result = SelectionResult(
        selected=eligible[: config.max_recordings],
        eligible_count=len(eligible),
    )
    if result.dropped_count:
        print(
            f"Recording limit of {config.max_recordings} reached: "
            f"{result.dropped_count} eligible tests will not be recorded"
        )
    return result
