"""Completion signals for supervised runs.

An isolated run ends on whichever of several independent signals fires
first. ``first_completed`` races named awaitables; ``settle_after`` turns
a detection event into a signal that fires a fixed delay later, so the
settle interval can be tuned and tested apart from the race.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable


async def first_completed(signals: dict[str, Awaitable[object]]) -> str:
    """Wait for the first of *signals* to complete.

    The remaining signals are cancelled. If the winning signal raised,
    its exception propagates.

    Args:
        signals: Awaitables keyed by signal name.

    Returns:
        Name of the signal that completed first.
    """
    if not signals:
        raise ValueError("no signals to wait for")

    tasks = {
        asyncio.ensure_future(awaitable): name
        for name, awaitable in signals.items()
    }
    try:
        done, _pending = await asyncio.wait(
            set(tasks), return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # Several signals may finish in the same loop iteration; prefer the
    # order they were given in.
    winner = next(task for task in tasks if task in done)
    winner.result()
    return tasks[winner]


async def settle_after(event: asyncio.Event, delay: float) -> None:
    """Resolve *delay* seconds after *event* is first set."""
    await event.wait()
    await asyncio.sleep(delay)
