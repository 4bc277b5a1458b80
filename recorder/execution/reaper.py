"""Process tree teardown.

The runner and the browser it drives start further processes through
launchers, so killing the spawned runner alone leaves orphans that keep
recording. The reaper works from a single snapshot of the process table,
kills every descendant of the root and then the root itself. Processes
that appear or reparent after the snapshot are not chased.
"""

from __future__ import annotations

import sys
from typing import Callable

import psutil


def snapshot_process_table() -> dict[int, int]:
    """Return the current process table as ``{pid: parent_pid}``."""
    table: dict[int, int] = {}
    for proc in psutil.process_iter(["pid", "ppid"]):
        ppid = proc.info.get("ppid")
        if ppid is not None:
            table[proc.info["pid"]] = ppid
    return table


def _depth_below(pid: int, root_pid: int, table: dict[int, int]) -> int | None:
    """Walk up from *pid*; return its depth below *root_pid*, or None."""
    depth = 0
    seen: set[int] = set()
    current = pid
    while current in table and current not in seen:
        seen.add(current)
        current = table[current]
        depth += 1
        if current == root_pid:
            return depth
    return None


def select_descendants(root_pid: int, table: dict[int, int]) -> list[int]:
    """Select every process descended from *root_pid* in *table*.

    Args:
        root_pid: Process whose tree is being torn down.
        table: Process table snapshot, ``{pid: parent_pid}``.

    Returns:
        Descendant pids, deepest first, excluding *root_pid*.
    """
    pids = set(table) | set(table.values())
    depths: dict[int, int] = {}
    for pid in pids:
        if pid == root_pid:
            continue
        depth = _depth_below(pid, root_pid, table)
        if depth is not None:
            depths[pid] = depth
    return sorted(depths, key=lambda pid: (-depths[pid], pid))


def kill_pid(pid: int) -> bool:
    """Kill a single process.

    Returns:
        True if the signal was sent, False if the process was already gone
        or could not be signalled.
    """
    try:
        psutil.Process(pid).kill()
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied:
        print(f"Warning: not permitted to kill process {pid}", file=sys.stderr)
        return False
    return True


def kill_tree(
    root_pid: int,
    table: dict[int, int] | None = None,
    kill: Callable[[int], bool] = kill_pid,
) -> list[int]:
    """Kill *root_pid* and all of its descendants.

    Args:
        root_pid: Root of the tree to kill.
        table: Process table snapshot (taken now if None).
        kill: Function that kills one pid.

    Returns:
        The pids that were signalled, descendants before the root.
    """
    if table is None:
        table = snapshot_process_table()

    killed: list[int] = []
    for pid in select_descendants(root_pid, table) + [root_pid]:
        if kill(pid):
            killed.append(pid)
    return killed
