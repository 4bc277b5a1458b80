"""Isolated run supervision.

Runs the test runner against an isolated spec with recording enabled and
decides when to stop it. The runner gives no structured signal that the
isolated test is done, so its stdout is re-parsed as it arrives; once a
test event shows up, the run is allowed to settle briefly (the capture
library flushes recording data asynchronously) and is then torn down
before the runner's own exit-time work gets into the recording. A hard
timeout and the runner exiting on its own end the run as well.
"""

from __future__ import annotations

import asyncio
import os
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping

from recorder.analysis.output_parser import TestEvent, parse_test_events
from recorder.errors import ProcessNotRunningError
from recorder.execution.reaper import kill_tree
from recorder.execution.run_options import DEFAULT_SETTLE_DELAY, DEFAULT_TIMEOUT
from recorder.execution.signals import first_completed, settle_after
from recorder.execution.suite import pump_output

# Environment read by the recording capture library
RECORD_ALL_ENV = "RECORD_ALL_CONTENT"
RECORDING_DIR_ENV = "RECORD_REPLAY_DIRECTORY"

# Signals that can end an isolated run
TIMEOUT = "timeout"
FINISHED = "finished"
EXITED = "exited"

# Seconds to wait for pipes to drain and the child to be reaped after the kill
DRAIN_TIMEOUT = 5.0


@dataclass
class RecordingOutcome:
    """Result of one supervised isolated run."""

    isolated_spec: Path
    capture_dir: Path
    completion: str
    pid: int
    events: list[TestEvent] = field(default_factory=list)
    stdout: str = ""

    @property
    def failed_events(self) -> list[TestEvent]:
        return [e for e in self.events if not e.passed]


def make_capture_directory() -> Path:
    """Create a fresh, empty directory for recordings to be written to."""
    return Path(tempfile.mkdtemp(prefix="spec-recorder-"))


def recording_environment(
    capture_dir: Path,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Environment for a runner whose browser should record everything."""
    env = dict(os.environ if base is None else base)
    env[RECORD_ALL_ENV] = "1"
    env[RECORDING_DIR_ENV] = str(capture_dir)
    return env


class IsolatedRunSupervisor:
    """Runs one isolated spec and stops it as soon as its test is done.

    Only one isolated run may be supervised at a time: teardown works from
    a system-wide process table and cannot tell two runs' descendants
    apart.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        echo: bool = True,
        env: Mapping[str, str] | None = None,
        reaper: Callable[[int], object] = kill_tree,
    ) -> None:
        self.timeout = timeout
        self.settle_delay = settle_delay
        self.echo = echo
        self.env = env
        self.reaper = reaper

    def run(
        self,
        command: list[str],
        isolated_spec: Path,
        capture_dir: Path,
    ) -> RecordingOutcome:
        """Run *command* with recording into *capture_dir*.

        Args:
            command: Runner command line targeting *isolated_spec*.
            isolated_spec: The isolated spec being run.
            capture_dir: Directory the capture library writes to.

        Returns:
            RecordingOutcome with the final parsed events and which signal
            ended the run.

        Raises:
            ProcessNotRunningError: If the runner could not be started.
        """
        return asyncio.run(self._run_async(command, isolated_spec, capture_dir))

    async def _run_async(
        self,
        command: list[str],
        isolated_spec: Path,
        capture_dir: Path,
    ) -> RecordingOutcome:
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=recording_environment(capture_dir, self.env),
            )
        except OSError as e:
            raise ProcessNotRunningError(f"process not running: {e}") from e
        if not proc.pid:
            raise ProcessNotRunningError("process not running")

        stdout: list[str] = []
        detected = asyncio.Event()
        # Unterminated last line and spec block carried between chunks
        tail = ""
        open_spec: str | None = None

        def check_finished() -> None:
            nonlocal tail, open_spec
            if detected.is_set():
                return
            text = tail + stdout[-1]
            parsed = parse_test_events(text, partial=True, current_spec=open_spec)
            tail = text.rpartition("\n")[2]
            open_spec = parsed.current_spec
            if parsed.events:
                detected.set()

        assert proc.stdout is not None and proc.stderr is not None
        readers = [
            asyncio.create_task(pump_output(
                proc.stdout, stdout,
                sys.stdout if self.echo else None,
                check_finished,
            )),
            asyncio.create_task(pump_output(
                proc.stderr, [],
                sys.stderr if self.echo else None,
            )),
        ]

        try:
            completion = await first_completed({
                TIMEOUT: asyncio.sleep(self.timeout),
                FINISHED: settle_after(detected, self.settle_delay),
                EXITED: proc.wait(),
            })
        finally:
            # Stop the runner before its own teardown pads the recording.
            self.reaper(proc.pid)
            await _drain(proc, readers)

        if completion == TIMEOUT:
            print(f"Isolated run timed out after {self.timeout:g}s, stopped runner")
        elif completion == FINISHED:
            print("Test finished, stopped runner")

        output = "".join(stdout)
        return RecordingOutcome(
            isolated_spec=isolated_spec,
            capture_dir=capture_dir,
            completion=completion,
            pid=proc.pid,
            events=parse_test_events(output).events,
            stdout=output,
        )


async def _drain(
    proc: asyncio.subprocess.Process,
    readers: list[asyncio.Task[None]],
) -> None:
    """Collect remaining output and reap the killed runner."""
    _done, pending = await asyncio.wait(readers, timeout=DRAIN_TIMEOUT)
    for task in pending:
        task.cancel()
    await asyncio.gather(*readers, return_exceptions=True)
    try:
        await asyncio.wait_for(proc.wait(), timeout=DRAIN_TIMEOUT)
    except asyncio.TimeoutError:
        print(
            f"Warning: runner process {proc.pid} did not exit after being killed",
            file=sys.stderr,
        )
