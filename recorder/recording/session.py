"""Per-test recording attempts.

Each selected test is recorded on its own: its spec is isolated, run
under supervision with recording enabled, and the resulting recording is
verified and uploaded. Whatever happens, the isolated spec and the
capture directory are removed afterwards. A failed attempt is reported
and the batch moves on; recordings never affect the suite's result.
"""

from __future__ import annotations

import shutil
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Mapping

from recorder.analysis.output_parser import TestEvent
from recorder.errors import RecordingError
from recorder.execution.run_options import RunOptions, runner_command
from recorder.execution.supervisor import IsolatedRunSupervisor, make_capture_directory
from recorder.isolation.spec_isolation import isolate_spec
from recorder.recording.store import RecordingStore
from recorder.recording.verifier import check_preconditions, verify_and_upload

BANNER = "=" * 100

# Attempt statuses
UPLOADED = "uploaded"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class RecordingAttempt:
    """What happened when recording one test."""

    spec: str
    title: str
    passed: bool
    status: str
    recording_id: str | None = None
    url: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _attempt(event: TestEvent, status: str, **kwargs: Any) -> RecordingAttempt:
    return RecordingAttempt(
        spec=event.spec, title=event.title, passed=event.passed, status=status, **kwargs
    )


def _remove_quietly(isolated_spec: Path | None, capture_dir: Path | None) -> None:
    """Remove an attempt's temporary files, warning on failure."""
    if isolated_spec is not None:
        try:
            isolated_spec.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            print(f"Warning: could not remove {isolated_spec}: {e}", file=sys.stderr)
    if capture_dir is not None:
        try:
            shutil.rmtree(capture_dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            print(f"Warning: could not remove {capture_dir}: {e}", file=sys.stderr)


def create_test_recording(
    event: TestEvent,
    options: RunOptions,
    store: RecordingStore,
    env: Mapping[str, str] | None = None,
    supervisor: IsolatedRunSupervisor | None = None,
) -> RecordingAttempt:
    """Record a single test and upload the recording.

    Args:
        event: The test as observed in the suite run.
        options: Run options of the suite run.
        store: Recordings tooling.
        env: Environment for credentials and the runner (defaults to
            ``os.environ``).
        supervisor: Supervisor for the isolated run (one built from
            *options* if None).

    Returns:
        RecordingAttempt describing the outcome.
    """
    print("\n")
    print(BANNER)
    print(f'Creating Test Recording: {event.spec} "{event.title}"')
    print(BANNER)

    if supervisor is None:
        supervisor = IsolatedRunSupervisor(
            timeout=options.timeout,
            settle_delay=options.settle_delay,
            env=env,
        )

    isolated_spec: Path | None = None
    capture_dir: Path | None = None
    try:
        api_key, browser = check_preconditions(store, env)
        isolated_spec = isolate_spec(options.spec_root / event.spec, event.title)
        capture_dir = make_capture_directory()
        command = runner_command(
            options.for_isolated_run(isolated_spec, str(browser)), env
        )
        outcome = supervisor.run(command, isolated_spec, capture_dir)
        upload = verify_and_upload(outcome, event, api_key, store)
    except RecordingError as e:
        print(f"Error: Creating recording failed: {e}", file=sys.stderr)
        return _attempt(event, e.status, message=str(e))
    except OSError as e:
        print(f"Error: Creating recording failed: {e}", file=sys.stderr)
        return _attempt(event, FAILED, message=str(e))
    except Exception as e:
        # A bug or bad collaborator data fails this test only, not the batch.
        message = f"{type(e).__name__}: {e}"
        print(f"Error: Creating recording failed unexpectedly: {message}", file=sys.stderr)
        return _attempt(event, FAILED, message=message)
    finally:
        _remove_quietly(isolated_spec, capture_dir)

    print(f"Test recording uploaded: {upload.url}")
    return _attempt(
        event, UPLOADED, recording_id=upload.recording_id, url=upload.url
    )


def record_tests(
    selected: list[TestEvent],
    options: RunOptions,
    store: RecordingStore,
    env: Mapping[str, str] | None = None,
    supervisor: IsolatedRunSupervisor | None = None,
) -> list[RecordingAttempt]:
    """Record each selected test in turn.

    Recordings are made strictly one at a time.

    Returns:
        One RecordingAttempt per selected test, in order.
    """
    return [
        create_test_recording(event, options, store, env, supervisor)
        for event in selected
    ]
