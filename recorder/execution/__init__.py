"""Runner execution: suite runs, isolated-run supervision and teardown."""

from recorder.execution.reaper import kill_tree, select_descendants, snapshot_process_table
from recorder.execution.run_options import (
    RunOptions,
    is_valid_project,
    process_run_options,
    runner_command,
)
from recorder.execution.signals import first_completed, settle_after
from recorder.execution.suite import SuiteResult, run_suite
from recorder.execution.supervisor import (
    IsolatedRunSupervisor,
    RecordingOutcome,
    make_capture_directory,
    recording_environment,
)

__all__ = [
    "IsolatedRunSupervisor",
    "RecordingOutcome",
    "RunOptions",
    "SuiteResult",
    "first_completed",
    "is_valid_project",
    "kill_tree",
    "make_capture_directory",
    "process_run_options",
    "recording_environment",
    "run_suite",
    "runner_command",
    "select_descendants",
    "settle_after",
    "snapshot_process_table",
]
