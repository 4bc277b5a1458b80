"""Recording selection: policy configuration and test selection."""

from recorder.selection.config import (
    CONFIG_ENV,
    CONFIG_FILE_ENV,
    DEFAULT_CONFIG,
    RecordingConfig,
    load_recording_config,
)
from recorder.selection.policy import SelectionResult, select_tests, should_record

__all__ = [
    "CONFIG_ENV",
    "CONFIG_FILE_ENV",
    "DEFAULT_CONFIG",
    "RecordingConfig",
    "SelectionResult",
    "load_recording_config",
    "select_tests",
    "should_record",
]
