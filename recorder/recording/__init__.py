"""Recording: verification, upload and per-test recording sessions."""

from recorder.recording.session import (
    RecordingAttempt,
    create_test_recording,
    record_tests,
)
from recorder.recording.store import (
    RecordingStore,
    ReplayCli,
    default_browser_path,
    recording_url,
)
from recorder.recording.verifier import (
    UploadResult,
    check_preconditions,
    find_recording,
    verify_and_upload,
)

__all__ = [
    "RecordingAttempt",
    "RecordingStore",
    "ReplayCli",
    "UploadResult",
    "check_preconditions",
    "create_test_recording",
    "default_browser_path",
    "find_recording",
    "record_tests",
    "recording_url",
    "verify_and_upload",
]
