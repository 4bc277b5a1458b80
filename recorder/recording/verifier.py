"""Recording verification and upload.

After an isolated run, its recording is checked against what the suite
originally observed, located among the capture directory's recordings
and uploaded.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from recorder.analysis.output_parser import TestEvent
from recorder.errors import (
    DidNotReproduceError,
    MissingApiKeyError,
    MissingBrowserError,
    RecordingNotFoundError,
    UploadFailedError,
)
from recorder.execution.supervisor import RecordingOutcome
from recorder.recording.store import API_KEY_ENV, RecordingStore, recording_url


@dataclass
class UploadResult:
    """An uploaded recording."""

    recording_id: str
    url: str


def check_preconditions(
    store: RecordingStore,
    env: Mapping[str, str] | None = None,
) -> tuple[str, Path]:
    """Check that a recording can be made at all.

    Returns:
        The API key and the recording browser path.

    Raises:
        MissingApiKeyError: If no API key is set.
        MissingBrowserError: If the recording browser is not installed.
    """
    if env is None:
        env = os.environ

    api_key = env.get(API_KEY_ENV)
    if not api_key:
        raise MissingApiKeyError(
            f"{API_KEY_ENV} must be set to upload recordings"
        )

    browser = store.browser_path()
    if browser is None:
        raise MissingBrowserError("recording browser not available on this platform")
    if not browser.exists():
        raise MissingBrowserError(f"recording browser not found at {browser}")
    return api_key, browser


def find_recording(
    recordings: list[dict[str, Any]],
    isolated_spec: Path,
) -> dict[str, Any]:
    """Pick the recording made for *isolated_spec*.

    Recordings are matched on the isolated spec's file name appearing in
    their metadata URI. The first match in listing order wins. Entries
    without an id or a metadata object cannot be uploaded and are skipped.

    Raises:
        RecordingNotFoundError: If no recording matches.
    """
    fragment = isolated_spec.name
    for recording in recordings:
        if not isinstance(recording, dict) or recording.get("id") in (None, ""):
            continue
        metadata = recording.get("metadata")
        if not isinstance(metadata, dict):
            continue
        uri = metadata.get("uri")
        if isinstance(uri, str) and fragment in uri:
            return recording
    raise RecordingNotFoundError("could not find test recording")


def verify_and_upload(
    outcome: RecordingOutcome,
    original: TestEvent,
    api_key: str,
    store: RecordingStore,
) -> UploadResult:
    """Check an isolated run's recording and upload it.

    Args:
        outcome: Result of the isolated run.
        original: The test as observed in the full suite run.
        api_key: Key to upload with.
        store: Recordings tooling.

    Returns:
        UploadResult with the hosted recording's URL.

    Raises:
        DidNotReproduceError: If a failing test passed in isolation.
        RecordingNotFoundError: If no recording matches the run.
        UploadFailedError: If the upload did not succeed.
    """
    if not original.passed and not outcome.failed_events:
        raise DidNotReproduceError(
            "test failure did not reproduce, not uploading recording"
        )

    try:
        recordings = store.list_recordings(outcome.capture_dir)
    except RuntimeError as e:
        raise RecordingNotFoundError(f"could not list recordings: {e}") from e
    recording = find_recording(recordings, outcome.isolated_spec)

    uploaded = store.upload_recording(str(recording["id"]), outcome.capture_dir, api_key)
    if not uploaded:
        raise UploadFailedError("upload failed")
    return UploadResult(recording_id=uploaded, url=recording_url(uploaded))
