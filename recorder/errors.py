"""Named errors raised while creating a test recording.

Everything derived from ``RecordingError`` is contained to a single test's
recording attempt: the batch reports it and moves on to the next test.
``InvalidOptionError`` is the exception, since it means the invocation
itself is wrong and nothing should run.
"""

from __future__ import annotations


class InvalidOptionError(ValueError):
    """Run options could not be turned into a runner command line."""


class RecordingError(Exception):
    """Base class for per-test recording failures.

    The ``status`` attribute is the attempt status reported for the test:
    ``"failed"`` for real failures, ``"skipped"`` when recording was
    deliberately not performed.
    """

    status = "failed"


class MissingApiKeyError(RecordingError):
    """No API key is available to upload recordings with."""


class MissingBrowserError(RecordingError):
    """No recording-capable browser is installed for this platform."""


class SpecNotFoundError(RecordingError):
    """The spec file a test was reported in does not exist."""


class SpecCollisionError(RecordingError):
    """The isolated spec file already exists."""

    status = "skipped"


class ProcessNotRunningError(RecordingError):
    """The isolated runner process never started."""


class DidNotReproduceError(RecordingError):
    """An originally failing test passed when re-run in isolation."""

    status = "skipped"


class RecordingNotFoundError(RecordingError):
    """No recording in the capture directory matches the isolated spec."""


class UploadFailedError(RecordingError):
    """The recordings CLI did not report a successful upload."""
