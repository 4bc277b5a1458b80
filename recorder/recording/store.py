"""Access to recordings produced by the capture library.

Recordings are listed and uploaded through the ``replay`` command line
tool. The recording-capable browser is located from an environment
override or the tool's per-platform install location.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Mapping, Protocol

API_KEY_ENV = "RECORD_REPLAY_API_KEY"
BROWSER_PATH_ENV = "RECORD_REPLAY_BROWSER_PATH"
RECORDING_URL = "https://app.replay.io/recording/{id}"

# Browser executable under ~/.replay/runtimes, by sys.platform
BROWSER_EXECUTABLES = {
    "linux": Path("chrome-linux") / "chrome",
    "darwin": Path("Replay-Chromium.app") / "Contents" / "MacOS" / "Chromium",
}

# Seconds allowed for listing recordings
LIST_TIMEOUT = 60


class RecordingStore(Protocol):
    """What the recorder needs from the recordings tooling."""

    def list_recordings(self, directory: Path) -> list[dict[str, Any]]:
        ...

    def upload_recording(
        self, recording_id: str, directory: Path, api_key: str
    ) -> str | None:
        ...

    def browser_path(self) -> Path | None:
        ...


def recording_url(recording_id: str) -> str:
    """URL at which an uploaded recording can be viewed."""
    return RECORDING_URL.format(id=recording_id)


def default_browser_path(
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
    home: Path | None = None,
) -> Path | None:
    """Locate the recording browser for this platform.

    Returns:
        The browser path (which may not exist), or None when the platform
        has no recording browser.
    """
    if env is None:
        env = os.environ
    override = env.get(BROWSER_PATH_ENV)
    if override:
        return Path(override)

    executable = BROWSER_EXECUTABLES.get(platform or sys.platform)
    if executable is None:
        return None
    return (home or Path.home()) / ".replay" / "runtimes" / executable


class ReplayCli:
    """RecordingStore backed by the ``replay`` command line tool."""

    def __init__(
        self,
        command: list[str] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.command = command or ["replay"]
        self.env = env

    def list_recordings(self, directory: Path) -> list[dict[str, Any]]:
        """List every recording in *directory*.

        Raises:
            RuntimeError: If the tool is missing or its output is not a
                JSON list.
        """
        try:
            result = subprocess.run(
                self.command + ["ls", "--all", "--json", "--directory", str(directory)],
                capture_output=True,
                text=True,
                timeout=LIST_TIMEOUT,
            )
        except FileNotFoundError as e:
            raise RuntimeError(f"{self.command[0]} not found") from e
        except subprocess.TimeoutExpired as e:
            raise RuntimeError(f"listing recordings timed out after {LIST_TIMEOUT}s") from e

        if result.returncode != 0:
            raise RuntimeError(f"listing recordings failed: {result.stderr.strip()}")
        try:
            recordings = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"invalid recording list: {e}") from e
        if not isinstance(recordings, list):
            raise RuntimeError("invalid recording list: expected a JSON array")
        return recordings

    def upload_recording(
        self, recording_id: str, directory: Path, api_key: str
    ) -> str | None:
        """Upload one recording.

        Waits for the upload to finish, however long it takes.

        Returns:
            The uploaded recording's id, or None if the upload failed.
        """
        try:
            result = subprocess.run(
                self.command + [
                    "upload", recording_id,
                    "--directory", str(directory),
                    "--api-key", api_key,
                ],
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            print(f"Error: {self.command[0]} not found", file=sys.stderr)
            return None

        if result.returncode != 0:
            if result.stderr.strip():
                print(result.stderr.strip(), file=sys.stderr)
            return None
        lines = result.stdout.strip().splitlines()
        if not lines:
            return None
        # The uploaded id is the last thing the tool prints.
        return lines[-1].strip().rsplit("/", 1)[-1] or None

    def browser_path(self) -> Path | None:
        return default_browser_path(self.env)
