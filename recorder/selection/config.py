"""Recording policy configuration.

The configuration is read once per suite run from the environment: either
an inline JSON document in ``SPEC_RECORDER_CONFIG`` or a JSON/YAML file
named by ``SPEC_RECORDER_CONFIG_FILE``. The inline document wins when both
are set. Anything unreadable or malformed degrades to the defaults rather
than failing the run.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

CONFIG_ENV = "SPEC_RECORDER_CONFIG"
CONFIG_FILE_ENV = "SPEC_RECORDER_CONFIG_FILE"

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "max_recordings": 20,
    "record_all": False,
    "title_filters": [],
    "shuffle_order": False,
}


@dataclass(frozen=True)
class RecordingConfig:
    """Which observed tests get a recording pass, and how many."""

    max_recordings: int = DEFAULT_CONFIG["max_recordings"]
    record_all: bool = DEFAULT_CONFIG["record_all"]
    title_filters: tuple[str, ...] = ()
    shuffle_order: bool = DEFAULT_CONFIG["shuffle_order"]

    @classmethod
    def from_dict(cls, data: Any) -> RecordingConfig:
        """Build a config from a parsed document, filling in defaults.

        Unknown keys are ignored.

        Raises:
            ValueError: If the document is not a mapping or a known key
                has a value of the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError("configuration must be an object")
        merged = {**DEFAULT_CONFIG, **data}

        max_recordings = merged["max_recordings"]
        # bool is an int subclass; reject it explicitly
        if isinstance(max_recordings, bool) or not isinstance(max_recordings, int):
            raise ValueError("max_recordings must be an integer")
        if max_recordings < 0:
            raise ValueError("max_recordings must not be negative")

        for key in ("record_all", "shuffle_order"):
            if not isinstance(merged[key], bool):
                raise ValueError(f"{key} must be a boolean")

        filters = merged["title_filters"]
        if not isinstance(filters, list) or not all(
            isinstance(f, str) for f in filters
        ):
            raise ValueError("title_filters must be a list of strings")

        return cls(
            max_recordings=max_recordings,
            record_all=merged["record_all"],
            title_filters=tuple(filters),
            shuffle_order=merged["shuffle_order"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_recordings": self.max_recordings,
            "record_all": self.record_all,
            "title_filters": list(self.title_filters),
            "shuffle_order": self.shuffle_order,
        }


def load_recording_config(env: Mapping[str, str] | None = None) -> RecordingConfig:
    """Load the recording configuration from the environment.

    Args:
        env: Environment mapping (defaults to ``os.environ``).

    Returns:
        The configured RecordingConfig, or the defaults when no source is
        set or the source cannot be used.
    """
    if env is None:
        env = os.environ

    inline = env.get(CONFIG_ENV)
    config_file = env.get(CONFIG_FILE_ENV)

    try:
        if inline:
            return RecordingConfig.from_dict(json.loads(inline))
        if config_file:
            text = Path(config_file).read_text()
            return RecordingConfig.from_dict(yaml.safe_load(text))
    except (json.JSONDecodeError, yaml.YAMLError, OSError, ValueError) as e:
        source = CONFIG_ENV if inline else config_file
        print(
            f"Warning: ignoring invalid recording configuration from {source}: {e}",
            file=sys.stderr,
        )
    return RecordingConfig()
