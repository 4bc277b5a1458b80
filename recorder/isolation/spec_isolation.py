"""Single-test spec isolation.

Writes a copy of a spec file, next to the original, that registers only
one named test. A shim prepended to the spec source wraps the runner's
``it`` so every other test is silently dropped and the kept test runs with
retries disabled. ``it.skip`` and ``it.only`` keep their original
behavior.
"""

from __future__ import annotations

import json
from pathlib import Path

from recorder.errors import SpecCollisionError, SpecNotFoundError

# Prefix marking isolated copies; also used to find their recordings
ISOLATED_SPEC_PREFIX = "recordreplay-"

_SHIM_TEMPLATE = """
const original_it = it;
it = function(name, config, fn) {
  if (name === %(title)s) {
    if (typeof config == "function") {
      fn = config;
      config = {};
    }
    config = { ...config, retries: 0 };
    original_it(name, config, fn);
  }
}
for (const property of ["skip", "only"]) {
  it[property] = original_it[property];
}
"""


def isolated_spec_path(spec: str | Path) -> Path:
    """Return *spec* with its file name prefixed as an isolated copy."""
    spec = Path(spec)
    return spec.parent / (ISOLATED_SPEC_PREFIX + spec.name)


def build_isolated_source(contents: str, title: str) -> str:
    """Prepend the single-test shim for *title* to a spec's source.

    The title is embedded as a JSON string literal, which is also a valid
    JavaScript literal; ASCII escaping covers U+2028 and U+2029, which
    older engines reject inside string literals.
    """
    return _SHIM_TEMPLATE % {"title": json.dumps(title)} + contents


def isolate_spec(spec_file: Path, title: str) -> Path:
    """Write an isolated copy of *spec_file* that runs only *title*.

    Args:
        spec_file: Path to the original spec.
        title: Exact declared name of the test to keep.

    Returns:
        Path of the isolated spec, which the caller must remove.

    Raises:
        SpecNotFoundError: If *spec_file* does not exist.
        SpecCollisionError: If the isolated copy already exists; the
            existing file is left alone.
    """
    spec_file = Path(spec_file)
    if not spec_file.is_file():
        raise SpecNotFoundError(
            f"could not find spec file, checked path {spec_file}"
        )

    destination = isolated_spec_path(spec_file)
    if destination.exists():
        raise SpecCollisionError(
            f"Creating new spec file failed: {destination} already exists"
        )

    # The spec is copied byte for byte after the shim, whatever its encoding.
    shim = build_isolated_source("", title).encode("utf-8")
    destination.write_bytes(shim + spec_file.read_bytes())
    return destination
