"""Spec isolation: rewriting a spec to run a single test."""

from recorder.isolation.spec_isolation import (
    ISOLATED_SPEC_PREFIX,
    build_isolated_source,
    isolate_spec,
    isolated_spec_path,
)

__all__ = [
    "ISOLATED_SPEC_PREFIX",
    "build_isolated_source",
    "isolate_spec",
    "isolated_spec_path",
]
