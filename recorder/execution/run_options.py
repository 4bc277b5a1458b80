"""Runner command line construction.

Maps the options collected by the CLI onto the runner's own flags.
Invalid combinations raise before any run starts.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

from recorder.errors import InvalidOptionError

DEFAULT_RUNNER = ["npx", "cypress", "run"]
DEFAULT_SPEC_DIR = "cypress/tests"
RECORD_KEY_ENV = "CYPRESS_RECORD_KEY"

# Seconds an isolated run may take before it is stopped regardless
DEFAULT_TIMEOUT = 180.0
# Seconds to keep recording after the isolated test was seen to finish
DEFAULT_SETTLE_DELAY = 1.0

TESTING_TYPES = ("e2e", "component")


@dataclass
class RunOptions:
    """Options for full-suite and isolated runner invocations."""

    project: Any = field(default_factory=os.getcwd)
    runner: list[str] = field(default_factory=lambda: list(DEFAULT_RUNNER))
    spec_dir: str = DEFAULT_SPEC_DIR
    browser: str | None = None
    ci_build_id: str | None = None
    config: str | None = None
    config_file: str | None = None
    env: str | None = None
    exit: bool = True
    group: str | None = None
    headed: bool = False
    headless: bool = False
    key: str | None = None
    output_path: str | None = None
    parallel: bool = False
    port: int | None = None
    quiet: bool = False
    record: bool | None = None
    reporter: str | None = None
    reporter_options: str | None = None
    spec: str | None = None
    tag: str | None = None
    testing_type: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    settle_delay: float = DEFAULT_SETTLE_DELAY

    @property
    def spec_root(self) -> Path:
        """Directory that reported spec paths are relative to."""
        return Path(self.project) / self.spec_dir

    def for_isolated_run(self, isolated_spec: Path, browser: str) -> RunOptions:
        """Options for running a single isolated spec in *browser*."""
        spec = os.path.relpath(isolated_spec, self.project)
        return replace(self, spec=spec, browser=browser)


def is_valid_project(value: Any) -> bool:
    """Return False for project values that can only be mistakes.

    A project is normally a path, but boolean-ish values slip through
    command lines such as ``--project false``.
    """
    if isinstance(value, bool) or value is None:
        return False
    if value in ("", "false", "true"):
        return False
    return True


def _flag_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def process_run_options(
    options: RunOptions,
    env: Mapping[str, str] | None = None,
) -> list[str]:
    """Build the runner argument list for *options*.

    Args:
        options: Run options.
        env: Environment used to look up the record key (defaults to
            ``os.environ``).

    Returns:
        Runner arguments, not including the runner command itself.

    Raises:
        InvalidOptionError: If the options cannot be combined.
    """
    if env is None:
        env = os.environ

    if not is_valid_project(options.project):
        raise InvalidOptionError(
            f"Invalid project path parameter: {options.project!r}"
        )

    args = ["--project", str(options.project)]

    if options.browser:
        args += ["--browser", options.browser]
    if options.ci_build_id:
        args += ["--ci-build-id", options.ci_build_id]
    if options.config:
        args += ["--config", options.config]
    if options.config_file is not None:
        args += ["--config-file", options.config_file]
    if options.env:
        args += ["--env", options.env]
    if options.exit is False:
        args.append("--no-exit")
    if options.group:
        args += ["--group", options.group]

    if options.headless and options.headed:
        raise InvalidOptionError(
            "You have passed --headed and --headless at the same time; "
            "pass only one of them"
        )
    if options.headed:
        args.append("--headed")
    if options.headless:
        args.append("--headless")

    key = options.key if options.key is not None else env.get(RECORD_KEY_ENV)
    if key:
        args += ["--key", key]

    if options.output_path:
        args += ["--output-path", options.output_path]
    if options.parallel:
        args.append("--parallel")
    if options.port:
        args += ["--port", str(options.port)]
    if options.quiet:
        args.append("--quiet")
    if options.record is not None:
        args += ["--record", _flag_value(options.record)]
    if options.reporter:
        args += ["--reporter", options.reporter]
    if options.reporter_options:
        args += ["--reporter-options", options.reporter_options]
    if options.spec:
        args += ["--spec", options.spec]
    if options.tag:
        args += ["--tag", options.tag]

    if options.testing_type is not None:
        if options.testing_type not in TESTING_TYPES:
            raise InvalidOptionError(
                f"Invalid testing type {options.testing_type!r}, "
                f"expected one of: {', '.join(TESTING_TYPES)}"
            )
        args.append(f"--{options.testing_type}")

    return args


def runner_command(options: RunOptions, env: Mapping[str, str] | None = None) -> list[str]:
    """Full argv for the runner: the runner command plus its arguments."""
    return list(options.runner) + process_run_options(options, env)
