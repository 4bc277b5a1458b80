"""Unit tests for runner command line construction."""

from __future__ import annotations

from pathlib import Path

import pytest

from recorder.errors import InvalidOptionError
from recorder.execution.run_options import (
    DEFAULT_RUNNER,
    RECORD_KEY_ENV,
    RunOptions,
    is_valid_project,
    process_run_options,
    runner_command,
)


class TestIsValidProject:
    """Tests for project path validation."""

    @pytest.mark.parametrize("value", [True, False, None, "", "true", "false"])
    def test_invalid(self, value):
        """Boolean-ish values are rejected."""
        assert not is_valid_project(value)

    @pytest.mark.parametrize("value", [".", "/srv/app", Path("/srv/app")])
    def test_valid(self, value):
        """Paths are accepted."""
        assert is_valid_project(value)


class TestProcessRunOptions:
    """Tests for mapping options onto runner flags."""

    def test_project_only(self):
        """The project is always passed."""
        assert process_run_options(RunOptions(project="/app"), env={}) == [
            "--project", "/app",
        ]

    def test_invalid_project_raises(self):
        """An invalid project is a caller error."""
        with pytest.raises(InvalidOptionError, match="Invalid project"):
            process_run_options(RunOptions(project="false"), env={})

    def test_headed_and_headless_conflict(self):
        """Passing headed and headless together is rejected."""
        with pytest.raises(InvalidOptionError, match="--headed and --headless"):
            process_run_options(
                RunOptions(project="/app", headed=True, headless=True), env={}
            )

    def test_headless(self):
        """headless is passed through."""
        args = process_run_options(RunOptions(project="/app", headless=True), env={})
        assert "--headless" in args
        assert "--headed" not in args

    def test_all_flags(self):
        """Every option maps onto its flag in a stable order."""
        options = RunOptions(
            project="/app",
            browser="chrome",
            ci_build_id="b1",
            config="video=false",
            config_file="cy.json",
            env="host=x",
            exit=False,
            group="g",
            headed=True,
            key="k",
            output_path="out.json",
            parallel=True,
            port=8080,
            quiet=True,
            record=False,
            reporter="junit",
            reporter_options="mochaFile=r.xml",
            spec="a.spec.js",
            tag="nightly",
            testing_type="e2e",
        )
        assert process_run_options(options, env={}) == [
            "--project", "/app",
            "--browser", "chrome",
            "--ci-build-id", "b1",
            "--config", "video=false",
            "--config-file", "cy.json",
            "--env", "host=x",
            "--no-exit",
            "--group", "g",
            "--headed",
            "--key", "k",
            "--output-path", "out.json",
            "--parallel",
            "--port", "8080",
            "--quiet",
            "--record", "false",
            "--reporter", "junit",
            "--reporter-options", "mochaFile=r.xml",
            "--spec", "a.spec.js",
            "--tag", "nightly",
            "--e2e",
        ]

    def test_key_from_environment(self):
        """The record key falls back to the environment."""
        args = process_run_options(
            RunOptions(project="/app"), env={RECORD_KEY_ENV: "secret"}
        )
        assert args[-2:] == ["--key", "secret"]

    def test_explicit_key_wins(self):
        """An explicit key is not replaced by the environment."""
        args = process_run_options(
            RunOptions(project="/app", key="mine"), env={RECORD_KEY_ENV: "secret"}
        )
        assert args[-2:] == ["--key", "mine"]

    def test_invalid_testing_type(self):
        """Unknown testing types are rejected."""
        with pytest.raises(InvalidOptionError, match="testing type"):
            process_run_options(RunOptions(project="/app", testing_type="unit"), env={})


class TestRunnerCommand:
    """Tests for the full runner command line."""

    def test_default_runner(self):
        """The default runner prefixes the arguments."""
        assert runner_command(RunOptions(project="/app"), env={}) == (
            DEFAULT_RUNNER + ["--project", "/app"]
        )

    def test_isolated_run_options(self):
        """Isolated runs target the isolated spec relative to the project."""
        options = RunOptions(project="/app", spec="all")
        isolated = options.for_isolated_run(
            Path("/app/cypress/tests/recordreplay-a.spec.js"), "/opt/replay/chrome"
        )
        assert isolated.spec == str(Path("cypress/tests/recordreplay-a.spec.js"))
        assert isolated.browser == "/opt/replay/chrome"
        assert options.spec == "all"

    def test_spec_root(self):
        """Reported spec paths resolve under the spec directory."""
        assert RunOptions(project="/app").spec_root == Path("/app/cypress/tests")
