"""Entry point for the test recorder.

Runs the full test suite through the runner, then re-runs the tests the
recording policy selects one at a time, each isolated in its own spec,
with recording enabled, and uploads the recordings. The exit code is
always the suite's own: recording problems are reported but never change
it.
"""

from __future__ import annotations

import argparse
import shlex
import sys
from pathlib import Path

from recorder.analysis.output_parser import count_events, parse_test_events
from recorder.errors import InvalidOptionError
from recorder.execution.run_options import (
    DEFAULT_RUNNER,
    DEFAULT_SETTLE_DELAY,
    DEFAULT_SPEC_DIR,
    DEFAULT_TIMEOUT,
    RunOptions,
    runner_command,
)
from recorder.execution.suite import RUNNER_NOT_FOUND, run_suite
from recorder.recording.session import RecordingAttempt, record_tests
from recorder.recording.store import ReplayCli
from recorder.reporting.report import RecordingReport
from recorder.selection.config import load_recording_config
from recorder.selection.policy import select_tests


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Run a test suite and record selected tests in isolation"
    )
    parser.add_argument(
        "--project",
        default=".",
        help="Path to the project to run (default: current directory)",
    )
    parser.add_argument(
        "--runner",
        type=shlex.split,
        default=list(DEFAULT_RUNNER),
        help=f"Runner command (default: {shlex.join(DEFAULT_RUNNER)})",
    )
    parser.add_argument(
        "--spec-dir",
        default=DEFAULT_SPEC_DIR,
        help=f"Directory reported spec paths are relative to, inside the project "
             f"(default: {DEFAULT_SPEC_DIR})",
    )
    parser.add_argument("--browser", default=None, help="Browser for the suite run")
    parser.add_argument("--ci-build-id", default=None)
    parser.add_argument("--config", default=None, help="Runner configuration overrides")
    parser.add_argument("--config-file", default=None, help="Runner configuration file")
    parser.add_argument("--env", default=None, help="Runner environment variables")
    parser.add_argument(
        "--no-exit",
        dest="exit",
        action="store_false",
        default=True,
        help="Keep the runner open after the suite finishes",
    )
    parser.add_argument("--group", default=None)
    parser.add_argument("--headed", action="store_true", default=False)
    parser.add_argument("--headless", action="store_true", default=False)
    parser.add_argument(
        "--key",
        default=None,
        help="Runner record key (default: $CYPRESS_RECORD_KEY)",
    )
    parser.add_argument("--output-path", default=None)
    parser.add_argument("--parallel", action="store_true", default=False)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--quiet", action="store_true", default=False)
    parser.add_argument(
        "--record",
        action="store_const",
        const=True,
        default=None,
        help="Ask the runner to record to its dashboard",
    )
    parser.add_argument("--reporter", default=None)
    parser.add_argument("--reporter-options", default=None)
    parser.add_argument("--spec", default=None, help="Spec pattern for the suite run")
    parser.add_argument("--tag", default=None)
    parser.add_argument(
        "--testing-type",
        default=None,
        help="Testing type: e2e or component",
    )

    # Recording options
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds before an isolated run is stopped (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--settle-delay",
        type=float,
        default=DEFAULT_SETTLE_DELAY,
        help="Seconds to keep recording after the isolated test finished "
             f"(default: {DEFAULT_SETTLE_DELAY:g})",
    )
    parser.add_argument(
        "--no-recordings",
        action="store_true",
        default=False,
        help="Only run the suite; do not record any tests",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Path to write a JSON (or .yaml) recording report to",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print every test found in the suite output",
    )
    return parser.parse_args(argv)


def _build_options(args: argparse.Namespace) -> RunOptions:
    """Map parsed arguments onto RunOptions."""
    return RunOptions(
        project=args.project,
        runner=args.runner,
        spec_dir=args.spec_dir,
        browser=args.browser,
        ci_build_id=args.ci_build_id,
        config=args.config,
        config_file=args.config_file,
        env=args.env,
        exit=args.exit,
        group=args.group,
        headed=args.headed,
        headless=args.headless,
        key=args.key,
        output_path=args.output_path,
        parallel=args.parallel,
        port=args.port,
        quiet=args.quiet,
        record=args.record,
        reporter=args.reporter,
        reporter_options=args.reporter_options,
        spec=args.spec,
        tag=args.tag,
        testing_type=args.testing_type,
        timeout=args.timeout,
        settle_delay=args.settle_delay,
    )


def _print_attempts(attempts: list[RecordingAttempt]) -> None:
    """Print a summary of the recording attempts."""
    print()
    print(f"Test recordings: {len(attempts)}")
    for attempt in attempts:
        detail = attempt.url if attempt.url else attempt.message
        print(f"  [{attempt.status.upper()}] {attempt.spec} \"{attempt.title}\" - {detail}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    options = _build_options(args)

    try:
        command = runner_command(options)
    except InvalidOptionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    suite = run_suite(command)
    if suite.exit_code == RUNNER_NOT_FOUND and not suite.stdout:
        print(f"Error: {suite.stderr}", file=sys.stderr)

    parsed = parse_test_events(suite.stdout)
    if args.verbose:
        passed, failed = count_events(parsed)
        print(f"Found tests: {passed} passed, {failed} failed")
        for event in parsed.events:
            icon = "PASS" if event.passed else "FAIL"
            print(f"  [{icon}] {event.spec} \"{event.title}\"")

    report = RecordingReport()
    report.set_suite_result(suite.exit_code, parsed.events)

    if not args.no_recordings:
        config = load_recording_config()
        selection = select_tests(parsed.events, config)
        report.set_selection(config, selection)
        if selection.selected:
            attempts = record_tests(selection.selected, options, ReplayCli())
            report.add_attempts(attempts)
            _print_attempts(attempts)

    if args.report:
        report.write_report(args.report)
        print(f"Report written to: {args.report}")

    return suite.exit_code


if __name__ == "__main__":
    sys.exit(main())
