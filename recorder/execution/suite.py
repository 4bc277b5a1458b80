"""Full-suite runner invocation.

Runs the test runner over the whole project, passing its output through
to the console while keeping a copy for parsing afterwards.
"""

from __future__ import annotations

import asyncio
import codecs
import sys
from dataclasses import dataclass
from typing import Callable, TextIO

# Exit code reported when the runner executable cannot be found
RUNNER_NOT_FOUND = 127


@dataclass
class SuiteResult:
    """Outcome of a full-suite run."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""


async def pump_output(
    stream: asyncio.StreamReader,
    chunks: list[str],
    echo: TextIO | None = None,
    on_chunk: Callable[[], None] | None = None,
) -> None:
    """Read *stream* to EOF, appending decoded text to *chunks*.

    Args:
        stream: Child process pipe.
        chunks: Accumulator for decoded output.
        echo: Optional console stream to mirror output to.
        on_chunk: Called after each chunk is appended.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = await stream.read(4096)
        text = decoder.decode(data, final=not data)
        if text:
            chunks.append(text)
            if echo is not None:
                echo.write(text)
                echo.flush()
            if on_chunk is not None:
                on_chunk()
        if not data:
            return


async def _run_suite_async(argv: list[str], echo: bool) -> SuiteResult:
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        return SuiteResult(
            exit_code=RUNNER_NOT_FOUND,
            stderr=f"Runner not found: {argv[0]}",
        )
    except OSError as e:
        return SuiteResult(
            exit_code=RUNNER_NOT_FOUND,
            stderr=f"OS error starting runner: {e}",
        )

    stdout: list[str] = []
    stderr: list[str] = []
    assert proc.stdout is not None and proc.stderr is not None
    await asyncio.gather(
        pump_output(proc.stdout, stdout, sys.stdout if echo else None),
        pump_output(proc.stderr, stderr, sys.stderr if echo else None),
    )
    exit_code = await proc.wait()
    return SuiteResult(
        exit_code=exit_code,
        stdout="".join(stdout),
        stderr="".join(stderr),
    )


def run_suite(argv: list[str], echo: bool = True) -> SuiteResult:
    """Run the full suite and collect its output.

    Args:
        argv: Runner command line.
        echo: Mirror the runner's output to the console while it runs.

    Returns:
        SuiteResult with the exit code and complete output.
    """
    return asyncio.run(_run_suite_async(argv, echo))
