"""plansim interpreter: Line-oriented step runner for driving plansim from another process.

Reads one command per line on stdin and writes one Response JSON per line on
stdout. Accepted lines:

    run --step '<step json>'
    run --file <path>
    <step json>

All steps share one runner, so ``step_N`` references work across lines.
Logs go to stderr; stdout carries only responses.
"""

import shlex
import sys
from typing import Optional

import typer

from plansim.cli.commands.run import build_runner, emit_json
from plansim.exceptions import MalformedPlan, StepError
from plansim.types import Response

_EXIT_COMMANDS = {"exit", "quit"}


def parse_command(line: str) -> tuple[Optional[str], Optional[str]]:
    """Split an interpreter line into (step_text, file).

    Raises:
        MalformedPlan: the line is not a recognised command
    """
    if line.startswith("{"):
        return line, None
    try:
        tokens = shlex.split(line)
    except ValueError as exc:
        raise MalformedPlan(f"cannot parse command line: {exc}") from exc
    if not tokens or tokens[0] != "run":
        raise MalformedPlan(f"unknown command: {line[:40]!r}")

    step_text, file = None, None
    args = iter(tokens[1:])
    for flag in args:
        value = next(args, None)
        if value is None:
            raise MalformedPlan(f"flag {flag} requires a value")
        if flag in ("--step", "-s"):
            step_text = value
        elif flag in ("--file", "-f"):
            file = value
        else:
            raise MalformedPlan(f"unknown flag: {flag}")
    return step_text, file


def interpreter():
    """Run steps read from stdin, one JSON response per line on stdout.

    Stops at end of input, on 'exit', or at the first step that fails
    validation (after writing its error response, exit code 1).
    """
    runner = build_runner()
    for raw in sys.stdin:
        line = raw.strip()
        if not line:
            continue
        if line in _EXIT_COMMANDS:
            break
        try:
            step_text, file = parse_command(line)
            response = runner.run_step(step_text=step_text, file=file)
        except StepError as exc:
            failed = Response(id=runner.step_index)
            failed.set_error(exc)
            emit_json(failed)
            raise typer.Exit(1)
        emit_json(response)
