"""plansim CLI: Typer application."""

import logging
import sys

import typer
from rich.console import Console

from plansim.version import __version__

app = typer.Typer(
    name="plansim",
    help="plansim: run key, program and call steps against a simulated state.",
    no_args_is_help=True,
    invoke_without_command=True,
)
console = Console()


def _configure_logging() -> None:
    from plansim.config import PlanSimConfig
    cfg = PlanSimConfig()
    # stderr, so interpreter stdout stays one response per line
    logging.basicConfig(
        level=cfg.effective_log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", is_eager=True, help="Show version"),
):
    """plansim CLI."""
    if version:
        console.print(f"plansim v{__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        return
    _configure_logging()


from plansim.cli.commands import run, plan, interpreter, config  # noqa: E402

app.command(name="run", help="Run a single step (--step or --file)")(run.run_step)
app.command(name="plan", help="Run every step of a plan file")(plan.run_plan)
app.command(name="interpreter", help="Read steps from stdin, write JSON responses")(interpreter.interpreter)
app.command(name="config", help="Show resolved configuration")(config.config_show)


if __name__ == "__main__":
    app()
