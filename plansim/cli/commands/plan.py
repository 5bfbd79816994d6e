"""plansim plan: Run every step of a plan file with one shared ledger."""

import typer
from rich.console import Console
from rich.panel import Panel

from plansim.cli.commands.run import build_runner, emit_json, print_response
from plansim.exceptions import PlanAborted, PlanSimError

console = Console()


def run_plan(
    file: str = typer.Argument(..., help="Plan file (JSON or YAML) with a 'steps' list"),
    as_json: bool = typer.Option(False, "--json", help="Print one JSON response per line"),
):
    """Run a whole plan. Later steps may reference earlier ones as step_N.

    A step that fails during execution is reported and the plan continues.
    A step that fails validation stops the plan.

    Example:
        plansim plan ./plans/token.json
    """
    from plansim.core.plan import load_plan

    try:
        plan = load_plan(file)
        runner = build_runner()
    except PlanSimError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    aborted = None
    try:
        responses = runner.run_plan(plan)
    except PlanAborted as exc:
        responses = exc.responses
        aborted = exc

    for response in responses:
        if as_json:
            emit_json(response)
        else:
            print_response(response)

    failed = sum(1 for r in responses if not r.ok)
    if not as_json:
        summary = (
            f"[bold]Plan:[/bold] [dim]{file}[/dim]\n"
            f"[bold]Steps:[/bold] {len(responses)}/{len(plan.steps)} run  "
            f"[green]{len(responses) - failed} ok[/green]"
            + (f", [red]{failed} failed[/red]" if failed else "")
        )
        if aborted is not None:
            summary += f"\n[red]Aborted:[/red] {aborted.cause}"
        console.print(Panel(summary, title="[bold blue]Plan Summary[/bold blue]", border_style="blue"))

    if aborted is not None or failed:
        raise typer.Exit(1)
