"""plansim run: Execute a single plan step from the command line."""

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from plansim.exceptions import PlanSimError

console = Console()

_STATUS_COLOR = {
    True: "green",
    False: "red",
}


def build_runner(callbacks: list = None):
    """Build a PlanRunner over a fresh in-memory store.

    The interpreter comes from PLANSIM_INTERPRETER; without it, program
    calls fail with a per-step error while key and program creation work.
    """
    from plansim.config import PlanSimConfig
    from plansim.callbacks.logging import LoggingCallback
    from plansim.core.runner import PlanRunner
    from plansim.runtime.interpreter import load_interpreter
    from plansim.state.store import MemoryStore

    cfg = PlanSimConfig()
    return PlanRunner(
        store=MemoryStore(),
        interpreter=load_interpreter(cfg.interpreter),
        callbacks=callbacks if callbacks is not None else [LoggingCallback()],
    )


def print_response(response) -> None:
    """Render one Response as a rich panel."""
    color = _STATUS_COLOR[response.ok]
    status = "OK" if response.ok else "FAILED"

    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 1))
    table.add_column("Field", style="dim", width=10)
    table.add_column("Value")

    result = response.result
    if result.msg:
        table.add_row("message", result.msg)
    if result.id:
        table.add_row("id", f"[cyan]{result.id}[/cyan]")
    if result.response is not None:
        table.add_row("result", f"0x{result.response.hex()}")
    if result.balance is not None:
        table.add_row("balance", str(result.balance))
    if response.error:
        table.add_row("error", f"[red]{response.error}[/red]")
    table.add_row("timestamp", str(result.timestamp))

    endpoint = response.endpoint.value if response.endpoint is not None else "?"
    title = (
        f"[bold]Step {response.id}[/bold]  "
        f"[cyan]{endpoint}[/cyan]"
        + (f" [dim]{response.method}[/dim]" if response.method else "")
        + f"  [{color}]{status}[/{color}]"
    )
    console.print(Panel(table, title=title, border_style=color))


def emit_json(response) -> None:
    print(response.model_dump_json(exclude_none=True), flush=True)


def run_step(
    step: str = typer.Option(None, "--step", "-s", help="Inline step JSON"),
    file: str = typer.Option(None, "--file", "-f", help="Path to a step JSON/YAML file"),
    as_json: bool = typer.Option(False, "--json", help="Print the response as JSON"),
):
    """Run one plan step against a fresh in-memory state and print its response.

    Exactly one of --step or --file is required.

    Example:
        plansim run --step '{"endpoint": "key", "method": "key_create", "params": [{"type": "ed25519", "value": "YWxpY2U="}]}'
        plansim run --file ./steps/create_program.yaml --json
    """
    try:
        runner = build_runner()
        response = runner.run_step(step_text=step, file=file)
    except PlanSimError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    if as_json:
        emit_json(response)
    else:
        print_response(response)
    if not response.ok:
        raise typer.Exit(1)
