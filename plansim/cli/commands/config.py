"""plansim config: Show resolved plansim configuration."""

from rich.console import Console
from rich.table import Table
from rich import box

console = Console()


def config_show():
    """Show the resolved configuration.

    Reads from environment variables and .env file.

    Example:
        plansim config
    """
    from plansim.config import PlanSimConfig
    cfg = PlanSimConfig()

    table = Table(
        box=box.ROUNDED,
        header_style="bold dim",
        show_lines=False,
        title="[bold]plansim Configuration[/bold]",
    )
    table.add_column("Key", style="cyan", width=20)
    table.add_column("Value", width=45)
    table.add_column("Env Var", style="dim", width=25)

    rows = [
        ("debug", "PLANSIM_DEBUG"),
        ("log_level", "PLANSIM_LOG_LEVEL"),
        ("interpreter", "PLANSIM_INTERPRETER"),
    ]
    for key, env_var in rows:
        value = getattr(cfg, key)
        shown = "[dim](not set)[/dim]" if value is None else str(value)
        table.add_row(key, shown, env_var)

    console.print(table)
