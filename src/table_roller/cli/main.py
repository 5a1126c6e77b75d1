"""Typer CLI application."""
from __future__ import annotations

from typing import Optional

import typer

from table_roller.models.config import RarityPolicy

app = typer.Typer(
    name="table-roller",
    help="Roll random items from nested weighted tables, optionally within a budget",
    no_args_is_help=False,
)


@app.command()
def roll(
    origin: Optional[str] = typer.Option(None, "--origin", "-o", help="Table to start rolling on"),
    count: Optional[int] = typer.Option(None, "--count", "-n", min=1, help="Number of results (or items within a budget)"),
    max_value: Optional[float] = typer.Option(None, "--max-value", "-m", min=0, help="Budget in gold for the whole roll"),
    rare: Optional[float] = typer.Option(None, "--rare", min=0, max=100, help="Percent chance of the rare band"),
    uncommon: Optional[float] = typer.Option(None, "--uncommon", min=0, max=100, help="Percent chance of the uncommon band"),
    filter_by_max: Optional[bool] = typer.Option(None, "--filter-by-max/--no-filter-by-max", "-f/-F", help="Start from the tier closest to the budget"),
    rarity_policy: Optional[RarityPolicy] = typer.Option(None, "--rarity-policy", help="How rarity bands admit tiers"),
    gate_min_value: Optional[bool] = typer.Option(None, "--gate-min-value/--no-gate-min-value", help="Reject entries whose min_value exceeds the budget"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible rolls"),
    data_dir: Optional[str] = typer.Option(None, "--data-dir", "-d", help="Directory of table JSON files"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show reroll diagnostics"),
) -> None:
    """Roll on a table and print the resulting item(s)."""
    from table_roller.app import RollerApp, configure_logging

    roller = RollerApp(data_dir=data_dir)
    configure_logging("DEBUG" if verbose else roller.log_level)
    code = roller.roll(
        seed=seed,
        origin_table=origin,
        result_count=count,
        user_max_value=max_value,
        rare_chance=rare,
        uncommon_chance=uncommon,
        filter_by_max=filter_by_max,
        rarity_policy=rarity_policy,
        budget_gates_min_value=gate_min_value,
    )
    raise typer.Exit(code)


@app.command()
def tables(
    data_dir: Optional[str] = typer.Option(None, "--data-dir", "-d", help="Directory of table JSON files"),
) -> None:
    """List the tables available to roll on."""
    from table_roller.app import RollerApp

    roller = RollerApp(data_dir=data_dir)
    raise typer.Exit(roller.list_tables())


if __name__ == "__main__":
    app()
