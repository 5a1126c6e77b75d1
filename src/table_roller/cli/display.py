"""Rich terminal display for rolled results."""
from __future__ import annotations

from itertools import groupby

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from table_roller.mechanics.economy import format_quantity, format_value
from table_roller.models.result import RolledItem, SingleResult

console = Console()
error_console = Console(stderr=True)

RARITY_STYLES = {
    "common": "white",
    "uncommon": "green",
    "rare": "bold magenta",
}


def item_label(result: SingleResult) -> str:
    """Item name with accumulated modifiers as a prefix, e.g. '+1 Mithral Chain Shirt'."""
    return " ".join([*result.modifiers, result.name])


def value_label(result: SingleResult) -> str:
    if result.display_quantity is not None:
        return format_quantity(result.display_quantity, result.display_unit)
    return format_value(result.total_value)


def format_result(result: SingleResult) -> str:
    """Plain one-line rendering: breadcrumb > item (value) [rarity]."""
    line = " > ".join([*result.breadcrumb, item_label(result)])
    line += f" ({value_label(result)})"
    if result.rarity != "common":
        line += f" [{result.rarity}]"
    return line


class Display:
    def __init__(self, width: int | None = None, plain: bool = False):
        self.console = console if width is None else Console(width=width)
        self.error_console = error_console
        self.plain = plain

    def show_results(self, rolled: list[RolledItem], budget: float | None = None) -> None:
        if not rolled:
            self.show_error("No results.")
            return
        if self.plain:
            for item in rolled:
                self.console.print(format_result(item.result), markup=False, highlight=False)
            return

        table = Table(box=box.SIMPLE_HEAVY, border_style="cyan", show_lines=False)
        table.add_column("#", justify="right", style="dim", width=3)
        table.add_column("Path", style="dim")
        table.add_column("Item", style="bold")
        table.add_column("Value", justify="right")
        for set_index, group in groupby(rolled, key=lambda r: r.set_index):
            for position, item in enumerate(group):
                result = item.result
                style = RARITY_STYLES.get(result.rarity, "white")
                name = Text(item_label(result), style=style)
                if result.rarity != "common":
                    name.append(f" [{result.rarity}]", style="dim")
                table.add_row(
                    str(set_index + 1) if position == 0 else "",
                    " > ".join(result.breadcrumb),
                    name,
                    value_label(result),
                )
        self.console.print(table)

        total = sum(r.result.total_value for r in rolled)
        summary = f"  [dim]Total: [bold]{format_value(total)}[/bold]"
        if budget is not None:
            summary += f" of {format_value(budget)} budget"
        self.console.print(summary + "[/dim]")

    def show_tables(self, names: list[str]) -> None:
        table = Table(title="Tables", box=box.ROUNDED, border_style="cyan")
        table.add_column("Name", style="bold")
        for name in names:
            table.add_row(name)
        self.console.print(table)

    def show_error(self, message: str) -> None:
        self.error_console.print(Text(message, style="bold red"))
