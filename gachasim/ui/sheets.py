"""
Module for printing the statistics, inventory, odds and pool in a formatted
way.
"""

from rich.padding import Padding
from rich.table import Table

from gachasim.app import InventoryEntry
from gachasim.core.constants import Rarity
from gachasim.core.utils import cprint, make_bar
from gachasim.engine.accumulator import Stats
from gachasim.engine.orchestrator import RollResult
from gachasim.pool.models import PoolItem


def build_stats_table(stats: Stats, total_items: int) -> Table:
    """
    Builds the statistics table: totals, then one row per tier.

    Args:
        stats (Stats): The roll statistics.
        total_items (int): Sum of all inventory counts.

    Returns:
        Table: The rich table.

    """
    table = Table(title="Statistics", pad_edge=False)
    table.add_column("Tier", style="bold")
    table.add_column("Rolls", justify="right")
    table.add_column("Share")
    for rarity in Rarity:
        count = stats.by_rarity.get(rarity.value, 0)
        table.add_row(
            f"{rarity.emoji} {rarity.colored_name}",
            str(count),
            make_bar(count, stats.total_rolls, color=rarity.color),
        )
    table.add_section()
    table.add_row("Total rolls", str(stats.total_rolls), "")
    table.add_row("Inventory items", str(total_items), "")
    return table


def build_inventory_table(entries: list[InventoryEntry]) -> Table:
    """Builds the inventory table, with a totals footer."""
    table = Table(title="Your Inventory", pad_edge=False, show_footer=True)
    table.add_column("Item", style="bold", footer="Totals")
    table.add_column("Count", justify="right", footer=str(sum(e.count for e in entries)))
    table.add_column("Rarity")
    table.add_column("Type", style="dim")
    for entry in entries:
        rarity = entry.rarity.colored_name if entry.rarity else "-"
        table.add_row(entry.name, str(entry.count), rarity, entry.kind or "-")
    return table


def build_odds_table(odds: list[tuple[Rarity, int, float]]) -> Table:
    """Builds the rarity odds table."""
    table = Table(title="Rarity Odds", pad_edge=False)
    table.add_column("Tier", style="bold")
    table.add_column("Weight", justify="right")
    table.add_column("Chance", justify="right")
    for rarity, weight, probability in odds:
        table.add_row(rarity.colored_name, str(weight), f"{probability:.1%}")
    return table


def build_pool_table(pool: list[PoolItem], is_fallback: bool) -> Table:
    """Builds the current pool table."""
    title = "Current Pool (offline fallback)" if is_fallback else "Current Pool"
    table = Table(title=title, pad_edge=False)
    table.add_column("#", style="cyan")
    table.add_column("Item", style="bold")
    table.add_column("Rarity")
    table.add_column("Type", style="dim")
    for i, item in enumerate(pool, 1):
        table.add_row(str(i), item.name, item.rarity.colored_name, item.kind or "-")
    return table


def print_stats_sheet(stats: Stats, total_items: int) -> None:
    cprint(build_stats_table(stats, total_items))


def print_inventory_sheet(entries: list[InventoryEntry]) -> None:
    if not entries:
        cprint(Padding("[dim]No items yet. Roll to add items to your inventory.[/]", (0, 2)))
        return
    cprint(build_inventory_table(entries))


def print_odds_sheet(odds: list[tuple[Rarity, int, float]]) -> None:
    cprint(build_odds_table(odds))
    cprint(Padding("[dim]Higher weight means more common.[/]", (0, 2)))


def print_pool_sheet(pool: list[PoolItem], is_fallback: bool) -> None:
    cprint(build_pool_table(pool, is_fallback))


def print_roll_result(result: RollResult) -> None:
    """Prints the settled result the way the roll button shows it."""
    first = result.first_item
    sheet = f"{first.rarity.emoji} [bold]{first.colored_name}[/]"
    if result.total_count > 1:
        sheet += f" [dim]+{result.total_count - 1} more[/]"
    else:
        sheet += " [dim](ack to hide)[/]"
    cprint(Padding(sheet, (0, 2)))
