"""
Inventory and statistics accumulator module for the gacha simulator.

Merges drawn items into a running count-by-name inventory and a running
rarity histogram. This is the only component that writes to them; every
mutation is reported to a change listener (the persistence layer).
"""

from collections.abc import Callable, Iterable
from typing import Any

from catchery import log_debug
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from gachasim.pool.models import PoolItem


class Stats(BaseModel):
    """
    Running roll statistics.

    The invariant total_rolls == sum(by_rarity.values()) holds at all times.
    Serialized with the camelCase aliases used by the save format.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_rolls: NonNegativeInt = Field(
        default=0,
        alias="totalRolls",
        description="Number of draws ever recorded.",
    )
    by_rarity: dict[str, NonNegativeInt] = Field(
        default_factory=dict,
        alias="byRarity",
        description="Number of draws per rarity tag.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates the totals after model initialization."""
        if self.total_rolls != sum(self.by_rarity.values()):
            raise ValueError(
                f"total_rolls ({self.total_rolls}) does not match the rarity "
                f"histogram ({sum(self.by_rarity.values())})"
            )


ChangeListener = Callable[["Accumulator"], None]


class Accumulator:
    """
    Owns the inventory and the statistics of a profile.

    Attributes:
        inventory (dict[str, int]):
            Count of every item name ever obtained (including names no longer
            in the pool).
        stats (Stats):
            The running roll statistics.

    """

    def __init__(
        self,
        inventory: dict[str, int] | None = None,
        stats: Stats | None = None,
        on_change: ChangeListener | None = None,
    ) -> None:
        """
        Initialize the Accumulator.

        Args:
            inventory (dict[str, int] | None): Initial inventory, copied.
            stats (Stats | None): Initial statistics, copied.
            on_change (ChangeListener | None): Called after every mutation.

        """
        self.inventory: dict[str, int] = dict(inventory or {})
        self.stats: Stats = stats.model_copy(deep=True) if stats else Stats()
        self._on_change = on_change

    def set_listener(self, on_change: ChangeListener | None) -> None:
        """Replaces the change listener."""
        self._on_change = on_change

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    def _apply(self, item: PoolItem) -> None:
        self.inventory[item.name] = self.inventory.get(item.name, 0) + 1
        tag = item.rarity.value
        self.stats.by_rarity[tag] = self.stats.by_rarity.get(tag, 0) + 1
        self.stats.total_rolls += 1

    def record(self, item: PoolItem) -> None:
        """
        Records one draw.

        Args:
            item (PoolItem): The drawn item.

        """
        self._apply(item)
        self._changed()

    def record_many(self, items: Iterable[PoolItem]) -> int:
        """
        Records the draws of a whole roll as a single mutation.

        Args:
            items (Iterable[PoolItem]): The drawn items.

        Returns:
            int: The number of recorded draws.

        """
        count = 0
        for item in items:
            self._apply(item)
            count += 1
        if count:
            self._changed()
        return count

    def adjust(self, name: str, delta: int) -> int:
        """
        Changes the count of an item, never going below zero.

        Args:
            name (str): The item name.
            delta (int): Amount to add (negative to remove).

        Returns:
            int: The new count.

        """
        new_count = max(0, self.inventory.get(name, 0) + int(delta))
        self.inventory[name] = new_count
        log_debug(f"Adjusted inventory of {name}", {"name": name, "delta": delta})
        self._changed()
        return new_count

    def decrement(self, name: str) -> int:
        """Removes one unit of an item, flooring at zero."""
        return self.adjust(name, -1)

    def remove(self, name: str) -> bool:
        """
        Deletes an item from the inventory entirely.

        Args:
            name (str): The item name.

        Returns:
            bool: True if the item was present.

        """
        if name not in self.inventory:
            return False
        del self.inventory[name]
        self._changed()
        return True

    def reset_all(self) -> None:
        """Zeroes both the inventory and the statistics. Irreversible."""
        self.inventory = {}
        self.stats = Stats()
        self._changed()

    def inventory_snapshot(self) -> dict[str, int]:
        """Returns a copy of the inventory."""
        return dict(self.inventory)

    def stats_snapshot(self) -> Stats:
        """Returns a copy of the statistics."""
        return self.stats.model_copy(deep=True)

    def total_items(self) -> int:
        """Returns the sum of all inventory counts."""
        return sum(self.inventory.values())
