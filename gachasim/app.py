"""
Application module for the gacha simulator.

GachaApp is the explicitly owned state container of one client context: it
loads the saved inventory and statistics, loads the pool, wires the
accumulator to the persistence layer and exposes the operations used by the
front end. Nothing here is a process-wide singleton; every collaborator is
passed in.
"""

import random
from collections.abc import Callable

from pydantic import BaseModel

from gachasim.core.constants import Rarity, rarity_sort_key
from gachasim.core.logging import log_debug, log_info
from gachasim.core.settings import GachaSettings
from gachasim.engine.accumulator import Accumulator, Stats
from gachasim.engine.orchestrator import RollOrchestrator, RollResult, RollState
from gachasim.engine.sampler import rarity_odds
from gachasim.pool.models import PoolItem
from gachasim.pool.source import PoolSnapshot, PoolSource
from gachasim.storage.debug_channel import DebugChannel
from gachasim.storage.event_bus import EventBus, InventoryChangedEvent
from gachasim.storage.kv_store import StorageHandle
from gachasim.storage.persistence import SaveStore

RESET_PROMPT = "Clear all gacha inventory and stats?"

ConfirmCallback = Callable[[str], bool]


class InventoryEntry(BaseModel):
    """One row of the inventory view, joined against the current pool."""

    name: str
    count: int
    rarity: Rarity | None = None
    kind: str | None = None


class GachaApp:
    """
    State container and UI-facing operations of one client context.

    Attributes:
        settings (GachaSettings): The engine settings.
        bus (EventBus): Same-context event bus.
        accumulator (Accumulator): Inventory and statistics.
        orchestrator (RollOrchestrator): The roll state machine.
        debug (DebugChannel): The debug flag of this context.

    """

    def __init__(
        self,
        settings: GachaSettings,
        handle: StorageHandle,
        pool_source: PoolSource | None = None,
        rng: random.Random | None = None,
        preview_rng: random.Random | None = None,
    ) -> None:
        """
        Initialize the GachaApp and load the saved state.

        Args:
            settings (GachaSettings): The engine settings.
            handle (StorageHandle): This context's access to durable storage.
            pool_source (PoolSource | None): Supplier of the pool; built from
                the settings when omitted.
            rng (random.Random | None): Random source of the committed draws.
            preview_rng (random.Random | None): Random source of the preview.

        Raises:
            ConfigurationError: If the weight table is degenerate.

        """
        self.settings = settings
        self.handle = handle
        self.bus = EventBus()
        self.pool_source = pool_source or PoolSource(
            url=settings.pool_url,
            timeout=settings.pool_timeout,
            pool_file=settings.pool_file,
        )
        self.save_store = SaveStore(handle, settings.save_key)
        record = self.save_store.load()
        self.accumulator = Accumulator(record.inventory, record.stats, on_change=self._on_change)
        self.orchestrator = RollOrchestrator(
            self.accumulator, self.bus, settings, rng=rng, preview_rng=preview_rng
        )
        self.debug = DebugChannel(
            handle, self.bus, key=settings.debug_key, override=settings.debug_override
        )
        self._snapshot = PoolSnapshot()
        self._roll_count = self.orchestrator.clamp_count(settings.default_roll_count)
        self.loading = True

    async def initialize(self) -> PoolSnapshot:
        """
        Loads the pool. Failures are recovered with the fallback pool.

        Returns:
            PoolSnapshot: The loaded pool.

        """
        self.loading = True
        try:
            snapshot = await self.pool_source.fetch()
        finally:
            self.loading = False
        self.set_pool(snapshot)
        return snapshot

    def set_pool(self, snapshot: PoolSnapshot) -> None:
        """Installs a pool snapshot."""
        self._snapshot = snapshot
        self.orchestrator.set_pool(snapshot.items)
        log_info(
            "Pool ready",
            {"items": len(snapshot.items), "fallback": snapshot.is_fallback},
        )

    def close(self) -> None:
        """Detaches this context from storage notifications."""
        self.debug.close()
        self.handle.close()

    def _on_change(self, accumulator: Accumulator) -> None:
        self.save_store.save_accumulator(accumulator)
        self.bus.publish(
            InventoryChangedEvent(
                total_items=accumulator.total_items(),
                total_rolls=accumulator.stats.total_rolls,
            )
        )

    # ---- Pool ----

    def get_visible_pool(self) -> list[PoolItem]:
        return list(self._snapshot.items)

    @property
    def pool_is_fallback(self) -> bool:
        return self._snapshot.is_fallback

    @property
    def can_roll(self) -> bool:
        return not self.loading and self.orchestrator.can_roll

    def rarity_odds(self) -> list[tuple[Rarity, int, float]]:
        return rarity_odds(self.settings.rarity_weights)

    # ---- Rolling ----

    @property
    def roll_count(self) -> int:
        return self._roll_count

    def set_roll_count(self, count: int) -> int:
        """Sets the number of draws of the next rolls, clamped to the bounds."""
        self._roll_count = self.orchestrator.clamp_count(count)
        log_debug("Roll count set", {"requested": count, "count": self._roll_count})
        return self._roll_count

    @property
    def roll_state(self) -> RollState:
        return self.orchestrator.state

    async def start_roll(self, count: int | None = None) -> RollResult | None:
        """
        Starts a roll of `count` draws (the configured roll count by default).

        Raises:
            PoolUnavailable: If the pool is empty.

        """
        return await self.orchestrator.start_roll(self._roll_count if count is None else count)

    async def click(self, count: int | None = None) -> RollResult | None:
        """
        Presses the roll button: dismisses a settled result, or starts a roll.

        Returns:
            RollResult | None: The result when a roll was performed.

        """
        return await self.orchestrator.click(self._roll_count if count is None else count)

    def acknowledge_result(self) -> bool:
        return self.orchestrator.acknowledge_result()

    # ---- Inventory ----

    def get_inventory_snapshot(self) -> dict[str, int]:
        return self.accumulator.inventory_snapshot()

    def get_inventory_entries(self, query: str = "") -> list[InventoryEntry]:
        """
        Builds the inventory view: rows sorted by tier then name, optionally
        filtered by a case-insensitive substring of the name.

        Args:
            query (str): Search text; empty keeps every row.

        Returns:
            list[InventoryEntry]: The rows.

        """
        by_name = {item.name.lower(): item for item in self._snapshot.items}
        entries = []
        for name, count in self.accumulator.inventory.items():
            item = by_name.get(name.lower())
            entries.append(
                InventoryEntry(
                    name=name,
                    count=count,
                    rarity=item.rarity if item else None,
                    kind=item.kind if item else None,
                )
            )
        entries.sort(key=lambda e: (rarity_sort_key(e.rarity), e.name.lower()))
        needle = query.strip().lower()
        if needle:
            entries = [e for e in entries if needle in e.name.lower()]
        return entries

    def get_stats(self) -> Stats:
        return self.accumulator.stats_snapshot()

    def total_items(self) -> int:
        return self.accumulator.total_items()

    def adjust_inventory(self, name: str, delta: int) -> int:
        return self.accumulator.adjust(name, delta)

    def remove_from_inventory(self, name: str) -> bool:
        return self.accumulator.remove(name)

    def reset_all(self, confirm: ConfirmCallback) -> bool:
        """
        Clears the inventory and the statistics after interactive confirmation.

        Args:
            confirm (ConfirmCallback): Asked with RESET_PROMPT; the reset only
                happens when it returns True.

        Returns:
            bool: True if the state was reset.

        """
        if self.orchestrator.state is RollState.ANIMATING:
            return False
        if not confirm(RESET_PROMPT):
            return False
        self.accumulator.reset_all()
        log_info("Inventory and statistics cleared")
        return True

    # ---- Debug ----

    def get_debug_flag(self) -> bool:
        return self.debug.get_debug()

    def set_debug_flag(self, on: bool) -> None:
        self.debug.set_debug(on)
