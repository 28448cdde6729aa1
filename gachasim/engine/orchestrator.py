"""
Roll orchestrator module for the gacha simulator.

Sequences one roll request through the IDLE -> ANIMATING -> SETTLED states.
During the animation a cosmetic preview loop publishes random items for
display; the committed draws are only performed once the animation window
has elapsed (or was explicitly cut short), and are then permanent.
"""

import asyncio
import contextlib
import random
from collections.abc import Sequence

from catchery import log_debug
from pydantic import BaseModel, Field

from gachasim.core.constants import NiceEnum
from gachasim.core.errors import PoolUnavailable
from gachasim.core.logging import log_info
from gachasim.core.settings import GachaSettings
from gachasim.core.utils import clamp_int
from gachasim.engine.accumulator import Accumulator
from gachasim.engine.sampler import (
    GroupedPool,
    draw_item,
    group_pool,
    validate_weight_table,
)
from gachasim.pool.models import PoolItem
from gachasim.storage.event_bus import (
    EventBus,
    RollAcknowledgedEvent,
    RollPreviewEvent,
    RollSettledEvent,
    RollStartedEvent,
)


class RollState(NiceEnum):
    """Defines the states of the roll orchestrator."""

    IDLE = "IDLE"
    ANIMATING = "ANIMATING"
    SETTLED = "SETTLED"


class RollResult(BaseModel):
    """
    Outcome of a settled roll.

    Attributes:
        first_item (PoolItem): The first committed draw, shown on the button.
        total_count (int): Number of committed draws.
        items (list[PoolItem]): Every committed draw, in order.

    """

    first_item: PoolItem = Field(description="The first committed draw.")
    total_count: int = Field(ge=1, description="Number of committed draws.")
    items: list[PoolItem] = Field(default_factory=list, description="All draws.")


class RollOrchestrator:
    """
    State machine driving the rolls of one client context.

    Attributes:
        accumulator (Accumulator): Receives every committed draw.
        bus (EventBus): Receives roll lifecycle and preview events.
        settings (GachaSettings): Weights, timings and roll-count bounds.

    """

    def __init__(
        self,
        accumulator: Accumulator,
        bus: EventBus,
        settings: GachaSettings,
        rng: random.Random | None = None,
        preview_rng: random.Random | None = None,
    ) -> None:
        """
        Initialize the RollOrchestrator.

        Args:
            accumulator (Accumulator): Receives every committed draw.
            bus (EventBus): Receives roll lifecycle and preview events.
            settings (GachaSettings): Weights, timings and roll-count bounds.
            rng (random.Random | None): Random source of the committed draws
                and of the animation duration.
            preview_rng (random.Random | None): Separate random source of the
                cosmetic preview, so it never disturbs the committed draws.

        Raises:
            ConfigurationError: If the weight table is degenerate.

        """
        validate_weight_table(settings.rarity_weights)
        self.accumulator = accumulator
        self.bus = bus
        self.settings = settings
        self._rng = rng or random.Random()
        self._preview_rng = preview_rng or random.Random()
        self._pool: list[PoolItem] = []
        self._grouped = group_pool([])
        self._state = RollState.IDLE
        self._result: RollResult | None = None
        self._preview: PoolItem | None = None
        self._preview_task: asyncio.Task | None = None
        self._skip_event: asyncio.Event | None = None

    # ---- Pool ----

    def set_pool(self, items: Sequence[PoolItem]) -> None:
        """Replaces the pool used by the following rolls."""
        self._pool = list(items)
        self._grouped = group_pool(self._pool)

    @property
    def pool(self) -> list[PoolItem]:
        return list(self._pool)

    # ---- State ----

    @property
    def state(self) -> RollState:
        return self._state

    @property
    def result(self) -> RollResult | None:
        """The settled result, or None outside of SETTLED."""
        return self._result

    @property
    def preview(self) -> PoolItem | None:
        """The item currently shown on the roll button, if any."""
        return self._preview

    @property
    def can_roll(self) -> bool:
        """Whether the roll trigger is enabled."""
        return bool(self._pool) and self._state is not RollState.ANIMATING

    def clamp_count(self, count: int) -> int:
        """Clamps a requested number of draws into the configured bounds."""
        return clamp_int(count, self.settings.min_roll_count, self.settings.max_roll_count)

    def draw_duration(self) -> float:
        """Draws the animation duration of one roll, in seconds."""
        millis = self._rng.randint(self.settings.animation_min_ms, self.settings.animation_max_ms)
        return millis / 1000.0

    # ---- Transitions ----

    async def click(self, count: int) -> RollResult | None:
        """
        Handles a press of the roll button.

        SETTLED dismisses the result, ANIMATING is ignored (or cuts the
        animation short when skipping is allowed), IDLE starts a roll.

        Args:
            count (int): Requested number of draws.

        Returns:
            RollResult | None: The result when a roll was performed.

        """
        if self._state is RollState.ANIMATING:
            if self.settings.allow_skip:
                self.skip()
            return None
        if not self._pool and self._state is RollState.IDLE:
            log_debug("Roll button pressed while the pool is empty")
            return None
        return await self.start_roll(count)

    async def start_roll(self, count: int) -> RollResult | None:
        """
        Runs one roll: animation, then exactly `count` committed draws.

        Args:
            count (int): Requested number of draws, clamped to the bounds.

        Returns:
            RollResult | None: The settled result, or None when the call only
            dismissed a settled result or a roll is already animating.

        Raises:
            PoolUnavailable: If the pool is empty.
            ConfigurationError: If the weight table is degenerate.

        """
        if self._state is RollState.SETTLED:
            self.acknowledge_result()
            return None
        if self._state is RollState.ANIMATING:
            log_debug("Roll already in progress; ignoring request")
            return None
        if not self._pool:
            raise PoolUnavailable("Cannot roll: the pool is empty")

        quantity = self.clamp_count(count)
        duration = self.draw_duration()
        pool = list(self._pool)
        grouped = self._grouped

        self._state = RollState.ANIMATING
        skip_event = self._skip_event = asyncio.Event()
        self.bus.publish(RollStartedEvent(count=quantity, duration=duration))
        self._preview_task = asyncio.create_task(self._preview_loop(pool))
        try:
            await self._wait_animation(skip_event, duration)
            result = self._commit(quantity, pool, grouped)
        except BaseException:
            self._state = RollState.IDLE
            raise
        finally:
            await self._stop_preview()
            self._skip_event = None

        self._result = result
        self._preview = result.first_item
        self._state = RollState.SETTLED
        self.bus.publish(
            RollSettledEvent(first_item=result.first_item, total_count=result.total_count)
        )
        return result

    def skip(self) -> bool:
        """
        Cuts the current animation short. Never cancels committed draws.

        Returns:
            bool: True if an animation was running.

        """
        if self._state is not RollState.ANIMATING or self._skip_event is None:
            return False
        self._skip_event.set()
        return True

    def acknowledge_result(self) -> bool:
        """
        Dismisses the settled result. Performs no draws.

        Returns:
            bool: True if a result was dismissed.

        """
        if self._state is not RollState.SETTLED:
            return False
        self._result = None
        self._state = RollState.IDLE
        self.bus.publish(RollAcknowledgedEvent())
        return True

    # ---- Internals ----

    async def _wait_animation(self, skip_event: asyncio.Event, duration: float) -> None:
        try:
            await asyncio.wait_for(skip_event.wait(), timeout=duration)
            log_debug("Roll animation cut short")
        except asyncio.TimeoutError:
            pass

    async def _preview_loop(self, pool: list[PoolItem]) -> None:
        while True:
            item = pool[self._preview_rng.randrange(len(pool))]
            self._preview = item
            self.bus.publish(RollPreviewEvent(item=item))
            await asyncio.sleep(self.settings.preview_interval)

    async def _stop_preview(self) -> None:
        task, self._preview_task = self._preview_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def _commit(
        self, quantity: int, pool: list[PoolItem], grouped: GroupedPool
    ) -> RollResult:
        weights = self.settings.rarity_weights
        items = [draw_item(weights, grouped, pool, self._rng) for _ in range(quantity)]
        self.accumulator.record_many(items)
        log_info(
            f"Roll settled with {items[0].name}",
            {"count": quantity, "first": items[0].name, "rarity": items[0].rarity.value},
        )
        return RollResult(first_item=items[0], total_count=len(items), items=items)
