"""
Event bus module for the gacha simulator.

In-process publish/subscribe used to notify listeners that live in the same
client context (the same "tab"). Events are typed pydantic models keyed by
GachaEventType.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from catchery import log_warning
from pydantic import BaseModel, Field

from gachasim.pool.models import PoolItem


class GachaEventType(Enum):
    """Enumeration of available event types."""

    DEBUG_CHANGED = "debug_changed"  # The debug flag was set in this context
    ROLL_STARTED = "roll_started"  # A roll entered its animation phase
    ROLL_PREVIEW = "roll_preview"  # A cosmetic preview frame
    ROLL_SETTLED = "roll_settled"  # The committed draws were recorded
    ROLL_ACKNOWLEDGED = "roll_acknowledged"  # The result display was dismissed
    INVENTORY_CHANGED = "inventory_changed"  # Inventory or stats were mutated


class GachaEvent(BaseModel):
    """Base class for all events."""

    event_type: GachaEventType = Field(description="The type of the event.")


class DebugChangedEvent(GachaEvent):
    """Event data for DEBUG_CHANGED."""

    event_type: GachaEventType = Field(default=GachaEventType.DEBUG_CHANGED)
    enabled: bool = Field(description="The new value of the debug flag.")

    def __str__(self) -> str:
        return f"DebugChangedEvent(enabled={self.enabled})"


class RollStartedEvent(GachaEvent):
    """Event data for ROLL_STARTED."""

    event_type: GachaEventType = Field(default=GachaEventType.ROLL_STARTED)
    count: int = Field(description="Number of draws requested.")
    duration: float = Field(description="Animation duration, in seconds.")

    def __str__(self) -> str:
        return f"RollStartedEvent(count={self.count}, duration={self.duration:.2f}s)"


class RollPreviewEvent(GachaEvent):
    """Event data for ROLL_PREVIEW. The item has no effect on the outcome."""

    event_type: GachaEventType = Field(default=GachaEventType.ROLL_PREVIEW)
    item: PoolItem = Field(description="The item shown on the roll button.")

    def __str__(self) -> str:
        return f"RollPreviewEvent({self.item})"


class RollSettledEvent(GachaEvent):
    """Event data for ROLL_SETTLED."""

    event_type: GachaEventType = Field(default=GachaEventType.ROLL_SETTLED)
    first_item: PoolItem = Field(description="The first committed draw.")
    total_count: int = Field(description="Number of committed draws.")

    def __str__(self) -> str:
        return f"RollSettledEvent({self.first_item}, total={self.total_count})"


class RollAcknowledgedEvent(GachaEvent):
    """Event data for ROLL_ACKNOWLEDGED."""

    event_type: GachaEventType = Field(default=GachaEventType.ROLL_ACKNOWLEDGED)


class InventoryChangedEvent(GachaEvent):
    """Event data for INVENTORY_CHANGED."""

    event_type: GachaEventType = Field(default=GachaEventType.INVENTORY_CHANGED)
    total_items: int = Field(description="Sum of all inventory counts.")
    total_rolls: int = Field(description="Number of draws ever recorded.")


Listener = Callable[[Any], None]


class EventBus:
    """Synchronous in-process event dispatcher."""

    def __init__(self) -> None:
        self._listeners: dict[GachaEventType, list[Listener]] = {}

    def subscribe(self, event_type: GachaEventType, listener: Listener) -> Callable[[], None]:
        """
        Registers a listener for one event type.

        Args:
            event_type (GachaEventType): The type to listen to.
            listener (Listener): Called with the event instance.

        Returns:
            Callable[[], None]: Removes the listener; safe to call twice.

        """
        self._listeners.setdefault(event_type, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(event_type, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def publish(self, event: GachaEvent) -> None:
        """
        Delivers an event to every listener of its type, in subscription order.

        A failing listener is logged and does not prevent the others from
        receiving the event.

        Args:
            event (GachaEvent): The event to deliver.

        """
        for listener in list(self._listeners.get(event.event_type, [])):
            try:
                listener(event)
            except Exception as e:
                log_warning(
                    f"Listener failed while handling {event}",
                    {"event_type": event.event_type.value, "error": str(e)},
                )

    def listener_count(self, event_type: GachaEventType) -> int:
        """Returns the number of listeners registered for a type."""
        return len(self._listeners.get(event_type, []))
