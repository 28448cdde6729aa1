"""
Debug channel module for the gacha simulator.

A boolean flag gating developer-only controls. It is persisted under its own
storage key and kept consistent across every client context of a profile:
changes made in this context travel on the event bus, changes made in other
contexts arrive as storage notifications. Both paths converge on the same
value.
"""

from collections.abc import Callable

from catchery import log_debug, log_warning

from gachasim.core.constants import DEBUG_STORAGE_KEY
from gachasim.storage.event_bus import DebugChangedEvent, EventBus, GachaEventType
from gachasim.storage.kv_store import StorageEvent, StorageHandle

DebugListener = Callable[[bool], None]


def _encode(on: bool) -> str:
    return "1" if on else "0"


class DebugChannel:
    """
    The debug flag of one client context.

    Listeners may receive the same value more than once and must be
    idempotent.
    """

    def __init__(
        self,
        handle: StorageHandle,
        bus: EventBus,
        key: str = DEBUG_STORAGE_KEY,
        override: bool | None = None,
    ) -> None:
        """
        Initialize the DebugChannel and read the initial value.

        Args:
            handle (StorageHandle): The client context used for storage access.
            bus (EventBus): The event bus of this client context.
            key (str): The storage key of the flag.
            override (bool | None): In-memory flag used when the stored value
                is not "1".

        """
        self.handle = handle
        self.bus = bus
        self.key = key
        self._value = handle.get_item(key) == "1" or bool(override)
        self._listeners: list[DebugListener] = []
        self._unsubscribe_bus = bus.subscribe(GachaEventType.DEBUG_CHANGED, self._on_bus_event)
        self._unsubscribe_storage = handle.add_listener(self._on_storage_event)

    def get_debug(self) -> bool:
        return self._value

    def set_debug(self, on: bool) -> None:
        """
        Sets the flag, persists it and broadcasts it to this context.

        Other contexts learn about the change from the storage notification.
        A storage failure is logged; the in-memory value still changes.

        Args:
            on (bool): The new value.

        """
        on = bool(on)
        self._value = on
        try:
            self.handle.set_item(self.key, _encode(on))
        except OSError as e:
            log_warning("Failed to persist the debug flag", {"key": self.key, "error": str(e)})
        self.bus.publish(DebugChangedEvent(enabled=on))

    def on_debug_change(self, listener: DebugListener) -> Callable[[], None]:
        """
        Registers a listener called with the new value on every change.

        Args:
            listener (DebugListener): Called with the flag value.

        Returns:
            Callable[[], None]: Removes the listener; safe to call twice.

        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, on: bool) -> None:
        self._value = on
        for listener in list(self._listeners):
            listener(on)

    def _on_bus_event(self, event: DebugChangedEvent) -> None:
        self._notify(event.enabled)

    def _on_storage_event(self, event: StorageEvent) -> None:
        if event.key != self.key or event.new_value is None:
            return
        log_debug("Debug flag changed in another context", {"value": event.new_value})
        self._notify(event.new_value == "1")

    def close(self) -> None:
        """Detaches the channel from the bus and from storage notifications."""
        self._unsubscribe_bus()
        self._unsubscribe_storage()
        self._listeners.clear()
