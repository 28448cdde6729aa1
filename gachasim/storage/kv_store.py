"""
Durable key-value store module for the gacha simulator.

A StorageArea is the storage of one profile: a JSON object of string values
kept in a single file. Client contexts (the equivalent of browser tabs)
attach to it through StorageHandle objects. A write made through one handle
is announced to the listeners of every other handle, never to the writer.
"""

import json
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from catchery import log_debug, log_warning
from pydantic import BaseModel, Field


class StorageEvent(BaseModel):
    """
    Change notification delivered to the other handles of an area.

    Attributes:
        key (str | None): The changed key, or None when the area was cleared.
        old_value (str | None): The previous value.
        new_value (str | None): The new value, None when removed.

    """

    key: str | None = Field(description="The changed key.")
    old_value: str | None = Field(default=None, description="The previous value.")
    new_value: str | None = Field(default=None, description="The new value.")


StorageListener = Callable[[StorageEvent], None]


class StorageArea:
    """
    The durable storage of one profile, backed by a JSON file.

    Attributes:
        path (Path): The backing file.

    """

    def __init__(self, path: Path) -> None:
        """
        Initialize the StorageArea and read the backing file, if any.

        Args:
            path (Path): The backing file. Created on the first write.

        """
        self.path = path
        self._handles: list["StorageHandle"] = []
        self._data: dict[str, str] = self._read()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log_warning(
                "Storage file is unreadable; starting empty",
                {"path": str(self.path), "error": str(e)},
            )
            return {}
        if not isinstance(payload, dict):
            log_warning(
                "Storage file is not an object; starting empty",
                {"path": str(self.path)},
            )
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def connect(self) -> "StorageHandle":
        """Attaches a new client context to this area."""
        handle = StorageHandle(self)
        self._handles.append(handle)
        return handle

    def _detach(self, handle: "StorageHandle") -> None:
        if handle in self._handles:
            self._handles.remove(handle)

    def _broadcast(self, event: StorageEvent, source: "StorageHandle | None") -> None:
        for handle in list(self._handles):
            if handle is not source:
                handle._dispatch(event)

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str, source: "StorageHandle | None" = None) -> None:
        """
        Writes one key. Keys written meanwhile by other processes are kept.

        Args:
            key (str): The key.
            value (str): The new value.
            source (StorageHandle | None): The writing handle, not notified.

        """
        self.refresh()
        old_value = self._data.get(key)
        self._data[key] = value
        self._write()
        if old_value != value:
            self._broadcast(StorageEvent(key=key, old_value=old_value, new_value=value), source)

    def remove(self, key: str, source: "StorageHandle | None" = None) -> None:
        """Deletes one key, keeping the keys written by other processes."""
        self.refresh()
        if key not in self._data:
            return
        old_value = self._data.pop(key)
        self._write()
        self._broadcast(StorageEvent(key=key, old_value=old_value, new_value=None), source)

    def clear(self, source: "StorageHandle | None" = None) -> None:
        self._data = {}
        self._write()
        self._broadcast(StorageEvent(key=None), source)

    def refresh(self) -> list[str]:
        """
        Re-reads the backing file, written meanwhile by another process.

        Every attached handle is notified of the keys whose value changed.

        Returns:
            list[str]: The changed keys.

        """
        fresh = self._read()
        changed = sorted(k for k in set(fresh) | set(self._data) if fresh.get(k) != self._data.get(k))
        previous = self._data
        self._data = fresh
        for key in changed:
            log_debug("Storage key changed on disk", {"key": key})
            self._broadcast(
                StorageEvent(key=key, old_value=previous.get(key), new_value=fresh.get(key)),
                None,
            )
        return changed


class StorageHandle:
    """
    One client context attached to a StorageArea.

    Reads and writes go to the shared area. Listeners registered here are
    notified of changes made through the other handles only.
    """

    def __init__(self, area: StorageArea) -> None:
        self.area = area
        self._listeners: list[StorageListener] = []
        self.closed = False

    def get_item(self, key: str) -> str | None:
        return self.area.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.area.set(key, value, source=self)

    def remove_item(self, key: str) -> None:
        self.area.remove(key, source=self)

    def clear(self) -> None:
        self.area.clear(source=self)

    def add_listener(self, listener: StorageListener) -> Callable[[], None]:
        """
        Registers a listener for changes made by other handles.

        Args:
            listener (StorageListener): Called with each StorageEvent.

        Returns:
            Callable[[], None]: Removes the listener; safe to call twice.

        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, event: StorageEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                log_warning(
                    "Storage listener failed",
                    {"key": event.key, "error": str(e)},
                )

    def close(self) -> None:
        """Detaches the handle; it no longer receives notifications."""
        self._listeners.clear()
        self.area._detach(self)
        self.closed = True
