"""
Storage module for the gacha simulator.

Contains the durable key-value store shared by the client contexts of a
profile, the save record persistence, the same-context event bus and the
debug channel.
"""

from .debug_channel import DebugChannel
from .event_bus import EventBus, GachaEventType
from .kv_store import StorageArea, StorageEvent, StorageHandle
from .persistence import SaveRecord, SaveStore, parse_save_record

__all__ = [
    "DebugChannel",
    "EventBus",
    "GachaEventType",
    "StorageArea",
    "StorageEvent",
    "StorageHandle",
    "SaveRecord",
    "SaveStore",
    "parse_save_record",
]
