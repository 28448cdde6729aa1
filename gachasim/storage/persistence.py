"""
Persistence module for the gacha simulator.

Serializes the inventory and the statistics of a profile into one versioned
record of the durable key-value store. A record that cannot be parsed, has
missing keys or carries another schema version is discarded as a whole.
"""

import json
from typing import Any, Literal

from catchery import log_warning
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from gachasim.core.constants import SAVE_SCHEMA_VERSION, SAVE_STORAGE_KEY
from gachasim.core.errors import StorageCorrupt
from gachasim.engine.accumulator import Accumulator, Stats
from gachasim.storage.kv_store import StorageHandle


class SaveRecord(BaseModel):
    """
    The persisted state of a profile.

    Attributes:
        v (int): Schema version, always SAVE_SCHEMA_VERSION.
        inventory (dict[str, int]): Count of every item name.
        stats (Stats): The running roll statistics.

    """

    model_config = ConfigDict(extra="ignore")

    v: Literal[1] = Field(
        default=SAVE_SCHEMA_VERSION,
        description="Schema version of the record.",
    )
    inventory: dict[str, NonNegativeInt] = Field(
        description="Count of every item name.",
    )
    stats: Stats = Field(
        description="The running roll statistics.",
    )

    @classmethod
    def default(cls) -> "SaveRecord":
        """Returns the empty record used when nothing valid is stored."""
        return cls(inventory={}, stats=Stats())

    @classmethod
    def from_accumulator(cls, accumulator: Accumulator) -> "SaveRecord":
        """Builds a record from the current state of an accumulator."""
        return cls(
            inventory=accumulator.inventory_snapshot(),
            stats=accumulator.stats_snapshot(),
        )

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), ensure_ascii=False)


def parse_save_record(raw: str) -> SaveRecord:
    """
    Strictly parses a serialized record.

    Args:
        raw (str): The stored JSON string.

    Returns:
        SaveRecord: The parsed record.

    Raises:
        StorageCorrupt: On invalid JSON, a version mismatch, missing keys or
        inconsistent totals.

    """
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageCorrupt(f"Save record is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise StorageCorrupt(
            f"Save record must be an object, got {type(payload).__name__}"
        )
    version = payload.get("v")
    if version != SAVE_SCHEMA_VERSION or isinstance(version, bool):
        raise StorageCorrupt(
            f"Save record has schema version {version!r}",
            {"expected": SAVE_SCHEMA_VERSION, "found": version},
        )
    for key in ("inventory", "stats"):
        if key not in payload:
            raise StorageCorrupt(f"Save record is missing '{key}'", {"key": key})
    try:
        return SaveRecord.model_validate(payload)
    except ValueError as e:
        raise StorageCorrupt(f"Save record is invalid: {e}") from e


class SaveStore:
    """
    Loads and saves the SaveRecord of a profile.

    Attributes:
        handle (StorageHandle): The client context used for storage access.
        key (str): The storage key of the record.

    """

    def __init__(self, handle: StorageHandle, key: str = SAVE_STORAGE_KEY) -> None:
        self.handle = handle
        self.key = key

    def load(self) -> SaveRecord:
        """
        Reads the stored record.

        Returns:
            SaveRecord: The stored record, or the default one when nothing is
            stored or the stored value is corrupt.

        """
        raw = self.handle.get_item(self.key)
        if raw is None:
            return SaveRecord.default()
        try:
            return parse_save_record(raw)
        except StorageCorrupt as e:
            log_warning(
                f"Discarding stored save record: {e}",
                {"key": self.key, **e.context},
            )
            return SaveRecord.default()

    def save(self, record: SaveRecord) -> None:
        """
        Writes the record immediately.

        A storage failure is logged; the in-memory state stays authoritative.
        """
        try:
            self.handle.set_item(self.key, record.to_json())
        except OSError as e:
            log_warning(
                "Failed to persist the save record",
                {"key": self.key, "error": str(e)},
            )

    def save_accumulator(self, accumulator: Accumulator) -> None:
        """Change listener writing the accumulator state after each mutation."""
        self.save(SaveRecord.from_accumulator(accumulator))
