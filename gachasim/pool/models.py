"""
Pool models module for the gacha simulator.

Defines the canonical PoolItem and the adapter that turns the loosely typed
API payloads into it. Field spelling differences are resolved here and never
propagate past this boundary.
"""

from typing import Any

from catchery import log_warning
from pydantic import BaseModel, ConfigDict, Field

from gachasim.core.constants import Rarity, rarity_sort_key
from gachasim.pool.aliases import canonical_key, resolve_name

# Accepted spellings of each field, in priority order.
NAME_FIELDS = ("name", "Name", "title")
RARITY_FIELDS = ("rarity", "Rarity", "tier")
KIND_FIELDS = ("type", "kind", "category")
PRICE_FIELDS = ("price", "beli_price", "value")
TRADABLE_FIELDS = ("tradable", "tradeable", "is_tradable")


class PoolItem(BaseModel):
    """
    A drawable reward. Immutable once fetched.

    Attributes:
        name (str): Display name, unique within a pool.
        rarity (Rarity): Rarity tier of the item.
        kind (str | None): Free-form category (e.g. "Beast"), display only.
        price (int | None): In-game price, display only.
        tradable (bool | None): Whether the item can be traded, if known.

    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Display name of the item.")
    rarity: Rarity = Field(description="Rarity tier of the item.")
    kind: str | None = Field(default=None, description="Category of the item.")
    price: int | None = Field(default=None, ge=0, description="In-game price.")
    tradable: bool | None = Field(default=None, description="Tradability flag.")

    @property
    def colored_name(self) -> str:
        return self.rarity.colorize(self.name)

    def __str__(self) -> str:
        return f"{self.name} ({self.rarity.value})"


def _first_present(raw: dict[str, Any], fields: tuple[str, ...]) -> Any:
    for field in fields:
        if raw.get(field) is not None:
            return raw[field]
    return None


def _parse_flag(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1", "y"):
            return True
        if lowered in ("false", "no", "0", "n"):
            return False
    return None


def _parse_price(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        price = int(value)
    except (TypeError, ValueError):
        return None
    return price if price >= 0 else None


def normalize_pool_entry(raw: Any) -> PoolItem | None:
    """
    Converts a raw API object into a PoolItem.

    Args:
        raw (Any):
            One element of the pool payload.

    Returns:
        PoolItem | None:
            The normalized item, or None if the entry has no usable name or
            an unknown rarity.

    """
    if not isinstance(raw, dict):
        log_warning(
            "Skipping pool entry that is not an object",
            {"entry_type": type(raw).__name__},
        )
        return None
    name = _first_present(raw, NAME_FIELDS)
    if not isinstance(name, str) or not name.strip():
        log_warning("Skipping pool entry without a name", {"entry": raw})
        return None
    raw_rarity = _first_present(raw, RARITY_FIELDS)
    rarity = Rarity.parse(raw_rarity) if raw_rarity is not None else None
    if rarity is None:
        log_warning(
            f"Skipping pool entry '{name}' with unknown rarity",
            {"name": name, "rarity": raw_rarity},
        )
        return None
    kind = _first_present(raw, KIND_FIELDS)
    return PoolItem(
        name=resolve_name(name),
        rarity=rarity,
        kind=str(kind) if kind is not None else None,
        price=_parse_price(_first_present(raw, PRICE_FIELDS)),
        tradable=_parse_flag(_first_present(raw, TRADABLE_FIELDS)),
    )


def sort_pool(items: list[PoolItem]) -> list[PoolItem]:
    """Sorts items by rarity tier, then by name."""
    return sorted(items, key=lambda i: (rarity_sort_key(i.rarity), i.name.lower()))


def normalize_pool(payload: list[Any]) -> list[PoolItem]:
    """
    Normalizes a whole pool payload.

    Invalid entries are skipped, duplicated names (after alias resolution)
    keep their first occurrence, and the result is sorted by tier then name.

    Args:
        payload (list[Any]): The decoded JSON list.

    Returns:
        list[PoolItem]: The canonical pool.

    """
    items: list[PoolItem] = []
    seen: set[str] = set()
    for raw in payload:
        item = normalize_pool_entry(raw)
        if item is None:
            continue
        key = canonical_key(item.name)
        if key in seen:
            log_warning(
                f"Skipping duplicate pool entry '{item.name}'",
                {"name": item.name},
            )
            continue
        seen.add(key)
        items.append(item)
    return sort_pool(items)


def find_item(pool: list[PoolItem], name: str) -> PoolItem | None:
    """Finds an item of the pool by name, ignoring case."""
    lowered = name.lower()
    return next((item for item in pool if item.name.lower() == lowered), None)
