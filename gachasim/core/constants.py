"""
Constants and enumerations for the gacha simulator.

Defines the rarity tiers, the default weight table, storage keys, and the
numeric bounds shared by the sampler, the roll orchestrator and the
persistence layer.
"""

from enum import Enum

# Version of the persisted save record.
SAVE_SCHEMA_VERSION = 1

# Default keys inside the durable key-value store.
SAVE_STORAGE_KEY = "gacha-inventory-v1"
DEBUG_STORAGE_KEY = "gacha-debug"

# Remote pool endpoint.
DEFAULT_POOL_URL = "https://bfscraper.app.abledtaha.online/info"
DEFAULT_POOL_TIMEOUT = 10.0

# Bounds applied to the number of draws of a single roll.
MIN_ROLL_COUNT = 1
MAX_ROLL_COUNT = 10000

# Animation window, in milliseconds, and preview refresh period in seconds.
ANIMATION_MIN_MS = 5000
ANIMATION_MAX_MS = 7000
PREVIEW_INTERVAL = 0.12


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().capitalize()


class Rarity(NiceEnum):
    """
    Defines the rarity tiers of the pool, from the lowest to the highest.

    The declaration order is used for display sorting, odds disclosure and the
    sampling walk. It is not related to the magnitude of the weights.
    """

    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    LEGENDARY = "Legendary"
    MYTHICAL = "Mythical"

    @property
    def order(self) -> int:
        """Returns the position of the tier in the declaration order."""
        return list(Rarity).index(self)

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this rarity."""
        return {
            Rarity.COMMON: "⚪",
            Rarity.UNCOMMON: "🟢",
            Rarity.RARE: "🔵",
            Rarity.LEGENDARY: "🟣",
            Rarity.MYTHICAL: "🔴",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this rarity."""
        return {
            Rarity.COMMON: "white",
            Rarity.UNCOMMON: "green",
            Rarity.RARE: "blue",
            Rarity.LEGENDARY: "magenta",
            Rarity.MYTHICAL: "bold red",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies rarity color formatting to a message."""
        return f"[{self.color}]{message}[/]"

    @classmethod
    def parse(cls, value: "str | Rarity") -> "Rarity | None":
        """
        Resolves a rarity from its value or name, ignoring case.

        Args:
            value (str | Rarity):
                The raw rarity, as found in API payloads or save files.

        Returns:
            Rarity | None:
                The matching rarity, or None if the value is unknown.

        """
        if isinstance(value, Rarity):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        for rarity in cls:
            if key in (rarity.value.lower(), rarity.name.lower()):
                return rarity
        return None


def rarity_sort_key(rarity: Rarity | None) -> int:
    """Sort key placing unknown rarities after every known tier."""
    return rarity.order if rarity is not None else len(Rarity)


DEFAULT_RARITY_WEIGHTS: dict[Rarity, int] = {
    Rarity.COMMON: 52,
    Rarity.UNCOMMON: 28,
    Rarity.RARE: 12,
    Rarity.LEGENDARY: 7,
    Rarity.MYTHICAL: 1,
}
