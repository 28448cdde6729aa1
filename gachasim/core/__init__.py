"""
Core system module for the gacha simulator.

This module contains the fundamental components shared by the engine:
constants and rarity tiers, the error hierarchy, settings, logging and
console helpers.
"""

from .constants import (
    DEFAULT_RARITY_WEIGHTS,
    NiceEnum,
    Rarity,
    rarity_sort_key,
)
from .errors import (
    ConfigurationError,
    GachaError,
    PoolUnavailable,
    StorageCorrupt,
)
from .settings import (
    GachaSettings,
    load_settings,
)
from .utils import (
    ccapture,
    clamp_int,
    cprint,
    crule,
    make_bar,
)

__all__ = [
    # Import from constants.py
    "DEFAULT_RARITY_WEIGHTS",
    "NiceEnum",
    "Rarity",
    "rarity_sort_key",
    # Import from errors.py
    "ConfigurationError",
    "GachaError",
    "PoolUnavailable",
    "StorageCorrupt",
    # Import from settings.py
    "GachaSettings",
    "load_settings",
    # Import from utils.py
    "ccapture",
    "clamp_int",
    "cprint",
    "crule",
    "make_bar",
]
