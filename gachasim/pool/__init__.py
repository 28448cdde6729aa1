"""
Pool module for the gacha simulator.

Contains the canonical pool item, the normalization of API payloads and the
pool source with its offline fallback.
"""

from .aliases import NAME_ALIASES, canonical_key, resolve_name
from .models import PoolItem, find_item, normalize_pool, normalize_pool_entry, sort_pool
from .source import FALLBACK_POOL, PoolSnapshot, PoolSource, load_pool_file

__all__ = [
    # Import from aliases.py
    "NAME_ALIASES",
    "canonical_key",
    "resolve_name",
    # Import from models.py
    "PoolItem",
    "find_item",
    "normalize_pool",
    "normalize_pool_entry",
    "sort_pool",
    # Import from source.py
    "FALLBACK_POOL",
    "PoolSnapshot",
    "PoolSource",
    "load_pool_file",
]
