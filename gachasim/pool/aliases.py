"""
Name alias resolution for pool items.

The upstream APIs spell some items in several ways (regional variants, old
names, punctuation). All of them are resolved through a single table keyed by
the canonical form of the name: lowercase letters and digits only. Names
without an entry keep their original spelling, trimmed.
"""

import re

NAME_ALIASES: dict[str, str] = {
    "rumble": "Lightning",
    "trex": "T-Rex",
    "dragoneast": "Dragon East",
    "eastdragon": "Dragon East",
    "dragonwest": "Dragon West",
    "westdragon": "Dragon West",
}

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def canonical_key(name: str) -> str:
    """Returns the lookup key of a name: lowercase letters and digits only."""
    if not name:
        return ""
    return _NON_ALNUM.sub("", name.lower())


def resolve_name(name: str) -> str:
    """
    Resolves a raw item name to its display name.

    Args:
        name (str): The name as received from the pool source.

    Returns:
        str: The aliased display name, or the trimmed original.

    """
    trimmed = name.strip()
    return NAME_ALIASES.get(canonical_key(trimmed), trimmed)
