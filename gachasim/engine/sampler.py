"""
Weighted sampler module for the gacha simulator.

Maps a rarity weight table to one sampled rarity, and a rarity to one
concrete pool item. Every function takes an optional random.Random so that
callers (and tests) control the random source.
"""

import random
from collections.abc import Mapping, Sequence

from gachasim.core.constants import Rarity
from gachasim.core.errors import ConfigurationError, PoolUnavailable
from gachasim.pool.models import PoolItem

WeightTable = Mapping[Rarity, int]
GroupedPool = Mapping[Rarity, Sequence[PoolItem]]

_default_rng = random.Random()


def validate_weight_table(weights: WeightTable) -> list[tuple[Rarity, int]]:
    """
    Checks a weight table and returns its positive entries in tier order.

    Args:
        weights (WeightTable): Weight of each rarity tier.

    Returns:
        list[tuple[Rarity, int]]: The entries with a weight above zero,
        ordered as the Rarity enumeration.

    Raises:
        ConfigurationError: If a weight is negative, or no weight is positive.

    """
    for rarity, weight in weights.items():
        if weight < 0:
            raise ConfigurationError(
                f"Negative weight for {rarity}",
                {"rarity": str(rarity), "weight": weight},
            )
    entries = [(r, weights[r]) for r in Rarity if weights.get(r, 0) > 0]
    if not entries:
        raise ConfigurationError(
            "Weight table has no positive weight",
            {"weights": {str(r): w for r, w in weights.items()}},
        )
    return entries


def sample_rarity(weights: WeightTable, rng: random.Random | None = None) -> Rarity:
    """
    Samples one rarity proportionally to its weight.

    Args:
        weights (WeightTable): Weight of each rarity tier.
        rng (random.Random | None): Random source. Defaults to the module one.

    Returns:
        Rarity: The sampled tier.

    Raises:
        ConfigurationError: If the table is empty or has no positive weight.

    """
    rng = rng or _default_rng
    entries = validate_weight_table(weights)
    total = sum(weight for _, weight in entries)
    remainder = rng.random() * total
    for rarity, weight in entries:
        remainder -= weight
        if remainder <= 0:
            return rarity
    # Floating point leftovers land on the last positive tier.
    return entries[-1][0]


def group_pool(items: Sequence[PoolItem]) -> dict[Rarity, list[PoolItem]]:
    """
    Partitions a pool by rarity tier.

    Args:
        items (Sequence[PoolItem]): The pool.

    Returns:
        dict[Rarity, list[PoolItem]]: Every tier, mapped to its items in pool
        order (possibly empty).

    """
    groups: dict[Rarity, list[PoolItem]] = {rarity: [] for rarity in Rarity}
    for item in items:
        groups[item.rarity].append(item)
    return groups


def sample_pool_item(
    rarity: Rarity,
    grouped_pool: GroupedPool,
    fallback_pool: Sequence[PoolItem],
    rng: random.Random | None = None,
) -> PoolItem:
    """
    Picks one item of the given tier, uniformly.

    When the tier is empty the item is picked uniformly from the whole pool
    instead, since tiers may legitimately be sparse.

    Args:
        rarity (Rarity): The sampled tier.
        grouped_pool (GroupedPool): The pool partitioned by tier.
        fallback_pool (Sequence[PoolItem]): The whole pool.
        rng (random.Random | None): Random source. Defaults to the module one.

    Returns:
        PoolItem: The drawn item.

    Raises:
        PoolUnavailable: If the whole pool is empty.

    """
    rng = rng or _default_rng
    if not fallback_pool:
        raise PoolUnavailable("The pool is empty", {"rarity": str(rarity)})
    candidates = grouped_pool.get(rarity) or fallback_pool
    return candidates[rng.randrange(len(candidates))]


def draw_item(
    weights: WeightTable,
    grouped_pool: GroupedPool,
    fallback_pool: Sequence[PoolItem],
    rng: random.Random | None = None,
) -> PoolItem:
    """Performs one complete draw: a rarity, then an item of that rarity."""
    if not fallback_pool:
        raise PoolUnavailable("The pool is empty")
    rarity = sample_rarity(weights, rng)
    return sample_pool_item(rarity, grouped_pool, fallback_pool, rng)


def rarity_odds(weights: WeightTable) -> list[tuple[Rarity, int, float]]:
    """
    Discloses the odds of every tier.

    Args:
        weights (WeightTable): Weight of each rarity tier.

    Returns:
        list[tuple[Rarity, int, float]]: (tier, weight, probability) for every
        tier, in tier order. Probabilities are 0 for an unusable table.

    """
    total = sum(w for w in weights.values() if w > 0)
    odds: list[tuple[Rarity, int, float]] = []
    for rarity in Rarity:
        weight = weights.get(rarity, 0)
        probability = max(weight, 0) / total if total else 0.0
        odds.append((rarity, weight, probability))
    return odds
