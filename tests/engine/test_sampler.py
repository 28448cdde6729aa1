"""
Tests for the weighted sampler.
"""

import math
import random
from collections import Counter

import pytest

from gachasim.core.constants import DEFAULT_RARITY_WEIGHTS, Rarity
from gachasim.core.errors import ConfigurationError, PoolUnavailable
from gachasim.engine.sampler import (
    draw_item,
    group_pool,
    rarity_odds,
    sample_pool_item,
    sample_rarity,
    validate_weight_table,
)
from gachasim.pool.models import PoolItem


class FixedRandom(random.Random):
    """Random source returning a fixed value from random()."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.mark.parametrize(
    "weights",
    [
        {},
        {Rarity.COMMON: 0, Rarity.MYTHICAL: 0},
        {rarity: 0 for rarity in Rarity},
    ],
)
def test_degenerate_tables_raise(weights):
    """Empty or all-zero tables never return a value."""
    with pytest.raises(ConfigurationError):
        sample_rarity(weights, random.Random(0))


def test_negative_weight_raises():
    with pytest.raises(ConfigurationError):
        validate_weight_table({Rarity.COMMON: 5, Rarity.RARE: -1})


def test_proportions_match_weights():
    """Over 20,000 draws every tier stays within 4 standard errors."""
    rng = random.Random(42)
    draws = 20000
    counts = Counter(sample_rarity(DEFAULT_RARITY_WEIGHTS, rng) for _ in range(draws))
    total = sum(DEFAULT_RARITY_WEIGHTS.values())
    for rarity, weight in DEFAULT_RARITY_WEIGHTS.items():
        p = weight / total
        sigma = math.sqrt(draws * p * (1 - p))
        assert abs(counts[rarity] - draws * p) <= 4 * sigma, rarity


def test_zero_weight_tier_is_never_drawn():
    rng = random.Random(7)
    weights = {Rarity.COMMON: 3, Rarity.RARE: 0, Rarity.MYTHICAL: 1}
    drawn = {sample_rarity(weights, rng) for _ in range(2000)}
    assert drawn == {Rarity.COMMON, Rarity.MYTHICAL}


def test_walk_follows_tier_order_not_insertion_order():
    """The walk uses the Rarity declaration order, whatever the dict order."""
    weights = {Rarity.MYTHICAL: 1, Rarity.COMMON: 1}
    assert sample_rarity(weights, FixedRandom(0.1)) is Rarity.COMMON
    assert sample_rarity(weights, FixedRandom(0.9)) is Rarity.MYTHICAL


def test_boundary_value_lands_on_first_tier():
    weights = {Rarity.COMMON: 1, Rarity.UNCOMMON: 1}
    # remainder == 1.0 reaches exactly 0 after the first tier.
    assert sample_rarity(weights, FixedRandom(0.5)) is Rarity.COMMON


def test_group_pool_has_every_tier(one_per_tier):
    groups = group_pool(one_per_tier[:2])
    assert set(groups) == set(Rarity)
    assert groups[Rarity.COMMON][0].name == "Smoke"
    assert groups[Rarity.MYTHICAL] == []


def test_sample_pool_item_picks_from_tier(one_per_tier):
    groups = group_pool(one_per_tier)
    item = sample_pool_item(Rarity.LEGENDARY, groups, one_per_tier, random.Random(3))
    assert item.name == "Buddha"


def test_sample_pool_item_falls_back_to_whole_pool():
    pool = [PoolItem(name="Smoke", rarity=Rarity.COMMON)]
    groups = group_pool(pool)
    item = sample_pool_item(Rarity.MYTHICAL, groups, pool, random.Random(3))
    assert item.name == "Smoke"


def test_sample_pool_item_is_uniform_within_tier():
    pool = [
        PoolItem(name="Dough", rarity=Rarity.MYTHICAL),
        PoolItem(name="Dragon", rarity=Rarity.MYTHICAL),
    ]
    groups = group_pool(pool)
    rng = random.Random(11)
    counts = Counter(sample_pool_item(Rarity.MYTHICAL, groups, pool, rng).name for _ in range(4000))
    assert 1800 <= counts["Dough"] <= 2200


def test_empty_pool_is_unavailable():
    with pytest.raises(PoolUnavailable):
        sample_pool_item(Rarity.COMMON, group_pool([]), [], random.Random(0))
    with pytest.raises(PoolUnavailable):
        draw_item(DEFAULT_RARITY_WEIGHTS, group_pool([]), [], random.Random(0))


def test_mythical_rate_with_one_item_per_tier(one_per_tier):
    """1,000 single draws yield about 10 Mythical items (within 3 sigma)."""
    rng = random.Random(2024)
    groups = group_pool(one_per_tier)
    mythical = sum(
        draw_item(DEFAULT_RARITY_WEIGHTS, groups, one_per_tier, rng).rarity is Rarity.MYTHICAL
        for _ in range(1000)
    )
    sigma = math.sqrt(1000 * 0.01 * 0.99)
    assert abs(mythical - 10) <= 3 * sigma


def test_rarity_odds_in_tier_order():
    odds = rarity_odds(DEFAULT_RARITY_WEIGHTS)
    assert [r for r, _, _ in odds] == list(Rarity)
    assert odds[0] == (Rarity.COMMON, 52, pytest.approx(0.52))
    assert odds[-1] == (Rarity.MYTHICAL, 1, pytest.approx(0.01))
    assert sum(p for _, _, p in odds) == pytest.approx(1.0)
