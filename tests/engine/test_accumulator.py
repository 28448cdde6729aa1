"""
Tests for the inventory and statistics accumulator.
"""

import pytest

from gachasim.core.constants import Rarity
from gachasim.engine.accumulator import Accumulator, Stats
from gachasim.pool.models import PoolItem

DRAGON = PoolItem(name="Dragon", rarity=Rarity.MYTHICAL)
SMOKE = PoolItem(name="Smoke", rarity=Rarity.COMMON)


def test_stats_invariant_is_enforced():
    """
    Test that Stats refuses a total that does not match the histogram.
    """
    with pytest.raises(ValueError):
        Stats(total_rolls=3, by_rarity={"Common": 1})
    stats = Stats(totalRolls=2, byRarity={"Common": 1, "Rare": 1})
    assert stats.total_rolls == 2, "Aliases should populate the fields"


def test_record_updates_inventory_and_stats(accumulator: Accumulator):
    """
    Test that two draws of Dragon on an empty state are recorded.
    """
    accumulator.record(DRAGON)
    accumulator.record(DRAGON)

    assert accumulator.inventory == {"Dragon": 2}, "Inventory should count both draws"
    assert accumulator.stats.total_rolls == 2, "Both draws should be counted"
    assert accumulator.stats.by_rarity == {"Mythical": 2}, "Histogram keyed by rarity"


def test_record_many_notifies_once():
    """
    Test that a whole roll is a single mutation for the listener.
    """
    calls = []
    accumulator = Accumulator(on_change=calls.append)

    recorded = accumulator.record_many([DRAGON, SMOKE, SMOKE])

    assert recorded == 3, "Every draw should be recorded"
    assert len(calls) == 1, "The listener should run once per roll"
    assert accumulator.inventory == {"Dragon": 1, "Smoke": 2}
    assert accumulator.stats.total_rolls == sum(accumulator.stats.by_rarity.values())


def test_record_many_with_nothing_does_not_notify():
    calls = []
    accumulator = Accumulator(on_change=calls.append)
    assert accumulator.record_many([]) == 0
    assert calls == [], "No mutation, no notification"


def test_decrement_floors_at_zero():
    """
    Test that decrementing a count of 1 twice leaves 0 and the key present.
    """
    accumulator = Accumulator(inventory={"Smoke": 1})

    assert accumulator.decrement("Smoke") == 0
    assert accumulator.decrement("Smoke") == 0, "Count should never go negative"
    assert "Smoke" in accumulator.inventory, "The key should remain"
    assert accumulator.inventory["Smoke"] == 0


def test_adjust_creates_missing_key(accumulator: Accumulator):
    assert accumulator.adjust("Light", 3) == 3
    assert accumulator.adjust("Ghost", -1) == 0
    assert accumulator.inventory == {"Light": 3, "Ghost": 0}


def test_manual_edits_leave_stats_untouched():
    """
    Test that inventory edits never rewrite the roll statistics.
    """
    accumulator = Accumulator()
    accumulator.record(DRAGON)
    accumulator.adjust("Dragon", -1)
    accumulator.remove("Dragon")

    assert accumulator.stats.total_rolls == 1, "Stats are a historical log"
    assert accumulator.stats.by_rarity == {"Mythical": 1}


def test_remove_reports_presence(accumulator: Accumulator):
    accumulator.record(SMOKE)
    assert accumulator.remove("Smoke") is True
    assert accumulator.remove("Smoke") is False, "Second removal finds nothing"
    assert accumulator.inventory == {}


def test_reset_all_zeroes_everything():
    calls = []
    accumulator = Accumulator(on_change=calls.append)
    accumulator.record_many([DRAGON, SMOKE])

    accumulator.reset_all()

    assert accumulator.inventory == {}
    assert accumulator.stats == Stats(), "Stats should be back to zero"
    assert len(calls) == 2, "Reset is a mutation too"


def test_snapshots_are_copies():
    """
    Test that snapshots do not expose the internal state.
    """
    accumulator = Accumulator()
    accumulator.record(SMOKE)

    inventory = accumulator.inventory_snapshot()
    stats = accumulator.stats_snapshot()
    inventory["Smoke"] = 99
    stats.by_rarity["Common"] = 99

    assert accumulator.inventory["Smoke"] == 1
    assert accumulator.stats.by_rarity["Common"] == 1


def test_initial_state_is_copied():
    inventory = {"Smoke": 2}
    stats = Stats(total_rolls=2, by_rarity={"Common": 2})
    accumulator = Accumulator(inventory, stats)

    accumulator.record(SMOKE)

    assert inventory == {"Smoke": 2}, "Caller's dict should not change"
    assert stats.total_rolls == 2, "Caller's stats should not change"
    assert accumulator.total_items() == 3
