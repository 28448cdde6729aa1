"""
Shared fixtures for the gacha simulator tests.
"""

import random

import pytest

from gachasim.core.constants import Rarity
from gachasim.core.settings import GachaSettings
from gachasim.engine.accumulator import Accumulator
from gachasim.pool.models import PoolItem
from gachasim.storage.event_bus import EventBus
from gachasim.storage.kv_store import StorageArea


@pytest.fixture
def one_per_tier():
    """A pool with exactly one item per tier."""
    return [
        PoolItem(name="Smoke", rarity=Rarity.COMMON, kind="Elemental"),
        PoolItem(name="Spring", rarity=Rarity.UNCOMMON, kind="Natural"),
        PoolItem(name="Light", rarity=Rarity.RARE, kind="Elemental"),
        PoolItem(name="Buddha", rarity=Rarity.LEGENDARY, kind="Beast"),
        PoolItem(name="Dough", rarity=Rarity.MYTHICAL, kind="Elemental"),
    ]


@pytest.fixture
def fast_settings(tmp_path):
    """Settings with a near-instant animation."""
    return GachaSettings(
        profile_path=tmp_path / "profile.json",
        animation_min_ms=10,
        animation_max_ms=20,
        preview_interval=0.002,
    )


@pytest.fixture
def area(tmp_path):
    return StorageArea(tmp_path / "profile.json")


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def accumulator():
    return Accumulator()


@pytest.fixture
def rng():
    return random.Random(1234)
