"""
Tests for the versioned save record.
"""

import json

import pytest

from gachasim.core.constants import SAVE_STORAGE_KEY
from gachasim.core.errors import StorageCorrupt
from gachasim.engine.accumulator import Accumulator, Stats
from gachasim.storage.kv_store import StorageArea
from gachasim.storage.persistence import SaveRecord, SaveStore, parse_save_record


@pytest.fixture
def store(area: StorageArea):
    return SaveStore(area.connect())


def test_default_when_nothing_is_stored(store: SaveStore):
    record = store.load()
    assert record == SaveRecord.default()
    assert record.inventory == {}
    assert record.stats.total_rolls == 0


def test_load_after_save_is_equal(store: SaveStore):
    """
    Test that the stored state reads back unchanged.
    """
    record = SaveRecord(
        inventory={"Dragon": 2, "Smoke": 0},
        stats=Stats(total_rolls=3, by_rarity={"Mythical": 2, "Common": 1}),
    )
    store.save(record)

    assert store.load() == record


def test_serialized_format(store: SaveStore):
    """
    Test that the record uses the versioned camelCase format.
    """
    accumulator = Accumulator()
    accumulator.adjust("Light", 1)
    store.save_accumulator(accumulator)

    payload = json.loads(store.handle.get_item(SAVE_STORAGE_KEY))

    assert payload == {
        "v": 1,
        "inventory": {"Light": 1},
        "stats": {"totalRolls": 0, "byRarity": {}},
    }


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        '{"v": 2, "inventory": {}, "stats": {"totalRolls": 0, "byRarity": {}}}',
        '{"v": true, "inventory": {}, "stats": {"totalRolls": 0, "byRarity": {}}}',
        '{"inventory": {}, "stats": {"totalRolls": 0, "byRarity": {}}}',
        '{"v": 1, "stats": {"totalRolls": 0, "byRarity": {}}}',
        '{"v": 1, "inventory": {}}',
        '{"v": 1, "inventory": {"Dragon": -1}, "stats": {"totalRolls": 0, "byRarity": {}}}',
        '{"v": 1, "inventory": {}, "stats": {"totalRolls": 5, "byRarity": {"Common": 1}}}',
    ],
)
def test_invalid_records_are_rejected(raw):
    with pytest.raises(StorageCorrupt):
        parse_save_record(raw)


def test_corrupt_record_loads_default(store: SaveStore):
    """
    Test that a record with another version is discarded as a whole.
    """
    store.handle.set_item(
        SAVE_STORAGE_KEY,
        json.dumps({"v": 2, "inventory": {"Dragon": 4}, "stats": {}}),
    )

    assert store.load() == SaveRecord.default(), "Partial recovery is not attempted"


def test_extra_fields_are_ignored():
    record = parse_save_record(
        '{"v": 1, "inventory": {"A": 1}, "stats": {"totalRolls": 0, "byRarity": {}}, "x": 1}'
    )
    assert record.inventory == {"A": 1}


def test_failed_save_is_logged_not_raised(tmp_path):
    """
    Test that an unwritable profile does not break saving.
    """
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    store = SaveStore(StorageArea(blocker / "profile.json").connect())

    store.save(SaveRecord(inventory={"Dough": 1}, stats=Stats()))

    assert not (blocker / "profile.json").exists()
