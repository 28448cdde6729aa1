"""
Tests for the durable key-value store and its cross-handle notifications.
"""

import json

from gachasim.storage.kv_store import StorageArea, StorageEvent


def test_values_survive_a_new_area(tmp_path):
    """
    Test that written values are durable.
    """
    path = tmp_path / "profile.json"
    StorageArea(path).connect().set_item("k", "v")

    assert StorageArea(path).get("k") == "v"
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}


def test_writer_is_not_notified(area: StorageArea):
    """
    Test that only the other handles receive a change notification.
    """
    tab_a = area.connect()
    tab_b = area.connect()
    events_a: list[StorageEvent] = []
    events_b: list[StorageEvent] = []
    tab_a.add_listener(events_a.append)
    tab_b.add_listener(events_b.append)

    tab_a.set_item("color", "red")

    assert events_a == [], "The writer should not be notified"
    assert events_b == [StorageEvent(key="color", old_value=None, new_value="red")]
    assert tab_b.get_item("color") == "red", "Both handles share the same data"


def test_unchanged_value_is_not_broadcast(area: StorageArea):
    tab_a = area.connect()
    tab_b = area.connect()
    events: list[StorageEvent] = []
    tab_b.add_listener(events.append)

    tab_a.set_item("k", "1")
    tab_a.set_item("k", "1")

    assert len(events) == 1


def test_remove_and_clear(area: StorageArea):
    tab_a = area.connect()
    tab_b = area.connect()
    events: list[StorageEvent] = []
    tab_b.add_listener(events.append)

    tab_a.set_item("k", "1")
    tab_a.remove_item("k")
    tab_a.remove_item("k")
    tab_a.clear()

    assert [e.new_value for e in events] == ["1", None, None]
    assert events[-1].key is None, "Clearing reports no key"
    assert tab_b.get_item("k") is None


def test_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text("{not json", encoding="utf-8")
    assert StorageArea(path).get("k") is None

    path.write_text('["a list"]', encoding="utf-8")
    assert StorageArea(path).get("k") is None


def test_non_string_values_are_ignored(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text('{"a": "1", "b": 2}', encoding="utf-8")
    area = StorageArea(path)
    assert area.get("a") == "1"
    assert area.get("b") is None


def test_refresh_reports_external_changes(tmp_path):
    """
    Test that a write made by another process reaches every handle.
    """
    path = tmp_path / "profile.json"
    here = StorageArea(path)
    handle = here.connect()
    events: list[StorageEvent] = []
    handle.add_listener(events.append)
    handle.set_item("gacha-debug", "0")

    StorageArea(path).connect().set_item("gacha-debug", "1")
    changed = here.refresh()

    assert changed == ["gacha-debug"]
    assert events == [StorageEvent(key="gacha-debug", old_value="0", new_value="1")]
    assert here.refresh() == [], "Nothing changed since the last refresh"


def test_failing_listener_does_not_block_others(area: StorageArea):
    tab_a = area.connect()
    tab_b = area.connect()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    tab_b.add_listener(broken)
    tab_b.add_listener(received.append)

    tab_a.set_item("k", "v")

    assert len(received) == 1


def test_unsubscribe_and_close(area: StorageArea):
    tab_a = area.connect()
    tab_b = area.connect()
    tab_c = area.connect()
    events_b = []
    events_c = []
    unsubscribe = tab_b.add_listener(events_b.append)
    tab_c.add_listener(events_c.append)

    unsubscribe()
    unsubscribe()
    tab_c.close()
    tab_a.set_item("k", "v")

    assert events_b == []
    assert events_c == []
    assert tab_c.closed


def test_write_keeps_keys_saved_by_another_area(tmp_path):
    """
    Test that a write from one process keeps the keys another one wrote since.
    """
    path = tmp_path / "profile.json"
    area_a = StorageArea(path)
    area_b = StorageArea(path)
    events_b: list[StorageEvent] = []
    tab_b = area_b.connect()
    tab_b.add_listener(events_b.append)

    area_a.connect().set_item("gacha-inventory-v1", '{"Dough": 3}')
    tab_b.set_item("gacha-debug", "1")

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk == {"gacha-inventory-v1": '{"Dough": 3}', "gacha-debug": "1"}
    assert area_b.get("gacha-inventory-v1") == '{"Dough": 3}', "B should pick up A's write"
    assert [e.key for e in events_b] == ["gacha-inventory-v1"], "External write announced"


def test_remove_keeps_keys_saved_by_another_area(tmp_path):
    path = tmp_path / "profile.json"
    area_a = StorageArea(path)
    area_b = StorageArea(path)
    area_b.connect().set_item("gacha-debug", "1")

    area_a.connect().set_item("gacha-inventory-v1", "{}")
    area_b.connect().remove_item("gacha-debug")

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk == {"gacha-inventory-v1": "{}"}
