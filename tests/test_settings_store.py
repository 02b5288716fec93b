"""Tests for persisted settings."""

import json


def test_json_store_persists_across_instances(tmp_path):
    from pyqt_recordlink.core import JsonSettingsStore

    settings_file = tmp_path / "nested" / "settings.json"
    store = JsonSettingsStore(settings_file)
    store.set("_recordlink_search-app-id", "APP1")

    reopened = JsonSettingsStore(settings_file)
    assert reopened.get("_recordlink_search-app-id") == "APP1"
    assert json.loads(settings_file.read_text()) == {"_recordlink_search-app-id": "APP1"}


def test_json_store_tolerates_corrupt_file(tmp_path):
    from pyqt_recordlink.core import JsonSettingsStore

    settings_file = tmp_path / "settings.json"
    settings_file.write_text("{not json")

    store = JsonSettingsStore(settings_file)
    assert store.get("anything", "default") == "default"

    store.set("key", 1)
    assert json.loads(settings_file.read_text()) == {"key": 1}


def test_json_store_remove_and_clear(tmp_path):
    from pyqt_recordlink.core import JsonSettingsStore

    settings_file = tmp_path / "settings.json"
    store = JsonSettingsStore(settings_file)
    store.set("a", 1)
    store.set("b", 2)
    store.remove("a")
    store.remove("not-there")
    assert JsonSettingsStore(settings_file).get("a") is None
    assert JsonSettingsStore(settings_file).get("b") == 2

    store.clear()
    assert JsonSettingsStore(settings_file).get("b") is None


def test_default_location_comes_from_config(tmp_path):
    from pyqt_recordlink.core import JsonSettingsStore
    from pyqt_recordlink.protocols import RecordLinkConfig, set_link_config

    set_link_config(RecordLinkConfig(settings_file=str(tmp_path / "configured.json")))
    store = JsonSettingsStore()
    assert store.settings_file == tmp_path / "configured.json"


def test_memory_store():
    from pyqt_recordlink.core import MemorySettingsStore

    store = MemorySettingsStore({"x": 1})
    assert store.get("x") == 1
    store.set("y", {"nested": True})
    assert store.get("y") == {"nested": True}
    store.clear()
    assert store.get("x") is None
