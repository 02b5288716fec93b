"""Tests for buffered selection state and value types."""

import pytest

from pyqt_recordlink.forms.selection_types import FieldConfig, SelectedItem, to_host_value
from pyqt_recordlink.protocols import SessionStateError
from pyqt_recordlink.services import BufferedSelection, normalize_value


def test_seed_normalizes_host_values():
    item = {"docPath": "C/1", "snapshot": {"name": "Alice"}}

    assert normalize_value(None, multiple=True) == []
    assert normalize_value(item, multiple=True) == [SelectedItem("C/1", {"name": "Alice"})]
    assert normalize_value([item, {"bad": 1}], multiple=True) == [SelectedItem("C/1", {"name": "Alice"})]

    assert normalize_value(None, multiple=False) is None
    assert normalize_value([item], multiple=False) == SelectedItem("C/1", {"name": "Alice"})
    assert normalize_value([], multiple=False) is None
    assert normalize_value({"snapshot": {}}, multiple=False) is None


def test_current_reflects_latest_apply():
    buffer = BufferedSelection(multiple=True)
    buffer.seed([])
    buffer.apply([SelectedItem("C/1")])
    buffer.apply([SelectedItem("C/5"), SelectedItem("C/1")])
    assert [i.reference for i in buffer.current()] == ["C/5", "C/1"]


def test_commit_returns_accumulated_value_once():
    buffer = BufferedSelection(multiple=True)
    buffer.seed([SelectedItem("C/1")])
    buffer.apply([SelectedItem("C/1"), SelectedItem("C/7")])

    assert [i.reference for i in buffer.commit()] == ["C/1", "C/7"]
    assert not buffer.is_active
    with pytest.raises(SessionStateError):
        buffer.commit()


def test_discard_is_silent_and_ends_session():
    buffer = BufferedSelection(multiple=False)
    buffer.seed(SelectedItem("C/1"))
    buffer.apply(SelectedItem("C/5"))
    buffer.discard()

    with pytest.raises(SessionStateError):
        buffer.current()
    with pytest.raises(SessionStateError):
        buffer.commit()


def test_apply_before_seed_is_an_error():
    with pytest.raises(SessionStateError):
        BufferedSelection().apply([])


def test_current_returns_a_copy():
    buffer = BufferedSelection(multiple=True)
    buffer.seed([SelectedItem("C/1")])
    buffer.current().append(SelectedItem("C/2"))
    assert len(buffer.current()) == 1


def test_selected_item_invariants():
    with pytest.raises(ValueError):
        SelectedItem("")
    item = SelectedItem("people/42", None)
    assert item.snapshot == {}
    assert item.record_id == "42"
    assert item.collection == "people"
    assert SelectedItem.from_value({"reference": "people/42"}) == item


def test_to_host_value():
    item = SelectedItem("C/1", {"name": "Alice"})
    assert to_host_value(None) is None
    assert to_host_value(item) == {"docPath": "C/1", "snapshot": {"name": "Alice"}}
    assert to_host_value([item]) == [{"docPath": "C/1", "snapshot": {"name": "Alice"}}]


def test_field_config_from_host_dict():
    config = FieldConfig.from_dict({
        "index": "people",
        "filters": "team:{{team}}",
        "primaryKeys": ["first", "last"],
        "snapshotFields": ["first"],
        "multiple": False,
        "searchLabel": "people",
        "loadBeforeOpen": True,
    })
    assert config.collection == "people"
    assert config.filter_template == "team:{{team}}"
    assert config.primary_display_keys == ("first", "last")
    assert config.snapshot_field_allow_list == ("first",)
    assert config.multiple is False
    assert config.load_before_open is True


def test_field_config_defaults_to_multiple():
    assert FieldConfig.from_dict({"index": "people"}).multiple is True
    assert FieldConfig.from_dict({"index": "people", "multiple": None}).multiple is True
    assert FieldConfig("people").snapshot_field_allow_list is None
