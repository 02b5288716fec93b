"""Tests for selection reconciliation."""

import pytest

from pyqt_recordlink.forms.selection_types import SelectedItem
from pyqt_recordlink.services import SelectionReconciler


@pytest.fixture
def reconciler():
    return SelectionReconciler("C")


def test_hit_becomes_item_without_ranking_metadata(reconciler, people):
    result = reconciler.reconcile(["5"], people, [])
    assert result == [SelectedItem("C/5", {"objectID": "5", "name": "Bob", "age": 30})]


def test_snapshot_restricted_to_allow_list(people):
    reconciler = SelectionReconciler("C", snapshot_fields=["name"])
    hits = [{"objectID": "5", "name": "Bob", "age": 30}]
    result = reconciler.reconcile(["5"], hits, [])
    assert result[0].snapshot == {"name": "Bob"}
    assert "age" not in result[0].snapshot


def test_empty_allow_list_means_no_restriction():
    reconciler = SelectionReconciler("C", snapshot_fields=[])
    hits = [{"objectID": "5", "name": "Bob", "age": 30, "_highlightResult": {}}]
    result = reconciler.reconcile(["5"], hits, [])
    assert result[0].snapshot == {"objectID": "5", "name": "Bob", "age": 30}


def test_allow_list_ignores_fields_the_hit_lacks():
    reconciler = SelectionReconciler("C", snapshot_fields=["name", "email"])
    result = reconciler.reconcile(["5"], [{"objectID": "5", "name": "Bob"}], [])
    assert result[0].snapshot == {"name": "Bob"}


def test_previous_item_carried_forward_when_not_in_hits(reconciler, people):
    previous = [SelectedItem("C/1", {"a": 1})]
    hits = [hit for hit in people if hit["objectID"] != "1"]
    assert reconciler.reconcile(["1"], hits, previous) == [SelectedItem("C/1", {"a": 1})]


def test_live_hit_preferred_over_previous_snapshot(reconciler, people):
    previous = [SelectedItem("C/5", {"name": "Robert"})]
    result = reconciler.reconcile(["5"], people, previous)
    assert result[0].snapshot["name"] == "Bob"


def test_unknown_identifier_dropped_silently(reconciler, people):
    previous = [SelectedItem("C/1", {"a": 1})]
    result = reconciler.reconcile(["99", "1", "7"], [people[2]], previous)
    assert [item.reference for item in result] == ["C/1", "C/7"]


def test_repeated_identifier_yields_one_item(reconciler, people):
    result = reconciler.reconcile(["5", "1", "5"], people, [])
    assert [item.reference for item in result] == ["C/5", "C/1"]


def test_order_follows_chosen_identifiers(reconciler, people):
    previous = [SelectedItem("C/7", {}), SelectedItem("C/1", {})]
    result = reconciler.reconcile(["5", "1", "7"], people, previous)
    assert [item.reference for item in result] == ["C/5", "C/1", "C/7"]


def test_reconcile_is_idempotent(reconciler, people):
    previous = [SelectedItem("C/9", {"old": True})]
    first = reconciler.reconcile(["9", "5"], people, previous)
    second = reconciler.reconcile(["9", "5"], people, previous)
    assert first == second


def test_multi_select_none_and_single_string(reconciler, people):
    assert reconciler.reconcile(None, people, []) == []
    assert [i.reference for i in reconciler.reconcile("7", people, [])] == ["C/7"]


def test_single_select(people):
    reconciler = SelectionReconciler("C", multiple=False)
    previous = SelectedItem("C/9", {"name": "Gone"})

    assert reconciler.reconcile(None, people, previous) is None
    assert reconciler.reconcile("5", people, previous).reference == "C/5"
    assert reconciler.reconcile("9", people, previous) is previous
    assert reconciler.reconcile("42", people, previous) is None
    assert reconciler.reconcile(["7"], people, None).reference == "C/7"
    assert reconciler.reconcile([], people, previous) is None


def test_numeric_identifiers_match_string_choices(reconciler):
    result = reconciler.reconcile(["12"], [{"objectID": 12, "name": "Numeric"}], [])
    assert result[0].reference == "C/12"


def test_custom_record_id_key():
    reconciler = SelectionReconciler("C", record_id_key="recordId")
    result = reconciler.reconcile(["r1"], [{"recordId": "r1", "title": "T"}], [])
    assert result == [SelectedItem("C/r1", {"recordId": "r1", "title": "T"})]


def test_identifiers_of(people):
    multi = SelectionReconciler("C")
    single = SelectionReconciler("C", multiple=False)
    assert multi.identifiers_of([SelectedItem("C/1"), SelectedItem("C/5")]) == ["1", "5"]
    assert multi.identifiers_of(None) == []
    assert single.identifiers_of(SelectedItem("C/5")) == "5"
    assert single.identifiers_of(None) is None
