"""
Selection reconciliation.

The picker widget only knows record identifiers. Turning a set of chosen
identifiers back into SelectedItems works per identifier:

1. If the identifier is in the current hits, build a fresh item from the hit.
2. Otherwise, if the previous value already holds that reference, carry the
   previous item forward untouched (the record scrolled out of the results
   but is still selected).
3. Otherwise drop it.

Snapshots never contain the backend's ranking metadata and, when an
allow-list is configured and non-empty, contain only allow-listed fields.
An empty allow-list places no restriction on the snapshot.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pyqt_recordlink.forms.selection_types import SelectedItem, SelectionValue
from pyqt_recordlink.protocols import SearchHit, get_link_config

logger = logging.getLogger(__name__)

ChosenIdentifiers = Union[str, Sequence[str], None]


class SelectionReconciler:
    """Maps chosen identifiers to SelectedItems for one collection. Stateless."""

    def __init__(self, collection: str, snapshot_fields: Optional[Iterable[str]] = None,
                 multiple: bool = True, record_id_key: Optional[str] = None,
                 ranking_metadata_keys: Optional[Iterable[str]] = None):
        config = get_link_config()
        self.collection = collection
        self.snapshot_fields = tuple(snapshot_fields) if snapshot_fields is not None else None
        self.multiple = multiple
        self.record_id_key = record_id_key or config.record_id_key
        self.ranking_metadata_keys = frozenset(
            ranking_metadata_keys if ranking_metadata_keys is not None else config.ranking_metadata_keys
        )

    # ========== REFERENCES ==========

    def reference_for(self, record_id: str) -> str:
        return f"{self.collection}/{record_id}"

    @staticmethod
    def record_id_of(reference: str) -> str:
        return reference.rsplit("/", 1)[-1]

    def identifiers_of(self, value: SelectionValue) -> Union[List[str], Optional[str]]:
        """Identifiers the widget should show as chosen for value."""
        if self.multiple:
            return [item.record_id for item in (value or [])]
        return value.record_id if value is not None else None

    # ========== SNAPSHOTS ==========

    def snapshot_of(self, hit: Mapping[str, Any]) -> Dict[str, Any]:
        snapshot = {key: val for key, val in hit.items() if key not in self.ranking_metadata_keys}
        if self.snapshot_fields:
            snapshot = {key: snapshot[key] for key in self.snapshot_fields if key in snapshot}
        return snapshot

    def _find_hit(self, record_id: str, hits: Iterable[SearchHit]) -> Optional[SearchHit]:
        for hit in hits:
            if str(hit.get(self.record_id_key)) == record_id:
                return hit
        return None

    def _resolve(self, record_id: str, hits: Sequence[SearchHit],
                 previous: List[SelectedItem]) -> Optional[SelectedItem]:
        reference = self.reference_for(record_id)
        hit = self._find_hit(record_id, hits)
        if hit is not None:
            return SelectedItem(reference=reference, snapshot=self.snapshot_of(hit))

        for item in previous:
            if item.reference == reference:
                return item

        logger.debug(f"Dropping unreconcilable identifier {record_id!r} for {self.collection}")
        return None

    # ========== RECONCILE ==========

    def reconcile(self, chosen: ChosenIdentifiers, hits: Sequence[SearchHit],
                  previous: SelectionValue) -> SelectionValue:
        """
        Rebuild the selection from the widget's chosen identifiers.

        Multi-select returns a list ordered like chosen. Single-select returns
        one item or None; a None choice clears the selection.
        """
        previous_items = self._as_list(previous)

        if self.multiple:
            if chosen is None:
                return []
            if isinstance(chosen, str):
                chosen = [chosen]
            result = []
            seen = set()
            for record_id in chosen:
                item = self._resolve(str(record_id), hits, previous_items)
                if item is not None and item.reference not in seen:
                    seen.add(item.reference)
                    result.append(item)
            return result

        if chosen is None:
            return None
        if not isinstance(chosen, str):
            chosen = chosen[0] if chosen else None
            if chosen is None:
                return None
        return self._resolve(str(chosen), hits, previous_items)

    @staticmethod
    def _as_list(value: SelectionValue) -> List[SelectedItem]:
        if value is None:
            return []
        if isinstance(value, SelectedItem):
            return [value]
        return list(value)
