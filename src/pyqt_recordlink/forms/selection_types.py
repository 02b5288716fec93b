"""
Value types for record link fields.

SelectedItem is what ends up in the host document: a durable reference to
a record plus a partial snapshot of its fields. FieldConfig describes one
field and never changes during an editing session.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class SelectedItem:
    """A linked record: ``<collection>/<recordId>`` plus a field snapshot."""
    reference: str
    snapshot: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.reference:
            raise ValueError("SelectedItem.reference must not be empty")
        if self.snapshot is None:
            object.__setattr__(self, "snapshot", {})

    @property
    def record_id(self) -> str:
        return self.reference.rsplit("/", 1)[-1]

    @property
    def collection(self) -> str:
        return self.reference.rsplit("/", 1)[0] if "/" in self.reference else ""

    def to_dict(self) -> Dict[str, Any]:
        """Host representation (``docPath`` + ``snapshot``)."""
        return {"docPath": self.reference, "snapshot": dict(self.snapshot)}

    @classmethod
    def from_value(cls, value: Any) -> Optional["SelectedItem"]:
        """Accept a SelectedItem or a host mapping; anything without a reference is None."""
        if isinstance(value, SelectedItem):
            return value
        if isinstance(value, Mapping):
            reference = value.get("docPath") or value.get("reference")
            if reference:
                return cls(reference=reference, snapshot=dict(value.get("snapshot") or {}))
        return None


SelectionValue = Union[SelectedItem, List[SelectedItem], None]


def to_host_value(value: SelectionValue):
    """Convert a SelectionValue into plain dicts for storage in the host document."""
    if value is None:
        return None
    if isinstance(value, SelectedItem):
        return value.to_dict()
    return [item.to_dict() for item in value]


def _as_tuple(value) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class FieldConfig:
    """Configuration of one record link field.

    Attributes:
        collection: Search collection records are picked from
        filter_template: Filter expression with ``{{path}}`` row placeholders
        primary_display_keys: Hit fields joined to form an option label
        secondary_display_keys: Hit fields shown as secondary option text
        snapshot_field_allow_list: Fields copied into snapshots (None or empty: all)
        tracked_fields: Fields the host keeps in sync after selection (stored, not used here)
        multiple: Multi-select when True, single-select otherwise
        search_label: Plural noun used in the picker's search prompt
        label: Field label shown by the picker
        load_before_open: Issue the default query before the picker opens
    """
    collection: str
    filter_template: str = ""
    primary_display_keys: Tuple[str, ...] = ()
    secondary_display_keys: Tuple[str, ...] = ()
    snapshot_field_allow_list: Optional[Tuple[str, ...]] = None
    tracked_fields: Tuple[str, ...] = ()
    multiple: bool = True
    search_label: Optional[str] = None
    label: Optional[str] = None
    load_before_open: bool = False

    def __post_init__(self):
        object.__setattr__(self, "filter_template", self.filter_template or "")
        object.__setattr__(self, "primary_display_keys", _as_tuple(self.primary_display_keys))
        object.__setattr__(self, "secondary_display_keys", _as_tuple(self.secondary_display_keys))
        object.__setattr__(self, "tracked_fields", _as_tuple(self.tracked_fields))
        if self.snapshot_field_allow_list is not None:
            object.__setattr__(self, "snapshot_field_allow_list",
                               _as_tuple(self.snapshot_field_allow_list))

    @classmethod
    def from_dict(cls, config: Mapping[str, Any], **overrides) -> "FieldConfig":
        """Build from a host column config (camelCase or snake_case keys)."""
        def pick(*keys, default=None):
            for key in keys:
                if key in config:
                    return config[key]
            return default

        values = dict(
            collection=pick("collection", "index", default=""),
            filter_template=pick("filter_template", "filters", default=""),
            primary_display_keys=pick("primary_display_keys", "primaryKeys", default=()),
            secondary_display_keys=pick("secondary_display_keys", "secondaryKeys", default=()),
            snapshot_field_allow_list=pick("snapshot_field_allow_list", "snapshotFields"),
            tracked_fields=pick("tracked_fields", "trackedFields", default=()),
            multiple=pick("multiple", default=True) is not False,
            search_label=pick("search_label", "searchLabel"),
            label=pick("label", "name"),
            load_before_open=bool(pick("load_before_open", "loadBeforeOpen", default=False)),
        )
        values.update(overrides)
        return cls(**values)
