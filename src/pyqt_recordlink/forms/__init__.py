"""
Record link fields.

Value types and the controller that drives one field's editing session:
credential acquisition, scoped search, reconciliation and commit.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .selection_types import SelectedItem, SelectionValue, FieldConfig
    from .record_link_controller import RecordLinkController, SessionState

_EXPORTS = {
    "SelectedItem": ("pyqt_recordlink.forms.selection_types", "SelectedItem"),
    "SelectionValue": ("pyqt_recordlink.forms.selection_types", "SelectionValue"),
    "FieldConfig": ("pyqt_recordlink.forms.selection_types", "FieldConfig"),
    "RecordLinkController": ("pyqt_recordlink.forms.record_link_controller", "RecordLinkController"),
    "SessionState": ("pyqt_recordlink.forms.record_link_controller", "SessionState"),
}


def __getattr__(name: str):
    if name in _EXPORTS:
        module_name, attr = _EXPORTS[name]
        module = importlib.import_module(module_name)
        value = getattr(module, attr)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = list(_EXPORTS.keys())
