"""
Buffered selection state.

Holds the in-progress selection of one editing session so the picker can
stay open while the user toggles records. The host only sees the result
on commit().
"""

import logging
from typing import Any, Optional

from pyqt_recordlink.forms.selection_types import SelectedItem, SelectionValue
from pyqt_recordlink.protocols import SessionStateError

logger = logging.getLogger(__name__)


def normalize_value(value: Any, multiple: bool) -> SelectionValue:
    """
    Coerce a host value into the shape required by the selection mode.

    Multi-select always yields a list; single-select yields the first item
    of a list, the item itself, or None.
    """
    if isinstance(value, (list, tuple)):
        items = [item for item in (SelectedItem.from_value(v) for v in value) if item is not None]
    else:
        item = SelectedItem.from_value(value)
        items = [item] if item is not None else []

    if multiple:
        return items
    return items[0] if items else None


class BufferedSelection:
    """Working copy of a SelectionValue between seed() and commit()."""

    def __init__(self, multiple: bool = True):
        self.multiple = multiple
        self._value: SelectionValue = None
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def seed(self, initial: Any) -> SelectionValue:
        """Start a session from the host's current value."""
        self._value = normalize_value(initial, self.multiple)
        self._active = True
        return self._value

    def apply(self, value: SelectionValue) -> None:
        """Replace the working copy with a freshly reconciled value."""
        self._require_active("apply")
        if self.multiple:
            self._value = list(value or [])
        else:
            self._value = value

    def current(self) -> SelectionValue:
        self._require_active("read")
        if self.multiple:
            return list(self._value)
        return self._value

    def commit(self) -> SelectionValue:
        """End the session and return the value to hand to the host."""
        self._require_active("commit")
        value = self.current()
        self._active = False
        logger.debug(f"Committed buffered selection: {self._describe(value)}")
        return value

    def discard(self) -> None:
        """End the session without committing anything."""
        if self._active:
            logger.debug("Discarded buffered selection")
        self._active = False
        self._value = [] if self.multiple else None

    def _require_active(self, operation: str) -> None:
        if not self._active:
            raise SessionStateError(f"Cannot {operation} a selection outside an editing session")

    @staticmethod
    def _describe(value: Optional[Any]) -> str:
        if isinstance(value, list):
            return f"{len(value)} item(s)"
        return value.reference if value is not None else "None"
