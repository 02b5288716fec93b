"""
Widgets.

PyQt6 presentation for record link fields. Rendering only; behavior lives
in the controller.
"""

from .record_picker import RecordPickerWidget

__all__ = [
    "RecordPickerWidget",
]
