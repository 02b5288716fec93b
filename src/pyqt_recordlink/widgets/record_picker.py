"""Record picker widget: a searchable, checkable list bound to a RecordLinkController."""

import logging
from typing import Dict, List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLineEdit, QListWidget, QListWidgetItem,
    QPushButton, QLabel,
)

from pyqt_recordlink.forms.record_link_controller import RecordLinkController

logger = logging.getLogger(__name__)

# --- Module-level constants ---
VALUE_ROLE = Qt.ItemDataRole.UserRole
LOADING_TEXT = "Loading..."


class RecordPickerWidget(QWidget):
    """
    Collapsed summary button that expands into a search box and result list.

    All behavior lives in the controller; this widget only forwards the
    user's actions (open, type, check/uncheck, close) and re-renders from the
    controller's signals.

    Usage:
        picker = RecordPickerWidget(controller, parent=self)
        layout.addWidget(picker)
    """

    opened = pyqtSignal()
    closed = pyqtSignal()

    def __init__(self, controller: RecordLinkController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._setup_ui()

        controller.options_changed.connect(self._render_options)
        controller.loading_changed.connect(self._render_loading)
        controller.selection_changed.connect(lambda _value: self._render_summary())
        controller.value_committed.connect(lambda _value: self._render_summary())

        self._render_summary()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(2)

        self._summary_btn = QPushButton()
        self._summary_btn.setToolTip(self.controller.config.label or self.controller.config.collection)
        self._summary_btn.clicked.connect(self.open_picker)
        layout.addWidget(self._summary_btn)

        self._panel = QWidget()
        panel_layout = QVBoxLayout(self._panel)
        panel_layout.setContentsMargins(0, 0, 0, 0)

        self._search = QLineEdit()
        noun = self.controller.config.search_label or self.controller.config.collection
        self._search.setPlaceholderText(f"Search {noun}")
        self._search.textEdited.connect(self._on_text_edited)
        panel_layout.addWidget(self._search)

        self._list = QListWidget()
        self._list.itemChanged.connect(self._on_item_changed)
        self._list.itemClicked.connect(self._on_item_clicked)
        panel_layout.addWidget(self._list)

        footer = QHBoxLayout()
        self._status = QLabel("")
        footer.addWidget(self._status)
        footer.addStretch()
        self._done_btn = QPushButton("Done")
        self._done_btn.clicked.connect(self.close_picker)
        footer.addWidget(self._done_btn)
        panel_layout.addLayout(footer)

        layout.addWidget(self._panel)
        self._panel.setVisible(False)

    # ========== OPEN / CLOSE ==========

    @property
    def is_open(self) -> bool:
        return self._panel.isVisible() or self.controller.is_open

    def open_picker(self):
        if self.controller.is_open:
            return
        self._search.blockSignals(True)
        self._search.clear()
        self._search.blockSignals(False)
        self._panel.setVisible(True)
        self.controller.on_open()
        self._render_options(self.controller.options())
        self._search.setFocus()
        self.opened.emit()

    def close_picker(self):
        self._panel.setVisible(False)
        if self.controller.is_open:
            self.controller.on_close()
        self._render_summary()
        self.closed.emit()

    # ========== USER INPUT ==========

    def _on_text_edited(self, text: str):
        self.controller.on_input_change(text, reason="input")

    def _checked_identifiers(self) -> List[str]:
        # Previously chosen records no longer in the hits stay chosen.
        visible = {self._list.item(i).data(VALUE_ROLE) for i in range(self._list.count())}
        kept = [record_id for record_id in self.controller.selected_identifiers()
                if record_id not in visible]
        checked = [self._list.item(i).data(VALUE_ROLE) for i in range(self._list.count())
                   if self._list.item(i).checkState() == Qt.CheckState.Checked]
        return kept + checked

    def _on_item_changed(self, item: QListWidgetItem):
        if self.controller.multiple:
            self.controller.on_pick(self._checked_identifiers())

    def _on_item_clicked(self, item: QListWidgetItem):
        if not self.controller.multiple:
            self.controller.on_pick(item.data(VALUE_ROLE))
            self.close_picker()

    # ========== RENDERING ==========

    def _render_options(self, options: List[Dict[str, str]]):
        selected = self.controller.selected_identifiers()
        chosen = set(selected if isinstance(selected, list) else [selected] if selected else [])
        hits = {str(hit.get(self.controller.record_id_key)): hit
                for hit in self.controller.hits}

        self._list.blockSignals(True)
        try:
            self._list.clear()
            for option in options:
                item = QListWidgetItem(option["label"] or option["value"])
                item.setData(VALUE_ROLE, option["value"])
                hit = hits.get(option["value"])
                secondary = self.controller.secondary_text(hit) if hit else ""
                if secondary.strip():
                    item.setToolTip(secondary)
                if self.controller.multiple:
                    item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
                    item.setCheckState(Qt.CheckState.Checked if option["value"] in chosen
                                       else Qt.CheckState.Unchecked)
                self._list.addItem(item)
                if not self.controller.multiple and option["value"] in chosen:
                    item.setSelected(True)
        finally:
            self._list.blockSignals(False)
        self._render_status()

    def _render_loading(self, loading: bool):
        self._render_status()

    def _render_status(self):
        if self.controller.is_loading:
            self._status.setText(LOADING_TEXT)
        else:
            self._status.setText(self.controller.count_text() or "")

    def _render_summary(self):
        self._summary_btn.setText(self.controller.display_text())
        self._render_status()

    def summary_text(self) -> str:
        return self._summary_btn.text()

    def status_text(self) -> Optional[str]:
        return self._status.text()
