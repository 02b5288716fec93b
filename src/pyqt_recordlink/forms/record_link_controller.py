"""
Record link field controller.

Drives one field's editing session:

    Idle -> CredentialPending -> Ready -> Searching <-> Selecting -> Committing -> Idle

The presentation widget calls on_open(), on_input_change(), on_pick() and
on_close(); everything else (credentials, scoped search, reconciliation,
buffering) happens here. Multi-select edits are buffered and handed to the
host once on close. Single-select edits reach the host in the same turn as
the pick, because the widget tears the session down while closing.
"""

from __future__ import annotations

import copy
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_recordlink.core.background_task import BackgroundTaskPool
from pyqt_recordlink.core.filter_template import render_filter
from pyqt_recordlink.forms.selection_types import FieldConfig, SelectionValue
from pyqt_recordlink.protocols import (
    CredentialIssuer,
    CredentialUnavailableError,
    NotificationProvider,
    SearchBackend,
    SearchHit,
    SessionStateError,
    get_credential_issuer,
    get_link_config,
    get_notification_provider,
    get_search_backend,
)
from pyqt_recordlink.services.buffered_selection import BufferedSelection, normalize_value
from pyqt_recordlink.services.credential_cache import CredentialCache
from pyqt_recordlink.services.credential_provider import CredentialProvider
from pyqt_recordlink.services.query_dispatcher import QueryDispatcher, SearchState
from pyqt_recordlink.services.selection_reconciler import ChosenIdentifiers, SelectionReconciler

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    CREDENTIAL_PENDING = "credential_pending"
    READY = "ready"
    SEARCHING = "searching"
    SELECTING = "selecting"
    COMMITTING = "committing"


class RecordLinkController(QObject):
    """
    Controller for a field whose value links records from a search collection.

    Usage:
        controller = RecordLinkController(
            FieldConfig.from_dict(column_config),
            row_data=row,
            value=row.get("supplier"),
            on_change=lambda value: save(row_id, "supplier", to_host_value(value)),
            backend=AlgoliaSearchBackend(),
            issuer=RunServiceCredentialIssuer(run_url),
        )
        controller.prepare()

        # Wired to the widget:
        controller.on_open()
        controller.on_input_change("acme")
        controller.on_pick(["42", "17"])
        controller.on_close()

        # Before discarding:
        controller.teardown()

    Signals:
        state_changed(SessionState)
        options_changed(list): [{"label": ..., "value": ...}] for the widget
        loading_changed(bool)
        selection_changed(object): buffered SelectionValue after each pick
        value_committed(object): SelectionValue handed to the host
        error_occurred(Exception): failure already shown to the user
    """

    state_changed = pyqtSignal(object)
    options_changed = pyqtSignal(list)
    loading_changed = pyqtSignal(bool)
    selection_changed = pyqtSignal(object)
    value_committed = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)

    def __init__(
        self,
        field_config: FieldConfig,
        row_data: Optional[Mapping[str, Any]] = None,
        value: Any = None,
        on_change: Optional[Callable[[SelectionValue], None]] = None,
        backend: Optional[SearchBackend] = None,
        issuer: Optional[CredentialIssuer] = None,
        cache: Optional[CredentialCache] = None,
        runner: Any = None,
        notifier: Optional[NotificationProvider] = None,
        debounce_ms: Optional[int] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        backend = backend if backend is not None else get_search_backend()
        issuer = issuer if issuer is not None else get_credential_issuer()
        if backend is None or issuer is None:
            raise ValueError("RecordLinkController needs a search backend and a credential issuer "
                             "(pass them in or register them globally)")

        self.config = field_config
        self.multiple = field_config.multiple
        self.row_data = copy.deepcopy(dict(row_data or {}))
        self.filters = render_filter(field_config.filter_template, self.row_data)

        self._value: SelectionValue = normalize_value(value, self.multiple)
        self._on_change = on_change
        self._notifier = notifier

        self._runner = runner if runner is not None else BackgroundTaskPool()
        self._credentials = CredentialProvider(cache if cache is not None else CredentialCache(),
                                               issuer, self._runner)
        self._dispatcher = QueryDispatcher(backend, runner=self._runner,
                                           debounce_ms=debounce_ms, parent=self)
        self._reconciler = SelectionReconciler(field_config.collection,
                                               field_config.snapshot_field_allow_list,
                                               multiple=self.multiple)
        self._buffer = BufferedSelection(multiple=self.multiple)

        self._state = SessionState.IDLE
        self._app_id: Optional[str] = None
        self._secret: Optional[str] = None
        self._credential_in_flight = False
        self._degraded = False
        self._query_when_ready = False
        self._session_open = False
        self._torn_down = False
        self._input_text = ""

        self._dispatcher.results_changed.connect(self._on_results)
        self._dispatcher.loading_changed.connect(self.loading_changed)
        self._dispatcher.search_failed.connect(self._on_search_failed)

        logger.debug(f"RecordLinkController created for {field_config.collection!r} "
                     f"(multiple={self.multiple}, filters={self.filters!r})")

    # ========== PROPERTIES ==========

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._session_open

    @property
    def is_degraded(self) -> bool:
        """True when no usable credential could be obtained."""
        return self._degraded

    @property
    def is_loading(self) -> bool:
        return self._dispatcher.state.is_loading

    @property
    def dispatcher(self) -> QueryDispatcher:
        return self._dispatcher

    @property
    def search_state(self) -> SearchState:
        return self._dispatcher.state

    @property
    def hits(self) -> List[SearchHit]:
        return list(self._dispatcher.state.hits)

    @property
    def record_id_key(self) -> str:
        return self._reconciler.record_id_key

    @property
    def input_text(self) -> str:
        return self._input_text

    @property
    def value(self) -> SelectionValue:
        """The value the host currently holds."""
        return self._value

    def current_selection(self) -> SelectionValue:
        """Buffered selection while a session is open, otherwise the host value."""
        if self._buffer.is_active:
            return self._buffer.current()
        return self._value

    # ========== LIFECYCLE ==========

    def prepare(self) -> None:
        """
        Acquire credentials ahead of the first open.

        With load_before_open the default query is issued as soon as a
        credential is available.
        """
        self._check_alive()
        if self.config.load_before_open:
            self._query_when_ready = True
        self._ensure_credentials()

    def on_open(self) -> None:
        """The picker opened: start a session and load default suggestions."""
        self._check_alive()
        if self._session_open:
            return

        self._buffer.seed(self._value)
        self._session_open = True
        self._input_text = ""
        self._query_when_ready = True
        logger.debug(f"Session opened for {self.config.collection!r}")

        # Every session asks the cache again; a fresh entry answers in this turn,
        # an expired one is re-issued.
        self._secret = None
        self._set_state(SessionState.CREDENTIAL_PENDING)
        self._ensure_credentials()

    def on_input_change(self, text: str, reason: str = "input") -> None:
        """The user typed; only real input (not programmatic resets) triggers a search."""
        if reason != "input":
            return
        self._check_alive()
        self._input_text = text or ""
        if not self._session_open:
            logger.debug("Input received while the picker is closed; no query armed")
            return
        self._dispatcher.set_query_text(self._input_text)
        if self._state in (SessionState.READY, SessionState.SEARCHING):
            self._set_state(SessionState.SEARCHING)

    def on_pick(self, identifiers: ChosenIdentifiers) -> SelectionValue:
        """The user changed the chosen identifiers."""
        self._check_alive()
        if not self._buffer.is_active:
            logger.debug("Pick received outside an open session; seeding from host value")
            self._buffer.seed(self._value)

        resume_state = self._state
        self._set_state(SessionState.SELECTING)
        reconciled = self._reconciler.reconcile(identifiers, self._dispatcher.state.hits,
                                                self._buffer.current())
        self._buffer.apply(reconciled)
        self.selection_changed.emit(reconciled)

        if not self.multiple:
            # Must reach the host now: the widget closes the session right after.
            self._commit_to_host(reconciled)

        if self._dispatcher.is_debouncing:
            self._set_state(SessionState.SEARCHING)
        elif resume_state == SessionState.CREDENTIAL_PENDING:
            self._set_state(SessionState.CREDENTIAL_PENDING)
        elif self._session_open:
            self._set_state(SessionState.READY)
        else:
            self._set_state(SessionState.IDLE)
        return reconciled

    def on_close(self) -> SelectionValue:
        """The picker closed: commit the buffered value and end the session."""
        self._check_alive()
        if not self._session_open and not self._buffer.is_active:
            return self._value

        self._set_state(SessionState.COMMITTING)
        self._dispatcher.cancel()
        value = self._buffer.commit()
        if self.multiple:
            self._commit_to_host(value)

        self._session_open = False
        self._query_when_ready = False
        self._input_text = ""
        self._set_state(SessionState.IDLE)
        logger.debug(f"Session closed for {self.config.collection!r}")
        return value

    def teardown(self) -> None:
        """Release session resources without committing. The controller is unusable afterwards."""
        if self._torn_down:
            return
        self._torn_down = True
        self._buffer.discard()
        self._dispatcher.cancel()
        self._runner.cleanup()
        self._session_open = False
        self._state = SessionState.IDLE
        logger.debug(f"RecordLinkController for {self.config.collection!r} torn down")

    # ========== PRESENTATION HELPERS ==========

    def _join_keys(self, record: Mapping[str, Any], keys) -> str:
        parts = []
        for key in keys:
            val = record.get(key)
            parts.append("" if val is None else str(val))
        return " ".join(parts)

    def options(self) -> List[Dict[str, str]]:
        """Widget options built from the current hits."""
        id_key = self._reconciler.record_id_key
        return [
            {"label": self._join_keys(hit, self.config.primary_display_keys),
             "value": str(hit.get(id_key))}
            for hit in self._dispatcher.state.hits
        ]

    def secondary_text(self, hit: Mapping[str, Any]) -> str:
        return self._join_keys(hit, self.config.secondary_display_keys)

    def selected_identifiers(self) -> Union[List[str], Optional[str]]:
        """Identifiers the widget should render as chosen."""
        return self._reconciler.identifiers_of(self.current_selection())

    def display_text(self) -> str:
        """Summary of the selection for the closed picker."""
        value = self.current_selection()
        if isinstance(value, list):
            if len(value) != 1:
                return f"{len(value)} selected"
            return self._join_keys(value[0].snapshot, self.config.primary_display_keys)
        if value is None:
            return "0 selected"
        return self._join_keys(value.snapshot, self.config.primary_display_keys)

    def count_text(self) -> Optional[str]:
        """'<selected> of <total>' for multi-select pickers."""
        value = self.current_selection()
        if not isinstance(value, list):
            return None
        total = self._dispatcher.state.total_count
        return f"{len(value)} of {total if total is not None else '?'}"

    # ========== CREDENTIALS ==========

    def _ensure_credentials(self) -> None:
        if self._secret is not None or self._credential_in_flight:
            return
        self._credential_in_flight = True
        self._credentials.acquire_app_id(self._on_app_id, self._on_credential_error)

    def _on_app_id(self, app_id: str) -> None:
        if self._torn_down:
            return
        self._app_id = app_id
        self._credentials.acquire_secret(self.config.collection, self._on_secret,
                                         self._on_credential_error)

    def _on_secret(self, secret: str) -> None:
        self._credential_in_flight = False
        if self._torn_down:
            logger.debug("Credential arrived after teardown; kept in cache only")
            return
        self._secret = secret
        self._degraded = False
        self._dispatcher.set_scope(self.config.collection, self.filters, secret, self._app_id)
        if self._session_open:
            self._become_ready()
        elif self._query_when_ready:
            self._query_when_ready = False
            self._dispatcher.search_now("")

    def _on_credential_error(self, error: CredentialUnavailableError) -> None:
        self._credential_in_flight = False
        if self._torn_down:
            return
        self._degraded = True
        self._dispatcher.set_scope(self.config.collection, self.filters, None, self._app_id)

        message = error.message.replace("not setup", "not set up")
        if error.collection is None:
            message = f"{message}: Failed to get app ID"
        else:
            message = f"{message}: Failed to get search key for {error.collection}"
        logger.error(message)
        self._notify(message, link_url=get_link_config().docs_url)
        self.error_occurred.emit(error)

        if self._session_open:
            self._become_ready()

    def _become_ready(self) -> None:
        self._set_state(SessionState.READY)
        self._dispatcher.set_scope(self.config.collection, self.filters, self._secret, self._app_id)
        if self._query_when_ready:
            self._query_when_ready = False
            self._dispatcher.search_now(self._input_text)

    # ========== SEARCH ==========

    def _on_results(self, state: SearchState) -> None:
        self.options_changed.emit(self.options())
        if (self._session_open and self._state == SessionState.SEARCHING
                and not self._dispatcher.is_debouncing):
            self._set_state(SessionState.READY)

    def _on_search_failed(self, error: Exception) -> None:
        self._notify(str(error))
        self.error_occurred.emit(error)
        if self._session_open and self._state == SessionState.SEARCHING:
            self._set_state(SessionState.READY)

    # ========== HOST ==========

    def _commit_to_host(self, value: SelectionValue) -> None:
        self._value = value
        if self._on_change is not None:
            self._on_change(value)
        self.value_committed.emit(value)

    def _notify(self, message: str, link_url: Optional[str] = None) -> None:
        notifier = self._notifier if self._notifier is not None else get_notification_provider()
        notifier.notify(message, level="error", link_url=link_url,
                        link_text="Docs" if link_url else None)

    def _set_state(self, state: SessionState) -> None:
        if state != self._state:
            logger.debug(f"{self.config.collection!r}: {self._state.value} -> {state.value}")
            self._state = state
            self.state_changed.emit(state)

    def _check_alive(self) -> None:
        if self._torn_down:
            raise SessionStateError("RecordLinkController has been torn down")
