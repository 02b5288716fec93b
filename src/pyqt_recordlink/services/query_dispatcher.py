"""
Debounced, scoped remote search.

Keystrokes only record the pending text and re-arm a single-slot debounce
timer; the query is issued once the user has been quiet for debounce_ms.
Every issued query gets a sequence number and only the reply to the most
recently issued query is applied, whatever order replies arrive in.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_recordlink.core.background_task import BackgroundTaskPool
from pyqt_recordlink.core.debounce_timer import DebounceTimer
from pyqt_recordlink.protocols import (
    RecordLinkError,
    SearchBackend,
    SearchBackendError,
    SearchHit,
    get_link_config,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchScope:
    """Collection, rendered filter and credential every query is issued with."""
    collection: str
    filters: str = ""
    secret: Optional[str] = None
    app_id: Optional[str] = None


@dataclass(frozen=True)
class SearchState:
    """Latest applied search result."""
    hits: Tuple[SearchHit, ...] = ()
    total_count: Optional[int] = None
    is_loading: bool = False
    query_text: str = ""


class QueryDispatcher(QObject):
    """
    Issues search queries against the current scope.

    Signals:
        results_changed(SearchState): a reply was applied
        loading_changed(bool): the latest query started or finished
        search_failed(Exception): the latest query failed
    """

    results_changed = pyqtSignal(object)
    loading_changed = pyqtSignal(bool)
    search_failed = pyqtSignal(Exception)

    def __init__(self, backend: SearchBackend, runner: Any = None,
                 debounce_ms: Optional[int] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        if debounce_ms is None:
            debounce_ms = get_link_config().debounce_ms
        self._backend = backend
        self._runner = runner if runner is not None else BackgroundTaskPool()
        self._debounce = DebounceTimer(delay_ms=debounce_ms, handler=self._issue_pending)
        self._scope: Optional[SearchScope] = None
        self._pending_text = ""
        self._latest_seq = 0
        self._state = SearchState()

    # ========== SCOPE ==========

    @property
    def scope(self) -> Optional[SearchScope]:
        return self._scope

    def set_scope(self, collection: str, filters: str = "", secret: Optional[str] = None,
                  app_id: Optional[str] = None) -> None:
        """Use this scope for every query issued from now on."""
        self._scope = SearchScope(collection=collection, filters=filters or "",
                                  secret=secret, app_id=app_id)
        logger.debug(f"Search scope set: collection={collection!r} filters={filters!r} "
                     f"has_secret={bool(secret)}")

    # ========== QUERIES ==========

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def pending_text(self) -> str:
        return self._pending_text

    @property
    def is_debouncing(self) -> bool:
        return self._debounce.is_pending

    @property
    def latest_sequence(self) -> int:
        return self._latest_seq

    def set_query_text(self, text: str) -> None:
        """Record typed text; the query goes out after the quiet period."""
        self._pending_text = text or ""
        self._debounce.trigger()

    def search_now(self, text: Optional[str] = None) -> int:
        """Issue a query immediately, bypassing the debounce. Returns its sequence number."""
        if text is not None:
            self._pending_text = text
        return self._issue(self._pending_text)

    def flush(self) -> None:
        """Issue the pending debounced query now, if one is armed."""
        if self._debounce.is_pending:
            self._debounce.force()

    def cancel(self) -> None:
        """Stop the debounce timer and ignore every in-flight reply."""
        self._debounce.cancel()
        self._latest_seq += 1
        self._set_loading(False, self._state.query_text)
        logger.debug("Query dispatcher cancelled")

    def _issue_pending(self) -> None:
        self._issue(self._pending_text)

    def _issue(self, text: str) -> int:
        self._latest_seq += 1
        seq = self._latest_seq
        scope = self._scope

        if scope is None or not scope.collection or not scope.secret:
            logger.debug(f"Query #{seq} not sent: no usable search scope")
            self._apply(SearchState(hits=(), total_count=0, is_loading=False, query_text=text))
            return seq

        logger.debug(f"Query #{seq} -> {scope.collection}: text={text!r} filters={scope.filters!r}")
        self._set_loading(True, text)
        self._runner.run(
            target=self._backend.query,
            args=(scope.collection, scope.filters, scope.secret, text),
            kwargs={"app_id": scope.app_id},
            on_success=lambda response, seq=seq, text=text: self._on_reply(seq, text, response),
            on_error=lambda error, seq=seq: self._on_error(seq, error),
        )
        return seq

    # ========== REPLIES ==========

    def _is_stale(self, seq: int) -> bool:
        if seq != self._latest_seq:
            logger.debug(f"Discarding stale reply #{seq} (latest #{self._latest_seq})")
            return True
        return False

    def _on_reply(self, seq: int, text: str, response) -> None:
        if self._is_stale(seq):
            return
        total = getattr(response, "total_count", None)
        self._apply(SearchState(
            hits=tuple(getattr(response, "hits", None) or ()),
            total_count=total,
            is_loading=bool(getattr(response, "loading", False)),
            query_text=text,
        ))

    def _on_error(self, seq: int, error: Exception) -> None:
        if self._is_stale(seq):
            return
        if not isinstance(error, RecordLinkError):
            error = SearchBackendError(f"Search failed: {error}")
        logger.warning(f"Query #{seq} failed: {error}")
        self._set_loading(False, self._state.query_text)
        self.search_failed.emit(error)

    def _set_loading(self, loading: bool, text: str) -> None:
        was_loading = self._state.is_loading
        self._state = SearchState(hits=self._state.hits, total_count=self._state.total_count,
                                  is_loading=loading, query_text=text)
        if was_loading != loading:
            self.loading_changed.emit(loading)

    def _apply(self, state: SearchState) -> None:
        was_loading = self._state.is_loading
        self._state = state
        self.results_changed.emit(state)
        if was_loading != state.is_loading:
            self.loading_changed.emit(state.is_loading)
