"""pytest configuration and fixtures for pyqt-recordlink tests."""

import os
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from pyqt_recordlink.core.settings_store import MemorySettingsStore, set_settings_store
from pyqt_recordlink.protocols import (
    AppIdentifierResult,
    SearchResponse,
    SearchSecretResult,
    register_credential_issuer,
    register_notification_provider,
    register_search_backend,
    set_link_config,
)


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


@pytest.fixture(autouse=True)
def isolated_globals():
    """Keep process-wide config, settings and registries from leaking between tests."""
    store = MemorySettingsStore()
    set_link_config(None)
    set_settings_store(store)
    register_notification_provider(None)
    register_credential_issuer(None)
    register_search_backend(None)
    yield store
    set_link_config(None)
    set_settings_store(None)
    register_notification_provider(None)
    register_credential_issuer(None)
    register_search_backend(None)


class FakeSearchBackend:
    """In-memory search: a hit matches when the text occurs in any of its values."""

    def __init__(self, hits=None, error: Optional[Exception] = None):
        self.hits = list(hits or [])
        self.error = error
        self.queries = []

    def query(self, collection, filters, secret, text, app_id=None):
        self.queries.append({"collection": collection, "filters": filters,
                             "secret": secret, "text": text, "app_id": app_id})
        if self.error is not None:
            raise self.error
        needle = (text or "").lower()
        matched = [hit for hit in self.hits
                   if needle in " ".join(str(v) for v in hit.values()).lower()]
        return SearchResponse(hits=matched, total_count=len(matched), loading=False)


class FakeCredentialIssuer:
    """Counts issuer calls; fails on demand."""

    def __init__(self, app_id="APP1", secret="secret-1", app_id_message="",
                 error: Optional[Exception] = None):
        self.app_id = app_id
        self.secret = secret
        self.app_id_message = app_id_message
        self.error = error
        self.app_id_calls = 0
        self.secret_calls: List[str] = []

    def issue_app_identifier(self):
        self.app_id_calls += 1
        if self.error is not None:
            raise self.error
        return AppIdentifierResult(success=bool(self.app_id), app_id=self.app_id,
                                   message=self.app_id_message)

    def issue_search_secret(self, collection):
        self.secret_calls.append(collection)
        if self.error is not None:
            raise self.error
        return SearchSecretResult(secret=self.secret)


class Clock:
    """Settable time source for credential expiry."""

    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def notify(self, message, level="error", link_url=None, link_text=None):
        self.messages.append({"message": message, "level": level,
                              "link_url": link_url, "link_text": link_text})


@dataclass
class PendingCall:
    target: Callable
    args: tuple
    kwargs: dict
    on_success: Optional[Callable[[Any], None]]
    on_error: Optional[Callable[[Exception], None]]
    done: bool = False


@dataclass
class ManualRunner:
    """Task runner whose replies are delivered only when the test says so."""
    calls: List[PendingCall] = field(default_factory=list)
    cleaned: bool = False

    def run(self, target, args=(), kwargs=None, on_success=None, on_error=None):
        self.calls.append(PendingCall(target, tuple(args), dict(kwargs or {}), on_success, on_error))

    def complete(self, index: int = -1):
        call = self.calls[index]
        call.done = True
        try:
            result = call.target(*call.args, **call.kwargs)
        except Exception as e:
            if call.on_error:
                call.on_error(e)
            return
        if call.on_success:
            call.on_success(result)

    def complete_all(self):
        while any(not call.done for call in self.calls):
            self.complete(next(i for i, call in enumerate(self.calls) if not call.done))

    def cleanup(self):
        self.cleaned = True


PEOPLE = [
    {"objectID": "1", "name": "Alice", "age": 31, "_highlightResult": {"name": {"value": "<em>Alice</em>"}}},
    {"objectID": "5", "name": "Bob", "age": 30, "_highlightResult": {"name": {"value": "Bob"}}},
    {"objectID": "7", "name": "Carol", "age": 45},
]


@pytest.fixture
def people():
    return [dict(hit) for hit in PEOPLE]


@pytest.fixture
def backend(people):
    return FakeSearchBackend(people)


@pytest.fixture
def issuer():
    return FakeCredentialIssuer()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def manual_runner():
    return ManualRunner()
