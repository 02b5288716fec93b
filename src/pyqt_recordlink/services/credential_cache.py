"""
Search credential cache.

Holds the shared search application identifier and one short-lived search
secret per collection. Entries live in a SettingsStore so they survive
across editing sessions and application restarts; a secret is only reused
while it is younger than the configured TTL.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from pyqt_recordlink.core.settings_store import SettingsStore, get_settings_store
from pyqt_recordlink.protocols import get_link_config

logger = logging.getLogger(__name__)

APP_ID_KEY = "_recordlink_search-app-id"
SEARCH_KEYS_KEY = "_recordlink_search-keys"


@dataclass(frozen=True)
class CredentialCacheEntry:
    """A search secret and the epoch time it was requested."""
    secret: str
    issued_at: float

    def age(self, now: float) -> float:
        return now - self.issued_at


class CredentialCache:
    """
    TTL-bounded search secret cache keyed by collection name.

    Examples:
        cache = CredentialCache(MemorySettingsStore())
        cache.put("people", "s3cr3t")
        cache.get("people")        # "s3cr3t" for the next hour, then None
    """

    def __init__(self, store: Optional[SettingsStore] = None,
                 ttl_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.time):
        self._store = store if store is not None else get_settings_store()
        self._ttl = ttl_seconds if ttl_seconds is not None else get_link_config().credential_ttl_seconds
        self._clock = clock
        self._lock = threading.RLock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def now(self) -> float:
        return self._clock()

    # ========== SEARCH SECRETS ==========

    def _entries(self) -> Dict[str, dict]:
        entries = self._store.get(SEARCH_KEYS_KEY) or {}
        return entries if isinstance(entries, dict) else {}

    def entry(self, collection: str) -> Optional[CredentialCacheEntry]:
        """Return the raw entry for collection regardless of age."""
        with self._lock:
            raw = self._entries().get(collection)
        if not isinstance(raw, dict) or not raw.get("secret"):
            return None
        try:
            return CredentialCacheEntry(secret=raw["secret"], issued_at=float(raw.get("requestedAt", 0)))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed credential entry for {collection}: {raw!r}")
            return None

    def get(self, collection: str) -> Optional[str]:
        """Return a reusable secret for collection, or None when missing or expired."""
        entry = self.entry(collection)
        if entry is None:
            logger.debug(f"Credential cache miss for {collection}")
            return None
        if entry.age(self.now()) >= self._ttl:
            logger.debug(f"Credential for {collection} expired ({entry.age(self.now()):.0f}s old)")
            return None
        logger.debug(f"Credential cache hit for {collection}")
        return entry.secret

    def put(self, collection: str, secret: str, issued_at: Optional[float] = None) -> None:
        """Store secret for collection, replacing any previous entry."""
        if not secret:
            raise ValueError(f"Refusing to cache an empty secret for {collection}")
        if issued_at is None:
            issued_at = self.now()
        with self._lock:
            entries = dict(self._entries())
            entries[collection] = {"secret": secret, "requestedAt": issued_at}
            self._store.set(SEARCH_KEYS_KEY, entries)
        logger.info(f"Cached search credential for {collection}")

    def invalidate(self, collection: str) -> None:
        """Forget the secret for collection."""
        with self._lock:
            entries = dict(self._entries())
            if entries.pop(collection, None) is not None:
                self._store.set(SEARCH_KEYS_KEY, entries)
                logger.debug(f"Invalidated credential for {collection}")

    def clear(self) -> None:
        """Forget every secret and the application identifier."""
        with self._lock:
            self._store.remove(SEARCH_KEYS_KEY)
            self._store.remove(APP_ID_KEY)
        logger.info("Cleared search credential cache")

    # ========== APPLICATION IDENTIFIER ==========

    def get_app_id(self) -> Optional[str]:
        return self._store.get(APP_ID_KEY) or None

    def put_app_id(self, app_id: str) -> None:
        self._store.set(APP_ID_KEY, app_id)
