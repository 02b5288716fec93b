"""
Service layer for record link fields.

Credential caching and acquisition, debounced remote search, selection
reconciliation and buffered session state.
"""

from .credential_cache import CredentialCache, CredentialCacheEntry
from .credential_provider import CredentialProvider
from .query_dispatcher import QueryDispatcher, SearchScope, SearchState
from .selection_reconciler import SelectionReconciler
from .buffered_selection import BufferedSelection, normalize_value

__all__ = [
    "CredentialCache",
    "CredentialCacheEntry",
    "CredentialProvider",
    "QueryDispatcher",
    "SearchScope",
    "SearchState",
    "SelectionReconciler",
    "BufferedSelection",
    "normalize_value",
]
