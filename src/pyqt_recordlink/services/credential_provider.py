"""
Credential acquisition.

Looks in the CredentialCache first and only calls the credential issuer
when nothing reusable is cached. Issuer calls run on a task runner; the
reply is written to the cache inside the task itself, so a credential that
arrives after its session was torn down is still kept for the next one.
"""

import logging
from typing import Any, Callable

from pyqt_recordlink.protocols import (
    CredentialIssuer,
    CredentialUnavailableError,
)
from pyqt_recordlink.services.credential_cache import CredentialCache

logger = logging.getLogger(__name__)

ReadyCallback = Callable[[str], None]
ErrorCallback = Callable[[CredentialUnavailableError], None]


class CredentialProvider:
    """
    Cache-first access to the search application identifier and secrets.

    No retries are attempted: a failed issuance is reported once through
    on_error and nothing is cached.
    """

    def __init__(self, cache: CredentialCache, issuer: CredentialIssuer, runner: Any):
        self.cache = cache
        self.issuer = issuer
        self.runner = runner

    # ========== APPLICATION IDENTIFIER ==========

    def _issue_app_id(self) -> str:
        result = self.issuer.issue_app_identifier()
        if not getattr(result, "success", False) or not getattr(result, "app_id", None):
            message = getattr(result, "message", "") or "Search is not set up"
            raise CredentialUnavailableError(message)
        self.cache.put_app_id(result.app_id)
        logger.info("Issued search application identifier")
        return result.app_id

    def acquire_app_id(self, on_ready: ReadyCallback, on_error: ErrorCallback) -> None:
        cached = self.cache.get_app_id()
        if cached:
            on_ready(cached)
            return

        def fail(error: Exception):
            if not isinstance(error, CredentialUnavailableError):
                error = CredentialUnavailableError(str(error))
            logger.warning(f"Application identifier request failed: {error}")
            on_error(error)

        self.runner.run(target=self._issue_app_id, on_success=on_ready, on_error=fail)

    # ========== SEARCH SECRETS ==========

    def _issue_secret(self, collection: str, requested_at: float) -> str:
        result = self.issuer.issue_search_secret(collection)
        secret = getattr(result, "secret", None)
        if not secret:
            raise CredentialUnavailableError("No search key returned", collection=collection)
        self.cache.put(collection, secret, issued_at=requested_at)
        return secret

    def acquire_secret(self, collection: str, on_ready: ReadyCallback,
                       on_error: ErrorCallback) -> None:
        """
        Deliver a usable secret for collection.

        A cache hit calls on_ready in the same turn without touching the
        issuer. Otherwise the issuer is called in the background and the
        reply is stored with the time the request was made.
        """
        cached = self.cache.get(collection)
        if cached:
            on_ready(cached)
            return

        requested_at = self.cache.now()
        logger.debug(f"Requesting search secret for {collection}")

        def fail(error: Exception):
            if not isinstance(error, CredentialUnavailableError):
                error = CredentialUnavailableError(str(error), collection=collection)
            logger.warning(f"Search secret request for {collection} failed: {error}")
            on_error(error)

        self.runner.run(target=self._issue_secret, args=(collection, requested_at),
                        on_success=on_ready, on_error=fail)
