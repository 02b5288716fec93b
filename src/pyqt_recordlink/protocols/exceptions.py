"""Record link exceptions."""

from typing import Optional


class RecordLinkError(Exception):
    """Base class for record link failures."""


class CredentialUnavailableError(RecordLinkError):
    """Raised when a search credential could not be issued.

    ``collection`` is None when the shared application identifier failed.
    """

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.collection = collection


class SearchBackendError(RecordLinkError):
    """Raised when the search backend cannot answer a query."""


class ServiceError(RecordLinkError):
    """Raised when an HTTP collaborator returns an unusable response."""

    def __init__(self, url: str, status: Optional[int] = None, reason: Optional[str] = None,
                 message: Optional[str] = None, cause: Optional[Exception] = None):
        if not message:
            message = f"{url}: {status} {reason}" if status else f"{url}: request failed"
            if cause:
                message += f" ({cause})"
        super().__init__(message)
        self.url = url
        self.status = status
        self.reason = reason
        self.cause = cause


class SessionStateError(RecordLinkError):
    """Raised when a selection session is used outside its lifetime."""
