"""
Collaborator protocols and configuration.

Explicit contracts for the services a record link field talks to: the
credential issuer, the search backend and the notification surface.
"""

from .link_config import RecordLinkConfig, set_link_config, get_link_config
from .exceptions import (
    RecordLinkError,
    CredentialUnavailableError,
    SearchBackendError,
    ServiceError,
    SessionStateError,
)
from .backends import (
    SearchHit,
    AppIdentifierResult,
    SearchSecretResult,
    SearchResponse,
    CredentialIssuer,
    SearchBackend,
    register_credential_issuer,
    get_credential_issuer,
    register_search_backend,
    get_search_backend,
)
from .notifications import (
    NotificationProvider,
    LoggingNotificationProvider,
    register_notification_provider,
    get_notification_provider,
)

__all__ = [
    "RecordLinkConfig",
    "set_link_config",
    "get_link_config",
    "RecordLinkError",
    "CredentialUnavailableError",
    "SearchBackendError",
    "ServiceError",
    "SessionStateError",
    "SearchHit",
    "AppIdentifierResult",
    "SearchSecretResult",
    "SearchResponse",
    "CredentialIssuer",
    "SearchBackend",
    "register_credential_issuer",
    "get_credential_issuer",
    "register_search_backend",
    "get_search_backend",
    "NotificationProvider",
    "LoggingNotificationProvider",
    "register_notification_provider",
    "get_notification_provider",
]
