"""Collaborator protocols for credential issuance and search."""

from dataclasses import dataclass, field
from typing import Protocol, Optional, List, Dict, Any

SearchHit = Dict[str, Any]


@dataclass(frozen=True)
class AppIdentifierResult:
    """Reply from the credential service for the shared application identifier."""
    success: bool
    app_id: Optional[str] = None
    message: str = ""


@dataclass(frozen=True)
class SearchSecretResult:
    """Reply from the credential service for a collection-scoped search secret."""
    secret: Optional[str] = None


@dataclass
class SearchResponse:
    """One page of hits from the search backend."""
    hits: List[SearchHit] = field(default_factory=list)
    total_count: int = 0
    loading: bool = False


class CredentialIssuer(Protocol):
    """Protocol for the service that issues search credentials."""

    def issue_app_identifier(self) -> AppIdentifierResult:
        """Return the shared search application identifier."""
        ...

    def issue_search_secret(self, collection: str) -> SearchSecretResult:
        """Return a short-lived secret allowing search in collection."""
        ...


class SearchBackend(Protocol):
    """Protocol for the full-text search engine."""

    def query(self, collection: str, filters: str, secret: str, text: str,
              app_id: Optional[str] = None) -> SearchResponse:
        """Run text against collection, restricted by filters."""
        ...


_credential_issuer: Optional[CredentialIssuer] = None
_search_backend: Optional[SearchBackend] = None


def register_credential_issuer(issuer: CredentialIssuer) -> None:
    """Register a global credential issuer."""
    global _credential_issuer
    _credential_issuer = issuer


def get_credential_issuer() -> Optional[CredentialIssuer]:
    """Get the registered credential issuer."""
    return _credential_issuer


def register_search_backend(backend: SearchBackend) -> None:
    """Register a global search backend."""
    global _search_backend
    _search_backend = backend


def get_search_backend() -> Optional[SearchBackend]:
    """Get the registered search backend."""
    return _search_backend
