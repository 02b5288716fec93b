"""HTTP implementations of the credential issuer and search backend protocols."""

from .run_service import RunServiceCredentialIssuer
from .algolia import AlgoliaSearchBackend

__all__ = [
    "RunServiceCredentialIssuer",
    "AlgoliaSearchBackend",
]
