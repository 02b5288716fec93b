"""
pyqt-recordlink: search-backed record linking fields for PyQt6.

Lets a user pick records from a remote full-text search collection and
stores each pick in the host document as a durable reference plus a
partial snapshot of the record.

Architecture:
- Core: timers, background workers, persisted settings, filter templates
- Protocols: collaborator contracts (credential issuer, search backend,
  notifications) and process-wide configuration
- Services: credential cache, debounced query dispatch, selection
  reconciliation, buffered session state
- Forms: value types and the per-field session controller
- Widgets / Clients: PyQt6 picker and HTTP collaborator implementations

Key Features:
- TTL-bounded, persisted search credentials shared across sessions
- Row-scoped filters rendered from ``{{path:default}}`` templates
- Debounced queries where only the latest issued reply is applied
- Selections that survive records dropping out of the current results
- One atomic host update per multi-select session
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
