"""Process-wide configuration for record linking.

Provides hooks for applications to tune search and credential behavior.
"""

from typing import Optional, Tuple
from dataclasses import dataclass


@dataclass
class RecordLinkConfig:
    """Process-wide configuration for record link fields.

    Applications can subclass this to provide custom configuration.

    Attributes:
        debounce_ms: Quiet period after the last keystroke before a query is issued
        credential_ttl_seconds: Age after which a cached search secret is refreshed
        settings_file: Location of the persisted settings file
        docs_url: Documentation link shown alongside credential errors
        record_id_key: Hit field holding the record identifier
        ranking_metadata_keys: Backend-internal hit fields never copied into snapshots
    """

    debounce_ms: int = 1000
    credential_ttl_seconds: float = 3600
    settings_file: Optional[str] = None
    docs_url: Optional[str] = None
    record_id_key: str = "objectID"
    ranking_metadata_keys: Tuple[str, ...] = ("_highlightResult", "_snippetResult", "_rankingInfo")


# Global config instance (set by application)
_link_config: Optional[RecordLinkConfig] = None


def set_link_config(config: Optional[RecordLinkConfig]) -> None:
    """Set the global record link configuration.

    Args:
        config: RecordLinkConfig instance, or None to restore defaults
    """
    global _link_config
    _link_config = config


def get_link_config() -> RecordLinkConfig:
    """Get the current record link configuration.

    Returns:
        Current RecordLinkConfig or default if not set
    """
    if _link_config is None:
        return RecordLinkConfig()
    return _link_config
