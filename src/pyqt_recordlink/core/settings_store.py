"""
Persisted Settings Store

Small key-value store that survives application restarts. Holds the shared
search application identifier and the per-collection search secrets.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class SettingsStore(ABC):
    """Process-wide key-value store for JSON-compatible values."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""


class MemorySettingsStore(SettingsStore):
    """Settings kept for the lifetime of the process only."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class JsonSettingsStore(MemorySettingsStore):
    """
    Settings persisted to a JSON file.

    The file is read once on construction and rewritten on every change.
    Unreadable or corrupt files are treated as empty.
    """

    def __init__(self, settings_file: Optional[Path] = None):
        """
        Initialize settings store.

        Args:
            settings_file: Optional custom settings file location
        """
        super().__init__()
        if settings_file is None:
            from pyqt_recordlink.protocols import get_link_config

            config = get_link_config()
            if config.settings_file:
                settings_file = Path(config.settings_file)
            else:
                settings_file = Path.home() / ".cache" / "pyqt_recordlink" / "settings.json"

        self.settings_file = Path(settings_file)
        self._load()
        logger.debug(f"JsonSettingsStore initialized with settings file: {self.settings_file}")

    def _load(self) -> None:
        """Load settings from disk."""
        try:
            if self.settings_file.exists():
                with open(self.settings_file, 'r') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError(f"expected a JSON object, got {type(data).__name__}")
                self._data = data
                logger.debug(f"Loaded settings with {len(self._data)} entries")
            else:
                logger.debug("No existing settings file found, starting fresh")
        except (ValueError, OSError) as e:
            logger.warning(f"Failed to load settings from {self.settings_file}: {e}")
            self._data = {}

    def _save(self) -> None:
        """Save settings to disk."""
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_file, 'w') as f:
                json.dump(self._data, f, indent=2)
            logger.debug(f"Saved settings with {len(self._data)} entries")
        except (TypeError, OSError) as e:
            logger.warning(f"Failed to save settings to {self.settings_file}: {e}")

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            super().set(key, value)
            self._save()

    def remove(self, key: str) -> None:
        with self._lock:
            if key in self._data:
                super().remove(key)
                self._save()

    def clear(self) -> None:
        with self._lock:
            super().clear()
            self._save()
        logger.info("Cleared all persisted settings")


# Global store instance
_global_settings_store: Optional[SettingsStore] = None


def get_settings_store() -> SettingsStore:
    """Get global settings store instance."""
    global _global_settings_store
    if _global_settings_store is None:
        _global_settings_store = JsonSettingsStore()
    return _global_settings_store


def set_settings_store(store: Optional[SettingsStore]) -> None:
    """Replace the global settings store (None resets to the default on next use)."""
    global _global_settings_store
    _global_settings_store = store
