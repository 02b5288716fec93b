"""
Core utilities.

Timers, background workers, persisted settings and filter templates.
No record-selection logic lives here.
"""

from .debounce_timer import DebounceTimer
from .background_task import BackgroundTask, BackgroundTaskPool, InlineTaskRunner
from .filter_template import render_filter, lookup_path
from .settings_store import (
    SettingsStore,
    MemorySettingsStore,
    JsonSettingsStore,
    get_settings_store,
    set_settings_store,
)

__all__ = [
    "DebounceTimer",
    "BackgroundTask",
    "BackgroundTaskPool",
    "InlineTaskRunner",
    "render_filter",
    "lookup_path",
    "SettingsStore",
    "MemorySettingsStore",
    "JsonSettingsStore",
    "get_settings_store",
    "set_settings_store",
]
