"""
Persistence module - durable record, debounced saves and startup sources.
"""

from .manager import PersistenceManager, PersistedState, ResetScope
from .scheduler import DebouncedTask
from .sources import Baseline, load_baseline, load_sticker_catalog
from .storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "PersistenceManager",
    "PersistedState",
    "ResetScope",
    "DebouncedTask",
    "Baseline",
    "load_baseline",
    "load_sticker_catalog",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
]
