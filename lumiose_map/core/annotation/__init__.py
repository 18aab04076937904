"""
Core annotation module - UI-agnostic map editing logic.

This module provides the base abstractions for interactive map editing
that can be used with any presentation layer (GUI, Web, CLI, etc).

The session itself lives in :mod:`.session`; it pulls in the persistence
layer, which in turn builds on the types exported here.
"""

from .events import MapEvent, EventType, EventEmitter
from .modes import Mode, ModeController, ModeState
from .state import Marker, MarkerSource, MarkerType, Point, Zone
from .store import AnnotationStore, ExportScope, RemovalResult
from .stickers import StickerCatalog

__all__ = [
    "MapEvent",
    "EventType",
    "EventEmitter",
    "Mode",
    "ModeController",
    "ModeState",
    "Marker",
    "MarkerSource",
    "MarkerType",
    "Point",
    "Zone",
    "AnnotationStore",
    "ExportScope",
    "RemovalResult",
    "StickerCatalog",
]
