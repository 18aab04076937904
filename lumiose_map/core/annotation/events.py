"""
Event system for the map editor.

Provides a decoupled way for the annotation core to notify the presentation
layer about state changes without depending on a specific rendering
substrate.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur while editing the map."""

    # Marker events
    MARKER_ADDED = "marker_added"
    MARKER_UPDATED = "marker_updated"
    MARKER_REMOVED = "marker_removed"
    MARKER_SELECTED = "marker_selected"
    MARKERS_RELOADED = "markers_reloaded"

    # Zone events
    ZONE_ADDED = "zone_added"
    ZONE_UPDATED = "zone_updated"
    ZONE_REMOVED = "zone_removed"
    ZONE_PREVIEW_UPDATED = "zone_preview_updated"
    ZONE_PREVIEW_CLEARED = "zone_preview_cleared"

    # Mode events
    MODE_CHANGED = "mode_changed"
    TOOL_CHANGED = "tool_changed"

    # Measurement events
    MEASUREMENT_UPDATED = "measurement_updated"
    MEASUREMENT_CLEARED = "measurement_cleared"

    # Radius overlay events
    OVERLAY_MOVED = "overlay_moved"
    OVERLAY_RING_TOGGLED = "overlay_ring_toggled"

    # Visibility
    LAYER_TOGGLED = "layer_toggled"

    # Session events
    SESSION_LOADED = "session_loaded"
    SESSION_RESET = "session_reset"
    SETTINGS_CHANGED = "settings_changed"
    IMPORT_COMPLETED = "import_completed"

    # Blocking notices for the user
    NOTICE = "notice"
    CONFIRMATION_REQUIRED = "confirmation_required"


@dataclass
class MapEvent:
    """Event that occurs while editing the map."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Synchronous pub/sub hub owned by a :class:`MapSession`.

    The session persists itself by listening to its own mutation events,
    and a :class:`SurfaceAdapter` redraws the map
    from the same events. Listeners run in subscription order on the
    emitting thread; one failing listener is logged and does not stop the
    rest. The listener list is copied before dispatch, so a listener may
    unsubscribe itself while handling an event.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[MapEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Callable[[MapEvent], None]):
        """Unsubscribe from an event type."""
        if event_type in self._listeners:
            self._listeners[event_type].remove(callback)

    def emit(self, event: MapEvent):
        """Emit an event to all subscribers."""
        if event.event_type in self._listeners:
            for callback in list(self._listeners[event.event_type]):
                try:
                    callback(event)
                except Exception:
                    # Log but don't crash on listener errors
                    logger.exception(
                        "Error in event listener for %s", event.event_type.value
                    )

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
