"""
Render surface adapter for map sessions.

Bridges the MapSession with whatever draws the map (a canvas, a web map,
a test double).
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ..core.annotation import EventType, MapEvent, Marker, Point, Zone
from ..core.annotation.session import TYPE_LAYERS, MapSession
from ..core.annotation.state import MarkerSource
from ..core.annotation.utils import Measurement


class RenderSurface(Protocol):
    """What the core needs from a rendering substrate."""

    def place_marker(self, marker: Marker, draggable: bool) -> Any: ...

    def update_marker(self, handle: Any, marker: Marker) -> None: ...

    def remove_visual(self, handle: Any) -> None: ...

    def set_draggable(self, handle: Any, enabled: bool) -> None: ...

    def draw_zones(self, zones: Sequence[Zone]) -> None: ...

    def draw_zone_preview(self, points: Sequence[Point]) -> None: ...

    def clear_zone_preview(self) -> None: ...

    def draw_overlay(
        self, center: Point, radii: Sequence[float], visible: Sequence[bool]
    ) -> None: ...

    def draw_measurement(
        self, origin: Point, measurement: Optional[Measurement]
    ) -> None: ...

    def clear_measurement(self) -> None: ...

    def viewport_center(self) -> Point: ...


@dataclass
class LiveHandle:
    """A marker and the surface's visual for it."""

    entity: Marker
    visual: Any


class SurfaceAdapter:
    """
    Adapter connecting MapSession to a RenderSurface.

    Provides a thin layer that:
    - Translates session events to surface calls
    - Keeps the id-keyed table of live visuals
    - Forwards raw pointer and keyboard input to the session
    """

    def __init__(self, session: MapSession, surface: RenderSurface):
        """
        Initialize adapter.

        Args:
            session: Core map session
            surface: Rendering substrate
        """
        self.session = session
        self.surface = surface
        self.handles: Dict[str, LiveHandle] = {}

        self._subscriptions = {
            EventType.MARKER_ADDED: self._on_marker_added,
            EventType.MARKER_UPDATED: self._on_marker_updated,
            EventType.MARKER_REMOVED: self._on_marker_removed,
            EventType.MARKERS_RELOADED: self._on_reload,
            EventType.LAYER_TOGGLED: self._on_reload,
            EventType.ZONE_ADDED: self._on_zones_changed,
            EventType.ZONE_UPDATED: self._on_zones_changed,
            EventType.ZONE_REMOVED: self._on_zones_changed,
            EventType.ZONE_PREVIEW_UPDATED: self._on_zone_preview,
            EventType.ZONE_PREVIEW_CLEARED: self._on_zone_preview_cleared,
            EventType.OVERLAY_MOVED: self._on_overlay_changed,
            EventType.OVERLAY_RING_TOGGLED: self._on_overlay_changed,
            EventType.MEASUREMENT_UPDATED: self._on_measurement,
            EventType.MEASUREMENT_CLEARED: self._on_measurement_cleared,
            EventType.MODE_CHANGED: self._on_mode_changed,
        }
        for event_type, callback in self._subscriptions.items():
            self.session.events.on(event_type, callback)

    def attach(self):
        """Draw everything; places the overlay at the viewport center if needed."""
        self.session.place_overlay(self.surface.viewport_center())
        self.render_all()

    def detach(self):
        """Remove every visual and stop listening to the session."""
        for event_type, callback in self._subscriptions.items():
            self.session.events.off(event_type, callback)
        self._clear_markers()

    def render_all(self):
        self._clear_markers()
        for marker in self.session.store.markers:
            if self.is_visible(marker):
                self._place(marker)
        self._draw_zones()
        self._draw_overlay()

    def is_visible(self, marker: Marker) -> bool:
        visibility = self.session.visibility
        source_layer = "presets" if marker.source == MarkerSource.PRESET else "users"
        return visibility[source_layer] and visibility[TYPE_LAYERS[marker.type]]

    def draggable(self, marker: Marker) -> bool:
        return self.session.modes.state.is_editing and not marker.locked

    # Input from the surface

    def on_map_click(self, x: float, y: float):
        return self.session.modes.handle_position(Point(x, y))

    def on_marker_click(self, marker_id: str):
        return self.session.modes.handle_marker_click(marker_id)

    def on_marker_drag_end(self, marker_id: str, x: float, y: float):
        return self.session.modes.handle_marker_drag_end(marker_id, Point(x, y))

    def on_overlay_drag_end(self, x: float, y: float):
        return self.session.drag_overlay(Point(x, y))

    def on_measure_drag_end(self, endpoint: str, x: float, y: float):
        return self.session.modes.move_measure_endpoint(endpoint, Point(x, y))

    def on_key(self, key: str) -> bool:
        return self.session.modes.handle_shortcut(key)

    # Session events

    def _place(self, marker: Marker):
        visual = self.surface.place_marker(marker, self.draggable(marker))
        self.handles[marker.id] = LiveHandle(marker, visual)

    def _remove(self, marker_id: str):
        live = self.handles.pop(marker_id, None)
        if live is not None:
            self.surface.remove_visual(live.visual)

    def _clear_markers(self):
        for marker_id in list(self.handles):
            self._remove(marker_id)

    def _on_marker_added(self, event: MapEvent):
        marker = event.data["marker"]
        if self.is_visible(marker):
            self._place(marker)

    def _on_marker_updated(self, event: MapEvent):
        marker = event.data["marker"]
        live = self.handles.get(marker.id)
        if not self.is_visible(marker):
            self._remove(marker.id)
        elif live is None:
            self._place(marker)
        else:
            live.entity = marker
            self.surface.update_marker(live.visual, marker)
            self.surface.set_draggable(live.visual, self.draggable(marker))

    def _on_marker_removed(self, event: MapEvent):
        self._remove(event.data["marker_id"])

    def _on_reload(self, event: MapEvent):
        self.render_all()

    def _draw_zones(self):
        zones: List[Zone] = self.session.store.zones if self.session.visibility["zones"] else []
        self.surface.draw_zones(list(zones))

    def _on_zones_changed(self, event: MapEvent):
        self._draw_zones()

    def _on_zone_preview(self, event: MapEvent):
        self.surface.draw_zone_preview(event.data["points"])

    def _on_zone_preview_cleared(self, event: MapEvent):
        self.surface.clear_zone_preview()

    def _draw_overlay(self):
        overlay = self.session.overlay
        if overlay.center is not None:
            self.surface.draw_overlay(overlay.center, overlay.radii, list(overlay.visible))

    def _on_overlay_changed(self, event: MapEvent):
        self._draw_overlay()

    def _on_measurement(self, event: MapEvent):
        self.surface.draw_measurement(event.data["origin"], event.data["measurement"])

    def _on_measurement_cleared(self, event: MapEvent):
        self.surface.clear_measurement()

    def _on_mode_changed(self, event: MapEvent):
        if not event.data.get("draggable_changed"):
            return
        for live in self.handles.values():
            self.surface.set_draggable(live.visual, self.draggable(live.entity))
