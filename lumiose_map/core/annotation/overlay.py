"""
The always-present radius overlay: a draggable center with two concentric
rings of fixed diameter.
"""

from typing import List, Optional, Sequence

from lumiose_map.utils.config import FIXED_PIXELS_PER_UNIT, RING_DIAMETERS_UNITS

from .events import EventEmitter, EventType, MapEvent
from .state import Point
from .utils import ring_radius_pixels, snap


class RadiusOverlayController:
    """
    Manages the single radius overlay of a session.

    The rings can be moved as a pair and hidden one at a time, never
    resized.
    """

    def __init__(
        self,
        events: Optional[EventEmitter] = None,
        scale: float = FIXED_PIXELS_PER_UNIT,
        diameters: Sequence[float] = RING_DIAMETERS_UNITS,
    ):
        self.events = events or EventEmitter()
        self.scale = scale
        self.diameters = tuple(diameters)
        self.center: Optional[Point] = None
        self.visible: List[bool] = [True] * len(self.diameters)

    @property
    def radii(self) -> List[float]:
        """Ring radii in pixels."""
        return [ring_radius_pixels(d, self.scale) for d in self.diameters]

    def ring_radius(self, index: int) -> float:
        return ring_radius_pixels(self.diameters[index], self.scale)

    def ensure(self, default_center: Point) -> Point:
        """Place the overlay at ``default_center`` unless it already has a center."""
        if self.center is None:
            self._move(default_center)
        return self.center

    def recenter(self, point: Point) -> Point:
        return self._move(point)

    def drag_center(self, point: Point, grid_size: float = 1, snap_enabled: bool = True) -> Point:
        """Drop the center marker after a drag; the position is snapped."""
        return self._move(snap(point, grid_size, snap_enabled))

    def toggle_ring(self, index: int) -> bool:
        """Flip the visibility of one ring; returns the new visibility."""
        self.visible[index] = not self.visible[index]
        self.events.emit(
            MapEvent(
                EventType.OVERLAY_RING_TOGGLED,
                {"index": index, "visible": self.visible[index]},
            )
        )
        return self.visible[index]

    def _move(self, point: Point) -> Point:
        self.center = point
        self.events.emit(
            MapEvent(
                EventType.OVERLAY_MOVED,
                {"center": point, "radii": self.radii, "visible": list(self.visible)},
            )
        )
        return point
