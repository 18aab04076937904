"""
Polygon zone construction.

Accumulates vertices from clicks and closes the polygon when a click lands
back on the first vertex.
"""

import logging
from typing import List, Optional

from .events import EventEmitter, EventType, MapEvent
from .state import MIN_ZONE_POINTS, Point, Zone
from .store import AnnotationStore
from .utils import is_closing_click

logger = logging.getLogger(__name__)


class ZoneDrawer:
    """
    Finite accumulator for the zone being drawn.

    Nothing reaches the store until the polygon is closed; :meth:`reset`
    discards the in-progress vertices without touching stored zones.
    """

    def __init__(self, store: AnnotationStore, events: Optional[EventEmitter] = None):
        self.store = store
        self.events = events or EventEmitter()
        self.points: List[Point] = []

        # Set by the presentation layer before closing a zone
        self.pending_label: str = ""
        self.pending_number: Optional[int] = None

        self.number_suggestion: int = store.next_zone_number()

    @property
    def in_progress(self) -> bool:
        return bool(self.points)

    def add_point(self, point: Point, grid_size: Optional[float] = 1) -> Optional[Zone]:
        """
        Handle a click while drawing a zone.

        Args:
            point: Click position, already snapped
            grid_size: Current grid size, sets the closing distance

        Returns:
            The finalized zone if this click closed the polygon, else None
        """
        if is_closing_click(self.points, point, grid_size):
            return self.finalize()

        self.points.append(point)
        self.events.emit(
            MapEvent(
                EventType.ZONE_PREVIEW_UPDATED,
                {
                    "points": list(self.points),
                    "first": len(self.points) == 1,
                    "polygon": len(self.points) >= MIN_ZONE_POINTS,
                },
            )
        )
        return None

    def finalize(self) -> Optional[Zone]:
        """
        Close the polygon and store it as a zone.

        The closing click itself is not part of the zone. With fewer than
        three vertices the accumulator is discarded instead.
        """
        if len(self.points) < MIN_ZONE_POINTS:
            self.reset()
            return None

        number = self.pending_number or self.store.next_zone_number()
        label = self.pending_label.strip() or f"Zone {number}"
        zone = Zone(
            id=self.store.unique_id("zone"),
            label=label,
            number=number,
            points=list(self.points),
        )
        self.store.add_zone(zone)
        logger.debug(f"Closed zone {zone.id} with {len(zone.points)} points")

        self.pending_label = ""
        self.pending_number = None
        self.reset()
        self.suggest_number()
        self.events.emit(MapEvent(EventType.ZONE_ADDED, {"zone": zone}))
        return zone

    def reset(self):
        """Discard the in-progress vertices."""
        had_points = bool(self.points)
        self.points = []
        if had_points:
            self.events.emit(MapEvent(EventType.ZONE_PREVIEW_CLEARED))

    def suggest_number(self) -> int:
        self.number_suggestion = self.store.next_zone_number()
        return self.number_suggestion
