"""
Pure geometry functions for annotation logic.

These functions have no side effects and can be tested in isolation.
All positions are in world units under one fixed pixels-per-unit scale.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from lumiose_map.utils.config import FIXED_PIXELS_PER_UNIT

from .state import MIN_ZONE_POINTS, Point


def effective_grid(grid_size: Optional[float]) -> float:
    """Grid size to snap with; zero, negative or unset falls back to 1."""
    try:
        g = float(grid_size or 0)
    except (TypeError, ValueError):
        return 1.0
    return g if g > 0 else 1.0


def snap(point: Point, grid_size: Optional[float], enabled: bool = True) -> Point:
    """
    Snap a point to the nearest grid intersection.

    Args:
        point: Position in world units
        grid_size: Grid spacing in world units
        enabled: When False the point is returned unchanged

    Returns:
        Snapped point
    """
    if not enabled:
        return point
    g = effective_grid(grid_size)
    # floor(v + 0.5) rounds halves up, so 2.5 snaps to 3 and -2.5 to -2
    x, y = np.floor(np.array([point.x, point.y]) / g + 0.5) * g
    return Point(x=float(x), y=float(y))


def distance(a: Point, b: Point) -> float:
    """Planar distance between two points."""
    return float(np.hypot(b.x - a.x, b.y - a.y))


@dataclass(frozen=True)
class Measurement:
    """Distance between two points, raw and in world units."""

    origin: Point
    target: Point
    pixels: float
    units: float

    @property
    def pixels_text(self) -> str:
        return f"{self.pixels:.1f}"

    @property
    def units_text(self) -> str:
        return f"{self.units:.2f}"

    @property
    def midpoint(self) -> Point:
        return Point(
            x=(self.origin.x + self.target.x) / 2,
            y=(self.origin.y + self.target.y) / 2,
        )


def measure(a: Point, b: Point, scale: float = FIXED_PIXELS_PER_UNIT) -> Measurement:
    """
    Measure the distance between two points.

    Args:
        a: Origin
        b: Target
        scale: Pixels per world unit

    Returns:
        Measurement with the raw distance and the distance divided by scale
    """
    pixels = distance(a, b)
    return Measurement(origin=a, target=b, pixels=pixels, units=pixels / scale)


def closing_threshold(grid_size: Optional[float]) -> float:
    try:
        g = float(grid_size or 0)
    except (TypeError, ValueError):
        g = 0.0
    return max(g, 1.0)


def is_closing_click(
    points: Sequence[Point], candidate: Point, grid_size: Optional[float]
) -> bool:
    """
    Check whether a click closes the polygon being drawn.

    A click closes the polygon when there are already enough vertices and it
    lands within ``max(grid_size, 1)`` of the first vertex.
    """
    if len(points) < MIN_ZONE_POINTS:
        return False
    return distance(points[0], candidate) <= closing_threshold(grid_size)


def bounds_center(points: Sequence[Point]) -> Optional[Point]:
    """
    Center of the bounding box of a set of points.

    Used to place a zone's number badge.

    Returns:
        Center point, or None if there are no points
    """
    if not points:
        return None
    coords = np.array([[p.x, p.y] for p in points], dtype=np.float64)
    cx, cy = (coords.min(axis=0) + coords.max(axis=0)) / 2
    return Point(x=float(cx), y=float(cy))


def ring_radius_pixels(diameter_units: float, scale: float = FIXED_PIXELS_PER_UNIT) -> float:
    """Radius in pixels of a ring with the given diameter in world units."""
    return diameter_units / 2 * scale
