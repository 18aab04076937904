"""
Example console front end for the map editor.

This demonstrates how the modular architecture allows driving the same
core logic from a different presentation layer: here a surface that just
prints what it would draw.

Usage:
    python examples/console_surface_example.py --baseline markers.json

Type commands such as ``m`` (measure), ``p`` (add), ``e`` (edit),
``click 12 13`` or ``quit``.
"""

import argparse
import logging

from lumiose_map.core.annotation.events import EventType
from lumiose_map.core.annotation.session import MapSession
from lumiose_map.core.annotation.state import Point
from lumiose_map.interfaces import SurfaceAdapter
from lumiose_map.utils.config import load_cfg


class ConsoleSurface:
    """Render surface that prints every drawing call."""

    def __init__(self):
        self._next = 0

    def place_marker(self, marker, draggable):
        self._next += 1
        print(f"+ {marker.type.value:<9} {marker.label} at ({marker.position.x}, {marker.position.y})")
        return self._next

    def update_marker(self, handle, marker):
        print(f"~ {marker.label} now at ({marker.position.x}, {marker.position.y})")

    def remove_visual(self, handle):
        print(f"- visual {handle}")

    def set_draggable(self, handle, enabled):
        pass

    def draw_zones(self, zones):
        print(f"zones: {', '.join(z.label for z in zones) or '(none)'}")

    def draw_zone_preview(self, points):
        print(f"zone preview: {len(points)} points")

    def clear_zone_preview(self):
        print("zone preview cleared")

    def draw_overlay(self, center, radii, visible):
        print(f"overlay at ({center.x}, {center.y})")

    def draw_measurement(self, origin, measurement):
        if measurement is None:
            print(f"measuring from ({origin.x}, {origin.y})")
        else:
            print(f"distance: {measurement.units_text} units ({measurement.pixels_text} px)")

    def clear_measurement(self):
        print("measurement cleared")

    def viewport_center(self):
        return Point(0.0, 0.0)


def main():
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser()
    parser.add_argument("--baseline", default=None)
    args = parser.parse_args()

    cfg = load_cfg()
    if args.baseline:
        cfg.sources.baseline = args.baseline
    session = MapSession.start(cfg)
    session.events.on(EventType.NOTICE, lambda e: print(f"! {e.data['message']}"))
    session.set_tool("circle")
    adapter = SurfaceAdapter(session, ConsoleSurface())
    adapter.attach()

    try:
        while True:
            line = input("> ").strip()
            if line in ("quit", "exit"):
                break
            if line.startswith("click "):
                x, y = (float(v) for v in line.split()[1:3])
                adapter.on_map_click(x, y)
            elif line:
                adapter.on_key(line)
    except EOFError:
        pass
    finally:
        session.close()


if __name__ == "__main__":
    main()
