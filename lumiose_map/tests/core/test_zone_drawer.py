"""Tests for polygon zone construction."""

from unittest.mock import Mock

import pytest

from lumiose_map.core.annotation.events import EventEmitter, EventType
from lumiose_map.core.annotation.state import Point
from lumiose_map.core.annotation.store import AnnotationStore
from lumiose_map.core.annotation.zones import ZoneDrawer


@pytest.fixture
def events():
    return EventEmitter()


@pytest.fixture
def drawer(events):
    return ZoneDrawer(AnnotationStore(), events)


class TestZoneDrawer:
    def test_closing_click_finalizes(self, drawer, events):
        """Four clicks on grid 5, the last within 5 of the first, close a zone."""
        added = Mock()
        events.on(EventType.ZONE_ADDED, added)

        for p in [Point(0, 0), Point(10, 0), Point(10, 10)]:
            assert drawer.add_point(p, grid_size=5) is None
        zone = drawer.add_point(Point(3, 4), grid_size=5)

        assert zone is not None
        assert zone.points == [Point(0, 0), Point(10, 0), Point(10, 10)]
        assert zone.number == 1
        assert zone.label == "Zone 1"
        assert zone.id.startswith("zone-")
        assert drawer.store.zones == [zone]
        assert not drawer.in_progress
        assert drawer.number_suggestion == 2
        added.assert_called_once()

    def test_far_click_adds_vertex(self, drawer):
        for p in [Point(0, 0), Point(10, 0), Point(10, 10)]:
            drawer.add_point(p, grid_size=5)
        assert drawer.add_point(Point(3, 5), grid_size=5) is None
        assert len(drawer.points) == 4
        assert drawer.store.zones == []

    def test_early_click_near_first_is_a_vertex(self, drawer):
        drawer.add_point(Point(0, 0), grid_size=5)
        drawer.add_point(Point(1, 1), grid_size=5)
        assert len(drawer.points) == 2

    def test_finalize_short_discards(self, drawer):
        drawer.add_point(Point(0, 0), 1)
        drawer.add_point(Point(5, 5), 1)
        assert drawer.finalize() is None
        assert drawer.points == []
        assert drawer.store.zones == []

    def test_pending_label_and_number(self, drawer):
        drawer.pending_label = "  Market  "
        drawer.pending_number = 12
        for p in [Point(0, 0), Point(10, 0), Point(10, 10)]:
            drawer.add_point(p, 1)
        zone = drawer.finalize()
        assert zone.label == "Market"
        assert zone.number == 12
        assert drawer.pending_label == ""
        assert drawer.pending_number is None
        assert drawer.number_suggestion == 13

    def test_preview_events(self, drawer, events):
        previews = []
        cleared = Mock()
        events.on(EventType.ZONE_PREVIEW_UPDATED, lambda e: previews.append(e.data))
        events.on(EventType.ZONE_PREVIEW_CLEARED, cleared)

        for p in [Point(0, 0), Point(10, 0), Point(10, 10)]:
            drawer.add_point(p, 1)
        assert [d["first"] for d in previews] == [True, False, False]
        assert [d["polygon"] for d in previews] == [False, False, True]

        drawer.reset()
        cleared.assert_called_once()
        drawer.reset()
        cleared.assert_called_once()
