"""
Tests for the editing-mode state machine.

The controller is driven through a real session so that routing reaches
the actual handlers.
"""

from unittest.mock import Mock

import pytest

from lumiose_map.core.annotation.errors import ModeError
from lumiose_map.core.annotation.events import EventType
from lumiose_map.core.annotation.modes import Mode, ModeState
from lumiose_map.core.annotation.state import MarkerType, Point


@pytest.fixture
def modes(map_session):
    return map_session.modes


class TestModeState:
    def test_deleting_only_while_editing(self):
        assert ModeState(Mode.EDITING, deleting=True).deleting
        with pytest.raises(ModeError):
            ModeState(Mode.ADDING, deleting=True)


class TestModeExclusion:
    def test_one_mode_at_a_time(self, modes):
        modes.set_measuring(True)
        modes.set_adding(True)
        assert modes.mode == Mode.ADDING
        modes.set_editing(True)
        assert modes.mode == Mode.EDITING
        modes.set_adding(False)
        assert modes.mode == Mode.EDITING
        modes.set_editing(False)
        assert modes.mode == Mode.IDLE

    def test_deleting_requires_editing(self, modes):
        modes.set_deleting(True)
        assert not modes.deleting
        modes.set_editing(True)
        modes.toggle_deleting()
        assert modes.deleting
        modes.set_adding(True)
        assert not modes.deleting
        assert modes.mode == Mode.ADDING

    def test_leaving_zone_mode_discards_points(self, map_session, modes):
        modes.set_zone_drawing(True)
        modes.handle_position(Point(0, 0))
        modes.handle_position(Point(10, 0))
        assert map_session.zone_drawer.in_progress
        modes.set_measuring(True)
        assert not map_session.zone_drawer.in_progress
        assert len(map_session.store.zones) == 1

    def test_editing_toggles_draggability(self, map_session, modes):
        changes = []
        map_session.events.on(EventType.MODE_CHANGED, lambda e: changes.append(e.data))
        modes.set_editing(True)
        modes.set_deleting(True)
        modes.set_editing(False)
        assert [c["draggable_changed"] for c in changes] == [True, False, True]
        assert [c["draggable"] for c in changes] == [True, True, False]


class TestRouting:
    def test_idle_ignores_clicks(self, map_session, modes):
        before = len(map_session.store)
        assert modes.handle_position(Point(5, 5)) is None
        assert len(map_session.store) == before

    def test_adding_places_snapped_marker(self, map_session, modes):
        map_session.set_grid_size(5)
        map_session.set_tool("circle")
        modes.set_adding(True)
        marker = modes.handle_position(Point(12, 13))
        assert marker.position == Point(10, 15)
        assert marker.type == MarkerType.CIRCLE

    def test_deleting_ignores_map_clicks(self, map_session, modes):
        modes.set_editing(True)
        modes.set_deleting(True)
        before = len(map_session.store)
        assert modes.handle_position(Point(20, 10)) is None
        assert len(map_session.store) == before

    def test_marker_click_deletes_in_delete_mode(self, map_session, modes):
        map_session.set_tool("circle")
        marker = map_session.add_marker_at(Point(1, 1))
        modes.set_editing(True)
        modes.set_deleting(True)
        modes.handle_marker_click(marker.id)
        assert marker.id not in map_session.store

    def test_marker_click_selects_otherwise(self, map_session, modes):
        assert modes.handle_marker_click("b1").id == "b1"
        assert map_session.selection == "b1"


class TestMeasure:
    def test_origin_then_target_then_move(self, map_session, modes):
        updates = Mock()
        map_session.events.on(EventType.MEASUREMENT_UPDATED, updates)
        modes.set_measuring(True)

        assert modes.handle_position(Point(0, 0)) is None
        result = modes.handle_position(Point(3, 4))
        assert result.pixels == pytest.approx(5)
        result = modes.handle_position(Point(6, 8))
        assert result.origin == Point(0, 0)
        assert result.pixels == pytest.approx(10)
        assert updates.call_count == 3

    def test_drag_endpoint(self, modes):
        modes.set_measuring(True)
        modes.handle_position(Point(0, 0))
        modes.handle_position(Point(3, 4))
        result = modes.move_measure_endpoint("origin", Point(3, 0))
        assert result.pixels == pytest.approx(4)
        with pytest.raises(ValueError):
            modes.move_measure_endpoint("middle", Point(0, 0))

    def test_leaving_clears_measurement(self, map_session, modes):
        cleared = Mock()
        map_session.events.on(EventType.MEASUREMENT_CLEARED, cleared)
        modes.set_measuring(True)
        modes.handle_position(Point(0, 0))
        modes.set_adding(True)
        cleared.assert_called_once()
        assert modes.measurement.origin is None


class TestShortcuts:
    def test_mode_keys(self, modes):
        assert modes.handle_shortcut("m")
        assert modes.mode == Mode.MEASURING
        assert modes.handle_shortcut("P")
        assert modes.mode == Mode.ADDING
        assert modes.handle_shortcut("escape")
        assert modes.mode == Mode.IDLE
        assert modes.handle_shortcut("e")
        assert modes.mode == Mode.EDITING
        assert modes.handle_shortcut("e")
        assert modes.mode == Mode.IDLE
        assert not modes.handle_shortcut("x")

    def test_number_keys_pick_circle_tool(self, map_session, modes):
        modes.handle_shortcut("2")
        assert map_session.tool == MarkerType.CIRCLE

    def test_delete_key_removes_selection_in_edit_mode(self, map_session, modes):
        map_session.set_tool("circle")
        marker = map_session.add_marker_at(Point(1, 1))
        map_session.select(marker.id)

        modes.handle_shortcut("delete")
        assert marker.id in map_session.store

        modes.set_editing(True)
        modes.handle_shortcut("backspace")
        assert marker.id not in map_session.store
