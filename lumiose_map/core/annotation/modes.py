"""
Editing-mode state machine.

One tagged state replaces independent mode flags, so at most one editing
mode can be active and the delete sub-mode only exists inside edit mode.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .errors import ModeError
from .events import EventType, MapEvent
from .state import Point
from .utils import Measurement, measure

if TYPE_CHECKING:
    from .session import MapSession

logger = logging.getLogger(__name__)


class Mode(Enum):
    IDLE = "idle"
    MEASURING = "measuring"
    ADDING = "adding"
    EDITING = "editing"
    ZONE_DRAWING = "zone_drawing"


@dataclass(frozen=True)
class ModeState:
    """Current mode; ``deleting`` is only meaningful while editing."""

    mode: Mode = Mode.IDLE
    deleting: bool = False

    def __post_init__(self):
        if self.deleting and self.mode != Mode.EDITING:
            raise ModeError("Delete mode is only available while editing")

    @property
    def is_idle(self) -> bool:
        return self.mode == Mode.IDLE

    @property
    def is_editing(self) -> bool:
        return self.mode == Mode.EDITING


IDLE = ModeState()


class MeasureState:
    """Endpoints of the measurement being taken."""

    def __init__(self):
        self.origin: Optional[Point] = None
        self.target: Optional[Point] = None
        self.last: Optional[Measurement] = None

    def clear(self):
        self.origin = None
        self.target = None
        self.last = None


class ModeController:
    """
    Enforces mutual exclusion among editing modes and routes position
    events to the handler of the active mode.

    Positions reaching the controller are already in world units.
    """

    def __init__(self, session: "MapSession"):
        self.session = session
        self.state: ModeState = IDLE
        self.measurement = MeasureState()

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def deleting(self) -> bool:
        return self.state.deleting

    def _transition(self, new_state: ModeState):
        old_state = self.state
        if new_state == old_state:
            return

        if old_state.mode == Mode.ZONE_DRAWING and new_state.mode != Mode.ZONE_DRAWING:
            self.session.zone_drawer.reset()
        if old_state.mode == Mode.MEASURING:
            self._clear_measurement()

        self.state = new_state

        if new_state.mode == Mode.ZONE_DRAWING and old_state.mode != Mode.ZONE_DRAWING:
            self.session.zone_drawer.reset()
            self.session.zone_drawer.suggest_number()
        if new_state.mode == Mode.MEASURING:
            self._clear_measurement()

        logger.debug(f"Mode {old_state.mode.value} -> {new_state.mode.value}")
        self.session.events.emit(
            MapEvent(
                EventType.MODE_CHANGED,
                {
                    "mode": new_state.mode,
                    "deleting": new_state.deleting,
                    "previous": old_state.mode,
                    # Drag-ability of every live marker follows edit mode
                    "draggable": new_state.is_editing,
                    "draggable_changed": new_state.is_editing != old_state.is_editing,
                },
            )
        )

    def _set(self, mode: Mode, on: bool):
        if on:
            self._transition(ModeState(mode))
        elif self.state.mode == mode:
            self._transition(IDLE)

    def set_measuring(self, on: bool):
        self._set(Mode.MEASURING, on)

    def set_adding(self, on: bool):
        self._set(Mode.ADDING, on)

    def set_editing(self, on: bool):
        self._set(Mode.EDITING, on)

    def set_zone_drawing(self, on: bool):
        self._set(Mode.ZONE_DRAWING, on)

    def set_deleting(self, on: bool):
        """Toggle the delete sub-mode; ignored outside edit mode."""
        if not self.state.is_editing:
            return
        self._transition(ModeState(Mode.EDITING, deleting=on))

    def toggle(self, mode: Mode):
        self._set(mode, self.state.mode != mode)

    def toggle_deleting(self):
        self.set_deleting(not self.state.deleting)

    # Position events

    def handle_position(self, point: Point):
        """
        Route a map click to the handler for the active mode.

        Returns:
            Whatever the handler produced (a Marker, a Zone, a Measurement),
            or None if the click was ignored
        """
        mode = self.state.mode
        if mode == Mode.IDLE:
            return None
        if mode == Mode.MEASURING:
            return self._measure_click(self.session.snap(point))
        if mode == Mode.ZONE_DRAWING:
            return self.session.zone_drawer.add_point(
                self.session.snap(point), self.session.grid_size
            )
        if mode == Mode.ADDING:
            return self.session.add_marker_at(point)
        # Editing: clicks on the map itself do nothing; marker clicks and
        # drags arrive through their own handlers
        return None

    def handle_marker_click(self, marker_id: str):
        if self.state.deleting:
            return self.session.delete_marker(marker_id)
        return self.session.select(marker_id)

    def handle_marker_drag_end(self, marker_id: str, point: Point):
        return self.session.move_marker(marker_id, point)

    # Measurement

    def _measure_click(self, point: Point) -> Optional[Measurement]:
        if self.measurement.origin is None:
            self.measurement.origin = point
            self.session.events.emit(
                MapEvent(EventType.MEASUREMENT_UPDATED, {"origin": point, "measurement": None})
            )
            return None
        # Second click places the target, later clicks move it
        self.measurement.target = point
        return self._update_measurement()

    def move_measure_endpoint(self, endpoint: str, point: Point) -> Optional[Measurement]:
        """Drop a dragged measurement endpoint (``"origin"`` or ``"target"``)."""
        if self.state.mode != Mode.MEASURING:
            return None
        if endpoint not in ("origin", "target"):
            raise ValueError(f"Unknown measurement endpoint: {endpoint}")
        setattr(self.measurement, endpoint, self.session.snap(point))
        if self.measurement.origin is None or self.measurement.target is None:
            return None
        return self._update_measurement()

    def _update_measurement(self) -> Measurement:
        result = measure(
            self.measurement.origin, self.measurement.target, self.session.pixels_per_unit
        )
        self.measurement.last = result
        self.session.events.emit(
            MapEvent(
                EventType.MEASUREMENT_UPDATED,
                {"origin": result.origin, "measurement": result},
            )
        )
        return result

    def _clear_measurement(self):
        had_any = self.measurement.origin is not None
        self.measurement.clear()
        if had_any:
            self.session.events.emit(MapEvent(EventType.MEASUREMENT_CLEARED))

    # Keyboard

    def handle_shortcut(self, key: str) -> bool:
        """
        Apply a keyboard shortcut.

        Returns:
            True if the key was handled
        """
        key = key.lower()
        if key == "m":
            self.toggle(Mode.MEASURING)
        elif key == "p":
            self.toggle(Mode.ADDING)
        elif key == "e":
            self.toggle(Mode.EDITING)
        elif key in ("1", "2", "3", "4"):
            self.session.set_tool("circle", toggle=False)
        elif key == "escape":
            self.set_adding(False)
        elif key in ("delete", "backspace"):
            if self.state.is_editing and self.session.selection:
                self.session.delete_marker(self.session.selection)
        else:
            return False
        return True

