"""
Persistence of the mutable part of a session.

The durable record is one JSON document under a single fixed key,
overwritten wholesale on every save.
"""

import json
import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from lumiose_map.utils.config import STORAGE_KEY

from ..annotation.state import (
    Marker,
    MarkerSource,
    Point,
    Zone,
    normalize_marker,
    normalize_zone,
    to_units,
)
from ..annotation.store import filter_overlay_records
from .scheduler import DebouncedTask
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


class ResetScope(str, Enum):
    # User and custom markers only
    USER = "user"
    # Also preset edits and user zones; the next load uses the baseline
    ALL = "all"


@dataclass
class PersistedState:
    """
    The durable record of a session.

    Only user-authored state lives here; the baseline is fetched again on
    every start and merged with these edits.
    """

    user_markers: List[Marker] = field(default_factory=list)
    preset_markers: List[Marker] = field(default_factory=list)
    zones: List[Zone] = field(default_factory=list)
    custom_markers: List[Marker] = field(default_factory=list)
    snap_enabled: bool = True
    grid_size: float = 1.0
    overlay_center: Optional[Point] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "userMarkers": [m.to_record(include_source=True) for m in self.user_markers],
            "presetMarkers": [
                m.to_record(include_source=True) for m in self.preset_markers
            ],
            "zones": [z.to_record() for z in self.zones],
            "customMarkers": [
                m.to_record(include_source=True) for m in self.custom_markers
            ],
            "snapEnabled": self.snap_enabled,
            "gridSize": self.grid_size,
            "radiusOverlayCenter": (
                self.overlay_center.to_dict() if self.overlay_center else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PersistedState":
        """
        Create from dictionary.

        Also reads the older ``snap`` and ``shinyCenter`` keys.
        """

        def markers(key: str, source: MarkerSource) -> List[Marker]:
            return [normalize_marker(m, source) for m in filter_overlay_records(data.get(key))]

        snap_enabled = data.get("snapEnabled", data.get("snap", True))
        center = data.get("radiusOverlayCenter", data.get("shinyCenter"))
        zones = data.get("zones")
        return cls(
            user_markers=markers("userMarkers", MarkerSource.USER),
            preset_markers=markers("presetMarkers", MarkerSource.PRESET),
            zones=[
                normalize_zone(z)
                for z in (zones if isinstance(zones, list) else [])
                if isinstance(z, dict)
            ],
            custom_markers=markers("customMarkers", MarkerSource.USER),
            snap_enabled=bool(snap_enabled),
            grid_size=to_units(data.get("gridSize")) or 1.0,
            overlay_center=Point.from_dict(center) if isinstance(center, dict) else None,
        )


class PersistenceManager:
    """
    Loads and saves the durable record.

    Saves are debounced: rapid successive calls to :meth:`save` collapse
    into one write after a quiet interval. Callers never wait for the write.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        key: str = STORAGE_KEY,
        delay: float = 0.15,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        self.storage = storage
        self.key = key
        self._task = DebouncedTask(self._write, delay=delay, timer_factory=timer_factory)

    @property
    def pending(self) -> bool:
        return self._task.pending

    def load(self) -> Optional[PersistedState]:
        """
        Read the durable record.

        Returns:
            The saved state, or None if there is none or it is malformed
        """
        raw = self.storage.get(self.key)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding malformed saved state: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning("Discarding saved state that is not an object")
            return None
        state = PersistedState.from_dict(data)
        logger.info(
            f"Loaded saved state: {len(state.preset_markers)} presets, "
            f"{len(state.user_markers)} user markers, {len(state.zones)} zones"
        )
        return state

    def save(self, state: PersistedState):
        """Schedule a write of ``state``; the payload is taken right away."""
        self._task.schedule(self._serialize(state))

    def save_now(self, state: PersistedState):
        """Drop any pending write and write ``state`` synchronously."""
        self._task.run_now(self._serialize(state))

    def flush(self) -> bool:
        """Perform a pending write immediately, if there is one."""
        return self._task.flush()

    def cancel(self):
        self._task.cancel()

    def reset(self, scope: ResetScope, state: PersistedState) -> PersistedState:
        """
        Clear user-authored state and save the result in one step.

        Args:
            scope: What to discard
            state: The current state

        Returns:
            The state that was written
        """
        scope = ResetScope(scope)
        cleared = replace(state, user_markers=[], custom_markers=[])
        if scope == ResetScope.ALL:
            cleared = replace(cleared, preset_markers=[], zones=[])
        self.save_now(cleared)
        logger.info(f"Reset saved state (scope={scope.value})")
        return cleared

    @staticmethod
    def _serialize(state: PersistedState) -> str:
        return json.dumps(state.to_dict())

    def _write(self, payload: str):
        self.storage.set(self.key, payload)
