"""
Map editing session.

Core logic for one interactive editing session over the fixed map image.
UI-agnostic - can be driven by any presentation layer (GUI, Web, CLI).
"""

import logging
from gettext import gettext as _
from pathlib import Path
from typing import Any, Dict, Optional, Union

import httpx
from easydict import EasyDict as edict

from lumiose_map.utils.config import default_cfg

from ..persistence.manager import PersistenceManager, PersistedState, ResetScope
from ..persistence.sources import Baseline, load_baseline, load_sticker_catalog
from ..persistence.storage import JsonFileStore, KeyValueStore
from .errors import ImportFailedError, MarkerLockedError, UnknownStickerError
from .events import EventEmitter, EventType, MapEvent
from .modes import ModeController
from .overlay import RadiusOverlayController
from .state import (
    Marker,
    MarkerSource,
    MarkerType,
    Point,
    Zone,
    default_label,
    normalize_marker,
)
from .stickers import StickerCatalog
from .store import AnnotationStore, ExportScope, RemovalResult, dump_json
from .utils import snap
from .zones import ZoneDrawer

logger = logging.getLogger(__name__)

# Events after which the durable record is rewritten
PERSISTED_EVENTS = (
    EventType.MARKER_ADDED,
    EventType.MARKER_UPDATED,
    EventType.MARKER_REMOVED,
    EventType.ZONE_ADDED,
    EventType.ZONE_UPDATED,
    EventType.ZONE_REMOVED,
    EventType.OVERLAY_MOVED,
    EventType.SETTINGS_CHANGED,
    EventType.IMPORT_COMPLETED,
)

# Layer toggle that has to be on for a marker of each type to show
TYPE_LAYERS = {
    MarkerType.BENCH: "benches",
    MarkerType.LADDER: "ladders",
    MarkerType.ELEVATOR: "elevators",
    MarkerType.CIRCLE: "circles",
    MarkerType.SPRITE: "users",
}


class MapSession:
    """
    Holds the state of one editing session and the logic acting on it.

    This class handles:
    - Seeding the store from the baseline and the durable record
    - Marker placement, moves, edits and deletion
    - Zone and radius overlay bookkeeping
    - Snap/grid settings and the current marker tool
    - Event emission for UI updates
    - Scheduling saves after every mutation

    The session is UI-agnostic - it emits events that a presentation layer
    can listen to, rather than manipulating visuals directly.
    """

    def __init__(
        self,
        cfg: Optional[edict] = None,
        persistence: Optional[PersistenceManager] = None,
        stickers: Optional[StickerCatalog] = None,
    ):
        """
        Initialize a map session.

        Args:
            cfg: Configuration tree, see :mod:`lumiose_map.utils.config`
            persistence: Where to save; None keeps the session in memory
            stickers: Sticker catalog for sprite markers
        """
        self.cfg = cfg or default_cfg()
        self.persistence = persistence
        self.stickers = stickers or StickerCatalog(prefix=self.cfg.sources.sticker_prefix)

        self.pixels_per_unit: float = float(self.cfg.geometry.pixels_per_unit)
        self.snap_enabled: bool = bool(self.cfg.editor.snap)
        self.grid_size: float = float(self.cfg.editor.grid_size)

        # Event emitter for UI notifications
        self.events = EventEmitter()

        self.store = AnnotationStore()
        self.zone_drawer = ZoneDrawer(self.store, self.events)
        self.overlay = RadiusOverlayController(
            self.events,
            scale=self.pixels_per_unit,
            diameters=self.cfg.geometry.ring_diameters,
        )
        self.modes = ModeController(self)

        # Marker tool settings
        self.tool: Optional[MarkerType] = None
        self.current_label: str = ""
        self.current_color: str = self.cfg.editor.circle_color
        self.current_sticker: str = self.stickers.default or ""

        self.selection: Optional[str] = None
        self.visibility: Dict[str, bool] = {
            "presets": True,
            "users": True,
            "benches": True,
            "ladders": True,
            "elevators": True,
            "circles": True,
            "zones": True,
        }

        for event_type in PERSISTED_EVENTS:
            self.events.on(event_type, self._on_state_mutated)

    @classmethod
    def start(
        cls,
        cfg: Optional[edict] = None,
        storage: Optional[KeyValueStore] = None,
        client: Optional[httpx.Client] = None,
    ) -> "MapSession":
        """
        Build a session the way the application does at startup.

        Fetches the sticker catalog and the baseline dataset (failures
        degrade to empty), then merges in the durable record.
        """
        cfg = cfg or default_cfg()
        if storage is None:
            storage = JsonFileStore(cfg.storage.dir or None)
        persistence = PersistenceManager(
            storage, key=cfg.storage.key, delay=float(cfg.editor.save_debounce)
        )
        stickers = load_sticker_catalog(
            cfg.sources.stickers,
            prefix=cfg.sources.sticker_prefix,
            timeout=float(cfg.sources.timeout),
            client=client,
        )
        session = cls(cfg, persistence=persistence, stickers=stickers)
        baseline = load_baseline(
            cfg.sources.baseline, timeout=float(cfg.sources.timeout), client=client
        )
        session.load(baseline)
        return session

    # Loading and saving

    def load(self, baseline: Baseline, saved: Optional[PersistedState] = None):
        """
        Seed the session from the baseline and the saved state.

        Args:
            baseline: Shipped preset markers and zones
            saved: Saved state; read from the persistence manager when None
        """
        if saved is None and self.persistence is not None:
            saved = self.persistence.load()
        saved = saved or PersistedState(
            snap_enabled=self.snap_enabled, grid_size=self.grid_size
        )

        self.snap_enabled = saved.snap_enabled
        self.grid_size = saved.grid_size
        self.overlay.center = saved.overlay_center
        self.store.load(
            baseline.markers,
            baseline.zones,
            saved_presets=saved.preset_markers,
            saved_users=saved.user_markers,
            saved_zones=saved.zones,
            saved_custom=saved.custom_markers,
        )
        self.selection = None
        self.zone_drawer.suggest_number()

        self.events.emit(
            MapEvent(
                EventType.SESSION_LOADED,
                {
                    "num_presets": len(self.store.presets),
                    "num_users": len(self.store.users),
                    "num_zones": len(self.store.zones),
                },
            )
        )
        self.events.emit(MapEvent(EventType.MARKERS_RELOADED))

    def snapshot(self) -> PersistedState:
        """The persistable subset of the session state."""
        return PersistedState(
            user_markers=list(self.store.users),
            preset_markers=list(self.store.presets),
            zones=list(self.store.zones),
            custom_markers=self.store.custom_markers,
            snap_enabled=self.snap_enabled,
            grid_size=self.grid_size,
            overlay_center=self.overlay.center,
        )

    def persist(self):
        """Schedule a save; returns immediately."""
        if self.persistence is not None:
            self.persistence.save(self.snapshot())

    def close(self):
        """Write any pending save before the session goes away."""
        if self.persistence is not None:
            self.persistence.flush()

    def _on_state_mutated(self, event: MapEvent):
        if event.data.get("reverted"):
            return
        self.persist()

    def reset(self, scope: ResetScope = ResetScope.USER):
        """
        Discard user-authored state.

        ``ResetScope.USER`` drops user markers; ``ResetScope.ALL`` also drops
        preset edits and user zones, falling back to the baseline.
        """
        scope = ResetScope(scope)
        self.modes.set_editing(False)
        self.modes.set_zone_drawing(False)
        if scope == ResetScope.ALL:
            self.store.restore_baseline()
        else:
            self.store.clear_users()
        self.selection = None
        self.zone_drawer.suggest_number()
        if self.persistence is not None:
            self.persistence.reset(scope, self.snapshot())
        self.events.emit(MapEvent(EventType.SESSION_RESET, {"scope": scope}))
        self.events.emit(MapEvent(EventType.MARKERS_RELOADED))

    # Settings

    def snap(self, point: Point) -> Point:
        return snap(point, self.grid_size, self.snap_enabled)

    def set_snap(self, enabled: bool):
        self.snap_enabled = bool(enabled)
        self._emit_settings()

    def set_grid_size(self, grid_size: float):
        self.grid_size = float(grid_size)
        self._emit_settings()

    def _emit_settings(self):
        self.events.emit(
            MapEvent(
                EventType.SETTINGS_CHANGED,
                {"snap": self.snap_enabled, "grid_size": self.grid_size},
            )
        )

    def set_tool(self, tool: Optional[Union[str, MarkerType]], toggle: bool = True):
        """
        Pick the marker tool for add mode.

        Only circle and sprite can be authored. With ``toggle``, picking the
        active tool again turns it off.
        """
        picked = MarkerType.parse(tool) if tool else None
        if picked is not None and not picked.is_custom:
            picked = None
        self.tool = None if toggle and picked == self.tool else picked
        if self.tool == MarkerType.SPRITE and not self.current_sticker:
            self.current_sticker = self.stickers.default or ""
        self.events.emit(
            MapEvent(
                EventType.TOOL_CHANGED,
                {"tool": self.tool, "sticker": self.current_sticker},
            )
        )

    def _known_sticker(self, name: str) -> bool:
        try:
            self.stickers.require(name)
        except UnknownStickerError:
            self.notice(_("Unknown sticker: {name}").format(name=name))
            return False
        return True

    def set_sticker(self, name: str) -> bool:
        if not self._known_sticker(name):
            return False
        self.current_sticker = name
        return True

    # Markers

    def add_marker_at(self, point: Point) -> Optional[Marker]:
        """
        Place a user marker with the current tool.

        Args:
            point: Click position in world units; snapped here

        Returns:
            The new marker, or None if no marker could be placed
        """
        if self.tool is None:
            self.notice(_("Select Circle or Sticker before adding."))
            return None

        sprite = None
        if self.tool == MarkerType.SPRITE:
            sprite = self.current_sticker or self.stickers.default
            if not sprite:
                self.notice(_("Choose a sticker first."))
                return None
            if not self._known_sticker(sprite):
                return None
            self.current_sticker = sprite

        position = self.snap(point)
        marker = normalize_marker(
            {
                "id": self.store.unique_id("usr"),
                "type": self.tool.value,
                "label": self.current_label.strip() or default_label(self.tool, sprite),
                "lat": position.y,
                "lng": position.x,
                "color": self.current_color if self.tool == MarkerType.CIRCLE else None,
                "sprite": sprite,
            },
            MarkerSource.USER,
        )
        self.store.add(marker)
        self.ensure_visible_for(marker)
        self.events.emit(MapEvent(EventType.MARKER_ADDED, {"marker": marker}))
        return marker

    def select(self, marker_id: str) -> Optional[Marker]:
        marker = self.store.find(marker_id)
        if marker is None:
            return None
        if self.selection != marker_id:
            self.selection = marker_id
            self.events.emit(MapEvent(EventType.MARKER_SELECTED, {"marker": marker}))
        return marker

    def move_marker(self, marker_id: str, point: Point) -> Optional[Marker]:
        """
        Drop a dragged marker at ``point`` (snapped).

        A locked marker stays where it was; its visual is told to go back.
        """
        marker = self.store.find(marker_id)
        if marker is None:
            return None
        try:
            updated = self.store.move(marker_id, self.snap(point))
        except MarkerLockedError:
            self.notice(_("This marker is locked and cannot be moved."), marker_id=marker_id)
            self.events.emit(
                MapEvent(EventType.MARKER_UPDATED, {"marker": marker, "reverted": True})
            )
            return None
        self.events.emit(MapEvent(EventType.MARKER_UPDATED, {"marker": updated}))
        return updated

    def edit_marker(self, marker_id: str, **patch) -> Optional[Marker]:
        """
        Apply inspector edits to a marker.

        Only allowed in edit mode. Accepts the keys of
        :meth:`AnnotationStore.update`.
        """
        if not self.modes.state.is_editing:
            self.notice(_("Enable Edit mode to apply changes."))
            return None
        current = self.store.find(marker_id)
        if current is None:
            return None
        new_type = MarkerType.parse(patch["type"]) if "type" in patch else current.type
        if new_type == MarkerType.SPRITE:
            sprite = (
                patch.get("sprite")
                or current.sprite
                or self.current_sticker
                or self.stickers.default
            )
            if not sprite:
                self.notice(_("Choose a sticker first."))
                return None
            if not self._known_sticker(sprite):
                return None
            patch["sprite"] = sprite
        try:
            updated = self.store.update(marker_id, **patch)
        except MarkerLockedError:
            self.notice(_("This marker is locked and cannot be edited."), marker_id=marker_id)
            return None
        self.ensure_visible_for(updated)
        self.events.emit(MapEvent(EventType.MARKER_UPDATED, {"marker": updated}))
        return updated

    def delete_marker(self, marker_id: str, confirmed: bool = False) -> RemovalResult:
        """
        Delete a marker.

        Locked markers are never deleted from here. Deleting a preset marker
        first returns ``NEEDS_CONFIRMATION`` and emits
        ``CONFIRMATION_REQUIRED``; call again with ``confirmed=True`` once
        the user agreed.
        """
        marker = self.store.find(marker_id)
        if marker is None:
            return RemovalResult.NOT_FOUND
        if marker.locked:
            self.notice(_("This marker is locked and cannot be deleted."), marker_id=marker_id)
            return RemovalResult.LOCKED

        result = self.store.remove(marker_id, confirmed=confirmed)
        if result == RemovalResult.NEEDS_CONFIRMATION:
            self.events.emit(
                MapEvent(
                    EventType.CONFIRMATION_REQUIRED,
                    {
                        "action": "delete_marker",
                        "marker_id": marker_id,
                        "message": _(
                            "Delete preset marker? This will remove it from exports."
                        ),
                    },
                )
            )
        elif result == RemovalResult.REMOVED:
            if self.selection == marker_id:
                self.selection = None
            self.events.emit(
                MapEvent(EventType.MARKER_REMOVED, {"marker_id": marker_id, "marker": marker})
            )
        return result

    # Zones

    def edit_zone(
        self, zone_id: str, label: Optional[str] = None, number: Optional[int] = None
    ) -> Optional[Zone]:
        try:
            zone = self.store.update_zone(zone_id, label=label, number=number)
        except KeyError:
            return None
        except ValueError:
            self.notice(_("Enter a number between 1 and 99."))
            return None
        self.zone_drawer.suggest_number()
        self.events.emit(MapEvent(EventType.ZONE_UPDATED, {"zone": zone}))
        return zone

    def delete_zone(self, zone_id: str) -> Optional[Zone]:
        try:
            zone = self.store.remove_zone(zone_id)
        except KeyError:
            return None
        self.zone_drawer.suggest_number()
        self.events.emit(MapEvent(EventType.ZONE_REMOVED, {"zone": zone}))
        return zone

    # Radius overlay

    def place_overlay(self, default_center: Point) -> Point:
        """Put the overlay at ``default_center`` if it has no saved center."""
        return self.overlay.ensure(default_center)

    def recenter_overlay(self, point: Point) -> Point:
        return self.overlay.recenter(point)

    def drag_overlay(self, point: Point) -> Point:
        return self.overlay.drag_center(point, self.grid_size, self.snap_enabled)

    # Layer visibility

    def toggle_layer(self, key: str) -> bool:
        if key not in self.visibility:
            raise KeyError(key)
        self.visibility[key] = not self.visibility[key]
        self.events.emit(
            MapEvent(EventType.LAYER_TOGGLED, {"layer": key, "visible": self.visibility[key]})
        )
        return self.visibility[key]

    def ensure_visible_for(self, marker: Marker):
        """Turn on the layers a freshly placed or edited marker lives in."""
        keys = [TYPE_LAYERS[marker.type]]
        if marker.source == MarkerSource.USER:
            keys.append("users")
        for key in keys:
            if not self.visibility[key]:
                self.visibility[key] = True
                self.events.emit(
                    MapEvent(EventType.LAYER_TOGGLED, {"layer": key, "visible": True})
                )

    # Export / import

    def export_json(self, scope: ExportScope = ExportScope.ALL) -> str:
        """Full export: sorted markers of ``scope`` plus all zones."""
        return dump_json(self.store.collect_for_export(scope))

    def user_export_json(self) -> str:
        """Portable export of the user's circle and sticker markers."""
        return dump_json(self.store.build_user_export())

    def import_markers(self, payload: Union[str, bytes, Path, list, dict]) -> bool:
        """
        Replace the user markers with the contents of an export.

        Args:
            payload: JSON text, decoded JSON, or a path to a JSON file

        Returns:
            True on success; on failure nothing changes and a notice is emitted
        """
        try:
            if isinstance(payload, Path):
                payload = payload.read_text(encoding="utf-8")
            num_markers, num_zones = self.store.import_payload(payload)
        except (ImportFailedError, OSError) as e:
            logger.warning(f"Import failed: {e}")
            self.notice(_("Import failed. Please provide a valid markers JSON."), error=str(e))
            return False

        self.selection = None
        self.zone_drawer.suggest_number()
        self.events.emit(MapEvent(EventType.MARKERS_RELOADED))
        self.events.emit(
            MapEvent(
                EventType.IMPORT_COMPLETED,
                {"num_markers": num_markers, "num_zones": num_zones},
            )
        )
        return True

    # Notices

    def notice(self, message: str, **data):
        """Tell the user something went wrong; no state changes."""
        logger.info(message)
        self.events.emit(MapEvent(EventType.NOTICE, {"message": message, **data}))

    def get_visualization_data(self) -> Dict[str, Any]:
        """
        Get data needed to draw the whole map.

        Returns:
            Dictionary with visualization data
        """
        return {
            "markers": self.store.markers,
            "zones": self.store.zones,
            "zone_preview": list(self.zone_drawer.points),
            "overlay_center": self.overlay.center,
            "overlay_radii": self.overlay.radii,
            "overlay_visible": list(self.overlay.visible),
            "measurement": self.modes.measurement.last,
            "mode": self.modes.mode,
            "deleting": self.modes.deleting,
            "selection": self.selection,
            "visibility": dict(self.visibility),
        }
