"""
Canonical marker and zone collections.

The store exclusively owns every entity. It raises on rejected mutations;
turning those into user notices is the session's job.
"""

import copy
import json
import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import (
    DuplicateIdError,
    ImportFailedError,
    MarkerLockedError,
    MarkerNotFoundError,
)
from .state import (
    Marker,
    MarkerSource,
    MarkerType,
    Point,
    Zone,
    id_prefix_for,
    is_valid_zone,
    new_id,
    normalize_marker,
    normalize_zone,
    MAX_ZONE_NUMBER,
    MIN_ZONE_NUMBER,
)

logger = logging.getLogger(__name__)

# Overlay data from legacy files; handled by the radius overlay, never a Marker
LEGACY_OVERLAY_TYPE = "shiny"


class ExportScope(str, Enum):
    ALL = "all"
    PRESET = "preset"
    USER = "user"


class RemovalResult(Enum):
    REMOVED = "removed"
    LOCKED = "locked"
    NEEDS_CONFIRMATION = "needs_confirmation"
    NOT_FOUND = "not_found"


def filter_overlay_records(records) -> List[Mapping]:
    """Drop legacy overlay entries and anything that is not a record."""
    if not isinstance(records, (list, tuple)):
        return []
    return [
        r
        for r in records
        if isinstance(r, Mapping) and r.get("type") != LEGACY_OVERLAY_TYPE
    ]


def merge_on_load(
    baseline_presets: Sequence[Marker],
    saved_presets: Sequence[Marker],
    saved_users: Sequence[Marker],
) -> Tuple[List[Marker], List[Marker]]:
    """
    Reconcile the shipped baseline with previously saved edits.

    A saved preset replaces the baseline preset with the same id. Baseline
    order is kept; saved presets whose id is gone from the baseline are
    appended in saved order. User markers come verbatim from the saved set.

    Args:
        baseline_presets: Presets from the baseline dataset
        saved_presets: Presets from the durable record (possibly edited)
        saved_users: User markers from the durable record

    Returns:
        (presets, users)
    """
    saved_by_id: Dict[str, Marker] = {}
    for marker in saved_presets:
        saved_by_id.setdefault(marker.id, marker)

    merged: List[Marker] = []
    seen = set()
    for marker in baseline_presets:
        if marker.id in seen:
            continue
        seen.add(marker.id)
        merged.append(saved_by_id.get(marker.id, marker))

    for marker in saved_presets:
        if marker.id not in seen:
            seen.add(marker.id)
            merged.append(marker)

    users: List[Marker] = []
    for marker in saved_users:
        if marker.id in seen:
            # Keep ids unique across presets and users
            logger.warning(f"Dropping user marker {marker.id} shadowing a preset")
            continue
        seen.add(marker.id)
        users.append(marker)

    logger.debug(
        f"Merged {len(baseline_presets)} baseline presets with "
        f"{len(saved_presets)} saved presets into {len(merged)}"
    )
    return merged, users


def merge_zones(baseline_zones: Sequence[Zone], saved_zones: Sequence[Zone]) -> List[Zone]:
    """Same precedence as :func:`merge_on_load`, keyed by zone id."""
    saved_by_id: Dict[str, Zone] = {}
    for zone in saved_zones:
        saved_by_id.setdefault(zone.id, zone)

    merged: List[Zone] = []
    seen = set()
    for zone in list(baseline_zones) + list(saved_zones):
        if zone.id in seen:
            continue
        seen.add(zone.id)
        merged.append(saved_by_id.get(zone.id, zone))
    return [z for z in merged if is_valid_zone(z)]


def dump_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


class AnnotationStore:
    """
    Owns the preset markers, user markers and zones of a session.

    Besides the live collections it keeps the baseline presets and zones
    as loaded, so a full reset can fall back to them.
    """

    def __init__(self):
        self.presets: List[Marker] = []
        self.users: List[Marker] = []
        self.zones: List[Zone] = []
        self.baseline_presets: List[Marker] = []
        self.baseline_zones: List[Zone] = []
        # Ids of user circle/sprite markers, in authoring order
        self._custom_ids: List[str] = []
        self._index: Dict[str, Marker] = {}

    # Lookup

    @property
    def markers(self) -> List[Marker]:
        return self.presets + self.users

    @property
    def custom_markers(self) -> List[Marker]:
        return [self._index[i] for i in self._custom_ids if i in self._index]

    def __len__(self):
        return len(self._index)

    def __contains__(self, marker_id) -> bool:
        return marker_id in self._index

    def find(self, marker_id: str) -> Optional[Marker]:
        return self._index.get(marker_id)

    def get(self, marker_id: str) -> Marker:
        try:
            return self._index[marker_id]
        except KeyError:
            raise MarkerNotFoundError(marker_id) from None

    def unique_id(self, prefix: str) -> str:
        taken = set(self._index) | {z.id for z in self.zones}
        while True:
            candidate = new_id(prefix)
            if candidate not in taken:
                return candidate

    def _collection(self, source: MarkerSource) -> List[Marker]:
        return self.presets if source == MarkerSource.PRESET else self.users

    # Markers

    def add(self, marker: Marker) -> Marker:
        """Append a marker to the collection matching its source."""
        if marker.id in self._index:
            raise DuplicateIdError(f"Marker id {marker.id!r} already exists")
        self._collection(marker.source).append(marker)
        self._index[marker.id] = marker
        if marker.source == MarkerSource.USER and marker.is_custom:
            self._custom_ids.append(marker.id)
        return marker

    def update(self, marker_id: str, **patch) -> Marker:
        """
        Apply an edit to a marker.

        Accepted keys: ``type``, ``label``, ``position``, ``color``,
        ``sprite``, ``locked``. The result is re-normalized, so fields that
        do not fit the (possibly new) type are dropped.

        Raises:
            MarkerNotFoundError: If no marker has this id
            MarkerLockedError: If the marker is locked and the patch does
                more than change the lock itself
        """
        current = self.get(marker_id)
        if current.locked and set(patch) - {"locked"}:
            raise MarkerLockedError(marker_id)

        record = current.to_record()
        position = patch.pop("position", None)
        if position is not None:
            record["lat"], record["lng"] = position.y, position.x
        if "type" in patch:
            record["type"] = MarkerType.parse(patch.pop("type")).value
        for key, value in patch.items():
            if value is None:
                record.pop(key, None)
            else:
                record[key] = value
        updated = normalize_marker(record, current.source)

        collection = self._collection(current.source)
        collection[collection.index(current)] = updated
        self._index[marker_id] = updated
        self._track_custom(updated)
        return updated

    def move(self, marker_id: str, position: Point) -> Marker:
        return self.update(marker_id, position=position)

    def remove(self, marker_id: str, confirmed: bool = False) -> RemovalResult:
        """
        Remove a marker.

        Locked markers and preset markers are only removed when the caller
        has confirmed the intent; otherwise nothing changes and the result
        says why.
        """
        marker = self.find(marker_id)
        if marker is None:
            return RemovalResult.NOT_FOUND
        if not confirmed:
            if marker.locked:
                return RemovalResult.LOCKED
            if marker.source == MarkerSource.PRESET:
                return RemovalResult.NEEDS_CONFIRMATION
        self._collection(marker.source).remove(marker)
        del self._index[marker_id]
        if marker_id in self._custom_ids:
            self._custom_ids.remove(marker_id)
        return RemovalResult.REMOVED

    def _track_custom(self, marker: Marker):
        tracked = marker.id in self._custom_ids
        wanted = marker.source == MarkerSource.USER and marker.is_custom
        if wanted and not tracked:
            self._custom_ids.append(marker.id)
        elif tracked and not wanted:
            self._custom_ids.remove(marker.id)

    # Zones

    def get_zone(self, zone_id: str) -> Zone:
        for zone in self.zones:
            if zone.id == zone_id:
                return zone
        raise KeyError(zone_id)

    def next_zone_number(self) -> int:
        """One more than the highest zone number, capped at 99."""
        highest = max((z.number for z in self.zones), default=0)
        return min(highest + 1, MAX_ZONE_NUMBER)

    def add_zone(self, zone: Zone) -> Zone:
        if any(z.id == zone.id for z in self.zones):
            raise DuplicateIdError(f"Zone id {zone.id!r} already exists")
        self.zones.append(zone)
        return zone

    def update_zone(
        self, zone_id: str, label: Optional[str] = None, number: Optional[int] = None
    ) -> Zone:
        zone = self.get_zone(zone_id)
        if number is not None:
            if not MIN_ZONE_NUMBER <= int(number) <= MAX_ZONE_NUMBER:
                raise ValueError(
                    f"Zone number must be between {MIN_ZONE_NUMBER} and {MAX_ZONE_NUMBER}"
                )
            zone.number = int(number)
        if label is not None and label.strip():
            zone.label = label.strip()
        return zone

    def remove_zone(self, zone_id: str) -> Zone:
        zone = self.get_zone(zone_id)
        self.zones.remove(zone)
        return zone

    # Bulk state

    def replace_all(
        self,
        presets: Iterable[Marker],
        users: Iterable[Marker],
        zones: Iterable[Zone] = (),
        custom_ids: Optional[Iterable[str]] = None,
    ):
        """Swap in new collections, rebuilding the id index."""
        self.presets, self.users, self.zones = [], [], list(zones)
        self._index.clear()
        self._custom_ids = []
        for marker in list(presets) + list(users):
            self.add(marker)
        if custom_ids is not None:
            user_custom = {m.id for m in self.users if m.is_custom}
            ordered = [i for i in custom_ids if i in user_custom]
            ordered += [i for i in self._custom_ids if i not in ordered]
            self._custom_ids = ordered

    def load(
        self,
        baseline_presets: Sequence[Marker],
        baseline_zones: Sequence[Zone] = (),
        saved_presets: Sequence[Marker] = (),
        saved_users: Sequence[Marker] = (),
        saved_zones: Sequence[Zone] = (),
        saved_custom: Sequence[Marker] = (),
    ):
        """Seed the store from the baseline and the durable record."""
        self.baseline_presets = copy.deepcopy(list(baseline_presets))
        self.baseline_zones = copy.deepcopy([z for z in baseline_zones if is_valid_zone(z)])
        presets, users = merge_on_load(baseline_presets, saved_presets, saved_users)

        # Custom markers missing from the user list are adopted, not lost
        known = {m.id for m in presets} | {m.id for m in users}
        for marker in saved_custom:
            if marker.id not in known:
                users.append(marker)
                known.add(marker.id)

        custom_ids = [m.id for m in saved_custom] if saved_custom else None
        self.replace_all(
            presets, users, merge_zones(copy.deepcopy(self.baseline_zones), saved_zones), custom_ids
        )
        logger.info(
            f"Loaded {len(self.presets)} presets, {len(self.users)} user markers, "
            f"{len(self.zones)} zones"
        )

    def clear_users(self):
        """Discard user and custom markers."""
        self.replace_all(self.presets, [], self.zones)

    def restore_baseline(self):
        """Discard preset edits, user markers and user zones."""
        self.replace_all(
            copy.deepcopy(self.baseline_presets), [], copy.deepcopy(self.baseline_zones)
        )

    # Export / import

    def collect_for_export(self, scope: ExportScope = ExportScope.ALL) -> Dict[str, Any]:
        """
        Build the full export payload.

        Markers are sorted by ``(type, label)`` so that exporting unchanged
        data twice gives identical output.
        """
        scope = ExportScope(scope)
        markers: List[Marker] = []
        if scope in (ExportScope.ALL, ExportScope.PRESET):
            markers.extend(self.presets)
        if scope in (ExportScope.ALL, ExportScope.USER):
            markers.extend(m for m in self.users if not m.locked and m.is_custom)
        markers.sort(key=lambda m: (m.type.value, m.label))
        return {
            "markers": [m.to_record() for m in markers],
            "zones": [z.to_record() for z in self.zones],
        }

    def build_user_export(self) -> Dict[str, Any]:
        """Portable export of just the user's circle/sprite markers."""
        return {"markers": [m.to_record() for m in self.custom_markers]}

    def import_payload(self, payload) -> Tuple[int, Optional[int]]:
        """
        Replace the user markers with an imported set.

        Args:
            payload: JSON text, or an already decoded list/dict

        Returns:
            (number of imported markers, number of imported zones or None)

        Raises:
            ImportFailedError: If the payload is unparsable or has an invalid
                structure; the store is left untouched
        """
        markers, zones = parse_import(payload)
        taken = {m.id for m in self.presets}
        imported: List[Marker] = []
        for raw in markers:
            marker = normalize_marker(
                {**raw, "source": MarkerSource.USER.value, "locked": False},
                MarkerSource.USER,
            )
            if not marker.is_custom:
                continue
            while marker.id in taken:
                marker.id = new_id(id_prefix_for(MarkerSource.USER))
            taken.add(marker.id)
            imported.append(marker)

        new_zones = self.zones
        if zones is not None:
            new_zones = [z for z in (normalize_zone(z) for z in zones) if is_valid_zone(z)]

        self.replace_all(self.presets, imported, new_zones)
        logger.info(f"Imported {len(imported)} markers")
        return len(imported), (len(new_zones) if zones is not None else None)


def parse_import(payload) -> Tuple[List[Mapping], Optional[List[Mapping]]]:
    """
    Validate the structure of an import payload.

    Returns:
        (marker records, zone records or None when the payload has none)
    """
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise ImportFailedError(f"Invalid JSON: {e}") from e

    zones = None
    if isinstance(payload, list):
        markers = payload
    elif isinstance(payload, dict):
        markers = payload.get("markers")
        if markers is None:
            markers = []
        zones = payload.get("zones")
    else:
        raise ImportFailedError("Expected a list of markers or a {markers, zones} object")

    if not isinstance(markers, list):
        raise ImportFailedError("'markers' must be a list")
    if zones is not None and not isinstance(zones, list):
        raise ImportFailedError("'zones' must be a list")
    for entry in markers + (zones or []):
        if not isinstance(entry, dict):
            raise ImportFailedError("Every marker and zone must be an object")
    return markers, zones
