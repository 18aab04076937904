"""
Data model for map annotations.

Contains the entity types (markers, zones) and the explicit constructors that
turn loosely-typed records (baseline files, saved state, imports) into fully
typed values.

External records spell positions as ``lat``/``lng``; internally a position is
a :class:`Point` where ``x`` is ``lng`` and ``y`` is ``lat``.
"""

import math
import secrets
import string
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from lumiose_map.utils.config import DEFAULT_CIRCLE_COLOR

_ID_ALPHABET = string.digits + string.ascii_lowercase

# Keys with a typed home on Marker; anything else goes to extras
_MARKER_KEYS = {"id", "type", "label", "lat", "lng", "color", "sprite", "source", "locked"}


class MarkerType(str, Enum):
    BENCH = "bench"
    LADDER = "ladder"
    ELEVATOR = "elevator"
    CIRCLE = "circle"
    SPRITE = "sprite"

    @classmethod
    def parse(cls, value) -> "MarkerType":
        """Parse a type string, falling back to bench for anything unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.BENCH

    @property
    def is_custom(self) -> bool:
        """Circle and sprite markers are the user-authorable types."""
        return self in (MarkerType.CIRCLE, MarkerType.SPRITE)


class MarkerSource(str, Enum):
    PRESET = "preset"
    USER = "user"


@dataclass(frozen=True)
class Point:
    """A position in world units."""

    x: float
    y: float

    def to_dict(self):
        return {"lat": self.y, "lng": self.x}

    @classmethod
    def from_dict(cls, data: Mapping) -> "Point":
        return cls(x=to_units(data.get("lng")), y=to_units(data.get("lat")))


def to_units(value) -> float:
    """Coerce a coordinate to float; invalid or missing values become 0."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def new_id(prefix: str = "m") -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"{prefix}-{suffix}"


def id_prefix_for(source: MarkerSource) -> str:
    return "pre" if source == MarkerSource.PRESET else "usr"


def format_sticker_label(name: Optional[str]) -> str:
    """Turn a sticker file name into a display label.

    ``"pikachu_shiny.png"`` becomes ``"Pikachu Shiny"``.
    """
    if not name:
        return "Sticker marker"
    trimmed = name.replace(".png", "", 1).replace("-", " ").replace("_", " ")
    words = [w for w in trimmed.split(" ") if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


def default_label(marker_type: MarkerType, sprite: Optional[str] = None) -> str:
    if marker_type == MarkerType.SPRITE:
        return format_sticker_label(sprite)
    return f"{marker_type.value} marker"


@dataclass
class Marker:
    """A typed point marker."""

    id: str
    type: MarkerType
    source: MarkerSource
    label: str
    position: Point
    color: Optional[str] = None
    sprite: Optional[str] = None
    locked: bool = False
    extras: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_custom(self) -> bool:
        return self.type.is_custom

    def moved_to(self, position: Point) -> "Marker":
        return replace(self, position=position)

    def to_record(self, include_source: bool = False) -> Dict[str, Any]:
        """Serialize to the external marker schema.

        ``source`` is not part of the portable schema; it is only written
        to the durable record where collections are already split by source.
        """
        record: Dict[str, Any] = dict(self.extras)
        record.update(
            {
                "id": self.id,
                "type": self.type.value,
                "label": self.label,
                "lat": self.position.y,
                "lng": self.position.x,
            }
        )
        if self.color is not None:
            record["color"] = self.color
        if self.sprite is not None:
            record["sprite"] = self.sprite
        if self.locked:
            record["locked"] = True
        if include_source:
            record["source"] = self.source.value
        return record


def normalize_marker(raw: Mapping, source: MarkerSource) -> Marker:
    """
    Build a legal Marker from a possibly hand-edited record.

    Never fails for a mapping input: missing or malformed fields are
    defaulted rather than rejected.

    Args:
        raw: Marker record in the external schema
        source: Collection the record came from

    Returns:
        Normalized marker
    """
    source = MarkerSource(source)
    marker_type = MarkerType.parse(raw.get("type") or MarkerType.BENCH.value)

    sprite = None
    if marker_type == MarkerType.SPRITE:
        sprite = str(raw.get("sprite") or raw.get("spriteName") or "")

    color = None
    if marker_type == MarkerType.CIRCLE:
        color = str(raw.get("color") or DEFAULT_CIRCLE_COLOR)

    label = raw.get("label")
    label = str(label).strip() if label is not None else ""
    if not label:
        label = default_label(marker_type, sprite)

    return Marker(
        id=str(raw.get("id") or new_id(id_prefix_for(source))),
        type=marker_type,
        source=source,
        label=label,
        position=Point(x=to_units(raw.get("lng")), y=to_units(raw.get("lat"))),
        color=color,
        sprite=sprite,
        locked=bool(raw.get("locked")),
        extras={
            k: v
            for k, v in raw.items()
            if k not in _MARKER_KEYS and k != "spriteName"
        },
    )


@dataclass
class Zone:
    """A user-defined closed polygon with a numeric badge."""

    id: str
    label: str
    number: int
    points: List[Point] = field(default_factory=list)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "number": self.number,
            "points": [p.to_dict() for p in self.points],
        }


MIN_ZONE_POINTS = 3
MIN_ZONE_NUMBER = 1
MAX_ZONE_NUMBER = 99


def clamp_zone_number(value, default: int = MIN_ZONE_NUMBER) -> int:
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return default
    if number < MIN_ZONE_NUMBER:
        return default
    return min(number, MAX_ZONE_NUMBER)


def normalize_zone(raw: Mapping) -> Zone:
    """
    Build a Zone from a record.

    The minimum vertex count is not enforced here; callers use
    :func:`is_valid_zone` to drop short zones.
    """
    number = clamp_zone_number(raw.get("number"))
    label = raw.get("label") or raw.get("name") or ""
    label = str(label).strip() or f"Zone {number}"
    points = raw.get("points")
    if not isinstance(points, (list, tuple)):
        points = []
    return Zone(
        id=str(raw.get("id") or new_id("zone")),
        label=label,
        number=number,
        points=[Point.from_dict(p) for p in points if isinstance(p, Mapping)],
    )


def is_valid_zone(zone: Zone) -> bool:
    return len(zone.points) >= MIN_ZONE_POINTS
