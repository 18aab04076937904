"""
Retrieval of the shipped baseline dataset and the sticker catalog.

Both are fetched once at startup, over HTTP(S) with httpx or from a local
file. Any failure degrades to an empty result: the editor still starts,
with zero presets or zero stickers.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import httpx

from ..annotation.state import (
    Marker,
    MarkerSource,
    Zone,
    is_valid_zone,
    normalize_marker,
    normalize_zone,
)
from ..annotation.stickers import StickerCatalog
from ..annotation.store import filter_overlay_records

logger = logging.getLogger(__name__)


@dataclass
class Baseline:
    """Preset markers and zones shipped with the map."""

    markers: List[Marker] = field(default_factory=list)
    zones: List[Zone] = field(default_factory=list)


def is_url(source: Union[str, Path]) -> bool:
    return str(source).startswith(("http://", "https://"))


def fetch_json(
    source: Union[str, Path],
    timeout: float = 10.0,
    client: Optional[httpx.Client] = None,
) -> Any:
    """
    Fetch and decode a JSON document from a URL or a local path.

    Raises:
        httpx.HTTPError: On network or HTTP status errors
        OSError: If a local file cannot be read
        ValueError: If the content is not valid JSON
    """
    if is_url(source):
        if client is not None:
            response = client.get(str(source), timeout=timeout)
        else:
            response = httpx.get(str(source), timeout=timeout, follow_redirects=True)
        response.raise_for_status()
        return response.json()
    return json.loads(Path(source).read_text(encoding="utf-8"))


def parse_baseline(data: Any) -> Baseline:
    """
    Normalize a baseline document.

    Accepts a bare list of marker records or a ``{markers, zones}`` object.
    Legacy overlay entries are dropped, as are zones with fewer than three
    points.
    """
    zones_raw: List[Any] = []
    if isinstance(data, list):
        markers_raw = data
    elif isinstance(data, dict):
        markers_raw = data.get("markers") or []
        zones_raw = data.get("zones") or []
    else:
        markers_raw = []

    markers = [
        normalize_marker(m, MarkerSource.PRESET)
        for m in filter_overlay_records(markers_raw)
    ]
    zones = [
        z
        for z in (normalize_zone(raw) for raw in zones_raw if isinstance(raw, dict))
        if is_valid_zone(z)
    ]
    return Baseline(markers=markers, zones=zones)


def load_baseline(
    source: Optional[Union[str, Path]],
    timeout: float = 10.0,
    client: Optional[httpx.Client] = None,
) -> Baseline:
    if not source:
        return Baseline()
    try:
        data = fetch_json(source, timeout=timeout, client=client)
    except (httpx.HTTPError, OSError, ValueError) as e:
        logger.warning(f"Failed to fetch baseline dataset from {source}: {e}")
        return Baseline()
    baseline = parse_baseline(data)
    logger.info(
        f"Loaded baseline with {len(baseline.markers)} markers and "
        f"{len(baseline.zones)} zones from {source}"
    )
    return baseline


def load_sticker_catalog(
    source: Optional[Union[str, Path]],
    prefix: str = "",
    timeout: float = 10.0,
    client: Optional[httpx.Client] = None,
) -> StickerCatalog:
    if not source:
        return StickerCatalog(prefix=prefix)
    try:
        data = fetch_json(source, timeout=timeout, client=client)
    except (httpx.HTTPError, OSError, ValueError) as e:
        logger.warning(f"Failed to load sticker list from {source}: {e}")
        return StickerCatalog(prefix=prefix)
    if not isinstance(data, list):
        logger.warning(f"Sticker list at {source} is not a list, ignoring it")
        return StickerCatalog(prefix=prefix)
    return StickerCatalog([n for n in data if isinstance(n, str)], prefix=prefix)
