"""
Test fixtures and utilities for lumiose_map tests.

Provides reusable fixtures for baselines, sessions, storage and a manual
timer so debounced saves can be driven deterministically.
"""

import json
from unittest.mock import Mock

import pytest
from easydict import EasyDict as edict

from lumiose_map.core.annotation.state import MarkerSource, Point, normalize_marker, normalize_zone
from lumiose_map.core.annotation.stickers import StickerCatalog
from lumiose_map.core.persistence import Baseline, MemoryStore, PersistenceManager
from lumiose_map.utils.config import STORAGE_KEY, default_cfg


class ManualTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled:
            self.function()


class ManualTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function):
        timer = ManualTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def live(self):
        return [t for t in self.timers if t.started and not t.cancelled]

    def fire_all(self):
        for timer in list(self.live):
            timer.fire()


BASELINE_DATA = {
    "markers": [
        {"id": "b1", "type": "bench", "label": "Bench 1", "lat": 10, "lng": 20},
        {"id": "l1", "type": "ladder", "label": "Ladder 1", "lat": 30, "lng": 40},
        {"id": "e1", "type": "elevator", "lat": 50, "lng": 60, "floor": 2},
        {"id": "s1", "type": "shiny", "lat": 1, "lng": 1},
    ],
    "zones": [
        {
            "id": "zone-base",
            "label": "Plaza",
            "number": 1,
            "points": [{"lat": 0, "lng": 0}, {"lat": 0, "lng": 10}, {"lat": 10, "lng": 10}],
        }
    ],
}

STICKER_NAMES = ["pikachu.shiny.png", "eevee.shiny.png", "mr-mime.shiny.png"]


@pytest.fixture
def baseline_data():
    """Raw baseline document, as shipped next to the map."""
    return json.loads(json.dumps(BASELINE_DATA))


@pytest.fixture
def baseline():
    """Normalized baseline with three presets and one zone."""
    return Baseline(
        markers=[
            normalize_marker(m, MarkerSource.PRESET)
            for m in BASELINE_DATA["markers"]
            if m["type"] != "shiny"
        ],
        zones=[normalize_zone(z) for z in BASELINE_DATA["zones"]],
    )


@pytest.fixture
def stickers():
    return StickerCatalog(STICKER_NAMES, prefix="assets/icons/pkmn_stickers/")


@pytest.fixture
def cfg():
    """Default configuration, independent of the environment."""
    return default_cfg()


@pytest.fixture
def timer_factory():
    return ManualTimerFactory()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def persistence(memory_store, timer_factory):
    return PersistenceManager(memory_store, key=STORAGE_KEY, timer_factory=timer_factory)


@pytest.fixture
def map_session(cfg, persistence, stickers, baseline):
    """A loaded session backed by an in-memory store."""
    from lumiose_map.core.annotation.session import MapSession

    session = MapSession(cfg, persistence=persistence, stickers=stickers)
    session.load(baseline)
    return session


@pytest.fixture
def saved_record(memory_store):
    """Read back what the session last wrote."""

    def read():
        raw = memory_store.get(STORAGE_KEY)
        return None if raw is None else edict(json.loads(raw))

    return read


@pytest.fixture
def mock_surface():
    """Render surface double; every placed marker gets a fresh handle."""
    surface = Mock()
    counter = iter(range(1, 10_000))
    surface.place_marker = Mock(side_effect=lambda marker, draggable: f"visual-{next(counter)}")
    surface.viewport_center = Mock(return_value=Point(500.0, 400.0))
    return surface


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end workflows on real files")
