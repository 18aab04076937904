"""
Default configuration for a map session.

Values can be overridden from the environment with ``LUMIOSE_*`` variables,
see :func:`lumiose_map.utils.env.load_cfg_from_env`.
"""

import os
from typing import Dict, Optional

from easydict import EasyDict as edict

from .env import load_cfg_from_env

# Locked scale for ZA_Lumiose_City_Night.png
FIXED_PIXELS_PER_UNIT = 3.2689

# Radius overlay rings, diameters in world units (inner, outer)
RING_DIAMETERS_UNITS = (50, 70)

STORAGE_KEY = "lumiose-map-state-v1"
DEFAULT_CIRCLE_COLOR = "#4fc3f7"


def default_cfg() -> edict:
    """Build a fresh configuration tree with the built-in defaults."""
    return edict(
        storage=edict(
            key=STORAGE_KEY,
            dir="",  # empty: platformdirs user data dir
        ),
        sources=edict(
            baseline="markers.json",
            stickers="assets/icons/pkmn_stickers/stickers.json",
            sticker_prefix="assets/icons/pkmn_stickers/",
            timeout=10.0,
        ),
        geometry=edict(
            pixels_per_unit=FIXED_PIXELS_PER_UNIT,
            ring_diameters=list(RING_DIAMETERS_UNITS),
        ),
        editor=edict(
            snap=True,
            grid_size=1.0,
            circle_color=DEFAULT_CIRCLE_COLOR,
            save_debounce=0.15,
        ),
    )


def load_cfg(env: Optional[Dict[str, str]] = None) -> edict:
    """Defaults overlaid with ``LUMIOSE_*`` environment variables."""
    if env is None:
        env = dict(os.environ)
    return load_cfg_from_env(default_cfg(), env)
