"""Helpers shared by the subcommands."""

import logging

from lumiose_map.core.annotation.session import MapSession
from lumiose_map.utils.config import load_cfg

logger = logging.getLogger(__name__)


def config_from_args(args):
    """Environment configuration with the command line flags applied on top."""
    cfg = load_cfg()
    if getattr(args, "baseline", None):
        cfg.sources.baseline = args.baseline
    if getattr(args, "stickers", None):
        cfg.sources.stickers = args.stickers
    if getattr(args, "storage_dir", None):
        cfg.storage.dir = str(args.storage_dir)
    return cfg


def open_session(args) -> MapSession:
    cfg = config_from_args(args)
    logger.debug(f"Opening session with storage dir {cfg.storage.dir or '(default)'}")
    return MapSession.start(cfg)
