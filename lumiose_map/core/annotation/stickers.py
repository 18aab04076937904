"""Sticker sprites available to sprite markers."""

from typing import Iterable, List, Optional

from .errors import UnknownStickerError
from .state import format_sticker_label


class StickerCatalog:
    """
    Sorted list of known sticker file names.

    An empty catalog is legal: the sprite tool is then unusable, nothing
    else is affected.
    """

    def __init__(self, names: Iterable[str] = (), prefix: str = ""):
        self.names: List[str] = sorted(str(n) for n in names if n)
        self.prefix = prefix

    def __len__(self):
        return len(self.names)

    def __iter__(self):
        return iter(self.names)

    def __contains__(self, name) -> bool:
        return name in self.names

    def require(self, name: str) -> str:
        """Return ``name`` if it is in the catalog."""
        if name not in self.names:
            raise UnknownStickerError(name)
        return name

    @property
    def default(self) -> Optional[str]:
        return self.names[0] if self.names else None

    def path_for(self, name: str) -> str:
        return f"{self.prefix}{name}" if name else ""

    @staticmethod
    def display_name(name: str) -> str:
        """Name shown in sticker pickers."""
        stem = name.replace(".shiny.png", "")
        if stem.endswith(".png"):
            stem = stem[: -len(".png")]
        return stem.replace("-", " ").replace("_", " ")

    @staticmethod
    def format_label(name: str) -> str:
        return format_sticker_label(name)
