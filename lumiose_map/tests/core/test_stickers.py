"""Tests for the sticker catalog."""

import pytest

from lumiose_map.core.annotation.errors import UnknownStickerError
from lumiose_map.core.annotation.stickers import StickerCatalog


class TestStickerCatalog:
    def test_sorted_with_default(self, stickers):
        assert list(stickers) == ["eevee.shiny.png", "mr-mime.shiny.png", "pikachu.shiny.png"]
        assert stickers.default == "eevee.shiny.png"
        assert "pikachu.shiny.png" in stickers

    def test_empty_catalog(self):
        catalog = StickerCatalog()
        assert len(catalog) == 0
        assert catalog.default is None
        assert catalog.path_for("") == ""

    def test_require(self, stickers):
        assert stickers.require("eevee.shiny.png") == "eevee.shiny.png"
        with pytest.raises(UnknownStickerError) as excinfo:
            stickers.require("missingno.png")
        assert excinfo.value.name == "missingno.png"

    def test_names_for_display(self, stickers):
        assert StickerCatalog.display_name("mr-mime.shiny.png") == "mr mime"
        assert StickerCatalog.display_name("ditto.png") == "ditto"
        assert StickerCatalog.format_label("mr-mime.png") == "Mr Mime"
        assert stickers.path_for("eevee.shiny.png") == "assets/icons/pkmn_stickers/eevee.shiny.png"
