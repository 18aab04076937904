"""
End-to-end integration tests.

Tests complete workflows from start to finish, against real files.
"""

import json

import pytest

from lumiose_map.core.annotation.session import MapSession
from lumiose_map.core.annotation.state import Point
from lumiose_map.core.persistence import JsonFileStore, ResetScope

pytestmark = pytest.mark.integration


@pytest.fixture
def workspace(tmp_path, baseline_data, cfg):
    baseline_path = tmp_path / "markers.json"
    baseline_path.write_text(json.dumps(baseline_data))
    stickers_path = tmp_path / "stickers.json"
    stickers_path.write_text(json.dumps(["pikachu.shiny.png", "eevee.shiny.png"]))

    cfg.sources.baseline = str(baseline_path)
    cfg.sources.stickers = str(stickers_path)
    cfg.storage.dir = str(tmp_path / "state")
    return cfg


class TestEditingWorkflow:
    """Test complete editing workflow."""

    def test_edit_save_and_reload(self, workspace):
        session = MapSession.start(workspace)
        assert len(session.store.presets) == 3
        assert len(session.stickers) == 2

        session.place_overlay(Point(500, 400))
        session.set_grid_size(5)
        session.set_tool("circle")
        session.modes.set_adding(True)
        circle = session.modes.handle_position(Point(12, 13))
        session.set_tool("sprite")
        sprite = session.modes.handle_position(Point(40, 40))

        session.modes.set_editing(True)
        session.modes.handle_marker_drag_end("b1", Point(26, 14))

        session.modes.set_zone_drawing(True)
        for p in [Point(100, 100), Point(150, 100), Point(150, 150), Point(101, 101)]:
            session.modes.handle_position(p)
        session.close()

        reloaded = MapSession.start(workspace)
        assert reloaded.grid_size == 5
        assert reloaded.overlay.center == Point(500, 400)
        assert reloaded.store.get("b1").position == Point(25, 15)
        assert [m.id for m in reloaded.store.custom_markers] == [circle.id, sprite.id]
        assert reloaded.store.get(circle.id).position == Point(10, 15)
        assert len(reloaded.store.zones) == 2

    def test_export_import_between_sessions(self, workspace, tmp_path):
        session = MapSession.start(workspace)
        session.set_tool("circle")
        session.add_marker_at(Point(1, 1))
        export_path = tmp_path / "custom.json"
        export_path.write_text(session.user_export_json())
        session.reset(ResetScope.USER)
        assert session.store.users == []

        fresh = MapSession.start(workspace)
        assert fresh.store.users == []
        assert fresh.import_markers(export_path)
        fresh.close()

        again = MapSession.start(workspace)
        assert len(again.store.custom_markers) == 1

    def test_missing_sources_degrade(self, cfg, tmp_path):
        cfg.sources.baseline = str(tmp_path / "nope.json")
        cfg.sources.stickers = str(tmp_path / "nope-either.json")
        session = MapSession.start(cfg, storage=JsonFileStore(tmp_path))
        assert session.store.markers == []
        assert len(session.stickers) == 0
        session.set_tool("sprite")
        assert session.add_marker_at(Point(0, 0)) is None


class TestCli:
    def run(self, workspace, *argv):
        from lumiose_map.cli import main

        common = [
            "--baseline", workspace.sources.baseline,
            "--stickers", workspace.sources.stickers,
            "--storage-dir", workspace.storage.dir,
        ]
        return main([argv[0], *common, *argv[1:]])

    def test_info_export_import_reset(self, workspace, tmp_path, capsys):
        import_path = tmp_path / "import.json"
        import_path.write_text(json.dumps({"markers": [{"type": "circle", "lat": 1, "lng": 2}]}))

        self.run(workspace, "import_markers", str(import_path))
        assert "Imported 1 markers" in capsys.readouterr().out

        self.run(workspace, "info")
        out = capsys.readouterr().out
        assert "Custom markers: 1" in out
        assert "Zones: 1" in out

        export_path = tmp_path / "export.json"
        self.run(workspace, "export", str(export_path), "--custom")
        data = json.loads(export_path.read_text())
        assert [m["type"] for m in data["markers"]] == ["circle"]

        with pytest.raises(SystemExit):
            self.run(workspace, "reset")
        self.run(workspace, "reset", "--yes")
        assert "Reset done (user)" in capsys.readouterr().out
        self.run(workspace, "export", "--scope", "user")
        assert json.loads(capsys.readouterr().out)["markers"] == []
