"""Tests for the command-line interface."""

import json

import pytest

from chromaskin.cli import main
from chromaskin.texture.inks import CHANNELS


class TestListCommand:
    def test_list_all(self, capsys):
        main(["list"])
        out = capsys.readouterr().out
        assert "Styles:" in out
        assert "Color schemes:" in out
        assert "Presets:" in out
        assert "neural -> circuit" in out

    def test_list_presets_by_category(self, capsys):
        main(["list", "presets", "--category", "camo"])
        out = capsys.readouterr().out
        assert "military-digi" in out
        assert "cyber-circuit" not in out
        assert "Styles:" not in out


class TestRenderCommand:
    def test_render_writes_maps(self, tmp_path, capsys):
        main(["render", "-r", "32", "-o", str(tmp_path), "--style", "dots", "--seed", "7"])
        for ch in CHANNELS:
            assert (tmp_path / f"dots_{ch}.png").exists(), ch
        with open(tmp_path / "dots_settings.json") as f:
            data = json.load(f)
        assert data["settings"]["pattern"]["seed"] == 7
        assert "Rendering dots" in capsys.readouterr().out

    def test_render_preset_with_map_subset(self, tmp_path):
        main([
            "render", "-r", "32", "-o", str(tmp_path), "--preset", "neon-hex",
            "--maps", "pattern,height", "--no-settings", "-n", "hex",
        ])
        assert sorted(p.name for p in tmp_path.iterdir()) == ["hex_height.png", "hex_pattern.png"]

    def test_unknown_style_notice(self, tmp_path, capsys):
        main(["render", "-r", "16", "-o", str(tmp_path), "--style", "blorp"])
        out = capsys.readouterr().out
        assert "falling back to circuit" in out

    def test_bad_map_name_rejected(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["render", "-o", str(tmp_path), "--maps", "albedo"])

    def test_non_positive_resolution(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["render", "-r", "0", "-o", str(tmp_path)])
        assert exc.value.code == 1
        assert "Resolution must be positive" in capsys.readouterr().err


class TestGraphCommand:
    def test_preview_summary(self, capsys):
        main(["graph", "--preview"])
        out = capsys.readouterr().out
        assert "Preview 256x256" in out
        assert "Mean color" in out

    def test_graph_render(self, tmp_path):
        main(["graph", "-r", "24", "-o", str(tmp_path), "-w", "2"])
        assert (tmp_path / "graph_pattern.png").exists()
        assert (tmp_path / "graph_settings.json").exists()
