"""Tests for the pattern library."""

import math
from dataclasses import replace

import numpy as np
import pytest

from chromaskin.texture.driver import RenderConfig, TextureRenderer
from chromaskin.texture.inks import CHANNELS
from chromaskin.texture.patterns import (
    DEFAULT_STYLE,
    ROUTINES,
    STYLE_ALIASES,
    UNTILED,
    grid_lines,
    list_styles,
    resolve_style,
)
from chromaskin.texture.patterns.base import cell_size
from chromaskin.texture.settings import PatternSettings, TextureSettings

STYLE_SIZE = 48


def _render(style, seamless=True, seed=12345):
    settings = TextureSettings(pattern=PatternSettings(style=style, seamless=seamless, seed=seed))
    return TextureRenderer(RenderConfig(resolution=STYLE_SIZE)).render(settings)


class TestRegistry:
    def test_all_style_families_registered(self):
        for name in ("circuit", "hexgrid", "voronoi", "waves", "cubes3d", "terrain3d", "grid", "noise"):
            assert name in ROUTINES

    def test_untiled_are_registered_routines(self):
        assert UNTILED <= set(ROUTINES)

    def test_aliases_point_at_routines(self):
        for alias, target in STYLE_ALIASES.items():
            assert target in ROUTINES, alias
            assert alias not in ROUTINES, alias

    def test_list_styles(self):
        styles, aliases = list_styles()
        assert styles == sorted(ROUTINES)
        assert aliases == sorted(STYLE_ALIASES)


class TestResolveStyle:
    def test_canonical(self):
        assert resolve_style("hexgrid") == "hexgrid"

    def test_alias(self):
        assert resolve_style("neural") == "circuit"
        assert resolve_style("honeycomb") == "hexgrid"

    def test_case_and_whitespace(self):
        assert resolve_style("  Voronoi ") == "voronoi"

    def test_unknown_falls_back(self):
        assert resolve_style("does-not-exist") == DEFAULT_STYLE
        assert resolve_style("") == DEFAULT_STYLE
        assert resolve_style(None) == DEFAULT_STYLE


class TestCellSizing:
    def test_minimum_enforced(self):
        assert cell_size(10, 80, 500, 0.4) == 10

    def test_formula(self):
        assert cell_size(10, 80, 100, 0.4, 30, 0.3) == math.floor(80 - 40 + 9)

    @pytest.mark.parametrize("density", [10, 50, 150, 300, 500])
    def test_grid_line_count(self, density):
        """Vertical line count is ceil(256 / gridSize) + 1."""
        settings = PatternSettings(style="grid", density=density)
        lines = grid_lines(256, settings)
        expected_cell = max(10, math.floor(80 - density * 0.4 + settings.element_spacing * 0.3))
        assert lines.cell == expected_cell
        assert len(lines.columns) == math.ceil(256 / expected_cell) + 1
        assert len(lines.rows) == len(lines.columns)

    def test_grid_lines_spacing(self):
        lines = grid_lines(256, PatternSettings(density=150, element_spacing=0))
        assert lines.columns[1] - lines.columns[0] == lines.cell
        assert lines.columns[0] == 0.0


class TestEveryStyle:
    @pytest.mark.parametrize("style", sorted(ROUTINES))
    def test_renders_deterministically(self, style):
        first = _render(style)
        second = _render(style)
        assert first.style == style
        for ch in CHANNELS:
            assert first[ch].shape == (STYLE_SIZE, STYLE_SIZE, 4), ch
            np.testing.assert_array_equal(first[ch], second[ch], err_msg=f"{style}/{ch}")

    @pytest.mark.parametrize("style", sorted(ROUTINES))
    def test_renders_without_seamless(self, style):
        result = _render(style, seamless=False)
        assert result.pattern.dtype == np.uint8

    @pytest.mark.parametrize("style", ["circuit", "dots", "voronoi", "cubes3d", "terrain3d"])
    def test_seed_changes_output(self, style):
        a = _render(style, seed=1)
        b = _render(style, seed=2)
        assert not np.array_equal(a.pattern, b.pattern)

    @pytest.mark.parametrize("style", ["circuit", "hexgrid", "spheres3d", "terrain3d"])
    def test_pattern_draws_something(self, style):
        result = _render(style)
        assert len(np.unique(result.pattern[..., :3].reshape(-1, 3), axis=0)) > 4

    def test_alias_renders_its_routine(self):
        assert _render("neural").style == "circuit"
        np.testing.assert_array_equal(_render("neural").pattern, _render("circuit").pattern)

    def test_rotation_changes_output(self):
        settings = TextureSettings(pattern=PatternSettings(style="hexgrid"))
        rotated = replace(settings, pattern=replace(settings.pattern, rotation=30))
        renderer = TextureRenderer(RenderConfig(resolution=STYLE_SIZE))
        assert not np.array_equal(renderer.render(settings).pattern, renderer.render(rotated).pattern)
