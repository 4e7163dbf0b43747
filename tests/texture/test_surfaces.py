"""Tests for the seven-channel drawing surfaces."""

import math

import numpy as np
import pytest

from chromaskin.texture.inks import CHANNELS, Ink
from chromaskin.texture.surfaces import IDENTITY, SurfaceSet, apply, dash_segments

RED = (255, 0, 0)


@pytest.fixture
def seamless(size, palette):
    return SurfaceSet(size, palette.base_colors(), seamless=True)


class TestCreation:
    def test_base_fill(self, surfaces, palette):
        arrays = surfaces.arrays()
        for ch, color in palette.base_colors().items():
            assert arrays[ch].shape == (surfaces.size, surfaces.size, 3)
            assert np.all(arrays[ch] == np.array(color, dtype=np.uint8)), ch

    def test_array_is_a_copy(self, surfaces):
        original = surfaces.array("mask")
        values = surfaces.array("mask")
        values[:] = 0
        np.testing.assert_array_equal(surfaces.array("mask"), original)


class TestDrawing:
    def test_fill_rect_hits_every_inked_channel(self, surfaces, palette):
        ink = palette.ink(RED, 1.0)
        surfaces.fill_rect(10, 10, 20, 20, ink)
        arrays = surfaces.arrays()
        for ch in CHANNELS:
            assert tuple(arrays[ch][20, 20]) == tuple(ink.color_for(ch)[:3]), ch

    def test_unset_channels_untouched(self, surfaces, palette):
        before = surfaces.arrays()
        surfaces.fill_rect(0, 0, 32, 32, Ink(pattern=RED, mask=(255, 255, 255)))
        after = surfaces.arrays()
        assert not np.array_equal(before["mask"], after["mask"])
        for ch in ("normal", "roughness", "pearlescence", "ao", "height"):
            np.testing.assert_array_equal(before[ch], after[ch])

    def test_stroke_width_differs_per_channel(self, surfaces):
        ink = Ink(pattern=RED, mask=(255, 255, 255))
        surfaces.line(0, 32, 64, 32, ink, width=9, aux_width=1)
        pattern = surfaces.array("pattern")
        mask = surfaces.array("mask")
        assert tuple(pattern[30, 10]) == RED
        assert tuple(mask[30, 10]) != (255, 255, 255)

    def test_write_replaces_channel(self, surfaces):
        values = np.full((surfaces.size, surfaces.size, 3), 77, dtype=np.uint8)
        surfaces.write("height", values)
        np.testing.assert_array_equal(surfaces.array("height"), values)
        surfaces.fill_rect(0, 0, 4, 4, Ink(height=(1, 1, 1)))
        assert tuple(surfaces.array("height")[1, 1]) == (1, 1, 1)


class TestSeamless:
    def test_shape_across_left_edge_wraps(self, seamless):
        """A circle straddling x=0 also appears at the right edge."""
        seamless.fill_circle(0, 32, 6, Ink(pattern=RED))
        pattern = seamless.array("pattern")
        assert tuple(pattern[32, 0]) == RED
        assert tuple(pattern[32, seamless.size - 1]) == RED

    def test_shape_across_corner_wraps(self, seamless):
        seamless.fill_rect(-4, -4, 8, 8, Ink(pattern=RED))
        pattern = seamless.array("pattern")
        last = seamless.size - 1
        for y, x in ((0, 0), (0, last), (last, 0), (last, last)):
            assert tuple(pattern[y, x]) == RED

    def test_untiled_draws_once(self, seamless, palette):
        with seamless.untiled():
            seamless.fill_circle(0, 32, 6, Ink(pattern=RED))
        pattern = seamless.array("pattern")
        assert tuple(pattern[32, 0]) == RED
        assert tuple(pattern[32, seamless.size - 1]) == palette.background
        assert seamless.seamless is True

    def test_non_seamless_clips(self, surfaces, palette):
        surfaces.fill_circle(0, 32, 6, Ink(pattern=RED))
        assert tuple(surfaces.array("pattern")[32, surfaces.size - 1]) == palette.background


class TestTransformStack:
    def test_save_restore(self, surfaces):
        surfaces.save()
        surfaces.translate(5, 7)
        surfaces.rotate(1.0)
        surfaces.restore()
        assert surfaces.matrix == IDENTITY

    def test_transformed_context(self, surfaces):
        with surfaces.transformed():
            surfaces.translate(3, 3)
            assert surfaces.matrix != IDENTITY
        assert surfaces.matrix == IDENTITY

    def test_rotate_about_center_fixes_center(self, surfaces):
        surfaces.rotate_about_center(90)
        half = surfaces.size / 2.0
        (x, y), = apply(surfaces.matrix, [(half, half)])
        assert x == pytest.approx(half)
        assert y == pytest.approx(half)

    def test_rotation_moves_drawing(self, surfaces):
        surfaces.rotate_about_center(90)
        # A bar along the top edge ends up along the right edge
        surfaces.fill_rect(0, 0, surfaces.size, 6, Ink(pattern=RED))
        pattern = surfaces.array("pattern")
        assert tuple(pattern[surfaces.size // 2, surfaces.size - 2]) == RED
        assert tuple(pattern[2, surfaces.size // 2]) != RED


class TestDashes:
    def test_solid(self):
        points = [(0.0, 0.0), (30.0, 0.0)]
        assert dash_segments(points, ()) == [points]

    def test_dashed_line(self):
        runs = dash_segments([(0.0, 0.0), (40.0, 0.0)], (10.0, 5.0))
        assert runs == [
            [(0.0, 0.0), (10.0, 0.0)],
            [(15.0, 0.0), (25.0, 0.0)],
            [(30.0, 0.0), (40.0, 0.0)],
        ]

    def test_dashes_continue_around_corners(self):
        runs = dash_segments([(0.0, 0.0), (6.0, 0.0), (6.0, 6.0)], (10.0, 1.0))
        assert len(runs) == 2
        assert runs[0][:2] == [(0.0, 0.0), (6.0, 0.0)]
        assert math.isclose(runs[0][2][1], 4.0)
        assert math.isclose(runs[1][0][1], 5.0)
        assert runs[1][-1] == (6.0, 6.0)

    def test_dashed_surface_leaves_gaps(self, size, palette):
        surf = SurfaceSet(size, palette.base_colors(), stroke_style="dashed", corner_style="square")
        surf.line(0, 20, size, 20, Ink(pattern=RED), width=3)
        row = surf.array("pattern")[20]
        assert tuple(row[5]) == RED
        assert tuple(row[12]) == palette.background


class TestPaintField:
    def test_coverage_restricts_paint(self, surfaces):
        n = surfaces.size
        values = np.full((n, n, 3), 200, dtype=np.uint8)
        coverage = np.zeros((n, n), dtype=bool)
        coverage[:, : n // 2] = True
        surfaces.paint_field({"ao": values}, coverage)
        ao = surfaces.array("ao")
        assert np.all(ao[:, : n // 2] == 200)
        assert np.all(ao[:, n // 2:] == 255)

    def test_alpha_layer_blends(self, surfaces):
        n = surfaces.size
        layer = np.zeros((n, n, 4), dtype=np.uint8)
        layer[..., 3] = 0
        surfaces.paint_field({"ao": layer})
        assert np.all(surfaces.array("ao") == 255)
