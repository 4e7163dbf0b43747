"""Tests for the render driver."""

from dataclasses import replace

import numpy as np
import pytest

from chromaskin.core.graph import Graph
from chromaskin.texture.driver import (
    RenderConfig,
    SurfaceAllocationError,
    TextureRenderer,
    TextureSet,
    render_texture,
)
from chromaskin.texture.inks import CHANNELS
from chromaskin.texture.settings import MIN_RESOLUTION, PatternSettings, TextureSettings


def _flat_graph(hex_color="#808080"):
    graph = Graph()
    color = graph.add_node("color-input", {"color": hex_color}, node_id="c")
    out = graph.add_node("output-pattern", node_id="out")
    graph.connect(color.id, "color", out.id, "color")
    return graph


def _toggled(settings, group, **changes):
    return replace(settings, **{group: replace(getattr(settings, group), **changes)})


class TestTextureSet:
    def test_shapes_and_alpha(self, renderer, settings, size):
        result = renderer.render(settings)
        assert isinstance(result, TextureSet)
        assert result.size == size
        for ch, values in result:
            assert values.shape == (size, size, 4), ch
            assert values.dtype == np.uint8, ch
            assert np.all(values[..., 3] == 255), ch

    def test_iteration_order(self, renderer, settings):
        result = renderer.render(settings)
        assert [ch for ch, _ in result] == list(CHANNELS)
        assert list(result.as_dict()) == list(CHANNELS)

    def test_maps_are_read_only(self, renderer, settings):
        result = renderer.render(settings)
        with pytest.raises(ValueError):
            result.mask[0, 0, 0] = 1

    def test_unknown_channel(self, renderer, settings):
        result = renderer.render(settings)
        with pytest.raises(KeyError):
            result["albedo"]


class TestDeterminism:
    def test_identical_inputs_identical_bytes(self, settings, size):
        a = TextureRenderer(RenderConfig(resolution=size)).render(settings)
        b = TextureRenderer(RenderConfig(resolution=size)).render(settings)
        for ch in CHANNELS:
            np.testing.assert_array_equal(a[ch], b[ch], err_msg=ch)

    def test_settings_not_mutated(self, renderer):
        settings = TextureSettings(pattern=PatternSettings(density=9999))
        renderer.render(settings)
        assert settings.pattern.density == 9999


class TestChannelIsolation:
    def test_invert_mask_changes_only_mask(self, renderer, settings):
        plain = renderer.render(settings)
        inverted = renderer.render(_toggled(settings, "mask", invert=True))
        np.testing.assert_array_equal(inverted.mask[..., :3], 255 - plain.mask[..., :3])
        for ch in CHANNELS:
            if ch != "mask":
                np.testing.assert_array_equal(plain[ch], inverted[ch], err_msg=ch)

    def test_invert_roughness_changes_only_roughness(self, renderer, settings):
        plain = renderer.render(settings)
        inverted = renderer.render(_toggled(settings, "roughness", invert=True))
        np.testing.assert_array_equal(inverted.roughness[..., :3], 255 - plain.roughness[..., :3])
        for ch in CHANNELS:
            if ch != "roughness":
                np.testing.assert_array_equal(plain[ch], inverted[ch], err_msg=ch)

    def test_invert_height_flips_normal_red_green_only(self, renderer, settings):
        plain = renderer.render(settings)
        inverted = renderer.render(_toggled(settings, "normal", invert_height=True))
        np.testing.assert_array_equal(inverted.normal[..., :2], 255 - plain.normal[..., :2])
        np.testing.assert_array_equal(inverted.normal[..., 2], plain.normal[..., 2])
        np.testing.assert_array_equal(inverted.height, plain.height)


class TestAllocation:
    def test_oversized_render_raises(self, settings):
        renderer = TextureRenderer(RenderConfig(resolution=32, max_pixels=32 * 32))
        with pytest.raises(SurfaceAllocationError):
            renderer.render(settings, resolution=64)

    def test_failure_keeps_previous_result(self, settings):
        renderer = TextureRenderer(RenderConfig(resolution=32, max_pixels=32 * 32))
        first = renderer.render(settings)
        with pytest.raises(SurfaceAllocationError):
            renderer.render(settings, resolution=64)
        assert renderer.last_result is first

    def test_last_result_updated_on_success(self, renderer, settings):
        assert renderer.last_result is None
        result = renderer.render(settings)
        assert renderer.last_result is result

    def test_tiny_resolution_clamped(self, renderer, settings):
        assert renderer.render(settings, resolution=0).size == MIN_RESOLUTION


class TestGraphMode:
    def test_style_is_graph(self, renderer, settings, graph):
        assert renderer.render(settings, graph=graph).style == "graph"

    def test_flat_graph_gives_neutral_normals(self, renderer, settings):
        result = renderer.render(settings, graph=_flat_graph())
        assert np.all(result.normal[..., 0] == 128)
        assert np.all(result.normal[..., 1] == 128)
        assert np.all(result.normal[..., 2] == 255)

    def test_graph_render_deterministic(self, settings, graph, size):
        a = TextureRenderer(RenderConfig(resolution=size)).render(settings, graph=graph)
        b = TextureRenderer(RenderConfig(resolution=size, workers=2, band_rows=8)).render(settings, graph=graph)
        for ch in CHANNELS:
            np.testing.assert_array_equal(a[ch], b[ch], err_msg=ch)

    def test_graph_color_reaches_pattern(self, settings, size):
        config = RenderConfig(resolution=size, glow_enabled=False, scanlines_enabled=False,
                              vignette_enabled=False)
        quiet = _toggled(settings, "pattern", noise_amount=0)
        result = TextureRenderer(config).render(quiet, graph=_flat_graph("#ff0000"))
        assert np.all(result.pattern[..., 0] == 255)
        assert np.all(result.pattern[..., 1:3] == 0)

    def test_cyclic_graph_renders_gray(self, settings, size):
        graph = Graph()
        graph.add_node("math-add", node_id="a")
        graph.add_node("math-add", node_id="b")
        graph.add_node("output-pattern", node_id="out")
        graph.connect("a", "result", "b", "a")
        graph.connect("b", "result", "a", "a")
        graph.connect("b", "result", "out", "color")
        config = RenderConfig(resolution=size, glow_enabled=False, scanlines_enabled=False,
                              vignette_enabled=False)
        quiet = _toggled(settings, "pattern", noise_amount=0)
        result = TextureRenderer(config).render(quiet, graph=graph)
        assert np.all(result.pattern[..., :3] == 127)


class TestProgressAndHelpers:
    def test_progress_stages(self, renderer, settings):
        calls = []
        renderer.render(settings, progress_callback=lambda stage, total: calls.append((stage, total)))
        assert calls == [(1, 3), (2, 3), (3, 3)]

    def test_render_texture_helper(self, size):
        result = render_texture(resolution=size)
        assert result.size == size
        assert result.style == "circuit"

    def test_unknown_style_renders_circuit(self, renderer, settings):
        fallback = renderer.render(_toggled(settings, "pattern", style="no-such-style"))
        circuit = renderer.render(settings)
        assert fallback.style == "circuit"
        np.testing.assert_array_equal(fallback.pattern, circuit.pattern)

    def test_post_processing_toggles(self, settings, size):
        on = TextureRenderer(RenderConfig(resolution=size)).render(settings)
        off = TextureRenderer(RenderConfig(resolution=size, glow_enabled=False,
                                           scanlines_enabled=False, vignette_enabled=False)).render(settings)
        assert not np.array_equal(on.pattern, off.pattern)
        np.testing.assert_array_equal(on.mask, off.mask)
