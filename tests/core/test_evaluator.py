"""Tests for node graph evaluation."""

import numpy as np
import pytest

from chromaskin.core.evaluator import (
    GraphEvaluator,
    apply_to_settings,
    compile_preview,
    evaluation_order,
    render_graph,
    to_rgba8,
    uv_grid,
)
from chromaskin.core.graph import Connection, Graph, Node
from chromaskin.core.noise import fbm
from chromaskin.core.values import NEUTRAL
from chromaskin.texture.settings import PatternSettings


@pytest.fixture
def cyclic_graph():
    """Two adders feeding each other, with an output reading the loop."""
    graph = Graph()
    a = graph.add_node("math-add", node_id="a")
    b = graph.add_node("math-add", node_id="b")
    graph.add_node("value-input", {"value": 0.25}, node_id="free")
    out = graph.add_node("output-pattern", node_id="out")
    graph.connect(a.id, "result", b.id, "a")
    graph.connect(b.id, "result", a.id, "a")
    graph.connect(b.id, "result", out.id, "color")
    graph.output_id = out.id
    return graph


@pytest.fixture
def stale_edge_graph():
    """Output fed first from a node downstream of a cycle, then from red."""
    return Graph(
        [
            Node("m1", "math-add"),
            Node("m2", "math-add"),
            Node("c", "math-add"),
            Node("red", "color-input", {"color": "#ff0000"}),
            Node("out", "output-pattern"),
        ],
        [
            Connection("m1", "result", "m2", "a"),
            Connection("m2", "result", "m1", "a"),
            Connection("m1", "result", "c", "a"),
            Connection("c", "result", "out", "color"),
            Connection("red", "color", "out", "color"),
        ],
        output_id="out",
    )


class TestEvaluationOrder:
    def test_dependencies_precede_dependents(self, graph):
        order = evaluation_order(graph)
        assert sorted(order) == sorted(graph.nodes)
        for c in graph.connections:
            assert order.index(c.from_node) < order.index(c.to_node)

    def test_each_node_once(self, graph):
        order = evaluation_order(graph)
        assert len(order) == len(set(order))

    def test_cycle_members_and_dependents_excluded(self, cyclic_graph):
        order = evaluation_order(cyclic_graph)
        assert order == ["free"]

    def test_dangling_edges_ignored(self):
        graph = Graph(
            [Node("out", "output-pattern")],
            [Connection("ghost", "color", "out", "color")],
        )
        assert evaluation_order(graph) == ["out"]

    def test_superseded_edge_not_counted(self, stale_edge_graph):
        order = evaluation_order(stale_edge_graph)
        assert order.index("red") < order.index("out")
        assert "m1" not in order and "m2" not in order and "c" not in order

    def test_appended_duplicate_edge_not_counted(self, stale_edge_graph):
        stale_edge_graph.connections.insert(0, Connection("c", "result", "out", "color"))
        assert "out" in evaluation_order(stale_edge_graph)


class TestGraphEvaluator:
    def test_noise_perlin_deterministic(self, graph):
        """Two independent evaluator runs agree at uv=(0, 0)."""
        first = GraphEvaluator(graph).evaluate(0.0, 0.0)["noise"]["value"].as_float()
        second = GraphEvaluator(graph).evaluate(0.0, 0.0)["noise"]["value"].as_float()
        assert first == second

    def test_noise_perlin_samples_fbm(self, graph):
        value = GraphEvaluator(graph).evaluate(0.3, 0.7)["noise"]["value"].as_float()
        expected = fbm(0.3 * 10, 0.7 * 10, octaves=4, persistence=0.5, lacunarity=2.0, seed=12345)
        assert float(value) == pytest.approx(float(expected))

    def test_unconnected_mask_defaults_to_one(self):
        graph = Graph()
        color = graph.add_node("color-input", {"color": "#336699"}, node_id="c")
        out = graph.add_node("output-pattern", node_id="out")
        graph.connect(color.id, "color", out.id, "color")

        final = GraphEvaluator(graph).final_color(0.5, 0.5)
        assert final == pytest.approx(color.params["color"])

    def test_connected_mask_multiplies(self):
        graph = Graph()
        color = graph.add_node("color-input", {"color": "#ffffff"}, node_id="c")
        mask = graph.add_node("value-input", {"value": 0.25}, node_id="m")
        out = graph.add_node("output-pattern", node_id="out")
        graph.connect(color.id, "color", out.id, "color")
        graph.connect(mask.id, "value", out.id, "mask")

        assert GraphEvaluator(graph).final_color(0.1, 0.1) == pytest.approx((0.25, 0.25, 0.25))

    def test_replaced_edge_has_no_effect(self):
        graph = Graph()
        low = graph.add_node("value-input", {"value": 0.2}, node_id="low")
        high = graph.add_node("value-input", {"value": 0.8}, node_id="high")
        add = graph.add_node("math-add", node_id="add")
        graph.connect(low.id, "value", add.id, "a")
        graph.connect(high.id, "value", add.id, "a")

        outputs = GraphEvaluator(graph).evaluate(0.0, 0.0)
        assert outputs["add"]["result"].as_float() == pytest.approx(0.8)

    def test_cycle_falls_back_to_neutral(self, cyclic_graph):
        evaluator = GraphEvaluator(cyclic_graph)
        outputs = evaluator.evaluate(0.5, 0.5)
        assert "a" not in outputs and "b" not in outputs
        assert evaluator.value_of(outputs, "b", "result") is NEUTRAL
        assert evaluator.final_color(0.5, 0.5) == (0.5, 0.5, 0.5)

    def test_replacing_edge_overrides_stale_cyclic_source(self, stale_edge_graph):
        final = GraphEvaluator(stale_edge_graph).final_color(0.5, 0.5)
        assert final == pytest.approx((1.0, 0.0, 0.0))

    def test_dangling_input_reads_neutral(self):
        graph = Graph(
            [Node("out", "output-pattern")],
            [Connection("ghost", "color", "out", "color")],
        )
        assert GraphEvaluator(graph).final_color(0.2, 0.2) == pytest.approx((0.5, 0.5, 0.5))

    def test_empty_graph_is_neutral(self):
        assert GraphEvaluator(Graph()).final_color(0.0, 0.0) == (0.5, 0.5, 0.5)

    def test_vectorised_matches_scalar(self, graph, uv_samples):
        u, v = uv_samples
        evaluator = GraphEvaluator(graph)
        batch = evaluator.final_color(u, v)
        for i in range(len(u)):
            single = evaluator.final_color(float(u[i]), float(v[i]))
            for channel in range(3):
                assert batch[channel][i] == pytest.approx(float(single[channel]))


class TestRenderGraph:
    def test_shape(self, graph):
        out = render_graph(graph, 16)
        assert out.shape == (16, 16, 3)

    def test_uv_grid_layout(self):
        u, v = uv_grid(4)
        assert u[0, 3] == 0.75
        assert v[2, 0] == 0.5

    def test_pixel_matches_evaluator(self, graph):
        size = 16
        out = render_graph(graph, size, band_rows=5)
        evaluator = GraphEvaluator(graph)
        for px, py in [(0, 0), (3, 11), (15, 15)]:
            expected = evaluator.final_color(px / size, py / size)
            np.testing.assert_allclose(out[py, px], [float(c) for c in expected])

    def test_threaded_bands_match_serial(self, graph):
        serial = render_graph(graph, 24, workers=1, band_rows=4)
        threaded = render_graph(graph, 24, workers=3, band_rows=4)
        np.testing.assert_array_equal(serial, threaded)

    def test_progress_reports_every_band(self, graph):
        calls = []
        render_graph(graph, 10, band_rows=4, progress_callback=lambda done, total: calls.append((done, total)))
        assert calls == [(1, 3), (2, 3), (3, 3)]

    def test_empty_graph_renders_gray(self):
        out = render_graph(Graph(), 8)
        np.testing.assert_array_equal(out, np.full((8, 8, 3), 0.5))


class TestPreview:
    def test_compile_preview(self, graph):
        preview = compile_preview(graph, size=16)
        assert preview.shape == (16, 16, 4)
        assert preview.dtype == np.uint8
        assert np.all(preview[..., 3] == 255)

    def test_preview_renders_output_pattern_node(self):
        graph = Graph()
        graph.add_node("color-input", {"color": "#00ff00"}, node_id="first")
        red = graph.add_node("color-input", {"color": "#ff0000"}, node_id="red")
        out = graph.add_node("output-pattern", node_id="out")
        graph.connect(red.id, "color", out.id, "color")

        preview = compile_preview(graph, size=4)
        np.testing.assert_array_equal(preview[0, 0], [255, 0, 0, 255])

    def test_preview_ignores_non_pattern_fallback(self):
        graph = Graph()
        graph.add_node("color-input", {"color": "#00ff00"}, node_id="first")

        preview = compile_preview(graph, size=4)
        np.testing.assert_array_equal(preview[..., :3], np.full((4, 4, 3), 127))

    def test_to_rgba8_clamps_and_floors(self):
        color = np.array([[[-0.5, 0.5, 2.0]]])
        rgba = to_rgba8(color)
        assert rgba[0, 0].tolist() == [0, 127, 255, 255]

    def test_to_rgba8_handles_nan(self):
        rgba = to_rgba8(np.array([[[np.nan, np.inf, -np.inf]]]))
        assert rgba[0, 0].tolist() == [0, 255, 0, 255]


class TestApplyToSettings:
    def test_noise_scale_and_seed_copied(self, graph):
        settings = apply_to_settings(graph, PatternSettings())
        assert settings.complexity == 10.0
        assert settings.seed == 12345

    def test_other_fields_untouched(self, graph):
        base = PatternSettings(density=222, style="hexgrid")
        settings = apply_to_settings(graph, base)
        assert settings.density == 222
        assert settings.style == "hexgrid"
        assert settings is not base

    def test_graph_without_noise(self):
        graph = Graph()
        graph.add_node("color-input")
        base = PatternSettings(seed=1)
        assert apply_to_settings(graph, base) == base
