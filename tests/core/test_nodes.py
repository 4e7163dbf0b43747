"""Tests for individual node kinds."""

import numpy as np
import pytest

from chromaskin.core.catalog import NODE_CATALOG
from chromaskin.core.evaluator import GraphEvaluator
from chromaskin.core.graph import Graph
from chromaskin.core.nodes import NODE_FUNCTIONS


def _binary(node_type, a, b, port="result"):
    graph = Graph()
    graph.add_node("value-input", {"value": a}, node_id="a")
    graph.add_node("value-input", {"value": b}, node_id="b")
    graph.add_node(node_type, node_id="op")
    graph.connect("a", "value", "op", "a")
    graph.connect("b", "value", "op", "b")
    return GraphEvaluator(graph).evaluate(0.0, 0.0)["op"][port].as_float()


class TestNodeRegistry:
    def test_every_catalog_type_has_a_function(self):
        assert set(NODE_CATALOG) == set(NODE_FUNCTIONS)


class TestMathNodes:
    def test_add(self):
        assert _binary("math-add", 0.25, 0.5) == pytest.approx(0.75)

    def test_divide_by_zero_is_zero(self):
        assert _binary("math-divide", 0.5, 0.0) == 0.0

    def test_mod_by_zero_is_zero(self):
        assert _binary("math-mod", 0.5, 0.0) == 0.0

    def test_unconnected_inputs_use_port_defaults(self):
        graph = Graph()
        graph.add_node("math-multiply", node_id="m")
        # a defaults to 0, b to 1
        assert GraphEvaluator(graph).evaluate(0.3, 0.3)["m"]["result"].as_float() == 0.0


class TestMaskNodes:
    @pytest.mark.parametrize("mode, expected", [
        (0, 1.0),     # add, clipped
        (1, 0.42),    # multiply
        (2, 0.7),     # max
        (3, 0.6),     # min
        (4, 0.88),    # screen
    ])
    def test_blend_modes(self, mode, expected):
        graph = Graph()
        graph.add_node("value-input", {"value": 0.6}, node_id="a")
        graph.add_node("value-input", {"value": 0.7}, node_id="b")
        graph.add_node("mask-blend", {"mode": mode}, node_id="blend")
        graph.connect("a", "value", "blend", "a")
        graph.connect("b", "value", "blend", "b")
        value = GraphEvaluator(graph).evaluate(0.0, 0.0)["blend"]["mask"].as_float()
        assert float(value) == pytest.approx(expected)

    def test_threshold(self):
        graph = Graph()
        graph.add_node("value-input", {"value": 0.7}, node_id="v")
        graph.add_node("mask-threshold", {"threshold": 0.5}, node_id="t")
        graph.connect("v", "value", "t", "value")
        assert GraphEvaluator(graph).evaluate(0.0, 0.0)["t"]["mask"].as_float() == 1.0


class TestPatternNodes:
    def test_checker_alternates(self):
        graph = Graph()
        graph.add_node("pattern-checker", {"scale": 8}, node_id="c")
        evaluator = GraphEvaluator(graph)
        assert evaluator.evaluate(0.05, 0.05)["c"]["fac"].as_float() == 1.0
        assert evaluator.evaluate(0.2, 0.05)["c"]["fac"].as_float() == 0.0

    def test_transform_feeds_downstream_uv(self):
        """A scale transform changes the uv its consumers see."""
        graph = Graph()
        graph.add_node("uv-input", node_id="uv")
        graph.add_node("transform-scale", {"scaleX": 2, "scaleY": 2}, node_id="s")
        graph.add_node("pattern-checker", {"scale": 8}, node_id="c")
        graph.connect("uv", "uv", "s", "uv")
        graph.connect("s", "uv", "c", "uv")
        evaluator = GraphEvaluator(graph)
        # 0.1 * 2 * 8 = 1.6 -> odd cell
        assert evaluator.evaluate(0.1, 0.01)["c"]["fac"].as_float() == 0.0

    def test_pattern_nodes_vectorise(self):
        u, v = np.meshgrid(np.linspace(0, 1, 9), np.linspace(0, 1, 9))
        for node_type, definition in NODE_CATALOG.items():
            if definition.category != "pattern":
                continue
            graph = Graph()
            graph.add_node(node_type, node_id="p")
            fac = GraphEvaluator(graph).evaluate(u, v)["p"]["fac"].as_float()
            assert np.shape(np.broadcast_to(fac, u.shape)) == (9, 9), node_type
            assert np.all(np.isfinite(fac)), node_type
