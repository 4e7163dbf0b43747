"""Tests for the node graph model."""

import pytest

from chromaskin.core.catalog import NODE_CATALOG, get_definition
from chromaskin.core.graph import Connection, Graph, Node, default_graph


class TestNode:
    def test_defaults_filled_from_catalog(self):
        node = Node("n", "noise-perlin")
        assert node.params == {"scale": 10.0, "octaves": 4, "persistence": 0.5, "seed": 0}

    def test_params_clamped(self):
        node = Node("n", "noise-perlin", {"scale": 1000, "octaves": 0})
        assert node.params["scale"] == 100.0
        assert node.params["octaves"] == 1

    def test_unknown_param_rejected(self):
        with pytest.raises(ValueError):
            Node("n", "noise-perlin", {"frequency": 2})

    def test_unknown_type_rejected(self):
        with pytest.raises(KeyError):
            Node("n", "noise-nope")

    def test_color_param_parsed(self):
        node = Node("c", "color-input", {"color": "#ff0000"})
        assert node.params["color"] == (1.0, 0.0, 0.0)


class TestGraphEditing:
    def test_add_node_generates_unique_ids(self):
        graph = Graph()
        a = graph.add_node("value-input")
        b = graph.add_node("value-input")
        assert a.id != b.id
        assert len(graph) == 2

    def test_duplicate_id_rejected(self):
        graph = Graph()
        graph.add_node("value-input", node_id="v")
        with pytest.raises(ValueError):
            graph.add_node("value-input", node_id="v")

    def test_connect_replaces_existing_edge(self):
        """A second edge into the same input discards the first."""
        graph = Graph()
        a = graph.add_node("value-input", {"value": 0.2})
        b = graph.add_node("value-input", {"value": 0.8})
        add = graph.add_node("math-add")
        graph.connect(a.id, "value", add.id, "a")
        graph.connect(b.id, "value", add.id, "a")

        feeding = [c for c in graph.connections if c.to_node == add.id and c.to_port == "a"]
        assert feeding == [Connection(b.id, "value", add.id, "a")]

    def test_constructor_keeps_last_edge_per_input(self):
        nodes = [Node("a", "value-input"), Node("b", "value-input"), Node("add", "math-add")]
        graph = Graph(nodes, [
            Connection("a", "value", "add", "a"),
            Connection("a", "value", "add", "b"),
            Connection("b", "value", "add", "a"),
        ])
        assert graph.connections == [
            Connection("a", "value", "add", "b"),
            Connection("b", "value", "add", "a"),
        ]

    def test_connect_rejects_self_loop(self):
        graph = Graph()
        add = graph.add_node("math-add")
        with pytest.raises(ValueError):
            graph.connect(add.id, "result", add.id, "a")

    def test_connect_rejects_unknown_ports(self):
        graph = Graph()
        a = graph.add_node("value-input")
        add = graph.add_node("math-add")
        with pytest.raises(ValueError):
            graph.connect(a.id, "nope", add.id, "a")
        with pytest.raises(ValueError):
            graph.connect(a.id, "value", add.id, "nope")

    def test_connect_unknown_node(self):
        graph = Graph()
        add = graph.add_node("math-add")
        with pytest.raises(KeyError):
            graph.connect("ghost", "value", add.id, "a")

    def test_disconnect(self):
        graph = Graph()
        a = graph.add_node("value-input")
        add = graph.add_node("math-add")
        graph.connect(a.id, "value", add.id, "b")
        removed = graph.disconnect(add.id, "b")
        assert removed is not None
        assert graph.connections == []
        assert graph.disconnect(add.id, "b") is None

    def test_remove_node_drops_edges(self):
        graph = default_graph()
        graph.remove_node("noise")
        assert "noise" not in graph
        assert all("noise" not in (c.from_node, c.to_node) for c in graph.connections)

    def test_remove_output_clears_output_id(self):
        graph = default_graph()
        graph.remove_node("output")
        assert graph.output_id is None

    def test_set_param_clamps(self):
        graph = default_graph()
        assert graph.set_param("noise", "persistence", 3.0) == 1.0
        assert graph.node("noise").params["persistence"] == 1.0

    def test_set_param_unknown(self):
        graph = default_graph()
        with pytest.raises(ValueError):
            graph.set_param("noise", "amplitude", 1.0)

    def test_copy_is_independent(self):
        graph = default_graph()
        clone = graph.copy()
        clone.set_param("noise", "seed", 1)
        clone.remove_node("gradient")
        assert graph.node("noise").params["seed"] == 12345
        assert "gradient" in graph


class TestOutputNode:
    def test_explicit_output_id(self):
        graph = default_graph()
        assert graph.output_node().id == "output"

    def test_first_output_type_fallback(self):
        graph = Graph()
        graph.add_node("value-input", node_id="v")
        graph.add_node("output-pattern", node_id="out")
        assert graph.output_node().id == "out"

    def test_first_node_fallback(self):
        graph = Graph()
        graph.add_node("value-input", node_id="v")
        graph.add_node("color-input", node_id="c")
        assert graph.output_node().id == "v"

    def test_empty_graph(self):
        assert Graph().output_node() is None

    def test_dangling_output_id_ignored(self):
        graph = Graph()
        graph.add_node("color-input", node_id="c")
        graph.output_id = "missing"
        assert graph.output_node().id == "c"


class TestCatalog:
    def test_every_definition_has_outputs(self):
        for definition in NODE_CATALOG.values():
            assert definition.outputs, definition.type

    def test_unknown_definition(self):
        with pytest.raises(KeyError):
            get_definition("pattern-unknown")
