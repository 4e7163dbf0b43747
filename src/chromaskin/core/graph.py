"""
Node graph model.

Nodes and connections are stored flat and linked only by string ids, so
any topology (including cycles and dangling references) can be held and
handed to the evaluator without object reference cycles.

Editing operations:
  - add_node / remove_node (removal drops every attached connection)
  - connect (an input holds at most one edge; a new edge replaces the old)
  - disconnect
  - set_param (validated against the catalog schema)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from chromaskin.core.catalog import NodeDefinition, get_definition


@dataclass
class Node:
    """A graph instance of a catalog node type."""

    id: str
    type: str
    params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Validate the parameter bag against the catalog schema
        definition = self.definition
        values = definition.default_params()
        for key, value in self.params.items():
            spec = definition.param(key)
            if spec is None:
                raise ValueError(f"Node type {self.type!r} has no parameter {key!r}")
            values[key] = spec.coerce(value)
        self.params = values

    @property
    def definition(self) -> NodeDefinition:
        return get_definition(self.type)


@dataclass(frozen=True)
class Connection:
    """Directed edge (from_node.from_port) -> (to_node.to_port)."""

    from_node: str
    from_port: str
    to_node: str
    to_port: str


def live_connections(connections: Iterable[Connection]) -> List[Connection]:
    """
    Keep only the last edge into each ``(to_node, to_port)`` input.

    Survivors stay in list order.
    """
    connections = list(connections)
    last = {(c.to_node, c.to_port): i for i, c in enumerate(connections)}
    return [c for i, c in enumerate(connections) if last[(c.to_node, c.to_port)] == i]


class Graph:
    """
    Editable node graph.

    ``nodes`` keeps insertion order (used for output-node fallback and as
    the tie-break order of the evaluator). The constructor accepts
    arbitrary, possibly malformed, node and connection lists. When several
    edges feed the same input only the last one is kept.
    """

    def __init__(
        self,
        nodes: Optional[Iterable[Node]] = None,
        connections: Optional[Iterable[Connection]] = None,
        output_id: Optional[str] = None,
    ):
        self.nodes: Dict[str, Node] = {}
        for node in nodes or ():
            self.nodes[node.id] = node
        self.connections: List[Connection] = live_connections(connections or ())
        self.output_id = output_id
        self._counter = len(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.nodes

    def node(self, node_id: str) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise KeyError(f"Unknown node id: {node_id!r}") from None

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _next_id(self, node_type: str) -> str:
        while True:
            self._counter += 1
            candidate = f"{node_type}-{self._counter}"
            if candidate not in self.nodes:
                return candidate

    def add_node(
        self,
        node_type: str,
        params: Optional[Dict[str, Any]] = None,
        node_id: Optional[str] = None,
    ) -> Node:
        """
        Create a node of ``node_type`` and add it to the graph.

        Raises:
            KeyError: Unknown node type.
            ValueError: Duplicate id or invalid parameter.
        """
        if node_id is not None and node_id in self.nodes:
            raise ValueError(f"Duplicate node id: {node_id!r}")
        node = Node(node_id or self._next_id(node_type), node_type, dict(params or {}))
        self.nodes[node.id] = node
        return node

    def remove_node(self, node_id: str) -> None:
        """Delete a node together with every connection touching it."""
        self.node(node_id)
        del self.nodes[node_id]
        self.connections = [
            c for c in self.connections
            if c.from_node != node_id and c.to_node != node_id
        ]
        if self.output_id == node_id:
            self.output_id = None

    def connect(self, from_node: str, from_port: str, to_node: str, to_port: str) -> Connection:
        """
        Connect an output port to an input port.

        Any edge already feeding ``(to_node, to_port)`` is discarded.

        Raises:
            KeyError: Unknown node id.
            ValueError: Self connection or unknown port.
        """
        source = self.node(from_node)
        target = self.node(to_node)
        if from_node == to_node:
            raise ValueError("A node cannot be connected to itself")
        if source.definition.output(from_port) is None:
            raise ValueError(f"{source.type!r} has no output port {from_port!r}")
        if target.definition.input(to_port) is None:
            raise ValueError(f"{target.type!r} has no input port {to_port!r}")

        self.disconnect(to_node, to_port)
        connection = Connection(from_node, from_port, to_node, to_port)
        self.connections.append(connection)
        return connection

    def disconnect(self, to_node: str, to_port: str) -> Optional[Connection]:
        """Remove the edge feeding an input port; returns it if one existed."""
        removed = None
        kept = []
        for c in self.connections:
            if c.to_node == to_node and c.to_port == to_port:
                removed = c
            else:
                kept.append(c)
        self.connections = kept
        return removed

    def set_param(self, node_id: str, param_id: str, value: Any) -> Any:
        """
        Update one node parameter, validated against the catalog.

        Returns:
            The stored (clamped/coerced) value.
        """
        node = self.node(node_id)
        spec = node.definition.param(param_id)
        if spec is None:
            raise ValueError(f"Node type {node.type!r} has no parameter {param_id!r}")
        node.params[param_id] = spec.coerce(value)
        return node.params[param_id]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def incoming(self, node_id: str, port_id: str) -> Optional[Connection]:
        """The edge feeding an input port (the most recent one wins)."""
        found = None
        for c in self.connections:
            if c.to_node == node_id and c.to_port == port_id:
                found = c
        return found

    def output_node(self) -> Optional[Node]:
        """
        The node whose final color is rendered: the explicit output id if
        present, else the first ``output-*`` node, else the first node.
        """
        if self.output_id is not None and self.output_id in self.nodes:
            return self.nodes[self.output_id]
        for node in self.nodes.values():
            if node.type.startswith("output-"):
                return node
        return next(iter(self.nodes.values()), None)

    def find_first(self, prefix: str) -> Optional[Node]:
        return next((n for n in self.nodes.values() if n.type.startswith(prefix)), None)

    def copy(self) -> "Graph":
        graph = Graph(
            [Node(n.id, n.type, dict(n.params)) for n in self.nodes.values()],
            self.connections,
            self.output_id,
        )
        graph._counter = self._counter
        return graph


def default_graph() -> Graph:
    """uv -> perlin noise -> two-color gradient -> pattern output."""
    graph = Graph()
    uv = graph.add_node("uv-input", node_id="uv")
    noise = graph.add_node(
        "noise-perlin",
        {"scale": 10, "octaves": 4, "persistence": 0.5, "seed": 12345},
        node_id="noise",
    )
    gradient = graph.add_node(
        "color-gradient", {"color1": "#1a1a2e", "color2": "#ff6b35"}, node_id="gradient"
    )
    output = graph.add_node("output-pattern", node_id="output")

    graph.connect(uv.id, "uv", noise.id, "uv")
    graph.connect(noise.id, "value", gradient.id, "fac")
    graph.connect(gradient.id, "color", output.id, "color")
    graph.output_id = output.id
    return graph
