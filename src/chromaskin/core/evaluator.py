"""
Node graph evaluation.

Evaluation order comes from Kahn's algorithm over the connection edges.
Nodes that cannot be ordered (cycle members and everything downstream of
them) are excluded and never run; whoever reads their outputs receives
the neutral gray fallback. Malformed graphs therefore never raise.

The evaluator is vectorised: ``u`` and ``v`` may be floats (one sample)
or arrays (a whole UV grid evaluated in a single pass per node).
"""

from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from chromaskin.core.catalog import SAMPLE_UV
from chromaskin.core.graph import Connection, Graph, Node, live_connections
from chromaskin.core.nodes import NODE_FUNCTIONS, NodeContext
from chromaskin.core.values import NEUTRAL, NodeValue, Scalar

PREVIEW_SIZE = 256

ValueMap = Dict[str, Dict[str, NodeValue]]


def evaluation_order(graph: Graph) -> List[str]:
    """
    Topological order of the graph's node ids.

    Only edges whose endpoints both exist are counted, and only the last
    edge into each input. Nodes left with a positive in-degree (cycles
    and their dependents) are omitted.
    """
    in_degree = {node_id: 0 for node_id in graph.nodes}
    adjacency: Dict[str, List[str]] = {node_id: [] for node_id in graph.nodes}

    for c in live_connections(graph.connections):
        if c.from_node in in_degree and c.to_node in in_degree:
            adjacency[c.from_node].append(c.to_node)
            in_degree[c.to_node] += 1

    queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
    ordered = []
    while queue:
        node_id = queue.popleft()
        ordered.append(node_id)
        for neighbor in adjacency[node_id]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    return ordered


class GraphEvaluator:
    """
    Evaluates a graph snapshot at sample points.

    The order and the input lookup table are computed once at
    construction; later edits to the graph require a new evaluator.
    """

    def __init__(self, graph: Graph):
        self.graph = graph
        self.order = evaluation_order(graph)
        self._incoming: Dict[Tuple[str, str], Connection] = {}
        for c in live_connections(graph.connections):
            self._incoming[(c.to_node, c.to_port)] = c

    def _resolve(self, node: Node, port_id: str, u, v, outputs: ValueMap) -> NodeValue:
        connection = self._incoming.get((node.id, port_id))
        if connection is not None:
            source = outputs.get(connection.from_node)
            if source is None:
                return NEUTRAL
            return source.get(connection.from_port, NEUTRAL)

        spec = node.definition.input(port_id)
        param_id = (spec.param if spec is not None and spec.param else port_id)
        if param_id in node.params:
            value = node.params[param_id]
            if isinstance(value, tuple):
                return NodeValue.of_color(*value)
            return NodeValue.of_float(value)

        default = spec.default if spec is not None else None
        if default == SAMPLE_UV:
            return NodeValue.of_vector2(u, v)
        if isinstance(default, tuple):
            return NodeValue.of_color(*default)
        if default is None:
            return NEUTRAL
        return NodeValue.of_float(default)

    def evaluate(self, u: Scalar, v: Scalar) -> ValueMap:
        """
        Evaluate every orderable node once at ``(u, v)``.

        Returns:
            Map of node id -> output port id -> value. Excluded nodes are
            absent.
        """
        outputs: ValueMap = {}
        for node_id in self.order:
            node = self.graph.nodes[node_id]
            fn = NODE_FUNCTIONS.get(node.type)
            if fn is None:
                continue
            ctx = NodeContext(
                node=node,
                u=u,
                v=v,
                read=lambda port, _node=node: self._resolve(_node, port, u, v, outputs),
            )
            outputs[node_id] = fn(ctx)
        return outputs

    def value_of(self, outputs: ValueMap, node_id: str, port_id: str) -> NodeValue:
        """Read one output, neutral if the node was excluded."""
        return outputs.get(node_id, {}).get(port_id, NEUTRAL)

    def final_color(self, u: Scalar, v: Scalar, output_id: Optional[str] = None) -> Tuple[Scalar, Scalar, Scalar]:
        """Color of the designated output node (or ``output_id``) at ``(u, v)``."""
        if output_id is None:
            node = self.graph.output_node()
        else:
            node = self.graph.nodes.get(output_id)
        if node is None:
            return NEUTRAL.as_color()
        outputs = self.evaluate(u, v)
        produced = outputs.get(node.id)
        if not produced:
            return NEUTRAL.as_color()
        value = produced.get("final")
        if value is None:
            value = next(iter(produced.values()))
        return value.as_color()


# ---------------------------------------------------------------------------
# Raster rendering
# ---------------------------------------------------------------------------

def uv_grid(size: int, row_start: int = 0, row_stop: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
    """``(px/size, py/size)`` sample grid for rows ``[row_start, row_stop)``."""
    row_stop = size if row_stop is None else row_stop
    xs = np.arange(size, dtype=np.float64) / size
    ys = np.arange(row_start, row_stop, dtype=np.float64) / size
    return np.meshgrid(xs, ys)


def _render_rows(evaluator: GraphEvaluator, size: int, row_start: int, row_stop: int,
                 output_id: Optional[str] = None) -> np.ndarray:
    u, v = uv_grid(size, row_start, row_stop)
    color = evaluator.final_color(u, v, output_id)
    rows = row_stop - row_start
    channels = [np.broadcast_to(np.asarray(c, dtype=np.float64), (rows, size)) for c in color]
    return np.stack(channels, axis=-1)


def render_graph(
    graph: Graph,
    size: int,
    workers: int = 1,
    band_rows: int = 64,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    output_id: Optional[str] = None,
) -> np.ndarray:
    """
    Evaluate the output node (or ``output_id``) over a ``size x size`` grid.

    Rows are split into bands; with ``workers > 1`` the bands are
    evaluated on a thread pool. All bands complete before returning.

    Returns:
        (size, size, 3) float64 array (unclamped).
    """
    size = max(1, int(size))
    evaluator = GraphEvaluator(graph)
    band_rows = max(1, int(band_rows))
    bands = [(start, min(size, start + band_rows)) for start in range(0, size, band_rows)]
    result = np.empty((size, size, 3), dtype=np.float64)

    def run(band):
        start, stop = band
        result[start:stop] = _render_rows(evaluator, size, start, stop, output_id)
        return stop

    if workers > 1 and len(bands) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            for done, _ in enumerate(pool.map(run, bands), start=1):
                if progress_callback:
                    progress_callback(done, len(bands))
    else:
        for done, band in enumerate(bands, start=1):
            run(band)
            if progress_callback:
                progress_callback(done, len(bands))

    return result


def to_rgba8(color: np.ndarray) -> np.ndarray:
    """floor(clamp(c) * 255) per channel with opaque alpha."""
    rgb = np.nan_to_num(color, nan=0.0, posinf=1.0, neginf=0.0)
    rgb = np.floor(np.clip(rgb, 0.0, 1.0) * 255.0).astype(np.uint8)
    alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=-1)


def compile_preview(graph: Graph, size: int = PREVIEW_SIZE) -> np.ndarray:
    """
    Low-resolution RGBA8 render of the first ``output-pattern`` node.

    Graphs without one preview as neutral gray.
    """
    size = max(1, int(size))
    node = graph.find_first("output-pattern")
    if node is None:
        return to_rgba8(np.full((size, size, 3), 0.5))
    return to_rgba8(render_graph(graph, size, output_id=node.id))


def apply_to_settings(graph: Graph, settings):
    """
    Copy the first noise node's ``scale``/``seed`` into pattern settings.

    ``settings`` is a PatternSettings; a new instance is returned. Graphs
    without a noise node leave the settings unchanged.
    """
    noise = graph.find_first("noise-")
    if noise is None:
        return replace(settings)
    changes = {}
    if "scale" in noise.params:
        changes["complexity"] = float(noise.params["scale"])
    if "seed" in noise.params:
        changes["seed"] = int(noise.params["seed"])
    return replace(settings, **changes)
