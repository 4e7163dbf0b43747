"""
Seeded noise, typed port values and the node graph engine.
"""

from chromaskin.core.catalog import NODE_CATALOG, NodeDefinition, ParamSpec, PortSpec, get_definition
from chromaskin.core.evaluator import (
    PREVIEW_SIZE,
    GraphEvaluator,
    apply_to_settings,
    compile_preview,
    evaluation_order,
    render_graph,
)
from chromaskin.core.graph import Connection, Graph, Node, default_graph
from chromaskin.core.noise import SeededRandom, fbm, seeded_random, value_noise_2d, voronoi
from chromaskin.core.values import NEUTRAL, NodeValue, ValueType
