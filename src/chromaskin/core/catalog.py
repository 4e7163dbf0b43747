"""
Node type catalog.

Immutable definitions of every node kind the graph editor can create:
ordered input/output ports and the parameter schema (type, default,
range) that node instances are validated against.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from chromaskin.core.values import ValueType, parse_hex_color

FLOAT = ValueType.FLOAT
VECTOR2 = ValueType.VECTOR2
COLOR = ValueType.COLOR

# Marker default: an unconnected port reads the current sample coordinate
SAMPLE_UV = "sample-uv"

CATEGORIES = ("input", "noise", "pattern", "math", "color", "transform", "mask", "output")


@dataclass(frozen=True)
class PortSpec:
    id: str
    name: str
    type: ValueType
    # Used when the port is unconnected and no parameter backs it
    default: Any = None
    # Parameter read when unconnected (defaults to the port id)
    param: Optional[str] = None


@dataclass(frozen=True)
class ParamSpec:
    id: str
    name: str
    type: str                      # "float" | "int" | "color"
    default: Any
    min: Optional[float] = None
    max: Optional[float] = None

    def coerce(self, value: Any) -> Any:
        """
        Validate and clamp a raw parameter value.

        Raises:
            ValueError: If the value cannot be converted to the declared type.
        """
        if self.type == "color":
            return parse_hex_color(value)
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"Parameter {self.id!r} expects a number, got {value!r}") from None
        if self.min is not None:
            number = max(self.min, number)
        if self.max is not None:
            number = min(self.max, number)
        if self.type == "int":
            return int(round(number))
        return number


@dataclass(frozen=True)
class NodeDefinition:
    type: str
    name: str
    category: str
    description: str
    inputs: Tuple[PortSpec, ...] = ()
    outputs: Tuple[PortSpec, ...] = ()
    params: Tuple[ParamSpec, ...] = ()

    def input(self, port_id: str) -> Optional[PortSpec]:
        return next((p for p in self.inputs if p.id == port_id), None)

    def output(self, port_id: str) -> Optional[PortSpec]:
        return next((p for p in self.outputs if p.id == port_id), None)

    def param(self, param_id: str) -> Optional[ParamSpec]:
        return next((p for p in self.params if p.id == param_id), None)

    def default_params(self) -> Dict[str, Any]:
        return {p.id: p.coerce(p.default) for p in self.params}


# ---------------------------------------------------------------------------
# Declaration helpers
# ---------------------------------------------------------------------------

def _uv_in() -> PortSpec:
    return PortSpec("uv", "UV", VECTOR2, default=SAMPLE_UV)


def _f(pid, name, default, lo=None, hi=None) -> ParamSpec:
    return ParamSpec(pid, name, "float", default, lo, hi)


def _i(pid, name, default, lo=None, hi=None) -> ParamSpec:
    return ParamSpec(pid, name, "int", default, lo, hi)


def _c(pid, name, default) -> ParamSpec:
    return ParamSpec(pid, name, "color", default)


def _seed() -> ParamSpec:
    return _i("seed", "Seed", 0, 0, 99999)


def _fac_out() -> PortSpec:
    return PortSpec("fac", "Factor", FLOAT)


def _result() -> Tuple[PortSpec, ...]:
    return (PortSpec("result", "Result", FLOAT),)


def _binary(a_default=0.0, b_default=0.0) -> Tuple[PortSpec, ...]:
    return (PortSpec("a", "A", FLOAT, a_default), PortSpec("b", "B", FLOAT, b_default))


def _unary(default=0.0) -> Tuple[PortSpec, ...]:
    return (PortSpec("value", "Value", FLOAT, default),)


def _uv_node(type_, name, category, description, outputs, params=()) -> NodeDefinition:
    return NodeDefinition(type_, name, category, description, (_uv_in(),), tuple(outputs), tuple(params))


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

_DEFINITIONS = (
    # Inputs
    NodeDefinition(
        "uv-input", "UV Coordinates", "input", "Texture coordinates of the sample",
        outputs=(PortSpec("uv", "UV", VECTOR2), PortSpec("x", "X", FLOAT), PortSpec("y", "Y", FLOAT)),
    ),
    NodeDefinition(
        "value-input", "Value", "input", "Constant number",
        outputs=(PortSpec("value", "Value", FLOAT),),
        params=(_f("value", "Value", 0.5, 0, 1),),
    ),
    NodeDefinition(
        "color-input", "Color", "input", "Constant color",
        outputs=(PortSpec("color", "Color", COLOR),),
        params=(_c("color", "Color", "#ff6600"),),
    ),
    NodeDefinition(
        "time-input", "Time", "input", "Animation time (static in still renders)",
        outputs=(PortSpec("time", "Time", FLOAT),),
        params=(_f("speed", "Speed", 1, 0.1, 10),),
    ),

    # Noise
    _uv_node(
        "noise-perlin", "Perlin Noise", "noise", "Smooth gradient noise",
        (PortSpec("value", "Value", FLOAT), PortSpec("color", "Color", COLOR)),
        (_f("scale", "Scale", 10, 0.1, 100), _i("octaves", "Octaves", 4, 1, 16),
         _f("persistence", "Persistence", 0.5, 0, 1), _seed()),
    ),
    _uv_node(
        "noise-voronoi", "Voronoi", "noise", "Cellular noise",
        (PortSpec("distance", "Distance", FLOAT), PortSpec("cell", "Cell", FLOAT)),
        (_f("scale", "Scale", 5, 0.1, 50), _f("randomness", "Randomness", 1, 0, 1), _seed()),
    ),
    _uv_node(
        "noise-fbm", "FBM Noise", "noise", "Fractal Brownian motion",
        (PortSpec("value", "Value", FLOAT),),
        (_f("scale", "Scale", 5, 0.1, 50), _i("octaves", "Octaves", 6, 1, 16),
         _f("lacunarity", "Lacunarity", 2, 1, 4), _seed()),
    ),
    _uv_node(
        "noise-worley", "Worley Noise", "noise", "Distances to the two nearest feature points",
        (PortSpec("f1", "F1", FLOAT), PortSpec("f2", "F2", FLOAT), PortSpec("edge", "Edges", FLOAT)),
        (_f("scale", "Scale", 5, 0.1, 30), _seed()),
    ),
    _uv_node(
        "noise-simplex", "Simplex Noise", "noise", "Two-layer smooth noise",
        (PortSpec("value", "Value", FLOAT),),
        (_f("scale", "Scale", 5, 0.1, 50), _seed()),
    ),

    # Patterns
    _uv_node("pattern-checker", "Checker", "pattern", "Checkerboard",
             (_fac_out(),), (_f("scale", "Scale", 8, 1, 64),)),
    _uv_node("pattern-stripes", "Stripes", "pattern", "Soft sinusoidal stripes",
             (_fac_out(),), (_f("scale", "Scale", 10, 1, 100), _f("angle", "Angle", 0, 0, 360))),
    _uv_node("pattern-dots", "Dots", "pattern", "Dot grid",
             (_fac_out(),), (_f("scale", "Scale", 10, 1, 50), _f("radius", "Radius", 0.3, 0.1, 0.9))),
    _uv_node("pattern-hexagon", "Hexagons", "pattern", "Hexagonal cells",
             (_fac_out(), PortSpec("cell", "Cell", FLOAT)), (_f("scale", "Scale", 5, 1, 30),)),
    _uv_node("pattern-wave", "Wave", "pattern", "Sine waves",
             (_fac_out(),), (_f("scale", "Scale", 5, 0.5, 20), _f("distortion", "Distortion", 0, 0, 10))),
    _uv_node(
        "pattern-brick", "Brick", "pattern", "Offset brick rows",
        (_fac_out(), PortSpec("mortar", "Mortar", FLOAT)),
        (_f("scaleX", "Scale X", 4, 1, 20), _f("scaleY", "Scale Y", 8, 1, 40),
         _f("offset", "Offset", 0.5, 0, 1), _f("mortarSize", "Mortar size", 0.05, 0, 0.2)),
    ),
    _uv_node(
        "pattern-rings", "Rings", "pattern", "Concentric rings",
        (_fac_out(),),
        (_f("scale", "Scale", 10, 1, 50), _f("centerX", "Center X", 0.5, 0, 1),
         _f("centerY", "Center Y", 0.5, 0, 1)),
    ),
    _uv_node("pattern-spiral", "Spiral", "pattern", "Spiral arms",
             (_fac_out(),), (_i("arms", "Arms", 4, 1, 16), _f("twist", "Twist", 2, 0.1, 10))),
    _uv_node("pattern-grid", "Grid", "pattern", "Grid lines",
             (_fac_out(),), (_f("scale", "Scale", 10, 1, 50), _f("thickness", "Thickness", 0.1, 0.01, 0.5))),
    _uv_node("pattern-triangle", "Triangles", "pattern", "Triangle tiling",
             (_fac_out(), PortSpec("cell", "Cell", FLOAT)), (_f("scale", "Scale", 5, 1, 30),)),

    # Math
    NodeDefinition("math-add", "Add", "math", "a + b", _binary(), _result()),
    NodeDefinition("math-subtract", "Subtract", "math", "a - b", _binary(), _result()),
    NodeDefinition("math-multiply", "Multiply", "math", "a * b", _binary(0.0, 1.0), _result()),
    NodeDefinition("math-divide", "Divide", "math", "a / b (0 when b is 0)", _binary(0.0, 1.0), _result()),
    NodeDefinition(
        "math-power", "Power", "math", "|base| ^ exp",
        (PortSpec("base", "Base", FLOAT, 0.0), PortSpec("exp", "Exponent", FLOAT, 1.0)), _result(),
    ),
    NodeDefinition(
        "math-mix", "Mix", "math", "Linear interpolation",
        _binary(0.0, 1.0) + (PortSpec("fac", "Factor", FLOAT, 0.5),), _result(),
    ),
    NodeDefinition(
        "math-clamp", "Clamp", "math", "Clamp to [min, max]", _unary(0.5), _result(),
        (_f("min", "Min", 0, 0, 1), _f("max", "Max", 1, 0, 1)),
    ),
    NodeDefinition("math-abs", "Abs", "math", "Absolute value", _unary(), _result()),
    NodeDefinition(
        "math-step", "Step", "math", "0 below edge, 1 otherwise",
        _unary() + (PortSpec("edge", "Edge", FLOAT, 0.5),), _result(),
    ),
    NodeDefinition(
        "math-smoothstep", "Smoothstep", "math", "Hermite step between two edges",
        _unary() + (PortSpec("edge0", "Edge 0", FLOAT, 0.0), PortSpec("edge1", "Edge 1", FLOAT, 1.0)),
        _result(),
    ),
    NodeDefinition("math-sine", "Sine", "math", "(sin(2*pi*v) + 1) / 2", _unary(), _result()),
    NodeDefinition("math-cosine", "Cosine", "math", "(cos(2*pi*v) + 1) / 2", _unary(), _result()),
    NodeDefinition("math-fract", "Fract", "math", "Fractional part", _unary(), _result()),
    NodeDefinition("math-mod", "Modulo", "math", "Positive modulo (0 when b is 0)", _binary(0.0, 1.0), _result()),
    NodeDefinition("math-min", "Min", "math", "Minimum", _binary(), _result()),
    NodeDefinition("math-max", "Max", "math", "Maximum", _binary(), _result()),
    NodeDefinition(
        "math-distance", "Distance", "math", "Radial distance from a center",
        (_uv_in(),), _result(), (_f("centerX", "Center X", 0.5, 0, 1), _f("centerY", "Center Y", 0.5, 0, 1)),
    ),

    # Color
    NodeDefinition(
        "color-mix", "Mix Colors", "color", "Blend two colors",
        (PortSpec("a", "Color A", COLOR, (0.0, 0.0, 0.0)), PortSpec("b", "Color B", COLOR, (1.0, 1.0, 1.0)),
         PortSpec("fac", "Factor", FLOAT, 0.5)),
        (PortSpec("color", "Color", COLOR),),
    ),
    NodeDefinition(
        "color-gradient", "Gradient", "color", "Two-color gradient",
        (PortSpec("fac", "Factor", FLOAT, 0.5),), (PortSpec("color", "Color", COLOR),),
        (_c("color1", "Color 1", "#000000"), _c("color2", "Color 2", "#ffffff")),
    ),
    NodeDefinition(
        "color-ramp", "Color Ramp", "color", "Three-stop color ramp",
        (PortSpec("fac", "Factor", FLOAT, 0.5),), (PortSpec("color", "Color", COLOR),),
        (_c("color1", "Color 1", "#1a1a2e"), _c("color2", "Color 2", "#ff6b35"),
         _c("color3", "Color 3", "#ffffff"), _f("pos2", "Position 2", 0.5, 0, 1)),
    ),
    NodeDefinition(
        "color-hsv", "HSV", "color", "HSV to RGB",
        (PortSpec("h", "H", FLOAT, 0.0), PortSpec("s", "S", FLOAT, 1.0), PortSpec("v", "V", FLOAT, 1.0)),
        (PortSpec("color", "Color", COLOR),),
    ),
    NodeDefinition(
        "color-brightness", "Brightness/Contrast", "color", "Adjust brightness and contrast",
        (PortSpec("color", "Color", COLOR, (0.5, 0.5, 0.5)),), (PortSpec("color", "Color", COLOR),),
        (_f("brightness", "Brightness", 0, -1, 1), _f("contrast", "Contrast", 0, -1, 1)),
    ),
    NodeDefinition(
        "color-invert", "Invert", "color", "Invert a color",
        (PortSpec("color", "Color", COLOR, (0.5, 0.5, 0.5)),), (PortSpec("color", "Color", COLOR),),
        (_f("fac", "Strength", 1, 0, 1),),
    ),
    NodeDefinition(
        "color-separate", "Separate RGB", "color", "Split a color into channels",
        (PortSpec("color", "Color", COLOR, (0.0, 0.0, 0.0)),),
        (PortSpec("r", "R", FLOAT), PortSpec("g", "G", FLOAT), PortSpec("b", "B", FLOAT)),
    ),
    NodeDefinition(
        "color-combine", "Combine RGB", "color", "Build a color from channels",
        (PortSpec("r", "R", FLOAT, 0.0), PortSpec("g", "G", FLOAT, 0.0), PortSpec("b", "B", FLOAT, 0.0)),
        (PortSpec("color", "Color", COLOR),),
    ),

    # Transform
    _uv_node("transform-scale", "Scale", "transform", "Scale UV",
             (PortSpec("uv", "UV", VECTOR2),),
             (_f("scaleX", "X", 1, 0.1, 10), _f("scaleY", "Y", 1, 0.1, 10))),
    _uv_node("transform-rotate", "Rotate", "transform", "Rotate UV about the center",
             (PortSpec("uv", "UV", VECTOR2),), (_f("angle", "Angle", 0, 0, 360),)),
    _uv_node("transform-translate", "Translate", "transform", "Offset UV",
             (PortSpec("uv", "UV", VECTOR2),),
             (_f("offsetX", "X", 0, -1, 1), _f("offsetY", "Y", 0, -1, 1))),
    _uv_node("transform-tile", "Tile", "transform", "Repeat UV",
             (PortSpec("uv", "UV", VECTOR2),),
             (_i("tilesX", "Tiles X", 2, 1, 10), _i("tilesY", "Tiles Y", 2, 1, 10))),
    _uv_node("transform-mirror", "Mirror", "transform", "Mirror UV halves",
             (PortSpec("uv", "UV", VECTOR2),),
             (_i("mirrorX", "Mirror X", 0, 0, 1), _i("mirrorY", "Mirror Y", 0, 0, 1))),
    NodeDefinition(
        "transform-distort", "Distort", "transform", "Noise displacement of UV",
        (_uv_in(), PortSpec("amount", "Amount", FLOAT, 0.1, param="strength")),
        (PortSpec("uv", "UV", VECTOR2),),
        (_f("scale", "Scale", 5, 0.1, 20), _f("strength", "Strength", 0.1, 0, 0.5)),
    ),

    # Mask
    NodeDefinition(
        "mask-threshold", "Threshold", "mask", "1 above the threshold",
        _unary(0.5), (PortSpec("mask", "Mask", FLOAT),), (_f("threshold", "Threshold", 0.5, 0, 1),),
    ),
    NodeDefinition(
        "mask-invert", "Invert Mask", "mask", "1 - mask",
        (PortSpec("mask", "Mask", FLOAT, 0.0),), (PortSpec("mask", "Mask", FLOAT),),
    ),
    NodeDefinition(
        "mask-blend", "Blend Masks", "mask", "Add, multiply, max, min, screen or overlay",
        _binary(), (PortSpec("mask", "Mask", FLOAT),), (_i("mode", "Mode", 0, 0, 5),),
    ),
    NodeDefinition(
        "mask-edge", "Mask Edge", "mask", "Band around the 0.5 level",
        (PortSpec("mask", "Mask", FLOAT, 0.0),), (PortSpec("mask", "Mask", FLOAT),),
        (_f("width", "Width", 0.1, 0.01, 0.5),),
    ),

    # Output
    NodeDefinition(
        "output-pattern", "Pattern Output", "output", "Final color times mask",
        (PortSpec("color", "Color", COLOR, (0.5, 0.5, 0.5)), PortSpec("mask", "Mask", FLOAT, 1.0)),
        (PortSpec("final", "Final", COLOR),),
    ),
)

NODE_CATALOG: Dict[str, NodeDefinition] = {d.type: d for d in _DEFINITIONS}

MASK_BLEND_MODES = ("add", "multiply", "max", "min", "screen", "overlay")


def get_definition(node_type: str) -> NodeDefinition:
    """
    Look up a node definition.

    Raises:
        KeyError: If the type is not in the catalog.
    """
    try:
        return NODE_CATALOG[node_type]
    except KeyError:
        raise KeyError(f"Unknown node type: {node_type!r}") from None


def definitions_by_category() -> Dict[str, Tuple[NodeDefinition, ...]]:
    return {cat: tuple(d for d in _DEFINITIONS if d.category == cat) for cat in CATEGORIES}
