"""
Per-kind node semantics.

Every catalog type maps to one pure function of the sample coordinate,
the node's parameters and its resolved inputs. Functions are written with
numpy operations only, so they evaluate a single UV sample or a whole UV
grid with the same code path.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import numpy as np

from chromaskin.core.graph import Node
from chromaskin.core.noise import fbm, lattice_hash, value_noise_2d, voronoi
from chromaskin.core.values import NodeValue, Scalar

TAU = 2.0 * math.pi


@dataclass
class NodeContext:
    """What a node function sees while it runs."""

    node: Node
    u: Scalar
    v: Scalar
    read: Callable[[str], NodeValue]

    def float(self, port: str) -> Scalar:
        return self.read(port).as_float()

    def color(self, port: str) -> Tuple[Scalar, Scalar, Scalar]:
        return self.read(port).as_color()

    def uv(self, port: str = "uv") -> Tuple[Scalar, Scalar]:
        return self.read(port).as_vector2()

    def param(self, param_id: str):
        return self.node.params[param_id]


NodeFunction = Callable[[NodeContext], Dict[str, NodeValue]]

NODE_FUNCTIONS: Dict[str, NodeFunction] = {}


def node_kind(node_type: str):
    """Register the evaluation function of a catalog node type."""
    def register(fn: NodeFunction) -> NodeFunction:
        NODE_FUNCTIONS[node_type] = fn
        return fn
    return register


def _unwrap(value) -> Scalar:
    arr = np.asarray(value)
    return arr[()] if arr.ndim == 0 else arr


def _where(cond, a, b) -> Scalar:
    return _unwrap(np.where(cond, a, b))


def _fract(x):
    return x - np.floor(x)


def _lerp(a, b, t):
    return a + (b - a) * t


def _f(value) -> NodeValue:
    return NodeValue.of_float(value)


def _rgb(r, g, b) -> NodeValue:
    return NodeValue.of_color(r, g, b)


def _uv(x, y) -> NodeValue:
    return NodeValue.of_vector2(x, y)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@node_kind("uv-input")
def _uv_input(ctx):
    return {"uv": _uv(ctx.u, ctx.v), "x": _f(ctx.u), "y": _f(ctx.v)}


@node_kind("value-input")
def _value_input(ctx):
    return {"value": _f(ctx.param("value"))}


@node_kind("color-input")
def _color_input(ctx):
    return {"color": _rgb(*ctx.param("color"))}


@node_kind("time-input")
def _time_input(ctx):
    # Still renders sample a fixed instant
    return {"time": _f(0.5)}


# ---------------------------------------------------------------------------
# Noise
# ---------------------------------------------------------------------------

@node_kind("noise-perlin")
def _noise_perlin(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    value = fbm(
        np.multiply(x, scale), np.multiply(y, scale),
        octaves=ctx.param("octaves"),
        persistence=ctx.param("persistence"),
        lacunarity=2.0,
        seed=ctx.param("seed"),
    )
    return {"value": _f(value), "color": _rgb(value, value, value)}


@node_kind("noise-voronoi")
def _noise_voronoi(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    sample = voronoi(
        np.multiply(x, scale), np.multiply(y, scale),
        seed=ctx.param("seed"), randomness=ctx.param("randomness"),
    )
    return {"distance": _f(sample.distance), "cell": _f(sample.cell_id)}


@node_kind("noise-fbm")
def _noise_fbm(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    value = fbm(
        np.multiply(x, scale), np.multiply(y, scale),
        octaves=ctx.param("octaves"),
        persistence=0.5,
        lacunarity=ctx.param("lacunarity"),
        seed=ctx.param("seed"),
    )
    return {"value": _f(value)}


@node_kind("noise-worley")
def _noise_worley(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    sample = voronoi(np.multiply(x, scale), np.multiply(y, scale), seed=ctx.param("seed"))
    edge = np.minimum(1.0, sample.second_distance - sample.distance)
    return {
        "f1": _f(sample.distance),
        "f2": _f(sample.second_distance),
        "edge": _f(edge),
    }


@node_kind("noise-simplex")
def _noise_simplex(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    seed = ctx.param("seed")
    sx = np.multiply(x, scale)
    sy = np.multiply(y, scale)
    base = value_noise_2d(sx, sy, seed)
    detail = value_noise_2d(sx * 1.5 + 100.0, sy * 1.5 + 100.0, seed)
    return {"value": _f((base + detail * 0.5) / 1.5)}


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

@node_kind("pattern-checker")
def _pattern_checker(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    parity = np.mod(np.floor(np.multiply(x, scale)) + np.floor(np.multiply(y, scale)), 2)
    return {"fac": _f(_where(parity == 0, 1.0, 0.0))}


@node_kind("pattern-stripes")
def _pattern_stripes(ctx):
    x, y = ctx.uv()
    angle = math.radians(ctx.param("angle"))
    rx = np.multiply(x, math.cos(angle)) - np.multiply(y, math.sin(angle))
    return {"fac": _f((np.sin(rx * ctx.param("scale") * TAU) + 1.0) / 2.0)}


@node_kind("pattern-dots")
def _pattern_dots(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    px = _fract(np.multiply(x, scale))
    py = _fract(np.multiply(y, scale))
    dist = np.hypot(px - 0.5, py - 0.5)
    return {"fac": _f(_where(dist < ctx.param("radius"), 1.0, 0.0))}


@node_kind("pattern-hexagon")
def _pattern_hexagon(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    sx = np.multiply(x, scale)
    sy = np.multiply(y, scale * 0.866)
    row = np.floor(sy)
    offset = np.where(np.mod(row, 2) == 0, 0.0, 0.5)
    col = np.floor(sx + offset)
    fac = (np.sin(sx * 3.0) + np.cos(sy * 3.0) + 2.0) / 4.0
    return {"fac": _f(fac), "cell": _f(lattice_hash(row * 1000.0 + col))}


@node_kind("pattern-wave")
def _pattern_wave(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    distortion = ctx.param("distortion")
    wave = np.sin(np.multiply(x, scale * TAU))
    if distortion > 0:
        wave = wave + np.sin(np.multiply(y, scale * distortion)) * 0.5
    return {"fac": _f((wave + 1.0) / 2.0)}


@node_kind("pattern-brick")
def _pattern_brick(ctx):
    x, y = ctx.uv()
    scale_x = ctx.param("scaleX")
    scale_y = ctx.param("scaleY")
    mortar = ctx.param("mortarSize")
    row = np.floor(np.multiply(y, scale_y))
    fx = _fract((x + np.mod(row, 2) * ctx.param("offset")) * scale_x)
    fy = _fract(np.multiply(y, scale_y))
    is_mortar = (fx < mortar) | (fx > 1 - mortar) | (fy < mortar) | (fy > 1 - mortar)
    return {
        "fac": _f(_where(is_mortar, 0.0, 1.0)),
        "mortar": _f(_where(is_mortar, 1.0, 0.0)),
    }


@node_kind("pattern-rings")
def _pattern_rings(ctx):
    x, y = ctx.uv()
    dist = np.hypot(x - ctx.param("centerX"), y - ctx.param("centerY"))
    return {"fac": _f((np.sin(dist * ctx.param("scale") * TAU) + 1.0) / 2.0)}


@node_kind("pattern-spiral")
def _pattern_spiral(ctx):
    x, y = ctx.uv()
    dx = np.subtract(x, 0.5)
    dy = np.subtract(y, 0.5)
    angle = np.arctan2(dy, dx)
    dist = np.hypot(dx, dy)
    spiral = (angle / math.pi / 2.0 + dist * ctx.param("twist")) * ctx.param("arms")
    return {"fac": _f((np.sin(spiral * TAU) + 1.0) / 2.0)}


@node_kind("pattern-grid")
def _pattern_grid(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    thickness = ctx.param("thickness")
    fx = _fract(np.multiply(x, scale))
    fy = _fract(np.multiply(y, scale))
    return {"fac": _f(_where((fx < thickness) | (fy < thickness), 1.0, 0.0))}


@node_kind("pattern-triangle")
def _pattern_triangle(ctx):
    x, y = ctx.uv()
    scale = ctx.param("scale")
    sx = np.multiply(x, scale)
    sy = np.multiply(y, scale * 0.866)
    row = np.floor(sy)
    odd = np.mod(row, 2)
    col = np.floor(sx + odd * 0.5)
    fx = _fract(sx + odd * 0.5)
    fy = _fract(sy)
    inside = np.where(odd == 0, fx + fy < 1.0, fx > fy)
    return {
        "fac": _f(_where(inside, 1.0, 0.0)),
        "cell": _f(lattice_hash(row * 1000.0 + col)),
    }


# ---------------------------------------------------------------------------
# Math
# ---------------------------------------------------------------------------

def _binary_op(node_type, op):
    @node_kind(node_type)
    def evaluate(ctx):
        return {"result": _f(op(ctx.float("a"), ctx.float("b")))}
    return evaluate


def _unary_op(node_type, op):
    @node_kind(node_type)
    def evaluate(ctx):
        return {"result": _f(op(ctx.float("value")))}
    return evaluate


def _safe_divide(a, b):
    zero = np.equal(b, 0)
    return _where(zero, 0.0, np.divide(a, np.where(zero, 1.0, b)))


def _safe_mod(a, b):
    zero = np.equal(b, 0)
    return _where(zero, 0.0, np.mod(a, np.where(zero, 1.0, b)))


_binary_op("math-add", np.add)
_binary_op("math-subtract", np.subtract)
_binary_op("math-multiply", np.multiply)
_binary_op("math-divide", _safe_divide)
_binary_op("math-mod", _safe_mod)
_binary_op("math-min", np.minimum)
_binary_op("math-max", np.maximum)

_unary_op("math-abs", np.abs)
_unary_op("math-sine", lambda v: (np.sin(np.multiply(v, TAU)) + 1.0) / 2.0)
_unary_op("math-cosine", lambda v: (np.cos(np.multiply(v, TAU)) + 1.0) / 2.0)
_unary_op("math-fract", _fract)


@node_kind("math-power")
def _math_power(ctx):
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        result = np.power(np.abs(ctx.float("base")), ctx.float("exp"))
    return {"result": _f(result)}


@node_kind("math-mix")
def _math_mix(ctx):
    return {"result": _f(_lerp(ctx.float("a"), ctx.float("b"), ctx.float("fac")))}


@node_kind("math-clamp")
def _math_clamp(ctx):
    value = ctx.float("value")
    return {"result": _f(np.maximum(ctx.param("min"), np.minimum(ctx.param("max"), value)))}


@node_kind("math-step")
def _math_step(ctx):
    return {"result": _f(_where(ctx.float("value") < ctx.float("edge"), 0.0, 1.0))}


@node_kind("math-smoothstep")
def _math_smoothstep(ctx):
    value = ctx.float("value")
    edge0 = ctx.float("edge0")
    edge1 = ctx.float("edge1")
    span = np.subtract(edge1, edge0)
    flat = np.equal(span, 0)
    t = np.where(
        flat,
        np.where(np.less(value, edge0), 0.0, 1.0),
        np.clip((value - edge0) / np.where(flat, 1.0, span), 0.0, 1.0),
    )
    return {"result": _f(_unwrap(t * t * (3.0 - 2.0 * t)))}


@node_kind("math-distance")
def _math_distance(ctx):
    x, y = ctx.uv()
    dist = np.hypot(x - ctx.param("centerX"), y - ctx.param("centerY"))
    return {"result": _f(dist * math.sqrt(2.0))}


# ---------------------------------------------------------------------------
# Color
# ---------------------------------------------------------------------------

def _mix_colors(c1, c2, t) -> NodeValue:
    return _rgb(*(_lerp(a, b, t) for a, b in zip(c1, c2)))


@node_kind("color-mix")
def _color_mix(ctx):
    return {"color": _mix_colors(ctx.color("a"), ctx.color("b"), ctx.float("fac"))}


@node_kind("color-gradient")
def _color_gradient(ctx):
    return {"color": _mix_colors(ctx.param("color1"), ctx.param("color2"), ctx.float("fac"))}


@node_kind("color-ramp")
def _color_ramp(ctx):
    fac = ctx.float("fac")
    c1, c2, c3 = ctx.param("color1"), ctx.param("color2"), ctx.param("color3")
    pos2 = ctx.param("pos2")
    low_t = np.divide(fac, pos2) if pos2 > 0 else np.ones_like(fac, dtype=np.float64)
    high_t = np.divide(np.subtract(fac, pos2), 1.0 - pos2) if pos2 < 1 else np.zeros_like(fac, dtype=np.float64)
    below = np.less(fac, pos2)
    channels = [
        _where(below, _lerp(a, b, low_t), _lerp(b, c, high_t))
        for a, b, c in zip(c1, c2, c3)
    ]
    return {"color": _rgb(*channels)}


@node_kind("color-hsv")
def _color_hsv(ctx):
    h = ctx.float("h")
    s = ctx.float("s")
    v = ctx.float("v")
    i = np.floor(np.multiply(h, 6.0))
    f = np.multiply(h, 6.0) - i
    p = v * (1.0 - s)
    q = v * (1.0 - f * s)
    t = v * (1.0 - (1.0 - f) * s)
    sector = np.mod(i, 6)
    conditions = [sector == k for k in range(6)]

    def pick(*choices):
        return _unwrap(np.select(conditions, [np.broadcast_to(c, np.shape(sector)) for c in choices], 0.0))

    return {"color": _rgb(pick(v, q, p, p, t, v), pick(t, v, v, q, p, p), pick(p, p, t, v, v, q))}


@node_kind("color-brightness")
def _color_brightness(ctx):
    brightness = ctx.param("brightness")
    contrast = ctx.param("contrast")
    adjusted = [
        np.clip((c - 0.5) * (1.0 + contrast) + 0.5 + brightness, 0.0, 1.0)
        for c in ctx.color("color")
    ]
    return {"color": _rgb(*adjusted)}


@node_kind("color-invert")
def _color_invert(ctx):
    fac = ctx.param("fac")
    return {"color": _rgb(*(_lerp(c, 1.0 - c, fac) for c in ctx.color("color")))}


@node_kind("color-separate")
def _color_separate(ctx):
    r, g, b = ctx.color("color")
    return {"r": _f(r), "g": _f(g), "b": _f(b)}


@node_kind("color-combine")
def _color_combine(ctx):
    return {"color": _rgb(ctx.float("r"), ctx.float("g"), ctx.float("b"))}


# ---------------------------------------------------------------------------
# Transform
# ---------------------------------------------------------------------------

@node_kind("transform-scale")
def _transform_scale(ctx):
    x, y = ctx.uv()
    return {"uv": _uv(np.multiply(x, ctx.param("scaleX")), np.multiply(y, ctx.param("scaleY")))}


@node_kind("transform-rotate")
def _transform_rotate(ctx):
    x, y = ctx.uv()
    angle = math.radians(ctx.param("angle"))
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    dx = np.subtract(x, 0.5)
    dy = np.subtract(y, 0.5)
    return {"uv": _uv(dx * cos_a - dy * sin_a + 0.5, dx * sin_a + dy * cos_a + 0.5)}


@node_kind("transform-translate")
def _transform_translate(ctx):
    x, y = ctx.uv()
    return {"uv": _uv(np.add(x, ctx.param("offsetX")), np.add(y, ctx.param("offsetY")))}


@node_kind("transform-tile")
def _transform_tile(ctx):
    x, y = ctx.uv()
    return {"uv": _uv(_fract(np.multiply(x, ctx.param("tilesX"))), _fract(np.multiply(y, ctx.param("tilesY"))))}


@node_kind("transform-mirror")
def _transform_mirror(ctx):
    x, y = ctx.uv()
    if ctx.param("mirrorX"):
        x = _where(np.greater(x, 0.5), 1.0 - np.asarray(x), x)
    if ctx.param("mirrorY"):
        y = _where(np.greater(y, 0.5), 1.0 - np.asarray(y), y)
    return {"uv": _uv(x, y)}


@node_kind("transform-distort")
def _transform_distort(ctx):
    x, y = ctx.uv()
    amount = ctx.float("amount")
    scale = ctx.param("scale")
    sx = np.multiply(x, scale)
    sy = np.multiply(y, scale)
    # Signed noise in [-1, 1]
    nx = value_noise_2d(sx, sy) * 2.0 - 1.0
    ny = value_noise_2d(sx + 100.0, sy + 100.0) * 2.0 - 1.0
    return {"uv": _uv(x + nx * amount, y + ny * amount)}


# ---------------------------------------------------------------------------
# Mask
# ---------------------------------------------------------------------------

_BLEND_OPS = (
    lambda a, b: a + b,
    lambda a, b: a * b,
    np.maximum,
    np.minimum,
    lambda a, b: 1.0 - (1.0 - a) * (1.0 - b),
    lambda a, b: np.where(np.less(a, 0.5), 2.0 * a * b, 1.0 - 2.0 * (1.0 - a) * (1.0 - b)),
)


@node_kind("mask-threshold")
def _mask_threshold(ctx):
    return {"mask": _f(_where(np.greater(ctx.float("value"), ctx.param("threshold")), 1.0, 0.0))}


@node_kind("mask-invert")
def _mask_invert(ctx):
    return {"mask": _f(1.0 - np.asarray(ctx.float("mask")))}


@node_kind("mask-blend")
def _mask_blend(ctx):
    op = _BLEND_OPS[ctx.param("mode")]
    result = np.clip(op(np.asarray(ctx.float("a")), np.asarray(ctx.float("b"))), 0.0, 1.0)
    return {"mask": _f(_unwrap(result))}


@node_kind("mask-edge")
def _mask_edge(ctx):
    mask = ctx.float("mask")
    return {"mask": _f(_where(np.abs(np.subtract(mask, 0.5)) < ctx.param("width"), 1.0, 0.0))}


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@node_kind("output-pattern")
def _output_pattern(ctx):
    mask = ctx.float("mask")
    r, g, b = ctx.color("color")
    return {"final": _rgb(np.multiply(r, mask), np.multiply(g, mask), np.multiply(b, mask))}
