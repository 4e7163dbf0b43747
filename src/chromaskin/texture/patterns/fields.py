"""
Raster styles computed per cell with numpy rather than drawn shape by
shape: value blocks, digital camo, Voronoi cells, metaballs and halftone.
Cells are evaluated at reduced resolution, expanded to pixels and
composited through ``SurfaceSet.paint_field``.
"""

import math

import numpy as np

from chromaskin.texture.patterns.base import PatternContext, cell_size, expand_cells, pattern_routine


def _paint_cells(ctx: PatternContext, layers, block: int, coverage=None):
    ctx.surfaces.paint_field({ch: expand_cells(v, block, ctx.size) for ch, v in layers.items()}, coverage)


def _cell_draws(ctx: PatternContext, n: int) -> np.ndarray:
    """(n, n) uniform draws indexed [row, col], drawn column-major."""
    return ctx.random.take(n * n).reshape(n, n).T


def _rgba(color, alpha, shape) -> np.ndarray:
    out = np.empty(shape + (4,), dtype=np.uint8)
    out[..., :3] = color
    out[..., 3] = np.clip(alpha, 0, 255)
    return out


def _wrapped(delta: np.ndarray, size: int, seamless: bool) -> np.ndarray:
    delta = np.abs(delta)
    return np.minimum(delta, size - delta) if seamless else delta


@pattern_routine("noise", tiled=False)
def draw_noise(ctx: PatternContext):
    pal = ctx.palette
    block = cell_size(2, 10, ctx.density, 0.05, ctx.element_size, 0.05)
    n = math.ceil(ctx.size / block)
    intensity = _cell_draws(ctx, n)
    pattern = _rgba(pal.primary, np.floor(intensity * 200), intensity.shape)
    layers = pal.layers(pattern, intensity, tilt=(intensity * 0.5, 0.0), pearl=intensity * 0.5)
    _paint_cells(ctx, layers, block)


@pattern_routine("digicamo", tiled=False)
def draw_digicamo(ctx: PatternContext):
    """Four-tone pixel camouflage."""
    pal = ctx.palette
    block = cell_size(4, 24, ctx.density, 0.12, ctx.element_size, 0.1)
    n = math.ceil(ctx.size / block)
    tone = np.minimum(np.floor(_cell_draws(ctx, n) * 4), 3).astype(np.int64)
    intensity = 0.3 + tone * 0.2
    swatches = np.array([
        pal.background + (0xff,),
        pal.secondary + (0xaa,),
        pal.primary + (0x70,),
        pal.accent + (0x50,),
    ], dtype=np.uint8)
    layers = pal.layers(swatches[tone], intensity, tilt=(intensity * 0.5, 0.0), pearl=intensity * 0.7)
    _paint_cells(ctx, layers, block)


@pattern_routine("voronoi")
def draw_voronoi(ctx: PatternContext):
    """
    Nearest-seed cells shaded by distance, with the seeds marked.

    In seamless mode distances wrap around the texture edges so the
    cells tile.
    """
    pal, size = ctx.palette, ctx.size
    count = int(20 + ctx.density * 0.5)
    seeds = ctx.random.take(count * 3).reshape(count, 3)
    xs, ys = seeds[:, 0] * size, seeds[:, 1] * size
    kinds = np.minimum(np.floor(seeds[:, 2] * 3), 2).astype(np.int64)

    block = 4
    n = math.ceil(size / block)
    corners = np.arange(n, dtype=np.float64) * block
    gx, gy = np.meshgrid(corners, corners)

    best = np.full(gx.shape, np.inf)
    nearest = np.zeros(gx.shape, dtype=np.int64)
    for k in range(count):
        dx = _wrapped(gx - xs[k], size, ctx.settings.seamless)
        dy = _wrapped(gy - ys[k], size, ctx.settings.seamless)
        dist = np.hypot(dx, dy)
        closer = dist < best
        best = np.where(closer, dist, best)
        nearest = np.where(closer, k, nearest)

    falloff = np.minimum(1.0, best / 100.0)
    swatches = np.array([pal.primary, pal.secondary, pal.accent], dtype=np.uint8)
    pattern = _rgba(swatches[kinds[nearest]], np.floor((1 - falloff) * 150), falloff.shape)
    layers = pal.layers(
        pattern,
        1 - falloff * 0.7,
        tilt=(1 - falloff, 0.0),
        rough=1 - falloff * 0.5,
        pearl=1 - falloff * 0.5,
    )
    _paint_cells(ctx, layers, block)

    seed_ink = pal.ink(pal.accent, 1.0)
    for x, y in zip(xs, ys):
        ctx.surfaces.fill_circle(float(x), float(y), 3, seed_ink)


@pattern_routine("metaballs")
def draw_metaballs(ctx: PatternContext):
    """Iso-surface of summed inverse-square ball fields above threshold 1."""
    pal, size = ctx.palette, ctx.size
    count = int(5 + ctx.density * 0.1)
    balls = ctx.random.take(count * 3).reshape(count, 3)

    block = 4
    n = math.ceil(size / block)
    corners = np.arange(n, dtype=np.float64) * block
    gx, gy = np.meshgrid(corners, corners)

    total = np.zeros(gx.shape)
    for bx, by, br in balls:
        radius = 30 + br * ctx.element_size * 2
        dx = _wrapped(gx - bx * size, size, ctx.settings.seamless)
        dy = _wrapped(gy - by * size, size, ctx.settings.seamless)
        total += radius * radius / (dx * dx + dy * dy + 1)

    threshold = 1.0
    inside = total > threshold
    intensity = np.minimum(1.0, total / (threshold * 2))
    rgb = np.where((intensity > 0.8)[..., None], np.array(pal.primary), np.array(pal.secondary))
    pattern = rgb.astype(np.uint8)
    layers = pal.layers(pattern, intensity, tilt=(0.0, -intensity), height=intensity)
    _paint_cells(ctx, layers, block, coverage=expand_cells(inside, block, size))


@pattern_routine("halftone", tiled=False)
def draw_halftone(ctx: PatternContext):
    """Dot screen whose dot radius grows toward the bottom-right corner."""
    pal, size = ctx.palette, ctx.size
    step = int(max(4, math.floor(16 - ctx.density * 0.08)))
    n = math.ceil(size / step)
    cols, rows = np.meshgrid(np.arange(n), np.arange(n))
    gradient = (cols + rows) / (2 * n)
    radius = step * 0.4 * (0.2 + gradient * 0.8)
    intensity = 0.3 + gradient * 0.7

    pattern = np.broadcast_to(np.array(pal.primary, dtype=np.uint8), intensity.shape + (3,))
    layers = pal.layers(pattern, intensity, tilt=(intensity, 0.0), height=intensity)

    px = np.arange(size, dtype=np.float64) + 0.5
    offset = px - (np.floor(px / step) * step + step / 2)
    ox, oy = np.meshgrid(offset, offset)
    coverage = ox * ox + oy * oy <= expand_cells(radius, step, size) ** 2
    _paint_cells(ctx, layers, step, coverage=coverage)
