"""
Lattice and shape styles: hexagons, triangles, grids, dots, diamonds,
circles, stars, mandalas, plaid, zigzags, scales, truchet tiles,
crosshatching and mosaics.
"""

import math
from typing import List, NamedTuple

from chromaskin.texture.patterns.base import SQRT3, TAU, PatternContext, cell_size, pattern_routine
from chromaskin.texture.settings import PatternSettings
from chromaskin.texture.surfaces import circle_points


class GridLines(NamedTuple):
    cell: int
    columns: List[float]
    rows: List[float]


def grid_lines(size: int, settings: PatternSettings) -> GridLines:
    """
    Line positions of the ``grid`` style.

    ``cell = max(10, floor(80 - density*0.4 + spacing*0.3))`` and there are
    ``ceil(size/cell) + 1`` lines in each direction.
    """
    cell = cell_size(10, 80, settings.density, 0.4, settings.element_spacing, 0.3)
    count = math.ceil(size / cell) + 1
    positions = [float(i * cell) for i in range(count)]
    return GridLines(cell, positions, list(positions))


@pattern_routine("grid", tiled=False)
def draw_grid(ctx: PatternContext):
    pal, surf, size = ctx.palette, ctx.surfaces, ctx.size
    lines = grid_lines(size, ctx.settings)
    cell = lines.cell

    rule = pal.ink(pal.secondary, 0.3, alpha=0x60 / 255)
    for x in lines.columns:
        surf.line(x, 0, x, size, rule, 1)
    for y in lines.rows:
        surf.line(0, y, size, y, rule, 1)

    pad = 2
    for i in range(len(lines.columns)):
        for j in range(len(lines.rows)):
            if not ctx.filled():
                continue
            x, y = i * cell + pad, j * cell + pad
            w = cell - pad * 2
            surf.fill_rect(x, y, w, w, pal.ink(pal.primary, 1.0, tilt=(1.0, 0.5), alpha=0x40 / 255))
            surf.stroke_rect(x, y, w, w, pal.ink(pal.primary, 1.0).only("pattern", "mask"), ctx.line_width)


@pattern_routine("hexgrid")
def draw_hexgrid(ctx: PatternContext):
    """Pointy-top honeycomb with optional cell fills and inner rings."""
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    radius = cell_size(10, 80, ctx.density, 0.4, ctx.element_size, 0.3)
    hex_w = radius * SQRT3
    cols = math.ceil(ctx.size / hex_w) + 2
    rows = math.ceil(ctx.size / (radius * 1.5)) + 2
    lw = ctx.line_width
    edge = pal.ink(pal.primary, 1.0, tilt=(0.7, 0.0), rough=0.8, pearl=0.8)

    for row in range(rows):
        for col in range(cols):
            x = col * hex_w + (hex_w / 2 if row % 2 else 0)
            y = row * radius * 1.5
            corners = [
                (x + radius * math.cos(math.pi / 3 * i - math.pi / 2),
                 y + radius * math.sin(math.pi / 3 * i - math.pi / 2))
                for i in range(6)
            ]
            if ctx.filled():
                cell = pal.ink(pal.secondary, 0.8, tilt=(1.0, 0.3), rough=1.2, pearl=1.0, alpha=0x60 / 255)
                surf.fill_polygon(corners, cell)
            surf.stroke_polyline(corners, edge, lw, closed=True, aux_width=lw * 1.5)
            if rnd() > 0.5 and ctx.complexity > 30:
                surf.stroke_circle(x, y, radius * (0.3 + rnd() * 0.3), edge, lw, aux_width=lw * 1.5)


@pattern_routine("triangles")
def draw_triangles(ctx: PatternContext):
    pal, surf = ctx.palette, ctx.surfaces
    side = cell_size(15, 100, ctx.density, 0.5, ctx.element_size, 0.4)
    tri_h = side * SQRT3 / 2
    cols = math.ceil(ctx.size / side) + 2
    rows = math.ceil(ctx.size / tri_h) + 2
    lw = ctx.line_width

    for row in range(rows):
        for col in range(cols):
            x = col * side + (side / 2 if row % 2 else 0)
            y = row * tri_h
            if (col + row) % 2 == 1:
                corners = [(x, y + tri_h), (x + side / 2, y), (x + side, y + tri_h)]
            else:
                corners = [(x, y), (x + side, y), (x + side / 2, y + tri_h)]
            if ctx.filled():
                fill = pal.ink(pal.secondary, 0.7, tilt=(0.5, 0.0), rough=0.8, pearl=0.7, alpha=0x40 / 255)
                surf.fill_polygon(corners, fill)
            edge = pal.ink(pal.primary, 1.0, tilt=(1.0, 0.0))
            surf.stroke_polyline(corners, edge, lw, closed=True)


@pattern_routine("dots")
def draw_dots(ctx: PatternContext):
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    step = cell_size(8, 60, ctx.density, 0.3, ctx.spacing, 0.2)
    count = math.ceil(ctx.size / step) + 1
    max_r = ctx.element_size * 0.1

    for i in range(count):
        for j in range(count):
            x = i * step + step / 2
            y = j * step + step / 2
            r = 1 + rnd() * max_r
            intensity = 0.5 + rnd() * 0.5
            color = pal.accent if rnd() > 0.7 else pal.primary
            surf.fill_circle(x, y, r, pal.ink(color, intensity, tilt=(intensity, intensity * 0.3)))
            if rnd() > 0.85 and ctx.complexity > 40:
                ring = pal.ink(pal.primary, 0.7, tilt=(intensity, intensity * 0.3))
                surf.stroke_circle(x, y, r + 3, ring, ctx.line_width * 0.5)


@pattern_routine("diamonds")
def draw_diamonds(ctx: PatternContext):
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    cell = cell_size(15, 60, ctx.density, 0.3, ctx.element_size, 0.3)
    count = math.ceil(ctx.size / cell) + 1
    half = cell * 0.45
    lw = ctx.line_width

    for col in range(count):
        for row in range(count):
            x = col * cell + (cell / 2 if row % 2 else 0)
            y = row * cell * 0.5
            intensity = 0.5 + rnd() * 0.5
            corners = [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]
            edge_color = pal.accent if rnd() > 0.7 else pal.primary
            if ctx.filled():
                fill = pal.ink(pal.secondary, intensity * 0.7, tilt=(intensity * 0.5, 0.0), alpha=0x30 / 255)
                surf.fill_polygon(corners, fill)
            edge = pal.ink(edge_color, intensity, tilt=(intensity, 0.0))
            surf.stroke_polyline(corners, edge, lw, closed=True, aux_width=lw * 1.5)


@pattern_routine("circles")
def draw_circles(ctx: PatternContext):
    """Scattered concentric ring groups, some with a center dot."""
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    count = int(10 + ctx.density * 0.3)
    lw = ctx.line_width

    for _ in range(count):
        x, y = ctx.random_point()
        radius = 20 + rnd() * ctx.element_size * 2
        rings = int(1 + rnd() * (ctx.complexity * 0.05))
        intensity = 0.5 + rnd() * 0.5
        for r in range(rings):
            ring_r = radius - r * (radius / rings * 0.8)
            color = pal.primary if r % 2 == 0 else pal.secondary
            ink = pal.ink(color, intensity * (1 - r * 0.2), tilt=(intensity, 0.0),
                          rough=intensity, pearl=intensity)
            surf.stroke_circle(x, y, ring_r, ink, lw, aux_width=lw * 1.5)
        if rnd() > 0.5:
            surf.fill_circle(x, y, 3, pal.ink(pal.accent, 1.0, tilt=(intensity, 0.0)))


@pattern_routine("stars")
def draw_stars(ctx: PatternContext):
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    count = int(15 + ctx.density * 0.4)

    for _ in range(count):
        x, y = ctx.random_point()
        outer = 10 + rnd() * ctx.element_size * 0.8
        inner = outer * (0.3 + rnd() * 0.2)
        points = 4 + int(rnd() * 4)
        intensity = 0.6 + rnd() * 0.4
        color = pal.accent if rnd() > 0.7 else pal.primary
        outline = []
        for p in range(points * 2):
            r = outer if p % 2 == 0 else inner
            angle = math.pi / points * p - math.pi / 2
            outline.append((x + r * math.cos(angle), y + r * math.sin(angle)))
        if ctx.filled():
            surf.fill_polygon(outline, pal.ink(color, intensity, tilt=(intensity, 0.3)))
        else:
            surf.stroke_polyline(outline, pal.ink(pal.primary, intensity, tilt=(intensity, 0.3)),
                                 ctx.line_width, closed=True)


@pattern_routine("geometric", tiled=False)
def draw_geometric(ctx: PatternContext):
    """Centered mandala of nested rotated polygons and radial spokes."""
    pal, surf, size = ctx.palette, ctx.surfaces, ctx.size
    cx = cy = size / 2
    max_r = size * 0.48
    rings = int(4 + ctx.density * 0.08)
    sides_base = 3 + int(ctx.complexity * 0.06)
    lw = ctx.line_width

    for r in range(rings):
        radius = max_r * (r + 1) / rings
        sides = sides_base + r % 2
        rot = r * math.pi / (rings * 2)
        color = pal.primary if r % 2 == 0 else pal.secondary
        ink = pal.ink(color, 0.6 + r * 0.05, tilt=(0.5 + r * 0.1, 0.0),
                      rough=0.7 + r * 0.05, pearl=0.7 + r * 0.05)
        outline = [
            (cx + radius * math.cos(TAU / sides * i + rot), cy + radius * math.sin(TAU / sides * i + rot))
            for i in range(sides + 1)
        ]
        surf.stroke_polyline(outline, ink, lw, aux_width=lw * 1.5)

        if ctx.complexity > 40:
            spoke = pal.ink(pal.accent, 0.4, tilt=(0.5 + r * 0.1, 0.0), alpha=0x50 / 255)
            inner = max_r * r / rings if r > 0 else 0.0
            for i in range(sides):
                angle = TAU / sides * i + rot
                surf.line(cx + inner * math.cos(angle), cy + inner * math.sin(angle),
                          cx + radius * math.cos(angle), cy + radius * math.sin(angle),
                          spoke, lw, aux_width=lw * 1.5)


@pattern_routine("plaid", tiled=False)
def draw_plaid(ctx: PatternContext):
    pal, surf, size = ctx.palette, ctx.surfaces, ctx.size
    stripe = cell_size(8, 40, ctx.density, 0.2, ctx.element_size, 0.2)
    step = stripe * 2

    for y in range(0, size, step):
        intensity = 0.5 + y / size * 0.3
        surf.fill_rect(0, y, size, stripe, pal.ink(pal.primary, intensity, tilt=(0.5, 0.0), alpha=0x60 / 255))
    for x in range(0, size, step):
        intensity = 0.5 + x / size * 0.3
        surf.fill_rect(x, 0, stripe, size, pal.ink(pal.secondary, intensity, tilt=(0.5, 0.0), alpha=0x60 / 255))
    for x in range(0, size, step):
        for y in range(0, size, step):
            surf.fill_rect(x, y, stripe, stripe, pal.ink(pal.accent, 1.0, tilt=(0.5, 0.0), alpha=0x40 / 255))


@pattern_routine("zigzag", tiled=False)
def draw_zigzag(ctx: PatternContext):
    pal, surf, size = ctx.palette, ctx.surfaces, ctx.size
    count = int(8 + ctx.density * 0.1)
    gap = size / count
    amplitude = 20 + ctx.element_size * 0.5
    frequency = 5 + ctx.complexity * 0.1
    period = size / frequency
    lw = ctx.line_width

    for z in range(count):
        base_y = z * gap + gap / 2
        intensity = 0.5 + z / count * 0.5
        color = pal.primary if z % 2 == 0 else pal.secondary
        points = []
        x = 0.0
        while x <= size:
            y = base_y + (-amplitude if math.floor(x / period) % 2 == 0 else amplitude)
            points.append((x, y))
            x += period / 2
        surf.stroke_polyline(points, pal.ink(color, intensity, tilt=(intensity, 0.0)), lw, aux_width=lw * 2)


@pattern_routine("scales")
def draw_scales(ctx: PatternContext):
    """Overlapping half-disc fish scales in offset rows."""
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    scale = cell_size(10, 40, ctx.density, 0.2, ctx.element_size, 0.2)
    cols = math.ceil(ctx.size / scale) + 2
    rows = math.ceil(ctx.size / (scale * 0.7)) + 2
    lw = ctx.line_width

    for row in range(rows):
        for col in range(cols):
            x = col * scale + (scale / 2 if row % 2 else 0)
            y = row * scale * 0.7
            intensity = 0.5 + rnd() * 0.5
            outline = circle_points(x, y, scale * 0.6, 0.0, math.pi)
            surf.fill_polygon(outline, pal.ink(pal.primary, intensity, tilt=(0.5, 0.5), alpha=0x80 / 255))
            rim = pal.ink(pal.secondary, intensity).only("pattern", "mask")
            surf.stroke_polyline(outline, rim, lw * 0.5, closed=True)


@pattern_routine("labyrinth", tiled=False)
def draw_labyrinth(ctx: PatternContext):
    """Truchet-style cells holding a straight bar or a quarter arc."""
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    cell = cell_size(12, 50, ctx.density, 0.25, ctx.spacing, 0.2)
    count = math.ceil(size / cell)
    lw = ctx.line_width
    wall = pal.ink(pal.primary, 1.0, tilt=(1.0, 0.0))

    for i in range(count):
        for j in range(count):
            x, y = i * cell, j * cell
            kind = int(rnd() * 4)
            if kind == 0:
                surf.line(x, y + cell / 2, x + cell, y + cell / 2, wall, lw, aux_width=lw * 2)
            elif kind == 1:
                surf.line(x + cell / 2, y, x + cell / 2, y + cell, wall, lw, aux_width=lw * 2)
            elif kind == 2:
                surf.arc(x, y, cell / 2, 0.0, math.pi / 2, wall, lw, aux_width=lw * 2)
            else:
                surf.arc(x + cell, y + cell, cell / 2, math.pi, math.pi * 1.5, wall, lw, aux_width=lw * 2)


@pattern_routine("crosshatch", tiled=False)
def draw_crosshatch(ctx: PatternContext):
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    step = cell_size(8, 40, ctx.density, 0.2, ctx.spacing, 0.15)
    lw = ctx.line_width

    forward = pal.ink(pal.primary, 0.6, tilt=(0.5, 0.0), rough=0.7, pearl=0.6, alpha=0x70 / 255)
    for i in range(-size, 2 * size, step):
        surf.line(i, 0, i + size, size, forward, lw * 0.7, aux_width=lw)

    backward = pal.ink(pal.secondary, 0.4, tilt=(0.5, 0.0), rough=0.7, pearl=0.6, alpha=0x50 / 255)
    for i in range(-size, 2 * size, step):
        surf.line(i, size, i + size, 0, backward, lw * 0.7, aux_width=lw)

    if ctx.complexity > 50:
        for x in range(0, size, step * 2):
            for y in range(0, size, step * 2):
                if rnd() > 0.7:
                    surf.fill_circle(x, y, 2 + rnd() * 2, pal.ink(pal.accent, 1.0, tilt=(1.0, 0.5)))


@pattern_routine("mosaic")
def draw_mosaic(ctx: PatternContext):
    """Randomly rotated translucent tiles."""
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    count = int(30 + ctx.density * 0.8)
    swatches = (pal.primary, pal.secondary, pal.accent)

    for _ in range(count):
        x, y = ctx.random_point()
        w = 20 + rnd() * ctx.element_size * 1.5
        h = 20 + rnd() * ctx.element_size * 1.5
        intensity = 0.4 + rnd() * 0.6
        rot = rnd() * math.pi * 0.25 - math.pi * 0.125
        tile = pal.ink(ctx.pick(swatches), intensity, tilt=(intensity, 0.3), alpha=0xaa / 255)
        with surf.transformed():
            surf.translate(x, y)
            surf.rotate(rot)
            surf.fill_rect(-w / 2, -h / 2, w, h, tile)
            surf.stroke_rect(-w / 2, -h / 2, w, h, pal.ink(pal.primary).only("pattern"), ctx.line_width * 0.5)
