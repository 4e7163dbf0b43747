"""
Electronic and digital styles: circuit boards, chips, barcodes, data
streams, glitch blocks and scanlines.
"""

import math
from dataclasses import dataclass

from chromaskin.texture.patterns.base import PatternContext, cell_size, pattern_routine


@dataclass
class _CircuitNode:
    x: float
    y: float
    col: int
    row: int
    kind: int
    radius: float


@pattern_routine("circuit")
def draw_circuit(ctx: PatternContext):
    """Jittered node lattice joined by straight or L-shaped traces."""
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    spacing = cell_size(15, 150, ctx.density, 0.8, ctx.spacing, 0.3)
    cols = math.ceil(ctx.size / spacing) + 2
    rows = math.ceil(ctx.size / spacing) + 2
    lw = ctx.line_width

    nodes = []
    for i in range(cols):
        for j in range(rows):
            if rnd() > 0.2:
                nodes.append(_CircuitNode(
                    x=i * spacing + (rnd() - 0.5) * spacing * 0.2,
                    y=j * spacing + (rnd() - 0.5) * spacing * 0.2,
                    col=i,
                    row=j,
                    kind=int(rnd() * 5),
                    radius=3 + rnd() * ctx.element_size * 0.15,
                ))

    # Jitter is at most 0.1 spacing, so only adjacent cells can fall
    # inside the 1.8 spacing connection radius.
    by_cell = {(n.col, n.row): n for n in nodes}
    threshold = (100 - ctx.settings.connection_density) / 100
    trace = pal.ink(pal.secondary, 0.6, tilt=(0.5, 0.0), rough=0.7, pearl=0.5)
    for node in nodes:
        for dc in (-1, 0, 1):
            for dr in (-1, 0, 1):
                other = by_cell.get((node.col + dc, node.row + dr))
                if other is None or other is node:
                    continue
                dist = math.hypot(other.x - node.x, other.y - node.y)
                if not (spacing * 0.5 < dist < spacing * 1.8) or rnd() <= threshold:
                    continue
                if rnd() > 0.5 and ctx.complexity > 30:
                    elbow = (other.x, node.y) if rnd() > 0.5 else (node.x, other.y)
                    path = [(node.x, node.y), elbow, (other.x, other.y)]
                else:
                    path = [(node.x, node.y), (other.x, other.y)]
                surf.stroke_polyline(path, trace, lw * 0.8, aux_width=lw * 2)

    pad = pal.ink(pal.primary, 1.0, tilt=(1.0, 0.5))
    for node in nodes:
        x, y, s = node.x, node.y, node.radius
        if node.kind == 0:
            surf.fill_circle(x, y, s, pad)
        elif node.kind == 1:
            surf.fill_rect(x - s, y - s, s * 2, s * 2, pad)
        elif node.kind == 2:
            surf.stroke_circle(x, y, s * 1.2, pad, lw)
            surf.fill_circle(x, y, s * 0.5, pad)
        elif node.kind == 3:
            surf.fill_polygon([(x, y - s), (x + s, y + s * 0.7), (x - s, y + s * 0.7)], pad)
        else:
            surf.fill_polygon([(x, y - s), (x + s, y), (x, y + s), (x - s, y)], pad)


@pattern_routine("chipset", tiled=False)
def draw_chipset(ctx: PatternContext):
    """Grid of chip packages with pins, optional die outline and pin-1 marker."""
    pal, surf = ctx.palette, ctx.surfaces
    chip = cell_size(30, 120, ctx.density, 0.6, ctx.element_size, 0.5)
    cols = math.ceil(ctx.size / chip) + 1
    rows = math.ceil(ctx.size / chip) + 1
    lw = ctx.line_width
    pins_h = int(3 + ctx.complexity * 0.05)
    pins_v = int(2 + ctx.complexity * 0.04)

    for i in range(cols):
        for j in range(rows):
            x = i * chip + chip * 0.1
            y = j * chip + chip * 0.1
            w = h = chip * 0.8

            body = pal.ink(pal.background, 0.8, tilt=(0.7, 0.3), rough=0.9, pearl=0.8)
            surf.fill_rect(x, y, w, h, body)
            outline = pal.ink(pal.primary, 1.0).only("pattern", "mask")
            surf.stroke_rect(x, y, w, h, outline, lw)

            pin = pal.ink(pal.secondary, 0.7, tilt=(0.7, 0.3), rough=0.9, pearl=0.8)
            step = w / (pins_h + 1)
            for p in range(1, pins_h + 1):
                px = x + p * step
                surf.line(px, y, px, y - 8, pin, lw * 0.7)
                surf.line(px, y + h, px, y + h + 8, pin, lw * 0.7)
            step = h / (pins_v + 1)
            for p in range(1, pins_v + 1):
                py = y + p * step
                surf.line(x, py, x - 8, py, pin, lw * 0.7)
                surf.line(x + w, py, x + w + 8, py, pin, lw * 0.7)

            if ctx.complexity > 30:
                die = pal.ink(pal.accent, 0.5, alpha=0x60 / 255).only("pattern", "mask")
                surf.stroke_rect(x + w * 0.15, y + h * 0.15, w * 0.7, h * 0.7, die, lw * 0.7)

            surf.fill_circle(x + 6, y + 6, 3, pal.ink(pal.accent, 1.0, tilt=(0.7, 0.3)))


@pattern_routine("barcode", tiled=False)
def draw_barcode(ctx: PatternContext):
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    vertical = rnd() > 0.5
    pos = 0
    while pos < size:
        bar = 2 + int(rnd() * 10)
        filled = rnd() > 0.35
        intensity = 0.6 + rnd() * 0.4
        if filled:
            color = pal.accent if rnd() > 0.8 else pal.primary
            ink = pal.ink(color, intensity, tilt=(intensity, 0.0))
            if vertical:
                surf.fill_rect(pos, 0, bar, size, ink)
            else:
                surf.fill_rect(0, pos, size, bar, ink)
        pos += bar + 1 + int(rnd() * 5)


@pattern_routine("datastream", tiled=False)
def draw_datastream(ctx: PatternContext):
    """Alternating vertical/horizontal dashed buses carrying data blocks."""
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    count = int(10 + ctx.density * 0.15)
    gap = size / count
    lw = ctx.line_width

    for s in range(count):
        vertical = s % 2 == 0
        pos = s * gap + gap / 2
        intensity = 0.5 + rnd() * 0.5
        color = pal.primary if rnd() > 0.5 else pal.accent
        bus = pal.ink(color, intensity * 0.6, tilt=(intensity * 0.5, 0.0))
        dash = (5 + rnd() * 15, 10 + rnd() * 20)
        if vertical:
            surf.stroke_polyline([(pos, 0), (pos, size)], bus, lw, aux_width=lw * 1.5, dash=dash)
        else:
            surf.stroke_polyline([(0, pos), (size, pos)], bus, lw, aux_width=lw * 1.5, dash=dash)

        blocks = int(5 + rnd() * 10)
        block_gap = size / blocks
        for b in range(blocks):
            b_pos = b * block_gap + rnd() * block_gap * 0.6
            b_size = 4 + rnd() * 12
            b_int = 0.6 + rnd() * 0.4
            ink = pal.ink(pal.primary, b_int, tilt=(b_int, 0.0))
            if vertical:
                surf.fill_rect(pos - b_size / 2, b_pos, b_size, b_size * 0.4, ink)
            else:
                surf.fill_rect(b_pos, pos - b_size / 2, b_size * 0.4, b_size, ink)


@pattern_routine("glitch", tiled=False)
def draw_glitch(ctx: PatternContext):
    """Displaced color blocks plus thin translucent scanline tears."""
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    count = int(20 + ctx.density * 0.5)
    swatches = (pal.primary, pal.secondary, pal.accent)

    for _ in range(count):
        x = math.floor(rnd() * (size / 16)) * 16
        y = math.floor(rnd() * (size / 8)) * 8
        w = 16 + math.floor(rnd() * 15) * 16
        h = 4 + math.floor(rnd() * 4) * 4
        intensity = 0.5 + rnd() * 0.5
        color = ctx.pick(swatches)
        surf.fill_rect(x, y, w, h, pal.ink(color, intensity, tilt=(intensity, 0.0), alpha=0xcc / 255))
        if rnd() > 0.6:
            ghost = pal.ink(pal.primary, intensity, alpha=0x40 / 255).only("pattern")
            surf.fill_rect(x + 2, y + 1, w, h, ghost)

    for _ in range(30):
        y = math.floor(rnd() * size)
        alpha = math.floor(rnd() * 60)
        tear = pal.ink(pal.primary, alpha=alpha / 255).only("pattern")
        surf.fill_rect(0, y, size, 1 + math.floor(rnd() * 2), tear)


@pattern_routine("scanlines", tiled=False)
def draw_scanlines(ctx: PatternContext):
    pal, surf, size = ctx.palette, ctx.surfaces, ctx.size
    step = int(max(2, math.floor(8 - ctx.density * 0.04)))
    for y in range(0, size, step):
        intensity = 0.3 + (0.4 if y % (step * 2) == 0 else 0.0)
        ink = pal.ink(
            pal.primary,
            intensity,
            rough=intensity * 0.5,
            pearl=intensity * 0.3,
            alpha=math.floor(intensity * 100) / 255,
        )
        surf.fill_rect(0, y, size, 1, ink)
