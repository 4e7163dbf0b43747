"""
Pseudo-3D styles.

Solids are faked by giving each logical face its own constant normal
tilt, height and occlusion: tops face the viewer and sit high, side
faces tilt left or right and sit lower. Terrain and wireframe derive
their relief from ``fbm``.
"""

import math
from dataclasses import replace

import numpy as np

from chromaskin.core.noise import fbm
from chromaskin.texture.inks import Ink, lerp_ink, with_alpha
from chromaskin.texture.patterns.base import (
    TAU,
    PatternContext,
    cell_size,
    expand_cells,
    pattern_routine,
)
from chromaskin.texture.patterns.tech import draw_circuit

_GRADIENT_STRIPS = 12


def _ink_at(stops, t: float) -> Ink:
    for (t0, a), (t1, b) in zip(stops, stops[1:]):
        if t <= t1:
            return lerp_ink(a, b, 0.0 if t1 == t0 else (t - t0) / (t1 - t0))
    return stops[-1][1]


def _strips(surf, x, y, w, h, stops, horizontal: bool):
    """Approximate a linear gradient across a rectangle with flat strips."""
    for k in range(_GRADIENT_STRIPS):
        ink = _ink_at(stops, (k + 0.5) / _GRADIENT_STRIPS)
        if horizontal:
            surf.fill_rect(x + w * k / _GRADIENT_STRIPS, y, w / _GRADIENT_STRIPS, h, ink)
        else:
            surf.fill_rect(x, y + h * k / _GRADIENT_STRIPS, w, h / _GRADIENT_STRIPS, ink)


def _box_faces(x, y, edge, lift):
    """Top, left and right rhombi of an isometric box standing at (x, y)."""
    top = [
        (x, y - lift),
        (x + edge * 0.5, y - lift + edge * 0.25),
        (x, y - lift + edge * 0.5),
        (x - edge * 0.5, y - lift + edge * 0.25),
    ]
    left = [
        (x - edge * 0.5, y - lift + edge * 0.25),
        (x, y - lift + edge * 0.5),
        (x, y + edge * 0.5),
        (x - edge * 0.5, y + edge * 0.25),
    ]
    right = [
        (x + edge * 0.5, y - lift + edge * 0.25),
        (x, y - lift + edge * 0.5),
        (x, y + edge * 0.5),
        (x + edge * 0.5, y + edge * 0.25),
    ]
    return top, left, right


@pattern_routine("cubes3d")
def draw_cubes3d(ctx: PatternContext):
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    cube = cell_size(20, 80, ctx.density, 0.4, ctx.element_size, 0.4)
    cols = math.ceil(size / (cube * 1.5)) + 2
    rows = math.ceil(size / cube) + 2
    depth = ctx.settings.depth_intensity / 100.0
    edge_ink = Ink(pattern=with_alpha(pal.primary, 0x80 / 255))

    for row in range(rows):
        for col in range(cols):
            x = col * cube * 1.5 + (cube * 0.75 if row % 2 else 0.0)
            y = row * cube
            lift = cube * (0.5 + rnd() * 0.5) * depth
            intensity = 0.4 + rnd() * 0.6

            top_face, left_face, right_face = _box_faces(x, y, cube, lift)
            top = pal.ink(pal.primary, intensity, tilt=(0.0, -1.0), height=0.8 + lift / cube * 0.2)
            surf.fill_polygon(top_face, top)
            surf.fill_polygon(left_face, replace(
                top, pattern=pal.secondary, normal=pal.normal(-0.7, 0.4),
                height=pal.height(0.5), ao=pal.ao(intensity * 0.7)))
            surf.fill_polygon(right_face, replace(
                top, pattern=pal.accent, normal=pal.normal(0.7, 0.4),
                height=pal.height(0.3), ao=pal.ao(intensity * 0.5)))
            surf.line(x, y - lift, x, y - lift + cube * 0.5, edge_ink, ctx.line_width * 0.5)


@pattern_routine("pyramids3d")
def draw_pyramids3d(ctx: PatternContext):
    """Four-faced pyramids lit from the top-left."""
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    edge = cell_size(25, 100, ctx.density, 0.5, ctx.element_size, 0.5)
    cols = math.ceil(size / edge) + 1
    rows = math.ceil(size / edge) + 1
    peak = edge * ctx.settings.depth_intensity / 100.0
    half = edge / 2

    for row in range(rows):
        for col in range(cols):
            x = col * edge + (half if row % 2 else 0.0)
            y = row * edge
            intensity = 0.5 + rnd() * 0.5
            h = peak * (0.5 + rnd() * 0.5)
            cx, cy = x + half, y + half
            apex = (cx, cy - h)
            faces = (
                ([apex, (cx - half, cy + half), (cx, cy)], (-0.5, -0.5), 1.0),
                ([apex, (cx, cy), (cx + half, cy + half)], (0.5, -0.5), 0.8),
                ([apex, (cx + half, cy - half), (cx, cy)], (0.5, 0.5), 0.6),
                ([apex, (cx, cy), (cx - half, cy - half)], (-0.5, 0.5), 0.4),
            )
            for idx, (points, tilt, bright) in enumerate(faces):
                color = pal.primary if idx % 2 == 0 else pal.secondary
                ink = pal.ink(color, intensity * bright, tilt=tilt, rough=intensity, height=bright)
                surf.fill_polygon(points, ink)


@pattern_routine("spheres3d")
def draw_spheres3d(ctx: PatternContext):
    """
    Radially shaded spheres.

    Each channel gets its own gradient: the color map is lit off-center,
    the normal map runs from an up-left tilt through flat to a
    down-right tilt, height falls off toward the rim and occlusion
    darkens only the outer band.
    """
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    specular = ctx.settings.specular_intensity

    for _ in range(int(10 + ctx.density * 0.3)):
        x, y = ctx.random_point()
        r = 15 + rnd() * ctx.element_size * 1.5
        intensity = 0.5 + rnd() * 0.5

        surf.radial_gradient(x, y, r, [
            (0.0, Ink(pattern=pal.primary)),
            (0.5, Ink(pattern=pal.secondary)),
            (1.0, Ink(pattern=pal.background)),
        ], focus=(x - r * 0.3, y - r * 0.3))
        surf.radial_gradient(x, y, r, [
            (0.0, Ink(mask=pal.mask(intensity), height=pal.height(1.0))),
            (1.0, Ink(mask=pal.mask(intensity * 0.3), height=pal.height(0.2))),
        ])
        surf.radial_gradient(x, y, r, [
            (0.0, Ink(normal=pal.normal(0.41, 0.41))),
            (0.5, Ink(normal=pal.normal(0.0, 0.0))),
            (1.0, Ink(normal=pal.normal(-0.37, -0.37))),
        ], focus=(x - r * 0.2, y - r * 0.2))
        surf.radial_gradient(x, y, r, [
            (0.0, Ink(ao=pal.ao(1.0))),
            (0.7, Ink(ao=pal.ao(1.0))),
            (1.0, Ink(ao=pal.ao(0.4))),
        ])
        surf.fill_circle(x, y, r, Ink(roughness=pal.rough(intensity), pearlescence=pal.pearl(intensity)))

        if specular > 0:
            highlight = Ink(pattern=with_alpha((255, 255, 255), specular / 200.0))
            surf.fill_circle(x - r * 0.3, y - r * 0.3, r * 0.2, highlight)


@pattern_routine("cylinders3d")
def draw_cylinders3d(ctx: PatternContext):
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces

    for _ in range(int(8 + ctx.density * 0.2)):
        x, y = ctx.random_point()
        girth = 20 + rnd() * ctx.element_size
        length = 40 + rnd() * ctx.element_size * 2
        vertical = rnd() > 0.5
        intensity = 0.5 + rnd() * 0.5

        shading = [
            (0.0, Ink(pattern=pal.secondary)),
            (0.3, Ink(pattern=pal.primary)),
            (0.7, Ink(pattern=pal.primary)),
            (1.0, Ink(pattern=pal.secondary)),
        ]
        body = Ink(height=pal.height(0.7), ao=pal.ao(0.6))
        if vertical:
            left, top = x - girth / 2, y - length / 2
            _strips(surf, left, top, girth, length, shading, horizontal=True)
            surf.fill_ellipse(x, top, girth / 2, girth / 4, Ink(pattern=pal.primary))
            _strips(surf, left, top, girth, length, [
                (0.0, Ink(mask=pal.mask(intensity * 0.5))),
                (0.5, Ink(mask=pal.mask(intensity))),
                (1.0, Ink(mask=pal.mask(intensity * 0.5))),
            ], horizontal=True)
            surf.fill_rect(left, top, girth / 2, length, Ink(normal=pal.normal(-0.5, 0.0)))
            surf.fill_rect(x, top, girth / 2, length, Ink(normal=pal.normal(0.5, 0.0)))
            surf.fill_rect(left, top, girth, length, body)
        else:
            left, top = x - length / 2, y - girth / 2
            _strips(surf, left, top, length, girth, shading, horizontal=False)
            surf.fill_rect(left, top, length, girth, Ink(mask=pal.mask(intensity), height=pal.height(0.7)))
            surf.fill_rect(left, top, length, girth / 2, Ink(normal=pal.normal(0.0, -0.5)))
            surf.fill_rect(left, y, length, girth / 2, Ink(normal=pal.normal(0.0, 0.5)))

        surf.fill_rect(x - girth, y - length / 2, girth * 2, length,
                       Ink(roughness=pal.rough(intensity), pearlescence=pal.pearl(intensity)))


@pattern_routine("terrain3d", tiled=False)
def draw_terrain3d(ctx: PatternContext):
    """
    Height-mapped terrain quads.

    Heights are sampled from fbm at the grid corners; each quad takes the
    average height for its color band and the corner differences for its
    normal tilt.
    """
    pal, size = ctx.palette, ctx.size
    grid = cell_size(8, 30, ctx.density, 0.15)
    cols = math.ceil(size / grid) + 1
    rows = math.ceil(size / grid) + 1
    scale = 0.01 + ctx.complexity * 0.0005

    jj, ii = np.mgrid[0:rows + 1, 0:cols + 1].astype(np.float64)
    heights = fbm(ii * scale, jj * scale, 4, 0.5, 2.0, ctx.settings.seed) * ctx.settings.depth_intensity / 100.0
    h00, h10 = heights[:-1, :-1], heights[:-1, 1:]
    h01, h11 = heights[1:, :-1], heights[1:, 1:]

    avg = (h00 + h10 + h01 + h11) / 4
    slope_x = (h10 - h00 + h11 - h01) / 2
    slope_y = (h01 - h00 + h11 - h10) / 2
    intensity = 0.3 + avg * 0.7

    band = np.select([avg > 0.7, avg > 0.4], [2, 1], 0)
    swatches = np.array([pal.secondary, pal.primary, pal.accent], dtype=np.uint8)
    layers = pal.layers(
        swatches[band],
        intensity,
        tilt=(slope_x * 2, slope_y * 2),
        rough=1 - avg * 0.5,
        pearl=intensity * 0.5,
        ao=0.5 + avg * 0.5,
        height=avg,
    )
    ctx.surfaces.paint_field({ch: expand_cells(v, grid, size) for ch, v in layers.items()})


@pattern_routine("wireframe3d", tiled=False)
def draw_wireframe3d(ctx: PatternContext):
    """Grid lines displaced vertically by fbm, over the matching height field."""
    pal, surf, size = ctx.palette, ctx.surfaces, ctx.size
    grid = cell_size(15, 50, ctx.density, 0.25)
    cols = math.ceil(size / grid) + 1
    rows = math.ceil(size / grid) + 1
    wave = ctx.settings.depth_intensity
    scale = 0.02 + ctx.complexity * 0.0003
    seed = ctx.settings.seed
    lw = ctx.line_width

    def lift(x, y):
        return fbm(np.multiply(x, scale), np.multiply(y, scale), 3, 0.5, 2.0, seed) * wave

    wire = pal.ink(pal.primary, 0.8).only("pattern", "mask")
    xs = np.arange(cols + 1, dtype=np.float64) * grid
    for j in range(rows):
        y = j * grid
        offsets = lift(xs, np.full_like(xs, y))
        surf.stroke_polyline([(float(x), float(y + o)) for x, o in zip(xs, offsets)], wire, lw, aux_width=lw * 1.5)
    ys = np.arange(rows + 1, dtype=np.float64) * grid
    for i in range(cols):
        x = i * grid
        offsets = lift(np.full_like(ys, x), ys)
        surf.stroke_polyline([(float(x), float(y + o)) for y, o in zip(ys, offsets)], wire, lw, aux_width=lw * 1.5)

    samples = np.arange(0, size, 2, dtype=np.float64)
    sx, sy = np.meshgrid(samples, samples)
    relief = fbm(sx * scale, sy * scale, 3, 0.5, 2.0, seed)
    surf.paint_field({"height": expand_cells(pal.height_field(relief), 2, size)})


@pattern_routine("parallax")
def draw_parallax(ctx: PatternContext):
    """Stacked shape layers, back to front, each shifted by the layer offset."""
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    layers = ctx.settings.depth_layers
    shift = ctx.settings.layer_offset

    for layer in range(layers - 1, -1, -1):
        closeness = 1 - layer / layers
        offset = layer * shift
        alpha = closeness * 0.8
        for _ in range(int(10 + ctx.density * 0.2)):
            x = rnd() * size + offset
            y = rnd() * size + offset
            extent = (10 + rnd() * ctx.element_size) * (1 - layer * 0.2)
            shape = int(rnd() * 3)
            if extent <= 0:
                continue
            color = pal.primary if layer == 0 else with_alpha(pal.secondary, math.floor(alpha * 255) / 255)
            ink = pal.ink(color, closeness, tilt=(0.0, -closeness), height=closeness, ao=closeness)
            if shape == 0:
                surf.fill_circle(x, y, extent, ink)
            elif shape == 1:
                surf.fill_rect(x - extent, y - extent, extent * 2, extent * 2, ink)
            else:
                surf.fill_polygon([(x, y - extent), (x + extent, y + extent), (x - extent, y + extent)], ink)


@pattern_routine("emboss")
def draw_emboss(ctx: PatternContext):
    """
    Circuit traces whose height map is replaced by a directional emboss
    of the color map's red channel.
    """
    draw_circuit(ctx)

    surf = ctx.surfaces
    red = surf.array("pattern")[..., 0].astype(np.float64)
    strength = ctx.settings.depth_intensity / 50.0
    if surf.seamless:
        left = np.roll(red, 1, axis=1)
        above = np.roll(red, 1, axis=0)
        height = np.clip(128 + (2 * red - left - above) * strength, 0, 255)
    else:
        height = surf.array("height")[..., 0].astype(np.float64)
        inner = red[1:-1, 1:-1]
        diff = (2 * inner - red[1:-1, :-2] - red[:-2, 1:-1]) * strength
        height[1:-1, 1:-1] = np.clip(128 + diff, 0, 255)
    surf.write("height", np.repeat(np.floor(height)[..., None], 3, axis=-1).astype(np.uint8))


@pattern_routine("extruded")
def draw_extruded(ctx: PatternContext):
    """Regular polygons extruded toward the bottom-right."""
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces

    for _ in range(int(15 + ctx.density * 0.3)):
        x, y = ctx.random_point()
        radius = 20 + rnd() * ctx.element_size
        depth = ctx.settings.extrude_depth * (0.5 + rnd() * 0.5)
        sides = 4 + int(rnd() * 4)
        intensity = 0.5 + rnd() * 0.5

        rim = [
            (x + math.cos(s / sides * TAU) * radius, y + math.sin(s / sides * TAU) * radius)
            for s in range(sides + 1)
        ]
        for s in range(sides):
            (x1, y1), (x2, y2) = rim[s], rim[s + 1]
            a1 = s / sides * TAU
            mid = (s + 0.5) / sides * TAU
            shade = 0.3 + abs(math.cos(a1 + math.pi / 4)) * 0.7
            side = pal.ink(
                with_alpha(pal.secondary, shade),
                intensity * shade,
                tilt=(math.cos(mid) * 0.7, math.sin(mid) * 0.7),
                ao=shade,
                height=0.4,
            )
            surf.fill_polygon([
                (x1, y1), (x2, y2),
                (x2 + depth * 0.5, y2 + depth * 0.5), (x1 + depth * 0.5, y1 + depth * 0.5),
            ], side)

        top = pal.ink(pal.primary, intensity, tilt=(0.0, -1.0), height=0.8, ao=1.0)
        surf.fill_polygon(rim[:-1], top)


@pattern_routine("isometric")
def draw_isometric(ctx: PatternContext):
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    grid = cell_size(20, 60, ctx.density, 0.3)
    cols = math.ceil(size / grid) + 2
    rows = math.ceil(size / grid) + 2
    iso = math.pi / 6

    for j in range(rows):
        for i in range(cols):
            x = size / 2 + (i - j) * grid * math.cos(iso)
            y = (i + j) * grid * math.sin(iso)
            if rnd() <= 0.3:
                continue
            lift = grid * (0.5 + rnd() * 1.5)
            intensity = 0.4 + rnd() * 0.6

            top_face, left_face, right_face = _box_faces(x, y, grid, lift)
            top = pal.ink(pal.primary, intensity, tilt=(0.0, -1.0), height=0.9)
            surf.fill_polygon(top_face, top)
            surf.fill_polygon(left_face, replace(
                top, pattern=pal.secondary, normal=pal.normal(-0.7, 0.3),
                height=pal.height(0.5), ao=pal.ao(0.6)))
            surf.fill_polygon(right_face, replace(
                top, pattern=pal.accent, normal=pal.normal(0.7, 0.3),
                height=pal.height(0.3), ao=pal.ao(0.4)))
