"""
Freeform styles: waves, spirals, flow fields, branching growth
(coral, lightning, cracks), nebulae, galaxies and triangulated meshes.
"""

import math

from chromaskin.texture.inks import Ink, with_alpha
from chromaskin.texture.patterns.base import TAU, PatternContext, pattern_routine


@pattern_routine("waves", tiled=False)
def draw_waves(ctx: PatternContext):
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    count = int(5 + ctx.density * 0.15)
    gap = size / count
    lw = ctx.line_width

    for w in range(count):
        base_y = w * gap + gap / 2
        amplitude = 10 + rnd() * ctx.element_size * 0.5
        frequency = 1 + rnd() * 4
        phase = rnd() * TAU
        color = pal.primary if w % 2 == 0 else pal.secondary
        ink = pal.ink(color, 0.7 + (w % 2) * 0.3, tilt=(0.5 + w * 0.1, 0.0), rough=0.8, pearl=0.8)
        points = [
            (x, base_y + math.sin(x / size * TAU * frequency + phase) * amplitude)
            for x in range(0, size + 1, 2)
        ]
        surf.stroke_polyline(points, ink, lw, aux_width=lw * 2)


@pattern_routine("spiral")
def draw_spiral(ctx: PatternContext):
    """Archimedean spirals with random centers, turn counts and handedness."""
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    count = int(2 + ctx.density * 0.03)
    lw = ctx.line_width

    for s in range(count):
        cx, cy = ctx.random_point()
        max_r = 50 + rnd() * 150
        turns = 2 + rnd() * 4
        direction = 1 if rnd() > 0.5 else -1
        color = pal.primary if s % 2 == 0 else pal.secondary
        ink = pal.ink(color, 0.8, tilt=(0.7, 0.0))

        sweep = TAU * turns
        steps = int(math.ceil(sweep / 0.05))
        points = []
        for k in range(steps):
            a = k * 0.05
            r = a / sweep * max_r
            points.append((cx + r * math.cos(a * direction), cy + r * math.sin(a * direction)))
        surf.stroke_polyline(points, ink, lw, aux_width=lw * 2)


@pattern_routine("flowfield", tiled=False)
def draw_flowfield(ctx: PatternContext):
    """
    Particles advected through a sin/cos angle field.

    Positions wrap around the canvas; the polyline is split wherever a
    wrap happens so no stroke crosses the whole texture.
    """
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    count = int(50 + ctx.density)
    steps = 30 + int(ctx.complexity * 0.5)
    step = 5.0
    scale = 0.005 + (100 - ctx.complexity) * 0.0001
    swatches = (pal.primary, pal.secondary, pal.accent)
    lw = ctx.line_width

    for _ in range(count):
        x, y = ctx.random_point()
        intensity = 0.5 + rnd() * 0.5
        ink = pal.ink(ctx.pick(swatches), intensity, tilt=(intensity, 0.0), alpha=0xaa / 255)

        runs = [[(x, y)]]
        for _ in range(steps):
            angle = math.sin(x * scale) * math.cos(y * scale) * math.pi * 4
            x += math.cos(angle) * step
            y += math.sin(angle) * step
            point = (x % size, y % size)
            last = runs[-1][-1]
            if abs(point[0] - last[0]) > size / 2 or abs(point[1] - last[1]) > size / 2:
                runs.append([point])
            else:
                runs[-1].append(point)
        for run in runs:
            surf.stroke_polyline(run, ink, lw * 0.7, aux_width=lw)


@pattern_routine("coral")
def draw_coral(ctx: PatternContext):
    """Recursive branching growth rising from the bottom edge."""
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    lw = ctx.line_width

    def branch(x, y, angle, length, depth):
        if depth <= 0 or length < 5:
            return
        end_x = x + math.cos(angle) * length
        end_y = y + math.sin(angle) * length
        intensity = 0.3 + depth * 0.15
        ink = pal.ink(pal.primary, intensity,
                      tilt=(math.cos(angle) * 0.5, math.sin(angle) * 0.5), height=intensity)
        surf.line(x, y, end_x, end_y, ink, depth * lw * 0.5)

        spread = 0.3 + rnd() * 0.4
        child = length * (0.6 + rnd() * 0.3)
        if rnd() > 0.3:
            branch(end_x, end_y, angle - spread, child, depth - 1)
        if rnd() > 0.3:
            branch(end_x, end_y, angle + spread, child, depth - 1)
        if rnd() > 0.7:
            branch(end_x, end_y, angle, child * 0.8, depth - 1)

    for _ in range(int(5 + ctx.density * 0.1)):
        start_x = rnd() * size
        start_y = size * 0.9 + rnd() * size * 0.1
        angle = -math.pi / 2 + (rnd() - 0.5) * 0.5
        length = 30 + rnd() * 50
        branch(start_x, start_y, angle, length, 4 + int(ctx.complexity * 0.05))


@pattern_routine("lightning")
def draw_lightning(ctx: PatternContext):
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    bolt = pal.ink(pal.primary, 1.0, height=0.9)

    def strike(x, y, angle, length, width, depth):
        if depth <= 0 or length < 10:
            return
        segments = 3 + int(rnd() * 3)
        seg_len = length / segments
        for _ in range(segments):
            heading = angle + (rnd() - 0.5) * 0.8
            next_x = x + math.cos(heading) * seg_len
            next_y = y + math.sin(heading) * seg_len
            surf.line(x, y, next_x, next_y, bolt, width)
            if rnd() > 0.6 and depth > 1:
                fork = heading + (1 if rnd() > 0.5 else -1) * (0.3 + rnd() * 0.5)
                strike(x, y, fork, length * 0.5, width * 0.6, depth - 1)
            x, y = next_x, next_y

    for _ in range(int(3 + ctx.density * 0.05)):
        start_x = rnd() * size
        angle = math.pi / 2 + (rnd() - 0.5) * 0.5
        length = size * (0.5 + rnd() * 0.5)
        width = 2 + rnd() * 3
        strike(start_x, 0.0, angle, length, width, 3 + int(rnd() * 2))


@pattern_routine("cracks")
def draw_cracks(ctx: PatternContext):
    """Jagged recessed fractures with short side branches."""
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    lw = ctx.line_width

    for _ in range(int(10 + ctx.density * 0.2)):
        x, y = ctx.random_point()
        heading = rnd() * TAU
        length = 50 + rnd() * 150
        intensity = 0.5 + rnd() * 0.5
        crack = pal.ink(pal.primary, intensity, tilt=(0.0, 1.0), height=0.0, ao=0.3)
        for _ in range(int(length / 10)):
            angle = heading + (rnd() - 0.5) * 0.6
            seg = 5 + rnd() * 15
            next_x = x + math.cos(angle) * seg
            next_y = y + math.sin(angle) * seg
            surf.line(x, y, next_x, next_y, crack, lw)
            if rnd() > 0.7:
                fork = angle + (1 if rnd() > 0.5 else -1) * (0.3 + rnd() * 0.8)
                fork_len = seg * (0.3 + rnd() * 0.5)
                surf.line(next_x, next_y,
                          next_x + math.cos(fork) * fork_len, next_y + math.sin(fork) * fork_len,
                          crack, lw * 0.5, aux_width=lw)
            x, y = next_x, next_y


@pattern_routine("nebula")
def draw_nebula(ctx: PatternContext):
    """Layered translucent color clouds sprinkled with stars."""
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    swatches = (pal.primary, pal.secondary, pal.accent)

    for _ in range(int(5 + ctx.density * 0.1)):
        cx, cy = ctx.random_point()
        extent = 100 + rnd() * 200
        intensity = 0.3 + rnd() * 0.5
        for layer in range(3):
            ox = (rnd() - 0.5) * extent * 0.5
            oy = (rnd() - 0.5) * extent * 0.5
            radius = extent * (0.5 + rnd() * 0.5)
            color = swatches[layer % 3]
            surf.radial_gradient(cx + ox, cy + oy, radius, [
                (0.0, Ink(pattern=with_alpha(color, 0x60 / 255))),
                (0.5, Ink(pattern=with_alpha(color, 0x30 / 255))),
                (1.0, Ink(pattern=with_alpha(color, 0.0))),
            ])
        for _ in range(int(20 + rnd() * 30)):
            sx = cx + (rnd() - 0.5) * extent
            sy = cy + (rnd() - 0.5) * extent
            star = pal.ink(pal.accent, intensity, pearl=1.0, height=0.8)
            surf.fill_circle(sx, sy, 1 + rnd() * 2, star)


@pattern_routine("galaxy", tiled=False)
def draw_galaxy(ctx: PatternContext):
    pal, rnd, surf, size = ctx.palette, ctx.random, ctx.surfaces, ctx.size
    cx = cy = size / 2
    arms = 2 + int(rnd() * 3)
    max_r = size * 0.45

    for _ in range(int(200 + ctx.density * 3)):
        arm = int(rnd() * arms)
        radius = rnd() * max_r
        angle = arm / arms * TAU + radius * 0.02 + (rnd() - 0.5) * 0.5
        x = cx + math.cos(angle) * radius + (rnd() - 0.5) * 30
        y = cy + math.sin(angle) * radius + (rnd() - 0.5) * 30
        star_r = 0.5 + rnd() * 2
        intensity = 1 - radius / max_r * 0.7
        color = pal.accent if radius < max_r * 0.2 else pal.primary
        star = pal.ink(color, intensity, height=intensity * 0.5)
        surf.fill_circle(x, y, star_r, star.only("pattern", "mask", "pearlescence", "height"))

    surf.radial_gradient(cx, cy, max_r * 0.3, [
        (0.0, Ink(pattern=with_alpha(pal.accent, 0x80 / 255))),
        (0.5, Ink(pattern=with_alpha(pal.primary, 0x40 / 255))),
        (1.0, Ink(pattern=with_alpha(pal.primary, 0.0))),
    ])


@pattern_routine("delaunay")
def draw_delaunay(ctx: PatternContext):
    """
    Nearest-neighbour fan triangulation of random points.

    Each point is joined to its three nearest neighbours; this looks like
    a Delaunay mesh without computing one.
    """
    pal, rnd, surf = ctx.palette, ctx.random, ctx.surfaces
    points = [ctx.random_point() for _ in range(int(20 + ctx.density * 0.4))]
    swatches = (pal.primary, pal.secondary, pal.accent)
    lw = ctx.line_width

    for i, (x1, y1) in enumerate(points):
        nearest = sorted(
            (math.hypot(x2 - x1, y2 - y1), j) for j, (x2, y2) in enumerate(points) if j != i
        )[:3]
        for k in range(len(nearest) - 1):
            p2 = points[nearest[k][1]]
            p3 = points[nearest[k + 1][1]]
            intensity = 0.4 + rnd() * 0.6
            tri = [(x1, y1), p2, p3]
            if rnd() > 0.5:
                surf.fill_polygon(tri, pal.ink(swatches[k % 3], intensity, tilt=(intensity, 0.0),
                                               alpha=0x80 / 255))
            surf.stroke_polyline(tri, pal.ink(pal.primary, 1.0, tilt=(intensity, 0.0)), lw, closed=True)

    for x, y in points:
        surf.fill_circle(x, y, 3, pal.ink(pal.accent, 1.0, height=1.0))
