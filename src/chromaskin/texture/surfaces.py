"""
Seven-channel drawing surfaces.

A SurfaceSet owns one Pillow image per texture map and draws every
primitive into all of them at once, each channel colored by the matching
field of an Ink. It also carries the canvas state routines rely on: an
affine transform stack (used for the global rotation and local tile
rotations), the stroke dash pattern, corner style and seamless mode, in
which each primitive is repeated at the eight neighbouring tile offsets.
"""

import math
from contextlib import contextmanager
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

from chromaskin.texture.inks import CHANNELS, Ink

Point = Tuple[float, float]
Matrix = Tuple[float, float, float, float, float, float]

IDENTITY: Matrix = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0)

DASH_PATTERNS = {
    "solid": (),
    "dashed": (10.0, 5.0),
    "dotted": (2.0, 4.0),
    "dashdot": (10.0, 3.0, 2.0, 3.0),
}

_NEIGHBOURS = (
    (0, 0), (-1, 0), (1, 0), (0, -1), (0, 1),
    (-1, -1), (1, -1), (-1, 1), (1, 1),
)

_CIRCLE_SEGMENTS = 48


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def compose(m: Matrix, n: Matrix) -> Matrix:
    """Matrix product ``m @ n`` (``n`` is applied first)."""
    a, b, c, d, e, f = m
    g, h, i, j, k, l = n
    return (
        a * g + b * j, a * h + b * k, a * i + b * l + c,
        d * g + e * j, d * h + e * k, d * i + e * l + f,
    )


def invert(m: Matrix) -> Matrix:
    a, b, c, d, e, f = m
    det = a * e - b * d
    ia, ib = e / det, -b / det
    id_, ie = -d / det, a / det
    return (ia, ib, -(ia * c + ib * f), id_, ie, -(id_ * c + ie * f))


def apply(m: Matrix, points: Sequence[Point]) -> List[Point]:
    a, b, c, d, e, f = m
    return [(a * x + b * y + c, d * x + e * y + f) for x, y in points]


def circle_points(cx: float, cy: float, r: float, start: float = 0.0,
                  end: float = 2.0 * math.pi, segments: int = _CIRCLE_SEGMENTS) -> List[Point]:
    """Polyline approximation of an arc (angles in radians, clockwise on screen)."""
    span = end - start
    steps = max(2, int(math.ceil(segments * abs(span) / (2.0 * math.pi))))
    return [
        (cx + r * math.cos(start + span * k / steps), cy + r * math.sin(start + span * k / steps))
        for k in range(steps + 1)
    ]


def dash_segments(points: Sequence[Point], pattern: Sequence[float]) -> List[List[Point]]:
    """
    Split a polyline into the "on" runs of a dash pattern.

    Args:
        points: Polyline vertices.
        pattern: Alternating on/off lengths in pixels; empty means solid.

    Returns:
        List of polylines, one per visible dash.
    """
    points = list(points)
    if not pattern or len(points) < 2:
        return [points]

    segments = []
    index = 0
    remaining = pattern[0]
    on = True
    current = [points[0]]
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        length = math.hypot(x1 - x0, y1 - y0)
        pos = 0.0
        while length - pos > remaining:
            pos += remaining
            t = pos / length
            cut = (x0 + (x1 - x0) * t, y0 + (y1 - y0) * t)
            if on:
                current.append(cut)
                segments.append(current)
                current = []
            else:
                current = [cut]
            on = not on
            index = (index + 1) % len(pattern)
            remaining = pattern[index]
        remaining -= length - pos
        if on:
            current.append((x1, y1))
    if on and len(current) > 1:
        segments.append(current)
    return segments


def _bounds(points: Sequence[Point]) -> Tuple[float, float, float, float]:
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs), max(ys)


# ---------------------------------------------------------------------------
# Surface set
# ---------------------------------------------------------------------------

class SurfaceSet:
    """
    The seven target images of one render, drawn in lockstep.

    Args:
        size: Edge length in pixels.
        base_colors: Channel name -> RGB fill applied at creation.
        seamless: Repeat every primitive at the neighbouring tile offsets.
        stroke_style: One of ``DASH_PATTERNS``.
        corner_style: ``round`` draws curved joints and round caps.
    """

    def __init__(
        self,
        size: int,
        base_colors: Dict[str, Tuple[int, int, int]],
        seamless: bool = False,
        stroke_style: str = "solid",
        corner_style: str = "round",
    ):
        self.size = size
        self.images: Dict[str, Image.Image] = {
            ch: Image.new("RGB", (size, size), tuple(base_colors[ch])) for ch in CHANNELS
        }
        self._draw = {ch: ImageDraw.Draw(img, "RGBA") for ch, img in self.images.items()}
        self.seamless = seamless
        self.dash = DASH_PATTERNS.get(stroke_style, ())
        self.corner_style = corner_style
        self._matrix: Matrix = IDENTITY
        self._saved: List[Matrix] = []
        self._tile_frame: Matrix = IDENTITY

    # -- transform stack ----------------------------------------------------

    @property
    def matrix(self) -> Matrix:
        return self._matrix

    def save(self):
        self._saved.append(self._matrix)

    def restore(self):
        self._matrix = self._saved.pop()

    @contextmanager
    def transformed(self):
        self.save()
        try:
            yield self
        finally:
            self.restore()

    def translate(self, dx: float, dy: float):
        self._matrix = compose(self._matrix, (1.0, 0.0, dx, 0.0, 1.0, dy))

    def rotate(self, radians: float):
        c, s = math.cos(radians), math.sin(radians)
        self._matrix = compose(self._matrix, (c, -s, 0.0, s, c, 0.0))

    def rotate_about_center(self, degrees: float):
        half = self.size / 2.0
        self.translate(half, half)
        self.rotate(math.radians(degrees))
        self.translate(-half, -half)

    def set_tile_frame(self):
        """Seamless offsets are applied in the current coordinate frame from now on."""
        self._tile_frame = self._matrix

    @property
    def _scale(self) -> float:
        a, b, _, d, e, _ = self._matrix
        return math.sqrt(abs(a * e - b * d))

    @contextmanager
    def untiled(self):
        """Temporarily draw primitives once, ignoring seamless mode."""
        saved = self.seamless
        self.seamless = False
        try:
            yield self
        finally:
            self.seamless = saved

    # -- placement ----------------------------------------------------------

    def _tile_matrices(self):
        """One device matrix per seamless copy of the current frame."""
        if not self.seamless:
            return (self._matrix,)
        relative = compose(invert(self._tile_frame), self._matrix)
        return tuple(
            compose(self._tile_frame, compose((1.0, 0.0, ox * self.size, 0.0, 1.0, oy * self.size), relative))
            for ox, oy in _NEIGHBOURS
        )

    def _visible(self, bounds, margin: float) -> bool:
        x0, y0, x1, y1 = bounds
        return not (x1 < -margin or y1 < -margin or x0 > self.size + margin or y0 > self.size + margin)

    def _placements(self, points: Sequence[Point], margin: float = 0.0):
        """Device-space copies of ``points`` that touch the canvas."""
        for matrix in self._tile_matrices():
            moved = apply(matrix, points)
            if self._visible(_bounds(moved), margin):
                yield moved

    def _channels(self, ink: Ink):
        for ch in CHANNELS:
            color = ink.color_for(ch)
            if color is not None:
                yield ch, color

    # -- primitives ---------------------------------------------------------

    def fill_polygon(self, points: Sequence[Point], ink: Ink):
        if len(points) < 3:
            return
        for placed in self._placements(points):
            for ch, color in self._channels(ink):
                self._draw[ch].polygon(placed, fill=tuple(color))

    def fill_rect(self, x: float, y: float, w: float, h: float, ink: Ink):
        self.fill_polygon([(x, y), (x + w, y), (x + w, y + h), (x, y + h)], ink)

    def stroke_rect(self, x: float, y: float, w: float, h: float, ink: Ink,
                    width: float, aux_width: Optional[float] = None):
        corners = [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
        self.stroke_polyline(corners, ink, width, closed=True, aux_width=aux_width)

    def stroke_polyline(
        self,
        points: Sequence[Point],
        ink: Ink,
        width: float,
        closed: bool = False,
        aux_width: Optional[float] = None,
        dash: Optional[Sequence[float]] = None,
    ):
        """
        Stroke a polyline on every channel the ink colors.

        Args:
            width: Stroke width on the pattern surface.
            aux_width: Stroke width on the material channels (default ``width``).
            dash: Explicit dash pattern; defaults to the surface stroke style.
        """
        points = list(points)
        if len(points) < 2:
            return
        if closed:
            points.append(points[0])
        pattern = self.dash if dash is None else dash
        runs = dash_segments(points, pattern)
        margin = max(width, aux_width or 0.0)
        for run in runs:
            if len(run) < 2:
                continue
            for placed in self._placements(run, margin):
                for ch, color in self._channels(ink):
                    w = width if ch == "pattern" or aux_width is None else aux_width
                    self._line(ch, placed, tuple(color), w * self._scale)

    def _line(self, ch: str, points: List[Point], color, width: float):
        px = max(1, int(round(width)))
        draw = self._draw[ch]
        if self.corner_style == "round":
            draw.line(points, fill=color, width=px, joint="curve")
            if px > 2:
                r = width / 2.0
                for x, y in (points[0], points[-1]):
                    draw.ellipse([x - r, y - r, x + r, y + r], fill=color)
        else:
            draw.line(points, fill=color, width=px)

    def line(self, x0: float, y0: float, x1: float, y1: float, ink: Ink,
             width: float, aux_width: Optional[float] = None):
        self.stroke_polyline([(x0, y0), (x1, y1)], ink, width, aux_width=aux_width)

    def fill_circle(self, cx: float, cy: float, r: float, ink: Ink):
        if r <= 0:
            return
        scale = self._scale
        for placed in self._placements([(cx, cy)], r * scale):
            (x, y), = placed
            rr = r * scale
            for ch, color in self._channels(ink):
                self._draw[ch].ellipse([x - rr, y - rr, x + rr, y + rr], fill=tuple(color))

    def stroke_circle(self, cx: float, cy: float, r: float, ink: Ink,
                      width: float, aux_width: Optional[float] = None):
        if r <= 0:
            return
        self.stroke_polyline(circle_points(cx, cy, r), ink, width, aux_width=aux_width)

    def arc(self, cx: float, cy: float, r: float, start: float, end: float, ink: Ink,
            width: float, aux_width: Optional[float] = None):
        if r <= 0:
            return
        self.stroke_polyline(circle_points(cx, cy, r, start, end), ink, width, aux_width=aux_width)

    def fill_ellipse(self, cx: float, cy: float, rx: float, ry: float, ink: Ink):
        points = [
            (cx + rx * math.cos(2.0 * math.pi * k / _CIRCLE_SEGMENTS),
             cy + ry * math.sin(2.0 * math.pi * k / _CIRCLE_SEGMENTS))
            for k in range(_CIRCLE_SEGMENTS)
        ]
        self.fill_polygon(points, ink)

    def radial_gradient(
        self,
        cx: float,
        cy: float,
        r: float,
        stops: Sequence[Tuple[float, Ink]],
        focus: Optional[Point] = None,
    ):
        """
        Fill the disc ``(cx, cy, r)`` with a two-point radial gradient.

        The gradient runs from ``focus`` (radius 0) to the disc outline.
        Channels any stop leaves as ``None`` are not painted.
        """
        if r <= 0 or not stops:
            return
        offsets = np.array([t for t, _ in stops], dtype=np.float64)
        focus = (cx, cy) if focus is None else focus
        for matrix in self._tile_matrices():
            (dcx, dcy), (dfx, dfy) = apply(matrix, [(cx, cy), focus])
            dr = r * self._scale
            if not self._visible((dcx - dr, dcy - dr, dcx + dr, dcy + dr), 0.0):
                continue
            self._paint_gradient_disc(dcx, dcy, dr, dfx, dfy, offsets, stops)

    def _paint_gradient_disc(self, cx, cy, r, fx, fy, offsets, stops):
        x0 = max(0, int(math.floor(cx - r)))
        y0 = max(0, int(math.floor(cy - r)))
        x1 = min(self.size, int(math.ceil(cx + r)) + 1)
        y1 = min(self.size, int(math.ceil(cy + r)) + 1)
        if x1 <= x0 or y1 <= y0:
            return
        ys, xs = np.mgrid[y0:y1, x0:x1].astype(np.float64)
        xs += 0.5
        ys += 0.5
        inside = (xs - cx) ** 2 + (ys - cy) ** 2 <= r * r

        qx, qy = xs - fx, ys - fy
        dx, dy = cx - fx, cy - fy
        a = dx * dx + dy * dy - r * r
        qd = qx * dx + qy * dy
        qq = qx * qx + qy * qy
        if abs(a) < 1e-9 or (dx == 0 and dy == 0):
            t = np.sqrt(qq) / r
        else:
            t = (qd - np.sqrt(np.maximum(qd * qd - a * qq, 0.0))) / a
        t = np.clip(t, 0.0, 1.0)

        for ch in CHANNELS:
            colors = [ink.color_for(ch) for _, ink in stops]
            if any(c is None for c in colors):
                continue
            rgba = np.array([c if len(c) == 4 else (c[0], c[1], c[2], 255) for c in colors],
                            dtype=np.float64)
            layer = np.stack([np.interp(t, offsets, rgba[:, k]) for k in range(4)], axis=-1)
            alpha = np.where(inside, layer[..., 3] / 255.0, 0.0)[..., None]

            region = np.asarray(self.images[ch].crop((x0, y0, x1, y1)), dtype=np.float64)
            blended = region * (1.0 - alpha) + layer[..., :3] * alpha
            patch = Image.fromarray(np.clip(blended + 0.5, 0, 255).astype(np.uint8), "RGB")
            self.images[ch].paste(patch, (x0, y0))

    def paint_field(self, layers: Dict[str, np.ndarray], coverage: Optional[np.ndarray] = None):
        """
        Composite whole-canvas rasters onto the surfaces.

        ``layers`` maps channel -> (size, size, 3|4) uint8 array laid out in
        the current local coordinate space; 4-channel layers blend by their
        alpha. ``coverage`` optionally restricts painting to a boolean mask.
        Under a non-identity transform the rasters are resampled through it.
        """
        full = Image.new("L", (self.size, self.size), 255)
        cover = None
        if coverage is not None:
            cover = Image.fromarray(np.where(coverage, 255, 0).astype(np.uint8), "L")

        inverse = None if self._matrix == IDENTITY else invert(self._matrix)
        for ch, values in layers.items():
            values = np.ascontiguousarray(values, dtype=np.uint8)
            if values.shape[-1] == 4:
                src = Image.fromarray(values, "RGBA")
                mask = src.getchannel("A")
                src = src.convert("RGB")
            else:
                src = Image.fromarray(values, "RGB")
                mask = full
            if cover is not None:
                mask = Image.fromarray(
                    (np.asarray(mask, dtype=np.uint16) * np.asarray(cover, dtype=np.uint16) // 255).astype(np.uint8),
                    "L",
                )
            if inverse is not None:
                src = src.transform(src.size, Image.Transform.AFFINE, inverse,
                                    resample=Image.Resampling.NEAREST)
                mask = mask.transform(mask.size, Image.Transform.AFFINE, inverse,
                                      resample=Image.Resampling.NEAREST)
            self.images[ch].paste(src, (0, 0), mask)

    def write(self, channel: str, values: np.ndarray):
        """Replace one channel wholesale with a (size, size, 3) uint8 array."""
        self.images[channel] = Image.fromarray(np.ascontiguousarray(values, dtype=np.uint8), "RGB")
        self._draw[channel] = ImageDraw.Draw(self.images[channel], "RGBA")

    # -- export -------------------------------------------------------------

    def array(self, channel: str) -> np.ndarray:
        """(size, size, 3) uint8 copy of one channel."""
        return np.array(self.images[channel], dtype=np.uint8)

    def arrays(self) -> Dict[str, np.ndarray]:
        return {ch: self.array(ch) for ch in CHANNELS}
