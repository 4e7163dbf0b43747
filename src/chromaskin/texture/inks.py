"""
Channel color derivation.

Every primitive a pattern routine draws is colored through an
InkPalette, which turns one logical "intensity" (plus a surface tilt for
the normal map) into a color for each of the seven maps. Keeping all
channels on these helpers is what keeps the maps visually correlated.
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

import numpy as np

from chromaskin.core.noise import SeededRandom
from chromaskin.texture.schemes import ColorScheme, get_scheme
from chromaskin.texture.settings import TextureSettings

CHANNELS = ("pattern", "mask", "normal", "roughness", "pearlescence", "ao", "height")

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]


def _byte(value: float) -> int:
    return int(max(0, min(255, np.floor(value))))


def _gray(value: float) -> RGB:
    v = _byte(value)
    return (v, v, v)


def with_alpha(rgb: RGB, alpha: float) -> RGBA:
    """Attach an alpha in [0,1] to an RGB color."""
    return (rgb[0], rgb[1], rgb[2], _byte(alpha * 255.0 + 0.5))


@dataclass(frozen=True)
class Ink:
    """One color per channel; ``None`` leaves that channel untouched."""

    pattern: Optional[Tuple[int, ...]] = None
    mask: Optional[RGB] = None
    normal: Optional[RGB] = None
    roughness: Optional[RGB] = None
    pearlescence: Optional[RGB] = None
    ao: Optional[RGB] = None
    height: Optional[RGB] = None

    def color_for(self, channel: str):
        return getattr(self, channel)

    def only(self, *channels: str) -> "Ink":
        """Copy keeping only the named channels."""
        return Ink(**{ch: (getattr(self, ch) if ch in channels else None) for ch in CHANNELS})

    def recolor(self, pattern) -> "Ink":
        return replace(self, pattern=pattern)


def lerp_ink(a: Ink, b: Ink, t: float) -> Ink:
    """Blend two inks channel by channel; a channel missing from either stays ``None``."""
    blended = {}
    for ch in CHANNELS:
        ca, cb = getattr(a, ch), getattr(b, ch)
        if ca is None or cb is None:
            blended[ch] = None
            continue
        if len(ca) != len(cb):
            ca, cb = _rgba(ca), _rgba(cb)
        blended[ch] = tuple(_byte(x + (y - x) * t + 0.5) for x, y in zip(ca, cb))
    return Ink(**blended)


def _rgba(color) -> RGBA:
    return tuple(color) if len(color) == 4 else (color[0], color[1], color[2], 255)


class InkPalette:
    """
    Per-render channel color helpers.

    Roughness colors draw from the render's seeded random stream, so the
    palette must be shared by every routine of one render.
    """

    def __init__(self, settings: TextureSettings, random: SeededRandom):
        self.settings = settings
        self.random = random
        self.scheme: ColorScheme = get_scheme(settings.pattern.color_scheme)

    # -- scheme colors ------------------------------------------------------

    @property
    def primary(self) -> RGB:
        return self.scheme.primary_rgb

    @property
    def secondary(self) -> RGB:
        return self.scheme.secondary_rgb

    @property
    def background(self) -> RGB:
        return self.scheme.background_rgb

    @property
    def accent(self) -> RGB:
        return self.scheme.accent_rgb

    # -- channel helpers ----------------------------------------------------

    def mask(self, intensity: float = 1.0) -> RGB:
        m = self.settings.mask
        return (
            _byte(m.red_intensity * 2.55 * intensity),
            _byte(m.green_intensity * 2.55 * intensity),
            _byte(m.blue_intensity * 2.55 * intensity),
        )

    def normal(self, nx: float, ny: float) -> RGB:
        strength = self.settings.normal.strength / 50.0
        return (
            _byte((nx * strength + 1.0) * 127.5),
            _byte((ny * strength + 1.0) * 127.5),
            255,
        )

    def rough(self, intensity: float = 1.0) -> RGB:
        r = self.settings.roughness
        variation = r.variation * 2.55 * intensity * (self.random() - 0.5) * 2.0
        return _gray(r.base * 2.55 + variation)

    def pearl(self, intensity: float = 1.0) -> RGB:
        return _gray(self.settings.pearl.intensity * 2.55 * intensity)

    def ao(self, intensity: float = 1.0) -> RGB:
        return _gray(255.0 * (1.0 - self.settings.ao.strength / 100.0 * (1.0 - intensity)))

    def height(self, h: float = 0.5) -> RGB:
        return _gray(h * 255.0 * self.settings.height.scale / 100.0)

    # -- base fills ---------------------------------------------------------

    def base_colors(self) -> dict:
        """Channel-specific fill applied before any routine draws."""
        base_coat = _byte(self.settings.mask.base_coat * 2.55)
        rough = _byte(self.settings.roughness.base * 2.55)
        height = _byte(self.settings.height.scale * 1.275)
        return {
            "pattern": self.background,
            "mask": (base_coat, base_coat, base_coat),
            "normal": (128, 128, 255),
            "roughness": (rough, rough, rough),
            "pearlescence": (0, 0, 0),
            "ao": (255, 255, 255),
            "height": (height, height, height),
        }

    # -- composite ----------------------------------------------------------

    def ink(
        self,
        color,
        intensity: float = 1.0,
        tilt: Tuple[float, float] = (0.0, 0.0),
        rough: Optional[float] = None,
        pearl: Optional[float] = None,
        ao: Optional[float] = None,
        height: Optional[float] = None,
        alpha: Optional[float] = None,
    ) -> Ink:
        """
        Build a full seven-channel ink.

        Args:
            color: Pattern-surface RGB (or RGBA) color.
            intensity: Mask strength of the primitive (0-1).
            tilt: Normal-map tilt ``(nx, ny)``.
            rough, pearl, ao: Per-channel intensities (default ``intensity``).
            height: Height value (default ``0.5 + intensity/2``).
            alpha: Optional pattern-surface opacity (0-1).
        """
        if alpha is not None:
            color = with_alpha(tuple(color[:3]), alpha)
        return Ink(
            pattern=tuple(color),
            mask=self.mask(intensity),
            normal=self.normal(*tilt),
            roughness=self.rough(intensity if rough is None else rough),
            pearlescence=self.pearl(intensity if pearl is None else pearl),
            ao=self.ao(intensity if ao is None else ao),
            height=self.height(0.5 + intensity * 0.5 if height is None else height),
        )

    # -- vectorised variants for raster fields ------------------------------

    def mask_field(self, intensity: np.ndarray) -> np.ndarray:
        m = self.settings.mask
        scales = np.array([m.red_intensity, m.green_intensity, m.blue_intensity]) * 2.55
        return _bytes(intensity[..., None] * scales)

    def normal_field(self, nx: np.ndarray, ny: np.ndarray) -> np.ndarray:
        strength = self.settings.normal.strength / 50.0
        r = (nx * strength + 1.0) * 127.5
        g = (ny * strength + 1.0) * 127.5
        return _bytes(np.stack([r, g, np.full_like(r, 255.0)], axis=-1))

    def rough_field(self, intensity: np.ndarray) -> np.ndarray:
        r = self.settings.roughness
        jitter = self.random.take(intensity.size).reshape(intensity.shape)
        value = r.base * 2.55 + r.variation * 2.55 * intensity * (jitter - 0.5) * 2.0
        return _gray_field(value)

    def pearl_field(self, intensity: np.ndarray) -> np.ndarray:
        return _gray_field(self.settings.pearl.intensity * 2.55 * intensity)

    def ao_field(self, intensity: np.ndarray) -> np.ndarray:
        return _gray_field(255.0 * (1.0 - self.settings.ao.strength / 100.0 * (1.0 - intensity)))

    def height_field(self, h: np.ndarray) -> np.ndarray:
        return _gray_field(h * 255.0 * self.settings.height.scale / 100.0)

    def layers(
        self,
        pattern: np.ndarray,
        intensity: np.ndarray,
        tilt=(0.0, 0.0),
        rough=None,
        pearl=None,
        ao=None,
        height=None,
    ) -> Dict[str, np.ndarray]:
        """
        Raster counterpart of ``ink``: one uint8 layer per channel.

        ``pattern`` is an (H, W, 3|4) uint8 array; every other argument is
        an (H, W) float array or a scalar broadcast to ``intensity``'s shape.
        """
        intensity = np.asarray(intensity, dtype=np.float64)
        shape = intensity.shape

        def full(value, default):
            value = default if value is None else value
            return np.broadcast_to(np.asarray(value, dtype=np.float64), shape)

        return {
            "pattern": pattern,
            "mask": self.mask_field(intensity),
            "normal": self.normal_field(full(tilt[0], 0.0), full(tilt[1], 0.0)),
            "roughness": self.rough_field(full(rough, intensity)),
            "pearlescence": self.pearl_field(full(pearl, intensity)),
            "ao": self.ao_field(full(ao, intensity)),
            "height": self.height_field(full(height, 0.5 + intensity * 0.5)),
        }


def _bytes(values: np.ndarray) -> np.ndarray:
    return np.clip(np.floor(values), 0, 255).astype(np.uint8)


def _gray_field(values: np.ndarray) -> np.ndarray:
    v = _bytes(values)
    return np.repeat(v[..., None], 3, axis=-1)
