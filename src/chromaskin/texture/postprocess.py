"""
Post-processing for rendered texture sets.

Every function takes and returns (H, W, 3) uint8 arrays and leaves its
input untouched. The driver runs them in a fixed order once all channels
are fully drawn, since normal derivation reads the finished normal map.
"""

import math
from typing import Sequence, Tuple

import numpy as np
from PIL import Image, ImageFilter
from scipy.ndimage import gaussian_filter

from chromaskin.core.noise import SeededRandom


def _to_bytes(values: np.ndarray) -> np.ndarray:
    """Round half up and clamp to uint8."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


# ---------------------------------------------------------------------------
# Color surface
# ---------------------------------------------------------------------------

def add_glow(
    frame: np.ndarray,
    radius: float,
    tint: Tuple[int, int, int],
    intensity: float = 0.6,
) -> np.ndarray:
    """
    Screen-blend a blurred, tinted copy for bloom.

    Args:
        frame: (H, W, 3) uint8 RGB array.
        radius: Gaussian blur radius in pixels.
        tint: RGB color the bloom is shifted toward.
        intensity: Glow opacity (0-1).

    Returns:
        (H, W, 3) uint8 RGB array with glow applied.
    """
    if radius <= 0 or intensity <= 0:
        return frame

    blurred = Image.fromarray(frame).filter(ImageFilter.GaussianBlur(radius=radius))
    blurred_f = np.asarray(blurred, dtype=np.float32) / 255.0

    # Bloom brightness follows the blurred luminance, hue follows the tint
    luma = blurred_f @ np.array([0.299, 0.587, 0.114], dtype=np.float32)
    tinted = luma[..., None] * (np.asarray(tint, dtype=np.float32) / 255.0)
    bloom = (blurred_f + tinted) * 0.5 * intensity

    a = frame.astype(np.float32) / 255.0
    screen = 1.0 - (1.0 - a) * (1.0 - bloom)
    return _to_bytes(screen * 255.0)


def scanlines(frame: np.ndarray, every: int = 3, darken: float = 0.06) -> np.ndarray:
    """Darken every ``every``-th row, starting with row 0."""
    out = frame.astype(np.float64)
    out[::every] *= 1.0 - darken
    return _to_bytes(out)


def add_noise(frame: np.ndarray, amount: float, random: SeededRandom) -> np.ndarray:
    """
    Add one uniform offset in ``[-amount/2, amount/2)`` per texel to all
    three color channels. Draws ``H*W`` values from ``random``.
    """
    if amount <= 0:
        return frame
    h, w = frame.shape[:2]
    jitter = (random.take(h * w).reshape(h, w) - 0.5) * amount
    return _to_bytes(frame.astype(np.float64) + jitter[..., None])


def vignette(
    frame: np.ndarray,
    edge_color: Tuple[int, int, int],
    reach: float = 0.7,
    edge_alpha: float = 0x80 / 255,
) -> np.ndarray:
    """
    Blend toward ``edge_color`` with a radial ramp.

    The ramp is fully transparent at the center and reaches
    ``edge_alpha`` at ``reach * width`` from it; beyond that it stays
    at ``edge_alpha``.
    """
    h, w = frame.shape[:2]
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    dist = np.hypot(xs + 0.5 - w / 2.0, ys + 0.5 - h / 2.0)
    alpha = np.clip(dist / (w * reach), 0.0, 1.0)[..., None] * edge_alpha
    out = frame.astype(np.float64) * (1.0 - alpha) + np.asarray(edge_color, dtype=np.float64) * alpha
    return _to_bytes(out)


# ---------------------------------------------------------------------------
# Material channels
# ---------------------------------------------------------------------------

def normal_from_height(normal: np.ndarray, strength: float, wrap: bool = False) -> np.ndarray:
    """
    Re-derive a normal map from its own red channel.

    Red is read as height in [0, 1]; ``dx = (left - right) * strength``
    and ``dy = (up - down) * strength`` are re-encoded as
    ``((d + 1) * 127.5)`` rounded half up, with blue fixed at 255. A
    uniform input therefore gives (128, 128, 255) everywhere.

    Args:
        normal: (H, W, 3) uint8 normal map.
        strength: Slope multiplier (normal strength / 50).
        wrap: Take neighbours across the opposite edge (seamless
            textures); otherwise the border texels are repeated.
    """
    height = normal[..., 0].astype(np.float64) / 255.0
    padded = np.pad(height, 1, mode="wrap" if wrap else "edge")
    dx = (padded[1:-1, :-2] - padded[1:-1, 2:]) * strength
    dy = (padded[:-2, 1:-1] - padded[2:, 1:-1]) * strength

    out = np.empty_like(normal)
    out[..., 0] = _to_bytes((dx + 1.0) * 127.5)
    out[..., 1] = _to_bytes((dy + 1.0) * 127.5)
    out[..., 2] = 255
    return out


def invert(values: np.ndarray, channels: Sequence[int] = (0, 1, 2)) -> np.ndarray:
    """``255 - v`` on the listed channel indices only."""
    out = values.copy()
    for c in channels:
        out[..., c] = 255 - values[..., c]
    return out


def blur(values: np.ndarray, sigma: float, wrap: bool = False) -> np.ndarray:
    """Gaussian blur each color channel independently."""
    if sigma <= 0:
        return values
    smoothed = gaussian_filter(
        values.astype(np.float64),
        sigma=(sigma, sigma, 0),
        mode="wrap" if wrap else "nearest",
    )
    return _to_bytes(smoothed)


def contrast(values: np.ndarray, percent: float) -> np.ndarray:
    """Scale distance from mid-gray; 100 leaves values unchanged."""
    if percent == 100:
        return values
    return _to_bytes((values.astype(np.float64) - 128.0) * (percent / 100.0) + 128.0)


def quantize(values: np.ndarray, levels: int) -> np.ndarray:
    """Snap values to ``levels`` evenly spaced steps over [0, 255]."""
    if levels >= 256:
        return values
    step = 255.0 / (levels - 1)
    return _to_bytes(np.floor(values.astype(np.float64) / step + 0.5) * step)


def sheen_bands(values: np.ndarray, frequency: float) -> np.ndarray:
    """
    Modulate a pearlescence map with diagonal sheen bands.

    The band count along each axis is ``round(frequency * 2)`` (at
    least one), so the modulation always tiles.
    """
    h, w = values.shape[:2]
    cycles = max(1, int(round(frequency * 2)))
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    phase = 2.0 * math.pi * cycles * (xs / w + ys / h)
    gain = 0.75 + 0.25 * np.cos(phase)
    return _to_bytes(values.astype(np.float64) * gain[..., None])
