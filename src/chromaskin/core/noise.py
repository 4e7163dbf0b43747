"""
Seeded random source and 2D noise primitives.

Every procedural value in the engine is derived from the functions in this
module, so identical seeds reproduce identical textures:

  - SeededRandom      — stateful ``frac(sin(state) * 10000)`` generator
  - value_noise_2d    — bilinear hash noise on the integer lattice
  - fbm               — fractal sum of value noise octaves
  - voronoi           — jittered-lattice cell distance (Worley F1/F2)

The noise functions accept Python floats or numpy arrays for the
coordinates (vectorised, no per-pixel Python loops).
"""

import math
from typing import NamedTuple, Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

# Lattice row stride used by the corner hash
_ROW_STRIDE = 57.0


def _frac_sin(n: ArrayLike) -> ArrayLike:
    x = np.sin(n) * 10000.0
    return x - np.floor(x)


def lattice_hash(n: ArrayLike) -> ArrayLike:
    """Hash of a lattice key: ``frac(sin(n) * 10000)``."""
    return _frac_sin(np.asarray(n, dtype=np.float64))


def _unwrap(arr: np.ndarray) -> ArrayLike:
    """Return 0-d results as numpy scalars, arrays unchanged."""
    return arr[()] if arr.ndim == 0 else arr


class SeededRandom:
    """
    Deterministic pseudo-random generator.

    Each call advances the internal state by one and returns
    ``frac(sin(state) * 10000)`` in [0, 1). The sequence is a pure
    function of the seed and the number of draws.
    """

    def __init__(self, seed: float):
        self.state = float(seed)

    def __call__(self) -> float:
        self.state += 1.0
        x = math.sin(self.state) * 10000.0
        return x - math.floor(x)

    def take(self, count: int) -> np.ndarray:
        """Draw ``count`` values at once as a float64 array."""
        count = max(0, int(count))
        states = self.state + np.arange(1, count + 1, dtype=np.float64)
        self.state += count
        return _frac_sin(states)

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self()

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high)."""
        return low + int(self() * (high - low))

    def chance(self, probability: float) -> bool:
        """True with the given probability (one draw)."""
        return self() < probability

    def choice(self, items):
        return items[int(self() * len(items)) % len(items)]


def seeded_random(seed: float) -> SeededRandom:
    return SeededRandom(seed)


def value_noise_2d(x: ArrayLike, y: ArrayLike, seed: float = 0) -> ArrayLike:
    """
    Bilinear-interpolated lattice hash noise in [0, 1].

    Args:
        x, y: Sample coordinates (floats or broadcastable arrays).
        seed: Lattice seed.

    Returns:
        Noise value(s) with the broadcast shape of ``x`` and ``y``.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    ix = np.floor(x)
    iy = np.floor(y)
    fx = x - ix
    fy = y - iy

    key = ix + iy * _ROW_STRIDE + seed
    a = lattice_hash(key)
    b = lattice_hash(key + 1.0)
    c = lattice_hash(key + _ROW_STRIDE)
    d = lattice_hash(key + _ROW_STRIDE + 1.0)

    # Smoothstep weights
    ux = fx * fx * (3.0 - 2.0 * fx)
    uy = fy * fy * (3.0 - 2.0 * fy)

    value = a + (b - a) * ux + (c - a) * uy + (a - b - c + d) * ux * uy
    return _unwrap(np.asarray(value))


def fbm(
    x: ArrayLike,
    y: ArrayLike,
    octaves: int = 4,
    persistence: float = 0.5,
    lacunarity: float = 2.0,
    seed: float = 0,
) -> ArrayLike:
    """
    Fractal Brownian motion over value noise, normalised to [0, 1].

    Octave ``i`` samples ``value_noise_2d`` at ``frequency`` with seed
    ``seed + i*100``; amplitude is multiplied by ``persistence`` and
    frequency by ``lacunarity`` after each octave.
    """
    octaves = max(1, int(octaves))
    total = 0.0
    amplitude = 1.0
    frequency = 1.0
    max_value = 0.0

    for i in range(octaves):
        total = total + amplitude * value_noise_2d(
            np.multiply(x, frequency), np.multiply(y, frequency), seed + i * 100
        )
        max_value += amplitude
        amplitude *= persistence
        frequency *= lacunarity

    if max_value == 0:
        return total
    return total / max_value


class VoronoiSample(NamedTuple):
    distance: ArrayLike         # nearest jittered point, clamped to 1
    cell_id: ArrayLike          # [0,1) identifier of the nearest cell
    second_distance: ArrayLike  # second-nearest point, clamped to 1


def voronoi(
    x: ArrayLike,
    y: ArrayLike,
    seed: float = 0,
    randomness: float = 1.0,
) -> VoronoiSample:
    """
    Cellular noise over the 3x3 neighbourhood of lattice cells.

    Each cell's feature point is its center jittered by a per-cell hash
    scaled by ``randomness`` (0 = regular grid, 1 = fully random).
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    shape = np.broadcast(x, y).shape
    cx = np.floor(x)
    cy = np.floor(y)

    best = np.full(shape, np.inf)
    second = np.full(shape, np.inf)
    cell = np.zeros(shape)

    for dy in (-1.0, 0.0, 1.0):
        for dx in (-1.0, 0.0, 1.0):
            gx = cx + dx
            gy = cy + dy
            key = gx + gy * _ROW_STRIDE + seed
            px = gx + 0.5 + (lattice_hash(key + 17.3) - 0.5) * randomness
            py = gy + 0.5 + (lattice_hash(key + 91.7) - 0.5) * randomness
            dist = np.hypot(x - px, y - py)

            closer = dist < best
            second = np.where(closer, best, np.minimum(second, dist))
            cell = np.where(closer, lattice_hash(key), cell)
            best = np.where(closer, dist, best)

    return VoronoiSample(
        distance=_unwrap(np.minimum(best, 1.0)),
        cell_id=_unwrap(np.asarray(cell)),
        second_distance=_unwrap(np.minimum(second, 1.0)),
    )
