"""
Shared state and registry for pattern routines.

A routine is a plain function ``routine(ctx)`` that draws one style into
``ctx.surfaces`` through inks built by ``ctx.palette``. Routines read
settings from the context, never from module state, and draw every
random decision from ``ctx.random`` so a render is reproducible.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Set, Tuple

import numpy as np

from chromaskin.core.noise import SeededRandom
from chromaskin.texture.inks import InkPalette
from chromaskin.texture.settings import PatternSettings
from chromaskin.texture.surfaces import SurfaceSet

SQRT3 = math.sqrt(3.0)
TAU = 2.0 * math.pi


@dataclass
class PatternContext:
    """Everything a routine needs for one render."""

    settings: PatternSettings
    surfaces: SurfaceSet
    palette: InkPalette
    random: SeededRandom

    @property
    def size(self) -> int:
        return self.surfaces.size

    # Shortcuts matching the settings names routines use most

    @property
    def density(self) -> float:
        return self.settings.density

    @property
    def complexity(self) -> float:
        return self.settings.complexity

    @property
    def element_size(self) -> float:
        return self.settings.element_size

    @property
    def spacing(self) -> float:
        return self.settings.element_spacing

    @property
    def line_width(self) -> float:
        return self.settings.line_width

    def filled(self) -> bool:
        """One fill-amount coin flip."""
        return self.random() > (100.0 - self.settings.fill_amount) / 100.0

    def pick(self, options):
        return options[int(self.random() * len(options))]

    def random_point(self) -> Tuple[float, float]:
        return self.random() * self.size, self.random() * self.size


Routine = Callable[[PatternContext], None]

ROUTINES: Dict[str, Routine] = {}

# Routines that tile a full-canvas lattice themselves and are drawn once
UNTILED: Set[str] = set()


def pattern_routine(name: str, tiled: bool = True):
    """
    Register a routine under its canonical style id.

    Args:
        name: Canonical style id.
        tiled: Repeat primitives at neighbouring tile offsets in seamless
            mode. Lattice routines that already cover the canvas pass False.
    """
    def register(fn: Routine) -> Routine:
        ROUTINES[name] = fn
        if not tiled:
            UNTILED.add(name)
        return fn
    return register


def cell_size(minimum: float, base: float, density: float, density_k: float,
              extra: float = 0.0, extra_k: float = 0.0) -> int:
    """``max(minimum, floor(base - density*density_k + extra*extra_k))``."""
    return int(max(minimum, math.floor(base - density * density_k + extra * extra_k)))


def expand_cells(cells, block: int, size: int):
    """Nearest-neighbour upscale of a (rows, cols, ...) cell grid to (size, size, ...)."""
    return np.repeat(np.repeat(cells, block, axis=0), block, axis=1)[:size, :size]
