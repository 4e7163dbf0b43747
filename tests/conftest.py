"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from chromaskin.core.graph import default_graph
from chromaskin.core.noise import SeededRandom
from chromaskin.texture.driver import RenderConfig, TextureRenderer
from chromaskin.texture.inks import InkPalette
from chromaskin.texture.settings import TextureSettings
from chromaskin.texture.surfaces import SurfaceSet

# Small edge length keeps full renders fast
TEST_SIZE = 64


@pytest.fixture
def size() -> int:
    """Default texture edge length for tests."""
    return TEST_SIZE


@pytest.fixture
def settings() -> TextureSettings:
    """Default texture settings."""
    return TextureSettings()


@pytest.fixture
def renderer(size: int) -> TextureRenderer:
    """Renderer producing TEST_SIZE textures."""
    return TextureRenderer(RenderConfig(resolution=size))


@pytest.fixture
def palette(settings: TextureSettings) -> InkPalette:
    """Palette bound to a fresh seeded random source."""
    return InkPalette(settings.sanitized(), SeededRandom(settings.pattern.seed))


@pytest.fixture
def surfaces(size: int, palette: InkPalette) -> SurfaceSet:
    """Non-seamless surfaces filled with the palette's base colors."""
    return SurfaceSet(size, palette.base_colors())


@pytest.fixture
def graph():
    """uv -> perlin -> gradient -> output graph."""
    return default_graph()


@pytest.fixture
def uv_samples() -> tuple[np.ndarray, np.ndarray]:
    """A small irregular set of UV sample points."""
    u = np.array([0.0, 0.13, 0.5, 0.77, 0.999])
    v = np.array([0.0, 0.91, 0.5, 0.21, 0.333])
    return u, v
