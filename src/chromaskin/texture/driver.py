"""
Full-render orchestration.

Creates the seven surfaces, fills them with their base colors, runs the
selected pattern routine (or evaluates a node graph into the color map),
then applies post-processing and hands back an immutable TextureSet.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Tuple

import numpy as np

from chromaskin.core.evaluator import render_graph
from chromaskin.core.graph import Graph
from chromaskin.core.noise import SeededRandom
from chromaskin.texture import postprocess
from chromaskin.texture.inks import CHANNELS, InkPalette
from chromaskin.texture.patterns import PatternContext, draw_pattern
from chromaskin.texture.settings import MAX_RESOLUTION, TextureSettings, clamp_resolution
from chromaskin.texture.surfaces import SurfaceSet

ProgressCallback = Callable[[int, int], None]

_LUMA = np.array([0.299, 0.587, 0.114])


class SurfaceAllocationError(RuntimeError):
    """The seven target surfaces could not be created."""


@dataclass
class RenderConfig:
    """Configuration for the texture renderer."""

    resolution: int = 512
    preview_size: int = 256

    # Graph evaluation
    workers: int = 1
    band_rows: int = 64

    # Color-map post-processing
    glow_enabled: bool = True
    glow_opacity: float = 0.6
    scanlines_enabled: bool = True
    vignette_enabled: bool = True

    # Renders above this many texels per surface are refused
    max_pixels: int = MAX_RESOLUTION * MAX_RESOLUTION


@dataclass(frozen=True, eq=False)
class TextureSet:
    """Seven pixel-aligned (N, N, 4) uint8 RGBA maps from one render."""

    size: int
    style: str
    pattern: np.ndarray
    mask: np.ndarray
    normal: np.ndarray
    roughness: np.ndarray
    pearlescence: np.ndarray
    ao: np.ndarray
    height: np.ndarray

    def __getitem__(self, channel: str) -> np.ndarray:
        if channel not in CHANNELS:
            raise KeyError(channel)
        return getattr(self, channel)

    def __iter__(self) -> Iterator[Tuple[str, np.ndarray]]:
        for ch in CHANNELS:
            yield ch, getattr(self, ch)

    def as_dict(self) -> Dict[str, np.ndarray]:
        return dict(self)


def _rgba(rgb: np.ndarray) -> np.ndarray:
    alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
    out = np.concatenate([rgb.astype(np.uint8), alpha], axis=-1)
    out.setflags(write=False)
    return out


class TextureRenderer:
    """
    Renders TextureSets.

    The last successful result is kept in ``last_result``; a render that
    fails leaves it untouched.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        self.cfg = config or RenderConfig()
        self.last_result: Optional[TextureSet] = None

    def render(
        self,
        settings: TextureSettings,
        graph: Optional[Graph] = None,
        resolution: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> TextureSet:
        """
        Render all seven maps.

        Args:
            settings: Render settings; never modified.
            graph: When given, the graph's output color replaces the
                pattern routine and the other maps follow its luminance.
            resolution: Edge length in pixels (default ``cfg.resolution``).
            progress_callback: Called as ``(stage, total_stages)``.

        Returns:
            The new TextureSet.

        Raises:
            SurfaceAllocationError: If the surfaces cannot be allocated.
        """
        size = clamp_resolution(self.cfg.resolution if resolution is None else resolution)
        settings = settings.sanitized()
        total = 3

        def report(stage):
            if progress_callback:
                progress_callback(stage, total)

        random = SeededRandom(settings.pattern.seed)
        palette = InkPalette(settings, random)
        surfaces = self._allocate(size, palette, settings)

        if graph is None:
            style = self._draw_pattern(surfaces, palette, settings, random)
        else:
            style = "graph"
            self._draw_graph(surfaces, palette, graph)
        report(1)

        maps = self._post_process(surfaces.arrays(), settings, palette, random)
        report(2)

        result = TextureSet(size=size, style=style, **{ch: _rgba(maps[ch]) for ch in CHANNELS})
        self.last_result = result
        report(3)
        return result

    def _allocate(self, size: int, palette: InkPalette, settings: TextureSettings) -> SurfaceSet:
        if size * size > self.cfg.max_pixels:
            raise SurfaceAllocationError(
                f"{size}x{size} exceeds the {self.cfg.max_pixels} pixel budget"
            )
        try:
            return SurfaceSet(
                size,
                palette.base_colors(),
                seamless=settings.pattern.seamless,
                stroke_style=settings.pattern.stroke_style,
                corner_style=settings.pattern.corner_style,
            )
        except (MemoryError, ValueError, OSError) as exc:
            raise SurfaceAllocationError(f"Could not allocate {size}x{size} surfaces: {exc}") from exc

    def _draw_pattern(self, surfaces: SurfaceSet, palette: InkPalette,
                      settings: TextureSettings, random: SeededRandom) -> str:
        pattern = settings.pattern
        surfaces.save()
        if pattern.rotation != 0:
            surfaces.rotate_about_center(pattern.rotation)
        surfaces.set_tile_frame()
        try:
            return draw_pattern(PatternContext(pattern, surfaces, palette, random))
        finally:
            surfaces.restore()

    def _draw_graph(self, surfaces: SurfaceSet, palette: InkPalette, graph: Graph):
        color = render_graph(graph, surfaces.size, workers=self.cfg.workers, band_rows=self.cfg.band_rows)
        color = np.clip(np.nan_to_num(color, nan=0.0, posinf=1.0, neginf=0.0), 0.0, 1.0)
        luma = color @ _LUMA
        pattern = np.floor(color * 255.0).astype(np.uint8)
        layers = palette.layers(pattern, luma, tilt=(luma - 0.5, luma - 0.5), height=luma)
        surfaces.paint_field(layers)

    def _post_process(self, maps: Dict[str, np.ndarray], settings: TextureSettings,
                      palette: InkPalette, random: SeededRandom) -> Dict[str, np.ndarray]:
        pattern = settings.pattern
        wrap = pattern.seamless

        color = maps["pattern"]
        if self.cfg.glow_enabled and pattern.glow_intensity > 0:
            color = postprocess.add_glow(color, pattern.glow_intensity / 2.0, palette.primary,
                                         intensity=self.cfg.glow_opacity)
        if self.cfg.scanlines_enabled:
            color = postprocess.scanlines(color)
        color = postprocess.add_noise(color, pattern.noise_amount, random)
        if self.cfg.vignette_enabled:
            color = postprocess.vignette(color, palette.background)
        maps["pattern"] = color

        maps["normal"] = postprocess.normal_from_height(
            maps["normal"], settings.normal.strength / 50.0, wrap=wrap)

        mask = postprocess.blur(maps["mask"], settings.mask.blur, wrap=wrap)
        mask = postprocess.contrast(mask, settings.mask.contrast)
        maps["mask"] = mask

        if settings.pearl.frequency != 1.0:
            maps["pearlescence"] = postprocess.sheen_bands(maps["pearlescence"], settings.pearl.frequency)
        maps["height"] = postprocess.quantize(maps["height"], settings.height.levels)

        if settings.mask.invert:
            maps["mask"] = postprocess.invert(maps["mask"])
        if settings.roughness.invert:
            maps["roughness"] = postprocess.invert(maps["roughness"])
        if settings.normal.invert_height:
            maps["normal"] = postprocess.invert(maps["normal"], channels=(0, 1))
        if settings.height.invert:
            maps["height"] = postprocess.invert(maps["height"])
        return maps


def render_texture(
    settings: Optional[TextureSettings] = None,
    resolution: int = 512,
    graph: Optional[Graph] = None,
    config: Optional[RenderConfig] = None,
) -> TextureSet:
    """One-shot render with a throwaway TextureRenderer."""
    renderer = TextureRenderer(config)
    return renderer.render(settings or TextureSettings(), graph=graph, resolution=resolution)
