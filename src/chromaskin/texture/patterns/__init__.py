"""
Pattern library: style registry, aliases and dispatch.

Importing this package registers every routine in ``ROUTINES``.
"""

from chromaskin.texture.patterns import depth, fields, geometric, organic, tech  # noqa: F401
from chromaskin.texture.patterns.base import ROUTINES, UNTILED, PatternContext, pattern_routine
from chromaskin.texture.patterns.geometric import GridLines, grid_lines

DEFAULT_STYLE = "circuit"

# Alternate names accepted for a canonical style
STYLE_ALIASES = {
    "neural": "circuit",
    "tech": "circuit",
    "motherboard": "chipset",
    "processor": "chipset",
    "nanotech": "dots",
    "stippling": "dots",
    "quantum": "metaballs",
    "reaction": "metaballs",
    "hologram": "glitch",
    "radar": "circles",
    "agate": "circles",
    "moire": "circles",
    "oscilloscope": "waves",
    "frequency": "waves",
    "waveform": "waves",
    "interference": "waves",
    "dna": "spiral",
    "guilloche": "spiral",
    "carbon": "crosshatch",
    "engraving": "crosshatch",
    "hatching3d": "crosshatch",
    "organic": "flowfield",
    "marble": "noise",
    "wood": "noise",
    "plasma": "noise",
    "grunge": "noise",
    "topographic": "wireframe3d",
    "crystal": "voronoi",
    "geode": "voronoi",
    "cellular": "voronoi",
    "caustics": "voronoi",
    "veins": "coral",
    "roots": "coral",
    "lsystem": "coral",
    "erosion": "terrain3d",
    "fractal": "terrain3d",
    "sediment": "terrain3d",
    "displacement": "terrain3d",
    "heightfield": "terrain3d",
    "terrazzo": "mosaic",
    "splatter": "mosaic",
    "camo": "digicamo",
    "celtic": "labyrinth",
    "truchet": "labyrinth",
    "layered3d": "parallax",
    "shadowbox": "extruded",
    "subdivision": "delaunay",
    "penrose": "delaunay",
    "honeycomb": "hexgrid",
    "mandala": "geometric",
}


def resolve_style(style: str) -> str:
    """Canonical routine name for a style id or alias; unknown ids map to circuit."""
    style = (style or "").strip().lower()
    if style in ROUTINES:
        return style
    return STYLE_ALIASES.get(style, DEFAULT_STYLE)


def list_styles():
    """Sorted canonical style ids followed by the sorted aliases."""
    return sorted(ROUTINES), sorted(STYLE_ALIASES)


def draw_pattern(ctx: PatternContext) -> str:
    """
    Run the routine for ``ctx.settings.style``.

    Returns:
        The canonical style that was drawn.
    """
    name = resolve_style(ctx.settings.style)
    routine = ROUTINES[name]
    if name in UNTILED:
        with ctx.surfaces.untiled():
            routine(ctx)
    else:
        routine(ctx)
    return name


__all__ = [
    "DEFAULT_STYLE",
    "GridLines",
    "PatternContext",
    "ROUTINES",
    "STYLE_ALIASES",
    "UNTILED",
    "draw_pattern",
    "grid_lines",
    "list_styles",
    "pattern_routine",
    "resolve_style",
]
