"""
Built-in presets.

A preset is a bundle of partial settings. Applying one merges every
partial at once into a new TextureSettings; if any key is unknown
nothing is applied.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from chromaskin.texture.settings import TextureSettings, merge_partial

CATEGORIES = ("tech", "geometric", "organic", "camo", "artistic")


@dataclass(frozen=True)
class Preset:
    id: str
    name: str
    description: str
    category: str
    pattern: Dict[str, Any]
    mask: Dict[str, Any] = field(default_factory=dict)
    normal: Dict[str, Any] = field(default_factory=dict)
    roughness: Dict[str, Any] = field(default_factory=dict)
    pearl: Dict[str, Any] = field(default_factory=dict)


PRESETS: Dict[str, Preset] = {
    p.id: p for p in (
        Preset(
            "cyber-circuit", "Cyber Circuit", "Cyberpunk circuit board", "tech",
            pattern={"style": "circuit", "color_scheme": "cyan", "density": 200,
                     "complexity": 70, "connection_density": 60, "glow_intensity": 15},
            mask={"red_intensity": 90, "green_intensity": 50, "blue_intensity": 30},
        ),
        Preset(
            "neon-hex", "Neon Hexagons", "Glowing hexagon grid", "geometric",
            pattern={"style": "hexgrid", "color_scheme": "purple", "density": 150,
                     "fill_amount": 40, "glow_intensity": 20},
            mask={"red_intensity": 60, "green_intensity": 80, "blue_intensity": 90},
        ),
        Preset(
            "military-digi", "Digital Camo", "Pixelated military camouflage", "camo",
            pattern={"style": "digicamo", "color_scheme": "military", "density": 300,
                     "element_size": 30},
            mask={"red_intensity": 70, "green_intensity": 70, "blue_intensity": 40,
                  "base_coat": 30},
        ),
        Preset(
            "gold-geometric", "Gold Geometry", "Gilded geometric rosettes", "artistic",
            pattern={"style": "geometric", "color_scheme": "gold", "complexity": 80,
                     "line_width": 1.5, "glow_intensity": 10},
            mask={"red_intensity": 100, "green_intensity": 70, "blue_intensity": 20},
            roughness={"base": 20, "variation": 30},
            pearl={"intensity": 70},
        ),
        Preset(
            "matrix-rain", "Matrix Rain", "Falling green data columns", "tech",
            pattern={"style": "datastream", "color_scheme": "matrix", "density": 250,
                     "line_width": 1},
            mask={"red_intensity": 30, "green_intensity": 100, "blue_intensity": 30},
        ),
        Preset(
            "fire-waves", "Fire Waves", "Molten flowing waves", "organic",
            pattern={"style": "waves", "color_scheme": "lava", "density": 180,
                     "complexity": 60, "glow_intensity": 25},
            mask={"red_intensity": 100, "green_intensity": 50, "blue_intensity": 20},
        ),
        Preset(
            "ice-crystal", "Ice Crystal", "Frozen crystal cells", "organic",
            pattern={"style": "voronoi", "color_scheme": "ice", "density": 100,
                     "glow_intensity": 12},
            mask={"red_intensity": 60, "green_intensity": 80, "blue_intensity": 100},
            pearl={"intensity": 80, "frequency": 1.5},
        ),
        Preset(
            "toxic-splatter", "Toxic Splatter", "Radioactive splatter tiles", "artistic",
            pattern={"style": "mosaic", "color_scheme": "toxic", "density": 200,
                     "fill_amount": 60},
            mask={"red_intensity": 50, "green_intensity": 100, "blue_intensity": 30},
        ),
        Preset(
            "carbon-fiber", "Carbon Fiber", "Woven carbon weave", "tech",
            pattern={"style": "crosshatch", "color_scheme": "white", "density": 400,
                     "line_width": 0.8, "noise_amount": 5},
            mask={"red_intensity": 30, "green_intensity": 30, "blue_intensity": 30},
            roughness={"base": 15, "variation": 10},
        ),
        Preset(
            "glitch-art", "Glitch Art", "Corrupted signal blocks", "tech",
            pattern={"style": "glitch", "color_scheme": "pink", "density": 350},
            mask={"red_intensity": 90, "green_intensity": 40, "blue_intensity": 80},
        ),
        Preset(
            "zen-flow", "Zen Flow", "Calm flowing streamlines", "organic",
            pattern={"style": "flowfield", "color_scheme": "teal", "density": 120,
                     "complexity": 40, "line_width": 1.2},
            mask={"red_intensity": 50, "green_intensity": 90, "blue_intensity": 80},
        ),
        Preset(
            "star-field", "Star Field", "Scattered glowing stars", "geometric",
            pattern={"style": "stars", "color_scheme": "amber", "density": 80,
                     "fill_amount": 70, "glow_intensity": 18},
            mask={"red_intensity": 100, "green_intensity": 80, "blue_intensity": 40},
        ),
    )
}


def get_preset(preset_id: str) -> Preset:
    """
    Raises:
        KeyError: If no preset has that id.
    """
    try:
        return PRESETS[preset_id]
    except KeyError:
        raise KeyError(f"Unknown preset: {preset_id}") from None


def apply_preset(settings: TextureSettings, preset) -> TextureSettings:
    """
    Merge a preset into ``settings``.

    Args:
        settings: Base settings; never modified.
        preset: A Preset or a preset id.

    Returns:
        A new TextureSettings with every partial applied.

    Raises:
        KeyError: Unknown preset id.
        ValueError: A partial names a field its settings group lacks.
    """
    if isinstance(preset, str):
        preset = get_preset(preset)
    # Build every group first so a bad key leaves nothing half-applied
    merged = {
        "pattern": merge_partial(settings.pattern, preset.pattern),
        "mask": merge_partial(settings.mask, preset.mask),
        "normal": merge_partial(settings.normal, preset.normal),
        "roughness": merge_partial(settings.roughness, preset.roughness),
        "pearl": merge_partial(settings.pearl, preset.pearl),
    }
    return replace(settings, **merged)


def find_presets(query: str = "", category: Optional[str] = None) -> List[Preset]:
    """Presets whose name or description contains ``query`` (case-insensitive)."""
    needle = query.lower()
    return [
        p for p in PRESETS.values()
        if (needle in p.name.lower() or needle in p.description.lower())
        and (category is None or p.category == category)
    ]
