"""
Texture generation settings.

Plain dataclasses owned by the caller. The renderer only reads them;
``sanitized()`` returns a clamped copy so degenerate values never reach
the drawing code.
"""

import math
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict

from chromaskin.texture.schemes import COLOR_SCHEMES, DEFAULT_SCHEME

STROKE_STYLES = ("solid", "dashed", "dotted", "dashdot")
CORNER_STYLES = ("round", "square", "bevel")

MIN_RESOLUTION = 8
MAX_RESOLUTION = 4096


def _clamp(value, lo, hi):
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return lo
    return max(lo, min(hi, value))


@dataclass
class PatternSettings:
    """Style and geometry of the fixed-pattern renderer."""

    style: str = "circuit"
    density: float = 150               # [10,500] element count driver
    complexity: float = 50             # [0,100] detail level
    element_size: float = 50           # [5,200]
    element_spacing: float = 30        # [0,200]
    line_width: float = 2.0            # [0.5,20]
    fill_amount: float = 30            # [0,100] percent of filled cells
    connection_density: float = 50     # [0,100]
    color_scheme: str = "cyan"
    seed: int = 12345
    rotation: float = 0.0              # degrees, about the texture center
    seamless: bool = True
    glow_intensity: float = 8          # [0,50] bloom radius on the color map
    noise_amount: float = 10           # [0,100] per-texel color jitter
    stroke_style: str = "solid"        # solid | dashed | dotted | dashdot
    corner_style: str = "round"        # round | square | bevel

    # Pseudo-3D shading
    depth_intensity: float = 50        # [0,100]
    extrude_depth: float = 20          # [0,100] px
    depth_layers: int = 3              # [1,10]
    layer_offset: float = 10           # [0,50] px
    specular_intensity: float = 0      # [0,100]

    # Lighting hints; stored and exported only
    depth_perspective: float = 50      # [0,100]
    light_angle: float = 45            # degrees
    light_elevation: float = 45        # [0,90] degrees

    def sanitized(self) -> "PatternSettings":
        """Return a copy with every field clamped to its documented range."""
        return replace(
            self,
            density=_clamp(self.density, 10, 500),
            complexity=_clamp(self.complexity, 0, 100),
            element_size=_clamp(self.element_size, 5, 200),
            element_spacing=_clamp(self.element_spacing, 0, 200),
            line_width=_clamp(self.line_width, 0.5, 20),
            fill_amount=_clamp(self.fill_amount, 0, 100),
            connection_density=_clamp(self.connection_density, 0, 100),
            color_scheme=self.color_scheme if self.color_scheme in COLOR_SCHEMES else DEFAULT_SCHEME,
            seed=int(self.seed),
            rotation=float(self.rotation) % 360.0,
            glow_intensity=_clamp(self.glow_intensity, 0, 50),
            noise_amount=_clamp(self.noise_amount, 0, 100),
            stroke_style=self.stroke_style if self.stroke_style in STROKE_STYLES else "solid",
            corner_style=self.corner_style if self.corner_style in CORNER_STYLES else "round",
            depth_intensity=_clamp(self.depth_intensity, 0, 100),
            extrude_depth=_clamp(self.extrude_depth, 0, 100),
            depth_layers=int(_clamp(self.depth_layers, 1, 10)),
            layer_offset=_clamp(self.layer_offset, 0, 50),
            specular_intensity=_clamp(self.specular_intensity, 0, 100),
            depth_perspective=_clamp(self.depth_perspective, 0, 100),
            light_angle=float(self.light_angle) % 360.0,
            light_elevation=_clamp(self.light_elevation, 0, 90),
        )


@dataclass
class MaskSettings:
    """RGB paint-zone mask."""

    base_coat: float = 20              # [0,100] gray level of unpainted area
    red_intensity: float = 80          # [0,100]
    green_intensity: float = 60        # [0,100]
    blue_intensity: float = 40         # [0,100]
    invert: bool = False
    blur: float = 0                    # [0,20] gaussian sigma in px
    contrast: float = 100              # [0,200] percent

    def sanitized(self) -> "MaskSettings":
        return replace(
            self,
            base_coat=_clamp(self.base_coat, 0, 100),
            red_intensity=_clamp(self.red_intensity, 0, 100),
            green_intensity=_clamp(self.green_intensity, 0, 100),
            blue_intensity=_clamp(self.blue_intensity, 0, 100),
            blur=_clamp(self.blur, 0, 20),
            contrast=_clamp(self.contrast, 0, 200),
        )


@dataclass
class NormalMapSettings:
    strength: float = 50               # [0,100]; 50 = unit tilt
    invert_height: bool = False

    def sanitized(self) -> "NormalMapSettings":
        return replace(
            self,
            strength=_clamp(self.strength, 0, 100),
        )


@dataclass
class RoughnessSettings:
    base: float = 30                   # [0,100]
    variation: float = 40              # [0,100]
    invert: bool = False

    def sanitized(self) -> "RoughnessSettings":
        return replace(
            self,
            base=_clamp(self.base, 0, 100),
            variation=_clamp(self.variation, 0, 100),
        )


@dataclass
class PearlescenceSettings:
    intensity: float = 50              # [0,100]
    frequency: float = 1.0             # [0.1,5] sheen band frequency

    def sanitized(self) -> "PearlescenceSettings":
        return replace(
            self,
            intensity=_clamp(self.intensity, 0, 100),
            frequency=_clamp(self.frequency, 0.1, 5),
        )


@dataclass
class AOSettings:
    strength: float = 50               # [0,100]

    def sanitized(self) -> "AOSettings":
        return replace(self, strength=_clamp(self.strength, 0, 100))


@dataclass
class HeightSettings:
    scale: float = 100                 # [0,200] percent
    invert: bool = False
    levels: int = 256                  # [2,256] quantisation steps

    def sanitized(self) -> "HeightSettings":
        return replace(
            self,
            scale=_clamp(self.scale, 0, 200),
            levels=int(_clamp(self.levels, 2, 256)),
        )


@dataclass
class TextureSettings:
    """Everything one full render reads."""

    pattern: PatternSettings = field(default_factory=PatternSettings)
    mask: MaskSettings = field(default_factory=MaskSettings)
    normal: NormalMapSettings = field(default_factory=NormalMapSettings)
    roughness: RoughnessSettings = field(default_factory=RoughnessSettings)
    pearl: PearlescenceSettings = field(default_factory=PearlescenceSettings)
    ao: AOSettings = field(default_factory=AOSettings)
    height: HeightSettings = field(default_factory=HeightSettings)

    def sanitized(self) -> "TextureSettings":
        return TextureSettings(
            pattern=self.pattern.sanitized(),
            mask=self.mask.sanitized(),
            normal=self.normal.sanitized(),
            roughness=self.roughness.sanitized(),
            pearl=self.pearl.sanitized(),
            ao=self.ao.sanitized(),
            height=self.height.sanitized(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def merge_partial(obj, partial: Dict[str, Any]):
    """
    Return a copy of dataclass ``obj`` with ``partial`` applied.

    Raises:
        ValueError: If ``partial`` names a field ``obj`` does not have.
    """
    known = {f.name for f in fields(obj)}
    unknown = sorted(set(partial) - known)
    if unknown:
        raise ValueError(f"Unknown {type(obj).__name__} fields: {', '.join(unknown)}")
    return replace(obj, **partial)


def clamp_resolution(resolution: int) -> int:
    """Resolutions below the minimum are raised to it."""
    try:
        resolution = int(resolution)
    except (TypeError, ValueError):
        return MIN_RESOLUTION
    return max(MIN_RESOLUTION, resolution)
