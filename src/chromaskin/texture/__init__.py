"""
Seven-channel texture rendering: settings, color schemes, the pattern
library, post-processing and the render driver.
"""

from chromaskin.texture.driver import (
    RenderConfig,
    SurfaceAllocationError,
    TextureRenderer,
    TextureSet,
    render_texture,
)
from chromaskin.texture.inks import CHANNELS, Ink, InkPalette
from chromaskin.texture.patterns import STYLE_ALIASES, list_styles, resolve_style
from chromaskin.texture.presets import PRESETS, Preset, apply_preset, find_presets
from chromaskin.texture.schemes import COLOR_SCHEMES, get_scheme
from chromaskin.texture.settings import (
    AOSettings,
    HeightSettings,
    MaskSettings,
    NormalMapSettings,
    PatternSettings,
    PearlescenceSettings,
    RoughnessSettings,
    TextureSettings,
)
