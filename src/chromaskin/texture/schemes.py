"""
Color schemes for the pattern surface.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

RGB = Tuple[int, int, int]


def hex_to_rgb(value: str) -> RGB:
    text = value.lstrip("#")
    return tuple(int(text[i:i + 2], 16) for i in (0, 2, 4))


@dataclass(frozen=True)
class ColorScheme:
    id: str
    name: str
    primary: str
    secondary: str
    background: str
    accent: str

    @property
    def primary_rgb(self) -> RGB:
        return hex_to_rgb(self.primary)

    @property
    def secondary_rgb(self) -> RGB:
        return hex_to_rgb(self.secondary)

    @property
    def background_rgb(self) -> RGB:
        return hex_to_rgb(self.background)

    @property
    def accent_rgb(self) -> RGB:
        return hex_to_rgb(self.accent)


_SCHEMES = (
    # id          name        primary    secondary  background accent
    ColorScheme("cyan", "Cyber Cyan", "#00ffff", "#0088aa", "#0a0a12", "#00ff88"),
    ColorScheme("orange", "Neon Orange", "#ff6600", "#ff3300", "#0f0a05", "#ffaa00"),
    ColorScheme("green", "Toxic Green", "#00ff00", "#008800", "#050f05", "#88ff00"),
    ColorScheme("purple", "Electric Purple", "#aa00ff", "#6600aa", "#0a050f", "#ff00aa"),
    ColorScheme("white", "Clean White", "#ffffff", "#888888", "#080808", "#cccccc"),
    ColorScheme("matrix", "Matrix", "#00ff41", "#003300", "#000000", "#00aa00"),
    ColorScheme("gold", "Gold", "#ffd700", "#b8860b", "#0a0805", "#ffec8b"),
    ColorScheme("red", "Blood Red", "#ff0040", "#aa0020", "#0f0505", "#ff4080"),
    ColorScheme("blue", "Deep Blue", "#0080ff", "#0040aa", "#050510", "#40a0ff"),
    ColorScheme("pink", "Hot Pink", "#ff69b4", "#ff1493", "#0f050a", "#ffb6c1"),
    ColorScheme("teal", "Teal", "#20b2aa", "#008080", "#050a0a", "#40e0d0"),
    ColorScheme("amber", "Amber", "#ffbf00", "#ff8c00", "#0a0800", "#ffd700"),
    ColorScheme("military", "Military", "#556b2f", "#6b8e23", "#1a1a0a", "#9acd32"),
    ColorScheme("ice", "Ice", "#e0ffff", "#b0e0e6", "#0a0f12", "#87ceeb"),
    ColorScheme("lava", "Lava", "#ff4500", "#8b0000", "#0f0500", "#ff6347"),
    ColorScheme("toxic", "Toxic", "#7fff00", "#32cd32", "#050a00", "#adff2f"),
)

COLOR_SCHEMES: Dict[str, ColorScheme] = {s.id: s for s in _SCHEMES}
DEFAULT_SCHEME = "cyan"


def get_scheme(scheme_id: str) -> ColorScheme:
    """Scheme by id; unknown ids fall back to the default scheme."""
    return COLOR_SCHEMES.get(scheme_id, COLOR_SCHEMES[DEFAULT_SCHEME])
