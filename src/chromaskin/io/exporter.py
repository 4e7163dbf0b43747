"""
Texture set export.

Writes each enabled map of a TextureSet as an RGBA PNG, plus an optional
JSON sidecar recording the settings that produced it.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from PIL import Image

from chromaskin.texture.driver import TextureSet
from chromaskin.texture.inks import CHANNELS
from chromaskin.texture.settings import TextureSettings


@dataclass
class ExportSettings:
    """Which maps to write and how to name them."""

    maps: Dict[str, bool] = field(default_factory=lambda: {ch: True for ch in CHANNELS})
    suffix: str = ""                   # appended after the map name
    folder: Optional[str] = None       # default output folder
    write_settings: bool = True        # <base>_settings.json sidecar

    def enabled(self) -> List[str]:
        return [ch for ch in CHANNELS if self.maps.get(ch, False)]


class TextureExporter:
    """
    Exports TextureSets to PNG files named ``<base>_<map><suffix>.png``.
    """

    def __init__(self, settings: Optional[ExportSettings] = None):
        self.settings = settings or ExportSettings()

    def file_name(self, base_name: str, channel: str) -> str:
        return f"{base_name}_{channel}{self.settings.suffix}.png"

    def export(
        self,
        texture_set: TextureSet,
        folder: Optional[Union[str, Path]] = None,
        base_name: str = "texture",
        texture_settings: Optional[TextureSettings] = None,
    ) -> List[Path]:
        """
        Write every enabled map.

        Args:
            texture_set: Rendered maps.
            folder: Output folder (default ``settings.folder`` or cwd);
                created if missing.
            base_name: File name prefix.
            texture_settings: When given and sidecars are enabled, also
                written as ``<base>_settings.json``.

        Returns:
            Paths written, maps first in channel order.
        """
        folder = Path(folder or self.settings.folder or ".")
        folder.mkdir(parents=True, exist_ok=True)

        written = []
        for channel in self.settings.enabled():
            path = folder / self.file_name(base_name, channel)
            Image.fromarray(texture_set[channel], "RGBA").save(path, format="PNG")
            written.append(path)

        if texture_settings is not None and self.settings.write_settings:
            written.append(self.export_settings(texture_settings, texture_set, folder / f"{base_name}_settings.json"))
        return written

    def export_settings(
        self,
        texture_settings: TextureSettings,
        texture_set: TextureSet,
        output_path: Union[str, Path],
        indent: int = 2,
    ) -> Path:
        """
        Export the render settings as JSON.

        Returns:
            Path to written file.
        """
        payload: Dict[str, Any] = {
            "size": texture_set.size,
            "style": texture_set.style,
            "settings": texture_settings.to_dict(),
        }
        output_path = Path(output_path)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=indent)
        return output_path
