"""
File export for rendered texture sets.
"""

from chromaskin.io.exporter import ExportSettings, TextureExporter
