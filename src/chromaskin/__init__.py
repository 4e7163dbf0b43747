"""
Chromaskin: procedural multi-channel texture generation.

Produces seven pixel-aligned maps (pattern, mask, normal, roughness,
pearlescence, ao, height) from pattern-style settings or a node graph.
"""

__version__ = "0.1.0"
