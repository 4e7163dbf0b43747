"""
Typed values flowing through node graph ports.

A NodeValue is a tagged union of float | vector2 | color. Components are
Python floats for single samples or numpy arrays when a whole UV grid is
evaluated at once. Coercions between tags are total, so a consumer can
always read the representation it needs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

import numpy as np

Scalar = Union[float, np.ndarray]


class ValueType(str, Enum):
    FLOAT = "float"
    VECTOR2 = "vector2"
    COLOR = "color"


@dataclass(frozen=True, eq=False)
class NodeValue:
    """Tagged port value."""

    type: ValueType
    components: Tuple[Scalar, ...]

    @classmethod
    def of_float(cls, value: Scalar) -> "NodeValue":
        return cls(ValueType.FLOAT, (value,))

    @classmethod
    def of_vector2(cls, x: Scalar, y: Scalar) -> "NodeValue":
        return cls(ValueType.VECTOR2, (x, y))

    @classmethod
    def of_color(cls, r: Scalar, g: Scalar, b: Scalar) -> "NodeValue":
        return cls(ValueType.COLOR, (r, g, b))

    # -- coercions ---------------------------------------------------------

    def as_float(self) -> Scalar:
        """Float view: colors average their channels, vectors yield x."""
        if self.type is ValueType.FLOAT:
            return self.components[0]
        if self.type is ValueType.VECTOR2:
            return self.components[0]
        r, g, b = self.components
        return (r + g + b) / 3.0

    def as_vector2(self) -> Tuple[Scalar, Scalar]:
        if self.type is ValueType.VECTOR2:
            return self.components
        if self.type is ValueType.FLOAT:
            f = self.components[0]
            return (f, f)
        r, g, _ = self.components
        return (r, g)

    def as_color(self) -> Tuple[Scalar, Scalar, Scalar]:
        if self.type is ValueType.COLOR:
            return self.components
        if self.type is ValueType.FLOAT:
            f = self.components[0]
            return (f, f, f)
        x, y = self.components
        return (x, y, 0.0)

    def coerce(self, target: ValueType) -> "NodeValue":
        """Return this value re-tagged as ``target``."""
        if target is self.type:
            return self
        if target is ValueType.FLOAT:
            return NodeValue.of_float(self.as_float())
        if target is ValueType.VECTOR2:
            return NodeValue.of_vector2(*self.as_vector2())
        return NodeValue.of_color(*self.as_color())

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{c:.4f}" if isinstance(c, (float, np.floating)) else f"<{np.shape(c)}>"
            for c in self.components
        )
        return f"NodeValue.{self.type.value}({parts})"


NEUTRAL = NodeValue.of_color(0.5, 0.5, 0.5)


def parse_hex_color(value) -> Tuple[float, float, float]:
    """
    Parse ``#rrggbb`` (or an RGB tuple in [0,1] / 0-255) to floats in [0,1].

    Raises:
        ValueError: If the value is not a recognisable color.
    """
    if isinstance(value, str):
        text = value.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(ch * 2 for ch in text)
        if len(text) != 6:
            raise ValueError(f"Invalid hex color: {value!r}")
        try:
            return tuple(int(text[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
        except ValueError:
            raise ValueError(f"Invalid hex color: {value!r}") from None

    if isinstance(value, (tuple, list)) and len(value) == 3:
        channels = [float(c) for c in value]
        if any(c > 1.0 for c in channels):
            channels = [c / 255.0 for c in channels]
        return tuple(min(1.0, max(0.0, c)) for c in channels)

    raise ValueError(f"Invalid color value: {value!r}")


def to_hex_color(rgb: Tuple[float, float, float]) -> str:
    return "#" + "".join(f"{int(round(min(1.0, max(0.0, c)) * 255)):02x}" for c in rgb)
