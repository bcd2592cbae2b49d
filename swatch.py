"""
Swatch: one color of a generated palette and the number of pixels it stands for.
"""

import colorsys
from dataclasses import dataclass
from functools import cached_property

import color_math
from color_math import (
    pack_argb,
    rgb_to_hsl,
    hsl_to_rgb,
    text_color_for_background,
    to_hex,
)


MIN_CONTRAST_TITLE_TEXT = 3.0
MIN_CONTRAST_BODY_TEXT = 4.5

EQUALITY_TOLERANCE = 0.001


@dataclass(frozen=True, eq=False)
class Swatch:
    """
    An RGB color (channels 0-255, kept as floats so averaged colors are not
    truncated) and its population.

    HSL and the text colors are computed on first access.
    """
    red: float
    green: float
    blue: float
    population: int = 0

    @classmethod
    def from_color(cls, color: int, population: int = 0) -> 'Swatch':
        """Build a swatch from a packed ARGB color."""
        return cls(float(color_math.red(color)), float(color_math.green(color)),
                   float(color_math.blue(color)), population)

    @classmethod
    def from_hsl(cls, hsl: tuple, population: int = 0) -> 'Swatch':
        r, g, b = hsl_to_rgb(*hsl)
        swatch = cls(r * 255, g * 255, b * 255, population)
        # Pre-seeds the cached_property so the exact HSL is kept rather than
        # re-derived from rounded RGB; frozen only blocks __setattr__
        swatch.__dict__['hsl'] = tuple(hsl)
        return swatch

    @property
    def rgb(self) -> tuple[float, float, float]:
        return (self.red, self.green, self.blue)

    @property
    def rgba(self) -> tuple:
        """Opaque RGBA tuple of 0-1 floats."""
        return (self.red / 255, self.green / 255, self.blue / 255, 1.0)

    @cached_property
    def hsl(self) -> tuple[float, float, float]:
        """
        Hue [0, 360), saturation [0, 1], lightness [0, 1].
        """
        return rgb_to_hsl(self.red / 255, self.green / 255, self.blue / 255)

    @cached_property
    def hsv(self) -> tuple[float, float, float]:
        """Hue [0, 360), saturation and value [0, 1]."""
        h, s, v = colorsys.rgb_to_hsv(self.red / 255, self.green / 255, self.blue / 255)
        return (h * 360, s, v)

    @cached_property
    def title_text_color(self) -> tuple:
        """RGBA color for title text drawn over this swatch."""
        return text_color_for_background(self.rgba, MIN_CONTRAST_TITLE_TEXT)

    @cached_property
    def body_text_color(self) -> tuple:
        """RGBA color for body text drawn over this swatch."""
        return text_color_for_background(self.rgba, MIN_CONTRAST_BODY_TEXT)

    @property
    def hex(self) -> str:
        return to_hex(self.red, self.green, self.blue)

    def to_int(self) -> int:
        """Opaque packed ARGB value, channels truncated."""
        return pack_argb(int(self.red), int(self.green), int(self.blue))

    def __eq__(self, other) -> bool:
        if self is other:
            return True
        if not isinstance(other, Swatch):
            return NotImplemented
        return (self.population == other.population and
                abs(self.red - other.red) < EQUALITY_TOLERANCE and
                abs(self.green - other.green) < EQUALITY_TOLERANCE and
                abs(self.blue - other.blue) < EQUALITY_TOLERANCE)

    def __hash__(self) -> int:
        # Channels compare with a tolerance, so only population is hashable
        return hash(self.population)

    def __repr__(self) -> str:
        return f"Swatch({self.hex}, population={self.population})"
