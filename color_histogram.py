"""
Frequency histogram of packed ARGB colors.
"""

from dataclasses import dataclass, field

import numpy as np


@dataclass
class ColorHistogram:
    """Distinct colors in ascending packed order with their pixel counts."""
    colors: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.uint32))
    counts: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.int64))

    @property
    def number_of_colors(self) -> int:
        return len(self.colors)

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return zip(self.colors.tolist(), self.counts.tolist())

    def as_population_map(self) -> dict:
        """Map each color to its count."""
        return dict(zip(self.colors.tolist(), self.counts.tolist()))


def build_histogram(pixels) -> ColorHistogram:
    """
    Count pixel colors.

    Args:
        pixels: Sequence or array of packed ARGB colors in scan order

    Returns:
        ColorHistogram sorted by packed color value. Empty input gives an
        empty histogram.
    """
    pixels = np.asarray(pixels, dtype=np.uint32).ravel()

    if pixels.size == 0:
        return ColorHistogram()

    # np.unique sorts first, so the result does not depend on scan order
    colors, counts = np.unique(pixels, return_counts=True)

    return ColorHistogram(colors=colors, counts=counts.astype(np.int64))
