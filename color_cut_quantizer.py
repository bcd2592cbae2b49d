"""
Color quantizer based on median cut, tuned for picking out distinct colors
rather than representative ones.

The RGB color space is a cube that gets repeatedly cut until it holds the
requested number of boxes; each box then contributes its average color.
Unlike median cut, which splits boxes so they hold roughly equal populations,
boxes are split at the middle of their color range, so the space ends up
divided into distinct colors.
"""

import heapq
import itertools

import numpy as np

from color_histogram import ColorHistogram, build_histogram
from color_math import rgb_to_hsl, red, green, blue
from swatch import Swatch


# =============================================================================
# Constants
# =============================================================================

BLACK_MAX_LIGHTNESS = 0.05
WHITE_MIN_LIGHTNESS = 0.95

# Hue/saturation region near skin tones
I_LINE_MIN_HUE = 10
I_LINE_MAX_HUE = 37
I_LINE_MAX_SATURATION = 0.82

COMPONENT_RED = 0
COMPONENT_GREEN = 1
COMPONENT_BLUE = 2

_SHIFTS = {COMPONENT_RED: 16, COMPONENT_GREEN: 8, COMPONENT_BLUE: 0}


# =============================================================================
# Filtering
# =============================================================================

def is_black(hsl: tuple) -> bool:
    return hsl[2] <= BLACK_MAX_LIGHTNESS


def is_white(hsl: tuple) -> bool:
    return hsl[2] >= WHITE_MIN_LIGHTNESS


def is_near_red_i_line(hsl: tuple) -> bool:
    return I_LINE_MIN_HUE <= hsl[0] <= I_LINE_MAX_HUE and hsl[1] <= I_LINE_MAX_SATURATION


def should_ignore_hsl(hsl: tuple) -> bool:
    return is_white(hsl) or is_black(hsl) or is_near_red_i_line(hsl)


def should_ignore_color(color) -> bool:
    """
    Check whether a packed color or a Swatch should be left out of the palette.
    """
    if isinstance(color, Swatch):
        return should_ignore_hsl(color.hsl)
    return should_ignore_hsl(rgb_to_hsl(red(color) / 255, green(color) / 255, blue(color) / 255))


# =============================================================================
# Color Box
# =============================================================================

def _component(colors: np.ndarray, component: int) -> np.ndarray:
    return (colors >> _SHIFTS[component]) & 0xFF


class ColorBox:
    """
    Tight bounding box around colors[start:end] of a shared color array.

    Boxes of one quantization run cover disjoint ranges of the same array.
    """

    def __init__(self, colors: np.ndarray, populations: dict, start: int, end: int):
        self.colors = colors
        self.populations = populations
        self.start = start
        self.end = end
        self.fit_box()

    @property
    def color_count(self) -> int:
        return self.end - self.start

    @property
    def box_colors(self) -> np.ndarray:
        """View of this box's range of the shared array."""
        return self.colors[self.start:self.end]

    @property
    def volume(self) -> int:
        return ((self.max_red - self.min_red + 1) *
                (self.max_green - self.min_green + 1) *
                (self.max_blue - self.min_blue + 1))

    @property
    def population(self) -> int:
        return sum(self.populations.get(c, 0) for c in self.box_colors.tolist())

    def can_split(self) -> bool:
        return self.color_count > 1

    def fit_box(self):
        """Recompute the bounds to tightly fit the colors in range."""
        colors = self.box_colors
        if colors.size == 0:
            self.min_red = self.max_red = 0
            self.min_green = self.max_green = 0
            self.min_blue = self.max_blue = 0
            return

        reds = _component(colors, COMPONENT_RED)
        greens = _component(colors, COMPONENT_GREEN)
        blues = _component(colors, COMPONENT_BLUE)

        self.min_red, self.max_red = int(reds.min()), int(reds.max())
        self.min_green, self.max_green = int(greens.min()), int(greens.max())
        self.min_blue, self.max_blue = int(blues.min()), int(blues.max())

    def longest_color_dimension(self) -> int:
        red_length = self.max_red - self.min_red
        green_length = self.max_green - self.min_green
        blue_length = self.max_blue - self.min_blue

        if red_length >= green_length and red_length >= blue_length:
            return COMPONENT_RED
        elif green_length >= red_length and green_length >= blue_length:
            return COMPONENT_GREEN
        return COMPONENT_BLUE

    def mid_point(self, component: int) -> int:
        if component == COMPONENT_RED:
            return (self.min_red + self.max_red) // 2
        elif component == COMPONENT_GREEN:
            return (self.min_green + self.max_green) // 2
        return (self.min_blue + self.max_blue) // 2

    def find_split_point(self) -> int:
        """
        Sort this box's range along its longest dimension and return the
        offset of the first color at or past the dimension's midpoint.
        """
        component = self.longest_color_dimension()

        colors = self.box_colors
        values = _component(colors, component)
        order = np.argsort(values, kind='stable')
        self.colors[self.start:self.end] = colors[order]
        values = values[order]

        midpoint = self.mid_point(component)
        at_or_above = np.nonzero(values >= midpoint)[0]
        if at_or_above.size == 0:
            return 0
        return int(at_or_above[0])

    def split_box(self):
        """
        Split this box at the midpoint of its longest dimension.

        Returns:
            The new box holding the upper part of the range, or None when the
            box holds a single color or the split would leave the new box empty.
        """
        if not self.can_split():
            return None

        split_point = self.find_split_point()
        if split_point == self.color_count - 1:
            return None

        boundary = self.start + split_point + 1
        new_box = ColorBox(self.colors, self.populations, boundary, self.end)

        self.end = boundary
        self.fit_box()

        return new_box

    def average_color(self) -> Swatch:
        """Population weighted average color of the box."""
        colors = self.box_colors
        weights = np.array([self.populations.get(c, 0) for c in colors.tolist()], dtype=np.float64)
        total = int(weights.sum())

        if total == 0:
            return Swatch(0.0, 0.0, 0.0, 0)

        return Swatch(
            float(np.dot(_component(colors, COMPONENT_RED), weights) / total),
            float(np.dot(_component(colors, COMPONENT_GREEN), weights) / total),
            float(np.dot(_component(colors, COMPONENT_BLUE), weights) / total),
            total,
        )

    def __repr__(self) -> str:
        return f"ColorBox([{self.start}:{self.end}], volume={self.volume})"


# =============================================================================
# Quantizer
# =============================================================================

class ColorCutQuantizer:
    """
    Reduce a histogram to at most `max_colors` swatches.

    The result is available as `quantized_colors`.
    """

    def __init__(self, histogram: ColorHistogram, max_colors: int):
        if max_colors < 1:
            raise ValueError(f"max_colors must be at least 1, got {max_colors}")

        self.max_colors = max_colors
        self.color_populations = histogram.as_population_map()

        keep = [not should_ignore_color(c) for c in histogram.colors.tolist()]
        self.colors = histogram.colors[np.array(keep, dtype=bool)].copy()

        if len(self.colors) <= max_colors:
            # Few enough colors already, no need to quantize
            self.quantized_colors = [
                Swatch.from_color(c, self.color_populations[c])
                for c in self.colors.tolist()
            ]
        else:
            self.quantized_colors = self._quantize_pixels()

    def _quantize_pixels(self) -> list:
        # Max-heap on volume; the counter keeps equal volumes in insertion order
        counter = itertools.count()
        queue = []

        def push(box):
            heapq.heappush(queue, (-box.volume, next(counter), box))

        push(ColorBox(self.colors, self.color_populations, 0, len(self.colors)))

        self._split_boxes(queue, push)

        return self._generate_average_colors(queue)

    def _split_boxes(self, queue: list, push):
        """Split the largest box until there are max_colors boxes or a split fails."""
        while len(queue) < self.max_colors:
            _, _, box = heapq.heappop(queue)

            new_box = box.split_box()
            if new_box is None:
                # The box is dropped, which caps the palette below max_colors
                return

            push(new_box)
            push(box)

    def _generate_average_colors(self, queue: list) -> list:
        swatches = []
        while queue:
            _, _, box = heapq.heappop(queue)
            swatch = box.average_color()
            # An averaged color can still land in an ignored region
            if not should_ignore_color(swatch):
                swatches.append(swatch)
        return swatches


def quantize(pixels, max_colors: int) -> list:
    """
    Quantize packed ARGB pixels into at most `max_colors` swatches.

    Args:
        pixels: Sequence or array of packed ARGB colors
        max_colors: Target palette size, at least 1

    Returns:
        List of Swatch, largest box volume first.
    """
    return ColorCutQuantizer(build_histogram(pixels), max_colors).quantized_colors
