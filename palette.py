"""
Pick named theme swatches (vibrant, muted and their light/dark variants)
from the colors of a quantized image.
"""

import concurrent.futures as cf
from dataclasses import dataclass, field
from typing import Optional

from color_cut_quantizer import quantize
from extract_colors import load_image, scale_image_down, pixels_from_image
from swatch import Swatch


# =============================================================================
# Constants
# =============================================================================

DEFAULT_NUM_COLORS = 16

TARGET_DARK_LUMA = 0.26
MAX_DARK_LUMA = 0.45

MIN_LIGHT_LUMA = 0.55
TARGET_LIGHT_LUMA = 0.74

MIN_NORMAL_LUMA = 0.3
TARGET_NORMAL_LUMA = 0.5
MAX_NORMAL_LUMA = 0.7

TARGET_MUTED_SATURATION = 0.3
MAX_MUTED_SATURATION = 0.4

TARGET_VIBRANT_SATURATION = 1.0
MIN_VIBRANT_SATURATION = 0.35

WEIGHT_SATURATION = 3
WEIGHT_LUMA = 6
WEIGHT_POPULATION = 1


# =============================================================================
# Targets
# =============================================================================

@dataclass(frozen=True)
class Target:
    """Luma/saturation region a named swatch is picked from."""
    name: str
    target_luma: float
    min_luma: float
    max_luma: float
    target_saturation: float
    min_saturation: float
    max_saturation: float

    def accepts(self, swatch: Swatch) -> bool:
        _, saturation, luma = swatch.hsl
        return (self.min_saturation <= saturation <= self.max_saturation and
                self.min_luma <= luma <= self.max_luma)


VIBRANT = Target('vibrant', TARGET_NORMAL_LUMA, MIN_NORMAL_LUMA, MAX_NORMAL_LUMA,
                 TARGET_VIBRANT_SATURATION, MIN_VIBRANT_SATURATION, 1.0)
LIGHT_VIBRANT = Target('light_vibrant', TARGET_LIGHT_LUMA, MIN_LIGHT_LUMA, 1.0,
                       TARGET_VIBRANT_SATURATION, MIN_VIBRANT_SATURATION, 1.0)
DARK_VIBRANT = Target('dark_vibrant', TARGET_DARK_LUMA, 0.0, MAX_DARK_LUMA,
                      TARGET_VIBRANT_SATURATION, MIN_VIBRANT_SATURATION, 1.0)
MUTED = Target('muted', TARGET_NORMAL_LUMA, MIN_NORMAL_LUMA, MAX_NORMAL_LUMA,
               TARGET_MUTED_SATURATION, 0.0, MAX_MUTED_SATURATION)
LIGHT_MUTED = Target('light_muted', TARGET_LIGHT_LUMA, MIN_LIGHT_LUMA, 1.0,
                     TARGET_MUTED_SATURATION, 0.0, MAX_MUTED_SATURATION)
DARK_MUTED = Target('dark_muted', TARGET_DARK_LUMA, 0.0, MAX_DARK_LUMA,
                    TARGET_MUTED_SATURATION, 0.0, MAX_MUTED_SATURATION)

# Resolution order matters: a swatch taken by an earlier target is not
# available to later ones
TARGETS = (VIBRANT, LIGHT_VIBRANT, DARK_VIBRANT, MUTED, LIGHT_MUTED, DARK_MUTED)


# =============================================================================
# Scoring
# =============================================================================

def invert_diff(value: float, target_value: float) -> float:
    """1 when value equals target_value, falling as they move apart."""
    return 1.0 - abs(value - target_value)


def weighted_mean(*values: tuple) -> float:
    """Mean of (value, weight) pairs."""
    total = sum(value * weight for value, weight in values)
    total_weight = sum(weight for _, weight in values)
    return total / total_weight


def create_comparison_value(saturation: float, target_saturation: float,
                            luma: float, target_luma: float,
                            population: int, highest_population: int) -> float:
    population_ratio = population / highest_population if highest_population > 0 else 0.0
    return weighted_mean(
        (invert_diff(saturation, target_saturation), WEIGHT_SATURATION),
        (invert_diff(luma, target_luma), WEIGHT_LUMA),
        (population_ratio, WEIGHT_POPULATION),
    )


def find_color(target: Target, swatches: list, highest_population: int,
               selected: list) -> Optional[Swatch]:
    """
    Best scoring swatch inside `target` that is not already in `selected`.

    The first swatch found wins ties.
    """
    best = None
    best_value = 0.0

    for swatch in swatches:
        if not target.accepts(swatch) or swatch in selected:
            continue

        _, saturation, luma = swatch.hsl
        value = create_comparison_value(
            saturation, target.target_saturation,
            luma, target.target_luma,
            swatch.population, highest_population,
        )
        if best is None or value > best_value:
            best = swatch
            best_value = value

    return best


def _with_luma(swatch: Swatch, luma: float) -> Swatch:
    hue, saturation, _ = swatch.hsl
    return Swatch.from_hsl((hue, saturation, luma), population=0)


# =============================================================================
# Palette
# =============================================================================

@dataclass(frozen=True)
class Palette:
    """Named swatches picked from an image plus every quantized swatch."""
    vibrant_swatch: Optional[Swatch] = None
    light_vibrant_swatch: Optional[Swatch] = None
    dark_vibrant_swatch: Optional[Swatch] = None
    muted_swatch: Optional[Swatch] = None
    light_muted_swatch: Optional[Swatch] = None
    dark_muted_swatch: Optional[Swatch] = None
    swatches: tuple = field(default_factory=tuple)
    highest_population: int = 0

    @classmethod
    def from_swatches(cls, swatches) -> 'Palette':
        return select_palette(swatches)

    @classmethod
    def from_image(cls, image, num_colors: int = DEFAULT_NUM_COLORS) -> 'Palette':
        """
        Generate a palette from a PIL image or an image path.

        Good values for `num_colors` depend on the image: 12-16 for
        landscapes, 24-32 for images made up largely of faces.
        """
        if not hasattr(image, 'getdata'):
            image = load_image(image)
        pixels = pixels_from_image(scale_image_down(image))
        return generate(pixels, num_colors)

    def named_swatches(self) -> dict:
        """Target name -> swatch (or None), in resolution order."""
        return {target.name: getattr(self, f"{target.name}_swatch") for target in TARGETS}


def select_palette(swatches) -> Palette:
    """
    Assign each target its best swatch.

    Targets are resolved in TARGETS order; afterwards a missing vibrant or
    dark vibrant swatch is synthesized from the other one by swapping luma.
    """
    swatches = tuple(swatches)
    highest_population = max((s.population for s in swatches), default=0)

    selected = {}
    for target in TARGETS:
        selected[target.name] = find_color(
            target, swatches, highest_population,
            [s for s in selected.values() if s is not None],
        )

    if selected['vibrant'] is None and selected['dark_vibrant'] is not None:
        selected['vibrant'] = _with_luma(selected['dark_vibrant'], TARGET_NORMAL_LUMA)

    if selected['dark_vibrant'] is None and selected['vibrant'] is not None:
        selected['dark_vibrant'] = _with_luma(selected['vibrant'], TARGET_DARK_LUMA)

    return Palette(
        **{f"{name}_swatch": swatch for name, swatch in selected.items()},
        swatches=swatches,
        highest_population=highest_population,
    )


def generate(pixels, num_colors: int = DEFAULT_NUM_COLORS) -> Palette:
    """Quantize packed ARGB pixels and select a palette from the result."""
    return select_palette(quantize(pixels, num_colors))


def generate_async(image, num_colors: int = DEFAULT_NUM_COLORS,
                   executor: Optional[cf.Executor] = None) -> cf.Future:
    """
    Generate a palette on a worker thread.

    Returns:
        Future resolving to the Palette. When no executor is given a
        single-use thread pool is created and shut down once the work is done.
    """
    if executor is not None:
        return executor.submit(Palette.from_image, image, num_colors)

    pool = cf.ThreadPoolExecutor(max_workers=1)
    future = pool.submit(Palette.from_image, image, num_colors)
    pool.shutdown(wait=False)
    return future
