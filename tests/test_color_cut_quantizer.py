"""Tests for the box-cutting quantizer."""

import numpy as np
import pytest

from color_cut_quantizer import (
    COMPONENT_GREEN,
    COMPONENT_RED,
    ColorBox,
    ColorCutQuantizer,
    quantize,
    should_ignore_color,
)
from color_histogram import build_histogram
from color_math import pack_argb
from swatch import Swatch


def random_pixels(seed: int, count: int = 3000) -> np.ndarray:
    rng = np.random.default_rng(seed)
    rgb = rng.integers(0, 256, size=(count, 3))
    return np.array([pack_argb(r, g, b) for r, g, b in rgb.tolist()], dtype=np.uint32)


def make_box(pixels) -> ColorBox:
    histogram = build_histogram(pixels)
    colors = histogram.colors.copy()
    return ColorBox(colors, histogram.as_population_map(), 0, len(colors))


# =============================================================================
# Filtering
# =============================================================================

def test_literal_greys_survive_filtering():
    # Lightness 16/255, 32/255 and 240/255 are all inside (0.05, 0.95)
    pixels = [0xFF101010, 0xFF202020, 0xFFF0F0F0]
    swatches = quantize(pixels, 8)

    assert len(swatches) == 3
    assert sorted(s.to_int() for s in swatches) == sorted(pixels)


@pytest.mark.parametrize("color, ignored", [
    (0xFF0C0C0C, True),   # lightness 0.047
    (0xFF0D0D0D, False),  # lightness 0.051
    (0xFFF3F3F3, True),   # lightness 0.953
    (0xFFF2F2F2, False),  # lightness 0.949
    (0xFFBF6A40, True),   # hue ~20, saturation ~0.5: near the I-line
    (0xFFFF8000, False),  # hue ~30 but fully saturated
    (0xFF3366CC, False),
])
def test_should_ignore_color(color, ignored):
    assert should_ignore_color(color) is ignored


def test_should_ignore_swatch():
    assert should_ignore_color(Swatch(0, 0, 0, 5))
    assert not should_ignore_color(Swatch(40, 90, 200, 5))


@pytest.mark.parametrize("hsl, ignored", [
    ((10.0, 0.5, 0.5), True),
    ((37.0, 0.82, 0.5), True),
    ((9.9, 0.5, 0.5), False),
    ((37.1, 0.5, 0.5), False),
    ((20.0, 0.83, 0.5), False),
])
def test_i_line_bounds_are_inclusive(hsl, ignored):
    assert should_ignore_color(Swatch.from_hsl(hsl, 5)) is ignored


# =============================================================================
# Color Box
# =============================================================================

def test_box_bounds_and_volume():
    box = make_box([pack_argb(10, 20, 30), pack_argb(50, 20, 31), pack_argb(30, 25, 30)])

    assert (box.min_red, box.max_red) == (10, 50)
    assert (box.min_green, box.max_green) == (20, 25)
    assert (box.min_blue, box.max_blue) == (30, 31)
    assert box.volume == 41 * 6 * 2


def test_single_color_box_has_unit_volume_and_cannot_split():
    box = make_box([pack_argb(100, 100, 200)] * 4)
    assert box.volume == 1
    assert not box.can_split()
    assert box.split_box() is None


def test_two_distant_colors_do_not_split():
    box = make_box([pack_argb(100, 0, 0), pack_argb(200, 0, 0)])
    assert box.split_box() is None
    assert (box.start, box.end) == (0, 2)


def test_split_conserves_population_and_keeps_boxes_tight():
    pixels = random_pixels(3, count=4000)
    boxes = [make_box(pixels)]

    while len(boxes) < 40:
        box = max(boxes, key=lambda b: b.volume)
        before = box.population
        new_box = box.split_box()
        if new_box is None:
            break
        assert box.population + new_box.population == before
        assert box.end == new_box.start
        boxes.append(new_box)

    assert len(boxes) > 1
    assert sum(b.population for b in boxes) == len(pixels)

    ranges = sorted((b.start, b.end) for b in boxes)
    assert ranges[0][0] == 0
    assert ranges[-1][1] == len(boxes[0].colors)
    assert all(a[1] == b[0] for a, b in zip(ranges, ranges[1:]))

    for b in boxes:
        assert b.volume >= 1
        colors = b.box_colors
        reds = (colors >> 16) & 0xFF
        greens = (colors >> 8) & 0xFF
        blues = colors & 0xFF
        assert (b.min_red, b.max_red) == (int(reds.min()), int(reds.max()))
        assert (b.min_green, b.max_green) == (int(greens.min()), int(greens.max()))
        assert (b.min_blue, b.max_blue) == (int(blues.min()), int(blues.max()))


def test_split_sorts_only_its_own_range():
    pixels = random_pixels(5, count=500)
    box = make_box(pixels)
    new_box = box.split_box()
    untouched = new_box.box_colors.copy()

    box.split_box()

    assert np.array_equal(new_box.box_colors, untouched)


def test_split_uses_longest_dimension_midpoint():
    colors = [pack_argb(r, 10, 10) for r in (20, 40, 110, 120, 200)]
    box = make_box(colors)
    new_box = box.split_box()

    # Midpoint (20 + 200) // 2 = 110; 110 is the first at or above it and
    # stays with the lower box
    reds_low = sorted(((box.box_colors >> 16) & 0xFF).tolist())
    reds_high = sorted(((new_box.box_colors >> 16) & 0xFF).tolist())
    assert reds_low == [20, 40, 110]
    assert reds_high == [120, 200]


def upper_half(colors) -> tuple:
    box = make_box(colors)
    component = box.longest_color_dimension()
    return component, sorted(box.split_box().box_colors.tolist())


def test_red_wins_a_tie_with_green():
    # Red and green both span 0..10; the upper halves differ per axis
    component, upper = upper_half([pack_argb(0, 0, 0), pack_argb(10, 0, 0), pack_argb(10, 10, 0),
                                   pack_argb(0, 10, 0), pack_argb(10, 5, 0)])

    assert component == COMPONENT_RED
    assert upper == sorted([pack_argb(10, 5, 0), pack_argb(10, 10, 0)])


def test_green_wins_a_tie_with_blue():
    component, upper = upper_half([pack_argb(50, 0, 0), pack_argb(50, 10, 0), pack_argb(50, 10, 10),
                                   pack_argb(50, 0, 10), pack_argb(50, 10, 5)])

    assert component == COMPONENT_GREEN
    assert upper == sorted([pack_argb(50, 10, 5), pack_argb(50, 10, 10)])


def test_average_color_is_population_weighted():
    box = make_box([pack_argb(100, 0, 0)] * 3 + [pack_argb(200, 0, 0)])
    swatch = box.average_color()

    assert swatch.red == pytest.approx(125.0)
    assert swatch.green == 0
    assert swatch.population == 4


def test_average_of_box_without_population_is_black_sentinel():
    colors = np.array([pack_argb(10, 200, 10)], dtype=np.uint32)
    box = ColorBox(colors, {}, 0, 1)
    assert box.average_color() == Swatch(0, 0, 0, 0)


# =============================================================================
# Quantizer
# =============================================================================

def test_fast_path_returns_every_surviving_color():
    pixels = [pack_argb(200, 30, 30)] * 5 + [pack_argb(30, 30, 200)] * 3 + [0xFF000000] * 9
    histogram = build_histogram(pixels)

    swatches = ColorCutQuantizer(histogram, 16).quantized_colors

    assert sorted((s.to_int(), s.population) for s in swatches) == [
        (pack_argb(30, 30, 200), 3),
        (pack_argb(200, 30, 30), 5),
    ]


def test_two_clusters_quantize_into_two_swatches():
    pixels = ([pack_argb(200 + i, 20, 20) for i in range(5)] +
              [pack_argb(20, 20, 200 + i) for i in range(5)])

    swatches = quantize(pixels, 2)

    assert len(swatches) == 2
    assert sum(s.population for s in swatches) == 10
    assert sorted(s.population for s in swatches) == [4, 6]


def test_largest_box_is_split_first():
    # First cut gives blues 30..140 (volume 111) and 200..250 (volume 51).
    # Only the larger box can split again; the smaller one would fail and
    # end quantization with a single box.
    counts = {30: 2, 100: 2, 130: 1, 140: 1, 200: 3, 250: 1}
    pixels = [pack_argb(0, 0, b) for b, n in counts.items() for _ in range(n)]

    swatches = quantize(pixels, 3)

    # Emitted by volume: 30..100 (71), 200..250 (51), 130..140 (11)
    assert [s.population for s in swatches] == [4, 4, 2]
    assert [s.blue for s in swatches] == pytest.approx([65.0, 212.5, 135.0])


def test_failed_split_drops_the_box():
    # The only box can't be split, so nothing is left to average
    pixels = [pack_argb(50, 0, 0), pack_argb(100, 0, 0), pack_argb(200, 0, 0)]
    assert quantize(pixels, 2) == []


@pytest.mark.parametrize("seed, max_colors", [(1, 4), (2, 16), (9, 32)])
def test_random_image_respects_limits_and_filter(seed, max_colors):
    swatches = quantize(random_pixels(seed), max_colors)

    assert 0 < len(swatches) <= max_colors
    for swatch in swatches:
        assert not should_ignore_color(swatch)
        assert swatch.population > 0


def test_empty_input_gives_no_swatches():
    assert quantize([], 16) == []


def test_max_colors_must_be_positive():
    with pytest.raises(ValueError):
        quantize([0xFF3366CC], 0)
