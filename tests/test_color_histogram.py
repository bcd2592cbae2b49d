"""Tests for the color histogram."""

import numpy as np

from color_histogram import build_histogram


def test_empty_input_gives_empty_histogram():
    histogram = build_histogram([])
    assert len(histogram) == 0
    assert histogram.number_of_colors == 0
    assert list(histogram) == []


def test_single_pixel():
    histogram = build_histogram([0xFF336699])
    assert list(histogram) == [(0xFF336699, 1)]


def test_counts_sum_to_pixel_count_and_colors_ascend():
    rng = np.random.default_rng(7)
    palette = np.array([0xFF000000 | int(c) for c in rng.integers(0, 1 << 24, size=40)], dtype=np.uint32)
    pixels = rng.choice(palette, size=2000)

    histogram = build_histogram(pixels)

    assert int(histogram.counts.sum()) == len(pixels)
    assert np.all(np.diff(histogram.colors.astype(np.int64)) > 0)
    assert set(histogram.colors.tolist()) == set(pixels.tolist())
    assert np.all(histogram.counts > 0)


def test_independent_of_scan_order():
    pixels = [0xFF0000FF, 0xFF00FF00, 0xFF0000FF, 0xFFFF0000, 0xFF00FF00, 0xFF0000FF]
    forward = build_histogram(pixels)
    backward = build_histogram(list(reversed(pixels)))

    assert list(forward) == list(backward)
    assert list(forward) == [(0xFF0000FF, 3), (0xFF00FF00, 2), (0xFFFF0000, 1)]


def test_population_map():
    histogram = build_histogram([0xFF111111, 0xFF111111, 0xFF222222])
    assert histogram.as_population_map() == {0xFF111111: 2, 0xFF222222: 1}
