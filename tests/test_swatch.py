"""Tests for Swatch."""

import pytest

from color_math import calculate_contrast
from swatch import MIN_CONTRAST_BODY_TEXT, MIN_CONTRAST_TITLE_TEXT, Swatch


def test_from_color_keeps_channels_and_population():
    swatch = Swatch.from_color(0xFF3366CC, population=42)
    assert swatch.rgb == (0x33, 0x66, 0xCC)
    assert swatch.population == 42
    assert swatch.hex == "#3366cc"
    assert swatch.to_int() == 0xFF3366CC


def test_equality_uses_tolerance_and_population():
    a = Swatch(10.0, 20.0, 30.0, 5)
    assert a == Swatch(10.0004, 20.0, 29.9996, 5)
    assert a != Swatch(10.01, 20.0, 30.0, 5)
    assert a != Swatch(10.0, 20.0, 30.0, 6)
    assert hash(a) == hash(Swatch(10.0004, 20.0, 30.0, 5))


def test_swatch_is_immutable():
    swatch = Swatch(1.0, 2.0, 3.0, 4)
    with pytest.raises(AttributeError):
        swatch.population = 10


def test_hsl_is_computed_once():
    swatch = Swatch(255.0, 0.0, 0.0, 1)
    first = swatch.hsl
    assert first == pytest.approx((0.0, 1.0, 0.5))
    assert swatch.hsl is first


def test_from_hsl_keeps_exact_hsl():
    swatch = Swatch.from_hsl((210.0, 0.6, 0.26), population=0)
    # Cached before first access, and the swatch stays frozen
    assert swatch.__dict__['hsl'] == (210.0, 0.6, 0.26)
    with pytest.raises(AttributeError):
        swatch.hsl = (0.0, 0.0, 0.0)
    assert swatch.hsl == (210.0, 0.6, 0.26)
    assert swatch.population == 0
    # The RGB channels match the requested color
    assert swatch.rgb == pytest.approx((26.52, 66.3, 106.08), abs=0.01)


def test_hsv():
    h, s, v = Swatch(0.0, 0.0, 255.0).hsv
    assert (h, s, v) == pytest.approx((240.0, 1.0, 1.0))


@pytest.mark.parametrize("rgb", [(20.0, 30.0, 90.0), (240.0, 230.0, 120.0), (128.0, 128.0, 128.0)])
def test_text_colors_meet_contrast(rgb):
    swatch = Swatch(*rgb, population=1)
    assert calculate_contrast(swatch.title_text_color, swatch.rgba) >= MIN_CONTRAST_TITLE_TEXT
    assert calculate_contrast(swatch.body_text_color, swatch.rgba) >= MIN_CONTRAST_BODY_TEXT
