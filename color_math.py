"""
Color math shared by quantization filtering and text color selection.

Channels are floats in 0-1 unless noted otherwise. Packed colors are 32-bit
ARGB integers: alpha << 24 | red << 16 | green << 8 | blue.
"""

import numpy as np


# =============================================================================
# Constants
# =============================================================================

MIN_ALPHA_SEARCH_MAX_ITERATIONS = 10
MIN_ALPHA_SEARCH_PRECISION = 10 / 255  # 10 steps on the 0-255 alpha scale

WHITE = (1.0, 1.0, 1.0, 1.0)
BLACK = (0.0, 0.0, 0.0, 1.0)


# =============================================================================
# Packed Colors
# =============================================================================

def alpha(color: int) -> int:
    return (int(color) >> 24) & 0xFF


def red(color: int) -> int:
    return (int(color) >> 16) & 0xFF


def green(color: int) -> int:
    return (int(color) >> 8) & 0xFF


def blue(color: int) -> int:
    return int(color) & 0xFF


def pack_argb(r: int, g: int, b: int, a: int = 255) -> int:
    """Pack 0-255 channels into an ARGB integer."""
    return ((a & 0xFF) << 24) | ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def pack_rgba_array(rgba: np.ndarray) -> np.ndarray:
    """Pack an (n, 4) uint8 RGBA array into ARGB uint32 values."""
    rgba = rgba.astype(np.uint32)
    return (rgba[:, 3] << 24) | (rgba[:, 0] << 16) | (rgba[:, 1] << 8) | rgba[:, 2]


def unpack_rgba(color: int) -> tuple:
    """Unpack an ARGB integer into an RGBA tuple of 0-1 floats."""
    return (red(color) / 255, green(color) / 255, blue(color) / 255, alpha(color) / 255)


def to_hex(r: float, g: float, b: float) -> str:
    """Format 0-255 channels as #rrggbb."""
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


# =============================================================================
# HSL
# =============================================================================

def rgb_to_hsl(r: float, g: float, b: float) -> tuple[float, float, float]:
    """
    Convert RGB to HSL.

    Returns:
        (hue, saturation, lightness) with hue in [0, 360) and the rest in [0, 1].
        Monochromatic input has hue and saturation 0.
    """
    maximum = max(r, g, b)
    minimum = min(r, g, b)
    delta = maximum - minimum

    lightness = (maximum + minimum) / 2

    if maximum == minimum:
        return 0.0, 0.0, lightness

    if maximum == r:
        hue = ((g - b) / delta) % 6
    elif maximum == g:
        hue = ((b - r) / delta) + 2
    else:
        hue = ((r - g) / delta) + 4

    saturation = delta / (1 - abs(2 * lightness - 1))

    return (hue * 60) % 360, saturation, lightness


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[float, float, float]:
    """Convert HSL (hue in degrees) back to RGB, clamped to [0, 1]."""
    h = h % 360
    c = (1 - abs(2 * l - 1)) * s
    m = l - 0.5 * c
    x = c * (1 - abs((h / 60) % 2 - 1))

    segment = int(h // 60)
    if segment == 0:
        r, g, b = c, x, 0.0
    elif segment == 1:
        r, g, b = x, c, 0.0
    elif segment == 2:
        r, g, b = 0.0, c, x
    elif segment == 3:
        r, g, b = 0.0, x, c
    elif segment == 4:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    return (
        min(1.0, max(0.0, r + m)),
        min(1.0, max(0.0, g + m)),
        min(1.0, max(0.0, b + m)),
    )


# =============================================================================
# Luminance & Contrast
# =============================================================================

def calculate_luminance(color: tuple) -> float:
    """
    Relative luminance of an RGB(A) color, alpha ignored.

    Formula: https://www.w3.org/TR/WCAG20/#relativeluminancedef
    """
    def expand(c):
        return c / 12.92 if c < 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = color[:3]
    return 0.2126 * expand(r) + 0.7152 * expand(g) + 0.0722 * expand(b)


def modify_alpha(color: tuple, new_alpha: float) -> tuple:
    return (color[0], color[1], color[2], new_alpha)


def composite_colors(fg: tuple, bg: tuple) -> tuple:
    """Composite a possibly translucent RGBA foreground over a background."""
    alpha_fg = fg[3]
    alpha_bg = bg[3]
    a = 1 - (1 - alpha_fg) * (1 - alpha_bg)
    if a == 0:
        return (0.0, 0.0, 0.0, 0.0)

    def channel(f, b):
        return (f * alpha_fg + b * alpha_bg * (1 - alpha_fg)) / a

    return (channel(fg[0], bg[0]), channel(fg[1], bg[1]), channel(fg[2], bg[2]), a)


def calculate_contrast(fg: tuple, bg: tuple):
    """
    WCAG contrast ratio between two RGBA colors.

    A translucent foreground is composited over the background first.

    Returns:
        Ratio in [1, 21], or None when the background is not fully opaque.
    """
    if bg[3] < 1.0:
        return None

    if fg[3] < 1.0:
        fg = composite_colors(fg, bg)

    luminance_fg = calculate_luminance(fg) + 0.05
    luminance_bg = calculate_luminance(bg) + 0.05

    return max(luminance_fg, luminance_bg) / min(luminance_fg, luminance_bg)


def find_minimum_alpha(fg: tuple, bg: tuple, min_contrast_ratio: float):
    """
    Find the lowest alpha for `fg` that keeps `min_contrast_ratio` against `bg`.

    Returns:
        Alpha in [0, 1], or None when `bg` is translucent or even an opaque
        foreground does not reach the ratio.
    """
    if bg[3] < 1.0:
        return None

    ratio = calculate_contrast(modify_alpha(fg, 1.0), bg)
    if ratio is None or ratio < min_contrast_ratio:
        return None

    iterations = 0
    min_alpha = 0.0
    max_alpha = 1.0

    while (iterations < MIN_ALPHA_SEARCH_MAX_ITERATIONS and
           (max_alpha - min_alpha) > MIN_ALPHA_SEARCH_PRECISION):
        test_alpha = (min_alpha + max_alpha) / 2

        ratio = calculate_contrast(modify_alpha(fg, test_alpha), bg)
        if ratio < min_contrast_ratio:
            min_alpha = test_alpha
        else:
            max_alpha = test_alpha

        iterations += 1

    # The upper bound is the one known to pass
    return max_alpha


def text_color_for_background(bg: tuple, min_contrast_ratio: float) -> tuple:
    """
    Pick a translucent white or black RGBA text color readable on `bg`.

    White is tried first since most swatch colors are dark.
    """
    white_alpha = find_minimum_alpha(WHITE, bg, min_contrast_ratio)
    if white_alpha is not None:
        return modify_alpha(WHITE, white_alpha)

    black_alpha = find_minimum_alpha(BLACK, bg, min_contrast_ratio)
    if black_alpha is not None:
        return modify_alpha(BLACK, black_alpha)

    return WHITE
