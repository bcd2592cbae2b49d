#!/usr/bin/env python3
"""
Load images as packed ARGB pixels and draw palettes back out as swatch images.
"""

import numpy as np
from PIL import Image

from color_math import pack_rgba_array


# Images are shrunk so their smallest side is at most this many pixels
CALCULATE_BITMAP_MIN_DIMENSION = 100

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side


def load_image(image_path: str) -> Image.Image:
    """
    Open and validate an image.

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If file is not a valid image or exceeds size limits
    """
    try:
        img = Image.open(image_path)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {image_path}")
    except Exception as e:
        raise ValueError(f"Could not open image: {e}")

    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise ValueError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ValueError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    return img


def scale_image_down(img: Image.Image,
                     min_dimension: int = CALCULATE_BITMAP_MIN_DIMENSION) -> Image.Image:
    """
    Shrink an image so its smallest side is `min_dimension` pixels.

    Images already that small are returned unchanged.
    """
    width, height = img.size
    smallest = min(width, height)
    if smallest <= min_dimension:
        return img

    ratio = smallest / min_dimension
    new_size = (max(1, round(width / ratio)), max(1, round(height / ratio)))
    return img.resize(new_size, Image.LANCZOS)


def pixels_from_image(img: Image.Image) -> np.ndarray:
    """Flatten an image into packed ARGB uint32 values in scan order."""
    rgba = np.array(img.convert('RGBA'), dtype=np.uint8).reshape(-1, 4)
    return pack_rgba_array(rgba)


def visualize_palette(palette, output_path: str) -> None:
    """
    Draw the named swatches on the first row and every quantized swatch below.

    Each cell shows the swatch hex code in its title text color.
    """
    from PIL import ImageDraw

    swatch_size = 80
    padding = 10
    text_height = 25

    named = palette.named_swatches()
    swatches = sorted(palette.swatches, key=lambda s: s.population, reverse=True)

    cols = max(len(named), 1)
    rows = 1 + (len(swatches) + cols - 1) // cols

    img_width = cols * (swatch_size + padding) + padding
    img_height = rows * (swatch_size + text_height + padding) + padding

    img = Image.new('RGB', (img_width, img_height), (240, 240, 240))
    draw = ImageDraw.Draw(img)

    def draw_cell(i, swatch, label):
        row = i // cols
        col = i % cols
        x = padding + col * (swatch_size + padding)
        y = padding + row * (swatch_size + text_height + padding)

        if swatch is None:
            draw.rectangle([x, y, x + swatch_size, y + swatch_size], outline=(180, 180, 180))
        else:
            fill = tuple(int(round(c)) for c in swatch.rgb)
            draw.rectangle([x, y, x + swatch_size, y + swatch_size], fill=fill)

            # Blend the translucent text color over the swatch
            r, g, b, a = swatch.title_text_color
            text_fill = tuple(int(round((t * a + c / 255 * (1 - a)) * 255))
                              for t, c in zip((r, g, b), swatch.rgb))
            draw.text((x + 4, y + 4), swatch.hex, fill=text_fill)

        draw.text((x, y + swatch_size + 4), label, fill=(0, 0, 0))

    for i, (name, swatch) in enumerate(named.items()):
        draw_cell(i, swatch, name.replace('_', ' '))

    total = sum(s.population for s in swatches) or 1
    for i, swatch in enumerate(swatches):
        draw_cell(cols + i, swatch, f"{swatch.population / total * 100:.1f}%")

    img.save(output_path)
