#!/usr/bin/env python3
"""
Palette extraction pipeline.

Extracts a theme palette from an image and renders it as prose, HTML or JSON.
Four stages: Data Preparation → Quantization → Selection → Render
"""

import json
from dataclasses import dataclass

from color_cut_quantizer import ColorCutQuantizer
from color_histogram import ColorHistogram, build_histogram
from extract_colors import load_image, scale_image_down, pixels_from_image
from palette import DEFAULT_NUM_COLORS, Palette, select_palette
from swatch import Swatch


# =============================================================================
# Pipeline
# =============================================================================

@dataclass
class PipelineResult:
    """Everything the renderers need about one image."""
    palette: Palette
    histogram: ColorHistogram
    total_pixels: int
    image_size: tuple  # (width, height) after downscaling
    num_colors: int


def run_pipeline(image_path: str, num_colors: int = DEFAULT_NUM_COLORS,
                 downscale: bool = True) -> PipelineResult:
    """Run stages 1-3 on one image.

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If the image can't be read or num_colors is below 1
    """
    # Stage 1: Data Preparation
    img = load_image(image_path)
    if downscale:
        img = scale_image_down(img)
    pixels = pixels_from_image(img)

    # Stage 2: Quantization
    histogram = build_histogram(pixels)
    swatches = ColorCutQuantizer(histogram, num_colors).quantized_colors

    # Stage 3: Selection
    palette = select_palette(swatches)

    return PipelineResult(
        palette=palette,
        histogram=histogram,
        total_pixels=int(pixels.size),
        image_size=img.size,
        num_colors=num_colors,
    )


# =============================================================================
# Render
# =============================================================================

def css_rgba(color: tuple) -> str:
    r, g, b, a = color
    return f"rgba({round(r * 255)}, {round(g * 255)}, {round(b * 255)}, {a:.2f})"


def describe_swatch(swatch: Swatch) -> str:
    hue, saturation, lightness = swatch.hsl
    return (f"Hex: {swatch.hex} | HSL: ({hue:.0f}, {saturation:.2f}, {lightness:.2f}) | "
            f"Population: {swatch.population}")


def render(result: PipelineResult) -> str:
    """Stage 4: Render the palette as prose."""
    palette = result.palette
    lines = []

    width, height = result.image_size
    lines.append(f"IMAGE: {width}x{height} ({result.total_pixels:,} pixels)")
    lines.append(f"Distinct colors: {len(result.histogram):,} | "
                 f"Swatches: {len(palette.swatches)} of {result.num_colors} requested")
    lines.append("")

    lines.append("TARGETS:")
    lines.append("")
    for name, swatch in palette.named_swatches().items():
        label = name.replace('_', ' ').title()
        if swatch is None:
            lines.append(f"[{label}] none")
        else:
            note = " (generated)" if swatch.population == 0 else ""
            lines.append(f"[{label}]{note}")
            lines.append(f"  {describe_swatch(swatch)}")
    lines.append("")

    lines.append("SWATCHES:")
    lines.append("")
    total = sum(s.population for s in palette.swatches) or 1
    for swatch in sorted(palette.swatches, key=lambda s: s.population, reverse=True):
        lines.append(f"  {swatch.hex}  {swatch.population / total * 100:5.1f}%  {describe_swatch(swatch)}")

    return "\n".join(lines)


def render_json(result: PipelineResult) -> str:
    """Stage 4b: Render the palette as JSON."""
    def to_dict(swatch):
        if swatch is None:
            return None
        return {
            'hex': swatch.hex,
            'rgb': [round(c, 3) for c in swatch.rgb],
            'hsl': [round(c, 4) for c in swatch.hsl],
            'population': swatch.population,
            'title_text_color': css_rgba(swatch.title_text_color),
            'body_text_color': css_rgba(swatch.body_text_color),
        }

    data = {
        'image_size': list(result.image_size),
        'total_pixels': result.total_pixels,
        'distinct_colors': len(result.histogram),
        'targets': {name: to_dict(s) for name, s in result.palette.named_swatches().items()},
        'swatches': [to_dict(s) for s in result.palette.swatches],
    }
    return json.dumps(data, indent=2)


def render_html(result: PipelineResult, image_path: str) -> str:
    """Stage 4c: Render the palette as HTML."""
    from html import escape

    safe_path = escape(image_path)
    palette = result.palette

    css = """
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: system-ui, -apple-system, sans-serif;
            background: #f5f5f5;
            color: #333;
            line-height: 1.5;
            padding: 2rem;
            max-width: 900px;
            margin: 0 auto;
        }
        h1 { font-size: 1.5rem; margin-bottom: 0.5rem; }
        h2 { font-size: 1.2rem; margin: 2rem 0 1rem; border-bottom: 1px solid #ddd; padding-bottom: 0.5rem; }
        .meta { color: #666; font-size: 0.9rem; margin-bottom: 1rem; }
        .palette-strip {
            display: flex;
            height: 80px;
            border-radius: 8px;
            overflow: hidden;
            box-shadow: 0 2px 8px rgba(0,0,0,0.1);
            margin: 1.5rem 0;
        }
        .palette-strip .swatch {
            display: flex;
            align-items: flex-end;
            justify-content: center;
            padding: 0.5rem;
            font-size: 0.7rem;
            font-weight: 500;
        }
        .target-card {
            background: #fff;
            border-radius: 8px;
            margin-bottom: 1rem;
            box-shadow: 0 1px 3px rgba(0,0,0,0.08);
            overflow: hidden;
        }
        .target-card .sample { padding: 1rem; }
        .target-card .title { font-weight: 600; font-size: 1.1rem; }
        .target-card .body { font-size: 0.85rem; }
        .target-card .values { font-family: monospace; color: #555; font-size: 0.8rem; padding: 0.5rem 1rem; }
        .missing { color: #999; font-style: italic; }
    """

    lines = [
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '  <meta charset="UTF-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f'  <title>Palette: {safe_path}</title>',
        f'  <style>{css}</style>',
        '</head>',
        '<body>',
    ]

    width, height = result.image_size
    lines.append('<h1>Palette</h1>')
    lines.append(f'<p class="meta">Source: {safe_path}</p>')
    lines.append(f'<p class="meta">{width}x{height} | {len(result.histogram):,} distinct colors | '
                 f'{len(palette.swatches)} swatches</p>')

    # Palette strip, widths proportional to population
    swatches = sorted(palette.swatches, key=lambda s: s.population, reverse=True)
    total = sum(s.population for s in swatches) or 1
    lines.append('<div class="palette-strip">')
    for swatch in swatches:
        width_pct = max(5, swatch.population / total * 100)  # min 5% for visibility
        lines.append(f'  <div class="swatch" style="background:{swatch.hex}; '
                     f'color:{css_rgba(swatch.body_text_color)}; flex:{width_pct:.1f}">{swatch.hex}</div>')
    lines.append('</div>')

    lines.append('<h2>Targets</h2>')
    for name, swatch in palette.named_swatches().items():
        label = name.replace('_', ' ').title()
        lines.append('<div class="target-card">')
        if swatch is None:
            lines.append(f'  <div class="sample missing">{label}: no matching swatch</div>')
        else:
            hue, saturation, lightness = swatch.hsl
            lines.append(f'  <div class="sample" style="background:{swatch.hex}">')
            lines.append(f'    <div class="title" style="color:{css_rgba(swatch.title_text_color)}">{label}</div>')
            lines.append(f'    <div class="body" style="color:{css_rgba(swatch.body_text_color)}">'
                         f'Body text over {swatch.hex}</div>')
            lines.append('  </div>')
            lines.append(f'  <div class="values">{swatch.hex} · HSL({hue:.0f}, {saturation:.2f}, {lightness:.2f}) · '
                         f'population {swatch.population}</div>')
        lines.append('</div>')

    lines.append('</body>')
    lines.append('</html>')

    return '\n'.join(lines)


# =============================================================================
# CLI
# =============================================================================

def main(argv=None):
    import argparse
    import sys
    from pathlib import Path

    from extract_colors import visualize_palette

    parser = argparse.ArgumentParser(
        description='Extract a theme palette from an image.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    parser.add_argument(
        '--colors', '-c',
        type=int,
        default=DEFAULT_NUM_COLORS,
        help=f'Maximum number of quantized colors (default: {DEFAULT_NUM_COLORS})'
    )
    parser.add_argument(
        '--output', '-o',
        nargs='?',
        const=True,
        default=None,
        help='Write HTML report. Optionally specify path, otherwise auto-names from input.'
    )
    parser.add_argument(
        '--swatches',
        default=None,
        help='Write a PNG swatch sheet to this path'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print JSON instead of prose'
    )
    parser.add_argument(
        '--no-downscale',
        action='store_true',
        help='Process at full resolution instead of downscaling to 100px'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Print quantizer statistics'
    )

    args = parser.parse_args(argv)
    image_path = Path(args.input)

    try:
        result = run_pipeline(str(image_path), args.colors, downscale=not args.no_downscale)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error analyzing image: {e}", file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        print(f"Pixels: {result.total_pixels:,} | Distinct colors: {len(result.histogram):,} | "
              f"Swatches: {len(result.palette.swatches)}/{result.num_colors} | "
              f"Highest population: {result.palette.highest_population:,}")

    print(render_json(result) if args.json else render(result))

    if args.output:
        if args.output is True:
            output_path = image_path.with_name(f"{image_path.stem}-palette.html")
        else:
            output_path = Path(args.output)

        try:
            output_path.write_text(render_html(result, str(image_path)))
            print(f"\nWrote: {output_path}")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            sys.exit(1)

    if args.swatches:
        try:
            visualize_palette(result.palette, args.swatches)
            print(f"Wrote: {args.swatches}")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            sys.exit(1)


if __name__ == '__main__':
    main()
