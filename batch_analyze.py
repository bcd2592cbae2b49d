#!/usr/bin/env python3
"""Batch extract palettes and write HTML reports."""

import argparse
import concurrent.futures as cf
import sys
import time
from pathlib import Path

from analyze import run_pipeline, render_html
from palette import DEFAULT_NUM_COLORS


def find_images(directory: Path) -> list[Path]:
    """Find all image files in directory."""
    extensions = {'.jpg', '.jpeg', '.png', '.webp'}
    images = set()
    for ext in extensions:
        images.update(directory.glob(f'*{ext}'))
        images.update(directory.glob(f'*{ext.upper()}'))
    return sorted(images)


def process_image(image_path: Path, output_dir: Path, num_colors: int,
                  downscale: bool) -> tuple[Path, int, float]:
    """Extract one palette and write its report.

    Returns:
        (output_file, swatch_count, elapsed_seconds)
    """
    start = time.perf_counter()
    result = run_pipeline(str(image_path), num_colors, downscale=downscale)
    html = render_html(result, str(image_path))

    output_file = output_dir / f"{image_path.stem}-palette.html"
    output_file.write_text(html)

    return output_file, len(result.palette.swatches), time.perf_counter() - start


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Batch extract palettes and generate HTML reports.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Directory containing images to analyze'
    )
    parser.add_argument(
        '--output', '-o',
        required=True,
        help='Directory for HTML output files'
    )
    parser.add_argument(
        '--colors', '-c',
        type=int,
        default=DEFAULT_NUM_COLORS,
        help=f'Maximum number of quantized colors (default: {DEFAULT_NUM_COLORS})'
    )
    parser.add_argument(
        '--no-downscale',
        action='store_true',
        help='Process at full resolution instead of downscaling to 100px'
    )
    parser.add_argument(
        '--jobs', '-j',
        type=int,
        default=1,
        help='Worker processes (default: 1)'
    )

    args = parser.parse_args(argv)

    input_dir = Path(args.input)
    output_dir = Path(args.output)

    if not input_dir.is_dir():
        print(f"Error: Input directory not found: {input_dir}", file=sys.stderr)
        sys.exit(2)

    output_dir.mkdir(parents=True, exist_ok=True)

    images = find_images(input_dir)
    if not images:
        print(f"No images found in {input_dir}", file=sys.stderr)
        sys.exit(2)

    total = len(images)
    succeeded = 0
    failed = []
    downscale = not args.no_downscale

    batch_start = time.perf_counter()

    def report(i, image_path, outcome):
        nonlocal succeeded
        try:
            output_file, swatch_count, elapsed = outcome()
            print(f"[{i}/{total}] {image_path.name} → {swatch_count} swatches ({elapsed:.2f}s)")
            succeeded += 1
        except Exception as e:
            error_msg = f"{type(e).__name__}: {e}"
            print(f"[{i}/{total}] {image_path.name} → ERROR: {error_msg}", file=sys.stderr)
            failed.append((image_path.name, error_msg))

    if args.jobs <= 1 or total == 1:
        for i, image_path in enumerate(images, 1):
            report(i, image_path,
                   lambda: process_image(image_path, output_dir, args.colors, downscale))
    else:
        with cf.ProcessPoolExecutor(max_workers=args.jobs) as ex:
            futures = {
                ex.submit(process_image, image_path, output_dir, args.colors, downscale): image_path
                for image_path in images
            }
            for i, future in enumerate(cf.as_completed(futures), 1):
                report(i, futures[future], future.result)

    batch_elapsed = time.perf_counter() - batch_start

    # Summary
    print()
    print(f"Completed: {succeeded}/{total} succeeded in {batch_elapsed:.2f}s")
    if succeeded > 0:
        print(f"Average: {batch_elapsed / succeeded:.2f}s per image")
    if failed:
        print(f"Failed ({len(failed)}):")
        for name, error in failed:
            print(f"  - {name}: {error}")
        sys.exit(1)


if __name__ == '__main__':
    main()
