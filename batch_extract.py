#!/usr/bin/env python3
"""Batch extract dominant colors from a directory of images."""

import argparse
import sys
import time
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
from typing import Optional

from color_difference import DeltaFormula
from color_frequency import ColorFrequency, Sort
from dominant_colors import Algorithm, dominant_colors
from extract_palette import add_extraction_arguments, configure_logging, save_swatch, selected_options
from image_filter import Quality


def find_images(directory: Path) -> list[Path]:
    """Find all image files in directory."""
    extensions = {'.jpg', '.jpeg', '.png', '.webp', '.gif', '.bmp'}
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in extensions)


def extract_one(image_path: Path, settings: dict) -> tuple[list[ColorFrequency], float]:
    """Extract one image. Runs inside a worker process."""
    start = time.perf_counter()
    colors = dominant_colors(image_path, **settings)
    return colors, time.perf_counter() - start


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Batch extract dominant colors from a directory of images.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Directory containing images'
    )
    add_extraction_arguments(parser)
    parser.add_argument(
        '--output', '-o',
        help='Directory for swatch PNGs (one per image)'
    )
    parser.add_argument(
        '--workers', '-w',
        type=int,
        default=1,
        help='Number of worker processes (default: 1)'
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    input_dir = Path(args.input)
    if not input_dir.is_dir():
        print(f"Error: Input directory not found: {input_dir}", file=sys.stderr)
        return 2
    if args.workers < 1:
        print(f"Error: --workers must be at least 1, got {args.workers}", file=sys.stderr)
        return 2

    output_dir = Path(args.output) if args.output else None
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)

    images = find_images(input_dir)
    if not images:
        print(f"No images found in {input_dir}", file=sys.stderr)
        return 2

    settings = dict(
        quality=Quality(args.quality),
        algorithm=Algorithm(args.algorithm),
        max_count=args.count,
        formula=DeltaFormula(args.formula),
        delta=args.delta,
        sorting=Sort(args.sort),
        options=selected_options(args),
        pixel_size=args.pixel_size,
    )

    total = len(images)
    succeeded = 0
    failed = []
    batch_start = time.perf_counter()

    with ProcessPoolExecutor(max_workers=args.workers) as executor:
        futures = [executor.submit(extract_one, path, settings) for path in images]
        for i, (image_path, future) in enumerate(zip(images, futures), 1):
            try:
                colors, elapsed = future.result()
                if output_dir is not None:
                    save_swatch(colors, str(output_dir / f"{image_path.stem}-swatch.png"))
            except Exception as e:
                error_msg = f"{type(e).__name__}: {e}"
                print(f"[{i}/{total}] {image_path.name} → ERROR: {error_msg}", file=sys.stderr)
                failed.append((image_path.name, error_msg))
                continue

            summary = ' '.join(f"{cf.color.hex}:{cf.frequency:.2f}" for cf in colors) or '-'
            print(f"[{i}/{total}] {image_path.name} → {summary} ({elapsed:.2f}s)")
            succeeded += 1

    batch_elapsed = time.perf_counter() - batch_start

    # Summary
    print()
    print(f"Completed: {succeeded}/{total} succeeded in {batch_elapsed:.2f}s")
    if failed:
        print(f"Failed ({len(failed)}):")
        for name, error in failed:
            print(f"  - {name}: {error}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
