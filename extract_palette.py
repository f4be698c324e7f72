#!/usr/bin/env python3
"""Extract the dominant colors of an image and print them."""

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from PIL import Image, ImageDraw

from color_difference import DeltaFormula
from color_frequency import ColorFrequency, Option, Sort
from contrast_palette import ContrastPalette
from dominant_colors import (
    DEFAULT_DELTA, DEFAULT_FORMULA, DEFAULT_MAX_COUNT, DEFAULT_SORT, Algorithm, dominant_colors,
)
from image_filter import Quality
from palette_errors import PaletteError


def configure_logging(verbose: bool = False) -> None:
    """Send library logs to stderr, quiet unless verbose."""
    logger.remove()
    logger.add(sys.stderr, level='DEBUG' if verbose else 'WARNING')


def render(colors: list[ColorFrequency], palette: Optional[ContrastPalette] = None,
           with_palette: bool = False) -> str:
    """Plain text report, one color per line."""
    if not colors:
        return "No visible colors."

    lines = []
    for cf in colors:
        lines.append(f"{cf.color.hex}  {cf.frequency * 100:5.1f}%  {cf.shade}")

    if with_palette:
        lines.append("")
        if palette is None:
            lines.append("No contrast palette.")
        else:
            lines.append(f"background  {palette.background.hex}")
            lines.append(f"primary     {palette.primary.hex}")
            secondary = palette.secondary.hex if palette.secondary else '-'
            lines.append(f"secondary   {secondary}")
    return "\n".join(lines)


def save_swatch(colors: list[ColorFrequency], output_path: str) -> None:
    """
    Save a swatch image of the colors with their percentages.

    Args:
        colors: Extracted colors
        output_path: Path to save the output image
    """
    swatch_size = 80
    padding = 10
    text_height = 25
    cols = max(1, min(len(colors), 6))
    rows = max(1, (len(colors) + cols - 1) // cols)

    img_width = cols * (swatch_size + padding) + padding
    img_height = rows * (swatch_size + text_height + padding) + padding

    img = Image.new('RGB', (img_width, img_height), (240, 240, 240))
    draw = ImageDraw.Draw(img)

    for i, cf in enumerate(colors):
        row = i // cols
        col = i % cols

        x = padding + col * (swatch_size + padding)
        y = padding + row * (swatch_size + text_height + padding)

        draw.rectangle([x, y, x + swatch_size, y + swatch_size], fill=cf.color.rgb255)

        # Center text under swatch
        text = f"{cf.frequency * 100:.0f}%"
        bbox = draw.textbbox((0, 0), text)
        text_width = bbox[2] - bbox[0]
        text_x = x + (swatch_size - text_width) // 2
        draw.text((text_x, y + swatch_size + 4), text, fill=(0, 0, 0))

    img.save(output_path)


def add_extraction_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by the single image and batch commands."""
    parser.add_argument(
        '--quality', '-q',
        choices=[q.value for q in Quality],
        default=Quality.FAIR.value,
        help='Preprocessing quality (default: fair)'
    )
    parser.add_argument(
        '--algorithm', '-a',
        choices=[a.value for a in Algorithm],
        default=Algorithm.ITERATIVE.value,
        help='Extraction algorithm (default: iterative)'
    )
    parser.add_argument(
        '--count', '-n',
        type=int,
        default=DEFAULT_MAX_COUNT,
        help=f'Maximum number of colors (default: {DEFAULT_MAX_COUNT})'
    )
    parser.add_argument(
        '--formula', '-f',
        choices=[f.value for f in DeltaFormula],
        default=DEFAULT_FORMULA.value,
        help=f'Color difference formula (default: {DEFAULT_FORMULA.value})'
    )
    parser.add_argument(
        '--delta', '-d',
        type=float,
        default=DEFAULT_DELTA,
        help=f'Initial merge threshold (default: {DEFAULT_DELTA:g})'
    )
    parser.add_argument(
        '--sort', '-s',
        choices=[s.value for s in Sort],
        default=DEFAULT_SORT.value,
        help=f'Result order (default: {DEFAULT_SORT.value})'
    )
    parser.add_argument(
        '--pixel-size', '-p',
        type=int,
        default=None,
        help='Count one pixel per N x N block instead of pixellating by quality'
    )
    parser.add_argument('--exclude-black', action='store_true', help='Drop black colors')
    parser.add_argument('--exclude-white', action='store_true', help='Drop white colors')
    parser.add_argument('--exclude-gray', action='store_true', help='Drop gray colors')
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log extraction steps to stderr'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Extract the dominant colors of an image.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    add_extraction_arguments(parser)
    parser.add_argument(
        '--palette',
        action='store_true',
        help='Also print a background / primary / secondary contrast palette'
    )
    parser.add_argument(
        '--light-background',
        action='store_true',
        help='Allow a light palette background'
    )
    parser.add_argument(
        '--ignore-contrast',
        action='store_true',
        help='Build the palette without checking contrast ratios'
    )
    parser.add_argument(
        '--swatch',
        metavar='PATH',
        help='Write a swatch PNG of the colors'
    )
    return parser


def selected_options(args: argparse.Namespace) -> list[Option]:
    flags = {
        Option.EXCLUDE_BLACK: args.exclude_black,
        Option.EXCLUDE_WHITE: args.exclude_white,
        Option.EXCLUDE_GRAY: args.exclude_gray,
    }
    return [option for option, enabled in flags.items() if enabled]


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        colors = dominant_colors(
            Path(args.input),
            quality=Quality(args.quality),
            algorithm=Algorithm(args.algorithm),
            max_count=args.count,
            formula=DeltaFormula(args.formula),
            delta=args.delta,
            sorting=Sort(args.sort),
            options=selected_options(args),
            pixel_size=args.pixel_size,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PaletteError as e:
        print(f"Error extracting colors: {e}", file=sys.stderr)
        return 1

    palette = None
    if args.palette:
        palette = ContrastPalette.from_ordered_colors(
            [cf.color for cf in colors],
            dark_background=not args.light_background,
            ignore_contrast_ratio=args.ignore_contrast,
        )

    print(render(colors, palette, with_palette=args.palette))

    if args.swatch:
        try:
            save_swatch(colors, args.swatch)
            print(f"\nWrote: {args.swatch}")
        except OSError as e:
            print(f"Error writing swatch: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
