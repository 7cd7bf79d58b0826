"""Command-line interface for pixelate."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from pixelate.core.data_types import PixelateConfig, PixelateError
from pixelate.pipeline import PALETTE_SIZE, run


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="pixelate",
        description="Pixelate an image, optionally posterizing its palette",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pixelate lenna.png
  pixelate lenna.png -o lenna_blocks.png --factor 8
  pixelate lenna.png -o lenna_poster.png --reduce-colors --seed 7
        """,
    )

    parser.add_argument("input", help="Input image file path")

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output image path (default: <input>_pixelated.png beside the input)",
    )

    parser.add_argument(
        "-f",
        "--factor",
        type=int,
        default=16,
        help="Block edge length in pixels; must divide width and height (default: 16)",
    )

    parser.add_argument(
        "--reduce-colors",
        action="store_true",
        help=f"Posterize to {PALETTE_SIZE} colors after pixelating",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for palette clustering (default: nondeterministic)",
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress to stderr"
    )

    return parser


def default_output_path(input_path: Path) -> Path:
    """<stem>_pixelated.png next to the input."""
    return input_path.with_name(f"{input_path.stem}_pixelated.png")


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.INFO if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(parsed.input)
    output_path = Path(parsed.output) if parsed.output else default_output_path(input_path)

    try:
        config = PixelateConfig(
            factor=parsed.factor,
            reduce_colors=parsed.reduce_colors,
            seed=parsed.seed,
        )
        run(config, input_path, output_path)
    except (PixelateError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Output saved: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
