"""
Pixelation pipeline.

RGB image -> HSV -> block downsample -> (optional) k-means palette
reduction -> RGB image. Each stage returns a new buffer.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pixelate.color.conversions import convert_buffer
from pixelate.color.embedding import embed, recover
from pixelate.core.data_types import ColorSpace, PixelateConfig, PixelBuffer
from pixelate.io import read_image, write_image
from pixelate.quantization.kmeans import (
    MAX_ROUNDS,
    TOLERANCE,
    RandomSource,
    posterize,
)
from pixelate.segmentation.blocks import downsample

logger = logging.getLogger(__name__)

PALETTE_SIZE = 8


def reduce_palette(
    buffer: PixelBuffer,
    n_colors: int = PALETTE_SIZE,
    rng: RandomSource = None,
    max_rounds: int = MAX_ROUNDS,
    tolerance: float = TOLERANCE,
) -> PixelBuffer:
    """
    Posterize an HSV image to at most n_colors distinct colors.

    Args:
        buffer: HSV image with at least n_colors pixels
        n_colors: Palette size (number of clusters)
        rng: Generator, integer seed, or None
        max_rounds: Clustering round limit
        tolerance: Clustering convergence threshold

    Returns:
        New HSV buffer of the same dimensions
    """
    if buffer.colorspace != ColorSpace.HSV:
        raise ValueError(f"reduce_palette expects an HSV buffer, got {buffer.colorspace.value}")

    logger.info(f"Reducing {buffer.width}x{buffer.height} image to {n_colors} colors")
    vectors = posterize(
        embed(buffer.data),
        n_colors,
        rng=rng,
        max_rounds=max_rounds,
        tolerance=tolerance,
    )
    return PixelBuffer(
        data=recover(vectors),
        width=buffer.width,
        height=buffer.height,
        colorspace=ColorSpace.HSV,
        metadata={**buffer.metadata, "palette_size": n_colors},
    )


def pixelate(
    image: PixelBuffer,
    factor: int,
    reduce_colors: bool = False,
    rng: RandomSource = None,
    n_colors: int = PALETTE_SIZE,
    max_rounds: int = MAX_ROUNDS,
    tolerance: float = TOLERANCE,
) -> PixelBuffer:
    """
    Apply the pixelation effect to an RGB image.

    Args:
        image: RGB image
        factor: Block edge length; must divide width and height
        reduce_colors: Also posterize the palette after downsampling
        rng: Generator or seed for centroid initialization
        n_colors: Palette size used when reduce_colors is set
        max_rounds: Clustering round limit
        tolerance: Clustering convergence threshold

    Returns:
        New RGB buffer of the same dimensions

    Raises:
        NotDivisibleError: If the image size is not a multiple of factor
        OutOfRangeHueError: If an invalid hue reaches the RGB conversion
    """
    if image.colorspace != ColorSpace.RGB:
        raise ValueError(f"pixelate expects an RGB buffer, got {image.colorspace.value}")

    logger.info(f"Pixelating {image.width}x{image.height} image with factor {factor}")
    hsv = convert_buffer(image, ColorSpace.HSV)
    hsv = downsample(hsv, factor)

    if reduce_colors:
        hsv = reduce_palette(
            hsv, n_colors, rng=rng, max_rounds=max_rounds, tolerance=tolerance
        )

    return convert_buffer(hsv, ColorSpace.RGB)


def run(config: PixelateConfig, input_path: str | Path, output_path: str | Path) -> PixelBuffer:
    """
    Decode, pixelate, and encode one image.

    Nothing is written unless every stage succeeds.
    """
    image = read_image(input_path)
    result = pixelate(
        image,
        config.factor,
        reduce_colors=config.reduce_colors,
        rng=config.seed,
        n_colors=config.n_colors,
        max_rounds=config.max_rounds,
        tolerance=config.tolerance,
    )
    write_image(result, output_path)
    logger.info(f"Wrote {output_path}")
    return result
