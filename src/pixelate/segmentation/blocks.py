"""
Fixed-size block downsampling.

Partitions an HSV image into non-overlapping factor x factor blocks and
fills each block with its circular-mean color. This is the pixelation
effect itself.
"""

from __future__ import annotations

import logging

import numpy as np

from pixelate.color.embedding import embed, recover
from pixelate.core.data_types import ColorSpace, NotDivisibleError, PixelBuffer

logger = logging.getLogger(__name__)


def _check_factor(width: int, height: int, factor: int) -> None:
    if factor < 1:
        raise ValueError(f"factor must be >= 1, got {factor}")
    if width % factor != 0 or height % factor != 0:
        raise NotDivisibleError(width, height, factor)


def block_grid(width: int, height: int, factor: int) -> list[tuple[int, int]]:
    """
    List block origins in scan order.

    Args:
        width: Image width
        height: Image height
        factor: Block edge length

    Returns:
        (i0, j0) of each block's first pixel, i-major like the buffer layout
    """
    _check_factor(width, height, factor)
    return [
        (i0, j0)
        for i0 in range(0, width, factor)
        for j0 in range(0, height, factor)
    ]


def downsample(buffer: PixelBuffer, factor: int) -> PixelBuffer:
    """
    Replace every factor x factor block with its mean color.

    Hue is averaged on the circle. Saturation and value are averaged
    arithmetically. A uniform block comes back unchanged.

    Args:
        buffer: HSV image
        factor: Block edge length; must divide both width and height

    Returns:
        New HSV buffer of the same dimensions

    Raises:
        NotDivisibleError: If width or height is not a multiple of factor
    """
    if buffer.colorspace != ColorSpace.HSV:
        raise ValueError(f"downsample expects an HSV buffer, got {buffer.colorspace.value}")

    width, height = buffer.size
    _check_factor(width, height, factor)

    blocks_w = width // factor
    blocks_h = height // factor
    logger.debug(f"Averaging {blocks_w}x{blocks_h} blocks of {factor} px")

    vectors = embed(buffer.to_grid())
    means = vectors.reshape(blocks_w, factor, blocks_h, factor, 4).mean(axis=(1, 3))
    colors = recover(means)

    # Upscale back to full size via repeat
    full = np.repeat(np.repeat(colors, factor, axis=0), factor, axis=1)

    result = PixelBuffer.from_grid(full, colorspace=ColorSpace.HSV)
    result.metadata = {**buffer.metadata, "block_factor": factor}
    return result
