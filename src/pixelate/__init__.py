"""pixelate: block pixelation with hue-aware averaging and k-means posterization.

Example:
    from pixelate import pixelate
    from pixelate.io import read_image, write_image

    image = read_image("lenna.png")
    write_image(pixelate(image, 16, reduce_colors=True, rng=0), "lenna_poster.png")

For debug logging, enable with:

    import logging
    logging.basicConfig(level=logging.DEBUG)
"""

import logging

__version__ = "0.1.0"

# Silent unless the application configures logging
logging.getLogger("pixelate").addHandler(logging.NullHandler())

from pixelate.core.data_types import (  # noqa: E402
    ClusteringError,
    ColorSpace,
    NotDivisibleError,
    OutOfRangeHueError,
    PixelateConfig,
    PixelateError,
    PixelBuffer,
)
from pixelate.pipeline import PALETTE_SIZE, pixelate, reduce_palette  # noqa: E402

__all__ = [
    "ColorSpace",
    "PixelBuffer",
    "PixelateConfig",
    "PixelateError",
    "NotDivisibleError",
    "OutOfRangeHueError",
    "ClusteringError",
    "PALETTE_SIZE",
    "pixelate",
    "reduce_palette",
]
