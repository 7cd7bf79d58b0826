"""Color model and circular hue embedding."""

from pixelate.color.conversions import (
    convert_buffer,
    hsv_to_rgb,
    rgb_to_hsv,
    to_hsv,
    to_rgb,
)
from pixelate.color.embedding import (
    circular_mean,
    embed,
    embed_color,
    recover,
    recover_color,
)

__all__ = [
    "rgb_to_hsv",
    "hsv_to_rgb",
    "to_hsv",
    "to_rgb",
    "convert_buffer",
    "embed",
    "recover",
    "circular_mean",
    "embed_color",
    "recover_color",
]
