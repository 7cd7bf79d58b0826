"""
RGB <-> HSV conversion.

Hue is kept in sector units: [0, 6), one unit per 60 degrees.
Array functions operate channel-last, on (..., 3) arrays, so they apply
equally to a single pixel, a PixelBuffer's data, or a (W, H, 3) grid.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pixelate.core.data_types import (
    ColorSpace,
    HsvColor,
    OutOfRangeHueError,
    PixelBuffer,
    RgbColor,
)

HUE_SECTORS = 6.0

# Pre-offset (r, g, b) for each unit hue sector, as indices into (c, x, 0)
_SECTOR_TABLE = np.array(
    [
        [0, 1, 2],  # [0, 1]: (c, x, 0)
        [1, 0, 2],  # (1, 2]: (x, c, 0)
        [2, 0, 1],  # (2, 3]: (0, c, x)
        [2, 1, 0],  # (3, 4]: (0, x, c)
        [1, 2, 0],  # (4, 5]: (x, 0, c)
        [0, 2, 1],  # (5, 6]: (c, 0, x)
    ],
    dtype=np.intp,
)


def rgb_to_hsv(rgb: NDArray[np.uint8]) -> NDArray[np.float32]:
    """Convert 8-bit RGB to HSV with sector hue."""
    rgb = np.asarray(rgb)
    norm = rgb.astype(np.float32) / 255.0
    r, g, b = norm[..., 0], norm[..., 1], norm[..., 2]

    _max = np.maximum(np.maximum(r, g), b)
    _min = np.minimum(np.minimum(r, g), b)
    delta = _max - _min

    # Value
    value = _max

    # Saturation
    saturation = np.where(_max > 0, delta / np.where(_max > 0, _max, 1.0), 0.0)

    # Hue, with red > green > blue priority on ties
    safe_delta = np.where(delta > 0, delta, 1.0)
    r_max = (r >= g) & (r >= b)
    g_max = ~r_max & (g >= b)
    b_max = ~r_max & ~g_max

    hue = np.zeros_like(r)
    hue = np.where(r_max & (g >= b), (g - b) / safe_delta, hue)
    hue = np.where(r_max & (g < b), HUE_SECTORS + (g - b) / safe_delta, hue)
    hue = np.where(g_max, 2.0 + (b - r) / safe_delta, hue)
    hue = np.where(b_max, 4.0 + (r - g) / safe_delta, hue)
    hue = np.where(delta > 0, hue, 0.0)

    return np.stack([hue, saturation, value], axis=-1).astype(np.float32)


def hsv_to_rgb(hsv: NDArray[np.floating]) -> NDArray[np.uint8]:
    """
    Convert HSV with sector hue to 8-bit RGB.

    Channels are truncated, not rounded, when scaled back to [0, 255].

    Raises:
        OutOfRangeHueError: If any hue lies outside [0, 6] (or is NaN)
    """
    hsv = np.asarray(hsv, dtype=np.float64)
    h, s, v = hsv[..., 0], hsv[..., 1], hsv[..., 2]

    valid = (h >= 0.0) & (h <= HUE_SECTORS)
    if not np.all(valid):
        bad = np.asarray(h)[~np.asarray(valid)]
        raise OutOfRangeHueError(float(bad.flat[0]))

    c = s * v
    half = h / 2.0
    x = c * (1.0 - np.abs((half - np.floor(half)) * 2.0 - 1.0))
    m = v - c

    # h == 0 falls into the first sector
    sector = np.clip(np.ceil(h) - 1.0, 0, 5).astype(np.intp)
    cx0 = np.stack([c, x, np.zeros_like(c)], axis=-1)
    rgb = np.take_along_axis(cx0, _SECTOR_TABLE[sector], axis=-1)

    scaled = (rgb + np.expand_dims(m, -1)) * 255.0
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def to_hsv(color: RgbColor | tuple[int, int, int]) -> HsvColor:
    """Convert a single RGB color."""
    h, s, v = rgb_to_hsv(np.array(color, dtype=np.uint8))
    return HsvColor(float(h), float(s), float(v))


def to_rgb(color: HsvColor | tuple[float, float, float]) -> RgbColor:
    """Convert a single HSV color. Raises OutOfRangeHueError like hsv_to_rgb."""
    r, g, b = hsv_to_rgb(np.array(color, dtype=np.float64))
    return RgbColor(int(r), int(g), int(b))


# =============================================================================
# Buffer conversion dispatch
# =============================================================================

# (from, to) -> converter over the flat (N, 3) data
BUFFER_CONVERTERS = {
    (ColorSpace.RGB, ColorSpace.HSV): rgb_to_hsv,
    (ColorSpace.HSV, ColorSpace.RGB): hsv_to_rgb,
}


def convert_buffer(buffer: PixelBuffer, to_space: ColorSpace | str) -> PixelBuffer:
    """
    Convert a PixelBuffer to another colorspace.

    Args:
        buffer: Source buffer
        to_space: Target colorspace name

    Returns:
        New buffer of the same dimensions
    """
    try:
        to_space = ColorSpace(to_space)
    except ValueError:
        raise ValueError(f"Unknown target colorspace: {to_space}") from None

    if buffer.colorspace == to_space:
        return buffer.copy()

    converter = BUFFER_CONVERTERS[(buffer.colorspace, to_space)]
    return PixelBuffer(
        data=converter(buffer.data),
        width=buffer.width,
        height=buffer.height,
        colorspace=to_space,
        metadata=dict(buffer.metadata),
    )
