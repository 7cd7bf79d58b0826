"""Core data types and errors."""

from pixelate.core.data_types import (
    ClusteringError,
    ColorSpace,
    EmbeddingVector,
    HsvColor,
    NotDivisibleError,
    OutOfRangeHueError,
    PixelateConfig,
    PixelateError,
    PixelBuffer,
    RgbColor,
)

__all__ = [
    "ColorSpace",
    "RgbColor",
    "HsvColor",
    "EmbeddingVector",
    "PixelBuffer",
    "PixelateConfig",
    "PixelateError",
    "NotDivisibleError",
    "OutOfRangeHueError",
    "ClusteringError",
]
