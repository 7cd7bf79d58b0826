"""
Circular embedding of HSV colors.

Hue is cyclic, so it cannot be averaged as a plain number: the mean of
5.9 and 0.1 should be 0.0, not 3.0. Each color is instead mapped to a
4-vector (x, y, s, v) with (x, y) = (cos, sin) of the hue angle. Means are
taken in that space and mapped back with atan2.

Saturation does not scale the circle radius: a near-grey pixel still
carries a full-strength hue direction.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from pixelate.core.data_types import EmbeddingVector, HsvColor

HUE_SECTORS = 6.0
RADIANS_PER_SECTOR = math.pi / 3.0


def embed(hsv: NDArray[np.floating]) -> NDArray[np.float64]:
    """
    Map HSV colors to embedding vectors.

    Args:
        hsv: Array of shape (..., 3) holding (h, s, v), hue in sector units

    Returns:
        Array of shape (..., 4) holding (x, y, s, v)
    """
    hsv = np.asarray(hsv, dtype=np.float64)
    angle = hsv[..., 0] * RADIANS_PER_SECTOR
    return np.stack(
        [np.cos(angle), np.sin(angle), hsv[..., 1], hsv[..., 2]], axis=-1
    )


def recover(vectors: NDArray[np.floating]) -> NDArray[np.float64]:
    """
    Map embedding vectors back to HSV colors.

    The (x, y) pair need not be unit length; only its direction matters.
    The zero vector recovers to hue 0. Hue is always returned in [0, 6).

    Args:
        vectors: Array of shape (..., 4) holding (x, y, s, v)

    Returns:
        Array of shape (..., 3) holding (h, s, v)
    """
    vectors = np.asarray(vectors, dtype=np.float64)
    hue = np.arctan2(vectors[..., 1], vectors[..., 0]) / RADIANS_PER_SECTOR
    hue = np.where(hue < 0, hue + HUE_SECTORS, hue)
    # -tiny + 6 can round up to exactly 6
    hue = np.where(hue >= HUE_SECTORS, hue - HUE_SECTORS, hue)
    return np.stack([hue, vectors[..., 2], vectors[..., 3]], axis=-1)


def circular_mean(hsv: NDArray[np.floating]) -> NDArray[np.float64]:
    """
    Mean of a set of HSV colors with hue averaged on the circle.

    Args:
        hsv: Array of shape (n, 3), n >= 1

    Returns:
        Array of shape (3,)
    """
    hsv = np.asarray(hsv)
    if hsv.ndim != 2 or hsv.shape[0] == 0:
        raise ValueError(f"Expected non-empty (n, 3) array, got {hsv.shape}")
    return recover(embed(hsv).mean(axis=0))


def embed_color(color: HsvColor | tuple[float, float, float]) -> EmbeddingVector:
    """Embed a single HSV color."""
    return EmbeddingVector(*(float(c) for c in embed(np.array(color))))


def recover_color(vector: EmbeddingVector | tuple[float, ...]) -> HsvColor:
    """Recover a single HSV color."""
    return HsvColor(*(float(c) for c in recover(np.array(vector))))
