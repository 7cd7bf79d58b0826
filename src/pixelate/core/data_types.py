"""
Core data types for pixelate.

Provides the scalar color types, PixelBuffer (a flat pixel buffer shared by
every pipeline stage), PixelateConfig, and the exception hierarchy.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

import numpy as np
from numpy.typing import NDArray


class ColorSpace(str, Enum):
    """Supported pixel representations."""

    RGB = "RGB"
    HSV = "HSV"


# Storage dtype per colorspace
COLORSPACE_DTYPES = {
    ColorSpace.RGB: np.uint8,
    ColorSpace.HSV: np.float32,
}


class RgbColor(NamedTuple):
    """Three 8-bit channels."""

    r: int
    g: int
    b: int


class HsvColor(NamedTuple):
    """Hue in sector units [0, 6), saturation and value in [0, 1]."""

    h: float
    s: float
    v: float


class EmbeddingVector(NamedTuple):
    """Hue as a unit-circle point (x, y), plus saturation and value."""

    x: float
    y: float
    s: float
    v: float


@dataclass
class PixelBuffer:
    """
    Flat three-channel pixel buffer.

    This is the structure handed between pipeline stages. Every stage
    returns a new buffer; none mutates its input.

    Attributes:
        data: Pixel array with shape (width * height, 3)
        width: Image width in pixels
        height: Image height in pixels
        colorspace: RGB (uint8 channels) or HSV (float32 h, s, v)
        metadata: Optional metadata dict for carrying auxiliary info

    Index Convention:
        Pixel (i, j), with i the horizontal and j the vertical position,
        lives at offset ``i * height + j``. Use ``index()`` rather than
        computing offsets by hand.
    """

    data: NDArray
    width: int
    height: int
    colorspace: ColorSpace | str = ColorSpace.RGB
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate and normalize the buffer after creation."""
        self.colorspace = ColorSpace(self.colorspace)

        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Dimensions must be non-negative, got {self.width}x{self.height}"
            )

        self.data = np.asarray(self.data)
        if self.data.ndim != 2 or self.data.shape[1] != 3:
            raise ValueError(
                f"PixelBuffer data must have shape (N, 3), got {self.data.shape}"
            )
        if self.data.shape[0] != self.width * self.height:
            raise ValueError(
                f"Buffer length ({self.data.shape[0]}) must equal "
                f"width * height ({self.width * self.height})"
            )

        dtype = COLORSPACE_DTYPES[self.colorspace]
        if self.data.dtype != dtype:
            self.data = self.data.astype(dtype)

    @property
    def shape(self) -> tuple[int, int]:
        """Shape of the underlying array."""
        return self.data.shape  # type: ignore

    @property
    def size(self) -> tuple[int, int]:
        """Size as (width, height)."""
        return (self.width, self.height)

    def index(self, i: int, j: int) -> int:
        """Buffer offset of pixel (i, j)."""
        if not (0 <= i < self.width and 0 <= j < self.height):
            raise IndexError(
                f"Pixel ({i}, {j}) outside {self.width}x{self.height} image"
            )
        return i * self.height + j

    def get(self, i: int, j: int) -> RgbColor | HsvColor:
        """Get pixel (i, j) as a scalar color."""
        values = self.data[self.index(i, j)]
        if self.colorspace == ColorSpace.RGB:
            return RgbColor(*(int(c) for c in values))
        return HsvColor(*(float(c) for c in values))

    def set(self, i: int, j: int, value: RgbColor | HsvColor | tuple) -> None:
        """Set pixel (i, j) in place."""
        self.data[self.index(i, j)] = value

    def to_grid(self) -> NDArray:
        """View as (width, height, 3) so that grid[i, j] is pixel (i, j)."""
        return self.data.reshape(self.width, self.height, 3)

    @classmethod
    def from_grid(
        cls,
        grid: NDArray,
        colorspace: ColorSpace | str = ColorSpace.RGB,
    ) -> PixelBuffer:
        """Create from a (width, height, 3) grid."""
        width, height = grid.shape[0], grid.shape[1]
        return cls(
            data=np.ascontiguousarray(grid).reshape(width * height, 3),
            width=width,
            height=height,
            colorspace=colorspace,
        )

    def to_hwc(self) -> NDArray:
        """Convert to row-major height-width-channel format (H, W, C) for PIL."""
        return np.ascontiguousarray(np.transpose(self.to_grid(), (1, 0, 2)))

    @classmethod
    def from_hwc(
        cls,
        data: NDArray,
        colorspace: ColorSpace | str = ColorSpace.RGB,
    ) -> PixelBuffer:
        """Create from row-major height-width-channel format (H, W, C)."""
        if data.ndim != 3 or data.shape[2] != 3:
            raise ValueError(f"Expected (H, W, 3) array, got {data.shape}")
        return cls.from_grid(np.transpose(data, (1, 0, 2)), colorspace)

    def copy(self) -> PixelBuffer:
        """Create a deep copy of this buffer."""
        return PixelBuffer(
            data=self.data.copy(),
            width=self.width,
            height=self.height,
            colorspace=self.colorspace,
            metadata=copy.deepcopy(self.metadata),
        )

    def clone_empty(self) -> PixelBuffer:
        """Create a zeroed buffer with same shape and properties."""
        return PixelBuffer(
            data=np.zeros_like(self.data),
            width=self.width,
            height=self.height,
            colorspace=self.colorspace,
            metadata=copy.deepcopy(self.metadata),
        )

    def __repr__(self) -> str:
        return (
            f"PixelBuffer({self.width}x{self.height}, colorspace={self.colorspace.value}, "
            f"dtype={self.data.dtype})"
        )


@dataclass
class PixelateConfig:
    """Configuration for a pixelate run."""

    # Block edge length in pixels
    factor: int = 16

    # Palette reduction
    reduce_colors: bool = False
    n_colors: int = 8

    # Clustering convergence
    max_rounds: int = 200
    tolerance: float = 1e-3

    # Seed for centroid initialization (None = fresh entropy)
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.factor < 1:
            raise ValueError(f"factor must be >= 1, got {self.factor}")
        if self.n_colors < 1:
            raise ValueError(f"n_colors must be >= 1, got {self.n_colors}")
        if self.max_rounds < 0:
            raise ValueError(f"max_rounds must be >= 0, got {self.max_rounds}")
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")


class PixelateError(Exception):
    """Base exception for pixelate errors."""

    pass


class NotDivisibleError(PixelateError, ValueError):
    """Image dimensions are not a multiple of the block factor."""

    def __init__(self, width: int, height: int, factor: int) -> None:
        self.width = width
        self.height = height
        self.factor = factor
        super().__init__(
            f"Image size {width}x{height} is not divisible by factor {factor}"
        )


class OutOfRangeHueError(PixelateError, ValueError):
    """A hue outside [0, 6] reached RGB conversion."""

    def __init__(self, hue: float) -> None:
        self.hue = hue
        super().__init__(f"Hue out of range [0, 6]: {hue}")


class ClusteringError(PixelateError, ValueError):
    """Invalid input to the clustering engine."""

    pass
