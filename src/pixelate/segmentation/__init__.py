"""Block partitioning and downsampling."""

from pixelate.segmentation.blocks import block_grid, downsample

__all__ = [
    "block_grid",
    "downsample",
]
