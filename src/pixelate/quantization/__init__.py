"""Palette reduction by k-means clustering."""

from pixelate.quantization.kmeans import (
    KMeansResult,
    assign,
    assign_all,
    cluster,
    fit,
    lloyd_step,
    posterize,
    update_centroids,
)

__all__ = [
    "KMeansResult",
    "assign",
    "assign_all",
    "cluster",
    "fit",
    "lloyd_step",
    "posterize",
    "update_centroids",
]
