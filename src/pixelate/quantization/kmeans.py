"""
K-means clustering over color embedding vectors.

Lloyd's algorithm on (n, 4) arrays of (x, y, s, v) vectors, used to reduce
an image to a small palette. Initialization, tie-breaking, empty clusters
and convergence all follow fixed rules so that a seeded run is reproducible:

- Initial centroids are k distinct points drawn without replacement.
- A point joins the lowest-indexed centroid among those at minimum
  squared distance.
- A cluster with no points collapses to the zero vector and stays in the
  centroid list.
- Each round's candidate is kept only if it lowers the total squared error
  by at least `tolerance` relative to the previous error. Otherwise the loop
  stops and the candidate is discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from pixelate.core.data_types import ClusteringError

logger = logging.getLogger(__name__)

MAX_ROUNDS = 200
TOLERANCE = 1e-3
EMBEDDING_DIM = 4

RandomSource = np.random.Generator | int | None


@dataclass
class KMeansResult:
    """
    Outcome of a clustering run.

    Attributes:
        centroids: Final centroids, shape (k, 4)
        errors: Baseline total squared error followed by the error of
            every committed round; never increasing
        rounds: Candidate rounds evaluated after the baseline
        converged: False only if the round limit was reached
    """

    centroids: NDArray[np.float64]
    errors: list[float] = field(default_factory=list)
    rounds: int = 0
    converged: bool = False

    @property
    def error(self) -> float:
        """Total squared error of the returned centroids' source round."""
        return self.errors[-1]


def _as_generator(rng: RandomSource) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _validate_points(points: NDArray, k: int) -> NDArray[np.float64]:
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != EMBEDDING_DIM:
        raise ClusteringError(
            f"Points must have shape (n, {EMBEDDING_DIM}), got {points.shape}"
        )
    if k < 1:
        raise ClusteringError(f"k must be >= 1, got {k}")
    if len(points) < k:
        raise ClusteringError(f"Need at least k={k} points, got {len(points)}")
    return points


def squared_distances(
    points: NDArray[np.float64], centroids: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Squared Euclidean distance from every point to every centroid, shape (n, k)."""
    points = np.asarray(points, dtype=np.float64)
    centroids = np.asarray(centroids, dtype=np.float64)
    dist = np.empty((len(points), len(centroids)), dtype=np.float64)
    for j, centroid in enumerate(centroids):
        dist[:, j] = np.sum((points - centroid) ** 2, axis=1)
    return dist


def assign_all(
    points: NDArray[np.float64], centroids: NDArray[np.float64]
) -> NDArray[np.intp]:
    """Index of the nearest centroid for each point; ties go to the lower index."""
    # argmin returns the first occurrence of the minimum
    return np.argmin(squared_distances(points, centroids), axis=1)


def assign(point: NDArray[np.float64], centroids: NDArray[np.float64]) -> int:
    """Index of the nearest centroid for a single point."""
    point = np.asarray(point, dtype=np.float64).reshape(1, -1)
    return int(assign_all(point, centroids)[0])


def update_centroids(
    points: NDArray[np.float64], labels: NDArray[np.intp], k: int
) -> NDArray[np.float64]:
    """
    Componentwise mean of the points in each cluster.

    Clusters with no points get the zero vector.
    """
    sums = np.zeros((k, points.shape[1]), dtype=np.float64)
    np.add.at(sums, labels, points)
    counts = np.bincount(labels, minlength=k).astype(np.float64)
    safe_counts = np.where(counts > 0, counts, 1.0)
    return np.where(counts[:, np.newaxis] > 0, sums / safe_counts[:, np.newaxis], 0.0)


def lloyd_step(
    points: NDArray[np.float64], centroids: NDArray[np.float64]
) -> tuple[float, NDArray[np.float64]]:
    """
    One assignment + update pass.

    Returns:
        Tuple of (total squared error against the given centroids,
        updated centroids)
    """
    dist = squared_distances(points, centroids)
    labels = np.argmin(dist, axis=1)
    error = float(dist[np.arange(len(points)), labels].sum())
    return error, update_centroids(points, labels, len(centroids))


def initial_centroids(
    points: NDArray[np.float64], k: int, rng: RandomSource = None
) -> NDArray[np.float64]:
    """Pick k distinct points uniformly at random, without replacement."""
    points = _validate_points(points, k)
    indices = _as_generator(rng).choice(len(points), size=k, replace=False)
    return points[indices].copy()


def fit(
    points: NDArray[np.float64],
    k: int,
    rng: RandomSource = None,
    max_rounds: int = MAX_ROUNDS,
    tolerance: float = TOLERANCE,
) -> KMeansResult:
    """
    Cluster points into k groups.

    Args:
        points: Embedding vectors, shape (n, 4) with n >= k
        k: Number of clusters
        rng: Generator, integer seed, or None for fresh entropy
        max_rounds: Candidate rounds allowed after the baseline pass
        tolerance: Minimum relative error improvement to keep iterating

    Returns:
        KMeansResult with the centroids of the last committed round

    Raises:
        ClusteringError: If points are malformed or fewer than k
    """
    points = _validate_points(points, k)
    centroids = initial_centroids(points, k, rng)

    error, centroids = lloyd_step(points, centroids)
    result = KMeansResult(centroids=centroids, errors=[error])
    logger.debug(f"k-means baseline: total squared error {error:.6f}")

    for _ in range(max_rounds):
        if error == 0.0:
            # Relative gain is undefined at zero error
            result.converged = True
            break

        candidate_error, candidate = lloyd_step(points, centroids)
        result.rounds += 1
        logger.debug(
            f"k-means round {result.rounds}: total squared error {candidate_error:.6f}"
        )

        if (error - candidate_error) / error < tolerance:
            result.converged = True
            break

        error, centroids = candidate_error, candidate
        result.errors.append(error)

    result.centroids = centroids
    if result.converged:
        logger.info(
            f"k-means converged after {result.rounds} rounds (error {result.error:.6f})"
        )
    else:
        logger.info(
            f"k-means stopped at round limit {max_rounds} (error {result.error:.6f})"
        )
    return result


def cluster(
    points: NDArray[np.float64],
    k: int,
    rng: RandomSource = None,
    max_rounds: int = MAX_ROUNDS,
    tolerance: float = TOLERANCE,
) -> NDArray[np.float64]:
    """Cluster points and return only the (k, 4) centroids."""
    return fit(points, k, rng=rng, max_rounds=max_rounds, tolerance=tolerance).centroids


def posterize(
    points: NDArray[np.float64],
    k: int,
    rng: RandomSource = None,
    max_rounds: int = MAX_ROUNDS,
    tolerance: float = TOLERANCE,
) -> NDArray[np.float64]:
    """
    Replace every point with its nearest final centroid.

    Assignment is redone from scratch against the final centroids; no
    intermediate round's labels are reused.

    Returns:
        Array of shape (n, 4), each row one of the k centroids
    """
    points = _validate_points(points, k)
    centroids = cluster(points, k, rng=rng, max_rounds=max_rounds, tolerance=tolerance)
    return centroids[assign_all(points, centroids)]
