"""
Tests for k-means palette clustering.
"""

import numpy as np
import pytest

from pixelate.core.data_types import ClusteringError, HsvColor
from pixelate.color.conversions import to_rgb
from pixelate.color.embedding import embed, recover, recover_color
from pixelate.quantization.kmeans import (
    MAX_ROUNDS,
    KMeansResult,
    assign,
    assign_all,
    cluster,
    fit,
    initial_centroids,
    lloyd_step,
    posterize,
    squared_distances,
    update_centroids,
)


@pytest.fixture
def points():
    """Embedded random HSV colors."""
    rng = np.random.default_rng(42)
    hsv = np.stack([
        rng.uniform(0.0, 6.0, 400),
        rng.uniform(0.0, 1.0, 400),
        rng.uniform(0.0, 1.0, 400),
    ], axis=-1)
    return embed(hsv)


class TestAssignment:
    """Tests for nearest-centroid assignment."""

    def test_squared_distances(self):
        """Distance is the sum of squared differences over all 4 components."""
        pts = np.array([[0.0, 0.0, 0.0, 0.0], [1.0, 2.0, 3.0, 4.0]])
        cents = np.array([[1.0, 1.0, 1.0, 1.0]])

        np.testing.assert_allclose(squared_distances(pts, cents), [[4.0], [14.0]])

    def test_nearest(self):
        """Each point goes to its closest centroid."""
        cents = np.array([[0.0, 0.0, 0.0, 0.0], [1.0, 0.0, 0.0, 0.0], [0.0, 0.0, 0.0, 5.0]])

        assert assign([0.9, 0.0, 0.0, 0.0], cents) == 1
        assert assign([0.0, 0.0, 0.0, 4.0], cents) == 2
        assert assign([0.1, 0.0, 0.0, 0.1], cents) == 0

    def test_tie_goes_to_lower_index(self):
        """Equidistant centroids resolve to the lowest index."""
        cents = np.array([[0.0, 0.0, 0.0, 0.0], [2.0, 0.0, 0.0, 0.0], [1.0, 0.0, 0.0, 0.0]])

        assert assign([1.0, 0.0, 0.0, 0.0], cents[:2]) == 0
        # Duplicate centroids: first copy wins
        dup = np.array([[0.0, 0.0, 0.0, 1.0], [0.0, 0.0, 0.0, 1.0]])
        assert assign([0.0, 0.0, 0.0, 0.0], dup) == 0

    def test_assign_all_matches_assign(self, points):
        """Vectorized assignment agrees with the single-point form."""
        cents = points[:5]
        labels = assign_all(points, cents)

        assert labels.shape == (len(points),)
        for p, label in zip(points[:50], labels[:50]):
            assert assign(p, cents) == label


class TestUpdate:
    """Tests for the centroid update step."""

    def test_means(self):
        """Centroids are componentwise means."""
        pts = np.array([[0.0, 0.0, 0.0, 0.0], [2.0, 2.0, 2.0, 2.0], [5.0, 5.0, 5.0, 5.0]])
        labels = np.array([0, 0, 1])

        cents = update_centroids(pts, labels, 2)

        np.testing.assert_allclose(cents, [[1.0, 1.0, 1.0, 1.0], [5.0, 5.0, 5.0, 5.0]])

    def test_empty_cluster_is_zero(self):
        """A cluster with no points collapses to the zero vector."""
        pts = np.array([[1.0, 0.0, 0.5, 0.5], [1.0, 0.0, 0.7, 0.5]])
        labels = np.array([0, 0])

        cents = update_centroids(pts, labels, 3)

        assert cents.shape == (3, 4)
        np.testing.assert_array_equal(cents[1:], 0.0)

    def test_empty_cluster_recovers_to_black(self):
        """The zero centroid decodes to hue 0, saturation 0, value 0."""
        color = recover_color((0.0, 0.0, 0.0, 0.0))

        assert color == HsvColor(0.0, 0.0, 0.0)
        assert tuple(to_rgb(color)) == (0, 0, 0)

    def test_lloyd_step_error(self):
        """The step reports error against the centroids it was given."""
        pts = np.array([[0.0, 0.0, 0.0, 0.0], [2.0, 0.0, 0.0, 0.0]])
        cents = np.array([[0.0, 0.0, 0.0, 0.0]])

        error, new = lloyd_step(pts, cents)

        assert error == pytest.approx(4.0)
        np.testing.assert_allclose(new, [[1.0, 0.0, 0.0, 0.0]])


class TestInitialization:
    """Tests for random centroid seeding."""

    def test_distinct_points(self, points):
        """Initial centroids are k distinct input rows."""
        cents = initial_centroids(points, 8, rng=0)

        assert cents.shape == (8, 4)
        assert len({tuple(c) for c in cents}) == 8
        for c in cents:
            assert np.any(np.all(points == c, axis=1))

    def test_seeded(self, points):
        """The same seed picks the same centroids."""
        np.testing.assert_array_equal(
            initial_centroids(points, 5, rng=3), initial_centroids(points, 5, rng=3)
        )

    def test_accepts_generator(self, points):
        """A Generator is used directly."""
        a = initial_centroids(points, 4, rng=np.random.default_rng(9))
        b = initial_centroids(points, 4, rng=np.random.default_rng(9))

        np.testing.assert_array_equal(a, b)


class TestFit:
    """Tests for the convergence loop."""

    def test_result_type(self, points):
        """fit returns a KMeansResult with k centroids."""
        result = fit(points, 8, rng=0)

        assert isinstance(result, KMeansResult)
        assert result.centroids.shape == (8, 4)
        assert 1 <= result.rounds <= MAX_ROUNDS
        assert result.error == result.errors[-1]

    def test_monotone_errors(self, points):
        """Committed errors never increase."""
        result = fit(points, 8, rng=1)

        assert np.all(np.diff(result.errors) <= 0)

    def test_committed_rounds_improve_by_tolerance(self, points):
        """Every committed round beats its predecessor by the threshold."""
        result = fit(points, 6, rng=2, tolerance=1e-3)
        errors = np.array(result.errors)

        if len(errors) > 1:
            gains = (errors[:-1] - errors[1:]) / errors[:-1]
            assert np.all(gains >= 1e-3)

    def test_stop_discards_candidate(self, points):
        """With an unreachable tolerance, the baseline centroids are returned."""
        baseline_error, baseline = lloyd_step(points, initial_centroids(points, 5, rng=7))

        result = fit(points, 5, rng=7, tolerance=2.0)

        np.testing.assert_array_equal(result.centroids, baseline)
        assert result.errors == [baseline_error]
        assert result.rounds == 1
        assert result.converged is True

    def test_matches_reference_loop(self, points):
        """Stop-before-commit: the final candidate is never applied."""
        error, cents = lloyd_step(points, initial_centroids(points, 4, rng=11))
        for _ in range(MAX_ROUNDS):
            new_error, new_cents = lloyd_step(points, cents)
            if (error - new_error) / error < 1e-3:
                break
            error, cents = new_error, new_cents

        result = fit(points, 4, rng=11)

        np.testing.assert_allclose(result.centroids, cents)
        assert result.error == pytest.approx(error)

    def test_round_limit(self, points):
        """max_rounds=0 keeps the baseline and reports no convergence."""
        _, baseline = lloyd_step(points, initial_centroids(points, 3, rng=5))

        result = fit(points, 3, rng=5, max_rounds=0)

        np.testing.assert_array_equal(result.centroids, baseline)
        assert result.rounds == 0
        assert result.converged is False

    def test_zero_error_converges(self):
        """Identical points give zero error and stop immediately."""
        pts = np.tile([1.0, 0.0, 0.5, 0.5], (10, 1))

        result = fit(pts, 1, rng=0)

        assert result.converged is True
        assert result.rounds == 0
        assert result.errors == [0.0]
        np.testing.assert_allclose(result.centroids, [[1.0, 0.0, 0.5, 0.5]])

    def test_degenerate_cluster_stays_empty(self):
        """Duplicate seeds leave an empty cluster at the zero vector."""
        pts = np.tile([1.0, 0.0, 1.0, 1.0], (10, 1))

        cents = cluster(pts, 2, rng=0)

        np.testing.assert_allclose(cents[0], [1.0, 0.0, 1.0, 1.0])
        np.testing.assert_array_equal(cents[1], 0.0)
        np.testing.assert_array_equal(recover(cents[1]), [0.0, 0.0, 0.0])

    def test_single_cluster_is_mean(self, points):
        """k=1 converges to the overall mean."""
        cents = cluster(points, 1, rng=0)

        np.testing.assert_allclose(cents[0], points.mean(axis=0))

    def test_reproducible(self, points):
        """Same seed, same centroids."""
        np.testing.assert_array_equal(cluster(points, 8, rng=4), cluster(points, 8, rng=4))

    @pytest.mark.parametrize("k", [0, -1])
    def test_bad_k(self, points, k):
        """k must be positive."""
        with pytest.raises(ClusteringError):
            fit(points, k)

    def test_too_few_points(self):
        """At least k points are required."""
        with pytest.raises(ClusteringError, match="at least"):
            fit(np.zeros((3, 4)), 8)

    def test_bad_shape(self):
        """Points must be 4-dimensional."""
        with pytest.raises(ClusteringError):
            fit(np.zeros((10, 3)), 2)


class TestPosterize:
    """Tests for the final pixel mapping."""

    def test_every_point_becomes_a_centroid(self, points):
        """Each output row is exactly the centroid nearest its input."""
        cents = cluster(points, 8, rng=6)
        out = posterize(points, 8, rng=6)

        assert out.shape == points.shape
        for p, row in zip(points, out):
            np.testing.assert_array_equal(row, cents[assign(p, cents)])

    def test_palette_size(self, points):
        """At most k distinct values come out."""
        out = posterize(points, 8, rng=8)

        assert len(np.unique(out, axis=0)) <= 8

    def test_input_not_mutated(self, points):
        """posterize returns a new array."""
        before = points.copy()
        posterize(points, 4, rng=0)

        np.testing.assert_array_equal(points, before)
