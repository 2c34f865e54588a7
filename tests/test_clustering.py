"""Tests for k-means player clustering."""

import numpy as np
import pytest

from matchcore.analysis.clustering import KMeans
from matchcore.core.errors import InvalidInputError

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _make_blobs(seed: int = 0) -> tuple[list[list[float]], list[list[float]]]:
    """Two tight, well-separated groups of 2-D points."""
    rng = np.random.default_rng(seed)
    low = (rng.normal(0.0, 0.05, size=(10, 2))).tolist()
    high = (rng.normal(10.0, 0.05, size=(10, 2))).tolist()
    return low, high


class _FixedChoice:
    """Generator stand-in that always picks the given initial indices."""

    def __init__(self, indices: list[int]):
        self.indices = indices

    def choice(self, n, size, replace):
        return np.array(self.indices[:size])


class TestKMeansFit:
    def test_separates_well_separated_groups(self):
        low, high = _make_blobs()
        km = KMeans(k=2, seed=42)
        km.fit(low + high)

        low_labels = {km.predict(v) for v in low}
        high_labels = {km.predict(v) for v in high}
        assert len(low_labels) == 1
        assert len(high_labels) == 1
        assert low_labels != high_labels

    def test_centroids_near_group_means(self):
        low, high = _make_blobs()
        km = KMeans(k=2, seed=1)
        km.fit(low + high)

        centroids = sorted(km.get_centroids().tolist())
        assert centroids[0] == pytest.approx(np.mean(low, axis=0).tolist())
        assert centroids[1] == pytest.approx(np.mean(high, axis=0).tolist())

    def test_same_seed_same_result(self):
        low, high = _make_blobs()
        a = KMeans(k=3, seed=5)
        b = KMeans(k=3, seed=5)
        a.fit(low + high)
        b.fit(low + high)
        np.testing.assert_array_equal(a.get_centroids(), b.get_centroids())

    def test_injected_generator(self):
        low, high = _make_blobs()
        a = KMeans(k=2, rng=np.random.default_rng(9))
        b = KMeans(k=2, rng=np.random.default_rng(9))
        a.fit(low + high)
        b.fit(low + high)
        np.testing.assert_array_equal(a.get_centroids(), b.get_centroids())

    def test_fewer_distinct_points_than_k(self):
        km = KMeans(k=4, seed=0)
        km.fit([[1.0, 1.0], [1.0, 1.0], [2.0, 2.0]])
        assert len(km.get_centroids()) == 2

    def test_k_below_one_is_clamped(self):
        assert KMeans(k=0).k == 1

    def test_empty_fit_is_noop(self):
        km = KMeans(k=2, seed=0)
        km.fit([[0.0], [10.0]])
        before = km.get_centroids()

        km.fit([])

        np.testing.assert_array_equal(km.get_centroids(), before)

    def test_mixed_lengths_raise(self):
        with pytest.raises(InvalidInputError, match="mixed lengths"):
            KMeans(k=2).fit([[0.0, 1.0], [1.0]])

    def test_tied_point_joins_first_centroid(self):
        # Distinct points sort to [0, 5, 10]; start from 10 then 0
        km = KMeans(k=2, rng=_FixedChoice([2, 0]))
        km.fit([[0.0], [5.0], [10.0]])

        assert km.get_centroids().tolist() == [[7.5], [0.0]]

    def test_converges_before_budget(self):
        low, high = _make_blobs()
        km = KMeans(k=2, seed=3)
        km.fit(low + high, iterations=30)
        assert 1 <= km.iterations_run < 30


class TestKMeansPredict:
    def test_unfitted_returns_none(self):
        km = KMeans(k=3)
        assert not km.is_fitted
        assert km.predict([0.1, 0.2]) is None

    def test_length_mismatch_raises(self):
        km = KMeans(k=1, seed=0)
        km.fit([[0.0, 0.0], [1.0, 1.0]])
        with pytest.raises(InvalidInputError):
            km.predict([0.0, 0.0, 0.0])

    def test_midpoint_goes_to_lowest_index(self):
        km = KMeans(k=2, seed=0)
        km.fit([[0.0, 0.0], [10.0, 10.0]])
        assert km.predict([5.0, 5.0]) == 0

    def test_assign_ties_to_first_centroid(self):
        centroids = np.array([[10.0], [0.0], [20.0]])
        labels = KMeans._assign(np.array([[5.0], [15.0]]), centroids)
        assert labels.tolist() == [0, 0]

    def test_dimension(self):
        km = KMeans(k=1, seed=0)
        assert km.dimension is None
        km.fit([[0.0, 0.0, 1.0]])
        assert km.dimension == 3


class TestKMeansCentroids:
    def test_unfitted_centroids_empty(self):
        assert KMeans().get_centroids().size == 0

    def test_centroid_snapshot_is_read_only(self):
        km = KMeans(k=2, seed=0)
        km.fit([[0.0], [10.0]])
        snapshot = km.get_centroids()

        with pytest.raises(ValueError):
            snapshot[0, 0] = 99.0

    def test_empty_cluster_keeps_previous_centroid(self):
        points = np.array([[0.0, 0.0], [1.0, 1.0], [9.0, 9.0]])
        centroids = np.array([[0.5, 0.5], [4.0, 4.0], [9.0, 9.0]])
        labels = KMeans._assign(points, centroids)
        assert labels.tolist() == [0, 0, 2]

        updated = KMeans._update_centroids(points, labels, centroids)

        assert updated.tolist() == [[0.5, 0.5], [4.0, 4.0], [9.0, 9.0]]
        assert updated is not centroids

    def test_update_moves_populated_clusters_to_member_mean(self):
        points = np.array([[0.0], [2.0], [10.0]])
        updated = KMeans._update_centroids(points, np.array([1, 1, 1]), np.array([[0.0], [5.0]]))
        assert updated.tolist() == [[0.0], [4.0]]

    def test_inertia_zero_at_centroids(self):
        km = KMeans(k=2, seed=0)
        km.fit([[0.0], [10.0]])
        assert km.inertia([[0.0], [10.0]]) == pytest.approx(0.0)
        assert km.inertia([[1.0]]) == pytest.approx(1.0)
