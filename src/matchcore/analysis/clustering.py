"""
k-means Player Clustering

Partitions player feature vectors into k groups with Lloyd's algorithm.
Matchmaking uses the resulting centroids to favor opponents from the same
latent skill/style cluster.

Initialization samples distinct input vectors at random, so results depend
on the random source. Pass a seed (or a numpy Generator) to pin it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from matchcore.core.errors import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_K = 3
DEFAULT_ITERATIONS = 30


def _as_matrix(data: Sequence[Sequence[float]]) -> np.ndarray:
    """Stack vectors into an (n, d) float matrix, rejecting ragged input."""
    lengths = {len(v) for v in data}
    if len(lengths) > 1:
        raise InvalidInputError(f"Feature vectors have mixed lengths: {sorted(lengths)}")
    return np.asarray(data, dtype=float).reshape(len(data), -1)


class KMeans:
    """
    Lloyd's-algorithm k-means over fixed-length feature vectors.

    Example:
        >>> km = KMeans(k=2, seed=7)
        >>> km.fit([[0, 0], [0, 1], [10, 10], [10, 11]])
        >>> km.predict([0, 0.5]) == km.predict([0, 1])
        True
    """

    def __init__(
        self,
        k: int = DEFAULT_K,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        """
        Args:
            k: Target cluster count (values below 1 become 1)
            seed: Seed for centroid initialization
            rng: Explicit random generator; takes precedence over seed
        """
        self.k = max(1, int(k))
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._centroids: np.ndarray = np.empty((0, 0))
        self.iterations_run: int = 0

    @property
    def is_fitted(self) -> bool:
        return len(self._centroids) > 0

    @property
    def dimension(self) -> int | None:
        return self._centroids.shape[1] if self.is_fitted else None

    def fit(self, data: Sequence[Sequence[float]], iterations: int = DEFAULT_ITERATIONS) -> None:
        """
        Fit centroids to data.

        Empty data leaves the previous centroids untouched. Clusters that
        receive no members in a round keep their previous centroid.

        Raises:
            InvalidInputError: If the vectors differ in length
        """
        if len(data) == 0:
            logger.debug("KMeans.fit called with no data; keeping previous centroids")
            return

        points = _as_matrix(data)
        distinct = np.unique(points, axis=0)
        n_init = min(self.k, len(distinct))
        chosen = self._rng.choice(len(distinct), size=n_init, replace=False)
        centroids = distinct[chosen].copy()

        self.iterations_run = 0
        labels: np.ndarray | None = None
        for _ in range(max(0, iterations)):
            new_labels = self._assign(points, centroids)
            updated = self._update_centroids(points, new_labels, centroids)
            self.iterations_run += 1

            converged = (
                labels is not None
                and np.array_equal(labels, new_labels)
                and np.array_equal(updated, centroids)
            )
            centroids = updated
            labels = new_labels
            if converged:
                break

        self._centroids = centroids
        logger.debug(
            f"KMeans fit {len(points)} vectors into {len(centroids)} clusters "
            f"in {self.iterations_run} iterations"
        )

    @staticmethod
    def _assign(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        # argmin returns the first index on ties
        distances = np.linalg.norm(points[:, None, :] - centroids[None, :, :], axis=2)
        return np.argmin(distances, axis=1)

    @staticmethod
    def _update_centroids(
        points: np.ndarray, labels: np.ndarray, centroids: np.ndarray
    ) -> np.ndarray:
        # Clusters with no members keep their previous centroid
        updated = centroids.copy()
        for c in range(len(centroids)):
            members = points[labels == c]
            if len(members):
                updated[c] = members.mean(axis=0)
        return updated

    def predict(self, vector: Sequence[float]) -> int | None:
        """
        Index of the nearest centroid, or None when the model has no centroids.

        Raises:
            InvalidInputError: If vector length differs from the centroids'
        """
        if not self.is_fitted:
            return None
        v = np.asarray(vector, dtype=float)
        if v.shape != (self._centroids.shape[1],):
            raise InvalidInputError(
                f"Vector length {len(vector)} does not match centroid length "
                f"{self._centroids.shape[1]}"
            )
        return int(self._assign(v[None, :], self._centroids)[0])

    def get_centroids(self) -> np.ndarray:
        """Read-only snapshot of the current centroids."""
        snapshot = self._centroids.copy()
        snapshot.setflags(write=False)
        return snapshot

    def inertia(self, data: Sequence[Sequence[float]]) -> float:
        """Sum of squared distances from each vector to its nearest centroid."""
        if not self.is_fitted or len(data) == 0:
            return 0.0
        points = _as_matrix(data)
        if points.shape[1] != self._centroids.shape[1]:
            raise InvalidInputError("Vector length does not match centroid length")
        distances = np.linalg.norm(points[:, None, :] - self._centroids[None, :, :], axis=2)
        return float(np.sum(np.min(distances, axis=1) ** 2))
