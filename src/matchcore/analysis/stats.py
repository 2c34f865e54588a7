"""
Statistical primitives: z-score scaling and Euclidean distance.
"""

import logging
from collections.abc import Sequence

import numpy as np

from matchcore.core.constants import VARIANCE_FLOOR
from matchcore.core.errors import InvalidInputError

logger = logging.getLogger(__name__)


class StandardScaler:
    """
    Z-score normalizer over a one-dimensional numeric sample.

    Uses the population variance, floored at VARIANCE_FLOOR before the square
    root so a constant sample never divides by zero. Until fit() sees data the
    scaler is the identity (mean 0, std 1).

    Not thread-safe: use one scaler per thread.

    Example:
        >>> scaler = StandardScaler().fit([10, 12, 14])
        >>> round(scaler.transform(14), 3)
        1.225
    """

    def __init__(self) -> None:
        self.mean: float = 0.0
        self.std: float = 1.0

    def fit(self, values: Sequence[float]) -> "StandardScaler":
        """Store the mean and std of values. An empty sample is a no-op."""
        arr = np.asarray(values, dtype=float)
        if arr.size == 0:
            return self
        mean = float(arr.mean())
        variance = float(np.mean((arr - mean) ** 2))
        self.mean = mean
        self.std = float(np.sqrt(max(variance, VARIANCE_FLOOR)))
        return self

    def transform(self, x: float) -> float:
        """Return the z-score of x under the most recent fit."""
        return (x - self.mean) / self.std

    def fit_transform(self, values: Sequence[float]) -> np.ndarray:
        """Fit on values and return all of their z-scores."""
        self.fit(values)
        return (np.asarray(values, dtype=float) - self.mean) / self.std


def euclidean(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Euclidean distance between two equal-length vectors.

    Raises:
        InvalidInputError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise InvalidInputError(f"Vector length mismatch: {len(a)} != {len(b)}")
    diff = np.asarray(a, dtype=float) - np.asarray(b, dtype=float)
    return float(np.sqrt(np.dot(diff, diff)))
