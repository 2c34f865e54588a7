"""
Elo rating updates for head-to-head results.
"""

import logging

from matchcore.core.constants import ELO_SCALE, VALID_ELO_SCORES
from matchcore.core.errors import InvalidInputError

logger = logging.getLogger(__name__)


class EloRating:
    """Handles Elo rating calculations. Holds no state beyond the k-factor."""

    def __init__(self, k_factor: float = 32.0):
        """
        Args:
            k_factor: Sensitivity of rating swings
        """
        if k_factor <= 0:
            raise InvalidInputError(f"k_factor must be positive, got {k_factor}")
        self.k_factor = k_factor

    @staticmethod
    def expected_score(rating_a: float, rating_b: float) -> float:
        """
        Calculate the expected score for player A against player B

        Args:
            rating_a: Player A's current rating
            rating_b: Player B's current rating

        Returns:
            Expected score in (0, 1) for player A
        """
        return 1 / (1 + 10 ** ((rating_b - rating_a) / ELO_SCALE))

    def update(self, rating_a: float, rating_b: float, score_a: float) -> int:
        """
        Calculate player A's new rating after a result against player B

        Args:
            rating_a: Player A's current rating
            rating_b: Player B's current rating
            score_a: 1 for a win, 0.5 for a draw, 0 for a loss

        Returns:
            Player A's new rating, rounded to an integer
        """
        if score_a not in VALID_ELO_SCORES:
            raise InvalidInputError(f"score must be 0, 0.5 or 1, got {score_a!r}")
        expected = self.expected_score(rating_a, rating_b)
        return round(rating_a + self.k_factor * (score_a - expected))

    def update_pair(self, rating_a: float, rating_b: float, score_a: float) -> tuple[int, int]:
        """
        Calculate new ratings for both players; B scores the complement of A.

        Returns:
            Tuple of (new_rating_a, new_rating_b)
        """
        new_a = self.update(rating_a, rating_b, score_a)
        new_b = self.update(rating_b, rating_a, 1 - score_a)
        logger.debug(
            f"Elo update ({self.k_factor}): {rating_a} -> {new_a}, {rating_b} -> {new_b}"
        )
        return new_a, new_b
