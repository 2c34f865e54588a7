"""Tests for Elo rating updates."""

import pytest

from matchcore.analysis.rating import EloRating
from matchcore.core.errors import InvalidInputError


class TestExpectedScore:
    def test_equal_ratings(self):
        assert EloRating.expected_score(1500, 1500) == 0.5

    def test_favorite_above_half(self):
        assert EloRating.expected_score(1600, 1400) > 0.5
        assert EloRating.expected_score(1400, 1600) < 0.5

    def test_complementary(self):
        a = EloRating.expected_score(1350, 1720)
        b = EloRating.expected_score(1720, 1350)
        assert a + b == pytest.approx(1.0)

    def test_400_point_gap(self):
        assert EloRating.expected_score(1600, 1200) == pytest.approx(10 / 11)


class TestUpdate:
    def test_even_win_with_engine_k(self):
        assert EloRating(k_factor=24).update(1200, 1200, 1) == 1212

    def test_even_win_with_default_k(self):
        assert EloRating().update(1200, 1200, 1) == 1216

    def test_draw_between_equals_is_unchanged(self):
        assert EloRating().update(1500, 1500, 0.5) == 1500

    def test_returns_int(self):
        assert isinstance(EloRating().update(1234.5, 1100, 0), int)

    @pytest.mark.parametrize("score", [2, -1, 0.3, 0.75])
    def test_invalid_score_raises(self, score):
        with pytest.raises(InvalidInputError):
            EloRating().update(1200, 1200, score)

    def test_non_positive_k_raises(self):
        with pytest.raises(InvalidInputError):
            EloRating(k_factor=0)


class TestUpdatePair:
    @pytest.mark.parametrize(
        "rating_a,rating_b,score_a",
        [(1200, 1200, 1), (1500, 1300, 0), (1820, 1790, 0.5), (900, 2100, 1)],
    )
    def test_changes_are_symmetric(self, rating_a, rating_b, score_a):
        new_a, new_b = EloRating(k_factor=24).update_pair(rating_a, rating_b, score_a)
        assert (new_a - rating_a) + (new_b - rating_b) == 0

    @pytest.mark.parametrize("score_a", [0, 0.5, 1])
    def test_change_bounded_by_k(self, score_a):
        k = 24
        new_a, _ = EloRating(k_factor=k).update_pair(1000, 2000, score_a)
        assert abs(new_a - 1000) <= k

    def test_upset_moves_more_than_expected_win(self):
        elo = EloRating(k_factor=32)
        upset_a, _ = elo.update_pair(1200, 1600, 1)
        expected_a, _ = elo.update_pair(1600, 1200, 1)
        assert upset_a - 1200 > expected_a - 1600
