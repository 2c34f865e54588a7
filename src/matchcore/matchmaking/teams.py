"""
Team balancing for multi-player lobbies.

Players are ordered by rating and dealt out in a snake draft
(A, B, B, A, A, B, ...), which keeps the two team means close without an
exhaustive search over partitions.
"""

from collections.abc import Mapping

import numpy as np


def snake_draft(ratings: Mapping[str, float]) -> tuple[list[str], list[str]]:
    """
    Split players into two teams by snake draft over descending rating.

    Ties in rating keep the mapping's iteration order.

    Returns:
        Tuple of (team_a, team_b); team_a gets the top-rated player
    """
    ordered = sorted(ratings, key=lambda pid: ratings[pid], reverse=True)
    team_a: list[str] = []
    team_b: list[str] = []
    for i, player_id in enumerate(ordered):
        # Pick order repeats every 4: A B B A
        if i % 4 in (0, 3):
            team_a.append(player_id)
        else:
            team_b.append(player_id)
    return team_a, team_b


def team_rating_gap(
    team_a: list[str], team_b: list[str], ratings: Mapping[str, float]
) -> float:
    """Absolute difference between the two teams' mean ratings."""
    if not team_a or not team_b:
        return 0.0
    mean_a = float(np.mean([ratings[p] for p in team_a]))
    mean_b = float(np.mean([ratings[p] for p in team_b]))
    return abs(mean_a - mean_b)
