"""
matchcore Matchmaking - player registry, candidate ranking and lobbies.
"""

from matchcore.matchmaking.engine import MatchmakingEngine
from matchcore.matchmaking.features import profile_to_vector
from matchcore.matchmaking.teams import snake_draft, team_rating_gap

__all__ = [
    "MatchmakingEngine",
    "profile_to_vector",
    "snake_draft",
    "team_rating_gap",
]
