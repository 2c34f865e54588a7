"""
matchcore - Matchmaking and Player Analytics Core

Ranks compatible opponents from player profiles, keeps Elo ratings current,
groups players into behavioral clusters and scores event streams for fraud.

Usage:
    from matchcore import MatchmakingEngine, PlayerProfile, MatchRequest

    engine = MatchmakingEngine()
    engine.register_profile(PlayerProfile(id="alice", rating=1500, skill=0.7))
    engine.register_profile(PlayerProfile(id="bob", rating=1480, skill=0.65))

    for candidate in engine.find_matches(MatchRequest(player_id="alice")):
        print(f"{candidate.player_id}: {candidate.score:.3f}")
"""

__version__ = "0.1.0"
__author__ = "matchcore Contributors"


def __getattr__(name):
    """Lazy import so `import matchcore` stays cheap."""
    # Engine
    if name == "MatchmakingEngine":
        from matchcore.matchmaking import MatchmakingEngine
        return MatchmakingEngine
    # Analysis
    elif name == "FraudDetector":
        from matchcore.analysis import FraudDetector
        return FraudDetector
    elif name == "EloRating":
        from matchcore.analysis import EloRating
        return EloRating
    elif name == "KMeans":
        from matchcore.analysis import KMeans
        return KMeans
    elif name == "StandardScaler":
        from matchcore.analysis import StandardScaler
        return StandardScaler
    elif name == "euclidean":
        from matchcore.analysis import euclidean
        return euclidean
    # Schemas
    elif name in (
        "PlayerProfile",
        "MatchRequest",
        "PlayerEvent",
        "MatchCandidate",
        "FraudAnalysis",
        "FraudSignal",
        "Lobby",
    ):
        from matchcore.core import schemas
        return getattr(schemas, name)
    # Config and errors
    elif name in ("MatchcoreConfig", "load_config"):
        from matchcore.core import config
        return getattr(config, name)
    elif name in ("MatchcoreError", "PlayerNotFoundError", "InvalidInputError"):
        from matchcore.core import errors
        return getattr(errors, name)
    raise AttributeError(f"module 'matchcore' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Engine
    "MatchmakingEngine",
    # Analysis
    "EloRating",
    "FraudDetector",
    "KMeans",
    "StandardScaler",
    "euclidean",
    # Schemas
    "FraudAnalysis",
    "FraudSignal",
    "Lobby",
    "MatchCandidate",
    "MatchRequest",
    "PlayerEvent",
    "PlayerProfile",
    # Config and errors
    "MatchcoreConfig",
    "load_config",
    "InvalidInputError",
    "MatchcoreError",
    "PlayerNotFoundError",
]
