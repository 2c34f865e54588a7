"""
matchcore Core - Foundation modules shared by analysis and matchmaking.

This module contains the fundamental components:
- constants: Play styles, event types, feature layout and defaults
- config: Configuration dataclasses and loaders
- errors: Exception hierarchy
- schemas: Data contracts for module boundaries
- utils: Logging setup and small helpers
"""

from matchcore.core.config import (
    ClusteringConfig,
    FraudConfig,
    LimitsConfig,
    LoggingConfig,
    MatchcoreConfig,
    MatchmakingConfig,
    RatingConfig,
    load_config,
)
from matchcore.core.constants import (
    FEATURE_DIMENSION,
    FEATURE_NAMES,
    EventType,
    PlayStyle,
    Verdict,
)
from matchcore.core.errors import InvalidInputError, MatchcoreError, PlayerNotFoundError
from matchcore.core.schemas import (
    FraudAnalysis,
    FraudSignal,
    Lobby,
    MatchCandidate,
    MatchRequest,
    PlayerEvent,
    PlayerProfile,
)

__all__ = [
    # Enums
    "EventType",
    "PlayStyle",
    "Verdict",
    # Constants
    "FEATURE_DIMENSION",
    "FEATURE_NAMES",
    # Config
    "ClusteringConfig",
    "FraudConfig",
    "LimitsConfig",
    "LoggingConfig",
    "MatchcoreConfig",
    "MatchmakingConfig",
    "RatingConfig",
    "load_config",
    # Errors
    "InvalidInputError",
    "MatchcoreError",
    "PlayerNotFoundError",
    # Schemas
    "FraudAnalysis",
    "FraudSignal",
    "Lobby",
    "MatchCandidate",
    "MatchRequest",
    "PlayerEvent",
    "PlayerProfile",
]
