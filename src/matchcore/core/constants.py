"""
matchcore - Constants

Defines play styles, event types, feature-vector layout and the default
values used when a profile omits a field.
"""

from enum import StrEnum


class PlayStyle(StrEnum):
    """
    Closed set of play styles a profile may declare.

    Encoded into the feature vector as -1 / 0 / +1.
    """

    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"


class EventType(StrEnum):
    """Event tags the fraud detector gives special meaning to."""

    REWARD_CLAIM = "reward_claim"
    REGION_CHANGE = "region_change"


class Verdict(StrEnum):
    """Review label attached to a fraud analysis."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# Feature Vector Layout
# =============================================================================

FEATURE_NAMES: tuple[str, ...] = (
    "rating",
    "skill",
    "latency",
    "play_style",
    "winrate",
    "accuracy",
)
FEATURE_DIMENSION = len(FEATURE_NAMES)

# Fixed divisors (no fitted scaler for profile vectors)
RATING_SCALE = 3000.0
LATENCY_SCALE_MS = 300.0

PLAY_STYLE_ENCODING: dict[PlayStyle, float] = {
    PlayStyle.AGGRESSIVE: 1.0,
    PlayStyle.DEFENSIVE: -1.0,
    PlayStyle.BALANCED: 0.0,
}

# =============================================================================
# Profile Defaults (neutral midpoints)
# =============================================================================

DEFAULT_RATING = 1200.0
DEFAULT_SKILL = 0.5
DEFAULT_LATENCY_MS = 80.0
DEFAULT_PLAY_STYLE = PlayStyle.BALANCED
DEFAULT_WINRATE = 0.5
DEFAULT_ACCURACY = 0.5

# Elo
ELO_SCALE = 400.0
VALID_ELO_SCORES: frozenset[float] = frozenset({0.0, 0.5, 1.0})

# Scaler
VARIANCE_FLOOR = 1e-8
