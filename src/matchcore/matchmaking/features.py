"""
Feature-vector derivation for player profiles.

Vectors use fixed divisors instead of a fitted scaler so each profile's
vector depends on that profile alone:

    [rating / 3000, skill, latency_ms / 300, style(-1/0/+1), winrate, accuracy]

Missing fields fall back to neutral midpoints.
"""

from matchcore.core.constants import (
    DEFAULT_ACCURACY,
    DEFAULT_LATENCY_MS,
    DEFAULT_PLAY_STYLE,
    DEFAULT_RATING,
    DEFAULT_SKILL,
    DEFAULT_WINRATE,
    LATENCY_SCALE_MS,
    PLAY_STYLE_ENCODING,
    RATING_SCALE,
)
from matchcore.core.schemas import PlayerProfile


def profile_to_vector(profile: PlayerProfile) -> tuple[float, ...]:
    """Derive the fixed-length feature vector for a profile."""
    rating = profile.rating if profile.rating is not None else DEFAULT_RATING
    skill = profile.skill if profile.skill is not None else DEFAULT_SKILL
    latency = profile.latency_ms if profile.latency_ms is not None else DEFAULT_LATENCY_MS
    style = PLAY_STYLE_ENCODING[profile.play_style or DEFAULT_PLAY_STYLE]
    winrate = profile.stats.get("winrate", DEFAULT_WINRATE)
    accuracy = profile.stats.get("accuracy", DEFAULT_ACCURACY)
    return (
        float(rating) / RATING_SCALE,
        float(skill),
        float(latency) / LATENCY_SCALE_MS,
        style,
        float(winrate),
        float(accuracy),
    )
