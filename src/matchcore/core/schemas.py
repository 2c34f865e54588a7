"""
Data contracts for matchcore module boundaries.

Profiles, requests and events come in from upstream services (identity,
match-result reporter, telemetry collector); candidates, analyses and lobbies
go back out. Inputs accept both snake_case and the camelCase keys used by the
upstream services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from matchcore.core.constants import DEFAULT_RATING, DEFAULT_SKILL, PlayStyle, Verdict
from matchcore.core.errors import InvalidInputError


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key among snake_case/camelCase spellings."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be numeric, got {value!r}") from None


def _as_optional_float(value: Any, name: str) -> float | None:
    if value is None:
        return None
    return _as_float(value, name)


# =============================================================================
# Inputs
# =============================================================================


@dataclass
class PlayerProfile:
    """A player's matchmaking profile."""

    id: str
    rating: float = DEFAULT_RATING  # Elo/MMR, 0-3000
    skill: float = DEFAULT_SKILL  # normalized 0-1
    latency_ms: float | None = None
    region: str | None = None
    play_style: PlayStyle | None = None
    stats: dict[str, float] = field(default_factory=dict)  # winrate, accuracy, ...

    def __post_init__(self) -> None:
        if self.play_style is not None and not isinstance(self.play_style, PlayStyle):
            try:
                self.play_style = PlayStyle(str(self.play_style).lower())
            except ValueError:
                raise InvalidInputError(f"Unknown play style: {self.play_style!r}") from None

    def copy(self) -> PlayerProfile:
        """Return an independent copy (stats dict included)."""
        return PlayerProfile(
            id=self.id,
            rating=self.rating,
            skill=self.skill,
            latency_ms=self.latency_ms,
            region=self.region,
            play_style=self.play_style,
            stats=dict(self.stats),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlayerProfile:
        """Build a profile from an upstream record."""
        player_id = _pick(data, "id", "player_id", "playerId")
        if player_id is None or str(player_id) == "":
            raise InvalidInputError(f"Profile record has no id: {data!r}")

        stats_raw = _pick(data, "stats", default={})
        if not isinstance(stats_raw, dict):
            raise InvalidInputError(f"stats must be a mapping, got {type(stats_raw).__name__}")
        stats = {str(k): _as_float(v, f"stats.{k}") for k, v in stats_raw.items() if v is not None}

        # Flat winrate/accuracy columns (CSV imports)
        for key in ("winrate", "accuracy"):
            if key in data and data[key] is not None and key not in stats:
                stats[key] = _as_float(data[key], key)

        region = _pick(data, "region")
        return cls(
            id=str(player_id),
            rating=_as_float(_pick(data, "rating", default=DEFAULT_RATING), "rating"),
            skill=_as_float(_pick(data, "skill", default=DEFAULT_SKILL), "skill"),
            latency_ms=_as_optional_float(_pick(data, "latency_ms", "latencyMs"), "latency_ms"),
            region=str(region) if region else None,
            play_style=_pick(data, "play_style", "playStyle"),
            stats=stats,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "rating": self.rating,
            "skill": self.skill,
            "latency_ms": self.latency_ms,
            "region": self.region,
            "play_style": self.play_style.value if self.play_style else None,
            "stats": dict(self.stats),
        }


@dataclass
class MatchRequest:
    """A request to find opponents for one player."""

    player_id: str
    max_latency_ms: float | None = None
    region_preference: str | None = None
    tolerance: float | None = None  # absolute rating-difference ceiling
    team_size: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchRequest:
        player_id = _pick(data, "player_id", "playerId")
        if player_id is None:
            raise InvalidInputError(f"Match request has no player id: {data!r}")
        team_size = _pick(data, "team_size", "teamSize")
        return cls(
            player_id=str(player_id),
            max_latency_ms=_as_optional_float(
                _pick(data, "max_latency_ms", "maxLatencyMs"), "max_latency_ms"
            ),
            region_preference=_pick(data, "region_preference", "regionPreference"),
            tolerance=_as_optional_float(_pick(data, "tolerance"), "tolerance"),
            team_size=int(team_size) if team_size is not None else None,
        )


@dataclass
class PlayerEvent:
    """A single behavioral event from the telemetry stream."""

    timestamp: float  # ms, non-decreasing within one stream
    type: str
    value: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlayerEvent:
        if "timestamp" not in data or "type" not in data:
            raise InvalidInputError(f"Event record needs timestamp and type: {data!r}")
        return cls(
            timestamp=_as_float(data["timestamp"], "timestamp"),
            type=str(data["type"]),
            value=_as_optional_float(data.get("value"), "value"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "type": self.type, "value": self.value}


# =============================================================================
# Outputs
# =============================================================================


@dataclass
class MatchCandidate:
    """A ranked opponent suggestion. Produced fresh per query."""

    player_id: str
    score: float  # higher is better
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "score": round(self.score, 4),
            "reason": self.reason,
        }


@dataclass
class FraudSignal:
    """One itemized contribution to a risk score."""

    name: str
    value: float
    weight: float

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "weight": self.weight}


@dataclass
class FraudAnalysis:
    """Bounded risk score with the signals and reasons behind it."""

    risk_score: int  # 0-100
    signals: list[FraudSignal] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)
    verdict: Verdict = Verdict.LOW

    @property
    def signal_names(self) -> list[str]:
        return [s.name for s in self.signals]

    def get_signal(self, name: str) -> FraudSignal | None:
        return next((s for s in self.signals if s.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "risk_score": self.risk_score,
            "verdict": self.verdict.value,
            "signals": [s.to_dict() for s in self.signals],
            "reasons": list(self.reasons),
        }


@dataclass
class Lobby:
    """Two rating-balanced teams assembled around a requesting player."""

    team_a: list[str]
    team_b: list[str]
    rating_gap: float  # |mean(team_a) - mean(team_b)|

    @property
    def player_ids(self) -> list[str]:
        return self.team_a + self.team_b

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_a": list(self.team_a),
            "team_b": list(self.team_b),
            "rating_gap": round(self.rating_gap, 2),
        }
