"""
Heuristic Fraud Scoring

Scores a player's chronological behavior stream for reward-farming and
automation patterns. Each signal is independent and additive; the final
risk score is bounded to 0-100 and comes with human-readable reasons so a
reviewer can audit every flag.

Signals:
- rapid_actions: many consecutive events less than 500ms apart
- reward_outliers: reward_claim amounts more than 3 std from the mean
- winrate_spike: winrate above 95% on a sub-2400 rating
- region_hopping: region_change events on a profile with a home region

This is an explainable scoring layer, not an anti-cheat verdict; false
positives are expected and reviewed downstream.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import numpy as np

from matchcore.analysis.stats import StandardScaler
from matchcore.core.config import FraudConfig, LimitsConfig
from matchcore.core.constants import Verdict
from matchcore.core.errors import InvalidInputError
from matchcore.core.schemas import FraudAnalysis, FraudSignal, PlayerEvent, PlayerProfile

logger = logging.getLogger(__name__)

# Reason strings surfaced to reviewers
REASON_RAPID_ACTIONS = "High number of rapid consecutive actions"
REASON_REWARD_OUTLIERS = "Outlier reward amounts detected"
REASON_WINRATE_SPIKE = "Unusually high winrate for rating"
REASON_REGION_HOPPING = "Frequent region change events"


class FraudDetector:
    """
    Stateless multi-signal risk scorer.

    Safe to share across threads: analyze() only builds local state.

    Example:
        >>> detector = FraudDetector()
        >>> events = [PlayerEvent(timestamp=i * 50, type="click") for i in range(15)]
        >>> detector.analyze(events).signal_names
        ['rapid_actions']
    """

    def __init__(self, config: FraudConfig | None = None, limits: LimitsConfig | None = None):
        self.config = config or FraudConfig()
        self.limits = limits or LimitsConfig()

    def analyze(
        self, events: Sequence[PlayerEvent], profile: PlayerProfile | None = None
    ) -> FraudAnalysis:
        """
        Score one player's event stream.

        Args:
            events: Events in chronological order
            profile: The player's profile, enabling the profile-based signals

        Returns:
            FraudAnalysis with risk 0 and no signals for an empty stream

        Raises:
            InvalidInputError: If the stream exceeds limits.max_events
        """
        if len(events) > self.limits.max_events:
            raise InvalidInputError(
                f"Event batch of {len(events)} exceeds limit of {self.limits.max_events}"
            )
        if not events:
            return FraudAnalysis(risk_score=0)

        signals: list[FraudSignal] = []
        reasons: list[str] = []

        for check in (
            self._check_rapid_actions,
            self._check_reward_outliers,
        ):
            found = check(events)
            if found:
                signals.append(found[0])
                reasons.append(found[1])

        if profile is not None:
            for profile_check in (self._check_winrate_spike, self._check_region_hopping):
                found = profile_check(events, profile)
                if found:
                    signals.append(found[0])
                    reasons.append(found[1])

        risk = self._risk_score(signals)
        analysis = FraudAnalysis(
            risk_score=risk, signals=signals, reasons=reasons, verdict=self.verdict(risk)
        )
        if signals:
            logger.info(
                f"Fraud analysis{f' for {profile.id}' if profile else ''}: "
                f"risk={risk} signals={analysis.signal_names}"
            )
        return analysis

    def analyze_batch(
        self,
        batches: Mapping[str, Sequence[PlayerEvent]],
        profiles: Mapping[str, PlayerProfile] | None = None,
    ) -> dict[str, FraudAnalysis]:
        """Score several players' streams, keyed by player id."""
        profiles = profiles or {}
        return {
            player_id: self.analyze(events, profiles.get(player_id))
            for player_id, events in batches.items()
        }

    def verdict(self, risk_score: int) -> Verdict:
        """Map a risk score onto the low/medium/high review label."""
        if risk_score < self.config.medium_risk_threshold:
            return Verdict.LOW
        if risk_score < self.config.high_risk_threshold:
            return Verdict.MEDIUM
        return Verdict.HIGH

    # -------------------------------------------------------------------------
    # Signals
    # -------------------------------------------------------------------------

    def _check_rapid_actions(self, events: Sequence[PlayerEvent]) -> tuple[FraudSignal, str] | None:
        timestamps = np.array([e.timestamp for e in events], dtype=float)
        deltas = np.diff(timestamps)
        rapid_count = int(np.count_nonzero((deltas > 0) & (deltas < self.config.rapid_action_window_ms)))
        if rapid_count > self.config.rapid_action_min_count:
            return (
                FraudSignal("rapid_actions", rapid_count, self.config.rapid_actions_weight),
                REASON_RAPID_ACTIONS,
            )
        return None

    def _check_reward_outliers(self, events: Sequence[PlayerEvent]) -> tuple[FraudSignal, str] | None:
        claims = [
            e.value
            for e in events
            if e.type == self.config.reward_event_type and e.value is not None
        ]
        if not claims:
            return None
        z_scores = StandardScaler().fit_transform(claims)
        outliers = int(np.count_nonzero(np.abs(z_scores) > self.config.reward_z_threshold))
        if outliers > 0:
            return (
                FraudSignal("reward_outliers", outliers, self.config.reward_outliers_weight),
                REASON_REWARD_OUTLIERS,
            )
        return None

    def _check_winrate_spike(
        self, events: Sequence[PlayerEvent], profile: PlayerProfile
    ) -> tuple[FraudSignal, str] | None:
        winrate = profile.stats.get("winrate")
        if winrate is None:
            return None
        if winrate > self.config.winrate_threshold and profile.rating < self.config.winrate_rating_ceiling:
            return (
                FraudSignal("winrate_spike", winrate, self.config.winrate_spike_weight),
                REASON_WINRATE_SPIKE,
            )
        return None

    def _check_region_hopping(
        self, events: Sequence[PlayerEvent], profile: PlayerProfile
    ) -> tuple[FraudSignal, str] | None:
        if not profile.region:
            return None
        if any(e.type == self.config.region_event_type for e in events):
            return (
                FraudSignal("region_hopping", 1, self.config.region_hopping_weight),
                REASON_REGION_HOPPING,
            )
        return None

    def _risk_score(self, signals: Sequence[FraudSignal]) -> int:
        total = sum(s.value * s.weight * self.config.score_multiplier for s in signals)
        return min(self.config.max_risk_score, round(total))
