"""Tests for heuristic fraud scoring."""

import pytest

from matchcore.analysis.fraud import (
    REASON_RAPID_ACTIONS,
    REASON_REGION_HOPPING,
    REASON_REWARD_OUTLIERS,
    REASON_WINRATE_SPIKE,
    FraudDetector,
)
from matchcore.core.config import FraudConfig, LimitsConfig
from matchcore.core.constants import Verdict
from matchcore.core.errors import InvalidInputError
from matchcore.core.schemas import PlayerEvent, PlayerProfile

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _make_clicks(count: int, spacing_ms: float, start: float = 0.0) -> list[PlayerEvent]:
    return [PlayerEvent(timestamp=start + i * spacing_ms, type="click") for i in range(count)]


def _make_rewards(amounts: list[float], start: float = 0.0, spacing_ms: float = 60_000) -> list[PlayerEvent]:
    return [
        PlayerEvent(timestamp=start + i * spacing_ms, type="reward_claim", value=amount)
        for i, amount in enumerate(amounts)
    ]


@pytest.fixture
def detector() -> FraudDetector:
    return FraudDetector()


class TestEmptyAndLimits:
    def test_empty_stream_scores_zero(self, detector):
        analysis = detector.analyze([])
        assert analysis.risk_score == 0
        assert analysis.signals == []
        assert analysis.reasons == []
        assert analysis.verdict == Verdict.LOW

    def test_oversize_batch_raises(self):
        detector = FraudDetector(limits=LimitsConfig(max_events=5))
        with pytest.raises(InvalidInputError, match="exceeds limit"):
            detector.analyze(_make_clicks(6, 1000))

    def test_batch_at_limit_is_accepted(self):
        detector = FraudDetector(limits=LimitsConfig(max_events=5))
        assert detector.analyze(_make_clicks(5, 1000)).risk_score == 0


class TestRapidActions:
    def test_fifteen_clicks_within_100ms(self, detector):
        analysis = detector.analyze(_make_clicks(15, 5))

        signal = analysis.get_signal("rapid_actions")
        assert signal is not None
        assert signal.value >= 14
        assert analysis.risk_score > 0
        assert REASON_RAPID_ACTIONS in analysis.reasons

    def test_score_formula(self, detector):
        # 14 rapid deltas * 0.25 weight * 20
        assert detector.analyze(_make_clicks(15, 5)).risk_score == 70

    def test_threshold_is_strict(self, detector):
        # 10 rapid deltas does not exceed the minimum of 10
        assert detector.analyze(_make_clicks(11, 100)).signals == []
        assert detector.analyze(_make_clicks(12, 100)).signal_names == ["rapid_actions"]

    def test_slow_stream_is_clean(self, detector):
        assert detector.analyze(_make_clicks(50, 600)).risk_score == 0

    def test_identical_timestamps_not_counted(self, detector):
        events = [PlayerEvent(timestamp=1000, type="click") for _ in range(20)]
        assert detector.analyze(events).signals == []


class TestRewardOutliers:
    def test_single_large_claim_flagged(self, detector):
        analysis = detector.analyze(_make_rewards([10.0] * 20 + [1000.0]))

        signal = analysis.get_signal("reward_outliers")
        assert signal is not None
        assert signal.value == 1
        assert analysis.reasons == [REASON_REWARD_OUTLIERS]
        assert analysis.risk_score == 7

    def test_uniform_claims_clean(self, detector):
        assert detector.analyze(_make_rewards([25.0] * 30)).signals == []

    def test_other_event_types_ignored(self, detector):
        events = _make_rewards([10.0] * 20) + [
            PlayerEvent(timestamp=2_000_000, type="purchase", value=1000.0)
        ]
        assert detector.analyze(events).get_signal("reward_outliers") is None

    def test_adding_outlier_never_lowers_score(self, detector):
        base = _make_rewards([10.0] * 20)
        with_outlier = _make_rewards([10.0] * 20 + [1000.0])

        assert detector.analyze(with_outlier).risk_score >= detector.analyze(base).risk_score

    def test_signals_accumulate(self, detector):
        rewards = _make_rewards([10.0] * 20 + [1000.0], start=10_000_000)
        analysis = detector.analyze(_make_clicks(15, 5) + rewards)

        assert analysis.signal_names == ["rapid_actions", "reward_outliers"]
        assert analysis.risk_score == 77
        assert analysis.verdict == Verdict.HIGH


class TestProfileSignals:
    def test_winrate_spike_on_low_rating(self, detector):
        profile = PlayerProfile(id="p1", rating=1500, stats={"winrate": 0.97})
        analysis = detector.analyze(_make_clicks(3, 1000), profile)

        assert analysis.signal_names == ["winrate_spike"]
        assert analysis.reasons == [REASON_WINRATE_SPIKE]

    def test_winrate_spike_ignored_for_high_rating(self, detector):
        profile = PlayerProfile(id="p1", rating=2600, stats={"winrate": 0.97})
        assert detector.analyze(_make_clicks(3, 1000), profile).signals == []

    def test_missing_winrate_is_not_a_spike(self, detector):
        profile = PlayerProfile(id="p1", rating=1000)
        assert detector.analyze(_make_clicks(3, 1000), profile).signals == []

    def test_region_hopping(self, detector):
        profile = PlayerProfile(id="p1", region="eu")
        events = [
            PlayerEvent(timestamp=0, type="login"),
            PlayerEvent(timestamp=5000, type="region_change"),
        ]
        analysis = detector.analyze(events, profile)

        assert analysis.signal_names == ["region_hopping"]
        assert analysis.reasons == [REASON_REGION_HOPPING]
        assert analysis.risk_score == 4

    def test_region_hopping_needs_home_region(self, detector):
        events = [PlayerEvent(timestamp=0, type="region_change")]
        assert detector.analyze(events, PlayerProfile(id="p1")).signals == []

    def test_profile_signals_skipped_without_profile(self, detector):
        events = [PlayerEvent(timestamp=0, type="region_change")]
        assert detector.analyze(events).signals == []


class TestVerdictAndBatch:
    @pytest.mark.parametrize(
        "risk,expected",
        [(0, Verdict.LOW), (29, Verdict.LOW), (30, Verdict.MEDIUM), (59, Verdict.MEDIUM), (60, Verdict.HIGH), (100, Verdict.HIGH)],
    )
    def test_verdict_thresholds(self, detector, risk, expected):
        assert detector.verdict(risk) == expected

    def test_risk_capped(self):
        detector = FraudDetector(FraudConfig(rapid_actions_weight=5.0))
        assert detector.analyze(_make_clicks(40, 5)).risk_score == 100

    def test_analyze_batch_matches_profiles(self, detector):
        batches = {
            "bot": _make_clicks(15, 5),
            "human": _make_clicks(5, 2000),
            "hopper": [PlayerEvent(timestamp=0, type="region_change")],
        }
        profiles = {"hopper": PlayerProfile(id="hopper", region="na")}

        results = detector.analyze_batch(batches, profiles)

        assert set(results) == {"bot", "human", "hopper"}
        assert results["bot"].risk_score == 70
        assert results["human"].risk_score == 0
        assert results["hopper"].signal_names == ["region_hopping"]

    def test_to_dict(self, detector):
        data = detector.analyze(_make_clicks(15, 5)).to_dict()
        assert data["risk_score"] == 70
        assert data["verdict"] == "high"
        assert data["signals"][0]["name"] == "rapid_actions"
