"""
Matchmaking Engine

Owns the player registry and combines feature-vector distance, rating
proximity, latency and cluster agreement into ranked match candidates.

Data flow:
    register_profile -> cached feature vector
    rebuild_clusters -> fresh centroids from every cached vector
    find_matches     -> ranked candidates from vectors + centroids
    update_rating    -> Elo update for both players, vectors refreshed

Profiles are the only source of truth; vectors and centroids are derived
state and can be rebuilt at any time.

Thread safety: queries share a read lock, registrations, rating updates
and cluster rebuilds take the write lock. Construct one engine and pass it
to whatever needs it; there is no module-level instance.
"""

from __future__ import annotations

import logging

import numpy as np

from matchcore.analysis.clustering import KMeans
from matchcore.analysis.rating import EloRating
from matchcore.analysis.stats import euclidean
from matchcore.core.config import MatchcoreConfig, validate_config
from matchcore.core.constants import DEFAULT_LATENCY_MS
from matchcore.core.errors import InvalidInputError, PlayerNotFoundError
from matchcore.core.schemas import Lobby, MatchCandidate, MatchRequest, PlayerProfile
from matchcore.core.utils import PerformanceMonitor, clamp
from matchcore.infra.locks import ReadWriteLock
from matchcore.matchmaking.features import profile_to_vector
from matchcore.matchmaking.teams import snake_draft, team_rating_gap

logger = logging.getLogger(__name__)


class MatchmakingEngine:
    """
    Registry-backed matchmaker.

    Example:
        >>> engine = MatchmakingEngine()
        >>> engine.register_profile(PlayerProfile(id="a", rating=1200, skill=0.6))
        >>> engine.register_profile(PlayerProfile(id="b", rating=1220, skill=0.62))
        >>> [c.player_id for c in engine.find_matches(MatchRequest(player_id="a"))]
        ['b']
    """

    def __init__(
        self,
        config: MatchcoreConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        """
        Args:
            config: Tunables; defaults reproduce the documented behavior
            rng: Random source for centroid initialization (overrides
                config.clustering.seed)
        """
        self.config = config or MatchcoreConfig()
        validate_config(self.config)

        self._profiles: dict[str, PlayerProfile] = {}
        self._vectors: dict[str, tuple[float, ...]] = {}
        self._elo = EloRating(self.config.rating.k_factor)
        self._clusterer = KMeans(self.config.clustering.k, seed=self.config.clustering.seed, rng=rng)
        self._lock = ReadWriteLock()

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def register_profile(self, profile: PlayerProfile) -> None:
        """Insert or overwrite a profile and cache its feature vector."""
        with self._lock.write_locked():
            self._store(profile.copy())
        logger.debug(f"Registered profile {profile.id} (rating={profile.rating})")

    def update_rating(self, player_a: str, player_b: str, result_a: float) -> tuple[int, int]:
        """
        Apply an Elo update after a head-to-head result.

        Args:
            player_a: Id of the first player
            player_b: Id of the second player
            result_a: Player A's score (1 win, 0.5 draw, 0 loss); B gets 1 - result_a

        Returns:
            Tuple of (new_rating_a, new_rating_b)

        Raises:
            PlayerNotFoundError: If either player is not registered
            InvalidInputError: If both ids are the same or result_a is invalid
        """
        if player_a == player_b:
            raise InvalidInputError(f"Cannot rate player '{player_a}' against themselves")

        with self._lock.write_locked():
            a = self._require(player_a)
            b = self._require(player_b)
            new_a, new_b = self._elo.update_pair(a.rating, b.rating, result_a)
            old_a, old_b = a.rating, b.rating
            a.rating = new_a
            b.rating = new_b
            self._store(a)
            self._store(b)

        logger.info(
            f"Rating update {player_a} vs {player_b} ({result_a}): "
            f"{old_a} -> {new_a}, {old_b} -> {new_b}"
        )
        return new_a, new_b

    def rebuild_clusters(self) -> bool:
        """
        Refresh every cached vector and refit the clusterer.

        Returns:
            True if clustering ran, False if there were too few profiles
        """
        with self._lock.write_locked():
            for player_id, profile in self._profiles.items():
                self._vectors[player_id] = profile_to_vector(profile)

            count = len(self._vectors)
            if count < self.config.clustering.min_profiles:
                logger.debug(
                    f"Skipping cluster rebuild: {count} profiles "
                    f"(need {self.config.clustering.min_profiles})"
                )
                return False

            vectors = list(self._vectors.values())
            with PerformanceMonitor(f"Cluster rebuild over {count} profiles"):
                self._clusterer.fit(vectors, iterations=self.config.clustering.rebuild_iterations)
            logger.debug(
                f"Clusters rebuilt: {len(self._clusterer.get_centroids())} centroids, "
                f"inertia={self._clusterer.inertia(vectors):.4f}"
            )
        return True

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find_matches(
        self, request: MatchRequest, max_candidates: int | None = None
    ) -> list[MatchCandidate]:
        """
        Rank every compatible opponent for the requesting player.

        Args:
            request: Requesting player plus optional constraints
            max_candidates: Result cap (default from config, bounded by limits)

        Returns:
            Candidates sorted by descending score

        Raises:
            PlayerNotFoundError: If the requesting player is not registered
        """
        limit = self._candidate_limit(max_candidates)
        with self._lock.read_locked():
            return self._rank_candidates(request, limit)

    def build_lobby(self, request: MatchRequest) -> Lobby | None:
        """
        Assemble two rating-balanced teams around the requesting player.

        Takes the requester plus the top 2 * team_size - 1 candidates and
        splits them with a snake draft. The team holding the requester is
        always team_a.

        Returns:
            The lobby, or None if too few candidates pass the filters

        Raises:
            PlayerNotFoundError: If the requesting player is not registered
            InvalidInputError: If team_size is below 1 or the lobby needs more
                candidates than limits.max_candidates allows
        """
        team_size = (
            request.team_size
            if request.team_size is not None
            else self.config.matchmaking.default_team_size
        )
        if team_size < 1:
            raise InvalidInputError(f"team_size must be >= 1, got {team_size}")
        needed = 2 * team_size - 1
        if needed > self.config.limits.max_candidates:
            raise InvalidInputError(
                f"team_size {team_size} needs {needed} candidates, "
                f"above max_candidates {self.config.limits.max_candidates}"
            )
        limit = self._candidate_limit(needed)

        with self._lock.read_locked():
            candidates = self._rank_candidates(request, limit)
            if len(candidates) < needed:
                logger.debug(
                    f"Lobby for {request.player_id}: {len(candidates)} candidates, need {needed}"
                )
                return None
            ids = [request.player_id] + [c.player_id for c in candidates]
            ratings = {pid: self._profiles[pid].rating for pid in ids}

        team_a, team_b = snake_draft(ratings)
        if request.player_id not in team_a:
            team_a, team_b = team_b, team_a
        return Lobby(team_a=team_a, team_b=team_b, rating_gap=team_rating_gap(team_a, team_b, ratings))

    def get_profile(self, player_id: str) -> PlayerProfile:
        """Return a copy of a registered profile."""
        with self._lock.read_locked():
            return self._require(player_id).copy()

    def get_vector(self, player_id: str) -> tuple[float, ...]:
        """Return the cached feature vector of a registered player."""
        with self._lock.read_locked():
            self._require(player_id)
            return self._vectors[player_id]

    def get_centroids(self) -> np.ndarray:
        """Read-only snapshot of the current centroids (empty before clustering)."""
        with self._lock.read_locked():
            return self._clusterer.get_centroids()

    def cluster_inertia(self) -> float:
        """Sum of squared distances from every cached vector to its nearest centroid."""
        with self._lock.read_locked():
            return self._clusterer.inertia(list(self._vectors.values()))

    def cluster_assignments(self) -> dict[str, int | None]:
        """Nearest-centroid index for every registered player."""
        with self._lock.read_locked():
            return {pid: self._clusterer.predict(v) for pid, v in self._vectors.items()}

    def player_ids(self) -> list[str]:
        with self._lock.read_locked():
            return list(self._profiles)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._profiles)

    def __contains__(self, player_id: object) -> bool:
        with self._lock.read_locked():
            return player_id in self._profiles

    # -------------------------------------------------------------------------
    # Internals (caller holds the lock)
    # -------------------------------------------------------------------------

    def _store(self, profile: PlayerProfile) -> None:
        self._profiles[profile.id] = profile
        self._vectors[profile.id] = profile_to_vector(profile)

    def _require(self, player_id: str) -> PlayerProfile:
        profile = self._profiles.get(player_id)
        if profile is None:
            raise PlayerNotFoundError(player_id)
        return profile

    def _candidate_limit(self, requested: int | None) -> int:
        limit = requested if requested is not None else self.config.matchmaking.default_max_candidates
        if limit < 0:
            raise InvalidInputError(f"max_candidates must be >= 0, got {limit}")
        if limit > self.config.limits.max_candidates:
            logger.debug(
                f"Capping max_candidates {limit} to {self.config.limits.max_candidates}"
            )
            limit = self.config.limits.max_candidates
        return limit

    def _rank_candidates(self, request: MatchRequest, limit: int) -> list[MatchCandidate]:
        me = self._require(request.player_id)
        mm = self.config.matchmaking
        my_vector = self._vectors.get(me.id) or profile_to_vector(me)
        my_cluster = self._clusterer.predict(my_vector)
        tolerance = request.tolerance if request.tolerance is not None else mm.default_tolerance
        latency_ref = max(request.max_latency_ms or mm.latency_reference_ms, mm.latency_reference_ms)

        candidates: list[MatchCandidate] = []
        for player_id, profile in self._profiles.items():
            if player_id == me.id:
                continue
            if (
                request.region_preference
                and profile.region
                and profile.region != request.region_preference
            ):
                continue
            if request.max_latency_ms is not None and (
                profile.latency_ms is None or profile.latency_ms > request.max_latency_ms
            ):
                continue

            rating_diff = abs(profile.rating - me.rating)
            if rating_diff > tolerance:
                continue

            vector = self._vectors.get(player_id) or profile_to_vector(profile)
            distance = euclidean(my_vector, vector)
            latency = profile.latency_ms if profile.latency_ms is not None else DEFAULT_LATENCY_MS
            latency_score = 1 - clamp(latency / latency_ref, 0.0, 1.0)
            same_cluster = my_cluster is not None and self._clusterer.predict(vector) == my_cluster

            score = (
                mm.distance_weight * (1 / (1 + distance))
                + mm.rating_weight * (1 - rating_diff / max(tolerance, 1))
                + mm.latency_weight * latency_score
                + (mm.cluster_bonus if same_cluster else 0.0)
            )
            reason = f"rating diff {rating_diff:.0f}, latency {latency:.0f}ms"
            if same_cluster:
                reason = f"same cluster, {reason}"
            candidates.append(MatchCandidate(player_id=player_id, score=score, reason=reason))

        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates[:limit]
