"""
Ranking services.
DecayRanker turns raw popularity scores into a time-decayed ranking per
cluster; RankingQuery reads the current ranking back.
"""
import logging
import math
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel, Field

from rankfeed.core.exceptions import DependencyUnavailableError, ValidationError
from rankfeed.core.telemetry import get_tracer
from rankfeed.models.interfaces import RankingRepository, ScoreSource
from rankfeed.models.schemas import RankingEntry, ScoreRecord

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600.0

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RankingConfig(BaseModel):
    """Tuning values for ranking computation."""

    decay_factor: float = Field(default=0.01, gt=0, description="Per-hour decay rate")


# =============================================================================
# Decay Math
# =============================================================================


def hours_elapsed(calculated_at: datetime, now: datetime) -> float:
    """
    Hours between ``calculated_at`` and ``now``, never negative.
    Naive timestamps are taken as UTC.
    """
    if calculated_at.tzinfo is None:
        calculated_at = calculated_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max(0.0, (now - calculated_at).total_seconds() / SECONDS_PER_HOUR)


def decay_multiplier(hours: float, decay_factor: float) -> float:
    """exp(-k * h): 1.0 at h=0, strictly decreasing, always in (0, 1]."""
    return math.exp(-decay_factor * max(0.0, hours))


def compute_rankings(
    records: Sequence[ScoreRecord],
    cluster: Optional[str],
    now: datetime,
    decay_factor: float,
) -> List[RankingEntry]:
    """
    Decay, sort and rank score records.

    The sort is stable: records with equal decayed scores keep the order in
    which the score source returned them.
    """
    decayed = [
        (record, record.raw_score * decay_multiplier(
            hours_elapsed(record.calculated_at, now), decay_factor
        ))
        for record in records
    ]
    decayed.sort(key=lambda pair: pair[1], reverse=True)

    return [
        RankingEntry(
            post_id=record.post_id,
            rank=index + 1,
            decayed_score=score,
            cluster=cluster,
            calculated_at=now,
        )
        for index, (record, score) in enumerate(decayed)
    ]


def normalize_cluster(cluster: Optional[str]) -> Optional[str]:
    """Blank cluster names mean the global ranking."""
    if cluster is None:
        return None
    cluster = cluster.strip()
    return cluster or None


# =============================================================================
# Decay Ranker
# =============================================================================


class DecayRanker:
    """
    Rebuilds the stored ranking of a cluster from the score source.

    A failed fetch propagates and an empty score set is a no-op: in both
    cases the previously stored ranking stays readable.
    """

    def __init__(
        self,
        score_source: ScoreSource,
        repository: RankingRepository,
        config: Optional[RankingConfig] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._score_source = score_source
        self._repository = repository
        self._config = config or RankingConfig()
        self._clock = clock

    async def rebuild_rankings(self, cluster: Optional[str] = None) -> int:
        """
        Recompute and atomically replace the ranking of ``cluster``.

        Args:
            cluster: Cluster name, None for the global ranking

        Returns:
            Number of entries written (0 when there are no scores)

        Raises:
            DependencyUnavailableError: If the score source fails
        """
        cluster = normalize_cluster(cluster)
        start_time = time.time()

        with get_tracer().start_as_current_span("ranking.rebuild") as span:
            span.set_attribute("ranking.cluster", cluster or "")
            try:
                # TODO: pass the cluster through once the score service can filter by it
                records = await self._score_source.fetch_scores()
            except DependencyUnavailableError as exc:
                exc.with_operation("ranking rebuild")
                raise
            except Exception as exc:
                raise DependencyUnavailableError(
                    "score-service", repr(exc), operation="ranking rebuild"
                ) from exc

            if not records:
                logger.warning(
                    f"No scores available, keeping current ranking: cluster={cluster}",
                    extra={"cluster": cluster},
                )
                return 0

            entries = compute_rankings(
                records, cluster, self._clock(), self._config.decay_factor
            )
            version = self._repository.replace_cluster(cluster, entries)
            span.set_attribute("ranking.count", len(entries))

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Rankings rebuilt: cluster={cluster}, entries={len(entries)}, "
            f"version={version}, elapsed_ms={elapsed_ms:.2f}",
            extra={"cluster": cluster, "duration_ms": round(elapsed_ms, 2)},
        )
        return len(entries)


# =============================================================================
# Ranking Query
# =============================================================================


class RankingQuery:
    """Read-only access to the current ranking of a cluster."""

    def __init__(self, repository: RankingRepository) -> None:
        self._repository = repository

    async def get_rankings(
        self,
        cluster: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[RankingEntry]:
        """
        Entries of ``cluster`` ordered by rank, truncated to ``limit``.
        Unknown clusters yield an empty list.
        """
        if limit is not None and limit < 1:
            raise ValidationError(
                "limit must be a positive integer",
                details={"field": "limit", "value": limit},
            )
        return self._repository.list_cluster(normalize_cluster(cluster), limit)
