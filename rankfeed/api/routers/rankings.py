"""
Rankings API router.
POST /rankings/rebuild recomputes a cluster, GET /rankings reads it back.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from rankfeed.api.dependencies import get_decay_ranker, get_ranking_query
from rankfeed.models.schemas import (
    ErrorResponse,
    RankingEntry,
    RebuildRankingsRequest,
    RebuildRankingsResponse,
)
from rankfeed.services.ranking import DecayRanker, RankingQuery, normalize_cluster

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rankings", tags=["rankings"])


@router.post(
    "/rebuild",
    response_model=RebuildRankingsResponse,
    summary="Rebuild Rankings",
    description="""
    Recompute the time-decayed ranking of a cluster from the score service
    and atomically replace the stored ranking.

    Omit `clusterType` to rebuild the global ranking. When the score service
    has no scores the current ranking is kept and `updatedCount` is 0.
    """,
    responses={
        500: {"model": ErrorResponse, "description": "Score service unavailable"},
    },
)
async def rebuild_rankings(
    request: Optional[RebuildRankingsRequest] = Body(default=None),
    ranker: DecayRanker = Depends(get_decay_ranker),
) -> RebuildRankingsResponse:
    cluster = normalize_cluster(request.cluster_type if request else None)
    updated_count = await ranker.rebuild_rankings(cluster)

    message = (
        "Rankings rebuilt successfully"
        if updated_count
        else "No scores available; existing rankings kept"
    )
    return RebuildRankingsResponse(
        message=message,
        cluster_type=cluster,
        updated_count=updated_count,
    )


@router.get(
    "",
    response_model=List[RankingEntry],
    summary="Get Rankings",
    description="""
    Current ranking of a cluster ordered by rank. Omit `clusterType` for the
    global ranking. Unknown clusters return an empty array.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid query parameter"},
    },
)
async def get_rankings(
    cluster_type: Optional[str] = Query(
        default=None,
        alias="clusterType",
        description="Cluster name",
    ),
    limit: Optional[int] = Query(
        default=None,
        ge=1,
        description="Maximum number of entries",
    ),
    query: RankingQuery = Depends(get_ranking_query),
) -> List[RankingEntry]:
    return await query.get_rankings(cluster_type, limit)
