"""
Health check router for observability.
"""
from fastapi import APIRouter

from rankfeed.api.dependencies import get_feed_repository, get_ranking_repository
from rankfeed.config import get_settings

router = APIRouter(tags=["health"])

GLOBAL_CLUSTER_LABEL = "global"


@router.get("/health", summary="Health Check")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check() -> dict:
    """
    Readiness check for Kubernetes.
    Reports stored ranking generations and configured collaborators.
    """
    settings = get_settings()
    clusters = get_ranking_repository().clusters()

    return {
        "status": "ready",
        "rankings": {
            (cluster if cluster is not None else GLOBAL_CLUSTER_LABEL): summary
            for cluster, summary in clusters.items()
        },
        "feeds_stored": get_feed_repository().count(),
        "dependencies": {
            "score_service": settings.SCORE_SERVICE_URL,
            "user_service": settings.USER_SERVICE_URL,
            "content_service": settings.CONTENT_SERVICE_URL,
            "ranking_service": settings.RANKING_SERVICE_URL or "in-process",
        },
    }
