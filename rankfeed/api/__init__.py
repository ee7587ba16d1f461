"""API package - FastAPI routes and dependencies."""
from .dependencies import get_decay_ranker, get_feed_aggregator, get_ranking_query
from .routers import feeds_router, health_router, rankings_router

__all__ = [
    "feeds_router",
    "get_decay_ranker",
    "get_feed_aggregator",
    "get_ranking_query",
    "health_router",
    "rankings_router",
]
