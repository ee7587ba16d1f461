"""
Dependency injection container.
Creates and wires all application components.
Uses FastAPI's dependency injection system.
"""
from functools import lru_cache
from typing import List, Union

from rankfeed.clients.base import ServiceClient, ServiceEndpoint
from rankfeed.clients.http import (
    HttpContentMetadataClient,
    HttpRankingClient,
    HttpScoreSource,
    HttpSocialGraphClient,
)
from rankfeed.config import get_settings
from rankfeed.repositories.memory import InMemoryFeedRepository, InMemoryRankingRepository
from rankfeed.services.feed import FeedAggregator, FeedConfig
from rankfeed.services.ranking import DecayRanker, RankingConfig, RankingQuery


def _endpoint(name: str, base_url: str, timeout_ms: int) -> ServiceEndpoint:
    return ServiceEndpoint(name=name, base_url=base_url, timeout_sec=timeout_ms / 1000)


# =============================================================================
# Singleton Instances (Application Lifetime)
# =============================================================================


@lru_cache()
def get_ranking_repository() -> InMemoryRankingRepository:
    """Get singleton ranking store."""
    return InMemoryRankingRepository()


@lru_cache()
def get_feed_repository() -> InMemoryFeedRepository:
    """Get singleton feed store."""
    return InMemoryFeedRepository()


@lru_cache()
def get_score_source() -> HttpScoreSource:
    """Get singleton score service client."""
    settings = get_settings()
    return HttpScoreSource(_endpoint(
        "score-service", settings.SCORE_SERVICE_URL, settings.SCORE_SERVICE_TIMEOUT_MS
    ))


@lru_cache()
def get_social_graph_client() -> HttpSocialGraphClient:
    """Get singleton user service client."""
    settings = get_settings()
    return HttpSocialGraphClient(_endpoint(
        "user-service", settings.USER_SERVICE_URL, settings.USER_SERVICE_TIMEOUT_MS
    ))


@lru_cache()
def get_content_metadata_client() -> HttpContentMetadataClient:
    """Get singleton content service client."""
    settings = get_settings()
    return HttpContentMetadataClient(_endpoint(
        "content-service", settings.CONTENT_SERVICE_URL, settings.CONTENT_SERVICE_TIMEOUT_MS
    ))


@lru_cache()
def get_remote_ranking_client() -> HttpRankingClient:
    """Get singleton ranking service client (split deployments only)."""
    settings = get_settings()
    return HttpRankingClient(_endpoint(
        "ranking-service", settings.RANKING_SERVICE_URL or "", settings.RANKING_SERVICE_TIMEOUT_MS
    ))


# =============================================================================
# Request-Scoped Dependencies (Per-Request Lifetime)
# =============================================================================


def get_decay_ranker() -> DecayRanker:
    """Get ranker wired to the score source and ranking store."""
    settings = get_settings()
    return DecayRanker(
        score_source=get_score_source(),
        repository=get_ranking_repository(),
        config=RankingConfig(decay_factor=settings.DECAY_FACTOR),
    )


def get_ranking_query() -> RankingQuery:
    """Get read-only ranking accessor."""
    return RankingQuery(repository=get_ranking_repository())


def get_feed_ranking_reader() -> Union[RankingQuery, HttpRankingClient]:
    """In-process ranking unless a remote ranking service is configured."""
    if get_settings().RANKING_SERVICE_URL:
        return get_remote_ranking_client()
    return get_ranking_query()


def get_feed_aggregator() -> FeedAggregator:
    """
    Get feed aggregator with all dependencies wired.
    This is the main entry point for the feed endpoints.
    """
    settings = get_settings()
    return FeedAggregator(
        ranking_reader=get_feed_ranking_reader(),
        social_graph=get_social_graph_client(),
        content_metadata=get_content_metadata_client(),
        feed_repo=get_feed_repository(),
        config=FeedConfig(
            ranking_cluster=settings.FEED_RANKING_CLUSTER,
            ranking_limit=settings.FEED_RANKING_LIMIT,
            max_items=settings.FEED_MAX_ITEMS,
        ),
    )


# =============================================================================
# Cleanup Functions
# =============================================================================


def _created_clients() -> List[ServiceClient]:
    """Clients that were actually instantiated."""
    factories = (
        get_score_source,
        get_social_graph_client,
        get_content_metadata_client,
        get_remote_ranking_client,
    )
    return [factory() for factory in factories if factory.cache_info().currsize]


async def close_clients() -> None:
    """Close open HTTP connections (application shutdown)."""
    for client in _created_clients():
        await client.close()


def clear_caches() -> None:
    """Clear all cached singleton instances (for testing)."""
    get_ranking_repository.cache_clear()
    get_feed_repository.cache_clear()
    get_score_source.cache_clear()
    get_social_graph_client.cache_clear()
    get_content_metadata_client.cache_clear()
    get_remote_ranking_client.cache_clear()
