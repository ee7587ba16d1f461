"""
Pytest configuration and fixtures.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from rankfeed.api.dependencies import (
    clear_caches,
    get_decay_ranker,
    get_feed_aggregator,
    get_ranking_query,
)
from rankfeed.main import app
from rankfeed.models.schemas import PostMetadata, ScoreRecord
from rankfeed.repositories.memory import (
    InMemoryContentMetadata,
    InMemoryFeedRepository,
    InMemoryRankingRepository,
    InMemoryScoreSource,
    InMemorySocialGraph,
)
from rankfeed.services.feed import FeedAggregator, FeedConfig
from rankfeed.services.ranking import DecayRanker, RankingConfig, RankingQuery

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Fixed clock value shared by ranker and aggregator."""
    return NOW


@pytest.fixture
def score_records():
    """Three posts; post-2 is older so decay pushes it below post-3."""
    return [
        ScoreRecord(post_id="post-1", raw_score=100.0, calculated_at=NOW),
        ScoreRecord(post_id="post-2", raw_score=90.0, calculated_at=NOW - timedelta(hours=50)),
        ScoreRecord(post_id="post-3", raw_score=80.0, calculated_at=NOW - timedelta(hours=1)),
    ]


@pytest.fixture
def score_source(score_records):
    """Fixture for in-memory ScoreSource."""
    return InMemoryScoreSource(score_records)


@pytest.fixture
def ranking_repo():
    """Fixture for in-memory ranking store."""
    return InMemoryRankingRepository()


@pytest.fixture
def feed_repo():
    """Fixture for in-memory feed store."""
    return InMemoryFeedRepository()


@pytest.fixture
def social_graph():
    """Fixture for in-memory social graph."""
    return InMemorySocialGraph({"user-1": ["author-a", "author-b"]})


@pytest.fixture
def content_metadata():
    """Fixture for in-memory content service with all three posts."""
    return InMemoryContentMetadata([
        PostMetadata(id="post-1", title="First", author_id="author-a"),
        PostMetadata(id="post-2", title="Second", author_id="author-b"),
        PostMetadata(id="post-3", title="Third", author_id="author-c"),
    ])


@pytest.fixture
def ranker(score_source, ranking_repo, now):
    """DecayRanker over the in-memory source and store."""
    return DecayRanker(
        score_source=score_source,
        repository=ranking_repo,
        config=RankingConfig(decay_factor=0.01),
        clock=lambda: now,
    )


@pytest.fixture
def ranking_query(ranking_repo):
    return RankingQuery(ranking_repo)


@pytest.fixture
def aggregator(ranking_query, social_graph, content_metadata, feed_repo, now):
    """FeedAggregator wired to in-memory collaborators."""
    return FeedAggregator(
        ranking_reader=ranking_query,
        social_graph=social_graph,
        content_metadata=content_metadata,
        feed_repo=feed_repo,
        config=FeedConfig(ranking_limit=10),
        clock=lambda: now,
    )


@pytest.fixture
def test_client(ranker, ranking_query, aggregator):
    """
    TestClient fixture with dependency overrides.
    Uses in-memory repositories and collaborators for isolation.
    """
    app.dependency_overrides[get_decay_ranker] = lambda: ranker
    app.dependency_overrides[get_ranking_query] = lambda: ranking_query
    app.dependency_overrides[get_feed_aggregator] = lambda: aggregator

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    clear_caches()
