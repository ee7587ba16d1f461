"""Models package - domain entities and interfaces."""
from .interfaces import (
    ContentMetadataClient,
    FeedRepository,
    RankingReader,
    RankingRepository,
    ScoreSource,
    SocialGraphClient,
)
from .schemas import (
    ErrorResponse,
    Feed,
    FeedItem,
    FeedReason,
    GenerateFeedRequest,
    GenerateFeedResponse,
    PostMetadata,
    RankingEntry,
    RebuildRankingsRequest,
    RebuildRankingsResponse,
    ScoreRecord,
)

__all__ = [
    # Interfaces
    "ContentMetadataClient",
    "FeedRepository",
    "RankingReader",
    "RankingRepository",
    "ScoreSource",
    "SocialGraphClient",
    # Schemas
    "ErrorResponse",
    "Feed",
    "FeedItem",
    "FeedReason",
    "GenerateFeedRequest",
    "GenerateFeedResponse",
    "PostMetadata",
    "RankingEntry",
    "RebuildRankingsRequest",
    "RebuildRankingsResponse",
    "ScoreRecord",
]
