"""
Domain models using Pydantic.
All data structures for ranking computation and feed composition.
Attributes are snake_case in Python and camelCase on the wire.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    """Immutable variant for records that are never mutated after creation."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# Domain Models (Internal)
# =============================================================================


class ScoreRecord(CamelModel):
    """
    Raw popularity score for a content item.
    Produced by the score service; read-only input to the ranker.
    """

    post_id: str = Field(
        ...,
        validation_alias=AliasChoices("postId", "post_id", "contentId"),
        description="Content item identifier",
    )
    raw_score: float = Field(
        ...,
        allow_inf_nan=False,
        validation_alias=AliasChoices("score", "rawScore", "raw_score", "scoreValue"),
        description="Undecayed popularity score",
    )
    calculated_at: datetime = Field(
        ...,
        validation_alias=AliasChoices(
            "calculatedAt", "calculated_at", "updatedAt"
        ),
        description="When the raw score was computed",
    )


class RankingEntry(FrozenCamelModel):
    """One ranked post within a cluster. Replaced as a full set, never edited."""

    post_id: str = Field(..., description="Content item identifier")
    rank: int = Field(..., ge=1, description="1-based position within the cluster")
    decayed_score: float = Field(..., description="Raw score after time decay")
    cluster: Optional[str] = Field(
        default=None,
        description="Cluster name, null for the global ranking",
    )
    calculated_at: datetime = Field(..., description="When the ranking was built")


class PostMetadata(CamelModel):
    """Display metadata resolved by the content service."""

    id: str
    title: Optional[str] = None
    author_id: Optional[str] = None


class FeedReason(str, Enum):
    """Why an item was included in a feed."""

    RANKING = "ranking"
    FOLLOWING = "following"


class FeedItem(FrozenCamelModel):
    """Single item in a generated feed."""

    post_id: str = Field(..., description="Content item identifier")
    title: str = Field(..., description="Post title")
    author_id: Optional[str] = Field(default=None, description="Author user ID")
    score: float = Field(..., description="Decayed ranking score")
    reason: FeedReason = Field(default=FeedReason.RANKING)


class Feed(FrozenCamelModel):
    """Persisted snapshot of one feed generation."""

    feed_id: str
    user_id: str
    items: List[FeedItem] = Field(default_factory=list)
    generated_at: datetime


# =============================================================================
# API Models (External)
# =============================================================================


class RebuildRankingsRequest(CamelModel):
    """Body for POST /rankings/rebuild."""

    cluster_type: Optional[str] = Field(
        default=None,
        description="Cluster to rebuild, omitted for the global ranking",
    )


class RebuildRankingsResponse(CamelModel):
    """Result of a ranking rebuild."""

    message: str
    cluster_type: Optional[str] = None
    updated_count: int


class GenerateFeedRequest(CamelModel):
    """Body for POST /feeds/user."""

    user_id: Optional[str] = Field(default=None, description="Feed owner")


class GenerateFeedResponse(CamelModel):
    """Generated feed returned to the caller."""

    feed_id: str
    items: List[FeedItem]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: Dict[str, Any] = Field(..., description="Error details")
