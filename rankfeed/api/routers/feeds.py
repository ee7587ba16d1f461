"""
Feeds API router.
Generates user feeds and serves previously generated snapshots.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from rankfeed.api.dependencies import get_feed_aggregator
from rankfeed.core.exceptions import ValidationError
from rankfeed.models.schemas import (
    ErrorResponse,
    Feed,
    GenerateFeedRequest,
    GenerateFeedResponse,
)
from rankfeed.services.feed import FeedAggregator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feeds", tags=["feeds"])


@router.post(
    "/user",
    response_model=GenerateFeedResponse,
    summary="Generate User Feed",
    description="""
    Build a feed for the user from the current ranking, the user's social
    graph and post metadata, and store it as a new snapshot.

    Items keep ranking order; posts the content service cannot resolve are
    left out. Any dependency failure fails the request without storing a feed.
    """,
    responses={
        400: {"model": ErrorResponse, "description": "userId missing"},
        500: {"model": ErrorResponse, "description": "Dependency failure"},
    },
)
async def generate_user_feed(
    request: Optional[GenerateFeedRequest] = Body(default=None),
    aggregator: FeedAggregator = Depends(get_feed_aggregator),
) -> GenerateFeedResponse:
    user_id = request.user_id if request else None
    if not user_id or not user_id.strip():
        raise ValidationError("userId is required", details={"field": "userId"})

    feed = await aggregator.generate_feed(user_id)
    return GenerateFeedResponse(feed_id=feed.feed_id, items=feed.items)


@router.get(
    "/latest",
    response_model=Feed,
    summary="Latest Feed For User",
    responses={
        400: {"model": ErrorResponse, "description": "userId missing"},
        404: {"model": ErrorResponse, "description": "User has no feed yet"},
    },
)
async def get_latest_feed(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    aggregator: FeedAggregator = Depends(get_feed_aggregator),
) -> Feed:
    if not user_id:
        raise ValidationError("userId is required", details={"field": "userId"})
    return await aggregator.get_latest_feed(user_id)


@router.get(
    "/{feed_id}",
    response_model=Feed,
    summary="Get Feed By ID",
    responses={404: {"model": ErrorResponse, "description": "Unknown feed"}},
)
async def get_feed(
    feed_id: str,
    aggregator: FeedAggregator = Depends(get_feed_aggregator),
) -> Feed:
    return await aggregator.get_feed(feed_id)
