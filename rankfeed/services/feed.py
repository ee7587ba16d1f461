"""
Feed service - fan-out orchestrator.
Fetches the ranking and the user's following list concurrently, resolves
post metadata, merges everything into a Feed and persists the snapshot.
Any dependency failure aborts the whole generation; nothing is persisted.
"""
import asyncio
import logging
import time
import uuid
from typing import Awaitable, Dict, List, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, Field

from rankfeed.core.exceptions import (
    DependencyUnavailableError,
    NotFoundError,
    ValidationError,
)
from rankfeed.core.telemetry import get_tracer
from rankfeed.models.interfaces import (
    ContentMetadataClient,
    FeedRepository,
    RankingReader,
    SocialGraphClient,
)
from rankfeed.models.schemas import (
    Feed,
    FeedItem,
    FeedReason,
    PostMetadata,
    RankingEntry,
)
from rankfeed.services.ranking import Clock, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNTITLED = "Untitled"


class FeedConfig(BaseModel):
    """Feed composition settings."""

    ranking_cluster: Optional[str] = Field(
        default=None,
        description="Cluster feeding the ranking step, None for global",
    )
    ranking_limit: int = Field(default=10, ge=1, description="Ranked posts fetched")
    max_items: int = Field(default=50, ge=1, description="Cap on feed length")


class FeedAggregator:
    """
    Composes a user's feed from independent collaborators.

    Responsibilities:
    - Issue ranking and social-graph calls concurrently
    - Resolve metadata for ranked posts
    - Merge in rank order, dropping unresolved posts
    - Persist one immutable Feed per call
    """

    def __init__(
        self,
        ranking_reader: RankingReader,
        social_graph: SocialGraphClient,
        content_metadata: ContentMetadataClient,
        feed_repo: FeedRepository,
        config: Optional[FeedConfig] = None,
        clock: Clock = utc_now,
    ) -> None:
        """
        Initialize feed aggregator with dependencies.

        Args:
            ranking_reader: Source of the current ranking
            social_graph: Client answering who a user follows
            content_metadata: Client resolving post metadata
            feed_repo: Repository for generated feeds
            config: Composition settings
            clock: Timestamp source for generated feeds
        """
        self._ranking_reader = ranking_reader
        self._social_graph = social_graph
        self._content_metadata = content_metadata
        self._feed_repo = feed_repo
        self._config = config or FeedConfig()
        self._clock = clock

    async def generate_feed(self, user_id: str) -> Feed:
        """
        Generate and persist a feed for ``user_id``.

        Raises:
            ValidationError: If ``user_id`` is blank
            DependencyUnavailableError: If any collaborator fails; the
                original exception is chained as ``__cause__``
        """
        if not user_id or not user_id.strip():
            raise ValidationError("userId is required", details={"field": "userId"})

        start_time = time.time()
        with get_tracer().start_as_current_span("feed.generate") as span:
            span.set_attribute("feed.user_id", user_id)
            try:
                rankings, following = await self._fetch_rankings_and_following(user_id)
                post_ids = _unique_post_ids(rankings)
                posts = await self._call(
                    "content-service", self._content_metadata.get_posts(post_ids)
                ) if post_ids else []
            except DependencyUnavailableError as exc:
                exc.with_operation("feed generation")
                logger.error(
                    f"Feed generation aborted: user={user_id}, "
                    f"dependency={exc.dependency}, reason={exc.reason}",
                    extra={"user_id": user_id, "dependency": exc.dependency},
                )
                raise

            # Following-based items are not merged yet; the list only feeds logs.
            logger.debug(f"User {user_id} follows {len(following)} users")

            items = self._merge(rankings, posts)
            feed = Feed(
                feed_id=str(uuid.uuid4()),
                user_id=user_id,
                items=items,
                generated_at=self._clock(),
            )
            self._feed_repo.save(feed)
            span.set_attribute("feed.items", len(items))

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Feed generated: user={user_id}, feed={feed.feed_id}, "
            f"items={len(items)}/{len(rankings)}, elapsed_ms={elapsed_ms:.2f}",
            extra={
                "user_id": user_id,
                "feed_id": feed.feed_id,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return feed

    async def get_feed(self, feed_id: str) -> Feed:
        """Fetch a previously generated feed."""
        feed = self._feed_repo.get(feed_id)
        if feed is None:
            raise NotFoundError("Feed", feed_id)
        return feed

    async def get_latest_feed(self, user_id: str) -> Feed:
        """Most recent feed generated for ``user_id``."""
        if not user_id or not user_id.strip():
            raise ValidationError("userId is required", details={"field": "userId"})
        feed = self._feed_repo.latest_for_user(user_id)
        if feed is None:
            raise NotFoundError("Feed for user", user_id)
        return feed

    async def _fetch_rankings_and_following(
        self,
        user_id: str,
    ) -> Tuple[List[RankingEntry], List[str]]:
        """Run the two independent calls concurrently, cancel both on failure."""
        ranking_task = asyncio.ensure_future(self._call(
            "ranking",
            self._ranking_reader.get_rankings(
                self._config.ranking_cluster, self._config.ranking_limit
            ),
        ))
        following_task = asyncio.ensure_future(self._call(
            "user-service", self._social_graph.get_following(user_id)
        ))
        try:
            rankings, following = await asyncio.gather(ranking_task, following_task)
        except BaseException:
            ranking_task.cancel()
            following_task.cancel()
            raise
        return sorted(rankings, key=lambda e: e.rank), following

    @staticmethod
    async def _call(dependency: str, awaitable: Awaitable[T]) -> T:
        """Await a collaborator call, normalizing failures."""
        with get_tracer().start_as_current_span(f"feed.dependency.{dependency}"):
            try:
                return await awaitable
            except DependencyUnavailableError:
                raise
            except asyncio.TimeoutError as exc:
                raise DependencyUnavailableError(dependency, "timeout") from exc
            except Exception as exc:
                raise DependencyUnavailableError(dependency, repr(exc)) from exc

    def _merge(
        self,
        rankings: Sequence[RankingEntry],
        posts: Sequence[PostMetadata],
    ) -> List[FeedItem]:
        """One item per resolved ranking entry, in rank order."""
        posts_by_id: Dict[str, PostMetadata] = {post.id: post for post in posts}
        items: List[FeedItem] = []
        seen = set()

        for entry in rankings:
            if len(items) >= self._config.max_items:
                break
            post = posts_by_id.get(entry.post_id)
            if post is None or entry.post_id in seen:
                continue
            items.append(
                FeedItem(
                    post_id=entry.post_id,
                    title=post.title or UNTITLED,
                    author_id=post.author_id,
                    score=entry.decayed_score,
                    reason=FeedReason.RANKING,
                )
            )
            seen.add(entry.post_id)

        return items


def _unique_post_ids(rankings: Sequence[RankingEntry]) -> List[str]:
    """Post IDs in rank order without duplicates."""
    seen = set()
    post_ids = []
    for entry in rankings:
        if entry.post_id not in seen:
            seen.add(entry.post_id)
            post_ids.append(entry.post_id)
    return post_ids
