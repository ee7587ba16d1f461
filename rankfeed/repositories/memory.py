"""
In-memory repository implementations.
Used for prototyping and testing.
Production would replace these with Postgres-backed implementations.
"""
import logging
import math
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from rankfeed.core.exceptions import DependencyUnavailableError
from rankfeed.models.schemas import Feed, PostMetadata, RankingEntry, ScoreRecord

logger = logging.getLogger(__name__)


# =============================================================================
# Ranking Store
# =============================================================================


class RankingGeneration(NamedTuple):
    """One complete, immutable ranking set for a cluster."""

    version: int
    entries: Tuple[RankingEntry, ...]
    created_at: datetime


class InMemoryRankingRepository:
    """
    Versioned snapshot store for ranking entries.

    A rebuild writes a whole new generation next to the current one and then
    moves the cluster's version pointer in a single step under the lock.
    Readers resolve the pointer under the same lock and iterate an immutable
    tuple, so they always see one complete generation.
    """

    def __init__(self) -> None:
        self._current: Dict[Optional[str], RankingGeneration] = {}
        self._versions: Dict[Optional[str], int] = {}
        self._lock = Lock()

    def replace_cluster(
        self,
        cluster: Optional[str],
        entries: Sequence[RankingEntry],
    ) -> int:
        """Atomically replace every entry of ``cluster``, return new version."""
        # Build and check the generation before touching shared state
        generation_entries = tuple(entries)
        self._check_generation(cluster, generation_entries)

        with self._lock:
            version = self._versions.get(cluster, 0) + 1
            self._versions[cluster] = version
            self._current[cluster] = RankingGeneration(
                version=version,
                entries=generation_entries,
                created_at=datetime.now(timezone.utc),
            )

        logger.debug(
            f"Ranking generation swapped: cluster={cluster}, version={version}, "
            f"entries={len(generation_entries)}"
        )
        return version

    def list_cluster(
        self,
        cluster: Optional[str],
        limit: Optional[int] = None,
    ) -> List[RankingEntry]:
        """Return current entries of ``cluster`` ordered by rank."""
        with self._lock:
            generation = self._current.get(cluster)
        if generation is None:
            return []
        if limit is None:
            return list(generation.entries)
        return list(generation.entries[:limit])

    def current_version(self, cluster: Optional[str]) -> Optional[int]:
        """Version of the generation readers currently see."""
        with self._lock:
            generation = self._current.get(cluster)
        return generation.version if generation else None

    def clusters(self) -> Dict[Optional[str], Dict[str, int]]:
        """Summary of stored clusters: version and entry count."""
        with self._lock:
            snapshot = dict(self._current)
        return {
            cluster: {"version": gen.version, "count": len(gen.entries)}
            for cluster, gen in snapshot.items()
        }

    @staticmethod
    def _check_generation(
        cluster: Optional[str],
        entries: Tuple[RankingEntry, ...],
    ) -> None:
        """Reject sets whose ranks are not 1..N in non-increasing score order."""
        previous_score: Optional[float] = None
        for position, entry in enumerate(entries, start=1):
            if entry.cluster != cluster:
                raise ValueError(
                    f"Entry {entry.post_id} belongs to cluster {entry.cluster!r}, "
                    f"expected {cluster!r}"
                )
            if entry.rank != position:
                raise ValueError(
                    f"Rank {entry.rank} at position {position} for cluster {cluster!r}"
                )
            if not math.isfinite(entry.decayed_score):
                raise ValueError(
                    f"Non-finite score {entry.decayed_score} for {entry.post_id} "
                    f"in cluster {cluster!r}"
                )
            if previous_score is not None and entry.decayed_score > previous_score:
                raise ValueError(
                    f"Decayed score increases at rank {entry.rank} for cluster {cluster!r}"
                )
            previous_score = entry.decayed_score


# =============================================================================
# Feed Store
# =============================================================================


class InMemoryFeedRepository:
    """
    Append-only feed history.
    Feeds are immutable once saved; there is no update path.
    """

    def __init__(self) -> None:
        self._feeds: Dict[str, Feed] = {}
        self._by_user: Dict[str, List[str]] = {}
        self._lock = Lock()

    def save(self, feed: Feed) -> None:
        """Persist a new feed snapshot."""
        with self._lock:
            if feed.feed_id in self._feeds:
                raise ValueError(f"Feed already stored: {feed.feed_id}")
            self._feeds[feed.feed_id] = feed
            self._by_user.setdefault(feed.user_id, []).append(feed.feed_id)

    def get(self, feed_id: str) -> Optional[Feed]:
        """Fetch a feed by ID, None if unknown."""
        with self._lock:
            return self._feeds.get(feed_id)

    def latest_for_user(self, user_id: str) -> Optional[Feed]:
        """Most recently generated feed for ``user_id``."""
        with self._lock:
            feed_ids = self._by_user.get(user_id)
            if not feed_ids:
                return None
            return self._feeds[feed_ids[-1]]

    def list_for_user(self, user_id: str) -> List[Feed]:
        """All feeds of ``user_id``, oldest first."""
        with self._lock:
            return [self._feeds[fid] for fid in self._by_user.get(user_id, [])]

    def count(self) -> int:
        """Total number of stored feeds."""
        with self._lock:
            return len(self._feeds)


# =============================================================================
# Collaborators (local development & tests)
# =============================================================================


class InMemoryScoreSource:
    """
    In-memory implementation of ScoreSource.
    Simulates the score service; can be switched offline to mimic an outage.
    """

    def __init__(self, records: Optional[Iterable[ScoreRecord]] = None) -> None:
        self._records: List[ScoreRecord] = list(records or [])
        self._available = True

    def set_records(self, records: Iterable[ScoreRecord]) -> None:
        self._records = list(records)

    def set_available(self, available: bool) -> None:
        self._available = available

    async def fetch_scores(self) -> List[ScoreRecord]:
        """Return a copy of the configured score set."""
        if not self._available:
            raise DependencyUnavailableError("score-service", "connection refused")
        return list(self._records)


class InMemorySocialGraph:
    """In-memory implementation of SocialGraphClient."""

    def __init__(self, following: Optional[Dict[str, List[str]]] = None) -> None:
        self._following = dict(following or {})

    def follow(self, user_id: str, target_id: str) -> None:
        self._following.setdefault(user_id, []).append(target_id)

    async def get_following(self, user_id: str) -> List[str]:
        """Return followed user IDs, empty for unknown users."""
        return list(self._following.get(user_id, []))


class InMemoryContentMetadata:
    """
    In-memory implementation of ContentMetadataClient.
    Unknown post IDs are silently omitted, like the content service does.
    """

    def __init__(self, posts: Optional[Iterable[PostMetadata]] = None) -> None:
        self._posts: Dict[str, PostMetadata] = {p.id: p for p in posts or []}
        self.requests: List[List[str]] = []

    def add_post(self, post: PostMetadata) -> None:
        self._posts[post.id] = post

    async def get_posts(self, post_ids: Sequence[str]) -> List[PostMetadata]:
        """Resolve known posts, in reverse request order."""
        self.requests.append(list(post_ids))
        # Reverse so callers cannot rely on response order
        return [self._posts[pid] for pid in reversed(post_ids) if pid in self._posts]
