"""
Repository and collaborator interfaces (abstractions).
Using Protocol for structural subtyping (duck typing with type hints).
Core services depend on these contracts, never on another service's storage.
"""
from typing import Dict, List, Optional, Protocol, Sequence, runtime_checkable

from rankfeed.models.schemas import Feed, PostMetadata, RankingEntry, ScoreRecord


@runtime_checkable
class ScoreSource(Protocol):
    """
    Source of raw popularity scores.
    Production: score service over HTTP.
    Testing: In-memory implementation.
    """

    async def fetch_scores(self) -> List[ScoreRecord]:
        """
        Fetch the full current score set.

        Returns:
            Score records, empty when no scores exist yet

        Raises:
            DependencyUnavailableError: If the source cannot be reached
        """
        ...


@runtime_checkable
class SocialGraphClient(Protocol):
    """Answers "who does user X follow"."""

    async def get_following(self, user_id: str) -> List[str]:
        """Return the user IDs followed by ``user_id``."""
        ...


@runtime_checkable
class ContentMetadataClient(Protocol):
    """Resolves post IDs to display metadata."""

    async def get_posts(self, post_ids: Sequence[str]) -> List[PostMetadata]:
        """
        Resolve a batch of post IDs.

        Unknown or deleted posts are omitted, so the result may be shorter
        than ``post_ids`` and its order is not significant.
        """
        ...


@runtime_checkable
class RankingReader(Protocol):
    """Read access to the current ranking of a cluster."""

    async def get_rankings(
        self,
        cluster: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[RankingEntry]:
        """Return entries ordered by rank, at most ``limit`` of them."""
        ...


@runtime_checkable
class RankingRepository(Protocol):
    """
    Storage for ranking entries, partitioned by cluster.
    Production: Postgres table with a per-cluster version pointer.
    Testing: In-memory implementation.
    """

    def replace_cluster(
        self,
        cluster: Optional[str],
        entries: Sequence[RankingEntry],
    ) -> int:
        """
        Atomically replace every entry of ``cluster``.

        Readers observe either the previous set or the complete new one.

        Returns:
            Version number of the new generation
        """
        ...

    def list_cluster(
        self,
        cluster: Optional[str],
        limit: Optional[int] = None,
    ) -> List[RankingEntry]:
        """Return current entries of ``cluster`` ordered by rank."""
        ...

    def clusters(self) -> Dict[Optional[str], Dict[str, int]]:
        """Summary of stored clusters: version and entry count."""
        ...


@runtime_checkable
class FeedRepository(Protocol):
    """Append-only storage of generated feeds."""

    def save(self, feed: Feed) -> None:
        """Persist a new feed snapshot."""
        ...

    def get(self, feed_id: str) -> Optional[Feed]:
        """Fetch a feed by ID, None if unknown."""
        ...

    def latest_for_user(self, user_id: str) -> Optional[Feed]:
        """Most recently generated feed for ``user_id``."""
        ...

    def list_for_user(self, user_id: str) -> List[Feed]:
        """All feeds of ``user_id``, oldest first."""
        ...
