"""
HTTP implementations of the collaborator contracts.

- Score service:    GET /scores                      -> [{postId, score, calculatedAt}]
- User service:     GET /users/{id}/following        -> {following: [...]}
- Content service:  GET /posts?postIds=a,b           -> [{id, title, authorId}]
- Ranking service:  GET /rankings?clusterType=&limit -> [RankingEntry]
"""
import logging
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from rankfeed.clients.base import ServiceClient
from rankfeed.models.schemas import PostMetadata, RankingEntry, ScoreRecord

logger = logging.getLogger(__name__)


class HttpScoreSource(ServiceClient):
    """ScoreSource backed by the score service."""

    async def fetch_scores(self) -> List[ScoreRecord]:
        """
        All current score records.

        A payload with any invalid record (missing fields, NaN or infinite
        score) fails as a whole so a rebuild never drops posts silently.
        """
        payload = await self._get_json("/scores")
        if not isinstance(payload, list):
            raise self._unavailable("expected a JSON array from /scores")

        records: List[ScoreRecord] = []
        for index, raw in enumerate(payload):
            try:
                records.append(ScoreRecord.model_validate(raw))
            except PydanticValidationError as exc:
                raise self._unavailable(
                    f"invalid score record at index {index}: {raw!r}"
                ) from exc
        return records


class HttpSocialGraphClient(ServiceClient):
    """SocialGraphClient backed by the user service."""

    async def get_following(self, user_id: str) -> List[str]:
        payload = await self._get_json(f"/users/{quote(user_id, safe='')}/following")
        if not isinstance(payload, dict):
            raise self._unavailable("expected a JSON object from /following")

        following = payload.get("following") or []
        if not isinstance(following, list):
            raise self._unavailable("'following' is not a list")
        return [str(uid) for uid in following]


class HttpContentMetadataClient(ServiceClient):
    """ContentMetadataClient backed by the content service."""

    async def get_posts(self, post_ids: Sequence[str]) -> List[PostMetadata]:
        if not post_ids:
            return []

        payload = await self._get_json("/posts", params={"postIds": ",".join(post_ids)})
        if not isinstance(payload, list):
            raise self._unavailable("expected a JSON array from /posts")

        posts: List[PostMetadata] = []
        for raw in payload:
            if not isinstance(raw, dict) or not raw.get("id"):
                continue
            try:
                posts.append(PostMetadata.model_validate(raw))
            except PydanticValidationError:
                logger.warning(f"Skipping malformed post record: {raw!r}")
        return posts


class HttpRankingClient(ServiceClient):
    """RankingReader for deployments where ranking runs as its own service."""

    async def get_rankings(
        self,
        cluster: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[RankingEntry]:
        params: Dict[str, Any] = {}
        if cluster is not None:
            params["clusterType"] = cluster
        if limit is not None:
            params["limit"] = limit

        payload = await self._get_json("/rankings", params=params)
        if not isinstance(payload, list):
            raise self._unavailable("expected a JSON array from /rankings")
        try:
            entries = [RankingEntry.model_validate(raw) for raw in payload]
        except PydanticValidationError as exc:
            raise self._unavailable("malformed ranking entry") from exc
        return sorted(entries, key=lambda e: e.rank)
