"""
Unit tests for collaborator HTTP clients.
Requests are served by httpx.MockTransport; no network access.
"""
import httpx
import pytest

from rankfeed.clients.base import ServiceEndpoint
from rankfeed.clients.http import (
    HttpContentMetadataClient,
    HttpRankingClient,
    HttpScoreSource,
    HttpSocialGraphClient,
)
from rankfeed.core.exceptions import DependencyUnavailableError


def make_client(cls, handler, name="svc"):
    endpoint = ServiceEndpoint(name=name, base_url="http://svc.test", timeout_sec=0.5)
    return cls(endpoint, transport=httpx.MockTransport(handler))


class TestHttpScoreSource:
    @pytest.mark.asyncio
    async def test_parses_scores(self):
        def handler(request):
            assert request.url.path == "/scores"
            return httpx.Response(200, json=[
                {"postId": "p1", "score": 12.5, "calculatedAt": "2025-01-01T00:00:00Z"},
                {"contentId": "p2", "scoreValue": 3, "updatedAt": "2025-01-01T01:00:00Z"},
            ])

        source = make_client(HttpScoreSource, handler)
        records = await source.fetch_scores()

        assert [(r.post_id, r.raw_score) for r in records] == [("p1", 12.5), ("p2", 3.0)]
        assert records[0].calculated_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_incomplete_record_fails_fetch(self):
        source = make_client(
            HttpScoreSource,
            lambda request: httpx.Response(200, json=[
                {"postId": "p1", "score": 12.5, "calculatedAt": "2025-01-01T00:00:00Z"},
                {"postId": "broken"},
            ]),
        )

        with pytest.raises(DependencyUnavailableError) as exc_info:
            await source.fetch_scores()

        assert "index 1" in exc_info.value.reason

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [b"NaN", b"Infinity", b"-Infinity"])
    async def test_non_finite_score_fails_fetch(self, token):
        body = (
            b'[{"postId": "a", "score": ' + token
            + b', "calculatedAt": "2025-01-01T00:00:00Z"},'
            b' {"postId": "b", "score": 5, "calculatedAt": "2025-01-01T00:00:00Z"}]'
        )
        source = make_client(
            HttpScoreSource,
            lambda request: httpx.Response(
                200, content=body, headers={"content-type": "application/json"}
            ),
        )

        with pytest.raises(DependencyUnavailableError):
            await source.fetch_scores()

    @pytest.mark.asyncio
    async def test_empty_array_is_valid(self):
        source = make_client(HttpScoreSource, lambda request: httpx.Response(200, json=[]))
        assert await source.fetch_scores() == []

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self):
        source = make_client(
            HttpScoreSource, lambda request: httpx.Response(503), name="score-service"
        )

        with pytest.raises(DependencyUnavailableError) as exc_info:
            await source.fetch_scores()

        assert exc_info.value.dependency == "score-service"
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)

    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        source = make_client(HttpScoreSource, handler)

        with pytest.raises(DependencyUnavailableError):
            await source.fetch_scores()

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        source = make_client(HttpScoreSource, handler)

        with pytest.raises(DependencyUnavailableError) as exc_info:
            await source.fetch_scores()

        assert "timeout" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_invalid_json_is_unavailable(self):
        source = make_client(
            HttpScoreSource, lambda request: httpx.Response(200, content=b"<html>")
        )

        with pytest.raises(DependencyUnavailableError):
            await source.fetch_scores()


class TestHttpSocialGraphClient:
    @pytest.mark.asyncio
    async def test_returns_following(self):
        def handler(request):
            assert request.url.raw_path == b"/users/user%201/following"
            return httpx.Response(200, json={"following": ["a", "b"]})

        client = make_client(HttpSocialGraphClient, handler)
        assert await client.get_following("user 1") == ["a", "b"]

    @pytest.mark.asyncio
    async def test_missing_key_is_empty(self):
        client = make_client(HttpSocialGraphClient, lambda request: httpx.Response(200, json={}))
        assert await client.get_following("u") == []

    @pytest.mark.asyncio
    async def test_not_found_is_unavailable(self):
        client = make_client(HttpSocialGraphClient, lambda request: httpx.Response(404))

        with pytest.raises(DependencyUnavailableError):
            await client.get_following("u")


class TestHttpContentMetadataClient:
    @pytest.mark.asyncio
    async def test_batches_ids_and_tolerates_partial_response(self):
        seen = {}

        def handler(request):
            seen["postIds"] = request.url.params["postIds"]
            return httpx.Response(200, json=[
                {"id": "p1", "title": "One", "authorId": "a1"},
                {"title": "no id"},
            ])

        client = make_client(HttpContentMetadataClient, handler)
        posts = await client.get_posts(["p1", "p2"])

        assert seen["postIds"] == "p1,p2"
        assert [(p.id, p.title, p.author_id) for p in posts] == [("p1", "One", "a1")]

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        client = make_client(HttpContentMetadataClient, handler)
        assert await client.get_posts([]) == []


class TestHttpRankingClient:
    @pytest.mark.asyncio
    async def test_passes_filters_and_sorts_by_rank(self):
        def handler(request):
            assert request.url.params["clusterType"] == "general"
            assert request.url.params["limit"] == "2"
            return httpx.Response(200, json=[
                {"postId": "b", "rank": 2, "decayedScore": 1.0,
                 "cluster": "general", "calculatedAt": "2025-01-01T00:00:00Z"},
                {"postId": "a", "rank": 1, "decayedScore": 2.0,
                 "cluster": "general", "calculatedAt": "2025-01-01T00:00:00Z"},
            ])

        client = make_client(HttpRankingClient, handler)
        entries = await client.get_rankings("general", 2)

        assert [e.post_id for e in entries] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_close_releases_client(self):
        client = make_client(HttpRankingClient, lambda request: httpx.Response(200, json=[]))
        await client.get_rankings()
        await client.close()
        assert client._http_client is None
