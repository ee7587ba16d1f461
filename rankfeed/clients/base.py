"""
Shared plumbing for collaborator HTTP clients.

Every client owns one lazily created ``httpx.AsyncClient`` bound to its
endpoint and timeout. Transport errors, timeouts, non-2xx statuses and
undecodable bodies all surface as ``DependencyUnavailableError`` with the
original exception chained.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from rankfeed.core.exceptions import DependencyUnavailableError
from rankfeed.core.telemetry import get_tracer

logger = logging.getLogger(__name__)


class ServiceEndpoint(BaseModel):
    """Connection settings for one collaborator, injected at construction."""

    name: str = Field(..., description="Dependency name used in logs and errors")
    base_url: str = Field(..., description="Scheme, host and port of the service")
    timeout_sec: float = Field(default=2.0, gt=0, description="Per-request timeout")


class ServiceClient:
    """Base class for JSON-over-HTTP collaborators."""

    def __init__(
        self,
        endpoint: ServiceEndpoint,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._endpoint = endpoint
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return self._endpoint.name

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._endpoint.base_url,
                timeout=self._endpoint.timeout_sec,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """GET ``path`` and decode the JSON body."""
        client = await self._get_client()

        with get_tracer().start_as_current_span(f"{self.name}.get") as span:
            span.set_attribute("http.route", path)
            try:
                response = await client.get(path, params=params)
                response.raise_for_status()
                return response.json()
            except httpx.TimeoutException as exc:
                raise self._unavailable(
                    f"timeout after {self._endpoint.timeout_sec}s on {path}"
                ) from exc
            except httpx.HTTPStatusError as exc:
                raise self._unavailable(
                    f"HTTP {exc.response.status_code} on {path}"
                ) from exc
            except httpx.HTTPError as exc:
                raise self._unavailable(
                    f"{type(exc).__name__} on {path}: {exc}"
                ) from exc
            except ValueError as exc:
                raise self._unavailable(f"invalid JSON from {path}") from exc

    def _unavailable(self, reason: str) -> DependencyUnavailableError:
        logger.warning(
            f"Dependency call failed: {self.name}: {reason}",
            extra={"dependency": self.name},
        )
        return DependencyUnavailableError(self.name, reason)
