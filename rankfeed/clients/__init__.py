"""Typed HTTP clients for collaborator services."""
from .base import ServiceClient, ServiceEndpoint
from .http import (
    HttpContentMetadataClient,
    HttpRankingClient,
    HttpScoreSource,
    HttpSocialGraphClient,
)

__all__ = [
    "HttpContentMetadataClient",
    "HttpRankingClient",
    "HttpScoreSource",
    "HttpSocialGraphClient",
    "ServiceClient",
    "ServiceEndpoint",
]
