"""Repository implementations package."""
from .memory import (
    InMemoryContentMetadata,
    InMemoryFeedRepository,
    InMemoryRankingRepository,
    InMemoryScoreSource,
    InMemorySocialGraph,
    RankingGeneration,
)

__all__ = [
    "InMemoryContentMetadata",
    "InMemoryFeedRepository",
    "InMemoryRankingRepository",
    "InMemoryScoreSource",
    "InMemorySocialGraph",
    "RankingGeneration",
]
