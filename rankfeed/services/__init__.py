"""Services package - business logic layer."""
from .feed import FeedAggregator, FeedConfig
from .ranking import (
    DecayRanker,
    RankingConfig,
    RankingQuery,
    compute_rankings,
    decay_multiplier,
    hours_elapsed,
)

__all__ = [
    "DecayRanker",
    "FeedAggregator",
    "FeedConfig",
    "RankingConfig",
    "RankingQuery",
    "compute_rankings",
    "decay_multiplier",
    "hours_elapsed",
]
