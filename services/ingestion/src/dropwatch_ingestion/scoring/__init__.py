"""Domain quality scoring."""

from dropwatch_ingestion.scoring.quality_scorer import (
    score_domain,
    quality_tier,
    categorize_domain,
    rank_candidates,
    is_gibberish,
)

__all__ = [
    "score_domain",
    "quality_tier",
    "categorize_domain",
    "rank_candidates",
    "is_gibberish",
]
