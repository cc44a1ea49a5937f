"""
Insight Ranker

Filters the concatenated rule output by confidence, orders it by severity
then confidence, and keeps the top results. The ranked list is what the
presentation layer shows; nothing downstream reorders or edits it.
"""

from typing import Iterable

from fintracker.models.insight import Insight

DEFAULT_MIN_CONFIDENCE = 0.5
DEFAULT_LIMIT = 7


def rank_insights(
    candidates: Iterable[Insight],
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    limit: int = DEFAULT_LIMIT,
) -> list[Insight]:
    """
    Rank candidate insights.

    Keeps insights with confidence strictly above min_confidence, sorts by
    severity rank then confidence (both descending, ties keep rule order)
    and truncates to limit.
    """
    kept = [insight for insight in candidates if insight.confidence > min_confidence]
    kept.sort(key=lambda insight: insight.sort_key)
    return kept[:limit]
