"""
Health Score Calculator

A single 0-100 banded summary of savings-rate performance. Pure and cheap,
so it is recomputed on every request.
"""

from typing import Optional, Sequence

from fintracker.insights.aggregator import summarize
from fintracker.models.transaction import Transaction

# (upper bound of savings rate, score); first band whose bound is not reached wins
HEALTH_BANDS = (
    (0.0, 20),
    (10.0, 40),
    (20.0, 60),
    (30.0, 80),
)
TOP_SCORE = 100


def savings_rate(transactions: Sequence[Transaction]) -> Optional[float]:
    """
    Percentage of income not spent: (income - expense) / income * 100.

    None when there is no income, since the rate is undefined.
    """
    totals = summarize(transactions)
    if totals.income <= 0:
        return None
    return float((totals.income - totals.expense) / totals.income * 100)


def score_for_rate(rate: float) -> int:
    for bound, score in HEALTH_BANDS:
        if rate < bound:
            return score
    return TOP_SCORE


def calculate_health_score(
    transactions: Sequence[Transaction],
    min_transactions: int = 5,
) -> Optional[int]:
    """
    Banded health score.

    None below min_transactions. Exactly 0 when there is no income at all.
    Otherwise the savings rate maps to 20/40/60/80/100.
    """
    if len(transactions) < min_transactions:
        return None

    rate = savings_rate(transactions)
    if rate is None:
        return 0
    return score_for_rate(rate)
