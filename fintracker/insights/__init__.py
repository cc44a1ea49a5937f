"""
Insight Engine Package

Monthly aggregation, the rule registry, ranking and the health score.
"""

from fintracker.insights.aggregator import (
    aggregate_by_month,
    category_breakdown,
    expense_by_category,
    month_key,
    summarize,
)
from fintracker.insights.engine import (
    InsightEngine,
    generate_insights,
    get_health_score,
    snapshot_transactions,
)
from fintracker.insights.health import calculate_health_score, savings_rate
from fintracker.insights.ranker import rank_insights
from fintracker.insights.rules import (
    DEFAULT_RULES,
    InsightRule,
    analyze_category_dominance,
    analyze_income_consistency,
    analyze_spending_trend,
    build_rules,
    detect_unusual_spending,
    find_duplicates,
    forecast_spending,
    generate_budget_tips,
    suggest_savings,
)

__all__ = [
    "aggregate_by_month",
    "category_breakdown",
    "expense_by_category",
    "month_key",
    "summarize",
    "InsightEngine",
    "generate_insights",
    "get_health_score",
    "snapshot_transactions",
    "calculate_health_score",
    "savings_rate",
    "rank_insights",
    "DEFAULT_RULES",
    "InsightRule",
    "analyze_category_dominance",
    "analyze_income_consistency",
    "analyze_spending_trend",
    "build_rules",
    "detect_unusual_spending",
    "find_duplicates",
    "forecast_spending",
    "generate_budget_tips",
    "suggest_savings",
]
