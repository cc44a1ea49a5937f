"""
Insight Engine

DESIGN DECISION: The engine is a thin coordinator over pure functions.
1. Take an immutable snapshot of the transactions
2. Aggregate once per pass
3. Run every registered rule over the same snapshot
4. Rank the concatenated candidates

There is no caching and no cancellation. A newer request simply produces
a newer result; whoever displays results keeps the latest one.
"""

import datetime as dt
from typing import Any, Iterable, Optional, Sequence

import structlog
from pydantic import ValidationError

from fintracker.config.settings import InsightSettings
from fintracker.insights.aggregator import aggregate_by_month, summarize
from fintracker.insights.health import calculate_health_score
from fintracker.insights.ranker import rank_insights
from fintracker.insights.rules import InsightRule, build_rules
from fintracker.models.insight import Insight, InsightReport, UserProfile
from fintracker.models.transaction import Transaction

logger = structlog.get_logger(__name__)


def snapshot_transactions(transactions: Iterable[Any]) -> tuple[Transaction, ...]:
    """
    Freeze the input into a tuple of valid Transactions.

    Mappings are validated into Transactions. Records that fail validation
    (including Transactions built without validation that carry a bad
    date) are logged and left out.
    """
    snapshot = []
    for raw in transactions:
        if isinstance(raw, Transaction):
            if isinstance(raw.date, dt.date):
                snapshot.append(raw)
                continue
            raw = raw.model_dump()
        try:
            snapshot.append(Transaction.model_validate(raw))
        except ValidationError as e:
            logger.warning(
                "transaction_skipped",
                transaction_id=str(raw.get("id")) if isinstance(raw, dict) else None,
                errors=e.error_count(),
            )
    return tuple(snapshot)


class InsightEngine:
    """
    Rule-based insight generator.

    Usage:
        engine = InsightEngine()
        insights = engine.generate_insights(transactions, UserProfile())
        score = engine.get_health_score(transactions)
    """

    def __init__(
        self,
        rules: Optional[Sequence[InsightRule]] = None,
        settings: Optional[InsightSettings] = None,
    ):
        self._settings = settings or InsightSettings()
        self._rules = list(rules) if rules is not None else build_rules(self._settings)

    @property
    def rules(self) -> list[InsightRule]:
        return list(self._rules)

    def collect_candidates(
        self,
        transactions: Sequence[Transaction],
        profile: UserProfile,
    ) -> list[Insight]:
        """Run every rule over one snapshot; candidates keep registry order."""
        aggregates = aggregate_by_month(transactions)
        candidates: list[Insight] = []

        for rule in self._rules:
            try:
                produced = rule(transactions, aggregates, profile)
            except Exception as e:
                # A broken rule costs its own insights, never the whole pass
                logger.exception("insight_rule_failed", rule=rule.name, error=str(e))
                continue
            candidates.extend(produced)

        return candidates

    def generate_insights(
        self,
        transactions: Iterable[Any],
        profile: Optional[UserProfile] = None,
    ) -> list[Insight]:
        """
        Ranked insights for a transaction list.

        Returns at most max_results insights, each with confidence above
        min_confidence, ordered by severity then confidence.
        """
        snapshot = snapshot_transactions(transactions)
        profile = profile or UserProfile()

        candidates = self.collect_candidates(snapshot, profile)
        ranked = rank_insights(
            candidates,
            min_confidence=self._settings.min_confidence,
            limit=self._settings.max_results,
        )

        logger.info(
            "insights_generated",
            transactions=len(snapshot),
            candidates=len(candidates),
            returned=len(ranked),
        )
        return ranked

    def get_health_score(self, transactions: Iterable[Any]) -> Optional[int]:
        """Health score 0-100, or None when there is too little data."""
        return calculate_health_score(
            snapshot_transactions(transactions),
            min_transactions=self._settings.health_min_transactions,
        )

    def build_report(
        self,
        transactions: Iterable[Any],
        profile: Optional[UserProfile] = None,
    ) -> InsightReport:
        """
        Everything the dashboard panel shows for one snapshot.

        Below panel_min_transactions the report carries totals only:
        no insights and no score.
        """
        snapshot = snapshot_transactions(transactions)
        totals = summarize(snapshot)

        if len(snapshot) < self._settings.panel_min_transactions:
            return InsightReport(totals=totals, has_data=False)

        return InsightReport(
            insights=self.generate_insights(snapshot, profile),
            health_score=self.get_health_score(snapshot),
            totals=totals,
            has_data=True,
        )


_default_engine: Optional[InsightEngine] = None


def _engine() -> InsightEngine:
    global _default_engine
    if _default_engine is None:
        _default_engine = InsightEngine()
    return _default_engine


def generate_insights(
    transactions: Iterable[Any],
    profile: Optional[UserProfile] = None,
) -> list[Insight]:
    """Module-level shortcut using the default engine."""
    return _engine().generate_insights(transactions, profile)


def get_health_score(transactions: Iterable[Any]) -> Optional[int]:
    """Module-level shortcut using the default engine."""
    return _engine().get_health_score(transactions)
