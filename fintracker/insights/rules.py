"""
Insight Rules

Each rule is an independent pure function:

    (transactions, aggregates, profile) -> list[Insight]

Rules never see each other's output and never mutate their inputs. A rule
whose minimum data requirement is not met returns an empty list; that is
not an error. The registry (DEFAULT_RULES / build_rules) fixes the order
in which candidates are produced; ranking happens afterwards.

There is no learned model here. Confidence values are fixed heuristics
attached by each rule.
"""

import statistics
from decimal import Decimal
from functools import partial
from typing import Callable, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from fintracker.config.settings import InsightSettings
from fintracker.insights.aggregator import MONTH_NAMES, category_breakdown
from fintracker.insights.health import savings_rate
from fintracker.models.insight import (
    Insight,
    InsightKind,
    MonthlyBucket,
    Severity,
    UserProfile,
)
from fintracker.models.transaction import Transaction, TransactionType

Aggregates = Mapping[str, MonthlyBucket]

# Keyword lists for the budget tips (matched as lowercase substrings)
FOOD_KEYWORDS = ("food", "dining", "restaurant", "groceries", "coffee")
SUBSCRIPTION_SERVICES = ("netflix", "spotify", "prime", "disney")
IMPULSE_KEYWORDS = ("impulse", "shopping", "entertainment", "hobby")

# Minimum data requirements
TREND_MIN_TRANSACTIONS = 10
UNUSUAL_MIN_EXPENSES = 5
INCOME_MIN_TRANSACTIONS = 3
MIN_MONTHS = 2


def _expenses(transactions: Sequence[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.type == TransactionType.EXPENSE]


def _short_date(transaction: Transaction) -> str:
    """Locale-independent "Mar 05" style date."""
    return f"{MONTH_NAMES[transaction.date.month - 1][:3]} {transaction.date.day:02d}"


def analyze_spending_trend(
    transactions: Sequence[Transaction],
    aggregates: Aggregates,
    profile: UserProfile,
) -> list[Insight]:
    """Compare the most recent month's expense with the monthly average."""
    if len(transactions) < TREND_MIN_TRANSACTIONS or len(aggregates) < MIN_MONTHS:
        return []

    expenses = [float(bucket.expense) for bucket in aggregates.values()]
    average = sum(expenses) / len(expenses)
    if average == 0:
        return []

    last_month = list(aggregates.values())[-1]
    last_expense = float(last_month.expense)
    change = (last_expense - average) / average * 100

    if abs(change) <= 15:
        return []

    increased = change > 0
    return [Insight(
        kind=InsightKind.SPENDING_TREND,
        title="Spending Increased" if increased else "Spending Decreased",
        message=(
            f"Your spending last month was {abs(change):.0f}% "
            f"{'higher' if increased else 'lower'} than average"
        ),
        icon="📈" if increased else "📉",
        severity=Severity.HIGH if abs(change) > 30 else Severity.MEDIUM,
        confidence=0.8,
        action="Review recent expenses" if increased else "Great job maintaining budget",
        data={
            "month": last_month.month_key,
            "amount": last_expense,
            "average": average,
            "change": change,
        },
    )]


def detect_unusual_spending(
    transactions: Sequence[Transaction],
    aggregates: Aggregates,
    profile: UserProfile,
    max_alerts: Optional[int] = None,
) -> list[Insight]:
    """
    Flag every expense above three times the median expense.

    The median is the upper median (middle element of the sorted amounts).
    One insight per offending transaction; max_alerts keeps only the
    largest ones when set.
    """
    expenses = _expenses(transactions)
    if len(expenses) < UNUSUAL_MIN_EXPENSES:
        return []

    amounts = sorted(t.amount for t in expenses)
    median = amounts[len(amounts) // 2]
    unusual = [t for t in expenses if t.amount > median * 3]

    if max_alerts is not None:
        unusual = sorted(unusual, key=lambda t: t.amount, reverse=True)[:max_alerts]

    return [
        Insight(
            kind=InsightKind.UNUSUAL_SPENDING,
            title="Large Transaction Alert",
            message=f"Unusually large {t.category} expense: {profile.money(t.amount)}",
            icon="⚠️",
            severity=Severity.MEDIUM,
            confidence=0.7,
            action="Verify this was a planned expense",
            data=t.model_dump(mode="json"),
        )
        for t in unusual
    ]


def suggest_savings(
    transactions: Sequence[Transaction],
    aggregates: Aggregates,
    profile: UserProfile,
) -> list[Insight]:
    """Low savings rate (< 10%) or excellent savings rate (> 30%)."""
    rate = savings_rate(transactions)
    if rate is None:
        return []

    if rate < 10:
        return [Insight(
            kind=InsightKind.SAVINGS_ALERT,
            title="Low Savings Rate",
            message=f"You're saving only {rate:.1f}% of your income",
            icon="💰",
            severity=Severity.HIGH,
            confidence=0.9,
            action="Aim to save at least 20% of your income",
            data={"savings_rate": rate, "target_rate": 20},
        )]
    if rate > 30:
        return [Insight(
            kind=InsightKind.SAVINGS_SUCCESS,
            title="Excellent Savings",
            message=f"Great job! You're saving {rate:.1f}% of your income",
            icon="🎉",
            severity=Severity.INFO,
            confidence=0.95,
            action="Consider investing your savings",
            data={"savings_rate": rate},
        )]
    return []


def analyze_category_dominance(
    transactions: Sequence[Transaction],
    aggregates: Aggregates,
    profile: UserProfile,
) -> list[Insight]:
    """Top category above 35% of expense; more than 15 expense categories."""
    shares = category_breakdown(transactions)
    if not shares:
        return []

    insights = []
    top = shares[0]
    if top.percentage > 35:
        insights.append(Insight(
            kind=InsightKind.CATEGORY_DOMINANCE,
            title="Category Dominance",
            message=f"{top.category} makes up {top.percentage:.1f}% of your expenses",
            icon="🎯",
            severity=Severity.MEDIUM,
            confidence=0.95,
            action="Consider diversifying your spending",
            data=top.model_dump(mode="json"),
        ))

    if len(shares) > 15:
        insights.append(Insight(
            kind=InsightKind.CATEGORY_SPREAD,
            title="Too Many Categories",
            message="You have expenses spread across many categories",
            icon="📋",
            severity=Severity.LOW,
            confidence=0.6,
            action="Consider consolidating similar categories",
            data={"category_count": len(shares)},
        ))

    return insights


def find_duplicates(
    transactions: Sequence[Transaction],
    aggregates: Aggregates,
    profile: UserProfile,
) -> list[Insight]:
    """
    Possible duplicate expenses: same category, amounts within 1.00,
    dates less than 3 days apart.

    Compares every unordered pair of expenses, so the cost is O(n^2) in
    the number of expenses. At personal-finance volumes (hundreds to a few
    thousand expenses) that is acceptable; one insight is emitted per pair.
    """
    expenses = _expenses(transactions)
    insights = []

    for i, first in enumerate(expenses):
        for second in expenses[i + 1:]:
            if first.category != second.category:
                continue
            if abs(first.amount - second.amount) >= Decimal("1"):
                continue
            days_between = (first.date - second.date).days
            if abs(days_between) >= 3:
                continue

            insights.append(Insight(
                kind=InsightKind.DUPLICATE_ALERT,
                title="Possible Duplicate Expense",
                message=f"Similar {first.category} expenses found within a few days",
                icon="🔍",
                severity=Severity.LOW,
                confidence=0.6,
                action="Check if these are separate expenses",
                data={
                    "first": {**first.model_dump(mode="json"), "date": _short_date(first)},
                    "second": {**second.model_dump(mode="json"), "date": _short_date(second)},
                    "days_between": days_between,
                },
            ))

    return insights


def forecast_spending(
    transactions: Sequence[Transaction],
    aggregates: Aggregates,
    profile: UserProfile,
) -> list[Insight]:
    """Average monthly expense with a first-vs-last month trend."""
    if len(aggregates) < MIN_MONTHS:
        return []

    monthly = [float(bucket.expense) for bucket in aggregates.values()]
    average = sum(monthly) / len(monthly)
    increasing = monthly[-1] - monthly[0] > 0

    return [Insight(
        kind=InsightKind.FUTURE_PREDICTION,
        title="Spending Forecast",
        message=(
            f"Based on past {len(monthly)} months, expect to spend around "
            f"{profile.money(average)} monthly"
        ),
        icon="🔮",
        severity=Severity.INFO,
        confidence=0.7,
        action="Watch for spending creep" if increasing else "Maintain your spending discipline",
        data={
            "average_monthly": average,
            "trend": "increasing" if increasing else "decreasing",
            "months_analyzed": len(monthly),
        },
    )]


def _matches_any(text: Optional[str], keywords: Sequence[str]) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


def generate_budget_tips(
    transactions: Sequence[Transaction],
    aggregates: Aggregates,
    profile: UserProfile,
    food_limit: float = 300.0,
    subscription_limit: int = 3,
    impulse_limit: float = 200.0,
) -> list[Insight]:
    """Three independent keyword checks: food, subscriptions, impulse buys."""
    expenses = _expenses(transactions)
    insights = []

    food_total = sum(
        (t.amount for t in expenses if _matches_any(t.category, FOOD_KEYWORDS)),
        Decimal("0"),
    )
    if food_total > Decimal(str(food_limit)):
        insights.append(Insight(
            kind=InsightKind.BUDGET_TIP,
            title="Food Spending",
            message="Your food expenses seem high",
            icon="🍽️",
            severity=Severity.LOW,
            confidence=0.6,
            action="Try meal planning to save on food costs",
            data={"total": float(food_total)},
        ))

    subscriptions = [
        t for t in expenses
        if _matches_any(t.description, ("subscription",))
        or _matches_any(t.category, ("subscription",))
        or _matches_any(t.description, SUBSCRIPTION_SERVICES)
        or _matches_any(t.category, SUBSCRIPTION_SERVICES)
    ]
    if len(subscriptions) > subscription_limit:
        insights.append(Insight(
            kind=InsightKind.SUBSCRIPTION_ALERT,
            title="Multiple Subscriptions",
            message="You have several subscription services",
            icon="🔄",
            severity=Severity.LOW,
            confidence=0.7,
            action="Review and cancel unused subscriptions",
            data={"count": len(subscriptions)},
        ))

    impulse_total = sum(
        (t.amount for t in expenses if _matches_any(t.category, IMPULSE_KEYWORDS)),
        Decimal("0"),
    )
    if impulse_total > Decimal(str(impulse_limit)):
        insights.append(Insight(
            kind=InsightKind.IMPULSE_SPENDING,
            title="Impulse Spending",
            message="You might be making impulse purchases",
            icon="🛍️",
            severity=Severity.MEDIUM,
            confidence=0.6,
            action="Implement a 24-hour rule for non-essential purchases",
            data={"total": float(impulse_total)},
        ))

    return insights


def analyze_income_consistency(
    transactions: Sequence[Transaction],
    aggregates: Aggregates,
    profile: UserProfile,
) -> list[Insight]:
    """Coefficient of variation of monthly income above 30%."""
    incomes = [t for t in transactions if t.type == TransactionType.INCOME]
    if len(incomes) < INCOME_MIN_TRANSACTIONS:
        return []

    monthly = [float(bucket.income) for bucket in aggregates.values() if bucket.income > 0]
    if len(monthly) < MIN_MONTHS:
        return []

    mean = statistics.fmean(monthly)
    coefficient = statistics.pstdev(monthly) / mean * 100

    if coefficient <= 30:
        return []

    return [Insight(
        kind=InsightKind.INCOME_VARIABILITY,
        title="Irregular Income",
        message="Your income varies significantly month-to-month",
        icon="📊",
        severity=Severity.MEDIUM,
        confidence=0.8,
        action="Consider building a larger emergency fund",
        data={
            "average_income": mean,
            "variability": f"{coefficient:.1f}%",
            "months_analyzed": len(monthly),
        },
    )]


class InsightRule(BaseModel):
    """A registered rule: a stable name plus the function that runs it."""
    model_config = ConfigDict(frozen=True)

    name: str
    analyze: Callable[..., list[Insight]]

    def __call__(
        self,
        transactions: Sequence[Transaction],
        aggregates: Aggregates,
        profile: UserProfile,
    ) -> list[Insight]:
        return self.analyze(transactions, aggregates, profile)


def build_rules(settings: Optional[InsightSettings] = None) -> list[InsightRule]:
    """The rule registry, with thresholds taken from settings."""
    settings = settings or InsightSettings()
    return [
        InsightRule(name="spending_trend", analyze=analyze_spending_trend),
        InsightRule(
            name="unusual_spending",
            analyze=partial(
                detect_unusual_spending,
                max_alerts=settings.unusual_spending_max_alerts,
            ),
        ),
        InsightRule(name="savings", analyze=suggest_savings),
        InsightRule(name="category_dominance", analyze=analyze_category_dominance),
        InsightRule(name="duplicates", analyze=find_duplicates),
        InsightRule(name="forecast", analyze=forecast_spending),
        InsightRule(
            name="budget_tips",
            analyze=partial(
                generate_budget_tips,
                food_limit=settings.food_spend_limit,
                subscription_limit=settings.subscription_count_limit,
                impulse_limit=settings.impulse_spend_limit,
            ),
        ),
        InsightRule(name="income_consistency", analyze=analyze_income_consistency),
    ]


DEFAULT_RULES: tuple[InsightRule, ...] = tuple(build_rules(InsightSettings()))
