"""
Monthly Aggregator

Pure functions over a transaction snapshot: per-month totals, overall
totals and the per-category expense breakdown. Every insight rule and the
dashboard summary read from these.
"""

from decimal import Decimal
from typing import Iterable

import structlog

from fintracker.models.insight import CategoryShare, MonthlyBucket
from fintracker.models.transaction import (
    Totals,
    Transaction,
    TransactionType,
    parse_transaction_date,
)

logger = structlog.get_logger(__name__)

# Fixed English month names; the key must not depend on the process locale
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def month_key(year: int, month: int) -> str:
    """Display key for a calendar month, e.g. "March 2024"."""
    return f"{MONTH_NAMES[month - 1]} {year:04d}"


def aggregate_by_month(transactions: Iterable[Transaction]) -> dict[str, MonthlyBucket]:
    """
    Group transactions by calendar month.

    Returns a dict keyed by month_key whose insertion order is
    chronological (by year and month, not by key string). Transactions
    whose date cannot be parsed are logged and skipped.
    """
    buckets: dict[tuple[int, int], MonthlyBucket] = {}

    for transaction in transactions:
        try:
            when = parse_transaction_date(transaction.date)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(
                "transaction_date_unparseable",
                transaction_id=str(getattr(transaction, "id", None)),
                value=repr(getattr(transaction, "date", None)),
                error=str(e),
            )
            continue

        key = (when.year, when.month)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = MonthlyBucket(
                month_key=month_key(when.year, when.month),
                year=when.year,
                month=when.month,
            )
            buckets[key] = bucket

        if transaction.type == TransactionType.INCOME:
            bucket.income += transaction.amount
        else:
            bucket.expense += transaction.amount
        bucket.count += 1

    return {bucket.month_key: bucket for _, bucket in sorted(buckets.items())}


def summarize(transactions: Iterable[Transaction]) -> Totals:
    """Total income, total expense and count over the snapshot."""
    totals = Totals()
    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            totals.income += transaction.amount
        else:
            totals.expense += transaction.amount
        totals.count += 1
    return totals


def expense_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Sum of expense amounts per category, in first-seen order."""
    categories: dict[str, Decimal] = {}
    for transaction in transactions:
        if transaction.type != TransactionType.EXPENSE:
            continue
        categories[transaction.category] = (
            categories.get(transaction.category, Decimal("0")) + transaction.amount
        )
    return categories


def category_breakdown(transactions: Iterable[Transaction]) -> list[CategoryShare]:
    """Expense categories with their share of total expense, largest first."""
    categories = expense_by_category(transactions)
    total = sum(categories.values(), Decimal("0"))
    if total <= 0:
        return []

    shares = [
        CategoryShare(
            category=category,
            amount=amount,
            percentage=float(amount / total * 100),
        )
        for category, amount in categories.items()
    ]
    # sort() is stable: ties keep first-seen order
    shares.sort(key=lambda share: share.amount, reverse=True)
    return shares
