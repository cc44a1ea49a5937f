"""
Insight Models

Insights are created fresh on every generation pass and discarded on the
next one. They are never persisted.

Lifecycle: generated -> ranked/filtered -> displayed -> discarded
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from fintracker.models.transaction import Totals


class Severity(str, Enum):
    """
    Ordinal severity band used for ranking.

    high > medium > low > info
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.INFO: 0,
}


class InsightKind(str, Enum):
    """Stable tag identifying what produced an insight."""
    SPENDING_TREND = "spending_trend"
    UNUSUAL_SPENDING = "unusual_spending"
    SAVINGS_ALERT = "savings_alert"
    SAVINGS_SUCCESS = "savings_success"
    CATEGORY_DOMINANCE = "category_dominance"
    CATEGORY_SPREAD = "category_spread"
    DUPLICATE_ALERT = "duplicate_alert"
    FUTURE_PREDICTION = "future_prediction"
    BUDGET_TIP = "budget_tip"
    SUBSCRIPTION_ALERT = "subscription_alert"
    IMPULSE_SPENDING = "impulse_spending"
    INCOME_VARIABILITY = "income_variability"


class Insight(BaseModel):
    """A single generated observation. Immutable once produced."""
    model_config = ConfigDict(frozen=True)

    kind: InsightKind
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    icon: str = ""
    severity: Severity
    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Heuristic certainty attached by the producing rule"
    )
    action: str = ""
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def sort_key(self) -> tuple[int, float]:
        """Descending-order key: severity rank, then confidence."""
        return (-self.severity.rank, -self.confidence)


class MonthlyBucket(BaseModel):
    """Income/expense totals for one calendar month."""

    month_key: str = Field(
        ...,
        description='Display key, e.g. "March 2024"'
    )
    year: int
    month: int = Field(..., ge=1, le=12)
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    count: int = 0


class UserProfile(BaseModel):
    """Presentation preferences handed to the insight rules."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    currency_symbol: str = Field(default="$", max_length=5)

    def money(self, amount: float | Decimal) -> str:
        return f"{self.currency_symbol}{float(amount):.2f}"


class InsightReport(BaseModel):
    """What the dashboard shows for one snapshot."""

    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    insights: list[Insight] = Field(default_factory=list)
    health_score: Optional[int] = Field(default=None, ge=0, le=100)
    totals: Totals = Field(default_factory=Totals)
    has_data: bool = False


class CategoryShare(BaseModel):
    """One category's slice of total expense."""

    category: str
    amount: Decimal
    percentage: float = Field(..., ge=0.0, le=100.0)
