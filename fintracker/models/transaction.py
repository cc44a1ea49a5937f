"""
Transaction Models

A transaction is owned by the external transaction store. The analysis
core only reads transactions; the voice executor requests mutations
through the store interface using TransactionCreate / TransactionUpdate.

DESIGN DECISION: amount is always positive. The direction of money is
carried by `type`, never by the sign of the amount.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


def parse_transaction_date(value: Any) -> dt.date:
    """
    Parse a transaction date.

    Accepts date objects, datetimes and ISO-8601 strings, including the
    full timestamps ("2024-03-05T00:00:00.000Z") that JSON APIs return.

    Raises:
        ValueError: If the value is not a recognisable date
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if len(text) > 10:
        return dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return dt.date.fromisoformat(text)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Transaction(BaseModel):
    """A single income or expense record."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    user_id: Optional[str] = Field(
        default=None,
        description="Owner of the transaction"
    )
    type: TransactionType
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount, always positive"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
    )
    date: dt.date
    created_at: dt.datetime = Field(
        default_factory=_utcnow,
        description="When the store recorded the transaction"
    )

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v: Any) -> dt.date:
        return parse_transaction_date(v)

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


class TransactionCreate(BaseModel):
    """Fields required to create a transaction in the store."""
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    date: dt.date = Field(default_factory=dt.date.today)

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v: Any) -> dt.date:
        return parse_transaction_date(v)


class TransactionUpdate(BaseModel):
    """Partial update; only fields that are set are applied."""
    model_config = ConfigDict(str_strip_whitespace=True)

    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    date: Optional[dt.date] = None

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v: Any) -> Optional[dt.date]:
        if v is None:
            return None
        return parse_transaction_date(v)


class Totals(BaseModel):
    """Summary totals over a transaction snapshot."""

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    count: int = 0

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense
