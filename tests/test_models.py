"""
Tests for the Finance Tracker

Test strategy:
1. Unit tests for individual components (models, rules, matcher)
2. Flow tests with the in-memory store standing in for the real one
3. No real API calls in tests
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from fintracker.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    CommandType,
    Insight,
    InsightKind,
    Severity,
    Totals,
    Transaction,
    TransactionCreate,
    TransactionType,
    UserProfile,
    VoiceCommand,
    parse_transaction_date,
)


class TestTransactionModels:
    """Tests for transaction Pydantic models."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        t = Transaction(
            type=TransactionType.EXPENSE,
            amount=Decimal("12.50"),
            category="Food",
            date=date(2024, 3, 5),
        )
        assert t.is_expense
        assert not t.is_income
        assert t.amount == Decimal("12.50")

    def test_transaction_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(type="expense", amount=Decimal("0"), category="Food", date="2024-03-05")
        with pytest.raises(ValueError):
            Transaction(type="expense", amount=Decimal("-5"), category="Food", date="2024-03-05")

    def test_transaction_rejects_unknown_type(self):
        """Test that only income and expense are accepted."""
        with pytest.raises(ValueError):
            Transaction(type="transfer", amount=Decimal("5"), category="Food", date="2024-03-05")

    def test_transaction_parses_iso_timestamp(self):
        """Test that full ISO timestamps from JSON APIs are accepted."""
        t = Transaction(
            type="income",
            amount=Decimal("100"),
            category="Salary",
            date="2024-03-05T00:00:00.000Z",
        )
        assert t.date == date(2024, 3, 5)

    def test_transaction_rejects_bad_date(self):
        """Test that unparseable dates fail validation."""
        with pytest.raises(ValueError):
            Transaction(type="income", amount=Decimal("1"), category="Salary", date="not a date")

    def test_parse_transaction_date_variants(self):
        """Test date parsing for date, datetime and string input."""
        assert parse_transaction_date(date(2024, 1, 2)) == date(2024, 1, 2)
        assert parse_transaction_date(datetime(2024, 1, 2, 15, 30)) == date(2024, 1, 2)
        assert parse_transaction_date("2024-01-02") == date(2024, 1, 2)
        with pytest.raises(ValueError):
            parse_transaction_date(20240102)

    def test_transaction_create_defaults_to_today(self):
        """Test that TransactionCreate dates default to today."""
        data = TransactionCreate(type="expense", amount=Decimal("3"), category="Food")
        assert data.date == date.today()

    def test_totals_balance(self):
        """Test that balance is income minus expense."""
        totals = Totals(income=Decimal("100"), expense=Decimal("140"), count=3)
        assert totals.balance == Decimal("-40")


class TestInsightModels:
    """Tests for insight models."""

    def test_severity_rank_order(self):
        """Test that severity ranks are high > medium > low > info."""
        assert Severity.HIGH.rank > Severity.MEDIUM.rank > Severity.LOW.rank > Severity.INFO.rank
        assert Severity.INFO.rank == 0

    def test_insight_confidence_bounds(self):
        """Test that confidence must be within [0, 1]."""
        with pytest.raises(ValueError):
            Insight(
                kind=InsightKind.BUDGET_TIP,
                title="x",
                message="y",
                severity=Severity.LOW,
                confidence=1.5,
            )

    def test_insight_is_immutable(self):
        """Test that an insight cannot be changed after creation."""
        insight = Insight(
            kind=InsightKind.BUDGET_TIP,
            title="Tip",
            message="Message",
            severity=Severity.LOW,
            confidence=0.6,
        )
        with pytest.raises(ValueError):
            insight.title = "Changed"

    def test_user_profile_money(self):
        """Test currency formatting uses the profile symbol and two decimals."""
        assert UserProfile().money(Decimal("1234.5")) == "$1234.50"
        assert UserProfile(currency_symbol="€").money(3) == "€3.00"


class TestVoiceCommandModel:
    """Tests for the VoiceCommand security flag invariant."""

    def test_delete_commands_require_security(self):
        """Test that delete commands must carry requires_security."""
        with pytest.raises(ValueError):
            VoiceCommand(type=CommandType.DELETE_LAST)
        command = VoiceCommand(type=CommandType.DELETE_LAST, requires_security=True)
        assert command.requires_security

    def test_other_commands_cannot_require_security(self):
        """Test that non-destructive commands never require security."""
        with pytest.raises(ValueError):
            VoiceCommand(type=CommandType.GET_BALANCE, requires_security=True)

    def test_amount_must_be_positive(self):
        """Test that a zero amount is rejected."""
        with pytest.raises(ValueError):
            VoiceCommand(type=CommandType.ADD_EXPENSE, amount=Decimal("0"), category="Food")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.CAPTURE_STARTED,
            description="Voice capture started",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.command_failed("add_expense", "Sheet offline", None)
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "command_failed"
        assert log_dict["severity"] == "error"
        assert log_dict["error_message"] == "Sheet offline"
        assert log_dict["correlation_id"] is None

    def test_capture_stopped_by_timeout(self):
        """Test that a timeout stop gets its own event type."""
        assert AuditEventBuilder.capture_stopped("s1", "timeout").event_type == AuditEventType.CAPTURE_TIMED_OUT
        assert AuditEventBuilder.capture_stopped("s1", "user").event_type == AuditEventType.CAPTURE_STOPPED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
