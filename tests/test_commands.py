"""Tests for the security gate and the command executor."""

import asyncio
import pytest
from datetime import date
from decimal import Decimal

from fintracker.audit import AuditLogger
from fintracker.commands import (
    CommandExecutor,
    PresentationHandlers,
    SecurityGate,
    SpeechOutput,
)
from fintracker.models import (
    AuditEventType,
    CommandType,
    Transaction,
    TransactionType,
    VoiceCommand,
)
from fintracker.services.storage import (
    InMemoryAuditStorage,
    InMemoryTransactionStore,
    StorageError,
)

USER = "u1"
TODAY = date(2024, 5, 1)


def run_async(coro):
    """Helper to run async functions in tests."""
    return asyncio.run(coro)


def tx(kind, amount, category="Food", when="2024-03-05"):
    return Transaction(type=kind, amount=Decimal(str(amount)), category=category, date=when)


class RecordingPresentation(PresentationHandlers):
    def __init__(self):
        self.calls = []

    def navigate(self, route):
        self.calls.append(("navigate", route))

    def scroll_to(self, element):
        self.calls.append(("scroll_to", element))

    def apply_filter(self, category=None, date=None):
        self.calls.append(("filter", category, date))

    def show_help(self):
        self.calls.append(("help",))


class FailingStore(InMemoryTransactionStore):
    async def create_transaction(self, user_id, data):
        raise StorageError("Sheet offline")


def make_executor(store=None, presentation=None):
    audit_storage = InMemoryAuditStorage()
    executor = CommandExecutor(
        store=store or InMemoryTransactionStore(),
        user_id=USER,
        presentation=presentation or RecordingPresentation(),
        speech=SpeechOutput(),
        audit_logger=AuditLogger(audit_storage),
        today=lambda: TODAY,
    )
    return executor, audit_storage


DELETE_LAST = VoiceCommand(type=CommandType.DELETE_LAST, requires_security=True)


class TestSecurityGate:
    """Tests for SecurityGate."""

    def test_hold_and_confirm(self):
        """Test that confirm releases and clears the pending command."""
        gate = SecurityGate()
        assert gate.hold(DELETE_LAST, "delete last transaction") is None
        assert gate.has_pending
        released = gate.confirm()
        assert released.command == DELETE_LAST
        assert released.transcript == "delete last transaction"
        assert gate.pending is None

    def test_new_hold_replaces_old(self):
        """Test that at most one command is pending."""
        gate = SecurityGate()
        gate.hold(DELETE_LAST, "delete last transaction")
        food = VoiceCommand(type=CommandType.DELETE_CATEGORY, category="Food", requires_security=True)
        replaced = gate.hold(food, "delete all food expenses")
        assert replaced.command == DELETE_LAST
        assert gate.pending.command == food

    def test_discard(self):
        """Test that discard clears without returning it for execution twice."""
        gate = SecurityGate()
        gate.hold(DELETE_LAST, "delete last transaction")
        assert gate.discard() is not None
        assert gate.discard() is None
        assert gate.confirm() is None

    def test_rejects_safe_commands(self):
        """Test that only destructive commands may be held."""
        with pytest.raises(ValueError):
            SecurityGate().hold(VoiceCommand(type=CommandType.GET_BALANCE), "check balance")


class TestCommandExecutor:
    """Tests for CommandExecutor."""

    def test_add_expense_dated_today(self):
        """Test that a voice expense is stored with today's date."""
        store = InMemoryTransactionStore()
        executor, _ = make_executor(store)
        command = VoiceCommand(
            type=CommandType.ADD_EXPENSE,
            amount=Decimal("25"),
            description="groceries",
            category="Food",
        )

        outcome = run_async(executor.execute(command))
        assert outcome.success
        assert outcome.message == "Added $25 expense for Food"

        stored = run_async(store.list_transactions(USER))
        assert len(stored) == 1
        assert stored[0].type == TransactionType.EXPENSE
        assert stored[0].date == TODAY
        assert stored[0].description == "groceries"

    def test_add_income_falls_back_to_other_income(self):
        """Test the income category fallback."""
        store = InMemoryTransactionStore()
        executor, _ = make_executor(store)
        command = VoiceCommand(type=CommandType.ADD_INCOME, amount=Decimal("100.5"))

        outcome = run_async(executor.execute(command))
        assert outcome.message == "Added $100.5 income for Other Income"
        assert run_async(store.list_transactions(USER))[0].category == "Other Income"

    def test_get_balance(self):
        """Test that the balance is income minus expense from the store."""
        store = InMemoryTransactionStore()
        store.seed(USER, [tx("income", 100, "Salary"), tx("expense", 30)])
        executor, _ = make_executor(store)

        outcome = run_async(executor.execute(VoiceCommand(type=CommandType.GET_BALANCE)))
        assert outcome.message == "Your current balance is $70.00"
        assert outcome.data["balance"] == "70"

    def test_destructive_command_needs_confirmation(self):
        """Test that an unconfirmed delete does nothing."""
        store = InMemoryTransactionStore()
        store.seed(USER, [tx("expense", 30)])
        executor, audit = make_executor(store)

        outcome = run_async(executor.execute(DELETE_LAST))
        assert outcome.success is False
        assert len(run_async(store.list_transactions(USER))) == 1
        assert audit.events[-1].event_type == AuditEventType.COMMAND_FAILED

    def test_delete_last_removes_newest(self):
        """Test that the newest transaction is the one deleted."""
        store = InMemoryTransactionStore()
        older = tx("expense", 10, when="2024-03-01")
        newer = tx("expense", 20, when="2024-03-09")
        store.seed(USER, [older, newer])
        executor, _ = make_executor(store)

        outcome = run_async(executor.execute(DELETE_LAST, confirmed=True))
        assert outcome.message == "Deleted the last transaction"
        remaining = run_async(store.list_transactions(USER))
        assert [t.amount for t in remaining] == [Decimal("10")]

    def test_delete_last_with_nothing_stored(self):
        """Test the empty-store message."""
        executor, _ = make_executor()
        outcome = run_async(executor.execute(DELETE_LAST, confirmed=True))
        assert outcome.success
        assert outcome.message == "No transactions to delete"

    def test_delete_category_removes_only_matching_expenses(self):
        """Test that income and other categories survive."""
        store = InMemoryTransactionStore()
        store.seed(USER, [
            tx("expense", 10, "Food"),
            tx("expense", 12, "Food"),
            tx("expense", 50, "Travel"),
            tx("income", 5, "Food"),
        ])
        executor, _ = make_executor(store)
        command = VoiceCommand(type=CommandType.DELETE_CATEGORY, category="Food", requires_security=True)

        outcome = run_async(executor.execute(command, confirmed=True))
        assert outcome.message == "Deleted all Food expenses"
        assert len(outcome.data["deleted_ids"]) == 2
        remaining = run_async(store.list_transactions(USER))
        assert sorted((t.type.value, t.category) for t in remaining) == [
            ("expense", "Travel"),
            ("income", "Food"),
        ]

    def test_store_failure_is_reported_not_raised(self):
        """Test that the store's message reaches the caller unchanged."""
        executor, audit = make_executor(FailingStore())
        command = VoiceCommand(type=CommandType.ADD_EXPENSE, amount=Decimal("5"), category="Food")

        outcome = run_async(executor.execute(command))
        assert outcome.success is False
        assert outcome.error_message == "Sheet offline"
        assert audit.events[-1].event_type == AuditEventType.COMMAND_FAILED
        assert audit.events[-1].error_message == "Sheet offline"

    def test_rejected_amount_is_reported_not_raised(self):
        """Test that an amount the transaction model refuses comes back as a failure."""
        store = InMemoryTransactionStore()
        executor, audit = make_executor(store)
        command = VoiceCommand(type=CommandType.ADD_EXPENSE, amount=Decimal("25.555"), category="Food")

        outcome = run_async(executor.execute(command))
        assert outcome.success is False
        assert outcome.error_message.startswith("amount:")
        assert run_async(store.list_transactions(USER)) == []
        assert audit.events[-1].event_type == AuditEventType.COMMAND_FAILED
        assert executor.speech.spoken == [outcome.message]

    def test_rejected_description_is_reported_not_raised(self):
        """Test that an over-long description is refused without raising."""
        store = InMemoryTransactionStore()
        executor, _ = make_executor(store)
        command = VoiceCommand(
            type=CommandType.ADD_EXPENSE,
            amount=Decimal("20"),
            description="lunch " * 120,
            category="Food",
        )

        outcome = run_async(executor.execute(command))
        assert outcome.success is False
        assert outcome.error_message.startswith("description:")
        assert run_async(store.list_transactions(USER)) == []

    def test_presentation_hooks(self):
        """Test navigation, scrolling, filters and help."""
        presentation = RecordingPresentation()
        executor, _ = make_executor(presentation=presentation)

        run_async(executor.execute(VoiceCommand(type=CommandType.NAVIGATE, route="/")))
        run_async(executor.execute(VoiceCommand(type=CommandType.SCROLL_TO, element="transactions")))
        run_async(executor.execute(VoiceCommand(type=CommandType.FILTER, category="Food")))
        outcome = run_async(executor.execute(VoiceCommand(type=CommandType.FILTER_DATE, date="today")))
        run_async(executor.execute(VoiceCommand(type=CommandType.SHOW_HELP)))

        assert presentation.calls == [
            ("navigate", "/"),
            ("scroll_to", "transactions"),
            ("filter", "Food", None),
            ("filter", None, "today"),
            ("help",),
        ]
        assert outcome.message == "Showing today's transactions"

    def test_outcomes_are_spoken_and_audited(self):
        """Test the speech sink and the executed audit event."""
        executor, audit = make_executor()
        run_async(executor.execute(VoiceCommand(type=CommandType.SHOW_HELP)))
        assert executor.speech.spoken == ["Showing available commands"]
        assert audit.events[-1].event_type == AuditEventType.COMMAND_EXECUTED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
