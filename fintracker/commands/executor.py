"""
Command Execution Engine

DESIGN DECISION: Execution is a plain dispatch on command type.
Each command type maps to one handler. Handlers talk to exactly two
collaborators supplied by the host:
- the transaction store (add, delete, balance)
- the presentation layer (navigate, scroll, filter, help)

Store failures and transactions the model rejects are reported back in
the CommandOutcome with the store's or the validator's own message. The executor never retries; retry policy, if any, belongs to
the store implementation.
"""

import datetime as dt
from typing import Awaitable, Callable, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from fintracker.audit.logger import AuditLogger
from fintracker.insights.aggregator import summarize
from fintracker.models.insight import UserProfile
from fintracker.models.transaction import TransactionCreate, TransactionType
from fintracker.models.voice import CommandOutcome, CommandType, VoiceCommand
from fintracker.services.storage import (
    StorageError,
    TransactionStoreInterface,
    describe_storage_error,
)
from fintracker.voice.classifier import EXPENSE_FALLBACK, INCOME_FALLBACK
from fintracker.voice.patterns import format_amount

logger = structlog.get_logger(__name__)


def _describe_rejection(error: Exception) -> str:
    """Message for a store failure or a transaction the model rejected."""
    if isinstance(error, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in error.errors()
        )
    return describe_storage_error(error)


class PresentationHandlers:
    """
    UI hooks the host application provides.

    The defaults do nothing; a host overrides the ones it supports.
    """

    def navigate(self, route: str) -> None:
        pass

    def scroll_to(self, element: str) -> None:
        pass

    def apply_filter(
        self,
        category: Optional[str] = None,
        date: Optional[str] = None,
    ) -> None:
        pass

    def show_help(self) -> None:
        pass


class SpeechOutput:
    """
    Text-to-speech sink.

    The base implementation only logs what would have been spoken.
    """

    def __init__(self):
        self.spoken: list[str] = []

    def speak(self, text: str) -> None:
        self.spoken.append(text)
        logger.info("speech_output", text=text)


class CommandExecutor:
    """
    Executes recognised voice commands.

    GUARANTEES:
    - Destructive commands run only when called with confirmed=True
    - Store errors become failed outcomes, never exceptions
    - Every execution is audited
    """

    def __init__(
        self,
        store: TransactionStoreInterface,
        user_id: str = "default",
        presentation: Optional[PresentationHandlers] = None,
        speech: Optional[SpeechOutput] = None,
        audit_logger: Optional[AuditLogger] = None,
        profile: Optional[UserProfile] = None,
        today: Callable[[], dt.date] = dt.date.today,
    ):
        self._store = store
        self._user_id = user_id
        self._presentation = presentation or PresentationHandlers()
        self._speech = speech or SpeechOutput()
        self._audit = audit_logger or AuditLogger()
        self._profile = profile or UserProfile()
        self._today = today

        self._handlers: dict[CommandType, Callable[[VoiceCommand], Awaitable[CommandOutcome]]] = {
            CommandType.ADD_EXPENSE: self._add_transaction,
            CommandType.ADD_INCOME: self._add_transaction,
            CommandType.NAVIGATE: self._navigate,
            CommandType.SCROLL_TO: self._scroll_to,
            CommandType.FILTER: self._filter,
            CommandType.FILTER_DATE: self._filter_date,
            CommandType.GET_BALANCE: self._get_balance,
            CommandType.DELETE_LAST: self._delete_last,
            CommandType.DELETE_CATEGORY: self._delete_category,
            CommandType.SHOW_HELP: self._show_help,
            CommandType.STOP_LISTENING: self._stop_listening,
        }

    @property
    def speech(self) -> SpeechOutput:
        return self._speech

    async def execute(
        self,
        command: VoiceCommand,
        correlation_id: Optional[UUID] = None,
        confirmed: bool = False,
    ) -> CommandOutcome:
        """
        Execute a command and report what happened.

        Args:
            command: The recognised command
            correlation_id: Ties audit events to the utterance
            confirmed: Must be True for commands that require security
        """
        if command.requires_security and not confirmed:
            outcome = CommandOutcome(
                command=command,
                success=False,
                message="Confirmation required",
                error_message=f"{command.type.value} requires security confirmation",
            )
            await self._audit.log_command_failed(
                command.type.value, outcome.error_message, correlation_id
            )
            return outcome

        handler = self._handlers[command.type]
        try:
            outcome = await handler(command)
        except (StorageError, ValidationError) as e:
            error_message = _describe_rejection(e)
            logger.warning(
                "command_rejected",
                command_type=command.type.value,
                error=error_message,
            )
            outcome = CommandOutcome(
                command=command,
                success=False,
                message=f"Could not complete {command.type.value}: {error_message}",
                error_message=error_message,
            )
            await self._audit.log_command_failed(
                command.type.value, error_message, correlation_id
            )
            self._speech.speak(outcome.message)
            return outcome

        await self._audit.log_command_executed(
            command.type.value,
            outcome.message,
            correlation_id,
            details=outcome.data or None,
        )
        self._speech.speak(outcome.message)
        return outcome

    def _money(self, amount) -> str:
        return f"{self._profile.currency_symbol}{format_amount(amount)}"

    async def _add_transaction(self, command: VoiceCommand) -> CommandOutcome:
        is_income = command.type == CommandType.ADD_INCOME
        category = command.category or (INCOME_FALLBACK if is_income else EXPENSE_FALLBACK)

        created = await self._store.create_transaction(
            self._user_id,
            TransactionCreate(
                type=TransactionType.INCOME if is_income else TransactionType.EXPENSE,
                amount=command.amount,
                category=category,
                description=command.description,
                date=self._today(),
            ),
        )

        kind = "income" if is_income else "expense"
        return CommandOutcome(
            command=command,
            success=True,
            message=f"Added {self._money(command.amount)} {kind} for {category}",
            data={"transaction": created.model_dump(mode="json")},
        )

    async def _navigate(self, command: VoiceCommand) -> CommandOutcome:
        self._presentation.navigate(command.route or "/")
        return CommandOutcome(command=command, success=True, message="Navigating to dashboard")

    async def _scroll_to(self, command: VoiceCommand) -> CommandOutcome:
        element = command.element or "dashboard"
        self._presentation.scroll_to(element)
        return CommandOutcome(command=command, success=True, message=f"Scrolling to {element}")

    async def _filter(self, command: VoiceCommand) -> CommandOutcome:
        self._presentation.apply_filter(category=command.category)
        return CommandOutcome(
            command=command,
            success=True,
            message=f"Filtering by {command.category}",
        )

    async def _filter_date(self, command: VoiceCommand) -> CommandOutcome:
        self._presentation.apply_filter(date=command.date)
        return CommandOutcome(
            command=command,
            success=True,
            message=f"Showing {command.date}'s transactions",
        )

    async def _get_balance(self, command: VoiceCommand) -> CommandOutcome:
        transactions = await self._store.list_transactions(self._user_id)
        totals = summarize(transactions)
        return CommandOutcome(
            command=command,
            success=True,
            message=f"Your current balance is {self._profile.money(totals.balance)}",
            data={
                "balance": str(totals.balance),
                "income": str(totals.income),
                "expense": str(totals.expense),
            },
        )

    async def _delete_last(self, command: VoiceCommand) -> CommandOutcome:
        transactions = await self._store.list_transactions(self._user_id)
        if not transactions:
            return CommandOutcome(command=command, success=True, message="No transactions to delete")

        # The store lists newest first
        last = transactions[0]
        await self._store.delete_transaction(last.id)
        return CommandOutcome(
            command=command,
            success=True,
            message="Deleted the last transaction",
            data={"deleted_ids": [str(last.id)]},
        )

    async def _delete_category(self, command: VoiceCommand) -> CommandOutcome:
        transactions = await self._store.list_transactions(self._user_id)
        targets = [
            t for t in transactions
            if t.type == TransactionType.EXPENSE and t.category == command.category
        ]
        if not targets:
            return CommandOutcome(
                command=command,
                success=True,
                message=f"No {command.category} expenses to delete",
            )

        for transaction in targets:
            await self._store.delete_transaction(transaction.id)

        return CommandOutcome(
            command=command,
            success=True,
            message=f"Deleted all {command.category} expenses",
            data={"deleted_ids": [str(t.id) for t in targets]},
        )

    async def _show_help(self, command: VoiceCommand) -> CommandOutcome:
        self._presentation.show_help()
        return CommandOutcome(command=command, success=True, message="Showing available commands")

    async def _stop_listening(self, command: VoiceCommand) -> CommandOutcome:
        # The session owns the listening state and stops capture itself
        return CommandOutcome(command=command, success=True, message="Stopping voice recognition")
