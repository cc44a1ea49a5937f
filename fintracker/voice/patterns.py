"""
Speech-to-Intent Pattern Matcher

DESIGN DECISION: First match wins, in authoring order.
The table below is scanned top to bottom; within an entry, patterns are
tried in order; the first pattern that matches anywhere in the lowercased
transcript decides the command. There is no scoring and no best-match.

Several patterns overlap on purpose. The generic "<amount> for <thing>"
expense pattern sits inside the expense entry, which comes before the
income entry, so "received 500 for freelance project" is an expense.
Reordering the table changes behaviour; the regression tests pin the
ambiguous phrases.
"""

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from fintracker.models.voice import CommandType, VoiceCommand
from fintracker.voice.classifier import (
    classify_expense,
    classify_income,
    clean_description,
    normalize_category,
)

logger = structlog.get_logger(__name__)

UNKNOWN_COMMAND_MESSAGE = (
    "I didn't understand that. Try saying 'help' to see available commands."
)
SECURITY_PROMPT = (
    "This action requires security confirmation. Please confirm to proceed."
)

_AMOUNT = r"(\d+(?:\.\d+)?)"
CENT = Decimal("0.01")


class CommandDefinition(BaseModel):
    """One table entry: ordered pattern alternatives and a builder."""
    model_config = ConfigDict(frozen=True)

    type: CommandType
    patterns: tuple[re.Pattern, ...]
    build: Callable[[re.Match], VoiceCommand]

    def match(self, text: str) -> Optional[re.Match]:
        for pattern in self.patterns:
            found = pattern.search(text)
            if found:
                return found
        return None


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


def _spoken_amount(text: str) -> Decimal:
    # Stored amounts carry at most two decimal places
    return Decimal(text).quantize(CENT, rounding=ROUND_HALF_UP)


def _add_expense(m: re.Match) -> VoiceCommand:
    return VoiceCommand(
        type=CommandType.ADD_EXPENSE,
        amount=_spoken_amount(m.group(1)),
        description=clean_description(m.group(2)),
        category=classify_expense(m.group(2)),
    )


def _add_income(m: re.Match) -> VoiceCommand:
    return VoiceCommand(
        type=CommandType.ADD_INCOME,
        amount=_spoken_amount(m.group(1)),
        description=clean_description(m.group(2)),
        category=classify_income(m.group(2)),
    )


COMMAND_TABLE: tuple[CommandDefinition, ...] = (
    CommandDefinition(
        type=CommandType.ADD_EXPENSE,
        patterns=_compile(
            rf"add (?:an? )?(?:expense|spending|purchase|payment) (?:of )?{_AMOUNT}(?:\s*dollars?)?(?:\s+for|\s+on)?\s+(.+)",
            rf"(?:i )?(?:spent|paid|bought|purchased) (?:about )?{_AMOUNT}(?:\s*dollars?)?(?:\s+on|\s+for)?\s+(.+)",
            rf"(?:add|record|log) (?:expense|spending) {_AMOUNT}\s+(.+)",
            rf"{_AMOUNT}\s+(?:dollars? )?(?:for|on) (.+)",
        ),
        build=_add_expense,
    ),
    CommandDefinition(
        type=CommandType.ADD_INCOME,
        patterns=_compile(
            rf"add (?:an? )?(?:income|money|salary|payment) (?:of )?{_AMOUNT}(?:\s*dollars?)?(?:\s+from|\s+for)?\s+(.+)",
            rf"(?:i )?(?:received|got|earned|made) (?:about )?{_AMOUNT}(?:\s*dollars?)?(?:\s+from|\s+for)?\s+(.+)",
            rf"(?:add|record|log) (?:income|deposit) {_AMOUNT}\s+(.+)",
        ),
        build=_add_income,
    ),
    CommandDefinition(
        type=CommandType.NAVIGATE,
        patterns=_compile(
            r"(?:show|go to|open|view) (?:the )?dashboard",
            r"(?:take me to|navigate to) (?:the )?dashboard",
        ),
        build=lambda m: VoiceCommand(type=CommandType.NAVIGATE, route="/"),
    ),
    CommandDefinition(
        type=CommandType.SCROLL_TO,
        patterns=_compile(
            r"(?:show|view|list) (?:all )?(?:my )?transactions",
            r"(?:show|view) (?:transaction )?list",
        ),
        build=lambda m: VoiceCommand(type=CommandType.SCROLL_TO, element="transactions"),
    ),
    CommandDefinition(
        type=CommandType.FILTER,
        patterns=_compile(
            r"(?:show|view|filter) (?:all )?(.+?) (?:expenses|transactions)",
            r"filter (?:by )?(?:category )?(.+)",
        ),
        build=lambda m: VoiceCommand(
            type=CommandType.FILTER,
            category=normalize_category(m.group(1)),
        ),
    ),
    CommandDefinition(
        type=CommandType.FILTER_DATE,
        patterns=_compile(
            r"(?:show|view) (?:today[']?s?) (?:transactions|spending|expenses)",
            r"what (?:did|have) i (?:spend|spent) today",
        ),
        build=lambda m: VoiceCommand(type=CommandType.FILTER_DATE, date="today"),
    ),
    CommandDefinition(
        type=CommandType.GET_BALANCE,
        patterns=_compile(
            r"what (?:is|'s) my (?:current )?balance",
            r"how much money (?:do|does) i have",
            r"check (?:my )?balance",
            r"show (?:my )?balance",
        ),
        build=lambda m: VoiceCommand(type=CommandType.GET_BALANCE),
    ),
    CommandDefinition(
        type=CommandType.DELETE_LAST,
        patterns=_compile(
            r"delete (?:the )?last transaction",
            r"remove (?:the )?last transaction",
            r"undo (?:the )?last (?:transaction|entry)",
        ),
        build=lambda m: VoiceCommand(type=CommandType.DELETE_LAST, requires_security=True),
    ),
    CommandDefinition(
        type=CommandType.DELETE_CATEGORY,
        patterns=_compile(
            r"delete (?:all )?(.+?) (?:expenses|transactions)",
            r"remove (?:all )?(.+?) (?:expenses|transactions)",
            r"clear (?:all )?(.+?) (?:expenses|transactions)",
        ),
        build=lambda m: VoiceCommand(
            type=CommandType.DELETE_CATEGORY,
            category=normalize_category(m.group(1)),
            requires_security=True,
        ),
    ),
    CommandDefinition(
        type=CommandType.SHOW_HELP,
        patterns=_compile(
            r"what can i (?:say|do)",
            r"help (?:with )?(?:commands|voice)",
            r"show (?:available )?commands",
            r"how (?:do|can) i use (?:this|voice commands)",
        ),
        build=lambda m: VoiceCommand(type=CommandType.SHOW_HELP),
    ),
    CommandDefinition(
        type=CommandType.STOP_LISTENING,
        patterns=_compile(
            r"stop (?:listening|voice)",
            r"turn (?:the )?(?:microphone|voice) (?:off|on)",
            r"exit voice (?:mode|command)",
        ),
        build=lambda m: VoiceCommand(type=CommandType.STOP_LISTENING),
    ),
)


def interpret(transcript: str) -> Optional[VoiceCommand]:
    """
    Turn a final transcript into a command.

    Returns None when nothing matches. A match whose captured values do
    not form a valid command (e.g. a zero amount) is also None: the first
    matching pattern decides, and later entries are not consulted.
    """
    text = transcript.lower().strip()
    if not text:
        return None

    for definition in COMMAND_TABLE:
        found = definition.match(text)
        if found is None:
            continue
        try:
            return definition.build(found)
        except ValidationError as e:
            logger.warning(
                "command_build_failed",
                command_type=definition.type.value,
                transcript=text,
                error=str(e),
            )
            return None

    return None


def format_amount(amount: Optional[Decimal]) -> str:
    """Plain spoken amount: 25 -> "25", 25.50 -> "25.5"."""
    if amount is None:
        return "0"
    return format(amount.normalize(), "f")


def describe_command(command: VoiceCommand, currency_symbol: str = "$") -> str:
    """The message spoken and shown when a command is recognised."""
    amount = f"{currency_symbol}{format_amount(command.amount)}"
    messages = {
        CommandType.ADD_EXPENSE: f"Adding {amount} expense for {command.category}",
        CommandType.ADD_INCOME: f"Adding {amount} income for {command.category}",
        CommandType.NAVIGATE: "Navigating to dashboard",
        CommandType.FILTER: f"Filtering by {command.category}",
        CommandType.GET_BALANCE: "Checking your balance",
        CommandType.DELETE_LAST: "Please confirm to delete the last transaction",
        CommandType.DELETE_CATEGORY: f"Please confirm to delete all {command.category} expenses",
        CommandType.SHOW_HELP: "Showing available commands",
        CommandType.STOP_LISTENING: "Stopping voice recognition",
    }
    return messages.get(command.type, f"Executing: {command.type.value}")


# Example phrases shown by the help command
HELP_EXAMPLES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Add Expense", ("Spent 25 on groceries", "Paid 30 for gas", "50 for lunch")),
    ("Add Income", ("Add income 1000 from salary", "Received 500 from freelance")),
    ("Check Balance", ("What is my balance?", "How much money do I have?", "Show my balance")),
    ("View Transactions", ("Show my transactions", "View today's spending")),
    ("Filter", ("Show food expenses", "Filter by shopping")),
    ("Delete (Security Required)", ("Delete last transaction", "Remove all food expenses")),
    ("Navigation", ("Go to dashboard", "View transaction list")),
    ("Help", ("What can I say?", "Show commands")),
)
