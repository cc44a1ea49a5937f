"""
Voice Command Models

A VoiceCommand is built for each recognised utterance. It is ephemeral:
it is executed immediately, or held as the single pending command while
a security confirmation is outstanding, and then discarded.

CRITICAL: Destructive commands carry requires_security=True from the
moment they are constructed. The executor never sees them unconfirmed.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CommandType(str, Enum):
    """Every action the interpreter can produce."""
    ADD_EXPENSE = "add_expense"
    ADD_INCOME = "add_income"
    NAVIGATE = "navigate"
    SCROLL_TO = "scroll_to"
    FILTER = "filter"
    FILTER_DATE = "filter_date"
    GET_BALANCE = "get_balance"
    DELETE_LAST = "delete_last"
    DELETE_CATEGORY = "delete_category"
    SHOW_HELP = "show_help"
    STOP_LISTENING = "stop_listening"


DESTRUCTIVE_COMMANDS = frozenset({
    CommandType.DELETE_LAST,
    CommandType.DELETE_CATEGORY,
})


class VoiceCommand(BaseModel):
    """A structured command built from a matched transcript."""
    model_config = ConfigDict(frozen=True)

    type: CommandType

    # add_expense / add_income
    amount: Optional[Decimal] = Field(default=None, gt=0)
    description: Optional[str] = None

    # add_*, filter, delete_category
    category: Optional[str] = None

    # navigate / scroll_to / filter_date
    route: Optional[str] = None
    element: Optional[str] = None
    date: Optional[str] = None

    requires_security: bool = False

    @model_validator(mode='after')
    def validate_security_flag(self) -> 'VoiceCommand':
        """Only delete commands may (and must) require confirmation."""
        if self.requires_security != (self.type in DESTRUCTIVE_COMMANDS):
            raise ValueError(
                f"requires_security must be {self.type in DESTRUCTIVE_COMMANDS} "
                f"for {self.type.value}"
            )
        return self


class CaptureState(str, Enum):
    """Speech capture state machine."""
    IDLE = "idle"
    LISTENING = "listening"


class CommandOutcome(BaseModel):
    """Result of executing a command against the host's handlers."""

    command: VoiceCommand
    success: bool
    message: str
    error_message: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)


class VoiceEventType(str, Enum):
    """Events a VoiceSession emits to its subscribers."""
    TRANSCRIPT = "transcript"
    RECOGNIZED_COMMAND = "recognized_command"
    SECURITY_CHECK_REQUIRED = "security_check_required"
    UNKNOWN_COMMAND = "unknown_command"
    STATUS_CHANGE = "status_change"
    COMMAND_RESULT = "command_result"
    ERROR = "error"


class VoiceEvent(BaseModel):
    """A single event delivered to voice UI subscribers."""

    type: VoiceEventType
    message: Optional[str] = None
    transcript: Optional[str] = None
    interim: Optional[str] = None
    is_final: bool = False
    is_listening: bool = False
    command: Optional[VoiceCommand] = None
    outcome: Optional[CommandOutcome] = None


class CommandHistoryEntry(BaseModel):
    """One line of the display-only command history."""

    command_text: str
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
