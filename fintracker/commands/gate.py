"""
Security Gate

CRITICAL: Destructive voice commands never execute on recognition.
They are parked here as the single pending command until the user
explicitly confirms or cancels. There is no queue: holding a new command
replaces the old one, which is returned to the caller so it can be
audited as cancelled.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from fintracker.models.voice import VoiceCommand


class PendingCommand(BaseModel):
    """A destructive command waiting for confirmation."""
    model_config = ConfigDict(frozen=True)

    command: VoiceCommand
    transcript: str
    correlation_id: Optional[UUID] = None
    held_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class SecurityGate:
    """Holds at most one pending command."""

    def __init__(self):
        self._pending: Optional[PendingCommand] = None

    @property
    def pending(self) -> Optional[PendingCommand]:
        return self._pending

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def hold(
        self,
        command: VoiceCommand,
        transcript: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[PendingCommand]:
        """
        Park a command for confirmation.

        Returns the command it replaced, if any.

        Raises:
            ValueError: If the command does not require security
        """
        if not command.requires_security:
            raise ValueError(f"{command.type.value} does not require confirmation")

        replaced = self._pending
        self._pending = PendingCommand(
            command=command,
            transcript=transcript,
            correlation_id=correlation_id,
        )
        return replaced

    def confirm(self) -> Optional[PendingCommand]:
        """Release the pending command for execution and clear the gate."""
        pending, self._pending = self._pending, None
        return pending

    def discard(self) -> Optional[PendingCommand]:
        """Drop the pending command without executing it."""
        pending, self._pending = self._pending, None
        return pending
