"""
Audit Models for the Finance Tracker

Every voice action that can change data, or that the user should be
able to trace afterwards, is recorded as an audit event:
1. What was heard
2. What it was interpreted as
3. Whether it was confirmed, cancelled or executed

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
Insights are not audited; they are recomputed on every request.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Speech capture
    CAPTURE_STARTED = "capture_started"
    CAPTURE_STOPPED = "capture_stopped"
    CAPTURE_TIMED_OUT = "capture_timed_out"
    CAPTURE_UNSUPPORTED = "capture_unsupported"
    RECOGNITION_ERROR = "recognition_error"

    # Interpretation
    TRANSCRIPT_RECEIVED = "transcript_received"
    COMMAND_RECOGNIZED = "command_recognized"
    COMMAND_UNRECOGNIZED = "command_unrecognized"

    # Security gate
    SECURITY_CHECK_REQUIRED = "security_check_required"
    SECURITY_CONFIRMED = "security_confirmed"
    SECURITY_CANCELLED = "security_cancelled"

    # Execution
    COMMAND_EXECUTED = "command_executed"
    COMMAND_FAILED = "command_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about? ("session", "command", "transaction")
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Ties together all events of one utterance"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.command_recognized("delete_last", transcript, cid)
        event = AuditEventBuilder.security_confirmed("delete_last", cid)
    """

    @staticmethod
    def capture_started(session_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CAPTURE_STARTED,
            entity_type="session",
            entity_id=session_id,
            description="Voice capture started",
            is_user_action=True,
        )

    @staticmethod
    def capture_stopped(session_id: str, reason: str) -> AuditEvent:
        event_type = (
            AuditEventType.CAPTURE_TIMED_OUT
            if reason == "timeout"
            else AuditEventType.CAPTURE_STOPPED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type="session",
            entity_id=session_id,
            description=f"Voice capture stopped ({reason})",
            details={"reason": reason},
        )

    @staticmethod
    def capture_unsupported(session_id: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CAPTURE_UNSUPPORTED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            entity_id=session_id,
            description="Speech capture is not available in this environment",
            error_message=reason,
        )

    @staticmethod
    def recognition_error(session_id: str, code: str, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECOGNITION_ERROR,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            entity_id=session_id,
            description=f"Speech recognition error: {code}",
            error_message=message,
            details={"code": code},
        )

    @staticmethod
    def transcript_received(
        transcript: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSCRIPT_RECEIVED,
            entity_type="command",
            correlation_id=correlation_id,
            description="Final transcript received",
            details={"transcript": transcript},
            is_user_action=True,
        )

    @staticmethod
    def command_recognized(
        command_type: str,
        transcript: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_RECOGNIZED,
            entity_type="command",
            entity_id=command_type,
            correlation_id=correlation_id,
            description=f"Recognised command: {command_type}",
            details={"transcript": transcript},
        )

    @staticmethod
    def command_unrecognized(
        transcript: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_UNRECOGNIZED,
            entity_type="command",
            correlation_id=correlation_id,
            description="No command pattern matched the transcript",
            details={"transcript": transcript},
        )

    @staticmethod
    def security_check_required(
        command_type: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SECURITY_CHECK_REQUIRED,
            severity=AuditSeverity.WARNING,
            entity_type="command",
            entity_id=command_type,
            correlation_id=correlation_id,
            description=f"Destructive command held for confirmation: {command_type}",
        )

    @staticmethod
    def security_confirmed(
        command_type: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SECURITY_CONFIRMED,
            entity_type="command",
            entity_id=command_type,
            correlation_id=correlation_id,
            description=f"User confirmed {command_type}",
            is_user_action=True,
        )

    @staticmethod
    def security_cancelled(
        command_type: str,
        reason: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SECURITY_CANCELLED,
            entity_type="command",
            entity_id=command_type,
            correlation_id=correlation_id,
            description=f"Pending {command_type} discarded",
            details={"reason": reason},
            is_user_action=reason == "user_cancelled",
        )

    @staticmethod
    def command_executed(
        command_type: str,
        message: str,
        correlation_id: Optional[UUID],
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_EXECUTED,
            entity_type="command",
            entity_id=command_type,
            correlation_id=correlation_id,
            description=message[:500],
            details=details or {},
        )

    @staticmethod
    def command_failed(
        command_type: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="command",
            entity_id=command_type,
            correlation_id=correlation_id,
            description=f"Command failed: {command_type}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
