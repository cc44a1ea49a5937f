"""
Audit Logger

DESIGN DECISION: Every voice action that reaches the security gate or the
store is logged. This provides:
1. Traceability of destructive commands (who confirmed what, when)
2. Debugging capability for misrecognised phrases
3. A record of store failures surfaced to the user

The audit logger:
- Is async to match the storage interface
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace all events of one utterance
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from fintracker.models.audit import AuditEvent, AuditEventBuilder
from fintracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (always)
    2. Audit storage (when configured)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_capture_started(self, session_id: str) -> None:
        await self.log(AuditEventBuilder.capture_started(session_id))

    async def log_capture_stopped(self, session_id: str, reason: str) -> None:
        await self.log(AuditEventBuilder.capture_stopped(session_id, reason))

    async def log_capture_unsupported(self, session_id: str, reason: str) -> None:
        await self.log(AuditEventBuilder.capture_unsupported(session_id, reason))

    async def log_recognition_error(
        self,
        session_id: str,
        code: str,
        message: str,
    ) -> None:
        await self.log(AuditEventBuilder.recognition_error(session_id, code, message))

    async def log_transcript_received(
        self,
        transcript: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transcript_received(transcript, correlation_id))

    async def log_command_recognized(
        self,
        command_type: str,
        transcript: str,
        correlation_id: UUID,
    ) -> None:
        """Log a transcript that matched a command pattern."""
        event = AuditEventBuilder.command_recognized(
            command_type=command_type,
            transcript=transcript,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_command_unrecognized(
        self,
        transcript: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.command_unrecognized(transcript, correlation_id))

    async def log_security_check_required(
        self,
        command_type: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.security_check_required(command_type, correlation_id)
        )

    async def log_security_confirmed(
        self,
        command_type: str,
        correlation_id: Optional[UUID],
    ) -> None:
        await self.log(AuditEventBuilder.security_confirmed(command_type, correlation_id))

    async def log_security_cancelled(
        self,
        command_type: str,
        reason: str,
        correlation_id: Optional[UUID],
    ) -> None:
        """Log a pending command discarded by cancel or by a newer command."""
        event = AuditEventBuilder.security_cancelled(
            command_type=command_type,
            reason=reason,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_command_executed(
        self,
        command_type: str,
        message: str,
        correlation_id: Optional[UUID],
        details: Optional[dict] = None,
    ) -> None:
        event = AuditEventBuilder.command_executed(
            command_type=command_type,
            message=message,
            correlation_id=correlation_id,
            details=details,
        )
        await self.log(event)

    async def log_command_failed(
        self,
        command_type: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> None:
        event = AuditEventBuilder.command_failed(
            command_type=command_type,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this when a final transcript arrives; pass it through
    recognition, the security gate and execution.
    """
    return uuid4()
