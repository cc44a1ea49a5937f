"""
Voice Session

DESIGN DECISION: All interpreter state lives on a session object.
One VoiceSession owns:
1. The capture state (idle / listening) and its inactivity timeout
2. The security gate with the single pending command
3. The command history for its session key

Nothing is module-level, so several sessions can run side by side and
each test builds its own.

Flow for a final transcript:
    transcript -> history -> interpret()
        no match       -> UNKNOWN_COMMAND (pending command untouched)
        destructive    -> gate.hold() -> SECURITY_CHECK_REQUIRED
        anything else  -> discard pending -> execute -> COMMAND_RESULT

Subscribers are plain callables receiving VoiceEvents. A subscriber that
raises is logged and skipped; it never breaks the session.
"""

import asyncio
import time
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from fintracker.audit.logger import AuditLogger, create_correlation_id
from fintracker.commands.executor import CommandExecutor
from fintracker.commands.gate import PendingCommand, SecurityGate
from fintracker.config.settings import VoiceSettings
from fintracker.models.voice import (
    CaptureState,
    CommandOutcome,
    CommandType,
    VoiceCommand,
    VoiceEvent,
    VoiceEventType,
)
from fintracker.voice.history import CommandHistory
from fintracker.voice.patterns import (
    SECURITY_PROMPT,
    UNKNOWN_COMMAND_MESSAGE,
    describe_command,
    interpret,
)
from fintracker.voice.recognizer import (
    CaptureUnavailableError,
    SpeechRecognizer,
    TextRecognizer,
    describe_recognition_error,
)

logger = structlog.get_logger(__name__)

Subscriber = Callable[[VoiceEvent], None]


class VoiceSession:
    """
    One user's voice command session.

    Usage:
        session = VoiceSession(executor)
        session.subscribe(print)
        await session.start_capture()
        await session.handle_transcript("spent 25 on groceries")
    """

    def __init__(
        self,
        executor: CommandExecutor,
        recognizer: Optional[SpeechRecognizer] = None,
        settings: Optional[VoiceSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        history: Optional[CommandHistory] = None,
        session_id: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
        currency_symbol: str = "$",
    ):
        self._executor = executor
        self._recognizer = recognizer or TextRecognizer()
        self._settings = settings or VoiceSettings()
        self._audit = audit_logger or AuditLogger()
        self._session_id = session_id or str(uuid4())
        self._history = history or CommandHistory(
            limit=self._settings.history_limit,
            path=self._settings.history_path,
            session_key=self._session_id,
        )
        self._clock = clock
        self._currency_symbol = currency_symbol

        self._gate = SecurityGate()
        self._state = CaptureState.IDLE
        self._last_activity: Optional[float] = None
        self._subscribers: list[Subscriber] = []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._timeout_task: Optional[asyncio.Task] = None

        # Capture support is probed once; the answer is final
        self._capture_error: Optional[str] = None
        self._unsupported_reported = False
        if not self._recognizer.is_available():
            self._capture_error = "Speech recognition not supported in this environment"

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._state == CaptureState.LISTENING

    @property
    def capture_supported(self) -> bool:
        return self._capture_error is None

    @property
    def pending_command(self) -> Optional[PendingCommand]:
        return self._gate.pending

    @property
    def history(self) -> CommandHistory:
        return self._history

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an event callback. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self, event: VoiceEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    "voice_subscriber_failed",
                    event_type=event.type.value,
                    error=str(e),
                )

    def _status(self, message: str) -> None:
        self._emit(VoiceEvent(
            type=VoiceEventType.STATUS_CHANGE,
            message=message,
            is_listening=self.is_listening,
        ))

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    async def _report_unsupported(self) -> None:
        if self._unsupported_reported:
            return
        self._unsupported_reported = True
        await self._audit.log_capture_unsupported(self._session_id, self._capture_error)
        self._emit(VoiceEvent(
            type=VoiceEventType.ERROR,
            message=self._capture_error,
            is_listening=False,
        ))

    async def start_capture(self) -> bool:
        """
        idle -> listening.

        Returns False if already listening or if capture is unsupported.
        """
        if self._capture_error is not None:
            await self._report_unsupported()
            return False
        if self.is_listening:
            return False

        try:
            self._recognizer.start(self._settings.language)
        except CaptureUnavailableError as e:
            self._capture_error = str(e) or "Speech recognition not supported"
            await self._report_unsupported()
            return False

        self._state = CaptureState.LISTENING
        self._touch()
        await self._audit.log_capture_started(self._session_id)
        self._status("Listening... Speak now")
        return True

    async def stop_capture(self, reason: str = "user") -> bool:
        """listening -> idle. Returns False if not listening."""
        if not self.is_listening:
            return False

        self._recognizer.stop()
        self._state = CaptureState.IDLE
        self._last_activity = None
        self._cancel_timer()
        await self._audit.log_capture_stopped(self._session_id, reason)
        self._status("Listening stopped")
        return True

    async def check_timeout(self) -> bool:
        """
        Stop capture if the inactivity timeout has elapsed.

        Hosts without an event loop of their own (a Streamlit rerun) call
        this directly; under a running loop it is also scheduled.
        Returns True if capture was stopped.
        """
        if not self.is_listening or self._last_activity is None:
            return False
        if self._clock() - self._last_activity < self._settings.capture_timeout_seconds:
            return False
        return await self.stop_capture(reason="timeout")

    def _touch(self) -> None:
        self._last_activity = self._clock()
        self._arm_timer()

    def _arm_timer(self) -> None:
        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timer = loop.call_later(
            self._settings.capture_timeout_seconds,
            self._on_timer,
        )

    def _on_timer(self) -> None:
        self._timer = None
        self._timeout_task = asyncio.get_running_loop().create_task(self.check_timeout())
        self._timeout_task.add_done_callback(self._on_timeout_done)

    def _on_timeout_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "capture_timeout_failed",
                session_id=self._session_id,
                error=str(error),
                exc_info=error,
            )

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def report_recognition_error(self, code: str) -> str:
        """Called by a recogniser on failure. Capture stops; returns the message."""
        message = describe_recognition_error(code)
        await self._audit.log_recognition_error(self._session_id, code, message)
        if self.is_listening:
            self._recognizer.stop()
            self._state = CaptureState.IDLE
            self._last_activity = None
            self._cancel_timer()
        self._emit(VoiceEvent(
            type=VoiceEventType.ERROR,
            message=message,
            is_listening=False,
        ))
        return message

    # ------------------------------------------------------------------
    # Transcripts and commands
    # ------------------------------------------------------------------

    async def handle_transcript(
        self,
        text: str,
        is_final: bool = True,
    ) -> Optional[VoiceCommand]:
        """
        Process one transcript from the recogniser.

        Interim transcripts are only echoed to subscribers. A final
        transcript is recorded in the history and interpreted. Returns
        the recognised command, or None.
        """
        if not is_final:
            self._emit(VoiceEvent(
                type=VoiceEventType.TRANSCRIPT,
                interim=text,
                is_listening=self.is_listening,
            ))
            return None

        transcript = text.strip()
        if not transcript:
            return None

        if self.is_listening:
            self._touch()

        self._history.append(transcript)
        self._emit(VoiceEvent(
            type=VoiceEventType.TRANSCRIPT,
            transcript=transcript,
            is_final=True,
            is_listening=self.is_listening,
        ))

        correlation_id = create_correlation_id()
        await self._audit.log_transcript_received(transcript, correlation_id)

        command = interpret(transcript)
        if command is None:
            await self._audit.log_command_unrecognized(transcript, correlation_id)
            self._emit(VoiceEvent(
                type=VoiceEventType.UNKNOWN_COMMAND,
                transcript=transcript,
                message=UNKNOWN_COMMAND_MESSAGE,
                is_listening=self.is_listening,
            ))
            self._executor.speech.speak(UNKNOWN_COMMAND_MESSAGE)
            return None

        await self._audit.log_command_recognized(
            command.type.value, transcript, correlation_id
        )

        if command.requires_security:
            await self._hold(command, transcript, correlation_id)
            return command

        if self._gate.has_pending:
            await self._discard_pending("superseded")

        self._emit(VoiceEvent(
            type=VoiceEventType.RECOGNIZED_COMMAND,
            transcript=transcript,
            command=command,
            message=describe_command(command, self._currency_symbol),
            is_listening=self.is_listening,
        ))
        await self._run(command, correlation_id)
        return command

    async def _hold(
        self,
        command: VoiceCommand,
        transcript: str,
        correlation_id: UUID,
    ) -> None:
        replaced = self._gate.hold(command, transcript, correlation_id)
        if replaced is not None:
            await self._audit.log_security_cancelled(
                replaced.command.type.value,
                "replaced",
                replaced.correlation_id,
            )

        await self._audit.log_security_check_required(command.type.value, correlation_id)
        self._emit(VoiceEvent(
            type=VoiceEventType.SECURITY_CHECK_REQUIRED,
            transcript=transcript,
            command=command,
            message=SECURITY_PROMPT,
            is_listening=self.is_listening,
        ))
        self._executor.speech.speak(
            "This action requires confirmation. Please click confirm to proceed."
        )

    async def _discard_pending(self, reason: str) -> Optional[PendingCommand]:
        discarded = self._gate.discard()
        if discarded is not None:
            await self._audit.log_security_cancelled(
                discarded.command.type.value,
                reason,
                discarded.correlation_id,
            )
        return discarded

    async def _run(
        self,
        command: VoiceCommand,
        correlation_id: Optional[UUID],
        confirmed: bool = False,
    ) -> CommandOutcome:
        outcome = await self._executor.execute(
            command,
            correlation_id=correlation_id,
            confirmed=confirmed,
        )
        self._emit(VoiceEvent(
            type=VoiceEventType.COMMAND_RESULT,
            command=command,
            outcome=outcome,
            message=outcome.message,
            is_listening=self.is_listening,
        ))

        if command.type == CommandType.STOP_LISTENING:
            await self.stop_capture(reason="command")

        return outcome

    async def confirm_pending_command(self, confirm: bool) -> bool:
        """
        Resolve the pending destructive command.

        confirm=True executes it and returns True. confirm=False, or no
        pending command, discards whatever is pending and returns False.
        """
        if not confirm or not self._gate.has_pending:
            discarded = await self._discard_pending("user_cancelled")
            if discarded is not None:
                self._status("Security check cancelled")
                self._executor.speech.speak("Security check cancelled")
            return False

        pending = self._gate.confirm()
        await self._audit.log_security_confirmed(
            pending.command.type.value,
            pending.correlation_id,
        )
        await self._run(pending.command, pending.correlation_id, confirmed=True)
        return True
