"""
Main Orchestrator for the Finance Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Insights (store -> snapshot -> rules -> rank -> report)
2. Voice (transcript -> interpret -> gate -> execute -> store)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Insights are computed from whatever the store returns, never cached
- Destructive commands pass through the security gate
- Every voice action is audited

Store failures while building a report degrade to an empty report.
"""

from typing import Optional

import structlog

from fintracker.audit import AuditLogger
from fintracker.commands import CommandExecutor, PresentationHandlers, SpeechOutput
from fintracker.config import get_settings
from fintracker.insights import InsightEngine
from fintracker.models.insight import InsightReport, UserProfile
from fintracker.services.storage import (
    InMemoryAuditStorage,
    InMemoryTransactionStore,
    StorageError,
    TransactionStoreInterface,
    describe_storage_error,
)
from fintracker.voice.recognizer import SpeechRecognizer
from fintracker.voice.session import VoiceSession

logger = structlog.get_logger(__name__)


class InsightFlow:
    """
    Orchestrates the dashboard insight panel.

    Flow:
    1. Read the user's transactions from the store
    2. Build the report (totals, ranked insights, health score)

    A refresh started while an older one is still being displayed simply
    replaces it; the latest report wins.
    """

    def __init__(
        self,
        store: TransactionStoreInterface,
        engine: Optional[InsightEngine] = None,
        profile: Optional[UserProfile] = None,
        user_id: str = "default",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._engine = engine or InsightEngine()
        self._profile = profile or UserProfile()
        self._user_id = user_id
        self._audit_logger = audit_logger
        self._latest: Optional[InsightReport] = None

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def profile(self) -> UserProfile:
        return self._profile

    @property
    def latest(self) -> Optional[InsightReport]:
        """The most recently built report, if any."""
        return self._latest

    async def refresh(self) -> InsightReport:
        """Rebuild the report from the store's current contents."""
        try:
            transactions = await self._store.list_transactions(self._user_id)
        except StorageError as e:
            error_message = describe_storage_error(e)
            logger.error("insight_refresh_failed", user_id=self._user_id, error=error_message)
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type="insight_refresh_failed",
                    error_message=error_message,
                    details={"user_id": self._user_id},
                )
            report = InsightReport()
        else:
            report = self._engine.build_report(transactions, self._profile)

        self._latest = report
        return report


def create_store(backend: str) -> TransactionStoreInterface:
    """
    Build the configured transaction store.

    Falls back to the in-memory store when Google Sheets cannot be set up.
    """
    if backend == "google_sheets":
        try:
            from fintracker.services.storage.google_sheets import (
                GoogleSheetsClient,
                GoogleSheetsTransactionStore,
            )
            return GoogleSheetsTransactionStore(GoogleSheetsClient())
        except Exception as e:
            # Storage not configured - continue with local data
            logger.warning("storage_not_configured", backend=backend, error=str(e))
    return InMemoryTransactionStore()


def create_app_components(
    store: Optional[TransactionStoreInterface] = None,
    presentation: Optional[PresentationHandlers] = None,
    speech: Optional[SpeechOutput] = None,
    recognizer: Optional[SpeechRecognizer] = None,
) -> tuple[InsightFlow, VoiceSession, TransactionStoreInterface]:
    """
    Factory function to create all application components.

    Args:
        store: Transaction store to use. Built from settings when None.
        presentation: UI hooks for navigate/scroll/filter/help commands
        speech: Text-to-speech sink
        recognizer: Speech capture backend (typed text when None)

    Returns:
        (insight_flow, voice_session, store)
    """
    settings = get_settings()
    app = settings.app
    voice = settings.voice

    store = store or create_store(app.storage_backend)
    audit_logger = AuditLogger(InMemoryAuditStorage())
    profile = UserProfile(currency_symbol=app.currency_symbol)

    insight_flow = InsightFlow(
        store=store,
        engine=InsightEngine(settings=settings.insights),
        profile=profile,
        user_id=app.user_id,
        audit_logger=audit_logger,
    )

    executor = CommandExecutor(
        store=store,
        user_id=app.user_id,
        presentation=presentation,
        speech=speech,
        audit_logger=audit_logger,
        profile=profile,
    )
    session = VoiceSession(
        executor=executor,
        recognizer=recognizer,
        settings=voice,
        audit_logger=audit_logger,
        session_id=app.user_id,
        currency_symbol=app.currency_symbol,
    )

    return insight_flow, session, store
