"""
Data Models Package

This package contains all Pydantic models used in the finance tracker.
All data flowing through the insight engine and the voice interpreter
must conform to these schemas.
"""

from fintracker.models.transaction import (
    Totals,
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
    parse_transaction_date,
)
from fintracker.models.insight import (
    CategoryShare,
    Insight,
    InsightKind,
    InsightReport,
    MonthlyBucket,
    Severity,
    UserProfile,
)
from fintracker.models.voice import (
    DESTRUCTIVE_COMMANDS,
    CaptureState,
    CommandHistoryEntry,
    CommandOutcome,
    CommandType,
    VoiceCommand,
    VoiceEvent,
    VoiceEventType,
)
from fintracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "Totals",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "TransactionUpdate",
    "parse_transaction_date",
    # Insight models
    "CategoryShare",
    "Insight",
    "InsightKind",
    "InsightReport",
    "MonthlyBucket",
    "Severity",
    "UserProfile",
    # Voice models
    "DESTRUCTIVE_COMMANDS",
    "CaptureState",
    "CommandHistoryEntry",
    "CommandOutcome",
    "CommandType",
    "VoiceCommand",
    "VoiceEvent",
    "VoiceEventType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
