"""
Voice Command Package

Category classification, the ordered command table, capture backends
and the command history. VoiceSession lives in fintracker.voice.session
and is imported from there, since it depends on fintracker.commands.
"""

from fintracker.voice.classifier import (
    classify_expense,
    classify_income,
    clean_description,
    normalize_category,
)
from fintracker.voice.history import CommandHistory
from fintracker.voice.patterns import (
    COMMAND_TABLE,
    HELP_EXAMPLES,
    SECURITY_PROMPT,
    UNKNOWN_COMMAND_MESSAGE,
    CommandDefinition,
    describe_command,
    interpret,
)
from fintracker.voice.recognizer import (
    CaptureUnavailableError,
    SpeechRecognizer,
    TextRecognizer,
    UnavailableRecognizer,
    describe_recognition_error,
)

__all__ = [
    "classify_expense",
    "classify_income",
    "clean_description",
    "normalize_category",
    "CommandHistory",
    "COMMAND_TABLE",
    "HELP_EXAMPLES",
    "SECURITY_PROMPT",
    "UNKNOWN_COMMAND_MESSAGE",
    "CommandDefinition",
    "describe_command",
    "interpret",
    "CaptureUnavailableError",
    "SpeechRecognizer",
    "TextRecognizer",
    "UnavailableRecognizer",
    "describe_recognition_error",
]
