"""
Speech Capture Backends

A recogniser turns audio into transcripts and hands them to a VoiceSession
via handle_transcript(). The session owns the idle/listening state; a
recogniser only starts and stops the underlying capture.

Capture is single-session. A backend that cannot capture in the current
runtime raises CaptureUnavailableError from start(); the session reports
that once and returns False from every later start_capture().
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

RECOGNITION_ERROR_MESSAGES = {
    "no-speech": "No speech detected. Please try again.",
    "audio-capture": "No microphone found. Please check your microphone.",
    "not-allowed": "Microphone access denied. Please allow microphone access.",
    "network": "Network error. Please check your internet connection.",
}


def describe_recognition_error(code: str) -> str:
    """User-facing message for a recogniser error code."""
    return RECOGNITION_ERROR_MESSAGES.get(code, f"Error: {code}")


class CaptureUnavailableError(Exception):
    """Speech capture is not supported in this runtime."""
    pass


class SpeechRecognizer(ABC):
    """Abstract capture backend."""

    @abstractmethod
    def is_available(self) -> bool:
        """True if start() can succeed in this runtime."""
        pass

    @abstractmethod
    def start(self, language: str) -> None:
        """
        Begin capturing.

        Raises:
            CaptureUnavailableError: If capture is not supported
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing. Safe to call when not capturing."""
        pass


class TextRecognizer(SpeechRecognizer):
    """
    Typed-text backend.

    The host collects text (a console, a chat box, a test) and passes it
    straight to VoiceSession.handle_transcript(). Always available.
    """

    def __init__(self):
        self.capturing = False
        self.language: Optional[str] = None

    def is_available(self) -> bool:
        return True

    def start(self, language: str) -> None:
        self.capturing = True
        self.language = language
        logger.debug("text_capture_started", language=language)

    def stop(self) -> None:
        self.capturing = False


class UnavailableRecognizer(SpeechRecognizer):
    """Stand-in for runtimes without a microphone or recognition service."""

    def __init__(self, reason: str = "Speech recognition not supported in this environment"):
        self.reason = reason

    def is_available(self) -> bool:
        return False

    def start(self, language: str) -> None:
        raise CaptureUnavailableError(self.reason)

    def stop(self) -> None:
        pass
