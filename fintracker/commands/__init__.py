"""Security gate and command executor for recognised voice commands."""

from fintracker.commands.executor import (
    CommandExecutor,
    PresentationHandlers,
    SpeechOutput,
)
from fintracker.commands.gate import PendingCommand, SecurityGate

__all__ = [
    "CommandExecutor",
    "PendingCommand",
    "PresentationHandlers",
    "SecurityGate",
    "SpeechOutput",
]
