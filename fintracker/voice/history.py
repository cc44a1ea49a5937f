"""
Command History

A bounded, display-only log of recent final transcripts. Entries are kept
per session key, newest last, and trimmed to the configured limit. When a
file path is configured the log is persisted as JSON; a missing or
unreadable file starts an empty history.
"""

import json
from pathlib import Path
from typing import Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from fintracker.models.voice import CommandHistoryEntry

logger = structlog.get_logger(__name__)

_entries_adapter = TypeAdapter(list[CommandHistoryEntry])


class CommandHistory:
    """Most recent commands for one session key."""

    def __init__(
        self,
        limit: int = 10,
        path: Optional[Path] = None,
        session_key: str = "default",
    ):
        self._limit = limit
        self._path = Path(path) if path else None
        self._session_key = session_key
        self._entries: list[CommandHistoryEntry] = self._load()

    @property
    def entries(self) -> list[CommandHistoryEntry]:
        return list(self._entries)

    def append(self, command_text: str) -> CommandHistoryEntry:
        entry = CommandHistoryEntry(command_text=command_text)
        self._entries = (self._entries + [entry])[-self._limit:]
        self._save()
        return entry

    def clear(self) -> None:
        self._entries = []
        self._save()

    def _read_file(self) -> dict:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("command_history_unreadable", path=str(self._path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _load(self) -> list[CommandHistoryEntry]:
        raw = self._read_file().get(self._session_key, [])
        try:
            entries = _entries_adapter.validate_python(raw)
        except ValidationError as e:
            logger.warning("command_history_invalid", session_key=self._session_key, error=str(e))
            return []
        return entries[-self._limit:]

    def _save(self) -> None:
        if self._path is None:
            return
        data = self._read_file()
        data[self._session_key] = _entries_adapter.dump_python(self._entries, mode="json")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            # Display-only log: a failed write loses history, nothing else
            logger.warning("command_history_write_failed", path=str(self._path), error=str(e))
