"""Tests for the voice command history."""

import json
import pytest

from fintracker.voice.history import CommandHistory


class TestCommandHistory:
    """Tests for CommandHistory."""

    def test_keeps_most_recent_entries(self):
        """Test that the oldest entries are dropped past the limit."""
        history = CommandHistory(limit=10)
        for i in range(12):
            history.append(f"command {i}")

        texts = [e.command_text for e in history.entries]
        assert len(texts) == 10
        assert texts[0] == "command 2"
        assert texts[-1] == "command 11"

    def test_entries_is_a_copy(self):
        """Test that callers cannot mutate the stored list."""
        history = CommandHistory()
        history.append("check balance")
        history.entries.clear()
        assert len(history.entries) == 1

    def test_persists_across_instances(self, tmp_path):
        """Test that a file-backed history reloads its entries."""
        path = tmp_path / "history.json"
        CommandHistory(path=path, session_key="s1").append("check balance")

        reloaded = CommandHistory(path=path, session_key="s1")
        assert [e.command_text for e in reloaded.entries] == ["check balance"]

    def test_session_keys_are_separate(self, tmp_path):
        """Test that two sessions sharing a file do not see each other."""
        path = tmp_path / "history.json"
        CommandHistory(path=path, session_key="a").append("check balance")
        CommandHistory(path=path, session_key="b").append("show commands")

        assert [e.command_text for e in CommandHistory(path=path, session_key="a").entries] == ["check balance"]
        assert set(json.loads(path.read_text())) == {"a", "b"}

    def test_reload_applies_limit(self, tmp_path):
        """Test that a smaller limit trims a loaded history."""
        path = tmp_path / "history.json"
        history = CommandHistory(limit=10, path=path)
        for i in range(5):
            history.append(f"command {i}")

        assert len(CommandHistory(limit=3, path=path).entries) == 3

    def test_corrupt_file_starts_empty(self, tmp_path):
        """Test that unreadable JSON is ignored."""
        path = tmp_path / "history.json"
        path.write_text("{not json")
        history = CommandHistory(path=path)
        assert history.entries == []

        history.append("check balance")
        assert json.loads(path.read_text())["default"][0]["command_text"] == "check balance"

    def test_invalid_entries_start_empty(self, tmp_path):
        """Test that well-formed JSON with bad entries is ignored."""
        path = tmp_path / "history.json"
        path.write_text(json.dumps({"default": [{"timestamp": "yesterday"}]}))
        assert CommandHistory(path=path).entries == []

    def test_clear(self, tmp_path):
        """Test that clear empties memory and file."""
        path = tmp_path / "history.json"
        history = CommandHistory(path=path)
        history.append("check balance")
        history.clear()
        assert history.entries == []
        assert CommandHistory(path=path).entries == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
