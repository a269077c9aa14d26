"""
Tests for log file discovery.

Run with: pytest tests/test_log_finder.py
"""

import os

from arena_log.core.log_finder import find_latest_log, find_log_candidates


def make_log(path, mtime):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("log\n", encoding="utf-8")
    os.utime(path, (mtime, mtime))
    return path


class TestFindLog:
    """Test searching the known locations."""

    def test_no_logs(self, tmp_path):
        """Test that nothing found means None."""
        assert find_log_candidates(home=tmp_path, steam_dir=tmp_path / "steam") == []
        assert find_latest_log(home=tmp_path, steam_dir=tmp_path / "steam") is None

    def test_default_location(self, tmp_path):
        """Test the standard LocalLow path."""
        log = make_log(tmp_path / "AppData" / "LocalLow" / "Wizards Of The Coast" / "MTGA" / "Player.log", 1000)
        assert find_log_candidates(home=tmp_path, steam_dir=tmp_path / "steam") == [log]

    def test_newest_wins(self, tmp_path):
        """Test that the most recently modified candidate is chosen."""
        make_log(tmp_path / "AppData" / "LocalLow" / "Wizards Of The Coast" / "MTGA" / "Player.log", 1000)
        steam_log = make_log(tmp_path / "steam" / "UTC_Log - 11-22-2025.log", 2000)
        make_log(tmp_path / "steam" / "notes.txt", 3000)

        assert find_latest_log(home=tmp_path, steam_dir=tmp_path / "steam") == steam_log
