"""
Tests for decoder preferences.

Run with: pytest tests/test_config_manager.py
"""

import json

from arena_log.config.config_manager import DecoderPreferences


class TestLoadSave:
    """Test persistence of preferences."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """Test defaults when nothing is saved yet."""
        prefs = DecoderPreferences.load(tmp_path / "missing.json")
        assert prefs == DecoderPreferences()
        assert prefs.max_pending_rpcs is None
        assert prefs.log_level == "INFO"

    def test_round_trip(self, tmp_path):
        """Test save() then load()."""
        path = tmp_path / "nested" / "preferences.json"
        DecoderPreferences(log_path="C:/Player.log", max_pending_rpcs=50, start_at_end=True).save(path)

        prefs = DecoderPreferences.load(path)
        assert prefs.log_path == "C:/Player.log"
        assert prefs.max_pending_rpcs == 50
        assert prefs.start_at_end is True

    def test_corrupt_file_gives_defaults(self, tmp_path):
        """Test that invalid JSON is not fatal."""
        path = tmp_path / "preferences.json"
        path.write_text("{not json", encoding="utf-8")
        assert DecoderPreferences.load(path) == DecoderPreferences()

    def test_non_object_gives_defaults(self, tmp_path):
        """Test that a JSON list is rejected."""
        path = tmp_path / "preferences.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert DecoderPreferences.load(path) == DecoderPreferences()

    def test_unknown_keys_are_ignored(self, tmp_path):
        """Test forward compatibility with newer preference files."""
        path = tmp_path / "preferences.json"
        path.write_text(json.dumps({"poll_interval": 0.5, "theme": "dark"}), encoding="utf-8")

        prefs = DecoderPreferences.load(path)
        assert prefs.poll_interval == 0.5
        assert not hasattr(prefs, "theme")

    def test_to_dict(self):
        """Test the plain-dict view."""
        data = DecoderPreferences(log_dir="out").to_dict()
        assert data["log_dir"] == "out"
        assert "show_raw_lines" in data


class TestEnvOverrides:
    """Test environment variable overrides."""

    def test_overrides(self):
        """Test valid values."""
        prefs = DecoderPreferences().apply_env_overrides({
            "MTGA_LOG_PATH": "/tmp/Player.log",
            "MTGA_DECODER_LOG_LEVEL": "debug",
            "MTGA_DECODER_MAX_PENDING_RPCS": "200",
        })
        assert prefs.log_path == "/tmp/Player.log"
        assert prefs.log_level == "DEBUG"
        assert prefs.max_pending_rpcs == 200

    def test_invalid_values_are_ignored(self):
        """Test that bad values keep the saved setting."""
        prefs = DecoderPreferences(log_level="WARNING", max_pending_rpcs=10).apply_env_overrides({
            "MTGA_DECODER_LOG_LEVEL": "chatty",
            "MTGA_DECODER_MAX_PENDING_RPCS": "lots",
        })
        assert prefs.log_level == "WARNING"
        assert prefs.max_pending_rpcs == 10

    def test_non_positive_bound_means_unbounded(self):
        """Test that 0 disables the pending bound."""
        prefs = DecoderPreferences(max_pending_rpcs=10).apply_env_overrides({"MTGA_DECODER_MAX_PENDING_RPCS": "0"})
        assert prefs.max_pending_rpcs is None

    def test_empty_environment(self):
        """Test that nothing changes without variables."""
        assert DecoderPreferences().apply_env_overrides({}) == DecoderPreferences()
