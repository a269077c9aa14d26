"""
User preferences for the MTGA log decoder.

Persists settings like:
- Which log file to follow (empty = auto-discover)
- Follower polling behaviour
- Optional bound on pending RPC calls
- Logging level and directory

Environment variables (usually from a .env file) override the saved values.
"""

import dataclasses
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .constants import (
    CONFIG_DIR_NAME,
    ENV_LOG_LEVEL,
    ENV_LOG_PATH,
    ENV_MAX_PENDING_RPCS,
    PREFS_FILENAME,
)

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / CONFIG_DIR_NAME
PREFS_FILE = CONFIG_DIR / PREFS_FILENAME

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclasses.dataclass
class DecoderPreferences:
    """Preferences for the decoder CLI and follower."""

    # Log source
    log_path: str = ""
    poll_interval: float = 0.1  # seconds
    start_at_end: bool = False

    # None keeps pending RPC calls forever (until a reset)
    max_pending_rpcs: Optional[int] = None

    # Diagnostics
    log_level: str = "INFO"
    log_dir: str = "logs"
    show_raw_lines: bool = False

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "DecoderPreferences":
        """Load preferences from file, or return defaults."""
        path = path or PREFS_FILE
        if not path.exists():
            logger.info("No preferences file found. Using defaults.")
            return cls()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load preferences: {e}. Using defaults.")
            return cls()

        if not isinstance(data, dict):
            logger.warning(f"Preferences file {path} does not hold an object. Using defaults.")
            return cls()

        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown preference keys: {sorted(unknown)}")
        prefs = cls(**{k: v for k, v in data.items() if k in known})
        logger.debug(f"Loaded preferences from {path}")
        return prefs

    def save(self, path: Optional[Path] = None):
        """Save preferences to file."""
        path = path or PREFS_FILE
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(dataclasses.asdict(self), f, indent=2)
            logger.debug(f"Saved preferences to {path}")
        except OSError as e:
            logger.error(f"Failed to save preferences: {e}")

    def apply_env_overrides(self, environ: Optional[Mapping[str, str]] = None) -> "DecoderPreferences":
        """
        Override fields from environment variables. Invalid values are
        logged and ignored.
        """
        environ = os.environ if environ is None else environ

        log_path = environ.get(ENV_LOG_PATH)
        if log_path:
            self.log_path = log_path

        log_level = environ.get(ENV_LOG_LEVEL)
        if log_level:
            if log_level.upper() in VALID_LOG_LEVELS:
                self.log_level = log_level.upper()
            else:
                logger.warning(f"Ignoring {ENV_LOG_LEVEL}={log_level!r}")

        max_pending = environ.get(ENV_MAX_PENDING_RPCS)
        if max_pending:
            try:
                value = int(max_pending)
            except ValueError:
                logger.warning(f"Ignoring {ENV_MAX_PENDING_RPCS}={max_pending!r}, not an integer")
            else:
                self.max_pending_rpcs = value if value > 0 else None

        return self

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)
