"""
Locating the MTGA log file.

Looks in the default Windows location, a few alternative folders the client
has used, and the Steam logs directory, then picks the most recently
modified file.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..config.constants import (
    ALTERNATIVE_LOG_DIRS_RELATIVE,
    DEFAULT_LOG_FILENAMES,
    DEFAULT_MTGA_LOG_RELATIVE,
    STEAM_MTGA_LOGS_DIR,
)

logger = logging.getLogger(__name__)


def _steam_logs(steam_dir: Path) -> List[Path]:
    try:
        return [p for p in steam_dir.iterdir() if p.suffix.lower() == ".log" and p.is_file()]
    except OSError:
        return []


def find_log_candidates(home: Optional[Path] = None, steam_dir: Optional[Path] = None) -> List[Path]:
    """
    List existing log files in the known locations.

    Args:
        home: Home directory to search under (defaults to the current user's)
        steam_dir: Steam MTGA logs directory (defaults to the standard install path)

    Returns:
        Existing files, without duplicates, in search order
    """
    home = home or Path.home()
    steam_dir = steam_dir or STEAM_MTGA_LOGS_DIR

    base_dirs = [home.joinpath(*DEFAULT_MTGA_LOG_RELATIVE)]
    base_dirs.extend(home.joinpath(*parts) for parts in ALTERNATIVE_LOG_DIRS_RELATIVE)

    candidates: List[Path] = []
    for base_dir in base_dirs:
        for filename in DEFAULT_LOG_FILENAMES:
            candidates.append(base_dir / filename)
    candidates.extend(_steam_logs(steam_dir))

    found = []
    seen = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.is_file():
                found.append(path)
        except OSError:
            continue
    return found


def find_latest_log(home: Optional[Path] = None, steam_dir: Optional[Path] = None) -> Optional[Path]:
    """Most recently modified candidate log, or None if there is none."""
    candidates = find_log_candidates(home=home, steam_dir=steam_dir)
    if not candidates:
        logger.warning("No MTGA log file found in the known locations")
        return None

    latest = max(candidates, key=lambda p: p.stat().st_mtime)
    logger.info(f"Using MTGA log: {latest}")
    return latest
