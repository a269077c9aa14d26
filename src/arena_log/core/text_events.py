"""
Plain-text client messages.

Besides the JSON traffic, the client writes a few human-readable lines such
as "Match created", "Life total for Opponent: 17" or "DrawCard ... cardId=...".
These are matched with simple patterns and reported as TextEvents. They are
independent of the GRE tracker and never become GameActions.
"""

import dataclasses
import datetime
import re
from typing import Any, Dict, Optional

from .log_line import RawLine

MATCH_CREATED_PATTERN = re.compile(r'Match created', re.IGNORECASE)
LIFE_TOTAL_PATTERN = re.compile(r'Life total for (?P<player>[A-Za-z0-9_ ]+)\s*:\s*(?P<total>\d+)', re.IGNORECASE)
DRAW_CARD_PATTERN = re.compile(r'DrawCard.*cardId=(?P<card_id>[A-Za-z0-9_\-]+)', re.IGNORECASE)


@dataclasses.dataclass(frozen=True)
class TextEvent:
    """One recognised plain-text line."""
    type: str
    line: RawLine
    data: Dict[str, Any] = dataclasses.field(default_factory=dict)
    timestamp: datetime.datetime = dataclasses.field(default_factory=datetime.datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
            "line": self.line.index,
        }


def detect_text_event(line: RawLine) -> Optional[TextEvent]:
    """
    Match a framed line against the known plain-text messages.

    JSON payloads and RPC arrows are skipped so card names or ids inside
    them can't trigger a match. The first matching pattern wins.

    Returns:
        TextEvent, or None for anything else
    """
    message = line.message
    if not message or message.startswith(("{", "[", "==>", "<==")):
        return None

    if MATCH_CREATED_PATTERN.search(message):
        return TextEvent(type="match_created", line=line)

    match = LIFE_TOTAL_PATTERN.search(message)
    if match:
        return TextEvent(
            type="life_total_changed",
            line=line,
            data={"player": match.group("player").strip(), "total": int(match.group("total"))},
        )

    match = DRAW_CARD_PATTERN.search(message)
    if match:
        return TextEvent(type="card_drawn", line=line, data={"card_id": match.group("card_id")})

    return None
