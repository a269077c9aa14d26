"""
Line framing for the MTGA Player.log.

Every raw line of the log is turned into a RawLine record before anything else
looks at it. Lines usually look like:

    [1715] [UnityCrossThreadLogger]==> QuestGetQuests {"id":"..."}

where both the numeric tick and the bracketed source tag are optional.
Framing never fails: a line that doesn't fit the pattern becomes a record
whose message is the whole trimmed line.
"""

import dataclasses
import re
from typing import Optional

# [tick] [source] message, tick and source both optional
LOG_LINE_PATTERN = re.compile(r'^(?:\[(\d+)\]\s*)?(?:\[([^\]]+)\])?\s*(.*)$', re.DOTALL)

# Best-effort level tag somewhere in the message
LEVEL_PATTERN = re.compile(r'\b(INFO|ERROR|WARNING|DEBUG)\b', re.IGNORECASE)


@dataclasses.dataclass(frozen=True)
class RawLine:
    """One framed log line. `index` is the arrival order assigned by the driver."""
    raw: str
    index: int
    message: str
    tick: Optional[int] = None
    source: Optional[str] = None
    level: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return not self.message


def _extract_level(message: str) -> Optional[str]:
    match = LEVEL_PATTERN.search(message)
    return match.group(1).upper() if match else None


def frame(raw: str, index: int) -> RawLine:
    """
    Frame a raw log line into a RawLine.

    Args:
        raw: The line as read from the file (trailing newline allowed)
        index: Monotonically increasing arrival index

    Returns:
        RawLine. Blank input yields a record with an empty message and
        no tick/source/level, which callers treat as a no-op line.
    """
    text = raw.strip()
    if not text:
        return RawLine(raw=text, index=index, message="")

    match = LOG_LINE_PATTERN.match(text)
    if not match:
        return RawLine(raw=text, index=index, message=text, level=_extract_level(text))

    tick_str, source, message = match.groups()
    message = message.strip()
    source = source.strip() if source else None

    return RawLine(
        raw=text,
        index=index,
        message=message,
        tick=int(tick_str) if tick_str else None,
        source=source or None,
        level=_extract_level(message),
    )
