"""
RPC call reconstruction for the MTGA front-door protocol.

The client logs each RPC as a request line followed, some time later and
possibly interleaved with unrelated traffic, by a response:

    [UnityCrossThreadLogger]==> QuestGetQuests {"id":"a1b2","request":"{...}"}
    ...
    <== QuestGetQuests(a1b2)
    {"quests":[...]}

The response JSON either follows the header on the same line or sits alone on
the very next line. RpcReconstructor correlates the pieces by id and yields
one RpcCall per completed exchange.
"""

import dataclasses
import datetime
import json
import logging
import re
from collections import OrderedDict
from enum import Enum
from typing import Any, Dict, List, Optional

from .log_line import RawLine

logger = logging.getLogger(__name__)


class RpcDirection(Enum):
    REQUEST = "request"
    RESPONSE = "response"


@dataclasses.dataclass
class RpcCall:
    """
    A single RPC exchange.

    Created when the request is seen, completed in place when the response
    arrives. Once completed it leaves the pending table and is never touched
    again by the reconstructor.
    """
    name: str
    id: str
    direction: RpcDirection = RpcDirection.REQUEST
    tick: int = 0
    timestamp: datetime.datetime = dataclasses.field(default_factory=datetime.datetime.now)
    request_payload: Any = None
    response_payload: Any = None
    raw_request_line: Optional[str] = None
    raw_response_line: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.direction is RpcDirection.RESPONSE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "id": self.id,
            "direction": self.direction.value,
            "tick": self.tick,
            "timestamp": self.timestamp.isoformat(),
            "request_payload": self.request_payload,
            "response_payload": self.response_payload,
        }


@dataclasses.dataclass
class _AwaitedBody:
    """A response header whose JSON is expected on the next line."""
    id: str
    method_name: str
    line_index: int
    raw_line: str


class RpcReconstructor:
    """
    Keyed state machine fusing request/response lines into RpcCall records.

    Pending calls are never expired on their own. They stay until they complete
    or until reset() is called (e.g. when the log file is rotated). Setting
    `max_pending` bounds the table by evicting the oldest pending call.
    """

    REQUEST_PATTERN = re.compile(r'^==>\s*(\w+)\s+(\{.*\})$', re.DOTALL)
    RESPONSE_HEADER_PATTERN = re.compile(r'^<==\s*(\w+)\(([^)]+)\)')
    INLINE_JSON_PATTERN = re.compile(r'(\{.*\})', re.DOTALL)

    def __init__(self, max_pending: Optional[int] = None):
        if max_pending is not None and max_pending <= 0:
            raise ValueError(f"max_pending must be positive, got {max_pending}")
        self.max_pending = max_pending
        self._pending: "OrderedDict[str, RpcCall]" = OrderedDict()
        self._completed: List[RpcCall] = []
        self._awaiting_body: Optional[_AwaitedBody] = None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def get_pending(self, call_id: str) -> Optional[RpcCall]:
        return self._pending.get(call_id)

    def get_all_completed(self) -> List[RpcCall]:
        """All calls completed since the last reset, oldest first."""
        return list(self._completed)

    def reset(self):
        """Drop all pending calls, completed history and any awaited body."""
        if self._pending:
            logger.info(f"RPC reconstructor reset, discarding {len(self._pending)} pending call(s)")
        self._pending.clear()
        self._completed.clear()
        self._awaiting_body = None

    def process_line(self, line: RawLine) -> List[RpcCall]:
        """
        Feed one framed line.

        Returns:
            Calls completed by this line (usually zero or one)
        """
        completed: List[RpcCall] = []
        if line.is_blank:
            return completed

        request = self._detect_request(line)
        if request is not None:
            self._store_pending(request)

        header = self._detect_response_header(line)
        if header is not None:
            method_name, call_id = header
            payload = self._parse_inline_payload(line.message)
            if payload is not None:
                self._awaiting_body = None
                call = self._complete(call_id, payload, line, line.raw)
                if call is not None:
                    completed.append(call)
            else:
                self._awaiting_body = _AwaitedBody(
                    id=call_id,
                    method_name=method_name,
                    line_index=line.index,
                    raw_line=line.raw,
                )
                logger.debug(f"Response header {method_name}({call_id}) waiting for body on next line")
        elif self._awaiting_body is not None:
            awaited = self._awaiting_body
            self._awaiting_body = None
            if awaited.line_index == line.index - 1:
                try:
                    payload = json.loads(line.message)
                except (json.JSONDecodeError, ValueError):
                    logger.debug(f"Line after {awaited.method_name}({awaited.id}) is not JSON, dropping header")
                else:
                    call = self._complete(awaited.id, payload, line, f"{awaited.raw_line}\n{line.raw}")
                    if call is not None:
                        completed.append(call)

        return completed

    def _store_pending(self, call: RpcCall):
        if call.id in self._pending:
            logger.debug(f"Request id {call.id} reused while pending, replacing earlier {self._pending[call.id].name}")
            del self._pending[call.id]
        self._pending[call.id] = call

        if self.max_pending is not None:
            while len(self._pending) > self.max_pending:
                evicted_id, evicted = self._pending.popitem(last=False)
                logger.warning(f"Pending RPC limit ({self.max_pending}) reached, evicting {evicted.name}({evicted_id})")

    def _complete(self, call_id: str, payload: Any, line: RawLine, raw_response: str) -> Optional[RpcCall]:
        call = self._pending.pop(call_id, None)
        if call is None:
            logger.debug(f"Response for unknown request id {call_id}, ignoring")
            return None

        call.response_payload = payload
        call.raw_response_line = raw_response
        call.direction = RpcDirection.RESPONSE
        if line.tick:
            call.tick = line.tick
        call.timestamp = datetime.datetime.now()

        self._completed.append(call)
        logger.debug(f"RPC completed: {call.name}({call.id})")
        return call

    def _detect_request(self, line: RawLine) -> Optional[RpcCall]:
        """
        Match `==> MethodName {json}`.

        The JSON must carry a string `id`. A `request` field may hold either
        an object or a JSON-encoded string; a string that isn't valid JSON
        is kept as-is.
        """
        match = self.REQUEST_PATTERN.match(line.message)
        if not match:
            return None

        method_name, json_str = match.groups()
        try:
            envelope = json.loads(json_str)
        except (json.JSONDecodeError, ValueError):
            return None

        if not isinstance(envelope, dict):
            return None
        call_id = envelope.get("id")
        if not call_id or not isinstance(call_id, str):
            return None

        request_payload = envelope.get("request") or None
        if isinstance(request_payload, str):
            try:
                request_payload = json.loads(request_payload)
            except (json.JSONDecodeError, ValueError):
                pass

        return RpcCall(
            name=method_name,
            id=call_id,
            direction=RpcDirection.REQUEST,
            tick=line.tick or 0,
            request_payload=request_payload,
            raw_request_line=line.raw,
        )

    def _detect_response_header(self, line: RawLine):
        match = self.RESPONSE_HEADER_PATTERN.match(line.message)
        if not match:
            return None
        return match.group(1), match.group(2)

    def _parse_inline_payload(self, message: str) -> Any:
        match = self.INLINE_JSON_PATTERN.search(message)
        if not match:
            return None
        try:
            return json.loads(match.group(1))
        except (json.JSONDecodeError, ValueError):
            return None
