"""
Pipeline driver: raw log lines in, decoded output out.

Each line is processed to completion before the next one:

    raw text -> frame() -> RpcReconstructor -> interpret_rpc()
                       |-> detect_text_event()
                       \\-> GreGameTracker

and everything produced is published on the pipeline's EventBus. The
pipeline owns its stateful components; reset() (e.g. on log rotation)
clears both.
"""

import dataclasses
import logging
from typing import Iterable, List, Optional

from .actions import GameAction
from .events import EventBus, EventType
from .gre_tracker import GreGameTracker
from .interpreters import InterpretedEvent, interpret_rpc
from .log_line import RawLine, frame
from .monitoring import get_monitor
from .rpc import RpcCall, RpcReconstructor
from .text_events import TextEvent, detect_text_event

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class LineResult:
    """Everything one line produced."""
    line: RawLine
    rpc_calls: List[RpcCall] = dataclasses.field(default_factory=list)
    events: List[InterpretedEvent] = dataclasses.field(default_factory=list)
    text_events: List[TextEvent] = dataclasses.field(default_factory=list)
    actions: List[GameAction] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class PipelineResult:
    """Totals for a replayed file."""
    lines: int = 0
    rpc_calls: List[RpcCall] = dataclasses.field(default_factory=list)
    events: List[InterpretedEvent] = dataclasses.field(default_factory=list)
    text_events: List[TextEvent] = dataclasses.field(default_factory=list)
    actions: List[GameAction] = dataclasses.field(default_factory=list)


class LogPipeline:
    """
    Single-consumer driver for the decoding components.

    Not thread-safe: if lines come from another thread, hand them over
    through a queue and call process_raw() from one worker only. The draw
    and attack detectors depend on strict line order.
    """

    def __init__(self, bus: Optional[EventBus] = None, max_pending_rpcs: Optional[int] = None,
                 rpc_reconstructor: Optional[RpcReconstructor] = None,
                 game_tracker: Optional[GreGameTracker] = None):
        self.bus = bus or EventBus()
        self.rpc_reconstructor = rpc_reconstructor or RpcReconstructor(max_pending=max_pending_rpcs)
        self.game_tracker = game_tracker or GreGameTracker()
        self._next_index = 0

    @property
    def lines_processed(self) -> int:
        return self._next_index

    def process_raw(self, raw: str) -> Optional[LineResult]:
        """
        Frame and decode one raw line.

        Blank lines are dropped before an index is assigned, so a response
        header and its body stay adjacent.

        Returns:
            LineResult, or None for a blank line
        """
        if not raw.strip():
            return None

        monitor = get_monitor()
        with monitor.measure("pipeline.frame"):
            line = frame(raw, self._next_index)
        self._next_index += 1
        result = LineResult(line=line)

        with monitor.measure("rpc.process_line"):
            result.rpc_calls = self.rpc_reconstructor.process_line(line)
        for call in result.rpc_calls:
            event = interpret_rpc(call)
            if event is not None:
                result.events.append(event)

        text_event = detect_text_event(line)
        if text_event is not None:
            result.text_events.append(text_event)

        result.actions = self.game_tracker.process_line(line)

        self._publish(result)
        return result

    def _publish(self, result: LineResult):
        self.bus.emit_simple(EventType.RAW_LINE, result.line, source="LogPipeline")
        for call in result.rpc_calls:
            self.bus.emit_simple(EventType.RPC_COMPLETED, call, source="RpcReconstructor")
        for event in result.events:
            self.bus.emit_simple(EventType.EVENT_INTERPRETED, event, source="interpret_rpc")
        for text_event in result.text_events:
            self.bus.emit_simple(EventType.TEXT_EVENT, text_event, source="detect_text_event")
        for action in result.actions:
            self.bus.emit_simple(EventType.GAME_ACTION, action, source="GreGameTracker")

    def reset(self):
        """
        Discontinuity in the log (truncation or rotation): drop all pending
        RPC and match state. Line indices keep increasing.
        """
        logger.info(f"Pipeline reset after {self._next_index} lines")
        self.rpc_reconstructor.reset()
        self.game_tracker.reset()
        self.bus.emit_simple(EventType.PIPELINE_RESET, None, source="LogPipeline")

    def replay(self, lines: Iterable[str]) -> PipelineResult:
        """
        Decode a whole sequence of lines (e.g. an old Player.log) and collect
        everything produced.
        """
        summary = PipelineResult()
        for raw in lines:
            result = self.process_raw(raw)
            if result is None:
                continue
            summary.lines += 1
            summary.rpc_calls.extend(result.rpc_calls)
            summary.events.extend(result.events)
            summary.text_events.extend(result.text_events)
            summary.actions.extend(result.actions)
        logger.info(
            f"Replayed {summary.lines} lines: {len(summary.rpc_calls)} RPC calls, "
            f"{len(summary.events)} events, {len(summary.text_events)} text events, "
            f"{len(summary.actions)} game actions"
        )
        return summary
