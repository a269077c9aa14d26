"""
Publish-subscribe bus for decoder output.

The pipeline publishes everything it produces (framed lines, completed RPC
calls, interpreted events, plain-text events, game actions, resets) on an EventBus it owns.
Consumers such as the CLI printer subscribe without knowing about the
pipeline internals.

Thread-safe: subscriptions may change from another thread while the
pipeline is emitting.
"""
import logging
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Kinds of decoder output."""
    RAW_LINE = auto()
    RPC_COMPLETED = auto()
    EVENT_INTERPRETED = auto()
    TEXT_EVENT = auto()
    GAME_ACTION = auto()
    PIPELINE_RESET = auto()


@dataclass
class Event:
    """
    One published item.

    Attributes:
        event_type: What kind of output this is
        data: The payload (RawLine, RpcCall, InterpretedEvent, GameAction, ...)
        source: Component that produced it (e.g., "GreGameTracker")
    """
    event_type: EventType
    data: Any = None
    source: str = ""


Handler = Callable[[Event], None]


class EventBus:
    """
    Synchronous event bus.

    Handlers run in registration order on the emitting thread. A handler
    that raises is logged and skipped; the others still run.

    Example:
        >>> bus = EventBus()
        >>> bus.subscribe(EventType.GAME_ACTION, lambda e: print(e.data.kind))
        >>> bus.emit_simple(EventType.GAME_ACTION, action, source="GreGameTracker")
    """

    def __init__(self):
        self._handlers: Dict[EventType, List[Handler]] = {}
        self._global_handlers: List[Handler] = []
        self._handler_lock = threading.Lock()

    def subscribe(self, event_type: EventType, handler: Handler):
        """
        Subscribe to one event type.

        Args:
            event_type: The type of event to subscribe to
            handler: Callable that accepts an Event object
        """
        with self._handler_lock:
            self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type.name}")

    def subscribe_all(self, handler: Handler):
        """Subscribe to every event type."""
        with self._handler_lock:
            self._global_handlers.append(handler)

    def unsubscribe(self, event_type: EventType, handler: Handler):
        with self._handler_lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def emit(self, event: Event):
        """
        Deliver an event to its type's handlers, then to global handlers.

        Args:
            event: The Event object to emit
        """
        with self._handler_lock:
            handlers = list(self._handlers.get(event.event_type, [])) + list(self._global_handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type.name}: {e}", exc_info=True)

    def emit_simple(self, event_type: EventType, data: Any = None, source: str = ""):
        self.emit(Event(event_type=event_type, data=data, source=source))

    def clear(self):
        """Remove all handlers."""
        with self._handler_lock:
            self._handlers.clear()
            self._global_handlers.clear()
