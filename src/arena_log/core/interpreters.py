"""
Interpreters for completed front-door RPC calls.

These turn a handful of well-known RPC responses (quests, events, draft) into
small, display-ready InterpretedEvent records. They are pure: same call in,
same event shape out, and anything unexpected simply yields None.
"""

import dataclasses
import datetime
import logging
from typing import Any, Callable, Dict, List, Optional

from .rpc import RpcCall

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class InterpretedEvent:
    """High-level event derived from one completed RpcCall."""
    type: str
    data: Dict[str, Any]
    source_call: RpcCall
    timestamp: datetime.datetime = dataclasses.field(default_factory=datetime.datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
            "rpc": self.source_call.name,
            "rpc_id": self.source_call.id,
        }


def _to_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else number


def _project_quest(quest: Dict[str, Any]) -> Dict[str, Any]:
    reward = quest.get("reward") or {}
    if not isinstance(reward, dict):
        reward = {}
    quantity = reward.get("quantity")
    return {
        "id": quest.get("questId") or quest.get("id"),
        "description": quest.get("locKey") or quest.get("description") or "",
        "progress": quest.get("currentProgress") or 0,
        "goal": quest.get("goalProgress") or quest.get("goal") or 0,
        "reward_gold": _to_number(quantity) if quantity else None,
        "reward_type": reward.get("type"),
    }


def interpret_quest_get_quests(call: RpcCall) -> Optional[InterpretedEvent]:
    """QuestGetQuests -> `quests` event with one projected entry per quest."""
    data = call.response_payload
    if call.name != "QuestGetQuests" or not data or not isinstance(data, dict):
        return None

    quests = data.get("quests")
    if not isinstance(quests, list):
        return None

    projected = [_project_quest(q) for q in quests if isinstance(q, dict)]
    return InterpretedEvent(type="quests", data={"quests": projected}, source_call=call)


def interpret_event_get_courses(call: RpcCall) -> Optional[InterpretedEvent]:
    """EventGetCoursesV2 -> `events` event (draft / event course listing)."""
    data = call.response_payload
    if call.name != "EventGetCoursesV2" or not data or not isinstance(data, dict):
        return None

    return InterpretedEvent(
        type="events",
        data={
            "courses": data.get("courses") or [],
            "events": data.get("events") or [],
        },
        source_call=call,
    )


def interpret_graph_get_graph_state(call: RpcCall) -> Optional[InterpretedEvent]:
    data = call.response_payload
    if call.name != "GraphGetGraphState" or not data:
        return None
    return InterpretedEvent(type="graph_state", data={"state": data}, source_call=call)


def interpret_draft_make_pick(call: RpcCall) -> Optional[InterpretedEvent]:
    data = call.response_payload
    if call.name != "DraftMakePick" or not data:
        return None
    return InterpretedEvent(type="draft_pick", data={"pick": data}, source_call=call)


def interpret_draft_status(call: RpcCall) -> Optional[InterpretedEvent]:
    data = call.response_payload
    if call.name != "DraftStatus" or not data:
        return None
    return InterpretedEvent(type="draft_status", data={"status": data}, source_call=call)


INTERPRETERS: Dict[str, Callable[[RpcCall], Optional[InterpretedEvent]]] = {
    "QuestGetQuests": interpret_quest_get_quests,
    "EventGetCoursesV2": interpret_event_get_courses,
    "GraphGetGraphState": interpret_graph_get_graph_state,
    "DraftMakePick": interpret_draft_make_pick,
    "DraftStatus": interpret_draft_status,
}


def interpret_rpc(call: RpcCall) -> Optional[InterpretedEvent]:
    """
    Route a completed call to its interpreter by exact method name.

    Returns:
        InterpretedEvent, or None for unknown methods and unexpected payloads
    """
    interpreter = INTERPRETERS.get(call.name)
    if interpreter is None:
        return None
    event = interpreter(call)
    if event is None:
        logger.debug(f"{call.name}({call.id}) response did not have the expected shape")
    return event


# Keyword lists checked in this order; first match wins
RPC_CATEGORY_KEYWORDS: List[tuple] = [
    ("gameplay", ("GameState", "Match", "GameStart", "GameStateMessage")),
    ("draft", ("Draft", "EventGetCourses", "Event_Join")),
    ("economy", ("Quest", "Inventory", "Reward", "Economy")),
    ("ui", ("UI", "Screen", "Dialog", "Modal")),
]


def categorize_rpc_name(name: str) -> str:
    """Bucket an RPC method name into gameplay / draft / economy / ui / system."""
    lower_name = name.lower()
    for category, keywords in RPC_CATEGORY_KEYWORDS:
        if any(keyword.lower() in lower_name for keyword in keywords):
            return category
    return "system"
