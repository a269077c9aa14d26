"""
Formatters for displaying decoder output.

Turns GameActions, RpcCalls and InterpretedEvents into display-ready text
for the CLI, keeping presentation out of the decoding components.
"""

import json
import logging
from typing import Iterable, List, Optional

from tabulate import tabulate
from termcolor import colored

from .actions import (
    CardAttacked,
    CardDrawn,
    CardPlayed,
    CardRef,
    DeckState,
    GameAction,
    GameEnded,
    MatchStarted,
    OpeningHand,
    PermanentTapped,
    TurnStarted,
    ZoneTransfer,
)
from .interpreters import InterpretedEvent, categorize_rpc_name
from .rpc import RpcCall
from .text_events import TextEvent

logger = logging.getLogger(__name__)

KIND_COLORS = {
    "match_started": "magenta",
    "game_ended": "magenta",
    "turn_started": "cyan",
    "card_drawn": "green",
    "card_played": "yellow",
    "card_attacked": "red",
    "card_blocked": "red",
}

CATEGORY_COLORS = {
    "gameplay": "cyan",
    "draft": "yellow",
    "economy": "green",
    "ui": "blue",
}


def _strip_prefix(tag: Optional[str]) -> str:
    """'ZoneType_Battlefield' -> 'Battlefield'."""
    if not tag:
        return "?"
    return tag.split("_", 1)[1] if "_" in tag else tag


def _card_label(card: Optional[CardRef], instance_id: int, grp_id: Optional[int]) -> str:
    grp = grp_id if grp_id is not None else (card.grp_id if card else None)
    return f"#{instance_id} (grp {grp})" if grp is not None else f"#{instance_id}"


class ActionFormatter:
    """
    Formats decoder output for a terminal.

    Args:
        use_color: Colour action kinds and RPC categories with termcolor
    """

    def __init__(self, use_color: bool = True):
        self.use_color = use_color

    def _color(self, text: str, color: Optional[str]) -> str:
        if not self.use_color or not color:
            return text
        return colored(text, color)

    def describe_action(self, action: GameAction) -> str:
        """One-line human description of an action."""
        if isinstance(action, MatchStarted):
            return f"Match {action.match_id or '?'} started, local seat {action.local_seat_id}"
        if isinstance(action, DeckState):
            return f"Deck: {len(action.main_deck)} main, {len(action.sideboard)} sideboard"
        if isinstance(action, OpeningHand):
            return f"Opening hand: {len(action.cards)} cards"
        if isinstance(action, TurnStarted):
            return (f"Turn {action.turn_number}, seat {action.active_seat_id}: "
                    f"{_strip_prefix(action.phase)} / {_strip_prefix(action.step)}")
        if isinstance(action, ZoneTransfer):
            return (f"{_card_label(None, action.instance_id, action.grp_id)} "
                    f"{_strip_prefix(action.from_zone_type)} -> {_strip_prefix(action.to_zone_type)}"
                    + (f" ({action.category})" if action.category else ""))
        if isinstance(action, PermanentTapped):
            state = "tapped" if action.is_tapped else "untapped"
            return f"{_card_label(None, action.instance_id, action.grp_id)} {state}"
        if isinstance(action, CardDrawn):
            return f"Seat {action.seat_id} drew {_card_label(action.card, action.instance_id, action.grp_id)}"
        if isinstance(action, CardPlayed):
            verb = "cast" if action.action_type == "cast" else "played"
            cost = ""
            if action.mana_cost:
                cost = " for " + " ".join(
                    f"{mc.count}{''.join(_strip_prefix(c) for c in mc.color)}" for mc in action.mana_cost)
            return f"Seat {action.seat_id} {verb} {_card_label(action.card, action.instance_id, action.grp_id)}{cost}"
        if isinstance(action, CardAttacked):
            return f"Seat {action.seat_id} attacks with {_card_label(action.card, action.instance_id, action.grp_id)}"
        if isinstance(action, GameEnded):
            return (f"Game over: team {action.winning_team_id} wins "
                    f"(winner seat {action.winning_seat_id}, loser seat {action.losing_seat_id}, {action.reason})")
        return action.kind

    def format_action(self, action: GameAction) -> str:
        kind = self._color(action.kind, KIND_COLORS.get(action.kind))
        return f"[{kind}] {self.describe_action(action)}"

    def format_actions_table(self, actions: Iterable[GameAction]) -> str:
        """Tabulate a batch of actions (e.g. after a replay)."""
        rows = [
            [i, self._color(action.kind, KIND_COLORS.get(action.kind)), self.describe_action(action)]
            for i, action in enumerate(actions, 1)
        ]
        if not rows:
            return "No game actions"
        return tabulate(rows, headers=["#", "Kind", "Description"], tablefmt="simple")

    def format_rpc_call(self, call: RpcCall) -> str:
        category = categorize_rpc_name(call.name)
        label = self._color(category, CATEGORY_COLORS.get(category))
        return f"[rpc:{label}] {call.name}({call.id})"

    def format_event(self, event: InterpretedEvent) -> str:
        if event.type == "quests":
            return self.format_quests(event)
        summary = json.dumps(event.data, default=str)
        if len(summary) > 120:
            summary = summary[:117] + "..."
        return f"[{event.type}] {summary}"

    def format_text_event(self, event: TextEvent) -> str:
        if event.type == "life_total_changed":
            return f"[{event.type}] {event.data['player']}: {event.data['total']}"
        if event.type == "card_drawn":
            return f"[{event.type}] card {event.data['card_id']}"
        return f"[{event.type}]"

    def format_quests(self, event: InterpretedEvent) -> str:
        rows: List[list] = [
            [q.get("description"), f"{q.get('progress')}/{q.get('goal')}", q.get("reward_gold") or ""]
            for q in event.data.get("quests", [])
        ]
        return "Quests:\n" + tabulate(rows, headers=["Quest", "Progress", "Gold"], tablefmt="simple")
