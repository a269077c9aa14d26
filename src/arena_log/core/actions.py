"""
Game actions emitted by the GRE tracker.

Each action is an immutable fact derived from a single game-state snapshot
(or a single annotation within one). Actions are emitted once and never
revised. Every variant carries a `kind` tag and the envelope timestamp in
epoch milliseconds.
"""

import dataclasses
from typing import Any, ClassVar, Dict, Optional, Tuple


def _tags(value: Any) -> Tuple[str, ...]:
    """String entries of a tag list such as cardTypes, anything else dropped."""
    if not isinstance(value, list):
        return ()
    return tuple(v for v in value if isinstance(v, str))


@dataclasses.dataclass(frozen=True)
class CardRef:
    """The identity fields of a game object as seen in one snapshot."""
    instance_id: int
    grp_id: Optional[int] = None
    owner_seat_id: Optional[int] = None
    controller_seat_id: Optional[int] = None
    name: Optional[int] = None  # Arena localisation id, not a string
    card_types: Tuple[str, ...] = ()
    subtypes: Tuple[str, ...] = ()
    color: Tuple[str, ...] = ()

    @classmethod
    def from_game_object(cls, obj: Dict[str, Any]) -> "CardRef":
        return cls(
            instance_id=obj["instanceId"],
            grp_id=obj.get("grpId"),
            owner_seat_id=obj.get("ownerSeatId"),
            controller_seat_id=obj.get("controllerSeatId"),
            name=obj.get("name"),
            card_types=_tags(obj.get("cardTypes")),
            subtypes=_tags(obj.get("subtypes")),
            color=_tags(obj.get("color")),
        )


@dataclasses.dataclass(frozen=True)
class ManaCost:
    color: Tuple[str, ...]
    count: int


@dataclasses.dataclass(frozen=True)
class GameAction:
    kind: ClassVar[str] = "game_action"
    timestamp: float

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data["kind"] = self.kind
        return data


@dataclasses.dataclass(frozen=True)
class MatchStarted(GameAction):
    kind: ClassVar[str] = "match_started"
    local_seat_id: int
    match_id: Optional[str] = None
    opponent_seat_id: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class DeckState(GameAction):
    kind: ClassVar[str] = "deck_state"
    local_seat_id: int
    main_deck: Tuple[CardRef, ...] = ()
    sideboard: Tuple[CardRef, ...] = ()


@dataclasses.dataclass(frozen=True)
class OpeningHand(GameAction):
    kind: ClassVar[str] = "opening_hand"
    local_seat_id: int
    cards: Tuple[CardRef, ...] = ()


@dataclasses.dataclass(frozen=True)
class TurnStarted(GameAction):
    """New turn, or a phase/step/active-player change within the current one."""
    kind: ClassVar[str] = "turn_started"
    turn_number: int
    active_seat_id: Optional[int] = None
    phase: Optional[str] = None
    step: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class ZoneTransfer(GameAction):
    kind: ClassVar[str] = "zone_transfer"
    instance_id: int
    seat_id: Optional[int] = None
    grp_id: Optional[int] = None
    from_zone_id: Optional[int] = None
    to_zone_id: Optional[int] = None
    from_zone_type: Optional[str] = None
    to_zone_type: Optional[str] = None
    category: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class PermanentTapped(GameAction):
    kind: ClassVar[str] = "permanent_tapped"
    instance_id: int
    is_tapped: bool
    seat_id: Optional[int] = None
    grp_id: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class CardDrawn(GameAction):
    kind: ClassVar[str] = "card_drawn"
    instance_id: int
    seat_id: Optional[int] = None
    grp_id: Optional[int] = None
    card: Optional[CardRef] = None


@dataclasses.dataclass(frozen=True)
class CardPlayed(GameAction):
    """A card left the hand for the battlefield ("play") or the stack ("cast")."""
    kind: ClassVar[str] = "card_played"
    instance_id: int
    action_type: str
    seat_id: Optional[int] = None
    grp_id: Optional[int] = None
    mana_cost: Optional[Tuple[ManaCost, ...]] = None
    card: Optional[CardRef] = None


@dataclasses.dataclass(frozen=True)
class CardAttacked(GameAction):
    kind: ClassVar[str] = "card_attacked"
    instance_id: int
    seat_id: Optional[int] = None
    grp_id: Optional[int] = None
    card: Optional[CardRef] = None


@dataclasses.dataclass(frozen=True)
class CardBlocked(GameAction):
    # Not emitted yet, see GreGameTracker._detect_blocks
    kind: ClassVar[str] = "card_blocked"
    attacker_instance_id: int
    blocker_instance_id: int
    attacker_seat_id: Optional[int] = None
    attacker_grp_id: Optional[int] = None
    blocker_seat_id: Optional[int] = None
    blocker_grp_id: Optional[int] = None
    attacker_card: Optional[CardRef] = None
    blocker_card: Optional[CardRef] = None


@dataclasses.dataclass(frozen=True)
class GameEnded(GameAction):
    kind: ClassVar[str] = "game_ended"
    winning_team_id: Optional[int] = None
    winning_seat_id: Optional[int] = None
    losing_seat_id: Optional[int] = None
    reason: Optional[str] = None
    match_state: Optional[str] = None
