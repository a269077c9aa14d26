"""
Differential game tracker for GRE (game rules engine) messages.

The Arena client logs every message it receives from the game server as a
JSON envelope:

    {"transactionId": "...", "timestamp": "1715000000000",
     "greToClientEvent": {"greToClientMessages": [ {...}, {...} ]}}

Game-state messages are snapshots (or diffs) of zones, objects, turn info
and annotations. The protocol doesn't say "card X was drawn" or "creature Y
attacks"; GreGameTracker infers those facts by comparing each snapshot with
what it saw before, and emits GameAction records.

The inference is best-effort. Cast vs. play is decided from the transfer's
destination zone and category, draws are hand membership diffs, and attacks
are battlefield objects that became tapped when the declare-attackers step
begins. Blocks are recognised but not reported.
"""

import dataclasses
import datetime
import json
import logging
import math
import time
from typing import Any, Dict, List, Optional, Set

from .actions import (
    CardAttacked,
    CardBlocked,
    CardDrawn,
    CardPlayed,
    CardRef,
    DeckState,
    GameAction,
    GameEnded,
    ManaCost,
    MatchStarted,
    OpeningHand,
    PermanentTapped,
    TurnStarted,
    ZoneTransfer,
)
from .log_line import RawLine
from .monitoring import get_monitor
from .protocol import (
    ActionType,
    AnnotationType,
    GameStage,
    MatchState,
    MessageType,
    PlayerStatus,
    ResultScope,
    Step,
    TransferCategory,
    Visibility,
    ZoneType,
)

logger = logging.getLogger(__name__)

GRE_EVENT_MARKER = "greToClientEvent"

# Arena's own clock format, e.g. "11/22/2025 10:20:17 PM"
ARENA_TIMESTAMP_FORMAT = "%m/%d/%Y %I:%M:%S %p"


@dataclasses.dataclass(frozen=True)
class TurnInfoSnapshot:
    turn_number: Optional[int] = None
    phase: Optional[str] = None
    step: Optional[str] = None
    active_player: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class _ActionInfo:
    forces_play: bool = False
    mana_cost: Optional[tuple] = None


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _instance_ids(zone: Dict[str, Any]) -> List[int]:
    """Integer instance ids of a zone, anything else dropped."""
    return [i for i in _as_list(zone.get("objectInstanceIds")) if _is_int(i)]


def _now_ms() -> float:
    return time.time() * 1000.0


def parse_envelope_timestamp(raw: Any) -> float:
    """
    Resolve an envelope timestamp to epoch milliseconds.

    Accepts a number, a numeric string, or a date string (ISO 8601 or Arena's
    "MM/DD/YYYY hh:mm:ss AM" format). Anything else falls back to now.
    """
    if raw is None or raw == "" or isinstance(raw, bool):
        return _now_ms()

    if isinstance(raw, (int, float)):
        try:
            number = float(raw)
        except OverflowError:
            return _now_ms()
        return number if math.isfinite(number) else _now_ms()

    if not isinstance(raw, str):
        return _now_ms()

    text = raw.strip()
    try:
        number = float(text)
    except ValueError:
        pass
    else:
        if math.isfinite(number):
            return number

    try:
        parsed = datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = datetime.datetime.strptime(text, ARENA_TIMESTAMP_FORMAT)
        except ValueError:
            return _now_ms()

    try:
        return parsed.timestamp() * 1000.0
    except (ValueError, OverflowError, OSError):
        # Dates at the edge of the datetime range
        return _now_ms()


def _details_as_map(details: Any) -> Dict[str, Any]:
    """
    Flatten annotation details into {key: first value}.

    Int values win over string values. A string-typed `category` detail is
    stored under `categoryString`.
    """
    flat: Dict[str, Any] = {}
    for detail in _as_list(details):
        if not isinstance(detail, dict):
            continue
        key = detail.get("key")
        if not key or not isinstance(key, str):
            continue

        int_values = _as_list(detail.get("valueInt32"))
        string_values = _as_list(detail.get("valueString"))
        if int_values:
            flat[key] = int_values[0]
        elif string_values:
            flat["categoryString" if key == "category" else key] = string_values[0]
    return flat


def _annotation_types(annotation: Dict[str, Any]) -> Set[AnnotationType]:
    return {AnnotationType.from_arena_string(t) for t in _as_list(annotation.get("type"))}


def _first_affected_id(annotation: Dict[str, Any]) -> Optional[int]:
    affected = _as_list(annotation.get("affectedIds"))
    if affected and _is_int(affected[0]):
        return affected[0]
    return None


def _seat_of(obj: Optional[Dict[str, Any]]) -> Optional[int]:
    if not obj:
        return None
    controller = obj.get("controllerSeatId")
    return controller if controller is not None else obj.get("ownerSeatId")


def _zone_type(zone: Optional[Dict[str, Any]]) -> ZoneType:
    return ZoneType.from_arena_string(zone.get("type")) if zone else ZoneType.UNKNOWN


class GreGameTracker:
    """
    Tracks one match at a time from GRE envelopes and emits GameActions.

    All session state lives on the instance and is cleared by reset() and
    when a ConnectResp announces a new match. The tracker is not thread-safe;
    feed it from a single consumer in log order.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        """Forget everything about the current match."""
        self.current_match_id: Optional[str] = None
        self.local_seat_id: Optional[int] = None
        self.opponent_seat_id: Optional[int] = None
        self.last_turn_info: Optional[TurnInfoSnapshot] = None
        self.has_emitted_deck_state = False
        self.has_emitted_opening_hand = False
        self.last_hand_size: Dict[int, int] = {}
        self.last_hand_cards: Dict[int, Set[int]] = {}
        self.last_battlefield_cards: Dict[int, Set[int]] = {}
        self.last_tapped_state: Dict[int, bool] = {}
        self.last_declare_attack_step = False

    def process_line(self, line: RawLine) -> List[GameAction]:
        """
        Feed one framed log line.

        Lines that aren't GRE envelopes (or don't parse) yield no actions.

        Returns:
            Actions derived from this line, in emission order
        """
        text = line.message.strip()
        if not text.startswith("{") or GRE_EVENT_MARKER not in text:
            return []

        try:
            envelope = json.loads(text)
        except (json.JSONDecodeError, ValueError):
            logger.debug(f"Line {line.index} mentions {GRE_EVENT_MARKER} but is not valid JSON")
            return []

        if not isinstance(envelope, dict):
            return []
        gre_event = envelope.get(GRE_EVENT_MARKER)
        if not isinstance(gre_event, dict):
            return []
        messages = _as_list(gre_event.get("greToClientMessages"))
        if not messages:
            return []

        timestamp = parse_envelope_timestamp(envelope.get("timestamp"))
        actions: List[GameAction] = []

        with get_monitor().measure("gre_tracker.process_line"):
            for message in messages:
                if not isinstance(message, dict) or not message.get("type"):
                    continue

                msg_type = MessageType.from_arena_string(message.get("type"))
                if msg_type is MessageType.CONNECT_RESP:
                    match_started = self._handle_connect_resp(envelope, message, timestamp)
                    if match_started:
                        actions.append(match_started)
                elif msg_type.is_game_state:
                    state = message.get("gameStateMessage")
                    if isinstance(state, dict):
                        actions.extend(self._process_game_state(state, timestamp))

        return actions

    def _process_game_state(self, state: Dict[str, Any], timestamp: float) -> List[GameAction]:
        actions: List[GameAction] = []
        zones = [z for z in _as_list(state.get("zones")) if isinstance(z, dict)]
        game_objects = [o for o in _as_list(state.get("gameObjects")) if isinstance(o, dict)]
        annotations = [a for a in _as_list(state.get("annotations")) if isinstance(a, dict)]

        if "zones" in state and self.local_seat_id is None:
            self._discover_seat_ids(zones)

        turn_action = self._handle_turn_info(state, timestamp)
        if turn_action:
            actions.append(turn_action)

        # Lookups for this snapshot only
        object_by_id = {o["instanceId"]: o for o in game_objects if _is_int(o.get("instanceId"))}
        zone_by_id = {z["zoneId"]: z for z in zones if _is_int(z.get("zoneId"))}

        if zones and game_objects and self.local_seat_id is not None:
            if not self.has_emitted_deck_state:
                deck_action = self._extract_deck_state(zones, object_by_id, timestamp)
                if deck_action:
                    actions.append(deck_action)
                    self.has_emitted_deck_state = True

            if not self.has_emitted_opening_hand:
                hand_action = self._extract_opening_hand(zones, object_by_id, timestamp)
                if hand_action:
                    actions.append(hand_action)
                    self.has_emitted_opening_hand = True
                    # Seed the hand so these cards are never reported as draws
                    initial_hand = {card.instance_id for card in hand_action.cards}
                    self.last_hand_cards[self.local_seat_id] = initial_hand
                    self.last_hand_size[self.local_seat_id] = len(initial_hand)

        if annotations:
            actions.extend(self._extract_annotation_actions(annotations, object_by_id, zone_by_id, timestamp))

        actions.extend(self._detect_card_draws(zones, object_by_id, timestamp))
        actions.extend(self._detect_card_plays(state, annotations, object_by_id, zone_by_id, timestamp))
        actions.extend(self._detect_attacks(state, zones, game_objects, zone_by_id, timestamp))
        actions.extend(self._detect_blocks(state))

        game_ended = self._detect_game_end(state, timestamp)
        if game_ended:
            actions.append(game_ended)

        return actions

    def _handle_connect_resp(self, envelope: Dict[str, Any], message: Dict[str, Any],
                             timestamp: float) -> Optional[MatchStarted]:
        seat_ids = _as_list(message.get("systemSeatIds"))
        local_seat_id = seat_ids[0] if seat_ids and _is_int(seat_ids[0]) else None

        self.reset()
        self.current_match_id = envelope.get("transactionId")
        self.local_seat_id = local_seat_id

        if local_seat_id is None:
            logger.info("ConnectResp without seat ids, match state reset")
            return None

        logger.info(f"New match {self.current_match_id}, local seat {local_seat_id}")
        return MatchStarted(
            timestamp=timestamp,
            match_id=self.current_match_id,
            local_seat_id=local_seat_id,
            opponent_seat_id=self.opponent_seat_id,
        )

    def _discover_seat_ids(self, zones: List[Dict[str, Any]]):
        """
        Infer the local seat from the private hand we are allowed to see,
        then take the first other zone owner as the opponent.
        """
        for zone in zones:
            owner = zone.get("ownerSeatId")
            if (_zone_type(zone) is ZoneType.HAND
                    and Visibility.from_arena_string(zone.get("visibility")) is Visibility.PRIVATE
                    and _is_int(owner)):
                viewers = _as_list(zone.get("viewers"))
                if not viewers or owner in viewers:
                    self.local_seat_id = owner
                    break

        if self.local_seat_id is None:
            return
        logger.debug(f"Local seat inferred from private hand: {self.local_seat_id}")

        for zone in zones:
            owner = zone.get("ownerSeatId")
            if _is_int(owner) and owner != self.local_seat_id:
                self.opponent_seat_id = owner
                logger.debug(f"Opponent seat inferred from zones: {owner}")
                break

    def _handle_turn_info(self, state: Dict[str, Any], timestamp: float) -> Optional[TurnStarted]:
        info = state.get("turnInfo")
        if not isinstance(info, dict):
            return None

        current = TurnInfoSnapshot(
            turn_number=info.get("turnNumber"),
            phase=info.get("phase"),
            step=info.get("step"),
            active_player=info.get("activePlayer"),
        )
        last = self.last_turn_info or TurnInfoSnapshot()
        self.last_turn_info = current

        is_new_turn = current.turn_number is not None and current.turn_number != last.turn_number
        is_phase_or_step_change = not is_new_turn and (
            current.phase != last.phase
            or current.step != last.step
            or current.active_player != last.active_player
        )
        if not is_new_turn and not is_phase_or_step_change:
            return None

        if current.turn_number is not None:
            turn_number = current.turn_number
        elif last.turn_number is not None:
            turn_number = last.turn_number
        else:
            turn_number = 0

        return TurnStarted(
            timestamp=timestamp,
            turn_number=turn_number,
            active_seat_id=current.active_player,
            phase=current.phase,
            step=current.step,
        )

    def _cards_in_zone(self, zone: Dict[str, Any], object_by_id: Dict[int, Dict[str, Any]]) -> List[CardRef]:
        cards = []
        for instance_id in _instance_ids(zone):
            obj = object_by_id.get(instance_id)
            if obj is not None:
                cards.append(CardRef.from_game_object(obj))
        return cards

    def _extract_deck_state(self, zones: List[Dict[str, Any]], object_by_id: Dict[int, Dict[str, Any]],
                            timestamp: float) -> Optional[DeckState]:
        main_deck: List[CardRef] = []
        sideboard: List[CardRef] = []

        for zone in zones:
            if zone.get("ownerSeatId") != self.local_seat_id or not _instance_ids(zone):
                continue
            zone_type = _zone_type(zone)
            if zone_type.is_deck:
                main_deck.extend(self._cards_in_zone(zone, object_by_id))
            elif zone_type is ZoneType.SIDEBOARD:
                sideboard.extend(self._cards_in_zone(zone, object_by_id))

        if not main_deck and not sideboard:
            return None

        logger.info(f"Deck state captured: {len(main_deck)} main deck, {len(sideboard)} sideboard")
        return DeckState(
            timestamp=timestamp,
            local_seat_id=self.local_seat_id,
            main_deck=tuple(main_deck),
            sideboard=tuple(sideboard),
        )

    def _extract_opening_hand(self, zones: List[Dict[str, Any]], object_by_id: Dict[int, Dict[str, Any]],
                              timestamp: float) -> Optional[OpeningHand]:
        hand_zone = next(
            (z for z in zones
             if z.get("ownerSeatId") == self.local_seat_id
             and _zone_type(z) is ZoneType.HAND
             and Visibility.from_arena_string(z.get("visibility")) is Visibility.PRIVATE),
            None,
        )
        if hand_zone is None or not _instance_ids(hand_zone):
            return None

        cards = self._cards_in_zone(hand_zone, object_by_id)
        if not cards:
            return None

        logger.info(f"Opening hand captured: {len(cards)} cards")
        return OpeningHand(timestamp=timestamp, local_seat_id=self.local_seat_id, cards=tuple(cards))

    def _extract_annotation_actions(self, annotations: List[Dict[str, Any]],
                                    object_by_id: Dict[int, Dict[str, Any]],
                                    zone_by_id: Dict[int, Dict[str, Any]],
                                    timestamp: float) -> List[GameAction]:
        actions: List[GameAction] = []
        for annotation in annotations:
            types = _annotation_types(annotation)
            if not types:
                continue

            if AnnotationType.ZONE_TRANSFER in types:
                transfer = self._to_zone_transfer(annotation, object_by_id, zone_by_id, timestamp)
                if transfer:
                    actions.append(transfer)

            if AnnotationType.TAPPED_UNTAPPED_PERMANENT in types:
                tapped = self._to_permanent_tapped(annotation, object_by_id, timestamp)
                if tapped:
                    actions.append(tapped)
                    # Attack detection below must see the new value
                    self.last_tapped_state[tapped.instance_id] = tapped.is_tapped

        return actions

    def _to_zone_transfer(self, annotation: Dict[str, Any], object_by_id: Dict[int, Dict[str, Any]],
                          zone_by_id: Dict[int, Dict[str, Any]], timestamp: float) -> Optional[ZoneTransfer]:
        instance_id = _first_affected_id(annotation)
        if instance_id is None:
            return None

        obj = object_by_id.get(instance_id)
        details = _details_as_map(annotation.get("details"))
        from_zone_id = details.get("zone_src")
        to_zone_id = details.get("zone_dest")
        category = details.get("categoryString")

        from_zone = zone_by_id.get(from_zone_id) if _is_int(from_zone_id) else None
        to_zone = zone_by_id.get(to_zone_id) if _is_int(to_zone_id) else None

        return ZoneTransfer(
            timestamp=timestamp,
            seat_id=_seat_of(obj),
            instance_id=instance_id,
            grp_id=obj.get("grpId") if obj else None,
            from_zone_id=from_zone_id if _is_int(from_zone_id) else None,
            to_zone_id=to_zone_id if _is_int(to_zone_id) else None,
            from_zone_type=from_zone.get("type") if from_zone else None,
            to_zone_type=to_zone.get("type") if to_zone else None,
            category=category if isinstance(category, str) else None,
        )

    def _to_permanent_tapped(self, annotation: Dict[str, Any], object_by_id: Dict[int, Dict[str, Any]],
                             timestamp: float) -> Optional[PermanentTapped]:
        instance_id = _first_affected_id(annotation)
        if instance_id is None:
            return None

        tapped_flag = _details_as_map(annotation.get("details")).get("tapped")
        if not _is_int(tapped_flag):
            return None

        obj = object_by_id.get(instance_id)
        return PermanentTapped(
            timestamp=timestamp,
            seat_id=_seat_of(obj),
            instance_id=instance_id,
            grp_id=obj.get("grpId") if obj else None,
            is_tapped=tapped_flag == 1,
        )

    def _detect_card_draws(self, zones: List[Dict[str, Any]], object_by_id: Dict[int, Dict[str, Any]],
                           timestamp: float) -> List[CardDrawn]:
        """
        Any instance id in a hand that wasn't in that seat's previous hand is
        reported as drawn. The stored hand is overwritten every time, even
        when nothing new shows up.
        """
        actions: List[CardDrawn] = []

        for zone in zones:
            owner = zone.get("ownerSeatId")
            if _zone_type(zone) is not ZoneType.HAND or not _is_int(owner) or owner <= 0:
                continue
            if not isinstance(zone.get("objectInstanceIds"), list):
                continue
            instance_ids = _instance_ids(zone)

            current_hand = set(instance_ids)
            last_hand = self.last_hand_cards.get(owner, set())

            for instance_id in dict.fromkeys(instance_ids):
                if instance_id in last_hand:
                    continue
                obj = object_by_id.get(instance_id)
                if obj is None:
                    continue
                card = CardRef.from_game_object(obj)
                actions.append(CardDrawn(
                    timestamp=timestamp,
                    seat_id=owner,
                    instance_id=card.instance_id,
                    grp_id=card.grp_id,
                    card=card,
                ))

            self.last_hand_cards[owner] = current_hand
            self.last_hand_size[owner] = len(current_hand)

        return actions

    def _detect_card_plays(self, state: Dict[str, Any], annotations: List[Dict[str, Any]],
                           object_by_id: Dict[int, Dict[str, Any]], zone_by_id: Dict[int, Dict[str, Any]],
                           timestamp: float) -> List[CardPlayed]:
        """
        Hand -> Battlefield/Stack transfers become CardPlayed.

        Classification: a CastSpell category or a Stack destination means
        "cast", anything else (PlayLand, Battlefield) means "play". A matching
        ActionType_Play entry in the snapshot's actions forces "play"; a
        matching ActionType_Cast entry supplies the mana cost.
        """
        actions: List[CardPlayed] = []

        for annotation in annotations:
            if AnnotationType.ZONE_TRANSFER not in _annotation_types(annotation):
                continue

            instance_id = _first_affected_id(annotation)
            if instance_id is None:
                continue
            obj = object_by_id.get(instance_id)
            if obj is None:
                continue

            details = _details_as_map(annotation.get("details"))
            from_zone_id = details.get("zone_src")
            to_zone_id = details.get("zone_dest")
            from_type = _zone_type(zone_by_id.get(from_zone_id) if _is_int(from_zone_id) else None)
            to_type = _zone_type(zone_by_id.get(to_zone_id) if _is_int(to_zone_id) else None)

            if from_type is not ZoneType.HAND or to_type not in (ZoneType.BATTLEFIELD, ZoneType.STACK):
                continue

            category = TransferCategory.from_arena_string(details.get("categoryString"))
            # Destination and category decide, card types are not consulted
            if category is TransferCategory.CAST_SPELL or to_type is ZoneType.STACK:
                action_type = "cast"
            else:
                action_type = "play"

            action_info = self._get_action_info(state, instance_id)
            if action_info.forces_play:
                action_type = "play"

            card = CardRef.from_game_object(obj)
            actions.append(CardPlayed(
                timestamp=timestamp,
                seat_id=_seat_of(obj),
                instance_id=instance_id,
                grp_id=card.grp_id,
                action_type=action_type,
                mana_cost=action_info.mana_cost,
                card=card,
            ))

        return actions

    def _get_action_info(self, state: Dict[str, Any], instance_id: int) -> _ActionInfo:
        for entry in _as_list(state.get("actions")):
            action = entry.get("action") if isinstance(entry, dict) else None
            if not isinstance(action, dict) or action.get("instanceId") != instance_id:
                continue

            action_type = ActionType.from_arena_string(action.get("actionType"))
            if action_type is ActionType.PLAY:
                return _ActionInfo(forces_play=True)

            mana_cost = _as_list(action.get("manaCost"))
            if action_type is ActionType.CAST and mana_cost:
                return _ActionInfo(
                    mana_cost=tuple(
                        ManaCost(color=tuple(_as_list(mc.get("color"))),
                                 count=mc.get("count") if _is_int(mc.get("count")) else 0)
                        for mc in mana_cost if isinstance(mc, dict)
                    ),
                )

        return _ActionInfo()

    def _detect_attacks(self, state: Dict[str, Any], zones: List[Dict[str, Any]],
                        game_objects: List[Dict[str, Any]], zone_by_id: Dict[int, Dict[str, Any]],
                        timestamp: float) -> List[CardAttacked]:
        """
        On entering Step_DeclareAttack, battlefield objects that went from
        untapped (or unknown) to tapped are reported as attackers. Later
        snapshots of the same step only refresh the tapped map.
        """
        actions: List[CardAttacked] = []
        turn_info = state.get("turnInfo") if isinstance(state.get("turnInfo"), dict) else {}
        is_declare_attack = Step.from_arena_string(turn_info.get("step")) is Step.DECLARE_ATTACK

        if is_declare_attack and not self.last_declare_attack_step:
            for obj in game_objects:
                instance_id = obj.get("instanceId")
                zone_id = obj.get("zoneId")
                if not instance_id or not _is_int(instance_id) or not _is_int(zone_id):
                    continue
                if _zone_type(zone_by_id.get(zone_id)) is not ZoneType.BATTLEFIELD:
                    continue

                was_tapped = self.last_tapped_state.get(instance_id, False)
                is_now_tapped = bool(obj.get("isTapped", False))
                if not was_tapped and is_now_tapped:
                    card = CardRef.from_game_object(obj)
                    actions.append(CardAttacked(
                        timestamp=timestamp,
                        seat_id=_seat_of(obj),
                        instance_id=instance_id,
                        grp_id=card.grp_id,
                        card=card,
                    ))
                self.last_tapped_state[instance_id] = is_now_tapped

            if actions:
                logger.debug(f"Attackers declared: {[a.instance_id for a in actions]}")
        elif is_declare_attack:
            for obj in game_objects:
                instance_id = obj.get("instanceId")
                if instance_id and _is_int(instance_id):
                    self.last_tapped_state[instance_id] = bool(obj.get("isTapped", False))

        for zone in zones:
            owner = zone.get("ownerSeatId")
            if (_zone_type(zone) is ZoneType.BATTLEFIELD and isinstance(zone.get("objectInstanceIds"), list)
                    and _is_int(owner) and owner):
                self.last_battlefield_cards[owner] = set(_instance_ids(zone))

        self.last_declare_attack_step = is_declare_attack
        return actions

    def _detect_blocks(self, state: Dict[str, Any]) -> List[CardBlocked]:
        """
        Step_DeclareBlock is recognised here but no CardBlocked is produced:
        the snapshots don't carry enough to pair blockers with attackers.
        """
        turn_info = state.get("turnInfo") if isinstance(state.get("turnInfo"), dict) else {}
        if Step.from_arena_string(turn_info.get("step")) is Step.DECLARE_BLOCK:
            # TODO: pair blockers with attackers once a log with blocker annotations is captured
            logger.debug("Declare blockers step seen, blocks are not reported")
        return []

    def _detect_game_end(self, state: Dict[str, Any], timestamp: float) -> Optional[GameEnded]:
        game_info = state.get("gameInfo")
        if not isinstance(game_info, dict):
            return None

        stage = GameStage.from_arena_string(game_info.get("stage"))
        match_state = MatchState.from_arena_string(game_info.get("matchState"))
        is_game_over = stage is GameStage.GAME_OVER or match_state in (
            MatchState.GAME_COMPLETE, MatchState.MATCH_COMPLETE)
        if not is_game_over:
            return None

        results = [r for r in _as_list(game_info.get("results")) if isinstance(r, dict)]
        match_result = next(
            (r for r in results if ResultScope.from_arena_string(r.get("scope")) is ResultScope.MATCH), None)
        game_result = next(
            (r for r in results if ResultScope.from_arena_string(r.get("scope")) is ResultScope.GAME), None)
        result = match_result if match_result is not None else game_result

        winning_team_id = result.get("winningTeamId") if result else None
        reason = result.get("reason") if result else None

        winning_seat_id = None
        losing_seat_id = None
        if winning_team_id is not None:
            for player in _as_list(state.get("players")):
                if not isinstance(player, dict):
                    continue
                if player.get("teamId") == winning_team_id:
                    winning_seat_id = player.get("systemSeatNumber")
                elif PlayerStatus.from_arena_string(player.get("status")).has_lost:
                    losing_seat_id = player.get("systemSeatNumber")

        logger.info(f"Game over: winning team {winning_team_id}, seat {winning_seat_id}, reason {reason}")
        return GameEnded(
            timestamp=timestamp,
            winning_team_id=winning_team_id,
            winning_seat_id=winning_seat_id,
            losing_seat_id=losing_seat_id,
            reason=reason,
            match_state=game_info.get("matchState"),
        )
