"""
Closed enumerations for the string tags used by the GRE protocol.

Arena tags everything with prefixed strings ("ZoneType_Hand",
"GREMessageType_GameStateMessage", ...). The tracker compares against these
enums instead of raw strings; anything not listed maps to UNKNOWN.
"""

from enum import Enum
from typing import Any


class ArenaTag(Enum):
    """Base for enums whose values are the literal Arena tag strings."""

    @classmethod
    def from_arena_string(cls, value: Any):
        """
        Convert an Arena tag string to an enum member.

        Args:
            value: Tag string from the log (e.g., "ZoneType_Hand"), or None

        Returns:
            Matching member, or UNKNOWN
        """
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.UNKNOWN


class MessageType(ArenaTag):
    UNKNOWN = "Unknown"
    CONNECT_RESP = "GREMessageType_ConnectResp"
    GAME_STATE = "GREMessageType_GameStateMessage"
    QUEUED_GAME_STATE = "GREMessageType_QueuedGameStateMessage"
    ACTIONS_AVAILABLE_REQ = "GREMessageType_ActionsAvailableReq"
    DIE_ROLL_RESULTS = "GREMessageType_DieRollResultsResp"
    MULLIGAN_REQ = "GREMessageType_MulliganReq"

    @property
    def is_game_state(self) -> bool:
        return self in (MessageType.GAME_STATE, MessageType.QUEUED_GAME_STATE)


class ZoneType(ArenaTag):
    UNKNOWN = "Unknown"
    HAND = "ZoneType_Hand"
    BATTLEFIELD = "ZoneType_Battlefield"
    LIBRARY = "ZoneType_Library"
    MAIN_DECK = "ZoneType_MainDeck"
    SIDEBOARD = "ZoneType_Sideboard"
    STACK = "ZoneType_Stack"
    GRAVEYARD = "ZoneType_Graveyard"
    EXILE = "ZoneType_Exile"
    COMMAND = "ZoneType_Command"
    LIMBO = "ZoneType_Limbo"
    REVEALED = "ZoneType_Revealed"
    PENDING = "ZoneType_Pending"

    @property
    def is_deck(self) -> bool:
        return self in (ZoneType.LIBRARY, ZoneType.MAIN_DECK)


class Visibility(ArenaTag):
    UNKNOWN = "Unknown"
    PUBLIC = "Visibility_Public"
    PRIVATE = "Visibility_Private"
    HIDDEN = "Visibility_Hidden"


class AnnotationType(ArenaTag):
    UNKNOWN = "Unknown"
    ZONE_TRANSFER = "AnnotationType_ZoneTransfer"
    TAPPED_UNTAPPED_PERMANENT = "AnnotationType_TappedUntappedPermanent"
    OBJECT_ID_CHANGED = "AnnotationType_ObjectIdChanged"
    DAMAGE_DEALT = "AnnotationType_DamageDealt"
    ENTERED_ZONE_THIS_TURN = "AnnotationType_EnteredZoneThisTurn"
    RESOLUTION_START = "AnnotationType_ResolutionStart"
    RESOLUTION_COMPLETE = "AnnotationType_ResolutionComplete"


class Step(ArenaTag):
    UNKNOWN = "Unknown"
    UPKEEP = "Step_Upkeep"
    DRAW = "Step_Draw"
    BEGIN_COMBAT = "Step_BeginCombat"
    DECLARE_ATTACK = "Step_DeclareAttack"
    DECLARE_BLOCK = "Step_DeclareBlock"
    COMBAT_DAMAGE = "Step_CombatDamage"
    END_COMBAT = "Step_EndCombat"
    END = "Step_End"
    CLEANUP = "Step_Cleanup"


class ActionType(ArenaTag):
    UNKNOWN = "Unknown"
    PLAY = "ActionType_Play"
    CAST = "ActionType_Cast"
    ACTIVATE = "ActionType_Activate"
    PASS = "ActionType_Pass"


class TransferCategory(ArenaTag):
    UNKNOWN = "Unknown"
    PLAY_LAND = "PlayLand"
    CAST_SPELL = "CastSpell"
    DRAW = "Draw"
    RESOLVE = "Resolve"
    DESTROY = "Destroy"


class GameStage(ArenaTag):
    UNKNOWN = "Unknown"
    START = "GameStage_Start"
    PLAY = "GameStage_Play"
    GAME_OVER = "GameStage_GameOver"


class MatchState(ArenaTag):
    UNKNOWN = "Unknown"
    GAME_IN_PROGRESS = "MatchState_GameInProgress"
    GAME_COMPLETE = "MatchState_GameComplete"
    MATCH_COMPLETE = "MatchState_MatchComplete"


class ResultScope(ArenaTag):
    UNKNOWN = "Unknown"
    GAME = "MatchScope_Game"
    MATCH = "MatchScope_Match"


class PlayerStatus(ArenaTag):
    UNKNOWN = "Unknown"
    IN_GAME = "PlayerStatus_InGame"
    PENDING_LOSS = "PlayerStatus_PendingLoss"
    LOST = "PlayerStatus_Lost"

    @property
    def has_lost(self) -> bool:
        return self in (PlayerStatus.PENDING_LOSS, PlayerStatus.LOST)

