"""Dune: Imperium session tracking exports."""

from .dune_actions import (
    BOARD_ACTION_LABELS,
    BOARD_SECTIONS,
    REVEAL_TURN,
    SWORDMASTER,
    TUEKS_SIETCH,
    ActionKind,
    BoardAction,
    BoardSection,
    ClaimSwordmaster,
    RevealTurn,
    action_from_dict,
    action_from_label,
)
from .dune_game import DuneGame
from .dune_setup import DRAFT_POOL_SIZE, build_lineup, draft_pool
from .dune_state import (
    AGENT_PHASE,
    BASE_AGENT_CAPACITY,
    SWORDMASTER_AGENT_CAPACITY,
    ActionEntry,
    DuneSession,
    PlayerState,
    empty_session,
)

__all__ = [
    "AGENT_PHASE",
    "ActionEntry",
    "ActionKind",
    "BASE_AGENT_CAPACITY",
    "BOARD_ACTION_LABELS",
    "BOARD_SECTIONS",
    "BoardAction",
    "BoardSection",
    "ClaimSwordmaster",
    "DRAFT_POOL_SIZE",
    "DuneGame",
    "DuneSession",
    "PlayerState",
    "REVEAL_TURN",
    "RevealTurn",
    "SWORDMASTER",
    "SWORDMASTER_AGENT_CAPACITY",
    "TUEKS_SIETCH",
    "action_from_dict",
    "action_from_label",
    "build_lineup",
    "draft_pool",
    "empty_session",
]
