"""Action definitions for the Dune: Imperium turn tracker."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from tracker.action import Action

REVEAL_TURN = "Reveal Turn"
SWORDMASTER = "Swordmaster"
TUEKS_SIETCH = "Tuek's Sietch"
ESMAR_LEADER_ID = "esmar"


class ActionKind(str, Enum):
    """Supported action discriminators."""

    BOARD = "BoardAction"
    REVEAL = "RevealTurn"
    SWORDMASTER = "ClaimSwordmaster"


@dataclass(frozen=True)
class BoardSection:
    """A titled group of board spaces."""

    title: str
    actions: tuple[str, ...]


BOARD_SECTIONS: tuple[BoardSection, ...] = (
    BoardSection("Emperor", ("Dutiful Service", "Sardaukar")),
    BoardSection("Spacing Guild", ("Deliver Supplies", "Heighliner")),
    BoardSection("Bene Gesserit", ("Secrets", "Espionage")),
    BoardSection("Fremen", ("Fremkit", "Desert Tactics")),
    BoardSection(
        "Landsraad",
        ("Imperial Privilege", "High Council", "Gather Support", "Assembly Hall", SWORDMASTER),
    ),
    BoardSection("CHOAM", ("Accept Contract", "Shipping")),
    BoardSection("City", ("Arrakeen", "Sietch Tabr", "Spice Refinery", "Research Station")),
    BoardSection("Desert", ("Imperial Basin", "Hagga Basin", "Deep Desert")),
)

BOARD_ACTION_LABELS: frozenset[str] = frozenset(
    label for section in BOARD_SECTIONS for label in section.actions if label != SWORDMASTER
)
LEADER_SPECIAL_ACTIONS: dict[str, tuple[str, ...]] = {
    ESMAR_LEADER_ID: (TUEKS_SIETCH,),
}


@dataclass(frozen=True)
class BoardAction(Action):
    """Send an agent to a board space."""

    space: str
    kind = ActionKind.BOARD.value

    def __post_init__(self) -> None:
        normalized = self.space.strip()
        if not normalized:
            raise ValueError("BoardAction.space must be non-empty.")
        if normalized in {REVEAL_TURN, SWORDMASTER}:
            raise ValueError(f"{normalized!r} is a reserved action, not a board space.")
        object.__setattr__(self, "space", normalized)

    @property
    def label(self) -> str:
        return self.space


@dataclass(frozen=True)
class RevealTurn(Action):
    """End the player's round-turn, forfeiting any unused agents."""

    kind = ActionKind.REVEAL.value

    @property
    def label(self) -> str:
        return REVEAL_TURN

    @property
    def consumes_agent(self) -> bool:
        return False


@dataclass(frozen=True)
class ClaimSwordmaster(Action):
    """Claim the Swordmaster, raising the player's capacity from the next round."""

    kind = ActionKind.SWORDMASTER.value

    @property
    def label(self) -> str:
        return SWORDMASTER


def action_from_label(label: str) -> Action:
    """Parse the label shown on a board button into a typed action."""
    normalized = (label or "").strip()
    if normalized == REVEAL_TURN:
        return RevealTurn()
    if normalized == SWORDMASTER:
        return ClaimSwordmaster()
    return BoardAction(space=normalized)


def action_from_dict(data: Mapping[str, Any]) -> Action:
    """Parse an action from a JSON payload (``{"action": label}`` or typed)."""
    kind = data.get("type")
    if kind == ActionKind.REVEAL.value:
        return RevealTurn()
    if kind == ActionKind.SWORDMASTER.value:
        return ClaimSwordmaster()
    label = data.get("action", data.get("space"))
    if not isinstance(label, str):
        raise ValueError(f"Action payload is missing a label: {dict(data)!r}")
    return action_from_label(label)


def special_actions_for(leaders: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Return leader-gated action labels unlocked by the leaders in play."""
    unlocked: list[str] = []
    for leader in leaders:
        for label in LEADER_SPECIAL_ACTIONS.get(leader, ()):
            if label not in unlocked:
                unlocked.append(label)
    return tuple(unlocked)
