"""Core interface for tracked turn-based games."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Sequence, TypeVar

from .action import Action

PlayerRef = int | str
StateT = TypeVar("StateT")
ActionT = TypeVar("ActionT", bound=Action)


class TurnGame(ABC, Generic[StateT, ActionT]):
    """Interface every tracked game implements."""

    game_name: str = "game"

    @abstractmethod
    def new_game(self, players: Sequence[Any]) -> StateT:
        """Create the opening state for a validated lineup."""

    @abstractmethod
    def current_player(self, state: StateT) -> Any:
        """Return the player the turn pointer is on."""

    @abstractmethod
    def legal_actions(self, state: StateT, player_ref: PlayerRef) -> Sequence[str]:
        """Return the action labels a player may take right now."""

    @abstractmethod
    def is_legal(self, state: StateT, player_ref: PlayerRef, action: ActionT) -> tuple[bool, str | None]:
        """Return whether an action is legal and an optional reason when illegal."""

    @abstractmethod
    def apply_action(self, state: StateT, player_ref: PlayerRef, action: ActionT) -> StateT:
        """Apply a legal action and return the next state."""

    @abstractmethod
    def render(self, state: StateT) -> str:
        """Render the state for debugging."""

    def parse_action(self, data: Any) -> ActionT:
        """Parse an action payload produced by a client."""
        raise NotImplementedError(f"{self.__class__.__name__} does not implement parse_action().")
