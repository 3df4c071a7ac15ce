"""State types for a tracked Dune: Imperium session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Self

from tracker.state import State

BASE_AGENT_CAPACITY = 2
SWORDMASTER_AGENT_CAPACITY = 3
MAX_SEATS = 4
MIN_ACTIVE_PLAYERS = 2
AGENT_PHASE = "Agent"


@dataclass(frozen=True)
class PlayerState(State):
    """One seated player and their per-round agent bookkeeping."""

    id: int
    name: str
    leader: str
    agents: int = BASE_AGENT_CAPACITY
    swordmaster: bool = False
    revealed: bool = False
    is_first_player: bool = False

    @property
    def capacity(self) -> int:
        return SWORDMASTER_AGENT_CAPACITY if self.swordmaster else BASE_AGENT_CAPACITY

    @property
    def is_active(self) -> bool:
        return bool(self.name.strip())

    @property
    def exhausted(self) -> bool:
        return self.agents == 0 and not self.revealed

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "leader": self.leader,
            "agents": self.agents,
            "swordmaster": self.swordmaster,
            "revealed": self.revealed,
            "isFirstPlayer": self.is_first_player,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            id=int(data["id"]),
            name=str(data.get("name", "")),
            leader=str(data.get("leader", "")),
            agents=int(data.get("agents", BASE_AGENT_CAPACITY)),
            swordmaster=bool(data.get("swordmaster", False)),
            revealed=bool(data.get("revealed", False)),
            is_first_player=bool(data.get("isFirstPlayer", data.get("is_first_player", False))),
        )


@dataclass(frozen=True)
class ActionEntry(State):
    """Immutable action-log line captured when a player acts."""

    round: int
    player_name: str
    action: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "round": self.round,
            "playerName": self.player_name,
            "action": self.action,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            round=int(data["round"]),
            player_name=str(data.get("playerName", data.get("player_name", ""))),
            action=str(data["action"]),
            timestamp=str(data.get("timestamp", "")),
        )


@dataclass(frozen=True)
class DuneSession(State):
    """Immutable live-game state: seats, round, phase, and action history."""

    players: tuple[PlayerState, ...] = ()
    round: int = 1
    phase: str = AGENT_PHASE
    history: tuple[ActionEntry, ...] = ()
    current_index: int = 0

    @property
    def started(self) -> bool:
        return bool(self.players)

    def first_player_index(self) -> int | None:
        for index, player in enumerate(self.players):
            if player.is_first_player:
                return index
        return None

    def current_player(self) -> PlayerState | None:
        if not self.players:
            return None
        return self.players[self.current_index % len(self.players)]

    def player_index(self, player_ref: int | str) -> int | None:
        """Resolve a seat id or player name to an index into ``players``."""
        for index, player in enumerate(self.players):
            if isinstance(player_ref, int) and not isinstance(player_ref, bool):
                if player.id == player_ref:
                    return index
            elif player.name == player_ref or str(player.id) == str(player_ref):
                return index
        return None

    def all_revealed(self) -> bool:
        return bool(self.players) and all(player.revealed for player in self.players)

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": [player.to_dict() for player in self.players],
            "round": self.round,
            "phase": self.phase,
            "history": [entry.to_dict() for entry in self.history],
            "currentIndex": self.current_index,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        players = tuple(PlayerState.from_dict(item) for item in data.get("players", []))
        history = tuple(ActionEntry.from_dict(item) for item in data.get("history", []))
        current_index = int(data.get("currentIndex", data.get("current_index", 0)))
        if players:
            current_index %= len(players)
        else:
            current_index = 0
        return cls(
            players=players,
            round=max(1, int(data.get("round", 1))),
            phase=str(data.get("phase", AGENT_PHASE)),
            history=history,
            current_index=current_index,
        )


def empty_session() -> DuneSession:
    """Return the idle session used before setup and after finalize."""
    return DuneSession()
