"""Turn and round state machine for a tracked Dune: Imperium session."""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import Any, Mapping, Sequence

from tracker.action import Action
from tracker.errors import IllegalActionError
from tracker.game import PlayerRef, TurnGame

from .dune_actions import (
    BOARD_ACTION_LABELS,
    BOARD_SECTIONS,
    REVEAL_TURN,
    SWORDMASTER,
    BoardAction,
    ClaimSwordmaster,
    RevealTurn,
    action_from_dict,
    action_from_label,
    special_actions_for,
)
from .dune_state import (
    AGENT_PHASE,
    BASE_AGENT_CAPACITY,
    ActionEntry,
    DuneSession,
    PlayerState,
)

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


class DuneGame(TurnGame[DuneSession, Action]):
    """Agent placement bookkeeping: agents, reveals, rounds, and the first-player token."""

    game_name = "dune-imperium"

    def new_game(self, players: Sequence[PlayerState]) -> DuneSession:
        """Create round one from a validated lineup."""
        seated = tuple(
            player.evolve(
                agents=BASE_AGENT_CAPACITY,
                swordmaster=False,
                revealed=False,
            )
            for player in players
        )
        first_indices = [index for index, player in enumerate(seated) if player.is_first_player]
        first_index = first_indices[0] if first_indices else 0
        seated = tuple(player.evolve(is_first_player=index == first_index) for index, player in enumerate(seated))
        return DuneSession(players=seated, round=1, phase=AGENT_PHASE, history=(), current_index=first_index)

    def current_player(self, state: DuneSession) -> PlayerState | None:
        """Return the player the turn pointer is on."""
        return state.current_player()

    def legal_actions(self, state: DuneSession, player_ref: PlayerRef) -> list[str]:
        """Return the labels the player could take right now."""
        index = state.player_index(player_ref)
        if index is None:
            return []
        player = state.players[index]
        if player.revealed:
            return []
        if player.exhausted:
            return [REVEAL_TURN]

        labels = [
            label
            for section in BOARD_SECTIONS
            for label in section.actions
            if label != SWORDMASTER
        ]
        labels.extend(self._special_actions(state))
        holder = self._swordmaster_holder(state)
        if holder is None or holder.id == player.id:
            labels.append(SWORDMASTER)
        labels.append(REVEAL_TURN)
        return labels

    def available_actions(self, state: DuneSession) -> dict[str, Any]:
        """Describe the board for clients: sections plus leader-gated spaces."""
        return {
            "sections": [
                {"title": section.title, "actions": list(section.actions)}
                for section in BOARD_SECTIONS
            ],
            "special": list(self._special_actions(state)),
            "reserved": [REVEAL_TURN, SWORDMASTER],
        }

    def is_legal(self, state: DuneSession, player_ref: PlayerRef, action: Action) -> tuple[bool, str | None]:
        """Validate an action against the acting player's agents and reveal status."""
        if not state.players:
            return False, "No game in progress."

        index = state.player_index(player_ref)
        if index is None:
            return False, f"Unknown player: {player_ref!r}"
        player = state.players[index]

        if player.revealed:
            return False, "You have already revealed for this round!"
        if action.consumes_agent and player.exhausted:
            return False, "You have no agents remaining!"

        if isinstance(action, ClaimSwordmaster):
            holder = self._swordmaster_holder(state)
            if holder is not None and holder.id != player.id:
                return False, f"Swordmaster already claimed by {holder.name}."
            return True, None

        if isinstance(action, BoardAction):
            if action.space in BOARD_ACTION_LABELS or action.space in self._special_actions(state):
                return True, None
            return False, f"Unknown board space: {action.space!r}"

        if isinstance(action, RevealTurn):
            return True, None

        return False, f"Unsupported action type: {type(action).__name__}"

    def apply_action(
        self,
        state: DuneSession,
        player_ref: PlayerRef,
        action: Action,
        *,
        timestamp: str | None = None,
    ) -> DuneSession:
        """Apply an action, log it, and advance the round when everyone has revealed.

        The log entry carries the round the action was taken in, captured
        before the round-advance check.
        """
        legal, reason = self.is_legal(state, player_ref, action)
        if not legal:
            raise IllegalActionError(str(player_ref), action.label, reason)

        index = state.player_index(player_ref)
        assert index is not None
        player = state.players[index]

        if isinstance(action, RevealTurn):
            updated = player.evolve(revealed=True, agents=0)
        elif isinstance(action, ClaimSwordmaster):
            # The claim spends an agent but raises capacity; net change is zero.
            updated = player if player.swordmaster else player.evolve(swordmaster=True)
        else:
            updated = player.evolve(agents=max(0, player.agents - 1))

        players = list(state.players)
        players[index] = updated
        entry = ActionEntry(
            round=state.round,
            player_name=player.name,
            action=action.label,
            timestamp=timestamp or _utc_now_iso(),
        )
        acted = state.evolve(
            players=tuple(players),
            history=state.history + (entry,),
            current_index=(index + 1) % len(players),
        )
        return self.check_round_advance(acted)

    def check_round_advance(self, state: DuneSession) -> DuneSession:
        """Start the next round once every player has revealed.

        This is the only place agents are replenished.
        """
        if not state.all_revealed():
            return state

        count = len(state.players)
        current_first = state.first_player_index()
        next_first = 0 if current_first is None else (current_first + 1) % count
        players = tuple(
            player.evolve(
                agents=player.capacity,
                revealed=False,
                is_first_player=index == next_first,
            )
            for index, player in enumerate(state.players)
        )
        logger.debug("Round %d complete; first player is now %s", state.round, players[next_first].name)
        return state.evolve(
            players=players,
            round=state.round + 1,
            current_index=next_first,
        )

    def pass_turn(self, state: DuneSession) -> DuneSession:
        """Move the turn pointer to the next seat without logging an action."""
        if not state.players:
            return state
        return state.evolve(current_index=(state.current_index + 1) % len(state.players))

    def render(self, state: DuneSession) -> str:
        """Render state for debugging."""
        lines = [f"round={state.round} phase={state.phase} history={len(state.history)} entries"]
        for index, player in enumerate(state.players):
            markers = []
            if index == state.current_index:
                markers.append(">")
            if player.is_first_player:
                markers.append("first")
            if player.swordmaster:
                markers.append("swordmaster")
            if player.revealed:
                markers.append("revealed")
            lines.append(
                f"{player.id}:{player.name} ({player.leader}) agents={player.agents}/{player.capacity} "
                + " ".join(markers)
            )
        return "\n".join(lines)

    def parse_action(self, data: Mapping[str, Any] | str) -> Action:
        """Parse a label or JSON payload into an action."""
        if isinstance(data, str):
            return action_from_label(data)
        return action_from_dict(data)

    def _special_actions(self, state: DuneSession) -> tuple[str, ...]:
        return special_actions_for([player.leader for player in state.players])

    def _swordmaster_holder(self, state: DuneSession) -> PlayerState | None:
        for player in state.players:
            if player.swordmaster:
                return player
        return None
