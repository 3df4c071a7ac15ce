"""Live tracker session: app mode, undo ledger, and local persistence."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
import logging
import threading
from typing import Any

from dune.dune_game import DuneGame
from dune.dune_setup import build_lineup
from dune.dune_state import DuneSession, empty_session
from records.directory import PlayerDirectory
from records.store import RecordStore
from server.finalize import FinalizeResult, finalize_game
from server.local_state import LocalStateFile, SavedSession
from tracker.errors import SessionModeError
from tracker.game import PlayerRef
from tracker.ledger import UndoLedger

logger = logging.getLogger(__name__)

MODE_HOME = "home"
MODE_SETUP = "setup"
MODE_ACTIVE = "active"
MODE_HOLDING = "holding"
MODE_SCORING = "scoring"
SUPPORTED_MODES = {MODE_HOME, MODE_SETUP, MODE_ACTIVE, MODE_HOLDING, MODE_SCORING}


class TrackerSession:
    """The single in-progress game for this process.

    Every mutation runs under one lock, pushes the prior session to the
    undo ledger when it changes game data, and is written to the local state
    file before it takes effect in memory. Failed mutations, including a
    failed write, leave everything unchanged.
    """

    def __init__(self, state_file: LocalStateFile | None = None, game: DuneGame | None = None) -> None:
        self.game = game or DuneGame()
        self.state_file = state_file
        self.ledger: UndoLedger[DuneSession] = UndoLedger()
        self._lock = threading.Lock()

        saved = state_file.load() if state_file is not None else SavedSession()
        mode = saved.mode if saved.mode in SUPPORTED_MODES else MODE_HOME
        self.mode = mode
        self.state = saved.session
        self.track_actions = saved.track_actions

    def _require_mode(self, operation: str, *modes: str) -> None:
        if self.mode not in modes:
            raise SessionModeError(operation, self.mode)

    def _persist(self, **changes: Any) -> None:
        """Write the session with ``changes`` applied, before they are committed in memory."""
        if self.state_file is None:
            return
        self.state_file.save(replace(self.snapshot(), **changes))

    def _reset(self) -> None:
        self.mode = MODE_HOME
        self.state = empty_session()
        self.track_actions = True
        self.ledger.clear()

    def snapshot(self) -> SavedSession:
        return SavedSession(mode=self.mode, session=self.state, track_actions=self.track_actions)

    def view(self) -> dict[str, Any]:
        """Return the client payload for the live session."""
        current = self.state.current_player()
        legal: list[str] = []
        if current is not None and self.mode == MODE_ACTIVE:
            legal = self.game.legal_actions(self.state, current.id)
        return {
            "mode": self.mode,
            "trackActions": self.track_actions,
            "session": self.state.to_dict(),
            "currentPlayer": current.to_dict() if current is not None else None,
            "legalActions": legal,
            "board": self.game.available_actions(self.state),
            "canUndo": self.ledger.can_undo,
            "undoDepth": len(self.ledger),
        }

    def start_setup(self) -> dict[str, Any]:
        with self._lock:
            self._require_mode("start setup", MODE_HOME, MODE_SETUP)
            self._persist(mode=MODE_SETUP)
            self.mode = MODE_SETUP
            return self.view()

    def complete_setup(self, seats: Sequence[Mapping[str, Any]], track_actions: bool = True) -> dict[str, Any]:
        """Validate the lineup and start round one; the ledger starts empty."""
        with self._lock:
            self._require_mode("start a game", MODE_SETUP)
            lineup = build_lineup(seats)
            state = self.game.new_game(lineup)
            tracking = bool(track_actions)
            mode = MODE_ACTIVE if tracking else MODE_HOLDING
            self._persist(mode=mode, session=state, track_actions=tracking)
            self.state = state
            self.track_actions = tracking
            self.mode = mode
            self.ledger.clear()
            logger.info(
                "Started game with %s (tracking %s)",
                ", ".join(player.name for player in lineup),
                "on" if self.track_actions else "off",
            )
            return self.view()

    def act(self, player_ref: PlayerRef, action: Any) -> dict[str, Any]:
        """Apply one board action, reveal, or swordmaster claim for a player."""
        with self._lock:
            self._require_mode("take an action", MODE_ACTIVE)
            parsed = self.game.parse_action(action)
            updated = self.game.apply_action(self.state, player_ref, parsed)
            self._persist(session=updated)
            self.ledger.push(self.state)
            self.state = updated
            logger.debug("%s by %s\n%s", parsed.label, player_ref, self.game.render(updated))
            return self.view()

    def pass_turn(self) -> dict[str, Any]:
        with self._lock:
            self._require_mode("pass the turn", MODE_ACTIVE)
            updated = self.game.pass_turn(self.state)
            self._persist(session=updated)
            self.state = updated
            return self.view()

    def undo(self) -> dict[str, Any]:
        """Restore the previous session; a no-op when there is nothing to undo."""
        with self._lock:
            self._require_mode("undo", MODE_ACTIVE)
            previous = self.ledger.peek()
            if previous is not None:
                self._persist(session=previous)
                self.ledger.pop()
                self.state = previous
            return self.view()

    def end_game(self) -> dict[str, Any]:
        with self._lock:
            self._require_mode("end the game", MODE_ACTIVE, MODE_HOLDING)
            self._persist(mode=MODE_SCORING)
            self.mode = MODE_SCORING
            return self.view()

    def cancel_scoring(self) -> dict[str, Any]:
        with self._lock:
            self._require_mode("cancel scoring", MODE_SCORING)
            mode = MODE_ACTIVE if self.track_actions else MODE_HOLDING
            self._persist(mode=mode)
            self.mode = mode
            return self.view()

    def finalize(
        self,
        scores: Mapping[Any, Any],
        store: RecordStore,
        directory: PlayerDirectory | None = None,
    ) -> FinalizeResult:
        """Write the game to the record store, then return to the home screen.

        On any failure the session, mode, and ledger are left untouched so
        the save can be retried.
        """
        with self._lock:
            self._require_mode("finalize", MODE_SCORING)
            try:
                result = finalize_game(self.state, scores, store, directory=directory)
            except Exception:
                logger.exception("Finalize failed; keeping the local session for retry")
                raise
            self._reset()
            if self.state_file is not None:
                self.state_file.clear()
            return result

    def abandon(self) -> dict[str, Any]:
        """Drop the local session without writing anything to the store."""
        with self._lock:
            self._reset()
            if self.state_file is not None:
                self.state_file.clear()
            logger.info("Session abandoned")
            return self.view()
