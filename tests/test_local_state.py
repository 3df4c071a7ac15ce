"""Tests for the local session file."""

from __future__ import annotations

import json
from pathlib import Path

from dune.dune_game import DuneGame
from dune.dune_state import PlayerState
from server.local_state import STORAGE_KEY, LocalStateFile, SavedSession


def test_missing_file_is_a_fresh_start(tmp_path: Path) -> None:
    saved = LocalStateFile(tmp_path / "state.json").load()

    assert saved.mode == "home"
    assert saved.session.players == ()
    assert saved.track_actions


def test_corrupt_file_is_a_fresh_start(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    assert LocalStateFile(path).load().mode == "home"

    path.write_text(json.dumps({STORAGE_KEY: {"gameState": "active", "gameData": {"players": [{"name": "x"}]}}}))
    assert LocalStateFile(path).load().mode == "home"


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    state_file = LocalStateFile(tmp_path / "nested" / "state.json")
    session = DuneGame().new_game(
        [
            PlayerState(id=1, name="Paul", leader="gurney", is_first_player=True),
            PlayerState(id=2, name="Chani", leader="liet"),
        ]
    )

    state_file.save(SavedSession(mode="holding", session=session, track_actions=False))
    loaded = state_file.load()

    assert loaded.mode == "holding"
    assert loaded.session == session
    assert not loaded.track_actions
    raw = json.loads(state_file.path.read_text(encoding="utf-8"))
    assert set(raw[STORAGE_KEY]) == {"gameState", "gameData"}
    assert not state_file.path.with_suffix(".json.tmp").exists()


def test_clear_removes_the_file(tmp_path: Path) -> None:
    state_file = LocalStateFile(tmp_path / "state.json")
    state_file.save(SavedSession())

    state_file.clear()
    state_file.clear()

    assert not state_file.path.exists()
