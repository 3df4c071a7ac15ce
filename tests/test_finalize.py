"""Tests for building and saving a finished game."""

from __future__ import annotations

from datetime import UTC, datetime

from dune.dune_actions import BoardAction, RevealTurn
from dune.dune_game import DuneGame
from dune.dune_state import DuneSession, PlayerState
from records.directory import PlayerDirectory
from records.sheets import MemorySheetsBackend
from records.store import LOG_HEADER, LOGS_TAB, SCORE_HEADER, SCORES_TAB, RecordStore
from server.finalize import build_batches, finalize_game, placeholder_game_id

SHEET = "sheet-1"
NOW = datetime(2024, 5, 1, 10, 30, 15, tzinfo=UTC)


def _session() -> DuneSession:
    return DuneGame().new_game(
        [
            PlayerState(id=1, name="Paul", leader="gurney", is_first_player=True),
            PlayerState(id=2, name="Gurney", leader="feyd"),
        ]
    )


def test_placeholder_game_id_is_sortable_timestamp() -> None:
    assert placeholder_game_id(NOW) == "2024-05-01T10-30-15"


def test_batches_resolve_directory_ids_and_default_scores() -> None:
    store = RecordStore(MemorySheetsBackend({SHEET: {}}), SHEET)
    game = DuneGame()
    session = game.apply_action(_session(), 1, BoardAction("Arrakeen"), timestamp="t1")

    batches = build_batches(session, {"1": "12"}, directory=PlayerDirectory(store), now=NOW)

    assert batches.score_rows == [
        ["2024-05-01T10-30-15", NOW.isoformat(), "1", "gurney", "12"],
        ["2024-05-01T10-30-15", NOW.isoformat(), "Gurney", "feyd", "0"],
    ]
    assert batches.log_rows == [["2024-05-01T10-30-15", NOW.isoformat(), 1, "1", "Arrakeen", "t1"]]


def test_finalize_with_empty_history_appends_empty_log_batch() -> None:
    backend = MemorySheetsBackend({SHEET: {}})
    store = RecordStore(backend, SHEET)

    result = finalize_game(_session(), {1: 9, 2: 11}, store, now=NOW)

    appends = [detail for name, detail in backend.calls if name == "append_values"]
    assert (SCORES_TAB, 3) in appends
    assert (LOGS_TAB, 1) in appends
    assert backend.rows(SHEET, LOGS_TAB) == [list(LOG_HEADER)]
    assert backend.rows(SHEET, SCORES_TAB)[1:] == [
        ["1", NOW.isoformat(), "Paul", "gurney", "9"],
        ["1", NOW.isoformat(), "Gurney", "feyd", "11"],
    ]
    assert result.game_id == 1
    assert result.logs_written == 0


def test_finalize_on_existing_sheet_assigns_next_id() -> None:
    backend = MemorySheetsBackend(
        {
            SHEET: {
                SCORES_TAB: [list(SCORE_HEADER), ["41", "d", "1", "feyd", "3"]],
                LOGS_TAB: [list(LOG_HEADER)],
            }
        }
    )
    store = RecordStore(backend, SHEET)
    game = DuneGame()
    session = game.apply_action(_session(), 2, RevealTurn(), timestamp="t1")

    result = finalize_game(session, {}, store, now=NOW)

    assert result.game_id == 42
    assert backend.rows(SHEET, LOGS_TAB)[-1] == ["42", NOW.isoformat(), "1", "Gurney", "Reveal Turn", "t1"]
    assert [row[4] for row in backend.rows(SHEET, SCORES_TAB)[2:]] == ["0", "0"]
