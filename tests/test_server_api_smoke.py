"""Smoke tests for the tracker FastAPI routes."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

from fastapi import HTTPException

import server.main as main_module
from records.sheets import GoogleSheetsBackend, MemorySheetsBackend
from records.store import LOG_HEADER, LOGS_TAB, SCORE_HEADER, SCORES_TAB
from server.local_state import LocalStateFile
from server.main import (
    end_game,
    finalize,
    get_draft,
    get_leaders,
    get_players,
    get_recent_games,
    get_session,
    health,
    save_to_sheet,
    start_game,
    start_setup,
    take_action,
    undo,
)
from server.schemas import ActionRequest, FinalizeRequest, SaveToSheetRequest, StartGameRequest
from server.session import TrackerSession

SHEET = "sheet-1"


def _expect_http_error(fn, expected_status: int) -> Any:
    try:
        fn()
    except HTTPException as exc:
        assert exc.status_code == expected_status
        return exc.detail
    raise AssertionError("Expected HTTPException to be raised.")


def _use_memory_store(monkeypatch, tmp_path: Path, tabs: dict | None = None) -> MemorySheetsBackend:
    backend = MemorySheetsBackend({SHEET: tabs or {}})
    monkeypatch.setattr(main_module, "_backend", backend)
    monkeypatch.setattr(main_module, "config", replace(main_module.config, spreadsheet_id=SHEET))
    monkeypatch.setattr(main_module, "tracker", TrackerSession(state_file=LocalStateFile(tmp_path / "state.json")))
    return backend


def _save_request(**overrides: Any) -> SaveToSheetRequest:
    payload: dict[str, Any] = {
        "spreadsheetId": SHEET,
        "scoreHeaders": list(SCORE_HEADER),
        "scoreRows": [["2024-05-01T10-00-00", "2024-05-01", "1", "feyd", "10"]],
        "logHeaders": list(LOG_HEADER),
        "logRows": [],
    }
    payload.update(overrides)
    return SaveToSheetRequest(**payload)


def test_health() -> None:
    assert health() == {"status": "ok"}


def test_reference_routes_seed_and_return_directories(monkeypatch, tmp_path: Path) -> None:
    backend = _use_memory_store(monkeypatch, tmp_path)

    players = get_players(spreadsheet_id=None)
    leaders = get_leaders(spreadsheet_id=SHEET)

    assert players[0] == {"id": "1", "name": "Paul"}
    assert len(leaders) == 18
    assert set(leaders[0]) == {"id", "name", "house", "game", "passive", "signet"}
    assert backend.rows(SHEET, "Player Names")[0] == ["ID", "Name"]


def test_missing_spreadsheet_id_is_rejected(monkeypatch, tmp_path: Path) -> None:
    _use_memory_store(monkeypatch, tmp_path)
    monkeypatch.setattr(main_module, "config", replace(main_module.config, spreadsheet_id=None))

    assert _expect_http_error(lambda: get_players(spreadsheet_id=None), 400) == "Missing spreadsheetId"


def test_save_to_sheet_then_recent_games(monkeypatch, tmp_path: Path) -> None:
    backend = _use_memory_store(monkeypatch, tmp_path)

    response = save_to_sheet(_save_request())
    save_to_sheet(_save_request(scoreRows=[["x", "2024-05-02", "2", "liet", "12"]]))

    assert response.body == b"Saved to Google Sheet successfully"
    assert [row[0] for row in backend.rows(SHEET, SCORES_TAB)] == ["Game ID", "1", "2"]
    assert backend.rows(SHEET, LOGS_TAB) == [list(LOG_HEADER)]

    recent = get_recent_games(spreadsheet_id=SHEET)
    assert [game["id"] for game in recent] == ["2", "1"]
    assert recent[0]["players"] == [{"playerId": "2", "leaderId": "liet", "vp": "12"}]


def test_save_to_sheet_requires_all_fields(monkeypatch, tmp_path: Path) -> None:
    _use_memory_store(monkeypatch, tmp_path)

    detail = _expect_http_error(lambda: save_to_sheet(_save_request(logRows=None)), 400)

    assert detail == "Missing required fields (spreadsheetId, headers, rows)"


def test_save_to_sheet_reports_missing_credentials(monkeypatch, tmp_path: Path) -> None:
    _use_memory_store(monkeypatch, tmp_path)
    backend = GoogleSheetsBackend(credentials_json=None, credentials_file=tmp_path / "credentials.json")
    monkeypatch.setattr(main_module, "_backend", backend)

    detail = _expect_http_error(lambda: save_to_sheet(_save_request()), 500)

    assert detail == "Server missing credentials.json"


def test_session_flow_through_routes(monkeypatch, tmp_path: Path) -> None:
    backend = _use_memory_store(monkeypatch, tmp_path)

    assert get_session()["mode"] == "home"
    start_setup()
    view = start_game(
        StartGameRequest(
            seats=[
                {"id": 1, "name": "Paul", "leader": "gurney", "isFirstPlayer": True},
                {"id": 2, "name": "Chani", "leader": "liet"},
            ],
            trackActions=True,
        )
    )
    assert view["mode"] == "active"

    view = take_action(ActionRequest(player=1, action="Arrakeen"))
    assert view["session"]["players"][0]["agents"] == 1
    assert view["undoDepth"] == 1

    view = undo()
    assert view["session"]["players"][0]["agents"] == 2

    take_action(ActionRequest(player="Paul", action="Reveal Turn"))
    detail = _expect_http_error(lambda: take_action(ActionRequest(player=1, action="Secrets")), 400)
    assert detail["error"] == "You have already revealed for this round!"
    assert detail["mode"] == "active"

    end_game()
    view = finalize(FinalizeRequest(scores={"1": "10"}))
    assert view["mode"] == "home"
    assert view["result"]["gameId"] == 1
    assert backend.rows(SHEET, SCORES_TAB)[1][2:] == ["1", "gurney", "10"]
    assert backend.rows(SHEET, LOGS_TAB)[1][3:5] == ["1", "Reveal Turn"]


def test_session_routes_reject_wrong_mode(monkeypatch, tmp_path: Path) -> None:
    _use_memory_store(monkeypatch, tmp_path)

    detail = _expect_http_error(lambda: take_action(ActionRequest(player=1, action="Arrakeen")), 409)

    assert detail["mode"] == "home"
    assert "take an action" in detail["error"]


def test_finalize_store_failure_keeps_session(monkeypatch, tmp_path: Path) -> None:
    _use_memory_store(monkeypatch, tmp_path)
    start_setup()
    start_game(
        StartGameRequest(
            seats=[
                {"id": 1, "name": "Paul", "leader": "gurney", "isFirstPlayer": True},
                {"id": 2, "name": "Chani", "leader": "liet"},
            ]
        )
    )
    end_game()

    class _Failing(MemorySheetsBackend):
        def add_tabs(self, spreadsheet_id, titles):  # type: ignore[override]
            from tracker.errors import StoreError

            raise StoreError("Google Sheets API Error: backend unavailable")

    monkeypatch.setattr(main_module, "_backend", _Failing({SHEET: {}}))

    detail = _expect_http_error(lambda: finalize(FinalizeRequest(scores={})), 502)

    assert detail["mode"] == "scoring"
    assert "backend unavailable" in detail["error"]
    assert len(get_session()["session"]["players"]) == 2


def test_draft_is_reproducible_with_seed(monkeypatch, tmp_path: Path) -> None:
    _use_memory_store(monkeypatch, tmp_path)

    first = get_draft(spreadsheet_id=None, seed=3)
    second = get_draft(spreadsheet_id=None, seed=3)

    assert len(first) == 7
    assert first == second
