"""FastAPI server for the Dune: Imperium tracker: live session plus spreadsheet records."""

from __future__ import annotations

import logging
import random
from typing import Any, Callable

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from dune.dune_setup import draft_pool
from records.directory import LeaderDirectory, PlayerDirectory
from records.sheets import SheetsBackend, backend_from_config
from records.store import RecordStore
from server.local_state import LocalStateFile
from server.schemas import ActionRequest, FinalizeRequest, SaveToSheetRequest, StartGameRequest
from server.session import TrackerSession
from tracker.config import load_config
from tracker.env_utils import load_dotenv
from tracker.errors import (
    ConfigurationError,
    IllegalActionError,
    MissingCredentialsError,
    SessionModeError,
    SetupError,
    StoreError,
)
from tracker.log_setup import configure_logging

load_dotenv()
config = load_config()
configure_logging(config.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Dune Imperium Tracker API", version="0.1.0")
tracker = TrackerSession(state_file=LocalStateFile(config.state_path))
_backend: SheetsBackend | None = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def sheets_backend() -> SheetsBackend:
    """Return the process-wide backend, building it on first use."""
    global _backend
    if _backend is None:
        _backend = backend_from_config(config)
    return _backend


def record_store(spreadsheet_id: str | None) -> RecordStore:
    try:
        return RecordStore(sheets_backend(), spreadsheet_id or config.spreadsheet_id)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail="Missing spreadsheetId") from exc


def _store_call(description: str, call: Callable[[], Any]) -> Any:
    """Run a store-backed read, mapping store failures to 500 responses."""
    try:
        return call()
    except MissingCredentialsError as exc:
        logger.error("Cannot %s: %s", description, exc)
        raise HTTPException(status_code=500, detail=f"Server missing credentials: {exc}") from exc
    except StoreError as exc:
        logger.error("Cannot %s: %s", description, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.get("/api/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok"}


@app.get("/api/leaders")
def get_leaders(spreadsheet_id: str | None = Query(default=None, alias="spreadsheetId")) -> list[dict[str, Any]]:
    """Return every leader, seeding the Leader Names tab on first use."""
    directory = LeaderDirectory(record_store(spreadsheet_id))
    leaders = _store_call("load leaders", directory.get)
    return [leader.to_dict() for leader in leaders]


@app.get("/api/players")
def get_players(spreadsheet_id: str | None = Query(default=None, alias="spreadsheetId")) -> list[dict[str, Any]]:
    """Return every regular player, seeding the Player Names tab on first use."""
    directory = PlayerDirectory(record_store(spreadsheet_id))
    players = _store_call("load players", directory.get)
    return [player.to_dict() for player in players]


@app.get("/api/recent-games")
def get_recent_games(spreadsheet_id: str | None = Query(default=None, alias="spreadsheetId")) -> list[dict[str, Any]]:
    """Return up to two most recent games, newest first, from either row layout."""
    store = record_store(spreadsheet_id)
    games = _store_call("load recent games", store.recent_games)
    return [game.to_dict() for game in games]


@app.post("/api/save-to-sheet", response_class=PlainTextResponse)
def save_to_sheet(request: SaveToSheetRequest) -> PlainTextResponse:
    """Append one game's score and log batches under a freshly assigned game id."""
    if request.missing_fields():
        raise HTTPException(status_code=400, detail="Missing required fields (spreadsheetId, headers, rows)")

    store = record_store(request.spreadsheet_id)
    try:
        game_id = store.save_game(
            request.score_headers or [],
            request.score_rows or [],
            request.log_headers or [],
            request.log_rows or [],
        )
    except MissingCredentialsError as exc:
        logger.error("Error saving to Google Sheet: %s", exc)
        raise HTTPException(status_code=500, detail="Server missing credentials.json") from exc
    except StoreError as exc:
        logger.error("Error saving to Google Sheet: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    logger.info("Saved game %d via save-to-sheet", game_id)
    return PlainTextResponse(content="Saved to Google Sheet successfully")


def _session_call(call: Callable[[], dict[str, Any]]) -> dict[str, Any]:
    """Run a session mutation, returning the refreshed view with errors."""
    try:
        return call()
    except SessionModeError as exc:
        payload = tracker.view()
        payload["error"] = str(exc)
        raise HTTPException(status_code=409, detail=payload) from exc
    except (IllegalActionError, SetupError, ValueError) as exc:
        # Include refreshed state for convenient UI recovery.
        payload = tracker.view()
        payload["error"] = exc.reason if isinstance(exc, IllegalActionError) and exc.reason else str(exc)
        raise HTTPException(status_code=400, detail=payload) from exc


@app.get("/api/session")
def get_session() -> dict[str, Any]:
    """Return the live session view."""
    return tracker.view()


@app.get("/api/session/draft")
def get_draft(
    spreadsheet_id: str | None = Query(default=None, alias="spreadsheetId"),
    seed: int | None = Query(default=None),
) -> list[dict[str, Any]]:
    """Offer a random pool of leaders for setup; ``seed`` makes the pool repeatable."""
    directory = LeaderDirectory(record_store(spreadsheet_id))
    leaders = _store_call("load leaders", directory.get)
    rng = random.Random(seed) if seed is not None else None
    try:
        pool = draft_pool(leaders, rng=rng)
    except SetupError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [leader.to_dict() for leader in pool]


@app.post("/api/session/setup")
def start_setup() -> dict[str, Any]:
    return _session_call(tracker.start_setup)


@app.post("/api/session/start")
def start_game(request: StartGameRequest) -> dict[str, Any]:
    seats = [seat.model_dump(by_alias=True) for seat in request.seats]
    return _session_call(lambda: tracker.complete_setup(seats, track_actions=request.track_actions))


@app.post("/api/session/action")
def take_action(request: ActionRequest) -> dict[str, Any]:
    return _session_call(lambda: tracker.act(request.player, request.action))


@app.post("/api/session/pass")
def pass_turn() -> dict[str, Any]:
    return _session_call(tracker.pass_turn)


@app.post("/api/session/undo")
def undo() -> dict[str, Any]:
    return _session_call(tracker.undo)


@app.post("/api/session/end")
def end_game() -> dict[str, Any]:
    return _session_call(tracker.end_game)


@app.post("/api/session/cancel-scoring")
def cancel_scoring() -> dict[str, Any]:
    return _session_call(tracker.cancel_scoring)


@app.post("/api/session/finalize")
def finalize(request: FinalizeRequest) -> dict[str, Any]:
    """Save the scored game; on failure the session stays in scoring for a retry."""
    store = record_store(request.spreadsheet_id)
    try:
        result = tracker.finalize(request.scores, store, directory=PlayerDirectory(store))
    except SessionModeError as exc:
        payload = tracker.view()
        payload["error"] = str(exc)
        raise HTTPException(status_code=409, detail=payload) from exc
    except MissingCredentialsError as exc:
        payload = tracker.view()
        payload["error"] = f"Server missing credentials: {exc}"
        raise HTTPException(status_code=500, detail=payload) from exc
    except StoreError as exc:
        payload = tracker.view()
        payload["error"] = str(exc)
        raise HTTPException(status_code=502, detail=payload) from exc

    response = tracker.view()
    response["result"] = result.to_dict()
    return response


@app.post("/api/session/abandon")
def abandon() -> dict[str, Any]:
    return _session_call(tracker.abandon)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.main:app", host="0.0.0.0", port=8000, reload=True)
