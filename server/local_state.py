"""Local JSON file holding the in-progress session between restarts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import json
import logging
from pathlib import Path
from typing import Any

from dune.dune_state import DuneSession, empty_session

logger = logging.getLogger(__name__)

STORAGE_KEY = "dune_tracker_state"
MODE_HOME = "home"


def _utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


@dataclass(frozen=True)
class SavedSession:
    """The persisted blob: app mode plus the session data."""

    mode: str = MODE_HOME
    session: DuneSession = field(default_factory=empty_session)
    track_actions: bool = True

    def to_dict(self) -> dict[str, Any]:
        game_data = self.session.to_dict()
        game_data["trackActions"] = self.track_actions
        return {"gameState": self.mode, "gameData": game_data}


def fresh_state() -> SavedSession:
    return SavedSession(mode=MODE_HOME, session=empty_session(), track_actions=True)


@dataclass
class LocalStateFile:
    """Single-key JSON file; a missing or unreadable file means a fresh start."""

    path: Path
    key: str = STORAGE_KEY

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def load(self) -> SavedSession:
        if not self.path.exists():
            return fresh_state()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            blob = raw[self.key]
            game_data = blob.get("gameData") or {}
            return SavedSession(
                mode=str(blob.get("gameState") or MODE_HOME),
                session=DuneSession.from_dict(game_data),
                track_actions=bool(game_data.get("trackActions", True)),
            )
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return fresh_state()

    def save(self, state: SavedSession) -> None:
        payload = {"version": 1, "updated_at": _utc_now_iso(), self.key: state.to_dict()}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp = self.path.with_suffix(self.path.suffix + ".tmp")
        temp.write_text(json.dumps(payload, sort_keys=True, indent=2), encoding="utf-8")
        temp.replace(self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
