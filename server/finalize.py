"""Turn a finished session plus entered scores into score and log batches."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
import logging
from typing import Any, Mapping

from dune.dune_state import DuneSession
from records.directory import PlayerDirectory
from records.store import LOG_HEADER, SCORE_HEADER, RecordStore

logger = logging.getLogger(__name__)

DEFAULT_VP = "0"


def placeholder_game_id(now: datetime) -> str:
    """Sortable per-call token ``YYYY-MM-DDTHH-MM-SS``; the store replaces it."""
    return now.strftime("%Y-%m-%dT%H-%M-%S")


@dataclass(frozen=True)
class FinalizeBatches:
    """Rows ready for ``RecordStore.save_game``."""

    placeholder_id: str
    date: str
    score_rows: list[list[Any]]
    log_rows: list[list[Any]]


@dataclass(frozen=True)
class FinalizeResult:
    game_id: int
    scores_written: int
    logs_written: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "gameId": self.game_id,
            "scoresWritten": self.scores_written,
            "logsWritten": self.logs_written,
        }


def _resolver(directory: PlayerDirectory | None):
    if directory is None:
        return lambda name: name
    return directory.resolve_id


def build_batches(
    session: DuneSession,
    scores: Mapping[Any, Any],
    *,
    directory: PlayerDirectory | None = None,
    now: datetime | None = None,
) -> FinalizeBatches:
    """Build score rows for every player and log rows for every history entry.

    ``scores`` is keyed by seat id (int or str); absent seats score ``"0"``.
    Player references are the directory id when the name is known, else the
    raw name.
    """
    moment = now or datetime.now(tz=UTC)
    game_id = placeholder_game_id(moment)
    date = moment.isoformat()
    resolve = _resolver(directory)

    score_rows: list[list[Any]] = []
    for player in session.players:
        vp = scores.get(player.id, scores.get(str(player.id)))
        vp_text = DEFAULT_VP if vp is None or str(vp).strip() == "" else str(vp)
        score_rows.append([game_id, date, resolve(player.name), player.leader, vp_text])

    log_rows = [
        [game_id, date, entry.round, resolve(entry.player_name), entry.action, entry.timestamp]
        for entry in session.history
    ]
    return FinalizeBatches(placeholder_id=game_id, date=date, score_rows=score_rows, log_rows=log_rows)


def finalize_game(
    session: DuneSession,
    scores: Mapping[Any, Any],
    store: RecordStore,
    *,
    directory: PlayerDirectory | None = None,
    now: datetime | None = None,
) -> FinalizeResult:
    """Write one finished game. Store errors propagate; nothing local is touched here."""
    batches = build_batches(session, scores, directory=directory, now=now)
    game_id = store.save_game(SCORE_HEADER, batches.score_rows, LOG_HEADER, batches.log_rows)
    logger.info(
        "Saved game %d (%d scores, %d log entries)",
        game_id,
        len(batches.score_rows),
        len(batches.log_rows),
    )
    return FinalizeResult(
        game_id=game_id,
        scores_written=len(batches.score_rows),
        logs_written=len(batches.log_rows),
    )
