"""Read-side decoding of score rows written by current and legacy producers.

Two row layouts exist in the Scores tab and are told apart purely by field
count; there is no schema version column:

* current (5 cells): ``Game ID, Game Date, Player ID, Leader ID, Victory Points``
* legacy (6+ cells): ``Game ID, Date, Player Name, Leader Name, House, VP``

The house column of legacy rows is dropped. Stored rows are never rewritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

CURRENT_ROW_LENGTH = 5
LEGACY_ROW_MIN_LENGTH = 6


class RowShape(str, Enum):
    """Score row layouts, keyed by field count."""

    CURRENT = "current"
    LEGACY = "legacy"


@dataclass(frozen=True)
class ScoreRow:
    """One player's result within a game, decoded from either layout."""

    game_id: str
    date: str
    player_ref: str
    leader_ref: str
    vp: str
    shape: RowShape

    def to_dict(self) -> dict[str, Any]:
        return {"playerId": self.player_ref, "leaderId": self.leader_ref, "vp": self.vp}


@dataclass(frozen=True)
class GameRecord:
    """All score rows sharing a game id, in encounter order."""

    id: str
    date: str
    players: tuple[ScoreRow, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "players": [row.to_dict() for row in self.players],
        }


def resolve_row(cells: Sequence[Any]) -> ScoreRow | None:
    """Decode one raw row, or return None for a malformed one."""
    values = ["" if cell is None else str(cell) for cell in cells]
    if len(values) == CURRENT_ROW_LENGTH:
        game_id, date, player_ref, leader_ref, vp = values
        return ScoreRow(game_id, date, player_ref, leader_ref, vp, RowShape.CURRENT)
    if len(values) >= LEGACY_ROW_MIN_LENGTH:
        game_id, date, player_ref, leader_ref, _house, vp = values[:LEGACY_ROW_MIN_LENGTH]
        return ScoreRow(game_id, date, player_ref, leader_ref, vp, RowShape.LEGACY)
    return None


def resolve_rows(rows: Iterable[Sequence[Any]]) -> list[ScoreRow]:
    """Decode rows, skipping any with an unrecognized length."""
    resolved: list[ScoreRow] = []
    for cells in rows:
        row = resolve_row(cells)
        if row is not None:
            resolved.append(row)
    return resolved


def group_games(rows: Iterable[Sequence[Any]]) -> list[GameRecord]:
    """Group decoded rows by game id, keeping first-seen game order.

    The date of a game is taken from its first row.
    """
    order: list[str] = []
    grouped: dict[str, list[ScoreRow]] = {}
    for row in resolve_rows(rows):
        if row.game_id not in grouped:
            grouped[row.game_id] = []
            order.append(row.game_id)
        grouped[row.game_id].append(row)
    return [
        GameRecord(id=game_id, date=grouped[game_id][0].date, players=tuple(grouped[game_id]))
        for game_id in order
    ]


def recent(games: Sequence[GameRecord], limit: int = 2) -> list[GameRecord]:
    """Return the last ``limit`` games in store order, newest first."""
    if limit <= 0:
        return []
    return list(reversed(games[-limit:]))
