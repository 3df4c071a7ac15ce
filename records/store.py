"""Record store adapter over a spreadsheet: tabs, sequential game ids, and appends."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging
import re
from typing import Any

from tracker.errors import ConfigurationError, StoreError

from .rows import GameRecord, group_games, recent
from .sheets import SheetsBackend, a1_range

logger = logging.getLogger(__name__)

SCORES_TAB = "Scores"
LOGS_TAB = "Logs"

SCORE_HEADER: tuple[str, ...] = ("Game ID", "Game Date", "Player ID", "Leader ID", "Victory Points")
LOG_HEADER: tuple[str, ...] = ("Game ID", "Game Date", "Round", "Player ID", "Action", "Timestamp")

SCORES_READ_COLUMNS = "A:F"
GAME_ID_COLUMN = "A:A"
DEFAULT_GAME_ID = 1

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_game_id(cell: Any) -> int | None:
    """Parse the leading integer of an id cell; None when there is none."""
    match = _LEADING_INT.match("" if cell is None else str(cell))
    if match is None:
        return None
    return int(match.group(1))


def stamp_game_id(rows: Iterable[Sequence[Any]], game_id: int) -> list[list[Any]]:
    """Copy rows, overwriting column 0 with the assigned game id."""
    stamped: list[list[Any]] = []
    for row in rows:
        copy = list(row)
        if copy:
            copy[0] = game_id
        else:
            copy = [game_id]
        stamped.append(copy)
    return stamped


class RecordStore:
    """Append-only access to one spreadsheet.

    Game ids are advisory: ``next_game_id`` reads the last id and adds one.
    Two writers finalizing at the same time can both observe the same last
    id; there is no store-side counter or lock.
    """

    def __init__(self, backend: SheetsBackend, spreadsheet_id: str | None) -> None:
        if not spreadsheet_id:
            raise ConfigurationError("Missing spreadsheetId; set TRACKER_SPREADSHEET_ID or pass spreadsheetId.")
        self.backend = backend
        self.spreadsheet_id = spreadsheet_id

    def ensure_tabs(self, names: Iterable[str]) -> set[str]:
        """Create whichever of ``names`` are missing, in one batched request.

        Returns the titles that were created by this call.
        """
        wanted = list(dict.fromkeys(names))
        existing = set(self.backend.tab_titles(self.spreadsheet_id))
        missing = [name for name in wanted if name not in existing]
        if missing:
            self.backend.add_tabs(self.spreadsheet_id, missing)
            logger.info("Created tabs %s in spreadsheet %s", missing, self.spreadsheet_id)
        return set(missing)

    def read_rows(self, tab: str, columns: str | None = None) -> list[list[str]]:
        """Return every row of a tab (header included) for the given columns."""
        return self.backend.get_values(self.spreadsheet_id, a1_range(tab, columns))

    def is_empty(self, tab: str) -> bool:
        """True when the tab holds no rows at all, not even a header."""
        return not self.read_rows(tab, GAME_ID_COLUMN)

    def next_game_id(self) -> int:
        """Return last game id + 1, or 1 for an empty tab or an unreadable id."""
        try:
            rows = self.read_rows(SCORES_TAB, GAME_ID_COLUMN)
        except StoreError as exc:
            logger.warning("Could not read existing game ids, defaulting to %d: %s", DEFAULT_GAME_ID, exc)
            return DEFAULT_GAME_ID

        if len(rows) <= 1:
            return DEFAULT_GAME_ID

        last_row = rows[-1]
        last_id = parse_game_id(last_row[0]) if last_row else None
        if last_id is None:
            logger.warning("Last game id %r is not numeric, defaulting to %d", last_row, DEFAULT_GAME_ID)
            return DEFAULT_GAME_ID
        return last_id + 1

    def append_records(
        self,
        tab: str,
        header_row: Sequence[Any],
        data_rows: Sequence[Sequence[Any]],
        include_header: bool,
    ) -> int:
        """Append rows to the end of a tab; prepend the header when asked.

        An empty payload is still handed to the backend as a no-op append.
        Returns the number of rows written.
        """
        payload = [list(row) for row in data_rows]
        if include_header:
            payload.insert(0, list(header_row))
        self.backend.append_values(self.spreadsheet_id, tab, payload)
        logger.info("Appended %d rows to %s", len(payload), tab)
        return len(payload)

    def seed_if_empty(
        self,
        tab: str,
        header_row: Sequence[Any],
        default_rows: Sequence[Sequence[Any]],
        columns: str | None = None,
    ) -> list[list[str]]:
        """Return the tab's data rows, writing header + defaults first if it is empty.

        When seeding, the defaults are returned directly instead of being
        read back.
        """
        rows = self.read_rows(tab, columns)
        if rows:
            return rows[1:]

        logger.info("Seeding %r with %d default rows", tab, len(default_rows))
        self.backend.update_values(
            self.spreadsheet_id,
            a1_range(tab, "A1"),
            [list(header_row), *[list(row) for row in default_rows]],
        )
        return [["" if cell is None else str(cell) for cell in row] for row in default_rows]

    def save_game(
        self,
        score_header: Sequence[Any],
        score_rows: Sequence[Sequence[Any]],
        log_header: Sequence[Any],
        log_rows: Sequence[Sequence[Any]],
    ) -> int:
        """Persist one finished game: ensure tabs, assign the id, append scores and logs.

        Column 0 of every row is overwritten with the assigned id. A header
        is written to any tab that is still empty, which also covers tabs
        left behind by an earlier save that failed part way.
        """
        self.ensure_tabs([SCORES_TAB, LOGS_TAB])
        scores_empty = self.is_empty(SCORES_TAB)
        logs_empty = self.is_empty(LOGS_TAB)
        game_id = self.next_game_id()
        logger.info("Assigning game id %d", game_id)

        self.append_records(
            SCORES_TAB,
            score_header,
            stamp_game_id(score_rows, game_id),
            include_header=scores_empty,
        )
        self.append_records(
            LOGS_TAB,
            log_header,
            stamp_game_id(log_rows, game_id),
            include_header=logs_empty,
        )
        return game_id

    def games(self) -> list[GameRecord]:
        """Return every game in the Scores tab, in store order."""
        rows = self.read_rows(SCORES_TAB, SCORES_READ_COLUMNS)
        if len(rows) < 2:
            return []
        return group_games(rows[1:])

    def recent_games(self, limit: int = 2) -> list[GameRecord]:
        """Return the most recent ``limit`` games, newest first."""
        if SCORES_TAB not in set(self.backend.tab_titles(self.spreadsheet_id)):
            return []
        return recent(self.games(), limit=limit)
