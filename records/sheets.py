"""Spreadsheet backends: Google Sheets v4 and an in-process stand-in."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
import json
import logging
from pathlib import Path
import re
from typing import Any

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from tracker.config import SHEETS_BACKEND_MEMORY, TrackerConfig
from tracker.errors import MissingCredentialsError, StoreError

logger = logging.getLogger(__name__)

SHEETS_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/spreadsheets",)

Rows = list[list[str]]

_COLUMNS_PATTERN = re.compile(r"^(?P<start>[A-Z]+)\d*(?::(?P<end>[A-Z]+)\d*)?$")


def a1_range(tab: str, columns: str | None = None) -> str:
    """Build an A1 range, quoting tab titles that contain spaces or quotes."""
    title = tab
    if re.search(r"[^A-Za-z0-9_]", tab):
        title = "'" + tab.replace("'", "''") + "'"
    return f"{title}!{columns}" if columns else title


def _column_index(letters: str) -> int:
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def parse_a1_range(range_a1: str) -> tuple[str, int, int | None]:
    """Split an A1 range into (tab title, first column index, last column index or None)."""
    if "!" in range_a1:
        tab_part, _, columns = range_a1.rpartition("!")
    else:
        tab_part, columns = range_a1, ""
    title = tab_part.strip()
    if len(title) >= 2 and title[0] == title[-1] == "'":
        title = title[1:-1].replace("''", "'")
    match = _COLUMNS_PATTERN.match(columns.strip().upper())
    if match is None:
        return title, 0, None
    start = _column_index(match.group("start"))
    end_letters = match.group("end")
    end = _column_index(end_letters) if end_letters else None
    return title, start, end


def _stringify(rows: Sequence[Sequence[Any]]) -> Rows:
    return [["" if cell is None else str(cell) for cell in row] for row in rows]


class SheetsBackend(ABC):
    """Minimal spreadsheet operations the record store relies on."""

    @abstractmethod
    def tab_titles(self, spreadsheet_id: str) -> list[str]:
        """Return the titles of all tabs in the spreadsheet."""

    @abstractmethod
    def add_tabs(self, spreadsheet_id: str, titles: Sequence[str]) -> None:
        """Create tabs in a single batched request."""

    @abstractmethod
    def get_values(self, spreadsheet_id: str, range_a1: str) -> Rows:
        """Return cell strings for a range; an empty tab yields an empty list."""

    @abstractmethod
    def append_values(self, spreadsheet_id: str, tab: str, rows: Sequence[Sequence[Any]]) -> None:
        """Append rows after the last non-empty row of a tab."""

    @abstractmethod
    def update_values(self, spreadsheet_id: str, range_a1: str, rows: Sequence[Sequence[Any]]) -> None:
        """Overwrite cells starting at the range's top-left corner."""


def load_service_account_credentials(
    *,
    credentials_json: str | None,
    credentials_file: str | Path | None,
    scopes: Sequence[str] = SHEETS_SCOPES,
) -> service_account.Credentials:
    """Resolve credentials from inline JSON first, then from a key file."""
    if credentials_json:
        try:
            info = json.loads(credentials_json)
        except json.JSONDecodeError as exc:
            raise MissingCredentialsError("Failed to parse GOOGLE_CREDENTIALS environment variable") from exc
        try:
            return service_account.Credentials.from_service_account_info(info, scopes=list(scopes))
        except (ValueError, KeyError) as exc:
            raise MissingCredentialsError(f"GOOGLE_CREDENTIALS is not a usable service-account key: {exc}") from exc

    if credentials_file is not None and Path(credentials_file).exists():
        try:
            return service_account.Credentials.from_service_account_file(str(credentials_file), scopes=list(scopes))
        except (ValueError, KeyError) as exc:
            raise MissingCredentialsError(f"{credentials_file} is not a usable service-account key: {exc}") from exc

    raise MissingCredentialsError(
        f"{credentials_file or 'credentials.json'} not found and GOOGLE_CREDENTIALS env var not set"
    )


class GoogleSheetsBackend(SheetsBackend):
    """Sheets v4 client. The API client is built on first use, not at import or startup."""

    def __init__(
        self,
        *,
        credentials_json: str | None = None,
        credentials_file: str | Path | None = None,
        scopes: Sequence[str] = SHEETS_SCOPES,
    ) -> None:
        self.credentials_json = credentials_json
        self.credentials_file = credentials_file
        self.scopes = tuple(scopes)
        self._service: Any = None

    def _spreadsheets(self) -> Any:
        if self._service is None:
            credentials = load_service_account_credentials(
                credentials_json=self.credentials_json,
                credentials_file=self.credentials_file,
                scopes=self.scopes,
            )
            self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        return self._service.spreadsheets()

    def _execute(self, description: str, request: Any) -> dict[str, Any]:
        try:
            return request.execute() or {}
        except HttpError as exc:
            raise StoreError(f"Google Sheets API Error: {description}: {exc}") from exc
        except GoogleAuthError as exc:
            raise StoreError(f"Google Sheets auth error during {description}: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Network error during {description}: {exc}") from exc

    def tab_titles(self, spreadsheet_id: str) -> list[str]:
        meta = self._execute(
            "read spreadsheet metadata",
            self._spreadsheets().get(spreadsheetId=spreadsheet_id, fields="sheets.properties.title"),
        )
        return [str(sheet.get("properties", {}).get("title", "")) for sheet in meta.get("sheets", [])]

    def add_tabs(self, spreadsheet_id: str, titles: Sequence[str]) -> None:
        if not titles:
            return
        requests = [{"addSheet": {"properties": {"title": title}}} for title in titles]
        self._execute(
            f"create tabs {list(titles)}",
            self._spreadsheets().batchUpdate(spreadsheetId=spreadsheet_id, body={"requests": requests}),
        )

    def get_values(self, spreadsheet_id: str, range_a1: str) -> Rows:
        response = self._execute(
            f"read {range_a1}",
            self._spreadsheets().values().get(spreadsheetId=spreadsheet_id, range=range_a1),
        )
        return _stringify(response.get("values", []))

    def append_values(self, spreadsheet_id: str, tab: str, rows: Sequence[Sequence[Any]]) -> None:
        if not rows:
            logger.debug("Nothing to append to %s", tab)
            return
        self._execute(
            f"append to {tab}",
            self._spreadsheets()
            .values()
            .append(
                spreadsheetId=spreadsheet_id,
                range=a1_range(tab),
                valueInputOption="USER_ENTERED",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(row) for row in rows]},
            ),
        )

    def update_values(self, spreadsheet_id: str, range_a1: str, rows: Sequence[Sequence[Any]]) -> None:
        self._execute(
            f"write {range_a1}",
            self._spreadsheets()
            .values()
            .update(
                spreadsheetId=spreadsheet_id,
                range=range_a1,
                valueInputOption="USER_ENTERED",
                body={"values": [list(row) for row in rows]},
            ),
        )


class MemorySheetsBackend(SheetsBackend):
    """In-process spreadsheet used for local development and tests.

    Cells are stored as strings, the way the Sheets API returns formatted
    values. Every call is recorded in ``calls`` as ``(operation, detail)``.
    """

    def __init__(self, spreadsheets: dict[str, dict[str, Rows]] | None = None) -> None:
        self._spreadsheets: dict[str, dict[str, Rows]] = {
            spreadsheet_id: {tab: _stringify(rows) for tab, rows in tabs.items()}
            for spreadsheet_id, tabs in (spreadsheets or {}).items()
        }
        self.calls: list[tuple[str, Any]] = []

    def _tabs(self, spreadsheet_id: str) -> dict[str, Rows]:
        return self._spreadsheets.setdefault(spreadsheet_id, {})

    def _tab(self, spreadsheet_id: str, title: str) -> Rows:
        tabs = self._tabs(spreadsheet_id)
        if title not in tabs:
            raise StoreError(f"Google Sheets API Error: Unable to parse range: {title}")
        return tabs[title]

    def rows(self, spreadsheet_id: str, tab: str) -> Rows:
        """Return a copy of a tab's rows (test helper)."""
        return [list(row) for row in self._tabs(spreadsheet_id).get(tab, [])]

    def tab_titles(self, spreadsheet_id: str) -> list[str]:
        self.calls.append(("tab_titles", spreadsheet_id))
        return list(self._tabs(spreadsheet_id).keys())

    def add_tabs(self, spreadsheet_id: str, titles: Sequence[str]) -> None:
        self.calls.append(("add_tabs", list(titles)))
        tabs = self._tabs(spreadsheet_id)
        for title in titles:
            if title in tabs:
                raise StoreError(f"Google Sheets API Error: A sheet with the name \"{title}\" already exists.")
            tabs[title] = []

    def get_values(self, spreadsheet_id: str, range_a1: str) -> Rows:
        self.calls.append(("get_values", range_a1))
        title, start, end = parse_a1_range(range_a1)
        values: Rows = []
        for row in self._tab(spreadsheet_id, title):
            cells = row[start:] if end is None else row[start : end + 1]
            while cells and cells[-1] == "":
                cells = cells[:-1]
            values.append(list(cells))
        while values and not values[-1]:
            values.pop()
        return values

    def append_values(self, spreadsheet_id: str, tab: str, rows: Sequence[Sequence[Any]]) -> None:
        self.calls.append(("append_values", (tab, len(rows))))
        self._tab(spreadsheet_id, tab).extend(_stringify(rows))

    def update_values(self, spreadsheet_id: str, range_a1: str, rows: Sequence[Sequence[Any]]) -> None:
        self.calls.append(("update_values", range_a1))
        title, start, _ = parse_a1_range(range_a1)
        target = self._tab(spreadsheet_id, title)
        for offset, row in enumerate(_stringify(rows)):
            while len(target) <= offset:
                target.append([])
            existing = target[offset]
            if len(existing) < start:
                existing.extend([""] * (start - len(existing)))
            existing[start : start + len(row)] = row


def backend_from_config(config: TrackerConfig) -> SheetsBackend:
    """Build the configured backend; Google credentials are resolved on first use."""
    if config.sheets_backend == SHEETS_BACKEND_MEMORY:
        logger.info("Using in-memory spreadsheet backend")
        return MemorySheetsBackend()
    return GoogleSheetsBackend(
        credentials_json=config.credentials_json,
        credentials_file=config.credentials_file,
    )
