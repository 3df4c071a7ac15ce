"""Pydantic request schemas for the tracker API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Accept camelCase keys from the web client and snake_case from Python callers."""

    model_config = ConfigDict(populate_by_name=True)


class SaveToSheetRequest(CamelModel):
    """Raw batches for one finished game; every field is required."""

    spreadsheet_id: str | None = Field(default=None, alias="spreadsheetId")
    score_headers: list[Any] | None = Field(default=None, alias="scoreHeaders")
    score_rows: list[list[Any]] | None = Field(default=None, alias="scoreRows")
    log_headers: list[Any] | None = Field(default=None, alias="logHeaders")
    log_rows: list[list[Any]] | None = Field(default=None, alias="logRows")

    def missing_fields(self) -> list[str]:
        required = {
            "spreadsheetId": self.spreadsheet_id,
            "scoreHeaders": self.score_headers,
            "scoreRows": self.score_rows,
            "logHeaders": self.log_headers,
            "logRows": self.log_rows,
        }
        return [name for name, value in required.items() if value is None or value == ""]


class SeatRequest(CamelModel):
    id: int
    name: str = ""
    leader: str = ""
    is_first_player: bool = Field(default=False, alias="isFirstPlayer")


class StartGameRequest(CamelModel):
    """Seat selection from the setup wizard."""

    seats: list[SeatRequest]
    track_actions: bool = Field(default=True, alias="trackActions")


class ActionRequest(CamelModel):
    """One action by a player, referenced by seat id or name."""

    player: int | str
    action: str


class FinalizeRequest(CamelModel):
    """Victory points keyed by seat id; missing seats score zero."""

    scores: dict[str, str | int] = Field(default_factory=dict)
    spreadsheet_id: str | None = Field(default=None, alias="spreadsheetId")
