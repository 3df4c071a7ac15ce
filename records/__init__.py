"""Spreadsheet-backed record store for finished games and reference tables."""

from .directory import LEADERS_TAB, PLAYERS_TAB, LeaderDirectory, LeaderProfile, PlayerDirectory, PlayerProfile
from .rows import GameRecord, RowShape, ScoreRow, group_games, recent, resolve_row, resolve_rows
from .seeds import LEADER_SEED, PLAYER_SEED, SeedTable
from .sheets import (
    GoogleSheetsBackend,
    MemorySheetsBackend,
    SheetsBackend,
    backend_from_config,
    load_service_account_credentials,
)
from .store import LOG_HEADER, LOGS_TAB, SCORE_HEADER, SCORES_TAB, RecordStore

__all__ = [
    "GameRecord",
    "GoogleSheetsBackend",
    "LEADERS_TAB",
    "LEADER_SEED",
    "LOGS_TAB",
    "LOG_HEADER",
    "LeaderDirectory",
    "LeaderProfile",
    "MemorySheetsBackend",
    "PLAYERS_TAB",
    "PLAYER_SEED",
    "PlayerDirectory",
    "PlayerProfile",
    "RecordStore",
    "RowShape",
    "SCORES_TAB",
    "SCORE_HEADER",
    "ScoreRow",
    "SeedTable",
    "SheetsBackend",
    "backend_from_config",
    "group_games",
    "load_service_account_credentials",
    "recent",
    "resolve_row",
    "resolve_rows",
]
