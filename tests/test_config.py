"""Tests for environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

import tracker.env_utils as env_utils
from records.sheets import GoogleSheetsBackend, MemorySheetsBackend, backend_from_config
from tracker.config import DEFAULT_CORS_ORIGINS, TrackerConfig, load_config

ENV_NAMES = (
    "TRACKER_SPREADSHEET_ID",
    "SPREADSHEET_ID",
    "GOOGLE_CREDENTIALS",
    "GOOGLE_CREDENTIALS_FILE",
    "TRACKER_STATE_PATH",
    "TRACKER_SHEETS_BACKEND",
    "TRACKER_LOG_LEVEL",
    "TRACKER_CORS_ORIGINS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    monkeypatch.setattr(env_utils, "_DOTENV_LOADED", True)
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = load_config()

    assert config.spreadsheet_id is None
    assert config.credentials_file == Path("credentials.json")
    assert config.state_path == Path("server/data/tracker_state.json")
    assert config.sheets_backend == "google"
    assert config.log_level == "INFO"
    assert config.cors_origins == DEFAULT_CORS_ORIGINS


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("SPREADSHEET_ID", "legacy-id")
    monkeypatch.setenv("TRACKER_SHEETS_BACKEND", "Memory")
    monkeypatch.setenv("TRACKER_LOG_LEVEL", "debug")
    monkeypatch.setenv("TRACKER_CORS_ORIGINS", "https://a.example, ,https://b.example")

    config = load_config()

    assert config.spreadsheet_id == "legacy-id"
    assert config.sheets_backend == "memory"
    assert config.log_level == "DEBUG"
    assert config.cors_origins == ("https://a.example", "https://b.example")

    monkeypatch.setenv("TRACKER_SPREADSHEET_ID", "primary-id")
    assert load_config().spreadsheet_id == "primary-id"


def test_unknown_backend_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("TRACKER_SHEETS_BACKEND", "excel")

    with pytest.raises(ValueError):
        load_config()


def test_dotenv_does_not_override_existing_values(monkeypatch, tmp_path: Path) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text(
        "# local settings\n"
        "export TRACKER_SPREADSHEET_ID='from-file'\n"
        "TRACKER_LOG_LEVEL=warning\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("TRACKER_LOG_LEVEL", "ERROR")
    # Registers the variable with monkeypatch so the value loaded from the file is undone.
    monkeypatch.setenv("TRACKER_SPREADSHEET_ID", "unset")
    monkeypatch.delenv("TRACKER_SPREADSHEET_ID")
    monkeypatch.setattr(env_utils, "_DOTENV_LOADED", False)

    loaded = env_utils.load_dotenv(dotenv)
    config = load_config()

    assert config.spreadsheet_id == "from-file"
    assert config.log_level == "ERROR"
    assert loaded == ["TRACKER_SPREADSHEET_ID"]


def test_backend_from_config() -> None:
    assert isinstance(backend_from_config(TrackerConfig(sheets_backend="memory")), MemorySheetsBackend)
    assert isinstance(backend_from_config(TrackerConfig()), GoogleSheetsBackend)


def test_parse_dotenv_line_keeps_inline_json() -> None:
    assert env_utils.parse_dotenv_line("# comment") is None
    assert env_utils.parse_dotenv_line("NO_EQUALS") is None
    assert env_utils.parse_dotenv_line("KEY = 'quoted value'") == ("KEY", "quoted value")
    assert env_utils.parse_dotenv_line('GOOGLE_CREDENTIALS={"type": "service_account"}') == (
        "GOOGLE_CREDENTIALS",
        '{"type": "service_account"}',
    )
