"""Runtime configuration for the tracker service."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env_utils import getenv_any, getenv_list

SHEETS_BACKEND_GOOGLE = "google"
SHEETS_BACKEND_MEMORY = "memory"
SUPPORTED_SHEETS_BACKENDS = {SHEETS_BACKEND_GOOGLE, SHEETS_BACKEND_MEMORY}

DEFAULT_CREDENTIALS_FILE = "credentials.json"
DEFAULT_STATE_PATH = "server/data/tracker_state.json"
DEFAULT_CORS_ORIGINS: tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")


@dataclass(frozen=True)
class TrackerConfig:
    """Resolved settings. Store-touching values are validated lazily, per request."""

    spreadsheet_id: str | None = None
    credentials_json: str | None = None
    credentials_file: Path = Path(DEFAULT_CREDENTIALS_FILE)
    state_path: Path = Path(DEFAULT_STATE_PATH)
    sheets_backend: str = SHEETS_BACKEND_GOOGLE
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS


def load_config() -> TrackerConfig:
    """Build configuration from the environment (and ``.env`` when present)."""
    backend = (getenv_any("TRACKER_SHEETS_BACKEND", default=SHEETS_BACKEND_GOOGLE) or SHEETS_BACKEND_GOOGLE).strip().lower()
    if backend not in SUPPORTED_SHEETS_BACKENDS:
        raise ValueError(
            f"TRACKER_SHEETS_BACKEND must be one of {sorted(SUPPORTED_SHEETS_BACKENDS)}; received {backend!r}."
        )

    return TrackerConfig(
        spreadsheet_id=getenv_any("TRACKER_SPREADSHEET_ID", "SPREADSHEET_ID"),
        credentials_json=getenv_any("GOOGLE_CREDENTIALS"),
        credentials_file=Path(getenv_any("GOOGLE_CREDENTIALS_FILE", default=DEFAULT_CREDENTIALS_FILE) or DEFAULT_CREDENTIALS_FILE),
        state_path=Path(getenv_any("TRACKER_STATE_PATH", default=DEFAULT_STATE_PATH) or DEFAULT_STATE_PATH),
        sheets_backend=backend,
        log_level=(getenv_any("TRACKER_LOG_LEVEL", default="INFO") or "INFO").upper(),
        cors_origins=getenv_list("TRACKER_CORS_ORIGINS", default=DEFAULT_CORS_ORIGINS),
    )
