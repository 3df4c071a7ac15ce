"""Environment and ``.env`` helpers used to build tracker configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

_DOTENV_LOADED = False


def parse_dotenv_line(raw_line: str) -> tuple[str, str] | None:
    """Split one ``KEY=value`` line; comments, blanks, and malformed lines yield None.

    Only a matching pair of outer quotes is stripped, so inline JSON such as
    ``GOOGLE_CREDENTIALS={"type": "service_account"}`` survives intact.
    """
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export ") :].strip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        value = value[1:-1]
    return key, value


def load_dotenv(path: str | Path = ".env") -> list[str]:
    """Load a .env file once per process; existing variables always win.

    Returns the names that were newly set.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return []
    _DOTENV_LOADED = True

    dotenv_path = Path(path)
    if not dotenv_path.exists():
        return []

    loaded: list[str] = []
    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        parsed = parse_dotenv_line(raw_line)
        if parsed is None:
            continue
        key, value = parsed
        if key not in os.environ:
            os.environ[key] = value
            loaded.append(key)
    logger.debug("Loaded %s from %s", loaded, dotenv_path)
    return loaded


def getenv_any(*names: str, default: str | None = None) -> str | None:
    """Return the first non-empty variable among ``names``, in order."""
    load_dotenv()
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


def getenv_list(*names: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    """Return a comma-separated variable as trimmed, non-empty items."""
    raw = getenv_any(*names)
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())
