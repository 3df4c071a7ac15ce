"""Process-wide logging configuration."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the server process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
