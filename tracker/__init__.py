"""Tracker framework exports: state, actions, ledger, errors, and configuration."""

from .action import Action
from .config import TrackerConfig, load_config
from .errors import (
    ConfigurationError,
    IllegalActionError,
    MissingCredentialsError,
    RecordStoreError,
    SessionModeError,
    SetupError,
    StoreError,
    TrackerError,
)
from .ledger import UndoLedger
from .state import State

__all__ = [
    "Action",
    "ConfigurationError",
    "IllegalActionError",
    "MissingCredentialsError",
    "RecordStoreError",
    "SessionModeError",
    "SetupError",
    "State",
    "StoreError",
    "TrackerConfig",
    "TrackerError",
    "UndoLedger",
    "load_config",
]
