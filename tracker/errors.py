"""Structured exceptions used across the tracker."""

from __future__ import annotations

from typing import Any


class TrackerError(Exception):
    """Base class for tracker-level exceptions."""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {"type": self.__class__.__name__, "message": str(self)}


class IllegalActionError(TrackerError):
    """Raised when a player attempts an action their state does not allow."""

    def __init__(self, player: str, action: str, reason: str | None = None):
        self.player = player
        self.action = action
        self.reason = reason
        message = f"Illegal action {action!r} by {player}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"player": self.player, "action": self.action})
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload


class SetupError(TrackerError):
    """Raised when a lineup cannot start a game."""


class SessionModeError(TrackerError):
    """Raised when an operation is not available in the current session mode."""

    def __init__(self, operation: str, mode: str):
        self.operation = operation
        self.mode = mode
        super().__init__(f"Cannot {operation} while session is in '{mode}' mode.")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload.update({"operation": self.operation, "mode": self.mode})
        return payload


class ConfigurationError(TrackerError):
    """Raised when required configuration is missing or invalid."""


class RecordStoreError(TrackerError):
    """Base class for failures talking to the external record store."""


class MissingCredentialsError(RecordStoreError):
    """Raised when no usable store credentials are configured."""


class StoreError(RecordStoreError):
    """Raised when the store API call itself fails; usually transient."""
