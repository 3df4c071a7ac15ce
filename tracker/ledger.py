"""Linear undo ledger holding full prior session values."""

from __future__ import annotations

from typing import Generic, TypeVar

StateT = TypeVar("StateT")


class UndoLedger(Generic[StateT]):
    """Snapshot stack for single-step reversal of session transitions.

    Entries are expected to be immutable values (frozen dataclasses), so the
    live session can keep evolving after a push without aliasing a snapshot.
    """

    def __init__(self) -> None:
        self._snapshots: list[StateT] = []

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def can_undo(self) -> bool:
        return bool(self._snapshots)

    def push(self, state: StateT) -> None:
        """Record the state as it was before a mutation."""
        self._snapshots.append(state)

    def pop(self) -> StateT | None:
        """Return the most recent snapshot, or None when there is nothing to undo."""
        if not self._snapshots:
            return None
        return self._snapshots.pop()

    def peek(self) -> StateT | None:
        return self._snapshots[-1] if self._snapshots else None

    def clear(self) -> None:
        self._snapshots.clear()
