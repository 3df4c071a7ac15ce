"""Base action abstraction for labelled player actions."""

from __future__ import annotations

from abc import ABC
from typing import Any, ClassVar


class Action(ABC):
    """A labelled command a player takes on their turn.

    Subclasses set ``kind`` to a stable discriminator and expose the label
    written to the action log.
    """

    kind: ClassVar[str] = "Action"

    @property
    def label(self) -> str:
        raise NotImplementedError(f"{self.__class__.__name__} does not define a label.")

    @property
    def consumes_agent(self) -> bool:
        """Whether the action requires (and spends) an available agent."""
        return True

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of the action."""
        return {"type": self.kind, "action": self.label}

    def __str__(self) -> str:
        return self.label
