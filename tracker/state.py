"""Base type for immutable session states."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Self


@dataclass(frozen=True)
class State:
    """Frozen state value; subclasses define their own ``to_dict``/``from_dict`` wire shape."""

    def evolve(self, **changes: Any) -> Self:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
