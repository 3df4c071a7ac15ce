"""Player and leader reference directories backed by spreadsheet tabs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from .seeds import LEADER_SEED, PLAYER_SEED, SeedTable
from .store import RecordStore

PLAYERS_TAB = "Player Names"
LEADERS_TAB = "Leader Names"

RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class PlayerProfile:
    """A regular player: stable id and display name."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class LeaderProfile:
    """A leader card and its display metadata."""

    id: str
    name: str
    house: str = ""
    game: str = ""
    passive: str = ""
    signet: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "house": self.house,
            "game": self.game,
            "passive": self.passive,
            "signet": self.signet,
        }


class ReferenceDirectory(ABC, Generic[RecordT]):
    """Slowly-changing lookup table stored in its own tab.

    ``seed_defaults_if_empty`` creates and seeds the tab on first use;
    ``get`` returns the loaded records, loading them once per instance.
    """

    tab: str = ""
    columns: str = "A:B"

    def __init__(self, store: RecordStore, seed: SeedTable) -> None:
        self.store = store
        self.seed = seed
        self._records: list[RecordT] | None = None

    @abstractmethod
    def parse_row(self, row: Sequence[str]) -> RecordT | None:
        """Build a record from one data row, or None to skip it."""

    @abstractmethod
    def record_id(self, record: RecordT) -> str:
        """Return the stable id of a record."""

    @abstractmethod
    def record_name(self, record: RecordT) -> str:
        """Return the display name of a record."""

    def seed_defaults_if_empty(self) -> list[RecordT]:
        self.store.ensure_tabs([self.tab])
        rows = self.store.seed_if_empty(self.tab, self.seed.header, self.seed.rows, columns=self.columns)
        records = [record for record in (self.parse_row(row) for row in rows) if record is not None]
        self._records = records
        return list(records)

    def get(self) -> list[RecordT]:
        if self._records is None:
            return self.seed_defaults_if_empty()
        return list(self._records)

    def find_by_name(self, name: str) -> RecordT | None:
        for record in self.get():
            if self.record_name(record) == name:
                return record
        return None

    def resolve_id(self, name: str) -> str:
        """Return the stable id for a display name, or the name itself when unknown."""
        record = self.find_by_name(name)
        return self.record_id(record) if record is not None else name


class PlayerDirectory(ReferenceDirectory[PlayerProfile]):
    tab = PLAYERS_TAB
    columns = "A:B"

    def __init__(self, store: RecordStore, seed: SeedTable = PLAYER_SEED) -> None:
        super().__init__(store, seed)

    def parse_row(self, row: Sequence[str]) -> PlayerProfile | None:
        if len(row) < 2:
            return None
        return PlayerProfile(id=str(row[0]), name=str(row[1]))

    def record_id(self, record: PlayerProfile) -> str:
        return record.id

    def record_name(self, record: PlayerProfile) -> str:
        return record.name


class LeaderDirectory(ReferenceDirectory[LeaderProfile]):
    tab = LEADERS_TAB
    columns = "A:F"

    def __init__(self, store: RecordStore, seed: SeedTable = LEADER_SEED) -> None:
        super().__init__(store, seed)

    def parse_row(self, row: Sequence[str]) -> LeaderProfile | None:
        if len(row) < 2:
            return None
        padded = [str(cell) for cell in row] + [""] * (6 - len(row))
        return LeaderProfile(
            id=padded[0],
            name=padded[1],
            house=padded[2],
            game=padded[3],
            passive=padded[4],
            signet=padded[5],
        )

    def record_id(self, record: LeaderProfile) -> str:
        return record.id

    def record_name(self, record: LeaderProfile) -> str:
        return record.name
