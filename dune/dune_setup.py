"""Lineup validation and leader draft pool for game setup."""

from __future__ import annotations

import random
from typing import Any, Mapping, Sequence, TypeVar

from tracker.errors import SetupError

from .dune_state import MAX_SEATS, MIN_ACTIVE_PLAYERS, PlayerState

DRAFT_POOL_SIZE = 7

LeaderT = TypeVar("LeaderT")


def draft_pool(
    leaders: Sequence[LeaderT],
    *,
    size: int = DRAFT_POOL_SIZE,
    rng: random.Random | None = None,
) -> list[LeaderT]:
    """Sample up to ``size`` distinct leaders to offer at setup."""
    if not leaders:
        raise SetupError("No leaders available to draft from.")
    chooser = rng or random.Random()
    return chooser.sample(list(leaders), k=min(size, len(leaders)))


def _seat_from_payload(raw: PlayerState | Mapping[str, Any]) -> PlayerState:
    if isinstance(raw, PlayerState):
        return raw
    return PlayerState.from_dict(raw)


def build_lineup(seats: Sequence[PlayerState | Mapping[str, Any]]) -> tuple[PlayerState, ...]:
    """Validate the seat selection and return the active players in seat order.

    A seat is active when its name is non-empty after trimming. Every active
    seat needs a leader, and exactly one active seat holds the first-player
    token.
    """
    parsed = [_seat_from_payload(seat) for seat in seats]
    if len(parsed) > MAX_SEATS:
        raise SetupError(f"At most {MAX_SEATS} seats are supported.")

    seat_ids = [seat.id for seat in parsed]
    if len(set(seat_ids)) != len(seat_ids):
        raise SetupError("Seat ids must be unique.")
    if any(seat_id < 1 or seat_id > MAX_SEATS for seat_id in seat_ids):
        raise SetupError(f"Seat ids must be between 1 and {MAX_SEATS}.")

    active = [seat.evolve(name=seat.name.strip(), leader=seat.leader.strip()) for seat in parsed if seat.is_active]
    if len(active) < MIN_ACTIVE_PLAYERS:
        raise SetupError("Need at least 2 players!")

    names = [seat.name for seat in active]
    if len(set(names)) != len(names):
        raise SetupError("Each player can only take one seat.")

    if any(not seat.leader for seat in active):
        raise SetupError("Every player needs a leader!")
    leaders = [seat.leader for seat in active]
    if len(set(leaders)) != len(leaders):
        raise SetupError("Each leader can only be chosen once.")

    first_players = [seat for seat in active if seat.is_first_player]
    if not first_players:
        raise SetupError("Please select a First Player!")
    if len(first_players) > 1:
        raise SetupError("Only one player can hold the First Player token.")

    return tuple(sorted(active, key=lambda seat: seat.id))
