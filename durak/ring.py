"""Wrap-around seat arithmetic over the players still in the game."""

from __future__ import annotations

from typing import Iterator, List, Sequence

from .errors import PlayerNotInRing
from .player import PlayerRecord


class TurnRing:
    """Ordered view over active seats.

    Seating order is fixed at construction; every offset is computed over the
    seats that are not eliminated at the time of the call.
    """

    def __init__(self, seats: Sequence[PlayerRecord]) -> None:
        self._seats = sorted(seats, key=lambda record: record.seat)

    def active(self) -> List[PlayerRecord]:
        return [record for record in self._seats if record.is_active]

    def active_names(self) -> List[str]:
        return [record.name for record in self.active()]

    def offset_from(self, anchor: str, k: int) -> PlayerRecord:
        active = self.active()
        names = [record.name for record in active]
        if anchor not in names:
            raise PlayerNotInRing(f"{anchor} is not an active player.")
        position = names.index(anchor)
        return active[(position + k) % len(active)]

    def walk_from(self, anchor: str) -> Iterator[PlayerRecord]:
        """Yield every active player once, starting at ``anchor``."""
        count = len(self.active())
        for offset in range(count):
            yield self.offset_from(anchor, offset)

    def next_active_after_seat(self, seat: int) -> PlayerRecord:
        """Return the first active player seated after ``seat`` (wrapping)."""
        active = self.active()
        if not active:
            raise PlayerNotInRing("No active players remain.")
        for record in active:
            if record.seat > seat:
                return record
        return active[0]
