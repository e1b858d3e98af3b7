"""The shared attack/defense matrix of a round."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from .cards import Card
from .errors import DuplicateKey, InvalidPosition, TableTopFull


class TableTop:
    """Insertion-ordered mapping of attacking card to covering card (or None)."""

    def __init__(self, limit: int = 6) -> None:
        self.limit = limit
        self._entries: Dict[Card, Optional[Card]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def size(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def is_full(self) -> bool:
        return len(self._entries) >= self.limit

    def place(self, card: Card) -> None:
        if self.is_full():
            raise TableTopFull(f"Table already holds {self.limit} attacking cards.")
        if card in self._entries:
            raise DuplicateKey(f"{card} is already on the table.")
        self._entries[card] = None

    def cover(self, card: Card, at_card: Card) -> None:
        if at_card not in self._entries:
            raise InvalidPosition(f"{at_card} is not on the table.")
        if self._entries[at_card] is not None:
            raise InvalidPosition(f"{at_card} is already covered.")
        self._entries[at_card] = card

    def key_at(self, position: int) -> Optional[Card]:
        if position < 0 or position >= len(self._entries):
            return None
        return list(self._entries)[position]

    def cover_of(self, card: Card) -> Optional[Card]:
        return self._entries.get(card)

    def keys(self) -> List[Card]:
        return list(self._entries)

    def entries(self) -> List[Tuple[Card, Optional[Card]]]:
        return list(self._entries.items())

    def ranks(self) -> set[int]:
        return {card.rank for card in self.flat_cards()}

    def covered_count(self) -> int:
        return sum(1 for value in self._entries.values() if value is not None)

    def uncovered_count(self) -> int:
        return len(self._entries) - self.covered_count()

    def flat_cards(self) -> Iterator[Card]:
        """Yield every card on the table; each call starts a fresh pass."""
        for attack, cover in self._entries.items():
            yield attack
            if cover is not None:
                yield cover

    def clear(self) -> None:
        self._entries.clear()
