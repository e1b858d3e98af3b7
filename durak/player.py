"""Per-seat player state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .cards import Card
from .errors import CardNotInHand, InvalidGameState


@dataclass
class PlayerRecord:
    """Mutable state of one seat, owned by the game that created it.

    Role flags are transient and only reset through ``reset_roles``; the
    elimination timestamp is set once and never cleared, so seat indices stay
    fixed for the lifetime of the game.
    """

    name: str
    seat: int
    hand: List[Card] = field(default_factory=list)
    is_defending: bool = False
    can_attack: bool = False
    began_round: bool = False
    turned: bool = False
    eliminated_at: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.eliminated_at is None

    def holds(self, card: Card) -> bool:
        return card in self.hand

    def add_cards(self, cards: Iterable[Card]) -> None:
        for card in cards:
            if card in self.hand:
                raise InvalidGameState(f"{self.name} already holds {card}.")
            self.hand.append(card)

    def remove_card(self, card: Card) -> None:
        try:
            self.hand.remove(card)
        except ValueError as exc:
            raise CardNotInHand(f"{self.name} does not hold {card}.") from exc

    def reset_roles(self) -> None:
        self.is_defending = False
        self.can_attack = False
        self.began_round = False
        self.turned = False

    def eliminate(self, timestamp: float) -> None:
        if self.eliminated_at is None:
            self.eliminated_at = timestamp
