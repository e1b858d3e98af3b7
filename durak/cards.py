"""Card-related data structures and helpers for Durak."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from .errors import InvalidCard


class Suit(Enum):
    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"
    SPADES = "S"

    def __str__(self) -> str:
        return self.value


# Rank labels from lowest to highest; index + 2 gives the rank strength.
RANK_LABELS: list[str] = ["2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A"]

LOWEST_RANK = 2
HIGHEST_RANK = 14

RANK_BY_LABEL: dict[str, int] = {label: index + LOWEST_RANK for index, label in enumerate(RANK_LABELS)}
LABEL_BY_RANK: dict[int, str] = {rank: label for label, rank in RANK_BY_LABEL.items()}


@dataclass(frozen=True)
class Card:
    """Immutable representation of a playing card."""

    rank: int
    suit: Suit

    def __post_init__(self) -> None:
        if self.rank not in LABEL_BY_RANK:
            raise InvalidCard(f"Rank {self.rank!r} is outside {LOWEST_RANK}..{HIGHEST_RANK}.")
        if not isinstance(self.suit, Suit):
            raise InvalidCard(f"Suit {self.suit!r} is not a Suit.")

    @property
    def label(self) -> str:
        return format_card(self)

    def __str__(self) -> str:
        return self.label


def parse_card(label: str) -> Card:
    """Parse a canonical label such as ``"10H"`` or ``"QS"``."""
    if not isinstance(label, str) or len(label) < 2:
        raise InvalidCard(f"Malformed card label: {label!r}")
    rank_part, suit_part = label[:-1], label[-1]
    try:
        suit = Suit(suit_part)
    except ValueError as exc:
        raise InvalidCard(f"Invalid card suit in {label!r}.") from exc
    rank = RANK_BY_LABEL.get(rank_part)
    if rank is None:
        raise InvalidCard(f"Invalid card rank in {label!r}.")
    return Card(rank, suit)


def format_card(card: Card) -> str:
    return f"{LABEL_BY_RANK[card.rank]}{card.suit.value}"


def beats(cover: Card, attack: Card, trump: Optional[Suit]) -> bool:
    """Return True if ``cover`` legally covers ``attack``."""
    if cover.suit is attack.suit:
        return cover.rank > attack.rank
    return trump is not None and cover.suit is trump


def serialize_card(card: Card) -> dict[str, object]:
    return {"rank": card.rank, "suit": card.suit.value, "label": card.label}


def deserialize_card(payload: Mapping[str, object]) -> Card:
    card = parse_card(str(payload["label"]))
    if payload.get("rank") not in (None, card.rank) or payload.get("suit") not in (None, card.suit.value):
        raise InvalidCard(f"Card payload {dict(payload)!r} is inconsistent with its label.")
    return card
