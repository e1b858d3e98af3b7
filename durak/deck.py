"""Deck creation utilities for Durak."""

from __future__ import annotations

from random import Random
from typing import List, MutableSequence, Optional, TypeVar

from .cards import HIGHEST_RANK, Card, Suit
from .rules_schema import DEFAULT_RULES, RuleSet

T = TypeVar("T")


def build_deck(rules: RuleSet = DEFAULT_RULES) -> List[Card]:
    """Return the ordered deck: ranks ascending, suits H, D, C, S within each rank."""
    return [Card(rank, suit) for rank in range(rules.lowest_rank, HIGHEST_RANK + 1) for suit in Suit]


def shuffle_deck(cards: MutableSequence[T], rng: Optional[Random] = None) -> MutableSequence[T]:
    """Uniformly permute ``cards`` in place and return it."""
    if rng is None:
        rng = Random()
    rng.shuffle(cards)
    return cards
