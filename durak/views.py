"""By-value projections handed out of the engine.

These never carry references into engine state, and never carry the cards of
anyone other than the player they were built for.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class TrumpView:
    rank: int
    suit: str
    label: str


@dataclass(frozen=True)
class TableEntryView:
    attack: str
    cover: Optional[str]


@dataclass(frozen=True)
class OpponentView:
    name: str
    hand_size: int
    is_defending: bool
    can_attack: bool
    began_round: bool
    turned: bool
    out: bool


@dataclass(frozen=True)
class PlayerView:
    name: str
    hand: Tuple[str, ...]
    is_defending: bool
    can_attack: bool
    began_round: bool
    turned: bool
    out: bool
    trump_card: TrumpView
    deck_size: int
    discard_size: int
    table_top: Tuple[TableEntryView, ...]
    victory: bool
    opponents: Tuple[OpponentView, ...]
