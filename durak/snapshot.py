"""Validation schema for persisted game snapshots."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .cards import Card, deserialize_card, parse_card
from .errors import InvalidSnapshot
from .rules_schema import RuleSet


def _validate_label(value: str) -> str:
    parse_card(value)
    return value


class PlayerSnapshot(BaseModel):
    seat: int = Field(..., ge=0)
    hand: List[str] = Field(default_factory=list)
    is_defending: bool = False
    can_attack: bool = False
    began_round: bool = False
    turned: bool = False
    eliminated_at: Optional[float] = None

    @field_validator("hand")
    @classmethod
    def validate_hand(cls, value: List[str]) -> List[str]:
        for label in value:
            _validate_label(label)
        if len(set(value)) != len(value):
            raise ValueError("Hand contains duplicate cards.")
        return value


class TrumpSnapshot(BaseModel):
    rank: int
    suit: str
    label: str

    @model_validator(mode="after")
    def ensure_consistent(self) -> "TrumpSnapshot":
        self.card()
        return self

    def card(self) -> Card:
        return deserialize_card(self.model_dump())


class GameSnapshot(BaseModel):
    players: Dict[str, PlayerSnapshot]
    table_top: Dict[str, Optional[str]] = Field(default_factory=dict)
    deck: List[str] = Field(default_factory=list)
    discard: List[str] = Field(default_factory=list)
    trump_card: TrumpSnapshot
    victory: bool = False
    history: Optional[Dict[str, Any]] = None
    rules: RuleSet = Field(default_factory=RuleSet)

    @field_validator("deck", "discard")
    @classmethod
    def validate_deck(cls, value: List[str]) -> List[str]:
        return [_validate_label(label) for label in value]

    @field_validator("table_top")
    @classmethod
    def validate_table_top(cls, value: Dict[str, Optional[str]]) -> Dict[str, Optional[str]]:
        for attack, cover in value.items():
            _validate_label(attack)
            if cover is not None:
                _validate_label(cover)
        return value

    @model_validator(mode="after")
    def ensure_consistent(self) -> "GameSnapshot":
        rules = self.rules
        if not 1 <= len(self.players) <= rules.max_players:
            raise ValueError(f"Snapshot holds {len(self.players)} players; expected 1..{rules.max_players}.")

        seats = sorted(player.seat for player in self.players.values())
        if seats != list(range(len(self.players))):
            raise ValueError("Player seats must be exactly 0..n-1.")

        if len(self.table_top) > rules.table_limit:
            raise ValueError(f"Table holds more than {rules.table_limit} attacking cards.")

        labels: List[str] = list(self.deck) + list(self.discard)
        for player in self.players.values():
            labels.extend(player.hand)
        for attack, cover in self.table_top.items():
            labels.append(attack)
            if cover is not None:
                labels.append(cover)
        if len(set(labels)) != len(labels):
            raise ValueError("A card appears more than once across deck, discard, hands and table.")
        if len(labels) != rules.deck_size:
            raise ValueError(f"Snapshot holds {len(labels)} cards; the deck has {rules.deck_size}.")
        if any(parse_card(label).rank < rules.lowest_rank for label in labels):
            raise ValueError("Snapshot holds cards below the configured lowest rank.")

        defenders = [
            name
            for name, player in self.players.items()
            if player.is_defending and player.eliminated_at is None
        ]
        if not self.victory and len(defenders) != 1:
            raise ValueError(f"Expected exactly one active defender, found {len(defenders)}.")
        return self


def load_snapshot(payload: Mapping[str, Any]) -> GameSnapshot:
    """Validate a raw snapshot mapping, raising ``InvalidSnapshot`` on failure."""
    if isinstance(payload, GameSnapshot):
        return payload
    try:
        return GameSnapshot.model_validate(payload)
    except ValidationError as exc:
        raise InvalidSnapshot(str(exc)) from exc
