"""Validation schema for Durak rules configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .cards import HIGHEST_RANK, LOWEST_RANK, Suit


class RuleSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    hand_size: int = Field(6, ge=1, description="Cards dealt to and refilled for every player.")
    table_limit: int = Field(6, ge=1, description="Maximum number of attacking cards on the table.")
    max_players: int = Field(8, ge=1, description="Largest roster accepted at construction.")
    lowest_rank: int = Field(
        LOWEST_RANK,
        ge=LOWEST_RANK,
        le=HIGHEST_RANK,
        description="Lowest rank in the deck; 6 gives the classic 36-card deck.",
    )

    @property
    def deck_size(self) -> int:
        return (HIGHEST_RANK - self.lowest_rank + 1) * len(Suit)

    @model_validator(mode="after")
    def ensure_trump_remains(self) -> "RuleSet":
        if self.max_players * self.hand_size >= self.deck_size:
            raise ValueError(
                f"A deck of {self.deck_size} cards cannot deal {self.hand_size} cards to "
                f"{self.max_players} players and still reveal a trump card."
            )
        return self


DEFAULT_RULES = RuleSet()
