"""Convenience service layer for transports and UIs."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from random import Random
from typing import Any, Dict, Mapping, Optional, Sequence

from .cards import parse_card
from .errors import GameAlreadyWon, InvalidGameState, MoveError
from .game import DurakGame
from .views import PlayerView

logger = logging.getLogger(__name__)


class GameNotFound(KeyError):
    """Raised when a game id is not hosted by the service."""


class NotDefending(MoveError):
    """Raised when a player other than the defender tries to cover."""


@dataclass(frozen=True)
class MoveRejection:
    reason: str
    error: str


class GameService:
    """Facade that hosts games by id and speaks card labels.

    The service performs no locking: callers must serialize moves per game id.
    """

    def __init__(self) -> None:
        self.games: Dict[str, DurakGame] = {}

    # Game lifecycle ----------------------------------------------------

    def create_game(self, names: Sequence[str], *, seed: Optional[int] = None) -> str:
        game = DurakGame(names, rng=Random(seed))
        game_id = uuid.uuid4().hex
        self.games[game_id] = game
        logger.info("Created game %s for %d players", game_id, len(names))
        return game_id

    def import_game(self, snapshot: Mapping[str, Any]) -> str:
        game = DurakGame.reconstruct(snapshot)
        game_id = uuid.uuid4().hex
        self.games[game_id] = game
        logger.info("Imported game %s", game_id)
        return game_id

    def export_game(self, game_id: str) -> Dict[str, Any]:
        return self._require_game(game_id).serialize()

    def discard_game(self, game_id: str) -> None:
        self._require_game(game_id)
        del self.games[game_id]
        logger.info("Discarded game %s", game_id)

    # Actions -----------------------------------------------------------

    def attack(self, game_id: str, player: str, label: str) -> PlayerView:
        game = self._require_game(game_id)
        game.attack(player, parse_card(label))
        return game.projection_for(player)

    def cover(self, game_id: str, player: str, label: str, position: int) -> PlayerView:
        game = self._require_game(game_id)
        if not game.victory and game.defender_name() != player:
            raise NotDefending(f"{player} is not defending.")
        game.cover(parse_card(label), position)
        return game.projection_for(player)

    def declare_turn_done(self, game_id: str, player: str) -> PlayerView:
        game = self._require_game(game_id)
        game.declare_turn_done(player)
        return game.projection_for(player)

    def submit(self, game_id: str, player: str, payload: Mapping[str, Any]) -> PlayerView | MoveRejection:
        """Apply a move payload, turning rule violations into a rejection value."""
        move_type = payload.get("type")
        try:
            if move_type == "attack":
                return self.attack(game_id, player, payload["card"])
            if move_type == "cover":
                return self.cover(game_id, player, payload["card"], int(payload["position"]))
            if move_type == "done":
                return self.declare_turn_done(game_id, player)
            raise MoveError(f"Unknown move type {move_type!r}.")
        except InvalidGameState:
            logger.error("Game %s reached an invalid state; discarding it", game_id)
            self.games.pop(game_id, None)
            raise
        except (MoveError, GameAlreadyWon, ValueError) as exc:
            logger.warning("Rejected %s move from %s in game %s: %s", move_type, player, game_id, exc)
            return MoveRejection(reason=str(exc), error=type(exc).__name__)

    # Views -------------------------------------------------------------

    def view(self, game_id: str, player: str) -> PlayerView:
        return self._require_game(game_id).projection_for(player)

    def is_finished(self, game_id: str) -> bool:
        return self._require_game(game_id).victory

    # Helpers -----------------------------------------------------------

    def _require_game(self, game_id: str) -> DurakGame:
        game = self.games.get(game_id)
        if game is None:
            raise GameNotFound(game_id)
        return game
