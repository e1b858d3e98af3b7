"""Exception hierarchy raised by the Durak engine.

Every mutating engine call validates before it mutates, so any of these
errors leaves the game exactly as it was before the call.
"""

from __future__ import annotations


class DurakError(RuntimeError):
    """Base class for every engine failure."""


class SetupError(DurakError):
    """Raised when a game cannot be constructed from the given roster."""


class InvalidPlayerCount(SetupError):
    pass


class DuplicatePlayerNames(SetupError):
    pass


class GameStateError(DurakError):
    """Raised when the game as a whole refuses the operation."""


class GameAlreadyWon(GameStateError):
    """Raised by any mutation attempted after victory."""


class InvalidGameState(GameStateError):
    """Raised when a role query finds no holder or a card would be duplicated; the game is corrupt."""


class InvalidSnapshot(GameStateError):
    """Raised when a serialized snapshot cannot be reconstructed."""


class PlayerNotInRing(GameStateError):
    """Raised when an offset is requested from a seat that is not active."""


class InvalidCard(DurakError, ValueError):
    """Raised when a card label or value cannot be parsed."""


class MoveError(DurakError):
    """Base class for rejected moves."""


class PlayerNotFound(MoveError):
    pass


class PlayerEliminated(MoveError):
    """Raised when a player who is already out of the game tries to act."""


class CardNotInHand(MoveError):
    pass


class TableTopFull(MoveError):
    pass


class DuplicateKey(MoveError):
    pass


class CardRankMismatch(MoveError):
    pass


class InvalidDefenseTransfer(MoveError):
    pass


class InsufficientCoverCards(MoveError):
    pass


class InvalidPosition(MoveError):
    pass


class CoverTooLow(MoveError):
    pass


class CoverWrongSuit(MoveError):
    pass


class NothingPlaced(MoveError):
    pass
