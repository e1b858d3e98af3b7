"""Random self-play arena used to soak-test the engine's invariants."""

from __future__ import annotations

import argparse
from random import Random
from typing import Iterable, List, Optional, Sequence

from .errors import InvalidGameState
from .game import Attack, Cover, DurakGame, Move, TurnDone


def check_invariants(game: DurakGame) -> None:
    """Raise ``InvalidGameState`` if conservation or defender uniqueness is broken."""
    total = game.total_cards()
    if total != game.rules.deck_size:
        raise InvalidGameState(f"Card count drifted to {total}, expected {game.rules.deck_size}.")
    if not game.victory:
        defenders = [
            name for name in game.active_players() if game.projection_for(name).is_defending
        ]
        if len(defenders) != 1:
            raise InvalidGameState(f"Expected one defender, found {defenders}.")


def apply_move(game: DurakGame, player: str, move: Move) -> None:
    if isinstance(move, Attack):
        game.attack(player, move.card)
    elif isinstance(move, Cover):
        game.cover(move.card, move.position)
    elif isinstance(move, TurnDone):
        game.declare_turn_done(player)
    else:
        raise TypeError(f"Unknown move {move!r}")


def play_random_game(
    names: Sequence[str],
    *,
    seed: Optional[int] = None,
    max_moves: int = 5000,
    check: bool = True,
) -> dict:
    """Play uniformly random legal moves until victory or ``max_moves``."""
    rng = Random(seed)
    game = DurakGame(names, rng=rng)
    moves = 0
    while not game.victory and moves < max_moves:
        options = [(name, move) for name in game.player_names for move in game.legal_moves(name)]
        if not options:
            raise InvalidGameState("No player has a legal move.")
        player, move = rng.choice(options)
        apply_move(game, player, move)
        moves += 1
        if check:
            check_invariants(game)

    remaining: List[str] = game.active_players() if game.victory else []
    return {"victory": game.victory, "moves": moves, "durak": remaining, "game": game}


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play random Durak games and check invariants.")
    parser.add_argument("--players", type=int, default=3, help="Players per game.")
    parser.add_argument("--games", type=int, default=10, help="Number of games to play.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--max-moves", type=int, default=5000, help="Safety cap on moves per game.")
    args = parser.parse_args(argv)

    names = [f"player{idx + 1}" for idx in range(args.players)]
    finished = 0
    total_moves = 0
    for idx in range(args.games):
        result = play_random_game(names, seed=args.seed + idx, max_moves=args.max_moves)
        finished += int(result["victory"])
        total_moves += result["moves"]
        loser = ", ".join(result["durak"]) or "-"
        print(f"Game {idx + 1}: moves={result['moves']}, finished={result['victory']}, durak={loser}")

    print(f"Games finished: {finished}/{args.games}")
    print(f"Average moves per game: {total_moves / max(args.games, 1):.1f}")


if __name__ == "__main__":
    main()
