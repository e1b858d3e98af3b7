import pytest

from durak.cards import parse_card
from durak.errors import GameAlreadyWon
from durak.game import DurakGame

from helpers import ATTACKER, DEFENDER, make_snapshot, remaining_labels


def ticking_clock():
    ticks = iter(range(1000, 2000))
    return lambda: float(next(ticks))


def test_last_attacker_emptying_hand_wins_the_game():
    rest = remaining_labels(["6H"])
    snapshot = make_snapshot([("A", ["6H"], ATTACKER), ("B", rest, DEFENDER)], deck=[])
    game = DurakGame.reconstruct(snapshot, clock=ticking_clock())

    game.attack("A", parse_card("6H"))

    assert game.victory
    assert game.active_players() == ["B"]
    assert game.projection_for("A").out
    assert game.serialize()["players"]["A"]["eliminated_at"] == 1000.0
    assert game.total_cards() == 52
    with pytest.raises(GameAlreadyWon):
        game.attack("B", parse_card("7H"))
    with pytest.raises(GameAlreadyWon):
        game.cover(parse_card("7H"), 0)
    with pytest.raises(GameAlreadyWon):
        game.declare_turn_done("B")
    with pytest.raises(GameAlreadyWon):
        game.finalise_round()
    assert game.legal_moves("B") == []
    assert game.victory


def test_defender_covering_last_card_leaves_attacker_as_durak():
    rest = remaining_labels(["6H", "7H"])
    snapshot = make_snapshot([("A", ["6H"] + rest, ATTACKER), ("B", ["7H"], DEFENDER)], deck=[])
    game = DurakGame.reconstruct(snapshot)

    game.attack("A", parse_card("6H"))
    game.cover(parse_card("7H"), 0)

    assert game.victory
    assert game.active_players() == ["A"]
    assert game.projection_for("B").out


def test_attacker_leaving_mid_round_lets_others_attack():
    snapshot = make_snapshot(
        [
            ("A", ["6H"], ATTACKER),
            ("B", ["7H", "8H"], DEFENDER),
            ("C", remaining_labels(["6H", "7H", "8H"]), {}),
        ],
        deck=[],
    )
    game = DurakGame.reconstruct(snapshot)

    game.attack("A", parse_card("6H"))

    assert not game.victory
    assert game.active_players() == ["B", "C"]
    assert game.projection_for("C").can_attack
    assert game.defender_name() == "B"

    game.cover(parse_card("7H"), 0)
    assert game.table_top() == []
    assert game.defender_name() == "C"
    assert game.attacker_name() == "B"
    assert not game.victory


def test_eliminated_defender_hands_role_to_next_active_seat():
    snapshot = make_snapshot(
        [
            ("A", ["6H", "9C"], ATTACKER),
            ("B", ["7H"], DEFENDER),
            ("C", remaining_labels(["6H", "9C", "7H"]), {}),
        ],
        deck=[],
    )
    game = DurakGame.reconstruct(snapshot)

    game.attack("A", parse_card("6H"))
    game.cover(parse_card("7H"), 0)

    assert not game.victory
    assert game.projection_for("B").out
    assert game.active_players() == ["A", "C"]
    assert game.defender_name() == "C"
    assert game.attacker_name() == "A"
    assert game.round_starter() == "A"


def test_victory_flag_survives_round_trip():
    rest = remaining_labels(["6H"])
    snapshot = make_snapshot([("A", ["6H"], ATTACKER), ("B", rest, DEFENDER)], deck=[])
    game = DurakGame.reconstruct(snapshot)
    game.attack("A", parse_card("6H"))

    restored = DurakGame.reconstruct(game.serialize())
    assert restored.victory
    with pytest.raises(GameAlreadyWon):
        restored.attack("B", parse_card("7H"))
