from random import Random

import pytest

from durak.errors import DuplicatePlayerNames, InvalidPlayerCount, NothingPlaced, PlayerNotFound
from durak.game import DurakGame
from durak.rules_schema import RuleSet

from helpers import stacked_deck

HAND_A = ["6H", "7H", "8D", "9C", "QH", "KD"]
HAND_B = ["10H", "2C", "3C", "4D", "5S", "AS"]


def test_fresh_two_player_game():
    game = DurakGame(["A", "B"], rng=Random(3))

    assert game.deck_size == 40
    assert game.hand_size("A") == 6
    assert game.hand_size("B") == 6
    assert game.table_top() == []
    assert game.total_cards() == 52
    defending = [name for name in ("A", "B") if game.projection_for(name).is_defending]
    assert len(defending) == 1
    assert not game.victory


def test_trump_card_goes_to_the_bottom_of_the_deck():
    game = DurakGame(["A", "B"], deck=stacked_deck([HAND_A, HAND_B], "2S"), first_defender="B")

    assert game.trump_card.label == "2S"
    assert game.trump_suit.value == "S"
    snapshot = game.serialize()
    assert snapshot["deck"][-1] == "2S"
    assert snapshot["deck"][0] == "2H"
    assert snapshot["players"]["A"]["hand"] == HAND_A
    assert snapshot["players"]["B"]["hand"] == HAND_B


def test_initial_roles_follow_the_defender():
    game = DurakGame(["A", "B", "C"], rng=Random(1), first_defender="B")

    assert game.defender_name() == "B"
    assert game.attacker_name() == "A"
    assert game.round_starter() == "A"
    view = game.projection_for("A")
    assert view.can_attack and view.began_round
    assert not game.projection_for("C").can_attack


def test_single_player_game_is_allowed():
    game = DurakGame(["solo"], rng=Random(0))
    assert game.defender_name() == "solo"
    assert game.attacker_name() == "solo"
    assert game.deck_size == 46


def test_eight_players_fit_the_full_deck():
    names = [f"p{idx}" for idx in range(8)]
    game = DurakGame(names, rng=Random(0))
    assert game.deck_size == 4
    assert game.total_cards() == 52


@pytest.mark.parametrize("names", [[], [f"p{idx}" for idx in range(9)]])
def test_invalid_player_count(names):
    with pytest.raises(InvalidPlayerCount):
        DurakGame(names)


def test_duplicate_player_names():
    with pytest.raises(DuplicatePlayerNames):
        DurakGame(["A", "B", "A"])


def test_unknown_first_defender():
    with pytest.raises(PlayerNotFound):
        DurakGame(["A", "B"], first_defender="Z")


def test_preset_deck_must_be_complete():
    deck = stacked_deck([HAND_A, HAND_B], "2S")
    with pytest.raises(ValueError):
        DurakGame(["A", "B"], deck=deck[:-1])


def test_short_deck_rules():
    rules = RuleSet(lowest_rank=6, max_players=5)
    game = DurakGame(["A", "B"], rng=Random(4), rules=rules)
    assert game.deck_size == 24
    assert game.total_cards() == 36
    assert game.trump_card.rank >= 6


def test_finalise_on_empty_table_changes_nothing():
    game = DurakGame(["A", "B"], rng=Random(5))
    before = game.serialize()
    with pytest.raises(NothingPlaced):
        game.finalise_round()
    with pytest.raises(NothingPlaced):
        game.declare_turn_done("A")
    assert game.serialize() == before
