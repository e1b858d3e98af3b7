from dataclasses import fields
from random import Random

from durak.cards import parse_card
from durak.game import DurakGame
from durak.views import OpponentView

from helpers import stacked_deck

HAND_A = ["6H", "7H", "8D", "9C", "QH", "KD"]
HAND_B = ["10H", "2C", "3C", "4D", "5S", "AS"]
HAND_C = ["JH", "2D", "3D", "4C", "5C", "6C"]


def test_projection_never_reveals_opponent_cards():
    game = DurakGame(["A", "B", "C"], rng=Random(9))
    hidden = set(game.projection_for("B").hand) | set(game.projection_for("C").hand)
    view = game.projection_for("A")

    assert len(view.hand) == 6
    assert not hidden & set(view.hand)
    assert "hand" not in {field.name for field in fields(OpponentView)}
    assert all(opponent.hand_size == 6 for opponent in view.opponents)
    assert view.deck_size == game.deck_size
    assert not hasattr(view, "deck")


def test_projection_lists_opponents_from_the_left():
    game = DurakGame(["A", "B", "C", "D"], rng=Random(9))
    assert [opponent.name for opponent in game.projection_for("C").opponents] == ["D", "A", "B"]
    assert [opponent.name for opponent in game.projection_for("A").opponents] == ["B", "C", "D"]


def test_projection_reflects_table_and_roles():
    deck = stacked_deck([HAND_A, HAND_B, HAND_C], "2S")
    game = DurakGame(["A", "B", "C"], deck=deck, first_defender="B")
    game.attack("A", parse_card("6H"))

    view = game.projection_for("C")
    assert view.trump_card.label == "2S"
    assert view.trump_card.suit == "S"
    assert [(entry.attack, entry.cover) for entry in view.table_top] == [("6H", None)]
    assert not view.is_defending
    by_name = {opponent.name: opponent for opponent in view.opponents}
    assert by_name["B"].is_defending
    assert by_name["A"].began_round
    assert by_name["A"].hand_size == 5
    assert not by_name["A"].out
    assert view.discard_size == 0


def test_projection_is_a_detached_copy():
    game = DurakGame(["A", "B"], rng=Random(9))
    view = game.projection_for("A")
    attacker = game.attacker_name()
    game.attack(attacker, parse_card(game.projection_for(attacker).hand[0]))

    assert view.table_top == ()
    assert game.projection_for("A").table_top != ()
