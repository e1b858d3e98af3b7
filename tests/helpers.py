from durak.cards import parse_card
from durak.deck import build_deck


def cards(*labels):
    return [parse_card(label) for label in labels]


def stacked_deck(hands, trump):
    """Return a deck that deals ``hands`` round-robin and then reveals ``trump``."""
    dealt = []
    for index in range(len(hands[0])):
        for hand in hands:
            dealt.append(parse_card(hand[index]))
    trump_card = parse_card(trump)
    used = set(dealt) | {trump_card}
    rest = [card for card in build_deck() if card not in used]
    return dealt + [trump_card] + rest


def remaining_labels(*used_groups):
    used = {label for group in used_groups for label in group}
    return [card.label for card in build_deck() if card.label not in used]


def make_snapshot(players, *, table=None, deck=None, discard=(), trump="2S", victory=False):
    """Build a raw snapshot; ``players`` is a list of (name, hand, flags) in seat order."""
    table = dict(table or {})
    if deck is None:
        used = [label for _, hand, _ in players for label in hand]
        used += [label for pair in table.items() for label in pair if label is not None]
        used += list(discard)
        deck = remaining_labels(used)
    trump_card = parse_card(trump)
    return {
        "players": {
            name: {
                "seat": seat,
                "hand": list(hand),
                "is_defending": flags.get("is_defending", False),
                "can_attack": flags.get("can_attack", False),
                "began_round": flags.get("began_round", False),
                "turned": flags.get("turned", False),
                "eliminated_at": flags.get("eliminated_at"),
            }
            for seat, (name, hand, flags) in enumerate(players)
        },
        "table_top": table,
        "deck": list(deck),
        "discard": list(discard),
        "trump_card": {"rank": trump_card.rank, "suit": trump_card.suit.value, "label": trump},
        "victory": victory,
        "history": None,
    }


ATTACKER = {"can_attack": True, "began_round": True}
DEFENDER = {"is_defending": True}
