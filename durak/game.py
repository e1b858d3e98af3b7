"""High-level game orchestration for Durak."""

from __future__ import annotations

import time
from dataclasses import dataclass
from random import Random
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .cards import Card, Suit, beats, parse_card, serialize_card
from .deck import build_deck, shuffle_deck
from .errors import (
    CardNotInHand,
    CardRankMismatch,
    CoverTooLow,
    CoverWrongSuit,
    DuplicatePlayerNames,
    GameAlreadyWon,
    InsufficientCoverCards,
    InvalidDefenseTransfer,
    InvalidGameState,
    InvalidPlayerCount,
    InvalidPosition,
    MoveError,
    NothingPlaced,
    PlayerEliminated,
    PlayerNotFound,
    TableTopFull,
)
from .history import TABLE_TOP_ACTOR, Action, ActionType, History
from .player import PlayerRecord
from .ring import TurnRing
from .rules_schema import DEFAULT_RULES, RuleSet
from .snapshot import load_snapshot
from .table import TableTop
from .views import OpponentView, PlayerView, TableEntryView, TrumpView


@dataclass(frozen=True)
class Attack:
    card: Card


@dataclass(frozen=True)
class Cover:
    card: Card
    position: int


@dataclass(frozen=True)
class TurnDone:
    pass


Move = Union[Attack, Cover, TurnDone]


class DurakGame:
    """Rules engine for a single game of Durak.

    All operations are synchronous. Each mutator either commits fully or
    raises a ``DurakError`` without touching any state; callers must not run
    two mutators on the same game concurrently.
    """

    def __init__(
        self,
        player_names: Sequence[str],
        *,
        rng: Optional[Random] = None,
        deck: Optional[Sequence[Card]] = None,
        first_defender: Optional[str] = None,
        rules: Optional[RuleSet] = None,
        record_history: bool = True,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        rules = rules or DEFAULT_RULES
        names = list(player_names)
        if not 1 <= len(names) <= rules.max_players:
            raise InvalidPlayerCount(f"Expected 1..{rules.max_players} players, got {len(names)}.")
        if len(set(names)) != len(names):
            raise DuplicatePlayerNames("Player names must be unique.")
        if first_defender is not None and first_defender not in names:
            raise PlayerNotFound(f"Unknown first defender {first_defender!r}.")

        rng = rng or Random()
        if deck is not None:
            cards = list(deck)
            if len(set(cards)) != len(cards) or set(cards) != set(build_deck(rules)):
                raise ValueError(f"Deck must contain each of the {rules.deck_size} cards exactly once.")
        else:
            cards = list(shuffle_deck(build_deck(rules), rng))

        records = [PlayerRecord(name=name, seat=seat) for seat, name in enumerate(names)]
        self._setup(records, cards, rules=rules, rng=rng, clock=clock)

        for _ in range(rules.hand_size):
            for record in self._seats:
                record.add_cards([self._deck.pop(0)])

        self.assign_defender(first_defender if first_defender is not None else rng.choice(names))

        # The revealed card fixes the trump suit and goes to the bottom of the deck.
        self._trump_card = self._deck[0]
        self._deck.append(self._deck.pop(0))

        if record_history:
            self._history = History(self.serialize(include_history=False))

    def _setup(
        self,
        records: List[PlayerRecord],
        deck: List[Card],
        *,
        rules: RuleSet,
        rng: Optional[Random],
        clock: Optional[Callable[[], float]],
        table_entries: Iterable[tuple[Card, Optional[Card]]] = (),
        discard: Iterable[Card] = (),
        trump_card: Optional[Card] = None,
        victory: bool = False,
        history: Optional[History] = None,
    ) -> None:
        self.rules = rules
        self._rng = rng or Random()
        self._clock = clock or time.time
        self._seats = sorted(records, key=lambda record: record.seat)
        self._by_name: Dict[str, int] = {record.name: index for index, record in enumerate(self._seats)}
        self._ring = TurnRing(self._seats)
        self._deck = list(deck)
        self._table = TableTop(limit=rules.table_limit)
        for attack, cover in table_entries:
            self._table.place(attack)
            if cover is not None:
                self._table.cover(cover, attack)
        self._discard: List[Card] = list(discard)
        self._trump_card = trump_card
        self._victory = victory
        self._history = history

    # Queries -----------------------------------------------------------

    @property
    def victory(self) -> bool:
        return self._victory

    @property
    def trump_card(self) -> Card:
        assert self._trump_card is not None
        return self._trump_card

    @property
    def trump_suit(self) -> Suit:
        return self.trump_card.suit

    @property
    def deck_size(self) -> int:
        return len(self._deck)

    @property
    def history(self) -> Optional[History]:
        return self._history

    @property
    def player_names(self) -> List[str]:
        return [record.name for record in self._seats]

    def active_players(self) -> List[str]:
        return self._ring.active_names()

    def hand_size(self, name: str) -> int:
        return len(self._player(name).hand)

    def table_top(self) -> List[tuple[Card, Optional[Card]]]:
        return self._table.entries()

    def table_cards(self) -> List[Card]:
        return list(self._table.flat_cards())

    def discard_pile(self) -> List[Card]:
        return list(self._discard)

    def covered_count(self) -> int:
        return self._table.covered_count()

    def total_cards(self) -> int:
        in_hands = sum(len(record.hand) for record in self._seats)
        return len(self._deck) + in_hands + len(self.table_cards()) + len(self._discard)

    def defender_name(self) -> str:
        for record in self._ring.active():
            if record.is_defending:
                return record.name
        raise InvalidGameState("No active defender found.")

    def attacker_name(self) -> str:
        return self._ring.offset_from(self.defender_name(), -1).name

    def round_starter(self) -> str:
        for record in self._seats:
            if record.began_round:
                return record.name
        raise InvalidGameState("No round starter found.")

    # Role assignment ---------------------------------------------------

    def assign_defender(self, name: str) -> None:
        """Make ``name`` the defender and its right-hand neighbour the attacker."""
        self._ensure_not_won()
        defender = self._player(name)
        attacker = self._ring.offset_from(name, -1)

        for record in self._seats:
            record.reset_roles()
        defender.is_defending = True
        attacker.can_attack = True
        attacker.began_round = True

    # Moves -------------------------------------------------------------

    def attack(self, name: str, card: Card) -> None:
        transfer_to = self._check_attack(name, card)
        player = self._player(name)

        if transfer_to is not None:
            self.assign_defender(transfer_to)
            self._record(ActionType.TRANSFER, (card,), (name, transfer_to))

        player.remove_card(card)
        self._table.place(card)
        self._record(ActionType.PLACE, (card,), (name,))

        if not player.hand and not self._deck:
            self._eliminate(player)
            if not self._ring.active():
                self._declare_victory()
                return
            self._turn_done(name)
            if not self._victory and len(self._ring.active()) == 1:
                self._declare_victory()

    def cover(self, card: Card, position: int) -> None:
        placed = self._check_cover(card, position)
        defender = self._player(self.defender_name())

        self._table.cover(card, placed)
        defender.remove_card(card)
        self._record(ActionType.COVER, (card, placed), (defender.name,))

        if self._table.covered_count() == self._table.size or not defender.hand:
            self.finalise_round()
        else:
            # A changed table invalidates earlier "done" declarations.
            for record in self._ring.active():
                if record is not defender:
                    record.turned = False

    def declare_turn_done(self, name: str) -> None:
        self._check_turn_done(name)
        self._turn_done(name)

    def _turn_done(self, name: str) -> None:
        player = self._player(name)
        defender = self._player(self.defender_name())
        attacker_name = self._ring.offset_from(defender.name, -1).name

        player.turned = True
        forfeits = player is defender and self._table.uncovered_count() > 0
        self._record(ActionType.FORFEIT if forfeits else ActionType.TURN_DONE, (), (name,))

        if name in (attacker_name, defender.name) or player.began_round:
            for record in self._ring.active():
                if record is not defender:
                    record.can_attack = True

        active = self._ring.active()
        uncovered = self._table.uncovered_count()
        if all(record.turned for record in active):
            self.finalise_round()
        elif player is defender and (
            self._table.is_full()
            or uncovered == len(defender.hand)
            or self._four_of_a_kind_uncovered()
        ):
            self.finalise_round()
        elif (
            all(record.turned for record in active if record is not defender)
            and self._table.covered_count() == self._table.size
        ):
            self.finalise_round()

    def finalise_round(self) -> None:
        """Close the current round: pick up or discard, rotate roles, refill, eliminate."""
        self._ensure_not_won()
        if self._table.is_empty():
            raise NothingPlaced("Cannot finalise a round before any card was placed.")

        round_starter = self.round_starter()
        defender = self._player(self.defender_name())
        forfeit = self._table.uncovered_count() > 0
        next_defender = self._ring.offset_from(defender.name, 2 if forfeit else 1)

        if forfeit:
            self.transfer_table_top(defender.name)
        else:
            voided = list(self._table.flat_cards())
            self._table.clear()
            self._discard.extend(voided)
            self._record(ActionType.VOID, tuple(voided), (TABLE_TOP_ACTOR,))
        self.assign_defender(next_defender.name)

        if self._deck:
            starter = round_starter if self._player(round_starter).is_active else next_defender.name
            for record in self._ring.walk_from(starter):
                missing = self.rules.hand_size - len(record.hand)
                if missing > 0:
                    drawn, self._deck = self._deck[:missing], self._deck[missing:]
                    record.add_cards(drawn)
                if not self._deck:
                    break

        for record in self._ring.active():
            if not record.hand:
                self._eliminate(record)
                record.turned = True

        active = self._ring.active()
        if len(active) <= 1 or all(record.is_defending for record in active):
            self._declare_victory()
            return

        self._repair_roles(next_defender)
        if self._history is not None:
            self._history.finalise_node()
            self._record(ActionType.NEW_ROUND, (), (self.defender_name(),))

    def transfer_table_top(self, name: str) -> List[Card]:
        """Move every card on the table into ``name``'s hand and clear the table."""
        self._ensure_not_won()
        player = self._player(name)
        cards = list(self._table.flat_cards())
        self._table.clear()
        player.add_cards(cards)
        self._record(ActionType.PICKUP, tuple(cards), (name,))
        return cards

    # Legal moves -------------------------------------------------------

    def legal_moves(self, name: str) -> List[Move]:
        """Return every move ``name`` could make right now without it being rejected."""
        player = self._player(name)
        if self._victory:
            return []

        moves: List[Move] = []
        for card in player.hand:
            if self._passes(self._check_attack, name, card):
                moves.append(Attack(card))
        if player.is_defending and player.is_active:
            for position in range(self._table.size):
                for card in player.hand:
                    if self._passes(self._check_cover, card, position):
                        moves.append(Cover(card, position))
        if self._passes(self._check_turn_done, name):
            moves.append(TurnDone())
        return moves

    def _passes(self, check: Callable[..., Any], *args: Any) -> bool:
        try:
            check(*args)
        except MoveError:
            return False
        return True

    def _check_attack(self, name: str, card: Card) -> Optional[str]:
        """Validate an attack; return the new defender's name for a defense transfer."""
        self._ensure_not_won()
        if self._table.is_full():
            raise TableTopFull(f"Table already holds {self._table.limit} attacking cards.")
        player = self._player(name)
        if not player.holds(card):
            raise CardNotInHand(f"{name} does not hold {card}.")
        if not self._table.is_empty() and card.rank not in self._table.ranks():
            raise CardRankMismatch(f"No card of rank {card.rank} is on the table.")

        if not player.is_defending:
            return None
        if self._table.covered_count() != 0:
            raise InvalidDefenseTransfer("Defense cannot be passed once a card was covered.")
        next_player = self._ring.offset_from(name, 1)
        if len(next_player.hand) < self._table.size + 1:
            raise InsufficientCoverCards(f"{next_player.name} cannot cover {self._table.size + 1} cards.")
        if any(key.rank != card.rank for key in self._table.keys()):
            raise InvalidDefenseTransfer("Every card on the table must share the passing card's rank.")
        return next_player.name

    def _check_cover(self, card: Card, position: int) -> Card:
        """Validate a cover; return the table card it would cover."""
        self._ensure_not_won()
        defender = self._player(self.defender_name())
        if not defender.holds(card):
            raise CardNotInHand(f"{defender.name} does not hold {card}.")
        if not isinstance(position, int) or not 0 <= position < self.rules.table_limit:
            raise InvalidPosition(f"Position {position!r} is outside the table.")
        placed = self._table.key_at(position)
        if placed is None:
            raise InvalidPosition(f"No card is placed at position {position}.")
        if self._table.cover_of(placed) is not None:
            raise InvalidPosition(f"The card at position {position} is already covered.")

        if not beats(card, placed, self.trump_suit):
            if card.suit is placed.suit:
                raise CoverTooLow(f"{card} does not beat {placed}.")
            raise CoverWrongSuit(f"{card} must follow {placed.suit} or be a trump.")
        return placed

    def _check_turn_done(self, name: str) -> None:
        self._ensure_not_won()
        if self._table.is_empty():
            raise NothingPlaced("Nothing has been placed on the table.")
        if not self._player(name).is_active:
            raise PlayerEliminated(f"{name} is already out of the game.")

    # Projection --------------------------------------------------------

    def projection_for(self, name: str) -> PlayerView:
        """Return what ``name`` is allowed to see of the game."""
        player = self._player(name)
        index = self._by_name[name]
        others = self._seats[index + 1 :] + self._seats[:index]
        trump = self.trump_card

        return PlayerView(
            name=player.name,
            hand=tuple(card.label for card in player.hand),
            is_defending=player.is_defending,
            can_attack=player.can_attack,
            began_round=player.began_round,
            turned=player.turned,
            out=not player.is_active,
            trump_card=TrumpView(rank=trump.rank, suit=trump.suit.value, label=trump.label),
            deck_size=len(self._deck),
            discard_size=len(self._discard),
            table_top=tuple(
                TableEntryView(attack=attack.label, cover=cover.label if cover else None)
                for attack, cover in self._table.entries()
            ),
            victory=self._victory,
            opponents=tuple(
                OpponentView(
                    name=record.name,
                    hand_size=len(record.hand),
                    is_defending=record.is_defending,
                    can_attack=record.can_attack,
                    began_round=record.began_round,
                    turned=record.turned,
                    out=not record.is_active,
                )
                for record in others
            ),
        )

    # Persistence -------------------------------------------------------

    def serialize(self, *, include_history: bool = True) -> Dict[str, Any]:
        history = self._history.serialize() if include_history and self._history is not None else None
        return {
            "players": {
                record.name: {
                    "seat": record.seat,
                    "hand": [card.label for card in record.hand],
                    "is_defending": record.is_defending,
                    "can_attack": record.can_attack,
                    "began_round": record.began_round,
                    "turned": record.turned,
                    "eliminated_at": record.eliminated_at,
                }
                for record in self._seats
            },
            "table_top": {
                attack.label: cover.label if cover else None for attack, cover in self._table.entries()
            },
            "deck": [card.label for card in self._deck],
            "discard": [card.label for card in self._discard],
            "trump_card": serialize_card(self.trump_card),
            "victory": self._victory,
            "history": history,
            "rules": self.rules.model_dump(),
        }

    @classmethod
    def reconstruct(
        cls,
        snapshot: Mapping[str, Any],
        *,
        rng: Optional[Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "DurakGame":
        """Rebuild a game from ``serialize()`` output without shuffling or dealing."""
        state = load_snapshot(snapshot)
        records = [
            PlayerRecord(
                name=name,
                seat=player.seat,
                hand=[parse_card(label) for label in player.hand],
                is_defending=player.is_defending,
                can_attack=player.can_attack,
                began_round=player.began_round,
                turned=player.turned,
                eliminated_at=player.eliminated_at,
            )
            for name, player in state.players.items()
        ]
        game = cls.__new__(cls)
        game._setup(
            records,
            [parse_card(label) for label in state.deck],
            rules=state.rules,
            rng=rng,
            clock=clock,
            table_entries=[
                (parse_card(attack), parse_card(cover) if cover is not None else None)
                for attack, cover in state.table_top.items()
            ],
            discard=[parse_card(label) for label in state.discard],
            trump_card=state.trump_card.card(),
            victory=state.victory,
            history=History.from_dict(state.history) if state.history is not None else None,
        )
        return game

    # Helpers -----------------------------------------------------------

    def _player(self, name: str) -> PlayerRecord:
        index = self._by_name.get(name)
        if index is None:
            raise PlayerNotFound(f"Unknown player {name!r}.")
        return self._seats[index]

    def _ensure_not_won(self) -> None:
        if self._victory:
            raise GameAlreadyWon("The game is already won; no further moves are allowed.")

    def _four_of_a_kind_uncovered(self) -> bool:
        keys = self._table.keys()
        return (
            len(keys) == 4
            and self._table.uncovered_count() == 4
            and len({card.rank for card in keys}) == 1
        )

    def _eliminate(self, record: PlayerRecord) -> None:
        record.eliminate(self._clock())
        self._record(ActionType.EXIT, (), (record.name,))

    def _declare_victory(self) -> None:
        self._victory = True
        self._record(ActionType.VICTORY, (), tuple(self._ring.active_names()))

    def _repair_roles(self, defender: PlayerRecord) -> None:
        """Re-seat the defender role if the end-of-round sweep eliminated a role holder."""
        attacker_out = any(record.began_round and not record.is_active for record in self._seats)
        if defender.is_active and not attacker_out:
            return
        if defender.is_active:
            self.assign_defender(defender.name)
        else:
            self.assign_defender(self._ring.next_active_after_seat(defender.seat).name)

    def _record(self, kind: ActionType, cards: Sequence[Card] = (), actors: Sequence[str] = ()) -> None:
        if self._history is not None:
            self._history.append(Action(kind, tuple(cards), tuple(actors)))


def reconstruct(snapshot: Mapping[str, Any], **kwargs: Any) -> DurakGame:
    return DurakGame.reconstruct(snapshot, **kwargs)
