"""Append-only action log recorded alongside a game.

The log is an audit derivative of the engine: it never feeds back into game
rules, and a game reconstructed without it plays identically.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .cards import Card, parse_card

TABLE_TOP_ACTOR = "table_top"


class ActionType(Enum):
    PLACE = "place"
    COVER = "cover"
    TRANSFER = "transfer"
    TURN_DONE = "turn_done"
    FORFEIT = "forfeit"
    PICKUP = "pickup"
    VOID = "void"
    EXIT = "exit"
    VICTORY = "victory"
    NEW_ROUND = "new_round"


@dataclass(frozen=True)
class Action:
    type: ActionType
    cards: Tuple[Card, ...] = ()
    actors: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "cards": [card.label for card in self.cards],
            "actors": list(self.actors),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Action":
        return cls(
            type=ActionType(payload["type"]),
            cards=tuple(parse_card(label) for label in payload.get("cards", [])),
            actors=tuple(payload.get("actors", [])),
        )


@dataclass
class HistoryNode:
    actions: List[Action] = field(default_factory=list)

    def add_action(self, action: Action) -> None:
        self.actions.append(action)

    def serialize(self) -> List[Dict[str, Any]]:
        return [action.to_dict() for action in self.actions]


class History:
    """Ordered list of nodes, one per round, on top of an initial snapshot."""

    def __init__(self, initial_state: Mapping[str, Any], nodes: Optional[Sequence[HistoryNode]] = None) -> None:
        self.initial_state = copy.deepcopy(dict(initial_state))
        self.nodes: List[HistoryNode] = list(nodes) if nodes else [HistoryNode()]

    def append(self, action: Action) -> None:
        self.nodes[-1].add_action(action)

    def finalise_node(self) -> HistoryNode:
        """Close the current node and open a new one; return the closed node."""
        closed = self.nodes[-1]
        self.nodes.append(HistoryNode())
        return closed

    def last_node(self) -> Optional[HistoryNode]:
        if not self.nodes:
            return None
        return self.nodes[-1]

    def actions(self) -> List[Action]:
        return [action for node in self.nodes for action in node.actions]

    def serialize(self) -> Dict[str, Any]:
        return {
            "initial_state": copy.deepcopy(self.initial_state),
            "nodes": [node.serialize() for node in self.nodes],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "History":
        nodes = [
            HistoryNode([Action.from_dict(action) for action in node])
            for node in payload.get("nodes", [])
        ]
        return cls(payload["initial_state"], nodes)
