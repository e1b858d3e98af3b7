"""Core engine package for the Durak card game."""

__all__ = [
    "cards",
    "deck",
    "errors",
    "player",
    "table",
    "ring",
    "history",
    "rules_schema",
    "snapshot",
    "views",
    "game",
    "service",
    "arena",
]
