"""Deterministic, headless rules engine for ONE.

IMPORTANT: This package must never import transport or rendering code.
"""

from .actions import (
    CatchLastCardAction,
    ChooseColorAction,
    DeclareLastCardAction,
    DrawCardAction,
    EndTurnAction,
    PlayCardAction,
    TimeoutAction,
)
from .errors import (
    DeckExhaustedError,
    EngineError,
    IllegalMoveError,
    InsufficientCardsError,
    InvalidSeatCountError,
    MatchFinishedError,
    NotAwaitingColorError,
    NotYourTurnError,
    RuleViolation,
)
from .match import MatchConfig, MatchState, new_match, step
from .types import Card, Color, Rank

__all__ = [
    "Card",
    "CatchLastCardAction",
    "ChooseColorAction",
    "Color",
    "DeckExhaustedError",
    "DeclareLastCardAction",
    "DrawCardAction",
    "EndTurnAction",
    "EngineError",
    "IllegalMoveError",
    "InsufficientCardsError",
    "InvalidSeatCountError",
    "MatchConfig",
    "MatchFinishedError",
    "MatchState",
    "NotAwaitingColorError",
    "NotYourTurnError",
    "PlayCardAction",
    "Rank",
    "RuleViolation",
    "TimeoutAction",
    "new_match",
    "step",
]
