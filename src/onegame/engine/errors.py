from __future__ import annotations


class EngineError(RuntimeError):
    code = "ENGINE_ERROR"


class RuleViolation(EngineError):
    """An intent that breaks the rules. The match state is left untouched."""

    code = "RULE_VIOLATION"


class NotYourTurnError(RuleViolation):
    code = "NOT_YOUR_TURN"


class IllegalMoveError(RuleViolation):
    code = "ILLEGAL_MOVE"


class NotAwaitingColorError(RuleViolation):
    code = "NOT_AWAITING_COLOR"


class MatchFinishedError(RuleViolation):
    code = "MATCH_FINISHED"


class InvalidSeatCountError(EngineError):
    code = "INVALID_SEAT_COUNT"


class InsufficientCardsError(EngineError):
    code = "INSUFFICIENT_CARDS"


class DeckExhaustedError(EngineError):
    """Both piles are empty. Signals a broken match, not ordinary play."""

    code = "DECK_EXHAUSTED"
