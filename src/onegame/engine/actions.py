from __future__ import annotations

from dataclasses import dataclass

from .types import Color


@dataclass(frozen=True)
class PlayCardAction:
    seat: int
    card_id: str
    chosen_color: Color | None = None


@dataclass(frozen=True)
class DrawCardAction:
    seat: int


@dataclass(frozen=True)
class ChooseColorAction:
    seat: int
    color: Color


@dataclass(frozen=True)
class EndTurnAction:
    """Pass after drawing. Only legal once the seat has drawn this turn."""

    seat: int


@dataclass(frozen=True)
class DeclareLastCardAction:
    seat: int


@dataclass(frozen=True)
class CatchLastCardAction:
    seat: int
    target: int


@dataclass(frozen=True)
class TimeoutAction:
    """Sent by an external turn timer when the current seat runs out of time."""

    seat: int


Action = (
    PlayCardAction
    | DrawCardAction
    | ChooseColorAction
    | EndTurnAction
    | DeclareLastCardAction
    | CatchLastCardAction
    | TimeoutAction
)
