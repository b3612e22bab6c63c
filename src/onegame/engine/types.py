from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

Color = Literal["RED", "YELLOW", "GREEN", "BLUE", "WILD"]
Rank = Literal[
    "0",
    "1",
    "2",
    "3",
    "4",
    "5",
    "6",
    "7",
    "8",
    "9",
    "SKIP",
    "REVERSE",
    "DRAW_TWO",
    "WILD",
    "WILD_DRAW_FOUR",
]
Direction = Literal["FORWARD", "BACKWARD"]
MatchStatus = Literal["DEALING", "IN_PROGRESS", "AWAITING_COLOR_CHOICE", "FINISHED"]

CONCRETE_COLORS: tuple[Color, ...] = ("RED", "YELLOW", "GREEN", "BLUE")
NUMBER_RANKS: tuple[Rank, ...] = ("0", "1", "2", "3", "4", "5", "6", "7", "8", "9")
ACTION_RANKS: tuple[Rank, ...] = ("SKIP", "REVERSE", "DRAW_TWO")
WILD_RANKS: tuple[Rank, ...] = ("WILD", "WILD_DRAW_FOUR")
ALL_RANKS: tuple[Rank, ...] = NUMBER_RANKS + ACTION_RANKS + WILD_RANKS


@dataclass(frozen=True)
class Card:
    id: str
    color: Color
    rank: Rank

    @property
    def is_wild(self) -> bool:
        return self.rank in WILD_RANKS

    @property
    def is_number(self) -> bool:
        return self.rank in NUMBER_RANKS

    @property
    def label(self) -> str:
        if self.is_wild:
            return self.rank if self.color == "WILD" else f"{self.rank}({self.color})"
        return f"{self.color}-{self.rank}"

    def recolored(self, color: Color) -> "Card":
        return replace(self, color=color)

    def printed(self) -> "Card":
        """The card as it sits in a fresh deck (wilds lose any chosen color)."""
        if self.is_wild and self.color != "WILD":
            return replace(self, color="WILD")
        return self


@dataclass(frozen=True)
class Effect:
    """What a played card does to turn order and the next seat.

    steps: how many seats the turn advances once the effect resolves.
    victim_draws: cards the next seat must take (0 for most ranks).
    """

    rank: Rank
    steps: int
    reverses: bool = False
    victim_draws: int = 0
    needs_color: bool = False
    stacks: bool = False
