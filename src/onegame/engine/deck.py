from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from .errors import InsufficientCardsError
from .types import ACTION_RANKS, CONCRETE_COLORS, NUMBER_RANKS, Card

DECK_SIZE = 108


@dataclass(frozen=True)
class DealResult:
    hands: list[list[Card]]
    draw_pile: list[Card]
    discard_pile: list[Card]


def build_deck() -> list[Card]:
    """The fixed 108-card deck, color-major then rank-minor, wilds last."""
    cards: list[Card] = []

    def add(color, rank) -> None:
        cards.append(Card(id=f"card_{len(cards)}", color=color, rank=rank))

    for color in CONCRETE_COLORS:
        for rank in NUMBER_RANKS:
            add(color, rank)
            if rank != "0":
                add(color, rank)
        for rank in ACTION_RANKS:
            add(color, rank)
            add(color, rank)
    for _ in range(4):
        add("WILD", "WILD")
    for _ in range(4):
        add("WILD", "WILD_DRAW_FOUR")
    return cards


def shuffle(cards: Sequence[Card], rng: random.Random) -> list[Card]:
    out = list(cards)
    rng.shuffle(out)
    return out


def deal(deck: Sequence[Card], seat_count: int, hand_size: int) -> DealResult:
    """Deal hands round-robin from the tail of `deck`, then seed the discard pile.

    The tail of the sequence is the top of the pile. A wild-family seed card
    goes back to the bottom and the next card is tried instead.
    """
    if seat_count * hand_size + 1 > len(deck):
        raise InsufficientCardsError(
            f"Cannot deal {hand_size} cards to {seat_count} seats from {len(deck)} cards."
        )

    pile = list(deck)
    hands: list[list[Card]] = [[] for _ in range(seat_count)]
    for _ in range(hand_size):
        for seat in range(seat_count):
            hands[seat].append(pile.pop())

    for _ in range(len(pile)):
        seed = pile.pop()
        if not seed.is_wild:
            return DealResult(hands=hands, draw_pile=pile, discard_pile=[seed])
        pile.insert(0, seed)
    raise InsufficientCardsError("No non-wild card left to start the discard pile.")
