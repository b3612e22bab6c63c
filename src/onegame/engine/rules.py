"""Pure rule functions. Nothing in here mutates a match."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Iterable, Sequence

from .deck import shuffle
from .errors import DeckExhaustedError
from .types import ACTION_RANKS, NUMBER_RANKS, Card, Color, Direction, Effect, Rank

if TYPE_CHECKING:
    from .match import MatchState

logger = logging.getLogger(__name__)

ACTION_POINTS = 20
WILD_POINTS = 50


def can_play(card: Card, top: Card, active_color: Color) -> bool:
    if card.is_wild:
        return True
    if card.color == active_color:
        return True
    return card.rank == top.rank


def can_stack(card: Card, top: Card) -> bool:
    """Whether `card` may be piled onto a pending draw penalty."""
    if card.rank == "WILD_DRAW_FOUR":
        return True
    return card.rank == "DRAW_TWO" and top.rank == "DRAW_TWO"


def legal_cards(
    hand: Iterable[Card], top: Card, active_color: Color, pending_draw: int = 0
) -> list[Card]:
    if pending_draw > 0:
        return [c for c in hand if can_stack(c, top)]
    return [c for c in hand if can_play(c, top, active_color)]


def active_color(state: MatchState) -> Color:
    if state.pending_wild_color is not None:
        return state.pending_wild_color
    return state.discard_pile[-1].color


def flipped(direction: Direction) -> Direction:
    return "BACKWARD" if direction == "FORWARD" else "FORWARD"


def next_seat(index: int, direction: Direction, seat_count: int, steps: int = 1) -> int:
    delta = steps if direction == "FORWARD" else -steps
    return (index + delta) % seat_count


def _draw_effect(rank: Rank, count: int, stacking: bool, needs_color: bool) -> Effect:
    if stacking:
        # The victim gets the turn and may pass the penalty along.
        return Effect(rank=rank, steps=1, victim_draws=count, needs_color=needs_color, stacks=True)
    return Effect(rank=rank, steps=2, victim_draws=count, needs_color=needs_color)


def resolve_effect(card: Card, state: MatchState) -> Effect:
    rank = card.rank
    stacking = state.config.stack_draw_penalties
    if rank in NUMBER_RANKS:
        return Effect(rank=rank, steps=1)
    if rank == "SKIP":
        return Effect(rank=rank, steps=2)
    if rank == "REVERSE":
        # Heads-up play: reversing hands the turn straight back.
        steps = 2 if len(state.seats) == 2 else 1
        return Effect(rank=rank, steps=steps, reverses=True)
    if rank == "DRAW_TWO":
        return _draw_effect(rank, 2, stacking, needs_color=False)
    if rank == "WILD":
        return Effect(rank=rank, steps=1, needs_color=True)
    if rank == "WILD_DRAW_FOUR":
        return _draw_effect(rank, 4, stacking, needs_color=True)
    raise ValueError(f"Unknown rank: {rank}")


def drawable(draw_pile: Sequence[Card], discard_pile: Sequence[Card]) -> int:
    return len(draw_pile) + max(0, len(discard_pile) - 1)


def reshuffle(
    draw_pile: Sequence[Card], discard_pile: Sequence[Card], rng: random.Random
) -> tuple[list[Card], list[Card]]:
    """Return (draw_pile, discard_pile), refilling an empty draw pile from the discards.

    Everything under the discard top is shuffled back; wilds lose their chosen color.
    """
    if draw_pile:
        return list(draw_pile), list(discard_pile)
    if len(discard_pile) <= 1:
        logger.error("Deck exhausted: draw pile empty, discard pile holds %d", len(discard_pile))
        raise DeckExhaustedError("No cards left to draw.")
    top = discard_pile[-1]
    refill = shuffle([c.printed() for c in discard_pile[:-1]], rng)
    logger.info("Reshuffled %d discards into the draw pile", len(refill))
    return refill, [top]


def card_points(card: Card) -> int:
    if card.is_wild:
        return WILD_POINTS
    if card.rank in ACTION_RANKS:
        return ACTION_POINTS
    return int(card.rank)


def hand_points(cards: Iterable[Card]) -> int:
    return sum(card_points(c) for c in cards)
