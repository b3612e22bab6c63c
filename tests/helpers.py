from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from onegame.engine.deck import build_deck
from onegame.engine.match import MatchConfig, MatchState, new_match
from onegame.engine.types import Card


def _matches(card: Card, label: str) -> bool:
    if label in ("WILD", "WILD_DRAW_FOUR"):
        return card.rank == label
    color, rank = label.split("-", 1)
    return card.color == color and card.rank == rank


def _take(pool: list[Card], label: str) -> Card:
    for card in pool:
        if _matches(card, label):
            pool.remove(card)
            return card
    raise AssertionError(f"No {label} left in the deck")


def rig(
    hands: Sequence[Sequence[str]],
    top: str,
    *,
    draw: Sequence[str] | None = None,
    under: Sequence[str] = (),
    spill: int | str = "draw",
    bots: Sequence[int] = (),
    stacking: bool = False,
    current: int = 0,
) -> MatchState:
    """Build a match with exact hands and piles, still holding all 108 cards.

    `draw` lists cards in the order they will be drawn. `under` sits beneath
    the discard top. Unassigned cards go to `spill`: "draw", "discard", or a
    seat index.
    """
    cfg = MatchConfig(
        seat_count=len(hands),
        hand_size=1,
        bots=tuple(bots),
        stack_draw_penalties=stacking,
        auto_play_bots=False,
    )
    state = new_match(cfg, seed=7)
    pool = build_deck()
    for ps, labels in zip(state.seats, hands):
        ps.hand = [_take(pool, label) for label in labels]
    top_card = _take(pool, top)
    under_cards = [_take(pool, label) for label in under]
    drawn_first = [_take(pool, label) for label in (draw or ())]

    state.draw_pile = list(reversed(drawn_first))
    state.discard_pile = under_cards + [top_card]
    if spill == "draw":
        state.draw_pile = pool + state.draw_pile
    elif spill == "discard":
        state.discard_pile = pool + state.discard_pile
    else:
        assert isinstance(spill, int)
        state.seats[spill].hand.extend(pool)

    state.current_seat = current
    state.action_log.clear()
    state.event_log.clear()
    assert state.total_cards() == 108
    return state


def card_id(state: MatchState, seat: int, label: str) -> str:
    for card in state.seats[seat].hand:
        if _matches(card, label):
            return card.id
    raise AssertionError(f"Seat {seat} holds no {label}")


def with_config(state: MatchState, **changes: object) -> MatchState:
    state.config = replace(state.config, **changes)  # type: ignore[arg-type]
    return state
