from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from .actions import Action, DrawCardAction, EndTurnAction, PlayCardAction
from .rules import can_play, legal_cards
from .types import CONCRETE_COLORS, Card, Color

if TYPE_CHECKING:
    from .match import MatchState


def choose_color(state: MatchState) -> Color:
    return state.bot_rng.choice(CONCRETE_COLORS)


def _play(state: MatchState, card: Card) -> PlayCardAction:
    color = choose_color(state) if card.is_wild else None
    return PlayCardAction(seat=state.current_seat, card_id=card.id, chosen_color=color)


def choose_action(hand: Sequence[Card], top: Card, active_color: Color, state: MatchState) -> Action:
    """Pick the current seat's next intent.

    Plays a random legal card. With nothing legal it draws once, then plays
    the drawn card if it fits or passes. Randomness comes from
    `state.bot_rng`, so a seed reproduces every bot decision.
    """
    seat = state.current_seat
    if state.drawn_card_id is not None:
        for card in hand:
            if card.id == state.drawn_card_id and can_play(card, top, active_color):
                return _play(state, card)
        return EndTurnAction(seat=seat)

    options = legal_cards(hand, top, active_color, state.pending_draw)
    if options:
        return _play(state, state.bot_rng.choice(options))
    return DrawCardAction(seat=seat)
