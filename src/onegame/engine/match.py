from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Iterable

from . import ai
from .actions import (
    Action,
    CatchLastCardAction,
    ChooseColorAction,
    DeclareLastCardAction,
    DrawCardAction,
    EndTurnAction,
    PlayCardAction,
    TimeoutAction,
)
from .deck import DECK_SIZE, build_deck, deal, shuffle
from .errors import (
    DeckExhaustedError,
    IllegalMoveError,
    InvalidSeatCountError,
    MatchFinishedError,
    NotAwaitingColorError,
    NotYourTurnError,
    RuleViolation,
)
from .rules import (
    active_color,
    can_play,
    can_stack,
    drawable,
    flipped,
    hand_points,
    next_seat,
    reshuffle,
    resolve_effect,
)
from .types import CONCRETE_COLORS, Card, Color, Direction, Effect, MatchStatus

logger = logging.getLogger(__name__)

Event = dict[str, object]

MIN_SEATS = 2
MAX_SEATS = 4


@dataclass(frozen=True)
class MatchConfig:
    seat_count: int = 4
    hand_size: int = 7
    bots: tuple[int, ...] = ()
    stack_draw_penalties: bool = False
    last_card_penalty: int = 2
    # Opaque to the engine; an external timer sends TimeoutAction.
    turn_time_limit: int | None = None
    points_to_win: int | None = None
    auto_play_bots: bool = True


@dataclass
class Seat:
    seat_id: int
    is_bot: bool
    hand: list[Card] = field(default_factory=list)
    has_declared_last_card: bool = False


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None
    violation: RuleViolation | None = None


@dataclass
class MatchState:
    config: MatchConfig
    seed: int
    rng: random.Random
    bot_rng: random.Random
    seats: list[Seat]
    draw_pile: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    current_seat: int = 0
    direction: Direction = "FORWARD"
    pending_wild_color: Color | None = None
    status: MatchStatus = "DEALING"
    winner: int | None = None
    round_points: int = 0
    pending_draw: int = 0  # stacked penalty owed by the current seat
    drawn_card_id: str | None = None  # card the current seat drew this turn
    color_chooser: int | None = None
    pending_effect: Effect | None = None
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    @property
    def seat_count(self) -> int:
        return len(self.seats)

    @property
    def top(self) -> Card:
        return self.discard_pile[-1]

    @property
    def current(self) -> Seat:
        return self.seats[self.current_seat]

    def hand_of(self, seat: int) -> tuple[Card, ...]:
        return tuple(self.seats[seat].hand)

    def total_cards(self) -> int:
        return len(self.draw_pile) + len(self.discard_pile) + sum(len(s.hand) for s in self.seats)


def _emit(state: MatchState, event_type: str, **payload: object) -> None:
    event: Event = {"type": event_type}
    event.update(payload)
    state.event_log.append(event)


def _require_drawable(state: MatchState, count: int, discard: list[Card] | None = None) -> None:
    pile = state.discard_pile if discard is None else discard
    if drawable(state.draw_pile, pile) < count:
        logger.error("Need %d cards but only %d can be drawn", count, drawable(state.draw_pile, pile))
        raise DeckExhaustedError(f"Cannot draw {count} card(s): both piles are spent.")


def _draw_cards(state: MatchState, seat: int, count: int) -> list[Card]:
    ps = state.seats[seat]
    drawn: list[Card] = []
    for _ in range(count):
        if not state.draw_pile:
            state.draw_pile, state.discard_pile = reshuffle(state.draw_pile, state.discard_pile, state.rng)
            _emit(state, "DECK_RESHUFFLED", size=len(state.draw_pile))
        card = state.draw_pile.pop()
        ps.hand.append(card)
        drawn.append(card)
        _emit(state, "CARD_DRAWN", seat=seat, card_id=card.id)
    if drawn:
        ps.has_declared_last_card = False
    return drawn


def _start_turn(state: MatchState, seat: int) -> None:
    state.current_seat = seat
    state.drawn_card_id = None
    state.status = "IN_PROGRESS"
    _emit(state, "TURN_STARTED", seat=seat, direction=state.direction)


def _finish(state: MatchState, seat: int) -> None:
    state.status = "FINISHED"
    state.winner = seat
    state.drawn_card_id = None
    state.pending_draw = 0
    state.round_points = sum(hand_points(s.hand) for s in state.seats if s.seat_id != seat)
    _emit(state, "MATCH_ENDED", winner=seat, points=state.round_points)
    logger.info("Seat %d won the match for %d points", seat, state.round_points)


def _resolve(state: MatchState, actor: int, effect: Effect) -> None:
    victim = next_seat(actor, state.direction, state.seat_count)
    if effect.victim_draws:
        if effect.stacks:
            state.pending_draw += effect.victim_draws
            _emit(state, "PENALTY_STACKED", seat=victim, total=state.pending_draw)
        else:
            _draw_cards(state, victim, effect.victim_draws)
            _emit(state, "PENALTY_DRAWN", seat=victim, count=effect.victim_draws)
    if effect.steps > 1:
        _emit(state, "TURN_SKIPPED", seat=victim)
    _start_turn(state, next_seat(actor, state.direction, state.seat_count, effect.steps))


def _set_color(state: MatchState, color: Color) -> None:
    state.discard_pile[-1] = state.top.recolored(color)
    state.pending_wild_color = color
    _emit(state, "COLOR_CHOSEN", color=color)


def _check_color(color: Color) -> None:
    if color not in CONCRETE_COLORS:
        raise IllegalMoveError(f"{color} is not a color that can be chosen.")


def _find_card(ps: Seat, card_id: str) -> Card:
    for card in ps.hand:
        if card.id == card_id:
            return card
    raise IllegalMoveError(f"Card {card_id} is not in seat {ps.seat_id}'s hand.")


def _penalty_now(effect: Effect) -> int:
    return effect.victim_draws if effect.victim_draws and not effect.stacks else 0


def _play_card(state: MatchState, action: PlayCardAction) -> PlayCardAction:
    ps = state.seats[action.seat]
    card = _find_card(ps, action.card_id)
    if state.drawn_card_id is not None and card.id != state.drawn_card_id:
        raise IllegalMoveError("Only the card just drawn may be played this turn.")

    top = state.top
    if state.pending_draw > 0:
        if not can_stack(card, top):
            raise IllegalMoveError(f"{card.label} cannot be stacked on {top.label}; draw the penalty.")
    elif not can_play(card, top, active_color(state)):
        raise IllegalMoveError(f"{card.label} does not match {top.label}.")

    if action.chosen_color is not None:
        if not card.is_wild:
            raise IllegalMoveError("Only wild cards take a color.")
        _check_color(action.chosen_color)

    effect = resolve_effect(card, state)
    wins = len(ps.hand) == 1
    color = action.chosen_color
    if card.is_wild and color is None and ps.is_bot:
        color = ai.choose_color(state)
    if not wins and (color is not None or not card.is_wild):
        _require_drawable(state, _penalty_now(effect), state.discard_pile + [card])

    # Validation done; mutate.
    ps.hand.remove(card)
    state.drawn_card_id = None
    state.discard_pile.append(card)
    state.pending_wild_color = None
    _emit(state, "CARD_PLAYED", seat=action.seat, card_id=card.id, rank=card.rank, color=card.color)

    if wins:
        if card.is_wild:
            # Nothing left to play on, but the discard top must still carry a color.
            color = color or ai.choose_color(state)
            _set_color(state, color)
        _finish(state, action.seat)
        return replace(action, chosen_color=color)

    if ps.is_bot and len(ps.hand) == 1:
        ps.has_declared_last_card = True
        _emit(state, "LAST_CARD_DECLARED", seat=action.seat)

    if effect.reverses:
        state.direction = flipped(state.direction)
        _emit(state, "DIRECTION_CHANGED", direction=state.direction)

    if card.is_wild:
        if color is None:
            state.status = "AWAITING_COLOR_CHOICE"
            state.color_chooser = action.seat
            state.pending_effect = effect
            _emit(state, "AWAITING_COLOR", seat=action.seat)
            return action
        _set_color(state, color)

    _resolve(state, action.seat, effect)
    return replace(action, chosen_color=color)


def _choose_color(state: MatchState, action: ChooseColorAction) -> None:
    if state.status != "AWAITING_COLOR_CHOICE" or action.seat != state.color_chooser:
        raise NotAwaitingColorError(f"Seat {action.seat} has no color to choose.")
    _check_color(action.color)
    effect = state.pending_effect
    assert effect is not None
    _require_drawable(state, _penalty_now(effect))

    _set_color(state, action.color)
    state.color_chooser = None
    state.pending_effect = None
    state.status = "IN_PROGRESS"
    _resolve(state, action.seat, effect)


def _take_stacked_penalty(state: MatchState, seat: int) -> None:
    count = state.pending_draw
    _require_drawable(state, count)
    state.pending_draw = 0
    _draw_cards(state, seat, count)
    _emit(state, "PENALTY_DRAWN", seat=seat, count=count)
    _start_turn(state, next_seat(seat, state.direction, state.seat_count))


def _draw(state: MatchState, action: DrawCardAction) -> None:
    if state.pending_draw > 0:
        _take_stacked_penalty(state, action.seat)
        return
    if state.drawn_card_id is not None:
        raise IllegalMoveError("Only one card may be drawn per turn.")
    _require_drawable(state, 1)
    (card,) = _draw_cards(state, action.seat, 1)
    state.drawn_card_id = card.id


def _end_turn(state: MatchState, action: EndTurnAction) -> None:
    if state.drawn_card_id is None:
        raise IllegalMoveError("Draw a card before passing.")
    _emit(state, "TURN_ENDED", seat=action.seat)
    _start_turn(state, next_seat(action.seat, state.direction, state.seat_count))


def _timeout(state: MatchState, action: TimeoutAction) -> Action:
    """Finish a stalled turn. Returns the intent to log in place of the timeout.

    A color picked on the seat's behalf is logged as a ChooseColorAction.
    """
    if state.status == "AWAITING_COLOR_CHOICE":
        assert state.pending_effect is not None
        _require_drawable(state, _penalty_now(state.pending_effect))
        _emit(state, "TURN_TIMED_OUT", seat=action.seat)
        pick = ChooseColorAction(seat=action.seat, color=ai.choose_color(state))
        _choose_color(state, pick)
        return pick
    if state.pending_draw > 0:
        _require_drawable(state, state.pending_draw)
        _emit(state, "TURN_TIMED_OUT", seat=action.seat)
        _take_stacked_penalty(state, action.seat)
        return action
    _emit(state, "TURN_TIMED_OUT", seat=action.seat)
    if state.drawn_card_id is None and drawable(state.draw_pile, state.discard_pile) > 0:
        _draw_cards(state, action.seat, 1)
    _start_turn(state, next_seat(action.seat, state.direction, state.seat_count))
    return action


def _check_seat(state: MatchState, seat: int) -> None:
    if not 0 <= seat < state.seat_count:
        raise IllegalMoveError(f"No seat {seat} in this match.")


def _declare(state: MatchState, action: DeclareLastCardAction) -> None:
    _check_seat(state, action.seat)
    ps = state.seats[action.seat]
    about_to_play = (
        len(ps.hand) == 2 and action.seat == state.current_seat and state.status == "IN_PROGRESS"
    )
    if len(ps.hand) != 1 and not about_to_play:
        raise IllegalMoveError("Last card can only be declared with one card left (or two on your turn).")
    if ps.has_declared_last_card:
        raise IllegalMoveError("Last card already declared.")
    ps.has_declared_last_card = True
    _emit(state, "LAST_CARD_DECLARED", seat=action.seat)


def _catch(state: MatchState, action: CatchLastCardAction) -> None:
    _check_seat(state, action.seat)
    _check_seat(state, action.target)
    if action.seat == action.target:
        raise IllegalMoveError("A seat cannot catch itself.")
    target = state.seats[action.target]
    if len(target.hand) != 1 or target.has_declared_last_card:
        raise IllegalMoveError(f"Seat {action.target} cannot be caught.")
    count = state.config.last_card_penalty
    _require_drawable(state, count)
    _emit(state, "LAST_CARD_CAUGHT", seat=action.seat, target=action.target, count=count)
    _draw_cards(state, action.target, count)


def _apply(state: MatchState, action: Action) -> Action:
    """Apply one intent and return it as it belongs in the action log.

    Colors the engine picks for a seat are written into the returned intent.
    """
    if state.status == "FINISHED":
        raise MatchFinishedError("Match already ended.")

    # Declarations and catches never move the turn, so any seat may send them.
    if isinstance(action, DeclareLastCardAction):
        _declare(state, action)
    elif isinstance(action, CatchLastCardAction):
        _catch(state, action)
    elif isinstance(action, ChooseColorAction):
        _choose_color(state, action)
    elif action.seat != state.current_seat:
        raise NotYourTurnError(f"It is seat {state.current_seat}'s turn, not seat {action.seat}'s.")
    elif isinstance(action, TimeoutAction):
        return _timeout(state, action)
    elif state.status == "AWAITING_COLOR_CHOICE":
        raise IllegalMoveError("Choose a color for the wild card first.")
    elif isinstance(action, PlayCardAction):
        return _play_card(state, action)
    elif isinstance(action, DrawCardAction):
        _draw(state, action)
    elif isinstance(action, EndTurnAction):
        _end_turn(state, action)
    else:
        raise IllegalMoveError(f"Unknown action: {action!r}")
    return action


def step(state: MatchState, action: Action) -> StepResult:
    """Apply one intent, then let any bots whose turn it becomes act.

    A rejected intent leaves `state` exactly as it was. DeckExhaustedError
    is not a rule violation and propagates to the caller.
    """
    mark = len(state.event_log)
    try:
        logged = _apply(state, action)
    except RuleViolation as e:
        logger.debug("Rejected %r: %s", action, e)
        return StepResult(ok=False, events=[], error=str(e), violation=e)
    state.action_log.append(logged)
    if state.config.auto_play_bots:
        run_bots(state)
    return StepResult(ok=True, events=state.event_log[mark:])


def run_bots(state: MatchState) -> None:
    """Play bot turns inline until a human is up or the match ends."""
    while state.status == "IN_PROGRESS" and state.current.is_bot:
        action = ai.choose_action(state.current.hand, state.top, active_color(state), state)
        state.action_log.append(_apply(state, action))


def new_match(config: MatchConfig | None = None, seed: int = 0) -> MatchState:
    cfg = config or MatchConfig()
    if not MIN_SEATS <= cfg.seat_count <= MAX_SEATS:
        raise InvalidSeatCountError(f"Seat count must be {MIN_SEATS}-{MAX_SEATS}, got {cfg.seat_count}.")
    if cfg.hand_size < 1:
        raise ValueError("Hand size must be at least 1.")
    if any(not 0 <= b < cfg.seat_count for b in cfg.bots):
        raise ValueError(f"Bot seats {cfg.bots} out of range for {cfg.seat_count} seats.")

    rng = random.Random(seed)
    state = MatchState(
        config=cfg,
        seed=seed,
        rng=rng,
        bot_rng=random.Random(f"bots:{seed}"),
        seats=[Seat(seat_id=i, is_bot=i in cfg.bots) for i in range(cfg.seat_count)],
    )

    dealt = deal(shuffle(build_deck(), rng), cfg.seat_count, cfg.hand_size)
    for ps, hand in zip(state.seats, dealt.hands):
        ps.hand = hand
    state.draw_pile = dealt.draw_pile
    state.discard_pile = dealt.discard_pile
    assert state.total_cards() == DECK_SIZE

    _emit(state, "MATCH_STARTED", seats=cfg.seat_count, top=state.top.id)
    _start_turn(state, 0)
    if cfg.auto_play_bots:
        run_bots(state)
    return state


def replay(config: MatchConfig, seed: int, actions: Iterable[Action]) -> MatchState:
    """Rebuild a match from its action log. Bot moves come from the log, not the policy.

    Raises the RuleViolation of the first logged intent that no longer applies.
    """
    state = new_match(replace(config, auto_play_bots=False), seed=seed)
    for i, a in enumerate(actions):
        res = step(state, a)
        if not res.ok:
            logger.error("Replay rejected action %d (%r): %s", i, a, res.error)
            assert res.violation is not None
            raise res.violation
        if state.status == "FINISHED":
            break
    return state
