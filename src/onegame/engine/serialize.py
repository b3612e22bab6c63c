from __future__ import annotations

from typing import Mapping

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
from .match import MatchState, Seat
from .rules import active_color, legal_cards
from .types import Card


class ActionFormatError(ValueError):
    pass


def card_to_dict(c: Card) -> dict[str, object]:
    return {"id": c.id, "color": c.color, "rank": c.rank}


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, PlayCardAction):
        return {"type": "play", "seat": a.seat, "card_id": a.card_id, "chosen_color": a.chosen_color}
    if isinstance(a, DrawCardAction):
        return {"type": "draw", "seat": a.seat}
    if isinstance(a, ChooseColorAction):
        return {"type": "choose_color", "seat": a.seat, "color": a.color}
    if isinstance(a, EndTurnAction):
        return {"type": "end_turn", "seat": a.seat}
    if isinstance(a, DeclareLastCardAction):
        return {"type": "declare_last_card", "seat": a.seat}
    if isinstance(a, CatchLastCardAction):
        return {"type": "catch_last_card", "seat": a.seat, "target": a.target}
    if isinstance(a, TimeoutAction):
        return {"type": "timeout", "seat": a.seat}
    # should be unreachable
    return {"type": "unknown"}


def _int(d: Mapping[str, object], key: str) -> int:
    v = d.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ActionFormatError(f"Expected int for {key}")
    return v


def _str(d: Mapping[str, object], key: str) -> str:
    v = d.get(key)
    if not isinstance(v, str):
        raise ActionFormatError(f"Expected string for {key}")
    return v


def action_from_dict(d: Mapping[str, object]) -> Action:
    """Parse an inbound intent, e.g. from a transport event payload."""
    t = d.get("type")
    seat = _int(d, "seat")
    if t == "play":
        color = d.get("chosen_color")
        if color is not None and not isinstance(color, str):
            raise ActionFormatError("chosen_color must be a string")
        return PlayCardAction(seat=seat, card_id=_str(d, "card_id"), chosen_color=color)  # type: ignore[arg-type]
    if t == "draw":
        return DrawCardAction(seat=seat)
    if t == "choose_color":
        return ChooseColorAction(seat=seat, color=_str(d, "color"))  # type: ignore[arg-type]
    if t == "end_turn":
        return EndTurnAction(seat=seat)
    if t == "declare_last_card":
        return DeclareLastCardAction(seat=seat)
    if t == "catch_last_card":
        return CatchLastCardAction(seat=seat, target=_int(d, "target"))
    if t == "timeout":
        return TimeoutAction(seat=seat)
    raise ActionFormatError(f"Unknown action type: {t!r}")


def _seat_to_dict(s: Seat, *, reveal: bool) -> dict[str, object]:
    out: dict[str, object] = {
        "seat_id": s.seat_id,
        "is_bot": s.is_bot,
        "card_count": len(s.hand),
        "has_declared_last_card": s.has_declared_last_card,
    }
    if reveal:
        out["hand"] = [card_to_dict(c) for c in s.hand]
    return out


def _table_to_dict(state: MatchState) -> dict[str, object]:
    return {
        "status": state.status,
        "current_seat": state.current_seat,
        "direction": state.direction,
        "top": card_to_dict(state.top),
        "active_color": active_color(state),
        "pending_draw": state.pending_draw,
        "draw_pile_count": len(state.draw_pile),
        "discard_pile_count": len(state.discard_pile),
        "winner": state.winner,
        "round_points": state.round_points,
    }


def snapshot(state: MatchState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current match state."""
    out = _table_to_dict(state)
    out.update(
        {
            "seed": state.seed,
            "pending_wild_color": state.pending_wild_color,
            "drawn_card_id": state.drawn_card_id,
            "seats": [_seat_to_dict(s, reveal=True) for s in state.seats],
            "draw_pile": [card_to_dict(c) for c in state.draw_pile],
            "discard_pile": [card_to_dict(c) for c in state.discard_pile],
            "action_log": [action_to_dict(a) for a in state.action_log],
        }
    )
    return out


def seat_view(state: MatchState, seat: int) -> dict[str, object]:
    """What one seat is allowed to see: its own hand, everyone else's card count."""
    out = _table_to_dict(state)
    me = state.seats[seat]
    my_turn = state.status == "IN_PROGRESS" and state.current_seat == seat
    playable: list[str] = []
    if my_turn:
        options = legal_cards(me.hand, state.top, active_color(state), state.pending_draw)
        if state.drawn_card_id is not None:
            options = [c for c in options if c.id == state.drawn_card_id]
        playable = [c.id for c in options]
    out.update(
        {
            "seat": seat,
            "hand": [card_to_dict(c) for c in me.hand],
            "seats": [_seat_to_dict(s, reveal=False) for s in state.seats],
            "can_draw": my_turn and state.drawn_card_id is None,
            "can_play": bool(playable),
            "can_end_turn": my_turn and state.drawn_card_id is not None,
            "must_choose_color": state.status == "AWAITING_COLOR_CHOICE" and state.color_chooser == seat,
            "playable_card_ids": playable,
        }
    )
    return out
