from __future__ import annotations

import json

import pytest

from helpers import card_id, rig
from onegame.engine.actions import ChooseColorAction, DrawCardAction, PlayCardAction
from onegame.engine.match import MatchConfig, new_match, step
from onegame.engine.serialize import ActionFormatError, action_from_dict, seat_view, snapshot
from onegame.paths import get_paths
from onegame.services.content import ContentError, ContentService


def _content() -> ContentService:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir)


def test_content_schemas_validate() -> None:
    _content().validate_all()


def test_presets_load() -> None:
    presets = _content().load_presets()
    assert set(presets) == {"CLASSIC", "TOURNAMENT", "CUSTOM"}
    assert presets["CLASSIC"].bots == (1, 2, 3)
    assert presets["TOURNAMENT"].turn_time_limit == 30
    assert presets["CUSTOM"].stack_draw_penalties
    assert presets["CUSTOM"].seat_count == 2
    assert _content().preset("classic") == presets["CLASSIC"]


def test_unknown_preset() -> None:
    with pytest.raises(ContentError):
        _content().preset("speed")


@pytest.mark.parametrize(
    "raw",
    [
        {"seat_count": 5},
        {"seat_count": 2, "bots": [3]},
        {"hand_size": 0},
        {"points_to_win": 150},
        {"house_rules": True},
        [],
    ],
)
def test_config_from_dict_rejects(raw: object) -> None:
    with pytest.raises(ContentError):
        _content().config_from_dict(raw)


def test_config_from_dict_builds_match_config() -> None:
    cfg = _content().config_from_dict({"seat_count": 3, "bots": [2, 1], "stack_draw_penalties": True})
    assert cfg == MatchConfig(seat_count=3, bots=(1, 2), stack_draw_penalties=True)


def test_preset_starts_a_match() -> None:
    state = new_match(_content().preset("CLASSIC"), seed=3)
    # Seat 0 is the only human and always opens.
    assert state.status == "IN_PROGRESS"
    assert state.current_seat == 0
    assert [s.is_bot for s in state.seats] == [False, True, True, True]


def test_seat_view_validates_and_hides_other_hands() -> None:
    state = new_match(MatchConfig(seat_count=3), seed=5)
    content = _content()
    for seat in range(3):
        view = seat_view(state, seat)
        content.validate_seat_view(view)
        assert len(view["hand"]) == 7
        assert all("hand" not in s for s in view["seats"])
        assert [s["card_count"] for s in view["seats"]] == [7, 7, 7]

    view = seat_view(state, 0)
    hand_ids = {c.id for c in state.seats[0].hand}
    assert set(view["playable_card_ids"]) <= hand_ids
    assert view["can_draw"] is True
    assert seat_view(state, 1)["playable_card_ids"] == []
    assert seat_view(state, 1)["can_draw"] is False


def test_seat_view_after_draw_and_during_color_choice() -> None:
    state = rig([["BLUE-3", "WILD"], ["GREEN-1"]], "RED-3", draw=["GREEN-9"])
    step(state, DrawCardAction(seat=0))
    view = seat_view(state, 0)
    assert view["can_draw"] is False
    assert view["can_end_turn"] is True
    assert view["playable_card_ids"] == []  # drawn GREEN-9 does not fit

    state = rig([["BLUE-3", "WILD"], ["GREEN-1"]], "RED-3")
    step(state, PlayCardAction(seat=0, card_id=card_id(state, 0, "WILD")))
    view = seat_view(state, 0)
    assert view["must_choose_color"] is True
    assert view["can_play"] is False
    _content().validate_seat_view(view)
    step(state, ChooseColorAction(seat=0, color="GREEN"))
    assert seat_view(state, 1)["playable_card_ids"] == [card_id(state, 1, "GREEN-1")]


def test_snapshot_is_json_serializable() -> None:
    state = new_match(MatchConfig(seat_count=2, bots=(1,)), seed=11)
    step(state, DrawCardAction(seat=0))
    snap = snapshot(state)
    assert json.loads(json.dumps(snap)) == snap
    assert snap["action_log"][0] == {"type": "draw", "seat": 0}


def test_action_from_transport_payload() -> None:
    assert action_from_dict({"type": "play", "seat": 2, "card_id": "card_7", "chosen_color": None}) == (
        PlayCardAction(seat=2, card_id="card_7")
    )
    assert action_from_dict({"type": "choose_color", "seat": 0, "color": "RED"}) == ChooseColorAction(0, "RED")
    with pytest.raises(ActionFormatError):
        action_from_dict({"type": "shout", "seat": 0})
    with pytest.raises(ActionFormatError):
        action_from_dict({"type": "draw", "seat": "0"})
