from __future__ import annotations

import random
from collections import Counter

import pytest

from onegame.engine.deck import DECK_SIZE, build_deck, deal, shuffle
from onegame.engine.errors import InsufficientCardsError
from onegame.engine.types import Card


def test_build_deck_composition() -> None:
    deck = build_deck()
    assert len(deck) == DECK_SIZE == 108
    assert len({c.id for c in deck}) == 108

    counts = Counter((c.color, c.rank) for c in deck)
    for color in ("RED", "YELLOW", "GREEN", "BLUE"):
        assert counts[(color, "0")] == 1
        for n in "123456789":
            assert counts[(color, n)] == 2
        for action in ("SKIP", "REVERSE", "DRAW_TWO"):
            assert counts[(color, action)] == 2
    assert counts[("WILD", "WILD")] == 4
    assert counts[("WILD", "WILD_DRAW_FOUR")] == 4
    assert all(c.color == "WILD" for c in deck if c.is_wild)


def test_build_deck_is_color_major() -> None:
    deck = build_deck()
    assert deck[0] == Card(id="card_0", color="RED", rank="0")
    assert [c.color for c in deck[:25]] == ["RED"] * 25
    assert [c.color for c in deck[25:50]] == ["YELLOW"] * 25
    assert all(c.is_wild for c in deck[100:])
    assert build_deck() == deck


def test_shuffle_is_pure_and_seedable() -> None:
    deck = build_deck()
    a = shuffle(deck, random.Random(11))
    b = shuffle(deck, random.Random(11))
    assert a == b
    assert a != deck
    assert sorted(c.id for c in a) == sorted(c.id for c in deck)
    assert deck == build_deck()  # input untouched


def test_deal_hands_and_seed() -> None:
    deck = shuffle(build_deck(), random.Random(3))
    result = deal(deck, seat_count=4, hand_size=7)
    assert [len(h) for h in result.hands] == [7, 7, 7, 7]
    assert len(result.discard_pile) == 1
    assert not result.discard_pile[0].is_wild
    assert len(result.draw_pile) == 108 - 28 - 1
    assert len(deck) == 108  # input untouched

    # Round-robin from the tail: seat 0 takes the last card, seat 1 the one before.
    assert result.hands[0][0] == deck[-1]
    assert result.hands[1][0] == deck[-2]


def test_deal_sends_wild_seed_to_bottom() -> None:
    # Unshuffled, the tail of the deck is all wild cards.
    deck = build_deck()
    result = deal(deck, seat_count=2, hand_size=1)
    assert [c.id for c in result.discard_pile] == ["card_99"]
    assert result.discard_pile[0].rank == "DRAW_TWO"
    assert all(c.is_wild for c in result.draw_pile[:6])
    assert len(result.draw_pile) == 105


def test_deal_insufficient_cards() -> None:
    with pytest.raises(InsufficientCardsError):
        deal(build_deck(), seat_count=4, hand_size=27)


def test_deal_without_any_non_wild_seed() -> None:
    wilds = [c for c in build_deck() if c.is_wild]
    with pytest.raises(InsufficientCardsError):
        deal(wilds, seat_count=2, hand_size=1)
