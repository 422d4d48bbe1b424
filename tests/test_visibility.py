from __future__ import annotations

from trio_utbm.engine.cards import Hand
from trio_utbm.engine.visibility import (
    duplicate_run,
    first_last_positions,
    is_position_revealable,
    revealable_positions,
)
from trio_utbm.paths import get_paths
from trio_utbm.services.content import ContentService


def _load_catalog():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_catalog()


def _hand(codes: list[str]) -> Hand:
    catalog = _load_catalog()
    hand = Hand(owner_id=0)
    for code in codes:
        hand.add_card(catalog.card(code))
    return hand


def test_empty_hand_has_no_positions() -> None:
    hand = Hand(owner_id=0)
    assert revealable_positions(hand) == []
    assert revealable_positions(hand, owner=False) == []


def test_owner_sees_run_at_the_low_end() -> None:
    # ranks [7, 5, 2, 2, 2]
    hand = _hand(["EN21", "EN21", "EN21", "MQ18", "PFE"])
    assert [c.rank for c in hand] == [7, 5, 2, 2, 2]
    assert revealable_positions(hand) == [0, 2, 3, 4]
    assert not is_position_revealable(hand, 1)


def test_owner_sees_runs_at_both_ends() -> None:
    # ranks [9, 9, 4, 1, 1]
    hand = _hand(["AP4B", "GI28", "MQ41", "AP4B", "GI28"])
    assert revealable_positions(hand) == [0, 1, 3, 4]
    assert not is_position_revealable(hand, 2)


def test_first_and_last_always_revealable() -> None:
    hand = _hand(["SY41", "IA41", "SY48", "AP4B", "GI21"])
    positions = revealable_positions(hand)
    assert positions == [0, 4]


def test_whole_hand_of_one_course() -> None:
    hand = _hand(["MQ18", "MQ18", "MQ18"])
    assert revealable_positions(hand) == [0, 1, 2]
    assert revealable_positions(hand, owner=False) == [0, 2]


def test_other_players_only_see_the_ends() -> None:
    hand = _hand(["EN21", "EN21", "EN21", "MQ18", "PFE"])
    assert revealable_positions(hand, owner=False) == [0, 4]
    assert first_last_positions(hand) == [0, 4]


def test_single_card_hand() -> None:
    hand = _hand(["PFE"])
    assert revealable_positions(hand) == [0]
    assert first_last_positions(hand) == [0]


def test_duplicate_run_is_contiguous_and_excludes_itself() -> None:
    hand = _hand(["SY41", "EN21", "EN21", "EN21", "MQ18"])
    # [SY41, MQ18, EN21, EN21, EN21]
    assert duplicate_run(hand, 4) == [3, 2]
    assert duplicate_run(hand, 2) == [3, 4]
    assert duplicate_run(hand, 0) == []
    assert duplicate_run(hand, 10) == []
