from __future__ import annotations

import pytest

from trio_utbm.engine.cards import Deck
from trio_utbm.engine.game import (
    AutoRevealed,
    Game,
    Invalid,
    Mismatch,
    Revealed,
    TrioComplete,
    new_game,
)
from trio_utbm.paths import get_paths
from trio_utbm.services.content import ContentService

NAMES = ["Ana", "Ben", "Cleo"]
HALL = ["SY41", "SY48", "SY48", "AP4B", "GI21", "GI41", "MQ41", "MQ51", "EN21"]


def _load_catalog():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_catalog()


def _rig(game: Game, hands: dict[int, list[str]], hall: list[str], deck: list[str]) -> None:
    """Replace the shuffled deal with known cards."""
    catalog = game.catalog
    for s in game.students:
        s.hand.clear()
    for idx, codes in hands.items():
        for code in codes:
            game.students[idx].hand.add_card(catalog.card(code))
    game.lecture_hall.clear()
    for code in hall:
        game.lecture_hall.add_card(catalog.card(code))
    game.deck = Deck([catalog.card(c) for c in deck])


def _reveal(game: Game, player: int, source, position: int, source_player: int | None = None):
    card = game.card_at(player, source, source_player, position)
    assert card is not None
    return game.reveal_card(player, card, source, source_player, position)


def test_three_player_deal() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=11)
    assert [len(s.hand) for s in game.students] == [5, 5, 5]
    assert len(game.lecture_hall) == 9
    assert game.deck.remaining == 12
    assert game.difficulty == "simple"
    assert game.turn_manager.current_index == 0
    assert game.turn_manager.round_number == 1
    for s in game.students:
        ranks = [c.rank for c in s.hand]
        assert ranks == sorted(ranks, reverse=True)


@pytest.mark.parametrize(
    ("count", "mode", "names"),
    [
        (1, "individual_simple", ["Solo"]),
        (7, "individual_simple", [f"P{i}" for i in range(7)]),
        (3, "team_simple", NAMES),
        (3, "individual_simple", ["Ana", "Ben"]),
        (3, "individual_simple", ["Ana", "Ana", "Ben"]),
        (2, "individual_simple", ["Ana", " "]),
    ],
)
def test_bad_configuration_is_rejected(count: int, mode, names: list[str]) -> None:
    catalog = _load_catalog()
    game = Game(catalog)
    res = game.configure(count, mode, None, names)
    assert not res.ok
    assert res.error
    assert not game.students
    with pytest.raises(ValueError):
        new_game(catalog, count, mode, names, seed=0)


def test_difficulty_must_fit_mode() -> None:
    catalog = _load_catalog()
    game = Game(catalog)
    assert not game.configure(2, "individual_simple", "advanced", ["Ana", "Ben"]).ok
    assert game.configure(2, "individual_advanced", "advanced", ["Ana", "Ben"]).ok
    assert game.difficulty == "advanced"


def test_own_hand_duplicates_complete_a_trio() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=1)
    _rig(
        game,
        {0: ["SY41", "SY41", "SY41", "MQ18", "EN21"], 1: ["IA41", "MQ41"], 2: ["AP4B", "GI28"]},
        HALL,
        ["GI21", "GI41"],
    )

    out = _reveal(game, 0, "own_hand", 0)
    assert isinstance(out, TrioComplete)
    assert [rc.position for rc in out.picks] == [0, 1, 2]
    assert any(e["type"] == "CARDS_AUTO_REVEALED" for e in game.event_log)

    res = game.complete_revealed_trio(0)
    assert res.ok
    ana = game.students[0]
    assert ana.credits == 2
    assert ana.trio_count == 1
    assert [c.code for c in ana.hand] == ["MQ18", "EN21"]
    assert game.scoreboard.score(ana) == 2
    assert len(game.lecture_hall) == 9
    assert game.deck.remaining == 2
    # The same player keeps the turn.
    assert game.turn_manager.current_index == 0
    assert game.reveal_state.reveal_count == 0


def test_trio_from_three_sources_refills_hall() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=1)
    _rig(
        game,
        {0: ["IA41", "MQ18", "EN21"], 1: ["IA41", "MQ41", "MQ51"], 2: ["AP4B", "GI28"]},
        ["IA41"] + HALL[1:],
        ["GI21", "GI41"],
    )

    assert isinstance(_reveal(game, 0, "own_hand", 0), Revealed)
    assert isinstance(_reveal(game, 0, "other_hand", 0, source_player=1), Revealed)
    out = _reveal(game, 0, "hall", 0)
    assert isinstance(out, TrioComplete)
    assert [rc.source for rc in out.picks] == ["own_hand", "other_hand", "hall"]

    res = game.complete_revealed_trio(0)
    assert res.ok
    assert len(game.students[0].hand) == 2
    assert [c.code for c in game.students[1].hand] == ["MQ41", "MQ51"]
    assert len(game.lecture_hall) == 9
    assert game.deck.remaining == 1
    assert game.students[0].credits == 2
    types = [e["type"] for e in res.events]
    assert types == ["TRIO_COMPLETED", "HALL_REFILLED"]


def test_hall_refill_stops_when_deck_is_empty() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 2, "individual_simple", ["Ana", "Ben"], seed=1)
    _rig(game, {0: ["SY41", "SY41", "MQ18"], 1: ["AP4B"]}, ["SY41"] + HALL[1:], [])

    out = _reveal(game, 0, "own_hand", 0)
    assert isinstance(out, AutoRevealed)
    assert out.auto_positions == (1,)
    assert isinstance(_reveal(game, 0, "hall", 0), TrioComplete)
    assert game.complete_revealed_trio(0).ok
    assert len(game.lecture_hall) == 8
    assert game.deck.is_empty()


def test_mismatch_passes_the_turn() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=1)
    _rig(game, {0: ["IA41", "MQ18"], 1: ["AP4B"], 2: ["GI28"]}, HALL, [])

    assert isinstance(_reveal(game, 0, "own_hand", 0), Revealed)
    out = _reveal(game, 0, "hall", 1)
    assert isinstance(out, Mismatch)
    assert len(out.picks) == 2

    blocked = _reveal(game, 0, "own_hand", 1)
    assert isinstance(blocked, Invalid)

    res = game.handle_mismatch()
    assert res.ok
    assert game.turn_manager.current_index == 1
    assert game.turn_manager.round_number == 1
    assert game.reveal_state.reveal_count == 0
    assert [c.code for c in game.students[0].hand] == ["IA41", "MQ18"]
    assert len(game.lecture_hall) == 9
    assert not game.handle_mismatch().ok


def test_mismatch_on_third_pick() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=1)
    _rig(game, {0: ["IA41", "MQ18"], 1: ["IA41", "EN21"], 2: ["GI28"]}, HALL, [])

    assert isinstance(_reveal(game, 0, "own_hand", 0), Revealed)
    assert isinstance(_reveal(game, 0, "other_hand", 0, source_player=1), Revealed)
    out = _reveal(game, 0, "hall", 1)
    assert isinstance(out, Mismatch)
    assert len(out.picks) == 3
    assert not game.complete_revealed_trio(0).ok
    assert game.handle_mismatch().ok
    assert game.students[0].credits == 0


def test_last_seat_mismatch_starts_new_round() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=1)
    _rig(game, {0: ["IA41"], 1: ["AP4B"], 2: ["GI28"]}, HALL, [])
    assert game.end_turn(0).ok
    assert game.end_turn(1).ok
    assert game.turn_manager.current_index == 2

    assert isinstance(_reveal(game, 2, "own_hand", 0), Revealed)
    assert isinstance(_reveal(game, 2, "hall", 0), Mismatch)
    assert game.handle_mismatch().ok
    assert game.turn_manager.current_index == 0
    assert game.turn_manager.round_number == 2


def test_invalid_reveals_leave_state_untouched() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=1)
    _rig(
        game,
        {0: ["SY41", "IA41", "MQ18"], 1: ["SY41", "EN21", "EN21"], 2: ["GI28"]},
        HALL,
        [],
    )

    # Not the current player.
    assert isinstance(_reveal(game, 1, "own_hand", 0), Invalid)
    # Middle of own hand.
    assert isinstance(_reveal(game, 0, "own_hand", 1), Invalid)
    # Owner of hand 1 could reveal position 1, other players cannot.
    assert isinstance(_reveal(game, 0, "other_hand", 1, source_player=1), Invalid)
    # Own hand through other_hand.
    assert isinstance(_reveal(game, 0, "other_hand", 0, source_player=0), Invalid)
    # Out of range.
    hall_card = catalog.card("SY41")
    assert isinstance(game.reveal_card(0, hall_card, "hall", None, 9), Invalid)
    # Card that does not sit at that position.
    assert isinstance(game.reveal_card(0, catalog.card("PFE"), "hall", None, 0), Invalid)

    assert game.reveal_state.reveal_count == 0
    assert game.turn_manager.current_index == 0

    assert isinstance(_reveal(game, 0, "hall", 0), Revealed)
    again = _reveal(game, 0, "hall", 0)
    assert isinstance(again, Invalid)
    assert game.reveal_state.reveal_count == 1


def test_source_player_is_ignored_outside_other_hand() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 2, "individual_simple", ["Ana", "Ben"], seed=1)
    _rig(game, {0: ["SY41", "MQ18"], 1: ["AP4B"]}, HALL, [])
    out = game.reveal_card(0, catalog.card("SY41"), "hall", 1, 0)
    assert isinstance(out, Revealed)
    assert out.picks[0].source_player is None


def test_end_turn_clears_reveals() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 2, "individual_simple", ["Ana", "Ben"], seed=1)
    _rig(game, {0: ["SY41", "MQ18"], 1: ["AP4B"]}, HALL, [])
    assert isinstance(_reveal(game, 0, "hall", 0), Revealed)
    assert not game.end_turn(1).ok
    res = game.end_turn(0)
    assert res.ok
    assert [e["type"] for e in res.events] == ["TURN_ENDED", "TURN_PASSED"]
    assert game.reveal_state.reveal_count == 0
    assert game.turn_manager.current_index == 1


def test_end_turn_refused_with_unclaimed_trio() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 2, "individual_simple", ["Ana", "Ben"], seed=1)
    _rig(game, {0: ["SY41", "SY41", "SY41"], 1: ["AP4B"]}, HALL, [])
    assert isinstance(_reveal(game, 0, "own_hand", 2), TrioComplete)
    assert not game.end_turn(0).ok
    assert game.complete_revealed_trio(0).ok
    assert game.end_turn(0).ok


def test_auto_reveal_from_the_low_end() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 2, "individual_simple", ["Ana", "Ben"], seed=1)
    _rig(game, {0: ["SY41", "EN21", "EN21"], 1: ["AP4B"]}, HALL, [])
    out = _reveal(game, 0, "own_hand", 2)
    assert isinstance(out, AutoRevealed)
    assert out.auto_positions == (1,)
    assert game.reveal_state.revealed_code == "EN21"


def test_final_project_trio_graduates_in_advanced_mode() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 2, "individual_advanced", ["Ana", "Ben"], seed=1)
    _rig(game, {0: ["PFE", "PFE", "SY41"], 1: ["AP4B"]}, ["PFE"] + HALL[1:], [])

    out = _reveal(game, 0, "own_hand", 2)
    assert isinstance(out, AutoRevealed)
    assert isinstance(_reveal(game, 0, "hall", 0), TrioComplete)
    res = game.complete_revealed_trio(0)
    assert res.ok
    assert res.events[0]["special"] is True
    assert game.students[0].credits == 6
    assert game.check_victory_conditions() is game.students[0]
    assert game.event_log[-1]["type"] == "GAME_ENDED"


def test_advanced_mode_scores_three() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 2, "individual_advanced", ["Ana", "Ben"], seed=1)
    _rig(game, {0: ["MQ41", "MQ41", "MQ41"], 1: ["AP4B"]}, HALL, [])
    assert isinstance(_reveal(game, 0, "own_hand", 0), TrioComplete)
    assert game.complete_revealed_trio(0).ok
    assert game.students[0].credits == 3
    assert game.check_victory_conditions() is None


def test_six_credits_wins_and_blocks_further_play() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=1)
    _rig(game, {0: ["SY41", "SY41", "SY41", "MQ18"], 1: ["AP4B"], 2: ["GI28"]}, HALL, [])
    game.students[0].credits = 4

    assert isinstance(_reveal(game, 0, "own_hand", 0), TrioComplete)
    assert game.complete_revealed_trio(0).ok
    winner = game.check_victory_conditions()
    assert winner is game.students[0]
    assert game.is_over

    blocked = _reveal(game, 0, "own_hand", 0)
    assert isinstance(blocked, Invalid)
    assert blocked.error == "Game already ended."


def test_first_graduate_in_seat_order_wins() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=1)
    game.students[2].credits = 6
    game.students[1].credits = 7
    assert game.check_victory_conditions() is game.students[1]


def test_claimed_trio_reports_validation_message() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 2, "individual_simple", ["Ana", "Ben"], seed=1)
    _rig(game, {0: ["GI41", "GI41", "GI41"], 1: ["AP4B"]}, HALL, [])
    assert isinstance(_reveal(game, 0, "own_hand", 0), TrioComplete)
    res = game.complete_revealed_trio(0)
    completed = res.events[0]
    assert completed["type"] == "TRIO_COMPLETED"
    assert completed["message"] == "Valid trio."
    assert completed["special"] is False
    assert completed["credits"] == 2


def test_redeal_discards_previous_picks() -> None:
    catalog = _load_catalog()
    game = new_game(catalog, 3, "individual_simple", NAMES, seed=1)
    assert isinstance(_reveal(game, 0, "hall", 0), Revealed)
    assert game.reveal_state.reveal_count == 1
    assert game.initialize().ok
    assert game.reveal_state.reveal_count == 0
    assert isinstance(_reveal(game, 0, "hall", 0), Revealed)
