from __future__ import annotations

from .actions import (
    Action,
    CompleteTrioAction,
    EndTurnAction,
    ResolveMismatchAction,
    RevealAction,
    SkipTradeAction,
    TradeAction,
)
from .game import AutoRevealed, Game, Invalid, RevealOutcome
from .players import Student, Team
from .reveal import RevealedCard
from .types import Card


def card_to_dict(c: Card) -> dict[str, object]:
    return {"code": c.code, "category": c.category, "rank": c.rank}


def _pick_to_dict(rc: RevealedCard) -> dict[str, object]:
    return {
        "card": card_to_dict(rc.card),
        "source": rc.source,
        "source_player": rc.source_player,
        "position": rc.position,
    }


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, RevealAction):
        return {
            "type": "reveal",
            "player": a.player,
            "source": a.source,
            "source_player": a.source_player,
            "position": a.position,
        }
    if isinstance(a, CompleteTrioAction):
        return {"type": "complete_trio", "player": a.player}
    if isinstance(a, ResolveMismatchAction):
        return {"type": "resolve_mismatch"}
    if isinstance(a, EndTurnAction):
        return {"type": "end_turn", "player": a.player}
    if isinstance(a, TradeAction):
        return {
            "type": "trade",
            "team": a.team,
            "first_position": a.first_position,
            "second_position": a.second_position,
        }
    if isinstance(a, SkipTradeAction):
        return {"type": "skip_trade", "team": a.team}
    # should be unreachable
    return {"type": "unknown"}


def outcome_to_dict(o: RevealOutcome) -> dict[str, object]:
    if isinstance(o, Invalid):
        return {"verdict": o.verdict, "error": o.error}
    out: dict[str, object] = {
        "verdict": o.verdict,
        "picks": [_pick_to_dict(rc) for rc in o.picks],
    }
    if isinstance(o, AutoRevealed):
        out["auto_positions"] = list(o.auto_positions)
    return out


def _student_to_dict(s: Student) -> dict[str, object]:
    return {
        "id": s.id,
        "name": s.name,
        "hand": [card_to_dict(c) for c in s.hand],
        "credits": s.credits,
        "trios": [t.code for t in s.trios],
        "team_id": s.team_id,
    }


def _team_to_dict(t: Team) -> dict[str, object]:
    return {
        "id": t.id,
        "name": t.name,
        "members": [m.id for m in t.members],
        "credits": t.credits,
        "trios": [tr.code for tr in t.trios],
    }


def snapshot(game: Game) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current game state."""
    return {
        "seed": game.seed,
        "mode": game.mode,
        "difficulty": game.difficulty,
        "current_player": game.turn_manager.current_index,
        "round": game.turn_manager.round_number,
        "winner": game.winner.id if game.winner is not None else None,
        "students": [_student_to_dict(s) for s in game.students],
        "teams": [_team_to_dict(t) for t in game.teams],
        "lecture_hall": [card_to_dict(c) for c in game.lecture_hall.cards],
        "deck": [card_to_dict(c) for c in game.deck.cards],
        "reveal": [_pick_to_dict(rc) for rc in game.reveal_state.revealed_cards],
        "pending_trades": sorted(game.pending_trades),
        "action_log": [action_to_dict(a) for a in game.action_log],
    }


def public_view(game: Game, viewer: int) -> dict[str, object]:
    """What `viewer` may see: own hand in full, other hands as sizes plus clickable ends."""
    hands: list[dict[str, object]] = []
    for s in game.students:
        entry: dict[str, object] = {
            "id": s.id,
            "name": s.name,
            "size": len(s.hand),
            "clickable": game.visible_positions(viewer, s.id),
        }
        if s.id == viewer:
            entry["cards"] = [card_to_dict(c) for c in s.hand]
        hands.append(entry)
    return {
        "viewer": viewer,
        "current_player": game.turn_manager.current_index,
        "round": game.turn_manager.round_number,
        "hands": hands,
        "lecture_hall": [card_to_dict(c) for c in game.lecture_hall.cards],
        "deck_remaining": game.deck.remaining,
        "reveal": [_pick_to_dict(rc) for rc in game.reveal_state.revealed_cards],
        "scores": game.scoreboard.snapshot(),
    }
