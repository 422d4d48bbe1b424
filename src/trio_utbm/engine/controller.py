from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from .actions import (
    Action,
    CompleteTrioAction,
    EndTurnAction,
    ResolveMismatchAction,
    RevealAction,
    SkipTradeAction,
    TradeAction,
)
from .game import Event, Game, GameConfig, Invalid, RevealOutcome, StepResult, step
from .players import Student
from .types import MODE_NAMES, Card, CourseCatalog, Difficulty, GameMode, GameState, SourceKind

if TYPE_CHECKING:
    from trio_utbm.services.telemetry import TelemetryService

_TRANSITIONS: dict[GameState, tuple[GameState, ...]] = {
    "setup": ("playing",),
    "playing": ("checking_victory", "game_over"),
    "checking_victory": ("playing", "game_over"),
    "game_over": ("setup",),
}

STATE_DESCRIPTIONS: dict[GameState, str] = {
    "setup": "Setting up the game...",
    "playing": "Game in progress",
    "checking_victory": "Checking for winner...",
    "game_over": "Game has ended",
}


class GameStateMachine:
    def __init__(self) -> None:
        self.state: GameState = "setup"
        self.history: list[tuple[GameState, GameState]] = []

    def can_transition(self, to: GameState) -> bool:
        return to in _TRANSITIONS[self.state]

    def transition_to(self, to: GameState) -> bool:
        if not self.can_transition(to):
            return False
        self.history.append((self.state, to))
        self.state = to
        return True

    def reset(self) -> None:
        self.state = "setup"

    @property
    def is_playing(self) -> bool:
        return self.state == "playing"

    @property
    def is_game_over(self) -> bool:
        return self.state == "game_over"

    @property
    def description(self) -> str:
        return STATE_DESCRIPTIONS[self.state]


class GameController:
    """Gatekeeper between a UI and the engine.

    Only lets moves through while the game is playing, runs the victory check
    after each claimed trio, and forwards engine events to telemetry.
    """

    def __init__(
        self,
        catalog: CourseCatalog,
        seed: int = 0,
        config: GameConfig | None = None,
        telemetry: TelemetryService | None = None,
    ) -> None:
        self.game = Game(catalog, seed=seed, config=config)
        self.machine = GameStateMachine()
        self.telemetry = telemetry
        self._forwarded = 0

    def _flush(self) -> None:
        events = self.game.event_log[self._forwarded :]
        self._forwarded = len(self.game.event_log)
        if self.telemetry is not None and events:
            self.telemetry.log_events(events)

    def _transition(self, to: GameState) -> bool:
        before = self.machine.state
        ok = self.machine.transition_to(to)
        if ok and self.telemetry is not None:
            self.telemetry.log("STATE_CHANGED", {"from": before, "to": to})
        return ok

    @property
    def state(self) -> GameState:
        return self.machine.state

    @property
    def is_running(self) -> bool:
        return self.machine.is_playing

    @property
    def current_player(self) -> Student | None:
        return self.game.current_player

    @property
    def winner(self) -> Student | None:
        return self.game.winner

    def initialize_game(
        self,
        player_count: int,
        mode: GameMode,
        difficulty: Difficulty | None,
        names: Sequence[str],
    ) -> StepResult:
        res = self.game.configure(player_count, mode, difficulty, names)
        if not res.ok:
            self._flush()
            return res
        dealt = self.game.initialize()
        self.machine.reset()
        self._flush()
        return StepResult(ok=dealt.ok, events=res.events + dealt.events, error=dealt.error)

    def start_game(self) -> StepResult:
        if self.machine.state != "setup" or not self.game.initialized:
            return StepResult(ok=False, events=[], error="Game is not set up.")
        res = self.game.start_game()
        if res.ok:
            self._transition("playing")
        self._flush()
        return res

    def _apply(self, action: Action) -> RevealOutcome | StepResult:
        # Every move goes through step(): the action log must replay the game.
        result = step(self.game, action)
        self._flush()
        return result

    def _apply_step(self, action: Action) -> StepResult:
        if not self.machine.is_playing:
            return StepResult(ok=False, events=[], error="Game is not in playing state.")
        res = self._apply(action)
        assert isinstance(res, StepResult)
        return res

    def reveal_card(
        self,
        player: int,
        card: Card,
        source: SourceKind,
        source_player: int | None,
        position: int,
    ) -> RevealOutcome:
        if not self.machine.is_playing:
            return Invalid(verdict="invalid", error="Game is not in playing state.")
        located = self.game.card_at(player, source, source_player, position)
        if located is None or located != card:
            return Invalid(verdict="invalid", error="Card does not match that position.")
        outcome = self._apply(
            RevealAction(
                player=player, source=source, position=position, source_player=source_player
            )
        )
        assert not isinstance(outcome, StepResult)
        return outcome

    def complete_revealed_trio(self, player: int) -> StepResult:
        res = self._apply_step(CompleteTrioAction(player=player))
        if res.ok:
            # step() has already decided the winner; only the state machine moves here.
            self.check_victory()
        return res

    def handle_mismatch(self) -> StepResult:
        return self._apply_step(ResolveMismatchAction())

    def end_turn(self, player: int) -> StepResult:
        return self._apply_step(EndTurnAction(player=player))

    def trade_cards(self, team_id: int, first_position: int, second_position: int) -> StepResult:
        return self._apply_step(
            TradeAction(
                team=team_id, first_position=first_position, second_position=second_position
            )
        )

    def skip_trade(self, team_id: int) -> StepResult:
        return self._apply_step(SkipTradeAction(team=team_id))

    def check_victory(self) -> Student | None:
        if not self._transition("checking_victory"):
            return self.game.winner
        winner = self.game.check_victory_conditions()
        self._flush()
        self._transition("game_over" if winner is not None else "playing")
        return winner

    def end_game(self) -> bool:
        ok = self._transition("game_over")
        self._flush()
        return ok

    def game_info(self) -> dict[str, object]:
        g = self.game
        cur = g.current_player
        return {
            "state": self.machine.state,
            "description": self.machine.description,
            "mode": MODE_NAMES[g.mode] if g.mode is not None else None,
            "players": g.player_count,
            "round": g.turn_manager.round_number,
            "current_player": cur.name if cur is not None else None,
            "deck_remaining": g.deck.remaining,
            "hall": len(g.lecture_hall),
        }

    def recent_events(self, count: int = 10) -> list[Event]:
        return self.game.event_log[-count:]
