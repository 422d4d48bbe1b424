from __future__ import annotations

import random
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Literal

from .actions import (
    Action,
    CompleteTrioAction,
    EndTurnAction,
    ResolveMismatchAction,
    RevealAction,
    SkipTradeAction,
    TradeAction,
)
from .cards import HALL_CAPACITY, Deck, LectureHall
from .players import Student, Team
from .reveal import RevealedCard, RevealState
from .scoreboard import ScoreBoard
from .trio import ScoringRules, Trio, check_trio
from .turns import TurnManager
from .types import (
    ALL_MODES,
    Card,
    CourseCatalog,
    Difficulty,
    GameMode,
    SourceKind,
    is_team_mode,
    mode_difficulty,
)
from .visibility import duplicate_run, first_last_positions, revealable_positions

Event = dict[str, object]

DEFAULT_HAND_SIZES: dict[int, int] = {2: 6, 3: 5, 4: 5, 5: 4, 6: 4}


@dataclass(frozen=True)
class GameConfig:
    min_players: int = 2
    max_players: int = 6
    hall_capacity: int = HALL_CAPACITY
    graduation_credits: int = 6
    scoring: ScoringRules = field(default_factory=ScoringRules)
    # Cards dealt to each student in individual modes, by player count.
    hand_sizes: Mapping[int, int] = field(default_factory=lambda: dict(DEFAULT_HAND_SIZES))

    def hand_size(self, player_count: int) -> int:
        return self.hand_sizes.get(player_count, min(self.hand_sizes.values()))


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


Verdict = Literal["revealed", "auto_reveal", "trio_complete", "mismatch", "invalid"]


@dataclass(frozen=True)
class Revealed:
    verdict: Literal["revealed"]
    picks: tuple[RevealedCard, ...]


@dataclass(frozen=True)
class AutoRevealed:
    verdict: Literal["auto_reveal"]
    picks: tuple[RevealedCard, ...]
    auto_positions: tuple[int, ...]


@dataclass(frozen=True)
class TrioComplete:
    verdict: Literal["trio_complete"]
    picks: tuple[RevealedCard, ...]


@dataclass(frozen=True)
class Mismatch:
    verdict: Literal["mismatch"]
    picks: tuple[RevealedCard, ...]


@dataclass(frozen=True)
class Invalid:
    verdict: Literal["invalid"]
    error: str


RevealOutcome = Revealed | AutoRevealed | TrioComplete | Mismatch | Invalid


class Game:
    """One match: owns the deck, hall, students, teams, turn order and reveal state.

    Every operation returns a result object instead of raising; a rejected
    move leaves the game untouched and keeps the turn with the same player.
    """

    def __init__(
        self, catalog: CourseCatalog, seed: int = 0, config: GameConfig | None = None
    ) -> None:
        self.catalog = catalog
        self.config = config or GameConfig()
        self.seed = seed
        self.rng = random.Random(seed)
        self.scoring = replace(self.config.scoring, special_code=catalog.special_code)

        self.students: list[Student] = []
        self.teams: list[Team] = []
        self.deck = Deck([])
        self.lecture_hall = LectureHall(self.config.hall_capacity)
        self.scoreboard = ScoreBoard()
        self.turn_manager = TurnManager([])
        self.reveal_state = RevealState()

        self.mode: GameMode | None = None
        self.difficulty: Difficulty | None = None
        self.player_count = 0
        self.initialized = False
        self.winner: Student | None = None
        self.pending_trades: set[int] = set()

        self.event_log: list[Event] = []
        self.action_log: list[Action] = []

    # ------------------------------------------------------------------ setup

    def configure(
        self,
        player_count: int,
        mode: GameMode,
        difficulty: Difficulty | None,
        names: Sequence[str],
    ) -> StepResult:
        cfg = self.config
        if mode not in ALL_MODES:
            return StepResult(ok=False, events=[], error=f"Unknown game mode: {mode}.")
        if not cfg.min_players <= player_count <= cfg.max_players:
            return StepResult(
                ok=False,
                events=[],
                error=f"Must have {cfg.min_players}-{cfg.max_players} players.",
            )
        if len(names) != player_count:
            return StepResult(ok=False, events=[], error="Player names don't match player count.")
        if any(not n.strip() for n in names):
            return StepResult(ok=False, events=[], error="Player names cannot be empty.")
        if len(set(names)) != len(names):
            return StepResult(ok=False, events=[], error="Player names must be unique.")
        if is_team_mode(mode) and player_count % 2 != 0:
            return StepResult(
                ok=False, events=[], error="Team mode requires an even number of players."
            )
        if difficulty is not None and difficulty != mode_difficulty(mode):
            return StepResult(
                ok=False, events=[], error=f"Difficulty {difficulty} does not fit mode {mode}."
            )

        self.students = [Student(id=i, name=name) for i, name in enumerate(names)]
        self.teams = []
        self.deck = Deck([])
        self.lecture_hall = LectureHall(cfg.hall_capacity)
        self.scoreboard = ScoreBoard()
        self.reveal_state.clear()
        self.mode = mode
        self.difficulty = mode_difficulty(mode)
        self.player_count = player_count
        self.initialized = False
        self.winner = None
        self.pending_trades.clear()

        for s in self.students:
            self.scoreboard.register_student(s)
        if is_team_mode(mode):
            self._create_teams()
        self.turn_manager = TurnManager(self.students)

        mark = len(self.event_log)
        self.event_log.append(
            {
                "type": "GAME_CONFIGURED",
                "mode": mode,
                "players": [s.name for s in self.students],
            }
        )
        return StepResult(ok=True, events=self.event_log[mark:])

    def _create_teams(self) -> None:
        for i in range(0, len(self.students) - 1, 2):
            team = Team(id=i // 2, name=f"Team {i // 2 + 1}")
            team.add_member(self.students[i])
            team.add_member(self.students[i + 1])
            self.teams.append(team)
            self.scoreboard.register_team(team)

    def initialize(self) -> StepResult:
        """Build and shuffle the deck, then deal hands and the lecture hall."""
        if self.mode is None:
            return StepResult(ok=False, events=[], error="Game is not configured.")

        self.deck = Deck.from_catalog(self.catalog)
        self.deck.shuffle(self.rng)
        self.lecture_hall.clear()
        for s in self.students:
            s.hand.clear()
        # Old picks point at positions of the previous deal.
        self.reveal_state.clear()
        self.pending_trades.clear()

        if is_team_mode(self.mode):
            # Team rules play without a lecture hall: the whole deck is dealt.
            per_player = self.deck.remaining // self.player_count
        else:
            per_player = self.config.hand_size(self.player_count)

        for s in self.students:
            for _ in range(per_player):
                card = self.deck.deal()
                if card is None:
                    break
                s.hand.add_card(card)

        if self._hall_in_play():
            self.lecture_hall.refill(self.deck)

        self.initialized = True
        mark = len(self.event_log)
        self.event_log.append(
            {
                "type": "CARDS_DEALT",
                "hand_sizes": [len(s.hand) for s in self.students],
                "hall": len(self.lecture_hall),
                "deck": self.deck.remaining,
            }
        )
        return StepResult(ok=True, events=self.event_log[mark:])

    def start_game(self) -> StepResult:
        if not self.initialized:
            return StepResult(ok=False, events=[], error="Game is not initialized.")
        self.turn_manager.reset()
        self.reveal_state.clear()
        self.pending_trades.clear()
        self.winner = None
        mark = len(self.event_log)
        self.event_log.append({"type": "GAME_STARTED", "player": self.turn_manager.current_index})
        return StepResult(ok=True, events=self.event_log[mark:])

    # -------------------------------------------------------------- accessors

    @property
    def current_player(self) -> Student | None:
        return self.turn_manager.current_student

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    def student(self, index: int | None) -> Student | None:
        if index is None or not 0 <= index < len(self.students):
            return None
        return self.students[index]

    def student_by_name(self, name: str) -> Student | None:
        for s in self.students:
            if s.name == name:
                return s
        return None

    def team(self, team_id: int) -> Team | None:
        for t in self.teams:
            if t.id == team_id:
                return t
        return None

    def team_of(self, student: Student) -> Team | None:
        if student.team_id is None:
            return None
        return self.team(student.team_id)

    def visible_positions(self, viewer: int, target: int) -> list[int]:
        """Positions of `target`'s hand that `viewer` may click."""
        s = self.student(target)
        if s is None:
            return []
        return revealable_positions(s.hand, owner=viewer == target)

    def card_at(
        self, player: int, source: SourceKind, source_player: int | None, position: int
    ) -> Card | None:
        if source == "own_hand":
            s = self.student(player)
            return s.hand.card_at(position) if s is not None else None
        if source == "other_hand":
            s = self.student(source_player)
            return s.hand.card_at(position) if s is not None else None
        if source == "hall":
            return self.lecture_hall.card_at(position)
        return None

    def _hall_in_play(self) -> bool:
        return self.mode is not None and not is_team_mode(self.mode)

    # ---------------------------------------------------------------- reveals

    def _revealed_trio(self) -> Trio | None:
        if self.reveal_state.reveal_count != 3:
            return None
        return Trio.of([rc.card for rc in self.reveal_state.revealed_cards])

    def _pending_verdict(self) -> Verdict | None:
        """What the caller still owes the engine for the picks on the table."""
        trio = self._revealed_trio()
        if trio is not None:
            assert self.mode is not None
            if self.reveal_state.is_valid_trio() and trio.is_valid_for_mode(self.mode):
                return "trio_complete"
            return "mismatch"
        if self.reveal_state.has_mismatch():
            return "mismatch"
        return None

    def _turn_error(self, player: int) -> str | None:
        if not self.initialized:
            return "Game is not initialized."
        if self.winner is not None:
            return "Game already ended."
        if player != self.turn_manager.current_index:
            return "Not your turn."
        return None

    def _validate_position(
        self, player: int, source: SourceKind, source_player: int | None, position: int
    ) -> str | None:
        if source == "own_hand":
            hand = self.students[player].hand
            if position not in revealable_positions(hand, owner=True):
                return "That card of your hand cannot be revealed."
            return None
        if source == "other_hand":
            other = self.student(source_player)
            if other is None:
                return "Unknown player."
            if other.id == player:
                return "Reveal your own cards from your hand."
            if position not in first_last_positions(other.hand):
                return "Only the first or last card of another hand can be revealed."
            return None
        if source == "hall":
            if self.lecture_hall.card_at(position) is None:
                return "Invalid lecture hall position."
            return None
        return f"Unknown source: {source}."

    def reveal_card(
        self,
        player: int,
        card: Card,
        source: SourceKind,
        source_player: int | None,
        position: int,
    ) -> RevealOutcome:
        err = self._turn_error(player)
        if err is not None:
            return Invalid(verdict="invalid", error=err)
        if self._pending_verdict() is not None or not self.reveal_state.can_reveal_more():
            return Invalid(verdict="invalid", error="Resolve the current reveal first.")

        if source != "other_hand":
            source_player = None
        err = self._validate_position(player, source, source_player, position)
        if err is not None:
            return Invalid(verdict="invalid", error=err)
        located = self.card_at(player, source, source_player, position)
        if located is None or located != card:
            return Invalid(verdict="invalid", error="Card does not match that position.")

        if not self.reveal_state.add_reveal(located, source, source_player, position):
            return Invalid(verdict="invalid", error="That card is already revealed this turn.")

        # Trade offers from the previous trio lapse once play resumes.
        self.pending_trades.clear()
        self.event_log.append(
            {
                "type": "CARD_REVEALED",
                "player": player,
                "source": source,
                "source_player": source_player,
                "position": position,
                "code": located.code,
            }
        )

        auto: list[int] = []
        if source == "own_hand":
            hand = self.students[player].hand
            for dup in duplicate_run(hand, position):
                if not self.reveal_state.can_reveal_more():
                    break
                dup_card = hand.card_at(dup)
                if dup_card is None:
                    continue
                if self.reveal_state.add_reveal(dup_card, "own_hand", None, dup):
                    auto.append(dup)
            if auto:
                self.event_log.append(
                    {
                        "type": "CARDS_AUTO_REVEALED",
                        "player": player,
                        "positions": list(auto),
                        "code": located.code,
                    }
                )

        picks = self.reveal_state.revealed_cards
        verdict = self._pending_verdict()
        if verdict == "trio_complete":
            self.event_log.append({"type": "TRIO_READY", "player": player, "code": located.code})
            return TrioComplete(verdict="trio_complete", picks=picks)
        if verdict == "mismatch":
            self.event_log.append(
                {"type": "MISMATCH", "player": player, "codes": [rc.card.code for rc in picks]}
            )
            return Mismatch(verdict="mismatch", picks=picks)
        if auto:
            return AutoRevealed(verdict="auto_reveal", picks=picks, auto_positions=tuple(auto))
        return Revealed(verdict="revealed", picks=picks)

    def complete_revealed_trio(self, player: int) -> StepResult:
        err = self._turn_error(player)
        if err is not None:
            return StepResult(ok=False, events=[], error=err)
        if self._pending_verdict() != "trio_complete":
            return StepResult(ok=False, events=[], error="No completed trio to claim.")
        assert self.mode is not None

        mark = len(self.event_log)
        picks = self.reveal_state.revealed_cards
        trio = Trio.of([rc.card for rc in picks])
        check = check_trio(trio.cards, self.mode, self.scoring)
        credits = check.credits

        student = self.students[player]
        student.add_credits(credits)
        student.add_trio(trio)
        self.scoreboard.update_score(student, credits)
        self.scoreboard.record_trio(student, trio)

        team = self.team_of(student)
        if team is not None:
            team.add_credits(credits)
            team.add_trio(trio)
            self.scoreboard.update_team_score(team, credits)
            self.scoreboard.record_team_trio(team, trio)

        self._remove_picks(student, picks)
        self.event_log.append(
            {
                "type": "TRIO_COMPLETED",
                "player": player,
                "code": trio.code,
                "credits": credits,
                "total": student.credits,
                "special": check.special,
                "message": check.message,
            }
        )

        if self._hall_in_play():
            drawn = self.lecture_hall.refill(self.deck)
            self.event_log.append(
                {
                    "type": "HALL_REFILLED",
                    "drawn": len(drawn),
                    "hall": len(self.lecture_hall),
                    "deck": self.deck.remaining,
                }
            )

        self.reveal_state.clear()
        if team is not None:
            self.pending_trades = {t.id for t in self.teams if t.id != team.id}
        # No turn advance: a completed trio earns the same player another go.
        return StepResult(ok=True, events=self.event_log[mark:])

    def _remove_picks(self, student: Student, picks: Iterable[RevealedCard]) -> None:
        by_container: dict[tuple[SourceKind, int | None], list[int]] = {}
        for rc in picks:
            by_container.setdefault((rc.source, rc.source_player), []).append(rc.position)

        for (source, source_player), positions in by_container.items():
            # Highest position first so earlier removals don't shift later ones.
            for pos in sorted(positions, reverse=True):
                if source == "own_hand":
                    student.hand.remove_at(pos)
                elif source == "other_hand":
                    other = self.student(source_player)
                    if other is not None:
                        other.hand.remove_at(pos)
                else:
                    self.lecture_hall.remove_at(pos)

    def _advance_turn(self) -> None:
        self.reveal_state.clear()
        self.turn_manager.next_turn()
        self.event_log.append(
            {
                "type": "TURN_PASSED",
                "player": self.turn_manager.current_index,
                "round": self.turn_manager.round_number,
            }
        )

    def handle_mismatch(self) -> StepResult:
        if self._pending_verdict() != "mismatch":
            return StepResult(ok=False, events=[], error="No mismatch to resolve.")
        mark = len(self.event_log)
        self.event_log.append(
            {
                "type": "MISMATCH_RESOLVED",
                "player": self.turn_manager.current_index,
                "revealed": [
                    {
                        "source": rc.source,
                        "source_player": rc.source_player,
                        "position": rc.position,
                        "code": rc.card.code,
                    }
                    for rc in self.reveal_state.revealed_cards
                ],
            }
        )
        self._advance_turn()
        return StepResult(ok=True, events=self.event_log[mark:])

    def end_turn(self, player: int) -> StepResult:
        err = self._turn_error(player)
        if err is not None:
            return StepResult(ok=False, events=[], error=err)
        if self._pending_verdict() == "trio_complete":
            return StepResult(ok=False, events=[], error="Claim the completed trio first.")
        mark = len(self.event_log)
        self.event_log.append({"type": "TURN_ENDED", "player": player})
        self._advance_turn()
        return StepResult(ok=True, events=self.event_log[mark:])

    # ---------------------------------------------------------------- trading

    def trade_cards(self, team_id: int, first_position: int, second_position: int) -> StepResult:
        """Swap one card between the two members of a team offered a trade."""
        team = self.team(team_id)
        if team is None:
            return StepResult(ok=False, events=[], error="Unknown team.")
        if team_id not in self.pending_trades:
            return StepResult(ok=False, events=[], error="No trade offered to this team.")
        if len(team.members) != 2:
            return StepResult(ok=False, events=[], error="Trading needs two team members.")

        first, second = team.members
        if first.hand.card_at(first_position) is None:
            return StepResult(ok=False, events=[], error=f"Invalid card position for {first.name}.")
        if second.hand.card_at(second_position) is None:
            return StepResult(
                ok=False, events=[], error=f"Invalid card position for {second.name}."
            )

        given = first.hand.remove_at(first_position)
        received = second.hand.remove_at(second_position)
        assert given is not None and received is not None
        first.hand.add_card(received)
        second.hand.add_card(given)
        self.pending_trades.discard(team_id)

        mark = len(self.event_log)
        # Cards change hands face down: only the fact of the trade is public.
        self.event_log.append(
            {"type": "CARDS_TRADED", "team": team_id, "members": [first.id, second.id]}
        )
        return StepResult(ok=True, events=self.event_log[mark:])

    def skip_trade(self, team_id: int) -> StepResult:
        if team_id not in self.pending_trades:
            return StepResult(ok=False, events=[], error="No trade offered to this team.")
        self.pending_trades.discard(team_id)
        mark = len(self.event_log)
        self.event_log.append({"type": "TRADE_SKIPPED", "team": team_id})
        return StepResult(ok=True, events=self.event_log[mark:])

    # ---------------------------------------------------------------- victory

    def check_victory_conditions(self) -> Student | None:
        if self.mode is None:
            return None
        if self.winner is not None:
            return self.winner

        threshold = self.config.graduation_credits
        winner: Student | None = None
        if is_team_mode(self.mode):
            for team in self.teams:
                if team.has_graduated(threshold) and team.members:
                    winner = team.members[0]
                    break
        else:
            for s in self.students:
                if s.has_graduated(threshold):
                    winner = s
                    break

        if winner is not None:
            self.winner = winner
            self.pending_trades.clear()
            event: Event = {"type": "GAME_ENDED", "winner": winner.id, "credits": winner.credits}
            team = self.team_of(winner)
            if team is not None:
                event["team"] = team.id
                event["team_credits"] = team.credits
            self.event_log.append(event)
        return winner


def step(game: Game, action: Action) -> RevealOutcome | StepResult:
    """Apply a single action to the game.

    Mutates `game` in place; deterministic for a given (seed, configuration,
    action sequence).
    """
    # Log first so replay has a full record of attempted actions
    game.action_log.append(action)

    if isinstance(action, RevealAction):
        card = game.card_at(action.player, action.source, action.source_player, action.position)
        if card is None:
            return Invalid(verdict="invalid", error="No card at that position.")
        return game.reveal_card(
            action.player, card, action.source, action.source_player, action.position
        )
    if isinstance(action, CompleteTrioAction):
        result = game.complete_revealed_trio(action.player)
        if result.ok:
            game.check_victory_conditions()
        return result
    if isinstance(action, ResolveMismatchAction):
        return game.handle_mismatch()
    if isinstance(action, EndTurnAction):
        return game.end_turn(action.player)
    if isinstance(action, TradeAction):
        return game.trade_cards(action.team, action.first_position, action.second_position)
    if isinstance(action, SkipTradeAction):
        return game.skip_trade(action.team)
    return StepResult(ok=False, events=[], error="Unknown action.")


def new_game(
    catalog: CourseCatalog,
    player_count: int,
    mode: GameMode,
    names: Sequence[str],
    seed: int,
    config: GameConfig | None = None,
) -> Game:
    """Configure, deal and start a game in one call."""
    game = Game(catalog, seed=seed, config=config)
    res = game.configure(player_count, mode, None, names)
    if not res.ok:
        raise ValueError(res.error)
    game.initialize()
    game.start_game()
    return game


def replay(
    catalog: CourseCatalog,
    player_count: int,
    mode: GameMode,
    names: Sequence[str],
    seed: int,
    actions: Iterable[Action],
    config: GameConfig | None = None,
) -> Game:
    game = new_game(catalog, player_count, mode, names, seed=seed, config=config)
    for a in actions:
        step(game, a)
        if game.winner is not None:
            break
    return game
