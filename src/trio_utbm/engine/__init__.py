"""Headless reveal-and-match rules engine for Trio UTBM.

IMPORTANT: This package must never import a UI toolkit.
"""

from .actions import (
    CompleteTrioAction,
    EndTurnAction,
    ResolveMismatchAction,
    RevealAction,
    SkipTradeAction,
    TradeAction,
)
from .controller import GameController, GameStateMachine
from .game import (
    AutoRevealed,
    Game,
    GameConfig,
    Invalid,
    Mismatch,
    Revealed,
    RevealOutcome,
    StepResult,
    TrioComplete,
    new_game,
    replay,
    step,
)
from .types import Card, Category, CourseCatalog, Difficulty, GameMode, GameState, SourceKind

__all__ = [
    "AutoRevealed",
    "Card",
    "Category",
    "CompleteTrioAction",
    "CourseCatalog",
    "Difficulty",
    "EndTurnAction",
    "Game",
    "GameConfig",
    "GameController",
    "GameMode",
    "GameState",
    "GameStateMachine",
    "Invalid",
    "Mismatch",
    "ResolveMismatchAction",
    "RevealAction",
    "RevealOutcome",
    "Revealed",
    "SkipTradeAction",
    "SourceKind",
    "StepResult",
    "TradeAction",
    "TrioComplete",
    "new_game",
    "replay",
    "step",
]
