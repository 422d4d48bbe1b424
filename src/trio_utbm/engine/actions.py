from __future__ import annotations

from dataclasses import dataclass

from .types import SourceKind


@dataclass(frozen=True)
class RevealAction:
    player: int
    source: SourceKind
    position: int
    source_player: int | None = None

    @staticmethod
    def own_hand(player: int, position: int) -> "RevealAction":
        return RevealAction(player=player, source="own_hand", position=position)

    @staticmethod
    def other_hand(player: int, source_player: int, position: int) -> "RevealAction":
        return RevealAction(
            player=player, source="other_hand", position=position, source_player=source_player
        )

    @staticmethod
    def hall(player: int, position: int) -> "RevealAction":
        return RevealAction(player=player, source="hall", position=position)


@dataclass(frozen=True)
class CompleteTrioAction:
    player: int


@dataclass(frozen=True)
class ResolveMismatchAction:
    pass


@dataclass(frozen=True)
class EndTurnAction:
    player: int


@dataclass(frozen=True)
class TradeAction:
    team: int
    first_position: int
    second_position: int


@dataclass(frozen=True)
class SkipTradeAction:
    team: int


Action = (
    RevealAction
    | CompleteTrioAction
    | ResolveMismatchAction
    | EndTurnAction
    | TradeAction
    | SkipTradeAction
)
