from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .types import DEFAULT_SPECIAL_CODE, Card, GameMode, is_advanced_mode


@dataclass(frozen=True)
class ScoringRules:
    simple_trio_credits: int = 2
    advanced_trio_credits: int = 3
    # A trio of the final project graduates its owner on the spot.
    special_trio_credits: int = 6
    special_code: str = DEFAULT_SPECIAL_CODE

    def credits_per_trio(self, mode: GameMode) -> int:
        return self.advanced_trio_credits if is_advanced_mode(mode) else self.simple_trio_credits


@dataclass(frozen=True)
class Trio:
    cards: tuple[Card, Card, Card]

    @staticmethod
    def of(cards: Sequence[Card]) -> "Trio":
        if len(cards) != 3:
            raise ValueError(f"A trio needs exactly 3 cards, got {len(cards)}.")
        return Trio(cards=(cards[0], cards[1], cards[2]))

    @property
    def code(self) -> str:
        return self.cards[0].code

    @property
    def category(self) -> str:
        return self.cards[0].category

    def is_matching(self) -> bool:
        a, b, c = self.cards
        return a.matches(b) and b.matches(c)

    def is_same_category(self) -> bool:
        a, b, c = self.cards
        return a.category == b.category == c.category

    def is_valid_for_mode(self, mode: GameMode) -> bool:
        if not self.is_matching():
            return False
        if is_advanced_mode(mode):
            return self.is_same_category()
        return True

    def is_special(self, special_code: str = DEFAULT_SPECIAL_CODE) -> bool:
        return all(c.code == special_code for c in self.cards)

    def credits(self, mode: GameMode, rules: ScoringRules | None = None) -> int:
        r = rules or ScoringRules()
        if not self.is_valid_for_mode(mode):
            return 0
        if self.is_special(r.special_code):
            return r.special_trio_credits
        return r.credits_per_trio(mode)

    def __str__(self) -> str:
        return " + ".join(c.code for c in self.cards)


@dataclass(frozen=True)
class TrioCheck:
    valid: bool
    credits: int
    message: str
    special: bool = False


def check_trio(cards: Sequence[Card], mode: GameMode, rules: ScoringRules | None = None) -> TrioCheck:
    """Judge three cards against the mode and explain the verdict."""
    r = rules or ScoringRules()
    if len(cards) != 3:
        return TrioCheck(valid=False, credits=0, message=f"Need exactly 3 cards, got {len(cards)}.")

    trio = Trio.of(cards)
    if not trio.is_matching():
        codes = ", ".join(c.code for c in cards)
        return TrioCheck(valid=False, credits=0, message=f"Cards don't match: {codes}.")

    if is_advanced_mode(mode) and not trio.is_same_category():
        cats = ", ".join(c.category for c in cards)
        return TrioCheck(
            valid=False,
            credits=0,
            message=f"Advanced mode requires one category, got: {cats}.",
        )

    special = trio.is_special(r.special_code)
    return TrioCheck(valid=True, credits=trio.credits(mode, r), message="Valid trio.", special=special)
