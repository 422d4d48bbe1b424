from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

Category = Literal[
    "computer_science",
    "industrial_engineering",
    "mechanical_engineering",
    "energy_engineering",
    "special",
]

GameMode = Literal["individual_simple", "individual_advanced", "team_simple", "team_advanced"]
Difficulty = Literal["simple", "advanced"]

# Where a revealed card was picked from during a turn.
SourceKind = Literal["own_hand", "other_hand", "hall"]

GameState = Literal["setup", "playing", "checking_victory", "game_over"]

CATEGORY_NAMES: dict[Category, str] = {
    "computer_science": "Computer Science",
    "industrial_engineering": "Industrial Engineering",
    "mechanical_engineering": "Mechanical Engineering",
    "energy_engineering": "Energy Engineering",
    "special": "Special",
}

MODE_NAMES: dict[GameMode, str] = {
    "individual_simple": "Individual Simple",
    "individual_advanced": "Individual Advanced",
    "team_simple": "Team Simple",
    "team_advanced": "Team Advanced",
}

ALL_MODES: tuple[GameMode, ...] = tuple(MODE_NAMES.keys())

DEFAULT_SPECIAL_CODE = "PFE"


def is_team_mode(mode: GameMode) -> bool:
    return mode in ("team_simple", "team_advanced")


def is_advanced_mode(mode: GameMode) -> bool:
    return mode in ("individual_advanced", "team_advanced")


def mode_difficulty(mode: GameMode) -> Difficulty:
    return "advanced" if is_advanced_mode(mode) else "simple"


@dataclass(frozen=True)
class Card:
    """A course card.

    Cards compare and hash by course code only: two copies of the same course
    are interchangeable for matching. Rank drives hand ordering and the
    visibility rules; category matters only in advanced modes.
    """

    code: str
    category: Category = field(compare=False)
    rank: int = field(compare=False)

    def matches(self, other: Card | None) -> bool:
        if other is None:
            return False
        return self.code == other.code

    def __str__(self) -> str:
        return f"{self.code} (rank {self.rank})"


@dataclass(frozen=True)
class CourseDefinition:
    code: str
    category: Category
    rank: int
    copies: int
    title: str = ""

    def make_card(self) -> Card:
        return Card(code=self.code, category=self.category, rank=self.rank)


@dataclass(frozen=True)
class CourseCatalog:
    """Immutable course catalog used to build decks."""

    courses: dict[str, CourseDefinition]
    special_code: str = DEFAULT_SPECIAL_CODE

    def get(self, code: str) -> CourseDefinition:
        return self.courses[code]

    def card(self, code: str) -> Card:
        return self.courses[code].make_card()

    def all_codes(self) -> Sequence[str]:
        return list(self.courses.keys())

    def deck_size(self) -> int:
        return sum(c.copies for c in self.courses.values())

    def is_special(self, card: Card) -> bool:
        return card.code == self.special_code
