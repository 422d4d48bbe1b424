from __future__ import annotations

from dataclasses import dataclass, field

from .cards import Hand
from .trio import Trio

TEAM_SIZE = 2


@dataclass(eq=False)
class Student:
    id: int
    name: str
    hand: Hand = field(init=False)
    credits: int = 0
    trios: list[Trio] = field(default_factory=list)
    # Back-reference only; the Team owns the membership.
    team_id: int | None = None

    def __post_init__(self) -> None:
        self.hand = Hand(owner_id=self.id)

    def add_credits(self, amount: int) -> None:
        self.credits += amount

    def add_trio(self, trio: Trio) -> None:
        self.trios.append(trio)

    @property
    def trio_count(self) -> int:
        return len(self.trios)

    def has_graduated(self, threshold: int) -> bool:
        return self.credits >= threshold

    def reset(self) -> None:
        self.credits = 0
        self.trios.clear()
        self.hand.clear()

    def __str__(self) -> str:
        return f"{self.name} - {self.credits} ECTS ({self.trio_count} trios)"


@dataclass(eq=False)
class Team:
    id: int
    name: str
    members: list[Student] = field(default_factory=list)
    credits: int = 0
    trios: list[Trio] = field(default_factory=list)

    def add_member(self, student: Student) -> bool:
        if len(self.members) >= TEAM_SIZE or student in self.members:
            return False
        self.members.append(student)
        student.team_id = self.id
        return True

    def remove_member(self, student: Student) -> bool:
        if student not in self.members:
            return False
        self.members.remove(student)
        student.team_id = None
        return True

    def add_credits(self, amount: int) -> None:
        self.credits += amount

    def add_trio(self, trio: Trio) -> None:
        self.trios.append(trio)

    @property
    def trio_count(self) -> int:
        return len(self.trios)

    def is_full(self) -> bool:
        return len(self.members) >= TEAM_SIZE

    def has_graduated(self, threshold: int) -> bool:
        return self.credits >= threshold

    def reset(self) -> None:
        self.credits = 0
        self.trios.clear()

    def __str__(self) -> str:
        names = ", ".join(m.name for m in self.members)
        return f"{self.name} - {self.credits} ECTS ({names})"
