from __future__ import annotations

from collections.abc import Sequence

from .players import Student


class TurnManager:
    """Circular turn order; wrapping back to the first seat starts a new round."""

    def __init__(self, students: Sequence[Student]) -> None:
        self._students: list[Student] = list(students)
        self.current_index = 0
        self.round_number = 1

    @property
    def current_student(self) -> Student | None:
        if not self._students:
            return None
        return self._students[self.current_index]

    @property
    def player_count(self) -> int:
        return len(self._students)

    def next_turn(self) -> None:
        if not self._students:
            return
        self.current_index += 1
        if self.current_index >= len(self._students):
            self.current_index = 0
            self.round_number += 1

    def is_current(self, student: Student) -> bool:
        return self.current_student is student

    def reset(self) -> None:
        self.current_index = 0
        self.round_number = 1

    def __str__(self) -> str:
        cur = self.current_student
        return f"Round {self.round_number} - Current player: {cur.name if cur else 'None'}"
