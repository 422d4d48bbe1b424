from __future__ import annotations

from .players import Student, Team
from .trio import Trio


class ScoreBoard:
    """Credit and trio totals per student and per team, keyed by id.

    Reporting only: the game mutates Student/Team totals itself and mirrors
    them here.
    """

    def __init__(self) -> None:
        self._student_scores: dict[int, int] = {}
        self._student_trios: dict[int, list[Trio]] = {}
        self._team_scores: dict[int, int] = {}
        self._team_trios: dict[int, list[Trio]] = {}
        self._students: dict[int, Student] = {}
        self._teams: dict[int, Team] = {}

    def register_student(self, student: Student) -> None:
        self._students[student.id] = student
        self._student_scores[student.id] = 0
        self._student_trios[student.id] = []

    def register_team(self, team: Team) -> None:
        self._teams[team.id] = team
        self._team_scores[team.id] = 0
        self._team_trios[team.id] = []

    def update_score(self, student: Student, credits: int) -> None:
        self._student_scores[student.id] = self._student_scores.get(student.id, 0) + credits

    def update_team_score(self, team: Team, credits: int) -> None:
        self._team_scores[team.id] = self._team_scores.get(team.id, 0) + credits

    def record_trio(self, student: Student, trio: Trio) -> None:
        trios = self._student_trios.get(student.id)
        if trios is not None:
            trios.append(trio)

    def record_team_trio(self, team: Team, trio: Trio) -> None:
        trios = self._team_trios.get(team.id)
        if trios is not None:
            trios.append(trio)

    def score(self, student: Student) -> int:
        return self._student_scores.get(student.id, 0)

    def team_score(self, team: Team) -> int:
        return self._team_scores.get(team.id, 0)

    def trio_count(self, student: Student) -> int:
        return len(self._student_trios.get(student.id, []))

    def team_trio_count(self, team: Team) -> int:
        return len(self._team_trios.get(team.id, []))

    def rankings(self) -> list[Student]:
        # sorted() is stable: ties keep seat order
        return sorted(
            self._students.values(), key=lambda s: self._student_scores[s.id], reverse=True
        )

    def team_rankings(self) -> list[Team]:
        return sorted(self._teams.values(), key=lambda t: self._team_scores[t.id], reverse=True)

    def leader(self) -> Student | None:
        ranked = self.rankings()
        return ranked[0] if ranked else None

    def leading_team(self) -> Team | None:
        ranked = self.team_rankings()
        return ranked[0] if ranked else None

    def snapshot(self) -> dict[str, object]:
        return {
            "students": [
                {
                    "id": s.id,
                    "name": s.name,
                    "credits": self._student_scores[s.id],
                    "trios": len(self._student_trios[s.id]),
                }
                for s in self.rankings()
            ],
            "teams": [
                {
                    "id": t.id,
                    "name": t.name,
                    "credits": self._team_scores[t.id],
                    "trios": len(self._team_trios[t.id]),
                }
                for t in self.team_rankings()
            ],
        }

    def reset(self) -> None:
        self._student_scores.clear()
        self._student_trios.clear()
        self._team_scores.clear()
        self._team_trios.clear()
        self._students.clear()
        self._teams.clear()
