from __future__ import annotations

from dataclasses import dataclass

from .types import Card, SourceKind

MAX_REVEALS = 3


@dataclass(frozen=True)
class RevealedCard:
    card: Card
    source: SourceKind
    source_player: int | None
    position: int

    @property
    def key(self) -> tuple[SourceKind, int | None, int]:
        return (self.source, self.source_player, self.position)


class RevealState:
    """Cards revealed so far in the current turn (at most three).

    A physical position can only be revealed once per turn; the state is
    cleared, not recreated, between turns.
    """

    def __init__(self, max_reveals: int = MAX_REVEALS) -> None:
        self.max_reveals = max_reveals
        self._revealed: list[RevealedCard] = []

    def add_reveal(
        self, card: Card, source: SourceKind, source_player: int | None, position: int
    ) -> bool:
        if len(self._revealed) >= self.max_reveals:
            return False
        if self.contains(source, source_player, position):
            return False
        self._revealed.append(
            RevealedCard(card=card, source=source, source_player=source_player, position=position)
        )
        return True

    def contains(self, source: SourceKind, source_player: int | None, position: int) -> bool:
        key = (source, source_player, position)
        return any(rc.key == key for rc in self._revealed)

    def has_mismatch(self) -> bool:
        if len(self._revealed) < 2:
            return False
        return not self._revealed[-1].card.matches(self._revealed[-2].card)

    def is_valid_trio(self) -> bool:
        if len(self._revealed) != 3:
            return False
        a, b, c = (rc.card for rc in self._revealed)
        return a.matches(b) and b.matches(c) and a.matches(c)

    def can_reveal_more(self) -> bool:
        return len(self._revealed) < self.max_reveals

    def clear(self) -> None:
        self._revealed.clear()

    @property
    def reveal_count(self) -> int:
        return len(self._revealed)

    @property
    def revealed_cards(self) -> tuple[RevealedCard, ...]:
        return tuple(self._revealed)

    @property
    def last_revealed(self) -> RevealedCard | None:
        return self._revealed[-1] if self._revealed else None

    @property
    def revealed_code(self) -> str | None:
        if not self._revealed:
            return None
        return self._revealed[0].card.code
