from __future__ import annotations

import random
from collections.abc import Iterator

from .types import Card, CourseCatalog

HALL_CAPACITY = 9


class Deck:
    """Shuffled source of cards, dealt from the front."""

    def __init__(self, cards: list[Card]) -> None:
        self._cards: list[Card] = list(cards)

    @staticmethod
    def from_catalog(catalog: CourseCatalog) -> "Deck":
        cards: list[Card] = []
        for course in catalog.courses.values():
            for _ in range(course.copies):
                cards.append(course.make_card())
        if not cards:
            raise ValueError("Cannot build a deck from an empty catalog.")
        return Deck(cards)

    def shuffle(self, rng: random.Random) -> None:
        rng.shuffle(self._cards)

    def deal(self) -> Card | None:
        if not self._cards:
            return None
        return self._cards.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._cards)

    def is_empty(self) -> bool:
        return not self._cards

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    def __len__(self) -> int:
        return len(self._cards)


class Hand:
    """Cards held by one student, always sorted by rank, highest first."""

    def __init__(self, owner_id: int) -> None:
        self.owner_id = owner_id
        self._cards: list[Card] = []

    def add_card(self, card: Card) -> None:
        self._cards.append(card)
        # list.sort is stable, so equal ranks keep their arrival order
        self._cards.sort(key=lambda c: c.rank, reverse=True)

    def remove_at(self, position: int) -> Card | None:
        if 0 <= position < len(self._cards):
            return self._cards.pop(position)
        return None

    def card_at(self, position: int) -> Card | None:
        if 0 <= position < len(self._cards):
            return self._cards[position]
        return None

    def first(self) -> Card | None:
        return self._cards[0] if self._cards else None

    def last(self) -> Card | None:
        return self._cards[-1] if self._cards else None

    def contains(self, card: Card) -> bool:
        return card in self._cards

    def clear(self) -> None:
        self._cards.clear()

    def is_empty(self) -> bool:
        return not self._cards

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(tuple(self._cards))


class LectureHall:
    """Shared face-up pool, never holding more than `capacity` cards."""

    def __init__(self, capacity: int = HALL_CAPACITY) -> None:
        self.capacity = capacity
        self._cards: list[Card] = []

    def add_card(self, card: Card) -> bool:
        if len(self._cards) >= self.capacity:
            return False
        self._cards.append(card)
        return True

    def remove_at(self, position: int) -> Card | None:
        if 0 <= position < len(self._cards):
            return self._cards.pop(position)
        return None

    def card_at(self, position: int) -> Card | None:
        if 0 <= position < len(self._cards):
            return self._cards[position]
        return None

    def refill(self, deck: Deck, target: int | None = None) -> list[Card]:
        """Draw from the deck until the hall reaches `target` or the deck runs out."""
        goal = self.capacity if target is None else min(target, self.capacity)
        drawn: list[Card] = []
        while len(self._cards) < goal:
            card = deck.deal()
            if card is None:
                break
            self._cards.append(card)
            drawn.append(card)
        return drawn

    def contains(self, card: Card) -> bool:
        return card in self._cards

    def is_full(self) -> bool:
        return len(self._cards) >= self.capacity

    def is_empty(self) -> bool:
        return not self._cards

    def clear(self) -> None:
        self._cards.clear()

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    def __len__(self) -> int:
        return len(self._cards)
