"""Which hand positions a player may click.

A hand is sorted by rank, highest first. Its owner may reveal the first card,
the last card, and any card continuing an equal-rank run from either end,
e.g. for ranks [7, 5, 2, 2, 2] the owner may reveal 0, 2, 3 or 4. Everybody
else only ever sees the single first and single last positions.
"""

from __future__ import annotations

from .cards import Hand


def revealable_positions(hand: Hand, owner: bool = True) -> list[int]:
    cards = hand.cards
    if not cards:
        return []
    if not owner:
        return first_last_positions(hand)

    last = len(cards) - 1
    positions = [0]
    for i in range(1, len(cards)):
        if cards[i].rank != cards[0].rank:
            break
        positions.append(i)

    if last not in positions:
        positions.append(last)
        for i in range(last - 1, -1, -1):
            if cards[i].rank != cards[last].rank:
                break
            if i not in positions:
                positions.append(i)

    return sorted(positions)


def first_last_positions(hand: Hand) -> list[int]:
    size = len(hand)
    if size == 0:
        return []
    if size == 1:
        return [0]
    return [0, size - 1]


def is_position_revealable(hand: Hand, position: int, owner: bool = True) -> bool:
    return position in revealable_positions(hand, owner=owner)


def duplicate_run(hand: Hand, position: int) -> list[int]:
    """Positions contiguous with `position` holding the same course.

    Positions after `position` come first, then those before it, each side
    listed outward.

    Equal courses share a rank, so in a sorted hand they always sit together.
    """
    cards = hand.cards
    if not 0 <= position < len(cards):
        return []
    card = cards[position]
    run: list[int] = []
    i = position + 1
    while i < len(cards) and cards[i].matches(card):
        run.append(i)
        i += 1
    i = position - 1
    while i >= 0 and cards[i].matches(card):
        run.append(i)
        i -= 1
    return run
