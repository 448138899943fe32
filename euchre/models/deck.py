"""Deck model for shuffling and dealing cards."""

import random
from collections.abc import Sequence

from euchre.models.card import ALL_CARDS, Card
from euchre.models.errors import DeckExhaustedError


def create_deck() -> list[Card]:
    """Return all 24 cards in canonical order (suits x ranks)."""
    return list(ALL_CARDS)


def shuffle(cards: Sequence[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a shuffled copy of ``cards`` (Fisher-Yates).

    Args:
        cards: Cards to shuffle; left untouched
        rng: Random source, defaults to the module-level generator

    Returns:
        A new list holding a permutation of the input

    Raises:
        TypeError: If ``cards`` is not a sequence

    """
    if not isinstance(cards, Sequence) or isinstance(cards, (str, bytes)):
        msg = f"Cannot shuffle {type(cards).__name__}, expected a sequence of cards"
        raise TypeError(msg)

    source = rng or random
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = source.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class Deck:
    """
    Represents a Euchre deck.

    The deck holds 24 cards: 9, 10, J, Q, K and A of each of the four suits.
    Cards are drawn from the top (end of the list).
    """

    def __init__(self, cards: list[Card] | None = None) -> None:
        """Initialize a deck, empty unless cards are given."""
        self.cards: list[Card] = list(cards) if cards else []

    def shuffle(self, rng: random.Random | None = None) -> None:
        """Fill and shuffle the deck."""
        self.cards = shuffle(create_deck(), rng)

    def draw(self) -> Card:
        """Take the top card.

        Raises:
            DeckExhaustedError: If the deck is empty

        """
        if not self.cards:
            msg = "Deck exhausted while dealing"
            raise DeckExhaustedError(msg)
        return self.cards.pop()

    def draw_remaining(self) -> list[Card]:
        """Take every card left in the deck."""
        remaining, self.cards = self.cards, []
        return remaining

    def reset(self) -> None:
        """Reset the deck."""
        self.cards = []

    def __len__(self) -> int:
        return len(self.cards)
