"""Card model."""

from dataclasses import dataclass
from typing import Any

from euchre.models.enums import Rank, Suit


@dataclass(frozen=True)
class Card:
    """A playing card.

    Cards carry no intrinsic ranking: how strong a card is depends on trump
    and on the suit led (see ``euchre.models.ranking``). Equality and hashing
    are structural, so two cards are equal iff suit and rank match.

    Attributes:
        suit: Card suit
        rank: Card rank

    """

    suit: Suit
    rank: Rank

    @property
    def id(self) -> str:
        """Wire identifier, e.g. ``"J-hearts"``."""
        return f"{self.rank.value}-{self.suit.value}"

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"suit": self.suit.value, "rank": self.rank.value, "id": self.id}

    @classmethod
    def from_dict(cls, data: Any) -> "Card":
        """Build a card from a ``{"suit": ..., "rank": ...}`` mapping.

        Raises:
            ValueError: If the mapping is missing fields or names an unknown suit/rank

        """
        if not isinstance(data, dict):
            msg = f"Card must be an object, got {type(data).__name__}"
            raise ValueError(msg)  # noqa: TRY004
        try:
            return cls(suit=Suit(data["suit"]), rank=Rank(str(data["rank"])))
        except KeyError as e:
            msg = f"Card is missing field {e.args[0]!r}"
            raise ValueError(msg) from e

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.rank.value} of {self.suit.value}"


# All 24 cards in canonical order: suits x ranks
ALL_CARDS: tuple[Card, ...] = tuple(Card(suit, rank) for suit in Suit for rank in Rank)


def get_all_cards() -> tuple[Card, ...]:
    """Get every card in the deck in canonical order."""
    return ALL_CARDS
