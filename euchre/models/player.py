"""Player model."""

from dataclasses import dataclass, field

from euchre.models.card import Card
from euchre.models.enums import Seat


@dataclass
class Player:
    """Represents a player seated at the table.

    Attributes:
        id: Connection-level player identifier
        name: Player's display name
        seat: Table position
        hand: Current cards in hand (normally 5, 6 while the dealer holds the up-card)
        tricks_won: Number of tricks won this hand
        is_connected: Whether player is currently connected

    """

    id: str
    name: str
    seat: Seat
    hand: list[Card] = field(default_factory=list)
    tricks_won: int = 0
    is_connected: bool = True

    def reset_hand(self) -> None:
        """Reset player state for a new hand."""
        self.hand = []
        self.tricks_won = 0

    def has_card(self, card: Card) -> bool:
        """Check if player has a card in their hand."""
        return card in self.hand

    def remove_card(self, card: Card) -> None:
        """Remove a card from player's hand."""
        if card in self.hand:
            self.hand.remove(card)

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.name} ({self.seat.value})"
