"""Trick model for a single trick within a hand."""

from dataclasses import dataclass, field

from euchre.models.card import Card
from euchre.models.enums import Seat, Suit
from euchre.models.errors import DealIntegrityError
from euchre.models.ranking import effective_suit, winning_play_index


@dataclass
class Play:
    """A card played by a seat in a trick."""

    seat: Seat
    card: Card


@dataclass
class Trick:
    """Represents a single trick within a hand.

    Each active seat plays one card in turn order, starting with the leader.

    Attributes:
        leader: Seat that led the trick
        plays: Cards played so far, in order
        winner: Seat that won this trick
        winning_card: Card that won this trick

    """

    leader: Seat
    plays: list[Play] = field(default_factory=list)
    winner: Seat | None = None
    winning_card: Card | None = None

    @property
    def led_card(self) -> Card | None:
        """First card played, if any."""
        return self.plays[0].card if self.plays else None

    def led_suit(self, trump: Suit | None) -> Suit | None:
        """Effective suit of the led card."""
        led = self.led_card
        return effective_suit(led, trump) if led else None

    def has_played(self, seat: Seat) -> bool:
        """Check if a seat has already played to this trick."""
        return any(play.seat == seat for play in self.plays)

    def cards(self) -> list[Card]:
        """Cards played so far."""
        return [play.card for play in self.plays]

    def add_play(self, seat: Seat, card: Card) -> None:
        """Add a card to this trick.

        Raises:
            DealIntegrityError: If the seat already played to this trick

        """
        if self.has_played(seat):
            msg = f"{seat.value} already played to this trick"
            raise DealIntegrityError(msg)
        self.plays.append(Play(seat, card))

    def is_complete(self, active_players: int) -> bool:
        """Check if every active player has played."""
        return len(self.plays) >= active_players

    def determine_winner(self, trump: Suit | None) -> tuple[Seat, Card]:
        """Determine and record the winner of this trick.

        Returns:
            Tuple of (winning seat, winning card)

        """
        winning = self.plays[winning_play_index(self.cards(), trump)]
        self.winner = winning.seat
        self.winning_card = winning.card
        return winning.seat, winning.card
