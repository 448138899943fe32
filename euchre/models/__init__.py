"""Game domain models."""

from euchre.models.card import Card
from euchre.models.deck import Deck
from euchre.models.enums import Command, GamePhase, Rank, Seat, Suit, Team
from euchre.models.game import Game
from euchre.models.player import Player
from euchre.models.trick import Trick

__all__ = [
    "Card",
    "Command",
    "Deck",
    "Game",
    "GamePhase",
    "Player",
    "Rank",
    "Seat",
    "Suit",
    "Team",
    "Trick",
]
