"""Enums for suits, ranks, seats and game phases."""

from enum import Enum, IntEnum


class Suit(str, Enum):
    """The four suits. Declaration order is the canonical deck order."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def color(self) -> "Color":
        """Red for hearts/diamonds, black for clubs/spades."""
        if self in (Suit.HEARTS, Suit.DIAMONDS):
            return Color.RED
        return Color.BLACK


class Color(str, Enum):
    """Suit colors."""

    RED = "red"
    BLACK = "black"


class Rank(str, Enum):
    """Card ranks in a Euchre deck, low to high."""

    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"

    @property
    def face_value(self) -> int:
        """Natural ordering value (9..14)."""
        return _FACE_VALUES[self]


_FACE_VALUES = {
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 11,
    Rank.QUEEN: 12,
    Rank.KING: 13,
    Rank.ACE: 14,
}


class Seat(str, Enum):
    """Fixed table positions."""

    SOUTH = "south"
    WEST = "west"
    NORTH = "north"
    EAST = "east"


# Clockwise play order
TURN_ORDER: tuple[Seat, ...] = (Seat.SOUTH, Seat.WEST, Seat.NORTH, Seat.EAST)


class Team(IntEnum):
    """Fixed partnerships: south/north and west/east."""

    ONE = 1
    TWO = 2


class GamePhase(str, Enum):
    """Phases a game passes through."""

    LOBBY = "LOBBY"
    DEALING = "DEALING"
    ORDER_UP_ROUND1 = "ORDER_UP_ROUND1"
    ORDER_UP_ROUND2 = "ORDER_UP_ROUND2"
    AWAITING_DEALER_DISCARD = "AWAITING_DEALER_DISCARD"
    AWAITING_GO_ALONE = "AWAITING_GO_ALONE"
    PLAYING_TRICKS = "PLAYING_TRICKS"
    HAND_OVER = "HAND_OVER"
    GAME_OVER = "GAME_OVER"


# Phases during which a hand is being played out
IN_HAND_PHASES = frozenset(
    {
        GamePhase.DEALING,
        GamePhase.ORDER_UP_ROUND1,
        GamePhase.ORDER_UP_ROUND2,
        GamePhase.AWAITING_DEALER_DISCARD,
        GamePhase.AWAITING_GO_ALONE,
        GamePhase.PLAYING_TRICKS,
    }
)


class Command(str, Enum):
    """WebSocket commands."""

    # Commands sent to players
    INIT = "INIT"
    JOINED = "JOINED"
    LEFT = "LEFT"
    STARTED = "STARTED"
    HAND_STARTED = "HAND_STARTED"
    ORDERED_UP = "ORDERED_UP"
    PASSED = "PASSED"
    DEALER_DISCARDED = "DEALER_DISCARDED"
    TRUMP_CALLED = "TRUMP_CALLED"
    WENT_ALONE = "WENT_ALONE"
    CARD_PLAYED = "CARD_PLAYED"
    TRICK_WON = "TRICK_WON"
    HAND_SCORED = "HAND_SCORED"
    REDEAL = "REDEAL"
    HAND_ABORTED = "HAND_ABORTED"
    END_GAME = "END_GAME"
    SESSION_RESET = "SESSION_RESET"
    CHAT_MESSAGE = "CHAT_MESSAGE"
    REPORT_ERROR = "REPORT_ERROR"
    GAME_STATE = "GAME_STATE"  # Full state sync
    PONG = "PONG"

    # Commands from client
    START_GAME = "START_GAME"
    ORDER_UP = "ORDER_UP"
    DEALER_DISCARD = "DEALER_DISCARD"
    CALL_TRUMP = "CALL_TRUMP"
    GO_ALONE = "GO_ALONE"
    PLAY_CARD = "PLAY_CARD"
    NEW_SESSION = "NEW_SESSION"
    SYNC_STATE = "SYNC_STATE"  # Request state sync
    CHAT = "CHAT"
    LEAVE = "LEAVE"
    PING = "PING"
