"""Error taxonomy for rejected game actions.

Every rejection raised by the engine is an ``EuchreError`` carrying an
``ErrorCode`` (an i18n key the frontend translates) and a human-readable
message. The API layer catches these at the command boundary and reports
them to the offending player only.
"""

from enum import StrEnum


class ErrorCode(StrEnum):
    """Error codes for i18n translation on the frontend."""

    # Protocol errors
    NOT_IN_PHASE = "error.notInPhase"
    NOT_YOUR_TURN = "error.notYourTurn"
    UNKNOWN_SEAT = "error.unknownSeat"
    UNKNOWN_COMMAND = "error.unknownCommand"
    INVALID_PAYLOAD = "error.invalidPayload"
    GAME_ALREADY_STARTED = "error.gameAlreadyStarted"

    # Rule violations
    INVALID_CARD = "error.invalidCard"
    CARD_NOT_IN_HAND = "error.cardNotInHand"
    MUST_FOLLOW_SUIT = "error.mustFollowSuit"
    SUIT_TURNED_DOWN = "error.suitTurnedDown"
    NOT_DEALER = "error.notDealer"
    NOT_TRUMP_CALLER = "error.notTrumpCaller"

    # Integrity errors
    DECK_EXHAUSTED = "error.deckExhausted"
    INVALID_HAND_SIZE = "error.invalidHandSize"

    # Session errors
    NOT_ENOUGH_PLAYERS = "error.notEnoughPlayers"
    GAME_IS_FULL = "error.gameIsFull"
    SEAT_TAKEN = "error.seatTaken"
    ALREADY_SEATED = "error.alreadySeated"
    INVALID_NAME = "error.invalidName"
    PLAYER_NOT_FOUND = "error.playerNotFound"
    CANNOT_RESET_SESSION = "error.cannotResetSession"


class EuchreError(ValueError):
    """Base class for every rejected action."""

    default_code = ErrorCode.INVALID_PAYLOAD

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> dict[str, str]:
        """Payload for a REPORT_ERROR message."""
        return {"error": self.message, "code": self.code.value}


class ProtocolError(EuchreError):
    """Action arrived in the wrong phase, out of turn, or from an unknown seat."""

    default_code = ErrorCode.NOT_IN_PHASE


class RuleViolation(EuchreError):
    """Action is well-timed but breaks a rule of the game."""

    default_code = ErrorCode.INVALID_CARD


class DealIntegrityError(EuchreError):
    """Internal state does not match what correct dealing guarantees."""

    default_code = ErrorCode.DECK_EXHAUSTED


class DeckExhaustedError(DealIntegrityError):
    """The deck ran out of cards mid-deal."""

    default_code = ErrorCode.DECK_EXHAUSTED


class InvalidHandSizeError(DealIntegrityError):
    """A hand holds the wrong number of cards for the requested action."""

    default_code = ErrorCode.INVALID_HAND_SIZE


class SessionError(EuchreError):
    """Seating or session-lifecycle request that cannot be honored."""

    default_code = ErrorCode.NOT_ENOUGH_PLAYERS
