"""Phase-aware driver routing player actions to their handlers."""

import logging
import random
from collections.abc import Callable
from enum import Enum
from typing import Any

from euchre.engine import phases, session
from euchre.models.card import Card
from euchre.models.enums import GamePhase, Seat, Suit
from euchre.models.errors import ErrorCode, ProtocolError
from euchre.models.game import Game
from euchre.models.game_event import GameEvent

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Inbound player actions."""

    JOIN = "JOIN"
    START_GAME = "START_GAME"
    ORDER_UP = "ORDER_UP"
    DEALER_DISCARD = "DEALER_DISCARD"
    CALL_TRUMP = "CALL_TRUMP"
    GO_ALONE = "GO_ALONE"
    PLAY_CARD = "PLAY_CARD"
    NEW_SESSION = "NEW_SESSION"
    LEAVE = "LEAVE"


# The single phase in which each in-hand action is accepted
ACTION_PHASES: dict[Action, GamePhase] = {
    Action.JOIN: GamePhase.LOBBY,
    Action.START_GAME: GamePhase.LOBBY,
    Action.ORDER_UP: GamePhase.ORDER_UP_ROUND1,
    Action.DEALER_DISCARD: GamePhase.AWAITING_DEALER_DISCARD,
    Action.CALL_TRUMP: GamePhase.ORDER_UP_ROUND2,
    Action.GO_ALONE: GamePhase.AWAITING_GO_ALONE,
    Action.PLAY_CARD: GamePhase.PLAYING_TRICKS,
}


class EuchreStateMachine:
    """Drives one game through its phases.

    The machine owns no state of its own beyond the game it wraps and the
    random source used for dealing, so it can be created per action. All
    calls are synchronous; callers serialize access to a game.
    """

    def __init__(self, game: Game, rng: random.Random | None = None) -> None:
        """Wrap a game.

        Args:
            game: Game to drive
            rng: Random source for dealer choice and shuffling

        """
        self.game = game
        self.rng = rng
        self._handlers: dict[Action, Callable[[Seat, dict[str, Any]], list[GameEvent]]] = {
            Action.START_GAME: lambda seat, _payload: self.start_game(seat),
            Action.ORDER_UP: lambda seat, p: self.order_up(seat, p["decision"]),
            Action.DEALER_DISCARD: lambda seat, p: self.dealer_discard(seat, p["card"]),
            Action.CALL_TRUMP: lambda seat, p: self.call_trump(seat, p.get("suit")),
            Action.GO_ALONE: lambda seat, p: self.go_alone(seat, p["decision"]),
            Action.PLAY_CARD: lambda seat, p: self.play_card(seat, p["card"]),
            Action.NEW_SESSION: lambda seat, _payload: self.new_session(seat),
            Action.LEAVE: lambda seat, _payload: self.leave(seat),
        }

    @property
    def phase(self) -> GamePhase:
        """Current phase of the wrapped game."""
        return self.game.phase

    def dispatch(
        self, seat: Seat | None, action: Action, payload: dict[str, Any] | None = None
    ) -> list[GameEvent]:
        """Route an action to the handler authorized for the current phase.

        Args:
            seat: Acting seat (ignored for JOIN)
            action: Action to perform
            payload: Typed arguments: ``decision`` (bool), ``card`` (Card),
                ``suit`` (Suit or None), or ``player_id``/``name``/``seat`` for JOIN

        Returns:
            Events produced by the transition

        Raises:
            ProtocolError: If the action does not match the current phase or
                the seat is unknown
            EuchreError: Any rejection raised by the handler

        """
        payload = payload or {}
        required = ACTION_PHASES.get(action)
        if required is not None and self.game.phase != required:
            msg = f"{action.value} is not allowed during {self.game.phase.value}"
            raise ProtocolError(msg, ErrorCode.NOT_IN_PHASE)

        if action == Action.JOIN:
            _, events = self.join(payload["player_id"], payload["name"], payload.get("seat"))
            return events

        if seat is None:
            msg = "Acting player is not seated"
            raise ProtocolError(msg, ErrorCode.UNKNOWN_SEAT)

        events = self._handlers[action](seat, payload)
        logger.debug(
            "Game %s: %s by %s -> %s", self.game.id, action.value, seat.value, self.game.phase.value
        )
        return events

    def _applied(self, events: list[GameEvent]) -> list[GameEvent]:
        self.game.touch()
        return events

    def join(
        self, player_id: str, name: str, seat: Seat | None = None
    ) -> tuple[Seat, list[GameEvent]]:
        """Seat a player in the lobby."""
        assigned, events = session.join(self.game, player_id, name, seat)
        self.game.touch()
        return assigned, events

    def start_game(self, seat: Seat) -> list[GameEvent]:
        """Start the game and deal the first hand."""
        return self._applied(session.start_game(self.game, seat, self.rng))

    def order_up(self, seat: Seat, decision: bool) -> list[GameEvent]:  # noqa: FBT001
        """Round-one decision on the up-card."""
        return self._applied(phases.handle_order_up(self.game, seat, decision))

    def dealer_discard(self, seat: Seat, card: Card) -> list[GameEvent]:
        """Dealer discard after picking up."""
        return self._applied(phases.handle_dealer_discard(self.game, seat, card))

    def call_trump(self, seat: Seat, suit: Suit | None) -> list[GameEvent]:
        """Round-two call, None to pass."""
        return self._applied(phases.handle_call_trump(self.game, seat, suit, self.rng))

    def go_alone(self, seat: Seat, decision: bool) -> list[GameEvent]:  # noqa: FBT001
        """Go-alone decision by the trump caller."""
        return self._applied(phases.handle_go_alone(self.game, seat, decision))

    def play_card(self, seat: Seat, card: Card) -> list[GameEvent]:
        """Play a card to the current trick."""
        return self._applied(phases.handle_play_card(self.game, seat, card))

    def deal_next_hand(self) -> list[GameEvent]:
        """Deal the next hand after a scored one."""
        if self.game.phase != GamePhase.HAND_OVER:
            msg = f"Next hand can only be dealt after scoring, not during {self.game.phase.value}"
            raise ProtocolError(msg, ErrorCode.NOT_IN_PHASE)
        return self._applied(phases.start_new_hand(self.game, self.rng))

    def new_session(self, seat: Seat) -> list[GameEvent]:
        """Reset the session from the lobby or after the game ended."""
        return self._applied(session.new_session(self.game, seat))

    def leave(self, seat: Seat) -> list[GameEvent]:
        """Remove a player from the table."""
        return self._applied(session.leave(self.game, seat))

    def valid_plays(self, seat: Seat) -> list[Card]:
        """Cards ``seat`` could legally play right now."""
        player = self.game.players.get(seat)
        if player is None or self.game.phase != GamePhase.PLAYING_TRICKS:
            return []
        return [card for card in player.hand if phases.is_valid_play(self.game, seat, card)]
