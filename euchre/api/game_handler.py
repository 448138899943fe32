"""Game logic handler for WebSocket commands."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from functools import partial
from typing import TYPE_CHECKING, Any

from euchre.api.responses import Command, ServerMessage
from euchre.config import settings
from euchre.engine.session import chat
from euchre.engine.state_machine import Action, EuchreStateMachine
from euchre.models.card import Card
from euchre.models.enums import TURN_ORDER, GamePhase, Seat, Suit
from euchre.models.errors import ErrorCode, EuchreError, ProtocolError, SessionError
from euchre.models.game import Game
from euchre.models.game_event import GameEvent, GameEventType
from euchre.models.seating import team_of
from euchre.services.event_recorder import EventRecorder, event_recorder

if TYPE_CHECKING:
    from euchre.api.websocket import ConnectionManager
    from euchre.services.publisher_service import PublisherService

logger = logging.getLogger(__name__)

CommandHandler = Callable[[Game, str, dict[str, Any]], Awaitable[None]]

# Engine event -> notice broadcast to the table
EVENT_COMMANDS: dict[GameEventType, Command] = {
    GameEventType.PLAYER_JOINED: Command.JOINED,
    GameEventType.PLAYER_LEFT: Command.LEFT,
    GameEventType.GAME_STARTED: Command.STARTED,
    GameEventType.HAND_STARTED: Command.HAND_STARTED,
    GameEventType.HAND_ABORTED: Command.HAND_ABORTED,
    GameEventType.REDEAL: Command.REDEAL,
    GameEventType.ORDERED_UP: Command.ORDERED_UP,
    GameEventType.PASSED: Command.PASSED,
    GameEventType.DEALER_DISCARDED: Command.DEALER_DISCARDED,
    GameEventType.TRUMP_CALLED: Command.TRUMP_CALLED,
    GameEventType.WENT_ALONE: Command.WENT_ALONE,
    GameEventType.CARD_PLAYED: Command.CARD_PLAYED,
    GameEventType.TRICK_WON: Command.TRICK_WON,
    GameEventType.HAND_SCORED: Command.HAND_SCORED,
    GameEventType.GAME_ENDED: Command.END_GAME,
    GameEventType.SESSION_RESET: Command.SESSION_RESET,
}

HIDDEN_CARD = {"hidden": True}


def parse_decision(content: dict[str, Any]) -> dict[str, Any]:
    """Read a yes/no ``decision`` field."""
    decision = content.get("decision")
    if not isinstance(decision, bool):
        msg = "Decision must be true or false"
        raise ProtocolError(msg, ErrorCode.INVALID_PAYLOAD)
    return {"decision": decision}


def parse_card(content: dict[str, Any]) -> dict[str, Any]:
    """Read a ``card`` field as a Card."""
    try:
        card = Card.from_dict(content.get("card"))
    except ValueError as e:
        msg = f"Invalid card: {e}"
        raise ProtocolError(msg, ErrorCode.INVALID_CARD) from e
    return {"card": card}


def parse_suit(content: dict[str, Any]) -> dict[str, Any]:
    """Read an optional ``suit`` field (null passes)."""
    raw = content.get("suit")
    if raw is None:
        return {"suit": None}
    try:
        return {"suit": Suit(raw)}
    except ValueError as e:
        msg = f"Unknown suit: {raw!r}"
        raise ProtocolError(msg, ErrorCode.INVALID_PAYLOAD) from e


def parse_seat(raw: str | None) -> Seat | None:
    """Read an optional requested seat."""
    if raw is None or raw == "":
        return None
    try:
        return Seat(raw.lower())
    except ValueError as e:
        msg = f"Unknown seat: {raw!r}"
        raise SessionError(msg, ErrorCode.UNKNOWN_SEAT) from e


class GameHandler:
    """Handles game logic for WebSocket commands.

    Parses client commands into engine actions, runs them through the
    state machine under a per-game lock, and broadcasts the resulting
    event notices and personalized state snapshots.
    """

    def __init__(
        self,
        manager: "ConnectionManager",
        next_hand_delay: float | None = None,
        rng: random.Random | None = None,
        recorder: EventRecorder | None = None,
    ) -> None:
        """Initialize handler.

        Args:
            manager: Connection manager used to reach players
            next_hand_delay: Seconds between scoring and the next deal
            rng: Random source for dealing
            recorder: Event recorder for replays

        """
        self.manager = manager
        self.next_hand_delay = (
            settings.next_hand_delay_seconds if next_hand_delay is None else next_hand_delay
        )
        self.rng = rng
        self.recorder = recorder or event_recorder
        self.publisher: PublisherService | None = None
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending_deals: dict[str, asyncio.Task[None]] = {}

    def set_publisher(self, publisher: "PublisherService | None") -> None:
        """Attach the pub/sub service events are mirrored to."""
        self.publisher = publisher

    def lock_for(self, game_id: str) -> asyncio.Lock:
        """Lock serializing every mutation of one game."""
        if game_id not in self._locks:
            self._locks[game_id] = asyncio.Lock()
        return self._locks[game_id]

    def forget_game(self, game_id: str) -> None:
        """Drop per-game bookkeeping for a game removed from memory."""
        self._locks.pop(game_id, None)
        task = self._pending_deals.pop(game_id, None)
        if task:
            task.cancel()

    async def handle_command(
        self, game: Game, player_id: str, command: str, content: dict[str, Any]
    ) -> None:
        """Route incoming command to appropriate handler.

        Args:
            game: Game instance
            player_id: ID of player who sent command
            command: Command type
            content: Command payload

        """
        handlers: dict[str, CommandHandler] = {
            Command.START_GAME.value: partial(self._handle_action, Action.START_GAME, None),
            Command.ORDER_UP.value: partial(self._handle_action, Action.ORDER_UP, parse_decision),
            Command.DEALER_DISCARD.value: partial(
                self._handle_action, Action.DEALER_DISCARD, parse_card
            ),
            Command.CALL_TRUMP.value: partial(self._handle_action, Action.CALL_TRUMP, parse_suit),
            Command.GO_ALONE.value: partial(self._handle_action, Action.GO_ALONE, parse_decision),
            Command.PLAY_CARD.value: partial(self._handle_action, Action.PLAY_CARD, parse_card),
            Command.NEW_SESSION.value: partial(self._handle_action, Action.NEW_SESSION, None),
            Command.LEAVE.value: partial(self._handle_action, Action.LEAVE, None),
            Command.SYNC_STATE.value: self._handle_sync_state,
            Command.CHAT.value: self._handle_chat,
            Command.PING.value: self._handle_ping,
        }

        handler = handlers.get(command) if isinstance(command, str) else None
        if handler is None:
            logger.warning("Unknown command: %s", command)
            error = ProtocolError(f"Unknown command: {command}", ErrorCode.UNKNOWN_COMMAND)
            await self._send_error(game.id, player_id, error)
            return

        if not isinstance(content, dict):
            content = {}

        async with self.lock_for(game.id):
            try:
                await handler(game, player_id, content)
            except EuchreError as e:
                logger.warning(
                    "Rejected %s from %s in game %s: %s", command, player_id, game.id, e.message
                )
                await self._send_error(game.id, player_id, e)

    def _require_seat(self, game: Game, player_id: str) -> Seat:
        seat = game.seat_of(player_id)
        if seat is None:
            msg = "You are not seated at this table"
            raise ProtocolError(msg, ErrorCode.PLAYER_NOT_FOUND)
        return seat

    async def _handle_action(
        self,
        action: Action,
        parser: Callable[[dict[str, Any]], dict[str, Any]] | None,
        game: Game,
        player_id: str,
        content: dict[str, Any],
    ) -> None:
        """Parse, dispatch and broadcast one engine action."""
        seat = self._require_seat(game, player_id)
        payload = parser(content) if parser else {}
        events = EuchreStateMachine(game, self.rng).dispatch(seat, action, payload)
        logger.info("Game %s: %s by %s", game.id, action.value, seat.value)
        await self._after_events(game, events)

    async def join_player(
        self, game: Game, player_id: str, name: str, seat: Seat | None = None
    ) -> Seat:
        """Seat a new player and announce them.

        Raises:
            EuchreError: If the player cannot be seated

        """
        async with self.lock_for(game.id):
            assigned, events = EuchreStateMachine(game, self.rng).join(player_id, name, seat)
            await self._after_events(game, events)
            return assigned

    async def reconnect_player(self, game: Game, player_id: str) -> Seat | None:
        """Re-attach a seated player after their socket dropped."""
        async with self.lock_for(game.id):
            player = game.get_player(player_id)
            if player is None:
                return None
            player.is_connected = True
            game.add_message(f"{player.name} reconnected.")
            game.touch()
            logger.info("Player %s reconnected to game %s", player_id, game.id)
            await self.broadcast_game_state(game)
            # A game restored between hands has no deal scheduled
            if game.phase == GamePhase.HAND_OVER:
                await self._schedule_next_hand(game)
            return player.seat

    async def handle_disconnect(self, game: Game, player_id: str) -> None:
        """React to a dropped socket.

        In the lobby the seat is freed. Once play has started the seat is
        kept for reconnection and the turn simply stays pending.
        """
        async with self.lock_for(game.id):
            player = game.get_player(player_id)
            if player is None:
                return
            if game.phase == GamePhase.LOBBY:
                events = EuchreStateMachine(game, self.rng).leave(player.seat)
                await self._after_events(game, events)
                return

            player.is_connected = False
            game.add_message(f"{player.name} disconnected.", important=True)
            game.touch()
            await self.manager.broadcast_to_game(
                ServerMessage(
                    command=Command.LEFT,
                    game_id=game.id,
                    content={"seat": player.seat.value, "player_id": player_id, "disconnected": True},
                ),
                game.id,
            )
            await self.broadcast_game_state(game)

    async def _after_events(self, game: Game, events: list[GameEvent]) -> None:
        """Record, publish and broadcast the outcome of a transition."""
        for event in events:
            self.recorder.record(event)
            if self.publisher:
                await self.publisher.publish_game_event(event)
            command = EVENT_COMMANDS.get(event.event_type)
            if command is None:
                continue
            await self.manager.broadcast_to_game(
                ServerMessage(
                    command=command,
                    game_id=game.id,
                    content={"seat": event.seat, "hand_number": event.hand_number, **event.data},
                ),
                game.id,
            )

        event_types = {event.event_type for event in events}
        if GameEventType.GAME_ENDED in event_types:
            self.recorder.end_game(game)
        if GameEventType.SESSION_RESET in event_types:
            self.recorder.discard(game.id)

        await self.broadcast_game_state(game)

        if game.phase == GamePhase.HAND_OVER:
            await self._schedule_next_hand(game)

    async def _schedule_next_hand(self, game: Game) -> None:
        """Deal the next hand now, or after the configured pause."""
        if self.next_hand_delay <= 0:
            await self._deal_next_hand(game)
            return
        previous = self._pending_deals.get(game.id)
        if previous and not previous.done():
            return
        self._pending_deals[game.id] = asyncio.create_task(self._deal_after_delay(game))

    async def _deal_after_delay(self, game: Game) -> None:
        try:
            await asyncio.sleep(self.next_hand_delay)
            async with self.lock_for(game.id):
                # A player may have left in the meantime
                if game.phase != GamePhase.HAND_OVER:
                    return
                try:
                    await self._deal_next_hand(game)
                except EuchreError:
                    logger.exception("Could not deal next hand in game %s", game.id)
        finally:
            self._pending_deals.pop(game.id, None)

    async def _deal_next_hand(self, game: Game) -> None:
        events = EuchreStateMachine(game, self.rng).deal_next_hand()
        await self._after_events(game, events)

    async def wait_for_pending_deal(self, game_id: str) -> None:
        """Wait until a scheduled deal for a game has run."""
        task = self._pending_deals.get(game_id)
        if task:
            await task

    async def cancel_pending_deals(self) -> None:
        """Cancel every scheduled deal (used on shutdown)."""
        tasks = list(self._pending_deals.values())
        self._pending_deals.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _handle_chat(self, game: Game, player_id: str, content: dict[str, Any]) -> None:
        """Handle CHAT command - relays a message to the table."""
        seat = self._require_seat(game, player_id)
        text = content.get("message")
        if not isinstance(text, str):
            msg = "Chat message must be text"
            raise ProtocolError(msg, ErrorCode.INVALID_PAYLOAD)
        line = chat(game, seat, text)
        game.touch()
        await self.manager.broadcast_to_game(
            ServerMessage(command=Command.CHAT_MESSAGE, game_id=game.id, content=line),
            game.id,
        )

    async def _handle_ping(self, game: Game, player_id: str, _content: dict[str, Any]) -> None:
        """Handle PING command - keepalive."""
        await self.manager.send_personal_message(
            ServerMessage(command=Command.PONG, game_id=game.id, content={}),
            game.id,
            player_id,
        )

    async def _send_error(self, game_id: str, player_id: str, error: EuchreError) -> None:
        """Send error message to a specific player."""
        await self.manager.send_personal_message(
            ServerMessage(
                command=Command.REPORT_ERROR,
                game_id=game_id,
                content=error.to_dict(),
            ),
            game_id,
            player_id,
        )

    async def _handle_sync_state(
        self, game: Game, player_id: str, _content: dict[str, Any]
    ) -> None:
        """Handle SYNC_STATE command - sends full game state to requesting player."""
        await self.send_game_state(game, player_id)

    async def send_game_state(self, game: Game, player_id: str) -> None:
        """Send full game state to a player (for connect/reconnect)."""
        await self.manager.send_personal_message(
            ServerMessage(
                command=Command.GAME_STATE,
                game_id=game.id,
                content=self.build_game_state(game, player_id),
            ),
            game.id,
            player_id,
        )

    async def broadcast_game_state(self, game: Game) -> None:
        """Send every connected player their own view of the game."""
        for player in list(game.players.values()):
            if player.is_connected:
                await self.send_game_state(game, player.id)

    def build_game_state(self, game: Game, player_id: str | None) -> dict[str, Any]:
        """Build the game state as seen by one player.

        The viewer's own hand is included in full; every other hand is
        replaced by placeholders of the same length. The deck is never
        included and the kitty is only counted.
        """
        viewer_seat = game.seat_of(player_id) if player_id else None

        players = []
        for seat in TURN_ORDER:
            player = game.players.get(seat)
            if player is None:
                continue
            if seat == viewer_seat:
                hand: list[dict[str, Any]] = [card.to_dict() for card in player.hand]
            else:
                hand = [dict(HIDDEN_CARD) for _ in player.hand]
            players.append(
                {
                    "id": player.id,
                    "name": player.name,
                    "seat": seat.value,
                    "team": int(team_of(seat)),
                    "is_connected": player.is_connected,
                    "tricks_won": player.tricks_won,
                    "card_count": len(player.hand),
                    "hand": hand,
                }
            )

        current_trick = None
        if game.current_trick is not None:
            current_trick = {
                "leader": game.current_trick.leader.value,
                "plays": [
                    {"seat": play.seat.value, "card": play.card.to_dict()}
                    for play in game.current_trick.plays
                ],
            }

        tricks = [
            {
                "leader": trick.leader.value,
                "winner": trick.winner.value if trick.winner else None,
                "winning_card": trick.winning_card.to_dict() if trick.winning_card else None,
                "plays": [
                    {"seat": play.seat.value, "card": play.card.to_dict()} for play in trick.plays
                ],
            }
            for trick in game.tricks
        ]

        valid_plays: list[dict[str, str]] = []
        if viewer_seat is not None and game.current_player == viewer_seat:
            machine = EuchreStateMachine(game)
            valid_plays = [card.to_dict() for card in machine.valid_plays(viewer_seat)]

        def _seat(value: Seat | None) -> str | None:
            return value.value if value else None

        return {
            "game_id": game.id,
            "slug": game.slug,
            "phase": game.phase.value,
            "hand_number": game.hand_number,
            "players": players,
            "your_seat": _seat(viewer_seat),
            "open_seats": [seat.value for seat in game.open_seats()],
            "dealer": _seat(game.dealer),
            "current_player": _seat(game.current_player),
            "trump": game.trump.value if game.trump else None,
            "up_card": game.up_card.to_dict() if game.up_card else None,
            "kitty_size": len(game.kitty),
            "turned_down_suit": game.turned_down_suit.value if game.turned_down_suit else None,
            "maker": int(game.maker) if game.maker else None,
            "caller": _seat(game.caller),
            "dealer_has_discarded": game.dealer_has_discarded,
            "going_alone": game.going_alone,
            "lone_player": _seat(game.lone_player),
            "sitting_out": _seat(game.sitting_out),
            "current_trick": current_trick,
            "tricks": tricks,
            "valid_plays": valid_plays,
            "scores": {str(int(team)): score for team, score in game.scores.items()},
            "winning_team": int(game.winning_team) if game.winning_team else None,
            "last_hand_result": (
                game.last_hand_result.to_dict() if game.last_hand_result else None
            ),
            "messages": [message.to_dict() for message in game.messages],
            "chat": [line.to_dict() for line in game.chat_history],
            "games_played": game.games_played,
            "team_wins": {str(int(team)): wins for team, wins in game.team_wins.items()},
        }
