"""Session operations: seating, starting, resetting and leaving a game."""

import logging
import random

from euchre.engine.phases import make_event, start_new_hand
from euchre.models.enums import GamePhase, Seat
from euchre.models.errors import ErrorCode, ProtocolError, SessionError
from euchre.models.game import Game
from euchre.models.game_event import GameEvent, GameEventType
from euchre.models.player import Player
from euchre.models.seating import team_of

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 24
MAX_CHAT_LENGTH = 500


def join(
    game: Game, player_id: str, name: str, seat: Seat | None = None
) -> tuple[Seat, list[GameEvent]]:
    """Seat a new player in the lobby.

    Args:
        game: Game to join
        player_id: Connection-level player identifier
        name: Display name
        seat: Requested seat, or None for the first free seat in turn order

    Returns:
        Tuple of (assigned seat, events)

    Raises:
        SessionError: If the player is already seated, the table is full,
            the seat is taken or the name is blank
        ProtocolError: If the game is not in the lobby

    """
    if game.get_player(player_id):
        msg = "You are already seated at this table"
        raise SessionError(msg, ErrorCode.ALREADY_SEATED)
    if game.phase != GamePhase.LOBBY:
        msg = "Game already in progress"
        raise ProtocolError(msg, ErrorCode.GAME_ALREADY_STARTED)
    clean_name = name.strip()[:MAX_NAME_LENGTH]
    if not clean_name:
        msg = "Name must not be blank"
        raise SessionError(msg, ErrorCode.INVALID_NAME)
    if game.is_full():
        msg = "Game is full"
        raise SessionError(msg, ErrorCode.GAME_IS_FULL)
    if seat is not None and seat in game.players:
        msg = f"Seat {seat.value} is taken"
        raise SessionError(msg, ErrorCode.SEAT_TAKEN)

    assigned = seat or game.open_seats()[0]
    game.add_player(Player(id=player_id, name=clean_name, seat=assigned))

    logger.info("Player %s joined game %s as %s", player_id, game.id, assigned.value)
    game.add_message(f"{clean_name} sits {assigned.value}.")
    event = make_event(
        game,
        GameEventType.PLAYER_JOINED,
        assigned,
        player_id=player_id,
        name=clean_name,
        team=int(team_of(assigned)),
    )
    return assigned, [event]


def start_game(game: Game, seat: Seat, rng: random.Random | None = None) -> list[GameEvent]:
    """Start play from the lobby once all four seats are filled."""
    if game.phase != GamePhase.LOBBY:
        msg = "Game already started"
        raise ProtocolError(msg, ErrorCode.GAME_ALREADY_STARTED)
    game.player_at(seat)
    if not game.is_full():
        msg = f"Not enough players ({len(game.players)}/4)"
        raise SessionError(msg, ErrorCode.NOT_ENOUGH_PLAYERS)

    game.dealer = None
    game.winning_team = None
    logger.info("Game %s started by %s", game.id, seat.value)
    game.add_message("The game begins.", important=True)
    events = [
        make_event(
            game,
            GameEventType.GAME_STARTED,
            seat,
            players=[
                {"seat": p.seat.value, "name": p.name, "team": int(team_of(p.seat))}
                for p in game.players.values()
            ],
        )
    ]
    events.extend(start_new_hand(game, rng))
    return events


def new_session(game: Game, seat: Seat) -> list[GameEvent]:
    """Reset scores and return to the lobby, keeping connected players seated."""
    if game.phase not in (GamePhase.LOBBY, GamePhase.GAME_OVER):
        msg = "A new session can only be requested from the lobby or after the game ends"
        raise ProtocolError(msg, ErrorCode.CANNOT_RESET_SESSION)
    game.player_at(seat)

    for player in list(game.players.values()):
        if not player.is_connected:
            game.players.pop(player.seat)
    game.reset_session()

    logger.info("Game %s: new session requested by %s", game.id, seat.value)
    game.add_message("A new game session has started.", important=True)
    return [
        make_event(
            game,
            GameEventType.SESSION_RESET,
            seat,
            seats=[s.value for s in game.players],
        )
    ]


def leave(game: Game, seat: Seat) -> list[GameEvent]:
    """Remove a player. A hand in progress is abandoned and the game returns
    to the lobby with team scores kept.
    """
    player = game.player_at(seat)
    game.players.pop(seat)
    events = [make_event(game, GameEventType.PLAYER_LEFT, seat, player_id=player.id)]
    game.add_message(f"{player.name} left the table.", important=True)
    logger.info("Player %s left game %s (%s)", player.id, game.id, seat.value)

    if game.hand_in_progress or game.phase == GamePhase.HAND_OVER:
        game.reset_hand_state()
        game.phase = GamePhase.LOBBY
        game.dealer = None
        game.current_player = None
        events.append(make_event(game, GameEventType.HAND_ABORTED, seat))
        game.add_message("Hand abandoned. Waiting for players.")
        logger.info("Game %s returned to lobby, scores kept", game.id)
    return events


def chat(game: Game, seat: Seat, text: str) -> dict[str, str]:
    """Record a chat line and return its wire form.

    Raises:
        SessionError: If the message is blank

    """
    clean = text.strip()[:MAX_CHAT_LENGTH]
    if not clean:
        msg = "Chat message must not be blank"
        raise SessionError(msg, ErrorCode.INVALID_PAYLOAD)
    return game.add_chat(seat, clean).to_dict()
