"""API routes."""

import uuid
from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Query, WebSocket

from euchre.api.game_handler import parse_seat
from euchre.api.responses import (
    CardListResponse,
    Command,
    CreateGameRequest,
    CreateGameResponse,
    ErrorResponse,
    GameInfo,
    PlayerInfo,
    ServerMessage,
)
from euchre.api.websocket import websocket_manager
from euchre.config import settings
from euchre.models.card import get_all_cards
from euchre.models.enums import GamePhase
from euchre.models.errors import EuchreError
from euchre.models.game import Game
from euchre.models.seating import team_of
from euchre.services.event_recorder import event_recorder

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse}}


def _game_info(game: Game) -> GameInfo:
    return GameInfo(
        id=game.id,
        slug=game.slug,
        phase=game.phase.value,
        hand_number=game.hand_number,
        dealer=game.dealer.value if game.dealer else None,
        trump=game.trump.value if game.trump else None,
        scores={str(int(team)): score for team, score in game.scores.items()},
        winning_team=int(game.winning_team) if game.winning_team else None,
        players=[
            PlayerInfo(
                id=p.id,
                name=p.name,
                seat=p.seat.value,
                team=int(team_of(p.seat)),
                is_connected=p.is_connected,
            )
            for p in game.players.values()
        ],
        open_seats=[seat.value for seat in game.open_seats()],
    )


@router.post("/games")
async def create_game(_request: CreateGameRequest | None = None) -> CreateGameResponse:
    """Create a new game table in the lobby phase."""
    # Generate game ID and 4-digit hex slug
    game_id = str(uuid.uuid4())
    slug = game_id[:4].upper()

    game = Game(
        id=game_id,
        slug=slug,
        max_messages=settings.message_log_size,
        max_chat=settings.chat_history_size,
    )
    websocket_manager.add_game(game)

    return CreateGameResponse(game_id=game_id, slug=slug)


@router.websocket("/games/join")
async def join_game(
    websocket: WebSocket,
    game_id: str = Query(..., description="Game ID or slug to join"),
    player_id: str = Query(..., description="Player ID"),
    username: str = Query(default="Player", description="Player display name"),
    seat: str | None = Query(default=None, description="Requested seat"),
) -> None:
    """WebSocket endpoint to join or rejoin a game.

    A player id already seated at the table re-attaches to its seat in any
    phase; a new player id can only be seated while the game is in the lobby.

    Args:
        websocket: WebSocket connection
        game_id: Game to join
        player_id: Player identifier
        username: Player display name
        seat: Optional seat to sit in

    """
    game = websocket_manager.get_game(game_id)

    # If game not in memory, try to restore from MongoDB (for reconnections)
    if not game and await websocket_manager.try_restore_game(game_id):
        game = websocket_manager.get_game(game_id)

    if not game:
        # Must accept before closing to avoid HTTP 403
        await websocket.accept()
        await websocket.close(code=4004, reason="Game not found")
        return

    # Use the actual game UUID for all operations (in case we joined via slug)
    actual_game_id = game.id
    handler = websocket_manager.game_handler

    if game.get_player(player_id):
        await websocket.accept()
        websocket_manager.register(websocket, actual_game_id, player_id)
        await handler.reconnect_player(game, player_id)
    else:
        try:
            await handler.join_player(game, player_id, username, parse_seat(seat))
        except EuchreError as e:
            await websocket.accept()
            await websocket.close(code=4003, reason=e.message)
            return
        await websocket_manager.connect(websocket, actual_game_id, player_id)

    player_seat = game.seat_of(player_id)
    await websocket_manager.send_personal_message(
        ServerMessage(
            command=Command.INIT,
            game_id=actual_game_id,
            content={
                "game": _game_info(game).model_dump(),
                "seat": player_seat.value if player_seat else None,
            },
        ),
        actual_game_id,
        player_id,
    )

    await websocket_manager.handle_player_message(websocket, actual_game_id, player_id)


@router.get("/games/cards")
async def get_cards() -> CardListResponse:
    """Get all cards in the deck, in canonical order."""
    cards_list = [
        {**card.to_dict(), "name": str(card), "color": card.suit.color.value}
        for card in get_all_cards()
    ]
    return CardListResponse(cards=cards_list)


@router.get("/games/active")
async def get_active_games() -> dict[str, Any]:
    """Get list of games that are in progress or waiting for players.

    Games in the lobby with open seats are joinable; others can only be
    rejoined by their seated players.
    """
    active_games = []

    for game_id, game in websocket_manager.games.items():
        if game.phase == GamePhase.GAME_OVER or not game.players:
            continue
        is_joinable = game.phase == GamePhase.LOBBY and not game.is_full()
        active_games.append(
            {
                "game_id": game_id,
                "slug": game.slug,
                "phase": game.phase.value,
                "joinable": is_joinable,
                "player_count": len(game.players),
                "open_seats": [s.value for s in game.open_seats()],
                "player_names": [p.name for p in game.players.values()],
                "hand_number": game.hand_number,
                "scores": {str(int(team)): score for team, score in game.scores.items()},
            }
        )

    # Sort joinable games first, then by player count descending
    active_games.sort(key=lambda g: (not g["joinable"], -g["player_count"]))

    return {"games": active_games, "count": len(active_games)}


# ============================================
#  Game History & Replay Endpoints
# ============================================


@router.get("/games/history")
async def get_game_history_list(limit: Annotated[int, Query(ge=1, le=50)] = 10) -> dict[str, Any]:
    """Get list of recently completed games.

    Args:
        limit: Maximum number of games to return (max 50)

    Returns:
        List of game summaries

    """
    histories = event_recorder.get_recent_histories(limit)
    return {"games": histories, "count": len(histories)}


@router.get("/games/{game_id}", responses=NOT_FOUND)
async def get_game(game_id: str) -> GameInfo:
    """Get public game information by id or slug."""
    game = websocket_manager.get_game(game_id)

    if not game:
        raise HTTPException(status_code=404, detail="Game not found")

    return _game_info(game)


@router.get("/games/{game_id}/replay", responses=NOT_FOUND)
async def get_game_replay(game_id: str) -> dict[str, Any]:
    """Get full replay data for a completed game.

    Args:
        game_id: ID of the completed game

    Returns:
        Complete game history with all events for replay

    """
    history = event_recorder.get_history(game_id)

    if not history:
        raise HTTPException(
            status_code=404,
            detail="Game history not found. Game may still be in progress or was not recorded.",
        )

    return history.to_dict()
