"""WebSocket connection manager and hub."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastapi import WebSocket, WebSocketDisconnect

from euchre.api.game_handler import GameHandler

if TYPE_CHECKING:
    from euchre.api.responses import ServerMessage
    from euchre.models.game import Game
    from euchre.repositories.game_repository import GameRepository
    from euchre.services.publisher_service import PublisherService

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections for multiplayer games.

    Handles:
    - Player connections per game
    - Message delivery and broadcasting
    - Connection lifecycle
    - In-memory registry of games
    """

    def __init__(self) -> None:
        """Initialize the connection manager."""
        # game_id -> player_id -> WebSocket
        self.active_connections: dict[str, dict[str, WebSocket]] = {}
        self.games: dict[str, Game] = {}
        self.game_handler: GameHandler
        # External services (set via set_services)
        self._game_repository: GameRepository | None = None
        self._publisher_service: PublisherService | None = None

    def set_services(
        self,
        game_repository: GameRepository | None,
        publisher_service: PublisherService | None,
    ) -> None:
        """Set external services for persistence and pub/sub.

        Args:
            game_repository: MongoDB repository for game persistence
            publisher_service: Redis pub/sub service
        """
        self._game_repository = game_repository
        self._publisher_service = publisher_service
        self.game_handler.set_publisher(publisher_service)

    def set_game_handler(self, game_handler: GameHandler) -> None:
        """Set the game handler after initialization to avoid circular imports.

        Args:
            game_handler: The game handler instance

        """
        self.game_handler = game_handler

    async def connect(self, websocket: WebSocket, game_id: str, player_id: str) -> None:
        """Accept a new WebSocket connection for a player and send them the state.

        Args:
            websocket: WebSocket connection
            game_id: Game identifier
            player_id: Player identifier

        """
        await websocket.accept()
        self.register(websocket, game_id, player_id)

        if game_id in self.games:
            await self.game_handler.send_game_state(self.games[game_id], player_id)

    def register(self, websocket: WebSocket, game_id: str, player_id: str) -> None:
        """Track an accepted socket, replacing any older one for the same player."""
        self.active_connections.setdefault(game_id, {})[player_id] = websocket
        logger.info("Player %s connected to game %s", player_id, game_id)

    async def try_restore_game(self, game_id: str) -> bool:
        """Try to restore a game from MongoDB.

        Args:
            game_id: Game identifier

        Returns:
            True if game was restored
        """
        if not self._game_repository:
            return False

        game = await self._game_repository.find_by_id(game_id)
        if game is None:
            game = await self._game_repository.find_by_slug(game_id.upper())
        if game is None:
            return False

        # Nobody is connected to a freshly restored game
        for player in game.players.values():
            player.is_connected = False
        self.games[game.id] = game
        logger.info("Restored game %s from MongoDB on reconnection", game.id)
        return True

    def disconnect(self, game_id: str, player_id: str) -> None:
        """Remove a player WebSocket connection.

        Args:
            game_id: Game identifier
            player_id: Player identifier

        """
        connections = self.active_connections.get(game_id)
        if connections is None or player_id not in connections:
            return

        del connections[player_id]
        logger.info("Player %s disconnected from game %s", player_id, game_id)

        # Clean up empty game once nobody is connected or seated
        if not connections:
            del self.active_connections[game_id]
            game = self.games.get(game_id)
            if game is not None and not game.players:
                self.remove_game(game_id)

    async def send_personal_message(
        self, message: ServerMessage, game_id: str, player_id: str
    ) -> None:
        """Send message to specific player.

        Args:
            message: Message to send
            game_id: Game identifier
            player_id: Player identifier

        """
        websocket = self.active_connections.get(game_id, {}).get(player_id)
        if websocket is None:
            return
        try:
            await websocket.send_json(message.to_dict())
        except (WebSocketDisconnect, RuntimeError, ConnectionError, OSError):
            logger.warning("Connection lost to %s", player_id)
            self.disconnect(game_id, player_id)

    async def broadcast_to_game(
        self,
        message: ServerMessage,
        game_id: str,
        excluded_player_id: str | None = None,
    ) -> None:
        """Broadcast message to all players in a game.

        Args:
            message: Message to broadcast
            game_id: Game identifier
            excluded_player_id: Player to exclude from broadcast

        """
        excluded = excluded_player_id or message.excluded_id
        disconnected_players = []

        for player_id, websocket in list(self.active_connections.get(game_id, {}).items()):
            if excluded and player_id == excluded:
                continue
            try:
                await websocket.send_json(message.to_dict())
            except (WebSocketDisconnect, RuntimeError, ConnectionError, OSError):
                logger.warning("Connection lost to player %s", player_id)
                disconnected_players.append(player_id)

        for player_id in disconnected_players:
            self.disconnect(game_id, player_id)

    async def handle_player_message(
        self, websocket: WebSocket, game_id: str, player_id: str
    ) -> None:
        """Handle incoming messages from a player until the socket closes.

        Args:
            websocket: WebSocket connection
            game_id: Game identifier
            player_id: Player identifier

        """
        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    logger.warning("Malformed message from %s in game %s", player_id, game_id)
                    continue
                if not isinstance(message, dict):
                    continue

                command = message.get("command", "")
                content = message.get("content") or {}

                logger.info("Received %s from player %s in game %s", command, player_id, game_id)

                game = self.games.get(game_id)
                if game is None:
                    logger.warning("Game %s not found", game_id)
                    continue

                await self.game_handler.handle_command(game, player_id, command, content)

        except WebSocketDisconnect:
            logger.info("Player %s disconnected from game %s", player_id, game_id)

        except (RuntimeError, ConnectionError, OSError) as e:
            logger.warning("Error handling message from %s: %s", player_id, e)

        # Only react if this socket is still the player's current one
        if self.active_connections.get(game_id, {}).get(player_id) is not websocket:
            return
        self.disconnect(game_id, player_id)
        game = self.games.get(game_id)
        if game is not None:
            await self.game_handler.handle_disconnect(game, player_id)
            if not game.players and game_id not in self.active_connections:
                self.remove_game(game_id)

    def get_game(self, game_id: str) -> Game | None:
        """Get game by ID or slug.

        First tries direct lookup by game_id (UUID).
        If not found, searches by slug (4-char hex code).
        """
        if game_id in self.games:
            return self.games[game_id]

        game_id_upper = game_id.upper()
        for game in self.games.values():
            if game.slug.upper() == game_id_upper:
                return game

        return None

    def add_game(self, game: Game) -> None:
        """Add game to manager."""
        self.games[game.id] = game

    def remove_game(self, game_id: str) -> None:
        """Forget a game and its per-game bookkeeping."""
        self.games.pop(game_id, None)
        self.game_handler.forget_game(game_id)


# Global WebSocket manager instance
websocket_manager = ConnectionManager()

# Initialize game handler to resolve circular dependency
websocket_manager.set_game_handler(GameHandler(websocket_manager))
