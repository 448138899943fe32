"""Game snapshot service for periodic persistence.

Periodically saves in-memory games to MongoDB for crash recovery and purges
games nobody has touched for ``settings.game_expiry_hours``.
"""

import asyncio
import contextlib
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from euchre.config import settings

if TYPE_CHECKING:
    from euchre.api.websocket import ConnectionManager
    from euchre.repositories.game_repository import GameRepository

logger = logging.getLogger(__name__)


class SnapshotService:
    """Service for periodic game state snapshots to MongoDB.

    Runs as a background task and saves all games every ``interval`` seconds.
    """

    def __init__(
        self,
        connection_manager: "ConnectionManager",
        game_repository: "GameRepository | None",
        interval: float | None = None,
        expiry: timedelta | None = None,
    ) -> None:
        """Initialize snapshot service.

        Args:
            connection_manager: WebSocket connection manager with active games
            game_repository: MongoDB repository for persistence
            interval: Seconds between snapshots
            expiry: Age after which an untouched game is purged
        """
        self.connection_manager = connection_manager
        self.game_repository = game_repository
        self.interval = interval if interval is not None else settings.snapshot_interval_seconds
        self.expiry = expiry or timedelta(hours=settings.game_expiry_hours)
        self._running = False
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the background snapshot task."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Snapshot service started (interval: %ss)", self.interval)

    async def stop(self) -> None:
        """Stop the background snapshot task."""
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        logger.info("Snapshot service stopped")

    async def _run_loop(self) -> None:
        """Background loop that periodically saves game states."""
        while self._running:
            try:
                await asyncio.sleep(self.interval)
                self.purge_expired_games()
                await self.snapshot_all_games()
                await self.purge_stale_snapshots()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Error in snapshot loop")
                await asyncio.sleep(5)  # Brief pause before retry

    def _cutoff(self) -> datetime:
        return datetime.now(UTC) - self.expiry

    async def snapshot_all_games(self) -> int:
        """Save all in-memory games to MongoDB.

        Returns:
            Number of games saved
        """
        if not self.game_repository:
            return 0

        games = list(self.connection_manager.games.values())
        if not games:
            return 0

        saved = await self.game_repository.save_many(games)
        if saved > 0:
            logger.info("Snapshot: saved %d games to MongoDB", saved)
        return saved

    async def snapshot_game(self, game_id: str) -> bool:
        """Save a specific game to MongoDB."""
        if not self.game_repository:
            return False

        game = self.connection_manager.games.get(game_id)
        if not game:
            return False

        return await self.game_repository.save(game)

    async def restore_games(self) -> int:
        """Restore active, non-expired games from MongoDB on startup.

        Returns:
            Number of games restored
        """
        if not self.game_repository:
            return 0

        games = await self.game_repository.find_active_games(updated_since=self._cutoff())
        restored = 0
        for game in games:
            if game.id in self.connection_manager.games:
                continue
            # Nobody is connected right after a restart
            for player in game.players.values():
                player.is_connected = False
            self.connection_manager.add_game(game)
            restored += 1
            logger.info("Restored game %s (%s) from database", game.slug, game.phase.value)

        return restored

    def purge_expired_games(self) -> int:
        """Drop in-memory games that nobody is connected to and that have expired.

        Returns:
            Number of games dropped
        """
        cutoff = self._cutoff().isoformat()
        expired = [
            game_id
            for game_id, game in self.connection_manager.games.items()
            if game_id not in self.connection_manager.active_connections
            and (game.updated_at or game.created_at or "") < cutoff
        ]
        for game_id in expired:
            self.connection_manager.remove_game(game_id)
        if expired:
            logger.info("Dropped %d expired games from memory", len(expired))
        return len(expired)

    async def purge_stale_snapshots(self) -> int:
        """Delete stored games last written before the expiry cut-off."""
        if not self.game_repository:
            return 0
        return await self.game_repository.delete_stale(self._cutoff())
