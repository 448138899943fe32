"""Game repository for MongoDB persistence."""

import logging
from datetime import datetime
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReplaceOne
from pymongo.errors import PyMongoError

from euchre.config import settings
from euchre.models.enums import GamePhase
from euchre.models.game import Game
from euchre.services.game_serializer import deserialize_game, serialize_game

logger = logging.getLogger(__name__)


class GameRepository:
    """Repository for game persistence using MongoDB.

    Stores one full snapshot document per game, keyed by game id, with an
    ``updated_at`` last-write timestamp used to find and purge stale games.
    """

    def __init__(self) -> None:
        """Initialize repository."""
        self.client: AsyncIOMotorClient[dict[str, Any]] | None = None
        self.db: AsyncIOMotorDatabase[dict[str, Any]] | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and create indexes."""
        try:
            self.client = AsyncIOMotorClient(
                settings.mongodb_uri,
                serverSelectionTimeoutMS=2000,
                tz_aware=True,
            )
            self.db = self.client[settings.mongodb_database]

            # Verify connection
            await self.client.admin.command("ping")
            logger.info("Connected to MongoDB: %s", settings.mongodb_database)

            await self._create_indexes()

        except PyMongoError:
            logger.warning("MongoDB not available")
            raise

    async def _create_indexes(self) -> None:
        """Create indexes for efficient queries."""
        if self.db is None:
            return

        try:
            # Lookups by game code
            await self.db.games.create_index("slug", unique=True, sparse=True)
            await self.db.games.create_index("phase")
            # Staleness purge
            await self.db.games.create_index([("updated_at", ASCENDING)])
            # Active games, newest first
            await self.db.games.create_index([("phase", ASCENDING), ("updated_at", DESCENDING)])

            logger.info("MongoDB indexes created successfully")
        except PyMongoError:
            logger.exception("Error creating indexes")

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    async def save(self, game: Game) -> bool:
        """Save or update a game in the database (upsert).

        Args:
            game: Game instance to save

        Returns:
            True if successful
        """
        if self.db is None:
            return False

        try:
            result = await self.db.games.replace_one(
                {"_id": game.id},
                serialize_game(game),
                upsert=True,
            )
        except PyMongoError:
            logger.exception("Error saving game %s", game.id)
            return False
        else:
            if result.acknowledged:
                logger.debug("Game %s saved to database", game.id)
            return result.acknowledged

    async def _find_one(self, query: dict[str, Any]) -> Game | None:
        if self.db is None:
            return None

        try:
            result = await self.db.games.find_one(query)
        except PyMongoError:
            logger.exception("Error finding game with %s", query)
            return None
        if not result:
            return None
        try:
            return deserialize_game(result)
        except (KeyError, ValueError) as e:
            logger.warning("Error deserializing game %s: %s", result.get("_id"), e)
            return None

    async def find_by_id(self, game_id: str) -> Game | None:
        """Find and restore a game by ID."""
        return await self._find_one({"_id": game_id})

    async def find_by_slug(self, slug: str) -> Game | None:
        """Find and restore a game by slug (game code)."""
        return await self._find_one({"slug": slug})

    async def find_active_games(
        self, limit: int = 100, updated_since: datetime | None = None
    ) -> list[Game]:
        """Find games that have not ended, newest first.

        Args:
            limit: Maximum number of games to return
            updated_since: Ignore games last written before this time

        Returns:
            List of active Game instances
        """
        if self.db is None:
            return []

        query: dict[str, Any] = {"phase": {"$ne": GamePhase.GAME_OVER.value}}
        if updated_since is not None:
            query["updated_at"] = {"$gte": updated_since}

        games = []
        try:
            cursor = self.db.games.find(query).sort("updated_at", DESCENDING).limit(limit)
            async for doc in cursor:
                try:
                    games.append(deserialize_game(doc))
                except (KeyError, ValueError) as e:
                    logger.warning("Error deserializing game %s: %s", doc.get("_id"), e)
        except PyMongoError:
            logger.exception("Error finding active games")
            return []

        logger.info("Found %d active games in database", len(games))
        return games

    async def delete(self, game_id: str) -> bool:
        """Delete a game from the database."""
        if self.db is None:
            return False

        try:
            result = await self.db.games.delete_one({"_id": game_id})
        except PyMongoError:
            logger.exception("Error deleting game %s", game_id)
            return False
        else:
            return result.deleted_count > 0

    async def delete_stale(self, older_than: datetime) -> int:
        """Delete games last written before ``older_than``.

        Returns:
            Number of games deleted
        """
        if self.db is None:
            return 0

        try:
            result = await self.db.games.delete_many({"updated_at": {"$lt": older_than}})
        except PyMongoError:
            logger.exception("Error deleting stale games")
            return 0
        if result.deleted_count:
            logger.info("Deleted %d stale games", result.deleted_count)
        return result.deleted_count

    async def save_many(self, games: list[Game]) -> int:
        """Save multiple games in bulk.

        Returns:
            Number of games successfully saved
        """
        if self.db is None or not games:
            return 0

        operations = [
            ReplaceOne({"_id": game.id}, serialize_game(game), upsert=True) for game in games
        ]
        try:
            result = await self.db.games.bulk_write(operations)
        except PyMongoError:
            logger.exception("Error bulk saving games")
            return 0
        saved_count = result.upserted_count + result.modified_count
        logger.debug("Bulk saved %d games", saved_count)
        return saved_count
