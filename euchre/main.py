"""FastAPI main application."""

import contextlib
import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from euchre.api.routes import router
from euchre.api.websocket import websocket_manager
from euchre.config import settings
from euchre.repositories.game_repository import GameRepository
from euchre.services.publisher_service import GAME_EVENTS_PATTERN, PublisherService
from euchre.services.snapshot_service import SnapshotService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stdout,
)
logging.getLogger("euchre").setLevel(settings.log_level.upper())
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


async def handle_redis_game_event(event_type: str, game_id: str, data: dict[str, Any]) -> None:
    """Handle game events received from Redis pub/sub.

    Called when another instance publishes a game event. Events are only
    logged; game state is never rebuilt from another instance's stream.

    Args:
        event_type: Type of event
        game_id: Game identifier
        data: Event payload
    """
    logger.debug(
        "Received Redis event: %s for game %s (data keys: %s)",
        event_type,
        game_id,
        list(data.keys()),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown events.

    Handles:
    - Redis connection setup
    - Database connection initialization
    - Game restoration from MongoDB
    - Periodic snapshot service
    - Cleanup on shutdown
    """
    app.state.publisher_service = PublisherService()
    await app.state.publisher_service.connect()

    # In-memory only when MongoDB is unreachable
    app.state.game_repository = GameRepository()
    try:
        await app.state.game_repository.connect()
    except (ConnectionError, TimeoutError, OSError, PyMongoError):
        logger.warning("MongoDB not available, running without persistence")
        app.state.game_repository = None

    websocket_manager.set_services(
        game_repository=app.state.game_repository,
        publisher_service=app.state.publisher_service,
    )

    app.state.snapshot_service = SnapshotService(
        connection_manager=websocket_manager,
        game_repository=app.state.game_repository,
    )

    if app.state.game_repository:
        restored = await app.state.snapshot_service.restore_games()
        if restored > 0:
            logger.info("Restored %d games from MongoDB on startup", restored)

    await app.state.snapshot_service.start()

    if app.state.publisher_service.is_connected:
        await app.state.publisher_service.subscribe(GAME_EVENTS_PATTERN, handle_redis_game_event)
        await app.state.publisher_service.start_subscriber()

    yield

    # Final snapshot before shutdown
    await app.state.snapshot_service.snapshot_all_games()
    await app.state.snapshot_service.stop()

    await websocket_manager.game_handler.cancel_pending_deals()

    if app.state.game_repository:
        with contextlib.suppress(PyMongoError):
            await app.state.game_repository.disconnect()

    await app.state.publisher_service.close()


app = FastAPI(
    title="Euchre API",
    description="Multiplayer Euchre card game server",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, "http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
async def root() -> dict[str, str]:
    """API info."""
    return {
        "message": "Euchre API",
        "version": API_VERSION,
        "status": "running",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "euchre.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info",
    )


if __name__ == "__main__":
    main()
