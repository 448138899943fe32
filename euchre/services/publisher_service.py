"""Redis publisher service for game events.

Every engine event is published on ``game_events:<game_id>`` so other
server instances (and external consumers such as stats collectors) can
follow a table. Without Redis the service degrades to a no-op.
"""

import asyncio
import contextlib
import json
import logging
import time
from collections.abc import Callable, Coroutine
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from euchre.config import settings
from euchre.constants import REDIS_PUBLISH_TIMEOUT
from euchre.models.game_event import GameEvent

logger = logging.getLogger(__name__)

# Type for event handlers
EventHandler = Callable[[str, str, dict[str, Any]], Coroutine[Any, Any, None]]

GAME_EVENTS_PATTERN = "game_events:*"


def game_channel(game_id: str) -> str:
    """Channel carrying the events of one game."""
    return f"game_events:{game_id}"


class PublisherService:
    """Publishes and subscribes to game events via Redis pub/sub."""

    def __init__(self, url: str | None = None) -> None:
        """Initialize publisher service.

        Args:
            url: Redis URL, defaults to the configured one
        """
        self.url = url or settings.redis_url
        self.redis_client: redis.Redis | None = None
        self.pubsub: Any = None
        self._handlers: dict[str, list[EventHandler]] = {}
        self._subscriber_task: asyncio.Task[None] | None = None
        self._running = False
        self._instance_id = f"instance_{int(time.time() * 1000)}"

    async def connect(self) -> None:
        """Connect to Redis and verify connection."""
        try:
            self.redis_client = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            await self.redis_client.ping()
            logger.info("Connected to Redis (instance: %s)", self._instance_id)
        except (RedisError, TimeoutError, OSError):
            logger.warning("Redis not available, running without pub/sub")
            self.redis_client = None

    @property
    def is_connected(self) -> bool:
        """Check if Redis is connected."""
        return self.redis_client is not None

    async def publish(self, channel: str, message: dict[str, Any]) -> bool:
        """Publish message to Redis channel.

        Returns:
            True if successful

        """
        if not self.redis_client:
            return False

        payload = {**message, "_instance_id": self._instance_id}
        try:
            await asyncio.wait_for(
                self.redis_client.publish(channel, json.dumps(payload)),
                timeout=REDIS_PUBLISH_TIMEOUT,
            )
        except (RedisError, TypeError, TimeoutError):
            logger.exception("Error publishing to %s", channel)
            return False
        logger.debug("Published message to channel %s", channel)
        return True

    async def publish_game_event(self, event: GameEvent) -> bool:
        """Publish an engine event on its game's channel."""
        message = {
            "event": event.event_type.value,
            "game_id": event.game_id,
            "data": event.to_dict(),
            "timestamp": time.time(),
        }
        return await self.publish(game_channel(event.game_id), message)

    async def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Register a handler for a channel pattern.

        Args:
            pattern: Channel pattern (e.g., "game_events:*")
            handler: Called as ``await handler(event_type, game_id, data)``
        """
        self._handlers.setdefault(pattern, []).append(handler)
        logger.info("Registered handler for pattern: %s", pattern)

    async def start_subscriber(self) -> None:
        """Start the background subscriber task."""
        if not self.redis_client or self._running:
            return

        self._running = True
        await self._psubscribe_all()
        self._subscriber_task = asyncio.create_task(self._subscriber_loop())
        logger.info("Redis subscriber started")

    async def _psubscribe_all(self) -> None:
        if not self.redis_client:
            return
        self.pubsub = self.redis_client.pubsub()
        for pattern in self._handlers:
            await self.pubsub.psubscribe(pattern)
            logger.info("Subscribed to pattern: %s", pattern)

    async def _subscriber_loop(self) -> None:
        """Background loop processing incoming messages."""
        while self._running and self.pubsub is not None:
            try:
                message = await self.pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=1.0,
                )
                if message and message["type"] == "pmessage":
                    await self._handle_message(message)
            except asyncio.CancelledError:
                break
            except (RedisError, ConnectionError):
                logger.warning("Redis connection lost, attempting reconnect...")
                await asyncio.sleep(5)
                await self.connect()
                await self._psubscribe_all()

    async def _handle_message(self, message: dict[str, Any]) -> None:
        """Process an incoming pub/sub message."""
        raw_pattern = message.get("pattern", "")
        pattern = raw_pattern.decode() if isinstance(raw_pattern, bytes) else raw_pattern

        try:
            data = json.loads(message.get("data", "{}"))
        except json.JSONDecodeError:
            logger.warning("Invalid JSON in pub/sub message")
            return

        # Skip messages from our own instance
        if data.get("_instance_id") == self._instance_id:
            return

        event_type = data.get("event", "unknown")
        game_id = data.get("game_id", "")
        for handler in self._handlers.get(pattern, []):
            try:
                await handler(event_type, game_id, data.get("data", {}))
            except Exception:
                logger.exception("Error in event handler for %s", event_type)

    async def stop_subscriber(self) -> None:
        """Stop the background subscriber task."""
        self._running = False

        if self._subscriber_task:
            self._subscriber_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._subscriber_task
            self._subscriber_task = None

        if self.pubsub:
            await self.pubsub.aclose()
            self.pubsub = None

        logger.info("Redis subscriber stopped")

    async def close(self) -> None:
        """Close Redis connection."""
        await self.stop_subscriber()

        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("Redis connection closed")
