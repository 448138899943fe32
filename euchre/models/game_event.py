"""Game event model.

The engine describes every state change as a ``GameEvent``. The API layer
turns them into WebSocket notices, and the event recorder keeps them for
replay.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def _utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class GameEventType(str, Enum):
    """Types of game events that can be recorded."""

    # Session lifecycle
    PLAYER_JOINED = "PLAYER_JOINED"
    PLAYER_LEFT = "PLAYER_LEFT"
    GAME_STARTED = "GAME_STARTED"
    GAME_ENDED = "GAME_ENDED"
    SESSION_RESET = "SESSION_RESET"

    # Hand events
    HAND_STARTED = "HAND_STARTED"
    HAND_ABORTED = "HAND_ABORTED"
    REDEAL = "REDEAL"

    # Bidding
    ORDERED_UP = "ORDERED_UP"
    PASSED = "PASSED"
    DEALER_DISCARDED = "DEALER_DISCARDED"
    TRUMP_CALLED = "TRUMP_CALLED"
    WENT_ALONE = "WENT_ALONE"

    # Card play
    CARD_PLAYED = "CARD_PLAYED"
    TRICK_WON = "TRICK_WON"

    # Scoring
    HAND_SCORED = "HAND_SCORED"


@dataclass
class GameEvent:
    """Represents a single game event."""

    game_id: str
    event_type: GameEventType
    timestamp: datetime = field(default_factory=_utc_now)
    hand_number: int = 0
    trick_number: int | None = None
    seat: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage/transmission."""
        return {
            "game_id": self.game_id,
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "hand_number": self.hand_number,
            "trick_number": self.trick_number,
            "seat": self.seat,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameEvent":
        """Create from dictionary."""
        return cls(
            game_id=data["game_id"],
            event_type=GameEventType(data["event_type"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            hand_number=data.get("hand_number", 0),
            trick_number=data.get("trick_number"),
            seat=data.get("seat"),
            data=data.get("data", {}),
        )


@dataclass
class GameHistory:
    """Complete game history for replay."""

    game_id: str
    slug: str
    created_at: datetime
    ended_at: datetime
    duration_seconds: int
    players: list[dict[str, Any]]  # Seat, name and team of each player
    final_scores: dict[str, int]
    winning_team: int
    total_hands: int
    events: list[GameEvent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "game_id": self.game_id,
            "slug": self.slug,
            "created_at": self.created_at.isoformat(),
            "ended_at": self.ended_at.isoformat(),
            "duration_seconds": self.duration_seconds,
            "players": self.players,
            "final_scores": self.final_scores,
            "winning_team": self.winning_team,
            "total_hands": self.total_hands,
            "events": [e.to_dict() for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameHistory":
        """Create from dictionary."""
        return cls(
            game_id=data["game_id"],
            slug=data["slug"],
            created_at=datetime.fromisoformat(data["created_at"]),
            ended_at=datetime.fromisoformat(data["ended_at"]),
            duration_seconds=data["duration_seconds"],
            players=data["players"],
            final_scores=data["final_scores"],
            winning_team=data["winning_team"],
            total_hands=data["total_hands"],
            events=[GameEvent.from_dict(e) for e in data.get("events", [])],
        )

    def get_summary(self) -> dict[str, Any]:
        """Get summary without full events (for listing)."""
        return {
            "game_id": self.game_id,
            "slug": self.slug,
            "created_at": self.created_at.isoformat(),
            "duration_seconds": self.duration_seconds,
            "players": self.players,
            "final_scores": self.final_scores,
            "winning_team": self.winning_team,
            "total_hands": self.total_hands,
            "event_count": len(self.events),
        }
