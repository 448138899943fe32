"""Response models and DTOs."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from euchre.models.enums import Command
from euchre.models.errors import ErrorCode

__all__ = [
    "CardListResponse",
    "Command",
    "CreateGameRequest",
    "CreateGameResponse",
    "ErrorCode",
    "ErrorResponse",
    "GameInfo",
    "PlayerInfo",
    "ServerMessage",
]


class PlayerInfo(BaseModel):
    """Player information for responses."""

    id: str
    name: str
    seat: str
    team: int
    is_connected: bool


class GameInfo(BaseModel):
    """Public game information."""

    id: str
    slug: str
    phase: str
    hand_number: int
    dealer: str | None
    trump: str | None
    scores: dict[str, int]
    winning_team: int | None
    players: list[PlayerInfo]
    open_seats: list[str]


@dataclass
class ServerMessage:
    """Message sent from server to clients via WebSocket.

    Attributes:
        command: Command type
        game_id: Game identifier
        content: Message payload (varies by command)
        receiver_id: Specific player to receive (empty = broadcast)
        excluded_id: Player to exclude from broadcast

    """

    command: Command
    game_id: str
    content: Any
    receiver_id: str = ""
    excluded_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "command": self.command.value,
            "content": self.content,
        }


class CardListResponse(BaseModel):
    """Response for card list endpoint."""

    cards: list[dict[str, Any]]


class CreateGameRequest(BaseModel):
    """Request to create a new game."""

    lobby_id: str | None = None


class CreateGameResponse(BaseModel):
    """Response for game creation."""

    game_id: str
    slug: str
    message: str = "Game created successfully"


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: str | None = None
