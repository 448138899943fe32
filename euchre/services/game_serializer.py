"""Game serialization for MongoDB persistence.

Handles conversion between Game objects and MongoDB documents. The document
is a full snapshot of the game, hidden information included, so a restored
game resumes exactly where it stopped.
"""

from datetime import UTC, datetime
from typing import Any

from euchre.constants import CHAT_HISTORY_SIZE, MESSAGE_LOG_SIZE
from euchre.models.card import Card
from euchre.models.deck import Deck
from euchre.models.enums import GamePhase, Seat, Suit, Team
from euchre.models.game import ChatMessage, Game, GameMessage, HandResult
from euchre.models.player import Player
from euchre.models.trick import Play, Trick


def _cards(cards: list[Card]) -> list[dict[str, str]]:
    return [{"suit": c.suit.value, "rank": c.rank.value} for c in cards]


def _load_cards(data: list[dict[str, Any]]) -> list[Card]:
    return [Card.from_dict(c) for c in data]


def _enum_value(value: Any) -> Any:
    return value.value if value is not None else None


def _team_map(values: dict[Team, int]) -> dict[str, int]:
    return {str(int(team)): count for team, count in values.items()}


def _load_team_map(data: dict[str, int] | None) -> dict[Team, int]:
    loaded = {Team.ONE: 0, Team.TWO: 0}
    for key, value in (data or {}).items():
        loaded[Team(int(key))] = value
    return loaded


def serialize_player(player: Player) -> dict[str, Any]:
    """Serialize a Player to a dictionary."""
    return {
        "id": player.id,
        "name": player.name,
        "seat": player.seat.value,
        "hand": _cards(player.hand),
        "tricks_won": player.tricks_won,
        "is_connected": player.is_connected,
    }


def deserialize_player(data: dict[str, Any]) -> Player:
    """Deserialize a Player from a dictionary."""
    return Player(
        id=data["id"],
        name=data["name"],
        seat=Seat(data["seat"]),
        hand=_load_cards(data.get("hand", [])),
        tricks_won=data.get("tricks_won", 0),
        is_connected=data.get("is_connected", True),
    )


def serialize_trick(trick: Trick) -> dict[str, Any]:
    """Serialize a Trick to a dictionary."""
    return {
        "leader": trick.leader.value,
        "plays": [{"seat": p.seat.value, "card": _cards([p.card])[0]} for p in trick.plays],
        "winner": _enum_value(trick.winner),
        "winning_card": _cards([trick.winning_card])[0] if trick.winning_card else None,
    }


def deserialize_trick(data: dict[str, Any]) -> Trick:
    """Deserialize a Trick from a dictionary."""
    return Trick(
        leader=Seat(data["leader"]),
        plays=[Play(Seat(p["seat"]), Card.from_dict(p["card"])) for p in data.get("plays", [])],
        winner=Seat(data["winner"]) if data.get("winner") else None,
        winning_card=Card.from_dict(data["winning_card"]) if data.get("winning_card") else None,
    )


def serialize_hand_result(result: HandResult) -> dict[str, Any]:
    """Serialize a HandResult to a dictionary."""
    return result.to_dict()


def deserialize_hand_result(data: dict[str, Any]) -> HandResult:
    """Deserialize a HandResult from a dictionary."""
    return HandResult(
        maker=Team(data["maker"]),
        caller=Seat(data["caller"]),
        going_alone=data.get("going_alone", False),
        tricks=_load_team_map(data.get("tricks")),
        points=_load_team_map(data.get("points")),
        outcome=data["outcome"],
    )


def serialize_game(game: Game) -> dict[str, Any]:
    """Serialize a complete Game to a MongoDB document.

    Args:
        game: Game instance to serialize

    Returns:
        Dictionary suitable for MongoDB storage
    """
    return {
        "_id": game.id,
        "slug": game.slug,
        "phase": game.phase.value,
        "players": [serialize_player(p) for p in game.players.values()],
        "deck": _cards(game.deck.cards),
        "dealer": _enum_value(game.dealer),
        "initial_dealer": _enum_value(game.initial_dealer),
        "current_player": _enum_value(game.current_player),
        "hand_number": game.hand_number,
        "trump": _enum_value(game.trump),
        "up_card": _cards([game.up_card])[0] if game.up_card else None,
        "kitty": _cards(game.kitty),
        "turned_down_suit": _enum_value(game.turned_down_suit),
        "maker": int(game.maker) if game.maker else None,
        "caller": _enum_value(game.caller),
        "dealer_has_discarded": game.dealer_has_discarded,
        "going_alone": game.going_alone,
        "lone_player": _enum_value(game.lone_player),
        "sitting_out": _enum_value(game.sitting_out),
        "current_trick": serialize_trick(game.current_trick) if game.current_trick else None,
        "tricks": [serialize_trick(t) for t in game.tricks],
        "scores": _team_map(game.scores),
        "winning_team": int(game.winning_team) if game.winning_team else None,
        "last_hand_result": (
            serialize_hand_result(game.last_hand_result) if game.last_hand_result else None
        ),
        "messages": [m.to_dict() for m in game.messages],
        "chat_history": [c.to_dict() for c in game.chat_history],
        "games_played": game.games_played,
        "team_wins": _team_map(game.team_wins),
        "max_messages": game.max_messages,
        "max_chat": game.max_chat,
        "created_at": game.created_at or datetime.now(UTC).isoformat(),
        # Stored as a datetime so staleness queries can compare it
        "updated_at": datetime.now(UTC),
    }


def deserialize_game(data: dict[str, Any]) -> Game:
    """Deserialize a Game from a MongoDB document.

    Args:
        data: MongoDB document

    Returns:
        Game instance with full state restored
    """
    players = [deserialize_player(p) for p in data.get("players", [])]
    updated_at = data.get("updated_at")
    if isinstance(updated_at, datetime):
        updated_at = updated_at.isoformat()

    def _seat(key: str) -> Seat | None:
        return Seat(data[key]) if data.get(key) else None

    return Game(
        id=data["_id"],
        slug=data["slug"],
        phase=GamePhase(data["phase"]),
        players={p.seat: p for p in players},
        deck=Deck(_load_cards(data.get("deck", []))),
        dealer=_seat("dealer"),
        initial_dealer=_seat("initial_dealer"),
        current_player=_seat("current_player"),
        hand_number=data.get("hand_number", 0),
        trump=Suit(data["trump"]) if data.get("trump") else None,
        up_card=Card.from_dict(data["up_card"]) if data.get("up_card") else None,
        kitty=_load_cards(data.get("kitty", [])),
        turned_down_suit=Suit(data["turned_down_suit"]) if data.get("turned_down_suit") else None,
        maker=Team(data["maker"]) if data.get("maker") else None,
        caller=_seat("caller"),
        dealer_has_discarded=data.get("dealer_has_discarded", False),
        going_alone=data.get("going_alone", False),
        lone_player=_seat("lone_player"),
        sitting_out=_seat("sitting_out"),
        current_trick=deserialize_trick(data["current_trick"]) if data.get("current_trick") else None,
        tricks=[deserialize_trick(t) for t in data.get("tricks", [])],
        scores=_load_team_map(data.get("scores")),
        winning_team=Team(data["winning_team"]) if data.get("winning_team") else None,
        last_hand_result=(
            deserialize_hand_result(data["last_hand_result"])
            if data.get("last_hand_result")
            else None
        ),
        messages=[
            GameMessage(text=m["text"], timestamp=m["timestamp"], important=m.get("important", False))
            for m in data.get("messages", [])
        ],
        chat_history=[
            ChatMessage(seat=Seat(c["seat"]), name=c["name"], text=c["text"], timestamp=c["timestamp"])
            for c in data.get("chat_history", [])
        ],
        games_played=data.get("games_played", 0),
        team_wins=_load_team_map(data.get("team_wins")),
        created_at=data.get("created_at"),
        updated_at=updated_at,
        max_messages=data.get("max_messages", MESSAGE_LOG_SIZE),
        max_chat=data.get("max_chat", CHAT_HISTORY_SIZE),
    )
