"""Event recorder service for capturing game events during gameplay.

Used for replay and game history features.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from euchre.models.game_event import GameEvent, GameEventType, GameHistory
from euchre.models.seating import team_of

if TYPE_CHECKING:
    from euchre.models.game import Game


class EventRecorder:
    """Records game events for later replay."""

    def __init__(self) -> None:
        """Initialize the event recorder.

        Sets up in-memory storage for game events during gameplay and completed game histories.
        """
        # In-memory storage during game
        # Key: game_id, Value: list of events
        self._events: dict[str, list[GameEvent]] = {}
        self._game_start_times: dict[str, datetime] = {}
        # Completed game histories
        self._histories: dict[str, GameHistory] = {}

    def start_game(self, game_id: str) -> None:
        """Begin a fresh recording for a game."""
        self._events[game_id] = []
        self._game_start_times[game_id] = datetime.now(UTC)

    def record(self, event: GameEvent) -> None:
        """Record a single game event."""
        if event.event_type == GameEventType.GAME_STARTED:
            self.start_game(event.game_id)
        elif event.game_id not in self._events:
            self._events[event.game_id] = []
        self._events[event.game_id].append(event)

    def get_events(self, game_id: str) -> list[GameEvent]:
        """Events recorded so far for a game in progress."""
        return list(self._events.get(game_id, []))

    def end_game(self, game: "Game") -> GameHistory | None:
        """Finalize game recording and create history."""
        game_id = str(game.id)

        if game_id not in self._events or game.winning_team is None:
            return None

        players = [
            {"seat": p.seat.value, "name": p.name, "team": int(team_of(p.seat))}
            for p in game.players.values()
        ]

        # Calculate duration
        start_time = self._game_start_times.get(game_id, datetime.now(UTC))
        end_time = datetime.now(UTC)
        duration = int((end_time - start_time).total_seconds())

        history = GameHistory(
            game_id=game_id,
            slug=game.slug,
            created_at=start_time,
            ended_at=end_time,
            duration_seconds=duration,
            players=players,
            final_scores={str(int(team)): score for team, score in game.scores.items()},
            winning_team=int(game.winning_team),
            total_hands=game.hand_number,
            events=self._events[game_id],
        )

        # Store history and clean up
        self._histories[game_id] = history
        self.discard(game_id)

        return history

    def discard(self, game_id: str) -> None:
        """Drop an unfinished recording."""
        self._events.pop(game_id, None)
        self._game_start_times.pop(game_id, None)

    def get_history(self, game_id: str) -> GameHistory | None:
        """Get completed game history."""
        return self._histories.get(game_id)

    def get_all_histories(self) -> list[GameHistory]:
        """Get all completed game histories."""
        return list(self._histories.values())

    def get_recent_histories(self, limit: int = 10) -> list[dict]:
        """Get recent game summaries."""
        histories = sorted(self._histories.values(), key=lambda h: h.ended_at, reverse=True)[:limit]
        return [h.get_summary() for h in histories]


# Global event recorder instance
event_recorder = EventRecorder()
