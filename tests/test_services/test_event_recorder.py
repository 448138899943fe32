"""Tests for the event recorder."""

from euchre.models.enums import Seat, Team
from euchre.models.game import Game
from euchre.models.game_event import GameEvent, GameEventType, GameHistory
from euchre.models.player import Player
from euchre.services.event_recorder import EventRecorder


def finished_game(game_id: str = "rec-game") -> Game:
    game = Game(id=game_id, slug="REC1", hand_number=6)
    for seat in Seat:
        game.add_player(Player(id=seat.value, name=seat.value.title(), seat=seat))
    game.scores = {Team.ONE: 4, Team.TWO: 10}
    game.winning_team = Team.TWO
    return game


def event(game_id: str, event_type: GameEventType, **data) -> GameEvent:
    return GameEvent(game_id=game_id, event_type=event_type, data=data)


class TestEventRecorder:
    """Recording and finalizing games."""

    def test_records_in_order(self):
        recorder = EventRecorder()
        recorder.record(event("g", GameEventType.GAME_STARTED))
        recorder.record(event("g", GameEventType.HAND_STARTED))

        assert [e.event_type for e in recorder.get_events("g")] == [
            GameEventType.GAME_STARTED,
            GameEventType.HAND_STARTED,
        ]

    def test_game_started_resets_recording(self):
        recorder = EventRecorder()
        recorder.record(event("g", GameEventType.PLAYER_JOINED))
        recorder.record(event("g", GameEventType.GAME_STARTED))
        assert len(recorder.get_events("g")) == 1

    def test_end_game_builds_history(self):
        recorder = EventRecorder()
        game = finished_game()
        recorder.record(event(game.id, GameEventType.GAME_STARTED))
        recorder.record(event(game.id, GameEventType.GAME_ENDED, winning_team=2))

        history = recorder.end_game(game)

        assert history is not None
        assert history.winning_team == 2
        assert history.final_scores == {"1": 4, "2": 10}
        assert history.total_hands == 6
        assert len(history.players) == 4
        assert len(history.events) == 2
        assert recorder.get_events(game.id) == []
        assert recorder.get_history(game.id) is history

    def test_end_game_without_recording(self):
        recorder = EventRecorder()
        assert recorder.end_game(finished_game()) is None

    def test_end_game_without_winner(self):
        recorder = EventRecorder()
        game = finished_game()
        game.winning_team = None
        recorder.record(event(game.id, GameEventType.GAME_STARTED))
        assert recorder.end_game(game) is None

    def test_discard(self):
        recorder = EventRecorder()
        recorder.record(event("g", GameEventType.GAME_STARTED))
        recorder.discard("g")
        assert recorder.get_events("g") == []

    def test_history_round_trip_and_summaries(self):
        recorder = EventRecorder()
        for game_id in ("a", "b", "c"):
            recorder.record(event(game_id, GameEventType.GAME_STARTED))
            recorder.end_game(finished_game(game_id))

        summaries = recorder.get_recent_histories(limit=2)
        assert len(summaries) == 2
        assert summaries[0]["event_count"] == 1
        assert len(recorder.get_all_histories()) == 3

        history = recorder.get_history("a")
        restored = GameHistory.from_dict(history.to_dict())
        assert restored.game_id == "a"
        assert restored.events[0].event_type == GameEventType.GAME_STARTED
