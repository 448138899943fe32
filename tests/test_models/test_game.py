"""Tests for the Game aggregate."""

import pytest

from euchre.models.card import Card
from euchre.models.enums import GamePhase, Rank, Seat, Suit, Team
from euchre.models.errors import ErrorCode, ProtocolError
from euchre.models.game import Game
from euchre.models.player import Player
from euchre.models.trick import Trick


@pytest.fixture
def game():
    return Game(id="game-1", slug="ABCD")


def seat_all(game: Game) -> None:
    for index, seat in enumerate(Seat):
        game.add_player(Player(id=f"p{index}", name=f"Player {index}", seat=seat))


class TestSeating:
    """Seating players at the table."""

    def test_add_player(self, game):
        assert game.add_player(Player(id="p1", name="Ann", seat=Seat.SOUTH))
        assert game.seat_of("p1") == Seat.SOUTH
        assert game.get_player("p1").name == "Ann"
        assert game.open_seats() == [Seat.WEST, Seat.NORTH, Seat.EAST]

    def test_seat_taken_or_duplicate_id(self, game):
        """A seat holds one player and a player id sits once."""
        game.add_player(Player(id="p1", name="Ann", seat=Seat.SOUTH))
        assert not game.add_player(Player(id="p2", name="Bob", seat=Seat.SOUTH))
        assert not game.add_player(Player(id="p1", name="Ann", seat=Seat.WEST))
        assert len(game.players) == 1

    def test_full_table(self, game):
        seat_all(game)
        assert game.is_full()
        assert game.can_start()
        assert game.open_seats() == []

    def test_remove_player(self, game):
        seat_all(game)
        removed = game.remove_player("p0")
        assert removed.seat == Seat.SOUTH
        assert game.remove_player("p0") is None
        assert not game.is_full()

    def test_player_at_unknown_seat(self, game):
        with pytest.raises(ProtocolError) as exc_info:
            game.player_at(Seat.EAST)
        assert exc_info.value.code == ErrorCode.UNKNOWN_SEAT


class TestLogs:
    """Message log and chat history."""

    def test_message_log_is_capped(self):
        """Only the most recent messages are kept."""
        game = Game(id="g", slug="G", max_messages=3)
        for i in range(5):
            game.add_message(f"message {i}")
        assert [m.text for m in game.messages] == ["message 2", "message 3", "message 4"]

    def test_chat_is_capped(self):
        game = Game(id="g", slug="G", max_chat=2)
        seat_all(game)
        for i in range(3):
            game.add_chat(Seat.SOUTH, f"hi {i}")
        assert [c.text for c in game.chat_history] == ["hi 1", "hi 2"]
        assert game.chat_history[-1].name == "Player 0"


class TestState:
    """Hand and session bookkeeping."""

    def test_defaults(self, game):
        assert game.phase == GamePhase.LOBBY
        assert game.scores == {Team.ONE: 0, Team.TWO: 0}
        assert game.created_at is not None
        assert not game.hand_in_progress

    def test_reset_session(self, game):
        """A new session zeroes scores and returns to the lobby."""
        seat_all(game)
        game.phase = GamePhase.GAME_OVER
        game.scores = {Team.ONE: 10, Team.TWO: 4}
        game.winning_team = Team.ONE
        game.dealer = Seat.WEST
        game.hand_number = 7

        game.reset_session()

        assert game.phase == GamePhase.LOBBY
        assert game.scores == {Team.ONE: 0, Team.TWO: 0}
        assert game.winning_team is None
        assert game.dealer is None
        assert game.hand_number == 0
        assert len(game.players) == 4

    def test_tricks_by_team(self, game):
        seat_all(game)
        game.players[Seat.SOUTH].tricks_won = 2
        game.players[Seat.NORTH].tricks_won = 1
        game.players[Seat.EAST].tricks_won = 2
        assert game.tricks_by_team() == {Team.ONE: 3, Team.TWO: 2}

    def test_accounted_cards(self, game):
        """Cards are counted wherever they sit."""
        seat_all(game)
        nine = Card(Suit.HEARTS, Rank.NINE)
        ten = Card(Suit.HEARTS, Rank.TEN)
        jack = Card(Suit.HEARTS, Rank.JACK)
        queen = Card(Suit.HEARTS, Rank.QUEEN)
        game.players[Seat.SOUTH].hand = [nine]
        game.kitty = [ten]
        game.up_card = jack
        game.current_trick = Trick(leader=Seat.WEST)
        game.current_trick.add_play(Seat.WEST, queen)

        assert sorted(c.id for c in game.accounted_cards()) == sorted(
            c.id for c in (nine, ten, jack, queen)
        )

    def test_active_player_count(self, game):
        assert game.active_player_count == 4
        game.going_alone = True
        assert game.active_player_count == 3
