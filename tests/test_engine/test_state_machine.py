"""Tests for the state machine driver and session operations."""

import random

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from euchre.engine import ACTION_PHASES, Action, EuchreStateMachine
from euchre.engine.session import chat
from euchre.models.card import ALL_CARDS
from euchre.models.enums import GamePhase, Seat, Suit, Team
from euchre.models.errors import ErrorCode, ProtocolError, SessionError
from euchre.models.game import Game
from euchre.models.game_event import GameEventType
from euchre.models.player import Player

S, W, N, E = Seat.SOUTH, Seat.WEST, Seat.NORTH, Seat.EAST


def new_table() -> Game:
    game = Game(id="sm-game", slug="SM01")
    for seat in Seat:
        game.add_player(Player(id=seat.value, name=seat.value.title(), seat=seat))
    return game


class TestJoin:
    """Seating players through the machine."""

    def test_join_first_free_seat(self):
        game = Game(id="g", slug="G")
        machine = EuchreStateMachine(game)

        seat, events = machine.join("p1", "  Ann  ")

        assert seat == S
        assert game.players[S].name == "Ann"
        assert events[0].event_type == GameEventType.PLAYER_JOINED
        assert events[0].data["team"] == 1
        assert game.updated_at is not None

    def test_join_requested_seat(self):
        game = Game(id="g", slug="G")
        seat, _ = EuchreStateMachine(game).join("p1", "Ann", E)
        assert seat == E

    def test_join_through_dispatch(self):
        game = Game(id="g", slug="G")
        events = EuchreStateMachine(game).dispatch(
            None, Action.JOIN, {"player_id": "p1", "name": "Ann", "seat": N}
        )
        assert events[0].seat == N.value

    @pytest.mark.parametrize(
        ("player_id", "name", "seat", "code"),
        [
            ("south", "Again", None, ErrorCode.ALREADY_SEATED),
            ("newbie", "New", None, ErrorCode.GAME_IS_FULL),
        ],
    )
    def test_join_full_table(self, player_id, name, seat, code):
        game = new_table()
        with pytest.raises(SessionError) as exc_info:
            EuchreStateMachine(game).join(player_id, name, seat)
        assert exc_info.value.code == code
        assert len(game.players) == 4

    def test_seat_taken(self):
        game = Game(id="g", slug="G")
        machine = EuchreStateMachine(game)
        machine.join("p1", "Ann", W)
        with pytest.raises(SessionError) as exc_info:
            machine.join("p2", "Bob", W)
        assert exc_info.value.code == ErrorCode.SEAT_TAKEN
        assert len(game.players) == 1

    def test_blank_name(self):
        game = Game(id="g", slug="G")
        with pytest.raises(SessionError) as exc_info:
            EuchreStateMachine(game).join("p1", "   ")
        assert exc_info.value.code == ErrorCode.INVALID_NAME
        assert not game.players

    def test_join_after_start(self):
        game = new_table()
        game.remove_player("east")
        game.phase = GamePhase.HAND_OVER
        with pytest.raises(ProtocolError) as exc_info:
            EuchreStateMachine(game).join("newbie", "New")
        assert exc_info.value.code == ErrorCode.GAME_ALREADY_STARTED


class TestStartGame:
    """Starting play."""

    def test_start_game_deals(self):
        game = new_table()
        events = EuchreStateMachine(game, random.Random(3)).dispatch(S, Action.START_GAME)

        assert [e.event_type for e in events] == [
            GameEventType.GAME_STARTED,
            GameEventType.HAND_STARTED,
        ]
        assert game.phase == GamePhase.ORDER_UP_ROUND1
        assert game.dealer is not None
        assert game.initial_dealer == game.dealer
        assert game.hand_number == 1
        assert all(len(p.hand) == 5 for p in game.players.values())

    def test_start_needs_four(self):
        game = new_table()
        game.remove_player("west")
        with pytest.raises(SessionError) as exc_info:
            EuchreStateMachine(game).start_game(S)
        assert exc_info.value.code == ErrorCode.NOT_ENOUGH_PLAYERS
        assert game.phase == GamePhase.LOBBY

    def test_start_twice(self):
        game = new_table()
        machine = EuchreStateMachine(game, random.Random(3))
        machine.start_game(S)
        with pytest.raises(ProtocolError) as exc_info:
            machine.dispatch(S, Action.START_GAME)
        assert exc_info.value.code == ErrorCode.NOT_IN_PHASE


class TestDispatch:
    """Phase routing."""

    def test_every_hand_action_has_one_phase(self):
        for action in (
            Action.ORDER_UP,
            Action.DEALER_DISCARD,
            Action.CALL_TRUMP,
            Action.GO_ALONE,
            Action.PLAY_CARD,
        ):
            assert ACTION_PHASES[action] in (
                GamePhase.ORDER_UP_ROUND1,
                GamePhase.ORDER_UP_ROUND2,
                GamePhase.AWAITING_DEALER_DISCARD,
                GamePhase.AWAITING_GO_ALONE,
                GamePhase.PLAYING_TRICKS,
            )

    @pytest.mark.parametrize(
        ("action", "payload"),
        [
            (Action.PLAY_CARD, {"card": ALL_CARDS[0]}),
            (Action.CALL_TRUMP, {"suit": Suit.CLUBS}),
            (Action.GO_ALONE, {"decision": True}),
            (Action.DEALER_DISCARD, {"card": ALL_CARDS[0]}),
        ],
    )
    def test_wrong_phase_is_rejected_without_change(self, action, payload):
        game = new_table()
        machine = EuchreStateMachine(game, random.Random(5))
        machine.start_game(S)
        before = (game.phase, game.current_player, [list(p.hand) for p in game.players.values()])

        with pytest.raises(ProtocolError) as exc_info:
            machine.dispatch(game.current_player, action, payload)

        assert exc_info.value.code == ErrorCode.NOT_IN_PHASE
        after = (game.phase, game.current_player, [list(p.hand) for p in game.players.values()])
        assert before == after

    def test_unknown_seat(self):
        game = new_table()
        machine = EuchreStateMachine(game, random.Random(5))
        machine.start_game(S)
        with pytest.raises(ProtocolError) as exc_info:
            machine.dispatch(None, Action.ORDER_UP, {"decision": True})
        assert exc_info.value.code == ErrorCode.UNKNOWN_SEAT

    def test_valid_plays_outside_trick_play(self):
        game = new_table()
        EuchreStateMachine(game, random.Random(5)).start_game(S)
        assert EuchreStateMachine(game).valid_plays(S) == []


class TestSession:
    """New sessions, leaving and chat."""

    def test_new_session_during_hand(self):
        game = new_table()
        machine = EuchreStateMachine(game, random.Random(5))
        machine.start_game(S)
        with pytest.raises(ProtocolError) as exc_info:
            machine.new_session(S)
        assert exc_info.value.code == ErrorCode.CANNOT_RESET_SESSION

    def test_new_session_after_game_over(self):
        """Scores reset and disconnected players lose their seat."""
        game = new_table()
        game.phase = GamePhase.GAME_OVER
        game.scores = {Team.ONE: 10, Team.TWO: 3}
        game.winning_team = Team.ONE
        game.games_played = 1
        game.players[E].is_connected = False

        events = EuchreStateMachine(game).dispatch(S, Action.NEW_SESSION)

        assert events[0].event_type == GameEventType.SESSION_RESET
        assert game.phase == GamePhase.LOBBY
        assert game.scores == {Team.ONE: 0, Team.TWO: 0}
        assert game.winning_team is None
        assert E not in game.players
        assert len(game.players) == 3
        # Session tallies survive
        assert game.games_played == 1

    def test_leave_in_lobby(self):
        game = new_table()
        events = EuchreStateMachine(game).dispatch(W, Action.LEAVE)
        assert [e.event_type for e in events] == [GameEventType.PLAYER_LEFT]
        assert W not in game.players
        assert game.phase == GamePhase.LOBBY

    def test_leave_mid_hand(self):
        """Leaving mid-hand abandons it; the table returns to the lobby with scores kept."""
        game = new_table()
        machine = EuchreStateMachine(game, random.Random(5))
        machine.start_game(S)
        game.scores = {Team.ONE: 4, Team.TWO: 6}

        events = machine.leave(N)

        assert [e.event_type for e in events] == [
            GameEventType.PLAYER_LEFT,
            GameEventType.HAND_ABORTED,
        ]
        assert game.phase == GamePhase.LOBBY
        assert game.scores == {Team.ONE: 4, Team.TWO: 6}
        assert game.current_player is None
        assert game.trump is None
        assert all(not p.hand for p in game.players.values())
        assert N in game.open_seats()

    def test_chat(self):
        game = new_table()
        line = chat(game, S, "  good luck  ")
        assert line["text"] == "good luck"
        assert line["seat"] == "south"
        with pytest.raises(SessionError):
            chat(game, S, "   ")


def play_random_game(seed: int, max_actions: int = 20000) -> None:
    """Drive a whole game with random legal moves, checking invariants throughout."""
    rng = random.Random(seed)
    game = new_table()
    machine = EuchreStateMachine(game, rng)
    machine.start_game(S)

    for _ in range(max_actions):
        if game.phase == GamePhase.GAME_OVER:
            break
        before = dict(game.scores)
        seat = game.current_player

        if game.phase == GamePhase.ORDER_UP_ROUND1:
            machine.order_up(seat, rng.random() < 0.25)
        elif game.phase == GamePhase.AWAITING_DEALER_DISCARD:
            machine.dealer_discard(seat, rng.choice(game.players[seat].hand))
        elif game.phase == GamePhase.ORDER_UP_ROUND2:
            choices = [None] + [s for s in Suit if s != game.turned_down_suit]
            machine.call_trump(seat, rng.choice(choices))
        elif game.phase == GamePhase.AWAITING_GO_ALONE:
            machine.go_alone(seat, rng.random() < 0.2)
        elif game.phase == GamePhase.PLAYING_TRICKS:
            machine.play_card(seat, rng.choice(machine.valid_plays(seat)))
        elif game.phase == GamePhase.HAND_OVER:
            machine.deal_next_hand()
        else:
            pytest.fail(f"Unexpected phase {game.phase}")

        gained = sum(game.scores[t] - before[t] for t in Team)
        assert gained in (0, 1, 2, 4)
        assert all(game.scores[t] >= before[t] for t in Team)

        cards = game.accounted_cards()
        assert len(cards) == 24
        assert set(cards) == set(ALL_CARDS)
    else:
        pytest.fail("Game did not finish")

    assert game.winning_team is not None
    assert game.scores[game.winning_team] >= 10
    assert game.current_player is None


class TestRandomGames:
    """Whole games played with random legal moves."""

    @given(seed=st.integers(0, 100000))
    @settings(max_examples=25, deadline=None)
    def test_random_games_keep_invariants(self, seed: int) -> None:
        play_random_game(seed)
