"""Tests for hand scoring and the end of the game."""

import pytest

from euchre.engine.phases import hand_points, handle_play_card
from euchre.engine.state_machine import EuchreStateMachine
from euchre.models.card import Card
from euchre.models.enums import GamePhase, Rank, Seat, Suit, Team
from euchre.models.errors import ProtocolError
from euchre.models.game import Game
from euchre.models.game_event import GameEventType
from euchre.models.trick import Trick

S, W, N, E = Seat.SOUTH, Seat.WEST, Seat.NORTH, Seat.EAST

ACE_OF_TRUMP = Card(Suit.HEARTS, Rank.ACE)
LAST_CARDS = {
    S: ACE_OF_TRUMP,
    W: Card(Suit.CLUBS, Rank.NINE),
    N: Card(Suit.SPADES, Rank.NINE),
    E: Card(Suit.CLUBS, Rank.TEN),
}


def last_trick(
    game: Game,
    tricks_won: dict[Seat, int],
    going_alone: bool = False,
    scores: dict[Team, int] | None = None,
) -> Game:
    """South (team one) called hearts; four tricks are done and south leads the last."""
    game.phase = GamePhase.PLAYING_TRICKS
    game.hand_number = 3
    game.dealer = E
    game.trump = Suit.HEARTS
    game.caller = S
    game.maker = Team.ONE
    if going_alone:
        game.going_alone = True
        game.lone_player = S
        game.sitting_out = N
    if scores:
        game.scores = dict(scores)
    for seat, player in game.players.items():
        player.hand = [LAST_CARDS[seat]]
        player.tricks_won = tricks_won.get(seat, 0)
    game.tricks = [Trick(leader=S) for _ in range(4)]
    game.current_trick = Trick(leader=S)
    game.current_player = S
    return game


def play_out(game: Game) -> list:
    events = []
    order = [S, W, E] if game.going_alone else [S, W, N, E]
    for seat in order:
        events = handle_play_card(game, seat, LAST_CARDS[seat])
    return events


class TestHandPoints:
    """Point table."""

    @pytest.mark.parametrize(
        ("maker_tricks", "going_alone", "expected"),
        [
            (5, False, (2, 0, "march")),
            (5, True, (4, 0, "loner_march")),
            (4, False, (1, 0, "made")),
            (3, False, (1, 0, "made")),
            (3, True, (1, 0, "made")),
            (2, False, (0, 2, "euchre")),
            (0, True, (0, 2, "euchre")),
        ],
    )
    def test_hand_points(self, maker_tricks, going_alone, expected):
        assert hand_points(maker_tricks, going_alone) == expected


class TestScoring:
    """Scoring a completed hand."""

    def test_maker_takes_three(self, table):
        """Three tricks score one point and the next hand rotates the deal."""
        last_trick(table, {S: 2, W: 1, E: 1})

        events = play_out(table)

        assert [e.event_type for e in events] == [
            GameEventType.CARD_PLAYED,
            GameEventType.TRICK_WON,
            GameEventType.HAND_SCORED,
        ]
        assert table.phase == GamePhase.HAND_OVER
        assert table.scores == {Team.ONE: 1, Team.TWO: 0}
        assert table.last_hand_result.outcome == "made"
        assert table.last_hand_result.tricks == {Team.ONE: 3, Team.TWO: 2}
        assert table.current_player is None
        assert events[-1].data["scores"] == {"1": 1, "2": 0}

        events = EuchreStateMachine(table).deal_next_hand()

        assert [e.event_type for e in events] == [GameEventType.HAND_STARTED]
        assert table.dealer == S
        assert table.phase == GamePhase.ORDER_UP_ROUND1
        assert table.hand_number == 4
        assert table.scores == {Team.ONE: 1, Team.TWO: 0}
        assert table.last_hand_result is not None

    def test_euchre(self, table):
        """Two tricks or fewer gives the defenders two points."""
        last_trick(table, {S: 1, W: 2, E: 1})
        play_out(table)
        assert table.scores == {Team.ONE: 0, Team.TWO: 2}
        assert table.last_hand_result.outcome == "euchre"

    def test_march(self, table):
        last_trick(table, {S: 2, N: 2})
        play_out(table)
        assert table.scores == {Team.ONE: 2, Team.TWO: 0}
        assert table.last_hand_result.outcome == "march"

    def test_loner_march(self, table):
        """A lone player taking all five scores four; the trick needs only three cards."""
        last_trick(table, {S: 4}, going_alone=True)
        events = play_out(table)

        played = [e for e in events if e.event_type == GameEventType.TRICK_WON][0]
        assert len(played.data["plays"]) == 3
        assert table.scores == {Team.ONE: 4, Team.TWO: 0}
        assert table.last_hand_result.outcome == "loner_march"
        assert table.last_hand_result.going_alone
        # North sat out and still holds the card
        assert table.players[N].hand == [LAST_CARDS[N]]

    def test_reaching_ten_ends_game(self, table):
        """The game ends at ten or more and overshoot is kept as-is."""
        last_trick(table, {S: 2, N: 2}, scores={Team.ONE: 9, Team.TWO: 6})

        events = play_out(table)

        assert events[-1].event_type == GameEventType.GAME_ENDED
        assert events[-1].data["winning_team"] == 1
        assert table.phase == GamePhase.GAME_OVER
        assert table.scores == {Team.ONE: 11, Team.TWO: 6}
        assert table.winning_team == Team.ONE
        assert table.games_played == 1
        assert table.team_wins == {Team.ONE: 1, Team.TWO: 0}

        with pytest.raises(ProtocolError):
            EuchreStateMachine(table).deal_next_hand()

    def test_defenders_can_win_by_euchre(self, table):
        last_trick(table, {W: 2, E: 1, S: 1}, scores={Team.ONE: 7, Team.TWO: 8})
        play_out(table)
        assert table.phase == GamePhase.GAME_OVER
        assert table.winning_team == Team.TWO
        assert table.scores == {Team.ONE: 7, Team.TWO: 10}
