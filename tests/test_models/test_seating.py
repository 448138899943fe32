"""Tests for seating, partnerships and turn order."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from euchre.models.enums import TURN_ORDER, Seat, Team
from euchre.models.seating import (
    active_seats,
    deal_order,
    next_player,
    opponent,
    partner,
    seats_of,
    team_of,
)

seats = st.sampled_from(TURN_ORDER)


class TestPartnerships:
    """Teams and partners."""

    def test_partners_sit_across(self):
        assert partner(Seat.SOUTH) == Seat.NORTH
        assert partner(Seat.WEST) == Seat.EAST

    def test_teams(self):
        """South/north form team one; west/east team two."""
        assert team_of(Seat.SOUTH) == team_of(Seat.NORTH) == Team.ONE
        assert team_of(Seat.WEST) == team_of(Seat.EAST) == Team.TWO
        assert seats_of(Team.ONE) == (Seat.SOUTH, Seat.NORTH)
        assert seats_of(Team.TWO) == (Seat.WEST, Seat.EAST)
        assert opponent(Team.ONE) == Team.TWO
        assert opponent(Team.TWO) == Team.ONE


class TestNextPlayer:
    """Clockwise turn order."""

    def test_clockwise(self):
        assert next_player(Seat.SOUTH) == Seat.WEST
        assert next_player(Seat.WEST) == Seat.NORTH
        assert next_player(Seat.NORTH) == Seat.EAST
        assert next_player(Seat.EAST) == Seat.SOUTH

    @given(start=seats)
    @settings(max_examples=10, deadline=None)
    def test_four_steps_return_to_start(self, start: Seat) -> None:
        """Four steps around the table come back to the start."""
        seat = start
        visited = []
        for _ in range(4):
            seat = next_player(seat)
            visited.append(seat)
        assert seat == start
        assert set(visited) == set(TURN_ORDER)

    @given(lone=seats, start=seats)
    @settings(max_examples=30, deadline=None)
    def test_lone_hand_skips_partner(self, lone: Seat, start: Seat) -> None:
        """Going alone, three steps return to start and the partner is never visited."""
        sitting_out = partner(lone)
        if start == sitting_out:
            return
        seat = start
        visited = []
        for _ in range(3):
            seat = next_player(seat, going_alone=True, lone_seat=lone)
            visited.append(seat)
        assert seat == start
        assert sitting_out not in visited

    def test_explicit_sitting_out(self):
        """An explicit sitting-out seat is skipped."""
        assert next_player(Seat.SOUTH, going_alone=True, sitting_out=Seat.WEST) == Seat.NORTH

    def test_skip_ignored_when_not_alone(self):
        """The sitting-out seat is only skipped while going alone."""
        assert next_player(Seat.SOUTH, going_alone=False, sitting_out=Seat.WEST) == Seat.WEST

    def test_unknown_seat(self):
        """A seat outside the order is rejected."""
        with pytest.raises(ValueError):
            next_player(Seat.NORTH, order=(Seat.SOUTH, Seat.WEST))

    def test_degenerate_order_returns_none(self):
        """When skipping lands back on the seat itself there is no next player."""
        order = (Seat.SOUTH, Seat.WEST)
        assert next_player(Seat.SOUTH, order=order, going_alone=True, sitting_out=Seat.WEST) is None


class TestOrders:
    """Dealing order and active seats."""

    def test_deal_order_starts_left_of_dealer(self):
        assert deal_order(Seat.SOUTH) == [Seat.WEST, Seat.NORTH, Seat.EAST, Seat.SOUTH]
        assert deal_order(Seat.EAST) == [Seat.SOUTH, Seat.WEST, Seat.NORTH, Seat.EAST]

    def test_active_seats(self):
        assert active_seats() == list(TURN_ORDER)
        assert active_seats(Seat.NORTH) == [Seat.SOUTH, Seat.WEST, Seat.EAST]
