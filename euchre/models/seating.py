"""Turn order and partnerships around the table."""

from collections.abc import Sequence

from euchre.models.enums import TURN_ORDER, Seat, Team

_PARTNERS = {
    Seat.SOUTH: Seat.NORTH,
    Seat.NORTH: Seat.SOUTH,
    Seat.WEST: Seat.EAST,
    Seat.EAST: Seat.WEST,
}

_TEAMS = {
    Seat.SOUTH: Team.ONE,
    Seat.NORTH: Team.ONE,
    Seat.WEST: Team.TWO,
    Seat.EAST: Team.TWO,
}


def partner(seat: Seat) -> Seat:
    """Return the seat across the table."""
    return _PARTNERS[seat]


def team_of(seat: Seat) -> Team:
    """Return the partnership a seat belongs to."""
    return _TEAMS[seat]


def seats_of(team: Team) -> tuple[Seat, Seat]:
    """Return both seats of a team, in turn order."""
    first, second = (seat for seat in TURN_ORDER if _TEAMS[seat] == team)
    return first, second


def opponent(team: Team) -> Team:
    """Return the other team."""
    return Team.TWO if team == Team.ONE else Team.ONE


def next_player(
    seat: Seat,
    order: Sequence[Seat] = TURN_ORDER,
    going_alone: bool = False,  # noqa: FBT001, FBT002
    lone_seat: Seat | None = None,
    sitting_out: Seat | None = None,
) -> Seat | None:
    """Return the next seat clockwise of ``seat``.

    When someone is going alone their partner is skipped. ``sitting_out``
    defaults to the partner of ``lone_seat``.

    Args:
        seat: Seat whose successor is wanted
        order: Cyclic seating order
        going_alone: Whether a player is playing without their partner
        lone_seat: Seat of the lone player
        sitting_out: Seat skipped while going alone

    Returns:
        The next seat, or None if skipping would land back on ``seat``

    Raises:
        ValueError: If ``seat`` is not part of ``order``

    """
    if seat not in order:
        msg = f"Unknown seat: {seat!r}"
        raise ValueError(msg)

    if going_alone and sitting_out is None and lone_seat is not None:
        sitting_out = partner(lone_seat)

    index = order.index(seat)
    candidate = order[(index + 1) % len(order)]
    if going_alone and candidate == sitting_out:
        candidate = order[(index + 2) % len(order)]
    if candidate == seat:
        return None
    return candidate


def active_seats(sitting_out: Seat | None = None) -> list[Seat]:
    """Seats taking part in trick play, in turn order."""
    return [seat for seat in TURN_ORDER if seat != sitting_out]


def deal_order(dealer: Seat) -> list[Seat]:
    """Seats in dealing order: left of the dealer first, dealer last."""
    start = TURN_ORDER.index(dealer) + 1
    return [TURN_ORDER[(start + offset) % len(TURN_ORDER)] for offset in range(len(TURN_ORDER))]
