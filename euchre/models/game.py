"""Game model for managing game state."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from euchre.constants import CHAT_HISTORY_SIZE, MESSAGE_LOG_SIZE, NUM_SEATS
from euchre.models.card import Card
from euchre.models.deck import Deck
from euchre.models.enums import IN_HAND_PHASES, TURN_ORDER, GamePhase, Seat, Suit, Team
from euchre.models.errors import ErrorCode, ProtocolError
from euchre.models.player import Player
from euchre.models.seating import team_of
from euchre.models.trick import Trick


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass
class GameMessage:
    """Entry of the player-facing message log."""

    text: str
    timestamp: str = field(default_factory=_utc_now_iso)
    important: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"text": self.text, "timestamp": self.timestamp, "important": self.important}


@dataclass
class ChatMessage:
    """A chat line sent by a seated player."""

    seat: Seat
    name: str
    text: str
    timestamp: str = field(default_factory=_utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "seat": self.seat.value,
            "name": self.name,
            "text": self.text,
            "timestamp": self.timestamp,
        }


@dataclass
class HandResult:
    """Outcome of a scored hand.

    Attributes:
        maker: Team that named trump
        caller: Seat that named trump
        going_alone: Whether the caller played alone
        tricks: Tricks taken per team
        points: Points awarded per team this hand
        outcome: One of ``made``, ``march``, ``loner_march`` or ``euchre``

    """

    maker: Team
    caller: Seat
    going_alone: bool
    tricks: dict[Team, int]
    points: dict[Team, int]
    outcome: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "maker": int(self.maker),
            "caller": self.caller.value,
            "going_alone": self.going_alone,
            "tricks": {str(int(team)): count for team, count in self.tricks.items()},
            "points": {str(int(team)): pts for team, pts in self.points.items()},
            "outcome": self.outcome,
        }


def _zero_scores() -> dict[Team, int]:
    return {Team.ONE: 0, Team.TWO: 0}


@dataclass
class Game:
    """Represents one Euchre table and its session.

    The game is the aggregate root: every phase handler receives it
    explicitly and mutates it in place. A hand is a sub-lifecycle inside
    the game; all hand-scoped fields are reset when a new hand is dealt.

    Attributes:
        id: Unique game identifier
        slug: Human-readable game code
        phase: Current game phase
        players: Seated players by seat
        deck: Undealt cards (empty once the deal is complete)
        dealer: Current dealer
        initial_dealer: Dealer of the first hand of the session
        current_player: Seat expected to act next
        hand_number: Hands dealt this session (redeals included)
        trump: Trump suit once named
        up_card: Card turned face up for round-one bidding
        kitty: Cards set aside this hand
        turned_down_suit: Suit of the up-card once everyone passed it
        maker: Team that named trump
        caller: Seat that named trump
        dealer_has_discarded: Whether the dealer discarded after picking up
        going_alone: Whether the caller plays without their partner
        lone_player: Seat going alone
        sitting_out: Partner of the lone player
        current_trick: Trick being played
        tricks: Completed tricks this hand
        scores: Cumulative points per team
        winning_team: Team that reached the winning score
        last_hand_result: Outcome of the most recently scored hand
        messages: Rolling player-facing message log
        chat_history: Recent chat lines
        games_played: Games finished this session
        team_wins: Games won per team this session
        created_at: Timestamp when game was created
        updated_at: Timestamp of the last mutation

    """

    id: str
    slug: str
    phase: GamePhase = GamePhase.LOBBY
    players: dict[Seat, Player] = field(default_factory=dict)
    deck: Deck = field(default_factory=Deck)
    dealer: Seat | None = None
    initial_dealer: Seat | None = None
    current_player: Seat | None = None
    hand_number: int = 0
    trump: Suit | None = None
    up_card: Card | None = None
    kitty: list[Card] = field(default_factory=list)
    turned_down_suit: Suit | None = None
    maker: Team | None = None
    caller: Seat | None = None
    dealer_has_discarded: bool = False
    going_alone: bool = False
    lone_player: Seat | None = None
    sitting_out: Seat | None = None
    current_trick: Trick | None = None
    tricks: list[Trick] = field(default_factory=list)
    scores: dict[Team, int] = field(default_factory=_zero_scores)
    winning_team: Team | None = None
    last_hand_result: HandResult | None = None
    messages: list[GameMessage] = field(default_factory=list)
    chat_history: list[ChatMessage] = field(default_factory=list)
    games_played: int = 0
    team_wins: dict[Team, int] = field(default_factory=_zero_scores)
    created_at: str | None = None
    updated_at: str | None = None
    max_messages: int = field(default=MESSAGE_LOG_SIZE, repr=False)
    max_chat: int = field(default=CHAT_HISTORY_SIZE, repr=False)

    def __post_init__(self) -> None:
        if self.created_at is None:
            self.created_at = _utc_now_iso()

    # Seating

    def add_player(self, player: Player) -> bool:
        """Seat a player. Fails if the seat is taken or the id is already seated."""
        if player.seat in self.players or self.get_player(player.id):
            return False
        self.players[player.seat] = player
        return True

    def remove_player(self, player_id: str) -> Player | None:
        """Unseat a player by id."""
        seat = self.seat_of(player_id)
        if seat is None:
            return None
        return self.players.pop(seat)

    def get_player(self, player_id: str) -> Player | None:
        """Get a player by ID."""
        for player in self.players.values():
            if player.id == player_id:
                return player
        return None

    def seat_of(self, player_id: str) -> Seat | None:
        """Seat of a player, or None when not seated."""
        player = self.get_player(player_id)
        return player.seat if player else None

    def player_at(self, seat: Seat) -> Player:
        """Player sitting at ``seat``.

        Raises:
            ProtocolError: If nobody sits there

        """
        player = self.players.get(seat)
        if player is None:
            msg = f"No player seated at {seat.value}"
            raise ProtocolError(msg, ErrorCode.UNKNOWN_SEAT)
        return player

    def open_seats(self) -> list[Seat]:
        """Free seats in turn order."""
        return [seat for seat in TURN_ORDER if seat not in self.players]

    def is_full(self) -> bool:
        """Check if every seat is taken."""
        return len(self.players) >= NUM_SEATS

    def can_start(self) -> bool:
        """Check if the game can be started."""
        return self.phase == GamePhase.LOBBY and self.is_full()

    @property
    def hand_in_progress(self) -> bool:
        """Whether a hand is being bid or played."""
        return self.phase in IN_HAND_PHASES

    @property
    def active_player_count(self) -> int:
        """Players taking part in trick play this hand."""
        return NUM_SEATS - 1 if self.going_alone else NUM_SEATS

    # Logs

    def add_message(self, text: str, important: bool = False) -> None:  # noqa: FBT001, FBT002
        """Append to the rolling message log, dropping the oldest entries."""
        self.messages.append(GameMessage(text=text, important=important))
        if len(self.messages) > self.max_messages:
            del self.messages[: len(self.messages) - self.max_messages]

    def add_chat(self, seat: Seat, text: str) -> ChatMessage:
        """Record a chat line from a seated player."""
        chat = ChatMessage(seat=seat, name=self.player_at(seat).name, text=text)
        self.chat_history.append(chat)
        if len(self.chat_history) > self.max_chat:
            del self.chat_history[: len(self.chat_history) - self.max_chat]
        return chat

    # Hand and session state

    def reset_hand_state(self) -> None:
        """Clear every hand-scoped field."""
        self.deck.reset()
        self.trump = None
        self.up_card = None
        self.kitty = []
        self.turned_down_suit = None
        self.maker = None
        self.caller = None
        self.dealer_has_discarded = False
        self.going_alone = False
        self.lone_player = None
        self.sitting_out = None
        self.current_trick = None
        self.tricks = []
        for player in self.players.values():
            player.reset_hand()

    def reset_session(self) -> None:
        """Return to the lobby with fresh scores, keeping seated players."""
        self.reset_hand_state()
        self.phase = GamePhase.LOBBY
        self.dealer = None
        self.initial_dealer = None
        self.current_player = None
        self.hand_number = 0
        self.scores = _zero_scores()
        self.winning_team = None
        self.last_hand_result = None

    def tricks_by_team(self) -> dict[Team, int]:
        """Tricks won this hand per team."""
        counts = _zero_scores()
        for player in self.players.values():
            counts[team_of(player.seat)] += player.tricks_won
        return counts

    def accounted_cards(self) -> list[Card]:
        """Every card the game knows about this hand, wherever it sits."""
        cards: list[Card] = list(self.deck.cards)
        for player in self.players.values():
            cards.extend(player.hand)
        cards.extend(self.kitty)
        if self.up_card is not None:
            cards.append(self.up_card)
        if self.current_trick is not None:
            cards.extend(self.current_trick.cards())
        for trick in self.tricks:
            cards.extend(trick.cards())
        return cards

    def touch(self) -> None:
        """Record a mutation time."""
        self.updated_at = _utc_now_iso()

    def __str__(self) -> str:
        """Return string representation."""
        return (
            f"Game {self.slug}: {len(self.players)} players, hand {self.hand_number}, "
            f"phase {self.phase.value}, score {self.scores[Team.ONE]}-{self.scores[Team.TWO]}"
        )
