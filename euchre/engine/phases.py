"""Phase handlers for a Euchre hand.

Each handler owns one transition of the hand: it checks the phase and the
acting seat, validates the proposed action, then mutates the game and
decides the next phase and the next player. Nothing is mutated until every
check has passed, so a rejected action leaves the game exactly as it was.
Handlers return the events describing what happened, in order.
"""

import logging
import random

from euchre.constants import (
    EUCHRE_POINTS,
    HAND_SIZE,
    KITTY_SIZE,
    LONER_MARCH_POINTS,
    MAJORITY_TRICKS,
    MAKER_POINTS,
    MARCH_POINTS,
    NUM_SEATS,
    TRICKS_PER_HAND,
    WINNING_SCORE,
)
from euchre.models.card import Card
from euchre.models.deck import Deck
from euchre.models.enums import TURN_ORDER, GamePhase, Seat, Suit, Team
from euchre.models.errors import (
    DealIntegrityError,
    ErrorCode,
    InvalidHandSizeError,
    ProtocolError,
    RuleViolation,
    SessionError,
)
from euchre.models.game import Game, HandResult
from euchre.models.game_event import GameEvent, GameEventType
from euchre.models.ranking import legal_plays, sort_hand
from euchre.models.seating import active_seats, deal_order, next_player, opponent, partner, team_of
from euchre.models.trick import Trick

logger = logging.getLogger(__name__)


def make_event(
    game: Game, event_type: GameEventType, seat: Seat | None = None, **data: object
) -> GameEvent:
    """Build an event stamped with the game's current hand and trick."""
    trick_number = len(game.tricks) + 1 if game.current_trick is not None else None
    return GameEvent(
        game_id=game.id,
        event_type=event_type,
        hand_number=game.hand_number,
        trick_number=trick_number,
        seat=seat.value if seat else None,
        data=dict(data),
    )


def require_phase(game: Game, phase: GamePhase) -> None:
    """Reject the action unless the game is in ``phase``."""
    if game.phase != phase:
        msg = f"Action not allowed during {game.phase.value} (expected {phase.value})"
        raise ProtocolError(msg, ErrorCode.NOT_IN_PHASE)


def require_turn(game: Game, seat: Seat) -> None:
    """Reject the action unless ``seat`` is seated and due to act."""
    game.player_at(seat)
    if game.current_player != seat:
        current = game.current_player.value if game.current_player else "nobody"
        msg = f"It is not your turn ({current} to act)"
        raise ProtocolError(msg, ErrorCode.NOT_YOUR_TURN)


def _left_of(seat: Seat) -> Seat:
    left = next_player(seat)
    if left is None:
        msg = f"No seat left of {seat.value}"
        raise DealIntegrityError(msg)
    return left


def _seat_name(game: Game, seat: Seat) -> str:
    player = game.players.get(seat)
    return player.name if player else seat.value


def _sort_all_hands(game: Game) -> None:
    for player in game.players.values():
        player.hand = sort_hand(player.hand, game.trump)


def _set_trump(game: Game, seat: Seat, suit: Suit) -> None:
    game.trump = suit
    game.maker = team_of(seat)
    game.caller = seat
    _sort_all_hands(game)


def start_new_hand(game: Game, rng: random.Random | None = None) -> list[GameEvent]:
    """Deal a new hand.

    The first hand of a session picks a random dealer and records it as the
    initial dealer; later hands rotate the deal one seat clockwise. Cards are
    dealt one at a time starting left of the dealer, then the up-card is
    turned and the remaining three cards form the kitty.

    Raises:
        SessionError: If fewer than four players are seated
        DeckExhaustedError: If the deck runs out during the deal

    """
    if not game.is_full():
        msg = f"Need {NUM_SEATS} players to deal, have {len(game.players)}"
        raise SessionError(msg, ErrorCode.NOT_ENOUGH_PLAYERS)

    source = rng or random
    if game.dealer is None:
        dealer = source.choice(TURN_ORDER)
        first_hand = True
    else:
        dealer = _left_of(game.dealer)
        first_hand = False

    # Deal into locals first so a short deck leaves the game untouched
    deck = Deck()
    deck.shuffle(rng)
    hands: dict[Seat, list[Card]] = {seat: [] for seat in TURN_ORDER}
    order = deal_order(dealer)
    for _ in range(HAND_SIZE):
        for seat in order:
            hands[seat].append(deck.draw())
    up_card = deck.draw()
    kitty = deck.draw_remaining()
    if len(kitty) != KITTY_SIZE:
        msg = f"Kitty holds {len(kitty)} cards after the deal, expected {KITTY_SIZE}"
        raise DealIntegrityError(msg)

    game.phase = GamePhase.DEALING
    game.reset_hand_state()
    if first_hand:
        game.initial_dealer = dealer
    game.dealer = dealer
    game.deck = deck
    game.hand_number += 1
    for seat, cards in hands.items():
        game.players[seat].hand = sort_hand(cards, None)
    game.up_card = up_card
    game.kitty = kitty
    game.current_player = _left_of(dealer)
    game.phase = GamePhase.ORDER_UP_ROUND1

    logger.info(
        "Game %s hand %d dealt by %s, up-card %s", game.id, game.hand_number, dealer.value, up_card
    )
    game.add_message(f"{_seat_name(game, dealer)} deals. {up_card} is turned up.")
    return [
        make_event(
            game,
            GameEventType.HAND_STARTED,
            dealer,
            dealer=dealer.value,
            up_card=up_card.to_dict(),
            first_player=game.current_player.value,
        )
    ]


def handle_order_up(game: Game, seat: Seat, ordered_up: bool) -> list[GameEvent]:  # noqa: FBT001
    """Round-one bid: order the up-card into the dealer's hand or pass."""
    require_phase(game, GamePhase.ORDER_UP_ROUND1)
    require_turn(game, seat)
    if game.up_card is None or game.dealer is None:
        msg = "No up-card on the table"
        raise DealIntegrityError(msg)

    up_card = game.up_card
    dealer = game.player_at(game.dealer)

    if ordered_up:
        if len(dealer.hand) != HAND_SIZE:
            msg = f"Dealer holds {len(dealer.hand)} cards before picking up"
            raise InvalidHandSizeError(msg)
        dealer.hand.append(up_card)
        game.up_card = None
        _set_trump(game, seat, up_card.suit)
        game.phase = GamePhase.AWAITING_DEALER_DISCARD
        game.current_player = game.dealer

        logger.info("Game %s: %s ordered up %s", game.id, seat.value, up_card.suit.value)
        game.add_message(
            f"{_seat_name(game, seat)} orders up {up_card}. {up_card.suit.value} is trump.",
            important=True,
        )
        return [
            make_event(
                game,
                GameEventType.ORDERED_UP,
                seat,
                trump=up_card.suit.value,
                up_card=up_card.to_dict(),
                maker=int(game.maker),
            )
        ]

    events = [make_event(game, GameEventType.PASSED, seat, round=1)]
    game.add_message(f"{_seat_name(game, seat)} passes.")
    if seat == game.dealer:
        game.turned_down_suit = up_card.suit
        game.kitty.append(up_card)
        game.up_card = None
        game.phase = GamePhase.ORDER_UP_ROUND2
        game.current_player = _left_of(game.dealer)
        logger.info("Game %s: up-card %s turned down", game.id, up_card)
        game.add_message(f"{up_card} is turned down. Name any other suit.", important=True)
    else:
        game.current_player = _left_of(seat)
    return events


def handle_dealer_discard(game: Game, seat: Seat, card: Card) -> list[GameEvent]:
    """Dealer discards one card after the up-card was ordered up."""
    require_phase(game, GamePhase.AWAITING_DEALER_DISCARD)
    if seat != game.dealer:
        msg = "Only the dealer may discard"
        raise ProtocolError(msg, ErrorCode.NOT_DEALER)
    require_turn(game, seat)
    dealer = game.player_at(seat)
    if len(dealer.hand) != HAND_SIZE + 1:
        msg = f"Dealer must hold {HAND_SIZE + 1} cards to discard, holds {len(dealer.hand)}"
        raise InvalidHandSizeError(msg)
    if not dealer.has_card(card):
        msg = f"You do not hold the {card}"
        raise RuleViolation(msg, ErrorCode.CARD_NOT_IN_HAND)

    dealer.remove_card(card)
    dealer.hand = sort_hand(dealer.hand, game.trump)
    game.kitty.append(card)
    game.dealer_has_discarded = True
    game.phase = GamePhase.AWAITING_GO_ALONE
    game.current_player = game.caller

    logger.info("Game %s: dealer %s discarded", game.id, seat.value)
    game.add_message(f"{_seat_name(game, seat)} discards a card.")
    # The discarded card stays secret
    return [make_event(game, GameEventType.DEALER_DISCARDED, seat)]


def handle_call_trump(
    game: Game, seat: Seat, suit: Suit | None, rng: random.Random | None = None
) -> list[GameEvent]:
    """Round-two bid: name a suit other than the turned-down one, or pass.

    When the dealer passes too, the hand is thrown in and redealt with no
    points awarded.
    """
    require_phase(game, GamePhase.ORDER_UP_ROUND2)
    require_turn(game, seat)

    if suit is not None:
        if suit == game.turned_down_suit:
            msg = f"{suit.value} was turned down and cannot be named"
            raise RuleViolation(msg, ErrorCode.SUIT_TURNED_DOWN)
        _set_trump(game, seat, suit)
        game.phase = GamePhase.AWAITING_GO_ALONE
        game.current_player = seat

        logger.info("Game %s: %s called %s", game.id, seat.value, suit.value)
        game.add_message(f"{_seat_name(game, seat)} calls {suit.value} trump.", important=True)
        return [
            make_event(
                game, GameEventType.TRUMP_CALLED, seat, trump=suit.value, maker=int(game.maker)
            )
        ]

    events = [make_event(game, GameEventType.PASSED, seat, round=2)]
    game.add_message(f"{_seat_name(game, seat)} passes.")
    if seat != game.dealer:
        game.current_player = _left_of(seat)
        return events

    logger.info("Game %s: everyone passed twice, redealing", game.id)
    game.add_message("Everyone passed. Redealing.", important=True)
    events.append(make_event(game, GameEventType.REDEAL, seat, dealer=seat.value))
    events.extend(start_new_hand(game, rng))
    return events


def handle_go_alone(game: Game, seat: Seat, go_alone: bool) -> list[GameEvent]:  # noqa: FBT001
    """The player who named trump decides whether to play without a partner."""
    require_phase(game, GamePhase.AWAITING_GO_ALONE)
    game.player_at(seat)
    if seat != game.caller:
        msg = "Only the player who called trump may decide to go alone"
        raise RuleViolation(msg, ErrorCode.NOT_TRUMP_CALLER)
    if game.dealer is None:
        msg = "No dealer for this hand"
        raise DealIntegrityError(msg)

    sitting_out = partner(seat) if go_alone else None
    leader = next_player(game.dealer, going_alone=go_alone, sitting_out=sitting_out)
    if leader is None:
        msg = "No seat available to lead"
        raise DealIntegrityError(msg)

    game.going_alone = go_alone
    game.lone_player = seat if go_alone else None
    game.sitting_out = sitting_out
    game.current_trick = Trick(leader=leader)
    game.phase = GamePhase.PLAYING_TRICKS
    game.current_player = leader

    if go_alone:
        logger.info("Game %s: %s is going alone", game.id, seat.value)
        game.add_message(f"{_seat_name(game, seat)} is going alone!", important=True)
    game.add_message(f"{_seat_name(game, leader)} leads.")
    return [
        make_event(
            game,
            GameEventType.WENT_ALONE,
            seat,
            going_alone=go_alone,
            sitting_out=sitting_out.value if sitting_out else None,
            leader=leader.value,
        )
    ]


def is_valid_play(game: Game, seat: Seat, card: Card) -> bool:
    """Check whether ``seat`` may play ``card`` to the current trick.

    The card must be in hand; after the lead, a player holding a card of the
    led card's effective suit must play one.
    """
    player = game.players.get(seat)
    if player is None or not player.has_card(card):
        return False
    led_card = game.current_trick.led_card if game.current_trick else None
    return card in legal_plays(player.hand, led_card, game.trump)


def handle_play_card(game: Game, seat: Seat, card: Card) -> list[GameEvent]:
    """Play a card to the current trick, resolving it once complete."""
    require_phase(game, GamePhase.PLAYING_TRICKS)
    require_turn(game, seat)
    trick = game.current_trick
    if trick is None:
        msg = "No trick in progress"
        raise DealIntegrityError(msg)
    player = game.player_at(seat)
    if not player.has_card(card):
        msg = f"You do not hold the {card}"
        raise RuleViolation(msg, ErrorCode.CARD_NOT_IN_HAND)
    if not is_valid_play(game, seat, card):
        led_suit = trick.led_suit(game.trump)
        suit_name = led_suit.value if led_suit else "the led suit"
        msg = f"You must follow suit ({suit_name})"
        raise RuleViolation(msg, ErrorCode.MUST_FOLLOW_SUIT)

    following = next_player(seat, going_alone=game.going_alone, sitting_out=game.sitting_out)
    if following is None:
        msg = "No active player left to act"
        raise DealIntegrityError(msg)

    trick.add_play(seat, card)
    player.remove_card(card)
    events = [make_event(game, GameEventType.CARD_PLAYED, seat, card=card.to_dict())]

    if not trick.is_complete(game.active_player_count):
        game.current_player = following
        return events

    winner, winning_card = trick.determine_winner(game.trump)
    game.player_at(winner).tricks_won += 1
    trick_number = len(game.tricks) + 1
    game.tricks.append(trick)
    game.current_trick = None
    events.append(
        make_event(
            game,
            GameEventType.TRICK_WON,
            winner,
            trick_number=trick_number,
            card=winning_card.to_dict(),
            plays=[{"seat": p.seat.value, "card": p.card.to_dict()} for p in trick.plays],
        )
    )
    logger.info("Game %s: %s won trick %d", game.id, winner.value, trick_number)
    game.add_message(f"{_seat_name(game, winner)} wins the trick with the {winning_card}.")

    hands_empty = all(not game.players[s].hand for s in active_seats(game.sitting_out))
    if hands_empty or len(game.tricks) >= TRICKS_PER_HAND:
        events.extend(score_current_hand(game))
    else:
        game.current_trick = Trick(leader=winner)
        game.current_player = winner
    return events


def hand_points(
    maker_tricks: int,
    going_alone: bool,  # noqa: FBT001
) -> tuple[int, int, str]:
    """Points for a hand as ``(maker points, defender points, outcome)``."""
    if maker_tricks == TRICKS_PER_HAND:
        if going_alone:
            return LONER_MARCH_POINTS, 0, "loner_march"
        return MARCH_POINTS, 0, "march"
    if maker_tricks >= MAJORITY_TRICKS:
        return MAKER_POINTS, 0, "made"
    return 0, EUCHRE_POINTS, "euchre"


def score_current_hand(game: Game) -> list[GameEvent]:
    """Award points for the hand and end the game at the winning score.

    The game is left in HAND_OVER (the caller deals the next hand after a
    pause) or GAME_OVER once a team reaches the winning score.
    """
    if game.maker is None or game.caller is None:
        msg = "Cannot score a hand without a maker"
        raise DealIntegrityError(msg)

    maker = game.maker
    defenders = opponent(maker)
    tricks = game.tricks_by_team()
    maker_points, defender_points, outcome = hand_points(tricks[maker], game.going_alone)
    points: dict[Team, int] = {maker: maker_points, defenders: defender_points}
    for team, awarded in points.items():
        game.scores[team] += awarded

    result = HandResult(
        maker=maker,
        caller=game.caller,
        going_alone=game.going_alone,
        tricks=tricks,
        points=points,
        outcome=outcome,
    )
    game.last_hand_result = result
    game.current_player = None

    scoring_team = maker if maker_points else defenders
    logger.info(
        "Game %s hand %d: %s, team %d +%d (score %d-%d)",
        game.id,
        game.hand_number,
        outcome,
        scoring_team,
        points[scoring_team],
        game.scores[Team.ONE],
        game.scores[Team.TWO],
    )
    game.add_message(
        f"Team {int(scoring_team)} scores {points[scoring_team]} ({outcome.replace('_', ' ')}).",
        important=True,
    )
    events = [
        make_event(
            game,
            GameEventType.HAND_SCORED,
            game.caller,
            result=result.to_dict(),
            scores={str(int(team)): score for team, score in game.scores.items()},
        )
    ]

    if max(game.scores.values()) >= WINNING_SCORE:
        winner = max(game.scores, key=lambda team: game.scores[team])
        game.winning_team = winner
        game.phase = GamePhase.GAME_OVER
        game.games_played += 1
        game.team_wins[winner] += 1
        logger.info("Game %s over, team %d wins", game.id, winner)
        game.add_message(f"Team {int(winner)} wins the game!", important=True)
        events.append(
            make_event(
                game,
                GameEventType.GAME_ENDED,
                winning_team=int(winner),
                scores={str(int(team)): score for team, score in game.scores.items()},
            )
        )
    else:
        game.phase = GamePhase.HAND_OVER
    return events
