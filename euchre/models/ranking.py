"""Card ranking under a trump suit.

Euchre ranks cards contextually. With trump set, the jack of trump (right
bower) is the highest card, followed by the other jack of the same color
(left bower), which counts as a trump card for following suit and trick
comparison even though it is printed with a different suit. Then come the
remaining trumps, then cards of the suit led, and every other card cannot
win the trick.
"""

from collections.abc import Iterable, Sequence

from euchre.models.card import Card
from euchre.models.enums import Rank, Suit

# Category floors; face values (9..14) are added on top
RIGHT_BOWER_RANK = 100
LEFT_BOWER_RANK = 90
TRUMP_BASE = 50
LED_SUIT_BASE = 20
OFF_SUIT_RANK = 0

# Suit order used when laying out a hand for display
DISPLAY_SUIT_ORDER: tuple[Suit, ...] = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)


def left_bower_suit(trump: Suit) -> Suit:
    """Return the suit whose jack becomes the left bower under ``trump``."""
    for suit in Suit:
        if suit != trump and suit.color == trump.color:
            return suit
    msg = f"No same-color suit for {trump}"
    raise ValueError(msg)


def is_right_bower(card: Card, trump: Suit | None) -> bool:
    """Check if card is the jack of trump."""
    return trump is not None and card.rank == Rank.JACK and card.suit == trump


def is_left_bower(card: Card, trump: Suit | None) -> bool:
    """Check if card is the jack of the other suit of trump's color."""
    return (
        trump is not None
        and card.rank == Rank.JACK
        and card.suit != trump
        and card.suit.color == trump.color
    )


def effective_suit(card: Card, trump: Suit | None) -> Suit:
    """Suit a card belongs to for following suit (left bower counts as trump)."""
    if trump is not None and is_left_bower(card, trump):
        return trump
    return card.suit


def is_trump(card: Card, trump: Suit | None) -> bool:
    """Check if card is a trump card, bowers included."""
    return trump is not None and effective_suit(card, trump) == trump


def card_rank(card: Card, led_suit: Suit | None, trump: Suit | None) -> int:
    """Rank a card for trick comparison.

    Args:
        card: Card to rank
        led_suit: Effective suit of the first card of the trick, if any
        trump: Trump suit, if established

    Returns:
        Integer where a higher value beats a lower one. Off-suit cards are 0.

    """
    if is_right_bower(card, trump):
        return RIGHT_BOWER_RANK
    if is_left_bower(card, trump):
        return LEFT_BOWER_RANK
    if trump is not None and card.suit == trump:
        return TRUMP_BASE + card.rank.face_value
    if led_suit is not None and card.suit == led_suit:
        return LED_SUIT_BASE + card.rank.face_value
    return OFF_SUIT_RANK


def winning_play_index(cards: Sequence[Card], trump: Suit | None) -> int:
    """Index of the card that wins a trick.

    The first card sets the led suit. A later card only takes the lead if it
    ranks strictly higher, so equally ranked earlier plays are never displaced.

    Raises:
        ValueError: If no cards were played

    """
    if not cards:
        msg = "Cannot resolve an empty trick"
        raise ValueError(msg)

    led_suit = effective_suit(cards[0], trump)
    best_index = 0
    best_rank = card_rank(cards[0], led_suit, trump)
    for index, card in enumerate(cards[1:], start=1):
        rank = card_rank(card, led_suit, trump)
        if rank > best_rank:
            best_index, best_rank = index, rank
    return best_index


def _sort_key(card: Card, trump: Suit | None) -> tuple[int, int]:
    if trump is not None and is_trump(card, trump):
        # Trump group first; rank order already puts bowers on top
        return (0, -card_rank(card, None, trump))
    group = DISPLAY_SUIT_ORDER.index(card.suit) + 1
    return (group, -card.rank.face_value)


def sort_hand(hand: Iterable[Card], trump: Suit | None) -> list[Card]:
    """Return a new list ordered for display.

    Trump comes first (right bower, left bower, then high to low), followed
    by the other suits in ``DISPLAY_SUIT_ORDER``, each high to low. The input
    is never mutated.
    """
    return sorted(hand, key=lambda card: _sort_key(card, trump))


def legal_plays(hand: Sequence[Card], led_card: Card | None, trump: Suit | None) -> list[Card]:
    """Cards from ``hand`` that may be played given the first card of the trick.

    A player holding any card of the led card's effective suit must play one
    of those; otherwise anything goes.
    """
    if led_card is None:
        return list(hand)
    led_suit = effective_suit(led_card, trump)
    following = [card for card in hand if effective_suit(card, trump) == led_suit]
    return following or list(hand)
