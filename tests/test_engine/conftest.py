"""Pytest configuration for engine tests."""

import random

import pytest

from euchre.models.enums import TURN_ORDER
from euchre.models.game import Game
from euchre.models.player import Player

PLAYER_NAMES = {"south": "Sam", "west": "Wes", "north": "Nora", "east": "Eve"}


@pytest.fixture
def rng():
    """Seeded random source so deals are reproducible."""
    return random.Random(1234)


@pytest.fixture
def table():
    """A lobby game with all four seats filled (player ids match seat names)."""
    game = Game(id="engine-game", slug="ENG1")
    for seat in TURN_ORDER:
        game.add_player(Player(id=seat.value, name=PLAYER_NAMES[seat.value], seat=seat))
    return game
