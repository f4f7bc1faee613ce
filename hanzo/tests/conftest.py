"""
Pytest fixtures for Hanzo tests.

The small map, with guard 0 at (5, 5) facing left and guard 1 at (1, 7)
facing up:

    #########
    #.......#
    #.......#
    #...#...#
    #.......#
    #.......#
    #.....#.#
    #.......#
    #########
"""

import pytest

from ..config import Config
from ..game.map import Direction, Map
from ..game.state import Game

SMALL_MAP = """
#########
#.......#
#.......#
#...#...#
#.......#
#.......#
#.....#.#
#.......#
#########
"""


@pytest.fixture
def grid() -> Map:
    return Map.parse(SMALL_MAP)


@pytest.fixture
def config() -> Config:
    """Short cones and budgets so tests stay readable."""
    return Config(
        input_timeout=1,
        attacker_actions=3,
        defender_actions=3,
        detection_actions=2,
        viewcone_length=3,
        viewcone_width=2,
        turn_time=5.0,
        players=3,
        num_guards=2,
        length=9,
    )


@pytest.fixture
def game(grid: Map, config: Config) -> Game:
    """Three players: attackers 0 and 2, defender 1."""
    return Game(
        address="127.0.0.1:0",
        config=config,
        map=grid,
        defender=1,
        positions=[((1, 1), Direction.UP), None, ((7, 7), Direction.UP)],
        targets=[(3, 1), None, (7, 5)],
        guards=[((5, 5), Direction.LEFT), ((1, 7), Direction.UP)],
    )
