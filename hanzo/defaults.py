from __future__ import annotations

from typing import List, Tuple

from .game.map import Direction, Map, Point

# Built-in 48x48 map: '#' is a wall, '.' is floor
MAP = """
################################################
#..............................................#
#..............................##..............#
#....................#.........................#
#....................#.................#.......#
#......####.........#...................#......#
#......#...........#.....................#.....#
#......#..........#...........#...........#....#
#......#..........#..........#.............#...#
#......#..........#.........#..................#
#.................#........#...................#
#.................#.......#....................#
#.................#......#.....................#
#.................#......#.....................#
#.....#############......###############.......#
#..............................................#
#..............................................#
#....#.........................................#
#.....#..................................#.....#
#......#.................................#.....#
#.......#............#########...........#.....#
#........#...............................#.....#
#.........#..............................#.....#
#..........#.............................#.....#
#...........#..................................#
#............#.....................#...........#
#.............###########..........#...........#
#........................#.........#...........#
#.........................#........#...........#
#..........................#.......#...........#
#...........................#......#...........#
#............................#.....#...........#
#.......#......................................#
#.......#..............###.....................#
#.......###............#.......................#
#......................#........#..............#
#...............................#.........#....#
#.............####.............####......#.....#
#.................#.............#.......#......#
#..................#....................#......#
##....################..................#......#
#....................#..................#......#
#....................#..................#......#
#.........#..........#......###.....#####......#
#.........#..........#.....#...................#
#....................######....................#
#..............................................#
################################################
"""

PLAYERS = 4

POSITIONS: List[Point] = [(40, 1), (1, 5), (45, 45), (2, 40)]

TARGETS: List[Point] = [(1, 46), (45, 45), (1, 1), (42, 1)]

GUARDS: List[Tuple[Point, Direction]] = [
    ((15, 12), Direction.UP),
    ((10, 45), Direction.RIGHT),
    ((20, 30), Direction.LEFT),
    ((31, 30), Direction.UP),
    ((41, 10), Direction.LEFT),
]


def default_map() -> Map:
    return Map.parse(MAP)
