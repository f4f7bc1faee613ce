from __future__ import annotations

import random
from enum import Enum
from typing import Iterator, List, Optional, Tuple

Point = Tuple[int, int]

MAX_LEN = 256


class Tile(Enum):
    FLOOR = "."
    WALL = "#"

    def __str__(self) -> str:
        return "·" if self is Tile.FLOOR else "█"


class Direction(Enum):
    UP = "U"
    DOWN = "D"
    LEFT = "L"
    RIGHT = "R"

    def rotate(self, clockwise: bool) -> "Direction":
        order = _CLOCKWISE if clockwise else _CLOCKWISE[::-1]
        return order[(order.index(self) + 1) % len(order)]


_CLOCKWISE = [Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT]


class Map:
    """Square grid of tiles stored row-major, fixed once built."""

    def __init__(self, length: int, tiles: Optional[List[Tile]] = None) -> None:
        if length < 1 or length > MAX_LEN:
            raise ValueError(f"map side must be between 1 and {MAX_LEN}, got {length}")
        if tiles is None:
            tiles = [Tile.FLOOR] * (length * length)
        if len(tiles) != length * length:
            raise ValueError("tile count does not match map side")
        self.length = length
        self._tiles: Tuple[Tile, ...] = tuple(tiles)

    @classmethod
    def parse(cls, text: str) -> "Map":
        rows = [line.strip() for line in text.splitlines() if line.strip()]
        if not rows:
            raise ValueError("empty map")
        length = len(rows)
        tiles: List[Tile] = []
        for y, row in enumerate(rows):
            if len(row) != length:
                raise ValueError(f"map row {y} has {len(row)} tiles, expected {length}")
            for ch in row:
                try:
                    tiles.append(Tile(ch))
                except ValueError:
                    raise ValueError(f"unknown map tile {ch!r} in row {y}") from None
        return cls(length, tiles)

    def rows(self) -> List[str]:
        n = self.length
        return ["".join(t.value for t in self._tiles[y * n:(y + 1) * n]) for y in range(n)]

    def at(self, x: int, y: int) -> Optional[Tile]:
        if 0 <= x < self.length and 0 <= y < self.length:
            return self._tiles[y * self.length + x]
        return None

    def is_floor(self, x: int, y: int) -> bool:
        return self.at(x, y) is Tile.FLOOR

    def tiles(self) -> Iterator[Tuple[Point, Tile]]:
        index = 0
        while index < len(self._tiles):
            x, y = index % self.length, index // self.length
            yield (x, y), self._tiles[index]
            index += 1

    def random_floor(self, rng: Optional[random.Random] = None) -> Point:
        """Find a random empty (floor) tile."""
        rng = rng or random.Random()
        floors = [pos for pos, tile in self.tiles() if tile is Tile.FLOOR]
        if not floors:
            raise ValueError("map has no floor tiles")
        return rng.choice(floors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Map):
            return NotImplemented
        return self.length == other.length and self._tiles == other._tiles

    def __str__(self) -> str:
        return "\n".join(self.rows())


def line_of_sight(grid: Map, start: Tuple[int, int], end: Tuple[int, int]) -> Iterator[Tuple[Point, Tile]]:
    """Walk a Bresenham line from start toward end, yielding floor tiles.

    The start tile itself is skipped. The walk stops for good at the first
    wall or out-of-bounds coordinate, so everything yielded is in plain sight
    of start. End may lie off the map.
    """
    x0, y0 = start
    x1, y1 = end
    steep = abs(y1 - y0) > abs(x1 - x0)
    if steep:
        x0, y0 = y0, x0
        x1, y1 = y1, x1

    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    xstep = 1 if x1 >= x0 else -1
    ystep = 1 if y1 >= y0 else -1
    error = dx // 2

    x, y = x0, y0
    for _ in range(dx):
        x += xstep
        error -= dy
        if error < 0:
            y += ystep
            error += dx
        px, py = (y, x) if steep else (x, y)
        tile = grid.at(px, py)
        if tile is not Tile.FLOOR:
            return
        yield (px, py), tile
