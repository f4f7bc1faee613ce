from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from .map import Direction, Map, Point, Tile, line_of_sight

Actor = Tuple[Point, Direction]


def cone_ends(position: Point, direction: Direction, length: int, width: int) -> List[Tuple[int, int]]:
    """Far edge of a view cone: two end points per offset, mirrored about the facing axis."""
    x, y = position
    ends: List[Tuple[int, int]] = []
    for i in range(width):
        if direction is Direction.UP:
            ends += [(x + i, y - length), (x - i, y - length)]
        elif direction is Direction.DOWN:
            ends += [(x + i, y + length), (x - i, y + length)]
        elif direction is Direction.LEFT:
            ends += [(x - length, y + i), (x - length, y - i)]
        else:
            ends += [(x + length, y + i), (x + length, y - i)]
    return ends


def view_cone(grid: Map, actor: Optional[Actor], length: int, width: int) -> Dict[Point, Tile]:
    if actor is None:
        return {}
    position, direction = actor
    seen: Dict[Point, Tile] = {}
    for end in cone_ends(position, direction, length, width):
        for pos, tile in line_of_sight(grid, position, end):
            seen[pos] = tile
    return seen


def visible_tiles(grid: Map, actors: Iterable[Optional[Actor]], length: int, width: int) -> Dict[Point, Tile]:
    seen: Dict[Point, Tile] = {}
    for actor in actors:
        seen.update(view_cone(grid, actor, length, width))
    return seen


def is_visible(grid: Map, guards: Iterable[Optional[Actor]], point: Point, length: int, width: int) -> bool:
    return any(point in view_cone(grid, guard, length, width) for guard in guards)
