from .map import Direction, Map, Point, Tile, line_of_sight
from .visibility import Actor, cone_ends, is_visible, view_cone, visible_tiles
from .state import Game, Status, TurnMessage, UpdateMessage

__all__ = [
    "Actor",
    "Direction",
    "Game",
    "Map",
    "Point",
    "Status",
    "Tile",
    "TurnMessage",
    "UpdateMessage",
    "cone_ends",
    "is_visible",
    "line_of_sight",
    "view_cone",
    "visible_tiles",
]
