from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from ..game.map import Point, Tile
from ..game.state import Game, Status
from ..game.visibility import Actor


class Key(Enum):
    TAB = "tab"
    LEFT = "left"
    DOWN = "down"
    UP = "up"
    RIGHT = "right"


# A special key or a single printable character
KeyPress = Union[Key, str]


class Colour(Enum):
    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"
    GREY = "grey"
    RESET = "reset"


MOVES: Dict[Key, Tuple[int, int]] = {
    Key.LEFT: (-1, 0),
    Key.RIGHT: (1, 0),
    Key.UP: (0, -1),
    Key.DOWN: (0, 1),
}

SPLASH = """\
██   ██  █████  ███    ██ ███████  ██████
██   ██ ██   ██ ████   ██    ███  ██    ██
███████ ███████ ██ ██  ██   ███   ██    ██
██   ██ ██   ██ ██  ██ ██  ███    ██    ██
██   ██ ██   ██ ██   ████ ███████  ██████

Version: 0.1.0
"""


class UIBackend(ABC):
    """Character-cell display plus keyboard."""

    @abstractmethod
    def draw(self, pos: Point, text: str, fg: Colour, bg: Colour) -> None:
        ...

    @abstractmethod
    def flush(self) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def input(self, timeout: float) -> Optional[KeyPress]:
        """Wait up to timeout seconds for a key press."""

    @abstractmethod
    def size(self) -> Tuple[int, int]:
        """Display size in cells, (columns, rows)."""

    @abstractmethod
    def message(self, text: str) -> None:
        """Show a line of text on the bottom row."""

    @abstractmethod
    def reset(self) -> None:
        ...


class UserInterface:
    """Turn input and fog-of-war display on top of a backend.

    Remembers every tile the local player has seen so far and which guard
    the defender currently has selected.
    """

    def __init__(self, backend: UIBackend) -> None:
        self.backend = backend
        self.centre: Optional[Actor] = None
        self.seen: Dict[Point, Tile] = {}
        self.guard = 0

    # --------------------------- Keys ---------------------------
    def _defender_key(self, game: Game, key: KeyPress) -> Tuple[int, bool]:
        """Returns the actions used and whether the selected guard was set down."""
        if key is Key.TAB:
            self._next_guard(game)
            return 0, False
        if key in MOVES:
            game.move_guard(self.guard, *MOVES[key])
        elif key == "q":
            game.status = Status.QUIT
            return game.config.defender_actions, False
        elif key == "[":
            game.rotate_guard(self.guard, False)
        elif key == "]":
            game.rotate_guard(self.guard, True)
        elif key == " ":
            return 1, True
        elif key != ".":
            return 0, False
        return 1, False

    def _player_key(self, game: Game, key: KeyPress) -> int:
        if key is Key.TAB:
            return 1
        if key in MOVES:
            game.move_player(*MOVES[key])
        elif key == "q":
            game.status = Status.QUIT
            return game.config.attacker_actions
        elif key == "[":
            game.rotate_player(False)
        elif key == "]":
            game.rotate_player(True)
        elif key != ".":
            return 0
        return 1

    def _next_guard(self, game: Game) -> None:
        if not any(g is not None for g in game.guards):
            return
        while True:
            self.guard = (self.guard + 1) % len(game.guards)
            if game.guards[self.guard] is not None:
                return

    def _first_guard(self, game: Game) -> int:
        return next((i for i, g in enumerate(game.guards) if g is not None), 0)

    # --------------------------- Display ---------------------------
    def _status(self, game: Game, actions: int, remaining: float) -> None:
        self.backend.message(
            f"Your turn! Attackers: {sum(p is not None for p in game.positions)}, "
            f"Guards: {sum(g is not None for g in game.guards)}, "
            f"Actions: {actions}, Turn Time: {int(remaining)}s"
        )

    def map_to_display(self, pos: Point) -> Optional[Point]:
        """Centre the view of the map on the current actor."""
        width, height = self.backend.size()
        x, y = pos
        if self.centre is not None:
            (cx, cy), _ = self.centre
            x += width // 2 - cx
            y += (height - 1) // 2 - cy
            if x < 0 or y < 0:
                return None
        if x < width and y < height - 1:
            return x, y
        return None

    def _draw(self, pos: Point, text: str, fg: Colour, bg: Colour = Colour.RESET) -> None:
        p = self.map_to_display(pos)
        if p is not None:
            self.backend.draw(p, text, fg, bg)

    def message(self, text: str) -> None:
        self.backend.message(text)

    def display(self, game: Game, defender: bool) -> None:
        if defender:
            self._display_defender(game, full=False)
        else:
            self._display_attacker(game)

    def _display_defender(self, game: Game, full: bool) -> None:
        self.backend.clear()
        self.centre = game.guards[self.guard] if self.guard < len(game.guards) else None

        remembered = game.map.tiles() if full else list(self.seen.items())
        for pos, tile in remembered:
            self._draw(pos, str(tile), Colour.GREY)

        visible = game.guard_vision()
        self.seen.update(visible)
        for pos, tile in visible.items():
            self._draw(pos, str(tile), Colour.RESET, Colour.RED)

        for actor in game.positions:
            if actor is not None and actor[0] in visible:
                self._draw(actor[0], "A", Colour.BLUE, Colour.WHITE)

        for i, guard in enumerate(game.guards):
            if guard is not None:
                self._draw(guard[0], "G", Colour.RED, Colour.YELLOW if i == self.guard else Colour.RESET)

        self.backend.flush()

    def _display_attacker(self, game: Game) -> None:
        self.backend.clear()
        me = game.positions[game.player]
        self.centre = me

        for pos, tile in self.seen.items():
            self._draw(pos, str(tile), Colour.GREY)

        watched = game.guard_vision()
        visible = game.view_cone(me)
        self.seen.update(visible)

        guards = {g[0] for g in game.guards if g is not None}
        others = {p[0] for i, p in enumerate(game.positions) if p is not None and i != game.player}
        target = game.targets[game.player]
        for pos, tile in visible.items():
            bg = Colour.RED if pos in watched else Colour.RESET
            self._draw(pos, str(tile), Colour.GREEN, bg)
            if pos in guards:
                self._draw(pos, "G", Colour.RED)
            elif pos in others:
                self._draw(pos, "A", Colour.YELLOW)
            elif pos == target:
                self._draw(pos, "X", Colour.GREEN)

        if me is not None:
            self._draw(me[0], "A", Colour.CYAN)

        self.backend.flush()

    # --------------------------- Turns ---------------------------
    def input(self, game: Game, defender: bool) -> None:
        """Event loop for one turn, until the action or time budget runs out."""
        conf = game.config
        started = time.monotonic()
        self.guard = self._first_guard(game)

        detected = conf.detection_actions
        actions = conf.defender_actions if defender else conf.attacker_actions
        while actions > 0:
            remaining = conf.turn_time - (time.monotonic() - started)
            if remaining <= 0:
                break
            self._status(game, actions, remaining)

            if not defender and game.positions[game.player] is None:
                break

            key = self.backend.input(conf.input_timeout / 1000)
            if key is None:
                continue
            if defender:
                used = self._defender_key(game, key)[0]
            else:
                used = self._player_key(game, key)
            actions -= used
            if game.status is Status.QUIT:
                break

            # Free keys leave the attacker where it was
            attacking = not defender and used > 0
            if attacking:
                game.compromise_guards()
                # Caught after enough consecutive actions in sight
                if game.visible(game.player):
                    detected -= 1
                else:
                    detected = conf.detection_actions
                if detected <= 0:
                    game.positions[game.player] = None

            self.display(game, defender)
            if attacking and game.exfiltrate():
                break

    def place_guards(self, game: Game) -> None:
        """Event loop for the defender to set down every guard."""
        conf = game.config
        remaining = min(conf.num_guards, len(game.guards))
        self.guard = 0
        placed = []

        # Hide player positions
        players = game.positions
        game.positions = [None] * len(players)

        self._display_defender(game, full=True)
        while remaining > 0:
            self.message(f"{remaining} guards remaining to place")
            key = self.backend.input(conf.input_timeout / 1000)
            if key is None:
                continue
            _, done = self._defender_key(game, key)
            if game.status is Status.QUIT:
                break
            if done and game.guards[self.guard] is not None:
                placed.append(game.guards[self.guard])
                game.guards[self.guard] = None
                remaining -= 1
                self.guard = self._first_guard(game)
            self._display_defender(game, full=True)

        game.guards = placed + [g for g in game.guards if g is not None]
        game.positions = players

    # --------------------------- Screens ---------------------------
    def splash(self) -> None:
        self.backend.clear()
        for i, line in enumerate(SPLASH.splitlines()):
            self.backend.draw((5, 5 + i), line, Colour.RED, Colour.RESET)
        self.backend.flush()

    def idle(self, begun: bool) -> bool:
        """Waiting screen between turns. Returns True if the user wants to quit."""
        if self.backend.input(0.1) == "q":
            return True
        if begun:
            # Draw @s at random points on the screen
            width, height = self.backend.size()
            for _ in range(width // 4):
                x = random.randrange(width)
                y = random.randrange(max(height - 1, 1))
                self.backend.draw((x, y), "@", Colour.MAGENTA, Colour.RESET)
        self.message("Waiting for other players...")
        return False

    def reset(self) -> None:
        self.backend.reset()
