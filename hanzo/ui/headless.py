from __future__ import annotations

import time
from collections import deque
from typing import Dict, Iterable, List, Optional, Tuple

from ..game.map import Point
from . import Colour, KeyPress, UIBackend


class ScriptedBackend(UIBackend):
    """Replays a fixed list of key presses and records what gets drawn.

    Once the script runs out, input() waits out its timeout like an idle
    keyboard would.
    """

    def __init__(self, keys: Iterable[KeyPress] = (), size: Tuple[int, int] = (80, 40)) -> None:
        self.keys = deque(keys)
        self.cells: Dict[Point, Tuple[str, Colour, Colour]] = {}
        self.messages: List[str] = []
        self.frames = 0
        self.closed = False
        self._size = size

    def draw(self, pos: Point, text: str, fg: Colour, bg: Colour) -> None:
        x, y = pos
        for i, ch in enumerate(text):
            self.cells[(x + i, y)] = (ch, fg, bg)

    def flush(self) -> None:
        self.frames += 1

    def clear(self) -> None:
        self.cells = {}

    def input(self, timeout: float) -> Optional[KeyPress]:
        if self.keys:
            return self.keys.popleft()
        time.sleep(timeout)
        return None

    def size(self) -> Tuple[int, int]:
        return self._size

    def message(self, text: str) -> None:
        self.messages.append(text)

    def reset(self) -> None:
        self.closed = True

    def text_at(self, pos: Point) -> Optional[str]:
        cell = self.cells.get(pos)
        return cell[0] if cell else None
