from __future__ import annotations

import time
from collections import deque
from typing import Deque, Dict, Optional, Tuple

import pygame

from ..game.map import Point
from . import Colour, Key, KeyPress, UIBackend

# --------------------------- Pygame rendering ---------------------------

WINDOW_BG = (15, 18, 25)
TEXT = (230, 235, 245)

PALETTE: Dict[Colour, Tuple[int, int, int]] = {
    Colour.BLACK: (0, 0, 0),
    Colour.RED: (232, 93, 117),
    Colour.GREEN: (90, 200, 120),
    Colour.YELLOW: (240, 190, 90),
    Colour.BLUE: (58, 123, 213),
    Colour.MAGENTA: (200, 110, 220),
    Colour.CYAN: (90, 200, 230),
    Colour.WHITE: (245, 245, 245),
    Colour.GREY: (110, 118, 135),
    Colour.RESET: TEXT,
}

CELL_W = 12
CELL_H = 20
COLS = 100
ROWS = 40

KEYMAP = {
    pygame.K_TAB: Key.TAB,
    pygame.K_LEFT: Key.LEFT,
    pygame.K_RIGHT: Key.RIGHT,
    pygame.K_UP: Key.UP,
    pygame.K_DOWN: Key.DOWN,
}

WALL = "█"


class PygameBackend(UIBackend):
    """Draws the game as a grid of character cells in a pygame window."""

    def __init__(self, cols: int = COLS, rows: int = ROWS) -> None:
        pygame.init()
        pygame.display.set_caption("Hanzo")
        self.screen = pygame.display.set_mode((cols * CELL_W, rows * CELL_H), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("dejavusansmono,consolas,menlo,monospace", CELL_H - 4)
        self.glyphs: Dict[Tuple[str, Colour], pygame.Surface] = {}
        self.pending: Deque[KeyPress] = deque()
        self.closed = False

    def _glyph(self, ch: str, fg: Colour) -> pygame.Surface:
        surf = self.glyphs.get((ch, fg))
        if surf is None:
            surf = self.font.render(ch, True, PALETTE[fg])
            self.glyphs[(ch, fg)] = surf
        return surf

    def draw(self, pos: Point, text: str, fg: Colour, bg: Colour) -> None:
        x0, y = pos
        for i, ch in enumerate(text):
            rect = pygame.Rect((x0 + i) * CELL_W, y * CELL_H, CELL_W, CELL_H)
            if bg is not Colour.RESET:
                pygame.draw.rect(self.screen, PALETTE[bg], rect)
            if ch == WALL:
                # Walls fill the whole cell
                pygame.draw.rect(self.screen, PALETTE[fg], rect)
            elif ch != " ":
                glyph = self._glyph(ch, fg)
                self.screen.blit(glyph, (rect.x + (CELL_W - glyph.get_width()) // 2, rect.y + 2))

    def flush(self) -> None:
        pygame.display.flip()

    def clear(self) -> None:
        self.screen.fill(WINDOW_BG)

    def _key(self, event: pygame.event.Event) -> Optional[KeyPress]:
        if event.key in KEYMAP:
            return KEYMAP[event.key]
        if event.unicode and len(event.unicode) == 1:
            return event.unicode
        return None

    def input(self, timeout: float) -> Optional[KeyPress]:
        deadline = time.monotonic() + timeout
        while not self.pending:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.pending.append("q")
                elif event.type == pygame.VIDEORESIZE:
                    self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                elif event.type == pygame.KEYDOWN:
                    key = self._key(event)
                    if key is not None:
                        self.pending.append(key)
            if self.pending or time.monotonic() >= deadline:
                break
            self.clock.tick(60)
        return self.pending.popleft() if self.pending else None

    def size(self) -> Tuple[int, int]:
        w, h = self.screen.get_size()
        return min(w // CELL_W, 255), min(h // CELL_H, 255)

    def message(self, text: str) -> None:
        cols, rows = self.size()
        bar = pygame.Rect(0, (rows - 1) * CELL_H, cols * CELL_W, CELL_H)
        pygame.draw.rect(self.screen, WINDOW_BG, bar)
        self.draw((0, rows - 1), text[:cols], Colour.MAGENTA, Colour.RESET)
        pygame.display.flip()

    def reset(self) -> None:
        if not self.closed:
            self.closed = True
            pygame.quit()
