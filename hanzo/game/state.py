from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

from .. import defaults
from ..config import Config
from .map import Direction, Map, Point, Tile
from .visibility import Actor, is_visible, view_cone, visible_tiles

if TYPE_CHECKING:
    from ..ui import UserInterface

log = logging.getLogger(__name__)

_DIRECTIONS = list(Direction)


class Status(Enum):
    RUNNING = "running"
    ATTACKER_VICTORY = "attacker_victory"
    DEFENDER_VICTORY = "defender_victory"
    QUIT = "quit"


@dataclass
class TurnMessage:
    """Information sent from server to client each turn."""
    # Is it the recipient's turn?
    turn: bool
    # Is the recipient the defender?
    defender: bool
    positions: List[Optional[Actor]]
    guards: List[Optional[Actor]]
    status: Status


@dataclass
class UpdateMessage:
    """Information sent from client to server after its turn."""
    # New position of the player's character (None for the defender or once out of play)
    new: Optional[Actor]
    guards: List[Optional[Actor]]
    status: Status
    # Left play by reaching the target rather than by being caught
    escaped: bool = False


@dataclass
class Game:
    address: str
    config: Config
    map: Map
    defender: int
    positions: List[Optional[Actor]]
    targets: List[Optional[Point]]
    guards: List[Optional[Actor]]
    status: Status = Status.RUNNING
    # Index of the local player (client side only)
    player: int = 0
    escaped: List[bool] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.escaped:
            self.escaped = [False] * len(self.positions)

    @classmethod
    def new(cls, address: str, config: Config, grid: Optional[Map] = None,
            rng: Optional[random.Random] = None) -> "Game":
        rng = rng or random.Random()
        builtin = grid is None
        if grid is None:
            grid = defaults.default_map()
        config = replace(config, length=grid.length)

        if builtin and config.players <= len(defaults.POSITIONS) and config.num_guards <= len(defaults.GUARDS):
            positions: List[Optional[Actor]] = [(p, Direction.UP) for p in defaults.POSITIONS[:config.players]]
            targets: List[Optional[Point]] = list(defaults.TARGETS[:config.players])
            guards: List[Optional[Actor]] = list(defaults.GUARDS[:config.num_guards])
        else:
            positions = [(grid.random_floor(rng), rng.choice(_DIRECTIONS)) for _ in range(config.players)]
            targets = [grid.random_floor(rng) for _ in range(config.players)]
            guards = [(grid.random_floor(rng), rng.choice(_DIRECTIONS)) for _ in range(config.num_guards)]

        defender = rng.randrange(config.players)
        positions[defender] = None
        targets[defender] = None

        return cls(
            address=address,
            config=config,
            map=grid,
            defender=defender,
            positions=positions,
            targets=targets,
            guards=guards,
        )

    def for_player(self, player: int) -> "Game":
        game = copy.deepcopy(self)
        game.player = player
        return game

    def attackers(self) -> List[int]:
        return [i for i in range(len(self.positions)) if i != self.defender]

    # --------------------------- Messages ---------------------------
    def turn(self, player: int, current: int) -> TurnMessage:
        defender = player == self.defender
        status = self.status
        # The losing side is only told the game is over
        if (defender and status is Status.ATTACKER_VICTORY) or (not defender and status is Status.DEFENDER_VICTORY):
            status = Status.QUIT
        return TurnMessage(
            turn=player == current,
            defender=defender,
            positions=list(self.positions),
            guards=list(self.guards),
            status=status,
        )

    def update(self, msg: UpdateMessage, current: int) -> None:
        """Apply the update submitted by the player whose turn it was.

        The defender may move and turn its remaining guards; it cannot bring
        back a compromised guard or change how many there are. An attacker
        may only move itself, leave play, and remove guards, all within one
        turn's reach of where the server last saw it. Victory is never taken
        from a client.
        """
        if current == self.defender:
            if msg.new is not None:
                log.warning("Ignoring position sent by defender %d", current)
            self.guards = self._defender_guards(msg.guards, current)
        else:
            last = self.positions[current]
            self.positions[current] = self._checked_move(last, msg.new, current)
            if msg.new is None and msg.escaped:
                target = self.targets[current]
                if target is not None and self._in_reach(last, target):
                    self.escaped[current] = True
                else:
                    log.warning("Ignoring escape claimed by player %d", current)
            self.guards = self._removals_only(msg.guards, last, current)

        if msg.status in (Status.RUNNING, Status.QUIT):
            if self.status is Status.RUNNING:
                self.status = msg.status
        else:
            log.warning("Ignoring status %s sent by player %d", msg.status.value, current)

    def _in_reach(self, actor: Optional[Actor], point: Point) -> bool:
        """Could the actor get to point with one turn's actions?"""
        if actor is None:
            return False
        (x, y), _ = actor
        return abs(point[0] - x) + abs(point[1] - y) <= self.config.attacker_actions

    def _checked_move(self, last: Optional[Actor], new: Optional[Actor], current: int) -> Optional[Actor]:
        if new is None:
            return None
        if self._in_reach(last, new[0]) and self.map.is_floor(*new[0]):
            return new
        log.warning("Ignoring move to %s by player %d", new[0], current)
        return last

    def _defender_guards(self, guards: List[Optional[Actor]], current: int) -> List[Optional[Actor]]:
        if len(guards) != len(self.guards):
            log.warning("Ignoring guard list of wrong size from defender %d", current)
            return list(self.guards)
        kept: List[Optional[Actor]] = []
        for old, new in zip(self.guards, guards):
            if old is None and new is not None:
                log.warning("Ignoring revived guard from defender %d", current)
                new = None
            kept.append(new)
        return kept

    def _removals_only(self, guards: List[Optional[Actor]], last: Optional[Actor],
                       current: int) -> List[Optional[Actor]]:
        if len(guards) != len(self.guards):
            log.warning("Ignoring guard list of wrong size from player %d", current)
            return list(self.guards)
        kept: List[Optional[Actor]] = []
        for old, new in zip(self.guards, guards):
            if new == old or (new is None and self._in_reach(last, old[0])):
                kept.append(new)
            else:
                log.warning("Ignoring guard change by attacker %d", current)
                kept.append(old)
        return kept

    def apply(self, msg: TurnMessage) -> None:
        """Mirror the server's state locally."""
        self.positions = list(msg.positions)
        self.guards = list(msg.guards)
        self.status = msg.status

    def victory(self) -> Status:
        """Check victory conditions, attackers first."""
        if self.status is not Status.RUNNING:
            return self.status

        attackers = self.attackers()
        home = [
            self.escaped[i] or (self.positions[i] is not None and self.positions[i][0] == self.targets[i])
            for i in attackers
        ]
        out_or_home = all(self.positions[i] is None or done for i, done in zip(attackers, home))
        if out_or_home and any(home):
            self.status = Status.ATTACKER_VICTORY
        elif all(guard is None for guard in self.guards):
            self.status = Status.ATTACKER_VICTORY
        elif all(self.positions[i] is None for i in attackers):
            self.status = Status.DEFENDER_VICTORY
        return self.status

    # --------------------------- Turn input ---------------------------
    def play(self, ui: "UserInterface", defender: bool) -> UpdateMessage:
        ui.input(self, defender)
        return self._outgoing()

    def place_guards(self, ui: "UserInterface") -> UpdateMessage:
        ui.place_guards(self)
        return self._outgoing()

    def _outgoing(self) -> UpdateMessage:
        return UpdateMessage(
            new=self.positions[self.player],
            guards=list(self.guards),
            status=self.status,
            escaped=self.escaped[self.player],
        )

    # --------------------------- Movement ---------------------------
    def _moved(self, actor: Optional[Actor], dx: int, dy: int) -> Optional[Actor]:
        if actor is None:
            return None
        (x, y), direction = actor
        x2, y2 = x + dx, y + dy
        if self.map.at(x2, y2) is Tile.FLOOR:
            return (x2, y2), direction
        return actor

    def move_player(self, dx: int, dy: int) -> None:
        self.positions[self.player] = self._moved(self.positions[self.player], dx, dy)

    def move_guard(self, index: int, dx: int, dy: int) -> None:
        self.guards[index] = self._moved(self.guards[index], dx, dy)

    def rotate_player(self, clockwise: bool) -> None:
        actor = self.positions[self.player]
        if actor is not None:
            self.positions[self.player] = (actor[0], actor[1].rotate(clockwise))

    def rotate_guard(self, index: int, clockwise: bool) -> None:
        guard = self.guards[index]
        if guard is not None:
            self.guards[index] = (guard[0], guard[1].rotate(clockwise))

    # --------------------------- Visibility ---------------------------
    def view_cone(self, actor: Optional[Actor]) -> Dict[Point, Tile]:
        return view_cone(self.map, actor, self.config.viewcone_length, self.config.viewcone_width)

    def guard_vision(self) -> Dict[Point, Tile]:
        return visible_tiles(self.map, self.guards, self.config.viewcone_length, self.config.viewcone_width)

    def visible(self, player: int) -> bool:
        """Is the player seen by any guard?"""
        actor = self.positions[player]
        if actor is None:
            return False
        return is_visible(self.map, self.guards, actor[0], self.config.viewcone_length, self.config.viewcone_width)

    # --------------------------- Elimination ---------------------------
    def compromise_guards(self) -> None:
        actor = self.positions[self.player]
        if actor is None:
            return
        self.guards = [g if g is None or g[0] != actor[0] else None for g in self.guards]

    def exfiltrate(self) -> bool:
        actor = self.positions[self.player]
        if actor is None or actor[0] != self.targets[self.player]:
            return False
        self.positions[self.player] = None
        self.escaped[self.player] = True
        return True
