from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..config import Config, ConfigError
from ..game.map import Direction, Map
from ..game.state import Game, Status, TurnMessage, UpdateMessage
from ..game.visibility import Actor

# Message types exchanged over the wire
# All messages are JSON objects with a 'type' field
# Actors are [x, y, 'U'|'D'|'L'|'R'] or null; statuses are their enum values
# Server -> client, once per connection:
# - game: { type: 'game', proto: 1, address: str, config: {...}, status: str, defender: int, player: int,
#           positions: [actor|null, ...], guards: [actor|null, ...], targets: [[x,y]|null, ...],
#           escaped: [bool, ...], map: { len: int, rows: [str, ...] } }
# Client -> server, defender only, once before the first round (guard placement),
# then every client after each of its turns:
# - update: { type: 'update', new: actor|null, guards: [actor|null, ...], status: str, escaped: bool }
# Server -> client, every round:
# - turn: { type: 'turn', turn: bool, defender: bool, positions: [...], guards: [...], status: str }

PROTO_VERSION = 1

MSG_GAME = "game"
MSG_TURN = "turn"
MSG_UPDATE = "update"


class ProtocolError(RuntimeError):
    pass


def _expect(msg: Dict[str, Any], kind: str) -> None:
    if not isinstance(msg, dict) or msg.get("type") != kind:
        got = msg.get("type") if isinstance(msg, dict) else type(msg).__name__
        raise ProtocolError(f"expected {kind}, got {got}")


def _field(msg: Dict[str, Any], key: str) -> Any:
    try:
        return msg[key]
    except KeyError:
        raise ProtocolError(f"{msg.get('type')} message is missing {key!r}") from None


def _int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProtocolError(f"expected an integer, got {value!r}")
    return value


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ProtocolError(f"expected a boolean, got {value!r}")
    return value


def actor_to_wire(actor: Optional[Actor]) -> Optional[List[Any]]:
    if actor is None:
        return None
    (x, y), direction = actor
    return [x, y, direction.value]


def actor_from_wire(data: Any) -> Optional[Actor]:
    if data is None:
        return None
    try:
        x, y, d = data
        return (_int(x), _int(y)), Direction(d)
    except (TypeError, ValueError) as exc:
        raise ProtocolError(f"bad actor {data!r}") from exc


def _actors_from_wire(data: Any) -> List[Optional[Actor]]:
    if not isinstance(data, list):
        raise ProtocolError(f"expected a list of actors, got {data!r}")
    return [actor_from_wire(a) for a in data]


def _status_from_wire(data: Any) -> Status:
    try:
        return Status(data)
    except ValueError:
        raise ProtocolError(f"unknown status {data!r}") from None


def encode_game(game: Game) -> Dict[str, Any]:
    return {
        "type": MSG_GAME,
        "proto": PROTO_VERSION,
        "address": game.address,
        "config": game.config.to_dict(),
        "status": game.status.value,
        "defender": game.defender,
        "player": game.player,
        "positions": [actor_to_wire(a) for a in game.positions],
        "guards": [actor_to_wire(g) for g in game.guards],
        "targets": [list(t) if t is not None else None for t in game.targets],
        "escaped": list(game.escaped),
        "map": {"len": game.map.length, "rows": game.map.rows()},
    }


def decode_game(msg: Dict[str, Any]) -> Game:
    _expect(msg, MSG_GAME)
    if msg.get("proto") != PROTO_VERSION:
        raise ProtocolError("protocol mismatch")
    try:
        config = Config.from_dict(_field(msg, "config"))
        raw_map = _field(msg, "map")
        grid = Map.parse("\n".join(raw_map["rows"]))
        if grid.length != raw_map["len"]:
            raise ProtocolError("map size does not match its rows")
        targets = [
            (_int(t[0]), _int(t[1])) if t is not None else None
            for t in _field(msg, "targets")
        ]
    except (ConfigError, KeyError, TypeError, ValueError, IndexError) as exc:
        raise ProtocolError(f"bad game snapshot: {exc}") from exc

    positions = _actors_from_wire(_field(msg, "positions"))
    escaped = [_bool(e) for e in _field(msg, "escaped")]
    if len(targets) != len(positions) or len(escaped) != len(positions):
        raise ProtocolError("player slots do not line up")
    return Game(
        address=str(_field(msg, "address")),
        config=config,
        map=grid,
        defender=_int(_field(msg, "defender")),
        positions=positions,
        targets=targets,
        guards=_actors_from_wire(_field(msg, "guards")),
        status=_status_from_wire(_field(msg, "status")),
        player=_int(_field(msg, "player")),
        escaped=escaped,
    )


def encode_turn(msg: TurnMessage) -> Dict[str, Any]:
    return {
        "type": MSG_TURN,
        "turn": msg.turn,
        "defender": msg.defender,
        "positions": [actor_to_wire(a) for a in msg.positions],
        "guards": [actor_to_wire(g) for g in msg.guards],
        "status": msg.status.value,
    }


def decode_turn(msg: Dict[str, Any]) -> TurnMessage:
    _expect(msg, MSG_TURN)
    return TurnMessage(
        turn=_bool(_field(msg, "turn")),
        defender=_bool(_field(msg, "defender")),
        positions=_actors_from_wire(_field(msg, "positions")),
        guards=_actors_from_wire(_field(msg, "guards")),
        status=_status_from_wire(_field(msg, "status")),
    )


def encode_update(msg: UpdateMessage) -> Dict[str, Any]:
    return {
        "type": MSG_UPDATE,
        "new": actor_to_wire(msg.new),
        "guards": [actor_to_wire(g) for g in msg.guards],
        "status": msg.status.value,
        "escaped": msg.escaped,
    }


def decode_update(msg: Dict[str, Any]) -> UpdateMessage:
    _expect(msg, MSG_UPDATE)
    return UpdateMessage(
        new=actor_from_wire(_field(msg, "new")),
        guards=_actors_from_wire(_field(msg, "guards")),
        status=_status_from_wire(_field(msg, "status")),
        escaped=_bool(msg.get("escaped", False)),
    )
