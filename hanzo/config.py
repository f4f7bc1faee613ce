from __future__ import annotations

import logging
import tomllib
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union


log = logging.getLogger(__name__)

CONFIG_FILE = "hanzo.toml"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Config:
    """Assorted session options, decided by the server and shared with every client."""

    # Timeout in milliseconds waiting for user input
    input_timeout: int = 300
    # Actions per turn
    attacker_actions: int = 5
    defender_actions: int = 10
    # Actions inside a view cone before an attacker is caught
    detection_actions: int = 3
    viewcone_length: int = 16
    # Half-width of the view cone
    viewcone_width: int = 10
    # Seconds per turn
    turn_time: float = 120.0
    players: int = 4
    num_guards: int = 5
    # Side of the map
    length: int = 48

    @classmethod
    def load(cls, path: Union[str, Path] = CONFIG_FILE) -> "Config":
        """Read configuration from a TOML file, or use defaults if there is none."""
        path = Path(path)
        if not path.exists():
            log.info("%s not found, using default configuration", path)
            return cls()
        try:
            with path.open("rb") as fh:
                data = tomllib.load(fh)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"cannot read {path}: {exc}") from exc
        log.info("Configuration read from %s", path)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        data = dict(data)
        if "len" in data:
            data["length"] = data.pop("len")
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                log.warning("Ignoring unknown configuration key %r", key)
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{key} must be a number, got {value!r}")
            values[key] = float(value) if key == "turn_time" else int(value)
        conf = cls(**values)
        conf.validate()
        return conf

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def override(self, **changes: Any) -> "Config":
        conf = replace(self, **{k: v for k, v in changes.items() if v is not None})
        conf.validate()
        return conf

    def validate(self) -> None:
        if self.players < 2:
            raise ConfigError("at least two players are needed")
        for name in ("input_timeout", "attacker_actions", "defender_actions", "detection_actions",
                     "viewcone_length", "length"):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be positive")
        if self.viewcone_width < 0 or self.num_guards < 0:
            raise ConfigError("viewcone_width and num_guards cannot be negative")
        if self.turn_time <= 0:
            raise ConfigError("turn_time must be positive")
