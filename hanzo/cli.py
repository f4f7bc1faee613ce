import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import CONFIG_FILE, Config, ConfigError
from .game.map import Map
from .game.state import Game
from .net.protocol import ProtocolError
from .net.server import SessionError, run_server

log = logging.getLogger("hanzo")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hanzo - turn-based LAN stealth game")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="mode", required=True)

    server_p = subparsers.add_parser("server", help="Host a game session")
    server_p.add_argument("address", type=str, help="Address to listen on, e.g. 0.0.0.0:7878")
    server_p.add_argument("--config", type=str, default=CONFIG_FILE, help="TOML configuration file")
    server_p.add_argument("--map", type=str, default=None, help="Map file of '#' walls and '.' floor")
    server_p.add_argument("--players", type=int, default=None, help="Number of players, defender included")
    server_p.add_argument("--guards", type=int, default=None, help="Number of guards")

    join_p = subparsers.add_parser("join", help="Join a server")
    join_p.add_argument("address", type=str, help="Server address, e.g. 192.168.0.2:7878")

    return parser


def serve(args: argparse.Namespace) -> None:
    config = Config.load(args.config).override(players=args.players, num_guards=args.guards)
    grid = Map.parse(Path(args.map).read_text(encoding="utf-8")) if args.map else None
    game = Game.new(args.address, config, grid)
    status = run_server(game)
    print(f"Game finished: {status.value}")


def join(args: argparse.Namespace) -> None:
    # pygame is only needed by players
    from .net.client import run_client
    from .ui import UserInterface
    from .ui.gui import PygameBackend

    run_client(args.address, UserInterface(PygameBackend()))


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.mode == "server":
            serve(args)
        elif args.mode == "join":
            join(args)
    except (ConfigError, ProtocolError, SessionError, OSError, ValueError) as exc:
        log.error("%s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)
