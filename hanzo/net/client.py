from __future__ import annotations

import logging
import socket
from typing import TYPE_CHECKING

from ..game.state import Game, Status
from .net import open_client, parse_address, recv_msg, send_msg, wait_readable
from .protocol import decode_game, decode_turn, encode_update

if TYPE_CHECKING:
    from ..ui import UserInterface

log = logging.getLogger(__name__)

# Seconds to wait for the server before showing the idle screen
READ_TIMEOUT = 0.1

WIN_BANNER = "Congratulations! You win."
LOSE_BANNER = "Game over! Thanks for playing."


class Client:
    """A player's connection to the server."""

    def __init__(self, sock: socket.socket, ui: "UserInterface") -> None:
        self.sock = sock
        self.ui = ui
        self.game: Game = decode_game(recv_msg(sock))
        log.info("Joined as player %d (defender is %d)", self.game.player, self.game.defender)

        # Defender sets positions of their guards
        if self.game.player == self.game.defender:
            send_msg(sock, encode_update(self.game.place_guards(ui)))

        ui.splash()

    @classmethod
    def connect(cls, address: str, ui: "UserInterface") -> "Client":
        host, port = parse_address(address)
        sock = open_client(host, port)
        log.info("Connected to %s:%d. Waiting for server...", host, port)
        try:
            return cls(sock, ui)
        except BaseException:
            sock.close()
            raise

    def run(self) -> Status:
        begun = False
        while True:
            if not wait_readable(self.sock, READ_TIMEOUT):
                if self.ui.idle(begun):
                    self.ui.reset()
                    log.info("Left while waiting for other players")
                    return Status.QUIT
                continue

            msg = decode_turn(recv_msg(self.sock))
            self.game.apply(msg)
            self.ui.display(self.game, msg.defender)
            if msg.status is not Status.RUNNING:
                break
            begun = True

            # Send back update if it's our turn
            if msg.turn:
                send_msg(self.sock, encode_update(self.game.play(self.ui, msg.defender)))

        self.ui.reset()
        status = self.game.status
        log.info("Game over: %s", status.value)
        print()
        print(WIN_BANNER if status is not Status.QUIT else LOSE_BANNER)
        print()
        return status

    def close(self) -> None:
        try:
            self.sock.close()
        except OSError:
            pass


def run_client(address: str, ui: "UserInterface") -> Status:
    client = Client.connect(address, ui)
    try:
        return client.run()
    finally:
        client.close()
