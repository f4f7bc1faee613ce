from __future__ import annotations

import logging
import queue
import socket
import threading
from typing import List, Optional

from ..game.state import Game, Status, TurnMessage, UpdateMessage
from .net import open_listener, parse_address, recv_msg, send_msg
from .protocol import ProtocolError, decode_update, encode_game, encode_turn

log = logging.getLogger(__name__)

# Seconds allowed on top of the turn time before a silent player is given up on
TURN_GRACE = 30.0


class SessionError(RuntimeError):
    pass


class ClientWorker:
    """Owns one client socket and relays between it and the turn loop.

    Messages for the client arrive on ``inbox``; updates read from the client
    go out on ``outbox``. ``None`` on the outbox means the connection is gone,
    ``None`` on the inbox means the server is shutting down.
    """

    def __init__(self, conn: socket.socket, inbox: "queue.Queue[Optional[TurnMessage]]",
                 outbox: "queue.Queue[Optional[UpdateMessage]]") -> None:
        self.conn = conn
        self.inbox = inbox
        self.outbox = outbox

    def run(self, game: Game) -> None:
        try:
            self._serve(game)
        except (OSError, ProtocolError) as exc:
            log.warning("Player %d connection failed: %s", game.player, exc)
            self.outbox.put(None)
        finally:
            try:
                self.conn.close()
            except OSError:
                pass

    def _serve(self, game: Game) -> None:
        log.info("Player %d connected", game.player)
        send_msg(self.conn, encode_game(game))

        if game.player == game.defender:
            # The defender chooses guard positions before the first round
            self.outbox.put(decode_update(recv_msg(self.conn)))

        while True:
            msg = self.inbox.get()
            if msg is None:
                return
            send_msg(self.conn, encode_turn(msg))
            if msg.status is not Status.RUNNING:
                return
            if msg.turn:
                self.outbox.put(decode_update(recv_msg(self.conn)))


class ClientHandle:
    """The turn loop's side of a client connection."""

    def __init__(self, conn: socket.socket, game: Game) -> None:
        self.player = game.player
        self.conn = conn
        self.inbox: "queue.Queue[Optional[TurnMessage]]" = queue.Queue()
        self.outbox: "queue.Queue[Optional[UpdateMessage]]" = queue.Queue()
        worker = ClientWorker(conn, self.inbox, self.outbox)
        self.thread = threading.Thread(target=worker.run, args=(game,), name=f"hanzo-player-{game.player}",
                                       daemon=True)
        self.thread.start()

    def send(self, msg: TurnMessage) -> None:
        self.inbox.put(msg)

    def recv(self, timeout: Optional[float] = None) -> UpdateMessage:
        try:
            msg = self.outbox.get(timeout=timeout)
        except queue.Empty:
            raise SessionError(f"player {self.player} did not answer within {timeout:.0f}s") from None
        if msg is None:
            raise SessionError(f"player {self.player} disconnected")
        return msg

    def abort(self) -> None:
        # Unblocks a worker stuck reading from a stalled client
        try:
            self.conn.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

    def close(self) -> None:
        self.inbox.put(None)
        self.thread.join()


class Server:
    """Accepts every player, then runs the authoritative turn loop."""

    def __init__(self, game: Game, listener: socket.socket) -> None:
        self.game = game
        self.listener = listener
        self.clients: List[ClientHandle] = []
        self.turn_timeout: Optional[float] = game.config.turn_time + TURN_GRACE

    @classmethod
    def bind(cls, game: Game) -> "Server":
        host, port = parse_address(game.address)
        listener = open_listener(host, port, backlog=game.config.players)
        log.info("Address: %s, players: %d", game.address, game.config.players)
        return cls(game, listener)

    @property
    def port(self) -> int:
        return self.listener.getsockname()[1]

    def accept_all(self) -> None:
        defender = self.game.defender
        try:
            for i in range(self.game.config.players):
                conn, addr = self.listener.accept()
                log.info("Accepted %s:%d as player %d", addr[0], addr[1], i)
                self.clients.append(ClientHandle(conn, self.game.for_player(i)))

            # Update guards' positions from the defending player
            msg = self._recv(defender, timeout=self.turn_timeout)
        except BaseException:
            self._close_clients()
            raise
        self.game.update(msg, defender)
        log.info("Received guard positions from defender (player %d)", defender)

    def run(self) -> Status:
        current = 0
        try:
            while True:
                status = self.game.victory()

                for i, client in enumerate(self.clients):
                    client.send(self.game.turn(i, current))
                log.debug("Round broadcast, player %d to act", current)

                if status is not Status.RUNNING:
                    break

                msg = self._recv(current, timeout=self.turn_timeout)
                log.info("Received update from player %d", current)
                self.game.update(msg, current)

                current = (current + 1) % self.game.config.players
        finally:
            self._close_clients()

        log.info("Game finished: %s", self.game.status.value)
        return self.game.status

    def _recv(self, player: int, timeout: Optional[float]) -> UpdateMessage:
        try:
            return self.clients[player].recv(timeout)
        except SessionError:
            self._shutdown(player)
            raise

    def _shutdown(self, failed: int) -> None:
        self.game.status = Status.QUIT
        self.clients[failed].abort()
        for i, client in enumerate(self.clients):
            client.send(self.game.turn(i, -1))

    def _close_clients(self) -> None:
        for client in self.clients:
            client.close()
        self.clients = []

    def close(self) -> None:
        try:
            self.listener.close()
        except OSError:
            pass


def run_server(game: Game) -> Status:
    server = Server.bind(game)
    try:
        server.accept_all()
        return server.run()
    finally:
        server.close()
