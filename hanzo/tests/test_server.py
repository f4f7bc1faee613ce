"""
Tests for the server turn loop over loopback sockets.

Tests:
- Round-robin turn order
- Victory broadcast and the status each side sees
- Disconnected and silent players end the session for everyone
- Failures while players join
"""

import socket
import threading

import pytest

from ..game.state import Status, UpdateMessage
from ..net.net import open_listener, recv_msg, send_msg
from ..net.protocol import decode_game, decode_turn, encode_update
from ..net.server import Server, SessionError


class FakeClient:
    """Speaks the wire protocol without a user interface."""

    def __init__(self, port):
        self.sock = socket.create_connection(("127.0.0.1", port), timeout=5)
        self.game = None

    def join(self, place=True):
        self.game = decode_game(recv_msg(self.sock))
        if place and self.game.player == self.game.defender:
            self.reply(UpdateMessage(None, list(self.game.guards), Status.RUNNING))

    def recv(self):
        msg = decode_turn(recv_msg(self.sock))
        self.game.apply(msg)
        return msg

    def reply(self, msg):
        send_msg(self.sock, encode_update(msg))

    def stay(self, status=Status.RUNNING):
        game = self.game
        self.reply(UpdateMessage(game.positions[game.player], list(game.guards), status))

    def close(self):
        self.sock.close()


@pytest.fixture
def session(game):
    server = Server(game, open_listener("127.0.0.1", 0))
    result = {}

    def serve():
        try:
            server.accept_all()
            result["status"] = server.run()
        except SessionError as exc:
            result["error"] = exc

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()

    clients = []
    for _ in range(game.config.players):
        clients.append(FakeClient(server.port))
    for client in clients:
        client.join()

    yield server, thread, clients, result

    for client in clients:
        client.close()
    server.close()


def finish(thread):
    thread.join(timeout=5)
    assert not thread.is_alive()


class TestTurnLoop:
    """Tests for a session that runs to completion."""

    def test_snapshots_carry_player_index(self, session):
        _, _, clients, _ = session
        assert [c.game.player for c in clients] == [0, 1, 2]
        assert all(c.game.defender == 1 for c in clients)

    def test_players_take_turns_in_order(self, session):
        _, thread, clients, result = session
        for current in [0, 1, 2, 0, 1, 2]:
            msgs = [c.recv() for c in clients]
            assert [m.turn for m in msgs] == [i == current for i in range(3)]
            assert [m.defender for m in msgs] == [False, True, False]
            clients[current].stay()

        msgs = [c.recv() for c in clients]
        assert msgs[0].turn
        clients[0].stay(Status.QUIT)

        assert all(c.recv().status is Status.QUIT for c in clients)
        finish(thread)
        assert result["status"] is Status.QUIT

    def test_defender_moves_guards(self, session):
        server, thread, clients, result = session
        for c in clients:
            c.recv()
        clients[0].stay()

        for c in clients:
            c.recv()
        guards = list(clients[1].game.guards)
        guards[1] = ((2, 7), guards[1][1])
        clients[1].reply(UpdateMessage(None, guards, Status.RUNNING))

        assert all(c.recv().guards == guards for c in clients)
        clients[2].stay(Status.QUIT)
        for c in clients:
            c.recv()
        finish(thread)

    def test_attacker_victory(self, session):
        server, thread, clients, result = session
        for c in clients:
            c.recv()
        clients[0].reply(UpdateMessage(None, list(clients[0].game.guards), Status.RUNNING, escaped=True))
        for c in clients:
            c.recv()
        clients[1].stay()
        for c in clients:
            c.recv()
        clients[2].reply(UpdateMessage(None, list(clients[2].game.guards), Status.RUNNING, escaped=True))

        statuses = [c.recv().status for c in clients]
        assert statuses == [Status.ATTACKER_VICTORY, Status.QUIT, Status.ATTACKER_VICTORY]
        finish(thread)
        assert result["status"] is Status.ATTACKER_VICTORY

    def test_guards_out_of_reach_survive(self, session):
        server, thread, clients, result = session
        for c in clients:
            c.recv()
        game = clients[0].game
        clients[0].reply(UpdateMessage(game.positions[0], [None, None], Status.RUNNING))

        msgs = [c.recv() for c in clients]
        assert all(m.status is Status.RUNNING for m in msgs)
        assert msgs[1].turn
        assert None not in msgs[1].guards
        clients[1].stay(Status.QUIT)
        for c in clients:
            c.recv()
        finish(thread)
        assert result["status"] is Status.QUIT

    def test_defender_victory(self, session):
        server, thread, clients, result = session
        for c in clients:
            c.recv()
        clients[0].reply(UpdateMessage(None, list(clients[0].game.guards), Status.RUNNING))
        for c in clients:
            c.recv()
        clients[1].stay()
        for c in clients:
            c.recv()
        clients[2].reply(UpdateMessage(None, list(clients[2].game.guards), Status.RUNNING))

        statuses = [c.recv().status for c in clients]
        assert statuses == [Status.QUIT, Status.DEFENDER_VICTORY, Status.QUIT]
        finish(thread)
        assert result["status"] is Status.DEFENDER_VICTORY


class FlakyListener:
    """Hands out socket pairs, then fails."""

    def __init__(self, count):
        self.count = count
        self.peers = []

    def accept(self):
        if len(self.peers) == self.count:
            raise OSError("accept failed")
        conn, peer = socket.socketpair()
        peer.settimeout(5)
        self.peers.append(peer)
        return conn, ("127.0.0.1", 40000 + len(self.peers))

    def close(self):
        for peer in self.peers:
            peer.close()


def start_server(game, listener, turn_timeout):
    server = Server(game, listener)
    server.turn_timeout = turn_timeout
    result = {}

    def serve():
        try:
            server.accept_all()
            server.run()
        except (SessionError, OSError) as exc:
            result["error"] = exc

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    return server, thread, result


class TestFailures:
    """Tests for sessions cut short by a player."""

    def test_disconnect_ends_session(self, session):
        server, thread, clients, result = session
        for c in clients:
            c.recv()
        clients[0].close()

        assert clients[1].recv().status is Status.QUIT
        assert clients[2].recv().status is Status.QUIT
        finish(thread)
        assert isinstance(result["error"], SessionError)
        assert server.game.status is Status.QUIT

    def test_silent_player_times_out(self, game):
        server, thread, result = start_server(game, open_listener("127.0.0.1", 0), 0.2)
        clients = [FakeClient(server.port) for _ in range(3)]
        try:
            for c in clients:
                c.join()
            for c in clients:
                c.recv()

            assert clients[1].recv().status is Status.QUIT
            assert clients[2].recv().status is Status.QUIT
            finish(thread)
            assert "did not answer" in str(result["error"])
            # The silent player's connection is dropped
            with pytest.raises(ConnectionError):
                recv_msg(clients[0].sock)
        finally:
            for c in clients:
                c.close()
            server.close()

    def test_defender_never_places_guards(self, game):
        server, thread, result = start_server(game, open_listener("127.0.0.1", 0), 0.2)
        clients = [FakeClient(server.port) for _ in range(3)]
        try:
            for c in clients:
                c.join(place=False)

            assert clients[0].recv().status is Status.QUIT
            assert clients[2].recv().status is Status.QUIT
            finish(thread)
            assert "player 1 did not answer" in str(result["error"])
            with pytest.raises(ConnectionError):
                recv_msg(clients[1].sock)
        finally:
            for c in clients:
                c.close()
            server.close()

    def test_failed_accept_closes_joined_players(self, game):
        listener = FlakyListener(2)
        server, thread, result = start_server(game, listener, 0.2)
        try:
            finish(thread)
            assert isinstance(result["error"], OSError)
            assert server.clients == []
            # Both players got their snapshot, then the connection closed
            for peer in listener.peers:
                assert decode_game(recv_msg(peer)).defender == 1
                with pytest.raises(ConnectionError):
                    recv_msg(peer)
        finally:
            listener.close()
