"""
Tests for the client session, with the server side played over a socket pair.
"""

import socket

import pytest

from ..game.map import Direction
from ..game.state import Status
from ..net.client import LOSE_BANNER, WIN_BANNER, Client
from ..net.net import recv_msg, send_msg
from ..net.protocol import decode_update, encode_game, encode_turn
from ..ui import Key, UserInterface
from ..ui.headless import ScriptedBackend


@pytest.fixture
def pair():
    server, client = socket.socketpair()
    server.settimeout(5)
    yield server, client
    server.close()
    client.close()


def test_attacker_plays_turn(pair, game, capsys):
    server, sock = pair
    send_msg(server, encode_game(game.for_player(0)))
    send_msg(server, encode_turn(game.turn(0, 0)))
    game.status = Status.ATTACKER_VICTORY
    send_msg(server, encode_turn(game.turn(0, 1)))

    backend = ScriptedBackend([Key.DOWN, ".", "."])
    client = Client(sock, UserInterface(backend))
    assert client.game.player == 0
    assert client.run() is Status.ATTACKER_VICTORY

    update = decode_update(recv_msg(server))
    assert update.new == ((1, 2), Direction.UP)
    assert update.status is Status.RUNNING
    assert backend.closed
    assert WIN_BANNER in capsys.readouterr().out


def test_defender_places_guards(pair, game, capsys):
    server, sock = pair
    send_msg(server, encode_game(game.for_player(1)))
    game.status = Status.QUIT
    send_msg(server, encode_turn(game.turn(1, 0)))

    client = Client(sock, UserInterface(ScriptedBackend([" ", " "])))
    placement = decode_update(recv_msg(server))
    assert placement.new is None
    assert placement.guards == game.guards

    assert client.run() is Status.QUIT
    assert LOSE_BANNER in capsys.readouterr().out


def test_waiting_player_turn_is_skipped(pair, game):
    server, sock = pair
    send_msg(server, encode_game(game.for_player(2)))
    send_msg(server, encode_turn(game.turn(2, 0)))
    game.status = Status.DEFENDER_VICTORY
    send_msg(server, encode_turn(game.turn(2, 1)))

    backend = ScriptedBackend([Key.UP])
    client = Client(sock, UserInterface(backend))
    # The losing side only hears that the game is over
    assert client.run() is Status.QUIT
    assert list(backend.keys) == [Key.UP]


def test_quit_while_waiting(pair, game):
    server, sock = pair
    send_msg(server, encode_game(game.for_player(0)))

    backend = ScriptedBackend(["q"])
    client = Client(sock, UserInterface(backend))
    assert client.run() is Status.QUIT
    assert backend.closed
