from __future__ import annotations

import json
import select
import socket
import struct
from typing import Any, Dict, Optional, Tuple

from .protocol import ProtocolError

DEFAULT_PORT = 7878

# Simple length-prefixed JSON messages over TCP
MAX_MESSAGE = 16 * 1024 * 1024


def send_msg(sock: socket.socket, payload: Dict[str, Any]) -> None:
    data = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    header = struct.pack("!I", len(data))
    sock.sendall(header + data)


def recv_exact(sock: socket.socket, num_bytes: int) -> bytes:
    chunks = []
    remaining = num_bytes
    while remaining > 0:
        chunk = sock.recv(remaining)
        if not chunk:
            raise ConnectionError("socket closed")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def recv_msg(sock: socket.socket) -> Dict[str, Any]:
    header = recv_exact(sock, 4)
    (length,) = struct.unpack("!I", header)
    if length > MAX_MESSAGE:
        raise ProtocolError(f"message of {length} bytes is too large")
    body = recv_exact(sock, length)
    try:
        msg = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProtocolError(f"malformed message: {exc}") from exc
    if not isinstance(msg, dict):
        raise ProtocolError("message is not a JSON object")
    return msg


def wait_readable(sock: socket.socket, timeout: float) -> bool:
    """Wait up to timeout seconds for data (or EOF) on the socket."""
    readable, _, _ = select.select([sock], [], [], timeout)
    return bool(readable)


def parse_address(address: str, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep:
        return address or "localhost", default_port
    try:
        return host or "0.0.0.0", int(port)
    except ValueError:
        raise ValueError(f"bad port in address {address!r}") from None


def open_listener(bind: str, port: int, backlog: int = 8) -> socket.socket:
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    srv.bind((bind, port))
    srv.listen(backlog)
    return srv


def open_client(host: str, port: int, timeout: Optional[float] = None) -> socket.socket:
    sock = socket.create_connection((host, port), timeout=timeout)
    sock.settimeout(None)
    return sock
