from .client import Client, run_client
from .protocol import PROTO_VERSION, ProtocolError
from .server import Server, SessionError, run_server

__all__ = [
    "Client",
    "PROTO_VERSION",
    "ProtocolError",
    "Server",
    "SessionError",
    "run_client",
    "run_server",
]
