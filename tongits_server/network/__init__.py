"""Network communication."""

from .hub import SessionHub
from .protocol import ProtocolError, ServerMessage, decode_client_message, encode_message
from .server import GameServer

__all__ = [
    "GameServer",
    "ProtocolError",
    "ServerMessage",
    "SessionHub",
    "decode_client_message",
    "encode_message",
]
