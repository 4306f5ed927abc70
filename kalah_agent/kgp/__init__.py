"""Kalah Game Protocol: wire messages, transports and the playing session."""

from .messages import MESSAGE_TYPES, Message, ParseError, format_message, parse_board, parse_line
from .session import KGPSession, ProtocolError, SessionConfig, SessionState
from .transport import SocketTransport, StreamTransport, Transport, TransportError

__all__ = [
    "MESSAGE_TYPES",
    "Message",
    "ParseError",
    "format_message",
    "parse_board",
    "parse_line",
    "KGPSession",
    "ProtocolError",
    "SessionConfig",
    "SessionState",
    "SocketTransport",
    "StreamTransport",
    "Transport",
    "TransportError",
]
