"""Line transports for KGP sessions."""

from __future__ import annotations

import logging
import socket
from typing import Optional, Protocol, TextIO

logger = logging.getLogger(__name__)


class TransportError(ConnectionError):
    pass


class Transport(Protocol):
    """Minimal line transport consumed by :class:`~kalah_agent.kgp.session.KGPSession`."""

    def read_line(self) -> Optional[str]:
        """Return the next line without its terminator, or None at end of stream."""
        ...

    def write_line(self, text: str) -> None:
        ...


class StreamTransport:
    """Transport over a pair of text streams (stdin/stdout, ``io.StringIO`` in tests)."""

    def __init__(self, reader: TextIO, writer: TextIO, *, newline: str = "\r\n") -> None:
        self.reader = reader
        self.writer = writer
        self.newline = newline

    def read_line(self) -> Optional[str]:
        try:
            line = self.reader.readline()
        except (OSError, ValueError) as exc:
            raise TransportError(f"read failed: {exc}") from exc
        if line == "":
            return None
        return line.rstrip("\r\n")

    def write_line(self, text: str) -> None:
        try:
            self.writer.write(text + self.newline)
            self.writer.flush()
        except (OSError, ValueError) as exc:
            raise TransportError(f"write failed: {exc}") from exc

    def close(self) -> None:
        pass


class SocketTransport(StreamTransport):
    """KGP over a plain TCP connection."""

    def __init__(self, sock: socket.socket) -> None:
        self.socket = sock
        # Separate streams: writing through a shared text wrapper drops read-ahead.
        reader = sock.makefile("r", encoding="utf-8", errors="replace", newline="")
        writer = sock.makefile("w", encoding="utf-8", newline="")
        super().__init__(reader, writer)

    @classmethod
    def connect(cls, host: str, port: int, *, timeout: Optional[float] = None) -> "SocketTransport":
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as exc:
            raise TransportError(f"could not connect to {host}:{port}: {exc}") from exc
        # The timeout only bounds connection setup; reads block for the server.
        sock.settimeout(None)
        logger.info("connected to %s:%d", host, port)
        return cls(sock)

    def close(self) -> None:
        try:
            self.reader.close()
            self.writer.close()
        finally:
            self.socket.close()
