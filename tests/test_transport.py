import io
import socket

import pytest

from kalah_agent.kgp.transport import SocketTransport, StreamTransport, TransportError


def test_stream_transport_reads_lines() -> None:
    transport = StreamTransport(io.StringIO("kgp 1 0 0\r\n2 ping\n"), io.StringIO())
    assert transport.read_line() == "kgp 1 0 0"
    assert transport.read_line() == "2 ping"
    assert transport.read_line() is None


def test_stream_transport_writes_crlf() -> None:
    out = io.StringIO()
    transport = StreamTransport(io.StringIO(), out)
    transport.write_line("1 mode freeplay")
    assert out.getvalue() == "1 mode freeplay\r\n"


def test_closed_stream_raises_transport_error() -> None:
    reader = io.StringIO("x\n")
    reader.close()
    transport = StreamTransport(reader, io.StringIO())
    with pytest.raises(TransportError):
        transport.read_line()


def test_socket_transport_round_trip() -> None:
    ours, theirs = socket.socketpair()
    transport = SocketTransport(ours)
    try:
        theirs.sendall(b"kgp 1 0 0\r\n")
        assert transport.read_line() == "kgp 1 0 0"
        transport.write_line("1 mode freeplay")
        assert theirs.recv(1024) == b"1 mode freeplay\r\n"
        theirs.close()
        assert transport.read_line() is None
    finally:
        transport.close()


def test_socket_transport_replaces_undecodable_bytes() -> None:
    ours, theirs = socket.socketpair()
    transport = SocketTransport(ours)
    try:
        theirs.sendall(b"4 ping \xff\xfe\r\n5 ping ok\r\n")
        line = transport.read_line()
        assert line.startswith("4 ping ")
        assert "\ufffd" in line
        assert transport.read_line() == "5 ping ok"
    finally:
        theirs.close()
        transport.close()


def test_connect_failure_is_transport_error(monkeypatch) -> None:
    def refuse(address, timeout=None):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(socket, "create_connection", refuse)
    with pytest.raises(TransportError):
        SocketTransport.connect("localhost", 2671, timeout=0.1)
