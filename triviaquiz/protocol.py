"""Length-prefixed message framing and the game's shared parameters."""

from __future__ import annotations

import socket
import struct

NUM_QUESTIONS = 5
MAX_LENGTH = 1000
MAX_INPUT_LENGTH = 40
SERVER_PORT = 6000
BACKLOG = 100
SERVER_ADDR = "127.0.0.1"

_HEADER = struct.Struct("!I")
_SEND_FLAGS = getattr(socket, "MSG_NOSIGNAL", 0)


class ConnectionClosed(ConnectionError):
    """The peer closed or reset the connection."""


def _send(sock: socket.socket, data: bytes) -> None:
    try:
        sock.sendall(data, _SEND_FLAGS)
    except (BrokenPipeError, ConnectionResetError) as exc:
        raise ConnectionClosed("peer disconnected") from exc


def _receive_exact(sock: socket.socket, size: int) -> bytes:
    received = bytearray()
    while len(received) < size:
        try:
            chunk = sock.recv(size - len(received))
        except ConnectionResetError as exc:
            raise ConnectionClosed("peer disconnected") from exc
        if not chunk:
            raise ConnectionClosed("peer disconnected")
        received += chunk
    return bytes(received)


def send_count(sock: socket.socket, count: int) -> None:
    """Send a bare 32-bit unsigned integer in network byte order."""
    _send(sock, _HEADER.pack(count))


def receive_count(sock: socket.socket) -> int:
    """Receive a bare 32-bit unsigned integer in network byte order."""
    (count,) = _HEADER.unpack(_receive_exact(sock, _HEADER.size))
    return count


def send_message(sock: socket.socket, text: str) -> None:
    """Send ``text`` preceded by its encoded length."""
    data = text.encode("utf-8")
    _send(sock, _HEADER.pack(len(data)) + data)


def receive_message(sock: socket.socket) -> str:
    """Receive one length-prefixed message and return it as text."""
    size = receive_count(sock)
    return _receive_exact(sock, size).decode("utf-8", errors="replace")