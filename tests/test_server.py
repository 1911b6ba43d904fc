import io
import socket
import threading

import pytest

from triviaquiz.game import CORRECT_ANSWER, NICKNAME_PROMPT, REGISTRATION_OK, Game
from triviaquiz.protocol import (
    ConnectionClosed,
    receive_count,
    receive_message,
    send_message,
)
from triviaquiz.quiz import Question, Quiz, Theme
from triviaquiz.server import create_server_socket, main, serve


def _quiz():
    questions = tuple(Question(f"Domanda {i}?", (f"r{i}",)) for i in range(5))
    return Quiz((Theme("Storia", questions),))


@pytest.fixture
def running_server():
    game = Game(_quiz())
    output = io.StringIO()
    server_socket = create_server_socket("127.0.0.1", 0, 5)
    thread = threading.Thread(
        target=serve, args=(game, server_socket, output), daemon=True
    )
    thread.start()
    yield game, server_socket.getsockname()[1], output
    server_socket.close()


def _connect(port):
    return socket.create_connection(("127.0.0.1", port), timeout=5)


def _register(sock, name):
    assert receive_message(sock) == NICKNAME_PROMPT
    send_message(sock, name)


def test_create_server_socket_listens():
    server_socket = create_server_socket("127.0.0.1", 0, 5)
    with server_socket:
        host, port = server_socket.getsockname()
        assert host == "127.0.0.1"
        assert port > 0
        with socket.create_connection((host, port), timeout=5) as client:
            connection, _ = server_socket.accept()
            with connection:
                client.sendall(b"ping")
                assert connection.recv(4) == b"ping"


def test_create_server_socket_on_taken_port_raises():
    occupied = create_server_socket("", 0, 1)
    with occupied:
        port = occupied.getsockname()[1]
        with pytest.raises(OSError):
            create_server_socket("", port, 1)


def test_serve_runs_a_full_session(running_server):
    game, port, output = running_server
    with _connect(port) as sock:
        _register(sock, "alice")
        assert receive_message(sock) == REGISTRATION_OK
        assert receive_count(sock) == 1
        assert receive_message(sock) == "Storia"
        send_message(sock, "0")
        results = []
        for i in range(5):
            assert receive_message(sock) == f"Domanda {i}?"
            send_message(sock, f"r{i}" if i % 2 == 0 else "sbagliata")
            results.append(receive_message(sock))
        assert results.count(CORRECT_ANSWER) == 3
        send_message(sock, "show score")
        assert "- alice 3" in receive_message(sock)
        send_message(sock, "endquiz")
        with pytest.raises(ConnectionClosed):
            receive_message(sock)
    assert "Il client alice ha digitato il comando endquiz." in output.getvalue()
    assert game.users.active_users() == []


def test_serve_handles_clients_concurrently(running_server):
    game, port, _output = running_server
    with _connect(port) as first, _connect(port) as second:
        _register(first, "alice")
        assert receive_message(first) == REGISTRATION_OK
        _register(second, "alice")
        _register(second, "bob")
        assert receive_message(second) == REGISTRATION_OK
        assert receive_count(second) == 1
        assert "alice" in game.users
        assert "bob" in game.users
        assert sorted(u.username for u in game.users.active_users()) == [
            "alice",
            "bob",
        ]


def test_serve_propagates_accept_errors():
    server_socket = create_server_socket("127.0.0.1", 0, 1)
    server_socket.close()
    with pytest.raises(OSError):
        serve(Game(_quiz()), server_socket, io.StringIO())


def _write_data(directory):
    (directory / "indice.txt").write_text("1\nGeografia\n", encoding="utf-8")
    (directory / "1.txt").write_text(
        "".join(f"Domanda {i}?|a~b\n" for i in range(5)), encoding="utf-8"
    )


def test_main_fails_without_data(tmp_path, capsys):
    assert main(["--data-dir", str(tmp_path / "missing")]) == 1
    assert "indice.txt" in capsys.readouterr().err


def test_main_fails_when_port_is_taken(tmp_path, capsys):
    _write_data(tmp_path)
    occupied = create_server_socket("", 0, 1)
    with occupied:
        port = occupied.getsockname()[1]
        assert main(["--data-dir", str(tmp_path), "--port", str(port)]) == 1
    captured = capsys.readouterr()
    assert "Trivia Quiz" in captured.out
    assert "1 - Geografia" in captured.out
    assert "Errore del server" in captured.err