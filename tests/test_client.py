import io
import socket
import sys
import threading

import pytest

from triviaquiz.client import ClientTheme, main, read_input, run_session
from triviaquiz.game import NICKNAME_PROMPT, Game, handle_player
from triviaquiz.protocol import MAX_INPUT_LENGTH, ConnectionClosed
from triviaquiz.quiz import Question, Quiz, Theme
from triviaquiz.server import create_server_socket, serve

ANSWERS = ["r0", "r1", "r2", "r3", "r4"]


def _quiz(theme_count=1):
    themes = tuple(
        Theme(
            f"Tema{n}",
            tuple(Question(f"Domanda {n}.{i}?", (f"r{i}",)) for i in range(5)),
        )
        for n in range(1, theme_count + 1)
    )
    return Quiz(themes)


def _play(game, lines):
    client_sock, server_sock = socket.socketpair()
    server_log = io.StringIO()
    thread = threading.Thread(
        target=handle_player, args=(game, server_sock, server_log), daemon=True
    )
    thread.start()
    output = io.StringIO()
    with client_sock:
        run_session(client_sock, io.StringIO("".join(f"{l}\n" for l in lines)), output)
    thread.join(timeout=5)
    return output.getvalue(), server_log.getvalue()


def test_read_input_skips_empty_lines():
    assert read_input(io.StringIO("\n\nciao\n"), MAX_INPUT_LENGTH) == "ciao"


def test_read_input_truncates_long_lines_and_discards_rest():
    stream = io.StringIO("abcdefghij\nnext\n")
    assert read_input(stream, 5) == "abcd"
    assert read_input(stream, 5) == "next"


def test_read_input_raises_at_end_of_input():
    with pytest.raises(EOFError):
        read_input(io.StringIO("\n"), MAX_INPUT_LENGTH)


def test_client_theme_starts_unplayed():
    theme = ClientTheme("Storia")
    assert (theme.name, theme.played) == ("Storia", False)


def test_full_session_with_scores():
    game = Game(_quiz())
    lines = ["alice", "1", "R0", "no", "r2", "r3", "no", "show score", "endquiz"]
    output, log = _play(game, lines)
    assert output.count("Risposta Corretta") == 3
    assert output.count("Risposta errata") == 2
    assert "- alice 3" in output
    assert "Hai terminato tutti i quiz disponibili" in output
    assert "Quiz - Tema1" in output
    assert "Il client alice ha digitato il comando endquiz." in log


def test_invalid_theme_numbers_are_rejected():
    game = Game(_quiz())
    output, _ = _play(game, ["alice", "7", "0", "abc", "1", *ANSWERS, "endquiz"])
    assert output.count("Numero tema non valido") == 3
    assert output.count("Risposta Corretta") == 5


def test_played_themes_are_not_offered_again():
    game = Game(_quiz(2))
    lines = ["alice", "2", *ANSWERS, "2", "1", *ANSWERS, "endquiz"]
    output, _ = _play(game, lines)
    assert output.count("2 - Tema2") == 1
    assert output.count("1 - Tema1") == 2
    assert output.count("Numero tema non valido") == 1
    assert output.count("Risposta Corretta") == 10


def test_endquiz_during_questions_ends_session():
    game = Game(_quiz())
    output, log = _play(game, ["alice", "1", "endquiz"])
    assert "Quiz - Tema1" in output
    assert "Risposta" not in output.split("Quiz - Tema1", 1)[1].replace(
        "Risposta: ", ""
    )
    assert game.users.active_users() == []
    assert "Il client alice ha digitato il comando endquiz" in log


def test_taken_nickname_is_asked_again():
    game = Game(_quiz())
    game.register("bob")
    output, _ = _play(game, ["bob", "alice", "endquiz"])
    assert output.count(NICKNAME_PROMPT) == 2
    assert "alice" in game.users


def test_unknown_command_after_all_themes():
    game = Game(_quiz())
    output, _ = _play(game, ["alice", "1", *ANSWERS, "foo", "endquiz"])
    assert output.count("Comando non valido") == 1


def test_server_disconnect_raises():
    client_sock, server_sock = socket.socketpair()
    server_sock.close()
    with client_sock, pytest.raises(ConnectionClosed):
        run_session(client_sock, io.StringIO("alice\n"), io.StringIO())


@pytest.mark.parametrize("argv", [[], ["6000", "extra"]])
def test_main_rejects_wrong_argument_count(argv, capsys):
    assert main(argv) == 1
    assert "Utilizzare ./client <porta>" in capsys.readouterr().out


def test_main_menu_retries_then_exits(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("3\n2\n"))
    assert main(["6000"]) == 0
    assert "Scegli una tra le opzioni disponibili" in capsys.readouterr().out


def test_main_reports_refused_connection(monkeypatch, capsys):
    probe = create_server_socket("127.0.0.1", 0, 1)
    port = probe.getsockname()[1]
    probe.close()
    monkeypatch.setattr(sys, "stdin", io.StringIO("1\n"))
    assert main([str(port)]) == 1
    assert "Errore nella connessione al server" in capsys.readouterr().out


def test_main_plays_against_server(monkeypatch, capsys):
    game = Game(_quiz())
    server_socket = create_server_socket("127.0.0.1", 0, 5)
    port = server_socket.getsockname()[1]
    threading.Thread(
        target=serve, args=(game, server_socket, io.StringIO()), daemon=True
    ).start()
    try:
        monkeypatch.setattr(sys, "stdin", io.StringIO("1\nalice\nendquiz\n2\n"))
        assert main([str(port)]) == 0
    finally:
        server_socket.close()
    out = capsys.readouterr().out
    assert "Quiz disponibili" in out
    assert "1 - Tema1" in out