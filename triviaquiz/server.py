"""The quiz server: accepts players and runs each session in its own thread."""

from __future__ import annotations

import argparse
import contextlib
import signal
import socket
import sys
import threading
from typing import Iterator, TextIO

from triviaquiz.game import Game, handle_player
from triviaquiz.protocol import BACKLOG, SERVER_PORT
from triviaquiz.quiz import QuizError, load_quiz

DEFAULT_DATA_DIR = "dati"
_CLEAR_SCREEN = "\033[H\033[2J"


class _Shutdown(Exception):
    """A termination signal was received."""


@contextlib.contextmanager
def _signals_shut_down() -> Iterator[None]:
    names = {signal.SIGINT: "SIGINT"}
    if hasattr(signal, "SIGHUP"):
        names[signal.SIGHUP] = "SIGHUP"

    def handler(signum, _frame):
        raise _Shutdown(names[signum])

    previous = {signum: signal.signal(signum, handler) for signum in names}
    try:
        yield
    finally:
        for signum, old in previous.items():
            if old is not None:
                signal.signal(signum, old)


def create_server_socket(host: str, port: int, backlog: int) -> socket.socket:
    """Return a TCP socket bound to ``host``:``port`` and listening."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host, port))
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    return sock


def serve(game: Game, server_socket: socket.socket, output: TextIO) -> None:
    """Accept players forever, handling each one in a thread of its own.

    An error from ``accept`` is propagated to the caller.
    """
    while True:
        connection, _address = server_socket.accept()
        threading.Thread(
            target=handle_player,
            args=(game, connection, output),
            daemon=True,
        ).start()


def main(argv: list[str] | None = None) -> int:
    """Load the quiz, then serve players until interrupted."""
    parser = argparse.ArgumentParser(
        prog="triviaquiz-server", description="Run the trivia quiz server."
    )
    parser.add_argument(
        "--data-dir",
        default=DEFAULT_DATA_DIR,
        help="directory holding indice.txt and the theme files",
    )
    parser.add_argument(
        "--port", type=int, default=SERVER_PORT, help="port to listen on"
    )
    args = parser.parse_args(argv)

    try:
        quiz = load_quiz(args.data_dir)
    except QuizError as exc:
        print(f"Errore nel caricamento dei quiz: {exc}", file=sys.stderr)
        return 1

    game = Game(quiz)
    output = sys.stdout
    output.write(_CLEAR_SCREEN + game.render_status())
    output.flush()

    server_socket: socket.socket | None = None
    with _signals_shut_down():
        try:
            server_socket = create_server_socket("", args.port, BACKLOG)
            serve(game, server_socket, output)
        except _Shutdown as exc:
            print(f"Ricevuto segnale: {exc}")
            return 0
        except OSError as exc:
            print(f"Errore del server: {exc}", file=sys.stderr)
            return 1
        finally:
            if server_socket is not None:
                server_socket.close()
    return 0