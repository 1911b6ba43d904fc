"""The interactive quiz client."""

from __future__ import annotations

import contextlib
import re
import signal
import socket
import sys
from dataclasses import dataclass
from typing import Iterator, TextIO

from triviaquiz.game import Command, parse_command
from triviaquiz.protocol import (
    MAX_INPUT_LENGTH,
    NUM_QUESTIONS,
    SERVER_ADDR,
    ConnectionClosed,
    receive_count,
    receive_message,
    send_message,
)

REGISTRATION_OK = "OK"
USAGE = (
    "Il numero di argomenti inseriti non è valido. Utilizzare ./client <porta>"
)
FINAL_PROMPT = (
    "Hai terminato tutti i quiz disponibili. Puoi continuare a visualizzare i "
    "punteggi con il comando 'show score' oppure puoi terminare la sessione con "
    "il comando 'endquiz'\n\nLa tua scelta: "
)

_CLEAR_SCREEN = "\033[H\033[2J"
_MENU_SEPARATOR = "+" * 25
_SEPARATOR = "+" * 35


@dataclass
class ClientTheme:
    """A theme offered by the server and whether it has been played."""

    name: str
    played: bool = False


class _EndQuiz(Exception):
    """The player typed endquiz."""


class _Interrupted(Exception):
    """A termination signal was received."""


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _write(output: TextIO, text: str) -> None:
    output.write(text)
    output.flush()


def read_input(stream: TextIO, limit: int) -> str:
    """Read one non-empty line of at most ``limit - 1`` characters.

    Empty lines are skipped; a longer line is truncated and the rest of it
    discarded. Raises EOFError when the stream is exhausted.
    """
    while True:
        line = stream.readline(limit - 1)
        if not line:
            raise EOFError("no more input")
        if line == "\n":
            continue
        if line.endswith("\n"):
            return line[:-1]
        stream.readline()
        return line


def _handle_command(sock: socket.socket, text: str, output: TextIO) -> bool:
    """Serve a typed command; return True for 'show score', raise on 'endquiz'."""
    command = parse_command(text)
    if command is Command.SHOW_SCORE:
        send_message(sock, text)
        _write(output, receive_message(sock) + "\n")
        return True
    if command is Command.END_QUIZ:
        send_message(sock, text)
        raise _EndQuiz
    return False


def _register(sock: socket.socket, input_stream: TextIO, output: TextIO) -> None:
    while True:
        message = receive_message(sock)
        if message == REGISTRATION_OK:
            return
        _write(output, message)
        send_message(sock, read_input(input_stream, MAX_INPUT_LENGTH))


def _choose_theme(
    sock: socket.socket,
    themes: list[ClientTheme],
    input_stream: TextIO,
    output: TextIO,
) -> ClientTheme:
    listing = [_CLEAR_SCREEN + "Quiz disponibili", _SEPARATOR]
    listing.extend(
        f"{number} - {theme.name}"
        for number, theme in enumerate(themes, start=1)
        if not theme.played
    )
    _write(output, "\n".join(listing) + "\n" + _SEPARATOR)

    while True:
        _write(output, "\nLa tua scelta: ")
        text = read_input(input_stream, MAX_INPUT_LENGTH)
        if _handle_command(sock, text, output):
            continue
        choice = _atoi(text)
        if 1 <= choice <= len(themes) and not themes[choice - 1].played:
            send_message(sock, str(choice - 1))
            return themes[choice - 1]
        _write(output, "\nNumero tema non valido\n")


def _answer_questions(
    sock: socket.socket, input_stream: TextIO, output: TextIO
) -> None:
    for _ in range(NUM_QUESTIONS):
        _write(output, _SEPARATOR + "\n")
        question = receive_message(sock)
        while True:
            _write(output, f"{question}\n\nRisposta: ")
            answer = read_input(input_stream, MAX_INPUT_LENGTH)
            if not _handle_command(sock, answer, output):
                break
        send_message(sock, answer)
        _write(output, receive_message(sock) + "\n")


def run_session(sock: socket.socket, input_stream: TextIO, output: TextIO) -> None:
    """Play one session on a connected socket until the player types endquiz.

    Raises ConnectionClosed if the server goes away.
    """
    try:
        _register(sock, input_stream, output)
        themes = [
            ClientTheme(receive_message(sock)) for _ in range(receive_count(sock))
        ]
        while True:
            theme = _choose_theme(sock, themes, input_stream, output)
            theme.played = True
            _write(output, f"\nQuiz - {theme.name}\n")
            _answer_questions(sock, input_stream, output)
            if all(t.played for t in themes):
                break
        while True:
            _write(output, FINAL_PROMPT)
            text = read_input(input_stream, MAX_INPUT_LENGTH)
            if not _handle_command(sock, text, output):
                _write(output, "Comando non valido\n")
    except _EndQuiz:
        return


def _menu(input_stream: TextIO, output: TextIO) -> int:
    while True:
        _write(
            output,
            "\n".join(
                [
                    _CLEAR_SCREEN + "Trivia Quiz",
                    _MENU_SEPARATOR,
                    "Menù:",
                    "1 - Comincia una sessione di Trivia",
                    "2 - Esci",
                    _MENU_SEPARATOR,
                    "La tua scelta: ",
                ]
            ),
        )
        choice = _atoi(read_input(input_stream, MAX_INPUT_LENGTH))
        if choice in (1, 2):
            return choice
        _write(output, "\nScegli una tra le opzioni disponibili\n\n")


@contextlib.contextmanager
def _signals_interrupt() -> Iterator[None]:
    names = {signal.SIGINT: "SIGINT"}
    if hasattr(signal, "SIGHUP"):
        names[signal.SIGHUP] = "SIGHUP"

    def handler(signum, _frame):
        raise _Interrupted(names[signum])

    previous = {signum: signal.signal(signum, handler) for signum in names}
    try:
        yield
    finally:
        for signum, old in previous.items():
            if old is not None:
                signal.signal(signum, old)


def main(argv: list[str] | None = None) -> int:
    """Show the menu and play sessions against the server on the given port."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print(USAGE)
        return 1
    port = _atoi(args[0])
    input_stream, output = sys.stdin, sys.stdout

    with _signals_interrupt():
        try:
            while True:
                if _menu(input_stream, output) == 2:
                    return 0
                try:
                    sock = socket.create_connection((SERVER_ADDR, port))
                except OSError as exc:
                    print(f"Errore nella connessione al server: {exc}")
                    return 1
                with sock:
                    try:
                        run_session(sock, input_stream, output)
                    except ConnectionClosed:
                        print("Il server si è disconnesso.")
                        return 1
        except _Interrupted as exc:
            print(f"Ricevuto segnale: {exc}")
            return 0
        except EOFError:
            return 0