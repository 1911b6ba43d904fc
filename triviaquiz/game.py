"""Game state shared by all connected players and the per-player session."""

from __future__ import annotations

import contextlib
import enum
import re
from typing import TextIO

from triviaquiz.db import Scoreboard, User, UserRegistry
from triviaquiz.protocol import (
    ConnectionClosed,
    receive_message,
    send_count,
    send_message,
)
from triviaquiz.quiz import Quiz

NICKNAME_PROMPT = "Scegli un nickname (deve essere univoco): "
REGISTRATION_OK = "OK"
CORRECT_ANSWER = "Risposta Corretta"
WRONG_ANSWER = "Risposta errata"

_SEPARATOR = "+" * 35
_CLEAR_SCREEN = "\033[H\033[2J"


class Command(enum.Enum):
    """Commands a player may type instead of an answer."""

    SHOW_SCORE = "show score"
    END_QUIZ = "endquiz"


def parse_command(text: str) -> Command | None:
    """Return the command ``text`` names, or None if it is not a command."""
    try:
        return Command(text)
    except ValueError:
        return None


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


class Game:
    """Quiz content, registered players and one scoreboard per theme."""

    def __init__(self, quiz: Quiz) -> None:
        self.quiz = quiz
        self.users = UserRegistry()
        self.scoreboards = [Scoreboard() for _ in quiz.themes]
        self._anyone_registered = False

    def register(self, username: str) -> User:
        """Register a player; raise UsernameTaken if the name is in use."""
        user = self.users.register(username, self.quiz.theme_count)
        self._anyone_registered = True
        return user

    def remove_user(self, user: User) -> None:
        """End a player's session and drop them from completions and scoreboards."""
        with self.users.lock:
            user.completed = [False] * len(user.completed)
            user.ended = True
        for played, board in zip(user.played, self.scoreboards):
            if played:
                with contextlib.suppress(KeyError):
                    board.remove(user.username)

    def start_theme(self, user: User, theme_index: int) -> None:
        """Mark a theme as played and put the player on its scoreboard."""
        user.played[theme_index] = True
        self.scoreboards[theme_index].add(user.username)

    def answer(
        self, user: User, theme_index: int, question_index: int, answer: str
    ) -> bool:
        """Check an answer and award a point if it is correct."""
        question = self.quiz.themes[theme_index].questions[question_index]
        correct = question.is_correct(answer)
        if correct:
            self.scoreboards[theme_index].increment(user.username)
        return correct

    def complete_theme(self, user: User, theme_index: int) -> None:
        """Record that the player answered every question of a theme."""
        with self.users.lock:
            user.completed[theme_index] = True

    def format_scores(self) -> str:
        """Scoreboards of every theme, as sent to a player asking for them."""
        parts = []
        for number, board in enumerate(self.scoreboards, start=1):
            parts.append(f"Punteggio tema {number}\n")
            entries = board.entries()
            if not entries:
                parts.append("---\n\n")
            else:
                parts.extend(f"- {name} {points}\n" for name, points in entries)
                parts.append("\n")
        return "".join(parts)

    def render_status(self) -> str:
        """The server's status screen: themes, players, scores and completions."""
        lines = ["Trivia Quiz", _SEPARATOR, "Temi:"]
        lines.extend(
            f"{number} - {theme.name}"
            for number, theme in enumerate(self.quiz.themes, start=1)
        )
        lines.extend([_SEPARATOR, ""])

        with self.users.lock:
            active = self.users.active_users()
            lines.append(f"Partecipanti ({len(active)}):")
            if not self._anyone_registered:
                lines.append("---")
            else:
                lines.extend(f"- {user.username}" for user in active)

        for number, board in enumerate(self.scoreboards, start=1):
            lines.extend(["", f"Punteggio Tema {number}:"])
            entries = board.entries()
            if entries:
                lines.extend(f"- {name} {points}" for name, points in entries)
            else:
                lines.append("---")

        for index in range(self.quiz.theme_count):
            lines.extend(["", f"Quiz Tema {index + 1} completato:"])
            names = self.users.users_who_completed(index)
            if names:
                lines.extend(f"- {name}" for name in names)
            else:
                lines.append("---")

        return "\n".join(lines) + "\n"


class _EndQuiz(Exception):
    """The player typed the endquiz command."""


class _BadThemeChoice(Exception):
    """The player named a theme that does not exist."""


def _show_status(game: Game, output: TextIO) -> None:
    output.write(_CLEAR_SCREEN + game.render_status())
    output.flush()


def _say(output: TextIO, text: str) -> None:
    output.write(text + "\n")
    output.flush()


def _receive_reply(game: Game, sock) -> str:
    """Receive the next non-command message, serving 'show score' meanwhile."""
    while True:
        text = receive_message(sock)
        command = parse_command(text)
        if command is Command.SHOW_SCORE:
            send_message(sock, game.format_scores())
        elif command is Command.END_QUIZ:
            raise _EndQuiz
        else:
            return text


def _register(game: Game, sock) -> User:
    while True:
        send_message(sock, NICKNAME_PROMPT)
        username = receive_message(sock)
        try:
            user = game.register(username)
        except ValueError:
            continue
        send_message(sock, REGISTRATION_OK)
        return user


def _play(game: Game, sock, user: User, output: TextIO) -> None:
    while True:
        theme_index = _atoi(_receive_reply(game, sock))
        if not 0 <= theme_index < game.quiz.theme_count:
            raise _BadThemeChoice(theme_index)

        game.start_theme(user, theme_index)
        _show_status(game, output)

        theme = game.quiz.themes[theme_index]
        for question_index, question in enumerate(theme.questions):
            send_message(sock, question.text)
            reply = _receive_reply(game, sock)
            if game.answer(user, theme_index, question_index, reply):
                send_message(sock, CORRECT_ANSWER)
                _show_status(game, output)
            else:
                send_message(sock, WRONG_ANSWER)

        game.complete_theme(user, theme_index)
        _show_status(game, output)
        if not user.has_unplayed_theme():
            break

    while parse_command(receive_message(sock)) is Command.SHOW_SCORE:
        send_message(sock, game.format_scores())


def handle_player(game: Game, sock, output: TextIO) -> None:
    """Run one player's whole session over ``sock``, reporting on ``output``."""
    user: User | None = None
    try:
        user = _register(game, sock)
        _show_status(game, output)
        send_count(sock, game.quiz.theme_count)
        for theme in game.quiz.themes:
            send_message(sock, theme.name)
        _play(game, sock, user, output)
    except _EndQuiz:
        game.remove_user(user)
        _show_status(game, output)
        _say(output, f"Il client {user.username} ha digitato il comando endquiz")
    except (ConnectionClosed, _BadThemeChoice):
        if user is not None:
            game.remove_user(user)
        _show_status(game, output)
        if user is not None:
            _say(output, f"Il client {user.username} si è disconnesso.")
    else:
        game.remove_user(user)
        _show_status(game, output)
        _say(output, f"Il client {user.username} ha digitato il comando endquiz.")
    finally:
        sock.close()