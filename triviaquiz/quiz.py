"""Quiz themes, questions and the loader for the quiz data files."""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass
from pathlib import Path

from triviaquiz.protocol import NUM_QUESTIONS

INDEX_FILE = "indice.txt"
QUESTION_SEPARATOR = "|"
ANSWER_SEPARATOR = "~"


class QuizError(Exception):
    """The quiz data could not be loaded."""


@dataclass(frozen=True)
class Question:
    """A question and the answers accepted for it."""

    text: str
    answers: tuple[str, ...] = ()

    def is_correct(self, answer: str) -> bool:
        """Return True if the lower-cased answer is one of the accepted ones."""
        return answer.lower() in self.answers


@dataclass(frozen=True)
class Theme:
    """A named theme holding its questions."""

    name: str
    questions: tuple[Question, ...]


@dataclass(frozen=True)
class Quiz:
    """All themes available to players."""

    themes: tuple[Theme, ...]

    @property
    def theme_count(self) -> int:
        return len(self.themes)


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _strip_newline(line: str) -> str:
    return line.split("\n", 1)[0]


def parse_question_line(line: str) -> Question:
    """Parse ``question|answer~answer~...`` into a Question."""
    parts = [part for part in _strip_newline(line).split(QUESTION_SEPARATOR) if part]
    text = parts[0] if parts else ""
    answers: tuple[str, ...] = ()
    if len(parts) > 1:
        answers = tuple(a for a in parts[1].split(ANSWER_SEPARATOR) if a)
    return Question(text, answers)


def _load_theme(path: Path, name: str) -> Theme:
    try:
        with path.open(encoding="utf-8") as stream:
            questions = tuple(
                parse_question_line(line)
                for line in itertools.islice(stream, NUM_QUESTIONS)
            )
    except OSError as exc:
        raise QuizError(f"cannot open {path}") from exc
    if len(questions) < NUM_QUESTIONS:
        raise QuizError(
            f"{path} holds {len(questions)} questions, {NUM_QUESTIONS} needed"
        )
    return Theme(name, questions)


def load_quiz(data_dir) -> Quiz:
    """Load the index file and every theme file from ``data_dir``."""
    directory = Path(data_dir)
    index_path = directory / INDEX_FILE
    try:
        with index_path.open(encoding="utf-8") as stream:
            count = max(_atoi(stream.readline()), 0)
            names = [_strip_newline(line) for line in stream]
    except OSError as exc:
        raise QuizError(f"cannot open {index_path}") from exc
    if len(names) < count:
        raise QuizError(f"{index_path} lists {len(names)} themes, {count} declared")
    themes = tuple(
        _load_theme(directory / f"{number}.txt", name)
        for number, name in enumerate(names[:count], start=1)
    )
    return Quiz(themes)