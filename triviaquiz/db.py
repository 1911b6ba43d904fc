"""Registered users and per-theme scoreboards."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


class UsernameTaken(ValueError):
    """A user with that name is already registered."""


@dataclass
class User:
    """A registered player and the themes they have played and completed."""

    username: str
    completed: list[bool] = field(default_factory=list)
    played: list[bool] = field(default_factory=list)
    ended: bool = False

    def has_unplayed_theme(self) -> bool:
        return not all(self.played)


class UserRegistry:
    """Registered users, newest first; names stay reserved after a session ends."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._users: list[User] = []

    def register(self, username: str, theme_count: int) -> User:
        """Register a new user or raise UsernameTaken."""
        with self.lock:
            if username in self:
                raise UsernameTaken(username)
            user = User(username, [False] * theme_count, [False] * theme_count)
            self._users.insert(0, user)
            return user

    def __contains__(self, username: object) -> bool:
        with self.lock:
            return any(user.username == username for user in self._users)

    @property
    def count(self) -> int:
        """Number of users whose session is still open."""
        return len(self.active_users())

    def active_users(self) -> list[User]:
        with self.lock:
            return [user for user in self._users if not user.ended]

    def users_who_completed(self, theme_index: int) -> list[str]:
        with self.lock:
            return [
                user.username
                for user in self._users
                if theme_index < len(user.completed) and user.completed[theme_index]
            ]


@dataclass
class _Entry:
    name: str
    points: int = 0


class Scoreboard:
    """Scores for one theme, kept in descending order of points."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._entries: list[_Entry] = []

    def add(self, username: str) -> None:
        """Append a player with zero points."""
        with self.lock:
            self._entries.append(_Entry(username))

    def increment(self, username: str) -> None:
        """Add a point to a player and move them up; unknown names are ignored."""
        with self.lock:
            position = next(
                (i for i, e in enumerate(self._entries) if e.name == username), None
            )
            if position is None:
                return
            entry = self._entries[position]
            entry.points += 1
            if position == 0:
                return
            del self._entries[position]
            target = next(
                (i for i, e in enumerate(self._entries) if e.points < entry.points),
                len(self._entries),
            )
            self._entries.insert(target, entry)

    def remove(self, username: str) -> None:
        """Drop a player; raise KeyError if absent."""
        with self.lock:
            for position, entry in enumerate(self._entries):
                if entry.name == username:
                    del self._entries[position]
                    return
            raise KeyError(username)

    def entries(self) -> list[tuple[str, int]]:
        with self.lock:
            return [(e.name, e.points) for e in self._entries]