"""Multi-player trivia quiz: TCP server, terminal client, quiz loading and game state."""

__version__ = "1.0.0"