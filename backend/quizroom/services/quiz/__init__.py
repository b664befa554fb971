"""Quiz domain services: question bank, players, rounds, scoring.

This package holds the room/round state machine. It never touches sockets,
timers or Flask; HTTP routes and socket handlers drive it through
``commands.dispatch`` against a GameStore.
"""

from .commands import CommandResult, dispatch
from .errors import QuizError
from .store import GameStore

__all__ = ['CommandResult', 'GameStore', 'QuizError', 'dispatch']
