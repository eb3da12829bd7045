"""Domain exceptions for the game core.

Move errors are always recoverable: the engine is left exactly as it was
before the rejected move. Persistence and data-integrity errors are raised to
the caller, which decides how to report them.
"""


class GameError(Exception):
    """Base class for every error raised by the game core."""


class MoveError(GameError):
    """A move was rejected. ``reason`` is a stable, wire-friendly code."""

    reason = 'invalid_move'
    message = 'Invalid move'

    def __init__(self, message=None):
        super().__init__(message or self.message)

    def to_dict(self):
        return {'reason': self.reason, 'message': str(self)}


class OutOfRange(MoveError):
    reason = 'out_of_range'
    message = 'Position must be 0-8'


class CellOccupied(MoveError):
    reason = 'cell_occupied'
    message = 'Cell is already taken'


class WrongTurn(MoveError):
    reason = 'wrong_turn'
    message = 'It is not this player\'s turn'


class GameOver(MoveError):
    reason = 'game_over'
    message = 'Game is over; start a new game'


class InvalidBoard(GameError, ValueError):
    """A board snapshot could not be decoded into 9 cells."""


class GameNotFinished(GameError):
    """Only finished games can be turned into a stored record."""


class AlreadySaved(GameError):
    """The finished game was already persisted once."""


class PersistenceError(GameError):
    """The record store failed. The core never retries."""


class DataIntegrityError(GameError):
    """A stored record holds a value outside its allowed domain."""
