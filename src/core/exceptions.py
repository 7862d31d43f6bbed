"""
Exceptions raised across the layers.

NOTE: An illegal move attempt is NOT an exception in the domain layer. `Game.make_move` simply returns False.
These errors are for broken input, unknown records, and collaborators that fail.
"""


class GameError(Exception):
    """Base class for everything this project raises on purpose."""


class GameStateError(GameError):
    """The requested operation does not fit the current state of the game."""


class IllegalMoveError(GameError):
    """A move from an imported / stored move list does not replay on the board."""


class InvalidFENError(GameError):
    """String cannot be interpreted as FEN."""


class InvalidRequestError(GameError):
    """Request data could not be validated. Not a ValueError: pydantic lets it through unwrapped."""


class RepositoryError(GameError):
    """Record could not be found / stored."""


class EngineError(GameError):
    """The external search engine process misbehaved (did not start, died, or timed out on its handshake)."""
