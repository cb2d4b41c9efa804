"""
Errors raised by the domain / service layers.

All derive from GameError, so a presentation layer can catch a single type and leave its state untouched.
"""


class GameError(Exception):
    """Base class for anything that goes wrong while playing a game."""


class InvalidMoveSourceError(GameError):
    """A move was requested from a square that holds no piece."""


class IllegalMoveError(GameError):
    """The requested move is not in the set of legal moves."""


class OffBoardSquareError(GameError):
    """A move was requested from or to a square outside the 8x8 board."""


class GameStateError(GameError):
    """The game is not in a state that allows the requested action (finished, wrong turn, nothing to undo)."""


class GameNotFoundError(GameError):
    """No game session is registered under the given id."""


class InvalidFENError(GameError):
    """The FEN piece-placement string could not be parsed."""


class InvalidRequestError(ValueError):
    """Request payload failed validation at the boundary.

    Subclasses ValueError so pydantic wraps it into a ValidationError.
    """


class ConfigError(GameError):
    """Settings file could not be read, or contains values that do not validate."""
