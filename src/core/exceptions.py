"""
Exceptions raised by the service layer.

The domain layer (src/chess) reports expected bad input with `None` / `False` return values.
The service translates those into the errors below, so the caller (API, CLI, ...) can decide what to show the user.
"""


class GameError(Exception):
    """Base class for everything that can go wrong while handling a game request."""


class GameStateError(GameError):
    """The game is not in a state that allows the requested action (ex. moving after checkmate)."""


class IllegalMoveError(GameError):
    """The move breaks the rules of chess in the current position."""


class InvalidMoveNotationError(GameError):
    """The move text could not be interpreted as coordinates or SAN."""


class InvalidPGNError(GameError):
    """The PGN text could not be replayed from the starting position."""


class InvalidRequestError(GameError):
    """Request data did not pass validation."""


class RepositoryError(GameError):
    """Persistence layer could not find / store the game."""
