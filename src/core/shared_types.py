"""
Type definitions used across layers

These are the string versions that travel between API, Service and DB.
The domain layer has its own enums (src/chess/pieces.py, src/chess/game.py); conversion happens by name.
"""

from enum import StrEnum


class Status(StrEnum):
    ONGOING = "ongoing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"
    RESIGNED = "resigned"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


# NOTE: promoting is only allowed into these. Anything else falls back to the configured default.
PROMOTION_CHOICES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)
