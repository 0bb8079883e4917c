"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Self

from src.chess.pieces import Color
from src.chess.square import Square


class CastlingSide(Enum):
    """The two castling directions. Values represent their encodings in SAN."""

    KING_SIDE = "O-O"
    QUEEN_SIDE = "O-O-O"


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.

    * `empty_squares`: everything in between king and rook. Must be empty.
    * `safe_squares`: the squares the king passes over / lands on. Must not be attacked.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square
    empty_squares: tuple[Square, ...]
    safe_squares: tuple[Square, ...]

    @classmethod
    def from_algebraic(
        cls,
        k_from: str,
        k_to: str,
        r_from: str,
        r_to: str,
        between: str,
    ) -> Self:
        """Convenience method: to make mapping shown below more readable. `between` lists the squares separated by spaces."""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        empty_squares = tuple(Square.from_algebraic(sq) for sq in between.split())
        # the king crosses the rook's destination square and lands on its own
        safe_squares = (rook_to, king_to)
        return cls(king_from, king_to, rook_from, rook_to, empty_squares, safe_squares)


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[tuple[Color, CastlingSide], CastlingSquares] = {
    (Color.WHITE, CastlingSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1", "f1 g1"
    ),
    (Color.WHITE, CastlingSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1", "d1 c1 b1"
    ),
    (Color.BLACK, CastlingSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8", "f8 g8"
    ),
    (Color.BLACK, CastlingSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8", "d8 c8 b8"
    ),
}


def castling_side(from_square: Square, to_square: Square) -> Optional[CastlingSide]:
    """A king stepping two files along its rank is castling. Returns None for anything else (does not check the piece type)"""
    if from_square.rank != to_square.rank:
        return None
    file_difference = to_square.file - from_square.file
    if file_difference == 2:
        return CastlingSide.KING_SIDE
    if file_difference == -2:
        return CastlingSide.QUEEN_SIDE
    return None


def castling_rook_squares(from_square: Square, to_square: Square) -> Optional[tuple[Square, Square]]:
    """Where the rook comes from / goes to for a two-file king step along the given rank."""
    side = castling_side(from_square, to_square)
    if side is None:
        return None
    rank = from_square.rank
    if side == CastlingSide.KING_SIDE:
        return Square(7, rank), Square(5, rank)
    return Square(0, rank), Square(3, rank)
