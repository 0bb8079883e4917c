"""Defines the colors and types of chess pieces"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional, Self

from src.chess.square import Square


class PieceType(Enum):
    PAWN = auto()
    KNIGHT = auto()
    BISHOP = auto()
    ROOK = auto()
    QUEEN = auto()
    KING = auto()

    @property
    def symbol(self) -> str:
        """One-letter SAN symbol (pawns do get 'P' here, although SAN leaves it out)"""
        return PIECE_TO_SAN[self]


class Color(Enum):
    WHITE = auto()
    BLACK = auto()

    @property
    def opponent(self) -> Color:
        return Color.BLACK if self == Color.WHITE else Color.WHITE

    @property
    def pawn_direction(self) -> int:
        """White moves UP the board, black moves DOWN"""
        return 1 if self == Color.WHITE else -1

    @property
    def home_rank(self) -> int:
        """Rank of the king / rooks at the start of the game"""
        return 0 if self == Color.WHITE else 7

    @property
    def pawn_rank(self) -> int:
        """Rank the pawns start on (and can push two squares from)"""
        return 1 if self == Color.WHITE else 6

    @property
    def promotion_rank(self) -> int:
        return 7 if self == Color.WHITE else 0

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

SAN_TO_PIECE: dict[str, PieceType] = {
    "P": PieceType.PAWN,
    "N": PieceType.KNIGHT,
    "B": PieceType.BISHOP,
    "R": PieceType.ROOK,
    "Q": PieceType.QUEEN,
    "K": PieceType.KING,
}

PIECE_TO_SAN: dict[PieceType, str] = {value: key for key, value in SAN_TO_PIECE.items()}

PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
]


@dataclass
class Piece:
    """
    A piece standing on the board.
    ---

    NOTE: `has_moved` only matters for kings and rooks (castling). Other pieces carry it along but nothing reads it.
    """

    type: PieceType
    color: Color
    square: Optional[Square] = None
    has_moved: bool = False

    @classmethod
    def from_fen(cls, character: str, square: Optional[Square] = None) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color, square)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    def copy(self) -> Piece:
        """Independent copy, including the moved-flag"""
        return replace(self)

    def move_to(self, square: Square) -> None:
        self.square = square
        self.has_moved = True
