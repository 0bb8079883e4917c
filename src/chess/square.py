"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase
from typing import Optional

# Chess board is always 8x8. Files and ranks are zero-based: a1 = (0, 0), h8 = (7, 7)
BOARD_DIMENSIONS = (8, 8)
FILE_NAMES = ascii_lowercase[: BOARD_DIMENSIONS[0]]


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7). Assumes valid input, see `parse_square()` otherwise."""
        file = ord(sq[0]) - ord("a")
        rank = int(sq[1]) - 1
        return cls(file, rank)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a'))}{self.rank + 1}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.file < BOARD_DIMENSIONS[0]) and (
            0 <= self.rank < BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        """The square (df, dr) away. NOTE: may lie off the board."""
        return Square(self.file + df, self.rank + dr)

    def __str__(self) -> str:
        return self.to_algebraic()


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a single digit for the rank"""
    if len(square) != 2:
        return False

    file_char, rank_char = square[0], square[1]
    if file_char not in FILE_NAMES:
        return False

    if not rank_char.isdecimal():
        return False

    return 1 <= int(rank_char) <= BOARD_DIMENSIONS[1]


def parse_square(text: str) -> Optional[Square]:
    """User input version of `Square.from_algebraic()`: returns None for anything that is not a square on the board."""
    cleaned = text.strip().lower()
    if not is_valid_square(cleaned):
        return None
    return Square.from_algebraic(cleaned)
