"""Unit tests for /src/chess/square.py"""

from string import ascii_lowercase

import pytest

from src.chess.square import BOARD_DIMENSIONS, Square, is_valid_square, parse_square


@pytest.mark.parametrize(
    "file, rank, notation",
    [
        (file, rank, f"{ascii_lowercase[file]}{rank + 1}")
        for file in range(8)
        for rank in range(8)
    ],
)
def test_creating_from_algebraic(file: int, rank: int, notation: str) -> None:
    """Files and ranks count from zero: 'a1' maps to file 0, rank 0, etc."""
    square = Square.from_algebraic(notation)
    assert square.file == file
    assert square.rank == rank


@pytest.mark.parametrize(
    "file, rank, notation",
    [
        (file, rank, f"{ascii_lowercase[file]}{rank + 1}")
        for file in range(8)
        for rank in range(8)
    ],
)
def test_to_algebraic_notation(file: int, rank: int, notation: str) -> None:
    """Test the reverse, so the square on the 1st file and 1st rank should be denoted as a1"""
    square = Square(file, rank)
    assert square.to_algebraic() == notation
    assert str(square) == notation


def test_square_within_bounds() -> None:
    """happy case: squares within the dimensions of the board"""
    for file in range(BOARD_DIMENSIONS[0]):
        for rank in range(BOARD_DIMENSIONS[1]):
            assert Square(file, rank).is_within_bounds()


@pytest.mark.parametrize(
    "file, rank", [(-1, 0), (0, -1), (8, 0), (0, 8), (8, 8), (-1, -1)]
)
def test_square_out_of_bounds(file: int, rank: int) -> None:
    assert not Square(file, rank).is_within_bounds()


def test_offset() -> None:
    """Offsets can walk off the board, the square just reports it is out of bounds"""
    e4 = Square.from_algebraic("e4")
    assert e4.offset(1, 1) == Square.from_algebraic("f5")
    assert e4.offset(-4, 0) == Square.from_algebraic("a4")
    assert not e4.offset(4, 0).is_within_bounds()


@pytest.mark.parametrize("text", ["a1", "h8", "e4", "c7"])
def test_valid_square_names(text: str) -> None:
    assert is_valid_square(text)


@pytest.mark.parametrize("text", ["", "a", "a0", "a9", "a²", "i1", "e44", "4e", "E4"])
def test_invalid_square_names(text: str) -> None:
    assert not is_valid_square(text)


def test_parse_square_is_forgiving_about_case_and_whitespace() -> None:
    assert parse_square(" E4 ") == Square(4, 3)
    assert parse_square("z9") is None
