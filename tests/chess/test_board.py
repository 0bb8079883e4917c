"""Unit tests for /src/chess/board.py"""

from contextlib import AbstractContextManager
from typing import Any, Callable
from unittest.mock import Mock, patch

import pytest

from src.chess.board import STARTING_POSITION_FEN, Board, Color, Move, Square
from src.chess.pieces import Piece, PieceType

EMPTY_FEN = "/".join(["8"] * 8)
PatchContext = AbstractContextManager[None]


def board_with(pieces: dict[str, str]) -> Board:
    """Board holding only the given pieces. ex) {"e1": "K", "e8": "k"}"""
    board = Board.from_fen(EMPTY_FEN)
    for square_name, fen_char in pieces.items():
        board.place_piece(Piece.from_fen(fen_char), Square.from_algebraic(square_name))
    return board


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


@pytest.fixture
def patch_candidate_move_functions() -> Callable[
    [Any], tuple[PatchContext, dict[PieceType, Mock]]
]:
    """Call the inner method with the desired return value for all the functions"""

    def _patch_functions(
        return_value: Any,
    ) -> tuple[PatchContext, dict[PieceType, Mock]]:
        mock_rules = {piece_type: Mock(return_value=return_value) for piece_type in PieceType}
        ctx = patch.dict("src.chess.board.MOVEMENT_RULES", mock_rules)
        return ctx, mock_rules

    return _patch_functions


@pytest.fixture
def patch_attack_rule_functions() -> Callable[
    [], tuple[PatchContext, dict[PieceType, Mock]]
]:
    def _patch_functions() -> tuple[PatchContext, dict[PieceType, Mock]]:
        # return FALSE to ensure all methods must be called (no early break out of the test for attacker)
        mock_rules = {piece_type: Mock(return_value=False) for piece_type in PieceType}
        ctx = patch.dict("src.chess.board.ATTACK_RULES", mock_rules)
        return ctx, mock_rules

    return _patch_functions


# -- CREATION LOGIC ---
def test_creating_board_in_starting_position() -> None:
    """Make sure board position is correctly initialized using a partial FEN string"""
    board = Board.starting_position()
    back_rank = [
        PieceType.ROOK,
        PieceType.KNIGHT,
        PieceType.BISHOP,
        PieceType.QUEEN,
        PieceType.KING,
        PieceType.BISHOP,
        PieceType.KNIGHT,
        PieceType.ROOK,
    ]
    for file, piece_type in enumerate(back_rank):
        assert board.piece(Square(file, 0)) == Piece(piece_type, Color.WHITE, Square(file, 0))
        assert board.piece(Square(file, 7)) == Piece(piece_type, Color.BLACK, Square(file, 7))
        assert board.piece(Square(file, 1)) == Piece(PieceType.PAWN, Color.WHITE, Square(file, 1))
        assert board.piece(Square(file, 6)) == Piece(PieceType.PAWN, Color.BLACK, Square(file, 6))

    # 3rd through 6th ranks are empty
    for rank in range(2, 6):
        for file in range(8):
            assert board.piece(Square(file, rank)) is None

    assert len(board.position) == 32
    assert board.last_move is None


@pytest.mark.parametrize(
    "fen",
    [
        STARTING_POSITION_FEN,
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR",
        "2kr1b1r/p1p1pppp/2p2n2/3q2B1/6Q1/2NP4/PPP2PPP/R4RK1",
        EMPTY_FEN,
    ],
)
def test_fen_round_trip(fen: str) -> None:
    assert Board.from_fen(fen).to_fen() == fen


def test_pieces_know_their_square() -> None:
    board = Board.from_fen("2kr1b1r/p1p1pppp/2p2n2/3q2B1/6Q1/2NP4/PPP2PPP/R4RK1")
    for square, piece in board.position.items():
        assert piece.square == square
        assert not piece.has_moved


def test_reset() -> None:
    board = Board.starting_position()
    board.apply_move(Move.from_uci("e2e4"))
    board.reset()
    assert board.to_fen() == STARTING_POSITION_FEN
    assert board.last_move is None


# -- QUERIES ---
def test_place_and_remove_piece() -> None:
    board = board_with({})
    knight = Piece(PieceType.KNIGHT, Color.WHITE)
    board.place_piece(knight, sq("c3"))
    assert board.piece(sq("c3")) is knight
    assert knight.square == sq("c3")

    assert board.remove_piece(sq("c3")) is knight
    assert board.piece(sq("c3")) is None
    assert board.remove_piece(sq("c3")) is None


def test_is_own_piece() -> None:
    board = board_with({"a1": "R", "h8": "r"})
    assert board.is_own_piece(sq("a1"), Color.WHITE)
    assert not board.is_own_piece(sq("a1"), Color.BLACK)
    assert not board.is_own_piece(sq("b1"), Color.WHITE)
    assert not board.is_own_piece(Square(8, 0), Color.WHITE)


@pytest.mark.parametrize(
    "from_name, to_name, expected",
    [
        ("a1", "a8", True),  # file
        ("a1", "h1", False),  # blocked by the piece on d1
        ("a1", "c1", True),  # d1 is beyond the target
        ("a1", "d1", True),  # target itself is not in between
        ("b2", "g7", True),  # diagonal
        ("a1", "b3", False),  # not a straight line
        ("e4", "e5", True),  # adjacent: nothing in between
    ],
)
def test_path_clear(from_name: str, to_name: str, expected: bool) -> None:
    board = board_with({"d1": "N"})
    assert board.path_clear(sq(from_name), sq(to_name)) is expected


def test_path_clear_off_board() -> None:
    board = board_with({})
    assert not board.path_clear(sq("a1"), Square(0, 9))


def test_locate_pieces_in_scan_order() -> None:
    board = Board.starting_position()
    assert board.locate_pieces(PieceType.KNIGHT, Color.WHITE) == [sq("b1"), sq("g1")]
    assert board.locate_king(Color.BLACK) == sq("e8")
    assert board.locate_king(Color.WHITE) == sq("e1")
    assert board_with({}).locate_king(Color.WHITE) is None


def test_squares_of() -> None:
    board = board_with({"h1": "R", "a2": "P", "a1": "K", "e8": "k"})
    assert board.squares_of(Color.WHITE) == [sq("a1"), sq("h1"), sq("a2")]
    assert board.squares_of(Color.BLACK) == [sq("e8")]


# -- MOVE GENERATION (STRATEGY PATTERN) ---
def test_candidate_moves_uses_movement_rule(
    patch_candidate_move_functions: Callable[
        [Any], tuple[PatchContext, dict[PieceType, Mock]]
    ],
) -> None:
    """The board only looks up the rule for the piece type standing on the square"""
    board = board_with({"d4": "B"})
    expected_moves = [Move.from_uci("d4e5")]
    ctx, mock_rules = patch_candidate_move_functions(expected_moves)
    with ctx:
        assert board.candidate_moves(sq("d4")) == expected_moves

    mock_rules[PieceType.BISHOP].assert_called_once_with(sq("d4"), board)
    for piece_type, mock_rule in mock_rules.items():
        if piece_type != PieceType.BISHOP:
            mock_rule.assert_not_called()


def test_candidate_moves_empty_square() -> None:
    assert board_with({}).candidate_moves(sq("d4")) == []


def test_generate_candidate_moves_starting_position() -> None:
    """16 pawn moves + 4 knight moves"""
    board = Board.starting_position()
    assert len(board.generate_candidate_moves(Color.WHITE)) == 20
    assert len(board.generate_candidate_moves(Color.BLACK)) == 20


def test_is_square_attacked_asks_every_rule(
    patch_attack_rule_functions: Callable[[], tuple[PatchContext, dict[PieceType, Mock]]],
) -> None:
    board = board_with({})
    ctx, mock_rules = patch_attack_rule_functions()
    with ctx:
        assert not board.is_square_attacked(sq("e4"), Color.BLACK)
    for mock_rule in mock_rules.values():
        mock_rule.assert_called_once_with(sq("e4"), Color.BLACK, board)


# -- APPLYING MOVES ---
def test_apply_simple_move() -> None:
    board = Board.starting_position()
    captured = board.apply_move(Move.from_uci("e2e4"))
    assert captured is None
    assert board.piece(sq("e2")) is None
    pawn = board.piece(sq("e4"))
    assert pawn is not None and pawn.type == PieceType.PAWN
    assert pawn.square == sq("e4")
    assert pawn.has_moved
    assert board.last_move == Move.from_uci("e2e4")


def test_apply_capture_returns_captured_piece() -> None:
    board = board_with({"e4": "P", "d5": "n"})
    captured = board.apply_move(Move.from_uci("e4d5"))
    assert captured is not None
    assert (captured.type, captured.color) == (PieceType.KNIGHT, Color.BLACK)
    assert len(board.position) == 1


def test_apply_en_passant_removes_passed_pawn() -> None:
    board = board_with({"e5": "P", "d7": "p"})
    board.apply_move(Move.from_uci("d7d5"))
    captured = board.apply_move(Move.from_uci("e5d6"))

    assert captured is not None and captured.type == PieceType.PAWN
    assert board.piece(sq("d5")) is None
    assert board.piece(sq("d6")) == Piece(PieceType.PAWN, Color.WHITE, sq("d6"), has_moved=True)


@pytest.mark.parametrize(
    "king_move, rook_from, rook_to",
    [
        ("e1g1", "h1", "f1"),
        ("e1c1", "a1", "d1"),
        ("e8g8", "h8", "f8"),
        ("e8c8", "a8", "d8"),
    ],
)
def test_apply_castling_moves_the_rook(king_move: str, rook_from: str, rook_to: str) -> None:
    board = board_with({"a1": "R", "e1": "K", "h1": "R", "a8": "r", "e8": "k", "h8": "r"})
    move = Move.from_uci(king_move)
    board.apply_move(move)

    king = board.piece(move.to_square)
    rook = board.piece(sq(rook_to))
    assert king is not None and king.type == PieceType.KING and king.has_moved
    assert rook is not None and rook.type == PieceType.ROOK and rook.has_moved
    assert board.piece(sq(rook_from)) is None


@pytest.mark.parametrize(
    "move_uci, expected_type",
    [
        ("b7b8q", PieceType.QUEEN),
        ("b7b8r", PieceType.ROOK),
        ("b7b8b", PieceType.BISHOP),
        ("b7b8n", PieceType.KNIGHT),
        ("b7b8", PieceType.QUEEN),  # missing choice: default
        ("b7b8k", PieceType.QUEEN),  # not allowed: default
    ],
)
def test_apply_promotion(move_uci: str, expected_type: PieceType) -> None:
    board = board_with({"b7": "P"})
    board.apply_move(Move.from_uci(move_uci))
    promoted = board.piece(sq("b8"))
    assert promoted == Piece(expected_type, Color.WHITE, sq("b8"), has_moved=True)


def test_apply_promotion_configured_default() -> None:
    board = board_with({"g2": "p"})
    board.apply_move(Move.from_uci("g2g1"), default_promotion=PieceType.KNIGHT)
    assert board.piece(sq("g1")) == Piece(PieceType.KNIGHT, Color.BLACK, sq("g1"), has_moved=True)


def test_apply_move_from_empty_square_changes_nothing() -> None:
    board = Board.starting_position()
    assert board.apply_move(Move.from_uci("e4e5")) is None
    assert board.to_fen() == STARTING_POSITION_FEN
    assert board.last_move is None


def test_apply_move_off_board_changes_nothing() -> None:
    board = Board.starting_position()
    assert board.apply_move(Move(sq("e2"), Square(4, 8))) is None
    assert board.to_fen() == STARTING_POSITION_FEN


# -- CHECKS / SIMULATION ---
def test_is_check() -> None:
    board = board_with({"e1": "K", "e8": "r"})
    assert board.is_check(Color.WHITE)
    board.place_piece(Piece.from_fen("B"), sq("e2"))
    assert not board.is_check(Color.WHITE)


def test_no_king_no_check() -> None:
    assert not board_with({"e8": "r"}).is_check(Color.WHITE)


def test_clone_is_independent() -> None:
    board = Board.starting_position()
    clone = board.clone()
    clone.apply_move(Move.from_uci("e2e4"))

    assert board.to_fen() == STARTING_POSITION_FEN
    assert board.last_move is None
    pawn = board.piece(sq("e2"))
    assert pawn is not None and not pawn.has_moved


def test_clone_keeps_last_move_and_pieces() -> None:
    board = Board.starting_position()
    board.apply_move(Move.from_uci("e2e4"))
    clone = board.clone()

    assert clone.last_move == board.last_move == Move.from_uci("e2e4")
    assert clone.position == board.position
    assert clone.to_fen() == board.to_fen()

    # same pieces, but not the same objects
    cloned_pawn = clone.piece(sq("e4"))
    assert cloned_pawn is not None and cloned_pawn is not board.piece(sq("e4"))
    cloned_knight = clone.piece(sq("g1"))
    assert cloned_knight is not None
    cloned_knight.has_moved = True
    knight = board.piece(sq("g1"))
    assert knight is not None and not knight.has_moved


def test_simulate_move_and_detect_self_check() -> None:
    """The bishop on e2 is pinned against the king by the rook on e8"""
    board = board_with({"e1": "K", "e2": "B", "e8": "r"})
    assert board.simulate_move_and_detect_self_check(Move.from_uci("e2d3"), Color.WHITE)
    assert not board.simulate_move_and_detect_self_check(Move.from_uci("e1d1"), Color.WHITE)
    # the original board is untouched
    assert board.piece(sq("e2")) is not None
