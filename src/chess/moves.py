"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the pseudo-legal move sets for each piece type.
(The closed set of piece types maps onto one function each: see MOVEMENT_RULES and ATTACK_RULES.)


Legality (not leaving your own king in check) is checked later by the Board simulation / Game
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.chess.castling import CASTLING_RULES, CastlingSide
from src.chess.pieces import (
    FEN_TO_PIECE,
    PIECE_TO_FEN,
    PROMOTION_OPTIONS,
    Color,
    Piece,
    PieceType,
)
from src.chess.square import Square, is_valid_square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    @property
    def last_move(self) -> Optional[Move]: ...
    def piece(self, square: Square) -> Optional[Piece]: ...
    def is_square_attacked(self, target: Square, by_color: Color) -> bool: ...


Vector = tuple[int, int]

STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS

COORDINATE_MOVE_PATTERN = re.compile(r"^([a-h][1-8])[\s\-]*([a-h][1-8])([qrbn])?$")


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made. Castling / en passant are recognized by the Board from the geometry."""

    from_square: Square
    to_square: Square
    promote_to: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        * "e1g1": the king castles king side

        NOTE: assumes valid input. See `parse_move_text()` for user input.
        """
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        promote_to = FEN_TO_PIECE[uci[4]] if len(uci) == 5 else None
        return cls(from_sq, to_sq, promote_to)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def __str__(self) -> str:
        return self.to_uci()


def parse_move_text(text: str) -> Optional[Move]:
    """
    Coordinate notation typed by a user: "e2e4", "e2 e4", "e2-e4" or "e7e8q".
    Returns None when the text is not of that form.
    """
    match = COORDINATE_MOVE_PATTERN.match(text.strip().lower())
    if match is None:
        return None
    from_text, to_text, promotion_char = match.groups()
    if not (is_valid_square(from_text) and is_valid_square(to_text)):
        return None
    promote_to = FEN_TO_PIECE[promotion_char] if promotion_char else None
    return Move(
        Square.from_algebraic(from_text), Square.from_algebraic(to_text), promote_to
    )


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    player_color = _color_on(square, board)

    moves: list[Move] = []
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if piece_found.color != player_color:
                    moves.append(Move(from_square=square, to_square=target_square))
                break

            moves.append(Move(from_square=square, to_square=target_square))
            target_square = target_square.offset(df, dr)
    return moves


def single_step_move(square: Square, board: Board, deltas: list[Vector]) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    player_color = _color_on(square, board)
    moves: list[Move] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if piece_found is None or piece_found.color != player_color:
            moves.append(Move(from_square=square, to_square=target_square))

    return moves


def candidate_pawn_moves(square: Square, board: Board) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward (onto an empty square).
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally
    - takes en passant right after an enemy pawn passed it by advancing two squares.

    NOTE: promotion is not expanded here. The Board fills in the piece on arrival.
    """
    color = _color_on(square, board)
    direction = color.pawn_direction
    moves: list[Move] = []

    # Pawn pushes
    one_forward = square.offset(0, direction)
    if one_forward.is_within_bounds() and board.piece(one_forward) is None:
        moves.append(Move(from_square=square, to_square=one_forward))

        two_forward = square.offset(0, 2 * direction)
        if square.rank == color.pawn_rank and board.piece(two_forward) is None:
            moves.append(Move(from_square=square, to_square=two_forward))

    # pawns take diagonally:
    for df in (-1, 1):
        target_square = square.offset(df, direction)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        capture = Move(from_square=square, to_square=target_square)
        if piece_found is not None and piece_found.color != color:
            moves.append(capture)
        elif piece_found is None and is_en_passant_capture(capture, board):
            moves.append(capture)
    return moves


def candidate_knight_moves(square: Square, board: Board) -> list[Move]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(square, board, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, STRAIGHTS)


def candidate_queen_moves(square: Square, board: Board) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    diagonal_moves = candidate_bishop_moves(square, board)
    horizontal_and_vertical_moves = candidate_rook_moves(square, board)
    return diagonal_moves + horizontal_and_vertical_moves


def candidate_king_moves(square: Square, board: Board) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a two-file king step; the Board moves the rook along when the move is applied.
    """
    return single_step_move(square, board, KING_DELTAS) + candidate_castling_moves(
        square, board
    )


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def can_reach(square: Square, target: Square, board: Board) -> bool:
    """
    Could the piece on `square` move to `target`, going by the movement rules alone?

    Castling is left out: a king only 'reaches' its adjacent squares. (The SAN parser handles O-O / O-O-O by itself.)
    """
    piece = board.piece(square)
    if piece is None:
        return False
    if piece.type == PieceType.KING:
        candidates = single_step_move(square, board, KING_DELTAS)
    else:
        candidates = MOVEMENT_RULES[piece.type](square, board)
    return any(move.to_square == target for move in candidates)


# --- CAPTURING RULES / ATTACKING RULES ---
# NOTE: These scan outwards from the attacked square. They never call the movement rules above,
# because king movement itself asks "is this square attacked?" when it looks for castling moves.
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    ---
    Similar to raycasting moves.
    However, where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_


    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and that
    is allowed to move along the given direction?"_

    ---
    Returns TRUE if the first piece encountered along a direction belongs to `by_color` and is one of the given types.
    """
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square.is_within_bounds():
            piece_found = board.piece(target_square)
            if piece_found is not None:
                if (piece_found.color == by_color) and (
                    piece_found.type in by_piece_types
                ):
                    return True
                break
            target_square = target_square.offset(df, dr)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that just can move a single step along a direction.

    ---
    Returns TRUE if a piece of the specified color and type stands a single step away.
    """
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.piece(target_square)
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type == by_piece_type
        ):
            return True

    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could take on your square -->
    Must look one rank DOWN the board. Hence, vectors are exactly opposite to the ones used in `candidate_pawn_moves()`
    """
    backwards = -by_color.pawn_direction
    inverse_pawn_take_deltas: list[Vector] = [(1, backwards), (-1, backwards)]
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, (PieceType.BISHOP,), board, DIAGONALS)


def is_attacked_by_rook(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, (PieceType.ROOK,), board, STRAIGHTS)


def is_attacked_by_queen(square: Square, by_color: Color, board: Board) -> bool:
    """The Queen attacks along both the straight lines and the diagonals"""
    return raycasting_attack(
        square, by_color, (PieceType.QUEEN,), board, STRAIGHTS + DIAGONALS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}


# -- CASTLING MOVES ---
def candidate_castling_moves(square: Square, board: Board) -> list[Move]:
    """
    **you are allowed to castle if**

    * Neither the king nor the rook of choice have moved before.
    * You are not currently in check (you cannot castle out of check).
    * All squares in between the king and the rook are empty.
    * The king does not pass over / land on a square that is under attack.
    """
    king = board.piece(square)
    if king is None or king.type != PieceType.KING or king.has_moved:
        return []

    opponent_color = king.color.opponent
    if board.is_square_attacked(square, opponent_color):
        return []

    moves: list[Move] = []
    for side in CastlingSide:
        rule = CASTLING_RULES[(king.color, side)]
        if square != rule.king_from:
            continue

        rook = board.piece(rule.rook_from)
        if (
            rook is None
            or rook.type != PieceType.ROOK
            or rook.color != king.color
            or rook.has_moved
        ):
            continue

        if any(board.piece(between) is not None for between in rule.empty_squares):
            continue

        if any(
            board.is_square_attacked(crossing, opponent_color)
            for crossing in rule.safe_squares
        ):
            continue

        moves.append(Move(from_square=rule.king_from, to_square=rule.king_to))
    return moves


# -- EN PASSANT MOVES ---
def en_passant_square(board: Board) -> Optional[Square]:
    """
    The square an enemy pawn just passed over by advancing two squares on the previous move.
    None if the last move was anything else.
    """
    last_move = board.last_move
    if last_move is None:
        return None

    advanced_piece = board.piece(last_move.to_square)
    if advanced_piece is None or advanced_piece.type != PieceType.PAWN:
        return None

    ranks_moved = last_move.to_square.rank - last_move.from_square.rank
    if abs(ranks_moved) != 2 or last_move.to_square.file != last_move.from_square.file:
        return None

    passed_rank = (last_move.from_square.rank + last_move.to_square.rank) // 2
    return Square(last_move.to_square.file, passed_rank)


def is_en_passant_capture(move: Move, board: Board) -> bool:
    """
    A diagonal pawn step onto the empty passed-over square, where the pawn that just advanced
    stands right next to the capturing pawn (same rank, adjacent file).
    """
    moving_piece = board.piece(move.from_square)
    if moving_piece is None or moving_piece.type != PieceType.PAWN:
        return False

    df = move.to_square.file - move.from_square.file
    dr = move.to_square.rank - move.from_square.rank
    if abs(df) != 1 or dr != moving_piece.color.pawn_direction:
        return False

    if board.piece(move.to_square) is not None:
        return False

    target = en_passant_square(board)
    if target is None or target != move.to_square:
        return False

    # for the typechecker: en_passant_square() only returns a square after a move
    assert board.last_move is not None
    advanced_to = board.last_move.to_square
    advanced_pawn = board.piece(advanced_to)
    return (
        advanced_pawn is not None
        and advanced_pawn.color != moving_piece.color
        and advanced_to.rank == move.from_square.rank
        and abs(advanced_to.file - move.from_square.file) == 1
    )


# -- PAWN PROMOTION MOVES --
def is_pawn_push_to_promotion_square(move: Move, board: Board) -> bool:
    """check if the move is a pawn move that reaches the final rank (for its color)"""
    moving_piece = board.piece(move.from_square)
    if moving_piece is None or moving_piece.type != PieceType.PAWN:
        return False
    return move.to_square.rank == moving_piece.color.promotion_rank


def pawn_pushes_w_promotion(pawn_push: Move) -> list[Move]:
    """Return multiple copies of the pawn push with the piece type to promote into filled in."""
    return [
        Move(
            from_square=pawn_push.from_square,
            to_square=pawn_push.to_square,
            promote_to=piece_type,
        )
        for piece_type in PROMOTION_OPTIONS
    ]


# --- HELPERS ---
def _color_on(square: Square, board: Board) -> Color:
    """Color of the piece whose moves are being generated."""
    piece = board.piece(square)
    if piece is None:
        raise ValueError(f"No piece on {square} to generate moves for.")
    return piece.color
