"""
SAN (Standard Algebraic Notation)
----

The notation chess players write moves down in: "e4", "Nf3", "exd5", "Raxd1", "e8=Q", "O-O".

Two directions:
* `move_to_san()`: Move -> SAN, read off the position BEFORE the move is made (captures / disambiguation depend on it)
* `resolve_san()`: SAN -> Move, resolved against the live board for the side to move

Grammar accepted by `resolve_san()`:
`O-O`, `O-O-O`, or `[Piece]?[file]?[rank]?[x]?<file><rank>[=Piece]?[+|#]?`
"""

import logging
import re
from typing import Optional

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingSide, castling_side
from src.chess.moves import Move, can_reach
from src.chess.pieces import (
    PIECE_TO_SAN,
    PROMOTION_OPTIONS,
    SAN_TO_PIECE,
    Color,
    PieceType,
)
from src.chess.square import FILE_NAMES, Square, is_valid_square

logger = logging.getLogger(__name__)

CAPTURE_MARKER = "x"
PROMOTION_MARKER = "="
ANNOTATION_SUFFIX = re.compile(r"[+#!?]+$")
CASTLING_TOKENS: dict[str, CastlingSide] = {
    "O-O-O": CastlingSide.QUEEN_SIDE,
    "0-0-0": CastlingSide.QUEEN_SIDE,
    "O-O": CastlingSide.KING_SIDE,
    "0-0": CastlingSide.KING_SIDE,
}
RANK_NAMES = "12345678"


# --- MOVE -> SAN ---
def move_to_san(
    board: Board,
    move: Move,
    color: Color,
    default_promotion: PieceType = PieceType.QUEEN,
) -> str:
    """
    Write the move in SAN. Must be called BEFORE the move is applied to the board.
    ---

    <piece letter><disambiguation><x><target square><=promotion>

    * pawns have no piece letter, but when they capture the file they came from is written instead (exd5)
    * disambiguation is only added if another piece of the same type + color could legally go to the same square
    * en passant is written as a normal pawn capture (the target square is empty, but it is still a capture)
    * castling: O-O / O-O-O

    Returns an empty string if there is no piece on the starting square.
    """
    mover = board.piece(move.from_square)
    if mover is None:
        return ""

    if mover.type == PieceType.KING:
        side = castling_side(move.from_square, move.to_square)
        if side is not None:
            return side.value

    is_capture = board.piece(move.to_square) is not None or (
        mover.type == PieceType.PAWN
        and move.from_square.file != move.to_square.file
    )

    san_parts: list[str] = []
    if mover.type == PieceType.PAWN:
        if is_capture:
            san_parts.append(FILE_NAMES[move.from_square.file])
    else:
        san_parts.append(PIECE_TO_SAN[mover.type])
        san_parts.append(_disambiguation(board, move, mover.type, color))

    if is_capture:
        san_parts.append(CAPTURE_MARKER)

    san_parts.append(move.to_square.to_algebraic())

    if (
        mover.type == PieceType.PAWN
        and move.to_square.rank == mover.color.promotion_rank
    ):
        promote_to = (
            move.promote_to
            if move.promote_to in PROMOTION_OPTIONS
            else default_promotion
        )
        san_parts.append(f"{PROMOTION_MARKER}{PIECE_TO_SAN[promote_to]}")

    return "".join(san_parts)


def _disambiguation(
    board: Board, move: Move, piece_type: PieceType, color: Color
) -> str:
    """
    Find the rivals: other pieces of the same type and color that could legally move to the same square.

    * no rivals: nothing needed
    * the file tells them apart: file letter (Nbd2)
    * else, the rank tells them apart: rank digit (R1a3)
    * else both (Qh4e1)
    """
    rivals = [
        square
        for square in board.locate_pieces(piece_type, color)
        if square != move.from_square
        and can_reach(square, move.to_square, board)
        and not board.simulate_move_and_detect_self_check(
            Move(square, move.to_square), color
        )
    ]
    if not rivals:
        return ""

    file_name = FILE_NAMES[move.from_square.file]
    rank_name = RANK_NAMES[move.from_square.rank]
    if all(rival.file != move.from_square.file for rival in rivals):
        return file_name
    if all(rival.rank != move.from_square.rank for rival in rivals):
        return rank_name
    return file_name + rank_name


# --- SAN -> MOVE ---
def resolve_san(board: Board, token: str, color: Color) -> Optional[Move]:
    """
    Find the move the SAN token describes, for the player with the `color` pieces.
    ---

    1. castling tokens directly map to the king's two-file step on its home rank
    2. strip check / mate / annotation markers (+ # ! ?)
    3. split off promotion (=Q). A piece that cannot be promoted to (=K, =P) leaves the choice to the default
    4. leading capital letter is the piece type (pawn if missing)
    5. last two characters are the target square
    6. whatever is left (file letter and/or rank digit) restricts which piece is meant

    Then every piece that fits, can reach the target and does not leave its own king in check is a candidate.

    NOTE: When more than one candidate remains (ambiguous input), the first one in a1, b1, ..., h8 order wins.
    Returns None when the token cannot be read or no piece fits.
    """
    cleaned = ANNOTATION_SUFFIX.sub("", token.strip())
    if not cleaned:
        return None

    for castling_token, side in CASTLING_TOKENS.items():
        if cleaned == castling_token:
            return _resolve_castling(board, color, side)

    promote_to: Optional[PieceType] = None
    if PROMOTION_MARKER in cleaned:
        cleaned, _, promotion_text = cleaned.partition(PROMOTION_MARKER)
        promote_to = SAN_TO_PIECE.get(promotion_text.upper())
        if promote_to not in PROMOTION_OPTIONS:
            # e8=K, e8=P: the board promotes to its default piece instead
            promote_to = None

    piece_type = PieceType.PAWN
    if cleaned and cleaned[0] in SAN_TO_PIECE:
        piece_type = SAN_TO_PIECE[cleaned[0]]
        cleaned = cleaned[1:]

    cleaned = cleaned.replace(CAPTURE_MARKER, "")
    if len(cleaned) < 2 or not is_valid_square(cleaned[-2:]):
        return None
    target = Square.from_algebraic(cleaned[-2:])

    from_file: Optional[int] = None
    from_rank: Optional[int] = None
    for character in cleaned[:-2]:
        if character in FILE_NAMES:
            from_file = FILE_NAMES.index(character)
        elif character in RANK_NAMES:
            from_rank = RANK_NAMES.index(character)
        else:
            return None

    candidates: list[Move] = []
    for square in board.locate_pieces(piece_type, color):
        if from_file is not None and square.file != from_file:
            continue
        if from_rank is not None and square.rank != from_rank:
            continue
        if not can_reach(square, target, board):
            continue
        move = Move(square, target, promote_to)
        if board.simulate_move_and_detect_self_check(move, color):
            continue
        candidates.append(move)

    if not candidates:
        return None
    if len(candidates) > 1:
        logger.warning(
            "Ambiguous SAN %r for %s: %s. Using the first one.",
            token,
            color.display_name,
            ", ".join(move.to_uci() for move in candidates),
        )
    return candidates[0]


def _resolve_castling(board: Board, color: Color, side: CastlingSide) -> Optional[Move]:
    """The king's two-file step, starting from wherever the king stands on its home rank."""
    king_square = next(
        (
            square
            for square in board.locate_pieces(PieceType.KING, color)
            if square.rank == color.home_rank
        ),
        None,
    )
    if king_square is None:
        return None

    rule = CASTLING_RULES[(color, side)]
    direction = 1 if rule.king_to.file > rule.king_from.file else -1
    target = king_square.offset(2 * direction, 0)
    if not target.is_within_bounds():
        return None
    return Move(king_square, target)
