"""The Game board implements all rules that effect the `position` (in chess: the configuration of pieces on the board)"""

from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.castling import castling_rook_squares
from src.chess.moves import (
    ATTACK_RULES,
    MOVEMENT_RULES,
    PROMOTION_OPTIONS,
    CandidateMovesFn,
    Move,
    is_en_passant_capture,
)
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@dataclass
class Board:
    """
    8x8 grid of optional pieces
    ---

    * `position` only holds the occupied squares: a square missing from the dict is empty.
    * `last_move` is the most recently applied move (needed to judge en passant), None before any move.
    """

    position: dict[Square, Piece] = field(default_factory=dict)
    last_move: Optional[Move] = None

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        NOTE: FEN placement says nothing about castling rights. Every piece starts with `has_moved = False`.
        """
        position: dict[Square, Piece] = {}
        fen_by_ranks = fen_str.split("/")
        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - 1 - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 0
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    square = Square(file, rank)
                    position[square] = Piece.from_fen(character, square)
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
        return cls(position)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION_FEN)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(BOARD_DIMENSIONS[0]):
            piece = self.piece(Square(file, rank))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def reset(self) -> None:
        """Put all pieces back in the standard starting position (in place) and forget the last move."""
        fresh = Board.starting_position()
        self.position = fresh.position
        self.last_move = None

    # --- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def place_piece(self, piece: Piece, square: Square) -> None:
        """Put a piece on a square (replaces whatever stood there)"""
        piece.square = square
        self.position[square] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        return self.position.pop(square, None)

    def in_bounds(self, square: Square) -> bool:
        return square.is_within_bounds()

    def is_own_piece(self, square: Square, color: Color) -> bool:
        if not self.in_bounds(square):
            return False
        piece = self.piece(square)
        return piece is not None and piece.color == color

    def path_clear(self, from_square: Square, to_square: Square) -> bool:
        """
        Are all squares strictly in between the two squares empty?
        ---

        Only defined for straight lines: same rank, same file, or a diagonal. Returns False for anything else.
        """
        if not (self.in_bounds(from_square) and self.in_bounds(to_square)):
            return False

        df = to_square.file - from_square.file
        dr = to_square.rank - from_square.rank
        if df != 0 and dr != 0 and abs(df) != abs(dr):
            return False

        step_file = (df > 0) - (df < 0)
        step_rank = (dr > 0) - (dr < 0)
        square = from_square.offset(step_file, step_rank)
        while square != to_square:
            if self.piece(square) is not None:
                return False
            square = square.offset(step_file, step_rank)
        return True

    def locate_pieces(self, piece_type: PieceType, color: Color) -> list[Square]:
        """Squares holding a piece of the given type and color, in a1, b1, ..., h8 order"""
        return [
            square
            for square in self.squares_of(color)
            if self.position[square].type == piece_type
        ]

    def locate_king(self, color: Color) -> Optional[Square]:
        kings = self.locate_pieces(PieceType.KING, color)
        return kings[0] if kings else None

    def squares_of(self, color: Color) -> list[Square]:
        """Squares occupied by the given color, in a1, b1, ..., h8 order"""
        return sorted(
            (square for square, piece in self.position.items() if piece.color == color),
            key=lambda square: (square.rank, square.file),
        )

    # --- MOVES ---
    def candidate_moves(self, square: Square) -> list[Move]:
        """
        Pseudo-legal moves of the piece on the given square: geometrically valid, but may still leave your own king in check.
        """
        piece = self.piece(square)
        if piece is None:
            return []
        movement_rule: CandidateMovesFn = MOVEMENT_RULES[piece.type]
        return movement_rule(square, self)

    def generate_candidate_moves(self, color: Color) -> list[Move]:
        """Pseudo-legal moves for every piece of the given color"""
        candidate_moves: list[Move] = []
        for starting_square in self.squares_of(color):
            candidate_moves.extend(self.candidate_moves(starting_square))
        return candidate_moves

    def apply_move(
        self, move: Move, default_promotion: PieceType = PieceType.QUEEN
    ) -> Optional[Piece]:
        """
        Update the position on the board. Returns the captured piece (if any).
        ---

        Handles:
        1. en passant: the captured pawn is the one that just advanced, not the one on the target square
        2. castling: a king stepping two files brings the rook along to the other side
        3. promotion: a pawn reaching the last rank is swapped for `move.promote_to` (or `default_promotion` if that is missing / not allowed)

        NOTE: does NOT check whether the move is legal. Off-board squares or an empty starting square leave the board untouched.
        """
        if not (self.in_bounds(move.from_square) and self.in_bounds(move.to_square)):
            return None

        moving_piece = self.piece(move.from_square)
        if moving_piece is None:
            return None

        # 1. who gets taken? (decide BEFORE anything moves)
        if is_en_passant_capture(move, self):
            assert self.last_move is not None
            captured = self.remove_piece(self.last_move.to_square)
        else:
            captured = self.remove_piece(move.to_square)

        self.remove_piece(move.from_square)
        self.position[move.to_square] = moving_piece
        moving_piece.move_to(move.to_square)

        # 2. castling: move the rook as well
        if moving_piece.type == PieceType.KING:
            rook_squares = castling_rook_squares(move.from_square, move.to_square)
            if rook_squares is not None:
                self._move_castling_rook(*rook_squares)

        # 3. promotion
        if (
            moving_piece.type == PieceType.PAWN
            and move.to_square.rank == moving_piece.color.promotion_rank
        ):
            promote_to = (
                move.promote_to
                if move.promote_to in PROMOTION_OPTIONS
                else default_promotion
            )
            self.position[move.to_square] = Piece(
                promote_to, moving_piece.color, move.to_square, has_moved=True
            )

        self.last_move = move
        return captured

    def _move_castling_rook(self, rook_from: Square, rook_to: Square) -> None:
        rook = self.piece(rook_from)
        if rook is None or rook.type != PieceType.ROOK:
            return
        self.remove_piece(rook_from)
        self.position[rook_to] = rook
        rook.move_to(rook_to)

    # --- ATTACKS / CHECKS ---
    def is_square_attacked(self, target: Square, by_color: Color) -> bool:
        """Could any piece of `by_color` capture on the target square? Direct scan from the target, see ATTACK_RULES."""
        return any(
            is_attacked_by(target, by_color, self)
            for is_attacked_by in ATTACK_RULES.values()
        )

    def is_check(self, color: Color) -> bool:
        """Is the king of the given color under attack? (No king on the board: never in check)"""
        king_square = self.locate_king(color)
        if king_square is None:
            return False
        return self.is_square_attacked(king_square, color.opponent)

    def clone(self) -> Self:
        """Deep copy: every piece gets copied (with its moved-flag), the last move is an immutable value."""
        position = {square: piece.copy() for square, piece in self.position.items()}
        return type(self)(position, self.last_move)

    def simulate_move_and_detect_self_check(self, move: Move, color: Color) -> bool:
        """Return True if the move would leave the king of `color` in check

        plan:
        1. Copy the board
        2. make the candidate move
        3. determine if king is in check on the new board
        """
        board = self.clone()
        board.apply_move(move)
        return board.is_check(color)
