"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn of the board game:
whose turn it is, whether the move is legal, recording it, and what the result of the game is after the move.

NOTE: expected bad input (illegal move, wrong turn, game already over) is reported by returning False, never by raising.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Self

from src.chess.board import Board
from src.chess.moves import (
    Move,
    is_pawn_push_to_promotion_square,
    pawn_pushes_w_promotion,
)
from src.chess.pieces import Color, PieceType
from src.chess.san import move_to_san, resolve_san
from src.core.exceptions import GameStateError
from src.core.models import GameModel

logger = logging.getLogger(__name__)


class GameState(Enum):
    ONGOING = auto()
    CHECK = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAW = auto()
    RESIGNED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES: frozenset[GameState] = frozenset(
    {GameState.CHECKMATE, GameState.STALEMATE, GameState.DRAW, GameState.RESIGNED}
)


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    current_player: Color = Color.WHITE
    state: GameState = GameState.ONGOING
    draw_offered_by: Optional[Color] = None
    move_history: list[str] = field(default_factory=list)  # SAN
    resigned_by: Optional[Color] = None
    tags: dict[str, str] = field(default_factory=dict)  # PGN tag pairs
    default_promotion: PieceType = PieceType.QUEEN

    @classmethod
    def new_game(
        cls,
        tags: Optional[dict[str, str]] = None,
        default_promotion: PieceType = PieceType.QUEEN,
    ) -> Self:
        """Standard starting position, white to move."""
        return cls(
            board=Board.starting_position(),
            tags=dict(tags or {}),
            default_promotion=default_promotion,
        )

    @classmethod
    def from_model(
        cls, model: GameModel, default_promotion: PieceType = PieceType.QUEEN
    ) -> Self:
        """
        Define how to construct a Game from the information the Service layer actually has
        ----

        The position is not stored: it is rebuilt by replaying the SAN history from the starting position.
        What cannot be derived from the moves (resignation, agreed draw, pending draw offer) is restored afterwards.
        """
        # Validation
        state_name = model.state.replace(" ", "_").upper()
        if state_name not in GameState.__members__:
            raise GameStateError(
                f"Invalid state: {model.state!r}. "
                f"Pick one from {','.join(state.name.lower() for state in GameState)}"
            )

        game = cls.new_game(tags=model.tags, default_promotion=default_promotion)
        for ply, san in enumerate(model.move_history):
            if not game.make_san_move(san):
                raise GameStateError(
                    f"Cannot replay stored move history: move {ply + 1} ({san!r}) is not legal."
                )

        game.current_player = _color_from_name(model.current_player)
        game.state = GameState[state_name]
        game.draw_offered_by = (
            _color_from_name(model.draw_offered_by) if model.draw_offered_by else None
        )
        game.resigned_by = (
            _color_from_name(model.resigned_by) if model.resigned_by else None
        )
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            tags=dict(self.tags),
            move_history=list(self.move_history),
            current_player=self.current_player.name.lower(),
            state=self.state.name.lower(),
            draw_offered_by=(
                self.draw_offered_by.name.lower() if self.draw_offered_by else None
            ),
            resigned_by=self.resigned_by.name.lower() if self.resigned_by else None,
        )

    # --- ENGINE SURFACE ---
    @property
    def is_over(self) -> bool:
        return self.state.is_terminal

    @property
    def draw_offered(self) -> bool:
        return self.draw_offered_by is not None

    @property
    def winner(self) -> Optional[str]:
        """
        "White" / "Black", or None while nobody has won (yet).

        * checkmate: the player who is requested to move just got mated, the opponent wins
        * resignation: the opponent of whoever resigned wins
        """
        if self.state == GameState.CHECKMATE:
            return self.current_player.opponent.display_name
        if self.state == GameState.RESIGNED:
            loser = self.resigned_by or self.current_player
            return loser.opponent.display_name
        return None

    def set_current_player(self, color: Color) -> None:
        """Used when replaying loaded games onto the board directly."""
        self.current_player = color

    def set_move_history(self, history: list[str]) -> None:
        self.move_history = list(history)

    def legal_moves(self, color: Optional[Color] = None) -> list[Move]:
        """
        List of legal moves for the player with the 'color' pieces (default: the player to move)
        ----

        ----
        **Combines the following**

        1. generate candidate moves, using the basic movement rules for all pieces (the board does this calculation)
        2. remove illegal options --> a move that would put you in check or you are in check and the move does not get you out of it.
        3. Pawn push to promotion square? --> expand the set of moves to include one for every choice of piece type to promote into.
        """
        color = color or self.current_player
        legal_moves: list[Move] = []
        for move in self.board.generate_candidate_moves(color):
            if self.board.simulate_move_and_detect_self_check(move, color):
                continue
            if is_pawn_push_to_promotion_square(move, self.board):
                legal_moves.extend(pawn_pushes_w_promotion(move))
            else:
                legal_moves.append(move)
        return legal_moves

    def make_move(self, move: Move) -> bool:
        """
        Attempt to make a move
        -----

        1. the game must still be going, and the piece on the starting square must be yours
        2. the target square must be one of that piece's candidate moves
        3. the move may not leave your own king in check
        4. write the move down in SAN (BEFORE the board changes)
        5. update the board, the history, a stale draw offer, the turn and the game state

        Returns False (and changes nothing) if the move is not allowed.
        """
        if self.is_over:
            logger.debug("Rejected %s: game is over (%s)", move, self.state.name)
            return False

        piece = self.board.piece(move.from_square)
        if piece is None or piece.color != self.current_player:
            logger.debug(
                "Rejected %s: no %s piece on the starting square",
                move,
                self.current_player.display_name,
            )
            return False

        candidate_targets = {
            candidate.to_square
            for candidate in self.board.candidate_moves(move.from_square)
        }
        if move.to_square not in candidate_targets:
            logger.debug("Rejected %s: piece cannot move there", move)
            return False

        if self.board.simulate_move_and_detect_self_check(move, self.current_player):
            logger.debug("Rejected %s: leaves own king in check", move)
            return False

        san = move_to_san(self.board, move, self.current_player, self.default_promotion)
        self.board.apply_move(move, self.default_promotion)
        self.move_history.append(san)

        # the player to move next ignored the opponent's offer by playing on
        if self.draw_offered_by not in (None, self.current_player):
            self.decline_draw()

        self.current_player = self.current_player.opponent
        self._update_game_state()
        logger.debug("Played %s (%s). State: %s", san, move, self.state.name)
        return True

    def make_san_move(self, san: str) -> bool:
        """Same as `make_move()`, with the move written in SAN for the player to move"""
        if self.is_over:
            return False
        move = resolve_san(self.board, san, self.current_player)
        if move is None:
            logger.debug(
                "Rejected %r: cannot resolve SAN for %s",
                san,
                self.current_player.display_name,
            )
            return False
        return self.make_move(move)

    def resign(self, color: Optional[Color] = None) -> bool:
        """The given player (default: the player to move) gives up. Immediately ends the game."""
        if self.is_over:
            return False
        self.resigned_by = color or self.current_player
        self._change_state(GameState.RESIGNED)
        return True

    # --- DRAW OFFER HANDSHAKE ---
    def offer_draw(self) -> bool:
        """The player to move offers a draw. The opponent can accept it on their turn."""
        if self.is_over:
            return False
        self.draw_offered_by = self.current_player
        return True

    def accept_draw(self) -> bool:
        """Only takes effect if there is an offer, and it was made by the other player."""
        if self.is_over or self.draw_offered_by is None:
            return False
        if self.draw_offered_by == self.current_player:
            return False
        self._change_state(GameState.DRAW)
        return True

    def decline_draw(self) -> None:
        self.draw_offered_by = None

    # --- RESULT ---
    def result_token(self) -> str:
        """PGN result: 1-0, 0-1, 1/2-1/2, or * while the game is still going"""
        if self.state in (GameState.DRAW, GameState.STALEMATE):
            return "1/2-1/2"
        winner = self.winner
        if winner == Color.WHITE.display_name:
            return "1-0"
        if winner == Color.BLACK.display_name:
            return "0-1"
        return "*"

    # --- CHECKS FOR ENDING THE GAME ---
    def is_in_check(self, color: Color) -> bool:
        return self.board.is_check(color)

    def has_legal_move(self, color: Color) -> bool:
        """Stops at the first candidate move that does not leave your king in check"""
        for square in self.board.squares_of(color):
            for move in self.board.candidate_moves(square):
                if not self.board.simulate_move_and_detect_self_check(move, color):
                    return True
        return False

    def _update_game_state(self) -> None:
        """Performs checks to see if game has ended and changes state accordingly.

        NOTE the turn has already been passed on. At this point the current player is the opponent of the player who just moved.
        """
        if self.board.locate_king(self.current_player) is None:
            return

        in_check = self.is_in_check(self.current_player)
        can_move = self.has_legal_move(self.current_player)
        if in_check and not can_move:
            self._change_state(GameState.CHECKMATE)
        elif in_check:
            self._change_state(GameState.CHECK)
        elif not can_move:
            self._change_state(GameState.STALEMATE)
        else:
            self._change_state(GameState.ONGOING)

    def _change_state(self, new_state: GameState) -> None:
        if new_state != self.state:
            logger.debug("Game state %s -> %s", self.state.name, new_state.name)
        self.state = new_state


def _color_from_name(name: str) -> Color:
    if name.upper() not in Color.__members__:
        raise GameStateError(
            f"Invalid color: {name!r}. Pick one from {','.join([c.name.lower() for c in Color])}"
        )
    return Color[name.upper()]
