"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from typing import Optional
from uuid import UUID

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    DrawRequest,
    GameResponse,
    GetGameRequest,
    ImportPGNRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    PGNResponse,
    ResignRequest,
)
from src.chess import pgn
from src.chess.game import Game
from src.chess.moves import Move
from src.chess.pieces import Color as PieceColor
from src.chess.pieces import PieceType as DomainPieceType
from src.chess.san import resolve_san
from src.chess.square import Square
from src.core.config import Settings, get_settings
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    InvalidMoveNotationError,
    InvalidPGNError,
    RepositoryError,
)
from src.core.models import GameModel
from src.core.shared_types import Color, PieceType, Status
from src.db.repository import GameRepository

logger = logging.getLogger(__name__)


class ChessService:
    """Orchestration of layers for chess game."""

    def __init__(
        self, repository: GameRepository, settings: Optional[Settings] = None
    ) -> None:
        self.repo = repository
        self.settings = settings or get_settings()

    @property
    def default_promotion(self) -> DomainPieceType:
        return _to_domain_piece_type(self.settings.default_promotion)

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Set up a game in the starting position, with the Seven Tag Roster filled in (extra tags on top)."""

        tags = pgn.default_tags(
            white=request.white_player,
            black=request.black_player,
            event=self.settings.pgn_event,
            site=self.settings.pgn_site,
            round_=self.settings.pgn_round,
        )
        tags.update(request.tags or {})
        new_game = Game.new_game(tags=tags, default_promotion=self.default_promotion)

        _, game_id = self.repo.create_game(new_game.to_model())
        logger.info(
            "Created game %s: %s vs %s", game_id, tags["White"], tags["Black"]
        )
        return self._create_game_response(game_id, new_game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        game = self._load_game(request.game_id)
        return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Legal moves (coordinate notation) for the requested color, by default the player to move."""
        game = self._load_game(request.game_id)
        color = (
            _to_domain_color(request.color)
            if request.color is not None
            else game.current_player
        )
        legal_moves = [] if game.is_over else game.legal_moves(color)
        return LegalMovesResponse(
            game_id=request.game_id,
            color=_to_shared_color(color),
            legal_moves=[move.to_uci() for move in legal_moves],
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt, given as coordinates or as SAN, for the player to move."""

        game = self._load_game(request.game_id)
        if game.is_over:
            raise GameStateError(
                f"Game {request.game_id} is over ({game.state.name.lower()}): no more moves allowed."
            )

        move = self._parse_move(request, game)
        if not game.make_move(move):
            raise IllegalMoveError(
                f"{move} is not a legal move for {game.current_player.display_name}."
            )

        self._store(request.game_id, game)
        logger.info(
            "Game %s: played %s, state is now %s",
            request.game_id,
            game.move_history[-1],
            game.state.name.lower(),
        )
        return self._create_game_response(request.game_id, game)

    def resign(self, request: ResignRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        color = _to_domain_color(request.color) if request.color is not None else None
        if not game.resign(color):
            raise GameStateError(f"Game {request.game_id} is already over.")
        self._store(request.game_id, game)
        logger.info(
            "Game %s: %s resigned",
            request.game_id,
            game.resigned_by.display_name if game.resigned_by else "?",
        )
        return self._create_game_response(request.game_id, game)

    # -- Draw offer handshake --
    def offer_draw(self, request: DrawRequest) -> GameResponse:
        """The player to move offers a draw."""
        game = self._load_game(request.game_id)
        if not game.offer_draw():
            raise GameStateError(f"Game {request.game_id} is already over.")
        self._store(request.game_id, game)
        return self._create_game_response(request.game_id, game)

    def accept_draw(self, request: DrawRequest) -> GameResponse:
        """The player to move accepts the opponent's offer."""
        game = self._load_game(request.game_id)
        if not game.accept_draw():
            raise GameStateError(
                f"Game {request.game_id}: no draw offer from the opponent to accept."
            )
        self._store(request.game_id, game)
        logger.info("Game %s: drawn by agreement", request.game_id)
        return self._create_game_response(request.game_id, game)

    def decline_draw(self, request: DrawRequest) -> GameResponse:
        game = self._load_game(request.game_id)
        if not game.draw_offered:
            raise GameStateError(f"Game {request.game_id}: no draw offer to decline.")
        game.decline_draw()
        self._store(request.game_id, game)
        return self._create_game_response(request.game_id, game)

    # -- PGN --
    def export_pgn(self, request: GetGameRequest) -> PGNResponse:
        game = self._load_game(request.game_id)
        pgn_text = pgn.export_game(game)
        logger.info("Exported game %s (%d moves)", request.game_id, len(game.move_history))
        return PGNResponse(game_id=request.game_id, pgn_text=pgn_text)

    def import_pgn(self, request: ImportPGNRequest) -> GameResponse:
        """Replay a PGN game and store it as a new game. Nothing is stored if any move fails to replay."""
        game = pgn.load_game(request.pgn_text, self.default_promotion)
        if game is None:
            raise InvalidPGNError("PGN moves could not be replayed from the starting position.")

        # NOTE: keep the tags from the file, fill in the missing roster entries
        tags = pgn.default_tags(
            event=self.settings.pgn_event,
            site=self.settings.pgn_site,
            round_=self.settings.pgn_round,
        )
        tags.update(game.tags)
        tags["Result"] = game.result_token()
        game.tags = tags

        _, game_id = self.repo.create_game(game.to_model())
        logger.info("Imported game %s with %d moves", game_id, len(game.move_history))
        return self._create_game_response(game_id, game)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _parse_move(self, request: MoveRequest, game: Game) -> Move:
        if request.san is not None:
            move = resolve_san(game.board, request.san, game.current_player)
            if move is None:
                raise InvalidMoveNotationError(
                    f"{request.san!r} does not describe a legal move for {game.current_player.display_name}."
                )
            return move

        # MoveRequest validation guarantees both squares are given in algebraic notation
        assert request.from_square is not None and request.to_square is not None
        promote_to = (
            _to_domain_piece_type(request.promote_to)
            if request.promote_to is not None
            else None
        )
        return Move(
            Square.from_algebraic(request.from_square),
            Square.from_algebraic(request.to_square),
            promote_to,
        )

    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        """Convert the game into a GameResponse (for game with given ID.)"""
        return GameResponse(
            game_id=game_id,
            state=Status(game.state.name.lower()),
            current_player=_to_shared_color(game.current_player),
            move_history=list(game.move_history),
            winner=game.winner,
            draw_offered_by=(
                _to_shared_color(game.draw_offered_by)
                if game.draw_offered_by
                else None
            ),
            tags=dict(game.tags),
        )

    def _load_game(self, game_id: UUID) -> Game:
        return Game.from_model(self._fetch_game(game_id), self.default_promotion)

    def _store(self, game_id: UUID, game: Game) -> GameModel:
        stored = self.repo.update_game(game_id, game.to_model())
        if stored is None:
            raise RepositoryError(f"Game with {game_id=} could not be updated.")
        return stored

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model


# -- Conversions between the string types of the outer layers and the domain enums --
def _to_domain_color(color: Color) -> PieceColor:
    return PieceColor[color.name]


def _to_shared_color(color: PieceColor) -> Color:
    return Color[color.name]


def _to_domain_piece_type(piece_type: PieceType) -> DomainPieceType:
    return DomainPieceType[piece_type.name]
