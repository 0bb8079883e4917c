"""Requests and Response models"""

from typing import Optional, Self
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator

from src.chess.square import is_valid_square
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, PieceType, Status

PlayerName = str
SANMove = str


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    white_player: PlayerName = "White"
    black_player: PlayerName = "Black"
    tags: Optional[dict[str, str]] = None

    @field_validator("white_player", "black_player")
    @classmethod
    def validate_player_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("Player name cannot be empty.")
        # NOTE: names end up between double quotes in a PGN tag
        if '"' in value:
            raise InvalidRequestError(
                f"Player name {value!r} cannot contain double quotes."
            )
        return value


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    color: Optional[Color] = None  # default: the player to move


class MoveRequest(BaseModel):
    """
    A move is given either by its coordinates (from_square + to_square, optionally promote_to), or as SAN (ex. Nf3, exd5, O-O).
    """

    game_id: UUID
    from_square: Optional[str] = None
    to_square: Optional[str] = None
    promote_to: Optional[PieceType] = None
    san: Optional[SANMove] = None

    @field_validator("from_square", "to_square")
    @classmethod
    def validate_square(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip().lower()
        if not is_valid_square(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value

    @field_validator("san")
    @classmethod
    def validate_san(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise InvalidRequestError("SAN move cannot be empty.")
        return value

    @model_validator(mode="after")
    def validate_move_given_once(self) -> Self:
        has_coordinates = self.from_square is not None or self.to_square is not None
        if self.san is not None and has_coordinates:
            raise InvalidRequestError("Give the move as SAN or as squares, not both.")
        if self.san is None and (self.from_square is None or self.to_square is None):
            raise InvalidRequestError(
                "Move needs both from_square and to_square (or a SAN move)."
            )
        return self


class ResignRequest(BaseModel):
    game_id: UUID
    color: Optional[Color] = None  # default: the player to move


class DrawRequest(BaseModel):
    game_id: UUID


class ImportPGNRequest(BaseModel):
    pgn_text: str

    @field_validator("pgn_text")
    @classmethod
    def validate_pgn_text(cls, value: str) -> str:
        if not value.strip():
            raise InvalidRequestError("PGN text cannot be empty.")
        return value


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    state: Status
    current_player: Color
    move_history: list[SANMove]
    winner: Optional[str] = None
    draw_offered_by: Optional[Color] = None
    tags: dict[str, str] = {}


class LegalMovesResponse(BaseModel):
    game_id: UUID
    color: Color
    legal_moves: list[str]  # coordinate notation: e2e4, e7e8q


class PGNResponse(BaseModel):
    game_id: UUID
    pgn_text: str
