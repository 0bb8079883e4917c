"""Application settings, read from environment variables prefixed with CHESS_ (or a .env file)."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import PROMOTION_CHOICES, PieceType


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHESS_", env_file=".env", extra="ignore"
    )

    # Database
    database_url: str = "sqlite:///./chess_games.db"
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"

    # Rules: what a pawn turns into if the caller did not (properly) choose
    default_promotion: PieceType = PieceType.QUEEN

    # PGN export defaults (Seven Tag Roster)
    pgn_event: str = "Casual Game"
    pgn_site: str = "Local"
    pgn_round: str = "1"

    @field_validator("default_promotion")
    @classmethod
    def validate_default_promotion(cls, value: PieceType) -> PieceType:
        if value not in PROMOTION_CHOICES:
            raise InvalidRequestError(
                f"Cannot promote into {value!r}. Pick one from {','.join(PROMOTION_CHOICES)}"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
