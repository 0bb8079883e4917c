"""Unit tests for src/core/config.py"""

import pytest

from src.core.config import Settings, get_settings
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import PieceType


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in [
        "CHESS_DATABASE_URL",
        "CHESS_LOG_LEVEL",
        "CHESS_DEFAULT_PROMOTION",
        "CHESS_PGN_EVENT",
    ]:
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.database_url.startswith("sqlite")
    assert settings.database_echo is False
    assert settings.log_level == "INFO"
    assert settings.default_promotion == PieceType.QUEEN
    assert settings.pgn_event == "Casual Game"


def test_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHESS_DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("CHESS_LOG_LEVEL", "debug")
    monkeypatch.setenv("CHESS_DEFAULT_PROMOTION", "rook")
    settings = Settings(_env_file=None)
    assert settings.database_url == "sqlite:///:memory:"
    assert settings.log_level == "DEBUG"
    assert settings.default_promotion == PieceType.ROOK


@pytest.mark.parametrize("piece_type", [PieceType.KING, PieceType.PAWN])
def test_cannot_promote_into(piece_type: PieceType) -> None:
    with pytest.raises(InvalidRequestError):
        _ = Settings(_env_file=None, default_promotion=piece_type)


def test_get_settings_is_cached() -> None:
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()
