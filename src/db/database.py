"""Generate database session"""

from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings, get_settings
from src.db.schema import Base


def build_engine(settings: Optional[Settings] = None) -> Engine:
    settings = settings or get_settings()
    connect_args = (
        {"check_same_thread": False}
        if settings.database_url.startswith("sqlite")
        else {}
    )
    return create_engine(
        settings.database_url, echo=settings.database_echo, connect_args=connect_args
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Ensure all tables are created, then hand out sessions bound to the engine"""
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)


def get_db(
    session_factory: Optional[sessionmaker[Session]] = None,
) -> Generator[Session, None, None]:
    """One session per unit of work. Closed again when the caller is done with it."""
    session_factory = session_factory or build_session_factory(build_engine())
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
