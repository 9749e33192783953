import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Annotated

from fastapi import Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, Session, create_engine

from config import get_settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool.
        return {"check_same_thread": False}
    return {}


settings = get_settings()

engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    connect_args=_connect_args(settings.database_url),
)


def create_db_and_tables() -> None:
    """Create all tables in the database if they don't exist."""
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_session)]


@contextmanager
def store_errors(session: Session, message: str) -> Iterator[None]:
    """Turn any store failure inside the block into a logged, generic 500."""
    try:
        yield
    except SQLAlchemyError:
        logger.exception(message)
        session.rollback()
        raise HTTPException(status_code=500, detail=message)
