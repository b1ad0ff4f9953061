from typing import Callable, Iterator, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.config import settings

T = TypeVar("T")


def _connect_args(url: str) -> dict:
    if url.startswith("postgresql"):
        timeout_ms = int(settings.external_call_timeout_seconds * 1000)
        return {
            "connect_timeout": max(1, int(settings.external_call_timeout_seconds)),
            "options": f"-c statement_timeout={timeout_ms}",
        }
    return {}


engine = create_engine(
    settings.create_postgres_url(),
    connect_args=_connect_args(settings.create_postgres_url()),
    pool_pre_ping=True,
    future=True,
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def rollback_on_error(db: Session, query: Callable[[], T]) -> T:
    """Run ``query``; on a database error roll ``db`` back before re-raising.

    A failed statement leaves the session's transaction unusable, so a retried
    read has to start from a clean transaction.
    """
    try:
        return query()
    except SQLAlchemyError:
        db.rollback()
        raise
