import logging
from typing import Callable, List, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import StorageError
from ..core.retry import retry_with_backoff
from ..db import models
from ..db.session import rollback_on_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _recent_first():
    # id breaks ties between equal timestamps.
    return (models.Post.created_at.desc(), models.Post.id.desc())


class PostStore:
    """Post rows over a SQLAlchemy session. Reads are retried, inserts are not."""

    def __init__(self, db: Session):
        self.db = db

    def _read(self, query: Callable[[], T]) -> T:
        try:
            return retry_with_backoff(
                lambda: rollback_on_error(self.db, query),
                attempts=settings.read_retry_attempts,
                delay=settings.read_retry_delay_seconds,
                exceptions=(SQLAlchemyError,),
            )
        except SQLAlchemyError as exc:
            logger.error("Post query failed: %s", exc)
            raise StorageError("Failed to load posts") from exc

    def insert(self, author_id: str, content: str) -> models.Post:
        post = models.Post(author_id=author_id, content=content)
        try:
            self.db.add(post)
            self.db.commit()
            self.db.refresh(post)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to store post for author_id=%s: %s", author_id, exc)
            raise StorageError("Failed to store post") from exc
        return post

    def get(self, post_id: str) -> Optional[models.Post]:
        return self._read(lambda: self.db.get(models.Post, post_id))

    def list_recent(self, limit: int) -> List[models.Post]:
        return self._read(
            lambda: self.db.query(models.Post).order_by(*_recent_first()).limit(limit).all()
        )

    def list_by_author(self, author_id: str, limit: int) -> List[models.Post]:
        return self._read(
            lambda: (
                self.db.query(models.Post)
                .filter(models.Post.author_id == author_id)
                .order_by(*_recent_first())
                .limit(limit)
                .all()
            )
        )
