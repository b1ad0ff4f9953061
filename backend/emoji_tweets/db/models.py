import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Index, String, Text

from .base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Public profile mirrored from the identity provider."""

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    username = Column(String(255))
    profile_image_url = Column(String(1024), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint("author_id <> ''", name="posts_author_id_not_empty"),
        Index("ix_posts_created_at_id", "created_at", "id"),
        Index("ix_posts_author_id_created_at", "author_id", "created_at"),
    )

    id = Column(String(64), primary_key=True, default=_new_id)
    # Identity ids live in the external provider, so there is no foreign key.
    author_id = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
