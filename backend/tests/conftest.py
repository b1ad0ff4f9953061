import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["IDENTITY_DIRECTORY_URL"] = ""
os.environ["READ_RETRY_DELAY_SECONDS"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Sequence

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from emoji_tweets.api.deps import get_identity_directory, get_rate_limiter
from emoji_tweets.core.security import create_access_token
from emoji_tweets.db import models
from emoji_tweets.db.base import Base
from emoji_tweets.db.session import get_db
from emoji_tweets.main import app
from emoji_tweets.schemas.user import AuthorProfile
from emoji_tweets.services.rate_limit import InMemoryRateLimiter


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeIdentityDirectory:
    """Directory backed by a dict; records every batch it is asked for."""

    def __init__(self, profiles: Sequence[AuthorProfile] = ()):
        self.profiles: Dict[str, AuthorProfile] = {p.id: p for p in profiles}
        self.calls: List[List[str]] = []

    def add(self, user_id: str, username: str | None, image: str = "") -> None:
        self.profiles[user_id] = AuthorProfile(
            id=user_id,
            username=username,
            profile_image_url=image or f"https://img.example.com/{user_id}.png",
        )

    def resolve_batch(self, ids, limit=100):
        self.calls.append(list(ids))
        return [self.profiles[i] for i in ids if i in self.profiles][:limit]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(clock):
    return InMemoryRateLimiter(limit=3, window_seconds=60, clock=clock)


@pytest.fixture
def directory():
    directory = FakeIdentityDirectory()
    directory.add("U1", "alice")
    directory.add("U2", "bob")
    return directory


@pytest.fixture
def client(db_session, rate_limiter, directory):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_identity_directory] = lambda: directory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def add_post(db, author_id: str, content: str = "😀", created_at: datetime | None = None, post_id: str | None = None):
    post = models.Post(author_id=author_id, content=content)
    if created_at is not None:
        post.created_at = created_at
    if post_id is not None:
        post.id = post_id
    db.add(post)
    db.commit()
    return post


def minutes_ago(minutes: int) -> datetime:
    return datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=minutes)


@pytest.fixture
def file_session(tmp_path):
    """Session on a file database, so a dropped connection can reconnect to the same data."""
    engine = create_engine(f"sqlite:///{tmp_path / 'posts.db'}")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def fail_next_select(session) -> list:
    """Make the next SELECT on ``session``'s engine fail as a lost connection would."""
    failures = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT") and not failures:
            failures.append(statement)
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")

    event.listen(session.get_bind(), "before_cursor_execute", before_cursor_execute)
    return failures
