"""
Identity directory: resolves identity ids to public author profiles.

Profiles are owned by the identity provider. ``DatabaseIdentityDirectory``
reads the ``users`` table the provider keeps in sync, and
``HttpIdentityDirectory`` asks the provider's user list endpoint directly.
"""

from __future__ import annotations

import logging
from typing import List, Protocol, Sequence

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import IdentityDirectoryError
from ..core.retry import retry_with_backoff
from ..db import models
from ..db.session import rollback_on_error
from ..schemas.user import AuthorProfile

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 100


class IdentityDirectory(Protocol):
    def resolve_batch(self, ids: Sequence[str], limit: int = MAX_BATCH_SIZE) -> List[AuthorProfile]:
        ...


class DatabaseIdentityDirectory:
    def __init__(self, db: Session):
        self.db = db

    def _query(self, ids: Sequence[str], limit: int) -> List[models.User]:
        return (
            self.db.query(models.User)
            .filter(models.User.id.in_(list(ids)))
            .limit(limit)
            .all()
        )

    def resolve_batch(self, ids: Sequence[str], limit: int = MAX_BATCH_SIZE) -> List[AuthorProfile]:
        if not ids:
            return []
        try:
            users = retry_with_backoff(
                lambda: rollback_on_error(self.db, lambda: self._query(ids, limit)),
                attempts=settings.read_retry_attempts,
                delay=settings.read_retry_delay_seconds,
                exceptions=(SQLAlchemyError,),
            )
        except SQLAlchemyError as exc:
            logger.error("Identity lookup failed for %s ids: %s", len(ids), exc)
            raise IdentityDirectoryError("Identity directory unavailable") from exc
        return [AuthorProfile.model_validate(user) for user in users]


def _parse_profile(item: dict) -> AuthorProfile:
    return AuthorProfile(
        id=str(item["id"]),
        username=item.get("username"),
        profile_image_url=item.get("profile_image_url") or item.get("image_url") or "",
    )


class HttpIdentityDirectory:
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http_session = session or requests.Session()
        self.http_session.headers.update({"Accept": "application/json"})
        if api_key:
            self.http_session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _get_users(self, ids: Sequence[str], limit: int) -> list:
        response = self.http_session.get(
            f"{self.base_url}/users",
            params={"user_id": list(ids), "limit": limit},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def resolve_batch(self, ids: Sequence[str], limit: int = MAX_BATCH_SIZE) -> List[AuthorProfile]:
        if not ids:
            return []
        try:
            payload = retry_with_backoff(
                lambda: self._get_users(ids, limit),
                attempts=settings.read_retry_attempts,
                delay=settings.read_retry_delay_seconds,
                exceptions=(requests.ConnectionError, requests.Timeout),
            )
            return [_parse_profile(item) for item in payload]
        except requests.RequestException as exc:
            logger.error("Identity directory request failed: %s", exc)
            raise IdentityDirectoryError("Identity directory unavailable") from exc
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Identity directory returned an unexpected payload: %s", exc)
            raise IdentityDirectoryError("Identity directory returned an invalid response") from exc
