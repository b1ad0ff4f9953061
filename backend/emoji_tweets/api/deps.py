from functools import lru_cache

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import UnauthenticatedError
from ..core.security import decode_access_token
from ..db.session import get_db
from ..schemas.token import TokenPayload
from ..services.directory import DatabaseIdentityDirectory, HttpIdentityDirectory, IdentityDirectory
from ..services.post_service import PostService
from ..services.post_store import PostStore
from ..services.rate_limit import RateLimiter, build_rate_limiter

# Tokens are issued by the identity provider; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def get_current_user_id(token: str | None = Depends(oauth2_scheme)) -> str:
    if not token:
        raise UnauthenticatedError("Not authenticated")
    try:
        payload = decode_access_token(token)
        token_data = TokenPayload(**payload)
    except (ValueError, ValidationError):
        raise UnauthenticatedError()
    if not token_data.sub:
        raise UnauthenticatedError("Token payload missing user identifier")
    return token_data.sub


@lru_cache
def get_rate_limiter() -> RateLimiter:
    return build_rate_limiter()


@lru_cache
def _http_identity_directory() -> HttpIdentityDirectory:
    return HttpIdentityDirectory(
        settings.identity_directory_url,
        api_key=settings.identity_directory_api_key,
        timeout=settings.external_call_timeout_seconds,
    )


def get_identity_directory(db: Session = Depends(get_db)) -> IdentityDirectory:
    if settings.identity_directory_url:
        return _http_identity_directory()
    return DatabaseIdentityDirectory(db)


def get_post_service(
    db: Session = Depends(get_db),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    directory: IdentityDirectory = Depends(get_identity_directory),
) -> PostService:
    return PostService(PostStore(db), rate_limiter, directory)
