"""
Exception classes raised by the post pipeline.

Every error carries a machine readable ``code`` and the HTTP status the API
layer answers with. Only client-facing kinds (``expose = True``) show their
message to the caller; the rest collapse to a generic failure.
"""
from typing import Any, Dict


GENERIC_FAILURE_MESSAGE = "Something went wrong, please try again later"


class EmojiTweetsError(Exception):
    """Base exception class for the service"""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500
    expose = False
    headers: Dict[str, str] = {}

    def __init__(self, message: str = "", code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code

    @property
    def public_message(self) -> str:
        return str(self) if self.expose else GENERIC_FAILURE_MESSAGE

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the error body returned to clients"""
        return {"code": self.code, "message": self.public_message}


class InvalidContentError(EmojiTweetsError):
    """Raised when a post body breaks one of the content rules"""

    code = "BAD_REQUEST"
    status_code = 400
    expose = True


class UnauthenticatedError(EmojiTweetsError):
    """Raised when a request that needs a caller has no valid bearer token"""

    code = "UNAUTHORIZED"
    status_code = 401
    expose = True
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, message: str = "Could not validate credentials", code: str | None = None):
        super().__init__(message, code)


class RateLimitError(EmojiTweetsError):
    """Raised when an identity exceeded its post creation window"""

    code = "TOO_MANY_REQUESTS"
    status_code = 429
    expose = True

    def __init__(self, message: str = "You are posting too fast, slow down", code: str | None = None):
        super().__init__(message, code)


class RateLimiterUnavailableError(RateLimitError):
    """Raised when the shared rate limit backend cannot be reached"""

    code = "RATE_LIMITER_UNAVAILABLE"
    status_code = 503
    expose = False


class NotFoundError(EmojiTweetsError):
    """Raised when a requested post does not exist"""

    code = "NOT_FOUND"
    status_code = 404
    expose = True

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id '{resource_id}' not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class EnrichmentError(EmojiTweetsError):
    """Raised when a stored post references an author that cannot be resolved"""

    def __init__(self, message: str = "Author for the post was not found", code: str | None = None):
        super().__init__(message, code)


class IdentityDirectoryError(EnrichmentError):
    """Raised when the identity directory call itself fails"""


class StorageError(EmojiTweetsError):
    """Raised when the post store fails"""
