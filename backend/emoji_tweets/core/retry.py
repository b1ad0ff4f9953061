import logging
import time
from typing import Callable, Tuple, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def retry_with_backoff(
    operation: Callable[[], T],
    *,
    attempts: int = 3,
    delay: float = 0.1,
    backoff: float = 2.0,
    exceptions: Tuple[type, ...] = (Exception,),
) -> T:
    """Execute `operation` with simple exponential backoff.

    Only use for idempotent reads; writes must not be replayed.
    """
    attempts = max(1, attempts)
    for attempt in range(attempts):
        try:
            return operation()
        except exceptions as exc:  # type: ignore[misc]
            if attempt == attempts - 1:
                raise
            logger.warning("Retrying after %s (attempt %s/%s)", exc, attempt + 1, attempts)
            time.sleep(delay)
            delay *= backoff
    raise AssertionError("unreachable")
