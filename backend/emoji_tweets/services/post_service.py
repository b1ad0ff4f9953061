"""
Post service: the create pipeline and the enriched read paths.

create runs strictly in order: rate limit, content rules, insert. Reads
load at most ``page_size`` posts newest first and enrich them in one
directory call.
"""
import logging
from typing import List

from ..core.config import settings
from ..core.errors import InvalidContentError, NotFoundError
from ..db import models
from ..schemas.post import EnrichedPost
from .directory import IdentityDirectory
from .enrichment import enrich_posts
from .post_store import PostStore
from .rate_limit import RateLimiter
from .validator import validate_content

logger = logging.getLogger(__name__)


class PostService:
    def __init__(
        self,
        store: PostStore,
        rate_limiter: RateLimiter,
        directory: IdentityDirectory,
        page_size: int | None = None,
    ):
        self.store = store
        self.rate_limiter = rate_limiter
        self.directory = directory
        self.page_size = page_size or settings.feed_page_size

    def create(self, caller_identity_id: str, content: str) -> models.Post:
        if not caller_identity_id:
            raise ValueError("caller_identity_id is required")
        self.rate_limiter.try_acquire(caller_identity_id)
        try:
            validate_content(content)
        except InvalidContentError as exc:
            logger.info("Rejected post from author_id=%s: %s", caller_identity_id, exc)
            raise
        post = self.store.insert(author_id=caller_identity_id, content=content)
        logger.info("Created post_id=%s author_id=%s", post.id, post.author_id)
        return post

    def get_all(self) -> List[EnrichedPost]:
        return enrich_posts(self.store.list_recent(self.page_size), self.directory)

    def get_by_id(self, post_id: str) -> EnrichedPost:
        post = self.store.get(post_id)
        if post is None:
            raise NotFoundError("Post", post_id)
        return enrich_posts([post], self.directory)[0]

    def get_by_author(self, author_id: str) -> List[EnrichedPost]:
        return enrich_posts(self.store.list_by_author(author_id, self.page_size), self.directory)
