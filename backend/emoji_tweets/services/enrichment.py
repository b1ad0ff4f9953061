import logging
from typing import Dict, List, Sequence

from ..core.errors import EnrichmentError
from ..db import models
from ..schemas.post import EnrichedPost, PostRead
from ..schemas.user import AuthorProfile, AuthorRead
from .directory import MAX_BATCH_SIZE, IdentityDirectory

logger = logging.getLogger(__name__)


def enrich_posts(posts: Sequence[models.Post], directory: IdentityDirectory) -> List[EnrichedPost]:
    """Attach author profiles to ``posts``, keeping their order.

    One directory call per batch. If any post's author is missing or has no
    username the whole batch fails with EnrichmentError.
    """
    if not posts:
        return []

    author_ids = list(dict.fromkeys(post.author_id for post in posts))
    if len(author_ids) > MAX_BATCH_SIZE:
        raise ValueError(f"Cannot resolve more than {MAX_BATCH_SIZE} authors in one batch")

    profiles = directory.resolve_batch(author_ids, limit=MAX_BATCH_SIZE)
    by_id: Dict[str, AuthorProfile] = {profile.id: profile for profile in profiles}

    enriched = []
    for post in posts:
        author = by_id.get(post.author_id)
        if not author or not author.username:
            logger.error("Author for post_id=%s author_id=%s was not found", post.id, post.author_id)
            raise EnrichmentError()
        enriched.append(
            EnrichedPost(
                post=PostRead.model_validate(post),
                author=AuthorRead(
                    id=author.id,
                    username=author.username,
                    profile_image_url=author.profile_image_url,
                ),
            )
        )
    return enriched
