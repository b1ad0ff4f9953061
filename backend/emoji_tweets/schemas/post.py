from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .user import AuthorRead


class PostCreate(BaseModel):
    # Content rules are enforced by the service after the rate limit check.
    content: str


class PostRead(BaseModel):
    id: str
    author_id: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class EnrichedPost(BaseModel):
    post: PostRead
    author: AuthorRead

    model_config = ConfigDict(from_attributes=True)
