from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AuthorProfile(BaseModel):
    """Profile returned by the identity directory.

    ``username`` may be missing; such a profile counts as unresolved.
    """

    id: str
    username: str | None = None
    profile_image_url: str = ""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class AuthorRead(AuthorProfile):
    username: str = Field(min_length=1)
