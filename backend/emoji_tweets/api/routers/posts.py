from typing import List

from fastapi import APIRouter, Depends, status

from ...api.deps import get_current_user_id, get_post_service
from ...db import models
from ...schemas.post import EnrichedPost, PostCreate, PostRead
from ...services.post_service import PostService

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    current_user_id: str = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
) -> models.Post:
    return service.create(current_user_id, payload.content)


@router.get("/", response_model=List[EnrichedPost])
async def list_posts(service: PostService = Depends(get_post_service)) -> List[EnrichedPost]:
    return service.get_all()


@router.get("/author/{user_id}", response_model=List[EnrichedPost])
async def list_posts_by_author(
    user_id: str, service: PostService = Depends(get_post_service)
) -> List[EnrichedPost]:
    return service.get_by_author(user_id)


@router.get("/{post_id}", response_model=EnrichedPost)
async def read_post(post_id: str, service: PostService = Depends(get_post_service)) -> EnrichedPost:
    return service.get_by_id(post_id)
