"""
Mediaboard · Posts
==================

Same surface as movies, for named posts with a required description.

List parameters
---------------
`search` (name contains), `sort` (`asc`|`desc` by name), `time`
(`today`|`week`, alias `this_week`), `page`, `pageSize`.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediaboard.api.http_utils import (
    get_image_store,
    get_settings,
    resource_service,
    set_location_header,
    set_total_count_header,
)
from mediaboard.core.config import Settings
from mediaboard.core.limiter import WRITE_LIMIT, rate_limit
from mediaboard.core.storage import ImageStore
from mediaboard.db.session import get_async_db
from mediaboard.schemas.posts import PostIn, PostOut
from mediaboard.services.descriptors import POSTS
from mediaboard.services.query_engine import ListParams
from mediaboard.services.resource_service import ResourceService

router = APIRouter()

post_service = resource_service(POSTS)


@router.get("", response_model=List[PostOut], summary="List posts")
@rate_limit()
async def list_posts(
    request: Request,
    response: Response,
    search: Optional[str] = Query(None, description="Case-insensitive name substring"),
    sort: Optional[str] = Query(None, description="asc | desc (by name)"),
    time: Optional[str] = Query(None, description="today | week"),
    page: Optional[int] = Query(None),
    page_size: Optional[int] = Query(None, alias="pageSize"),
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(post_service),
):
    rows, total = await service.list(
        db,
        ListParams(search=search, time=time, sort=sort, page=page, page_size=page_size),
    )
    set_total_count_header(response, total)
    return [PostOut.model_validate(r) for r in rows]


@router.get("/{post_id}", response_model=PostOut, summary="Get post by id")
@rate_limit()
async def get_post(
    post_id: int,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(post_service),
):
    return PostOut.model_validate(await service.get(db, post_id))


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED, summary="Create post (JSON)")
@rate_limit(WRITE_LIMIT)
async def create_post(
    payload: PostIn,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(post_service),
    settings: Settings = Depends(get_settings),
):
    post = await service.create(db, payload.model_dump())
    set_location_header(response, settings, POSTS, post.id)
    return PostOut.model_validate(post)


@router.post(
    "/upload",
    response_model=PostOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create post with optional image (multipart)",
)
@rate_limit(WRITE_LIMIT)
async def create_post_with_image(
    request: Request,
    response: Response,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(post_service),
    store: ImageStore = Depends(get_image_store),
    settings: Settings = Depends(get_settings),
):
    post = await service.create(db, {"name": name, "description": description}, image=image, store=store)
    set_location_header(response, settings, POSTS, post.id)
    return PostOut.model_validate(post)


@router.put("/{post_id}", response_model=PostOut, summary="Update post metadata")
@rate_limit(WRITE_LIMIT)
async def update_post(
    post_id: int,
    payload: PostIn,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(post_service),
):
    """`name` and `description` are required and replaced; `imageUrl` only when non-blank."""
    return PostOut.model_validate(await service.update_metadata(db, post_id, payload.model_dump()))


@router.put("/{post_id}/image", response_model=PostOut, summary="Replace post image")
@rate_limit(WRITE_LIMIT)
async def update_post_image(
    post_id: int,
    request: Request,
    response: Response,
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(post_service),
    store: ImageStore = Depends(get_image_store),
):
    return PostOut.model_validate(await service.update_image(db, post_id, image, store))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete post")
@rate_limit(WRITE_LIMIT)
async def delete_post(
    post_id: int,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(post_service),
    store: ImageStore = Depends(get_image_store),
):
    await service.delete(db, post_id, store)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
