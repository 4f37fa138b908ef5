"""
Mediaboard · Movies
===================

Endpoints
---------
- GET    /movies                 : Search/filter/sort/paginate (X-Total-Count)
- GET    /movies/{movie_id}      : Fetch one movie
- POST   /movies                 : Create from JSON (201 + Location)
- POST   /movies/upload          : Create from multipart with optional poster
- PUT    /movies/{movie_id}      : Update metadata
- PUT    /movies/{movie_id}/image: Replace the poster (multipart field `image`)
- DELETE /movies/{movie_id}      : Delete movie and its poster (best effort)

List parameters
---------------
`search` (title contains), `genre` (genre contains), `sort` (`title`|`rating`),
`order` (`desc` or ascending), `page` (≥1), `pageSize` (1..50, default 9).
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
from mediaboard.schemas.movies import MovieIn, MovieOut
from mediaboard.services.descriptors import MOVIES
from mediaboard.services.query_engine import ListParams
from mediaboard.services.resource_service import ResourceService

router = APIRouter()

movie_service = resource_service(MOVIES)


# ─────────────────────────────────────────────────────────────────────────────
# 📋 List / get
# ─────────────────────────────────────────────────────────────────────────────
@router.get("", response_model=List[MovieOut], summary="List movies")
@rate_limit()
async def list_movies(
    request: Request,
    response: Response,
    search: Optional[str] = Query(None, description="Case-insensitive title substring"),
    genre: Optional[str] = Query(None, description="Case-insensitive genre substring"),
    sort: Optional[str] = Query(None, description="title | rating"),
    order: Optional[str] = Query(None, description="desc for descending, anything else ascending"),
    page: Optional[int] = Query(None, description="1-based page (default 1)"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="1..50 (default 9)"),
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(movie_service),
):
    rows, total = await service.list(
        db,
        ListParams(search=search, genre=genre, sort=sort, order=order, page=page, page_size=page_size),
    )
    set_total_count_header(response, total)
    return [MovieOut.model_validate(r) for r in rows]


@router.get("/{movie_id}", response_model=MovieOut, summary="Get movie by id")
@rate_limit()
async def get_movie(
    movie_id: int,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(movie_service),
):
    return MovieOut.model_validate(await service.get(db, movie_id))


# ─────────────────────────────────────────────────────────────────────────────
# ➕ Create
# ─────────────────────────────────────────────────────────────────────────────
@router.post("", response_model=MovieOut, status_code=status.HTTP_201_CREATED, summary="Create movie (JSON)")
@rate_limit(WRITE_LIMIT)
async def create_movie(
    payload: MovieIn,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(movie_service),
    settings: Settings = Depends(get_settings),
):
    movie = await service.create(db, payload.model_dump())
    set_location_header(response, settings, MOVIES, movie.id)
    return MovieOut.model_validate(movie)


@router.post(
    "/upload",
    response_model=MovieOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create movie with optional poster (multipart)",
)
@rate_limit(WRITE_LIMIT)
async def create_movie_with_image(
    request: Request,
    response: Response,
    title: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    rating: Optional[int] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(movie_service),
    store: ImageStore = Depends(get_image_store),
    settings: Settings = Depends(get_settings),
):
    """The poster is validated and stored before the movie row is written."""
    movie = await service.create(
        db,
        {"title": title, "genre": genre, "rating": rating, "description": description},
        image=image,
        store=store,
    )
    set_location_header(response, settings, MOVIES, movie.id)
    return MovieOut.model_validate(movie)


# ─────────────────────────────────────────────────────────────────────────────
# ✏️ Update
# ─────────────────────────────────────────────────────────────────────────────
@router.put("/{movie_id}", response_model=MovieOut, summary="Update movie metadata")
@rate_limit(WRITE_LIMIT)
async def update_movie(
    movie_id: int,
    payload: MovieIn,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(movie_service),
):
    """
    `title` is always replaced; `genre`, `description`, `rating` and
    `posterImageUrl` are kept when omitted or blank.
    """
    return MovieOut.model_validate(await service.update_metadata(db, movie_id, payload.model_dump()))


@router.put("/{movie_id}/image", response_model=MovieOut, summary="Replace movie poster")
@rate_limit(WRITE_LIMIT)
async def update_movie_image(
    movie_id: int,
    request: Request,
    response: Response,
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(movie_service),
    store: ImageStore = Depends(get_image_store),
):
    return MovieOut.model_validate(await service.update_image(db, movie_id, image, store))


# ─────────────────────────────────────────────────────────────────────────────
# 🗑️ Delete
# ─────────────────────────────────────────────────────────────────────────────
@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete movie")
@rate_limit(WRITE_LIMIT)
async def delete_movie(
    movie_id: int,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    service: ResourceService = Depends(movie_service),
    store: ImageStore = Depends(get_image_store),
):
    await service.delete(db, movie_id, store)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
