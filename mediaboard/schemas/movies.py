from __future__ import annotations

from typing import Optional

from pydantic import Field

from mediaboard.schemas.base import CamelModel, RecordOut


class MovieIn(CamelModel):
    """JSON body for create and metadata update; presence rules live in the service."""

    title: Optional[str] = None
    genre: Optional[str] = None
    rating: Optional[int] = Field(None, description="1..5")
    poster_image_url: Optional[str] = None
    description: Optional[str] = None


class MovieOut(RecordOut):
    title: str
    genre: Optional[str] = None
    rating: Optional[int] = None
    poster_image_url: Optional[str] = None
    description: Optional[str] = None
