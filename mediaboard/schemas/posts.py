from __future__ import annotations

from typing import Optional

from mediaboard.schemas.base import CamelModel, RecordOut


class PostIn(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class PostOut(RecordOut):
    name: str
    description: str
    image_url: Optional[str] = None
