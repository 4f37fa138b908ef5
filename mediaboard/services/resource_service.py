from __future__ import annotations

"""
Resource handler
================

One implementation of list / get / create / update / delete shared by movies
and posts, driven by a `ResourceDescriptor`.

Ordering guarantees
-------------------
- Validation runs before any storage or database side effect.
- A new image is stored before the record that references it is written; if
  the image write fails nothing is persisted.
- The previous image is removed only after its replacement is stored and the
  record points at it. Cleanup is best effort (see `ImageStore.delete`).
- Image put and row write are not transactional; orphans are tolerated.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediaboard.core.config import Settings
from mediaboard.core.exceptions import NotFoundException, RequestValidationFailed
from mediaboard.core.storage import ImageStore, validate_image
from mediaboard.db.base_class import utcnow
from mediaboard.services.descriptors import ResourceDescriptor
from mediaboard.services.query_engine import ListParams, run_list

logger = logging.getLogger(__name__)

RATING_MIN = 1
RATING_MAX = 5


def _clean_text(value: Any) -> Optional[str]:
    """Trimmed string, or None when missing/blank."""
    if value is None:
        return None
    s = str(value).strip()
    return s or None


class ResourceService:
    """Validation → image store → record store orchestration for one resource kind."""

    def __init__(self, descriptor: ResourceDescriptor, settings: Settings) -> None:
        self.desc = descriptor
        self.settings = settings

    # ── Validation ─────────────────────────────────────────────────────────

    def _validate(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Check presence/range rules and return the trimmed required values."""
        cleaned: Dict[str, Any] = {}
        for name in self.desc.required_fields:
            value = _clean_text(payload.get(name))
            if value is None:
                raise RequestValidationFailed(f"{name.capitalize()} is required.", field=name)
            cleaned[name] = value

        if self.desc.has_rating:
            rating = payload.get("rating")
            if rating is not None and not (RATING_MIN <= int(rating) <= RATING_MAX):
                raise RequestValidationFailed(
                    f"Rating must be between {RATING_MIN} and {RATING_MAX}.",
                    field="rating",
                )
        return cleaned

    async def _read_image(self, image: Optional[UploadFile]) -> Optional[Tuple[bytes, str, Optional[str]]]:
        """(data, extension, content type) for a non-empty, valid upload; None when absent/empty."""
        if image is None:
            return None
        data = await image.read()
        if not data:
            return None
        ext = validate_image(
            image.filename,
            len(data),
            max_bytes=self.settings.MAX_IMAGE_BYTES,
            allowed_extensions=self.settings.allowed_image_extensions,
        )
        return data, ext, image.content_type

    # ── Reads ──────────────────────────────────────────────────────────────

    async def list(self, db: AsyncSession, params: ListParams) -> Tuple[List[Any], int]:
        return await run_list(
            db,
            self.desc,
            params,
            default_size=self.settings.DEFAULT_PAGE_SIZE,
            max_size=self.settings.MAX_PAGE_SIZE,
        )

    async def get(self, db: AsyncSession, item_id: int):
        model = self.desc.model
        row = (await db.execute(select(model).where(model.id == item_id))).scalar_one_or_none()
        if row is None:
            raise NotFoundException(self.desc.label, item_id)
        return row

    # ── Writes ─────────────────────────────────────────────────────────────

    async def create(
        self,
        db: AsyncSession,
        payload: Mapping[str, Any],
        *,
        image: Optional[UploadFile] = None,
        store: Optional[ImageStore] = None,
    ):
        """
        Create a record from JSON or multipart input.

        A non-empty `image` is validated and stored first; its URL wins over
        any image URL in the payload.
        """
        values = self._validate(payload)
        upload = await self._read_image(image)

        for name in self.desc.optional_text_fields:
            values[name] = _clean_text(payload.get(name))
        if self.desc.has_rating:
            rating = payload.get("rating")
            values["rating"] = int(rating) if rating is not None else None
        values[self.desc.image_field] = _clean_text(payload.get(self.desc.image_field))

        if upload is not None:
            data, ext, content_type = upload
            values[self.desc.image_field] = await store.put(data, content_type=content_type, extension=ext)

        now = utcnow()
        row = self.desc.model(**values, created_at=now, updated_at=now)
        db.add(row)
        await db.commit()
        logger.info("Created %s id=%s", self.desc.label.lower(), row.id)
        return row

    async def update_metadata(self, db: AsyncSession, item_id: int, payload: Mapping[str, Any]):
        """
        Required fields are always overwritten; optional fields and the image
        URL only when a non-blank value is supplied.
        """
        values = self._validate(payload)
        row = await self.get(db, item_id)

        for name, value in values.items():
            setattr(row, name, value)
        for name in self.desc.optional_text_fields:
            value = _clean_text(payload.get(name))
            if value is not None:
                setattr(row, name, value)
        if self.desc.has_rating and payload.get("rating") is not None:
            row.rating = int(payload["rating"])
        image_url = _clean_text(payload.get(self.desc.image_field))
        if image_url is not None:
            setattr(row, self.desc.image_field, image_url)

        row.updated_at = utcnow()
        await db.commit()
        logger.info("Updated %s id=%s", self.desc.label.lower(), item_id)
        return row

    async def update_image(
        self,
        db: AsyncSession,
        item_id: int,
        image: Optional[UploadFile],
        store: ImageStore,
    ):
        row = await self.get(db, item_id)
        upload = await self._read_image(image)
        if upload is None:
            raise RequestValidationFailed("An image file is required.", field="image")

        data, ext, content_type = upload
        new_url = await store.put(data, content_type=content_type, extension=ext)
        old_url = getattr(row, self.desc.image_field)

        setattr(row, self.desc.image_field, new_url)
        row.updated_at = utcnow()
        await db.commit()

        if old_url and old_url != new_url:
            await store.delete(old_url)
        logger.info("Replaced image of %s id=%s", self.desc.label.lower(), item_id)
        return row

    async def delete(self, db: AsyncSession, item_id: int, store: ImageStore) -> None:
        row = await self.get(db, item_id)
        await store.delete(getattr(row, self.desc.image_field))
        await db.delete(row)
        await db.commit()
        logger.info("Deleted %s id=%s", self.desc.label.lower(), item_id)


__all__ = ["ResourceService", "RATING_MIN", "RATING_MAX"]
