from __future__ import annotations

"""
Mediaboard • Image Storage
==========================

Pluggable blob backend for poster and post images, resolved once at startup
by `build_image_store(settings)` and kept on `app.state.image_store`.

Backends
--------
- `FilesystemImageStore`: files under `IMAGES_DIR`, served by the static mount
  at `IMAGES_URL_PREFIX` (`/images/<file>`).
- `S3ImageStore`: S3-compatible bucket, objects written `public-read`; URLs are
  `<public base>/<file>`. Leftover `/images/...` references from filesystem
  mode are still cleaned out of the local directory.

Object naming
-------------
Every stored image gets a fresh opaque name, `uuid4().hex` + the lower-cased
original extension, so uploads never collide and never reuse client names.

Failure model
-------------
- `put` raises `StorageError` (the request fails, nothing is persisted).
- `delete` never raises; failures are logged at WARNING and the orphan stays.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional
from urllib.parse import urlsplit
from uuid import uuid4

from mediaboard.core.config import Settings
from mediaboard.core.exceptions import RequestValidationFailed, StorageError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


# ─────────────────────────────────────────────────────────────────────────────
# 🧪 Validation & naming
# ─────────────────────────────────────────────────────────────────────────────

def image_extension(filename: Optional[str]) -> str:
    """Lower-cased extension including the dot ('' when absent)."""
    return PurePosixPath(filename or "").suffix.lower()


def validate_image(
    filename: Optional[str],
    size: int,
    *,
    max_bytes: int,
    allowed_extensions: Iterable[str],
) -> str:
    """
    Check an upload before any side effect and return its extension.

    The extension comes from the client filename only; content sniffing is
    not attempted.

    Raises
    ------
    RequestValidationFailed
        Oversized payload or an extension outside the allow-list.
    """
    if size > max_bytes:
        mib = max_bytes / (1024 * 1024)
        raise RequestValidationFailed(
            f"Image is too large; the limit is {mib:g} MB.",
            field="image",
            details={"field": "image", "max_bytes": max_bytes, "size": size},
        )
    allowed = [f".{e.lower().lstrip('.')}" for e in allowed_extensions]
    ext = image_extension(filename)
    if ext not in allowed:
        raise RequestValidationFailed(
            f"Unsupported image type '{ext or filename or ''}'; allowed: {', '.join(allowed)}.",
            field="image",
            details={"field": "image", "allowed": allowed},
        )
    return ext


def new_filename(extension: str) -> str:
    return f"{uuid4().hex}{extension.lower()}"


def _basename(url: str) -> str:
    return PurePosixPath(urlsplit(url).path).name


# ─────────────────────────────────────────────────────────────────────────────
# 🧩 Interface
# ─────────────────────────────────────────────────────────────────────────────

class ImageStore(ABC):
    """Capability set shared by every image backend."""

    backend: str = "abstract"

    @abstractmethod
    def public_url_for(self, filename: str) -> str:
        """URL under which `filename` is reachable once stored."""

    @abstractmethod
    def owns(self, url: str) -> bool:
        """True when `url` was issued by this backend."""

    @abstractmethod
    async def put(self, data: bytes, *, content_type: Optional[str], extension: str) -> str:
        """Store bytes under a new name and return the public URL."""

    @abstractmethod
    async def _remove(self, url: str) -> None:
        """Delete the object referenced by an owned `url` (may raise)."""

    async def delete(self, url: Optional[str]) -> None:
        """Best-effort removal of a stored image; never raises."""
        if not url or not self.owns(url):
            return
        try:
            await self._remove(url)
        except Exception as e:
            logger.warning("Image cleanup failed for %s (%s backend): %s", url, self.backend, e)


# ─────────────────────────────────────────────────────────────────────────────
# 📁 Filesystem backend
# ─────────────────────────────────────────────────────────────────────────────

class FilesystemImageStore(ImageStore):
    """Images on local disk, served by the app under `url_prefix`."""

    backend = "filesystem"

    def __init__(self, directory: Path, url_prefix: str = "/images") -> None:
        self.directory = Path(directory)
        self.url_prefix = "/" + url_prefix.strip("/")

    def ensure_directory(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def public_url_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def owns(self, url: str) -> bool:
        return url.startswith(self.url_prefix + "/")

    def _path_for(self, url: str) -> Path:
        name = _basename(url)
        if not name or name in {".", ".."}:
            raise StorageError(f"Cannot derive a file name from {url!r}")
        return self.directory / name

    def _write(self, filename: str, data: bytes) -> None:
        self.ensure_directory()
        (self.directory / filename).write_bytes(data)

    async def put(self, data: bytes, *, content_type: Optional[str], extension: str) -> str:
        filename = new_filename(extension)
        try:
            await asyncio.to_thread(self._write, filename, data)
        except OSError as e:
            raise StorageError(f"Failed to write image {filename}: {e}") from e
        logger.info("Stored image %s (%d bytes, filesystem)", filename, len(data))
        return self.public_url_for(filename)

    async def _remove(self, url: str) -> None:
        path = self._path_for(url)
        await asyncio.to_thread(path.unlink, missing_ok=True)
        logger.info("Deleted image %s (filesystem)", path.name)


# ─────────────────────────────────────────────────────────────────────────────
# ☁️ Object-storage backend
# ─────────────────────────────────────────────────────────────────────────────

class S3ImageStore(ImageStore):
    """
    Images in an S3-compatible bucket.

    `legacy` is the filesystem store for references written before object
    storage was configured; those files are removed locally on delete.
    """

    backend = "s3"

    def __init__(self, client, public_base: str, legacy: Optional[FilesystemImageStore] = None) -> None:
        self.client = client
        self.public_base = public_base.rstrip("/")
        self.legacy = legacy

    def public_url_for(self, filename: str) -> str:
        return f"{self.public_base}/{filename}"

    def _owns_object(self, url: str) -> bool:
        return url.startswith(self.public_base + "/")

    def owns(self, url: str) -> bool:
        return self._owns_object(url) or (self.legacy is not None and self.legacy.owns(url))

    async def put(self, data: bytes, *, content_type: Optional[str], extension: str) -> str:
        filename = new_filename(extension)
        await asyncio.to_thread(
            self.client.put_bytes,
            filename,
            data,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            public=True,
        )
        logger.info("Stored image %s (%d bytes, s3)", filename, len(data))
        return self.public_url_for(filename)

    async def _remove(self, url: str) -> None:
        if self._owns_object(url):
            key = _basename(url)
            removed = await asyncio.to_thread(self.client.delete, key)
            if removed:
                logger.info("Deleted image %s (s3)", key)
            else:
                logger.warning("Image %s was not removed from the bucket", key)
        elif self.legacy is not None:
            await self.legacy.delete(url)


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ Selection
# ─────────────────────────────────────────────────────────────────────────────

def build_image_store(settings: Settings, *, s3_client=None) -> ImageStore:
    """
    Pick the backend once at startup.

    Object storage wins only when endpoint, bucket, access key and secret key
    are all configured; anything less falls back to the local directory.
    """
    local = FilesystemImageStore(settings.images_dir, settings.IMAGES_URL_PREFIX)
    if not settings.object_storage_enabled:
        logger.info("Image store: filesystem at %s", local.directory)
        return local

    if s3_client is None:
        from mediaboard.utils.aws import S3Client

        s3_client = S3Client(
            settings.S3_BUCKET,
            endpoint_url=settings.S3_ENDPOINT,
            access_key=settings.S3_ACCESS_KEY,
            secret_key=settings.S3_SECRET_KEY.get_secret_value(),
            region_name=settings.S3_REGION,
        )
    logger.info("Image store: s3 bucket=%s public_base=%s", settings.S3_BUCKET, settings.s3_public_base)
    return S3ImageStore(s3_client, settings.s3_public_base, legacy=local)


__all__ = [
    "ImageStore",
    "FilesystemImageStore",
    "S3ImageStore",
    "build_image_store",
    "validate_image",
    "image_extension",
    "new_filename",
    "DEFAULT_CONTENT_TYPE",
]
