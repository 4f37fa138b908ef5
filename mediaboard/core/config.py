# mediaboard/core/config.py
from __future__ import annotations

"""
# Mediaboard — Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; nothing required to boot the API.
- Object storage is **all-or-nothing**: the S3 backend is only selected when
  endpoint, bucket, access key and secret key are all present.
- CSV → list helpers and URL normalization shared with the CORS installer.

## Usage
    from mediaboard.core.config import settings
"""

import logging
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _split_csv(v: str | None) -> list[str]:
    """Split a comma-separated string into a trimmed list (empty-safe)."""
    if not v:
        return []
    return [s.strip() for s in str(v).split(",") if s and s.strip()]


def _blank_to_none(v: object) -> Optional[str]:
    s = str(v).strip() if v is not None else ""
    return s or None


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Storage:
        - `S3_*` values select the object-storage image backend when complete;
          otherwise images land in `IMAGES_DIR` and are served under
          `IMAGES_URL_PREFIX`.

    Database:
        - `DATABASE_URL` wins when set; otherwise a PostgreSQL DSN is composed
          from the `POSTGRES_*` values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
        populate_by_name=True,
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "Mediaboard API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True

    # ── Database ──────────────────────────────────────────────
    DATABASE_URL_OVERRIDE: Optional[str] = Field(None, alias="DATABASE_URL")
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("postgres")
    POSTGRES_DB: str = "mediaboard"
    DB_ECHO: bool = False

    # ── Images (filesystem backend + validation) ──────────────
    IMAGES_DIR: Optional[Path] = None
    IMAGES_URL_PREFIX: str = "/images"
    MAX_IMAGE_BYTES: int = Field(5 * 1024 * 1024, ge=1)
    ALLOWED_IMAGE_EXTENSIONS: str = "png,jpg,jpeg,webp,gif"

    # ── Object storage (S3-compatible, optional) ──────────────
    S3_ENDPOINT: Optional[str] = None
    S3_BUCKET: Optional[str] = None
    S3_ACCESS_KEY: Optional[str] = None
    S3_SECRET_KEY: Optional[SecretStr] = None
    S3_PUBLIC_BASE_URL: Optional[str] = None
    S3_REGION: str = "us-east-1"

    # ── Listing ───────────────────────────────────────────────
    DEFAULT_PAGE_SIZE: int = Field(9, ge=1)
    MAX_PAGE_SIZE: int = Field(50, ge=1)

    # ── CORS ──────────────────────────────────────────────────
    FRONTEND_ORIGINS: Optional[str] = None  # CSV
    ALLOW_ORIGINS_REGEX: Optional[str] = None

    # ── Validators / normalizers ──────────────────────────────
    @field_validator(
        "DATABASE_URL_OVERRIDE",
        "S3_ENDPOINT",
        "S3_BUCKET",
        "S3_ACCESS_KEY",
        "S3_PUBLIC_BASE_URL",
        mode="before",
    )
    @classmethod
    def _strip_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("S3_SECRET_KEY", mode="before")
    @classmethod
    def _strip_secret(cls, v):
        if isinstance(v, SecretStr):
            v = v.get_secret_value()
        return _blank_to_none(v)

    @field_validator("IMAGES_DIR", mode="before")
    @classmethod
    def _blank_images_dir(cls, v):
        return _blank_to_none(v)

    @field_validator("IMAGES_URL_PREFIX", mode="before")
    @classmethod
    def _normalize_images_prefix(cls, v) -> str:
        """Always '/segment' with a leading slash and no trailing slash."""
        s = (str(v or "").strip() or "/images").strip("/")
        return f"/{s}"

    @field_validator("FRONTEND_ORIGINS", mode="before")
    @classmethod
    def _normalize_frontend_csv(cls, v):
        return None if v is None else ",".join(_split_csv(str(v)))

    # ── Derived / convenience properties ─────────────────────
    @property
    def DATABASE_URL(self) -> str:
        """Sync-style DSN (explicit override or composed PostgreSQL)."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Async SQLAlchemy DSN (`postgresql://` → `postgresql+asyncpg://`)."""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    @property
    def images_dir(self) -> Path:
        """Local image directory (defaults to `./images`)."""
        return Path(self.IMAGES_DIR) if self.IMAGES_DIR else Path.cwd() / "images"

    @property
    def allowed_image_extensions(self) -> List[str]:
        """Lower-cased extensions without the dot."""
        return [e.lower().lstrip(".") for e in _split_csv(self.ALLOWED_IMAGE_EXTENSIONS)]

    @property
    def object_storage_enabled(self) -> bool:
        """True only when every required S3 value is present."""
        return all(
            (self.S3_ENDPOINT, self.S3_BUCKET, self.S3_ACCESS_KEY, self.S3_SECRET_KEY)
        )

    @property
    def s3_public_base(self) -> str:
        """
        Public base for object URLs, no trailing slash.
        Falls back to `<endpoint>/<bucket>` when `S3_PUBLIC_BASE_URL` is unset.
        """
        if self.S3_PUBLIC_BASE_URL:
            return self.S3_PUBLIC_BASE_URL.rstrip("/")
        return f"{(self.S3_ENDPOINT or '').rstrip('/')}/{self.S3_BUCKET or ''}"

    @property
    def frontend_origins_list(self) -> List[str]:
        return _split_csv(self.FRONTEND_ORIGINS)


# Singleton instance
settings = Settings()
