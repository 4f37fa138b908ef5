# mediaboard/db/base_class.py
from __future__ import annotations

"""
# Mediaboard — SQLAlchemy Base & Mixins

SQLAlchemy 2.0 declarative **Base** with:
- Global **naming conventions** (Alembic-friendly)
- Automatic **snake_case `__tablename__`** (models may override)
- Common mixins:
  - `PKMixin` — integer surrogate primary key (auto-increment on every backend)
  - `TimestampMixin` — `created_at` / `updated_at` in UTC

Usage:
    from mediaboard.db.base_class import Base, PKMixin, TimestampMixin

    class Movie(PKMixin, TimestampMixin, Base):
        __tablename__ = "movies"
        title: Mapped[str] = mapped_column(String(255))

Notes:
- Timestamps carry a Python-side default so the row is complete before the
  flush; the server default keeps raw SQL inserts consistent.
"""

from datetime import datetime, timezone
import re

from sqlalchemy import DateTime, Integer, MetaData, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

# ──────────────────────────────────────────────────────────────────────────────
# 🏷️ Naming conventions (stable constraint names for Alembic)
# ──────────────────────────────────────────────────────────────────────────────

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _to_snake(name: str) -> str:
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


# ──────────────────────────────────────────────────────────────────────────────
# 🧱 Declarative Base
# ──────────────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Global declarative base for Mediaboard models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore[override]
        return _to_snake(cls.__name__)

    def __repr__(self) -> str:  # pragma: no cover
        attrs = [
            f"{key}={getattr(self, key)!r}"
            for key in ("id", "title", "name")
            if hasattr(self, key)
        ]
        return f"{self.__class__.__name__}({', '.join(attrs)})"


# ──────────────────────────────────────────────────────────────────────────────
# 🧩 Common mixins
# ──────────────────────────────────────────────────────────────────────────────

class PKMixin:
    """Surrogate INTEGER primary key (SQLite rowid alias, SERIAL on PostgreSQL)."""
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class TimestampMixin:
    """
    UTC timestamps.
    - `created_at`: set once at insert
    - `updated_at`: set at insert; services refresh it on every edit
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )


__all__ = [
    "Base",
    "PKMixin",
    "TimestampMixin",
    "NAMING_CONVENTION",
    "utcnow",
]
