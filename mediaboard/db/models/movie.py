from __future__ import annotations

"""
🎬 Mediaboard — Movie
=====================

A catalog entry with an optional 1–5 rating and an optional poster image.

Design conventions
------------------
• `title` is required and stored trimmed; `genre`/`description` are NULL when blank.
• `rating` is NULL or within [1, 5] (check constraint mirrors service validation).
• `poster_image_url` is the public URL issued by the image store (or NULL).
"""

from typing import Optional

from sqlalchemy import CheckConstraint, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mediaboard.db.base_class import Base, PKMixin, TimestampMixin


class Movie(PKMixin, TimestampMixin, Base):
    """Movie row; `id` is assigned by the database."""

    __tablename__ = "movies"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    genre: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    poster_image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="rating_range"),
        Index("ix_movies_title", "title"),
        Index("ix_movies_genre", "genre"),
    )
