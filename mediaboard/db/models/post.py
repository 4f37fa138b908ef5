from __future__ import annotations

"""
📝 Mediaboard — Post
====================

A short named entry with a required description and an optional image.
"""

from typing import Optional

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mediaboard.db.base_class import Base, PKMixin, TimestampMixin


class Post(PKMixin, TimestampMixin, Base):
    __tablename__ = "posts"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    __table_args__ = (Index("ix_posts_name", "name"),)
