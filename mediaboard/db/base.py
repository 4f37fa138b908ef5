# mediaboard/db/base.py
"""
Mediaboard — SQLAlchemy Base registry
=====================================

Import all ORM models so their tables are registered on `Base.metadata`
(Alembic autogeneration and test `create_all` rely on this).
"""

from mediaboard.db.base_class import Base

from mediaboard.db.models.movie import Movie
from mediaboard.db.models.post import Post

__all__ = ["Base", "Movie", "Post"]
