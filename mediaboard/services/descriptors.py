from __future__ import annotations

"""
Resource descriptors
====================

Movies and posts share one handler and one query engine. A
`ResourceDescriptor` carries everything that differs between them: the ORM
model, which text field is searched, which fields are required, where the
image reference lives and how `sort`/`order` are interpreted.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple

from sqlalchemy import func

from mediaboard.db.models.movie import Movie
from mediaboard.db.models.post import Post

# (sort expression, descending?) or None for the default ordering
SortSpec = Optional[Tuple[Any, bool]]


def _movie_sort(sort: Optional[str], order: Optional[str]) -> SortSpec:
    key = (sort or "").strip().lower()
    desc = (order or "").strip().lower() == "desc"
    if key == "title":
        return func.lower(Movie.title), desc
    if key == "rating":
        return Movie.rating, desc
    return None


def _post_sort(sort: Optional[str], order: Optional[str]) -> SortSpec:
    # Posts pick the direction straight from `sort`; `order` is unused.
    key = (sort or "").strip().lower()
    if key in {"asc", "desc"}:
        return func.lower(Post.name), key == "desc"
    return None


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str                      # URL segment, e.g. "movies"
    label: str                     # human name used in messages, e.g. "Movie"
    model: type
    search_field: str
    required_fields: Tuple[str, ...]
    image_field: str
    optional_text_fields: Tuple[str, ...] = ()
    has_rating: bool = False
    genre_filter: bool = False
    time_filter: bool = False
    sort_resolver: Callable[[Optional[str], Optional[str]], SortSpec] = field(default=lambda s, o: None)

    def column(self, attr: str):
        return getattr(self.model, attr)


MOVIES = ResourceDescriptor(
    name="movies",
    label="Movie",
    model=Movie,
    search_field="title",
    required_fields=("title",),
    image_field="poster_image_url",
    optional_text_fields=("genre", "description"),
    has_rating=True,
    genre_filter=True,
    sort_resolver=_movie_sort,
)

POSTS = ResourceDescriptor(
    name="posts",
    label="Post",
    model=Post,
    search_field="name",
    required_fields=("name", "description"),
    image_field="image_url",
    time_filter=True,
    sort_resolver=_post_sort,
)

__all__ = ["ResourceDescriptor", "MOVIES", "POSTS", "SortSpec"]
