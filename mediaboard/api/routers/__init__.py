"""
🧭 Mediaboard • API Router Aggregator
=====================================

Quick usage
-----------
    from mediaboard.api.routers import build_api_router
    app.include_router(build_api_router(), prefix="/api")
"""

from fastapi import APIRouter

from .movies import router as movies_router
from .posts import router as posts_router


def build_api_router() -> APIRouter:
    """Compose `/movies` and `/posts` into one router (mounted under `API_PREFIX`)."""
    router = APIRouter()
    router.include_router(movies_router, prefix="/movies", tags=["movies"])
    router.include_router(posts_router, prefix="/posts", tags=["posts"])
    return router


__all__ = ["build_api_router", "movies_router", "posts_router"]
