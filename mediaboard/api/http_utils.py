"""
Mediaboard · HTTP Utilities
===========================

Shared dependencies and helpers for the resource routers:

- `get_settings` / `get_image_store`: per-app singletons from `app.state`
- `resource_service(descriptor)`: dependency factory for a `ResourceService`
- `set_total_count_header` / `set_location_header`: response decoration
"""

from typing import Callable, Optional

from fastapi import Depends, Request, Response

from mediaboard.core.config import Settings, settings as default_settings
from mediaboard.core.storage import ImageStore
from mediaboard.services.descriptors import ResourceDescriptor
from mediaboard.services.resource_service import ResourceService


# ─────────────────────────────────────────────────────────────────────────────
# 🔌 Dependencies
# ─────────────────────────────────────────────────────────────────────────────

def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or default_settings


def get_image_store(request: Request) -> ImageStore:
    """The backend chosen at startup (`create_app`)."""
    store = getattr(request.app.state, "image_store", None)
    if store is None:
        raise RuntimeError("Image store is not configured on app.state")
    return store


def resource_service(descriptor: ResourceDescriptor) -> Callable[..., ResourceService]:
    def _dependency(settings: Settings = Depends(get_settings)) -> ResourceService:
        return ResourceService(descriptor, settings)

    return _dependency


# ─────────────────────────────────────────────────────────────────────────────
# 🧾 Response helpers
# ─────────────────────────────────────────────────────────────────────────────

def set_total_count_header(response: Response, count: Optional[int]) -> None:
    """Expose the unpaginated match count for list endpoints."""
    if count is not None:
        response.headers["X-Total-Count"] = str(int(count))


def set_location_header(response: Response, settings: Settings, descriptor: ResourceDescriptor, item_id: int) -> None:
    response.headers["Location"] = f"{settings.API_PREFIX.rstrip('/')}/{descriptor.name}/{item_id}"


__all__ = [
    "get_settings",
    "get_image_store",
    "resource_service",
    "set_total_count_header",
    "set_location_header",
]
