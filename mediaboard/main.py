# mediaboard/main.py
from __future__ import annotations

"""
# Mediaboard API — Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the movies & posts content API.

## Design Goals
- Deterministic, testable **app factory** (`create_app`) with explicit lifespan.
- Image backend resolved **once** at startup and shared via `app.state`.
- Explicit **middleware order**:
  1) request id → 2) security headers → 3) CORS → 4) gzip → 5) rate limits.
- Centralized problem+json exception handling.

## Probes
- `/healthz` — liveness (process up).
- `/readyz` — readiness (`SELECT 1` against the database).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import logging
import os

from fastapi import Depends, FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse

# Importing sets up Loguru sinks and the stdlib intercept.
from mediaboard.core import logger as _logsetup  # noqa: F401
from mediaboard.api.routers import build_api_router
from mediaboard.core.config import Settings, settings as default_settings
from mediaboard.core.exception_handlers import (
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from mediaboard.core.limiter import install_rate_limiter, rate_limit_exempt
from mediaboard.core.storage import FilesystemImageStore, ImageStore, build_image_store
from mediaboard.db.session import db_healthcheck, get_async_db
from mediaboard.middleware.request_id import RequestIDMiddleware
from mediaboard.security_headers import configure_cors, install_security

logger = logging.getLogger("mediaboard")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log a banner on startup; dispose the DB engine on shutdown."""
    logger.info(
        "Mediaboard API starting up (env=%s, images=%s)",
        app.state.settings.ENV,
        app.state.image_store.backend,
    )
    try:
        yield
    finally:
        from mediaboard.db.session import async_engine

        try:
            await async_engine.dispose()
            logger.info("Database engine disposed")
        except Exception:
            logger.exception("Error disposing DB engine")
        logger.info("Mediaboard API shutting down")


def _local_image_store(store: ImageStore) -> Optional[FilesystemImageStore]:
    """Directory store to serve from (the store itself, or S3's legacy directory)."""
    if isinstance(store, FilesystemImageStore):
        return store
    return getattr(store, "legacy", None)


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(settings: Optional[Settings] = None, image_store: Optional[ImageStore] = None) -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Args:
        settings: configuration (defaults to the module-level `settings`).
        image_store: pre-built image backend (tests); otherwise chosen from settings.

    Returns:
        FastAPI: application with middleware, exception handlers, routers,
        the static image mount and health/readiness endpoints.
    """
    settings = settings or default_settings
    image_store = image_store or build_image_store(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if settings.ENABLE_DOCS else None,
        redoc_url="/redoc" if settings.ENABLE_DOCS else None,
        openapi_url="/openapi.json" if settings.ENABLE_DOCS else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.image_store = image_store

    # ── Middlewares (last added is outermost) ──────────────────────────────
    install_rate_limiter(app)
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    configure_cors(app, origins=settings.frontend_origins_list, origins_regex=settings.ALLOW_ORIGINS_REGEX)
    install_security(app)
    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # ── Exception handlers (problem+json) ──────────────────────────────────
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]

    # ── Routers ─────────────────────────────────────────────────────────────
    app.include_router(build_api_router(), prefix=settings.API_PREFIX)

    # ── Uploaded images (filesystem backend) ───────────────────────────────
    local = _local_image_store(image_store)
    if local is not None:
        app.mount(
            local.url_prefix,
            StaticFiles(directory=str(local.ensure_directory())),
            name="images",
        )

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    @rate_limit_exempt()
    async def healthz() -> dict[str, bool]:
        """Liveness probe; no external checks."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    @rate_limit_exempt()
    async def readyz(db: AsyncSession = Depends(get_async_db)) -> JSONResponse:
        """Readiness probe; 503 when the database does not answer."""
        db_ok = await db_healthcheck(db)
        return JSONResponse(
            {"ready": db_ok, "checks": {"db": db_ok}},
            status_code=200 if db_ok else 503,
        )

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse(
            {
                "name": settings.PROJECT_NAME,
                "docs": app.docs_url or "",
                "version": settings.VERSION,
            }
        )

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mediaboard.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
