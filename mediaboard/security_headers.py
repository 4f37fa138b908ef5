# mediaboard/security_headers.py
from __future__ import annotations

"""
# Mediaboard — Security Headers & CORS

## What you get
- **Headers**: X-Content-Type-Options, X-Frame-Options, Referrer-Policy,
  Cross-Origin-Resource-Policy, Permissions-Policy (idempotent).
- **CORS installer**: allow-list via env (localhost defaults in dev) that
  exposes `X-Total-Count` and `Location` to the browser.
- **Skip list**: docs and the public image mount are left alone.

## Quick start
    from mediaboard.security_headers import install_security, configure_cors

    install_security(app)
    configure_cors(app, origins=settings.frontend_origins_list)

## Env knobs
- ENABLE_HTTPS_REDIRECT (default "false")
- SECURITY_SKIP_PATHS (CSV; default "/docs,/redoc,/openapi.json,/images/")
- REFERRER_POLICY (default "strict-origin-when-cross-origin")
- CROSS_ORIGIN_RESOURCE_POLICY (default "cross-origin"; posters are embedded by the frontend)
"""

import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

EXPOSED_HEADERS = ["X-Total-Count", "Location", "X-Request-ID", "Retry-After"]

DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


# ─────────────────────────────────────────────────────────────
# ⚙️ Configuration
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SecurityHeadersConfig:
    """Env-driven header values."""

    referrer_policy: str = os.getenv("REFERRER_POLICY", "strict-origin-when-cross-origin")
    permissions_policy: str = os.getenv(
        "PERMISSIONS_POLICY",
        "camera=(), geolocation=(), microphone=(), payment=(), usb=()",
    )
    corp: str = os.getenv("CROSS_ORIGIN_RESOURCE_POLICY", "cross-origin")
    skip_paths_csv: str = os.getenv("SECURITY_SKIP_PATHS", "/docs,/redoc,/openapi.json,/images/")


_CFG = SecurityHeadersConfig()


# ─────────────────────────────────────────────────────────────
# 🧩 Middleware
# ─────────────────────────────────────────────────────────────
class SecurityHeadersMiddleware:
    """Applies the configured headers on every non-skipped HTTP response."""

    def __init__(self, app: ASGIApp, cfg: SecurityHeadersConfig = _CFG) -> None:
        self.app = app
        self.cfg = cfg
        self._skip_prefixes: Tuple[str, ...] = tuple(
            p.strip() for p in (cfg.skip_paths_csv or "").split(",") if p.strip()
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        path = scope.get("path", "")
        if any(path.startswith(prefix) for prefix in self._skip_prefixes):
            return await self.app(scope, receive, send)

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                raw_headers: List[Tuple[bytes, bytes]] = list(message.get("headers", []))
                _apply_headers_to_raw(raw_headers, self.cfg)
                message["headers"] = raw_headers
            await send(message)

        await self.app(scope, receive, send_wrapper)


def _has_header(raw_headers: List[Tuple[bytes, bytes]], name: str) -> bool:
    lname = name.lower().encode("latin-1")
    return any(h[0].lower() == lname for h in raw_headers)


def _apply_headers_to_raw(raw_headers: List[Tuple[bytes, bytes]], cfg: SecurityHeadersConfig) -> None:
    for name, value in (
        ("X-Content-Type-Options", "nosniff"),
        ("X-Frame-Options", "DENY"),
        ("Referrer-Policy", cfg.referrer_policy),
        ("Permissions-Policy", cfg.permissions_policy),
        ("Cross-Origin-Resource-Policy", cfg.corp),
    ):
        if not _has_header(raw_headers, name):
            raw_headers.append((name.encode("latin-1"), value.encode("latin-1")))


# ─────────────────────────────────────────────────────────────
# 🌐 CORS
# ─────────────────────────────────────────────────────────────
def configure_cors(
    app,
    *,
    origins: Optional[Iterable[str]] = None,
    origins_regex: Optional[str] = None,
    allow_methods: Optional[Iterable[str]] = None,
) -> None:
    """Install CORS; falls back to localhost dev origins when nothing is configured."""
    allowed = [o for o in (origins or []) if o]
    if not allowed and not origins_regex:
        allowed = list(DEV_ORIGINS)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed,
        allow_origin_regex=origins_regex,
        allow_credentials=True,
        allow_methods=list(allow_methods or ["GET", "HEAD", "OPTIONS", "POST", "PUT", "DELETE"]),
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=EXPOSED_HEADERS,
        max_age=3600,
    )


def install_security(app) -> None:
    """Add HTTPS redirect (opt-in) and the security headers middleware."""
    if os.getenv("ENABLE_HTTPS_REDIRECT", "false").lower() == "true":
        app.add_middleware(HTTPSRedirectMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, cfg=_CFG)


__all__ = [
    "SecurityHeadersConfig",
    "SecurityHeadersMiddleware",
    "install_security",
    "configure_cors",
    "EXPOSED_HEADERS",
]
